"""
Parse a saved price-comparison estimate page and relay its rows to the estimate form.
Run: python -m scripts.relay_prices page.html --target URL

URL is the estimate form's intake endpoint. It must accept a JSON POST of
{"tableData": [{category, productName, quantity, price, ...}]} and answer 2xx;
connection errors and 5xx count as "not ready yet" and are retried.
Use --dry-run to only print the parsed rows.
"""
import argparse
import logging
import os
import sys
from pathlib import Path

import httpx

# Add parent so we can import from the project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.price_import import RelayError, parse_price_list, relay_items
from utils.formatting import format_number
from utils.logging_config import setup_logging

logger = logging.getLogger("service_desk.price_import")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("html_file", help="Saved estimate page (HTML)")
    parser.add_argument("--target", required=True, help="URL that accepts {tableData: [...]}")
    parser.add_argument("--attempts", type=int, default=5)
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between attempts")
    parser.add_argument("--dry-run", action="store_true", help="Only print the parsed rows")
    args = parser.parse_args(argv)

    setup_logging()
    items = parse_price_list(Path(args.html_file).read_text(encoding="utf-8"))
    if not items:
        print("No price rows found (is this an estimate page?)")
        return 1

    for item in items:
        print(f"[{item.category}] {item.product_name} x{item.quantity} {format_number(item.price)}")
    if args.dry_run:
        return 0

    try:
        relay_items(items, args.target, attempts=args.attempts, interval=args.interval)
    except RelayError as e:
        logger.error("%s", e)
        return 2
    except httpx.HTTPStatusError as e:
        logger.error("Target rejected the rows: %s", e)
        return 2
    print(f"Relayed {len(items)} rows to {args.target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

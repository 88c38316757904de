"""
Price import from a price-comparison site's "virtual estimate" page.

parse_price_list turns the saved page HTML into PriceItem rows, to_table_rows
maps them onto estimate line items, and relay_items pushes those rows to an
estimate form that may still be starting up.
"""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from selectolax.lexbor import LexborHTMLParser, LexborNode

logger = logging.getLogger("service_desk.price_import")

_NEW_BADGE = re.compile(r"NEW", re.IGNORECASE)
_SELECTED_SUFFIX = re.compile(r"선택됨\s*$")
_NON_DIGITS = re.compile(r"[^\d]")


class RelayError(Exception):
    """Target app never accepted the rows."""


@dataclass
class PriceItem:
    category: str
    product_name: str
    quantity: int
    price: int


def _node_text(node: Optional[LexborNode]) -> str:
    if node is None:
        return ""
    return " ".join((node.text(separator=" ") or "").split())


def clean_category(raw: str) -> str:
    text = _NEW_BADGE.sub("", raw)
    text = _SELECTED_SUFFIX.sub("", text.strip())
    return " ".join(text.split())


def _parse_price(row: LexborNode) -> int:
    digits = _NON_DIGITS.sub("", _node_text(row.css_first(".price")))
    return int(digits) if digits else 0


def _parse_quantity(row: LexborNode) -> int:
    node = row.css_first(".input_qnt")
    raw = (node.attributes.get("value") if node is not None else None) or ""
    digits = _NON_DIGITS.sub("", raw)
    return int(digits) if digits and int(digits) > 0 else 1


def parse_price_list(html: str) -> list[PriceItem]:
    """Extract (category, product, quantity, price) rows. Empty list if the list area is missing."""
    if not html:
        return []
    tree = LexborHTMLParser(html)
    area = tree.css_first(".pd_list_area")
    if area is None:
        return []

    items: list[PriceItem] = []
    for group in area.css(".pd_list .pd_item"):
        category = clean_category(_node_text(group.css_first(".pd_item_title")))
        for row in group.css(".pd_item_list li.row"):
            name = _node_text(row.css_first(".subject a"))
            if not name:
                continue
            items.append(
                PriceItem(
                    category=category,
                    product_name=name,
                    quantity=_parse_quantity(row),
                    price=_parse_price(row),
                )
            )
    logger.info("Parsed %d price rows", len(items))
    return items


def to_table_rows(items: list[PriceItem]) -> list[dict[str, Any]]:
    """Estimate line items; quantity and price are strings like the estimate form's inputs."""
    return [
        {
            "category": item.category,
            "productName": item.product_name,
            "quantity": str(item.quantity),
            "price": str(item.price),
            "productCode": "",
            "distributor": "",
            "reconfirm": "",
            "remarks": "",
        }
        for item in items
    ]


def relay_items(
    items: list[PriceItem],
    target_url: str,
    attempts: int = 5,
    interval: float = 1.0,
    client: Optional[httpx.Client] = None,
) -> httpx.Response:
    """
    POST the rows to target_url as {"tableData": [...]}, retrying while the target
    is not ready (connection errors and 5xx). Raises RelayError after the last attempt.
    """
    payload = {"tableData": to_table_rows(items)}
    own_client = client is None
    client = client or httpx.Client(timeout=10.0)
    last_error: Optional[str] = None
    try:
        for attempt in range(1, attempts + 1):
            try:
                response = client.post(target_url, json=payload)
            except httpx.TransportError as e:
                last_error = str(e)
                logger.info("Relay attempt %d/%d: target not reachable (%s)", attempt, attempts, e)
            else:
                if response.status_code < 500:
                    response.raise_for_status()
                    logger.info("Relayed %d rows to %s", len(items), target_url)
                    return response
                last_error = f"HTTP {response.status_code}"
                logger.info("Relay attempt %d/%d: target answered %s", attempt, attempts, response.status_code)
            if attempt < attempts:
                time.sleep(interval)
    finally:
        if own_client:
            client.close()
    raise RelayError(f"Target {target_url} not ready after {attempts} attempts: {last_error}")

"""
Tests for the price-comparison page parser and the relay client.
"""
import json
import tempfile
import unittest
from pathlib import Path

import httpx

from scripts.relay_prices import main as relay_main
from services.price_import import (
    PriceItem,
    RelayError,
    clean_category,
    parse_price_list,
    relay_items,
    to_table_rows,
)

PAGE = """
<html><body>
<div class="pd_list_area">
  <div class="pd_list">
    <div class="pd_item">
      <div class="pd_item_title">CPU <span>NEW</span> 선택됨</div>
      <ul class="pd_item_list">
        <li class="row">
          <p class="subject"><a href="#">AMD 라이젠5 7500F</a></p>
          <input class="input_qnt" value="2">
          <span class="price">189,000원</span>
        </li>
        <li class="row">
          <p class="subject"><a href="#"></a></p>
          <span class="price">1,000원</span>
        </li>
      </ul>
    </div>
    <div class="pd_item">
      <div class="pd_item_title">메모리</div>
      <ul class="pd_item_list">
        <li class="row">
          <p class="subject"><a href="#">DDR5-5600 16GB</a></p>
          <span class="price">가격문의</span>
        </li>
      </ul>
    </div>
  </div>
</div>
</body></html>
"""


class TestParsePriceList(unittest.TestCase):
    def test_rows_extracted(self):
        items = parse_price_list(PAGE)
        self.assertEqual(
            items,
            [
                PriceItem(category="CPU", product_name="AMD 라이젠5 7500F", quantity=2, price=189000),
                PriceItem(category="메모리", product_name="DDR5-5600 16GB", quantity=1, price=0),
            ],
        )

    def test_missing_list_area(self):
        self.assertEqual(parse_price_list("<html><body><p>nothing</p></body></html>"), [])
        self.assertEqual(parse_price_list(""), [])

    def test_nested_markup_in_product_name(self):
        page = (
            "<div class=\"pd_list_area\"><div class=\"pd_list\"><div class=\"pd_item\">"
            "<div class=\"pd_item_title\">그래픽카드<em>NEW</em></div>"
            "<ul class=\"pd_item_list\"><li class=\"row\">"
            "<p class=\"subject\"><a><strong>RTX</strong> 4070\n  SUPER</a></p>"
            "<span class=\"price\">819,000</span></li></ul></div></div></div>"
        )
        self.assertEqual(parse_price_list(page), [PriceItem("그래픽카드", "RTX 4070 SUPER", 1, 819000)])

    def test_clean_category(self):
        self.assertEqual(clean_category("그래픽카드 new 선택됨"), "그래픽카드")
        self.assertEqual(clean_category("  SSD  "), "SSD")

    def test_table_rows_use_strings(self):
        rows = to_table_rows([PriceItem("CPU", "i5-14400F", 1, 250000)])
        self.assertEqual(rows[0]["productName"], "i5-14400F")
        self.assertEqual(rows[0]["quantity"], "1")
        self.assertEqual(rows[0]["price"], "250000")
        self.assertEqual(rows[0]["category"], "CPU")


class TestRelay(unittest.TestCase):
    items = [PriceItem("CPU", "i5-14400F", 1, 250000)]

    def test_retries_until_target_ready(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"ok": True})

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            response = relay_items(self.items, "http://form.test/rows", interval=0, client=client)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(calls), 3)
        self.assertIn(b"i5-14400F", calls[-1].content)
        body = json.loads(calls[-1].content)
        self.assertEqual(list(body), ["tableData"])
        self.assertEqual(body["tableData"][0]["price"], "250000")

    def test_connection_errors_retried_then_raise(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with self.assertRaises(RelayError):
                relay_items(self.items, "http://form.test/rows", attempts=5, interval=0, client=client)
        self.assertEqual(len(calls), 5)

    def test_client_error_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with self.assertRaises(httpx.HTTPStatusError):
                relay_items(self.items, "http://form.test/rows", interval=0, client=client)
        self.assertEqual(len(calls), 1)


class TestRelayScript(unittest.TestCase):
    def test_dry_run_parses_without_sending(self):
        with tempfile.TemporaryDirectory() as tmp:
            page = Path(tmp) / "estimate.html"
            page.write_text(PAGE, encoding="utf-8")
            code = relay_main([str(page), "--target", "http://form.test/intake", "--dry-run"])
        self.assertEqual(code, 0)

    def test_page_without_rows_fails(self):
        with tempfile.TemporaryDirectory() as tmp:
            page = Path(tmp) / "empty.html"
            page.write_text("<html></html>", encoding="utf-8")
            self.assertEqual(relay_main([str(page), "--target", "http://form.test/intake"]), 1)


if __name__ == "__main__":
    unittest.main()

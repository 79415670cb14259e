"""Tests for the product-page fetch and preview extraction."""

import httpx

from listingtrust.ingest import extract_product_info, fetch_page_html
from listingtrust.ingest.page_fetcher import BROWSER_HEADERS

PRODUCT_HTML = """
<html>
<head>
  <title>Acme Kettle | Shop</title>
  <meta property="og:title" content="Acme Kettle 2000">
  <meta property="og:description" content="Brushed steel, 1.7 litres.">
  <meta property="product:price:amount" content="49.99">
</head>
<body><h1>Acme Kettle 2000</h1><p>Only $59.00 today</p></body>
</html>
"""


class TestExtractProductInfo:

    def test_meta_tags_win(self):
        info = extract_product_info(PRODUCT_HTML)
        assert info.title == "Acme Kettle 2000"
        assert info.description == "Brushed steel, 1.7 litres."
        assert info.price == "49.99"

    def test_fallbacks_to_title_tag_and_page_text(self):
        html = (
            "<html><head><title> Walnut Desk </title>"
            '<meta name="description" content="Solid walnut."></head>'
            "<body><span>Now $1,299.00</span></body></html>"
        )
        info = extract_product_info(html)
        assert info.title == "Walnut Desk"
        assert info.description == "Solid walnut."
        assert info.price == "$1,299.00"

    def test_empty_html(self):
        info = extract_product_info("")
        assert info.title is None
        assert info.price is None
        assert info.description is None


class TestFetchPageHtml:

    async def test_success_returns_html(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["ua"] = request.headers.get("user-agent")
            return httpx.Response(200, text=PRODUCT_HTML)

        result = await fetch_page_html(
            "https://shop.test/p/kettle", transport=httpx.MockTransport(handler)
        )
        assert result.blocked is False
        assert "Acme Kettle 2000" in result.html
        assert seen["ua"] == BROWSER_HEADERS["User-Agent"]

    async def test_forbidden_is_blocked(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(403, text="denied"))
        result = await fetch_page_html("https://shop.test/p/kettle", transport=transport)
        assert result.blocked is True
        assert result.html is None

    async def test_connection_error_is_blocked(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await fetch_page_html(
            "https://shop.test/p/kettle", transport=httpx.MockTransport(handler)
        )
        assert result.blocked is True

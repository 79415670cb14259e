"""Raw product-page fetch and preview fields for the client."""

from listingtrust.ingest.page_fetcher import fetch_page_html
from listingtrust.ingest.page_info import extract_product_info

__all__ = ["extract_product_info", "fetch_page_html"]

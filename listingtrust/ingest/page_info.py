"""Title, price and description from raw product-page HTML (meta tags first)."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from listingtrust.schemas.models import ProductInfo

_PRICE_TEXT_RE = re.compile(
    r"(?:₹|\$|€|£|INR|USD|EUR|GBP)\s*[0-9][0-9,]*(?:\.[0-9]{1,2})?", re.IGNORECASE
)


def _meta_content(soup: BeautifulSoup, name: str) -> str | None:
    tag = soup.find("meta", attrs={"property": name}) or soup.find("meta", attrs={"name": name})
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


def _extract_price(soup: BeautifulSoup, html: str) -> str | None:
    meta_price = _meta_content(soup, "product:price:amount") or _meta_content(soup, "og:price:amount")
    if meta_price:
        return meta_price
    m = _PRICE_TEXT_RE.search(soup.get_text(" ") or html)
    return m.group(0).strip() if m else None


def extract_product_info(html: str) -> ProductInfo:
    """Best-effort preview fields; every field is ``None`` when not found."""
    soup = BeautifulSoup(html or "", "html.parser")

    title = _meta_content(soup, "og:title")
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip() or None

    description = _meta_content(soup, "og:description") or _meta_content(soup, "description")

    return ProductInfo(
        title=title,
        price=_extract_price(soup, html or ""),
        description=description,
    )

"""Extract claim and policy FactSets from free-form page text with ordered regex rules.

Each field is resolved independently: its rules are tried in order and the
first match wins. Extractors are total; empty or noise text yields absent
fields rather than an error.
"""

from __future__ import annotations

import re

from listingtrust.extract.text import normalize_text
from listingtrust.schemas.models import FactSet, PricePolicy, StockStatus

# ── Returns ──────────────────────────────────────────────────────────────

_RETURN_DAYS_PATTERNS = [
    re.compile(r"returns?\s+within\s+(\d{1,3})\s+day", re.IGNORECASE),
    re.compile(r"(\d{1,3})\s+days?\s+return", re.IGNORECASE),
    re.compile(r"returns?\s+policy\s+.*?(\d{1,3})\s+day", re.IGNORECASE),
]

_NO_RETURNS_RE = re.compile(r"no returns|final sale|non[-\s]?returnable", re.IGNORECASE)
_RETURNS_OK_RE = re.compile(r"returns accepted|free returns|return policy", re.IGNORECASE)


def find_return_days(text: str) -> int | None:
    for pattern in _RETURN_DAYS_PATTERNS:
        m = pattern.search(text)
        if m:
            return int(m.group(1))
    return None


def find_returns_allowed(text: str) -> bool | None:
    if _NO_RETURNS_RE.search(text):
        return False
    if _RETURNS_OK_RE.search(text):
        return True
    return None


# ── Warranty ─────────────────────────────────────────────────────────────

# "warranty" followed within the same sentence (120 chars) by a duration
_WARRANTY_DURATION_RE = re.compile(
    r"warranty[^.\n]{0,120}?(\d{1,2})\s*(year|years|month|months)", re.IGNORECASE
)
_NO_WARRANTY_RE = re.compile(r"no warranty|as[-\s]?is|without warranty", re.IGNORECASE)
_WARRANTY_RE = re.compile(r"warranty", re.IGNORECASE)


def find_warranty_months(text: str) -> int | None:
    m = _WARRANTY_DURATION_RE.search(text)
    if not m:
        return None
    value = int(m.group(1))
    return value * 12 if m.group(2).lower().startswith("year") else value


def find_warranty_provided(text: str) -> bool | None:
    if _NO_WARRANTY_RE.search(text):
        return False
    if _WARRANTY_RE.search(text):
        return True
    return None


# ── Stock ────────────────────────────────────────────────────────────────

# Priority order matters: "out of stock" must win over "in stock".
_STOCK_PATTERNS: list[tuple[StockStatus, re.Pattern[str]]] = [
    (StockStatus.OUT_OF_STOCK, re.compile(r"out of stock|sold out|unavailable", re.IGNORECASE)),
    (StockStatus.PREORDER, re.compile(r"pre[-\s]?order", re.IGNORECASE)),
    (StockStatus.BACKORDER, re.compile(r"back\s?order", re.IGNORECASE)),
    (StockStatus.IN_STOCK, re.compile(r"in stock|available now|available", re.IGNORECASE)),
]

_STOCK_WARNING_RE = re.compile(
    r"subject to availability|availability not guaranteed", re.IGNORECASE
)


def find_stock_status(text: str) -> StockStatus | None:
    for status, pattern in _STOCK_PATTERNS:
        if pattern.search(text):
            return status
    return None


def find_stock_warning(text: str) -> bool:
    return bool(_STOCK_WARNING_RE.search(text))


# ── Price ────────────────────────────────────────────────────────────────

PRICE_RE = re.compile(
    r"(USD|INR|EUR|GBP|CAD|AUD|[$€£₹])\s*([0-9]+(?:\.[0-9]{2})?)", re.IGNORECASE
)
_PRICE_MATCH_RE = re.compile(r"price match", re.IGNORECASE)
_PRICE_GUARANTEE_RE = re.compile(r"price guarantee|price guaranteed", re.IGNORECASE)
_PRICE_CHANGE_RE = re.compile(
    r"prices subject to change|reserve the right to change prices", re.IGNORECASE
)


def find_price_value(text: str) -> float | None:
    m = PRICE_RE.search(text)
    if not m:
        return None
    return float(m.group(2))


def find_price_guarantee(text: str) -> bool | None:
    if _PRICE_MATCH_RE.search(text) or _PRICE_GUARANTEE_RE.search(text):
        return True
    if _PRICE_CHANGE_RE.search(text):
        return False
    return None


def find_price_policy(text: str) -> PricePolicy | None:
    if _PRICE_MATCH_RE.search(text):
        return PricePolicy.PRICE_MATCH
    if _PRICE_GUARANTEE_RE.search(text):
        return PricePolicy.PRICE_GUARANTEE
    if _PRICE_CHANGE_RE.search(text):
        return PricePolicy.PRICE_CHANGE
    return None


# ── Public API ───────────────────────────────────────────────────────────


def extract_claims(product_text: str | None) -> FactSet:
    """Product-page claims: returns, warranty, stock status, price value and guarantee."""
    text = normalize_text(product_text)
    return FactSet(
        returns_days=find_return_days(text),
        returns_allowed=find_returns_allowed(text),
        warranty_months=find_warranty_months(text),
        warranty_provided=find_warranty_provided(text),
        stock_status=find_stock_status(text),
        price_value=find_price_value(text),
        price_guarantee=find_price_guarantee(text),
    )


def extract_policy(policy_text: str | None) -> FactSet:
    """
    Policy terms: returns, warranty, price policy and availability disclaimer.

    An availability disclaimer sets ``stock_warning=True``. A policy with
    other recognized terms but no disclaimer gets ``stock_warning=False``.
    Empty or noise text leaves every field absent.
    """
    text = normalize_text(policy_text)
    if not text:
        return FactSet()
    terms = FactSet(
        returns_days=find_return_days(text),
        returns_allowed=find_returns_allowed(text),
        warranty_months=find_warranty_months(text),
        warranty_provided=find_warranty_provided(text),
        price_policy=find_price_policy(text),
    )
    if find_stock_warning(text):
        return terms.model_copy(update={"stock_warning": True})
    if terms.has_any():
        return terms.model_copy(update={"stock_warning": False})
    return terms

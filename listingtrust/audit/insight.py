"""Narrative insight (summary, pros, cons) and product-facing details for a result."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from listingtrust.extract.text import first_sentences
from listingtrust.schemas.models import (
    FactSet,
    Flag,
    Insight,
    PolicyStatus,
    PricePolicy,
    ProductDetails,
    StockStatus,
)

MAX_NAME_CHARS = 120

_FALLBACK_SUMMARY = (
    "Product details are limited, but available information suggests a standard offering."
)
_NO_PROS = "Limited product assurances detected."
_NO_CONS = "No major policy drawbacks detected."

_HIDDEN_FINDINGS: list[tuple[Flag, str]] = [
    (Flag.RETURNS_CONFLICT, "Return policy claims conflict with policy details."),
    (Flag.WARRANTY_CONFLICT, "Warranty terms conflict between product and policy."),
    (Flag.STOCK_CONFLICT, "Stock availability conflicts with policy warnings."),
    (Flag.PRICE_CONFLICT, "Price guarantees conflict with policy price changes."),
    (Flag.UNCLEAR, "Some claims lack clear policy coverage."),
]
_MISSING_POLICY_FINDING = "No policy pages were found to verify hidden costs or terms."

# Price labels accept one or two decimals ("$9.5"), unlike fact extraction.
_PRICE_LABEL_RE = re.compile(
    r"(USD|INR|EUR|GBP|CAD|AUD|[$€£₹])\s*([0-9]+(?:\.[0-9]{1,2})?)", re.IGNORECASE
)


def policy_status_of(policy_text: str | None) -> PolicyStatus:
    return "present" if policy_text and policy_text.strip() else "missing"


def _pros_and_cons(claims: FactSet, policy: FactSet) -> tuple[list[str], list[str]]:
    pros: list[str] = []
    cons: list[str] = []

    if claims.returns_allowed is True:
        pros.append("Returns are allowed.")
    if claims.warranty_provided is True:
        pros.append("Warranty coverage is mentioned.")
    if claims.stock_status == StockStatus.IN_STOCK:
        pros.append("Item appears in stock.")
    if claims.price_value is not None:
        pros.append("Price is listed.")
    if claims.price_guarantee is True:
        pros.append("Price guarantee is mentioned.")

    if claims.returns_allowed is False:
        cons.append("Returns may not be allowed.")
    if claims.warranty_provided is False:
        cons.append("No warranty is indicated.")
    if policy.stock_warning:
        cons.append("Availability may be limited.")
    if policy.price_policy == PricePolicy.PRICE_CHANGE:
        cons.append("Prices can change without notice.")

    return pros or [_NO_PROS], cons or [_NO_CONS]


def build_insight(
    product_text: str,
    policy_text: str,
    claims: FactSet,
    policy: FactSet,
) -> Insight:
    """Summarize a listing for which no hard contradiction was found."""
    status = policy_status_of(policy_text)
    summary = first_sentences(product_text, 2) or _FALLBACK_SUMMARY
    pros, cons = _pros_and_cons(claims, policy)
    message = (
        "No hidden policy pages were found, and no flags were raised."
        if status == "missing"
        else "No hidden policy conflicts or flags were detected."
    )
    return Insight(
        message=message,
        summary=summary,
        pros=pros,
        cons=cons,
        policy_status=status,
    )


# ── Product details ──────────────────────────────────────────────────────


def extract_product_name(product_text: str, fallback_url: str) -> str:
    """First substantial line of the product text, else the URL slug."""
    lines = [ln.strip() for ln in (product_text or "").splitlines() if ln.strip()]
    for line in lines:
        if len(line) >= 6 and len(line.split(" ")) >= 2:
            return line[:MAX_NAME_CHARS]

    parsed = urlparse(fallback_url or "")
    segments = [s for s in parsed.path.split("/") if s]
    if not segments:
        return "Product"
    return re.sub(r"[-_]", " ", segments[-1])[:MAX_NAME_CHARS]


def extract_price_label(product_text: str) -> str | None:
    """``$12.50`` for symbols, ``USD 12.50`` for currency codes."""
    m = _PRICE_LABEL_RE.search(product_text or "")
    if not m:
        return None
    currency = m.group(1).upper()
    amount = m.group(2)
    if len(currency) == 1:
        return f"{currency}{amount}"
    return f"{currency} {amount}"


def describe_hidden_findings(flags: list[Flag], policy_status: PolicyStatus) -> list[str]:
    findings = [text for flag, text in _HIDDEN_FINDINGS if flag in flags]
    if policy_status == "missing":
        findings.append(_MISSING_POLICY_FINDING)
    return findings


def build_product_details(
    url: str,
    product_text: str,
    policy_text: str,
    flags: list[Flag],
    claims: FactSet,
    policy: FactSet,
    overrides: dict[str, str | None] | None = None,
) -> ProductDetails:
    """
    Assemble name, price label and hidden-cost findings for the result.

    ``overrides`` carries agent-supplied ``title``, ``price`` and
    ``description``; when set they replace the text-derived values.
    """
    overrides = overrides or {}
    status = policy_status_of(policy_text)
    return ProductDetails(
        name=overrides.get("title") or extract_product_name(product_text, url),
        price=overrides.get("price") or extract_price_label(product_text),
        description=overrides.get("description") or None,
        flags=list(flags),
        hidden_findings=describe_hidden_findings(flags, status),
        policy_status=status,
    )

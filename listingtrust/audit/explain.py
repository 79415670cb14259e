"""Fixed human-readable sentence per flag."""

from listingtrust.schemas.models import Flag

EXPLANATIONS: dict[Flag, str] = {
    Flag.RETURNS_CONFLICT: "Return terms on the product page conflict with the returns policy.",
    Flag.WARRANTY_CONFLICT: "Warranty claims on the product page conflict with the warranty policy.",
    Flag.STOCK_CONFLICT: "Stock claims on the product page conflict with availability warnings.",
    Flag.PRICE_CONFLICT: "Price guarantees on the product page conflict with pricing policies.",
    Flag.UNCLEAR: "Unclear: not enough explicit text to verify claims against policies.",
    Flag.INVALID_URL: "URL is missing or invalid.",
    Flag.ANALYSIS_FAILED: "Analysis failed. Try again or use a test URL in offline mode.",
    Flag.DEV_ONLY: "Offline mode only supports the built-in test URLs.",
}


def explain_flags(flags: list[Flag]) -> list[str]:
    """One sentence per flag, same order and length as the input."""
    return [EXPLANATIONS[Flag(flag)] for flag in flags]

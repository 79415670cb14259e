"""Contradiction rules: compare claim and policy FactSets into flags and a verdict."""

from __future__ import annotations

from listingtrust.schemas.models import (
    DetectionResult,
    FactSet,
    Flag,
    PricePolicy,
    StockStatus,
    Verdict,
)


def _exceeds(claimed: int | None, allowed: int | None) -> bool:
    return claimed is not None and allowed is not None and claimed > allowed


def _present(*values: object) -> bool:
    return any(v is not None for v in values)


def _conflict_flags(claims: FactSet, policy: FactSet) -> list[Flag]:
    flags: list[Flag] = []

    if _exceeds(claims.returns_days, policy.returns_days):
        flags.append(Flag.RETURNS_CONFLICT)
    if claims.returns_allowed is True and policy.returns_allowed is False:
        flags.append(Flag.RETURNS_CONFLICT)
    if claims.returns_allowed is False and policy.returns_allowed is True:
        flags.append(Flag.RETURNS_CONFLICT)

    if _exceeds(claims.warranty_months, policy.warranty_months):
        flags.append(Flag.WARRANTY_CONFLICT)
    if claims.warranty_provided is True and policy.warranty_provided is False:
        flags.append(Flag.WARRANTY_CONFLICT)

    if claims.stock_status == StockStatus.IN_STOCK and policy.stock_warning:
        flags.append(Flag.STOCK_CONFLICT)

    if claims.price_guarantee is True and policy.price_policy == PricePolicy.PRICE_CHANGE:
        flags.append(Flag.PRICE_CONFLICT)

    return flags


def _topic_coverage(claims: FactSet, policy: FactSet) -> dict[str, tuple[bool, bool]]:
    """Per topic: (claimed on the product page, covered by the policy)."""
    return {
        "returns": (
            _present(claims.returns_days, claims.returns_allowed),
            _present(policy.returns_days, policy.returns_allowed),
        ),
        "warranty": (
            _present(claims.warranty_months, claims.warranty_provided),
            _present(policy.warranty_months, policy.warranty_provided),
        ),
        "stock": (
            _present(claims.stock_status),
            _present(policy.stock_warning),
        ),
        "price": (
            _present(claims.price_guarantee, claims.price_value),
            _present(policy.price_policy),
        ),
    }


def derive_verdict(flags: list[Flag]) -> Verdict:
    """Conflicts outrank ``unclear``; any other flag means caution."""
    if any(Flag(f).is_conflict for f in flags):
        return Verdict.RISK
    if Flag.UNCLEAR in flags:
        return Verdict.UNCLEAR
    if flags:
        return Verdict.CAUTION
    return Verdict.GOOD


def detect_contradictions(claims: FactSet, policy: FactSet) -> DetectionResult:
    """
    Run the conflict rules in order, then the coverage-gap and no-signal rules.

    Conflict flags may repeat (two returns rules can both fire). ``unclear``
    is added at most once: either for a claimed-but-uncovered topic or, when
    neither side carries any recognized fact, for the lack of signal. The
    two rules are mutually exclusive.
    """
    flags = _conflict_flags(claims, policy)

    coverage = _topic_coverage(claims, policy)
    has_gap = any(claimed and not covered for claimed, covered in coverage.values())
    has_any_signal = any(claimed or covered for claimed, covered in coverage.values())
    if has_gap or not has_any_signal:
        flags.append(Flag.UNCLEAR)

    return DetectionResult(flags=flags, verdict=derive_verdict(flags))

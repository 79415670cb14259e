"""Stage 2: contradiction rules, flag explanations, insight and product details."""

from listingtrust.audit.contradictions import derive_verdict, detect_contradictions
from listingtrust.audit.explain import explain_flags
from listingtrust.audit.insight import build_insight, build_product_details

__all__ = [
    "build_insight",
    "build_product_details",
    "derive_verdict",
    "detect_contradictions",
    "explain_flags",
]

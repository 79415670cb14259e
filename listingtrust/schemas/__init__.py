"""Pydantic models: single source of truth for all data shapes."""

from listingtrust.schemas.models import (
    AgentResult,
    AnalyzeResult,
    DetectionResult,
    FactSet,
    Flag,
    Insight,
    PageFetchResult,
    PolicyPage,
    PricePolicy,
    ProductDetails,
    ProductInfo,
    ProgressEvent,
    StockStatus,
    TraceStep,
    Verdict,
)

__all__ = [
    "AgentResult",
    "AnalyzeResult",
    "DetectionResult",
    "FactSet",
    "Flag",
    "Insight",
    "PageFetchResult",
    "PolicyPage",
    "PricePolicy",
    "ProductDetails",
    "ProductInfo",
    "ProgressEvent",
    "StockStatus",
    "TraceStep",
    "Verdict",
]

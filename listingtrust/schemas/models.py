"""Pydantic models: single source of truth for FactSet, flags, trace steps and AnalyzeResult."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

PolicyStatus = Literal["present", "missing"]
StepStatus = Literal["done", "failed"]


class _CamelModel(BaseModel):
    """Snake-case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StockStatus(str, Enum):
    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"
    PREORDER = "preorder"
    BACKORDER = "backorder"


class PricePolicy(str, Enum):
    PRICE_CHANGE = "price_change"
    PRICE_GUARANTEE = "price_guarantee"
    PRICE_MATCH = "price_match"


class Flag(str, Enum):
    RETURNS_CONFLICT = "returns_conflict"
    WARRANTY_CONFLICT = "warranty_conflict"
    STOCK_CONFLICT = "stock_conflict"
    PRICE_CONFLICT = "price_conflict"
    UNCLEAR = "unclear"
    INVALID_URL = "invalid_url"
    ANALYSIS_FAILED = "analysis_failed"
    DEV_ONLY = "dev_only"

    @property
    def is_conflict(self) -> bool:
        return self.value.endswith("_conflict")


class Verdict(str, Enum):
    GOOD = "good"
    CAUTION = "caution"
    RISK = "risk"
    UNCLEAR = "unclear"


class FactSet(_CamelModel):
    """Normalized claims or policy facts.

    ``None`` means no textual evidence was found, which is distinct from a
    found negative (``returns_allowed=False``). Absent fields are omitted when
    serialized.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="forbid"
    )

    returns_days: int | None = None
    returns_allowed: bool | None = None
    warranty_months: int | None = None
    warranty_provided: bool | None = None
    stock_status: StockStatus | None = None
    price_value: float | None = None
    price_guarantee: bool | None = None
    price_policy: PricePolicy | None = None
    stock_warning: bool | None = None  # policy only

    def has_any(self) -> bool:
        return any(getattr(self, name) is not None for name in type(self).model_fields)

    @model_serializer(mode="wrap")
    def _omit_absent(self, handler):
        return {k: v for k, v in handler(self).items() if v is not None}


class DetectionResult(BaseModel):
    """Flags in detection order plus the verdict derived from them."""

    flags: list[Flag] = []
    verdict: Verdict = Verdict.GOOD


class TraceStep(_CamelModel):
    """One pipeline stage outcome; ``detail`` is only set on failure."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str
    status: StepStatus
    duration_ms: int | None = None
    detail: str | None = None

    @model_serializer(mode="wrap")
    def _omit_absent(self, handler):
        return {k: v for k, v in handler(self).items() if v is not None}


class Insight(_CamelModel):
    """Narrative shown when no conflict was detected."""

    message: str = ""
    summary: str = ""
    pros: list[str] = []
    cons: list[str] = []
    policy_status: PolicyStatus = "missing"


class ProductDetails(_CamelModel):
    """Product-facing details: name, price label, findings."""

    name: str = "Product"
    price: str | None = None
    description: str | None = None
    flags: list[Flag] = []
    hidden_findings: list[str] = []
    policy_status: PolicyStatus = "missing"

    @model_serializer(mode="wrap")
    def _omit_description(self, handler):
        data = handler(self)
        if data.get("description") is None:
            data.pop("description", None)
        return data


class AnalyzeResult(_CamelModel):
    """The orchestrator's sole output, always complete even on failure."""

    verdict: Verdict = Verdict.UNCLEAR
    flags: list[Flag] = []
    explanations: list[str] = []
    processing_ms: int = 0
    steps: list[TraceStep] = []
    insight: Insight | None = None
    details: ProductDetails = Field(default_factory=ProductDetails)
    preview_image: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class ProgressEvent(BaseModel):
    """Named, timestamped progress notification emitted before a stage."""

    id: str
    time: str  # ISO-8601, UTC
    name: str
    message: str


# ── Content-retrieval agent ──────────────────────────────────────────────


class PolicyPage(BaseModel):
    url: str
    text: str


class AgentResult(BaseModel):
    """Validated agent payload; see ``listingtrust.agent.client.parse_agent_payload``."""

    product_url: str = ""
    product_text: str = ""
    policy_pages: list[PolicyPage] = []
    product_title: str | None = None
    product_price: str | None = None
    product_description: str | None = None
    preview_image: str | None = None

    @property
    def policy_text(self) -> str:
        return "\n".join(page.text for page in self.policy_pages)


# ── Raw page preview ─────────────────────────────────────────────────────


class PageFetchResult(BaseModel):
    blocked: bool = True
    html: str | None = None


class ProductInfo(BaseModel):
    title: str | None = None
    price: str | None = None
    description: str | None = None

"""Analysis pipeline: one URL in, one complete AnalyzeResult out.

    validate → (offline: load test listing | live: agent fetch → compile policy)
             → extract claims → extract policy → detect → explain → finalize

Every stage after validation runs through ``TraceRecorder.track``: a failure
is recorded on the trace, re-raised once, and converted by the single outer
handler into an ``analysis_failed`` result. ``analyze_product`` never raises.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable
from urllib.parse import urlparse

from listingtrust.agent.client import AgentError, run_agent
from listingtrust.agent.fixtures import get_offline_listing
from listingtrust.audit.contradictions import detect_contradictions
from listingtrust.audit.explain import explain_flags
from listingtrust.audit.insight import build_insight, build_product_details
from listingtrust.config import Settings, get_settings
from listingtrust.extract.fact_extractor import extract_claims, extract_policy
from listingtrust.pipeline.events import ProgressSink, StreamingSink, emit_step, with_heartbeat
from listingtrust.pipeline.trace import TraceRecorder
from listingtrust.schemas.models import (
    AgentResult,
    AnalyzeResult,
    FactSet,
    Flag,
    Verdict,
)

logger = logging.getLogger(__name__)

AgentFetcher = Callable[[str], Awaitable[AgentResult]]


@dataclass
class ListingTexts:
    """Raw texts plus optional agent-supplied details for one listing."""

    product_text: str
    policy_text: str
    overrides: dict[str, str | None] = field(default_factory=dict)
    preview_image: str | None = None
    # live mode shows the insight whenever policy text is missing
    insight_without_policy: bool = False


def validate_url(url: str) -> str | None:
    """Return a failure detail for a missing or malformed URL, else ``None``."""
    if not url or not url.strip():
        return "Missing URL"
    try:
        parsed = urlparse(url.strip())
        parsed.port  # out-of-range or non-numeric ports raise ValueError
    except ValueError:
        return "Invalid URL"
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return "Invalid URL"
    if any(ch.isspace() for ch in parsed.netloc):
        return "Invalid URL"
    return None


class _Run:
    """State of a single analysis; nothing here outlives the request."""

    def __init__(self, url: str, sink: ProgressSink | None) -> None:
        self.url = url
        self.sink = sink
        self.trace = TraceRecorder()

    def step(self, name: str, message: str) -> None:
        emit_step(self.sink, name, message)

    def terminal(self, flag: Flag) -> AnalyzeResult:
        """Schema-complete result for invalid input, offline rejection or failure."""
        flags = [flag]
        return AnalyzeResult(
            verdict=Verdict.UNCLEAR,
            flags=flags,
            explanations=explain_flags(flags),
            processing_ms=self.trace.elapsed_ms,
            steps=self.trace.steps,
            insight=None,
            details=build_product_details(self.url, "", "", flags, FactSet(), FactSet()),
            preview_image=None,
        )


async def _fetch_live(run: _Run, settings: Settings, agent: AgentFetcher | None) -> ListingTexts:
    fetch = agent or (lambda u: run_agent(u, settings))

    timeout_s = settings.agent_timeout_seconds

    async def _call() -> AgentResult:
        try:
            return await asyncio.wait_for(fetch(run.url), timeout=timeout_s)
        except asyncio.TimeoutError:
            raise AgentError(f"Agent call timed out after {timeout_s:g}s") from None

    run.step("call_agent", "Sending the product page to the retrieval agent")
    if isinstance(run.sink, StreamingSink):
        result = await run.trace.track(
            "Fetch agent data",
            lambda: with_heartbeat(
                "Fetching product and policy pages",
                _call,
                run.sink,
                interval=settings.heartbeat_interval_seconds,
            ),
        )
    else:
        result = await run.trace.track("Fetch agent data", _call)

    run.step("collect_pages", "Collecting returns, warranty and policy pages")
    policy_text = await run.trace.track("Compile policy text", lambda: result.policy_text)

    return ListingTexts(
        product_text=result.product_text,
        policy_text=policy_text,
        overrides={
            "title": result.product_title,
            "price": result.product_price,
            "description": result.product_description,
        },
        preview_image=result.preview_image,
        insight_without_policy=True,
    )


async def _evaluate(run: _Run, texts: ListingTexts) -> AnalyzeResult:
    run.step("extract_rules", "Extracting claims and policy terms")
    claims = await run.trace.track("Extract claims", lambda: extract_claims(texts.product_text))
    policy = await run.trace.track("Extract policy", lambda: extract_policy(texts.policy_text))

    run.step("parse_documents", "Parsing product and policy text")
    run.step("analyze_rules", "Matching product claims against policies")
    detection = await run.trace.track(
        "Detect contradictions", lambda: detect_contradictions(claims, policy)
    )
    explanations = await run.trace.track("Explain flags", lambda: explain_flags(detection.flags))
    run.step("finalize", "Compiling verdict and explanations")

    show_insight = not detection.flags or (
        texts.insight_without_policy and not texts.policy_text.strip()
    )
    insight = (
        build_insight(texts.product_text, texts.policy_text, claims, policy)
        if show_insight
        else None
    )
    details = build_product_details(
        run.url,
        texts.product_text,
        texts.policy_text,
        detection.flags,
        claims,
        policy,
        texts.overrides,
    )
    return AnalyzeResult(
        verdict=detection.verdict,
        flags=detection.flags,
        explanations=explanations,
        processing_ms=run.trace.elapsed_ms,
        steps=run.trace.steps,
        insight=insight,
        details=details,
        preview_image=texts.preview_image,
    )


def request_failure_result(detail: str) -> AnalyzeResult:
    """Result for a request whose body could not be parsed into a URL."""
    run = _Run("", None)
    run.trace.record("Parse request", "failed", detail)
    return run.terminal(Flag.ANALYSIS_FAILED)


async def analyze_product(
    url: str,
    *,
    settings: Settings | None = None,
    sink: ProgressSink | None = None,
    agent: AgentFetcher | None = None,
    emit_validation_step: bool = True,
) -> AnalyzeResult:
    """
    Analyze the listing at ``url`` and return its verdict, flags and trace.

    ``sink`` receives progress events before the announced stages; a
    ``StreamingSink`` also gets heartbeats while the agent call is pending.
    ``agent`` replaces the HTTP agent call (tests, alternative retrievers).
    """
    settings = settings or get_settings()
    run = _Run(url.strip() if url else "", sink)

    if emit_validation_step:
        run.step("validate_input", "Validating URL and user inputs")
    invalid = validate_url(run.url)
    if invalid:
        run.trace.record("Validate URL", "failed", invalid)
        return run.terminal(Flag.INVALID_URL)
    run.trace.record("Validate URL", "done")

    try:
        if settings.offline:
            listing = get_offline_listing(run.url)
            if listing is None:
                run.trace.record("Load test case", "failed", "Unknown test URL")
                return run.terminal(Flag.DEV_ONLY)
            run.trace.record("Load test case", "done")
            texts = ListingTexts(product_text=listing.product_text, policy_text=listing.policy_text)
        else:
            texts = await _fetch_live(run, settings, agent)

        result = await _evaluate(run, texts)
    except Exception:
        logger.exception("Analysis failed for %s", run.url)
        return run.terminal(Flag.ANALYSIS_FAILED)

    logger.info(
        "Analyzed %s: verdict=%s flags=%s in %d ms",
        run.url,
        result.verdict.value,
        [f.value for f in result.flags],
        result.processing_ms,
    )
    return result

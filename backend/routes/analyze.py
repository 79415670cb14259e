"""Analyze API routes.

POST /api/analyze
  → { url } in, complete AnalyzeResult out (never an error status).

GET  /api/analyze-stream?url=…
POST /api/analyze-stream { url }
  → text/event-stream: `activity` / `long-step` / `preview` events while the
    pipeline runs, then a single `done` event carrying the AnalyzeResult.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from listingtrust.config import Settings, get_settings
from listingtrust.ingest import extract_product_info, fetch_page_html
from listingtrust.pipeline import (
    QueueSink,
    analyze_product,
    request_failure_result,
    validate_url,
    with_heartbeat,
)
from listingtrust.schemas.models import AnalyzeResult

logger = logging.getLogger(__name__)
router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
}


async def _read_url(request: Request) -> str:
    """``url`` from a JSON body; raises ValueError when the body is unusable."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValueError("Request body is not valid JSON") from e
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    url = body.get("url")
    return url.strip() if isinstance(url, str) else ""


@router.post("/analyze", response_model=AnalyzeResult)
async def analyze(request: Request, settings: Settings = Depends(get_settings)):
    """Run the analysis pipeline for one product URL."""
    try:
        url = await _read_url(request)
    except ValueError as e:
        return request_failure_result(str(e))
    return await analyze_product(url, settings=settings)


# ---------------------------------------------------------------------------
# Server-sent events
# ---------------------------------------------------------------------------

def format_sse(event: str, payload: Any) -> str:
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


async def _produce(url: str, settings: Settings, sink: QueueSink) -> AnalyzeResult:
    """Page preview followed by the pipeline; failures fall back to an ``invalid_url`` result."""
    try:
        sink.activity("Validating URL and user inputs")
        if validate_url(url):
            return await analyze_product(url, settings=settings, emit_validation_step=False)

        # offline mode never touches the network
        if not settings.offline:
            sink.activity("Fetching product page HTML")
            page = await with_heartbeat(
                "Fetching product page",
                lambda: fetch_page_html(url, timeout=settings.page_fetch_timeout_seconds),
                sink,
                interval=settings.heartbeat_interval_seconds,
            )
            sink.activity("Extracting product title, price and description")
            if not page.blocked and page.html:
                info = extract_product_info(page.html)
                sink.send("preview", info.model_dump())

        return await analyze_product(
            url, settings=settings, sink=sink, emit_validation_step=False
        )
    except Exception:
        logger.exception("Streaming analysis failed for %s", url)
        return await analyze_product("", settings=settings, emit_validation_step=False)


# producers outlive a disconnected stream; hold them until they finish
_producers: set[asyncio.Task[None]] = set()


def _collect_producer(task: asyncio.Task[None]) -> None:
    _producers.discard(task)
    if task.cancelled():
        logger.info("Streaming producer cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Streaming producer failed: %r", exc)


async def stream_analysis(url: str, settings: Settings) -> AsyncIterator[str]:
    """
    Yield SSE frames in the exact order the pipeline emits them.

    If the client disconnects, the producer keeps running until its own
    timeout budget ends; nothing here aborts the agent call.
    """
    queue: asyncio.Queue[tuple[str, Any]] = asyncio.Queue()
    sink = QueueSink(queue)

    async def _run() -> None:
        result = await _produce(url, settings, sink)
        queue.put_nowait(("done", result.to_payload()))

    producer = asyncio.create_task(_run())
    _producers.add(producer)
    producer.add_done_callback(_collect_producer)
    while True:
        event, payload = await queue.get()
        yield format_sse(event, payload)
        if event == "done":
            break
    await producer


@router.get("/analyze-stream")
async def analyze_stream_get(url: str = "", settings: Settings = Depends(get_settings)):
    return StreamingResponse(
        stream_analysis(url.strip(), settings),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/analyze-stream")
async def analyze_stream_post(request: Request, settings: Settings = Depends(get_settings)):
    try:
        url = await _read_url(request)
    except ValueError:
        url = ""
    return StreamingResponse(
        stream_analysis(url, settings),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )

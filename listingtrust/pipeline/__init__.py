"""Stage 3: orchestration: trace, progress events and the analyze entry point."""

from listingtrust.pipeline.events import (
    ListSink,
    ProgressSink,
    QueueSink,
    StreamingSink,
    with_heartbeat,
)
from listingtrust.pipeline.orchestrator import analyze_product, request_failure_result, validate_url
from listingtrust.pipeline.trace import TraceRecorder

__all__ = [
    "ListSink",
    "ProgressSink",
    "QueueSink",
    "StreamingSink",
    "TraceRecorder",
    "analyze_product",
    "request_failure_result",
    "validate_url",
    "with_heartbeat",
]

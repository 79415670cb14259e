"""Progress events and the sinks that receive them while an analysis runs."""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Protocol, TypeVar, runtime_checkable

from listingtrust.schemas.models import ProgressEvent

T = TypeVar("T")


@runtime_checkable
class ProgressSink(Protocol):
    """Receives one event before each announced pipeline stage."""

    def emit(self, event: ProgressEvent) -> None:
        ...


@runtime_checkable
class StreamingSink(ProgressSink, Protocol):
    """A sink that also accepts long-step announcements and heartbeat messages."""

    def long_step(self, title: str) -> None:
        ...

    def activity(self, message: str) -> None:
        ...


def make_event(name: str, message: str) -> ProgressEvent:
    return ProgressEvent(
        id=uuid.uuid4().hex[:12],
        time=datetime.now(timezone.utc).isoformat(),
        name=name,
        message=message,
    )


def emit_step(sink: ProgressSink | None, name: str, message: str) -> None:
    if sink is None:
        return
    sink.emit(make_event(name, message))


class ListSink:
    """Collects events in order (CLI verbose output, tests)."""

    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    def emit(self, event: ProgressEvent) -> None:
        self.events.append(event)


class QueueSink:
    """
    Pushes ``(event_name, payload)`` pairs onto an asyncio queue for SSE.

    Stage events and heartbeats go out as ``activity``, long-step
    announcements as ``long-step``; the stream writer adds ``done``.
    """

    def __init__(self, queue: asyncio.Queue[tuple[str, Any]]) -> None:
        self.queue = queue

    def send(self, event: str, payload: Any) -> None:
        self.queue.put_nowait((event, payload))

    def emit(self, event: ProgressEvent) -> None:
        self.send("activity", event.model_dump())

    def long_step(self, title: str) -> None:
        self.send("long-step", {"title": title})

    def activity(self, message: str) -> None:
        self.send("activity", {"message": message})


async def with_heartbeat(
    title: str,
    task: Callable[[], Awaitable[T]],
    sink: StreamingSink,
    interval: float = 2.0,
) -> T:
    """Announce ``title`` and report ``Still working on`` every ``interval`` seconds until ``task`` resolves."""
    sink.long_step(title)

    async def _beat() -> None:
        while True:
            await asyncio.sleep(interval)
            sink.activity(f"Still working on: {title}…")

    beat = asyncio.create_task(_beat())
    try:
        return await task()
    finally:
        beat.cancel()
        await asyncio.gather(beat, return_exceptions=True)

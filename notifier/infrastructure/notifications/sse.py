"""Minimal ``text/event-stream`` framing."""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass


@dataclass(frozen=True)
class ServerSentEvent:
    """One dispatched server-sent event."""

    data: str
    event: str = "message"
    id: str | None = None
    retry: int | None = None


async def iter_sse_events(lines: AsyncIterable[str]) -> AsyncIterator[ServerSentEvent]:
    """Group decoded ``lines`` into events.

    ``data`` fields accumulate until a blank line dispatches the event. Lines
    starting with ``:`` are comments (heartbeats). An event left incomplete
    when the stream ends is discarded.
    """

    data: list[str] = []
    event_name = ""
    event_id: str | None = None
    retry: int | None = None

    async for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if not line:
            if data:
                yield ServerSentEvent(
                    data="\n".join(data),
                    event=event_name or "message",
                    id=event_id,
                    retry=retry,
                )
            data = []
            event_name = ""
            retry = None
            continue

        if line.startswith(":"):
            continue

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "data":
            data.append(value)
        elif field == "event":
            event_name = value
        elif field == "id":
            if "\0" not in value:
                event_id = value
        elif field == "retry":
            if value.isdigit():
                retry = int(value)


__all__ = ["ServerSentEvent", "iter_sse_events"]

"""Events emitted by an open server-push stream handle."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class StreamEventKind(str, Enum):
    """Kinds of items yielded while a stream handle is consumed."""

    OPENED = "opened"
    MESSAGE = "message"
    FAILED = "failed"
    CLOSED = "closed"


@dataclass(frozen=True)
class StreamEvent:
    """One item of a stream handle.

    ``FAILED`` and ``CLOSED`` are terminal: exactly one of them ends every
    handle that was not closed by its owner.
    """

    kind: StreamEventKind
    payload: dict[str, Any] | None = None
    error: BaseException | None = None

    @property
    def is_terminal(self) -> bool:
        return self.kind in (StreamEventKind.FAILED, StreamEventKind.CLOSED)

    @classmethod
    def opened(cls) -> "StreamEvent":
        return cls(StreamEventKind.OPENED)

    @classmethod
    def message(cls, payload: dict[str, Any]) -> "StreamEvent":
        return cls(StreamEventKind.MESSAGE, payload=payload)

    @classmethod
    def failed(cls, error: BaseException) -> "StreamEvent":
        return cls(StreamEventKind.FAILED, error=error)

    @classmethod
    def closed(cls) -> "StreamEvent":
        return cls(StreamEventKind.CLOSED)


__all__ = ["StreamEvent", "StreamEventKind"]

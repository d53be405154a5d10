"""Realtime notification transport for the infrastructure layer."""

from .emitter import EventEmitter
from .event_stream import EventStream, EventStreamError, StreamHandle
from .reconnect import ReconnectingEventStream, ReconnectingStreamHandle
from .sse import ServerSentEvent, iter_sse_events

__all__ = [
    "EventEmitter",
    "EventStream",
    "EventStreamError",
    "StreamHandle",
    "ReconnectingEventStream",
    "ReconnectingStreamHandle",
    "ServerSentEvent",
    "iter_sse_events",
]

"""Named-event channel used to fan session events out to independent listeners."""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict

from anyio import from_thread

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventEmitter:
    """Deliver emitted events to every listener registered for their name.

    Plain callables run inline, in registration order. Coroutine functions are
    scheduled as tasks on the running loop. From an AnyIO worker thread they
    are spawned on the loop through ``anyio.from_thread``; from any other
    thread on the loop the emitter was last used on. With no loop to run on
    the call is dropped with a warning. Every spawned task is awaited by
    :meth:`drain`.
    """

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, list[Listener]] = defaultdict(list)
        self._pending: set[asyncio.Task[Any]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for ``event`` and return a function that removes it."""

        self._listeners[event].append(listener)
        with contextlib.suppress(RuntimeError):
            self._loop = asyncio.get_running_loop()
        return lambda: self.off(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        """Remove ``listener`` from ``event``; unknown listeners are ignored."""

        listeners = self._listeners.get(event)
        if not listeners or listener not in listeners:
            return
        listeners.remove(listener)
        if not listeners:
            self._listeners.pop(event, None)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str, *args: Any) -> None:
        """Deliver ``args`` to the listeners of ``event``."""

        for listener in list(self._listeners.get(event, ())):
            if inspect.iscoroutinefunction(listener):
                self._schedule(event, listener, args)
                continue
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener for '%s' event failed", event)

    async def drain(self) -> None:
        """Wait until every scheduled coroutine listener has finished.

        Listeners may emit further events while running, so the pending set is
        re-checked until it stays empty.
        """

        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _schedule(self, event: str, listener: Listener, args: tuple[Any, ...]) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            self._spawn(event, listener, args)
            return

        try:
            from_thread.run_sync(self._spawn, event, listener, args)
            return
        except RuntimeError:
            # Not an AnyIO worker thread.
            pass

        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(self._spawn, event, listener, args)
            return
        logger.warning(
            "No event loop available for '%s' listener %r; event dropped", event, listener
        )

    def _spawn(self, event: str, listener: Listener, args: tuple[Any, ...]) -> None:
        loop = asyncio.get_running_loop()
        self._loop = loop
        task = loop.create_task(self._run(event, listener, args))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @staticmethod
    async def _run(event: str, listener: Listener, args: tuple[Any, ...]) -> None:
        try:
            await listener(*args)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Listener for '%s' event failed", event)


__all__ = ["EventEmitter", "Listener"]

"""Shared fixtures for the notification session tests."""

from __future__ import annotations

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jose import jwt

from notifier.config import Settings, reset_settings_cache
from notifier.domain.entities import Identity, StreamEvent
from notifier.infrastructure.notifications import EventStreamError

TEST_SECRET = "test-secret"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _fresh_settings_cache():
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        api_base_url="http://api.test",
        reconnect_max_attempts=3,
        reconnect_backoff_seconds=0,
        reconnect_backoff_max_seconds=0,
    )


@pytest.fixture
def make_payload():
    """Return a factory for wire-shaped notification payloads."""

    def _make(**overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": 1,
            "recipientId": 7,
            "recipientRole": "CUSTOMER",
            "type": "generic",
            "title": "Reservation update",
            "message": "Your reservation has been updated.",
            "reservationId": None,
            "actionUrl": None,
            "isRead": False,
            "readAt": None,
            "isSent": True,
            "sentAt": "2024-05-01T10:00:01",
            "createdAt": "2024-05-01T10:00:00",
            "expiresAt": None,
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def mint_token():
    """Return a factory for signed access tokens."""

    def _mint(
        user_id: Any = 7,
        role: Any = "CUSTOMER",
        *,
        expires_in: timedelta = timedelta(hours=1),
        secret: str = TEST_SECRET,
        **claims: Any,
    ) -> str:
        payload: dict[str, Any] = {
            "exp": datetime.now(tz=timezone.utc) + expires_in,
            **claims,
        }
        if user_id is not None:
            payload["userId"] = user_id
        if role is not None:
            payload["role"] = role
        return jwt.encode(payload, secret, algorithm="HS256")

    return _mint


class FakeStreamHandle:
    """Stream handle fed by the test through :meth:`push`."""

    def __init__(self, identity: Identity) -> None:
        self.identity = identity
        self._queue: asyncio.Queue[StreamEvent | BaseException] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, event: StreamEvent) -> None:
        self._queue.put_nowait(event)

    def crash(self, error: BaseException) -> None:
        """Make the consumer of :meth:`events` see ``error`` raised."""

        self._queue.put_nowait(error)

    async def events(self):
        while True:
            event = await self._queue.get()
            if isinstance(event, BaseException):
                raise event
            yield event
            if event.is_terminal:
                return


class FakeEventStream:
    """In-memory stand-in for the server-push stream recording open/close calls."""

    def __init__(self) -> None:
        self.handles: list[FakeStreamHandle] = []
        self.calls: list[tuple[str, int]] = []

    @property
    def current(self) -> FakeStreamHandle:
        return self.handles[-1]

    def open(self, identity: Identity) -> FakeStreamHandle:
        if any(not handle.closed for handle in self.handles):
            raise EventStreamError("A notification stream is already open")
        handle = FakeStreamHandle(identity)
        self.handles.append(handle)
        self.calls.append(("open", identity.user_id))
        return handle

    async def close(self, handle: FakeStreamHandle) -> None:
        if handle.closed:
            return
        handle._closed = True
        self.calls.append(("close", handle.identity.user_id))


@pytest.fixture
def fake_stream() -> FakeEventStream:
    return FakeEventStream()


@pytest.fixture
def wait_until():
    """Return a helper that yields to the loop until ``predicate`` holds."""

    async def _wait(predicate, attempts: int = 200) -> None:
        for _ in range(attempts):
            if predicate():
                return
            await asyncio.sleep(0)
        raise AssertionError("condition was not reached")

    return _wait

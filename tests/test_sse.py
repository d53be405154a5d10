"""Tests for ``text/event-stream`` framing."""

from __future__ import annotations

import pytest

from notifier.infrastructure.notifications import ServerSentEvent, iter_sse_events


async def _lines(*lines: str):
    for line in lines:
        yield line


async def _collect(*lines: str) -> list[ServerSentEvent]:
    return [event async for event in iter_sse_events(_lines(*lines))]


@pytest.mark.anyio
async def test_blank_line_dispatches_event():
    events = await _collect('data: {"id": 1}', "", 'data: {"id": 2}', "")

    assert [event.data for event in events] == ['{"id": 1}', '{"id": 2}']
    assert all(event.event == "message" for event in events)


@pytest.mark.anyio
async def test_multiline_data_is_joined():
    events = await _collect("data: first", "data: second", "")

    assert events == [ServerSentEvent(data="first\nsecond")]


@pytest.mark.anyio
async def test_comments_and_fields_are_parsed():
    events = await _collect(
        ": keep-alive",
        "event: notification",
        "id: 17",
        "retry: 3000",
        "data:{}",
        "",
    )

    assert events == [ServerSentEvent(data="{}", event="notification", id="17", retry=3000)]


@pytest.mark.anyio
async def test_heartbeat_only_stream_yields_nothing():
    assert await _collect(":ping", "", ":ping", "") == []


@pytest.mark.anyio
async def test_incomplete_trailing_event_is_discarded():
    events = await _collect("data: complete", "", "data: partial")

    assert [event.data for event in events] == ["complete"]


@pytest.mark.anyio
async def test_line_endings_are_tolerated():
    events = await _collect("data: value\r\n", "\r\n")

    assert [event.data for event in events] == ["value"]

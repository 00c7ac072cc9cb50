"""Tests for SSE encoding and the classifier relay loop."""

import json

import pytest

from think_relay.api.sse import STREAM_ERROR_MESSAGE, encode_sse, relay_events
from think_relay.llm.models import StreamChunk
from think_relay.splitter import StreamClassifier


async def _chunks(*items, error=None):
    for item in items:
        yield item
    if error is not None:
        raise error


def _content(text):
    return StreamChunk(chunk_type="content", text=text)


async def _collect(gen):
    return [payload async for payload in gen]


def test_encode_sse_frame():
    frame = encode_sse({"type": "answer", "content": "Hi"})
    assert frame == b'data: {"type": "answer", "content": "Hi"}\n\n'


def test_encode_sse_keeps_unicode():
    frame = encode_sse({"type": "answer", "content": "Halo, apa kabar? 🔬"})
    assert frame.startswith(b"data: ")
    assert frame.endswith(b"\n\n")
    assert json.loads(frame[len(b"data: "):].decode("utf-8"))["content"] == "Halo, apa kabar? 🔬"
    assert "🔬".encode("utf-8") in frame


@pytest.mark.asyncio
async def test_relay_splits_and_finishes_on_finish_reason():
    classifier = StreamClassifier()
    chunks = _chunks(
        StreamChunk(chunk_type="meta", model="deepseek-reasoner"),
        _content("<thi"),
        _content("nk>Let me check"),
        _content("</think>"),
        _content("It is true."),
        StreamChunk(chunk_type="meta", finish_reason="stop"),
    )

    payloads = await _collect(relay_events(chunks, classifier))

    assert payloads == [
        {"type": "thinking", "content": "Let me check"},
        {"type": "answer", "content": "It is true."},
        {
            "type": "done",
            "thinking": "Let me check",
            "answer": "It is true.",
            "hasThinking": True,
        },
    ]
    assert classifier.closed is True


@pytest.mark.asyncio
async def test_relay_finishes_at_end_of_stream():
    """Without a finish_reason the stream end finishes the classifier."""
    classifier = StreamClassifier()

    payloads = await _collect(relay_events(_chunks(_content("Hello <")), classifier))

    assert payloads == [
        {"type": "answer", "content": "Hello "},
        {"type": "answer", "content": "<"},
        {"type": "done", "thinking": "", "answer": "Hello <", "hasThinking": False},
    ]


@pytest.mark.asyncio
async def test_relay_flushes_withheld_thinking_before_done():
    classifier = StreamClassifier()
    chunks = _chunks(
        _content("<think>abc</thi"),
        StreamChunk(chunk_type="meta", finish_reason="length"),
    )

    payloads = await _collect(relay_events(chunks, classifier))

    assert payloads == [
        {"type": "thinking", "content": "abc"},
        {"type": "thinking", "content": "</thi"},
        {"type": "done", "thinking": "abc</thi", "answer": "", "hasThinking": True},
    ]


@pytest.mark.asyncio
async def test_relay_ignores_content_after_finish():
    classifier = StreamClassifier()
    chunks = _chunks(
        _content("Done."),
        StreamChunk(chunk_type="meta", finish_reason="stop"),
        _content(" trailing"),
        StreamChunk(chunk_type="meta", usage={"prompt_tokens": 3, "completion_tokens": 2}),
    )

    payloads = await _collect(relay_events(chunks, classifier))

    assert [p["type"] for p in payloads] == ["answer", "done"]
    assert payloads[-1]["answer"] == "Done."


@pytest.mark.asyncio
async def test_relay_reports_transport_error():
    """A failing transport yields an error payload and no done payload."""
    classifier = StreamClassifier()
    chunks = _chunks(_content("<think>partial"), error=ConnectionError("reset by peer"))

    payloads = await _collect(relay_events(chunks, classifier))

    assert payloads == [
        {"type": "thinking", "content": "partial"},
        {"type": "error", "content": STREAM_ERROR_MESSAGE},
    ]
    assert classifier.closed is False


@pytest.mark.asyncio
async def test_relay_transport_error_after_done_is_not_reported():
    """A failure after done leaves the completed response untouched."""
    classifier = StreamClassifier()
    chunks = _chunks(
        _content("Done."),
        StreamChunk(chunk_type="meta", finish_reason="stop"),
        error=ConnectionError("reset while waiting for usage"),
    )

    payloads = await _collect(relay_events(chunks, classifier))

    assert [p["type"] for p in payloads] == ["answer", "done"]
    assert payloads[-1]["answer"] == "Done."
    assert classifier.closed is True


@pytest.mark.asyncio
async def test_relay_error_before_any_chunk():
    classifier = StreamClassifier()

    payloads = await _collect(relay_events(_chunks(error=RuntimeError("boom")), classifier))

    assert payloads == [{"type": "error", "content": STREAM_ERROR_MESSAGE}]

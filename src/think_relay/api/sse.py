"""Server-sent-events encoding and the classifier relay loop."""

import json
from collections.abc import AsyncGenerator, AsyncIterator

import structlog

from think_relay.llm.models import StreamChunk
from think_relay.splitter import StreamClassifier

logger = structlog.get_logger()

STREAM_ERROR_MESSAGE = "Stream error occurred"


def encode_sse(payload: dict) -> bytes:
    """Encode one payload as a ``data:`` SSE frame."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n".encode("utf-8")


async def relay_events(
    chunks: AsyncIterator[StreamChunk],
    classifier: StreamClassifier,
) -> AsyncGenerator[dict, None]:
    """Drive ``classifier`` from transport chunks and yield wire payloads.

    The stream is finished on the first ``finish_reason`` or when the chunk
    iterator is exhausted, whichever comes first. A failing iterator yields a
    single ``error`` payload and the classifier is dropped unfinished, unless
    ``done`` was already sent, in which case the failure is only logged.
    """
    model = None
    fragment_count = 0

    try:
        async for chunk in chunks:
            if classifier.closed:
                if chunk.usage:
                    logger.info("chat_usage", model=model, **chunk.usage)
                continue

            if chunk.chunk_type == "meta":
                if chunk.model:
                    model = chunk.model
                if chunk.usage:
                    logger.info("chat_usage", model=model, **chunk.usage)
                if chunk.finish_reason:
                    logger.debug("relay_finish_reason", finish_reason=chunk.finish_reason)
                    for payload in _finish(classifier, model):
                        yield payload
                continue

            if chunk.text:
                fragment_count += 1
                for event in classifier.accept(chunk.text):
                    yield event.to_payload()
    except Exception as e:
        if classifier.closed:
            # The response already completed; only trailing chunks were lost
            logger.warning(
                "relay_trailing_stream_error",
                error=str(e),
                model=model,
            )
            return
        logger.error(
            "relay_stream_error",
            error=str(e),
            model=model,
            fragment_count=fragment_count,
        )
        yield {"type": "error", "content": STREAM_ERROR_MESSAGE}
        return

    if not classifier.closed:
        logger.debug("relay_stream_ended_without_finish_reason", model=model)
        for payload in _finish(classifier, model):
            yield payload


def _finish(classifier: StreamClassifier, model: str | None) -> list[dict]:
    payloads = [event.to_payload() for event in classifier.flush()]
    result = classifier.finish()
    logger.info(
        "relay_stream_done",
        model=model,
        thinking_length=len(result.thinking),
        answer_length=len(result.answer),
        has_thinking=result.has_thinking,
    )
    payloads.append({
        "type": "done",
        "thinking": result.thinking,
        "answer": result.answer,
        "hasThinking": result.has_thinking,
    })
    return payloads

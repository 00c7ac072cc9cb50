"""HTTP handlers for chat streaming, completion and title generation."""

import json

import structlog
from aiohttp import web
from pydantic import BaseModel, ValidationError

from think_relay.api.sse import encode_sse, relay_events
from think_relay.config import Settings
from think_relay.llm.client import ChatClient
from think_relay.llm.models import MODEL_REGISTRY, ChatRequest, TitleRequest
from think_relay.splitter import StreamClassifier

logger = structlog.get_logger()

SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
}


def _error(message: str, code: str, status: int, **extra) -> web.Response:
    return web.json_response({"error": message, "code": code, **extra}, status=status)


async def _parse_body(
    request: web.Request, model: type[BaseModel]
) -> tuple[BaseModel | None, web.Response | None]:
    """Validate the JSON body against ``model``.

    Returns the parsed model, or an error response to send back instead.
    """
    try:
        body = await request.json()
    except ValueError:
        # JSONDecodeError and UnicodeDecodeError alike
        return None, _error("Invalid JSON body", "INVALID_REQUEST", 400)

    try:
        return model.model_validate(body), None
    except ValidationError as e:
        logger.info("request_validation_failed", path=request.path, error_count=e.error_count())
        details = json.loads(e.json(include_url=False))
        return None, _error("Invalid request", "INVALID_REQUEST", 400, details=details)


def _chat_client(request: web.Request) -> ChatClient | None:
    return request.app["chat_client"]


async def chat(request: web.Request) -> web.StreamResponse:
    """Stream a chat completion as server-sent events."""
    client = _chat_client(request)
    if client is None:
        return _error("Inference API is not configured", "NOT_CONFIGURED", 503)

    chat_request, error = await _parse_body(request, ChatRequest)
    if error is not None:
        return error

    settings: Settings = request.app["settings"]
    # Registry-validated id, safe to echo in a header
    model = chat_request.model or client.model

    logger.info(
        "chat_request_received",
        model=model,
        message_count=len(chat_request.messages),
        conversation_id=chat_request.conversation_id,
    )

    response = web.StreamResponse(status=200, headers={**SSE_HEADERS, "X-Model": model})
    await response.prepare(request)

    classifier = StreamClassifier(settings.delimiters())
    async for payload in relay_events(client.stream(chat_request), classifier):
        await response.write(encode_sse(payload))

    await response.write_eof()
    return response


async def chat_complete(request: web.Request) -> web.Response:
    """Run a non-streaming chat completion with reasoning split out."""
    client = _chat_client(request)
    if client is None:
        return _error("Inference API is not configured", "NOT_CONFIGURED", 503)

    chat_request, error = await _parse_body(request, ChatRequest)
    if error is not None:
        return error

    try:
        result = await client.complete(chat_request)
    except Exception as e:
        logger.error("chat_complete_failed", error=str(e))
        return _error("Failed to process request", "UPSTREAM_ERROR", 502)

    return web.json_response(result.model_dump())


async def title(request: web.Request) -> web.Response:
    """Generate a short title for a conversation."""
    client = _chat_client(request)
    if client is None:
        return _error("Inference API is not configured", "NOT_CONFIGURED", 503)

    title_request, error = await _parse_body(request, TitleRequest)
    if error is not None:
        return error

    generated = await client.generate_title(title_request.messages)
    if generated is None:
        return _error("Failed to generate title", "TITLE_FAILED", 500)

    return web.json_response({"title": generated})


async def models(request: web.Request) -> web.Response:
    """List the model ids a chat request may name."""
    return web.json_response({"models": [spec.model_dump() for spec in MODEL_REGISTRY.values()]})


async def health(request: web.Request) -> web.Response:
    """Health check endpoint - no authentication required."""
    return web.json_response({"status": "healthy"})


def register_routes(app: web.Application) -> None:
    app.router.add_post("/api/chat", chat)
    app.router.add_post("/api/chat/complete", chat_complete)
    app.router.add_post("/api/title", title)
    app.router.add_get("/api/models", models)
    app.router.add_get("/health", health)

"""Client for an OpenAI-compatible inference API."""

from collections.abc import AsyncGenerator

import structlog
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from openai import AsyncOpenAI

from think_relay.config import Settings
from think_relay.llm.models import ChatMessage, ChatRequest, ChatResponse, StreamChunk
from think_relay.llm.prompts import (
    DEFAULT_SYSTEM_PROMPT,
    TITLE_SYSTEM_PROMPT,
    TITLE_USER_TEMPLATE,
)
from think_relay.splitter import split_reasoning

logger = structlog.get_logger()

_TITLE_CONTEXT_MESSAGES = 4
_TITLE_CONTEXT_CHARS = 200
_TITLE_MAX_LENGTH = 60


class ChatClient:
    """Async client for chat completions against the inference API.

    Uses AsyncOpenAI (raw SDK) for chat streaming so content deltas reach
    the splitter exactly as the provider sends them. Uses ChatOpenAI
    (LangChain) for title generation which only needs the final text.
    """

    def __init__(self, settings: Settings) -> None:
        self._client = AsyncOpenAI(
            base_url=settings.inference_api_url,
            api_key=settings.inference_api_key,
            timeout=settings.inference_timeout,
        )
        self._llm = ChatOpenAI(
            base_url=settings.inference_api_url,
            api_key=settings.inference_api_key,
            model=settings.title_model_name or settings.inference_model_name,
            timeout=settings.inference_timeout,
            temperature=0.3,
            max_tokens=30,
        )
        self._model = settings.inference_model_name
        self._max_tokens = settings.inference_max_tokens
        self._temperature = settings.inference_temperature
        self._top_p = settings.inference_top_p
        self._stream_usage = settings.inference_stream_usage
        self._delimiters = settings.delimiters()

    @property
    def model(self) -> str:
        return self._model

    def _build_messages(self, request: ChatRequest) -> list[dict]:
        """System prompt first, then the conversation as sent by the caller."""
        messages = [
            {"role": "system", "content": request.system_prompt or DEFAULT_SYSTEM_PROMPT}
        ]
        messages.extend({"role": m.role, "content": m.content} for m in request.messages)
        return messages

    def _build_params(self, request: ChatRequest) -> dict:
        """Resolve a registry model id to the provider name and its token limit."""
        model = self._model
        max_tokens = request.max_tokens or self._max_tokens
        spec = request.model_spec
        if spec is not None:
            model = spec.provider_model
            max_tokens = spec.clamp_tokens(max_tokens)

        return {
            "model": model,
            "messages": self._build_messages(request),
            "max_tokens": max_tokens,
            "temperature": (
                request.temperature if request.temperature is not None else self._temperature
            ),
            "top_p": self._top_p,
        }

    async def stream(self, request: ChatRequest) -> AsyncGenerator[StreamChunk, None]:
        """Stream the model response as individual chunks.

        Yields content chunks as raw text fragments; reasoning tags are left
        in place for the splitter. Provider errors propagate to the caller.
        """
        params = self._build_params(request)

        logger.info(
            "chat_stream_start",
            model=params["model"],
            message_count=len(request.messages),
            conversation_id=request.conversation_id,
        )

        model_emitted = False
        chunk_count = 0

        if self._stream_usage:
            params["stream_options"] = {"include_usage": True}

        stream = await self._client.chat.completions.create(stream=True, **params)

        async for chunk in stream:
            chunk_count += 1
            chunk_model = chunk.model if chunk.model else None

            logger.debug(
                "chat_chunk_received",
                chunk_number=chunk_count,
                has_model=chunk_model is not None,
                num_choices=len(chunk.choices),
            )

            if chunk_model and not model_emitted:
                yield StreamChunk(chunk_type="meta", model=chunk_model)
                model_emitted = True

            for choice in chunk.choices:
                content = choice.delta.content
                if content:
                    logger.debug(
                        "chat_chunk_content_emit",
                        text_length=len(content),
                        text_preview=content[:50],
                    )
                    yield StreamChunk(chunk_type="content", text=content)

                if choice.finish_reason:
                    yield StreamChunk(chunk_type="meta", finish_reason=choice.finish_reason)

            usage = getattr(chunk, "usage", None)
            if usage:
                yield StreamChunk(
                    chunk_type="meta",
                    usage={
                        "prompt_tokens": getattr(usage, "prompt_tokens", 0),
                        "completion_tokens": getattr(usage, "completion_tokens", 0),
                    },
                )

        logger.info(
            "chat_stream_complete",
            model=params["model"],
            total_chunks_received=chunk_count,
        )

    async def complete(self, request: ChatRequest) -> ChatResponse:
        """Run a non-streaming completion and split its reasoning from the answer."""
        params = self._build_params(request)

        try:
            response = await self._client.chat.completions.create(stream=False, **params)
        except Exception:
            logger.error("chat_complete_error", model=params["model"])
            raise

        choice = response.choices[0]
        result = split_reasoning(choice.message.content or "", self._delimiters)

        logger.info(
            "chat_complete",
            model=response.model,
            answer_length=len(result.answer),
            has_thinking=result.has_thinking,
            finish_reason=choice.finish_reason,
        )

        return ChatResponse(
            thinking=result.thinking,
            answer=result.answer,
            has_thinking=result.has_thinking,
            model=response.model or params["model"],
            finish_reason=choice.finish_reason,
        )

    async def generate_title(self, messages: list[ChatMessage]) -> str | None:
        """Generate a short conversation title.

        Returns the cleaned title, or None if the model fails or replies
        with nothing usable.
        """
        conversation = "\n".join(
            f"{m.role}: {m.content[:_TITLE_CONTEXT_CHARS]}"
            for m in messages[:_TITLE_CONTEXT_MESSAGES]
        )
        prompt = [
            SystemMessage(content=TITLE_SYSTEM_PROMPT),
            HumanMessage(content=TITLE_USER_TEMPLATE.format(conversation=conversation)),
        ]

        logger.debug("title_generation_start", message_count=len(messages))

        try:
            response = await self._llm.ainvoke(prompt)
        except Exception:
            logger.warning("title_generation_failed", message_count=len(messages))
            return None

        # Reasoning models may still wrap a short reply in a thinking block
        raw = split_reasoning(response.content or "", self._delimiters).answer
        title = raw.replace("\n", " ").strip().strip("\"'").strip()[:_TITLE_MAX_LENGTH]

        logger.debug("title_generation_complete", title=title)
        return title or None

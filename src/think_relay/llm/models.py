"""Request and response models for the inference API."""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ModelSpec(BaseModel):
    """A model the service exposes, keyed by its public id."""

    model_config = ConfigDict(frozen=True)

    id: str
    provider_model: str = Field(..., description="Model name sent to the inference API")
    display_name: str
    max_output_tokens: int
    context_window: int
    supports_thinking: bool

    def clamp_tokens(self, max_tokens: int) -> int:
        return min(max_tokens, self.max_output_tokens)


MODEL_REGISTRY: dict[str, ModelSpec] = {
    "deepseek-r1": ModelSpec(
        id="deepseek-r1",
        provider_model="deepseek-reasoner",
        display_name="DeepSeek R1",
        max_output_tokens=8000,
        context_window=128_000,
        supports_thinking=True,
    ),
    "deepseek-v3": ModelSpec(
        id="deepseek-v3",
        provider_model="deepseek-chat",
        display_name="DeepSeek V3",
        max_output_tokens=8192,
        context_window=128_000,
        supports_thinking=False,
    ),
}


class ChatMessage(BaseModel):
    """One turn of the conversation sent to the model."""

    role: Literal["user", "assistant", "system"]
    content: str = Field(..., min_length=1, max_length=100_000)


class ChatRequest(BaseModel):
    """Validated body of a chat request."""

    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessage] = Field(..., min_length=1, max_length=200)
    model: str | None = None
    conversation_id: str | None = Field(None, alias="conversationId")
    system_prompt: str | None = Field(None, alias="systemPrompt", max_length=10_000)
    temperature: float | None = Field(None, ge=0, le=1)
    max_tokens: int | None = Field(None, alias="maxTokens", ge=1, le=64_000)

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str | None) -> str | None:
        if v is not None and v not in MODEL_REGISTRY:
            raise ValueError(f"model must be one of: {', '.join(sorted(MODEL_REGISTRY))}")
        return v

    @property
    def model_spec(self) -> ModelSpec | None:
        return MODEL_REGISTRY[self.model] if self.model else None


class TitleRequest(BaseModel):
    """Validated body of a title generation request."""

    messages: list[ChatMessage] = Field(..., min_length=1, max_length=200)


@dataclass(slots=True)
class StreamChunk:
    """A single chunk from the inference stream."""

    chunk_type: Literal["content", "meta"]
    text: str | None = None
    model: str | None = None
    finish_reason: str | None = None
    usage: dict | None = None


class ChatResponse(BaseModel):
    """Completed, split response of a non-streaming chat request."""

    thinking: str
    answer: str
    has_thinking: bool
    model: str
    finish_reason: str | None = None

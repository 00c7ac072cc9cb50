"""Application configuration using Pydantic settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from think_relay.splitter.models import DelimiterPair


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Inference API (empty defaults = chat routes disabled)
    inference_api_url: str = Field(
        "", alias="INFERENCE_API_URL",
        description="Base URL of the OpenAI-compatible inference API (e.g. https://api.deepseek.com/v1). Empty = chat disabled.",
    )
    inference_api_key: str = Field(
        "", alias="INFERENCE_API_KEY",
        description="API key for the inference API. Empty = chat disabled.",
    )
    inference_model_name: str = Field(
        "deepseek-reasoner", alias="INFERENCE_MODEL_NAME",
        description="Default model used when a chat request does not name one.",
    )
    inference_timeout: float = Field(
        120.0, alias="INFERENCE_TIMEOUT",
        description="HTTP request timeout in seconds. Reasoning models can think for a long time.",
    )
    inference_max_tokens: int = Field(
        8000, alias="INFERENCE_MAX_TOKENS",
        description="Default max_tokens for completions when the request does not override it.",
    )
    inference_temperature: float = Field(
        0.6, alias="INFERENCE_TEMPERATURE",
        description="Default sampling temperature. R1-style models work better on the low side.",
    )
    inference_top_p: float = Field(
        0.95, alias="INFERENCE_TOP_P",
        description="Default nucleus sampling top_p.",
    )
    inference_stream_usage: bool = Field(
        True, alias="INFERENCE_STREAM_USAGE",
        description="Ask the provider to append a token usage chunk to chat streams.",
    )
    title_model_name: str = Field(
        "", alias="TITLE_MODEL_NAME",
        description="Model used for conversation title generation. Empty = same as INFERENCE_MODEL_NAME.",
    )

    # Reasoning delimiters
    think_start_tag: str = Field(
        "<think>", alias="THINK_START_TAG",
        description="Literal marker opening the reasoning span in the model output.",
    )
    think_end_tag: str = Field(
        "</think>", alias="THINK_END_TAG",
        description="Literal marker closing the reasoning span in the model output.",
    )

    # Server
    host: str = Field(
        "0.0.0.0", alias="HOST",
        description="Host address to bind the aiohttp server to.",
    )
    port: int = Field(
        8080, alias="PORT",
        description="Port number for the aiohttp server.",
    )

    # Logging
    log_level: str = Field(
        "INFO", alias="LOG_LEVEL",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL.",
    )
    log_file: str = Field(
        "", alias="LOG_FILE",
        description="Path to log file for file-based logging with rotation. Empty = console only.",
    )
    log_file_max_bytes: int = Field(
        10_485_760, alias="LOG_FILE_MAX_BYTES",
        description="Max size in bytes per log file before rotation. Default: 10 MB.",
    )
    log_file_backup_count: int = Field(
        5, alias="LOG_FILE_BACKUP_COUNT",
        description="Number of rotated backup log files to keep.",
    )

    @property
    def inference_enabled(self) -> bool:
        return bool(self.inference_api_url and self.inference_api_key)

    def delimiters(self) -> DelimiterPair:
        """Build the reasoning delimiter pair from the configured tags."""
        return DelimiterPair(start=self.think_start_tag, end=self.think_end_tag)


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()

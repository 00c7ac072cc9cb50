"""Data models for the reasoning/answer stream splitter."""

import enum
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Channel = Literal["thinking", "answer"]


class Phase(enum.Enum):
    """Position of the stream relative to the reasoning span."""

    BEFORE_THINKING = "before_thinking"
    IN_THINKING = "in_thinking"
    AFTER_THINKING = "after_thinking"


@dataclass(slots=True)
class ClassifiedEvent:
    """A piece of model output tagged with the channel it belongs to."""

    channel: Channel
    content: str

    def to_payload(self) -> dict:
        return {"type": self.channel, "content": self.content}


@dataclass(frozen=True, slots=True)
class SplitterState:
    """Session state of one streamed response.

    ``pending`` holds raw text that may still turn out to be the start of a
    delimiter. ``thinking`` and ``answer`` hold everything classified so far.
    """

    phase: Phase = Phase.BEFORE_THINKING
    pending: str = ""
    thinking: str = ""
    answer: str = ""


class DelimiterPair(BaseModel):
    """Start/end markers wrapping the reasoning span."""

    model_config = ConfigDict(frozen=True)

    start: str = Field("<think>", min_length=1, description="Opens the reasoning span")
    end: str = Field("</think>", min_length=1, description="Closes the reasoning span")


class SplitResult(BaseModel):
    """Final thinking/answer pair of a completed response."""

    thinking: str
    answer: str
    has_thinking: bool

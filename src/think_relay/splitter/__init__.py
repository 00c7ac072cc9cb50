"""Reasoning/answer stream splitter."""

from think_relay.splitter.classifier import (
    ClassifierClosedError,
    StreamClassifier,
    flush,
    split_reasoning,
    transition,
)
from think_relay.splitter.models import (
    ClassifiedEvent,
    DelimiterPair,
    Phase,
    SplitResult,
    SplitterState,
)

__all__ = [
    "ClassifierClosedError",
    "StreamClassifier",
    "flush",
    "split_reasoning",
    "transition",
    "ClassifiedEvent",
    "DelimiterPair",
    "Phase",
    "SplitResult",
    "SplitterState",
]

"""Incremental splitter for reasoning models that inline their thinking.

Models such as DeepSeek R1 stream their reasoning trace and their final
answer through the same text channel, wrapping the reasoning in a
``<think>...</think>`` pair. Fragments arrive with arbitrary boundaries, so a
delimiter can be cut anywhere, e.g. ``["<thi", "nk>Let me check"]``.

The splitter is a plain state machine: ``transition`` and ``flush`` are pure
functions over ``SplitterState``; ``StreamClassifier`` owns one state for one
in-flight response and adds the finish/close bookkeeping.
"""

import structlog

from think_relay.splitter.models import (
    Channel,
    ClassifiedEvent,
    DelimiterPair,
    Phase,
    SplitResult,
    SplitterState,
)

logger = structlog.get_logger()


class ClassifierClosedError(RuntimeError):
    """Raised when a finished classifier is fed again."""


def _held_suffix_length(text: str, delimiter: str) -> int:
    """Length of the longest suffix of ``text`` that is a strict prefix of ``delimiter``."""
    for size in range(min(len(delimiter) - 1, len(text)), 0, -1):
        if delimiter.startswith(text[-size:]):
            return size
    return 0


def _emit(events: list[ClassifiedEvent], channel: Channel, content: str) -> None:
    if content:
        events.append(ClassifiedEvent(channel=channel, content=content))


def transition(
    state: SplitterState,
    fragment: str,
    delimiters: DelimiterPair,
) -> tuple[SplitterState, list[ClassifiedEvent]]:
    """Advance ``state`` by one fragment.

    Only the first start delimiter and the first end delimiter after it are
    acted on. Text that could still be the beginning of the delimiter the
    current phase is waiting for stays in ``pending``; everything else is
    classified and returned as events, in stream order.

    Args:
        state: Current session state (not modified).
        fragment: Next raw text fragment from the transport.
        delimiters: The start/end pair to split on.

    Returns:
        The new state and the events produced by this fragment.
    """
    events: list[ClassifiedEvent] = []
    phase = state.phase
    thinking = state.thinking
    answer = state.answer
    buf = state.pending + fragment

    if phase is Phase.BEFORE_THINKING:
        idx = buf.find(delimiters.start)
        if idx == -1:
            cut = len(buf) - _held_suffix_length(buf, delimiters.start)
            _emit(events, "answer", buf[:cut])
            return SplitterState(phase, buf[cut:], thinking, answer + buf[:cut]), events

        _emit(events, "answer", buf[:idx])
        answer += buf[:idx]
        buf = buf[idx + len(delimiters.start):]
        phase = Phase.IN_THINKING

    if phase is Phase.IN_THINKING:
        idx = buf.find(delimiters.end)
        if idx == -1:
            cut = len(buf) - _held_suffix_length(buf, delimiters.end)
            _emit(events, "thinking", buf[:cut])
            return SplitterState(phase, buf[cut:], thinking + buf[:cut], answer), events

        _emit(events, "thinking", buf[:idx])
        thinking += buf[:idx]
        buf = buf[idx + len(delimiters.end):]
        phase = Phase.AFTER_THINKING

    # After the reasoning span nothing is withheld.
    _emit(events, "answer", buf)
    return SplitterState(phase, "", thinking, answer + buf), events


def flush(state: SplitterState) -> tuple[SplitterState, list[ClassifiedEvent]]:
    """Release withheld text as whatever the current phase implies."""
    events: list[ClassifiedEvent] = []
    if not state.pending:
        return state, events

    if state.phase is Phase.IN_THINKING:
        _emit(events, "thinking", state.pending)
        return SplitterState(state.phase, "", state.thinking + state.pending, state.answer), events

    _emit(events, "answer", state.pending)
    return SplitterState(state.phase, "", state.thinking, state.answer + state.pending), events


class StreamClassifier:
    """Splits one streamed model response into thinking and answer events.

    One instance per in-flight response. Feed fragments in arrival order with
    ``accept``; call ``finish`` exactly once when the transport signals the end
    of the stream. Instances are not thread-safe and are never reused.
    """

    def __init__(self, delimiters: DelimiterPair | None = None) -> None:
        self._delimiters = delimiters or DelimiterPair()
        self._state = SplitterState()
        self._closed = False

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def state(self) -> SplitterState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def accept(self, fragment: str) -> list[ClassifiedEvent]:
        """Classify the next fragment.

        Returns:
            Events ready to forward, possibly empty when the fragment only
            extends a delimiter candidate.

        Raises:
            ClassifierClosedError: If ``finish`` was already called.
        """
        self._check_open("accept")
        previous = self._state.phase
        self._state, events = transition(self._state, fragment, self._delimiters)
        if self._state.phase is not previous:
            logger.debug(
                "splitter_phase_changed",
                from_phase=previous.value,
                to_phase=self._state.phase.value,
                thinking_length=len(self._state.thinking),
                answer_length=len(self._state.answer),
            )
        return events

    def flush(self) -> list[ClassifiedEvent]:
        """Release withheld text as events without closing the classifier.

        Used by callers that forward the tail of the stream before ``finish``.
        """
        self._check_open("flush")
        self._state, events = flush(self._state)
        return events

    def finish(self) -> SplitResult:
        """Flush withheld text and return the trimmed thinking/answer pair.

        ``has_thinking`` is true only when the trimmed reasoning is non-empty,
        so ``<think></think>Hello`` reports no thinking.

        Raises:
            ClassifierClosedError: If called more than once.
        """
        self._check_open("finish")
        self._state, _ = flush(self._state)
        self._closed = True

        thinking = self._state.thinking.strip()
        answer = self._state.answer.strip()
        logger.debug(
            "splitter_finished",
            phase=self._state.phase.value,
            thinking_length=len(thinking),
            answer_length=len(answer),
        )
        return SplitResult(thinking=thinking, answer=answer, has_thinking=bool(thinking))

    def _check_open(self, operation: str) -> None:
        if self._closed:
            raise ClassifierClosedError(f"{operation}() called after finish()")


def split_reasoning(text: str, delimiters: DelimiterPair | None = None) -> SplitResult:
    """Split a complete, non-streamed response."""
    classifier = StreamClassifier(delimiters)
    classifier.accept(text)
    return classifier.finish()

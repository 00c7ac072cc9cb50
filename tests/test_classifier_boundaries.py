"""Fragmentation invariance: results must not depend on where fragments split."""

import pytest

from think_relay.splitter import StreamClassifier, split_reasoning

REASONING_TEXT = "Preamble <think>Step 1. Compare a < b.\nStep 2.</think>Final answer: 42"
PLAIN_TEXT = "No reasoning here, just a < b and </thin and <thinking about it>."


def _run(fragments):
    """Feed fragments, returning (events, result, max pending length)."""
    classifier = StreamClassifier()
    events = []
    max_pending = 0
    for fragment in fragments:
        events.extend(classifier.accept(fragment))
        max_pending = max(max_pending, len(classifier.state.pending))
    events.extend(classifier.flush())
    return events, classifier.finish(), max_pending


def _two_cut_splits(text):
    """Every way to cut text into three fragments (empty fragments included)."""
    for i in range(len(text) + 1):
        for j in range(i, len(text) + 1):
            yield [text[:i], text[i:j], text[j:]]


def _joined(events, channel):
    return "".join(e.content for e in events if e.channel == channel)


@pytest.mark.parametrize("text", [REASONING_TEXT, PLAIN_TEXT])
def test_every_two_cut_split_matches_single_fragment(text):
    """Splitting at any pair of boundaries, mid-delimiter included, changes nothing."""
    expected = split_reasoning(text)

    for fragments in _two_cut_splits(text):
        _, result, _ = _run(fragments)
        assert result == expected, fragments


@pytest.mark.parametrize("text", [REASONING_TEXT, PLAIN_TEXT])
def test_character_by_character_matches_single_fragment(text):
    _, result, _ = _run(list(text))
    assert result == split_reasoning(text)


def test_events_concatenate_to_channels():
    """Joined events equal the untrimmed thinking and answer text."""
    events, _, _ = _run(list(REASONING_TEXT))

    assert _joined(events, "thinking") == "Step 1. Compare a < b.\nStep 2."
    assert _joined(events, "answer") == "Preamble Final answer: 42"


def test_no_delimiter_passthrough_for_every_split():
    """Without delimiters all text comes out as answer, never as thinking."""
    for fragments in _two_cut_splits(PLAIN_TEXT):
        events, result, _ = _run(fragments)
        assert _joined(events, "answer") == PLAIN_TEXT
        assert _joined(events, "thinking") == ""
        assert result.has_thinking is False


def test_pending_is_bounded_by_delimiter_length():
    """Withheld text never exceeds the longest delimiter minus one."""
    bound = len("</think>") - 1

    for fragments in _two_cut_splits(REASONING_TEXT):
        _, _, max_pending = _run(fragments)
        assert max_pending <= bound


def test_repeated_angle_brackets_before_tag():
    """'<<think>' opens reasoning after one literal '<'."""
    for fragments in ([c for c in "<<think>x</think>y"], ["<<think>x</think>y"]):
        events, result, _ = _run(fragments)
        assert result.answer == "<y"
        assert result.thinking == "x"
        assert _joined(events, "answer") == "<y"


def test_false_end_tag_prefix_inside_thinking():
    """'</thin' followed by a real end tag keeps the false prefix as thinking."""
    _, result, _ = _run(list("<think>a</thin</think>b"))
    assert result.thinking == "a</thin"
    assert result.answer == "b"

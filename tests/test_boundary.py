"""Tests for boundary parsing and window resolution."""

import pytest

from ctxstash.messages import message_has_text_content, ends_with_assistant_text
from ctxstash.strategies.boundary import (
    All,
    KeepFirst,
    KeepLast,
    SinceLastTurn,
    Window,
    parse_boundary,
    resolve_window,
)


def conversation(length):
    """Alternate tool/assistant messages, ending with assistant text."""
    messages = []
    for i in range(length - 1):
        if i % 2 == 0:
            messages.append({"role": "tool", "content": []})
        else:
            messages.append({"role": "assistant", "content": f"step {i}"})
    messages.append({"role": "assistant", "content": "final"})
    return messages


class TestResolveWindow:
    """Window algebra for every boundary variant."""

    def test_short_conversations_have_empty_window(self):
        for boundary in (All(), KeepFirst(3), KeepLast(1), SinceLastTurn()):
            assert resolve_window([], boundary) == Window(0, 0)
            assert resolve_window(conversation(1), boundary) == Window(0, 0)

    def test_all_excludes_final_message(self):
        assert resolve_window(conversation(5), All()) == Window(0, 4)

    @pytest.mark.parametrize("length", [2, 3, 7])
    def test_keep_first_zero_equals_all(self, length):
        messages = conversation(length)
        assert resolve_window(messages, KeepFirst(0)) == resolve_window(messages, All())

    @pytest.mark.parametrize("length", [2, 3, 7])
    def test_keep_last_everything_is_empty(self, length):
        messages = conversation(length)
        assert resolve_window(messages, KeepLast(length)) == Window(0, 0)

    def test_keep_first(self):
        messages = conversation(5)
        assert resolve_window(messages, KeepFirst(2)) == Window(2, 4)
        # Clamped so the window never reaches the final message
        assert resolve_window(messages, KeepFirst(10)) == Window(4, 4)
        # Fractional counts are floored, negative ones clamp to zero
        assert resolve_window(messages, KeepFirst(2.9)) == Window(2, 4)
        assert resolve_window(messages, KeepFirst(-3)) == Window(0, 4)

    def test_keep_last(self):
        messages = conversation(5)
        assert resolve_window(messages, KeepLast(0)) == Window(0, 4)
        assert resolve_window(messages, KeepLast(1)) == Window(0, 4)
        assert resolve_window(messages, KeepLast(2)) == Window(0, 3)
        assert resolve_window(messages, KeepLast(99)) == Window(0, 0)

    def test_non_finite_counts_treated_as_zero(self):
        messages = conversation(5)
        assert resolve_window(messages, KeepFirst(float("nan"))) == Window(0, 4)
        assert resolve_window(messages, KeepLast(float("inf"))) == Window(0, 4)

    def test_since_last_turn(self):
        messages = [
            {"role": "tool", "content": []},
            {"role": "assistant", "content": "Response"},
            {"role": "tool", "content": []},
            {"role": "tool", "content": []},
            {"role": "assistant", "content": "Final"},
        ]
        assert resolve_window(messages, SinceLastTurn()) == Window(2, 4)

    def test_since_last_turn_ignores_empty_text(self):
        messages = [
            {"role": "user", "content": "Question"},
            {"role": "tool", "content": []},
            {"role": "assistant", "content": [{"type": "text", "text": ""}]},
            {"role": "tool", "content": []},
            {"role": "assistant", "content": "Final"},
        ]
        assert resolve_window(messages, SinceLastTurn()) == Window(1, 4)

    def test_since_last_turn_without_text_starts_at_zero(self):
        messages = [
            {"role": "tool", "content": []},
            {"role": "tool", "content": []},
            {"role": "assistant", "content": "Final"},
        ]
        assert resolve_window(messages, SinceLastTurn()) == Window(0, 2)

    def test_unknown_boundary_object(self):
        with pytest.raises(TypeError):
            resolve_window(conversation(3), "all")

    def test_input_is_not_modified(self):
        messages = conversation(4)
        snapshot = [dict(m) for m in messages]
        resolve_window(messages, SinceLastTurn())
        assert messages == snapshot


class TestParseBoundary:
    """Configuration forms accepted for boundaries."""

    def test_strings(self):
        assert parse_boundary("all") == All()
        assert parse_boundary("entire-conversation") == All()
        assert parse_boundary("last-turn") == SinceLastTurn()
        assert parse_boundary("since-last-assistant-or-user-text") == SinceLastTurn()

    def test_dicts(self):
        assert parse_boundary({"type": "keep-first", "count": 2}) == KeepFirst(2)
        assert parse_boundary({"type": "first-n-messages", "count": 3}) == KeepFirst(3)
        assert parse_boundary({"type": "keep-last", "count": 1}) == KeepLast(1)

    def test_instances_pass_through(self):
        boundary = KeepLast(4)
        assert parse_boundary(boundary) is boundary

    def test_unknown_values(self):
        with pytest.raises(ValueError):
            parse_boundary("everything")
        with pytest.raises(ValueError):
            parse_boundary({"type": "middle", "count": 1})
        with pytest.raises(ValueError):
            parse_boundary(None)


class TestTextDetection:
    """Helpers used by the boundary scan and the entry guard."""

    def test_message_has_text_content(self):
        assert message_has_text_content({"content": "Hello"})
        assert message_has_text_content({"content": [{"type": "text", "text": "Hello"}]})
        assert not message_has_text_content({"content": ""})
        assert not message_has_text_content({"content": [{"type": "image", "url": "..."}]})
        assert not message_has_text_content({"role": "tool"})
        assert not message_has_text_content(None)

    def test_ends_with_assistant_text(self):
        assert ends_with_assistant_text([{"role": "assistant", "content": "done"}])
        assert not ends_with_assistant_text([])
        assert not ends_with_assistant_text([{"role": "user", "content": "hi"}])
        assert not ends_with_assistant_text(
            [{"role": "assistant", "content": [{"type": "tool-call", "toolName": "f1"}]}]
        )

    def test_empty_string_reply_passes_entry_guard(self):
        assert ends_with_assistant_text([{"role": "assistant", "content": ""}])
        assert not ends_with_assistant_text(
            [{"role": "assistant", "content": [{"type": "text", "text": ""}]}]
        )
        # The turn scan still needs non-empty text
        assert not message_has_text_content({"role": "assistant", "content": ""})

"""Boundary selection: which part of a message list may be compacted."""

import math
from dataclasses import dataclass
from typing import Any, List, NamedTuple, Union

from ..messages import Message, message_has_text_content


@dataclass(frozen=True)
class All:
    """Compact everything except the final message."""


@dataclass(frozen=True)
class KeepFirst:
    """Keep the first ``count`` messages intact and compact the rest."""

    count: float


@dataclass(frozen=True)
class KeepLast:
    """Keep the last ``count`` messages intact and compact everything before them."""

    count: float


@dataclass(frozen=True)
class SinceLastTurn:
    """Compact only what follows the most recent user/assistant text message."""


Boundary = Union[All, KeepFirst, KeepLast, SinceLastTurn]


class Window(NamedTuple):
    """Half-open ``[start, end_exclusive)`` range of compactable indices."""

    start: int
    end_exclusive: int


_STRING_BOUNDARIES = {
    "all": All(),
    "entire-conversation": All(),
    "last-turn": SinceLastTurn(),
    "since-last-assistant-or-user-text": SinceLastTurn(),
}


def parse_boundary(value: Any) -> Boundary:
    """
    Decode a boundary given as an instance, a string or a ``{"type", "count"}`` dict.

    Accepted strings: ``all``, ``entire-conversation``, ``last-turn``,
    ``since-last-assistant-or-user-text``. Accepted dict types: ``keep-first``
    (alias ``first-n-messages``) and ``keep-last``.

    Raises:
        ValueError: If the value names no known boundary
    """
    if isinstance(value, (All, KeepFirst, KeepLast, SinceLastTurn)):
        return value

    if isinstance(value, str):
        if value in _STRING_BOUNDARIES:
            return _STRING_BOUNDARIES[value]
        raise ValueError(f"Unknown boundary: {value!r}")

    if isinstance(value, dict):
        boundary_type = value.get("type")
        count = value.get("count", 0)
        if boundary_type in ("keep-first", "first-n-messages"):
            return KeepFirst(count=count)
        if boundary_type == "keep-last":
            return KeepLast(count=count)

    raise ValueError(f"Unknown boundary: {value!r}")


def _normalize_count(count: Any) -> int:
    if isinstance(count, bool) or not isinstance(count, (int, float)):
        return 0
    if not math.isfinite(count):
        return 0
    return max(0, math.floor(count))


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def detect_since_last_turn_start(messages: List[Message]) -> int:
    """
    Index just after the most recent user/assistant message with text,
    scanning backward from the second-to-last message; 0 if there is none.
    """
    for i in range(len(messages) - 2, -1, -1):
        msg = messages[i]
        if msg and msg.get("role") in ("assistant", "user") and message_has_text_content(msg):
            return i + 1
    return 0


def resolve_window(messages: List[Message], boundary: Boundary) -> Window:
    """
    Determine the ``[start, end_exclusive)`` window for compaction.

    The final message is never part of the window: it is the live assistant
    reply. Pure function; ``messages`` is not modified.

    Raises:
        TypeError: If ``boundary`` is not one of the Boundary variants
    """
    length = len(messages)
    if length <= 1:
        return Window(0, 0)

    last = length - 1

    if isinstance(boundary, All):
        return Window(0, last)

    if isinstance(boundary, KeepFirst):
        k = _clamp(_normalize_count(boundary.count), 0, last)
        return Window(k, max(k, last))

    if isinstance(boundary, KeepLast):
        k = _clamp(_normalize_count(boundary.count), 0, length)
        return Window(0, _clamp(length - k, 0, last))

    if isinstance(boundary, SinceLastTurn):
        return Window(detect_since_last_turn_start(messages), last)

    raise TypeError(f"Unsupported boundary: {boundary!r}")

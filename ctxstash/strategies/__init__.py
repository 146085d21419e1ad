"""Compaction strategies for ctx-stash."""

from .boundary import (
    All,
    Boundary,
    KeepFirst,
    KeepLast,
    SinceLastTurn,
    Window,
    detect_since_last_turn_start,
    parse_boundary,
    resolve_window,
)
from .write_tool_results import (
    DEFAULT_READER_TOOL_NAMES,
    KeyPolicy,
    WriteToolResultsToStorageOptions,
    default_serializer,
    write_tool_results_to_storage_strategy,
)

__all__ = [
    "All",
    "Boundary",
    "KeepFirst",
    "KeepLast",
    "SinceLastTurn",
    "Window",
    "detect_since_last_turn_start",
    "parse_boundary",
    "resolve_window",
    "DEFAULT_READER_TOOL_NAMES",
    "KeyPolicy",
    "WriteToolResultsToStorageOptions",
    "default_serializer",
    "write_tool_results_to_storage_strategy",
]

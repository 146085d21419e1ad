"""
ctx-stash: compact large tool-call results in conversation histories.

Large tool outputs are persisted to storage and replaced with short
references; reader tools fetch them back, but only for keys that compaction
actually produced.
"""

from .compact import CompactOptions, compact_messages, compact_messages_sync
from .adapters.base import StorageAdapter
from .adapters.filesystem import FileStorageAdapter
from .storage.known_keys import KnownKeyRegistry
from .storage.references import ReferenceKind, format_reference, parse_reference
from .strategies.boundary import All, KeepFirst, KeepLast, SinceLastTurn, resolve_window
from .strategies.write_tool_results import KeyPolicy
from .tools.reader import ReadFileOptions, create_read_file_tool, read_file
from .tools.grep import GrepAndSearchFileOptions, create_grep_and_search_file_tool, grep_and_search_file

__version__ = "0.1.0"

__all__ = [
    "compact_messages",
    "compact_messages_sync",
    "CompactOptions",
    "StorageAdapter",
    "FileStorageAdapter",
    "KnownKeyRegistry",
    "ReferenceKind",
    "format_reference",
    "parse_reference",
    "All",
    "KeepFirst",
    "KeepLast",
    "SinceLastTurn",
    "resolve_window",
    "KeyPolicy",
    "read_file",
    "ReadFileOptions",
    "create_read_file_tool",
    "grep_and_search_file",
    "GrepAndSearchFileOptions",
    "create_grep_and_search_file_tool",
]

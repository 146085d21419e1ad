"""Storage utilities for ctx-stash."""

from .known_keys import KnownKeyRegistry
from .resolver import (
    UriOrAdapter,
    create_storage_adapter,
    describe_storage,
    resolve_file_uri_from_base_dir,
)
from .grep import GrepResultLine, compile_pattern, grep_object, grep_text
from .references import (
    ParsedReference,
    ReferenceKind,
    format_read_fallback,
    format_reference,
    format_storage_path_for_display,
    is_reference,
    parse_reference,
)

__all__ = [
    "KnownKeyRegistry",
    "UriOrAdapter",
    "create_storage_adapter",
    "describe_storage",
    "resolve_file_uri_from_base_dir",
    "GrepResultLine",
    "compile_pattern",
    "grep_object",
    "grep_text",
    "ParsedReference",
    "ReferenceKind",
    "format_read_fallback",
    "format_reference",
    "format_storage_path_for_display",
    "is_reference",
    "parse_reference",
]

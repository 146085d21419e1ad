"""Grep and search tool for finding patterns in stored content."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..storage.grep import compile_pattern, grep_object
from .reader import UNKNOWN_KEY_MESSAGE, StorageToolOptions, is_known_key

logger = logging.getLogger(__name__)

TOOL_NAME = "grepAndSearchFile"


@dataclass
class GrepAndSearchFileOptions(StorageToolOptions):
    """Options for the grep and search file tool."""


DEFAULT_DESCRIPTION = """
Search for a pattern in a file that was previously written to storage.
Use the 'key' parameter with the value shown in 'Written to ... Key: <key>' messages.
Provide a regex pattern to search for, and optional flags (i for case-insensitive, m for multiline, s for dotall).
Returns matching lines with line numbers.
"""


def grep_and_search_file(
    key: str,
    pattern: str,
    flags: Optional[str] = None,
    options: Optional[GrepAndSearchFileOptions] = None,
) -> Dict[str, Any]:
    """
    Search for a pattern in a file that was previously written to storage.

    Args:
        key: The storage key to search (as provided in 'Key: <key>' messages)
        pattern: Regular expression pattern to search for
        flags: Optional regex flags (e.g., 'i' for case-insensitive, 'm' for multiline)
        options: Optional configuration for the tool

    Returns:
        Dictionary containing:
        - key, pattern, flags: Echo of the request
        - matches: List of {'line_number', 'content'} (absent on error)
        - content: Refusal or error text (only on error)
        - storage: The storage URI

    Example:
        >>> result = grep_and_search_file(key, r'"status":\\s*"error"', flags="i", options=options)
        >>> for match in result.get("matches", []):
        ...     print(f"{match['line_number']}: {match['content']}")
    """
    if options is None:
        options = GrepAndSearchFileOptions()

    echo = {"key": key, "pattern": pattern, "flags": flags or ""}

    try:
        regex = compile_pattern(pattern, flags)
    except re.error as e:
        return {**echo, "content": f"Invalid regex: {e}"}

    storage_uri = None
    try:
        storage_uri = options.storage_uri()

        if not is_known_key(options, storage_uri, key):
            logger.warning("Refused search of unknown key %r on %s", key, storage_uri)
            return {**echo, "content": UNKNOWN_KEY_MESSAGE, "storage": storage_uri or "unknown"}

        matches = grep_object(options.get_adapter(), key, regex)

        return {
            **echo,
            "matches": [{"line_number": m.line_number, "content": m.content} for m in matches],
            "storage": storage_uri,
        }

    except Exception as e:
        logger.warning("Failed to search %r: %s", key, e)
        return {
            **echo,
            "content": (
                f"Error searching file: {e}. Make sure the key is correct and the file exists. "
                "If needed, re-run the producing tool to persist and get a key."
            ),
            "storage": storage_uri or "unknown",
        }


def create_grep_and_search_file_tool(options: Optional[GrepAndSearchFileOptions] = None):
    """
    Create a grep and search file tool function with the given options.

    Returns:
        A function named ``grepAndSearchFile`` taking ``key``, ``pattern`` and ``flags``
    """
    if options is None:
        options = GrepAndSearchFileOptions()

    def tool_fn(key: str, pattern: str, flags: Optional[str] = None) -> Dict[str, Any]:
        return grep_and_search_file(key, pattern, flags, options)

    tool_fn.__name__ = TOOL_NAME
    tool_fn.__doc__ = options.description or DEFAULT_DESCRIPTION

    return tool_fn

"""Read file tool for retrieving content from storage."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..adapters.base import StorageAdapter, StorageReadParams
from ..adapters.filesystem import FileStorageAdapter
from ..storage.known_keys import KnownKeyRegistry
from ..storage.resolver import (
    UriOrAdapter,
    create_storage_adapter,
    describe_storage,
    resolve_file_uri_from_base_dir,
)

logger = logging.getLogger(__name__)

TOOL_NAME = "readFile"

UNKNOWN_KEY_MESSAGE = (
    "Tool cannot be used: unknown key. Use a key previously surfaced via "
    "'Written to ... Key: <key>' or 'Read from file ... Key: <key>'. "
    "If none exists, re-run the producing tool to persist and get a key."
)

RETRY_HINT = (
    "Are you sure the storage is correct? If yes, make the original "
    "tool call again with the same arguments instead of relying on "
    "readFile or grepAndSearchFile."
)


@dataclass
class StorageToolOptions:
    """Options shared by the tools that read from storage."""

    description: Optional[str] = None
    """Custom description for the tool."""

    base_dir: Optional[str] = None
    """Base directory for file storage (if using filesystem adapter)."""

    storage: UriOrAdapter = None
    """Storage to read from. Accepts URI or adapter; takes precedence over base_dir."""

    known_keys: KnownKeyRegistry = field(default_factory=KnownKeyRegistry)
    """Registry filled by compaction. Keys absent from it are refused."""

    _adapter: Optional[StorageAdapter] = field(default=None, init=False, repr=False, compare=False)

    def storage_uri(self) -> Optional[str]:
        """URI the registry is keyed by, worked out without touching storage."""
        if self.storage:
            return describe_storage(self.storage)
        if self.base_dir:
            return resolve_file_uri_from_base_dir(self.base_dir)
        return None

    def get_adapter(self) -> StorageAdapter:
        """Build the adapter on first use and keep it for later calls."""
        if self._adapter is None:
            if self.storage:
                self._adapter = create_storage_adapter(self.storage)
            else:
                self._adapter = FileStorageAdapter(base_dir=self.base_dir)
        return self._adapter


@dataclass
class ReadFileOptions(StorageToolOptions):
    """Options for the read file tool."""


DEFAULT_DESCRIPTION = """
Read a file that was previously written to storage during this conversation.
Use the 'key' parameter with the value shown in 'Written to ... Key: <key>' messages.
This tool can only read files that were written during the current conversation.
"""


def is_known_key(options: StorageToolOptions, storage_uri: Optional[str], key: str) -> bool:
    return storage_uri is not None and options.known_keys.is_known(storage_uri, key)


def read_file(key: str, options: Optional[ReadFileOptions] = None) -> Dict[str, Any]:
    """
    Read a file from storage that was previously written during this conversation.

    Refusals and read failures are returned as ordinary tool output so the
    calling model can react; nothing here raises. A refused key never reaches
    the storage adapter.

    Args:
        key: The storage key to read (as provided in 'Key: <key>' messages)
        options: Optional configuration for the tool

    Returns:
        Dictionary containing:
        - key: The requested key
        - content: The file content (or a refusal/error message)
        - storage: The storage URI

    Example:
        >>> result = read_file("session-1/tool-results/search.json", options)
        >>> print(result["content"])
    """
    if options is None:
        options = ReadFileOptions()

    storage_uri = None
    try:
        storage_uri = options.storage_uri()

        if not is_known_key(options, storage_uri, key):
            logger.warning("Refused read of unknown key %r on %s", key, storage_uri)
            return {"key": key, "content": UNKNOWN_KEY_MESSAGE, "storage": storage_uri or "unknown"}

        adapter = options.get_adapter()
        read_text = getattr(adapter, "read_text", None)
        if read_text is None:
            return {
                "key": key,
                "content": f"No read_text method found in storage adapter. {RETRY_HINT}",
                "storage": storage_uri,
            }

        content = read_text(StorageReadParams(key=key))
        return {"key": key, "content": content, "storage": storage_uri}

    except Exception as e:
        logger.warning("Failed to read %r: %s", key, e)
        return {
            "key": key,
            "content": f"Error reading file: {e}. {RETRY_HINT}",
            "storage": storage_uri or "unknown",
        }


def create_read_file_tool(options: Optional[ReadFileOptions] = None):
    """
    Create a read file tool function with the given options.

    This factory function is useful for frameworks that need a callable tool.
    Every call of the returned function shares one storage adapter.

    Returns:
        A function named ``readFile`` taking a ``key``
    """
    if options is None:
        options = ReadFileOptions()

    def tool_fn(key: str) -> Dict[str, Any]:
        return read_file(key, options)

    tool_fn.__name__ = TOOL_NAME
    tool_fn.__doc__ = options.description or DEFAULT_DESCRIPTION

    return tool_fn

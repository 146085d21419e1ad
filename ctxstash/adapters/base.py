"""Base storage adapter protocol and types."""

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import IO, List, Optional, Protocol, Union

TOOL_RESULTS_DIR = "tool-results"


@dataclass
class StorageWriteParams:
    """Parameters for writing to storage."""

    key: str
    body: Union[str, bytes]
    content_type: Optional[str] = None


@dataclass
class StorageReadParams:
    """Parameters for reading from storage."""

    key: str


@dataclass
class StorageWriteResult:
    """Result of a storage write operation."""

    key: str
    url: Optional[str] = None


class StorageAdapter(Protocol):
    """
    Protocol for storage adapters that persist and retrieve content.

    The compaction engine only needs ``resolve_key``, ``write`` and ``__str__``.
    ``read_text`` is used by the reader tools and may be missing on write-only
    backends.
    """

    def write(self, params: StorageWriteParams) -> StorageWriteResult:
        """
        Write content to storage. Must be durable before returning.

        Args:
            params: Write parameters including key, body, and optional content type

        Returns:
            StorageWriteResult with the key and optional URL
        """
        ...

    def resolve_key(self, name: str) -> str:
        """
        Resolve a logical name to a fully-qualified storage key.

        Implementations strip path traversal and fold in their prefix and
        session id, so the same name always maps to the same key.
        """
        ...

    def __str__(self) -> str:
        """
        Return a stable URI identifying this storage.

        Examples:
            - "file:///base/path"
            - "s3://bucket/prefix"
            - "sandbox://sbx-123"
        """
        ...


def sanitize_key_name(name: str) -> str:
    """
    Normalize a logical name into a relative key path.

    Backslashes become slashes, and empty, ``.`` and ``..`` segments are
    dropped so the name can never climb out of the adapter's namespace.
    """
    segments = name.replace("\\", "/").split("/")
    return "/".join(s for s in segments if s not in ("", ".", ".."))


def build_key(name: str, prefix: Optional[str] = None, session_id: Optional[str] = None) -> str:
    """Build ``[prefix/][session_id/tool-results/]name`` from a logical name."""
    parts: List[str] = []
    if prefix:
        prefix_clean = prefix.strip("/")
        if prefix_clean:
            parts.append(prefix_clean)
    if session_id:
        parts.extend([sanitize_key_name(session_id), TOOL_RESULTS_DIR])
    parts.append(sanitize_key_name(name))
    return "/".join(parts)


class BaseStorageAdapter(ABC):
    """Abstract base class for storage adapters with common functionality."""

    prefix: str = ""
    session_id: Optional[str] = None

    @abstractmethod
    def write(self, params: StorageWriteParams) -> StorageWriteResult:
        """Write content to storage."""

    @abstractmethod
    def read_text(self, params: StorageReadParams) -> str:
        """Read text content from storage."""

    def open_read_stream(self, params: StorageReadParams) -> IO[bytes]:
        """
        Default implementation that reads all text and returns a BytesIO stream.
        Subclasses should override for more efficient streaming.
        """
        text = self.read_text(params)
        return io.BytesIO(text.encode("utf-8"))

    def resolve_key(self, name: str) -> str:
        """Resolve a logical name to a storage key."""
        return build_key(name, prefix=self.prefix, session_id=self.session_id)

    @abstractmethod
    def __str__(self) -> str:
        """Return a human-readable identifier."""

"""Filesystem storage adapter implementation."""

import logging
import os
from pathlib import Path
from typing import IO, Optional, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

from .base import BaseStorageAdapter, StorageReadParams, StorageWriteParams, StorageWriteResult

logger = logging.getLogger(__name__)


class FileStorageAdapter(BaseStorageAdapter):
    """
    Storage adapter that persists content to the local filesystem.

    Keys resolve to ``[prefix/][session_id/tool-results/]name`` under
    ``base_dir``. The session id is part of the keys, not of ``str(adapter)``,
    so every session on the same directory shares one registry scope.
    """

    def __init__(
        self,
        base_dir: Union[str, Path],
        prefix: Optional[str] = None,
        session_id: Optional[str] = None,
    ):
        """
        Initialize a filesystem storage adapter.

        Args:
            base_dir: The base directory for storage (resolved to an absolute path)
            prefix: Optional subdirectory/prefix inside base_dir
            session_id: Optional session id folded into resolved keys
        """
        self.base_dir = Path(base_dir).resolve()
        self.prefix = prefix or ""
        self.session_id = session_id

        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _full_path(self, key: str) -> Path:
        full_path = (self.base_dir / key).resolve()
        if full_path != self.base_dir and self.base_dir not in full_path.parents:
            raise ValueError(f"Key escapes storage directory: {key}")
        return full_path

    def write(self, params: StorageWriteParams) -> StorageWriteResult:
        """Write content to a file."""
        full_path = self._full_path(params.key)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        if isinstance(params.body, str):
            full_path.write_text(params.body, encoding="utf-8")
        else:
            full_path.write_bytes(params.body)

        logger.debug("Wrote %s (%s)", full_path, params.content_type or "unknown type")
        return StorageWriteResult(key=params.key, url=full_path.as_uri())

    def read_text(self, params: StorageReadParams) -> str:
        """Read text content from a file."""
        full_path = self._full_path(params.key)

        if not full_path.is_file():
            raise FileNotFoundError(f"File not found: {params.key}")

        return full_path.read_text(encoding="utf-8")

    def open_read_stream(self, params: StorageReadParams) -> IO[bytes]:
        """Open a file stream for reading."""
        full_path = self._full_path(params.key)

        if not full_path.is_file():
            raise FileNotFoundError(f"File not found: {params.key}")

        return open(full_path, "rb")

    def __str__(self) -> str:
        """Return a file:// URI representation."""
        base_uri = self.base_dir.as_uri()
        if self.prefix:
            return f"{base_uri.rstrip('/')}/{self.prefix.strip('/')}"
        return base_uri


def file_uri_to_options(uri: str) -> dict:
    """
    Parse a file:// URI into FileStorageAdapter options.

    Args:
        uri: A file:// URI

    Returns:
        Dictionary with 'base_dir'

    Raises:
        ValueError: If the URI is not a valid file:// URI
    """
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise ValueError(f"Invalid file URI: {uri}")

    path = url2pathname(parsed.path)

    # url2pathname can return '\C:\path' on Windows
    if os.name == "nt" and path.startswith("\\"):
        path = path[1:]

    return {"base_dir": path}

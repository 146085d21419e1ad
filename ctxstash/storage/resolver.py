"""Storage adapter resolution and creation utilities."""

import tempfile
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse

from ..adapters.base import StorageAdapter
from ..adapters.filesystem import FileStorageAdapter, file_uri_to_options

UriOrAdapter = Optional[Union[str, StorageAdapter]]


def create_storage_adapter(
    uri_or_adapter: UriOrAdapter = None, session_id: Optional[str] = None
) -> StorageAdapter:
    """
    Create or return a storage adapter from a URI string or adapter instance.

    Args:
        uri_or_adapter: Either:
            - A URI string (e.g., "file:///path", "s3://bucket/prefix")
            - An existing StorageAdapter instance (returned unchanged)
            - None (defaults to a temp directory adapter)
        session_id: Session id folded into keys of adapters created here

    Returns:
        A StorageAdapter instance

    Raises:
        ValueError: If the URI scheme is not supported
    """
    if uri_or_adapter is not None and not isinstance(uri_or_adapter, str):
        return uri_or_adapter

    if uri_or_adapter is None:
        temp_dir = tempfile.mkdtemp(prefix="ctxstash_")
        return FileStorageAdapter(base_dir=temp_dir, session_id=session_id)

    uri = uri_or_adapter
    scheme = urlparse(uri).scheme.lower()

    if scheme == "file":
        return FileStorageAdapter(session_id=session_id, **file_uri_to_options(uri))
    elif scheme == "s3":
        from ..adapters.s3 import S3StorageAdapter, s3_uri_to_options

        return S3StorageAdapter(s3_uri_to_options(uri, session_id=session_id))
    elif scheme == "blob":
        raise NotImplementedError(
            f"Storage adapter for '{scheme}' not yet implemented. "
            f"Supported schemes are 'file://' and 's3://'."
        )
    else:
        raise ValueError(f"Unsupported storage URI scheme: {scheme or uri}")


def describe_storage(uri_or_adapter: UriOrAdapter) -> Optional[str]:
    """
    Return the URI an adapter for ``uri_or_adapter`` would report via ``str()``,
    without creating the adapter or touching storage.

    Returns None when no storage is given.

    Raises:
        ValueError: If the URI scheme is not supported
    """
    if uri_or_adapter is None:
        return None

    if not isinstance(uri_or_adapter, str):
        return str(uri_or_adapter)

    uri = uri_or_adapter
    scheme = urlparse(uri).scheme.lower()

    if scheme == "file":
        return resolve_file_uri_from_base_dir(file_uri_to_options(uri)["base_dir"])
    elif scheme == "s3":
        from ..adapters.s3 import s3_uri_to_options

        options = s3_uri_to_options(uri)
        if options.prefix:
            return f"s3://{options.bucket}/{options.prefix.strip('/')}"
        return f"s3://{options.bucket}"
    else:
        raise ValueError(f"Unsupported storage URI scheme: {scheme or uri}")


def resolve_file_uri_from_base_dir(base_dir: Union[str, Path]) -> str:
    """Create a file:// URI from a base directory path."""
    return Path(base_dir).resolve().as_uri()

"""Storage adapters for ctx-stash."""

from .base import (
    BaseStorageAdapter,
    StorageAdapter,
    StorageReadParams,
    StorageWriteParams,
    StorageWriteResult,
    build_key,
    sanitize_key_name,
)
from .filesystem import FileStorageAdapter, file_uri_to_options
from .s3 import S3StorageAdapter, S3StorageOptions, s3_uri_to_options
from .sandbox import CommandResult, SandboxFile, SandboxProvider, SandboxStorageAdapter

__all__ = [
    "BaseStorageAdapter",
    "StorageAdapter",
    "StorageReadParams",
    "StorageWriteParams",
    "StorageWriteResult",
    "build_key",
    "sanitize_key_name",
    "FileStorageAdapter",
    "file_uri_to_options",
    "S3StorageAdapter",
    "S3StorageOptions",
    "s3_uri_to_options",
    "CommandResult",
    "SandboxFile",
    "SandboxProvider",
    "SandboxStorageAdapter",
]

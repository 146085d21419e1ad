"""Track known storage keys for validation in reader tools."""

import threading
from typing import Set, Tuple


class KnownKeyRegistry:
    """
    In-process set of ``(storage_uri, key)`` pairs produced by compaction.

    A pair is registered when the compaction engine writes a tool result or
    mints a read reference. Reader tools consult the registry before touching
    storage so a model cannot make them open arbitrary keys. Nothing is
    persisted: a new process starts with an empty registry.

    Create one registry per process (or per session) and hand the same
    instance to ``CompactOptions`` and to the reader tool options.
    """

    def __init__(self) -> None:
        self._keys: Set[Tuple[str, str]] = set()
        self._lock = threading.Lock()

    def register(self, storage_uri: str, key: str) -> None:
        """
        Register a key as known for a given storage.

        Args:
            storage_uri: The storage adapter's URI representation
            key: The storage key that was written or referenced
        """
        with self._lock:
            self._keys.add((storage_uri, key))

    def is_known(self, storage_uri: str, key: str) -> bool:
        """Check if a key has been registered under a given storage URI."""
        with self._lock:
            return (storage_uri, key) in self._keys

    def clear(self) -> None:
        with self._lock:
            self._keys.clear()

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, tuple) or len(item) != 2:
            return False
        return self.is_known(*item)

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

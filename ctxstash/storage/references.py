"""Build and parse the reference strings installed in place of tool outputs.

Two kinds of reference exist::

    Written to file: <display-path>. Key: <key>. Use the read/search tools to inspect its contents.
    Read from file: <display-path>[. Key: <key>]

``<display-path>`` joins ``file://`` and ``sandbox://`` URIs to the key with a
slash and every other URI with a colon.
"""

import enum
import re
from dataclasses import dataclass
from typing import Any, Optional

WRITTEN_PREFIX = "Written to file: "
READ_PREFIX = "Read from file: "
WRITTEN_SUFFIX = ". Use the read/search tools to inspect its contents."
KEY_SEPARATOR = ". Key: "

_SLASH_SCHEMES = ("file://", "sandbox://")

_WRITTEN_RE = re.compile(
    r"^" + re.escape(WRITTEN_PREFIX) + r"(?P<path>.+)" + re.escape(KEY_SEPARATOR)
    + r"(?P<key>.+)" + re.escape(WRITTEN_SUFFIX) + r"$",
    re.DOTALL,
)
_READ_RE = re.compile(
    r"^" + re.escape(READ_PREFIX) + r"(?P<path>.+?)(?:" + re.escape(KEY_SEPARATOR)
    + r"(?P<key>.+))?$",
    re.DOTALL,
)


class ReferenceKind(str, enum.Enum):
    WRITTEN = "written"
    READ = "read"


@dataclass(frozen=True)
class ParsedReference:
    """
    Storage coordinates recovered from a reference string.

    ``adapter_uri`` and ``key`` are None when the text starts like a reference
    but the rest does not follow the grammar.
    """

    kind: ReferenceKind
    adapter_uri: Optional[str] = None
    key: Optional[str] = None


def _uses_slash(storage_uri: str) -> bool:
    return storage_uri.startswith(_SLASH_SCHEMES)


def format_storage_path_for_display(storage_uri: str, key: str) -> str:
    """Format a storage URI and key for display."""
    if not storage_uri:
        return key

    if _uses_slash(storage_uri):
        return f"{storage_uri.rstrip('/')}/{key}"

    return f"{storage_uri}:{key}"


def format_reference(kind: ReferenceKind, adapter_uri: str, key: str) -> str:
    """
    Render a reference string.

    Args:
        kind: Whether the content was freshly written or read from storage
        adapter_uri: ``str(adapter)`` of the storage holding the content
        key: The storage key

    Returns:
        The reference text to install in place of the tool output
    """
    display = format_storage_path_for_display(adapter_uri, key)
    if kind is ReferenceKind.WRITTEN:
        return f"{WRITTEN_PREFIX}{display}{KEY_SEPARATOR}{key}{WRITTEN_SUFFIX}"
    if kind is ReferenceKind.READ:
        return f"{READ_PREFIX}{display}{KEY_SEPARATOR}{key}"
    raise ValueError(f"Unknown reference kind: {kind!r}")


def format_read_fallback(file_name: Optional[str]) -> str:
    """Reference used when a reader tool's output names no storage location."""
    return f"{READ_PREFIX}{file_name or '<unknown>'}"


def _split_display_path(display: str, key: str) -> Optional[str]:
    for separator in ("/", ":"):
        suffix = f"{separator}{key}"
        if display.endswith(suffix):
            uri = display[: -len(suffix)]
            if separator == "/" and _uses_slash(uri):
                return uri
            if separator == ":" and not _uses_slash(uri):
                return uri
    if display == key:
        return ""
    return None


def parse_reference(text: Any) -> Optional[ParsedReference]:
    """
    Parse a reference string back into storage coordinates.

    Never raises. Text that starts with a reference prefix but is otherwise
    malformed still yields a ``ParsedReference`` (without uri/key), so it is
    treated as already compacted.

    Returns:
        A ParsedReference, or None if ``text`` is not a reference at all
    """
    if not isinstance(text, str):
        return None

    if text.startswith(WRITTEN_PREFIX):
        kind = ReferenceKind.WRITTEN
        match = _WRITTEN_RE.match(text)
    elif text.startswith(READ_PREFIX):
        kind = ReferenceKind.READ
        match = _READ_RE.match(text)
    else:
        return None

    if not match or not match.group("key"):
        return ParsedReference(kind=kind)

    key = match.group("key")
    adapter_uri = _split_display_path(match.group("path"), key)
    if adapter_uri is None:
        return ParsedReference(kind=kind)
    return ParsedReference(kind=kind, adapter_uri=adapter_uri, key=key)


def is_reference(value: Any) -> bool:
    """True when ``value`` is a string that looks like an installed reference."""
    return parse_reference(value) is not None

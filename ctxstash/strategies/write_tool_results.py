"""Strategy for writing tool results to storage during compaction."""

import asyncio
import enum
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..adapters.base import StorageAdapter, StorageWriteParams
from ..messages import (
    JsonOutput,
    Message,
    TextOutput,
    ToolOutput,
    decode_tool_output,
    encode_tool_output,
    ends_with_assistant_text,
    is_tool_message,
    is_tool_result_part,
    unwrap_tool_output,
)
from ..storage.known_keys import KnownKeyRegistry
from ..storage.references import (
    ReferenceKind,
    format_read_fallback,
    format_reference,
    is_reference,
)
from .boundary import Boundary, parse_boundary, resolve_window

logger = logging.getLogger(__name__)

# grepAndSearchFile is not listed: its matches are computed and cannot be
# recovered from the key alone, so they are persisted like any other output.
DEFAULT_READER_TOOL_NAMES = ("readFile",)

PERSISTED_CONTENT_TYPE = "application/json"


class KeyPolicy(str, enum.Enum):
    """How persisted records are named inside a session."""

    PER_TOOL = "per-tool"
    """One ``<toolName>.json`` per tool, overwritten by later calls."""

    PER_CALL = "per-call"
    """One ``<toolName>-<toolCallId>.json`` per call, never overwritten."""


def default_serializer(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


@dataclass
class WriteToolResultsToStorageOptions:
    """Options for the write-tool-results-to-storage compaction strategy."""

    boundary: Boundary
    adapter: StorageAdapter
    known_keys: KnownKeyRegistry
    session_id: str
    serialize_result: Callable[[Any], str] = default_serializer
    storage_reader_tool_names: Optional[List[str]] = None
    key_policy: KeyPolicy = KeyPolicy.PER_TOOL
    max_concurrent_writes: int = 4
    reader_tool_set: frozenset = field(init=False)

    def __post_init__(self):
        self.boundary = parse_boundary(self.boundary)
        self.key_policy = KeyPolicy(self.key_policy)
        self.reader_tool_set = frozenset(
            self.storage_reader_tool_names or DEFAULT_READER_TOOL_NAMES
        )


@dataclass
class _PendingWrite:
    message_index: int
    part_index: int
    key: str
    body: str


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, list, dict)) and not value)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _record_name(tool_name: str, tool_call_id: Optional[str], policy: KeyPolicy) -> str:
    if policy is KeyPolicy.PER_CALL and tool_call_id:
        return f"{tool_name}-{tool_call_id}.json"
    return f"{tool_name}.json"


def _replace_output(msgs: List[Message], message_index: int, part_index: int, output: ToolOutput) -> None:
    """Swap one part's output, copying the message and part instead of mutating them."""
    message = dict(msgs[message_index])
    content = list(message["content"])
    part = dict(content[part_index])
    part["output"] = encode_tool_output(output)
    content[part_index] = part
    message["content"] = content
    msgs[message_index] = message


def _reader_coordinates(output: ToolOutput) -> Dict[str, Any]:
    """Pull ``key``/``storage``/``fileName`` out of a reader tool's output."""
    value = unwrap_tool_output(output)
    if isinstance(output, TextOutput):
        try:
            value = json.loads(output.text)
        except ValueError:
            return {}
    if not isinstance(value, dict):
        return {}
    return {
        name: value[name]
        for name in ("key", "storage", "fileName")
        if isinstance(value.get(name), str)
    }


def _reference_reader_output(
    output: ToolOutput, known_keys: KnownKeyRegistry
) -> Tuple[str, Optional[Tuple[str, str]]]:
    """
    Build the reference for a reader tool's output.

    A keyed reference is only minted for a ``(storage, key)`` pair the
    registry already knows, i.e. one that points at a prior write. Anything
    else (a refused read, a foreign location) gets the plain fallback so a
    model-chosen key never enters the registry.
    """
    coordinates = _reader_coordinates(output)
    storage = coordinates.get("storage")
    key = coordinates.get("key")

    if storage and key and known_keys.is_known(storage, key):
        return format_reference(ReferenceKind.READ, storage, key), (storage, key)

    return format_read_fallback(coordinates.get("fileName") or key), None


async def _run_writes(
    adapter: StorageAdapter, pending: List[_PendingWrite], max_concurrent: int
) -> None:
    """
    Perform pending writes with bounded concurrency.

    Writes that share a key run one after another in window order, so the
    stored object ends up as it would after sequential writes.

    After the first failed write no further write is started and waiting
    chains are cancelled. A write already running in a worker thread cannot
    be interrupted and may still land.
    """
    chains: Dict[str, List[_PendingWrite]] = {}
    for write in pending:
        chains.setdefault(write.key, []).append(write)

    semaphore = asyncio.Semaphore(max(1, max_concurrent))
    failed = False

    async def run_chain(chain: List[_PendingWrite]) -> None:
        nonlocal failed
        async with semaphore:
            for write in chain:
                if failed:
                    return
                try:
                    await asyncio.to_thread(
                        adapter.write,
                        StorageWriteParams(
                            key=write.key, body=write.body, content_type=PERSISTED_CONTENT_TYPE
                        ),
                    )
                except Exception:
                    failed = True
                    raise
                logger.debug("Persisted tool result to %s (%d chars)", write.key, len(write.body))

    tasks = [asyncio.ensure_future(run_chain(chain)) for chain in chains.values()]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def write_tool_results_to_storage_strategy(
    messages: List[Message], options: WriteToolResultsToStorageOptions
) -> List[Message]:
    """
    Compaction strategy that writes tool-result payloads to storage and replaces
    their in-line content with a concise reference to the persisted location.

    The returned list has the same length and order as ``messages``. Neither
    the list nor any message or part dict passed in is modified; rewritten
    messages are copies.

    Args:
        messages: List of message dictionaries to compact
        options: Configuration options for the strategy

    Returns:
        New list of messages with tool results replaced by references

    Raises:
        Exception: Whatever the storage adapter raises on write. No references
            are installed in that case and the call can simply be retried.
    """
    msgs = list(messages) if messages else []

    if not ends_with_assistant_text(msgs):
        return msgs

    window = resolve_window(msgs, options.boundary)
    adapter_uri = str(options.adapter)

    pending: List[_PendingWrite] = []
    read_registrations: List[Tuple[str, str]] = []
    skipped = 0

    for i in range(window.start, min(window.end_exclusive, len(msgs) - 1)):
        msg = msgs[i]
        if not is_tool_message(msg):
            continue

        for j, part in enumerate(msg["content"]):
            if not is_tool_result_part(part):
                continue

            output = decode_tool_output(part.get("output"))
            if output is None:
                continue

            value = unwrap_tool_output(output)
            if is_reference(value):
                skipped += 1
                continue

            tool_name = part.get("toolName")

            if tool_name in options.reader_tool_set:
                display, registration = _reference_reader_output(output, options.known_keys)
                _replace_output(msgs, i, j, TextOutput(text=display))
                if registration:
                    read_registrations.append(registration)
                continue

            if _is_empty(value):
                continue

            tool_name = tool_name or "unknown"
            tool_call_id = part.get("toolCallId")
            key = options.adapter.resolve_key(
                _record_name(tool_name, tool_call_id, options.key_policy)
            )
            record = {
                "metadata": {
                    "toolName": tool_name,
                    "timestamp": _utc_timestamp(),
                    "toolCallId": tool_call_id or str(uuid.uuid4()),
                    "sessionId": options.session_id,
                },
                "output": value,
            }
            pending.append(
                _PendingWrite(
                    message_index=i,
                    part_index=j,
                    key=key,
                    body=options.serialize_result(record),
                )
            )

    await _run_writes(options.adapter, pending, options.max_concurrent_writes)

    for write in pending:
        _replace_output(
            msgs,
            write.message_index,
            write.part_index,
            TextOutput(text=format_reference(ReferenceKind.WRITTEN, adapter_uri, write.key)),
        )
        options.known_keys.register(adapter_uri, write.key)

    for storage_uri, key in read_registrations:
        options.known_keys.register(storage_uri, key)

    logger.info(
        "Compacted window [%d, %d): %d written, %d already referenced, storage %s",
        window.start,
        window.end_exclusive,
        len(pending),
        skipped,
        adapter_uri,
    )
    return msgs

"""Main compaction API for ctx-stash."""

import asyncio
import concurrent.futures
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Union

from .messages import Message
from .storage.known_keys import KnownKeyRegistry
from .storage.resolver import UriOrAdapter, create_storage_adapter
from .strategies.boundary import Boundary, parse_boundary
from .strategies.write_tool_results import (
    KeyPolicy,
    WriteToolResultsToStorageOptions,
    default_serializer,
    write_tool_results_to_storage_strategy,
)

WRITE_TOOL_RESULTS_STRATEGY = "write-tool-results-to-storage"


def generate_session_id() -> str:
    return f"session-{uuid.uuid4().hex[:8]}"


@dataclass
class CompactOptions:
    """
    Options for compacting a conversation by persisting large tool outputs to storage
    and replacing them with lightweight references.
    """

    strategy: str = WRITE_TOOL_RESULTS_STRATEGY
    """Compaction strategy to use. Currently only 'write-tool-results-to-storage' is supported."""

    storage: UriOrAdapter = None
    """
    Storage destination for persisting tool outputs. Accepts either:
    - A URI string (e.g., 'file:///path', 's3://bucket/prefix')
    - A StorageAdapter instance (its own session id, if any, governs its keys)
    - None (uses a temporary directory)
    """

    boundary: Union[Boundary, str, dict] = "all"
    """
    Which part of the conversation is eligible for compaction:
    - 'all' / 'entire-conversation': everything but the final message
    - 'last-turn' / 'since-last-assistant-or-user-text': after the latest user/assistant text
    - {'type': 'keep-first', 'count': N}: keep the first N messages intact
    - {'type': 'keep-last', 'count': N}: keep the last N messages intact
    Boundary instances (All, KeepFirst, KeepLast, SinceLastTurn) are accepted as well.
    """

    serialize_result: Optional[Callable[[Any], str]] = None
    """
    Converts the persisted record ({'metadata': ..., 'output': ...}) to text.
    Defaults to json.dumps with 2-space indentation.
    """

    storage_reader_tool_names: List[str] = field(default_factory=list)
    """
    Tool names that read from storage. Their results are not re-written;
    a 'Read from file' reference is shown instead. Defaults to ['readFile'].
    """

    session_id: Optional[str] = None
    """Session id stamped on persisted records and folded into keys of URI-built storage."""

    key_policy: KeyPolicy = KeyPolicy.PER_TOOL
    """'per-tool' overwrites <tool>.json each call; 'per-call' keeps <tool>-<callId>.json."""

    max_concurrent_writes: int = 4
    """Upper bound on storage writes in flight during one compaction."""

    known_keys: KnownKeyRegistry = field(default_factory=KnownKeyRegistry)
    """Registry shared with the reader tools; written keys are recorded here."""

    def __post_init__(self):
        if self.serialize_result is None:
            self.serialize_result = default_serializer
        if self.session_id is None:
            self.session_id = generate_session_id()
        self.boundary = parse_boundary(self.boundary)
        self.key_policy = KeyPolicy(self.key_policy)


async def compact_messages(
    messages: List[Message], options: Optional[CompactOptions] = None
) -> List[Message]:
    """
    Compact a sequence of messages by writing large tool outputs to configured storage
    and replacing them with succinct references, keeping your model context lean.

    This is the main entry point for the ctx-stash library.

    Args:
        messages: List of message dictionaries with 'role', 'content', etc.
        options: Configuration options for compaction (uses defaults if not provided)

    Returns:
        New list of messages with tool results replaced by storage references

    Raises:
        ValueError: If an unknown strategy is specified

    Example:
        >>> registry = KnownKeyRegistry()
        >>> messages = [
        ...     {"role": "user", "content": "Run the analysis"},
        ...     {"role": "tool", "content": [
        ...         {"type": "tool-result", "toolName": "analyze",
        ...          "output": {"type": "json", "value": large_data}}
        ...     ]},
        ...     {"role": "assistant", "content": "Analysis complete"}
        ... ]
        >>> compacted = await compact_messages(
        ...     messages, CompactOptions(storage="file:///tmp/ctx", known_keys=registry)
        ... )
    """
    if options is None:
        options = CompactOptions()

    if options.strategy != WRITE_TOOL_RESULTS_STRATEGY:
        raise ValueError(f"Unknown compaction strategy: {options.strategy}")

    adapter = create_storage_adapter(options.storage, session_id=options.session_id)

    strategy_options = WriteToolResultsToStorageOptions(
        boundary=options.boundary,
        adapter=adapter,
        known_keys=options.known_keys,
        session_id=options.session_id,
        serialize_result=options.serialize_result,
        storage_reader_tool_names=options.storage_reader_tool_names,
        key_policy=options.key_policy,
        max_concurrent_writes=options.max_concurrent_writes,
    )

    return await write_tool_results_to_storage_strategy(messages, strategy_options)


def compact_messages_sync(
    messages: List[Message], options: Optional[CompactOptions] = None
) -> List[Message]:
    """
    Synchronous version of compact_messages for non-async contexts.

    When called from inside a running event loop the compaction runs on a
    worker thread with its own loop.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(compact_messages(messages, options))

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(asyncio.run, compact_messages(messages, options))
        return future.result()

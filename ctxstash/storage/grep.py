"""Line-oriented search over stored content."""

import json
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern

from ..adapters.base import StorageAdapter, StorageReadParams

DEFAULT_MAX_RESULTS = 100


@dataclass
class GrepResultLine:
    """A single line matching a grep pattern."""

    line_number: int
    content: str

    def __str__(self) -> str:
        return f"{self.line_number}: {self.content}"


def compile_pattern(pattern: str, flags: Optional[str] = None) -> Pattern[str]:
    """
    Compile a regex with single-letter flags (``i``, ``m``, ``s``).

    Raises:
        re.error: If the pattern is not a valid regular expression
    """
    regex_flags = 0
    if flags:
        if "i" in flags:
            regex_flags |= re.IGNORECASE
        if "m" in flags:
            regex_flags |= re.MULTILINE
        if "s" in flags:
            regex_flags |= re.DOTALL
    return re.compile(pattern, regex_flags)


def grep_text(
    text: str, pattern: Pattern[str], max_results: int = DEFAULT_MAX_RESULTS
) -> List[GrepResultLine]:
    """Return the lines of ``text`` matching ``pattern``, numbered from 1."""
    results = []
    for i, line in enumerate(text.splitlines(), start=1):
        if pattern.search(line):
            results.append(GrepResultLine(line_number=i, content=line))
            if len(results) >= max_results:
                break
    return results


def grep_object(
    adapter: StorageAdapter,
    key: str,
    pattern: Pattern[str],
    max_results: int = DEFAULT_MAX_RESULTS,
) -> List[GrepResultLine]:
    """
    Search for a pattern in stored content.

    JSON content is re-rendered with two-space indentation first so that each
    field lands on its own line.

    Raises:
        FileNotFoundError, OSError: Whatever the adapter raises on read
    """
    content = adapter.read_text(StorageReadParams(key=key))

    try:
        content = json.dumps(json.loads(content), indent=2, ensure_ascii=False)
    except ValueError:
        pass

    return grep_text(content, pattern, max_results=max_results)

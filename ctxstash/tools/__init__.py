"""Reader tools for ctx-stash."""

from .reader import ReadFileOptions, StorageToolOptions, create_read_file_tool, read_file
from .grep import GrepAndSearchFileOptions, create_grep_and_search_file_tool, grep_and_search_file

__all__ = [
    "read_file",
    "ReadFileOptions",
    "StorageToolOptions",
    "create_read_file_tool",
    "grep_and_search_file",
    "GrepAndSearchFileOptions",
    "create_grep_and_search_file_tool",
]

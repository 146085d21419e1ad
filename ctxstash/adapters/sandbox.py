"""Storage adapter that persists into a remote sandbox filesystem."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from .base import BaseStorageAdapter, StorageReadParams, StorageWriteParams, StorageWriteResult

logger = logging.getLogger(__name__)


@dataclass
class SandboxFile:
    """A file to place inside the sandbox."""

    path: str
    content: bytes


@dataclass
class CommandResult:
    """Outcome of a command executed inside the sandbox."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""


class SandboxProvider(Protocol):
    """The subset of a sandbox provider this adapter relies on."""

    def get_id(self) -> str:
        ...

    def get_workspace_path(self) -> str:
        ...

    def write_files(self, files: List[SandboxFile]) -> None:
        ...

    def run_command(self, cmd: str, args: List[str]) -> CommandResult:
        ...


class SandboxStorageAdapter(BaseStorageAdapter):
    """
    Writes tool results into a sandbox workspace (E2B, Vercel, local, ...)
    instead of the local filesystem. Reads go through ``cat`` in the sandbox.
    """

    def __init__(
        self,
        provider: SandboxProvider,
        prefix: Optional[str] = None,
        session_id: Optional[str] = None,
    ):
        self.provider = provider
        self.prefix = prefix or ""
        self.session_id = session_id
        self.workspace_path = provider.get_workspace_path().rstrip("/")

    def _full_path(self, key: str) -> str:
        return f"{self.workspace_path}/{key}"

    def write(self, params: StorageWriteParams) -> StorageWriteResult:
        content = params.body.encode("utf-8") if isinstance(params.body, str) else params.body
        self.provider.write_files([SandboxFile(path=self._full_path(params.key), content=content)])
        logger.debug("Wrote %s into sandbox %s", params.key, self.provider.get_id())
        return StorageWriteResult(key=params.key, url=f"{self}/{params.key}")

    def read_text(self, params: StorageReadParams) -> str:
        full_path = self._full_path(params.key)
        result = self.provider.run_command("cat", [full_path])
        if result.exit_code != 0:
            raise FileNotFoundError(f"Failed to read file {full_path}: {result.stderr}")
        return result.stdout

    def __str__(self) -> str:
        return f"sandbox://{self.provider.get_id()}"

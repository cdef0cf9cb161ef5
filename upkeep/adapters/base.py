"""
Spawner base — the contract between the executor and the OS.

The executor never calls subprocess directly.  It asks a Spawner to
start a process and gets back something that looks like a running
process.  Production uses the subprocess spawner; tests inject the
mock spawner and can then assert exactly which processes were started
(or that none were).
"""

from __future__ import annotations

from typing import IO, Protocol


class RunningProcess(Protocol):
    """The subset of ``subprocess.Popen`` the executor relies on."""

    stdout: IO[str] | None
    returncode: int | None

    def communicate(self) -> tuple[str | None, str | None]:
        ...

    def wait(self) -> int:
        ...


class Spawner(Protocol):
    """Start a process. Raises OSError when the process cannot start."""

    def __call__(
        self,
        argv: list[str],
        *,
        cwd: str | None = None,
        capture: bool = False,
    ) -> RunningProcess:
        ...

"""
Mock spawner — universal test double for process creation.

Records every argv it is asked to start and returns canned processes
instead of touching the system.  By default every process exits 0 with
no output; responses can be configured per command prefix.
"""

from __future__ import annotations

import io
import os


class MockProcess:
    """A finished fake process."""

    def __init__(self, returncode: int = 0, output: str = "", capture: bool = False):
        self.returncode: int | None = returncode
        self.stdout: io.StringIO | None = io.StringIO(output) if capture else None

    def communicate(self) -> tuple[str | None, str | None]:
        if self.stdout is None:
            return None, None
        return self.stdout.read(), None

    def wait(self) -> int:
        assert self.returncode is not None
        return self.returncode


class MockSpawner:
    """Spawner that never starts a real process.

    Commands are matched on their argv with the program reduced to its
    basename, longest configured prefix first:

        spawner = MockSpawner()
        spawner.set_response("asdf update", returncode=42)
        spawner.set_spawn_error("guix")
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, ...], tuple[int, str]] = {}
        self._spawn_errors: dict[tuple[str, ...], OSError] = {}
        self._call_log: list[list[str]] = []

    @property
    def call_log(self) -> list[list[str]]:
        """Every argv this spawner has been asked to start."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def calls_for(self, program: str) -> list[list[str]]:
        """Recorded argvs whose program basename is *program*."""
        return [argv for argv in self._call_log if os.path.basename(argv[0]) == program]

    def set_response(self, command: str, returncode: int = 0, output: str = "") -> None:
        """Configure the exit code and stdout for commands starting with *command*."""
        self._responses[tuple(command.split())] = (returncode, output)

    def set_failure(self, command: str, returncode: int = 1) -> None:
        self.set_response(command, returncode=returncode)

    def set_spawn_error(self, command: str, error: OSError | None = None) -> None:
        """Make commands starting with *command* fail to start."""
        self._spawn_errors[tuple(command.split())] = error or FileNotFoundError(
            2, "No such file or directory", command.split()[0]
        )

    def __call__(
        self,
        argv: list[str],
        *,
        cwd: str | None = None,
        capture: bool = False,
    ) -> MockProcess:
        self._call_log.append(list(argv))
        key = (os.path.basename(argv[0]), *argv[1:])

        for size in range(len(key), 0, -1):
            error = self._spawn_errors.get(key[:size])
            if error is not None:
                raise error

        returncode, output = 0, ""
        for size in range(len(key), 0, -1):
            if key[:size] in self._responses:
                returncode, output = self._responses[key[:size]]
                break

        return MockProcess(returncode=returncode, output=output, capture=capture)

    def reset(self) -> None:
        """Clear call log and configured responses."""
        self._call_log.clear()
        self._responses.clear()
        self._spawn_errors.clear()

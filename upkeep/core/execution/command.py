"""
Command description — what to run, not how.

A Command is pure data: program, arguments, working directory and
whether it needs elevation.  Building one never touches the system.
Every builder method returns a new instance, so a resolved base command
can be reused for several sub-commands:

    brew = Command("/usr/local/bin/brew")
    ctx.check_run(brew.arg("update"))
    ctx.check_run(brew.args("upgrade", "--formula"))
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Command:
    """An invocable command description."""

    program: str
    arguments: tuple[str, ...] = ()
    cwd: str | None = None
    elevated: bool = False

    def __post_init__(self) -> None:
        # Accept Path objects and any iterable of arguments
        object.__setattr__(self, "program", os.fspath(self.program))
        object.__setattr__(
            self, "arguments", tuple(os.fspath(a) for a in self.arguments)
        )

    def arg(self, value: str | os.PathLike[str]) -> Command:
        """Return a copy with one more argument appended."""
        return replace(self, arguments=self.arguments + (os.fspath(value),))

    def args(self, *values: str | os.PathLike[str]) -> Command:
        """Return a copy with several arguments appended."""
        return replace(
            self, arguments=self.arguments + tuple(os.fspath(v) for v in values)
        )

    def in_dir(self, cwd: str | os.PathLike[str]) -> Command:
        return replace(self, cwd=os.fspath(cwd))

    def elevate(self) -> Command:
        """Mark the command as needing the elevation prefix."""
        return replace(self, elevated=True)

    def prefixed(self, prefix: list[str] | tuple[str, ...]) -> Command:
        """Return a command that runs this one through *prefix*.

        ``Command("brew").arg("update").prefixed(["arch", "-x86_64"])``
        becomes ``arch -x86_64 brew update``.
        """
        if not prefix:
            return self
        return replace(
            self,
            program=prefix[0],
            arguments=tuple(prefix[1:]) + (self.program,) + self.arguments,
        )

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.arguments]

    def display(self) -> str:
        """Shell-quoted rendering used for previews and logs."""
        return shlex.join(self.argv)

    def __str__(self) -> str:
        return self.display()

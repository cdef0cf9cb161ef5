"""
Reporting sink — where steps announce themselves and previews land.

Append-only.  Only the currently running step writes to it, so no
locking is needed.  Entries are kept for the final summary and for
tests; terminal echo goes through click.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from typing import Literal

import click


@dataclass(frozen=True)
class ReportEntry:
    kind: Literal["separator", "preview"]
    text: str


@dataclass
class ReportSink:
    """Collects step separators and dry-run previews."""

    echo: bool = True
    entries: list[ReportEntry] = field(default_factory=list)

    def separator(self, title: str) -> None:
        """Announce the start of a step (``print_separator``)."""
        self.entries.append(ReportEntry("separator", title))
        if self.echo:
            width = min(shutil.get_terminal_size((80, 20)).columns, 80)
            click.echo()
            click.secho(f"── {title} ".ljust(width, "─"), fg="cyan", bold=True)

    def preview(self, command_line: str) -> None:
        """Record a command that would have run in simulate mode."""
        self.entries.append(ReportEntry("preview", command_line))
        if self.echo:
            click.secho(f"Dry running: {command_line}", fg="yellow")

    @property
    def separators(self) -> list[str]:
        return [e.text for e in self.entries if e.kind == "separator"]

    @property
    def previews(self) -> list[str]:
        return [e.text for e in self.entries if e.kind == "preview"]

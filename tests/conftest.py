"""
Shared test fixtures and configuration.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from upkeep.adapters.mock import MockSpawner
from upkeep.core.execution.context import BaseDirs, ExecutionContext
from upkeep.core.execution.report import ReportSink
from upkeep.core.execution.run_mode import RunMode
from upkeep.core.models.config import UpkeepConfig
from upkeep.core.platform import Host


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """A fake home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def bin_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty directory that is the whole of $PATH."""
    path = tmp_path / "bin"
    path.mkdir()
    monkeypatch.setenv("PATH", str(path))
    return path


@pytest.fixture
def fake_bin(bin_dir: Path) -> Callable[..., Path]:
    """Create executables on the fake $PATH."""

    def make(*names: str) -> Path:
        for name in names:
            exe = bin_dir / name
            exe.write_text("#!/bin/sh\nexit 0\n")
            exe.chmod(0o755)
        return bin_dir / names[-1]

    return make


@pytest.fixture
def spawner() -> MockSpawner:
    return MockSpawner()


@pytest.fixture
def sink() -> ReportSink:
    return ReportSink(echo=False)


@pytest.fixture
def make_ctx(home: Path, spawner: MockSpawner, sink: ReportSink) -> Callable[..., ExecutionContext]:
    """Build an ExecutionContext wired to the mock spawner."""

    def make(
        run_mode: RunMode = RunMode.EXECUTE,
        host: Host | None = None,
        **config: object,
    ) -> ExecutionContext:
        return ExecutionContext(
            UpkeepConfig(**config),
            BaseDirs(home=home, config=home / ".config"),
            run_mode,
            host=host or Host(system="Linux", machine="x86_64"),
            sink=sink,
            spawner=spawner,
        )

    return make

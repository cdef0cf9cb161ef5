"""
Tests for the executor — simulate/execute, exit policies, spawn failures.
"""

import sys

import pytest

from upkeep.adapters.mock import MockSpawner
from upkeep.adapters.shell.process import stderr_spawner, subprocess_spawner
from upkeep.core.execution.command import Command
from upkeep.core.execution.errors import ProcessFailed, SpawnFailed
from upkeep.core.execution.executor import (
    Completed,
    Executor,
    Simulated,
    SpawnFailure,
    accept_codes,
    success_only,
)
from upkeep.core.execution.report import ReportSink
from upkeep.core.execution.run_mode import RunMode


def _executor(mode: RunMode, spawner, sink=None, elevation=None) -> Executor:
    return Executor(mode, sink or ReportSink(echo=False), elevation=elevation, spawner=spawner)


# ── Exit policies ────────────────────────────────────────────────────


class TestExitPolicies:
    def test_success_only(self):
        assert success_only(0)
        assert not success_only(1)

    def test_accept_codes_exactly_the_given_code(self):
        accept = accept_codes(42)
        assert accept(0)
        assert accept(42)
        assert not accept(41)
        assert not accept(43)
        assert not accept(1)


# ── Simulate mode ────────────────────────────────────────────────────


class TestSimulate:
    def test_run_does_not_spawn(self, spawner: MockSpawner):
        sink = ReportSink(echo=False)
        executor = _executor(RunMode.SIMULATE, spawner, sink)
        outcome = executor.run(Command("brew").arg("update"))
        assert isinstance(outcome, Simulated)
        assert outcome.success
        assert spawner.call_count == 0
        assert sink.previews == ["brew update"]

    def test_one_preview_per_sub_command(self, spawner: MockSpawner):
        sink = ReportSink(echo=False)
        executor = _executor(RunMode.SIMULATE, spawner, sink)
        brew = Command("brew")
        executor.check_run(brew.arg("update"))
        executor.check_run(brew.arg("upgrade"))
        executor.check_run(brew.arg("cleanup"))
        assert sink.previews == ["brew update", "brew upgrade", "brew cleanup"]
        assert spawner.call_count == 0

    def test_check_output_returns_none(self, spawner: MockSpawner):
        executor = _executor(RunMode.SIMULATE, spawner)
        assert executor.check_output(Command("gdbus").arg("call")) is None
        assert spawner.call_count == 0

    def test_spawn_handle_already_finished(self, spawner: MockSpawner):
        executor = _executor(RunMode.SIMULATE, spawner)
        handle = executor.spawn(Command("asdf").arg("update"))
        assert handle.stdout is None
        assert isinstance(handle.wait(), Simulated)
        assert spawner.call_count == 0

    def test_preview_includes_elevation_prefix(self, spawner: MockSpawner):
        sink = ReportSink(echo=False)
        executor = _executor(
            RunMode.SIMULATE, spawner, sink, elevation=lambda: ["/usr/bin/sudo"]
        )
        executor.run(Command("pkgin").arg("update").elevate())
        assert sink.previews == ["/usr/bin/sudo pkgin update"]


# ── Execute mode ─────────────────────────────────────────────────────


class TestExecute:
    def test_run_completed(self, spawner: MockSpawner):
        executor = _executor(RunMode.EXECUTE, spawner)
        outcome = executor.run(Command("yadm").arg("pull"))
        assert outcome == Completed(exit_code=0, output=None)
        assert spawner.call_log == [["yadm", "pull"]]

    def test_run_nonzero_is_not_raised(self, spawner: MockSpawner):
        spawner.set_failure("yadm pull", returncode=3)
        outcome = _executor(RunMode.EXECUTE, spawner).run(Command("yadm").arg("pull"))
        assert isinstance(outcome, Completed)
        assert outcome.exit_code == 3
        assert not outcome.success

    def test_check_run_success(self, spawner: MockSpawner):
        outcome = _executor(RunMode.EXECUTE, spawner).check_run(Command("tldr").arg("--update"))
        assert outcome.success

    def test_check_run_failure_raises(self, spawner: MockSpawner):
        spawner.set_failure("tldr", returncode=2)
        with pytest.raises(ProcessFailed) as exc:
            _executor(RunMode.EXECUTE, spawner).check_run(Command("tldr").arg("--update"))
        assert exc.value.exit_code == 2
        assert exc.value.command.argv == ["tldr", "--update"]

    def test_custom_predicate_accepts_42_only(self, spawner: MockSpawner):
        executor = _executor(RunMode.EXECUTE, spawner)
        spawner.set_response("asdf update", returncode=42)
        outcome = executor.check_run(Command("asdf").arg("update"), accept=accept_codes(42))
        assert outcome == Completed(exit_code=42)

        spawner.set_response("asdf update", returncode=43)
        with pytest.raises(ProcessFailed):
            executor.check_run(Command("asdf").arg("update"), accept=accept_codes(42))

    def test_spawn_failure_outcome(self, spawner: MockSpawner):
        spawner.set_spawn_error("pearl")
        outcome = _executor(RunMode.EXECUTE, spawner).run(Command("pearl").arg("update"))
        assert isinstance(outcome, SpawnFailure)
        assert isinstance(outcome.error, FileNotFoundError)
        assert not outcome.success

    def test_check_run_spawn_failure_raises(self, spawner: MockSpawner):
        spawner.set_spawn_error("pearl", PermissionError(13, "Permission denied"))
        with pytest.raises(SpawnFailed) as exc:
            _executor(RunMode.EXECUTE, spawner).check_run(Command("pearl").arg("update"))
        assert isinstance(exc.value.error, PermissionError)

    def test_check_output_returns_stdout(self, spawner: MockSpawner):
        spawner.set_response("brew --repository", output="/opt/homebrew/Library/Taps/buo\n")
        output = _executor(RunMode.EXECUTE, spawner).check_output(
            Command("brew").args("--repository", "buo/cask-upgrade")
        )
        assert output == "/opt/homebrew/Library/Taps/buo\n"

    def test_check_output_failure_raises(self, spawner: MockSpawner):
        spawner.set_failure("gdbus")
        with pytest.raises(ProcessFailed):
            _executor(RunMode.EXECUTE, spawner).check_output(Command("gdbus").arg("call"))

    def test_spawn_then_stream(self, spawner: MockSpawner):
        spawner.set_response("guix pull", output="line one\nline two\n")
        handle = _executor(RunMode.EXECUTE, spawner).spawn(
            Command("guix").arg("pull"), capture=True
        )
        assert handle.stdout is not None
        assert handle.stdout.readline() == "line one\n"
        outcome = handle.wait()
        assert outcome == Completed(exit_code=0, output="line two\n")

    def test_elevated_command_is_prefixed(self, spawner: MockSpawner):
        executor = _executor(RunMode.EXECUTE, spawner, elevation=lambda: ["/usr/bin/doas"])
        executor.check_run(Command("/usr/bin/nix").arg("upgrade-nix").elevate())
        assert spawner.call_log == [["/usr/bin/doas", "/usr/bin/nix", "upgrade-nix"]]

    def test_plain_command_does_not_resolve_elevation(self, spawner: MockSpawner):
        def elevation():
            raise AssertionError("elevation resolved for a plain command")

        executor = _executor(RunMode.EXECUTE, spawner, elevation=elevation)
        executor.check_run(Command("bun").arg("upgrade"))
        assert spawner.call_count == 1


# ── Mock spawner ─────────────────────────────────────────────────────


class TestMockSpawner:
    def test_calls_for_matches_program_basename(self, spawner: MockSpawner):
        executor = _executor(RunMode.EXECUTE, spawner)
        executor.run(Command("/usr/bin/brew").arg("update"))
        executor.run(Command("yadm").arg("pull"))
        executor.run(Command("/opt/homebrew/bin/brew").arg("cleanup"))
        assert spawner.calls_for("brew") == [
            ["/usr/bin/brew", "update"],
            ["/opt/homebrew/bin/brew", "cleanup"],
        ]
        assert spawner.calls_for("nix") == []

    def test_longest_prefix_wins(self, spawner: MockSpawner):
        spawner.set_failure("asdf", returncode=1)
        spawner.set_response("asdf update", returncode=42)
        executor = _executor(RunMode.EXECUTE, spawner)
        assert executor.run(Command("asdf").arg("update")) == Completed(exit_code=42)
        assert executor.run(Command("asdf").arg("plugin")) == Completed(exit_code=1)

    def test_reset(self, spawner: MockSpawner):
        spawner.set_failure("tldr")
        spawner.set_spawn_error("pearl")
        executor = _executor(RunMode.EXECUTE, spawner)
        executor.run(Command("tldr"))
        spawner.reset()
        assert spawner.call_count == 0
        assert executor.run(Command("tldr")).success
        assert executor.run(Command("pearl")).success


# ── Real subprocess spawner ──────────────────────────────────────────


class TestSubprocessSpawner:
    def _python(self, code: str) -> Command:
        return Command(sys.executable).args("-c", code)

    def test_exit_zero(self):
        executor = Executor(RunMode.EXECUTE, ReportSink(echo=False), spawner=subprocess_spawner)
        assert executor.check_run(self._python("pass")) == Completed(exit_code=0)

    def test_exit_nonzero(self):
        executor = Executor(RunMode.EXECUTE, ReportSink(echo=False), spawner=subprocess_spawner)
        with pytest.raises(ProcessFailed) as exc:
            executor.check_run(self._python("import sys; sys.exit(3)"))
        assert exc.value.exit_code == 3

    def test_exit_42_accepted(self):
        executor = Executor(RunMode.EXECUTE, ReportSink(echo=False), spawner=subprocess_spawner)
        outcome = executor.check_run(
            self._python("import sys; sys.exit(42)"), accept=accept_codes(42)
        )
        assert outcome == Completed(exit_code=42)

    def test_capture_output(self):
        executor = Executor(RunMode.EXECUTE, ReportSink(echo=False), spawner=subprocess_spawner)
        assert executor.check_output(self._python("print('hello')")) == "hello\n"

    def test_missing_binary_is_spawn_failure(self, tmp_path):
        executor = Executor(RunMode.EXECUTE, ReportSink(echo=False), spawner=subprocess_spawner)
        outcome = executor.run(Command(str(tmp_path / "does-not-exist")))
        assert isinstance(outcome, SpawnFailure)

    def test_stderr_spawner_keeps_stdout_clean(self, capfd: pytest.CaptureFixture[str]):
        executor = Executor(RunMode.EXECUTE, ReportSink(echo=False), spawner=stderr_spawner)
        executor.check_run(self._python("print('tool chatter')"))
        out, err = capfd.readouterr()
        assert "tool chatter" not in out
        assert "tool chatter" in err

    def test_stderr_spawner_still_captures(self):
        executor = Executor(RunMode.EXECUTE, ReportSink(echo=False), spawner=stderr_spawner)
        assert executor.check_output(self._python("print('hello')")) == "hello\n"

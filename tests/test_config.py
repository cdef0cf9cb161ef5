"""
Tests for configuration loading — upkeep.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from upkeep.core.config.loader import ConfigError, config_dir, find_config_file, load_config
from upkeep.core.models.config import StepName, UpkeepConfig


@pytest.fixture
def xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at an empty temp directory."""
    path = tmp_path / "xdg"
    path.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(path))
    return path


@pytest.fixture
def full_config(tmp_path: Path) -> Path:
    content = textwrap.dedent("""\
        dry_run: true
        cleanup: true
        assume_yes:
          - pkgin
        disable:
          - guix
          - tldr
        elevation: doas
        bashit_branch: master
        brew_autoremove: true
        brew_cask_greedy: true
    """)
    path = tmp_path / "upkeep.yml"
    path.write_text(content)
    return path


class TestFindConfig:
    def test_xdg_dir(self, xdg: Path):
        assert config_dir() == xdg

    def test_home_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        assert config_dir(tmp_path) == tmp_path / ".config"

    def test_not_found(self, xdg: Path):
        assert find_config_file() is None

    def test_found(self, xdg: Path):
        (xdg / "upkeep.yml").write_text("cleanup: true\n")
        assert find_config_file() == xdg / "upkeep.yml"


class TestLoadConfig:
    def test_full(self, full_config: Path):
        config = load_config(full_config)
        assert config.dry_run is True
        assert config.cleanup is True
        assert config.assume_yes == [StepName.PKGIN]
        assert config.disable == [StepName.GUIX, StepName.TLDR]
        assert config.elevation == "doas"
        assert config.bashit_branch == "master"
        assert config.brew_autoremove and config.brew_cask_greedy

    def test_no_file_means_defaults(self, xdg: Path):
        assert load_config() == UpkeepConfig()

    def test_default_location(self, xdg: Path):
        (xdg / "upkeep.yml").write_text("cleanup: true\n")
        assert load_config().cleanup is True

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "upkeep.yml"
        path.write_text("")
        assert load_config(path) == UpkeepConfig()

    def test_explicit_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "upkeep.yml"
        path.write_text("cleanup: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "upkeep.yml"
        path.write_text("- one\n- two\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_unknown_key(self, tmp_path: Path):
        path = tmp_path / "upkeep.yml"
        path.write_text("clean_up: true\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_unknown_step_name(self, tmp_path: Path):
        path = tmp_path / "upkeep.yml"
        path.write_text("disable: [apt]\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)


class TestUpkeepConfig:
    def test_defaults(self):
        config = UpkeepConfig()
        assert not config.dry_run
        assert config.bashit_branch == "stable"
        assert config.elevation is None

    def test_yes_all(self):
        assert UpkeepConfig(assume_yes=True).yes(StepName.PKGIN)
        assert not UpkeepConfig().yes(StepName.PKGIN)

    def test_yes_per_step(self):
        config = UpkeepConfig(assume_yes=["pkgin"])
        assert config.yes(StepName.PKGIN)
        assert not config.yes(StepName.ASDF)

    def test_should_run(self):
        config = UpkeepConfig(disable=["guix"])
        assert config.should_run(StepName.NIX)
        assert not config.should_run(StepName.GUIX)

    def test_only_wins_over_default(self):
        config = UpkeepConfig(only=["nix"])
        assert config.should_run(StepName.NIX)
        assert not config.should_run(StepName.ASDF)

    def test_disable_beats_only(self):
        config = UpkeepConfig(only=["nix"], disable=["nix"])
        assert not config.should_run(StepName.NIX)

"""
Configuration model — what ``upkeep.yml`` may contain.

Every key is optional; an empty or missing file means defaults.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StepName(str, Enum):
    """Identifiers users write in ``only``, ``disable`` and ``assume_yes``."""

    ASDF = "asdf"
    BASHIT = "bashit"
    BREW_CASK = "brew_cask"
    BREW_FORMULA = "brew_formula"
    BUN = "bun"
    FISH_PLUG = "fish_plug"
    FISHER = "fisher"
    GNOME_SHELL_EXTENSIONS = "gnome_shell_extensions"
    GUIX = "guix"
    HOME_MANAGER = "home_manager"
    NIX = "nix"
    OH_MY_FISH = "oh_my_fish"
    PEARL = "pearl"
    PKGIN = "pkgin"
    SDKMAN = "sdkman"
    TLDR = "tldr"
    YADM = "yadm"


class UpkeepConfig(BaseModel):
    """Validated configuration for one run."""

    model_config = ConfigDict(extra="forbid")

    dry_run: bool = False
    cleanup: bool = False
    # true → every step; a list → only those steps
    assume_yes: bool | list[StepName] = False
    disable: list[StepName] = Field(default_factory=list)
    only: list[StepName] = Field(default_factory=list)
    elevation: str | None = None

    bashit_branch: str = "stable"
    brew_autoremove: bool = False
    brew_cask_greedy: bool = False

    def yes(self, step: StepName) -> bool:
        """Whether to pass the tool's non-interactive flag for *step*."""
        if isinstance(self.assume_yes, bool):
            return self.assume_yes
        return step in self.assume_yes

    def should_run(self, step: StepName) -> bool:
        if self.only and step not in self.only:
            return False
        return step not in self.disable

"""
Step catalogue — every update step, in run order.

The runner walks ``STEPS`` top to bottom.  A step only runs on the
systems listed in ``platforms`` (``platform.system()`` values, or any
Unix-like system when empty).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial

from upkeep.core.execution.context import ExecutionContext
from upkeep.core.models.config import StepName
from upkeep.core.platform import Host
from upkeep.steps import unix
from upkeep.steps.variants import BrewVariant

StepFunc = Callable[[ExecutionContext], None]

MACOS = frozenset({"Darwin"})


@dataclass(frozen=True)
class StepSpec:
    """One entry of the catalogue."""

    name: StepName
    func: StepFunc
    platforms: frozenset[str] = field(default_factory=frozenset)
    variant: str | None = None

    @property
    def key(self) -> str:
        """Unique identifier used in results (``brew_formula:mac_arm``)."""
        return f"{self.name.value}:{self.variant}" if self.variant else self.name.value

    def applies_to(self, host: Host) -> bool:
        if self.platforms:
            return host.system in self.platforms
        return host.is_unix


def _brew(name: StepName, func: Callable[..., None], variant: BrewVariant,
          platforms: frozenset[str] = frozenset()) -> StepSpec:
    return StepSpec(
        name=name,
        func=partial(func, variant=variant),
        platforms=platforms,
        variant=variant.value,
    )


STEPS: list[StepSpec] = [
    _brew(StepName.BREW_FORMULA, unix.run_brew_formula, BrewVariant.MAC_ARM, MACOS),
    _brew(StepName.BREW_FORMULA, unix.run_brew_formula, BrewVariant.MAC_INTEL, MACOS),
    _brew(StepName.BREW_FORMULA, unix.run_brew_formula, BrewVariant.PATH),
    _brew(StepName.BREW_CASK, unix.run_brew_cask, BrewVariant.MAC_ARM, MACOS),
    _brew(StepName.BREW_CASK, unix.run_brew_cask, BrewVariant.MAC_INTEL, MACOS),
    _brew(StepName.BREW_CASK, unix.run_brew_cask, BrewVariant.PATH, MACOS),
    StepSpec(StepName.PKGIN, unix.run_pkgin),
    StepSpec(StepName.NIX, unix.run_nix),
    StepSpec(StepName.HOME_MANAGER, unix.run_home_manager),
    StepSpec(StepName.GUIX, unix.run_guix, frozenset({"Linux"})),
    StepSpec(StepName.ASDF, unix.run_asdf),
    StepSpec(StepName.SDKMAN, unix.run_sdkman),
    StepSpec(StepName.BUN, unix.run_bun),
    StepSpec(StepName.FISHER, unix.run_fisher),
    StepSpec(StepName.FISH_PLUG, unix.run_fish_plug),
    StepSpec(StepName.OH_MY_FISH, unix.run_oh_my_fish),
    StepSpec(StepName.BASHIT, unix.run_bashit),
    StepSpec(StepName.YADM, unix.run_yadm),
    StepSpec(StepName.PEARL, unix.run_pearl),
    StepSpec(
        StepName.GNOME_SHELL_EXTENSIONS,
        unix.upgrade_gnome_extensions,
        frozenset({"Linux", "FreeBSD", "OpenBSD", "NetBSD", "DragonFly"}),
    ),
    StepSpec(StepName.TLDR, unix.run_tldr),
]

__all__ = ["STEPS", "StepFunc", "StepSpec"]

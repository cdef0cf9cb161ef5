"""
Variant selection — one logical step, several install locations.

Homebrew can live on PATH (Linuxbrew, custom prefixes) and, on macOS,
in two fixed roots: ``/usr/local`` for Intel and ``/opt/homebrew`` for
Apple Silicon.  Both roots can coexist on one machine.

Each variant is described by a row of metadata (binary, native
architecture, label).  Which variants are present is decided once per
run by ``resolve_brew_variants``, using existence checks only, and the
result is memoized on the execution context.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from upkeep.core.execution.command import Command
from upkeep.core.platform import Host

if TYPE_CHECKING:
    from upkeep.core.execution.context import ExecutionContext

INTEL_BREW = "/usr/local/bin/brew"
ARM_BREW = "/opt/homebrew/bin/brew"


@dataclass(frozen=True)
class VariantInfo:
    binary: str
    label: str
    native_arch: str | None = None   # None: runs natively everywhere
    arch_flag: str | None = None     # `arch` flag forcing native_arch


class BrewVariant(Enum):
    PATH = "path"
    MAC_INTEL = "mac_intel"
    MAC_ARM = "mac_arm"

    @property
    def info(self) -> VariantInfo:
        return _BREW_VARIANTS[self]

    @property
    def binary(self) -> str:
        return self.info.binary

    def command(self, host: Host, binary: str | os.PathLike[str] | None = None) -> Command:
        """Base command for this variant, wrapped in ``arch`` if needed.

        An Intel brew on an ARM host runs under ``arch -x86_64`` and an
        ARM brew on an Intel host under ``arch -arm64e``.  *binary* is
        the already resolved executable, if the caller has one.
        """
        info = self.info
        base = Command(binary if binary is not None else info.binary)
        if (
            info.native_arch is not None
            and host.arch in ("x86_64", "arm64")
            and host.arch != info.native_arch
        ):
            return base.prefixed(["arch", info.arch_flag or f"-{info.native_arch}"])
        return base


_BREW_VARIANTS: dict[BrewVariant, VariantInfo] = {
    BrewVariant.PATH: VariantInfo(binary="brew", label="Brew"),
    BrewVariant.MAC_INTEL: VariantInfo(
        binary=INTEL_BREW, label="Brew (Intel)", native_arch="x86_64", arch_flag="-x86_64",
    ),
    BrewVariant.MAC_ARM: VariantInfo(
        binary=ARM_BREW, label="Brew (ARM)", native_arch="arm64", arch_flag="-arm64e",
    ),
}


@dataclass(frozen=True)
class BrewSelection:
    """Which brew variants this host has."""

    variants: tuple[BrewVariant, ...]
    both_mac_roots: bool = False

    def title(self, variant: BrewVariant) -> str:
        """Step title; the architecture suffix only matters when both roots exist."""
        if self.both_mac_roots and variant is not BrewVariant.PATH:
            return variant.info.label
        return "Brew"

    def __contains__(self, variant: object) -> bool:
        return variant in self.variants


def resolve_brew_variants(
    host: Host,
    exists: Callable[[str], bool] = os.path.exists,
) -> BrewSelection:
    """Decide which brew variants apply. Existence checks only."""
    if not host.is_macos:
        return BrewSelection(variants=(BrewVariant.PATH,))

    arm, intel = exists(ARM_BREW), exists(INTEL_BREW)
    variants = []
    if arm:
        variants.append(BrewVariant.MAC_ARM)
    if intel:
        variants.append(BrewVariant.MAC_INTEL)
    # A brew on PATH outside both roots is a custom install
    variants.append(BrewVariant.PATH)
    return BrewSelection(variants=tuple(variants), both_mac_roots=arm and intel)


def brew_selection(ctx: ExecutionContext) -> BrewSelection:
    """The run's brew selection, resolved on first use."""
    return ctx.resolve_once("brew_variants", lambda: resolve_brew_variants(ctx.host))


def is_macos_custom(binary: str | os.PathLike[str]) -> bool:
    return os.fspath(binary) not in (INTEL_BREW, ARM_BREW)

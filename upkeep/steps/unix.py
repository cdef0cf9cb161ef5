"""
Unix update steps.

Each step is a function ``(ctx) -> None`` that probes for its
prerequisites, announces itself, then runs one or more sub-commands.
Probes that come back Missing end the step through SkipStep; any
failing sub-command stops the step, and sub-commands already run are
left as they are.
"""

from __future__ import annotations

import configparser
import logging
import os
import shlex
from pathlib import Path

from upkeep.core.execution.command import Command
from upkeep.core.execution.context import ExecutionContext
from upkeep.core.execution.errors import FatalStepError, SkipStep
from upkeep.core.execution.executor import accept_codes
from upkeep.core.execution.requirements import require, require_option, require_path
from upkeep.core.models.config import StepName
from upkeep.steps.variants import BrewVariant, brew_selection, is_macos_custom

logger = logging.getLogger(__name__)

# `asdf update` exits with 42 when there is no newer asdf to update to.
# Specific to asdf; other tools do not share this convention.
ASDF_NO_UPDATE_EXIT_CODE = 42


# ── Shell plugin managers ───────────────────────────────────────


def run_fisher(ctx: ExecutionContext) -> None:
    fish = require("fish").unwrap()

    # A custom fisher_path means the marker file lives elsewhere
    if os.environ.get("fisher_path") is None:
        require_path(ctx.base_dirs.home / ".config/fish/functions/fisher.fish").unwrap()

    ctx.print_separator("Fisher")
    ctx.check_run(Command(fish).args("-c", "fisher update"))


def run_bashit(ctx: ExecutionContext) -> None:
    require_path(ctx.base_dirs.home / ".bash_it").unwrap()

    ctx.print_separator("Bash-it")
    ctx.check_run(
        Command("bash").args("-lic", f"bash-it update {ctx.config.bashit_branch}")
    )


def run_oh_my_fish(ctx: ExecutionContext) -> None:
    fish = require("fish").unwrap()
    require_path(
        ctx.base_dirs.home / ".local/share/omf/pkg/omf/functions/omf.fish"
    ).unwrap()

    ctx.print_separator("oh-my-fish")
    ctx.check_run(Command(fish).args("-c", "omf update"))


def run_fish_plug(ctx: ExecutionContext) -> None:
    fish = require("fish").unwrap()
    require_path(
        ctx.base_dirs.home
        / ".local/share/fish/plug/kidonng/fish-plug/functions/plug.fish"
    ).unwrap()

    ctx.print_separator("fish-plug")
    ctx.check_run(Command(fish).args("-c", "plug update"))


# ── Desktop ─────────────────────────────────────────────────────


def upgrade_gnome_extensions(ctx: ExecutionContext) -> None:
    gdbus = require("gdbus").unwrap()
    desktop = os.environ.get("XDG_CURRENT_DESKTOP", "")
    require_option(
        desktop if "GNOME" in desktop else None,
        "Desktop does not appear to be GNOME",
    ).unwrap()

    output = ctx.check_output(
        Command(gdbus).args(
            "call",
            "--session",
            "--dest", "org.freedesktop.DBus",
            "--object-path", "/org/freedesktop/DBus",
            "--method", "org.freedesktop.DBus.ListActivatableNames",
        )
    )
    logger.debug("Checking for GNOME extensions: %s", output)
    if output is not None and "org.gnome.Shell.Extensions" not in output:
        raise SkipStep("GNOME Shell extensions are unregistered in DBus")

    ctx.print_separator("GNOME Shell extensions")
    ctx.check_run(
        Command(gdbus).args(
            "call",
            "--session",
            "--dest", "org.gnome.Shell.Extensions",
            "--object-path", "/org/gnome/Shell/Extensions",
            "--method", "org.gnome.Shell.Extensions.CheckForUpdates",
        )
    )


# ── Package managers ────────────────────────────────────────────


def run_pkgin(ctx: ExecutionContext) -> None:
    pkgin = require("pkgin").unwrap()
    yes = ["-y"] if ctx.config.yes(StepName.PKGIN) else []

    ctx.print_separator("pkgin")
    ctx.check_run(ctx.execute_elevated(pkgin).args("update", *yes))
    ctx.check_run(ctx.execute_elevated(pkgin).args("upgrade", *yes))


def _brew_binary(ctx: ExecutionContext, variant: BrewVariant) -> Path:
    if variant not in brew_selection(ctx):
        raise SkipStep(f"{variant.info.label} is not installed")

    binary = require(variant.binary).unwrap()
    if ctx.host.is_macos and variant is BrewVariant.PATH and not is_macos_custom(binary):
        raise SkipStep("Not a custom brew for macOS")
    return binary


def run_brew_formula(ctx: ExecutionContext, variant: BrewVariant) -> None:
    binary = _brew_binary(ctx, variant)
    selection = brew_selection(ctx)

    ctx.print_separator(selection.title(variant))
    brew = variant.command(ctx.host, binary)

    ctx.check_run(brew.arg("update"))
    ctx.check_run(brew.args("upgrade", "--ignore-pinned", "--formula"))

    if ctx.config.cleanup:
        ctx.check_run(brew.arg("cleanup"))

    if ctx.config.brew_autoremove:
        ctx.check_run(brew.arg("autoremove"))


def run_brew_cask(ctx: ExecutionContext, variant: BrewVariant) -> None:
    binary = _brew_binary(ctx, variant)
    selection = brew_selection(ctx)

    ctx.print_separator(f"{selection.title(variant)} - Cask")
    brew = variant.command(ctx.host, binary)

    # buo/cask-upgrade provides `brew cu`, which handles auto-updating casks
    repository = ctx.check_output(brew.args("--repository", "buo/cask-upgrade"))
    cask_upgrade_exists = repository is not None and Path(repository.strip()).exists()

    greedy = ctx.config.brew_cask_greedy
    if cask_upgrade_exists:
        args = ["cu", "-y"] + (["-a"] if greedy else [])
    else:
        args = ["upgrade", "--cask"] + (["--greedy"] if greedy else [])
    ctx.check_run(brew.args(*args))

    if ctx.config.cleanup:
        ctx.check_run(brew.arg("cleanup"))


def run_guix(ctx: ExecutionContext) -> None:
    guix = require("guix").unwrap()

    pull = ctx.run(Command(guix).arg("pull"), capture=True)
    logger.debug("guix pull outcome: %s", pull)

    ctx.print_separator("Guix")

    if not pull.success:
        raise SkipStep("Guix Pull Failed, Skipping")
    ctx.check_run(Command(guix).args("package", "-u"))


def _is_multi_user(nix: Path) -> bool:
    """A daemon (multi-user) install has its nix binary owned by root."""
    return os.stat(nix).st_uid == 0


def run_nix(ctx: ExecutionContext) -> None:
    nix = require("nix").unwrap()
    nix_channel = require("nix-channel").unwrap()
    nix_env = require("nix-env").unwrap()

    if ctx.host.distribution == "nixos":
        raise SkipStep("Nix on NixOS must be upgraded via nixos-rebuild switch")
    if ctx.host.is_macos and require("darwin-rebuild").found:
        raise SkipStep("Nix-darwin on macOS must be upgraded via darwin-rebuild switch")

    query = ctx.run(Command(nix_env).args("--query", "nix"), capture=True)
    logger.debug("nix-env --query nix outcome: %s", query)
    should_self_upgrade = query.success

    ctx.print_separator("Nix")

    multi_user = _is_multi_user(nix)
    logger.debug("Multi user nix: %s", multi_user)

    if should_self_upgrade:
        if multi_user:
            ctx.check_run(ctx.execute_elevated(nix).arg("upgrade-nix"))
        else:
            ctx.check_run(Command(nix).arg("upgrade-nix"))

    ctx.check_run(Command(nix_channel).arg("--update"))
    ctx.check_run(Command(nix_env).arg("--upgrade"))


def run_home_manager(ctx: ExecutionContext) -> None:
    home_manager = require("home-manager").unwrap()

    ctx.print_separator("home-manager")
    ctx.check_run(Command(home_manager).arg("switch"))


# ── Language toolchains ─────────────────────────────────────────


def run_asdf(ctx: ExecutionContext) -> None:
    asdf = require("asdf").unwrap()

    ctx.print_separator("asdf")
    handle = ctx.spawn(Command(asdf).arg("update"))
    handle.check(accept=accept_codes(ASDF_NO_UPDATE_EXIT_CODE))

    ctx.check_run(Command(asdf).args("plugin", "update", "--all"))


def _sdkman_selfupdate_enabled(config_path: Path) -> bool:
    """Read ``sdkman_selfupdate_feature`` from SDKMAN's key=value config."""
    # Settings are changed by appending lines, so a key may repeat; the last one wins
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        # The file has no section header
        parser.read_string("[general]\n" + config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, configparser.Error) as e:
        raise FatalStepError(f"Cannot read SDKMAN config {config_path}: {e}", e) from e
    value = parser.get("general", "sdkman_selfupdate_feature", fallback="false")
    return value.strip() == "true"


def run_sdkman(ctx: ExecutionContext) -> None:
    bash = require("bash").unwrap()

    sdkman_dir = Path(os.environ.get("SDKMAN_DIR") or ctx.base_dirs.home / ".sdkman")
    init = require_path(sdkman_dir / "bin" / "sdkman-init.sh").unwrap()

    ctx.print_separator("SDKMAN!")

    config_path = require_path(sdkman_dir / "etc" / "config").unwrap()

    def sdk(*args: str) -> Command:
        script = f"source {shlex.quote(str(init))} && sdk {' '.join(args)}"
        return Command(bash).args("-c", script)

    if _sdkman_selfupdate_enabled(config_path):
        ctx.check_run(sdk("selfupdate"))

    ctx.check_run(sdk("update"))
    ctx.check_run(sdk("upgrade"))

    if ctx.config.cleanup:
        ctx.check_run(sdk("flush", "archives"))
        ctx.check_run(sdk("flush", "temp"))


def run_bun(ctx: ExecutionContext) -> None:
    bun = require("bun").unwrap()

    ctx.print_separator("Bun")
    ctx.check_run(Command(bun).arg("upgrade"))


# ── Misc tools ──────────────────────────────────────────────────


def run_yadm(ctx: ExecutionContext) -> None:
    yadm = require("yadm").unwrap()

    ctx.print_separator("yadm")
    ctx.check_run(Command(yadm).arg("pull"))


def run_tldr(ctx: ExecutionContext) -> None:
    tldr = require("tldr").unwrap()

    ctx.print_separator("TLDR")
    ctx.check_run(Command(tldr).arg("--update"))


def run_pearl(ctx: ExecutionContext) -> None:
    pearl = require("pearl").unwrap()

    ctx.print_separator("pearl")
    ctx.check_run(Command(pearl).arg("update"))

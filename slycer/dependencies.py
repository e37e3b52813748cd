"""
slycer.dependencies - External binary checks and auto-installation.

Verifies that yt-dlp and FFmpeg are on PATH and, when allowed, installs the
missing ones with the platform package manager.
"""

from __future__ import annotations

import os
import shutil
import sys
from collections.abc import Callable, Sequence

from slycer.exceptions import DependencyError
from slycer.logging import logger
from slycer.process import run_command

REQUIRED_BINARIES = ("yt-dlp", "ffmpeg")

INSTALL_HINT = (
    "Install with: brew install yt-dlp ffmpeg (macOS), "
    "apt install yt-dlp ffmpeg (Linux) or winget install yt-dlp.yt-dlp Gyan.FFmpeg (Windows), "
    "or rerun with --yes"
)

# Package managers tried in order, per sys.platform prefix
INSTALLERS: dict[str, tuple[str, ...]] = {
    "darwin": ("brew",),
    "linux": ("apt-get", "dnf", "yum", "pacman", "zypper", "apk"),
    "win32": ("winget", "choco", "scoop"),
}

WINGET_IDS = {
    "ffmpeg": "Gyan.FFmpeg",
    "yt-dlp": "yt-dlp.yt-dlp",
}


def find_missing(binaries: Sequence[str] = REQUIRED_BINARIES) -> list[str]:
    """Return the binaries from *binaries* that are not on PATH."""
    return [name for name in binaries if shutil.which(name) is None]


def choose_installer(platform: str | None = None) -> str | None:
    """Return the first available package manager for the platform, if any."""
    platform = platform or sys.platform
    for prefix, candidates in INSTALLERS.items():
        if platform.startswith(prefix):
            return next((c for c in candidates if shutil.which(c)), None)
    return None


def install_commands(installer: str, packages: Sequence[str]) -> list[list[str]]:
    """Build the command lines that install *packages* with *installer*.

    Linux package managers run through ``sudo -n`` so a missing sudo
    credential fails fast instead of prompting.
    """
    pkgs = list(packages)
    if installer == "brew":
        return [["brew", "install", "--formula", *pkgs]]
    if installer == "apt-get":
        return [
            ["sudo", "-n", "apt-get", "update"],
            [
                "sudo",
                "-n",
                "apt-get",
                "install",
                "-y",
                "--no-install-recommends",
                "--no-upgrade",
                *pkgs,
            ],
        ]
    if installer == "dnf":
        return [["sudo", "-n", "dnf", "install", "-y", "--setopt=install_weak_deps=False", *pkgs]]
    if installer == "yum":
        return [["sudo", "-n", "yum", "install", "-y", *pkgs]]
    if installer == "pacman":
        return [["sudo", "-n", "pacman", "-S", "--noconfirm", "--needed", *pkgs]]
    if installer == "zypper":
        return [["sudo", "-n", "zypper", "install", "-y", "--no-recommends", *pkgs]]
    if installer == "apk":
        return [["sudo", "-n", "apk", "add", "--no-cache", *pkgs]]
    if installer == "winget":
        ids = [WINGET_IDS.get(p, p) for p in pkgs]
        return [
            [
                "winget",
                "install",
                "--silent",
                "--accept-package-agreements",
                "--accept-source-agreements",
                "--exact",
                *ids,
            ]
        ]
    if installer == "choco":
        return [["choco", "install", "-y", "--no-progress", *pkgs]]
    if installer == "scoop":
        return [["scoop", "install", *pkgs]]
    raise ValueError(f"Unsupported installer: {installer}")


def _installer_env(installer: str) -> dict[str, str] | None:
    if installer != "brew":
        return None
    env = dict(os.environ)
    env.update(
        {
            "HOMEBREW_NO_AUTO_UPDATE": "1",
            "HOMEBREW_NO_INSTALL_CLEANUP": "1",
            "HOMEBREW_NO_ANALYTICS": "1",
        }
    )
    return env


def install_missing(missing: Sequence[str], platform: str | None = None) -> None:
    """Install *missing* binaries with the platform package manager.

    Raises:
        DependencyError: If no package manager is available, an install
            command fails, or a binary is still missing afterwards
    """
    names = ", ".join(missing)
    installer = choose_installer(platform)
    if installer is None:
        raise DependencyError(
            names,
            "cannot determine a package manager for automatic installation",
            INSTALL_HINT,
        )

    logger.info("Installing %s with %s", names, installer)
    env = _installer_env(installer)
    for cmd in install_commands(installer, missing):
        result = run_command(cmd, env=env)
        if not result.ok:
            logger.warning("%s failed: %s", " ".join(cmd), result.error_tail())
            raise DependencyError(
                names,
                f"installation with {installer} failed: {result.error_tail(1)}",
                INSTALL_HINT,
            )

    still_missing = find_missing(missing)
    if still_missing:
        raise DependencyError(
            ", ".join(still_missing),
            "not found after installation",
            INSTALL_HINT,
        )


def ensure_dependencies(
    auto_install: bool = False,
    confirm: Callable[[str], bool] | None = None,
) -> list[str]:
    """Make sure yt-dlp and FFmpeg are available.

    Args:
        auto_install: Install missing binaries without asking
        confirm: Callback asked before installing when auto_install is False;
            without it, missing binaries are an error

    Returns:
        Names of the binaries that were installed (empty if none were missing)

    Raises:
        DependencyError: If binaries are missing and installation is declined or fails
    """
    missing = find_missing()
    if not missing:
        return []

    names = ", ".join(missing)
    logger.debug("Missing binaries: %s", names)
    if not auto_install:
        if confirm is None or not confirm(f"Missing binaries: {names}. Install automatically?"):
            raise DependencyError(names, "required but not installed", INSTALL_HINT)

    install_missing(missing)
    return missing

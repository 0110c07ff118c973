from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from ..errors import DependencyInstallError, UnsupportedPlatformError
from .command import CommandError, CommandRunner, log_output

logger = logging.getLogger(__name__)


# (argv, failure message) pairs, executed in order.
BUILD_DEPENDENCY_COMMANDS: Dict[str, Sequence[tuple[List[str], str]]] = {
    "apt-get": (
        (["apt-get", "update"], "Failed to update package lists"),
        (["apt-get", "install", "-y", "wget", "build-essential"], "Failed to install dependencies"),
    ),
    "yum": (
        (["yum", "update", "-y"], "Failed to update package lists"),
        (["yum", "groupinstall", "-y", "Development Tools"], "Failed to install development tools"),
        (["yum", "install", "-y", "wget"], "Failed to install wget"),
    ),
}


def install_build_dependencies(
    runner: CommandRunner,
    pkg_manager: str,
    *,
    dry_run: bool = False,
) -> None:
    """Install the compiler toolchain and wget. Any failure is fatal."""

    commands = BUILD_DEPENDENCY_COMMANDS.get(pkg_manager)
    if commands is None:
        raise UnsupportedPlatformError(f"Unsupported package manager: {pkg_manager}")

    for argv, failure in commands:
        try:
            runner.run(argv, dry_run=dry_run)
        except CommandError as e:
            log_output(e.result)
            raise DependencyInstallError(failure) from e

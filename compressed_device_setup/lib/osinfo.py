from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence

from ..errors import DetectionError, UnsupportedPlatformError
from .command import CommandRunner

logger = logging.getLogger(__name__)

# Probe order matters: the first executable found wins.
PACKAGE_MANAGERS: Sequence[str] = ("apt-get", "yum")


@dataclass(frozen=True)
class PlatformInfo:
    name: str
    os_id: str
    version_id: str
    pkg_manager: str


def parse_os_release(text: str) -> Dict[str, str]:
    """Parse os-release(5) ``KEY=value`` lines, honouring shell quoting."""

    data: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value.strip("\"'")]
        data[key.strip()] = parts[0] if parts else ""
    return data


def read_os_release(path: str) -> Dict[str, str]:
    p = Path(path)
    if not p.is_file():
        raise DetectionError("Unable to detect OS")
    return parse_os_release(p.read_text(encoding="utf-8", errors="ignore"))


def detect_package_manager(runner: CommandRunner) -> Optional[str]:
    return next((pm for pm in PACKAGE_MANAGERS if runner.which(pm)), None)


def detect_platform(runner: CommandRunner, *, os_release_path: str) -> PlatformInfo:
    release = read_os_release(os_release_path)

    pm = detect_package_manager(runner)
    if pm is None:
        raise UnsupportedPlatformError(
            "Unsupported package manager. Please install dependencies manually."
        )

    info = PlatformInfo(
        name=release.get("NAME") or release.get("PRETTY_NAME") or "unknown",
        os_id=release.get("ID", ""),
        version_id=release.get("VERSION_ID", ""),
        pkg_manager=pm,
    )
    logger.info("Detected OS: %s, using package manager: %s", info.name, info.pkg_manager)
    return info

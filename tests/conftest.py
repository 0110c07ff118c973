from __future__ import annotations

import json
from dataclasses import dataclass
from typing import List, Optional, Sequence

import pytest

from compressed_device_setup.config import SetupConfig
from compressed_device_setup.lib.command import CmdResult, CommandError, CommandRunner

UBUNTU_OS_RELEASE = """\
PRETTY_NAME="Ubuntu 24.04.1 LTS"
NAME="Ubuntu"
VERSION_ID="24.04"
ID=ubuntu
ID_LIKE=debian
"""

LZ4_BANNER = "*** LZ4 command line interface 64-bits v1.10.0, by Yann Collet ***\n"


@dataclass
class Call:
    argv: List[str]
    cwd: Optional[str]
    dry_run: bool


class FakeRunner(CommandRunner):
    """Records every command and answers from scripted responses (last match wins)."""

    def __init__(self, available: Sequence[str] = ("apt-get",)) -> None:
        self.calls: List[Call] = []
        self.available = set(available)
        self._responses: list[tuple[tuple[str, ...], int, str, str]] = []

    def on(self, *prefix: str, returncode: int = 0, stdout: str = "", stderr: str = "") -> "FakeRunner":
        self._responses.append((tuple(prefix), returncode, stdout, stderr))
        return self

    def run(self, argv, *, check=True, env=None, cwd=None, input_text=None, dry_run=False) -> CmdResult:
        argv_list = list(argv)
        self.calls.append(Call(argv=argv_list, cwd=cwd, dry_run=dry_run))
        if dry_run:
            return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

        rc, out, err = 0, "", ""
        for prefix, r_rc, r_out, r_err in reversed(self._responses):
            if tuple(argv_list[: len(prefix)]) == prefix:
                rc, out, err = r_rc, r_out, r_err
                break

        result = CmdResult(argv=argv_list, returncode=rc, stdout=out, stderr=err)
        if check and rc != 0:
            raise CommandError(result)
        return result

    def which(self, name: str) -> Optional[str]:
        return f"/usr/bin/{name}" if name in self.available else None

    @property
    def argvs(self) -> List[List[str]]:
        return [c.argv for c in self.calls]

    def ran(self, program: str) -> bool:
        return any(c.argv and c.argv[0] == program for c in self.calls)


def lsblk_json(*devices: dict) -> str:
    return json.dumps({"blockdevices": list(devices)})


@pytest.fixture(autouse=True)
def _isolated_ld_library_path(monkeypatch):
    monkeypatch.setenv("LD_LIBRARY_PATH", "")


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def cfg(tmp_path) -> SetupConfig:
    os_release = tmp_path / "os-release"
    os_release.write_text(UBUNTU_OS_RELEASE, encoding="utf-8")
    return SetupConfig(
        build_dir=str(tmp_path / "build"),
        setup_script_path=str(tmp_path / "sbin" / "setup_compressed_device.sh"),
        env_dropin_dir=str(tmp_path / "etc" / "environment.d"),
        env_file=str(tmp_path / "etc" / "environment"),
        os_release_path=str(os_release),
    )

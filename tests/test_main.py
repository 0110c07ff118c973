"""End-to-end pipeline tests with every external tool faked."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from compressed_device_setup import main as main_mod
from compressed_device_setup.errors import (
    AmbiguousDeviceError,
    DetectionError,
    DeviceNotFoundError,
    EnvironmentUpdateError,
    PrivilegeError,
    SetupScriptError,
    VersionVerificationError,
)

from .conftest import LZ4_BANNER, FakeRunner, lsblk_json

MOUNTED = lsblk_json(
    {"name": "sda", "size": "40G", "type": "disk", "mountpoint": "/"},
    {"name": "sdb1", "size": "10G", "type": "part", "mountpoint": "/mnt/ext4_volume", "fstype": "ext4"},
)


@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr(main_mod.os, "geteuid", lambda: 0)


def happy_runner() -> FakeRunner:
    return (
        FakeRunner(available=("apt-get",))
        .on("/usr/local/bin/lz4", "--version", stdout=LZ4_BANNER)
        .on("lsblk", stdout=MOUNTED)
    )


def test_full_run(cfg, as_root):
    runner = happy_runner()

    state = main_mod.run(cfg, runner=runner)

    assert state["device"] == "/dev/sdb1"
    assert state["platform"].pkg_manager == "apt-get"
    assert state["lz4"]["reported"] == LZ4_BANNER.strip()
    assert runner.argvs[-1] == [cfg.setup_script_path, "/dev/sdb1"]
    assert os.access(cfg.setup_script_path, os.X_OK)

    line = cfg.ld_library_path_line + "\n"
    assert (Path(cfg.env_dropin_dir) / "lz4.conf").read_text() == line
    assert Path(cfg.env_file).read_text() == line
    assert os.environ["LD_LIBRARY_PATH"].startswith("/usr/local/lib:")


def test_rerun_keeps_environment_file_stable(cfg, as_root):
    Path(cfg.env_file).parent.mkdir(parents=True, exist_ok=True)
    Path(cfg.env_file).write_text('PATH="/usr/bin"\n')

    main_mod.run(cfg, runner=happy_runner())
    first = Path(cfg.env_file).read_text()
    main_mod.run(cfg, runner=happy_runner())

    assert Path(cfg.env_file).read_text() == first
    assert first.splitlines().count(cfg.ld_library_path_line) == 1


def test_requires_root(cfg, monkeypatch):
    monkeypatch.setattr(main_mod.os, "geteuid", lambda: 1000)
    runner = happy_runner()
    with pytest.raises(PrivilegeError):
        main_mod.run(cfg, runner=runner)
    assert runner.calls == []


def test_missing_os_release_stops_everything(cfg, as_root):
    os.remove(cfg.os_release_path)
    runner = happy_runner()

    with pytest.raises(DetectionError):
        main_mod.run(cfg, runner=runner)

    assert runner.calls == []
    assert not os.path.exists(cfg.setup_script_path)
    assert not os.path.exists(cfg.env_file)


def test_version_mismatch_stops_before_script_generation(cfg, as_root):
    runner = happy_runner().on("/usr/local/bin/lz4", "--version", stdout="*** LZ4 v1.9.4 ***\n")

    with pytest.raises(VersionVerificationError):
        main_mod.run(cfg, runner=runner)

    assert not os.path.exists(cfg.setup_script_path)
    assert not runner.ran("lsblk")


def test_device_not_found_never_invokes_script(cfg, as_root):
    runner = happy_runner().on("lsblk", stdout=lsblk_json({"name": "sdb1", "mountpoint": "/mnt/other"}))

    with pytest.raises(DeviceNotFoundError):
        main_mod.run(cfg, runner=runner)

    assert not runner.ran(cfg.setup_script_path)


def test_ambiguous_device_never_invokes_script(cfg, as_root):
    runner = happy_runner().on(
        "lsblk",
        stdout=lsblk_json(
            {"name": "sdb1", "mountpoint": "/mnt/ext4_volume"},
            {"name": "sdc1", "mountpoint": "/mnt/ext4_volume"},
        ),
    )

    with pytest.raises(AmbiguousDeviceError):
        main_mod.run(cfg, runner=runner)

    assert not runner.ran(cfg.setup_script_path)


def test_setup_script_failure(cfg, as_root):
    runner = happy_runner().on(cfg.setup_script_path, returncode=1)
    with pytest.raises(SetupScriptError):
        main_mod.run(cfg, runner=runner)


def test_setup_script_failure_output_is_logged(cfg, as_root, caplog):
    runner = happy_runner().on(
        cfg.setup_script_path,
        returncode=1,
        stdout="2026-10-17 10:00:00 - ERROR: Failed to compress the test file\n",
    )
    with pytest.raises(SetupScriptError):
        main_mod.run(cfg, runner=runner)
    assert "setup: 2026-10-17 10:00:00 - ERROR: Failed to compress the test file" in caplog.text


def test_unreadable_environment_file(cfg, as_root):
    Path(cfg.env_file).parent.mkdir(parents=True, exist_ok=True)
    Path(cfg.env_file).write_bytes(b"LANG=\xff\xfe\n")
    with pytest.raises(EnvironmentUpdateError):
        main_mod.run(cfg, runner=happy_runner())


def test_dry_run_writes_nothing(cfg, as_root, monkeypatch):
    monkeypatch.setenv("LD_LIBRARY_PATH", "/opt/lib")
    runner = happy_runner()

    main_mod.run(cfg, runner=runner, dry_run=True)

    assert not os.path.exists(cfg.setup_script_path)
    assert not os.path.exists(cfg.env_file)
    assert not runner.ran("/usr/local/bin/lz4")
    assert os.environ["LD_LIBRARY_PATH"] == "/opt/lib"
    lsblk_call = next(c for c in runner.calls if c.argv[0] == "lsblk")
    assert lsblk_call.dry_run is False
    assert all(c.dry_run for c in runner.calls if c.argv[0] in {"apt-get", "wget", "make", "ldconfig"})


def _write_config(cfg, tmp_path) -> str:
    p = tmp_path / "setup.yaml"
    p.write_text(
        "\n".join(
            [
                f"build_dir: {cfg.build_dir}",
                f"setup_script_path: {cfg.setup_script_path}",
                f"env_dropin_dir: {cfg.env_dropin_dir}",
                f"env_file: {cfg.env_file}",
                f"os_release_path: {cfg.os_release_path}",
                "",
            ]
        )
    )
    return str(p)


def test_main_returns_zero_on_success(cfg, tmp_path, as_root):
    argv = ["--config", _write_config(cfg, tmp_path), "--log", str(tmp_path / "setup.log")]
    assert main_mod.main(argv, runner=happy_runner()) == 0


def test_main_returns_one_on_failure(cfg, tmp_path, as_root, caplog):
    os.remove(cfg.os_release_path)
    argv = ["--config", _write_config(cfg, tmp_path), "--log", str(tmp_path / "setup.log")]

    assert main_mod.main(argv, runner=happy_runner()) == 1
    assert "ERROR: Unable to detect OS" in caplog.text


def test_main_bad_config(tmp_path, as_root):
    p = tmp_path / "setup.yaml"
    p.write_text("nonsense_key: 1\n")
    assert main_mod.main(["--config", str(p), "--log", str(tmp_path / "setup.log")]) == 1

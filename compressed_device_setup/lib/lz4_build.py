from __future__ import annotations

import logging
import os
from pathlib import Path

from ..config import SetupConfig
from ..errors import ToolInstallError, VersionVerificationError
from .command import CommandError, CommandRunner, log_output

logger = logging.getLogger(__name__)


def archive_name(version: str) -> str:
    return f"v{version}.tar.gz"


def source_dir_name(version: str) -> str:
    return f"lz4-{version}"


def build_from_source(runner: CommandRunner, cfg: SetupConfig, *, dry_run: bool = False) -> None:
    """Download, extract, build and install LZ4 under cfg.install_prefix.

    Cleanup of the archive and source tree only happens after a successful
    install; a failure leaves them in place.
    """

    version = cfg.lz4_version
    build_dir = Path(cfg.build_dir)
    archive = archive_name(version)
    src = source_dir_name(version)
    prefix_arg = f"PREFIX={cfg.install_prefix}"

    if dry_run:
        logger.info("Would create %s", str(build_dir))
    else:
        try:
            build_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ToolInstallError(f"Failed to create build directory {build_dir}: {e}") from e

    stages = [
        (["wget", "-O", archive, cfg.download_url], str(build_dir), f"Failed to download LZ4 {version}"),
        (["tar", "xzf", archive], str(build_dir), f"Failed to extract LZ4 {version}"),
        (["make", prefix_arg], str(build_dir / src), f"Failed to compile LZ4 {version}"),
        (["make", prefix_arg, "install"], str(build_dir / src), f"Failed to install LZ4 {version}"),
    ]
    for argv, cwd, failure in stages:
        try:
            runner.run(argv, cwd=cwd, dry_run=dry_run)
        except CommandError as e:
            log_output(e.result)
            raise ToolInstallError(failure) from e

    r = runner.run(["rm", "-rf", src, archive], check=False, cwd=str(build_dir), dry_run=dry_run)
    if r.returncode != 0:
        logger.warning("Cleanup of %s failed (%s); continuing", build_dir, r.returncode)


def refresh_library_path(runner: CommandRunner, cfg: SetupConfig, *, dry_run: bool = False) -> str:
    """Run ldconfig and prepend the install lib dir to LD_LIBRARY_PATH for this process.

    Returns the new value; dry_run leaves os.environ untouched.
    """

    try:
        runner.run(["ldconfig"], dry_run=dry_run)
    except CommandError as e:
        log_output(e.result)
        raise ToolInstallError("Failed to update shared library cache") from e

    current = os.environ.get("LD_LIBRARY_PATH", "")
    value = f"{cfg.lib_dir}:{current}"
    if dry_run:
        logger.info("Would set LD_LIBRARY_PATH=%s", value)
    else:
        os.environ["LD_LIBRARY_PATH"] = value
    return value


def installed_version(runner: CommandRunner, cfg: SetupConfig) -> str:
    try:
        r = runner.run([cfg.lz4_binary, "--version"])
    except CommandError as e:
        log_output(e.result)
        raise VersionVerificationError(f"Unable to run {cfg.lz4_binary} --version") from e
    # lz4 prints its banner on stdout or stderr depending on release.
    lines = (r.stdout or r.stderr or "").strip().splitlines()
    return lines[0].strip() if lines else ""


def verify_version(runner: CommandRunner, cfg: SetupConfig) -> str:
    reported = installed_version(runner, cfg)
    logger.info("Installed LZ4 version: %s", reported)
    if f"v{cfg.lz4_version}" not in reported:
        raise VersionVerificationError(
            f"LZ4 {cfg.lz4_version} installation failed or incorrect version installed"
        )
    return reported

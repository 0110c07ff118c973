from __future__ import annotations

import argparse
import logging
import os
from typing import Any, Dict, Optional

from .config import DEFAULT_CONFIG, SetupConfig, load_config
from .errors import PrivilegeError, SetupError
from .lib.command import CommandRunner
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import SetupCtx, run_pipeline
from .steps import (
    DetectPlatformStep,
    InstallDependenciesStep,
    InstallLz4Step,
    RunSetupScriptStep,
    SelectDeviceStep,
    UpdateEnvironmentStep,
    WriteSetupScriptStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return [
        DetectPlatformStep(),
        InstallDependenciesStep(),
        InstallLz4Step(),
        WriteSetupScriptStep(),
        UpdateEnvironmentStep(),
        SelectDeviceStep(),
        RunSetupScriptStep(),
    ]


def require_root() -> None:
    if os.geteuid() != 0:
        raise PrivilegeError("This script must be run as root")


def run(
    cfg: SetupConfig = DEFAULT_CONFIG,
    *,
    runner: Optional[CommandRunner] = None,
    dry_run: bool = False,
) -> Dict[str, Any]:
    """Provision the host and run the compression demo. Raises SetupError on failure."""

    require_root()

    ctx = SetupCtx(cfg=cfg, runner=runner or CommandRunner(), dry_run=dry_run)
    result = run_pipeline(ctx=ctx, state={}, steps=build_steps())
    state = result.state

    logger.info(
        "Setup complete. The compressed file using LZ4 v%s with %sB page size has been created.",
        cfg.lz4_version,
        cfg.block_size,
    )
    logger.info("Device: %s", state.get("device"))
    logger.info("Please review the setup and ensure everything is correct.")
    return state


def main(argv: Optional[list[str]] = None, *, runner: Optional[CommandRunner] = None) -> int:
    p = argparse.ArgumentParser(
        prog="compressed-device-setup",
        description="Install a pinned LZ4 release and compress a test file on the ext4 volume.",
    )
    p.add_argument("--config", default=None, help="YAML file overriding the built-in settings")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the log file")
    p.add_argument("--dry-run", action="store_true", help="Log commands and writes without executing them")

    args = p.parse_args(argv)

    configure_logging(log_path=args.log)

    try:
        cfg = load_config(args.config) if args.config else DEFAULT_CONFIG
        run(cfg, runner=runner, dry_run=args.dry_run)
    except SetupError as e:
        logger.error("ERROR: %s", e)
        return e.exit_code
    except Exception as e:
        logger.exception("ERROR: %s", e)
        return 1
    return 0

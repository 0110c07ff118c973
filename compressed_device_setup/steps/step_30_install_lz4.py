from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.lz4_build import build_from_source, refresh_library_path, verify_version
from ..pipeline import SetupCtx

logger = logging.getLogger(__name__)


class InstallLz4Step:
    step_id = "30_install_lz4"

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        logger.info("Installing LZ4 %s...", cfg.lz4_version)

        build_from_source(ctx.runner, cfg, dry_run=ctx.dry_run)
        ld_path = refresh_library_path(ctx.runner, cfg, dry_run=ctx.dry_run)

        if ctx.dry_run:
            logger.info("Would verify %s --version reports v%s", cfg.lz4_binary, cfg.lz4_version)
            reported = None
        else:
            reported = verify_version(ctx.runner, cfg)

        state["lz4"] = {
            "version": cfg.lz4_version,
            "reported": reported,
            "binary": cfg.lz4_binary,
            "ld_library_path": ld_path,
        }
        return state

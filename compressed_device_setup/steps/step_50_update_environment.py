from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..errors import EnvironmentUpdateError
from ..lib.envfile import upsert_line, write_dropin
from ..pipeline import SetupCtx

logger = logging.getLogger(__name__)


class UpdateEnvironmentStep:
    step_id = "50_update_environment"

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        line = cfg.ld_library_path_line
        dropin = Path(cfg.env_dropin_dir) / cfg.env_dropin_name

        logger.info("Updating system-wide environment...")
        if ctx.dry_run:
            logger.info("Would write %s and %s: %s", str(dropin), cfg.env_file, line)
            return state

        try:
            write_dropin(cfg.env_dropin_dir, cfg.env_dropin_name, line)
            logger.info("Added LD_LIBRARY_PATH to %s", str(dropin))

            existed = Path(cfg.env_file).exists()
            changed = upsert_line(cfg.env_file, line)
        except (OSError, UnicodeDecodeError) as e:
            raise EnvironmentUpdateError(f"Failed to update system environment: {e}") from e

        if not existed:
            logger.info("Created %s", cfg.env_file)
        elif changed:
            logger.info("Updated %s", cfg.env_file)
        else:
            logger.info("%s already up to date", cfg.env_file)

        state["environment"] = {"dropin": str(dropin), "env_file": cfg.env_file, "line": line}
        return state

from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.setup_script import render_setup_script, write_setup_script
from ..pipeline import SetupCtx

logger = logging.getLogger(__name__)


class WriteSetupScriptStep:
    step_id = "40_write_setup_script"

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Creating setup script...")
        write_setup_script(ctx.cfg.setup_script_path, render_setup_script(ctx.cfg), dry_run=ctx.dry_run)
        state["setup_script"] = ctx.cfg.setup_script_path
        return state

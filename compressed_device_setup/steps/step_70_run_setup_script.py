from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import SetupScriptError
from ..lib.command import CommandError, log_output
from ..pipeline import SetupCtx

logger = logging.getLogger(__name__)


class RunSetupScriptStep:
    step_id = "70_run_setup_script"

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        device = state.get("device")
        if not device:
            raise RuntimeError("device missing; run select step first")

        logger.info("Setting up compressed device...")
        try:
            r = ctx.runner.run(
                [ctx.cfg.setup_script_path, device],
                dry_run=ctx.dry_run,
            )
        except CommandError as e:
            log_output(e.result, prefix="setup: ")
            raise SetupScriptError("Failed to set up compressed device") from e

        for line in (r.stdout or "").splitlines():
            logger.info("setup: %s", line)
        return state

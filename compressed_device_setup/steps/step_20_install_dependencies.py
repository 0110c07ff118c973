from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.pkg import install_build_dependencies
from ..pipeline import SetupCtx

logger = logging.getLogger(__name__)


class InstallDependenciesStep:
    step_id = "20_install_dependencies"

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        platform = state.get("platform")
        if platform is None:
            raise RuntimeError("platform missing; run detect step first")

        logger.info("Installing dependencies...")
        install_build_dependencies(ctx.runner, platform.pkg_manager, dry_run=ctx.dry_run)
        return state

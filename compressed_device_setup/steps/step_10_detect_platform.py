from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.osinfo import detect_platform
from ..pipeline import SetupCtx

logger = logging.getLogger(__name__)


class DetectPlatformStep:
    step_id = "10_detect_platform"

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        state["platform"] = detect_platform(ctx.runner, os_release_path=ctx.cfg.os_release_path)
        return state

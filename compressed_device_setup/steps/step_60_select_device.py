from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.block import format_inventory, list_block_devices, select_device
from ..pipeline import SetupCtx

logger = logging.getLogger(__name__)


class SelectDeviceStep:
    step_id = "60_select_device"

    def run(self, ctx: SetupCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        devices = list_block_devices(ctx.runner)
        for line in format_inventory(devices).splitlines():
            logger.info("%s", line)

        dev = select_device(devices, ctx.cfg.mount_point)
        logger.info("Automatically selected device: %s", dev.path)
        state["device"] = dev.path
        return state

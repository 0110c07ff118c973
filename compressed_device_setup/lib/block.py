from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..errors import AmbiguousDeviceError, DeviceNotFoundError
from .command import CommandError, CommandRunner, log_output

logger = logging.getLogger(__name__)

LSBLK_COLUMNS = "NAME,SIZE,TYPE,MOUNTPOINT,FSTYPE,UUID"


@dataclass(frozen=True)
class BlockDevice:
    name: str
    size: str = ""
    type: str = ""
    mountpoint: Optional[str] = None
    fstype: Optional[str] = None
    uuid: Optional[str] = None

    @property
    def path(self) -> str:
        return f"/dev/{self.name}"


def _mountpoint(node: Dict[str, Any]) -> Optional[str]:
    # util-linux >= 2.37 may report "mountpoints" as a list.
    mp = node.get("mountpoint")
    if mp:
        return str(mp)
    mps = [m for m in (node.get("mountpoints") or []) if m]
    return str(mps[0]) if mps else None


def _flatten(nodes: Iterable[Dict[str, Any]]) -> Iterable[Dict[str, Any]]:
    for node in nodes:
        yield node
        yield from _flatten(node.get("children") or [])


def parse_lsblk_json(text: str) -> List[BlockDevice]:
    data = json.loads(text or "{}")
    devices: List[BlockDevice] = []
    seen: set[str] = set()
    for node in _flatten(data.get("blockdevices") or []):
        # Shared children (md arrays, multipath maps) appear under every parent.
        name = str(node.get("name") or "")
        if name in seen:
            continue
        seen.add(name)
        devices.append(
            BlockDevice(
                name=name,
                size=str(node.get("size") or ""),
                type=str(node.get("type") or ""),
                mountpoint=_mountpoint(node),
                fstype=node.get("fstype") or None,
                uuid=node.get("uuid") or None,
            )
        )
    return devices


def list_block_devices(runner: CommandRunner) -> List[BlockDevice]:
    """Query the live block-device table. Read-only, so it runs even in dry-run."""

    try:
        r = runner.run(["lsblk", "-J", "-o", LSBLK_COLUMNS])
    except CommandError as e:
        log_output(e.result)
        raise DeviceNotFoundError(f"Unable to list block devices: {e}") from e
    try:
        return parse_lsblk_json(r.stdout)
    except (ValueError, AttributeError) as e:
        raise DeviceNotFoundError(f"Unable to parse lsblk output: {e}") from e


def format_inventory(devices: Iterable[BlockDevice]) -> str:
    lines = ["Available devices:", "----------------"]
    for dev in devices:
        lines.append(f"Device: {dev.path}")
        lines.append(f"  Size: {dev.size}")
        lines.append(f"  Type: {dev.type}")
        lines.append(f"  Mounted on: {dev.mountpoint or 'Not mounted'}")
        if dev.fstype:
            lines.append(f"  Filesystem: {dev.fstype}")
        if dev.uuid:
            lines.append(f"  UUID: {dev.uuid}")
        lines.append("")
    return "\n".join(lines)


def select_device(devices: Iterable[BlockDevice], mount_point: str) -> BlockDevice:
    """Return the single device mounted at mount_point."""

    matches = [d for d in devices if d.mountpoint == mount_point]
    if not matches:
        raise DeviceNotFoundError(f"Could not find device mounted at {mount_point}")
    if len(matches) > 1:
        raise AmbiguousDeviceError(
            f"Multiple devices mounted at {mount_point}: {', '.join(d.path for d in matches)}"
        )
    return matches[0]

from __future__ import annotations

import logging
import shlex
from pathlib import Path

from ..config import SetupConfig
from ..errors import ScriptGenerationError

logger = logging.getLogger(__name__)

SCRIPT_LOG_TAG = "compressed-device"


def render_setup_script(cfg: SetupConfig) -> str:
    """Render the standalone demonstration script.

    Configuration is embedded as literals; the script never reads anything
    from the provisioner at run time. Its only input is the device path.
    """

    q = shlex.quote
    return "\n".join(
        [
            "#!/bin/bash",
            "# Generated by compressed-device-setup. Usage: $0 <device>",
            "",
            "set -euo pipefail",
            "",
            f"LZ4_INSTALL_DIR={q(cfg.install_prefix)}",
            f"BLOCK_SIZE={int(cfg.block_size)}",
            f"WORK_DIR={q(cfg.work_dir)}",
            f"TEST_FILE_MIB={int(cfg.test_file_mib)}",
            "",
            "# Ensure the pinned LZ4 build is used",
            'export LD_LIBRARY_PATH="$LZ4_INSTALL_DIR/lib:${LD_LIBRARY_PATH:-}"',
            'export PATH="$LZ4_INSTALL_DIR/bin:$PATH"',
            "",
            "log() {",
            "    if command -v logger >/dev/null 2>&1; then",
            f'        logger -t {SCRIPT_LOG_TAG} "$1" || true',
            "    fi",
            "    echo \"$(date '+%Y-%m-%d %H:%M:%S') - $1\"",
            "}",
            "",
            "error_exit() {",
            '    log "ERROR: $1"',
            "    exit 1",
            "}",
            "",
            'DEVICE="${1:-}"',
            'if [ -z "$DEVICE" ]; then',
            '    error_exit "No device specified. Usage: $0 <device>"',
            "fi",
            'log "Using device $DEVICE (page size ${BLOCK_SIZE}B)"',
            "",
            'mkdir -p "$WORK_DIR" || error_exit "Failed to create $WORK_DIR"',
            "",
            'log "Creating a test file to demonstrate compression..."',
            'dd if=/dev/zero of="$WORK_DIR/testfile" bs=1M count="$TEST_FILE_MIB" 2>/dev/null \\',
            '    || error_exit "Failed to create the test file"',
            "",
            'log "Compressing the test file using LZ4..."',
            'lz4 -f "$WORK_DIR/testfile" "$WORK_DIR/testfile.lz4" || error_exit "Failed to compress the test file"',
            "",
            'log "Compressed file created at $WORK_DIR/testfile.lz4"',
            "",
        ]
    )


def write_setup_script(path: str, contents: str, *, dry_run: bool = False) -> None:
    p = Path(path)
    if dry_run:
        logger.info("Would write %s", str(p))
        return
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(contents, encoding="utf-8")
        p.chmod(0o755)
    except OSError as e:
        raise ScriptGenerationError(f"Failed to write setup script {p}: {e}") from e
    logger.info("Wrote setup script %s", str(p))

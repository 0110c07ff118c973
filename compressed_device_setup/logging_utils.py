from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = "/var/log/compressed-device-setup.log"
SYSLOG_TAG = "compressed-device-setup"
SYSLOG_SOCKET = "/dev/log"


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
    use_syslog: bool = True,
) -> str:
    """Configure logging.

    Every line goes to the console (stdout), to a log file and, when the local
    syslog socket exists, to syslog tagged ``compressed-device-setup``.

    Notes:
    - /var/log may not be writable; the log file then falls back to the
      current working directory.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_cds_configured", False):
        return getattr(logger, "_cds_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s - %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        chosen_path = log_path
    except OSError:
        fallback = str(Path.cwd() / "compressed-device-setup.log")
        file_handler = logging.FileHandler(fallback)
        chosen_path = fallback
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(fmt)
        handlers.append(console)

    if use_syslog and os.path.exists(SYSLOG_SOCKET):
        try:
            syslog = logging.handlers.SysLogHandler(address=SYSLOG_SOCKET)
        except OSError:
            syslog = None
        if syslog is not None:
            syslog.ident = f"{SYSLOG_TAG}: "
            syslog.setFormatter(logging.Formatter("%(message)s"))
            handlers.append(syslog)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_cds_configured", True)
    setattr(logger, "_cds_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path

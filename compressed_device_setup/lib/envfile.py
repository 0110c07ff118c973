from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def upsert_line(path: str, line: str) -> bool:
    """Ensure ``line`` is present in the file exactly once.

    Creates the file if missing, appends when no exact line match exists and
    collapses duplicate copies down to the first one. Returns True when the
    file was changed.
    """

    p = Path(path)
    if not p.exists():
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(line + "\n", encoding="utf-8")
        return True

    text = p.read_text(encoding="utf-8")
    lines = text.splitlines()
    matches = lines.count(line)

    if matches == 1:
        return False

    if matches == 0:
        sep = "" if (not text or text.endswith("\n")) else "\n"
        with p.open("a", encoding="utf-8") as f:
            f.write(f"{sep}{line}\n")
        return True

    kept: list[str] = []
    seen = False
    for ln in lines:
        if ln == line:
            if seen:
                continue
            seen = True
        kept.append(ln)
    p.write_text("\n".join(kept) + "\n", encoding="utf-8")
    logger.info("Removed %d duplicate entries from %s", matches - 1, str(p))
    return True


def write_dropin(directory: str, name: str, line: str) -> Path:
    """Overwrite a drop-in fragment with a single line, creating the directory if absent."""

    d = Path(directory)
    d.mkdir(parents=True, exist_ok=True)
    p = d / name
    p.write_text(line + "\n", encoding="utf-8")
    return p

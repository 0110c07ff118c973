from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


class CommandError(RuntimeError):
    """A command exited non-zero (or could not be started) with check=True."""

    def __init__(self, result: CmdResult) -> None:
        self.result = result
        detail = result.stderr.strip()
        msg = f"Command failed ({result.returncode}): {fmt_argv(result.argv)}"
        super().__init__(f"{msg}\n{detail}" if detail else msg)


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def log_output(result: CmdResult, *, prefix: str = "", level: int = logging.ERROR) -> None:
    """Surface a command's captured output at a level the console shows."""

    for stream in (result.stdout, result.stderr):
        for line in (stream or "").splitlines():
            if line.strip():
                logger.log(level, "%s%s", prefix, line)


class CommandRunner:
    """Synchronous subprocess execution with consistent logging.

    Steps never call subprocess directly; they receive a runner so tests can
    substitute a fake.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        env: Mapping[str, str] | None = None,
        cwd: str | None = None,
        input_text: str | None = None,
        dry_run: bool = False,
    ) -> CmdResult:
        """Run a command.

        - Always logs the command.
        - Captures stdout/stderr.
        - dry_run logs but does not execute.
        """

        argv_list = list(argv)
        logger.info("CMD %s", fmt_argv(argv_list))

        if dry_run:
            return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

        try:
            p = subprocess.run(
                argv_list,
                input=input_text,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=cwd,
                env=dict(os.environ, **(env or {})),
            )
        except OSError as e:
            # Missing executable or bad cwd: same contract as a failing command.
            result = CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))
            if check:
                raise CommandError(result) from e
            return result

        if p.stdout:
            logger.debug("STDOUT %s", p.stdout.strip())
        if p.stderr:
            logger.debug("STDERR %s", p.stderr.strip())

        result = CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)
        if check and p.returncode != 0:
            raise CommandError(result)
        return result

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence

from ..errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


class CommandRunner(Protocol):
    """Synchronous external command capability."""

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = False,
        env: Mapping[str, str] | None = None,
    ) -> CmdResult:
        ...


class SubprocessRunner:
    """Run commands on the host with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr so callers can parse tool output.
    - check=True raises CommandError on a non-zero exit.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = False,
        env: Mapping[str, str] | None = None,
    ) -> CmdResult:
        argv_list = list(argv)
        logger.info("CMD %s", fmt_argv(argv_list))

        try:
            p = subprocess.run(
                argv_list,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=dict(os.environ, **(env or {})),
            )
        except OSError as e:
            # Missing binary; report it the same way as a failed run.
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


def capture(runner: CommandRunner, argv: Sequence[str]) -> str:
    """Run a command that must succeed and return its stripped stdout."""

    return runner.run(argv, check=True).stdout.strip()

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .lib.command import CmdResult


class PkgbasifyError(Exception):
    """Base class for failures that stop a conversion before it commits."""


class PreflightError(PkgbasifyError):
    pass


class UnsupportedVersion(PreflightError):
    pass


class UserAbort(PkgbasifyError):
    pass


class InventoryMismatch(PkgbasifyError):
    """The remote package layout no longer matches what the selector expects."""


class CommandError(PkgbasifyError):
    def __init__(self, result: "CmdResult") -> None:
        from .lib.command import fmt_argv

        self.result = result
        msg = f"Command failed ({result.returncode}): {fmt_argv(result.argv)}"
        if result.stderr.strip():
            msg += f"\n{result.stderr.strip()}"
        super().__init__(msg)


@dataclass(frozen=True)
class CommitError:
    """A post-commit step that failed; recorded, never raised."""

    operation: str
    message: str


@dataclass(frozen=True)
class MergeConflict:
    """A configuration file whose local edits overlap the installed version."""

    path: str
    backup: str

from __future__ import annotations

import enum
import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from .config import Settings
from .errors import CommitError, MergeConflict
from .lib.command import CommandRunner
from .lib.confirm import Confirmer
from .lib.env import WORK_DIR_PREFIX
from .lib.pkg import PkgClient
from .lib.version import VersionDescriptor

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    SETUP = "setup"
    COMMITTED = "committed"
    DONE = "done"


@dataclass
class ConversionSession:
    """Everything one conversion run knows, threaded through every step."""

    settings: Settings
    runner: CommandRunner
    confirmer: Confirmer
    work_dir: Path
    phase: Phase = Phase.SETUP
    commit_errors: List[CommitError] = field(default_factory=list)
    merge_conflicts: List[MergeConflict] = field(default_factory=list)
    decisions: Dict[str, Any] = field(default_factory=dict)

    version: Optional[VersionDescriptor] = None
    repo_conf: Optional[str] = None
    inventory: Optional[Mapping[str, bool]] = None
    selected: Optional[List[str]] = None

    @classmethod
    def create(cls, settings: Settings, runner: CommandRunner, confirmer: Confirmer) -> "ConversionSession":
        work_dir = Path(tempfile.mkdtemp(prefix=WORK_DIR_PREFIX, dir=settings.work_dir_parent))
        logger.info("Session work dir: %s", str(work_dir))
        return cls(settings=settings, runner=runner, confirmer=confirmer, work_dir=work_dir)

    @property
    def snapshot_dir(self) -> Path:
        return self.work_dir / "current"

    @property
    def scratch_repos_dir(self) -> Path:
        return self.work_dir / "repos"

    @property
    def scratch_db_dir(self) -> Path:
        return self.work_dir / "pkgdb"

    def pkg(self) -> PkgClient:
        """pkg(8) against the target system's real configuration and database."""
        rootdir = self.settings.host_root if self.settings.alternate_root else None
        return PkgClient(runner=self.runner, repo=self.settings.repo_name, rootdir=rootdir)

    def scratch_pkg(self) -> PkgClient:
        """pkg(8) pointed at the work dir so queries leave the host untouched.

        Catalogue queries do not depend on the target root, so no ``-r``.
        """
        return PkgClient(runner=self.runner, repo=self.settings.repo_name).with_options(
            REPOS_DIR=str(self.scratch_repos_dir),
            PKG_DBDIR=str(self.scratch_db_dir),
        )

    def host(self, path: str) -> Path:
        return self.settings.host(path)

    def commit(self) -> None:
        if self.phase is not Phase.SETUP:
            raise RuntimeError(f"cannot commit from phase {self.phase.value}")
        logger.warning("Point of no return: the host is about to be modified")
        self.phase = Phase.COMMITTED

    def finish(self) -> None:
        if self.phase is not Phase.COMMITTED:
            raise RuntimeError(f"cannot finish from phase {self.phase.value}")
        self.phase = Phase.DONE

    def record_error(self, operation: str, message: str) -> None:
        logger.error("Error: %s: %s", operation, message)
        self.commit_errors.append(CommitError(operation=operation, message=message))

    def attempt(self, operation: str, fn: Callable[[], Any]) -> bool:
        """Run one post-commit operation; a failure is recorded, not raised."""

        if self.phase is Phase.SETUP:
            raise RuntimeError("attempt() is only meaningful after commit")
        try:
            fn()
        except Exception as e:
            self.record_error(operation, str(e) or type(e).__name__)
            return False
        return True

    @property
    def ok(self) -> bool:
        return not self.commit_errors and not self.merge_conflicts

    def summary(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "version": self.version.raw if self.version else None,
            "selected_packages": list(self.selected or []),
            "inventory": dict(self.inventory or {}),
            "decisions": dict(self.decisions),
            "commit_errors": [{"operation": e.operation, "message": e.message} for e in self.commit_errors],
            "merge_conflicts": [{"path": c.path, "backup": c.backup} for c in self.merge_conflicts],
        }

    def close(self) -> None:
        shutil.rmtree(self.work_dir, ignore_errors=True)

"""Snapshot and three-way merge of configuration files.

pkg(8) keeps a ``<file>.pkgsave`` copy of every live file it overwrites. The
etcupdate(8) database holds the stock version of each file from the previous
base install, which is the common ancestor for a three-way merge between the
saved local copy ("ours") and the newly installed file ("theirs").
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..errors import CommandError, CommitError, MergeConflict, PreflightError
from .command import CmdResult, CommandRunner
from .env import BACKUP_SUFFIX

logger = logging.getLogger(__name__)

# Pseudo filesystems that never hold backups and must not be walked.
SKIP_DIRS = ("dev", "proc")


@dataclass(frozen=True)
class ConfigTriple:
    ours: Path
    theirs: Path
    base: Path


@dataclass
class MergeReport:
    merged: List[str] = field(default_factory=list)
    conflicts: List[MergeConflict] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    errors: List[CommitError] = field(default_factory=list)


def snapshot_db(db_dir: str | Path, dest: str | Path) -> Path:
    """Copy the configuration database wholesale into ``dest``."""

    src = Path(db_dir)
    out = Path(dest)
    if not src.is_dir():
        raise PreflightError(f"configuration database {src} is missing; cannot reconcile config files safely")
    if out.exists():
        raise PreflightError(f"snapshot destination {out} already exists")
    shutil.copytree(src, out, symlinks=True)
    logger.info("Snapshot of %s taken at %s", str(src), str(out))
    return out


def _device(path: str | Path) -> int:
    return os.lstat(path).st_dev


def find_backups(
    root: str | Path,
    *,
    suffix: str = BACKUP_SUFFIX,
    exclude: Iterable[str | Path] = (),
) -> List[Path]:
    """Return every backup file below ``root`` in a stable order.

    The walk stays on the filesystem holding ``root``; pkg never writes
    backups onto other mounts such as /home or NFS shares.
    """

    root_path = Path(root)
    root_dev = _device(root_path)
    pruned = {(root_path / d).resolve() for d in SKIP_DIRS}
    pruned.update(Path(p).resolve() for p in exclude)

    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root_path):
        here = Path(dirpath)
        dirnames[:] = sorted(
            d for d in dirnames if (here / d).resolve() not in pruned and _device(here / d) == root_dev
        )
        for name in sorted(filenames):
            if name.endswith(suffix) and len(name) > len(suffix):
                found.append(here / name)
    return found


def triple_for(
    backup: Path,
    *,
    root: str | Path,
    snapshot_dir: str | Path,
    suffix: str = BACKUP_SUFFIX,
) -> ConfigTriple:
    live = backup.with_name(backup.name[: -len(suffix)])
    rel = live.relative_to(Path(root))
    return ConfigTriple(ours=backup, theirs=live, base=Path(snapshot_dir) / rel)


def three_way_merge(runner: CommandRunner, triple: ConfigTriple) -> Optional[str]:
    """Merge with diff3(1); returns merged text, or None on overlapping edits."""

    r: CmdResult = runner.run(
        ["diff3", "-m", str(triple.ours), str(triple.base), str(triple.theirs)],
    )
    if r.returncode == 0:
        return r.stdout
    if r.returncode == 1:
        return None
    raise CommandError(r)


def replace_contents(live: Path, contents: str) -> None:
    """Atomically swap ``live`` for ``contents`` keeping its mode and ownership.

    Scripts in /etc/rc.d must stay executable, so the metadata of the
    installed file is copied onto the replacement before the rename.
    """

    st = live.stat()
    # The rename has to stay on one filesystem, so stage next to the target.
    tmp = live.with_name(f".{live.name}.pkgbasify")
    try:
        tmp.write_text(contents, encoding="utf-8")
        # chown may clear setuid/setgid, so ownership goes first.
        os.chown(tmp, st.st_uid, st.st_gid)
        os.chmod(tmp, stat.S_IMODE(st.st_mode))
        os.replace(tmp, live)
    finally:
        if tmp.exists():
            tmp.unlink()


def merge_backups(
    runner: CommandRunner,
    *,
    root: str | Path,
    snapshot_dir: str | Path,
    backups: Sequence[Path],
    suffix: str = BACKUP_SUFFIX,
) -> MergeReport:
    """Reconcile every backup file against the snapshot.

    Never raises for a single file: conflicts and failures are collected in the
    returned report and the sweep moves on to the next backup.
    """

    report = MergeReport()
    for backup in backups:
        triple = triple_for(backup, root=root, snapshot_dir=snapshot_dir, suffix=suffix)
        live = "/" + str(triple.theirs.relative_to(Path(root)))

        if not triple.base.is_file():
            logger.info("No snapshot entry for %s; leaving %s for manual review", live, str(backup))
            report.skipped.append(live)
            continue
        if not triple.theirs.is_file():
            logger.info("%s was not reinstalled; leaving %s for manual review", live, str(backup))
            report.skipped.append(live)
            continue

        try:
            merged = three_way_merge(runner, triple)
            if merged is None:
                logger.warning("Merge conflict in %s; kept installed version, local copy at %s", live, str(backup))
                report.conflicts.append(MergeConflict(path=live, backup=str(backup)))
                continue
            replace_contents(triple.theirs, merged)
        except Exception as e:
            logger.error("Failed to merge %s: %s", live, e)
            report.errors.append(CommitError(operation=f"merge {live}", message=str(e)))
            continue

        logger.info("Merged %s", live)
        report.merged.append(live)
        try:
            backup.unlink()
        except OSError as e:
            logger.error("Merged %s but could not remove %s: %s", live, str(backup), e)
            report.errors.append(CommitError(operation=f"remove {backup}", message=str(e)))
    return report

from __future__ import annotations

import logging

from ..lib.merge import find_backups, merge_backups
from ..session import ConversionSession

logger = logging.getLogger(__name__)


class MergeConfigsStep:
    step_id = "80_merge_configs"

    def run(self, session: ConversionSession) -> None:
        settings = session.settings
        backups = find_backups(
            settings.host_root,
            suffix=settings.backup_suffix,
            exclude=[session.work_dir],
        )
        logger.info("Found %d %s files", len(backups), settings.backup_suffix)

        report = merge_backups(
            session.runner,
            root=settings.host_root,
            snapshot_dir=session.snapshot_dir,
            backups=backups,
            suffix=settings.backup_suffix,
        )
        session.merge_conflicts.extend(report.conflicts)
        session.commit_errors.extend(report.errors)
        session.decisions["merge"] = {
            "merged": report.merged,
            "conflicts": [c.path for c in report.conflicts],
            "skipped": report.skipped,
        }
        for c in report.conflicts:
            logger.warning("Failed to merge %s, manual intervention may be necessary", c.path)

from __future__ import annotations

import logging

from ..lib.merge import snapshot_db
from ..session import ConversionSession

logger = logging.getLogger(__name__)


class SnapshotConfigsStep:
    step_id = "50_snapshot_configs"

    def run(self, session: ConversionSession) -> None:
        snapshot_db(session.host(session.settings.etcupdate_db), session.snapshot_dir)

from __future__ import annotations

import logging

from ..session import ConversionSession

logger = logging.getLogger(__name__)


class RestartSshdStep:
    step_id = "85_restart_sshd"

    def run(self, session: ConversionSession) -> None:
        if session.settings.alternate_root:
            logger.info("Converting %s, not the running system; not restarting sshd", session.settings.host_root)
            return
        if not session.runner.run(["service", "sshd", "status"]).ok:
            logger.info("sshd is not running; not restarting")
            return
        logger.info("Restarting sshd")
        session.runner.run(["service", "sshd", "restart"], check=True)

from __future__ import annotations

import logging

from ..lib.env import PATHS
from ..session import ConversionSession

logger = logging.getLogger(__name__)


class RemoveLinkerHintsStep:
    step_id = "95_remove_linker_hints"

    def run(self, session: ConversionSession) -> None:
        # linker.hints was regenerated while stale .pkgsave modules were
        # present; the kernel rebuilds it on next boot.
        hints = session.host(PATHS.linker_hints)
        hints.unlink(missing_ok=True)
        logger.info("Removed %s", str(hints))

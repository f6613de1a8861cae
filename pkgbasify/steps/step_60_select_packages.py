from __future__ import annotations

import logging

from ..lib.inventory import scan_inventory
from ..lib.selector import select_packages
from ..session import ConversionSession

logger = logging.getLogger(__name__)


class SelectPackagesStep:
    step_id = "60_select_packages"

    def run(self, session: ConversionSession) -> None:
        session.inventory = scan_inventory(root=session.settings.host_root, probes=session.settings.probes)
        candidates = session.scratch_pkg().remote_names()
        session.selected = select_packages(candidates, session.inventory)
        logger.info("Packages to install: %s", " ".join(session.selected))

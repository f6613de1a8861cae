from __future__ import annotations

import logging

from ..errors import UserAbort
from ..session import ConversionSession

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "Running this tool will irreversibly modify your system to use pkgbase. "
    "This tool and pkgbase are experimental and may result in a broken system. "
    "It is highly recommended to back up your system before proceeding."
)


class ConfirmRiskStep:
    step_id = "20_confirm_risk"

    def run(self, session: ConversionSession) -> None:
        logger.warning(DISCLAIMER)
        if not session.confirmer.confirm("Do you accept this risk and wish to continue?"):
            raise UserAbort("canceled")
        session.decisions["risk_accepted"] = True

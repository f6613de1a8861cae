from __future__ import annotations

import logging

from ..errors import PreflightError
from ..lib.command import capture
from ..lib.compat import check_compatibility, osversion_from_param_h, parse_osversion, remote_osversion
from ..lib.env import PATHS, REFERENCE_PACKAGE
from ..session import ConversionSession

logger = logging.getLogger(__name__)


class CheckVersionStep:
    step_id = "40_check_version"

    def run(self, session: ConversionSession) -> None:
        local = self._local_osversion(session)
        remote = remote_osversion(session.scratch_pkg().annotations(REFERENCE_PACKAGE), REFERENCE_PACKAGE)
        result = check_compatibility(local, remote, session.confirmer)
        session.decisions["osversion"] = {"local": local, "remote": remote, "compat": result.value}

    @staticmethod
    def _local_osversion(session: ConversionSession) -> int:
        if not session.settings.alternate_root:
            return parse_osversion(capture(session.runner, ["uname", "-U"]), source="uname -U")

        # uname reports the running kernel, not the system under host_root.
        param_h = session.host(PATHS.param_h)
        try:
            text = param_h.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise PreflightError(f"cannot read the OS version of {session.settings.host_root}: {e}") from e
        return osversion_from_param_h(text, source=str(param_h))

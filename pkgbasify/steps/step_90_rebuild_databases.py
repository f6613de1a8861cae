from __future__ import annotations

import logging

from ..lib.env import PATHS
from ..session import ConversionSession

logger = logging.getLogger(__name__)


class RebuildDatabasesStep:
    step_id = "90_rebuild_databases"

    def run(self, session: ConversionSession) -> None:
        master_passwd = session.host(PATHS.master_passwd)
        pwd_argv = ["pwd_mkdb", "-p"]
        if session.settings.alternate_root:
            pwd_argv += ["-d", str(master_passwd.parent)]
        pwd_argv.append(str(master_passwd))

        # Both databases gate logins; one failing must not skip the other.
        session.attempt("pwd_mkdb", lambda: session.runner.run(pwd_argv, check=True))
        session.attempt(
            "cap_mkdb",
            lambda: session.runner.run(["cap_mkdb", str(session.host(PATHS.login_conf))], check=True),
        )

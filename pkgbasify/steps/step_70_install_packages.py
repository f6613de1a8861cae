from __future__ import annotations

import logging

from ..errors import CommandError
from ..lib.repo_conf import write_repo_conf
from ..session import ConversionSession

logger = logging.getLogger(__name__)


class InstallPackagesStep:
    step_id = "70_install_packages"

    def run(self, session: ConversionSession) -> None:
        if not session.selected or not session.repo_conf:
            raise RuntimeError("package selection missing; Setup did not complete")

        write_repo_conf(
            str(session.host(session.settings.repos_dir)),
            session.repo_conf,
            name=session.settings.repo_name,
        )

        # pkg install is not atomic: even on failure some packages may already
        # be in place, so the remaining steps must run regardless.
        pkg = session.pkg().with_options(BACKUP_LIBRARIES="yes")
        if session.settings.alternate_root:
            pkg = pkg.with_options(REPOS_DIR=str(session.host(session.settings.repos_dir)))
        r = pkg.install(session.selected)
        if not r.ok:
            raise CommandError(r)
        logger.info("Installed %d packages", len(session.selected))

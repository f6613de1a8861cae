from __future__ import annotations

import logging

from ..errors import PreflightError
from ..lib.command import capture
from ..lib.repo_conf import repo_conf_path
from ..session import ConversionSession

logger = logging.getLogger(__name__)


class PreflightStep:
    step_id = "10_preflight"

    def run(self, session: ConversionSession) -> None:
        if capture(session.runner, ["id", "-u"]) != "0":
            raise PreflightError("This tool must be run as the root user.")

        pkg = session.pkg()
        # pkg bootstrap is left to the operator; the Setup phase must not install anything.
        if not pkg.is_bootstrapped():
            raise PreflightError("pkg(8) is not bootstrapped; run 'pkg bootstrap' first.")
        if pkg.which("/usr/bin/uname"):
            raise PreflightError("The system is already using pkgbase.")

        repos_dir = session.settings.repos_dir.rstrip("/")
        configured = [d.strip().rstrip("/") for d in pkg.config("REPOS_DIR").replace("\n", ",").split(",")]
        if repos_dir not in configured:
            raise PreflightError(f"non-standard pkg REPOS_DIR config does not include {repos_dir}/")

        conf = session.host(str(repo_conf_path(repos_dir, session.settings.repo_name)))
        if conf.exists():
            consent = session.settings.overwrite_repo_conf or session.confirmer.confirm(
                f"{conf} already exists. Overwrite it?"
            )
            if not consent:
                raise PreflightError(f"{conf} already exists.")
            session.decisions["overwrite_repo_conf"] = True

        logger.info("Preflight checks passed")

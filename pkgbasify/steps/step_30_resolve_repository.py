from __future__ import annotations

import logging

from ..lib.command import capture
from ..lib.env import PATHS
from ..lib.repo_conf import render_repo_conf, write_repo_conf
from ..lib.version import parse_version, repository_url
from ..session import ConversionSession

logger = logging.getLogger(__name__)


class ResolveRepositoryStep:
    step_id = "30_resolve_repository"

    @staticmethod
    def _version_argv(session: ConversionSession) -> list[str]:
        # The running userland says nothing about a system mounted elsewhere.
        if session.settings.alternate_root:
            return [str(session.host(PATHS.freebsd_version)), "-u"]
        return ["freebsd-version"]

    def run(self, session: ConversionSession) -> None:
        settings = session.settings
        session.version = parse_version(capture(session.runner, self._version_argv(session)))
        url = repository_url(session.version)
        session.repo_conf = render_repo_conf(
            url,
            name=settings.repo_name,
            mirror_type=settings.mirror_type,
            fingerprints=settings.fingerprints_dir,
        )
        session.decisions["repository_url"] = url
        logger.info("FreeBSD %s -> %s", session.version.raw, url)

        # Catalogue goes into the work dir; the host's repos dir and package
        # database are only touched after commit.
        write_repo_conf(str(session.scratch_repos_dir), session.repo_conf, name=settings.repo_name)
        session.scratch_db_dir.mkdir(parents=True, exist_ok=True)
        session.scratch_pkg().update()

from __future__ import annotations

import logging
from pathlib import Path

from .env import PATHS, REPO_NAME

logger = logging.getLogger(__name__)


def render_repo_conf(
    url: str,
    *,
    name: str = REPO_NAME,
    mirror_type: str = "srv",
    fingerprints: str = PATHS.fingerprints_dir,
) -> str:
    """Render a pkg.conf(5) repository block for the base repository."""

    return "\n".join(
        [
            f"{name}: {{",
            f'  url: "{url}",',
            f'  mirror_type: "{mirror_type}",',
            '  signature_type: "fingerprints",',
            f'  fingerprints: "{fingerprints}",',
            "  enabled: yes",
            "}",
            "",
        ]
    )


def repo_conf_path(repos_dir: str, name: str = REPO_NAME) -> Path:
    return Path(repos_dir) / f"{name}.conf"


def write_repo_conf(repos_dir: str, contents: str, *, name: str = REPO_NAME) -> Path:
    p = repo_conf_path(repos_dir, name)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")
    logger.info("Wrote repository descriptor %s", str(p))
    return p

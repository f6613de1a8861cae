from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional, Sequence

from .command import CmdResult, CommandRunner, capture
from .env import REPO_NAME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PkgClient:
    """Thin wrapper around pkg(8).

    ``options`` become ``-o KEY=VALUE`` flags on every call, which is how the
    Setup phase points pkg at a scratch REPOS_DIR/PKG_DBDIR instead of the
    host's package database. ``rootdir`` becomes pkg's global ``-r`` so every
    query and install acts on an alternate root instead of the running system.
    """

    runner: CommandRunner
    repo: str = REPO_NAME
    options: Mapping[str, str] = field(default_factory=dict)
    rootdir: Optional[str] = None

    def with_options(self, **options: str) -> "PkgClient":
        merged: Dict[str, str] = dict(self.options)
        merged.update(options)
        return replace(self, options=merged)

    def _argv(self, *args: str) -> List[str]:
        argv = ["pkg"]
        if self.rootdir:
            argv += ["-r", self.rootdir]
        for key, value in self.options.items():
            argv += ["-o", f"{key}={value}"]
        return [*argv, *args]

    def _run(self, *args: str, check: bool = False) -> CmdResult:
        return self.runner.run(self._argv(*args), check=check)

    def is_bootstrapped(self) -> bool:
        return self._run("-N").ok

    def which(self, path: str) -> bool:
        """True if some installed package owns ``path``."""
        return self._run("which", path).ok

    def config(self, key: str) -> str:
        return capture(self.runner, self._argv("config", key))

    def update(self) -> None:
        self._run("update", "-r", self.repo, check=True)

    def remote_names(self) -> List[str]:
        out = capture(self.runner, self._argv("rquery", "-r", self.repo, "%n"))
        return [line.strip() for line in out.splitlines() if line.strip()]

    def annotations(self, package: str) -> Dict[str, str]:
        """Return the tag/value annotations of a remote package."""
        out = capture(self.runner, self._argv("rquery", "-r", self.repo, "%At\t%Av", package))
        tags: Dict[str, str] = {}
        for line in out.splitlines():
            tag, sep, value = line.partition("\t")
            if sep:
                tags[tag.strip()] = value.strip()
        return tags

    def install(self, packages: Sequence[str]) -> CmdResult:
        if not packages:
            raise ValueError("refusing to run pkg install with an empty package list")
        return self._run("install", "-y", "-r", self.repo, *packages)

import json
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

import pytest
import yaml

from pkgbasify.config import Settings
from pkgbasify.errors import CommandError
from pkgbasify.lib.command import CmdResult
from pkgbasify.session import ConversionSession

CANDIDATES = [
    "FreeBSD-kernel-generic",
    "FreeBSD-kernel-generic-dbg",
    "FreeBSD-kernel-minimal",
    "FreeBSD-kernel-minimal-dbg",
    "FreeBSD-runtime",
    "FreeBSD-runtime-dbg",
    "FreeBSD-runtime-lib32",
    "FreeBSD-runtime-dbg-lib32",
    "FreeBSD-src",
    "FreeBSD-src-sys",
    "FreeBSD-tests",
    "FreeBSD-utilities",
]

Handler = Callable[[List[str]], Tuple[int, str]]


def _strip_options(argv: Sequence[str]) -> List[str]:
    """Reduce argv to what rules match on.

    The program is matched by basename, and pkg's global ``-r ROOT`` and
    ``-o KEY=VALUE`` pairs before the subcommand are dropped.
    """
    if not argv:
        return []
    out = [Path(argv[0]).name]
    rest = list(argv[1:])
    if out[0] == "pkg":
        while len(rest) >= 2 and rest[0] in ("-r", "-o"):
            rest = rest[2:]
    return out + rest


class FakeRunner:
    """Scripted stand-in for SubprocessRunner.

    Rules are matched by argv prefix, most recently added first. Unmatched
    commands succeed with empty output.
    """

    def __init__(self):
        self.rules: List[Tuple[List[str], Union[Tuple[int, str], Handler]]] = []
        self.calls: List[List[str]] = []

    def on(self, *prefix: str, returncode: int = 0, stdout: str = "", handler: Optional[Handler] = None):
        self.rules.insert(0, (list(prefix), handler or (returncode, stdout)))
        return self

    def run(self, argv, *, check=False, env=None):
        argv = list(argv)
        self.calls.append(argv)
        bare = _strip_options(argv)
        returncode, stdout = 0, ""
        for prefix, action in self.rules:
            if bare[: len(prefix)] == prefix:
                returncode, stdout = action(argv) if callable(action) else action
                break
        result = CmdResult(argv=argv, returncode=returncode, stdout=stdout, stderr="" if returncode == 0 else "boom")
        if check and returncode != 0:
            raise CommandError(result)
        return result

    def called(self, *prefix: str) -> bool:
        return any(_strip_options(c)[: len(prefix)] == list(prefix) for c in self.calls)


class ScriptedConfirmer:
    def __init__(self, *answers: bool, default: bool = True):
        self.answers = list(answers)
        self.default = default
        self.questions: List[str] = []

    def confirm(self, question):
        self.questions.append(question)
        if self.answers:
            return self.answers.pop(0)
        return self.default


def param_h(osversion: str) -> str:
    return f"#define __FreeBSD_version {osversion}\t/* Master, propagated to newvers */\n"


def fake_diff3(argv):
    """Stand-in for diff3 -m: clean when only one side changed, else a conflict."""
    ours, base, theirs = (Path(p).read_text() for p in argv[-3:])
    if ours == base:
        return 0, theirs
    if theirs == base:
        return 0, ours
    return 1, "<<<<<<< conflict\n"


def read_report(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


def touch(root: Path, rel: str, content: str = "") -> Path:
    p = root / rel.lstrip("/")
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")
    return p


@pytest.fixture
def host_root(tmp_path):
    root = tmp_path / "root"
    root.mkdir()
    touch(root, "/usr/include/sys/param.h", param_h("1402000"))
    return root


@pytest.fixture
def settings(host_root, tmp_path):
    work_parent = tmp_path / "work"
    work_parent.mkdir()
    return Settings(host_root=str(host_root), work_dir_parent=str(work_parent))


@pytest.fixture
def runner():
    return host_runner()


def host_runner(candidates: Sequence[str] = CANDIDATES, osversion: str = "1402000") -> FakeRunner:
    """A runner answering like a FreeBSD 14.2 host that has not been converted."""
    r = FakeRunner()
    r.on("id", "-u", stdout="0\n")
    r.on("pkg", "which", returncode=1)
    r.on("pkg", "config", "REPOS_DIR", stdout="/etc/pkg/, /usr/local/etc/pkg/repos/\n")
    r.on("freebsd-version", stdout="14.2-RELEASE-p1\n")
    r.on("uname", "-U", stdout=osversion + "\n")
    r.on("pkg", "rquery", "-r", "FreeBSD-base", "%n", stdout="\n".join(candidates) + "\n")
    r.on("pkg", "rquery", "-r", "FreeBSD-base", "%At\t%Av", stdout="FreeBSD_version\t1402000\nflavor\tbase\n")
    return r


@pytest.fixture
def confirmer():
    return ScriptedConfirmer()


@pytest.fixture
def session(settings, runner, confirmer):
    s = ConversionSession.create(settings, runner, confirmer)
    yield s
    s.close()

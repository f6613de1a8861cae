from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Optional

from ..errors import UnsupportedVersion

MIN_MAJOR = 14

RELEASE_URL = "pkg+https://pkg.FreeBSD.org/${{ABI}}/base_release_{minor}"
LATEST_URL = "pkg+https://pkg.FreeBSD.org/${ABI}/base_latest"

# e.g. 15.0-CURRENT, 14.2-STABLE, 14.1-RELEASE, 14.1-RELEASE-p6
_VERSION_RE = re.compile(r"^(\d+)\.(\d+)-([A-Z]+)(?:-(\S+))?$")


class Branch(enum.Enum):
    RELEASE = "RELEASE"
    CURRENT = "CURRENT"
    STABLE = "STABLE"
    OTHER = "OTHER"


@dataclass(frozen=True)
class VersionDescriptor:
    major: int
    minor: int
    branch: Branch
    patch: Optional[str] = None
    raw: str = ""


def parse_version(raw: str) -> VersionDescriptor:
    """Parse freebsd-version(1) output.

    Raises UnsupportedVersion for anything this tool can not convert: a
    string that does not look like MAJOR.MINOR-BRANCH, a major below 14, or a
    branch other than RELEASE/CURRENT/STABLE.
    """

    text = raw.strip()
    m = _VERSION_RE.match(text)
    if not m:
        raise UnsupportedVersion(f"unsupported FreeBSD version: {text!r}")

    major, minor = int(m.group(1)), int(m.group(2))
    try:
        branch = Branch(m.group(3))
    except ValueError:
        branch = Branch.OTHER

    if major < MIN_MAJOR or branch is Branch.OTHER:
        raise UnsupportedVersion(f"unsupported FreeBSD version: {text!r}")

    return VersionDescriptor(major=major, minor=minor, branch=branch, patch=m.group(4), raw=text)


def repository_url(version: VersionDescriptor) -> str:
    if version.branch is Branch.RELEASE:
        return RELEASE_URL.format(minor=version.minor)
    if version.branch in (Branch.CURRENT, Branch.STABLE):
        return LATEST_URL
    raise UnsupportedVersion(f"unsupported FreeBSD version: {version.raw!r}")


def resolve_repository_url(raw: str) -> str:
    return repository_url(parse_version(raw))

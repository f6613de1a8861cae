from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


KERNEL_DEBUG = "kernel-debug"
BASE_DEBUG = "base-debug"
LIB32 = "lib32"
LIB32_DEBUG = "lib32-debug"
SRC = "src"
TESTS = "tests"


@dataclass(frozen=True)
class SubsystemProbe:
    name: str
    path: str


# Checking if /usr/lib32 is non-empty is not sufficient: base.txz ships
# several empty /usr/lib32 subdirectories.
DEFAULT_PROBES: Tuple[SubsystemProbe, ...] = (
    SubsystemProbe(KERNEL_DEBUG, "/usr/lib/debug/boot/kernel"),
    SubsystemProbe(BASE_DEBUG, "/usr/lib/debug/lib/libc.so.7.debug"),
    SubsystemProbe(LIB32, "/usr/lib32/libc.so.7"),
    SubsystemProbe(LIB32_DEBUG, "/usr/lib/debug/usr/lib32/libc.so.7.debug"),
    SubsystemProbe(SRC, "/usr/src"),
    SubsystemProbe(TESTS, "/usr/tests"),
)


def host_path(root: str, path: str) -> Path:
    """Map an absolute host path under an alternate root."""

    return Path(root) / path.lstrip("/")


def is_present(path: str | os.PathLike[str]) -> bool:
    """True for an existing regular file or a directory with at least one entry.

    Missing paths and empty directories are both absent.
    """

    p = Path(path)
    if p.is_file():
        return True
    if p.is_dir():
        with os.scandir(p) as it:
            return next(it, None) is not None
    return False


def evaluate_probe(probe: SubsystemProbe, *, root: str = "/") -> bool:
    return is_present(host_path(root, probe.path))


def scan_inventory(
    *,
    root: str = "/",
    probes: Optional[Iterable[SubsystemProbe]] = None,
) -> Mapping[str, bool]:
    """Evaluate every subsystem probe against the current disk state."""

    results: Dict[str, bool] = {}
    for probe in probes if probes is not None else DEFAULT_PROBES:
        results[probe.name] = evaluate_probe(probe, root=root)
        logger.info("Probe %s (%s): %s", probe.name, probe.path, "present" if results[probe.name] else "absent")
    return MappingProxyType(results)

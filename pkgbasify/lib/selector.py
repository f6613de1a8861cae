"""Map the remote base repository's package list onto the host's install.

Package names overlap (``FreeBSD-kernel-generic-dbg`` ends in ``-dbg``,
``FreeBSD-runtime-dbg-lib32`` ends in ``-lib32``), so classification is an
ordered list of rules where the first match wins.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Sequence, Tuple

from ..errors import InventoryMismatch
from . import inventory

logger = logging.getLogger(__name__)


class Category(enum.Enum):
    KERNEL = "kernel"
    KERNEL_DBG = "kernel-dbg"
    BASE = "base"
    BASE_DBG = "base-dbg"
    LIB32 = "lib32"
    LIB32_DBG = "lib32-dbg"
    SRC = "src"
    TESTS = "tests"
    # Kernel variants other than GENERIC are never installed.
    IGNORED = "ignored"


@dataclass(frozen=True)
class CandidatePackage:
    name: str
    category: Category


KERNEL_PACKAGE = "FreeBSD-kernel-generic"
KERNEL_DBG_PACKAGE = "FreeBSD-kernel-generic-dbg"


def _kernel_family(name: str) -> Category:
    if name == KERNEL_PACKAGE:
        return Category.KERNEL
    if name == KERNEL_DBG_PACKAGE:
        return Category.KERNEL_DBG
    return Category.IGNORED


def _fixed(category: Category) -> Callable[[str], Category]:
    return lambda _name: category


_RULES: Tuple[Tuple[re.Pattern[str], Callable[[str], Category]], ...] = (
    (re.compile(r"^FreeBSD-src(-.*)?$"), _fixed(Category.SRC)),
    (re.compile(r"^FreeBSD-tests(-.*)?$"), _fixed(Category.TESTS)),
    (re.compile(r"^FreeBSD-kernel-.*$"), _kernel_family),
    (re.compile(r"^.*-dbg-lib32$"), _fixed(Category.LIB32_DBG)),
    (re.compile(r"^.*-lib32$"), _fixed(Category.LIB32)),
    (re.compile(r"^.*-dbg$"), _fixed(Category.BASE_DBG)),
)


def classify(name: str) -> Category:
    for pattern, decide in _RULES:
        if pattern.match(name):
            return decide(name)
    return Category.BASE


def to_candidates(names: Iterable[str]) -> List[CandidatePackage]:
    return [CandidatePackage(name=n, category=classify(n)) for n in names]


def classify_all(names: Iterable[str]) -> Dict[Category, List[str]]:
    """Partition candidate names by category, preserving input order."""

    groups: Dict[Category, List[str]] = {c: [] for c in Category}
    for cand in to_candidates(names):
        groups[cand.category].append(cand.name)
    return groups


def validate(groups: Mapping[Category, Sequence[str]]) -> None:
    if len(groups[Category.KERNEL]) != 1:
        raise InventoryMismatch(
            f"expected exactly one {KERNEL_PACKAGE} package, found {len(groups[Category.KERNEL])}"
        )
    for category in (
        Category.KERNEL_DBG,
        Category.BASE,
        Category.BASE_DBG,
        Category.LIB32,
        Category.LIB32_DBG,
        Category.SRC,
        Category.TESTS,
    ):
        if not groups[category]:
            raise InventoryMismatch(f"remote repository has no {category.value} packages")


# Optional categories and the probe that gates each, in install order.
_GATES: Tuple[Tuple[Category, str], ...] = (
    (Category.KERNEL_DBG, inventory.KERNEL_DEBUG),
    (Category.BASE_DBG, inventory.BASE_DEBUG),
    (Category.LIB32, inventory.LIB32),
    (Category.LIB32_DBG, inventory.LIB32_DEBUG),
    (Category.SRC, inventory.SRC),
    (Category.TESTS, inventory.TESTS),
)


def compose(groups: Mapping[Category, Sequence[str]], probes: Mapping[str, bool]) -> List[str]:
    selected: List[str] = [*groups[Category.KERNEL], *groups[Category.BASE]]
    for category, probe in _GATES:
        if not probes.get(probe, False):
            continue
        # lib32 debug symbols are meaningless without the lib32 runtime.
        if category is Category.LIB32_DBG and not probes.get(inventory.LIB32, False):
            continue
        selected.extend(groups[category])
    return selected


def select_packages(candidates: Iterable[str], probes: Mapping[str, bool]) -> List[str]:
    """Return the package names to install for this host."""

    groups = classify_all(candidates)
    validate(groups)
    if groups[Category.IGNORED]:
        logger.info("Ignoring kernel variants: %s", ", ".join(groups[Category.IGNORED]))

    selected = compose(groups, probes)
    logger.info("Selected %d of %d packages", len(selected), sum(len(v) for v in groups.values()))
    return selected

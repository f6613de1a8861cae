from __future__ import annotations

import enum
import logging
import re
from typing import Mapping

from ..errors import PreflightError, UserAbort
from .confirm import Confirmer
from .env import VERSION_ANNOTATION

logger = logging.getLogger(__name__)


class Compat(enum.Enum):
    EQUAL = "equal"
    DOWNGRADE = "downgrade"
    BEHIND = "behind"


def compare_versions(local: int, remote: int) -> Compat:
    if remote < local:
        return Compat.DOWNGRADE
    if remote > local:
        return Compat.BEHIND
    return Compat.EQUAL


def parse_osversion(raw: str, *, source: str) -> int:
    try:
        return int(raw.strip())
    except (TypeError, ValueError) as e:
        raise PreflightError(f"{source} reported a non-numeric OS version: {raw!r}") from e


_PARAM_H_VERSION = re.compile(r"^#define\s+__FreeBSD_version\s+(\d+)", re.MULTILINE)


def osversion_from_param_h(text: str, *, source: str) -> int:
    """Read __FreeBSD_version from an installed sys/param.h."""
    m = _PARAM_H_VERSION.search(text)
    if not m:
        raise PreflightError(f"{source} does not define __FreeBSD_version")
    return int(m.group(1))


def remote_osversion(annotations: Mapping[str, str], package: str) -> int:
    raw = annotations.get(VERSION_ANNOTATION)
    if raw is None:
        raise PreflightError(f"{package} has no {VERSION_ANNOTATION} annotation in the base repository")
    return parse_osversion(raw, source=f"{package} {VERSION_ANNOTATION}")


def check_compatibility(local: int, remote: int, confirmer: Confirmer) -> Compat:
    """Decide whether a version skew between host and repository is acceptable.

    Equal versions pass silently. A downgrade or a host that lags behind the
    repository needs an explicit yes; a no raises UserAbort.
    """

    result = compare_versions(local, remote)
    if result is Compat.EQUAL:
        logger.info("Host and repository agree on OS version %d", local)
        return result

    if result is Compat.DOWNGRADE:
        question = (
            f"The base repository ({remote}) is older than the running system ({local}); "
            "converting will downgrade the system. Continue?"
        )
    else:
        question = (
            f"The running system ({local}) is older than the base repository ({remote}); "
            "converting will also upgrade the system. Continue?"
        )

    logger.warning("OS version mismatch (%s): local=%d remote=%d", result.value, local, remote)
    if not confirmer.confirm(question):
        raise UserAbort(f"version mismatch ({result.value}) not accepted")
    return result

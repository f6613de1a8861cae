from __future__ import annotations

import contextlib
import logging
import signal
import threading
from dataclasses import dataclass
from typing import Iterator, List, Protocol, Sequence

from .session import ConversionSession, Phase

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single conversion step."""

    step_id: str

    def run(self, session: ConversionSession) -> None:
        ...


@dataclass(frozen=True)
class PipelineResult:
    session: ConversionSession
    ran_steps: List[str]
    failed_steps: List[str]

    @property
    def committed(self) -> bool:
        return self.session.phase is not Phase.SETUP


@contextlib.contextmanager
def _uninterruptible() -> Iterator[None]:
    """Ignore SIGINT while the host is half converted."""

    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def run_pipeline(
    *,
    session: ConversionSession,
    setup_steps: Sequence[Step],
    commit_steps: Sequence[Step],
    stop_before_commit: bool = False,
) -> PipelineResult:
    """Run Setup steps fail-fast, then every commit step exactly once.

    Any exception from a Setup step propagates untouched; nothing has been
    changed on the host yet. After the commit transition each step's failure
    is recorded on the session and the next step still runs.
    """

    ran: List[str] = []
    failed: List[str] = []

    for step in setup_steps:
        logger.info("Running step %s", step.step_id)
        step.run(session)
        ran.append(step.step_id)

    if stop_before_commit:
        logger.info("Stopping before commit; the host was not modified")
        return PipelineResult(session=session, ran_steps=ran, failed_steps=failed)

    session.commit()
    with _uninterruptible():
        for step in commit_steps:
            logger.info("Running step %s", step.step_id)
            before = len(session.commit_errors)
            if not session.attempt(step.step_id, lambda: step.run(session)) or len(session.commit_errors) > before:
                failed.append(step.step_id)
            ran.append(step.step_id)
        session.finish()

    return PipelineResult(session=session, ran_steps=ran, failed_steps=failed)

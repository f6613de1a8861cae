from __future__ import annotations

import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class Confirmer(Protocol):
    def confirm(self, question: str) -> bool:
        ...


class PromptConfirmer:
    """Ask on the terminal until the answer is y or n."""

    def __init__(self, read: Callable[[str], str] = input) -> None:
        self._read = read

    def confirm(self, question: str) -> bool:
        while True:
            try:
                answer = self._read(f"{question} (y/n) ").strip()
            except EOFError:
                return False
            if answer in {"y", "Y"}:
                return True
            if answer in {"n", "N"}:
                return False


class AutoConfirmer:
    """Answers every question the same way (``--yes``)."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer

    def confirm(self, question: str) -> bool:
        logger.info("Auto-answering %r: %s", question, "yes" if self.answer else "no")
        return self.answer

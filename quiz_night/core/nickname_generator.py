"""Random adjective + noun nicknames for players who do not pick a name."""

from __future__ import annotations

import random
from threading import Lock
from typing import Iterable

from quiz_night.constants.quiz_constants import NICKNAME_ADJECTIVES, NICKNAME_NOUNS


class NicknameGenerator:
    """Combines a random adjective and noun, e.g. ``"Zippy Panda"``."""

    def __init__(
        self,
        adjectives: Iterable[str] = NICKNAME_ADJECTIVES,
        nouns: Iterable[str] = NICKNAME_NOUNS,
        rng: random.Random | None = None,
    ) -> None:
        self._adjectives = [word.strip() for word in adjectives if word.strip()]
        self._nouns = [word.strip() for word in nouns if word.strip()]
        if not self._adjectives or not self._nouns:
            raise ValueError("Word lists cannot be empty.")
        self._rng = rng or random.Random()
        self._lock = Lock()

    def next_name(self) -> str:
        with self._lock:
            return f"{self._rng.choice(self._adjectives)} {self._rng.choice(self._nouns)}"

    def unique_name(self, taken: Iterable[str], max_attempts: int) -> str | None:
        """Return a name not in ``taken`` (case-insensitive), or None after ``max_attempts`` tries."""
        taken_folded = {name.casefold() for name in taken}
        for _ in range(max_attempts):
            candidate = self.next_name()
            if candidate.casefold() not in taken_folded:
                return candidate
        return None

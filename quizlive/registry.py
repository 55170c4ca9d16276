"""Live sessions keyed by their numeric join code."""

import asyncio
import logging
import random
from typing import Dict, Iterator, List, Optional

from quizlive.catalog import QuizCatalog
from quizlive.errors import InvalidPin, RegistryFull
from quizlive.models import Session

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns session creation, lookup and teardown.

    Join codes are drawn at random and re-drawn while taken, so they stay
    short and become free again once a session is removed. None of the
    mutating methods await, which makes each of them atomic on the event
    loop; callers that await while mutating a session hold lock(pin_code).
    """

    def __init__(self, catalog: QuizCatalog, pin_digits: int = 4, rng: Optional[random.Random] = None) -> None:
        if pin_digits < 1:
            raise ValueError("pin_digits must be positive")
        self._catalog = catalog
        self._rng = rng or random.Random()
        self._low = 10 ** (pin_digits - 1) if pin_digits > 1 else 0
        self._high = 10 ** pin_digits - 1
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def capacity(self) -> int:
        return self._high - self._low + 1

    @property
    def is_full(self) -> bool:
        return len(self._sessions) >= self.capacity

    def create_session(self, quiz_id: str) -> str:
        quiz = self._catalog.get(quiz_id)
        if self.is_full:
            raise RegistryFull()

        pin_code = self._draw_pin()
        while pin_code in self._sessions:
            pin_code = self._draw_pin()

        self._sessions[pin_code] = Session(pin_code=pin_code, quiz=quiz)
        self._locks[pin_code] = asyncio.Lock()
        logger.info("🎮 Created session %s for quiz %r", pin_code, quiz.title)
        return pin_code

    def get(self, pin_code: str) -> Session:
        try:
            return self._sessions[pin_code]
        except (KeyError, TypeError):
            raise InvalidPin() from None

    def lock(self, pin_code: str) -> asyncio.Lock:
        """Lock serializing every mutation of one session."""
        try:
            return self._locks[pin_code]
        except (KeyError, TypeError):
            raise InvalidPin() from None

    def remove(self, pin_code: str) -> None:
        if self._sessions.pop(pin_code, None) is not None:
            logger.info("🗑️ Removed session %s", pin_code)
        self._locks.pop(pin_code, None)

    def pin_codes(self) -> List[str]:
        return list(self._sessions)

    def sessions(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def __contains__(self, pin_code: object) -> bool:
        return pin_code in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def _draw_pin(self) -> str:
        return str(self._rng.randint(self._low, self._high)).zfill(len(str(self._high)))

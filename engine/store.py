"""Single-slot, time-boxed store that hands a level to the test runtime."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from config import TEST_LEVEL_TTL_SECONDS

logger = logging.getLogger(__name__)


class LevelNotFoundError(LookupError):
    """Raised when the store has no level to return."""


class LevelExpiredError(LevelNotFoundError):
    """Raised when the stored level is older than the store's TTL."""


class StoredLevel(BaseModel):
    """The payload currently held, with the time it was stored."""
    payload: dict[str, Any]
    stored_at: float


class TestLevelStore:
    """At most one stored level, overwritten by each put.

    Reads and writes run without awaiting in between, so under the
    single-threaded event loop no request can observe a half-updated slot.
    """
    __test__ = False  # Not a pytest test class despite the name

    def __init__(
        self,
        ttl_seconds: float = TEST_LEVEL_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._level: StoredLevel | None = None

    @property
    def is_empty(self) -> bool:
        return self._level is None

    def put(self, payload: dict[str, Any]) -> StoredLevel:
        """Store a payload, replacing whatever was there (last write wins)."""
        self._level = StoredLevel(payload=payload, stored_at=self._clock())
        logger.info("Test level stored (id=%s)", payload.get("id"))
        return self._level

    def get(self) -> dict[str, Any]:
        """Return the stored payload unchanged.

        Raises:
            LevelNotFoundError: If nothing is stored.
            LevelExpiredError: If the level is older than the TTL. The slot
                is cleared, so the next call raises LevelNotFoundError.
        """
        if self._level is None:
            raise LevelNotFoundError("No test level available")
        if self._clock() - self._level.stored_at > self.ttl_seconds:
            logger.info("Test level expired (stored_at=%s)", self._level.stored_at)
            self._level = None
            raise LevelExpiredError("Test level has expired")
        return self._level.payload

    def reset(self) -> None:
        """Empty the slot."""
        self._level = None

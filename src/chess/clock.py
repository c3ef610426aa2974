"""Countdown clock for a single game."""

import logging
from threading import Lock
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_GAME_SECONDS = 600


class GameClock:
    """
    One countdown for the whole game, decremented once per `tick()`.

    When it reaches zero the `on_expire` callback fires (exactly once).
    `stop()` must be called whenever the game ends some other way, so no stale time forfeit fires afterwards.
    Scheduling the ticks (every second) is up to the caller.
    """

    def __init__(
        self,
        seconds: int = DEFAULT_GAME_SECONDS,
        on_expire: Optional[Callable[[], None]] = None,
    ) -> None:
        self._remaining = seconds
        self._on_expire = on_expire
        self._running = False
        self._lock = Lock()

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        self._running = False

    def tick(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._remaining = max(0, self._remaining - 1)
            expired = self._remaining == 0
            if expired:
                self._running = False

        # callback runs outside of the lock: it usually ends the game, which stops this clock again
        if expired:
            logger.info("Clock expired")
            if self._on_expire is not None:
                self._on_expire()

    def display(self) -> str:
        """m:ss"""
        minutes, seconds = divmod(self._remaining, 60)
        return f"{minutes}:{seconds:02d}"

"""Unit tests for /src/chess/clock.py"""

from unittest.mock import Mock

import pytest

from src.chess.clock import DEFAULT_GAME_SECONDS, GameClock


@pytest.mark.parametrize(
    "seconds, expected",
    [(600, "10:00"), (599, "9:59"), (65, "1:05"), (9, "0:09"), (0, "0:00")],
)
def test_display(seconds: int, expected: str) -> None:
    assert GameClock(seconds).display() == expected


def test_ten_minutes_by_default() -> None:
    assert GameClock().remaining == DEFAULT_GAME_SECONDS == 600


def test_clock_only_ticks_while_running() -> None:
    clock = GameClock(10)
    clock.tick()
    assert clock.remaining == 10

    clock.start()
    clock.tick()
    clock.tick()
    assert clock.remaining == 8

    clock.stop()
    clock.tick()
    assert clock.remaining == 8
    assert not clock.is_running


def test_expiry_fires_once() -> None:
    on_expire = Mock()
    clock = GameClock(2, on_expire=on_expire)
    clock.start()
    for _ in range(5):
        clock.tick()

    on_expire.assert_called_once_with()
    assert clock.remaining == 0
    assert not clock.is_running
    assert clock.display() == "0:00"


def test_stopped_clock_never_expires() -> None:
    on_expire = Mock()
    clock = GameClock(1, on_expire=on_expire)
    clock.start()
    clock.stop()
    clock.tick()
    on_expire.assert_not_called()


def test_expiry_without_callback() -> None:
    clock = GameClock(1)
    clock.start()
    clock.tick()
    assert clock.remaining == 0

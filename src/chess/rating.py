"""
Elo rating update after a finished player-vs-player game.

NOTE: Only call this for finished games between two players. Games against the computer do not change ratings,
but that is for the caller to enforce.
"""

import math
from dataclasses import dataclass

from src.core.exceptions import GameStateError
from src.core.shared_types import Result

K_FACTOR = 32

# Actual score (white, black) per result
ACTUAL_SCORES: dict[Result, tuple[float, float]] = {
    Result.WHITE: (1.0, 0.0),
    Result.BLACK: (0.0, 1.0),
    Result.DRAW: (0.5, 0.5),
}


@dataclass(frozen=True)
class RatingChange:
    white: int
    black: int


def expected_score(rating: float, opponent_rating: float) -> float:
    """Expected score of a player with `rating` against `opponent_rating`.

    Returns a value in (0, 1) based on the standard ELO formula.
    """
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / 400.0))


def round_half_up(value: float) -> int:
    """0.5 always rounds towards +infinity (the builtin `round` rounds halves to even)."""
    return math.floor(value + 0.5)


def rating_change(
    white_rating: int, black_rating: int, result: Result, k: int = K_FACTOR
) -> RatingChange:
    """
    delta = round(K * (actual - expected)) for both players.

    ex) 1200 vs 1200, white wins: expected score is 0.5 for both --> +16 / -16
    """
    if result not in ACTUAL_SCORES:
        raise GameStateError(f"Cannot rate a game without a result: {result}")

    expected_white = expected_score(white_rating, black_rating)
    expected_black = 1.0 - expected_white
    actual_white, actual_black = ACTUAL_SCORES[result]
    return RatingChange(
        white=round_half_up(k * (actual_white - expected_white)),
        black=round_half_up(k * (actual_black - expected_black)),
    )

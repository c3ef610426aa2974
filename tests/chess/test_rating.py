"""Unit tests for /src/chess/rating.py"""

import pytest

from src.chess.rating import (
    RatingChange,
    expected_score,
    rating_change,
    round_half_up,
)
from src.core.exceptions import GameStateError
from src.core.shared_types import Result


@pytest.mark.parametrize(
    "result, expected",
    [
        (Result.WHITE, RatingChange(white=16, black=-16)),
        (Result.BLACK, RatingChange(white=-16, black=16)),
        (Result.DRAW, RatingChange(white=0, black=0)),
    ],
)
def test_equal_ratings(result: Result, expected: RatingChange) -> None:
    assert rating_change(1200, 1200, result) == expected


@pytest.mark.parametrize(
    "result, expected",
    [
        # expected score of the 1200 player against 1400 is ~0.24
        (Result.WHITE, RatingChange(white=24, black=-24)),
        (Result.DRAW, RatingChange(white=8, black=-8)),
        (Result.BLACK, RatingChange(white=-8, black=8)),
    ],
)
def test_underdog(result: Result, expected: RatingChange) -> None:
    assert rating_change(1200, 1400, result) == expected


def test_custom_k_factor() -> None:
    assert rating_change(1200, 1200, Result.WHITE, k=16) == RatingChange(8, -8)


def test_game_without_result_cannot_be_rated() -> None:
    with pytest.raises(GameStateError):
        rating_change(1200, 1200, Result.NONE)


@pytest.mark.parametrize(
    "rating, opponent_rating", [(1200, 1200), (1200, 1400), (2000, 1100)]
)
def test_expected_scores_add_up_to_one(rating: int, opponent_rating: int) -> None:
    total = expected_score(rating, opponent_rating) + expected_score(opponent_rating, rating)
    assert total == pytest.approx(1.0)


def test_expected_score_equal_ratings() -> None:
    assert expected_score(1500, 1500) == 0.5


@pytest.mark.parametrize(
    "value, expected",
    [(16.5, 17), (-16.5, -16), (6.508, 7), (-0.4, 0), (2.49, 2)],
)
def test_round_half_up(value: float, expected: int) -> None:
    assert round_half_up(value) == expected

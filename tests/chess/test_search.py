"""Unit tests for /src/chess/search.py"""

import logging
import math
import random
import threading
from unittest.mock import Mock

import pytest

from src.chess.game import Game
from src.chess.moves import Move
from src.chess.pieces import Color
from src.chess.search import (
    MinimaxStrategy,
    RandomStrategy,
    evaluate,
    minimax,
    strategy_for,
)
from src.core.shared_types import Difficulty

FOOLS_MATE_FEN = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w"
HANGING_QUEENS_FEN = "k7/8/8/3q4/8/8/3Q4/K7"
DEPTHS = {Difficulty.EASY: 0, Difficulty.MEDIUM: 2, Difficulty.HARD: 3}


def exhaustive_minimax(game: Game, depth: int, maximizing: bool) -> float:
    """Plain minimax without pruning"""
    if depth == 0:
        return evaluate(game.board)

    moves = game.legal_moves(Color.BLACK if maximizing else Color.WHITE)
    if not moves:
        return evaluate(game.board)

    scores = []
    for move in moves:
        with game.board.speculative_move(move):
            scores.append(exhaustive_minimax(game, depth - 1, not maximizing))
    return max(scores) if maximizing else min(scores)


# --- EVALUATION ---
def test_evaluate_starting_position() -> None:
    assert evaluate(Game.new_game().board) == 0


def test_evaluate_from_blacks_side() -> None:
    """Positive scores are good for black"""
    without_black_queen = Game.from_fen("rnb1kbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w")
    assert evaluate(without_black_queen.board) == -9

    without_white_queen = Game.from_fen("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNB1KBNR w")
    assert evaluate(without_white_queen.board) == 9


# --- RANDOM STRATEGY ---
def test_random_strategy_picks_a_legal_move() -> None:
    game = Game.new_game()
    strategy = RandomStrategy(random.Random(42))
    for _ in range(10):
        assert strategy.choose_move(game) in game.legal_moves(game.side_to_move)


def test_random_strategy_samples_from_all_legal_moves() -> None:
    game = Game.new_game()
    rng = Mock()
    rng.choice.side_effect = lambda moves: moves[-1]

    move = RandomStrategy(rng).choose_move(game)

    rng.choice.assert_called_once_with(game.legal_moves(Color.WHITE))
    assert move == game.legal_moves(Color.WHITE)[-1]


# --- MINIMAX STRATEGY ---
def test_depth_must_be_positive() -> None:
    with pytest.raises(ValueError):
        MinimaxStrategy(0)


def test_black_takes_free_queen() -> None:
    game = Game.from_fen(f"{HANGING_QUEENS_FEN} b")
    result = MinimaxStrategy(2).search(game)
    assert result.move == Move.from_uci("d5d2")
    assert result.score == 9


def test_white_takes_free_queen() -> None:
    """White minimizes the score"""
    game = Game.from_fen(f"{HANGING_QUEENS_FEN} w")
    result = MinimaxStrategy(2).search(game)
    assert result.move == Move.from_uci("d2d5")
    assert result.score == -9


def test_attacked_rook_takes_instead_of_being_taken() -> None:
    """The d4 rook is attacked by the e3 pawn and the d1 rook: taking on d1 wins a rook for nothing"""
    game = Game.from_fen("k7/8/8/8/3r4/4P3/8/K2R4 b")
    result = MinimaxStrategy(2).search(game)
    assert result.move == Move.from_uci("d4d1")
    assert result.score == 4


def test_ties_keep_the_first_move() -> None:
    """All moves score zero at depth 1: the first generated move wins"""
    result = MinimaxStrategy(1).search(Game.new_game())
    assert result.move == Move.from_uci("a2a3")
    assert result.score == 0


def test_search_leaves_the_game_untouched() -> None:
    game = Game.new_game()
    MinimaxStrategy(3).choose_move(game)
    assert game.snapshot() == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w"
    assert game.moves == []


@pytest.mark.parametrize(
    "fen, depth",
    [
        ("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w", 2),
        ("rnbqkbnr/ppp2ppp/8/3pp3/4P3/5N2/PPPP1PPP/RNBQKB1R w", 2),
        ("k7/8/2n5/3q4/8/2N5/3Q4/K7 b", 3),
        ("k7/pp6/8/3r4/8/2B5/6PP/6K1 w", 3),
    ],
)
def test_pruning_does_not_change_the_score(fen: str, depth: int) -> None:
    game = Game.from_fen(fen)
    maximizing = game.side_to_move == Color.BLACK
    pruned = minimax(game, depth, -math.inf, math.inf, maximizing).score
    assert pruned == exhaustive_minimax(game, depth, maximizing)


def test_leaf_without_moves_gets_static_evaluation() -> None:
    game = Game.from_fen(FOOLS_MATE_FEN)
    result = minimax(game, 3, -math.inf, math.inf, False)
    assert result.move is None
    assert result.score == evaluate(game.board)


def test_no_legal_move_is_reported(caplog: pytest.LogCaptureFixture) -> None:
    """Checkmated, but nobody classified the game yet"""
    game = Game.from_fen(FOOLS_MATE_FEN)
    with caplog.at_level(logging.WARNING, logger="src.chess.search"):
        assert MinimaxStrategy(2).choose_move(game) is None
        assert RandomStrategy(random.Random(1)).choose_move(game) is None
    assert len(caplog.records) == 2


def test_no_legal_move_after_game_over_is_quiet(caplog: pytest.LogCaptureFixture) -> None:
    game = Game.from_fen(FOOLS_MATE_FEN)
    game.classify()
    with caplog.at_level(logging.WARNING, logger="src.chess.search"):
        assert MinimaxStrategy(2).choose_move(game) is None
    assert caplog.records == []


# --- DIFFICULTY ---
def test_easy_plays_random_moves() -> None:
    assert isinstance(strategy_for(Difficulty.EASY, DEPTHS), RandomStrategy)


@pytest.mark.parametrize(
    "difficulty, depth", [(Difficulty.MEDIUM, 2), (Difficulty.HARD, 3)]
)
def test_minimax_depth_per_difficulty(difficulty: Difficulty, depth: int) -> None:
    strategy = strategy_for(difficulty, DEPTHS)
    assert isinstance(strategy, MinimaxStrategy)
    assert strategy.depth == depth


def test_random_strategy_uses_given_rng() -> None:
    rng = random.Random(7)
    strategy = strategy_for(Difficulty.EASY, DEPTHS, rng)
    assert isinstance(strategy, RandomStrategy)
    assert strategy.rng is rng


# --- SEARCHING ON ANOTHER THREAD ---
def test_search_is_never_observed_halfway() -> None:
    """The search plays moves on the live board: other threads only ever see the position it started from"""
    game = Game.new_game()
    starting_fen = game.snapshot()
    search = threading.Thread(target=MinimaxStrategy(3).choose_move, args=(game,))

    search.start()
    snapshots = [game.snapshot()]
    while search.is_alive():
        snapshots.append(game.snapshot())
        assert len(game.legal_moves(Color.WHITE)) == 20
    search.join()

    assert set(snapshots) == {starting_fen}
    assert game.moves == []

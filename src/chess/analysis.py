"""
Post-game analysis: grade every played move by comparing it with what the engine would have done.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from src.chess.board import Board
from src.chess.game import Game
from src.chess.moves import AcceptedMove, Move
from src.chess.search import MinimaxStrategy, evaluate
from src.core.shared_types import MoveQuality

logger = logging.getLogger(__name__)

ANALYSIS_DEPTH = 2

# Upper bounds (inclusive) of the score difference per bucket. Anything above the last one is a blunder.
# NOTE: BRILLIANT has no bucket: every difference (zero included) already counts as GOOD or worse.
QUALITY_THRESHOLDS: list[tuple[float, MoveQuality]] = [
    (0.3, MoveQuality.GOOD),
    (0.7, MoveQuality.INACCURACY),
    (1.5, MoveQuality.MISTAKE),
]


@dataclass(frozen=True)
class MoveAnalysis:
    move: AcceptedMove
    evaluation: MoveQuality
    best_move: Optional[Move]
    score_difference: float


def classify_difference(score_difference: float) -> MoveQuality:
    for upper_bound, quality in QUALITY_THRESHOLDS:
        if score_difference <= upper_bound:
            return quality
    return MoveQuality.BLUNDER


def analyze_game(
    moves: list[AcceptedMove], depth: int = ANALYSIS_DEPTH
) -> list[MoveAnalysis]:
    """
    Replay the game from the starting position, one move at a time.
    ----

    For every move:
    1. ask the engine for its best move in the position before the move
    2. evaluate the position before the move, and the position after the move that was actually played
    3. the (absolute) difference between the two evaluations decides the grade of the move

    Runs on its own copy of the game, so the game that was just played is never touched.
    """
    replay = Game.new_game()
    engine = MinimaxStrategy(depth)

    results: list[MoveAnalysis] = []
    for played in moves:
        best_move = engine.search(replay).move
        score_before = evaluate(replay.board)

        replay.replay_move(played.move)
        score_after = evaluate(replay.board)

        score_difference = abs(score_before - score_after)
        results.append(
            MoveAnalysis(
                move=played,
                evaluation=classify_difference(score_difference),
                best_move=best_move,
                score_difference=score_difference,
            )
        )

    logger.info("Analyzed %d moves", len(results))
    return results


def replay_position(moves: list[AcceptedMove], ply: int) -> Board:
    """The board after the first `ply` moves of a game. Used to step back and forth through an analyzed game."""
    if not 0 <= ply <= len(moves):
        raise IndexError(f"ply must be between 0 and {len(moves)}, got {ply}")

    replay = Game.new_game()
    for played in moves[:ply]:
        replay.replay_move(played.move)
    return replay.board


def best_move_notation(move: Optional[Move]) -> str:
    """The suggested move, shown as its target square."""
    if move is None:
        return "---"
    return move.to_square.to_algebraic()

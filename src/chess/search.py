"""
Computer opponent
-----

Two strategies, picked by difficulty when a game against the computer starts:

* random: any legal move, uniformly sampled.
* minimax with alpha-beta pruning at a fixed depth, over a material-only evaluation.

Moves explored by the search are played on the live board and taken back again (see `Board.speculative_move`),
the board is never copied.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Optional, Protocol

from src.chess.board import Board
from src.chess.game import Game
from src.chess.moves import Move
from src.chess.pieces import Color
from src.core.shared_types import Difficulty

logger = logging.getLogger(__name__)

# The computer plays black and maximizes the evaluation, so the score is seen from black's side.
MAXIMIZING_COLOR = Color.BLACK


def evaluate(board: Board) -> int:
    """Material balance: black's points minus white's points (king counts as zero)."""
    material = board.count_material()
    return material[Color.BLACK] - material[Color.WHITE]


@dataclass(frozen=True)
class SearchResult:
    move: Optional[Move]
    score: float


class SearchStrategy(Protocol):
    """Pick a move for the side to move. None if there is no legal move."""

    def choose_move(self, game: Game) -> Optional[Move]: ...


class RandomStrategy:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def choose_move(self, game: Game) -> Optional[Move]:
        moves = game.legal_moves(game.side_to_move)
        if not moves:
            _report_no_move(game)
            return None
        return self.rng.choice(moves)


class MinimaxStrategy:
    def __init__(self, depth: int) -> None:
        if depth < 1:
            raise ValueError(f"Search depth must be at least 1, got {depth}")
        self.depth = depth

    def choose_move(self, game: Game) -> Optional[Move]:
        result = self.search(game)
        if result.move is None:
            _report_no_move(game)
        return result.move

    def search(self, game: Game) -> SearchResult:
        """Best move + score for the side to move. The whole search runs while holding the game's lock."""
        with game.lock:
            maximizing = game.side_to_move == MAXIMIZING_COLOR
            result = minimax(game, self.depth, -math.inf, math.inf, maximizing)
        logger.debug(
            "Depth %d search: best move %s, score %s",
            self.depth,
            result.move.to_uci() if result.move else None,
            result.score,
        )
        return result


def minimax(
    game: Game, depth: int, alpha: float, beta: float, maximizing: bool
) -> SearchResult:
    """
    Minimax with alpha-beta pruning
    ----

    Black maximizes, white minimizes.
    A branch is abandoned as soon as `beta <= alpha`: the opponent already has a better option elsewhere, so this line will never be reached.
    Leaf nodes (depth 0, or no legal move for the side at this node) get the static evaluation.

    Ties keep the first move found (strict comparison), so the result follows move generation order.
    """
    if depth == 0:
        return SearchResult(None, evaluate(game.board))

    color = Color.BLACK if maximizing else Color.WHITE
    moves = game.legal_moves(color)
    if not moves:
        return SearchResult(None, evaluate(game.board))

    best_move: Optional[Move] = None
    if maximizing:
        best_score = -math.inf
        for move in moves:
            with game.board.speculative_move(move):
                score = minimax(game, depth - 1, alpha, beta, False).score
            if score > best_score:
                best_score = score
                best_move = move
            alpha = max(alpha, score)
            if beta <= alpha:
                break
    else:
        best_score = math.inf
        for move in moves:
            with game.board.speculative_move(move):
                score = minimax(game, depth - 1, alpha, beta, True).score
            if score < best_score:
                best_score = score
                best_move = move
            beta = min(beta, score)
            if beta <= alpha:
                break
    return SearchResult(best_move, best_score)


def strategy_for(
    difficulty: Difficulty,
    depths: dict[Difficulty, int],
    rng: Optional[random.Random] = None,
) -> SearchStrategy:
    """A depth of zero means the computer plays random moves."""
    depth = depths[difficulty]
    if depth == 0:
        return RandomStrategy(rng)
    return MinimaxStrategy(depth)


def _report_no_move(game: Game) -> None:
    """Having no move to play must already have ended the game. If not, the game state is inconsistent."""
    if not game.is_over():
        logger.warning(
            "Search found no move for %s, but the game is not over: %s",
            game.side_to_move,
            game.snapshot(),
        )

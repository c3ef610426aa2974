"""
Representation of the canonical game position: the board, whose turn it is, and whether the game has ended.
"""

from dataclasses import dataclass, field
from typing import Optional, Self

from src.chess.board import STARTING_POSITION_FEN, Board
from src.chess.pieces import Color, Piece, opponent
from src.chess.square import Square
from src.core.shared_types import Result

ACTIVE_COLOR_TO_FEN: dict[Color, str] = {Color.WHITE: "w", Color.BLACK: "b"}
FEN_TO_ACTIVE_COLOR: dict[str, Color] = {
    value: key for key, value in ACTIVE_COLOR_TO_FEN.items()
}


@dataclass
class Position:
    """
    Board state
    ----

    No validation is performed on direct mutation: the Game and the search are trusted to keep the board consistent.
    """

    board: Board = field(default_factory=Board.starting_position)
    side_to_move: Color = Color.WHITE
    game_over: bool = False
    winner: Result = Result.NONE

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """
        Build a position from the first two fields of a FEN string: <piece placement> <active color>

        ex) "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w"
        The active color is optional and defaults to white.
        """
        placement, *rest = fen.split(" ")
        side_to_move = FEN_TO_ACTIVE_COLOR[rest[0]] if rest else Color.WHITE
        return cls(board=Board.from_fen(placement), side_to_move=side_to_move)

    def to_fen(self) -> str:
        return f"{self.board.to_fen()} {ACTIVE_COLOR_TO_FEN[self.side_to_move]}"

    def reset(self) -> None:
        """Standard starting arrangement, white to move, game not over."""
        self.board = Board.from_fen(STARTING_POSITION_FEN)
        self.side_to_move = Color.WHITE
        self.game_over = False
        self.winner = Result.NONE

    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.board.piece(square)

    def is_over(self) -> bool:
        return self.game_over

    def switch_side(self) -> None:
        self.side_to_move = opponent(self.side_to_move)

    def finish(self, winner: Result) -> None:
        self.game_over = True
        self.winner = winner

"""
The Game class will be the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a turn of the board game:
legal move generation, executing moves, and deciding when the game is over.
"""

import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import Callable, Optional, Self

from src.chess.board import Board
from src.chess.moves import AcceptedMove, Move
from src.chess.pieces import Color, opponent
from src.chess.position import Position
from src.chess.square import Square
from src.core.shared_types import Result, Status

logger = logging.getLogger(__name__)

WINNER_BY_COLOR: dict[Color, Result] = {
    Color.WHITE: Result.WHITE,
    Color.BLACK: Result.BLACK,
}

GameOverCallback = Callable[["Game"], None]


@dataclass
class Game:
    """
    A single game being played.
    ----

    Legality checks and the search play moves on the live board and take them back again.
    Every public method holds the (re-entrant) lock for its full duration, so nobody can observe the board halfway through such a cycle.
    """

    # --- DOMAIN LAYER API CALLED BY SERVICE---

    position: Position
    moves: list[AcceptedMove] = field(default_factory=list)
    status: Status = Status.IN_PROGRESS
    selected: Optional[Square] = None
    on_game_over: list[GameOverCallback] = field(default_factory=list, repr=False)
    _lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    @classmethod
    def new_game(cls) -> Self:
        """Standard starting position, white to move."""
        return cls(position=Position())

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Start from an arbitrary position: '<piece placement> <w|b>'"""
        return cls(position=Position.from_fen(fen))

    @property
    def board(self) -> Board:
        return self.position.board

    @property
    def side_to_move(self) -> Color:
        return self.position.side_to_move

    @property
    def winner(self) -> Result:
        return self.position.winner

    @property
    def lock(self) -> RLock:
        """For callers (the search) that need to run several operations as one uninterrupted unit."""
        return self._lock

    def is_over(self) -> bool:
        return self.position.is_over()

    def snapshot(self) -> str:
        """Current position as '<piece placement> <w|b>'."""
        with self._lock:
            return self.position.to_fen()

    def select_square(self, square: Square) -> list[Square]:
        """
        The player clicked a square.
        ----

        * A piece of the side to move: remember the selection and return its legal destinations.
        * The square that was already selected: clear the selection.
        * Anything else (empty square, opponent's piece, game over): nothing happens.
        """
        with self._lock:
            if self.is_over():
                return []

            if self.selected == square:
                self.selected = None
                return []

            piece = self.board.piece(square)
            if piece is None or piece.color != self.side_to_move:
                return []

            self.selected = square
            return self.legal_destinations(square)

    def legal_destinations(self, square: Square) -> list[Square]:
        """
        Squares the piece on this square can legally move to.
        ----

        1. generate candidate destinations, using the basic movement rules for the piece (the board does this calculation)
        2. remove illegal options --> a move that would put you in check or you are in check and the move does not get you out of it.
        """
        with self._lock:
            piece = self.board.piece(square)
            if piece is None:
                return []

            return [
                destination
                for destination in self.board.candidate_destinations(square)
                if not self._is_putting_yourself_in_check(
                    Move(square, destination), piece.color
                )
            ]

    def legal_moves(self, color: Color) -> list[Move]:
        """All legal moves of a player, in move generation order (board scanned row by row)."""
        with self._lock:
            return [
                Move(square, destination)
                for square in self.board.locate_color(color)
                for destination in self.legal_destinations(square)
            ]

    def is_check(self, color: Color) -> bool:
        with self._lock:
            return self.board.is_check(color)

    def request_move(
        self, from_square: Square, to_square: Square
    ) -> Optional[AcceptedMove]:
        """
        Attempt to make a move
        -----

        A move that is not legal (or made when the game already ended) gets rejected silently: no state changes, returns None.
        Otherwise:
        1. update the board
        2. update the (history of) moves
        3. hand the turn to the opponent
        4. update game status (if needed)
        """
        move = Move(from_square, to_square)
        with self._lock:
            if self.is_over():
                logger.debug("Ignoring move %s: game is over", move.to_uci())
                return None

            piece = self.board.piece(from_square)
            if piece is None or piece.color != self.side_to_move:
                logger.debug("Ignoring move %s: not a piece of %s", move.to_uci(), self.side_to_move)
                return None

            if to_square not in self.legal_destinations(from_square):
                logger.debug("Ignoring illegal move %s", move.to_uci())
                return None

            accepted_move = self._execute(move)
            self.selected = None
            self.classify()
            return accepted_move

    def replay_move(self, move: Move) -> AcceptedMove:
        """Play a move from a finished game's record. No legality checks and no game status updates."""
        with self._lock:
            return self._execute(move)

    def classify(self) -> Status:
        """
        Decide if the player to move is mated / stalemated.
        ----

        * no legal moves + in check --> checkmate, the opponent wins
        * no legal moves + not in check --> stalemate, draw
        * otherwise the game goes on
        """
        with self._lock:
            if self.is_over():
                return self.status

            color = self.side_to_move
            if self._has_legal_move(color):
                return self.status

            if self.board.is_check(color):
                self._end(Status.CHECKMATE, WINNER_BY_COLOR[opponent(color)])
            else:
                self._end(Status.STALEMATE, Result.DRAW)
            return self.status

    # -- GAME ENDING EVENTS FROM THE OUTSIDE ---
    def resign(self) -> None:
        """The player to move gives up."""
        with self._lock:
            if not self.is_over():
                self._end(Status.RESIGNED, WINNER_BY_COLOR[opponent(self.side_to_move)])

    def offer_draw(self) -> None:
        """Draw offers are always accepted."""
        with self._lock:
            if not self.is_over():
                self._end(Status.DRAW_AGREED, Result.DRAW)

    def time_forfeit(self) -> None:
        """The clock ran out: the player to move loses."""
        with self._lock:
            if not self.is_over():
                self._end(
                    Status.TIME_FORFEIT, WINNER_BY_COLOR[opponent(self.side_to_move)]
                )

    # -- PRIVATE HELPERS ---
    def _execute(self, move: Move) -> AcceptedMove:
        # Store move info before update
        accepted_move = AcceptedMove.from_move_and_board(move, self.board)
        self.board.move_piece(move)
        self.moves.append(accepted_move)
        self.position.switch_side()
        logger.debug("Played %s (%s)", accepted_move.notation, move.to_uci())
        return accepted_move

    def _is_putting_yourself_in_check(self, move: Move, color: Color) -> bool:
        """Return True if the move leaves your own king attacked. The board is restored afterwards."""
        with self.board.speculative_move(move):
            return self.board.is_check(color)

    def _has_legal_move(self, color: Color) -> bool:
        return any(
            self.legal_destinations(square) for square in self.board.locate_color(color)
        )

    def _end(self, status: Status, winner: Result) -> None:
        self.status = status
        self.position.finish(winner)
        self.selected = None
        logger.info("Game over: %s, winner: %s", status, winner)
        for callback in self.on_game_over:
            callback(self)

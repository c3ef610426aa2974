"""The Game board implements all rules that effect the `position` (in chess: the configuration of pieces on the board)"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Self

from src.chess.moves import ATTACK_RULES, MOVEMENT_RULES, CandidateMovesFn, Move
from src.chess.pieces import Color, Piece, PieceType, opponent
from src.chess.square import BOARD_SIZE, Square
from src.core.exceptions import InvalidFENError, KingMissingError


STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
EMPTY_FEN = "/".join(["8"] * BOARD_SIZE)


@dataclass
class Board:
    position: dict[Square, Optional[Piece]]

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the piece placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank (row 0), starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.

        NOTE: squares get inserted row by row, left to right. Move generation iterates in that same order.
        """
        fen_by_ranks = fen_str.split("/")
        if len(fen_by_ranks) != BOARD_SIZE:
            raise InvalidFENError(
                f"Expected {BOARD_SIZE} ranks separated by '/', got {len(fen_by_ranks)}: {fen_str!r}"
            )

        position: dict[Square, Optional[Piece]] = {}
        for row, fen_one_rank in enumerate(fen_by_ranks):
            col = 0
            for character in fen_one_rank:
                if character.isdigit():
                    # A number denotes the amount of empty squares after each other
                    for _ in range(int(character)):
                        position[Square(row, col)] = None
                        col += 1
                elif character.lower() in "pnbrqk":
                    position[Square(row, col)] = Piece.from_fen(character)
                    col += 1
                else:
                    raise InvalidFENError(
                        f"Unknown character {character!r} in rank {fen_one_rank!r}"
                    )
            if col != BOARD_SIZE:
                raise InvalidFENError(
                    f"Rank {fen_one_rank!r} describes {col} squares instead of {BOARD_SIZE}"
                )
        return cls(position)

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION_FEN)

    @classmethod
    def empty(cls) -> Self:
        return cls.from_fen(EMPTY_FEN)

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._rank_to_fen(row) for row in range(BOARD_SIZE))

    def _rank_to_fen(self, row: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for col in range(BOARD_SIZE):
            piece = self.piece(Square(row, col))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # -- QUERIES ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.position[square]

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square
            for square, piece in self.position.items()
            if piece is not None and piece.color == color
        ]

    def find_king(self, color: Color) -> Square:
        """Scan the board for the king. A board without it cannot be evaluated, so fail loudly."""
        king = Piece(PieceType.KING, color)
        for square, piece in self.position.items():
            if piece == king:
                return square
        raise KingMissingError(f"No {color} king on the board: {self.to_fen()}")

    def candidate_destinations(self, square: Square) -> list[Square]:
        """Pseudo-legal destinations of the piece on the square (empty list for an empty square)."""
        piece = self.piece(square)
        if piece is None:
            return []
        movement_rule: CandidateMovesFn = MOVEMENT_RULES[piece.type]
        return movement_rule(square, self)

    def is_square_attacked(self, square: Square, by_color: Color) -> bool:
        """True if any piece of `by_color` has the square in its attack set."""
        for attacker_square in self.locate_color(by_color):
            attacker = self.piece(attacker_square)
            assert attacker is not None
            if square in ATTACK_RULES[attacker.type](attacker_square, self):
                return True
        return False

    def is_check(self, color: Color) -> bool:
        """Is the king of this color under attack by the opponent?"""
        king_square = self.find_king(color)
        return self.is_square_attacked(king_square, opponent(color))

    def count_material(self) -> dict[Color, int]:
        """Tally the points of material each player has on the board"""
        return {color: self._count_material_player(color) for color in Color}

    def _count_material_player(self, color: Color) -> int:
        return sum(
            piece.points
            for piece in self.position.values()
            if piece is not None and piece.color == color
        )

    # -- MUTATIONS (no validation: callers are trusted) ---
    def place_piece(self, piece: Piece, square: Square) -> None:
        self.position[square] = piece

    def remove_piece(self, square: Square) -> None:
        self.position[square] = None

    def move_piece(self, move: Move) -> Optional[Piece]:
        """Update the position on the board. Returns the piece that got taken (if any)."""
        captured = self.position[move.to_square]
        self.position[move.to_square] = self.position[move.from_square]
        self.position[move.from_square] = None
        return captured

    @contextmanager
    def speculative_move(self, move: Move) -> Iterator[Optional[Piece]]:
        """
        Play a move on this board and take it back again when leaving the block.
        ----

        Used to test candidate moves (does it leave your king in check?) and to walk the search tree without copying the board.
        The board is restored on every exit path, including exceptions, so the position is left exactly as it was.

        Yields the captured piece (if any).
        """
        moving_piece = self.position[move.from_square]
        captured = self.move_piece(move)
        try:
            yield captured
        finally:
            self.position[move.from_square] = moving_piece
            self.position[move.to_square] = captured

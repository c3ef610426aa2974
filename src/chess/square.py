"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

BOARD_SIZE = 8

# Seen from white's side: files left-to-right, ranks top-to-bottom (row 0 is black's home rank)
FILES = "abcdefgh"
RANKS = "87654321"


@dataclass(frozen=True)
class Square:
    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a8' is (0, 0), 'h1' is (7, 7)"""
        col = FILES.index(sq[0])
        row = RANKS.index(sq[1])
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{FILES[self.col]}{RANKS[self.row]}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_SIZE) and (0 <= self.col < BOARD_SIZE)

    def offset(self, d_row: int, d_col: int) -> Square:
        """The square reached by stepping along a vector. Can fall off the board, so check bounds afterwards."""
        return Square(self.row + d_row, self.col + d_col)

    @property
    def file(self) -> str:
        return FILES[self.col]

"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the pseudo-legal destinations for each piece type.


Legality (not leaving your own king in check) is checked later by Game
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from src.chess.pieces import NOTATION_LETTER, Color, Piece, PieceType, opponent
from src.chess.square import Square
from src.core.models import MoveModel


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Optional[Piece]: ...


# (delta row, delta column). Row 0 is black's home rank, so white moves towards lower rows.
Vector = tuple[int, int]

STRAIGHTS: list[Vector] = [(0, 1), (0, -1), (1, 0), (-1, 0)]
DIAGONALS: list[Vector] = [(1, 1), (1, -1), (-1, 1), (-1, -1)]
KNIGHT_DELTAS: list[Vector] = [
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
]
KING_DELTAS: list[Vector] = [
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
]

PAWN_START_ROW: dict[Color, int] = {Color.WHITE: 6, Color.BLACK: 1}


def pawn_direction(color: Color) -> int:
    """White moves UP the board (towards row 0), black moves DOWN"""
    return -1 if color == Color.WHITE else 1


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    from_square: Square
    to_square: Square

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface: <from_square><to_square>

        example:
        * "e2e4": move the piece that was on e2 to e4
        """
        return cls(Square.from_algebraic(uci[:2]), Square.from_algebraic(uci[2:4]))

    def to_uci(self) -> str:
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}"


@dataclass(frozen=True)
class AcceptedMove:
    """
    A move that has been played.
    ----
    Snapshot of the moving piece (and the piece it took, if any) taken before the board got updated, plus its notation.
    Immutable once recorded.
    """

    move: Move
    moving_piece: Piece
    captured_piece: Optional[Piece]
    notation: str

    @classmethod
    def from_move_and_board(cls, move: Move, board: Board) -> Self:
        moving_piece = board.piece(move.from_square)
        # for the type checker: a move is only accepted after checking it is legal
        assert moving_piece is not None
        captured_piece = board.piece(move.to_square)
        notation = build_notation(move, moving_piece, captured_piece)
        return cls(move, moving_piece, captured_piece, notation)

    @property
    def from_square(self) -> Square:
        return self.move.from_square

    @property
    def to_square(self) -> Square:
        return self.move.to_square

    def to_model(self) -> MoveModel:
        return MoveModel(
            from_square=self.from_square.to_algebraic(),
            to_square=self.to_square.to_algebraic(),
            piece_type=self.moving_piece.type,
            color=self.moving_piece.color,
            captured_type=self.captured_piece.type if self.captured_piece else None,
            notation=self.notation,
        )

    @classmethod
    def from_model(cls, model: MoveModel) -> Self:
        moving_piece = Piece(PieceType(model.piece_type), Color(model.color))
        captured_piece = (
            Piece(PieceType(model.captured_type), opponent(Color(model.color)))
            if model.captured_type
            else None
        )
        move = Move(
            Square.from_algebraic(model.from_square),
            Square.from_algebraic(model.to_square),
        )
        return cls(move, moving_piece, captured_piece, model.notation)


# --- NOTATION ---
def build_notation(
    move: Move, moving_piece: Piece, captured_piece: Optional[Piece]
) -> str:
    """
    Simplified algebraic notation
    ----

    * Non-pawn moves start with the piece letter: 'Nc3'
    * Pawn captures start with the file the pawn left from: 'exd5'
    * An 'x' in front of the target square for any capture.

    NOTE: No disambiguation between two identical pieces reaching the same square, and no check / mate suffix.
    """
    if moving_piece.type == PieceType.PAWN:
        prefix = move.from_square.file if captured_piece else ""
    else:
        prefix = NOTATION_LETTER[moving_piece.type]
    capture = "x" if captured_piece else ""
    return f"{prefix}{capture}{move.to_square.to_algebraic()}"


# --- MOVEMENT RULES ---
def raycasting_move(square: Square, board: Board, directions: list[Vector]) -> list[Square]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    player = board.piece(square)
    assert player is not None

    destinations: list[Square] = []
    for d_row, d_col in directions:
        target_square = square
        while True:
            target_square = target_square.offset(d_row, d_col)
            if not target_square.is_within_bounds():
                break

            piece_found = board.piece(target_square)
            if piece_found is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if piece_found.is_opponent_of(player):
                    destinations.append(target_square)
                break

            destinations.append(target_square)
    return destinations


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just jump a single step along a direction"""
    player = board.piece(square)
    assert player is not None

    destinations: list[Square] = []
    for d_row, d_col in deltas:
        target_square = square.offset(d_row, d_col)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if piece_found is None or piece_found.is_opponent_of(player):
            destinations.append(target_square)
    return destinations


def candidate_pawn_moves(square: Square, board: Board) -> list[Square]:
    """
    A pawn:
    - moves by a single square forward (if that square is empty).
    - It can move by two in their first move (so when on their starting row), if both squares are empty
    - takes diagonally, but only onto an opponent's piece

    NOTE: No en passant, no promotion
    """
    pawn = board.piece(square)
    assert pawn is not None
    direction = pawn_direction(pawn.color)

    destinations: list[Square] = []
    one_step = square.offset(direction, 0)
    if one_step.is_within_bounds() and board.piece(one_step) is None:
        destinations.append(one_step)

        two_steps = square.offset(2 * direction, 0)
        if square.row == PAWN_START_ROW[pawn.color] and board.piece(two_steps) is None:
            destinations.append(two_steps)

    for target_square in pawn_attacks(square, board):
        piece_found = board.piece(target_square)
        if piece_found is not None and piece_found.is_opponent_of(pawn):
            destinations.append(target_square)
    return destinations


def candidate_knight_moves(square: Square, board: Board) -> list[Square]:
    """Knights always jump such that |delta_row| + |delta_col| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Square]:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Square]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Square]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return candidate_rook_moves(square, board) + candidate_bishop_moves(square, board)


def candidate_king_moves(square: Square, board: Board) -> list[Square]:
    """The king can move by a single square at the time. No castling."""
    return single_step_move(square, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Square]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# --- ATTACKING RULES ---
def pawn_attacks(square: Square, board: Board) -> list[Square]:
    """
    Pawns take diagonally
    ----

    For check detection a pawn attacks both forward diagonals, whether or not something is standing there.
    """
    pawn = board.piece(square)
    assert pawn is not None
    direction = pawn_direction(pawn.color)
    targets = [square.offset(direction, -1), square.offset(direction, 1)]
    return [target for target in targets if target.is_within_bounds()]


# -- STRATEGY PATTERN: ATTACKING RULES ---
# Every piece except the pawn attacks exactly the squares it could move to.
AttackSquaresFn = Callable[[Square, Board], list[Square]]
ATTACK_RULES: dict[PieceType, AttackSquaresFn] = {
    **MOVEMENT_RULES,
    PieceType.PAWN: pawn_attacks,
}

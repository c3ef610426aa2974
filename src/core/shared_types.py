"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    RESIGNED = "resigned"
    DRAW_AGREED = "draw agreed"
    TIME_FORFEIT = "time forfeit"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class Result(StrEnum):
    """Who won the game. NONE while the game is still being played."""

    WHITE = "white"
    BLACK = "black"
    DRAW = "draw"
    NONE = "none"


class GameMode(StrEnum):
    PLAYER_VS_PLAYER = "pvp"
    PLAYER_VS_COMPUTER = "pvc"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class MoveQuality(StrEnum):
    BRILLIANT = "brilliant"
    GOOD = "good"
    INACCURACY = "inaccuracy"
    MISTAKE = "mistake"
    BLUNDER = "blunder"

"""Custom exceptions. Every error raised on purpose by this package derives from GameError."""


class GameError(Exception):
    """Top-level exception of the chess domain."""


class GameStateError(GameError):
    """Operation does not make sense in the current state of the game / session."""


class KingMissingError(GameError):
    """The position is malformed: a check query was made for a color without a king on the board."""


class InvalidFENError(GameError):
    """Piece placement string could not be parsed."""


class InvalidRequestError(GameError):
    """Request data failed validation."""


class RepositoryError(GameError):
    """Record could not be found / stored."""

"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

# Type aliases to make the models easier to read
PlayerName = str
SquareName = str


@dataclass
class MoveModel:
    """Transport-safe representation of a single played move. Squares in algebraic notation ('e2')."""

    from_square: SquareName
    to_square: SquareName
    piece_type: str
    color: str
    captured_type: Optional[str]
    notation: str


@dataclass
class GameRecordModel:
    """A finished game, as it gets appended to the history of a user."""

    timestamp: datetime
    opponent_name: PlayerName
    result: str
    moves: list[MoveModel]
    mode: str
    user_color: str


@dataclass
class UserModel:
    """Profile of a player, keyed by username."""

    username: PlayerName
    rating: int
    friends: list[PlayerName] = field(default_factory=list)
    games_played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0

"""Requests and Response models"""

from typing import Optional, Self

from pydantic import BaseModel, field_validator, model_validator

from src.chess.square import FILES, RANKS
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, Difficulty, GameMode, MoveQuality, Result, Status

PlayerName = str
SquareName = str


def _is_algebraic_notation(value: str) -> bool:
    return len(value) == 2 and value[0] in FILES and value[1] in RANKS


# --- REQUEST MODELS ---
class LoginRequest(BaseModel):
    username: PlayerName

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("Please enter a username.")
        return value


class NewGameRequest(BaseModel):
    """
    Against another player: opponent_name (and their rating) are required.
    Against the computer: difficulty is required.
    """

    mode: GameMode
    difficulty: Optional[Difficulty] = None
    opponent_name: Optional[PlayerName] = None
    opponent_rating: Optional[int] = None

    @model_validator(mode="after")
    def validate_mode_options(self) -> Self:
        if self.mode == GameMode.PLAYER_VS_COMPUTER and self.difficulty is None:
            raise InvalidRequestError("A game against the computer needs a difficulty.")
        if self.mode == GameMode.PLAYER_VS_PLAYER and not self.opponent_name:
            raise InvalidRequestError("A game against another player needs an opponent.")
        return self


class SelectSquareRequest(BaseModel):
    square: SquareName

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        if not _is_algebraic_notation(value):
            raise InvalidRequestError(
                f"Cannot interpret square: {value!r} as a valid square name."
            )
        return value


class MoveRequest(BaseModel):
    from_square: SquareName
    to_square: SquareName

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        if not _is_algebraic_notation(value):
            raise InvalidRequestError(
                f"Cannot interpret square: {value!r} as a valid square name."
            )
        return value


class AddFriendRequest(BaseModel):
    # NOTE: not validated here, the service answers with a reason when the name is rejected
    friend_name: PlayerName


class ChatRequest(BaseModel):
    message: str


# --- RESPONSE MODELS ---
class PositionResponse(BaseModel):
    fen: str
    side_to_move: Color
    game_over: bool
    winner: Result
    status: Status
    move_history: list[str]
    time_left: str
    selected: Optional[SquareName]


class LegalMovesResponse(BaseModel):
    square: SquareName
    legal_moves: list[SquareName]


class MoveResponse(BaseModel):
    accepted: bool
    notation: Optional[str]
    position: PositionResponse


class FriendRequestResult(BaseModel):
    accepted: bool
    reason: str


class UserResponse(BaseModel):
    username: PlayerName
    rating: int
    friends: list[PlayerName]
    games_played: int
    wins: int
    draws: int
    losses: int


class OnlinePlayer(BaseModel):
    name: PlayerName
    rating: int


class GameSummary(BaseModel):
    """One line of the recent games list, seen from the user (who played white)."""

    date: str
    opponent_name: PlayerName
    outcome: str
    mode: GameMode


class ChatMessage(BaseModel):
    sender: PlayerName
    message: str


class MoveAnalysisResponse(BaseModel):
    notation: str
    evaluation: MoveQuality
    best_move: str
    score_difference: float

"""Orchestration of communication from the presentation layer to business logic and persistence layers (and the reverse direction)."""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial, wraps
from threading import RLock, Timer
from typing import Any, Callable, Optional, TypeVar

from src.api.models import (
    AddFriendRequest,
    ChatMessage,
    ChatRequest,
    FriendRequestResult,
    GameSummary,
    LegalMovesResponse,
    LoginRequest,
    MoveAnalysisResponse,
    MoveRequest,
    MoveResponse,
    NewGameRequest,
    OnlinePlayer,
    PositionResponse,
    SelectSquareRequest,
    UserResponse,
)
from src.chess.analysis import analyze_game, best_move_notation, replay_position
from src.chess.clock import GameClock
from src.chess.game import Game
from src.chess.rating import rating_change
from src.chess.search import SearchStrategy, strategy_for
from src.chess.square import Square
from src.core.config import Settings
from src.core.exceptions import GameStateError, RepositoryError
from src.core.models import GameRecordModel, UserModel
from src.core.shared_types import Color, Difficulty, GameMode, Result
from src.db.database import make_session_factory
from src.db.repository import GameHistoryRepository, UserRepository
from src.db.sql_repository import SQLGameHistoryRepository, SQLUserRepository

logger = logging.getLogger(__name__)

# (delay in seconds, callback)
Scheduler = Callable[[float, Callable[[], None]], None]
T = TypeVar("T")

# The user always plays white. The opponent (simulated player or computer) plays black.
USER_COLOR = Color.WHITE
COMPUTER_COLOR = Color.BLACK

SIMULATED_PLAYERS: list[OnlinePlayer] = [
    OnlinePlayer(name="AliceChess", rating=1350),
    OnlinePlayer(name="BobMaster", rating=1180),
    OnlinePlayer(name="CharlieKnight", rating=1420),
    OnlinePlayer(name="DianaQueen", rating=1250),
]

CANNED_CHAT_RESPONSES: list[str] = [
    "Good move!",
    "Interesting strategy",
    "Nice game!",
    "Well played",
    "That was unexpected",
]

OUTCOME_FOR_USER: dict[Result, str] = {
    Result.WHITE: "Won",
    Result.BLACK: "Lost",
    Result.DRAW: "Draw",
}


def threading_scheduler(delay: float, callback: Callable[[], None]) -> None:
    """Run the callback once, after a delay, on a background thread."""
    timer = Timer(delay, callback)
    timer.daemon = True
    timer.start()


def synchronized(method: Callable[..., T]) -> Callable[..., T]:
    """
    Run the method while holding the service lock.
    ----

    Scheduled callbacks run on timer threads, and the repositories (one SQLAlchemy session) are not thread-safe.
    Lock order is always service lock first, then the game's lock.
    """

    @wraps(method)
    def wrapper(self: "ChessService", *args: Any, **kwargs: Any) -> T:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


@dataclass
class Opponent:
    name: str
    # None for the computer: it has no rating
    rating: Optional[int]


@dataclass
class ActiveGame:
    """Everything that belongs to the game currently being played (or just finished)."""

    game: Game
    clock: GameClock
    mode: GameMode
    opponent: Opponent
    strategy: Optional[SearchStrategy] = None
    chat: list[ChatMessage] = field(default_factory=list)
    recorded: bool = False
    rating_change: int = 0


class ChessService:
    """Orchestration of layers for a chess session: one logged-in user, one game at a time."""

    def __init__(
        self,
        users: UserRepository,
        history: GameHistoryRepository,
        settings: Optional[Settings] = None,
        schedule: Scheduler = threading_scheduler,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.users = users
        self.history = history
        self.settings = settings or Settings()
        self.schedule = schedule
        self.rng = rng or random.Random()
        self.current_user: Optional[str] = None
        self.active: Optional[ActiveGame] = None
        self._lock = RLock()

    # -- ACCOUNT ---
    @synchronized
    def login(self, request: LoginRequest) -> UserResponse:
        """Log in. Unknown usernames get a fresh profile. Switching to another user abandons the game in progress."""
        if request.username != self.current_user:
            self._leave_game()

        user = self.users.get_user(request.username)
        if user is None:
            user = self.users.create_user(
                UserModel(username=request.username, rating=self.settings.starting_rating)
            )
            logger.info("Created profile for %s", request.username)

        self.current_user = user.username
        return self._user_response(user)

    @synchronized
    def logout(self) -> None:
        self._leave_game()
        self.current_user = None

    @synchronized
    def profile(self) -> UserResponse:
        return self._user_response(self._fetch_current_user())

    @synchronized
    def add_friend(self, request: AddFriendRequest) -> FriendRequestResult:
        """Friend list only grows through this call. Adding yourself or an existing friend is rejected."""
        user = self._fetch_current_user()
        friend_name = request.friend_name.strip()

        if not friend_name:
            return FriendRequestResult(accepted=False, reason="Please enter a username")
        if friend_name == user.username:
            return FriendRequestResult(
                accepted=False, reason="You cannot add yourself as a friend"
            )
        if friend_name in user.friends:
            return FriendRequestResult(
                accepted=False, reason="User is already in your friends list"
            )

        user.friends.append(friend_name)
        self.users.update_user(user)
        return FriendRequestResult(
            accepted=True, reason=f"Added {friend_name} to your friends list!"
        )

    @synchronized
    def recent_games(self, limit: int = 5) -> list[GameSummary]:
        """Most recent games of the logged-in user first."""
        username = self._require_user()
        if limit <= 0:
            return []
        records = self.history.list_records(username)[-limit:]
        return [
            GameSummary(
                date=record.timestamp.date().isoformat(),
                opponent_name=record.opponent_name,
                outcome=OUTCOME_FOR_USER.get(Result(record.result), "Draw"),
                mode=GameMode(record.mode),
            )
            for record in reversed(records)
        ]

    @synchronized
    def online_players(self) -> list[OnlinePlayer]:
        """Simulated list of players available for a game."""
        return [player for player in SIMULATED_PLAYERS if player.name != self.current_user]

    # -- PLAYING A GAME ---
    @synchronized
    def start_game(self, request: NewGameRequest) -> PositionResponse:
        """Start from the standard position with a full clock. Leaves any game still in progress."""
        self._require_user()
        self._leave_game()

        game = Game.new_game()
        clock = GameClock(self.settings.game_seconds, on_expire=game.time_forfeit)
        if request.mode == GameMode.PLAYER_VS_COMPUTER:
            # for the type checker: the request model makes sure a difficulty is given
            assert request.difficulty is not None
            opponent = Opponent(name=self._computer_name(request.difficulty), rating=None)
            strategy = strategy_for(request.difficulty, self.settings.search_depths, self.rng)
        else:
            assert request.opponent_name is not None
            opponent = Opponent(
                name=request.opponent_name,
                rating=request.opponent_rating or self.settings.starting_rating,
            )
            strategy = None

        self.active = ActiveGame(game, clock, request.mode, opponent, strategy)
        game.on_game_over.append(self._finish_game)
        clock.start()
        logger.info("%s started a %s game against %s", self.current_user, request.mode, opponent.name)
        return self.position()

    @synchronized
    def select_square(self, request: SelectSquareRequest) -> LegalMovesResponse:
        active = self._require_game()
        if self._is_computer_turn(active):
            return LegalMovesResponse(square=request.square, legal_moves=[])

        destinations = active.game.select_square(Square.from_algebraic(request.square))
        return LegalMovesResponse(
            square=request.square,
            legal_moves=[square.to_algebraic() for square in destinations],
        )

    @synchronized
    def request_move(self, request: MoveRequest) -> MoveResponse:
        """
        Attempt a move.
        ----

        An illegal move is not an error: it is reported back as not accepted.
        Against the computer, its reply gets scheduled after a short delay.
        """
        active = self._require_game()
        if self._is_computer_turn(active):
            return MoveResponse(accepted=False, notation=None, position=self.position())

        accepted_move = active.game.request_move(
            Square.from_algebraic(request.from_square),
            Square.from_algebraic(request.to_square),
        )
        if (
            accepted_move is not None
            and not active.game.is_over()
            and self._is_computer_turn(active)
        ):
            self.schedule(
                self.settings.ai_move_delay, partial(self._play_computer_move, active)
            )

        return MoveResponse(
            accepted=accepted_move is not None,
            notation=accepted_move.notation if accepted_move else None,
            position=self.position(),
        )

    @synchronized
    def resign(self) -> PositionResponse:
        self._require_game().game.resign()
        return self.position()

    @synchronized
    def offer_draw(self) -> PositionResponse:
        """Draw offers are always accepted."""
        self._require_game().game.offer_draw()
        return self.position()

    @synchronized
    def tick(self) -> PositionResponse:
        """One second passed."""
        self._require_game().clock.tick()
        return self.position()

    @synchronized
    def position(self) -> PositionResponse:
        active = self._require_game()
        game = active.game
        return PositionResponse(
            fen=game.snapshot(),
            side_to_move=game.side_to_move,
            game_over=game.is_over(),
            winner=game.winner,
            status=game.status,
            move_history=[move.notation for move in game.moves],
            time_left=active.clock.display(),
            selected=game.selected.to_algebraic() if game.selected else None,
        )

    @property
    @synchronized
    def last_rating_change(self) -> int:
        return self._require_game().rating_change

    # -- CHAT ---
    @synchronized
    def send_chat(self, request: ChatRequest) -> list[ChatMessage]:
        """Add the user's message. The computer answers with a canned reply after a random delay."""
        active = self._require_game()
        username = self._require_user()
        message = request.message.strip()
        if not message:
            return list(active.chat)

        active.chat.append(ChatMessage(sender=username, message=message))
        if active.mode == GameMode.PLAYER_VS_COMPUTER:
            delay = self.rng.uniform(self.settings.chat_delay_min, self.settings.chat_delay_max)
            self.schedule(delay, partial(self._reply_to_chat, active))
        return list(active.chat)

    @synchronized
    def chat_log(self) -> list[ChatMessage]:
        return list(self._require_game().chat)

    # -- ANALYSIS ---
    @synchronized
    def analyze_last_game(self) -> list[MoveAnalysisResponse]:
        """Grade every move of the game that just finished."""
        active = self._require_game()
        if not active.game.is_over():
            raise GameStateError("The game is still in progress. Finish it before analyzing.")

        analysis = analyze_game(active.game.moves, depth=self.settings.analysis_depth)
        return [
            MoveAnalysisResponse(
                notation=entry.move.notation,
                evaluation=entry.evaluation,
                best_move=best_move_notation(entry.best_move),
                score_difference=entry.score_difference,
            )
            for entry in analysis
        ]

    @synchronized
    def analysis_board(self, ply: int) -> str:
        """Piece placement after the first `ply` moves of the current / last game."""
        active = self._require_game()
        return replay_position(active.game.moves, ply).to_fen()

    # -- Internal helpers --
    def _play_computer_move(self, active: ActiveGame) -> None:
        """
        Scheduled callback. The game may have ended / been replaced in the meantime.
        ----

        The search only holds the game's lock, so the service stays responsive while it runs.
        Playing the move can end the game (and record it), so that part holds the service lock.
        """
        game = active.game
        if active.strategy is None or game.is_over():
            return

        move = active.strategy.choose_move(game)
        if move is None:
            return

        with self._lock:
            if active is not self.active or game.is_over():
                return
            game.request_move(move.from_square, move.to_square)

    @synchronized
    def _reply_to_chat(self, active: ActiveGame) -> None:
        response = self.rng.choice(CANNED_CHAT_RESPONSES)
        active.chat.append(ChatMessage(sender=active.opponent.name, message=response))

    @synchronized
    def _finish_game(self, game: Game) -> None:
        """
        Called by the Game on any ending (mate, stalemate, resignation, draw, time forfeit).
        ----

        1. stop the clock
        2. player vs player only: update rating and win/draw/loss stats
        3. store the game in the history of the user
        """
        active = self.active
        if active is None or active.game is not game or active.recorded:
            return
        active.recorded = True
        active.clock.stop()

        username = self._require_user()
        user = self._fetch_current_user()
        if active.mode == GameMode.PLAYER_VS_PLAYER:
            assert active.opponent.rating is not None
            change = rating_change(
                user.rating, active.opponent.rating, game.winner, k=self.settings.k_factor
            )
            active.rating_change = change.white
            user.rating += change.white
            user.games_played += 1
            if game.winner == Result.WHITE:
                user.wins += 1
            elif game.winner == Result.BLACK:
                user.losses += 1
            else:
                user.draws += 1
            self.users.update_user(user)
            logger.info("Rating of %s changed by %+d", username, change.white)

        self.history.append_record(
            username,
            GameRecordModel(
                timestamp=datetime.now(timezone.utc),
                opponent_name=active.opponent.name,
                result=game.winner,
                moves=[move.to_model() for move in game.moves],
                mode=active.mode,
                user_color=USER_COLOR,
            ),
        )

    def _leave_game(self) -> None:
        """Abandoning a game does not record it."""
        if self.active is not None:
            self.active.clock.stop()
        self.active = None

    def _is_computer_turn(self, active: ActiveGame) -> bool:
        return (
            active.mode == GameMode.PLAYER_VS_COMPUTER
            and active.game.side_to_move == COMPUTER_COLOR
        )

    def _computer_name(self, difficulty: Difficulty) -> str:
        return f"AI ({difficulty.capitalize()})"

    def _require_user(self) -> str:
        if self.current_user is None:
            raise GameStateError("No user logged in.")
        return self.current_user

    def _require_game(self) -> ActiveGame:
        if self.active is None:
            raise GameStateError("No game has been started.")
        return self.active

    def _fetch_current_user(self) -> UserModel:
        """Attempt to find the user in the repository and raise error if it fails."""
        username = self._require_user()
        user = self.users.get_user(username)
        if user is None:
            raise RepositoryError(f"User {username!r} not found.")
        return user

    def _user_response(self, user: UserModel) -> UserResponse:
        return UserResponse(
            username=user.username,
            rating=user.rating,
            friends=list(user.friends),
            games_played=user.games_played,
            wins=user.wins,
            draws=user.draws,
            losses=user.losses,
        )


def create_chess_service(settings: Optional[Settings] = None) -> ChessService:
    """Service backed by the SQL repositories. Settings come from the environment unless given."""
    settings = settings or Settings.from_env()
    db_session = make_session_factory(settings.database_url)()
    return ChessService(
        SQLUserRepository(db_session),
        SQLGameHistoryRepository(db_session),
        settings=settings,
    )

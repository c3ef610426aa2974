"""Implementation of the repositories using SQLAlchemy"""

from dataclasses import asdict
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.models import GameRecordModel, MoveModel, UserModel
from src.db.schema import DBGameRecord, DBUser


class SQLUserRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_user(self, username: str) -> UserModel | None:
        """Get the profile, if it exists."""
        user_db = self._fetch_user(username)
        if user_db:
            return self._to_model(user_db)
        return None

    def create_user(self, user: UserModel) -> UserModel:
        """Store a new profile."""
        user_db = DBUser(
            username=user.username,
            rating=user.rating,
            friends=list(user.friends),
            games_played=user.games_played,
            wins=user.wins,
            draws=user.draws,
            losses=user.losses,
        )
        self.db.add(user_db)
        self.db.commit()
        self.db.refresh(user_db)
        return self._to_model(user_db)

    def update_user(self, user: UserModel) -> UserModel | None:
        """Overwrite an existing profile. None if there is no such user."""
        user_db = self._fetch_user(user.username)
        if not user_db:
            return None
        user_db.rating = user.rating
        # NOTE: assign a new list, in-place changes of a JSON column are not tracked
        user_db.friends = list(user.friends)
        user_db.games_played = user.games_played
        user_db.wins = user.wins
        user_db.draws = user.draws
        user_db.losses = user.losses
        self.db.commit()
        self.db.refresh(user_db)
        return self._to_model(user_db)

    def _fetch_user(self, username: str) -> DBUser | None:
        query = select(DBUser).where(DBUser.username == username)
        return self.db.scalar(query)

    def _to_model(self, user_db: DBUser) -> UserModel:
        """Convert SQLAlchemy model to data transfer model."""
        return UserModel(
            username=user_db.username,
            rating=user_db.rating,
            friends=list(user_db.friends),
            games_played=user_db.games_played,
            wins=user_db.wins,
            draws=user_db.draws,
            losses=user_db.losses,
        )


class SQLGameHistoryRepository:
    """Finished games stored using SQL. Records are only ever inserted."""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def append_record(self, username: str, record: GameRecordModel) -> GameRecordModel:
        record_db = DBGameRecord(
            username=username,
            timestamp=record.timestamp,
            opponent_name=record.opponent_name,
            result=record.result,
            moves=[asdict(move) for move in record.moves],
            mode=record.mode,
            user_color=record.user_color,
        )
        self.db.add(record_db)
        self.db.commit()
        self.db.refresh(record_db)
        return self._to_model(record_db)

    def list_records(self, username: str) -> list[GameRecordModel]:
        query = (
            select(DBGameRecord)
            .where(DBGameRecord.username == username)
            .order_by(DBGameRecord.id)
        )
        return [self._to_model(record_db) for record_db in self.db.scalars(query)]

    def _to_model(self, record_db: DBGameRecord) -> GameRecordModel:
        return GameRecordModel(
            timestamp=record_db.timestamp,
            opponent_name=record_db.opponent_name,
            result=record_db.result,
            moves=[self._move_to_model(move) for move in record_db.moves],
            mode=record_db.mode,
            user_color=record_db.user_color,
        )

    def _move_to_model(self, move: dict[str, Any]) -> MoveModel:
        return MoveModel(**move)

"""Protocol repositories (can implement later for SQL Alchemy / simple Excel table etc.)"""

from typing import Protocol

from src.core.models import GameRecordModel, UserModel


class UserRepository(Protocol):
    """Persistence of user profiles, keyed by username"""

    def get_user(self, username: str) -> UserModel | None:
        """Get the profile, if it exists."""
        ...

    def create_user(self, user: UserModel) -> UserModel:
        """Store a new profile."""
        ...

    def update_user(self, user: UserModel) -> UserModel | None:
        """Overwrite an existing profile. None if there is no such user."""
        ...


class GameHistoryRepository(Protocol):
    """Per-user, append-only list of finished games"""

    def append_record(self, username: str, record: GameRecordModel) -> GameRecordModel:
        """Add a finished game to the end of the user's history."""
        ...

    def list_records(self, username: str) -> list[GameRecordModel]:
        """All games of the user, oldest first."""
        ...

"""
Application settings.

Defaults reproduce the rules of the game as played in the browser version
(10 minute clock, new players start at 1200, K-factor of 32).
Every value can be overridden through a `CHESS_<FIELD NAME>` environment variable.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Self

from src.core.shared_types import Difficulty


def _default_depths() -> dict[Difficulty, int]:
    """Search depth (in plies) per difficulty. Zero means: pick a random legal move."""
    return {Difficulty.EASY: 0, Difficulty.MEDIUM: 2, Difficulty.HARD: 3}


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///chess.db"
    starting_rating: int = 1200
    k_factor: int = 32
    game_seconds: int = 600
    ai_move_delay: float = 1.0
    chat_delay_min: float = 1.0
    chat_delay_max: float = 3.0
    analysis_depth: int = 2
    search_depths: dict[Difficulty, int] = field(default_factory=_default_depths)

    @classmethod
    def from_env(cls) -> Self:
        """Read overrides from the environment. Unknown / unset variables keep the defaults."""
        overrides: dict[str, object] = {}
        for setting in fields(cls):
            if setting.name == "search_depths":
                continue
            raw = os.environ.get(f"CHESS_{setting.name.upper()}")
            if raw is None:
                continue
            caster = setting.type  # int, float or str
            overrides[setting.name] = caster(raw)  # type: ignore[operator]

        depths = _default_depths()
        for difficulty in Difficulty:
            raw = os.environ.get(f"CHESS_DEPTH_{difficulty.name}")
            if raw is not None:
                depths[difficulty] = int(raw)
        return cls(search_depths=depths, **overrides)  # type: ignore[arg-type]

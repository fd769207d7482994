"""
Minigame Engines - Database Models

Pydantic models that mirror the Supabase table schemas.
"""

from datetime import datetime
from typing import Iterable
from uuid import UUID

from pydantic import BaseModel, Field

from minigames.engine.base import GameMode, ScoreRecord

# Word-guess rows store a level rather than a difficulty; each tier starts
# at this level.
WORD_GUESS_LEVELS: dict[str, int] = {"easy": 1, "medium": 4, "hard": 7}


class LeaderboardEntry(BaseModel):
    """
    Union of the per-game `*_scores` table columns.

    Game-specific columns are None for games whose table lacks them.
    """

    id: UUID | None = None
    user_id: str
    username: str = Field(max_length=30)
    score: int = Field(ge=0)
    time_taken: int = Field(ge=0, description="Milliseconds")
    moves: int | None = Field(default=None, ge=0)
    difficulty: str | None = None
    target_reached: int | None = None
    terminal_reason: str | None = None
    completed_at: datetime | None = None

    # Game-specific columns
    maze_size: int | None = None
    board_size: int | None = None
    level: int | None = None
    words_solved: int | None = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_record(cls, record: ScoreRecord, user_id: str, username: str) -> "LeaderboardEntry":
        """Attach player identity to an engine's score record."""
        details = record.details
        level = words_solved = None
        if record.game is GameMode.WORD_GUESS:
            level = WORD_GUESS_LEVELS.get(record.difficulty, 1)
            words_solved = 1 if details.get("is_won") else 0
        return cls(
            user_id=user_id,
            username=username,
            score=record.score,
            moves=record.moves,
            time_taken=record.time_elapsed_ms,
            difficulty=record.difficulty,
            target_reached=record.target_reached,
            terminal_reason=record.terminal_reason,
            completed_at=record.completed_at,
            maze_size=details.get("maze_size"),
            board_size=details.get("board_size"),
            level=level,
            words_solved=words_solved,
        )

    def to_row(self, columns: Iterable[str] | None = None) -> dict:
        """
        Insert payload; the database assigns the id.

        Args:
            columns: Columns the target table accepts; all but id when None
        """
        if columns is None:
            return self.model_dump(mode="json", exclude={"id"})
        return self.model_dump(mode="json", include=set(columns) - {"id"})


class BestScore(BaseModel):
    """Mirrors the `game2048_best_scores` table."""

    user_id: str
    difficulty: str
    best_score: int = Field(default=0, ge=0)
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}

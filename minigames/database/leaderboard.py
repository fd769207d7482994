"""
Minigame Engines - Leaderboard Manager

Writes finished score records to, and reads rankings from, the per-game
score tables. Engines never call this; the caller forwards the record.
"""

import logging
from dataclasses import dataclass

from supabase import Client

from minigames.database.models import LeaderboardEntry
from minigames.engine.base import GameMode, ScoreRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreTable:
    """
    A per-game score table.

    Attributes:
        name: Table name
        columns: Columns written on insert
        required: Columns declared NOT NULL without a default
    """
    name: str
    columns: frozenset[str]
    required: frozenset[str]

    @property
    def has_difficulty(self) -> bool:
        return "difficulty" in self.columns


SCORE_TABLES: dict[GameMode, ScoreTable] = {
    GameMode.SLIDING_MERGE: ScoreTable(
        name="game2048_scores",
        columns=frozenset({
            "user_id", "username", "score", "moves", "time_taken", "difficulty",
            "board_size", "target_reached", "completed_at",
        }),
        required=frozenset({"time_taken", "difficulty", "board_size", "target_reached"}),
    ),
    GameMode.MAZE: ScoreTable(
        name="maze_scores",
        columns=frozenset({
            "user_id", "username", "score", "time_taken", "difficulty", "maze_size", "completed_at",
        }),
        required=frozenset({"time_taken", "difficulty", "maze_size"}),
    ),
    GameMode.MATCH_PAIR: ScoreTable(
        name="memory_scores",
        columns=frozenset({
            "user_id", "username", "score", "moves", "time_taken", "difficulty",
            "target_reached", "terminal_reason", "completed_at",
        }),
        required=frozenset({"time_taken", "difficulty"}),
    ),
    GameMode.WORD_GUESS: ScoreTable(
        name="hangman_scores",
        columns=frozenset({"user_id", "username", "score", "level", "words_solved", "time_taken"}),
        required=frozenset({"level", "words_solved", "time_taken"}),
    ),
}


class LeaderboardManager:
    """Manages leaderboard rows in Supabase."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def _table(self, game: GameMode):
        return self.client.table(SCORE_TABLES[game].name)

    def submit(self, record: ScoreRecord, user_id: str, username: str) -> LeaderboardEntry:
        """
        Insert a finished game's score.

        Only the columns of the game's table are sent.

        Raises:
            ValueError: If the record lacks a value for a required column
        """
        table = SCORE_TABLES[record.game]
        entry = LeaderboardEntry.from_record(record, user_id, username)
        row = entry.to_row(table.columns)

        missing = sorted(column for column in table.required if row.get(column) is None)
        if missing:
            raise ValueError(f"{record.game.value} score is missing {', '.join(missing)}.")

        try:
            data = (
                self._table(record.game)
                .insert(row)
                .execute()
            )
        except Exception:
            logger.exception("Failed to submit %s score for user %s", record.game.value, user_id)
            raise

        logger.info(
            "Submitted %s score %d for user %s (%s)",
            record.game.value, record.score, user_id, record.difficulty,
        )
        if data.data:
            return LeaderboardEntry.model_validate(data.data[0])
        return entry

    def top_scores(
        self,
        game: GameMode,
        difficulty: str | None = None,
        limit: int = 10,
    ) -> list[LeaderboardEntry]:
        """Highest scores for a game, optionally for one difficulty."""
        query = self._table(game).select("*")
        if difficulty is not None:
            query = query.eq("difficulty", self._difficulty_filter(game, difficulty))
        data = (
            query
            .order("score", desc=True)
            .limit(limit)
            .execute()
        )
        return [LeaderboardEntry.model_validate(row) for row in data.data]

    def personal_best(
        self,
        game: GameMode,
        user_id: str,
        difficulty: str | None = None,
    ) -> LeaderboardEntry | None:
        """A user's highest score for a game."""
        query = self._table(game).select("*").eq("user_id", user_id)
        if difficulty is not None:
            query = query.eq("difficulty", self._difficulty_filter(game, difficulty))
        data = (
            query
            .order("score", desc=True)
            .limit(1)
            .execute()
        )
        if data.data:
            return LeaderboardEntry.model_validate(data.data[0])
        return None

    @staticmethod
    def _difficulty_filter(game: GameMode, difficulty: str) -> str:
        if not SCORE_TABLES[game].has_difficulty:
            raise ValueError(f"{SCORE_TABLES[game].name} has no difficulty column.")
        return difficulty

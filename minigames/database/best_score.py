"""
Minigame Engines - Best Score Store

Supabase-backed implementation of the sliding-merge best-score port.
"""

import logging

from supabase import Client

from minigames.database.models import BestScore

logger = logging.getLogger(__name__)


class SupabaseBestScoreStore:
    """Best score per user and difficulty in the `game2048_best_scores` table."""

    TABLE = "game2048_best_scores"

    def __init__(self, client: Client, user_id: str, difficulty: str) -> None:
        self.client = client
        self.table = client.table(self.TABLE)
        self.user_id = user_id
        self.difficulty = difficulty

    def load(self) -> int:
        """Stored best score, 0 when none exists."""
        data = (
            self.table
            .select("*")
            .eq("user_id", self.user_id)
            .eq("difficulty", self.difficulty)
            .execute()
        )
        if data.data:
            return BestScore.model_validate(data.data[0]).best_score
        return 0

    def save(self, value: int) -> None:
        """Upsert the best score."""
        row = BestScore(user_id=self.user_id, difficulty=self.difficulty, best_score=value)
        try:
            (
                self.table
                .upsert(row.model_dump(mode="json", exclude_none=True), on_conflict="user_id,difficulty")
                .execute()
            )
        except Exception:
            logger.exception("Failed to save best score for user %s", self.user_id)
            raise
        logger.debug("Saved best score %d for user %s (%s)", value, self.user_id, self.difficulty)

"""
Minigame Database Layer.

Supabase integration for leaderboards and best-score persistence.
"""

from minigames.database.best_score import SupabaseBestScoreStore
from minigames.database.client import get_supabase_client
from minigames.database.leaderboard import SCORE_TABLES, LeaderboardManager, ScoreTable
from minigames.database.models import BestScore, LeaderboardEntry

__all__ = [
    "get_supabase_client",
    "BestScore",
    "LeaderboardEntry",
    "LeaderboardManager",
    "SCORE_TABLES",
    "ScoreTable",
    "SupabaseBestScoreStore",
]

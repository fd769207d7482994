"""
Minigame Game Engines.

Pure Python game logic with zero UI/database dependencies.
Each engine is a deterministic state machine driven by player actions and
an external clock, producing immutable snapshots and a final score record.
"""

from minigames.engine.base import (
    ActionResult,
    Difficulty,
    Direction,
    GameMode,
    GamePhase,
    Grid,
    Position,
    ScoreRecord,
    SlidingMergeDifficulty,
    format_time,
)
from minigames.engine.maze import MazeCell, MazeConfig, MazeEngine, MazeGenerator, MazeState
from minigames.engine.match_pair import Card, MatchPairConfig, MatchPairEngine, MatchPairState
from minigames.engine.sliding_merge import (
    BestScoreStore,
    InMemoryBestScoreStore,
    SlidingMergeConfig,
    SlidingMergeEngine,
    SlidingMergeState,
    Tile,
)
from minigames.engine.word_guess import PowerUp, WordGuessEngine, WordGuessState, WordLevel

__all__ = [
    # Primitives
    "ActionResult",
    "Direction",
    "Grid",
    "Position",
    "ScoreRecord",
    "format_time",
    # Enums
    "Difficulty",
    "GameMode",
    "GamePhase",
    "SlidingMergeDifficulty",
    # Sliding merge
    "BestScoreStore",
    "InMemoryBestScoreStore",
    "SlidingMergeConfig",
    "SlidingMergeEngine",
    "SlidingMergeState",
    "Tile",
    # Maze
    "MazeCell",
    "MazeConfig",
    "MazeEngine",
    "MazeGenerator",
    "MazeState",
    # Match pair
    "Card",
    "MatchPairConfig",
    "MatchPairEngine",
    "MatchPairState",
    # Word guess
    "PowerUp",
    "WordGuessEngine",
    "WordGuessState",
    "WordLevel",
]

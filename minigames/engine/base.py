"""
Minigame Engines - Base Classes

This module defines the primitives shared by every engine: coordinates,
directions, immutable grids, lifecycle phases, action results and score
records. All classes are immutable (frozen dataclasses) so a snapshot handed
to a caller can never be used to mutate engine internals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Generic, Iterator, Mapping, Sequence, TypeVar

T = TypeVar("T")


class Direction(Enum):
    """Axis-aligned move directions with their (dx, dy) vectors."""
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @classmethod
    def parse(cls, direction: "Direction | str") -> "Direction":
        """Accept a Direction or its case-insensitive name."""
        if isinstance(direction, Direction):
            return direction
        if isinstance(direction, str):
            try:
                return cls[direction.strip().upper()]
            except KeyError:
                pass
        raise ValueError(
            f"Invalid direction {direction!r}. Must be one of "
            f"{[d.name.lower() for d in cls]}."
        )


class GamePhase(Enum):
    """Lifecycle phases shared by all engines."""
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"
    CONTINUE = "continue"      # Sliding-merge only, reachable from WON
    ELIMINATED = "eliminated"  # Match-pair only

    @property
    def is_terminal(self) -> bool:
        """Terminal phases are absorbing."""
        return self in (GamePhase.WON, GamePhase.LOST, GamePhase.ELIMINATED)


class Difficulty(Enum):
    """Difficulty tiers for maze, match-pair and word-guess."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SlidingMergeDifficulty(Enum):
    """Difficulty tiers for the sliding-merge puzzle."""
    CLASSIC = "classic"
    CHALLENGE = "challenge"
    EXPERT = "expert"


class GameMode(Enum):
    """Available mini-games. Values double as leaderboard keys."""
    SLIDING_MERGE = "game2048"
    MAZE = "maze"
    MATCH_PAIR = "memory"
    WORD_GUESS = "hangman"


@dataclass(frozen=True, order=True)
class Position:
    """
    Integer grid coordinates.

    Attributes:
        x: Column index
        y: Row index
    """
    x: int
    y: int

    def step(self, direction: Direction, distance: int = 1) -> "Position":
        """Position `distance` cells away in `direction`."""
        return Position(self.x + direction.dx * distance, self.y + direction.dy * distance)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


@dataclass(frozen=True)
class Grid(Generic[T]):
    """
    Immutable, rectangular, bounds-checked 2D array.

    Attributes:
        rows: Row-major cells; rows[y][x]
    """
    rows: tuple[tuple[T, ...], ...]

    def __post_init__(self) -> None:
        """Validate grid shape."""
        if not self.rows or not self.rows[0]:
            raise ValueError("Grid must have at least one row and one column.")
        width = len(self.rows[0])
        for y, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"Grid must be rectangular: row {y} has {len(row)} cells, expected {width}."
                )

    @classmethod
    def filled(cls, width: int, height: int, value: T) -> "Grid[T]":
        """Create a width x height grid with every cell set to `value`."""
        return cls(rows=tuple(tuple(value for _ in range(width)) for _ in range(height)))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[T]]) -> "Grid[T]":
        """Create a Grid from any nested sequence."""
        return cls(rows=tuple(tuple(row) for row in rows))

    @property
    def width(self) -> int:
        return len(self.rows[0])

    @property
    def height(self) -> int:
        return len(self.rows)

    def in_bounds(self, position: Position) -> bool:
        return 0 <= position.x < self.width and 0 <= position.y < self.height

    def get(self, position: Position) -> T:
        """Cell at `position`; raises IndexError when out of bounds."""
        if not self.in_bounds(position):
            raise IndexError(
                f"Position {position} is outside the {self.width}x{self.height} grid."
            )
        return self.rows[position.y][position.x]

    def replace(self, position: Position, value: T) -> "Grid[T]":
        """Return a new grid with one cell replaced."""
        if not self.in_bounds(position):
            raise IndexError(
                f"Position {position} is outside the {self.width}x{self.height} grid."
            )
        row = self.rows[position.y]
        new_row = row[:position.x] + (value,) + row[position.x + 1:]
        return Grid(rows=self.rows[:position.y] + (new_row,) + self.rows[position.y + 1:])

    def positions(self) -> Iterator[Position]:
        """All positions in row-major order."""
        for y in range(self.height):
            for x in range(self.width):
                yield Position(x, y)

    def cells(self) -> Iterator[tuple[Position, T]]:
        for position in self.positions():
            yield position, self.rows[position.y][position.x]

    def to_lists(self) -> list[list[T]]:
        """Mutable copy, e.g. for rendering or serialization."""
        return [list(row) for row in self.rows]


@dataclass(frozen=True)
class ActionResult:
    """
    Outcome of a player action.

    Rejected actions are expected branches, not errors: they return
    success=False with a human-readable message and leave state untouched.

    Attributes:
        success: Whether the action changed the game state
        message: Human-readable description of the outcome
        points: Points gained (or spent, negative) by the action
        is_correct: For guesses, whether the guess was right
    """
    success: bool
    message: str = ""
    points: int = 0
    is_correct: bool | None = None

    @classmethod
    def rejected(cls, message: str) -> "ActionResult":
        return cls(success=False, message=message)


@dataclass(frozen=True)
class ScoreRecord:
    """
    Final score of a concluded game, forwarded unmodified to the leaderboard.

    Attributes:
        game: Which mini-game produced the record
        score: Final score
        moves: Moves, flips or guesses taken
        time_elapsed_ms: Play time in milliseconds
        difficulty: Difficulty tier value
        target_reached: Highest tile, pairs matched, maze size or word length
        terminal_reason: Why the game ended, if not a plain win
        completed_at: When the record was produced (UTC)
        details: Read-only per-game extras
    """
    game: GameMode
    score: int
    moves: int
    time_elapsed_ms: int
    difficulty: str
    target_reached: int | None = None
    terminal_reason: str | None = None
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Freeze the details mapping."""
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @property
    def time_elapsed_seconds(self) -> int:
        return self.time_elapsed_ms // 1000


def format_time(seconds: int) -> str:
    """Format a second count as m:ss."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"

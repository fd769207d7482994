"""
Minigame Engines - Sliding Merge Engine (2048 Mode)

An N x N board of numeric tiles. Each move slides every tile as far as it
can in one direction; two equal tiles that collide merge into one tile of
double value. After every effective move a new tile spawns.

Game Rules:
- Tiles farthest in the move direction are processed first
- A tile produced by a merge cannot merge again in the same move
- A move that changes nothing does not count as a turn
- New tiles are 2 (90%) or 4 (10%) in a uniformly random empty cell
- Reaching the target tile wins; the player may continue afterwards
- The game is lost when the board is full and no neighbours match

Scoring:
- Every merge adds the value of the new tile
- First terminal transition adds a time bonus and a merge streak bonus
"""

from __future__ import annotations

import itertools
import logging
import random
from dataclasses import dataclass, replace
from typing import ClassVar, Protocol, Sequence

from minigames.engine.base import (
    ActionResult,
    Direction,
    GameMode,
    GamePhase,
    Grid,
    Position,
    ScoreRecord,
    SlidingMergeDifficulty,
)
from minigames.engine.validators import (
    validate_board_size,
    validate_direction,
    validate_seconds,
    validate_tile_values,
)

logger = logging.getLogger(__name__)


class BestScoreStore(Protocol):
    """Port for the one piece of state that outlives a game session."""

    def load(self) -> int:
        ...

    def save(self, value: int) -> None:
        ...


class InMemoryBestScoreStore:
    """Best score kept for the lifetime of the process."""

    def __init__(self, initial: int = 0) -> None:
        self.best = initial

    def load(self) -> int:
        return self.best

    def save(self, value: int) -> None:
        self.best = value


@dataclass(frozen=True)
class Tile:
    """
    A numeric tile on the board.

    Attributes:
        id: Unique within an engine, never reused across restarts
        value: Power of two >= 2
        position: Cell the tile occupies
        just_merged: Produced by a merge in the latest move
        is_new: Spawned after the latest move
    """
    id: int
    value: int
    position: Position
    just_merged: bool = False
    is_new: bool = False


@dataclass(frozen=True)
class SlidingMergeConfig:
    """
    Board parameters for a difficulty tier.

    Attributes:
        board_size: Board width and height
        target_tile: Tile value that wins the game
    """
    board_size: int
    target_tile: int

    def __post_init__(self) -> None:
        """Validate configuration."""
        validate_board_size(self.board_size)
        if self.target_tile < 4 or self.target_tile & (self.target_tile - 1):
            raise ValueError(f"Target tile must be a power of two >= 4, got {self.target_tile}.")

    @classmethod
    def for_difficulty(cls, difficulty: SlidingMergeDifficulty | str) -> "SlidingMergeConfig":
        return DIFFICULTY_CONFIGS[SlidingMergeDifficulty(difficulty)]


DIFFICULTY_CONFIGS: dict[SlidingMergeDifficulty, SlidingMergeConfig] = {
    SlidingMergeDifficulty.CLASSIC: SlidingMergeConfig(board_size=4, target_tile=2048),
    SlidingMergeDifficulty.CHALLENGE: SlidingMergeConfig(board_size=5, target_tile=4096),
    SlidingMergeDifficulty.EXPERT: SlidingMergeConfig(board_size=6, target_tile=8192),
}


@dataclass(frozen=True)
class SlidingMergeState:
    """
    Immutable snapshot of a sliding-merge game.

    Attributes:
        board: Grid of tiles, None for empty cells
        score: Sum of merge values plus any terminal bonus
        best_score: Best score known to the best-score store
        moves: Effective moves taken
        phase: PLAYING, WON, CONTINUE or LOST
        difficulty: Difficulty tier
        target_tile: Tile value that wins
        seconds_elapsed: Play time advanced by the clock
        merge_streak: Consecutive effective moves with at least one merge
        best_merge_streak: Longest merge streak this game
        has_won: Target tile was reached at some point
        bonus_awarded: Terminal bonus has been added
    """
    board: Grid[Tile | None]
    score: int
    best_score: int
    moves: int
    phase: GamePhase
    difficulty: SlidingMergeDifficulty
    target_tile: int
    seconds_elapsed: int = 0
    merge_streak: int = 0
    best_merge_streak: int = 0
    has_won: bool = False
    bonus_awarded: bool = False

    @property
    def board_size(self) -> int:
        return self.board.width

    @property
    def tiles(self) -> tuple[Tile, ...]:
        """All tiles in row-major order."""
        return tuple(tile for _, tile in self.board.cells() if tile is not None)

    @property
    def values(self) -> tuple[tuple[int, ...], ...]:
        """Board as tile values, 0 for empty cells."""
        return tuple(
            tuple(tile.value if tile is not None else 0 for tile in row)
            for row in self.board.rows
        )

    @property
    def highest_tile(self) -> int:
        return max((tile.value for tile in self.tiles), default=0)

    @property
    def empty_positions(self) -> tuple[Position, ...]:
        return tuple(position for position, tile in self.board.cells() if tile is None)


class SlidingMergeEngine:
    """
    Engine for the sliding-merge puzzle.

    Holds the current immutable state and replaces it on every effective
    action. Randomness comes from the injected `rng` only.
    """

    INITIAL_TILES: ClassVar[int] = 2
    SPAWN_FOUR_PROBABILITY: ClassVar[float] = 0.1
    TIME_BONUS: ClassVar[int] = 500
    TIME_BONUS_DECAY: ClassVar[int] = 2
    STREAK_BONUS: ClassVar[int] = 10

    def __init__(
        self,
        difficulty: SlidingMergeDifficulty | str = SlidingMergeDifficulty.CLASSIC,
        *,
        config: SlidingMergeConfig | None = None,
        rng: random.Random | None = None,
        best_score_store: BestScoreStore | None = None,
        initial_board: Sequence[Sequence[int]] | None = None,
    ) -> None:
        self.difficulty = SlidingMergeDifficulty(difficulty)
        self.config = config or SlidingMergeConfig.for_difficulty(self.difficulty)
        self._rng = rng or random.Random()
        self._best_score_store = best_score_store or InMemoryBestScoreStore()
        self._tile_ids = itertools.count(1)
        self._score_record: ScoreRecord | None = None

        if initial_board is not None:
            rows = validate_tile_values(initial_board)
            if len(rows) != self.config.board_size:
                self.config = SlidingMergeConfig(len(rows), self.config.target_tile)
            self._state = self._initial_state(self._board_from_values(rows))
        else:
            self._state = self._new_game()

    @classmethod
    def from_board(
        cls,
        values: Sequence[Sequence[int]],
        *,
        difficulty: SlidingMergeDifficulty | str = SlidingMergeDifficulty.CLASSIC,
        target_tile: int | None = None,
        rng: random.Random | None = None,
        best_score_store: BestScoreStore | None = None,
    ) -> "SlidingMergeEngine":
        """
        Build an engine from a literal board of values (0 = empty).

        No tiles are spawned; the board is used exactly as given.
        """
        rows = validate_tile_values(values)
        target = target_tile or SlidingMergeConfig.for_difficulty(difficulty).target_tile
        return cls(
            difficulty,
            config=SlidingMergeConfig(board_size=len(rows), target_tile=target),
            rng=rng,
            best_score_store=best_score_store,
            initial_board=rows,
        )

    # -- Observe ---------------------------------------------------------

    def get_state(self) -> SlidingMergeState:
        """Current snapshot; immutable, safe to hand to a renderer."""
        return self._state

    def get_all_tiles(self) -> tuple[Tile, ...]:
        return self._state.tiles

    # -- Act -------------------------------------------------------------

    def move(self, direction: Direction | str) -> ActionResult:
        """
        Slide all tiles in a direction.

        Args:
            direction: Direction or its name ("up", "down", "left", "right")

        Returns:
            ActionResult; success is False when the game is not accepting
            moves or when no tile could move
        """
        direction = validate_direction(direction)
        state = self._state

        if state.phase is GamePhase.WON:
            return ActionResult.rejected("Target reached. Continue to keep playing.")
        if state.phase is GamePhase.LOST:
            return ActionResult.rejected("Game is over.")

        board, merges, moved = self._slide(state.board, direction)
        if not moved:
            return ActionResult.rejected(f"No tiles can move {direction.name.lower()}.")

        gained = sum(merges)
        phase = state.phase
        has_won = state.has_won
        if phase is GamePhase.PLAYING and state.target_tile in merges:
            phase = GamePhase.WON
            has_won = True

        merge_streak = state.merge_streak + 1 if merges else 0
        board, _ = self._spawn_tile(board)

        if phase is not GamePhase.WON and not self.has_moves(board):
            phase = GamePhase.LOST

        new_state = replace(
            state,
            board=board,
            score=state.score + gained,
            moves=state.moves + 1,
            phase=phase,
            merge_streak=merge_streak,
            best_merge_streak=max(state.best_merge_streak, merge_streak),
            has_won=has_won,
        )
        if phase is not state.phase:
            logger.debug("Sliding-merge phase %s -> %s", state.phase.value, phase.value)
            new_state = self._award_terminal_bonus(new_state)

        self._state = self._record_best_score(new_state)
        self._score_record = None

        if phase is GamePhase.WON:
            message = f"You reached {state.target_tile}!"
        elif phase is GamePhase.LOST:
            message = "No moves left."
        elif merges:
            message = f"+{gained} points"
        else:
            message = "Moved"
        return ActionResult(success=True, message=message, points=gained)

    def continue_game(self) -> ActionResult:
        """Keep playing after reaching the target tile."""
        state = self._state
        if state.phase is not GamePhase.WON:
            return ActionResult.rejected("Only a won game can be continued.")

        phase = GamePhase.CONTINUE if self.has_moves(state.board) else GamePhase.LOST
        logger.debug("Sliding-merge phase %s -> %s", state.phase.value, phase.value)
        self._state = replace(state, phase=phase)
        self._score_record = None
        if phase is GamePhase.LOST:
            return ActionResult(success=True, message="No moves left.")
        return ActionResult(success=True, message="Keep going!")

    def tick(self, seconds: int = 1) -> None:
        """Advance play time while the game is running."""
        validate_seconds(seconds)
        if self._state.phase in (GamePhase.PLAYING, GamePhase.CONTINUE):
            self._state = replace(self._state, seconds_elapsed=self._state.seconds_elapsed + seconds)

    def restart(self) -> SlidingMergeState:
        """Start a fresh game with the same difficulty, RNG and store."""
        self._state = self._new_game()
        self._score_record = None
        return self._state

    # -- Conclude --------------------------------------------------------

    def calculate_final_score(self) -> ScoreRecord | None:
        """
        Score record for a concluded game.

        Returns:
            The record once the target was reached or the game was lost,
            None while the first game is still running
        """
        state = self._state
        if state.phase is GamePhase.PLAYING:
            return None

        if self._score_record is None:
            self._score_record = ScoreRecord(
                game=GameMode.SLIDING_MERGE,
                score=state.score,
                moves=state.moves,
                time_elapsed_ms=state.seconds_elapsed * 1000,
                difficulty=state.difficulty.value,
                target_reached=state.highest_tile,
                terminal_reason="No moves left" if state.phase is GamePhase.LOST else None,
                details={
                    "board_size": state.board_size,
                    "target_tile": state.target_tile,
                    "has_won": state.has_won,
                    "best_merge_streak": state.best_merge_streak,
                    "best_score": state.best_score,
                },
            )
        return self._score_record

    # -- Board mechanics ---------------------------------------------------

    @classmethod
    def has_moves(cls, board: Grid[Tile | None]) -> bool:
        """
        True if an empty cell exists or two neighbours share a value.

        Each cell is compared with its right and down neighbours only.
        """
        for position, tile in board.cells():
            if tile is None:
                return True
            for direction in (Direction.RIGHT, Direction.DOWN):
                neighbour = position.step(direction)
                if board.in_bounds(neighbour):
                    other = board.get(neighbour)
                    if other is not None and other.value == tile.value:
                        return True
        return False

    def _slide(
        self,
        board: Grid[Tile | None],
        direction: Direction,
    ) -> tuple[Grid[Tile | None], list[int], bool]:
        """
        Slide and merge every tile once.

        Returns:
            Tuple of (new_board, merge_values, moved)
        """
        size = board.width
        cells: list[list[Tile | None]] = [
            [replace(tile, just_merged=False, is_new=False) if tile else None for tile in row]
            for row in board.rows
        ]

        xs = list(range(size))
        ys = list(range(size))
        if direction.dx == 1:
            xs.reverse()
        if direction.dy == 1:
            ys.reverse()

        merges: list[int] = []
        moved = False

        for y in ys:
            for x in xs:
                tile = cells[y][x]
                if tile is None:
                    continue

                farthest, next_position = self._find_farthest(cells, Position(x, y), direction)
                blocker = (
                    cells[next_position.y][next_position.x]
                    if self._in_bounds(next_position, size) else None
                )
                cells[y][x] = None

                if blocker is not None and blocker.value == tile.value and not blocker.just_merged:
                    merged = Tile(
                        id=next(self._tile_ids),
                        value=tile.value * 2,
                        position=next_position,
                        just_merged=True,
                    )
                    cells[next_position.y][next_position.x] = merged
                    merges.append(merged.value)
                    moved = True
                else:
                    cells[farthest.y][farthest.x] = replace(tile, position=farthest)
                    if farthest != tile.position:
                        moved = True

        return Grid.from_rows(cells), merges, moved

    @staticmethod
    def _in_bounds(position: Position, size: int) -> bool:
        return 0 <= position.x < size and 0 <= position.y < size

    def _find_farthest(
        self,
        cells: list[list[Tile | None]],
        start: Position,
        direction: Direction,
    ) -> tuple[Position, Position]:
        """Walk while the next cell is empty; return (farthest, next)."""
        size = len(cells)
        previous = start
        current = start.step(direction)
        while self._in_bounds(current, size) and cells[current.y][current.x] is None:
            previous = current
            current = current.step(direction)
        return previous, current

    def _spawn_tile(self, board: Grid[Tile | None]) -> tuple[Grid[Tile | None], Tile | None]:
        """Place a 2 or 4 in a uniformly random empty cell, if any."""
        empty = [position for position, tile in board.cells() if tile is None]
        if not empty:
            return board, None

        position = self._rng.choice(empty)
        value = 4 if self._rng.random() < self.SPAWN_FOUR_PROBABILITY else 2
        tile = Tile(id=next(self._tile_ids), value=value, position=position, is_new=True)
        return board.replace(position, tile), tile

    # -- State helpers -----------------------------------------------------

    def _new_game(self) -> SlidingMergeState:
        size = self.config.board_size
        board: Grid[Tile | None] = Grid.filled(size, size, None)
        for _ in range(self.INITIAL_TILES):
            board, _ = self._spawn_tile(board)
        return self._initial_state(board)

    def _initial_state(self, board: Grid[Tile | None]) -> SlidingMergeState:
        return SlidingMergeState(
            board=board,
            score=0,
            best_score=self._best_score_store.load(),
            moves=0,
            phase=GamePhase.PLAYING,
            difficulty=self.difficulty,
            target_tile=self.config.target_tile,
        )

    def _board_from_values(self, rows: tuple[tuple[int, ...], ...]) -> Grid[Tile | None]:
        return Grid.from_rows([
            [
                Tile(id=next(self._tile_ids), value=value, position=Position(x, y)) if value else None
                for x, value in enumerate(row)
            ]
            for y, row in enumerate(rows)
        ])

    def _award_terminal_bonus(self, state: SlidingMergeState) -> SlidingMergeState:
        """Add the time and streak bonus at the first WON or LOST transition."""
        if state.bonus_awarded or state.phase not in (GamePhase.WON, GamePhase.LOST):
            return state
        bonus = self.terminal_bonus(state.seconds_elapsed, state.best_merge_streak)
        return replace(state, score=state.score + bonus, bonus_awarded=True)

    @classmethod
    def terminal_bonus(cls, seconds_elapsed: int, best_merge_streak: int) -> int:
        """Time-decay bonus plus linear merge streak bonus."""
        time_bonus = max(0, cls.TIME_BONUS - seconds_elapsed * cls.TIME_BONUS_DECAY)
        return time_bonus + best_merge_streak * cls.STREAK_BONUS

    def _record_best_score(self, state: SlidingMergeState) -> SlidingMergeState:
        if state.score <= state.best_score:
            return state
        self._best_score_store.save(state.score)
        return replace(state, best_score=state.score)

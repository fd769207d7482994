"""
Minigame Engines - Maze Engine

Procedurally carves a perfect maze, then adjudicates player movement
through it.

Generation:
    Rooms sit on odd coordinates and walls on even ones. Randomized
    iterative backtracking visits every room once, carving the wall
    between a room and a randomly chosen unvisited room two cells away.
    The carved cells form a spanning tree over the rooms: exactly one
    route between any two open cells and no cycles.

Scoring:
    (base score + max(0, time budget - seconds)) x difficulty multiplier
"""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, replace
from typing import ClassVar

from minigames.engine.base import (
    ActionResult,
    Difficulty,
    Direction,
    GameMode,
    GamePhase,
    Grid,
    Position,
    ScoreRecord,
)
from minigames.engine.validators import validate_direction, validate_maze_size, validate_seconds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MazeCell:
    """
    A single maze cell.

    Attributes:
        is_wall: Cell blocks movement
        is_visited: Room reached during generation
        is_path: Cell was carved open
    """
    is_wall: bool = True
    is_visited: bool = False
    is_path: bool = False


WALL = MazeCell()
ROOM = MazeCell(is_wall=False, is_visited=True, is_path=True)
PASSAGE = MazeCell(is_wall=False, is_visited=False, is_path=True)


@dataclass(frozen=True)
class MazeConfig:
    """
    Parameters for a maze difficulty tier.

    Harder tiers are larger, pay a higher base score and multiply the
    time bonus.

    Attributes:
        size: Width and height in cells (odd)
        base_score: Points for reaching the goal
        multiplier: Applied to base score plus time bonus
        time_budget: Seconds before the time bonus runs out
    """
    size: int
    base_score: int
    multiplier: int
    time_budget: int = 300

    def __post_init__(self) -> None:
        """Validate configuration."""
        validate_maze_size(self.size)
        if self.multiplier < 1:
            raise ValueError(f"Multiplier must be at least 1, got {self.multiplier}.")

    @classmethod
    def for_difficulty(cls, difficulty: Difficulty | str) -> "MazeConfig":
        return DIFFICULTY_CONFIGS[Difficulty(difficulty)]


DIFFICULTY_CONFIGS: dict[Difficulty, MazeConfig] = {
    Difficulty.EASY: MazeConfig(size=15, base_score=100, multiplier=1),
    Difficulty.MEDIUM: MazeConfig(size=25, base_score=200, multiplier=2),
    Difficulty.HARD: MazeConfig(size=35, base_score=300, multiplier=3),
}


class MazeGenerator:
    """Randomized iterative backtracker over a half-resolution room grid."""

    START: ClassVar[Position] = Position(1, 1)

    def __init__(self, size: int, rng: random.Random | None = None) -> None:
        self.size = validate_maze_size(size)
        self._rng = rng or random.Random()

    def generate(self) -> Grid[MazeCell]:
        """
        Carve a new maze.

        Returns:
            Grid of cells; the border is always wall
        """
        cells = [[WALL for _ in range(self.size)] for _ in range(self.size)]

        start = self.START
        cells[start.y][start.x] = ROOM
        stack = [start]

        while stack:
            current = stack[-1]
            neighbours = self._unvisited_neighbours(cells, current)
            if not neighbours:
                stack.pop()
                continue

            chosen = self._rng.choice(neighbours)
            wall = Position((current.x + chosen.x) // 2, (current.y + chosen.y) // 2)
            cells[wall.y][wall.x] = PASSAGE
            cells[chosen.y][chosen.x] = ROOM
            stack.append(chosen)

        return Grid.from_rows(cells)

    def _unvisited_neighbours(self, cells: list[list[MazeCell]], room: Position) -> list[Position]:
        """Unvisited rooms two cells away, in up/right/down/left order."""
        neighbours = []
        for direction in (Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT):
            candidate = room.step(direction, 2)
            if (
                0 < candidate.x < self.size - 1
                and 0 < candidate.y < self.size - 1
                and not cells[candidate.y][candidate.x].is_visited
            ):
                neighbours.append(candidate)
        return neighbours


@dataclass(frozen=True)
class MazeState:
    """
    Immutable snapshot of a maze game.

    Attributes:
        maze: Cell grid
        player_position: Where the player stands
        start_position: Entry room
        end_position: Goal room
        phase: PLAYING, WON or LOST
        difficulty: Difficulty tier
        moves: Successful steps taken
        seconds_elapsed: Play time advanced by the clock
        trail: Positions visited by the player, in order
        terminal_reason: Why a lost game ended
    """
    maze: Grid[MazeCell]
    player_position: Position
    start_position: Position
    end_position: Position
    phase: GamePhase
    difficulty: Difficulty
    moves: int = 0
    seconds_elapsed: int = 0
    trail: tuple[Position, ...] = ()
    terminal_reason: str | None = None

    @property
    def size(self) -> int:
        return self.maze.width


class MazeEngine:
    """Engine for the maze game: generation plus movement adjudication."""

    def __init__(
        self,
        difficulty: Difficulty | str = Difficulty.EASY,
        *,
        config: MazeConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.difficulty = Difficulty(difficulty)
        self.config = config or MazeConfig.for_difficulty(self.difficulty)
        self._rng = rng or random.Random()
        self._score_record: ScoreRecord | None = None
        self._state = self._new_game(MazeGenerator(self.config.size, self._rng).generate())

    @classmethod
    def from_grid(
        cls,
        maze: Grid[MazeCell],
        *,
        difficulty: Difficulty | str = Difficulty.EASY,
        rng: random.Random | None = None,
    ) -> "MazeEngine":
        """Build an engine around an existing maze grid."""
        base = MazeConfig.for_difficulty(difficulty)
        engine = cls(
            difficulty,
            config=replace(base, size=maze.width),
            rng=rng,
        )
        engine._state = engine._new_game(maze)
        return engine

    # -- Observe ---------------------------------------------------------

    def get_state(self) -> MazeState:
        return self._state

    # -- Act -------------------------------------------------------------

    @staticmethod
    def can_move_to(
        maze: Grid[MazeCell],
        position: Position,
        direction: Direction | str,
    ) -> Position | None:
        """
        Destination of one step, or None when blocked.

        Args:
            maze: Cell grid
            position: Current position
            direction: Step direction

        Returns:
            The destination if it is in bounds and not a wall, else None
        """
        destination = position.step(validate_direction(direction))
        if not maze.in_bounds(destination) or maze.get(destination).is_wall:
            return None
        return destination

    def move(self, direction: Direction | str) -> ActionResult:
        """Step the player one cell; walls and the border block."""
        state = self._state
        if state.phase.is_terminal:
            return ActionResult.rejected("Game is over.")

        destination = self.can_move_to(state.maze, state.player_position, direction)
        if destination is None:
            return ActionResult.rejected("Blocked.")

        phase = state.phase
        if self.is_complete(destination, state.end_position):
            phase = GamePhase.WON
            logger.debug("Maze completed in %d moves, %ds", state.moves + 1, state.seconds_elapsed)

        self._state = replace(
            state,
            player_position=destination,
            moves=state.moves + 1,
            phase=phase,
            trail=state.trail + (destination,),
        )
        if phase is GamePhase.WON:
            return ActionResult(success=True, message="Goal reached!", points=self.calculate_score(
                self.config, state.seconds_elapsed
            ))
        return ActionResult(success=True, message=f"Moved to {destination}")

    def abandon(self) -> ActionResult:
        """Give up on the current maze."""
        state = self._state
        if state.phase.is_terminal:
            return ActionResult.rejected("Game is over.")
        self._state = replace(state, phase=GamePhase.LOST, terminal_reason="Abandoned")
        logger.debug("Maze abandoned after %d moves", state.moves)
        return ActionResult(success=True, message="Maze abandoned.")

    def tick(self, seconds: int = 1) -> None:
        """Advance play time while the maze is unsolved."""
        validate_seconds(seconds)
        if self._state.phase is GamePhase.PLAYING:
            self._state = replace(self._state, seconds_elapsed=self._state.seconds_elapsed + seconds)

    def restart(self) -> MazeState:
        """Carve a new maze at the same difficulty."""
        self._state = self._new_game(MazeGenerator(self.config.size, self._rng).generate())
        self._score_record = None
        return self._state

    # -- Conclude --------------------------------------------------------

    @staticmethod
    def is_complete(player_position: Position, end_position: Position) -> bool:
        """Exact coordinate equality."""
        return player_position == end_position

    @staticmethod
    def calculate_score(config: MazeConfig, seconds_elapsed: int) -> int:
        time_bonus = max(0, config.time_budget - seconds_elapsed)
        return (config.base_score + time_bonus) * config.multiplier

    def get_score(self) -> ScoreRecord | None:
        """Score record once the maze is solved or abandoned."""
        state = self._state
        if not state.phase.is_terminal:
            return None

        if self._score_record is None:
            won = state.phase is GamePhase.WON
            self._score_record = ScoreRecord(
                game=GameMode.MAZE,
                score=self.calculate_score(self.config, state.seconds_elapsed) if won else 0,
                moves=state.moves,
                time_elapsed_ms=state.seconds_elapsed * 1000,
                difficulty=state.difficulty.value,
                target_reached=state.size,
                terminal_reason=state.terminal_reason,
                details={"maze_size": state.size, "completed": won},
            )
        return self._score_record

    # -- Validation helpers ----------------------------------------------

    @staticmethod
    def reachable_from(maze: Grid[MazeCell], start: Position) -> frozenset[Position]:
        """Flood fill over open cells."""
        if maze.get(start).is_wall:
            return frozenset()

        seen = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for direction in Direction:
                neighbour = current.step(direction)
                if neighbour not in seen and maze.in_bounds(neighbour) and not maze.get(neighbour).is_wall:
                    seen.add(neighbour)
                    queue.append(neighbour)
        return frozenset(seen)

    def _new_game(self, maze: Grid[MazeCell]) -> MazeState:
        start = MazeGenerator.START
        end = Position(maze.width - 2, maze.height - 2)
        return MazeState(
            maze=maze,
            player_position=start,
            start_position=start,
            end_position=end,
            phase=GamePhase.PLAYING,
            difficulty=self.difficulty,
            trail=(start,),
        )

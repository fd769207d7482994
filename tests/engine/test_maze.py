"""
Tests for the maze generator and engine.
"""

import random

import pytest

from minigames.engine.base import Difficulty, Direction, GameMode, GamePhase, Grid, Position
from minigames.engine.maze import MazeCell, MazeConfig, MazeEngine, MazeGenerator


def open_cells(maze: Grid[MazeCell]) -> set[Position]:
    """All non-wall positions."""
    return {position for position, cell in maze.cells() if not cell.is_wall}


def count_open_edges(maze: Grid[MazeCell]) -> int:
    """Adjacent open-cell pairs, each counted once."""
    edges = 0
    for position in open_cells(maze):
        for direction in (Direction.RIGHT, Direction.DOWN):
            neighbour = position.step(direction)
            if maze.in_bounds(neighbour) and not maze.get(neighbour).is_wall:
                edges += 1
    return edges


def walk(engine: MazeEngine, path: list[str]) -> None:
    for direction in path:
        assert engine.move(direction).success


class TestMazeConfig:
    """Tests for difficulty configuration."""

    @pytest.mark.parametrize("difficulty,size,base,multiplier", [
        (Difficulty.EASY, 15, 100, 1),
        (Difficulty.MEDIUM, 25, 200, 2),
        (Difficulty.HARD, 35, 300, 3),
    ])
    def test_tiers(self, difficulty, size, base, multiplier):
        config = MazeConfig.for_difficulty(difficulty)
        assert (config.size, config.base_score, config.multiplier) == (size, base, multiplier)
        assert config.time_budget == 300

    def test_even_size_rejected(self):
        with pytest.raises(ValueError, match="odd"):
            MazeConfig(size=10, base_score=100, multiplier=1)


class TestMazeGenerator:
    """Tests for perfect-maze generation."""

    @pytest.mark.parametrize("size", [5, 7, 15, 25])
    def test_open_cells_form_a_tree(self, size, seeded_rng):
        maze = MazeGenerator(size, seeded_rng).generate()
        cells = open_cells(maze)
        # A connected graph with |V| - 1 edges has no cycles
        assert count_open_edges(maze) == len(cells) - 1
        assert MazeEngine.reachable_from(maze, Position(1, 1)) == cells

    def test_five_by_five_goal_reachable(self, seeded_rng):
        maze = MazeGenerator(5, seeded_rng).generate()
        reachable = MazeEngine.reachable_from(maze, Position(1, 1))
        assert Position(3, 3) in reachable
        assert reachable == open_cells(maze)

    @pytest.mark.parametrize("size", [5, 9, 15])
    def test_every_room_carved(self, size, seeded_rng):
        maze = MazeGenerator(size, seeded_rng).generate()
        for y in range(1, size, 2):
            for x in range(1, size, 2):
                cell = maze.get(Position(x, y))
                assert not cell.is_wall
                assert cell.is_visited
                assert cell.is_path

    def test_border_is_wall(self, seeded_rng):
        size = 11
        maze = MazeGenerator(size, seeded_rng).generate()
        for i in range(size):
            for position in (Position(i, 0), Position(i, size - 1), Position(0, i), Position(size - 1, i)):
                assert maze.get(position).is_wall

    def test_even_even_cells_stay_wall(self, seeded_rng):
        maze = MazeGenerator(9, seeded_rng).generate()
        for y in range(0, 9, 2):
            for x in range(0, 9, 2):
                assert maze.get(Position(x, y)).is_wall

    def test_same_seed_same_maze(self):
        first = MazeGenerator(15, random.Random(3)).generate()
        second = MazeGenerator(15, random.Random(3)).generate()
        assert first == second

    def test_different_seeds_differ(self):
        mazes = {MazeGenerator(15, random.Random(seed)).generate() for seed in range(5)}
        assert len(mazes) > 1

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            MazeGenerator(4)


class TestMovement:
    """Tests for movement adjudication."""

    def test_can_move_to_open_cell(self, corridor_maze):
        assert MazeEngine.can_move_to(corridor_maze, Position(1, 1), "right") == Position(2, 1)

    def test_can_move_to_wall(self, corridor_maze):
        assert MazeEngine.can_move_to(corridor_maze, Position(1, 1), "up") is None
        assert MazeEngine.can_move_to(corridor_maze, Position(1, 1), Direction.DOWN) is None

    def test_can_move_to_out_of_bounds(self):
        room = MazeCell(is_wall=False, is_path=True)
        open_grid = Grid.filled(5, 5, room)
        assert MazeEngine.can_move_to(open_grid, Position(0, 0), "left") is None

    def test_move_updates_position_and_trail(self, corridor_maze):
        engine = MazeEngine.from_grid(corridor_maze)

        result = engine.move("right")

        state = engine.get_state()
        assert result.success
        assert state.player_position == Position(2, 1)
        assert state.moves == 1
        assert state.trail == (Position(1, 1), Position(2, 1))

    def test_blocked_move_changes_nothing(self, corridor_maze):
        engine = MazeEngine.from_grid(corridor_maze)
        before = engine.get_state()

        result = engine.move("up")

        assert not result.success
        assert result.message == "Blocked."
        assert engine.get_state() is before

    def test_reaching_goal_wins(self, corridor_maze):
        engine = MazeEngine.from_grid(corridor_maze)

        walk(engine, ["right", "right", "down", "down"])

        state = engine.get_state()
        assert state.player_position == state.end_position == Position(3, 3)
        assert state.phase is GamePhase.WON

    def test_adjacent_to_goal_is_not_complete(self, corridor_maze):
        engine = MazeEngine.from_grid(corridor_maze)
        walk(engine, ["right", "right", "down"])
        assert engine.get_state().phase is GamePhase.PLAYING

    def test_no_moves_after_win(self, corridor_maze):
        engine = MazeEngine.from_grid(corridor_maze)
        walk(engine, ["right", "right", "down", "down"])
        assert not engine.move("left").success

    def test_is_complete_exact(self):
        assert MazeEngine.is_complete(Position(3, 3), Position(3, 3))
        assert not MazeEngine.is_complete(Position(3, 2), Position(3, 3))

    def test_generated_maze_solvable_by_search(self, seeded_rng):
        engine = MazeEngine(Difficulty.EASY, rng=seeded_rng)
        state = engine.get_state()

        # Breadth-first search for directions, then play them
        parents: dict[Position, tuple[Position, Direction] | None] = {state.start_position: None}
        frontier = [state.start_position]
        while frontier and state.end_position not in parents:
            nxt = []
            for position in frontier:
                for direction in Direction:
                    target = MazeEngine.can_move_to(state.maze, position, direction)
                    if target is not None and target not in parents:
                        parents[target] = (position, direction)
                        nxt.append(target)
            frontier = nxt

        path = []
        cursor = state.end_position
        while parents[cursor] is not None:
            previous, direction = parents[cursor]
            path.append(direction)
            cursor = previous

        for direction in reversed(path):
            assert engine.move(direction).success
        assert engine.get_state().phase is GamePhase.WON


class TestAbandon:
    def test_abandon_loses(self, corridor_maze):
        engine = MazeEngine.from_grid(corridor_maze)
        assert engine.abandon().success
        state = engine.get_state()
        assert state.phase is GamePhase.LOST
        assert state.terminal_reason == "Abandoned"
        assert not engine.move("right").success
        assert not engine.abandon().success


class TestScoring:
    """Tests for maze scoring."""

    @pytest.mark.parametrize("difficulty,seconds,expected", [
        (Difficulty.EASY, 0, 400),
        (Difficulty.EASY, 100, 300),
        (Difficulty.MEDIUM, 60, (200 + 240) * 2),
        (Difficulty.HARD, 500, 300 * 3),
    ])
    def test_calculate_score(self, difficulty, seconds, expected):
        config = MazeConfig.for_difficulty(difficulty)
        assert MazeEngine.calculate_score(config, seconds) == expected

    def test_no_record_while_playing(self, corridor_maze):
        assert MazeEngine.from_grid(corridor_maze).get_score() is None

    def test_record_after_win(self, corridor_maze):
        engine = MazeEngine.from_grid(corridor_maze, difficulty=Difficulty.MEDIUM)
        engine.tick(40)
        walk(engine, ["right", "right", "down", "down"])

        record = engine.get_score()

        assert record.game is GameMode.MAZE
        assert record.score == (200 + 260) * 2
        assert record.moves == 4
        assert record.time_elapsed_ms == 40_000
        assert record.difficulty == "medium"
        assert record.details["maze_size"] == 5
        assert record is engine.get_score()

    def test_clock_stops_after_win(self, corridor_maze):
        engine = MazeEngine.from_grid(corridor_maze)
        walk(engine, ["right", "right", "down", "down"])
        engine.tick(100)
        assert engine.get_state().seconds_elapsed == 0

    def test_abandoned_scores_zero(self, corridor_maze):
        engine = MazeEngine.from_grid(corridor_maze)
        engine.abandon()
        record = engine.get_score()
        assert record.score == 0
        assert record.terminal_reason == "Abandoned"


class TestRestart:
    def test_restart_new_maze(self):
        engine = MazeEngine(Difficulty.EASY, rng=random.Random(9))
        first = engine.get_state().maze
        engine.move("right")

        state = engine.restart()

        assert state.player_position == Position(1, 1)
        assert state.moves == 0
        assert state.phase is GamePhase.PLAYING
        assert state.maze.width == 15
        assert state.maze != first

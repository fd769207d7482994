"""
Minigame Engines - Test Configuration and Fixtures

Common fixtures and test data for all test modules.
"""

import random

import pytest

from minigames.engine.base import Grid
from minigames.engine.maze import MazeCell


# =============================================================================
# RANDOMNESS
# =============================================================================

@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so draws are reproducible."""
    return random.Random(2048)


@pytest.fixture(params=[0, 1, 7, 42, 1234])
def seeded_rng(request) -> random.Random:
    """Several seeds for property-style checks."""
    return random.Random(request.param)


# =============================================================================
# SLIDING-MERGE BOARDS
# =============================================================================

@pytest.fixture
def locked_board() -> list[list[int]]:
    """Full 4x4 board with no equal neighbours."""
    return [
        [2, 4, 2, 4],
        [4, 2, 4, 2],
        [2, 4, 2, 4],
        [4, 2, 4, 2],
    ]


@pytest.fixture
def sliding_cases() -> dict[str, tuple[list[int], list[int], int]]:
    """
    Single-row left slides with expected result.

    Returns:
        Dict mapping name to (row, expected_row, merge_points)
    """
    return {
        "pair": ([2, 2, 0, 0], [4, 0, 0, 0], 4),
        "gap_pair": ([2, 0, 2, 0], [4, 0, 0, 0], 4),
        "two_pairs": ([2, 2, 2, 2], [4, 4, 0, 0], 8),
        "triple": ([2, 2, 2, 0], [4, 2, 0, 0], 4),
        "no_double_merge": ([4, 2, 2, 0], [4, 4, 0, 0], 4),
        "slide_only": ([0, 0, 0, 8], [8, 0, 0, 0], 0),
        "mixed": ([8, 8, 4, 4], [16, 8, 0, 0], 24),
    }


# =============================================================================
# MAZE HELPERS
# =============================================================================

@pytest.fixture
def corridor_maze() -> Grid[MazeCell]:
    """
    Hand-built 5x5 maze: start (1,1) -> (3,1) -> (3,3) goal.

        #####
        #...#
        ###.#
        #...#
        #####
    """
    wall = MazeCell()
    room = MazeCell(is_wall=False, is_visited=True, is_path=True)
    layout = [
        "#####",
        "#...#",
        "###.#",
        "#...#",
        "#####",
    ]
    return Grid.from_rows([[wall if char == "#" else room for char in row] for row in layout])

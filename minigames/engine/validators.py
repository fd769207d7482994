"""
Minigame Engines - Input Validation Utilities

Provides validation functions for game engine inputs. All validators
either return validated data or raise descriptive ValueError exceptions.
Invalid input here is a caller bug; expected gameplay rejections are
returned as ActionResult instead.
"""

import string
from typing import Sequence

from minigames.engine.base import Direction


def validate_direction(direction: Direction | str) -> Direction:
    """
    Validate a move direction.

    Args:
        direction: A Direction or its case-insensitive name

    Returns:
        The Direction member

    Raises:
        ValueError: If the direction is unknown
    """
    return Direction.parse(direction)


def validate_letter(letter: str) -> str:
    """
    Validate and normalize a single guessed letter.

    Args:
        letter: Letter to validate

    Returns:
        The upper-cased letter

    Raises:
        ValueError: If the input is not exactly one ASCII letter
    """
    if not isinstance(letter, str):
        raise ValueError(f"Letter must be a string, got {type(letter).__name__}.")

    normalized = letter.strip().upper()
    if len(normalized) != 1 or normalized not in string.ascii_uppercase:
        raise ValueError(f"Guess must be a single letter A-Z, got {letter!r}.")

    return normalized


def validate_word(word: str) -> str:
    """
    Validate and normalize a secret word.

    Raises:
        ValueError: If the word is empty or contains non-letters
    """
    if not isinstance(word, str):
        raise ValueError(f"Word must be a string, got {type(word).__name__}.")

    normalized = word.strip().upper()
    if not normalized:
        raise ValueError("Word cannot be empty.")
    for i, char in enumerate(normalized):
        if char not in string.ascii_uppercase:
            raise ValueError(f"Word character at index {i} is {char!r}, must be a letter A-Z.")

    return normalized


def validate_board_size(size: int, min_size: int = 2) -> int:
    """
    Validate a square board dimension.

    Raises:
        ValueError: If size is not an integer >= min_size
    """
    if not isinstance(size, int) or isinstance(size, bool):
        raise ValueError(f"Board size must be an integer, got {type(size).__name__}.")

    if size < min_size:
        raise ValueError(f"Board size must be at least {min_size}, got {size}.")

    return size


def validate_maze_size(size: int) -> int:
    """
    Validate a maze dimension.

    Rooms sit on odd coordinates, so the size must be odd for the border
    to stay walled and for the goal corner to be a room.

    Raises:
        ValueError: If size is not an odd integer >= 5
    """
    validate_board_size(size, min_size=5)

    if size % 2 == 0:
        raise ValueError(f"Maze size must be odd, got {size}.")

    return size


def validate_tile_values(rows: Sequence[Sequence[int]]) -> tuple[tuple[int, ...], ...]:
    """
    Validate a literal sliding-merge board.

    Args:
        rows: Square matrix of tile values, 0 for empty cells

    Returns:
        Validated rows as nested tuples

    Raises:
        ValueError: If the board is not square or holds a non power of two
    """
    size = len(rows)
    validate_board_size(size)

    validated = []
    for y, row in enumerate(rows):
        if len(row) != size:
            raise ValueError(f"Board must be square: row {y} has {len(row)} cells, expected {size}.")
        for x, value in enumerate(row):
            if not isinstance(value, int):
                raise ValueError(f"Tile at ({x}, {y}) must be an integer, got {type(value).__name__}.")
            if value != 0 and (value < 2 or value & (value - 1)):
                raise ValueError(f"Tile at ({x}, {y}) is {value}, must be 0 or a power of two >= 2.")
        validated.append(tuple(row))

    return tuple(validated)


def validate_pair_grid(rows: int, cols: int, symbol_count: int) -> int:
    """
    Validate match-pair grid dimensions.

    Args:
        rows: Grid rows
        cols: Grid columns
        symbol_count: Size of the symbol alphabet

    Returns:
        Number of pairs on the board

    Raises:
        ValueError: If the card count is odd or exceeds the alphabet
    """
    if rows < 1 or cols < 1:
        raise ValueError(f"Grid must be at least 1x1, got {rows}x{cols}.")

    total_cards = rows * cols
    if total_cards % 2:
        raise ValueError(f"Grid {rows}x{cols} has an odd number of cards ({total_cards}).")

    total_pairs = total_cards // 2
    if total_pairs > symbol_count:
        raise ValueError(
            f"Grid {rows}x{cols} needs {total_pairs} symbols, only {symbol_count} available."
        )

    return total_pairs


def validate_seconds(seconds: int) -> int:
    """
    Validate a clock tick.

    Raises:
        ValueError: If seconds is not a non-negative integer
    """
    if not isinstance(seconds, int) or isinstance(seconds, bool):
        raise ValueError(f"Seconds must be an integer, got {type(seconds).__name__}.")

    if seconds < 0:
        raise ValueError(f"Seconds cannot be negative, got {seconds}.")

    return seconds

"""
Minigame Engines - Match Pair Engine (Memory Mode)

Cards are dealt face down in a grid; each symbol appears exactly twice.
The player flips two cards per move and keeps matching pairs.

Game Rules:
- A third flip turns an unmatched face-up pair back down first
- Every completed pair of flips is one move
- A mismatch counts as a wrong move
- Win: all pairs matched
- Elimination: too many moves, too many wrong moves, or time up
  (first cause wins; a winning move is never an eliminating move)
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import ClassVar

from minigames.engine.base import (
    ActionResult,
    Difficulty,
    GameMode,
    GamePhase,
    Position,
    ScoreRecord,
)
from minigames.engine.validators import validate_pair_grid, validate_seconds

logger = logging.getLogger(__name__)


SYMBOLS: tuple[str, ...] = (
    "🐶", "🐱", "🐭", "🐹", "🐰", "🦊", "🐻", "🐼",
    "🐨", "🐯", "🦁", "🐸", "🐵", "🐧", "🐺", "🦉",
    "🐝", "🦋", "🐞", "🐛", "🦗", "🕷️", "🦂", "🐢",
    "🐍", "🦎", "🐙", "🦑", "🦐", "🦀", "🐠", "🐟",
    "🐡", "🐬", "🐳", "🐋", "🦈", "🐊", "🦏", "🦛",
)

MAX_MOVES_REASON = "Maximum moves exceeded"
WRONG_MOVES_REASON = "Too many wrong moves"
TIME_LIMIT_REASON = "Time limit exceeded"


@dataclass(frozen=True)
class Card:
    """
    A single card.

    Attributes:
        id: Index in deal order (row-major)
        symbol: Face symbol, shared with exactly one other card
        is_flipped: Face up
        is_matched: Removed from play as part of a pair
        position: Grid cell (x = column, y = row)
    """
    id: int
    symbol: str
    position: Position
    is_flipped: bool = False
    is_matched: bool = False


@dataclass(frozen=True)
class MatchPairConfig:
    """
    Limits for a difficulty tier.

    Attributes:
        rows: Grid rows
        cols: Grid columns
        max_moves: Moves allowed before elimination
        time_limit: Seconds allowed before elimination
        max_wrong_moves: Wrong moves allowed before elimination
    """
    rows: int
    cols: int
    max_moves: int
    time_limit: int
    max_wrong_moves: int

    def __post_init__(self) -> None:
        """Validate configuration."""
        validate_pair_grid(self.rows, self.cols, len(SYMBOLS))

    @property
    def total_pairs(self) -> int:
        return self.rows * self.cols // 2

    @classmethod
    def for_difficulty(cls, difficulty: Difficulty | str) -> "MatchPairConfig":
        return DIFFICULTY_CONFIGS[Difficulty(difficulty)]


DIFFICULTY_CONFIGS: dict[Difficulty, MatchPairConfig] = {
    Difficulty.EASY: MatchPairConfig(rows=2, cols=3, max_moves=20, time_limit=60, max_wrong_moves=5),
    Difficulty.MEDIUM: MatchPairConfig(rows=4, cols=4, max_moves=35, time_limit=120, max_wrong_moves=8),
    Difficulty.HARD: MatchPairConfig(rows=6, cols=6, max_moves=60, time_limit=180, max_wrong_moves=12),
}


@dataclass(frozen=True)
class MatchPairState:
    """
    Immutable snapshot of a match-pair game.

    Attributes:
        cards: All cards in deal order
        flipped_ids: Face-up unmatched cards, in flip order (0-2)
        matched_pairs: Pairs found so far
        total_pairs: Pairs on the board
        moves: Completed two-card comparisons
        wrong_moves: Mismatched comparisons
        seconds_elapsed: Play time advanced by the clock
        phase: PLAYING, WON or ELIMINATED
        elimination_reason: First elimination cause, if eliminated
        rows: Grid rows
        cols: Grid columns
    """
    cards: tuple[Card, ...]
    flipped_ids: tuple[int, ...]
    matched_pairs: int
    total_pairs: int
    moves: int
    wrong_moves: int
    seconds_elapsed: int
    phase: GamePhase
    rows: int
    cols: int
    elimination_reason: str | None = None

    @property
    def is_game_over(self) -> bool:
        return self.phase.is_terminal

    @property
    def is_won(self) -> bool:
        return self.phase is GamePhase.WON

    @property
    def is_eliminated(self) -> bool:
        return self.phase is GamePhase.ELIMINATED

    @property
    def flipped_cards(self) -> tuple[Card, ...]:
        return tuple(self.cards[card_id] for card_id in self.flipped_ids)


class MatchPairEngine:
    """Engine for the pair-matching memory game."""

    PAIR_POINTS: ClassVar[int] = 100
    SECOND_POINTS: ClassVar[int] = 5
    UNUSED_WRONG_MOVE_POINTS: ClassVar[int] = 20

    def __init__(
        self,
        difficulty: Difficulty | str = Difficulty.EASY,
        *,
        config: MatchPairConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.difficulty = Difficulty(difficulty)
        self.config = config or MatchPairConfig.for_difficulty(self.difficulty)
        self._rng = rng or random.Random()
        self._score_record: ScoreRecord | None = None
        self._state = self._new_game()

    # -- Observe ---------------------------------------------------------

    def get_state(self) -> MatchPairState:
        return self._state

    def get_difficulty_info(self) -> dict:
        return {"difficulty": self.difficulty.value, "config": self.config}

    # -- Act -------------------------------------------------------------

    def flip(self, card_id: int) -> ActionResult:
        """
        Flip a card face up and resolve the pair when two are up.

        Args:
            card_id: Card to flip

        Returns:
            ActionResult; success is False for game over, unknown cards,
            and cards already face up or matched
        """
        state = self._state
        if state.phase.is_terminal:
            return ActionResult.rejected("Game is over.")
        if not 0 <= card_id < len(state.cards):
            return ActionResult.rejected(f"Unknown card {card_id}.")

        card = state.cards[card_id]
        if card.is_flipped or card.is_matched:
            return ActionResult.rejected("Card is already face up.")

        cards = list(state.cards)
        flipped_ids = list(state.flipped_ids)

        if len(flipped_ids) == 2:
            for flipped_id in flipped_ids:
                if not cards[flipped_id].is_matched:
                    cards[flipped_id] = replace(cards[flipped_id], is_flipped=False)
            flipped_ids = []

        cards[card_id] = replace(card, is_flipped=True)
        flipped_ids.append(card_id)

        if len(flipped_ids) < 2:
            self._state = replace(state, cards=tuple(cards), flipped_ids=tuple(flipped_ids))
            return ActionResult(success=True, message="Card flipped")

        moves = state.moves + 1
        first, second = (cards[i] for i in flipped_ids)
        matched_pairs = state.matched_pairs
        wrong_moves = state.wrong_moves
        points = 0

        if first.symbol == second.symbol:
            cards[first.id] = replace(first, is_matched=True)
            cards[second.id] = replace(second, is_matched=True)
            matched_pairs += 1
            flipped_ids = []
            points = self.PAIR_POINTS
            message = "Match!"
        else:
            wrong_moves += 1
            message = "No match"

        new_state = replace(
            state,
            cards=tuple(cards),
            flipped_ids=tuple(flipped_ids),
            moves=moves,
            matched_pairs=matched_pairs,
            wrong_moves=wrong_moves,
        )

        # Win is checked first so the final match can never eliminate.
        if matched_pairs == state.total_pairs:
            new_state = replace(new_state, phase=GamePhase.WON)
            logger.debug("Match-pair won in %d moves", moves)
            message = "All pairs found!"
        else:
            reason = self._elimination_reason(new_state)
            if reason is not None:
                new_state = self._eliminate(new_state, reason)
                message = reason

        self._state = new_state
        self._score_record = None
        return ActionResult(success=True, message=message, points=points, is_correct=points > 0)

    def tick(self, seconds: int = 1) -> None:
        """Advance play time; running out of time eliminates."""
        validate_seconds(seconds)
        state = self._state
        if state.phase.is_terminal:
            return

        elapsed = state.seconds_elapsed + seconds
        new_state = replace(state, seconds_elapsed=elapsed)
        if elapsed >= self.config.time_limit:
            new_state = self._eliminate(new_state, TIME_LIMIT_REASON)
        self._state = new_state

    def restart(self) -> MatchPairState:
        """Deal a new board at the same difficulty."""
        self._state = self._new_game()
        self._score_record = None
        return self._state

    # -- Conclude --------------------------------------------------------

    def calculate_score(self, state: MatchPairState) -> int:
        """
        Points for a game state.

        Each matched pair is worth PAIR_POINTS. A win also pays for unused
        seconds and unused wrong-move allowance.
        """
        score = state.matched_pairs * self.PAIR_POINTS
        if state.is_won:
            remaining_seconds = max(0, self.config.time_limit - state.seconds_elapsed)
            unused_wrong_moves = max(0, self.config.max_wrong_moves - state.wrong_moves)
            score += remaining_seconds * self.SECOND_POINTS
            score += unused_wrong_moves * self.UNUSED_WRONG_MOVE_POINTS
        return score

    def get_score(self) -> ScoreRecord | None:
        """Score record once the game is won or eliminated."""
        state = self._state
        if not state.phase.is_terminal:
            return None

        if self._score_record is None:
            self._score_record = ScoreRecord(
                game=GameMode.MATCH_PAIR,
                score=self.calculate_score(state),
                moves=state.moves,
                time_elapsed_ms=state.seconds_elapsed * 1000,
                difficulty=self.difficulty.value,
                target_reached=state.matched_pairs,
                terminal_reason=state.elimination_reason,
                details={
                    "is_won": state.is_won,
                    "wrong_moves": state.wrong_moves,
                    "total_pairs": state.total_pairs,
                    "grid": f"{state.rows}x{state.cols}",
                },
            )
        return self._score_record

    # -- Helpers -----------------------------------------------------------

    def _elimination_reason(self, state: MatchPairState) -> str | None:
        if state.moves > self.config.max_moves:
            return MAX_MOVES_REASON
        if state.wrong_moves > self.config.max_wrong_moves:
            return WRONG_MOVES_REASON
        return None

    @staticmethod
    def _eliminate(state: MatchPairState, reason: str) -> MatchPairState:
        logger.debug("Match-pair eliminated: %s", reason)
        return replace(state, phase=GamePhase.ELIMINATED, elimination_reason=reason)

    def _new_game(self) -> MatchPairState:
        rows, cols = self.config.rows, self.config.cols
        total_pairs = self.config.total_pairs

        chosen = self._rng.sample(SYMBOLS, total_pairs)
        deck = chosen * 2
        self._rng.shuffle(deck)

        cards = tuple(
            Card(id=index, symbol=symbol, position=Position(index % cols, index // cols))
            for index, symbol in enumerate(deck)
        )
        return MatchPairState(
            cards=cards,
            flipped_ids=(),
            matched_pairs=0,
            total_pairs=total_pairs,
            moves=0,
            wrong_moves=0,
            seconds_elapsed=0,
            phase=GamePhase.PLAYING,
            rows=rows,
            cols=cols,
        )

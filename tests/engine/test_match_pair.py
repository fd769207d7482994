"""
Tests for the match-pair (memory) engine.
"""

import random
from collections import Counter, defaultdict

import pytest

from minigames.engine.base import Difficulty, GameMode, GamePhase, Position
from minigames.engine.match_pair import (
    MAX_MOVES_REASON,
    SYMBOLS,
    TIME_LIMIT_REASON,
    WRONG_MOVES_REASON,
    MatchPairConfig,
    MatchPairEngine,
)


def pairs_by_symbol(engine: MatchPairEngine) -> list[tuple[int, int]]:
    """Card id pairs sharing a symbol, in deal order of the first card."""
    ids = defaultdict(list)
    for card in engine.get_state().cards:
        ids[card.symbol].append(card.id)
    return [tuple(pair) for pair in ids.values()]


def mismatches(engine: MatchPairEngine) -> tuple[tuple[int, int], tuple[int, int]]:
    """Two disjoint card pairs whose symbols differ."""
    (a1, a2), (b1, b2) = pairs_by_symbol(engine)[:2]
    return (a1, b1), (a2, b2)


def play(engine: MatchPairEngine, *card_ids: int) -> None:
    for card_id in card_ids:
        assert engine.flip(card_id).success


class TestMatchPairConfig:
    """Tests for difficulty configuration."""

    @pytest.mark.parametrize("difficulty,rows,cols,moves,time_limit,wrong", [
        (Difficulty.EASY, 2, 3, 20, 60, 5),
        (Difficulty.MEDIUM, 4, 4, 35, 120, 8),
        (Difficulty.HARD, 6, 6, 60, 180, 12),
    ])
    def test_tiers(self, difficulty, rows, cols, moves, time_limit, wrong):
        config = MatchPairConfig.for_difficulty(difficulty)
        assert (config.rows, config.cols) == (rows, cols)
        assert (config.max_moves, config.time_limit, config.max_wrong_moves) == (moves, time_limit, wrong)
        assert config.total_pairs == rows * cols // 2

    def test_odd_grid_rejected(self):
        with pytest.raises(ValueError, match="odd number"):
            MatchPairConfig(rows=3, cols=3, max_moves=10, time_limit=60, max_wrong_moves=5)


class TestDeal:
    """Tests for the initial deal."""

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_each_symbol_twice(self, difficulty, seeded_rng):
        engine = MatchPairEngine(difficulty, rng=seeded_rng)
        counts = Counter(card.symbol for card in engine.get_state().cards)
        assert set(counts.values()) == {2}
        assert len(counts) == engine.config.total_pairs
        assert set(counts) <= set(SYMBOLS)

    def test_row_major_positions(self, rng):
        engine = MatchPairEngine(Difficulty.EASY, rng=rng)
        cards = engine.get_state().cards
        assert [card.id for card in cards] == list(range(6))
        assert cards[0].position == Position(0, 0)
        assert cards[2].position == Position(2, 0)
        assert cards[3].position == Position(0, 1)

    def test_all_face_down(self, rng):
        state = MatchPairEngine(rng=rng).get_state()
        assert not any(card.is_flipped or card.is_matched for card in state.cards)
        assert state.phase is GamePhase.PLAYING
        assert state.flipped_ids == ()

    def test_same_seed_same_deal(self):
        first = MatchPairEngine(Difficulty.MEDIUM, rng=random.Random(5)).get_state().cards
        second = MatchPairEngine(Difficulty.MEDIUM, rng=random.Random(5)).get_state().cards
        assert first == second


class TestFlipping:
    """Tests for flip rules."""

    def test_single_flip(self, rng):
        engine = MatchPairEngine(rng=rng)

        result = engine.flip(0)

        state = engine.get_state()
        assert result.success
        assert state.cards[0].is_flipped
        assert state.flipped_ids == (0,)
        assert state.moves == 0

    def test_flip_same_card_twice_rejected(self, rng):
        engine = MatchPairEngine(rng=rng)
        engine.flip(0)

        result = engine.flip(0)

        assert not result.success
        assert engine.get_state().moves == 0

    @pytest.mark.parametrize("card_id", [-1, 6, 100])
    def test_unknown_card_rejected(self, card_id, rng):
        engine = MatchPairEngine(rng=rng)
        result = engine.flip(card_id)
        assert not result.success
        assert "Unknown card" in result.message

    def test_match(self, rng):
        engine = MatchPairEngine(rng=rng)
        first, second = pairs_by_symbol(engine)[0]

        engine.flip(first)
        result = engine.flip(second)

        state = engine.get_state()
        assert result.is_correct
        assert result.points == 100
        assert state.matched_pairs == 1
        assert state.moves == 1
        assert state.wrong_moves == 0
        assert state.cards[first].is_matched and state.cards[second].is_matched
        assert state.flipped_ids == ()

    def test_matched_card_cannot_be_flipped(self, rng):
        engine = MatchPairEngine(rng=rng)
        first, second = pairs_by_symbol(engine)[0]
        play(engine, first, second)
        assert not engine.flip(first).success

    def test_mismatch_stays_up_until_next_flip(self, rng):
        engine = MatchPairEngine(rng=rng)
        (a, b), (c, _) = mismatches(engine)

        result = engine.flip(a)
        result = engine.flip(b)

        state = engine.get_state()
        assert not result.is_correct
        assert state.wrong_moves == 1
        assert state.flipped_ids == (a, b)
        assert state.cards[a].is_flipped and state.cards[b].is_flipped

        engine.flip(c)

        state = engine.get_state()
        assert not state.cards[a].is_flipped
        assert not state.cards[b].is_flipped
        assert state.flipped_ids == (c,)

    def test_face_up_count_bounded(self, seeded_rng):
        engine = MatchPairEngine(Difficulty.MEDIUM, rng=seeded_rng)
        for card_id in range(16):
            engine.flip(card_id)
            state = engine.get_state()
            face_up = [c for c in state.cards if c.is_flipped and not c.is_matched]
            assert len(face_up) <= 2
            assert len(state.flipped_ids) <= 2


class TestWinning:
    """Tests for the win condition."""

    def test_easy_perfect_game(self, rng):
        engine = MatchPairEngine(Difficulty.EASY, rng=rng)
        for first, second in pairs_by_symbol(engine):
            play(engine, first, second)

        state = engine.get_state()
        assert state.is_won
        assert state.matched_pairs == 3
        assert state.moves == 3
        assert state.elimination_reason is None

    def test_wrong_move_over_zero_allowance_eliminates(self, rng):
        config = MatchPairConfig(rows=2, cols=2, max_moves=1, time_limit=60, max_wrong_moves=0)
        engine = MatchPairEngine(config=config, rng=rng)
        (a, b), _ = mismatches(engine)

        play(engine, a, b)
        assert engine.get_state().is_eliminated

    def test_final_match_at_move_limit_wins(self, rng):
        config = MatchPairConfig(rows=2, cols=2, max_moves=1, time_limit=60, max_wrong_moves=0)
        engine = MatchPairEngine(config=config, rng=rng)
        (a1, a2), (b1, b2) = pairs_by_symbol(engine)

        play(engine, a1, a2, b1, b2)

        state = engine.get_state()
        assert state.moves == 2
        assert state.is_won
        assert not state.is_eliminated


class TestElimination:
    """Tests for elimination causes."""

    def test_too_many_wrong_moves(self, rng):
        engine = MatchPairEngine(Difficulty.EASY, rng=rng)
        first, second = mismatches(engine)

        for i in range(5):
            play(engine, *(first if i % 2 == 0 else second))
        assert engine.get_state().phase is GamePhase.PLAYING
        assert engine.get_state().wrong_moves == 5

        play(engine, *second)

        state = engine.get_state()
        assert state.phase is GamePhase.ELIMINATED
        assert state.elimination_reason == WRONG_MOVES_REASON

    def test_too_many_moves(self, rng):
        config = MatchPairConfig(rows=2, cols=3, max_moves=2, time_limit=60, max_wrong_moves=10)
        engine = MatchPairEngine(config=config, rng=rng)
        first, second = mismatches(engine)

        play(engine, *first)
        play(engine, *second)
        assert not engine.get_state().is_eliminated
        play(engine, *first)

        state = engine.get_state()
        assert state.is_eliminated
        assert state.elimination_reason == MAX_MOVES_REASON

    def test_time_limit(self, rng):
        engine = MatchPairEngine(Difficulty.EASY, rng=rng)
        engine.tick(59)
        assert engine.get_state().phase is GamePhase.PLAYING

        engine.tick(1)

        state = engine.get_state()
        assert state.is_eliminated
        assert state.elimination_reason == TIME_LIMIT_REASON

    def test_terminal_state_is_sticky(self, rng):
        engine = MatchPairEngine(Difficulty.EASY, rng=rng)
        engine.tick(60)
        before = engine.get_state()

        assert not engine.flip(0).success
        engine.tick(10)

        assert engine.get_state() is before

    def test_negative_tick_rejected(self, rng):
        with pytest.raises(ValueError):
            MatchPairEngine(rng=rng).tick(-1)


class TestScoring:
    """Tests for score records."""

    def test_no_record_while_playing(self, rng):
        assert MatchPairEngine(rng=rng).get_score() is None

    def test_won_record(self, rng):
        engine = MatchPairEngine(Difficulty.EASY, rng=rng)
        engine.tick(20)
        (a, b), _ = mismatches(engine)
        play(engine, a, b)
        for first, second in reversed(pairs_by_symbol(engine)):
            play(engine, first, second)

        record = engine.get_score()

        assert record.game is GameMode.MATCH_PAIR
        # 3 pairs, 40 seconds left, 4 unused wrong moves
        assert record.score == 300 + 40 * 5 + 4 * 20
        assert record.moves == 4
        assert record.target_reached == 3
        assert record.details["wrong_moves"] == 1
        assert record.details["is_won"] is True
        assert record is engine.get_score()

    def test_eliminated_record_counts_pairs_only(self, rng):
        engine = MatchPairEngine(Difficulty.EASY, rng=rng)
        first, second = pairs_by_symbol(engine)[0]
        play(engine, first, second)
        engine.tick(60)

        record = engine.get_score()

        assert record.score == 100
        assert record.terminal_reason == TIME_LIMIT_REASON
        assert record.time_elapsed_ms == 60_000


class TestRestart:
    def test_restart_resets(self, rng):
        engine = MatchPairEngine(Difficulty.MEDIUM, rng=rng)
        engine.flip(0)
        engine.tick(200)

        state = engine.restart()

        assert state.phase is GamePhase.PLAYING
        assert state.seconds_elapsed == 0
        assert state.moves == 0
        assert len(state.cards) == 16
        assert engine.get_score() is None

    def test_difficulty_info(self, rng):
        info = MatchPairEngine(Difficulty.HARD, rng=rng).get_difficulty_info()
        assert info["difficulty"] == "hard"
        assert info["config"].total_pairs == 18

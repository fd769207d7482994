"""
Minigame Engines - Word Guess Engine (Hangman Mode)

Classic letter-by-letter word guessing, augmented with a points economy.

Game Rules:
- Each correct letter reveals every occurrence and scores its letter value
- Each wrong letter uses one of the tier's wrong-guess allowance
- Completing the word wins; running out of guesses or time loses
- Points buy power-ups: reveal a letter, an extra life, a time freeze,
  double points, all vowels, or a category hint

Scoring:
- Letter values follow English letter frequency (rare letters pay more)
- Double points multiplies letter rewards while its window is open
- A win adds max(0, 500 - seconds x 10) plus 100 per streak win
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
    ScoreRecord,
)
from minigames.engine.validators import validate_letter, validate_seconds, validate_word

logger = logging.getLogger(__name__)


MASK = "_"
VOWELS = ("A", "E", "I", "O", "U")
TIME_LIMIT_REASON = "Time limit exceeded"
OUT_OF_GUESSES_REASON = "Out of guesses"


@dataclass(frozen=True)
class WordCategory:
    """A themed word list per difficulty with matching hints."""
    name: str
    words: dict[Difficulty, tuple[str, ...]]
    hints: dict[Difficulty, str]


WORD_CATEGORIES: dict[str, WordCategory] = {
    "animals": WordCategory(
        name="animals",
        words={
            Difficulty.EASY: ("CAT", "DOG", "PIG", "COW", "BEE", "ANT", "BAT", "FOX", "OWL", "RAM"),
            Difficulty.MEDIUM: ("TIGER", "HORSE", "SHEEP", "MOUSE", "SNAKE", "WHALE", "EAGLE", "ZEBRA", "PANDA", "KOALA"),
            Difficulty.HARD: ("ELEPHANT", "GIRAFFE", "RHINOCEROS", "PENGUIN", "BUTTERFLY", "CROCODILE", "KANGAROO", "HIPPOPOTAMUS"),
        },
        hints={
            Difficulty.EASY: "Small and common animals you might see every day",
            Difficulty.MEDIUM: "Wild animals from around the world",
            Difficulty.HARD: "Exotic animals with unique characteristics",
        },
    ),
    "technology": WordCategory(
        name="technology",
        words={
            Difficulty.EASY: ("PHONE", "MOUSE", "WIFI", "CODE", "DATA", "CHIP", "BYTE"),
            Difficulty.MEDIUM: ("LAPTOP", "ROUTER", "CODING", "SERVER", "BROWSER", "PYTHON", "GAMING"),
            Difficulty.HARD: ("ALGORITHM", "DATABASE", "PROGRAMMING", "CYBERSECURITY", "ARTIFICIAL", "BLOCKCHAIN"),
        },
        hints={
            Difficulty.EASY: "Basic tech items you use daily",
            Difficulty.MEDIUM: "Computer and internet related terms",
            Difficulty.HARD: "Advanced technology and programming concepts",
        },
    ),
    "nature": WordCategory(
        name="nature",
        words={
            Difficulty.EASY: ("TREE", "LEAF", "ROCK", "SAND", "RAIN", "SNOW", "WIND"),
            Difficulty.MEDIUM: ("FOREST", "RIVER", "MOUNTAIN", "DESERT", "OCEAN", "VALLEY", "CANYON"),
            Difficulty.HARD: ("ECOSYSTEM", "BIODIVERSITY", "PHOTOSYNTHESIS", "ATMOSPHERE", "GEOLOGICAL"),
        },
        hints={
            Difficulty.EASY: "Natural elements around us",
            Difficulty.MEDIUM: "Landscapes and natural formations",
            Difficulty.HARD: "Scientific terms about nature",
        },
    ),
    "space": WordCategory(
        name="space",
        words={
            Difficulty.EASY: ("SUN", "MOON", "STAR", "MARS", "EARTH", "COMET"),
            Difficulty.MEDIUM: ("PLANET", "GALAXY", "ROCKET", "SATURN", "JUPITER", "NEBULA"),
            Difficulty.HARD: ("CONSTELLATION", "SUPERNOVA", "TELESCOPE", "ASTRONAUT", "SPACECRAFT"),
        },
        hints={
            Difficulty.EASY: "Basic celestial bodies",
            Difficulty.MEDIUM: "Solar system objects",
            Difficulty.HARD: "Advanced astronomy terms",
        },
    ),
    "sports": WordCategory(
        name="sports",
        words={
            Difficulty.EASY: ("BALL", "GOAL", "TEAM", "GAME", "WIN", "PLAY", "RUN"),
            Difficulty.MEDIUM: ("SOCCER", "TENNIS", "BOXING", "HOCKEY", "RUGBY", "GOLF", "RACING"),
            Difficulty.HARD: ("BASKETBALL", "VOLLEYBALL", "BADMINTON", "SWIMMING", "ATHLETICS", "GYMNASTICS"),
        },
        hints={
            Difficulty.EASY: "Basic sports terms",
            Difficulty.MEDIUM: "Popular sports around the world",
            Difficulty.HARD: "Olympic and competitive sports",
        },
    ),
    "food": WordCategory(
        name="food",
        words={
            Difficulty.EASY: ("BREAD", "MILK", "EGG", "RICE", "MEAT", "FISH", "CAKE"),
            Difficulty.MEDIUM: ("PIZZA", "BURGER", "PASTA", "SALAD", "CHEESE", "CHICKEN", "BANANA"),
            Difficulty.HARD: ("SPAGHETTI", "SANDWICH", "CHOCOLATE", "STRAWBERRY", "PINEAPPLE", "RESTAURANT"),
        },
        hints={
            Difficulty.EASY: "Basic food items",
            Difficulty.MEDIUM: "Popular dishes and ingredients",
            Difficulty.HARD: "Complex foods and dining",
        },
    ),
}


# Common letters are worth less than rare ones.
LETTER_VALUES: dict[str, int] = {
    **dict.fromkeys("ETAOINSHR", 10),
    **dict.fromkeys("DLCU", 15),
    **dict.fromkeys("MWFGYPB", 20),
    **dict.fromkeys("VKJX", 25),
    **dict.fromkeys("QZ", 30),
}
DEFAULT_LETTER_VALUE = 15


@dataclass(frozen=True)
class TierSettings:
    """
    Budgets for a difficulty tier.

    Attributes:
        max_wrong_guesses: Wrong guesses allowed before losing
        time_limit: Seconds allowed before losing
        points_reward: Nominal reward shown for the tier
    """
    max_wrong_guesses: int
    time_limit: int
    points_reward: int


TIER_SETTINGS: dict[Difficulty, TierSettings] = {
    Difficulty.EASY: TierSettings(max_wrong_guesses=8, time_limit=180, points_reward=100),
    Difficulty.MEDIUM: TierSettings(max_wrong_guesses=6, time_limit=120, points_reward=200),
    Difficulty.HARD: TierSettings(max_wrong_guesses=5, time_limit=90, points_reward=300),
}


@dataclass(frozen=True)
class PowerUp:
    """
    A purchasable effect.

    Attributes:
        id: Identifier, also the effect type
        name: Display name
        description: What the effect does
        cost: Price in points
        duration: Seconds for timed effects
    """
    id: str
    name: str
    description: str
    cost: int
    duration: int | None = None


POWER_UPS: dict[str, PowerUp] = {
    p.id: p for p in (
        PowerUp("reveal_letter", "Reveal Letter", "Reveals a random unguessed letter", 100),
        PowerUp("extra_life", "Extra Life", "Adds one more wrong guess allowance", 150),
        PowerUp("freeze_time", "Freeze Time", "Stops the timer for 30 seconds", 80, duration=30),
        PowerUp("double_points", "Double Points", "Double points for 60 seconds", 120, duration=60),
        PowerUp("category_hint", "Category Hint", "Shows detailed category hint", 50),
        PowerUp("vowel_reveal", "Vowel Reveal", "Reveals all vowels in the word", 200),
    )
}


@dataclass(frozen=True)
class WordLevel:
    """
    A drawn word with its context.

    Attributes:
        word: Secret word, upper case
        category: Category name
        hint: Short hint shown from the start
        difficulty: Difficulty tier
        max_wrong_guesses: Wrong-guess budget
        time_limit: Seconds allowed, None for untimed
        points_reward: Nominal tier reward
    """
    word: str
    category: str
    hint: str
    difficulty: Difficulty
    max_wrong_guesses: int
    time_limit: int | None
    points_reward: int


@dataclass(frozen=True)
class WordGuessState:
    """
    Immutable snapshot of a word-guess game.

    Attributes:
        level: The drawn word and its settings
        guessed_letters: Every letter tried or revealed
        wrong_guesses: Wrong letters in guess order
        correct_guesses: Correct or revealed letters in order
        display: Masked word, "_" for hidden positions
        phase: PLAYING, WON or LOST
        score: Points, never negative
        seconds_elapsed: Play time (frozen while freeze_time runs)
        max_wrong_guesses: Current wrong-guess budget
        streak: Consecutive wins carried into this game
        multiplier: Letter reward multiplier
        hints_used: Category hints bought
        power_ups_used: Power-up ids in purchase order
        revealed_positions: Positions opened by power-ups
        freeze_time_remaining: Seconds left in the freeze window
        double_points_remaining: Seconds left in the double-points window
        hint_text: Last category hint bought
        terminal_reason: Why a lost game ended
    """
    level: WordLevel
    guessed_letters: frozenset[str]
    wrong_guesses: tuple[str, ...]
    correct_guesses: tuple[str, ...]
    display: tuple[str, ...]
    phase: GamePhase
    score: int
    seconds_elapsed: int
    max_wrong_guesses: int
    streak: int = 0
    multiplier: int = 1
    hints_used: int = 0
    power_ups_used: tuple[str, ...] = ()
    revealed_positions: tuple[int, ...] = ()
    freeze_time_remaining: int = 0
    double_points_remaining: int = 0
    hint_text: str | None = None
    terminal_reason: str | None = None

    @property
    def word(self) -> str:
        return self.level.word

    @property
    def remaining_guesses(self) -> int:
        return self.max_wrong_guesses - len(self.wrong_guesses)

    @property
    def word_progress(self) -> str:
        return " ".join(self.display)

    @property
    def is_complete(self) -> bool:
        return MASK not in self.display


class WordGuessEngine:
    """Engine for the word-guess game and its power-up economy."""

    TIME_BONUS: ClassVar[int] = 500
    TIME_BONUS_DECAY: ClassVar[int] = 10
    STREAK_BONUS: ClassVar[int] = 100
    DOUBLE_POINTS_MULTIPLIER: ClassVar[int] = 2

    def __init__(
        self,
        difficulty: Difficulty | str = Difficulty.EASY,
        *,
        word: str | None = None,
        category: str | None = None,
        rng: random.Random | None = None,
        win_streak: int = 0,
        time_limit: int | None = -1,
    ) -> None:
        """
        Args:
            difficulty: Difficulty tier
            word: Fixed secret word; drawn at random when None
            category: Category of a fixed word, or the category to draw from
            rng: Random source for word draws and letter reveals
            win_streak: Wins carried in from previous games
            time_limit: Seconds allowed; -1 for the tier default, None for untimed
        """
        self.difficulty = Difficulty(difficulty)
        self._rng = rng or random.Random()
        self._fixed_word = word
        self._category = category
        self._time_limit = time_limit
        self._score_record: ScoreRecord | None = None
        self._state = self._new_game(win_streak)

    @classmethod
    def generate_level(
        cls,
        difficulty: Difficulty | str,
        rng: random.Random | None = None,
        category: str | None = None,
    ) -> WordLevel:
        """Draw a random category (unless given) and a word from it."""
        difficulty = Difficulty(difficulty)
        rng = rng or random.Random()
        if category is None:
            category = rng.choice(sorted(WORD_CATEGORIES))
        elif category not in WORD_CATEGORIES:
            raise ValueError(f"Unknown category {category!r}. Must be one of {sorted(WORD_CATEGORIES)}.")

        word = rng.choice(WORD_CATEGORIES[category].words[difficulty])
        settings = TIER_SETTINGS[difficulty]
        return WordLevel(
            word=word,
            category=category,
            hint=f"A {difficulty.value} word from {category}",
            difficulty=difficulty,
            max_wrong_guesses=settings.max_wrong_guesses,
            time_limit=settings.time_limit,
            points_reward=settings.points_reward,
        )

    @staticmethod
    def letter_value(letter: str) -> int:
        """Base reward for a correct letter."""
        return LETTER_VALUES.get(letter.upper(), DEFAULT_LETTER_VALUE)

    @staticmethod
    def get_alphabet() -> tuple[str, ...]:
        return tuple("ABCDEFGHIJKLMNOPQRSTUVWXYZ")

    # -- Observe ---------------------------------------------------------

    def get_state(self) -> WordGuessState:
        return self._state

    @property
    def remaining_guesses(self) -> int:
        return self._state.remaining_guesses

    @property
    def word_progress(self) -> str:
        return self._state.word_progress

    # -- Act -------------------------------------------------------------

    def guess_letter(self, letter: str) -> ActionResult:
        """
        Guess one letter.

        Args:
            letter: A single letter, any case

        Returns:
            ActionResult with is_correct set for accepted guesses

        Raises:
            ValueError: If the input is not a single letter
        """
        letter = validate_letter(letter)
        state = self._state

        if state.phase is not GamePhase.PLAYING:
            return ActionResult.rejected("Game is not active.")
        if letter in state.guessed_letters:
            return ActionResult.rejected("Letter already guessed!")

        guessed = state.guessed_letters | {letter}

        if letter in state.word:
            points = self.letter_value(letter) * state.multiplier
            new_state = replace(
                state,
                guessed_letters=guessed,
                correct_guesses=state.correct_guesses + (letter,),
                display=self._reveal(state.word, state.display, letter),
                score=state.score + points,
            )
            new_state = self._check_completion(new_state)
            self._commit(new_state)

            message = f"Great! +{points} points!"
            if state.multiplier > 1:
                message += " (Double Points!)"
            return ActionResult(success=True, message=message, points=points, is_correct=True)

        wrong = state.wrong_guesses + (letter,)
        new_state = replace(state, guessed_letters=guessed, wrong_guesses=wrong, streak=0)
        if len(wrong) >= new_state.max_wrong_guesses:
            new_state = self._lose(new_state, OUT_OF_GUESSES_REASON)
        self._commit(new_state)
        return ActionResult(
            success=True,
            message=f"Wrong! {new_state.remaining_guesses} guesses left",
            is_correct=False,
        )

    def use_power_up(self, power_up_id: str) -> ActionResult:
        """
        Spend points on a power-up.

        The cost is debited only when the score covers it and the effect
        can actually apply; otherwise nothing changes.
        """
        state = self._state
        power_up = POWER_UPS.get(power_up_id)

        if power_up is None:
            return ActionResult.rejected("Power-up not available.")
        if state.phase is not GamePhase.PLAYING:
            return ActionResult.rejected("Game is not active.")
        if state.score < power_up.cost:
            return ActionResult.rejected(f"Need {power_up.cost} points to use this power-up.")

        unavailable = self._unavailable_reason(state, power_up)
        if unavailable is not None:
            return ActionResult.rejected(unavailable)

        paid = replace(
            state,
            score=state.score - power_up.cost,
            power_ups_used=state.power_ups_used + (power_up.id,),
        )
        new_state, message = self._apply_effect(paid, power_up)
        self._commit(new_state)
        logger.debug("Power-up %s used for %d points", power_up.id, power_up.cost)
        return ActionResult(success=True, message=message, points=-power_up.cost)

    def tick(self, seconds: int = 1) -> None:
        """
        Advance the clock one second at a time.

        A running freeze window absorbs the second instead of elapsed
        time. Double points counts down and reverts to 1x at zero.
        """
        validate_seconds(seconds)
        for _ in range(seconds):
            state = self._state
            if state.phase is not GamePhase.PLAYING:
                return

            if state.freeze_time_remaining > 0:
                state = replace(state, freeze_time_remaining=state.freeze_time_remaining - 1)
            else:
                state = replace(state, seconds_elapsed=state.seconds_elapsed + 1)

            if state.double_points_remaining > 0:
                remaining = state.double_points_remaining - 1
                state = replace(
                    state,
                    double_points_remaining=remaining,
                    multiplier=state.multiplier if remaining > 0 else 1,
                )

            limit = state.level.time_limit
            if limit is not None and state.seconds_elapsed >= limit:
                state = self._lose(state, TIME_LIMIT_REASON)

            self._commit(state)

    def restart(self) -> WordGuessState:
        """New word at the same tier; the win streak carries over after a win."""
        self._fixed_word = None
        if self._category not in WORD_CATEGORIES:
            self._category = None
        self._state = self._new_game(self._state.streak)
        self._score_record = None
        return self._state

    # -- Conclude --------------------------------------------------------

    def get_completion_stats(self) -> ScoreRecord | None:
        """Score record once the word is solved or the game is lost."""
        state = self._state
        if not state.phase.is_terminal:
            return None

        if self._score_record is None:
            is_perfect = (
                not state.wrong_guesses
                and state.hints_used == 0
                and not state.power_ups_used
            )
            self._score_record = ScoreRecord(
                game=GameMode.WORD_GUESS,
                score=state.score,
                moves=len(state.guessed_letters),
                time_elapsed_ms=state.seconds_elapsed * 1000,
                difficulty=self.difficulty.value,
                target_reached=len(state.word),
                terminal_reason=state.terminal_reason,
                details={
                    "word": state.word,
                    "category": state.level.category,
                    "is_won": state.phase is GamePhase.WON,
                    "wrong_guesses": len(state.wrong_guesses),
                    "hints_used": state.hints_used,
                    "power_ups_used": len(state.power_ups_used),
                    "streak": state.streak,
                    "is_perfect": is_perfect and state.phase is GamePhase.WON,
                },
            )
        return self._score_record

    # -- Effects -----------------------------------------------------------

    @staticmethod
    def _unavailable_reason(state: WordGuessState, power_up: PowerUp) -> str | None:
        if power_up.id == "reveal_letter" and state.is_complete:
            return "No letters to reveal!"
        if power_up.id == "vowel_reveal" and not any(
            vowel in state.word and vowel not in state.guessed_letters for vowel in VOWELS
        ):
            return "No vowels to reveal!"
        return None

    def _apply_effect(self, state: WordGuessState, power_up: PowerUp) -> tuple[WordGuessState, str]:
        if power_up.id == "reveal_letter":
            hidden = [i for i, shown in enumerate(state.display) if shown == MASK]
            letter = state.word[self._rng.choice(hidden)]
            state = self._reveal_by_power_up(state, letter)
            return self._check_completion(state), f"Revealed letter: {letter}"

        if power_up.id == "extra_life":
            return replace(state, max_wrong_guesses=state.max_wrong_guesses + 1), "Extra Life activated!"

        if power_up.id == "freeze_time":
            return replace(state, freeze_time_remaining=power_up.duration or 30), "Freeze Time activated!"

        if power_up.id == "double_points":
            return replace(
                state,
                multiplier=self.DOUBLE_POINTS_MULTIPLIER,
                double_points_remaining=power_up.duration or 60,
            ), "Double Points activated!"

        if power_up.id == "vowel_reveal":
            for vowel in VOWELS:
                if vowel in state.word and vowel not in state.guessed_letters:
                    state = self._reveal_by_power_up(state, vowel)
            return self._check_completion(state), "All vowels revealed!"

        category = WORD_CATEGORIES.get(state.level.category)
        if category is not None:
            hint = category.hints[state.level.difficulty]
        else:
            hint = f"This word is related to: {state.level.category}"
        return replace(state, hints_used=state.hints_used + 1, hint_text=hint), hint

    def _reveal_by_power_up(self, state: WordGuessState, letter: str) -> WordGuessState:
        positions = tuple(i for i, char in enumerate(state.word) if char == letter)
        return replace(
            state,
            display=self._reveal(state.word, state.display, letter),
            guessed_letters=state.guessed_letters | {letter},
            correct_guesses=state.correct_guesses + (letter,),
            revealed_positions=state.revealed_positions + positions,
        )

    @staticmethod
    def _reveal(word: str, display: tuple[str, ...], letter: str) -> tuple[str, ...]:
        """Open every occurrence of `letter`."""
        return tuple(char if char == letter else shown for char, shown in zip(word, display))

    # -- Lifecycle ---------------------------------------------------------

    def _check_completion(self, state: WordGuessState) -> WordGuessState:
        """Win when no position is masked; bonus is added exactly once."""
        if not state.is_complete or state.phase is not GamePhase.PLAYING:
            return state

        streak = state.streak + 1
        time_bonus = max(0, self.TIME_BONUS - state.seconds_elapsed * self.TIME_BONUS_DECAY)
        logger.debug("Word %s solved with streak %d", state.word, streak)
        return replace(
            state,
            phase=GamePhase.WON,
            streak=streak,
            score=state.score + time_bonus + streak * self.STREAK_BONUS,
            multiplier=1,
            freeze_time_remaining=0,
            double_points_remaining=0,
        )

    @staticmethod
    def _lose(state: WordGuessState, reason: str) -> WordGuessState:
        logger.debug("Word %s lost: %s", state.word, reason)
        return replace(state, phase=GamePhase.LOST, terminal_reason=reason, streak=0)

    def _commit(self, state: WordGuessState) -> None:
        self._state = state
        self._score_record = None

    def _new_game(self, win_streak: int) -> WordGuessState:
        if self._fixed_word is not None:
            settings = TIER_SETTINGS[self.difficulty]
            word = validate_word(self._fixed_word)
            category = self._category or "custom"
            level = WordLevel(
                word=word,
                category=category,
                hint=f"A {self.difficulty.value} word from {category}",
                difficulty=self.difficulty,
                max_wrong_guesses=settings.max_wrong_guesses,
                time_limit=settings.time_limit,
                points_reward=settings.points_reward,
            )
        else:
            level = self.generate_level(self.difficulty, self._rng, self._category)

        if self._time_limit != -1:
            level = replace(level, time_limit=self._time_limit)

        return WordGuessState(
            level=level,
            guessed_letters=frozenset(),
            wrong_guesses=(),
            correct_guesses=(),
            display=tuple(MASK for _ in level.word),
            phase=GamePhase.PLAYING,
            score=0,
            seconds_elapsed=0,
            max_wrong_guesses=level.max_wrong_guesses,
            streak=win_streak,
        )

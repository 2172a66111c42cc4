"""Unit Dash: the timed multiple-choice quiz engine."""
import logging
import random
from enum import Enum
from typing import Callable, Optional

from unit_tutor.catalog import units_for
from unit_tutor.converter import convert, format_value
from unit_tutor.models import Category, GameQuestion, UnitKind
from unit_tutor.practice import GenerationExhausted
from unit_tutor.scheduler import EventQueue

logger = logging.getLogger(__name__)

GAME_DURATION = 60
ANSWER_DELAY = 0.3
MATCH_TOLERANCE = 0.001
OPTION_COUNT = 4

MAX_QUESTION_ATTEMPTS = 50
MAX_DISTRACTOR_ATTEMPTS = 50
FINGERPRINT_RETRY_LIMIT = 20
FINGERPRINT_CAP = 30

GAME_VALUES = {
    Category.LENGTH: (1, 2, 5, 10, 12, 25, 50, 100),
    Category.MASS: (1, 2, 4, 8, 16, 32),
    Category.TEMPERATURE: (0, 32, 100, 212, 25, 68, 98.6),
    Category.VOLUME: (1, 2, 3, 4, 5, 8, 10),
    Category.SPEED: (30, 60, 100, 120),
}

TEMPERATURE_MULTIPLIERS = (0.5, 0.8, 1.2, 1.5, 2.0)
DEFAULT_MULTIPLIERS = (0.3, 0.5, 0.7, 1.3, 1.7, 2.0, 3.0)

# (from-name substring, to-name substring, tip), case-sensitive on unit names
GAME_TIPS = {
    Category.LENGTH: (
        ("Inches", "Centimeters", "Remember: 1 inch = 2.54 cm"),
        ("Feet", "Meters", "Remember: 1 foot = 0.3048 meters"),
    ),
    Category.MASS: (
        ("Pounds", "Kilograms", "Remember: 1 pound = 0.454 kg"),
        ("Ounces", "Grams", "Remember: 1 ounce = 28.35 grams"),
    ),
    Category.VOLUME: (
        ("Cups", "Milliliters", "Remember: 1 US cup = 236.6 mL"),
    ),
    Category.SPEED: (
        ("Miles", "Kilometers", "Remember: 1 mph = 1.609 km/h"),
    ),
    Category.TEMPERATURE: (),
}

TEMPERATURE_TIPS = {
    (UnitKind.CELSIUS, UnitKind.FAHRENHEIT): "Remember: °F = °C × 9/5 + 32",
    (UnitKind.FAHRENHEIT, UnitKind.CELSIUS): "Remember: °C = (°F - 32) × 5/9",
    (UnitKind.CELSIUS, UnitKind.KELVIN): "Remember: K = °C + 273.15",
}

DEFAULT_TIP = "Quick tip: Practice makes perfect!"


class GameState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    ENDED = "ended"


def game_tip(from_unit, to_unit) -> str:
    category = from_unit.category
    if category is Category.TEMPERATURE:
        return TEMPERATURE_TIPS.get((from_unit.kind, to_unit.kind), "Temperature conversion formula")
    for from_part, to_part, tip in GAME_TIPS[category]:
        if from_part in from_unit.name and to_part in to_unit.name:
            return tip
    return DEFAULT_TIP


def is_match(selected: float, correct: float) -> bool:
    return abs(selected - correct) < MATCH_TOLERANCE


class QuestionGenerator:
    """Builds quiz questions and remembers recent ones for a single game."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self._used = set()

    def reset(self) -> None:
        self._used.clear()

    @property
    def used_count(self) -> int:
        return len(self._used)

    def next_question(self) -> GameQuestion:
        for _ in range(MAX_QUESTION_ATTEMPTS):
            category = self.rng.choice(list(Category))
            question = self._try_question(category)
            if question is not None:
                return question
        raise GenerationExhausted(f"No fresh question after {MAX_QUESTION_ATTEMPTS} attempts")

    def _try_question(self, category: Category) -> Optional[GameQuestion]:
        units = units_for(category)
        from_unit = self.rng.choice(units)
        to_unit = self.rng.choice([u for u in units if u.name != from_unit.name])
        value = self.rng.choice(GAME_VALUES[category])

        correct = convert(value, from_unit, to_unit)
        if correct is None:
            logger.warning("Skipping question: %s -> %s did not convert", from_unit.name, to_unit.name)
            return None

        fingerprint = f"{category.value}-{from_unit.name}-{to_unit.name}-{float(value)}"
        if fingerprint in self._used and len(self._used) < FINGERPRINT_RETRY_LIMIT:
            logger.debug("Repeat question %s, regenerating", fingerprint)
            return None
        self._used.add(fingerprint)
        if len(self._used) > FINGERPRINT_CAP:
            self._used.clear()

        return GameQuestion(
            question=f"Convert {format_value(value)} {from_unit.symbol} to {to_unit.symbol}",
            correct_answer=correct,
            options=tuple(self.options(correct, category)),
            explanation=game_tip(from_unit, to_unit),
            category=category,
        )

    def options(self, correct: float, category: Category) -> list:
        """The correct answer plus three distinct distractors, shuffled."""
        options = [correct]
        for _ in range(MAX_DISTRACTOR_ATTEMPTS):
            if len(options) == OPTION_COUNT:
                break
            candidate = self.distractor(correct, category)
            if not any(is_match(o, candidate) for o in options):
                options.append(candidate)

        # Answers at or near zero scale to the same value; space them out instead.
        step = max(abs(correct), 0.01)
        k = 1
        while len(options) < OPTION_COUNT:
            candidate = correct + step * k
            if not any(is_match(o, candidate) for o in options):
                options.append(candidate)
            k += 1

        self.rng.shuffle(options)
        return options

    def distractor(self, correct: float, category: Category) -> float:
        if category is Category.TEMPERATURE:
            multipliers = TEMPERATURE_MULTIPLIERS
        else:
            multipliers = DEFAULT_MULTIPLIERS
        value = correct * self.rng.choice(multipliers) * self.rng.uniform(0.9, 1.1)
        if category is not Category.TEMPERATURE:
            value = abs(value)
        return value


class GameEngine:
    """Running score, countdown and current question for one quiz at a time.

    IDLE -> ACTIVE on start_game(), ACTIVE -> ENDED on timeout or end_game().
    A replay always goes through start_game() again.
    """

    def __init__(
        self,
        scheduler: EventQueue,
        rng: Optional[random.Random] = None,
        duration: int = GAME_DURATION,
        answer_delay: float = ANSWER_DELAY,
        on_end: Optional[Callable[["GameEngine"], None]] = None,
    ):
        self.scheduler = scheduler
        self.generator = QuestionGenerator(rng)
        self.duration = duration
        self.answer_delay = answer_delay
        self.on_end = on_end

        self.state = GameState.IDLE
        self.score = 0
        self.time_remaining = duration
        self.current_question: Optional[GameQuestion] = None
        self.total_questions = 0
        self.correct_answers = 0
        self.accuracy = 0.0
        self._timer = None
        self._advance = None

    @property
    def is_active(self) -> bool:
        return self.state is GameState.ACTIVE

    @property
    def is_ended(self) -> bool:
        return self.state is GameState.ENDED

    def start_game(self) -> None:
        self._cancel_pending()
        self._reset()
        self.state = GameState.ACTIVE
        logger.info("Game started (%ds)", self.duration)
        self._next_question()
        if self.is_active:
            self._timer = self.scheduler.call_every(1.0, self._tick)

    def end_game(self) -> None:
        if not self.is_active:
            return
        self.state = GameState.ENDED
        self._cancel_pending()
        if self.total_questions > 0:
            self.accuracy = self.correct_answers / self.total_questions
        logger.info("Game ended: score=%d answered=%d", self.score, self.total_questions)
        if self.on_end is not None:
            self.on_end(self)

    def submit_answer(self, selected: float) -> Optional[bool]:
        """Grade ``selected`` against the live question.

        Returns None when there is nothing to grade. The next question arrives
        ``answer_delay`` seconds after the latest answer on the scheduler.
        """
        if not self.is_active or self.current_question is None:
            return None
        self.total_questions += 1
        correct = is_match(selected, self.current_question.correct_answer)
        if correct:
            self.score += 1
            self.correct_answers += 1
        if self._advance is not None:
            self._advance.cancel()
        self._advance = self.scheduler.call_later(self.answer_delay, self._advance_question)
        return correct

    def _tick(self) -> None:
        if not self.is_active:
            return
        if self.time_remaining > 0:
            self.time_remaining -= 1
        if self.time_remaining <= 0:
            self.end_game()

    def _advance_question(self) -> None:
        self._advance = None
        if self.is_active:
            self._next_question()

    def _next_question(self) -> None:
        try:
            self.current_question = self.generator.next_question()
        except GenerationExhausted:
            logger.warning("Question generation exhausted, ending game")
            self.end_game()

    def _reset(self) -> None:
        self.score = 0
        self.time_remaining = self.duration
        self.total_questions = 0
        self.correct_answers = 0
        self.accuracy = 0.0
        self.current_question = None
        self.generator.reset()

    def _cancel_pending(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._advance is not None:
            self._advance.cancel()
            self._advance = None

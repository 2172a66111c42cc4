"""Practice and Unit Dash session controllers used by the front end."""
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from unit_tutor.converter import format_result, parse_number
from unit_tutor.feedback import FeedbackStyle, NullFeedback
from unit_tutor.game import ANSWER_DELAY, GAME_DURATION, GameEngine, is_match
from unit_tutor.practice import DAILY_TASK_COUNT, check_answer, generate_daily_tasks
from unit_tutor.progress import ProgressTracker
from unit_tutor.scheduler import EventQueue
from unit_tutor.models import ConversionTask, TaskSession

logger = logging.getLogger(__name__)

EXPLANATION_DELAY = 0.5
FEEDBACK_RESET_DELAY = 1.2

DEFAULT_TIPS = (
    "Remember: 1 inch = 2.54 cm",
    "Remember: 1 pound = 0.454 kg",
    "Remember: °F = °C × 9/5 + 32",
    "Remember: 1 mile = 1.609 km",
    "Remember: 1 US cup = 236.6 mL",
    "Practice makes perfect!",
    "Focus on common conversions first",
    "Use estimation to eliminate wrong answers",
)


@dataclass
class AnswerResult:
    correct: Optional[bool] = None
    error: Optional[str] = None
    new_badges: list = field(default_factory=list)
    session_complete: bool = False


class PracticeSession:
    """Drives one daily practice set and feeds results into the tracker."""

    def __init__(
        self,
        tracker: ProgressTracker,
        scheduler: EventQueue,
        rng: Optional[random.Random] = None,
        feedback=None,
        task_count: int = DAILY_TASK_COUNT,
        explanation_delay: float = EXPLANATION_DELAY,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.tracker = tracker
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.feedback = feedback or NullFeedback()
        self.task_count = task_count
        self.explanation_delay = explanation_delay
        self.clock = clock

        self.session: Optional[TaskSession] = None
        self.index = 0
        self.show_result = False
        self.is_correct = False
        self.show_explanation = False
        self.completed = False
        self.new_badges = []
        self._pending = None

    def start(self) -> TaskSession:
        self.close()
        tasks = generate_daily_tasks(self.task_count, self.rng)
        self.session = TaskSession(tasks=tasks, start_time=self.clock())
        self.index = 0
        self.completed = False
        self.new_badges = []
        self._reset_current()
        return self.session

    @property
    def current_task(self) -> Optional[ConversionTask]:
        if self.session is None or self.index >= len(self.session.tasks):
            return None
        return self.session.tasks[self.index]

    def submit(self, text: str) -> AnswerResult:
        task = self.current_task
        if task is None:
            return AnswerResult(error="No practice set in progress")
        if self.show_result:
            return AnswerResult(error="This task is already answered")
        answer = parse_number(text)
        if answer is None:
            return AnswerResult(error="Please enter a valid number")

        correct = check_answer(answer, task)
        self.is_correct = correct
        self.show_result = True
        self.session.complete_task(task.id, correct, now=self.clock())
        unlocked = self.tracker.record_task_completion(correct, task.category)
        self.feedback.signal(FeedbackStyle.LIGHT if correct else FeedbackStyle.MEDIUM)
        self._pending = self.scheduler.call_later(self.explanation_delay, self._reveal_explanation)

        if self.session.is_complete and not self.completed:
            unlocked += self._complete()
        self.new_badges.extend(unlocked)
        return AnswerResult(correct=correct, new_badges=unlocked, session_complete=self.completed)

    def next_task(self) -> bool:
        """Move to the next task. False once the set has run out."""
        if self.session is None:
            return False
        if self.index < len(self.session.tasks) - 1:
            self.index += 1
            self._reset_current()
            return True
        return False

    def close(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    @property
    def formatted_correct_answer(self) -> str:
        task = self.current_task
        if task is None:
            return ""
        return f"{format_result(task.correct_answer, task.to_unit)} {task.to_unit.symbol}"

    @property
    def result_message(self) -> str:
        return "Great job!" if self.is_correct else "Not quite. Here's how:"

    def _complete(self) -> list:
        self.completed = True
        duration = self.session.duration(self.clock())
        logger.info("Practice set finished in %.1fs (%s correct)", duration, self.session.correct_answers)
        unlocked = self.tracker.update_streak()
        unlocked += self.tracker.record_daily_set_time(duration)
        self.feedback.signal(FeedbackStyle.SUCCESS)
        return unlocked

    def _reveal_explanation(self) -> None:
        self._pending = None
        self.show_explanation = True

    def _reset_current(self) -> None:
        self.close()
        self.show_result = False
        self.show_explanation = False
        self.is_correct = False


class GameSession:
    """Wraps a GameEngine with answer highlighting and end-of-game bookkeeping."""

    def __init__(
        self,
        tracker: ProgressTracker,
        scheduler: EventQueue,
        rng: Optional[random.Random] = None,
        feedback=None,
        duration: int = GAME_DURATION,
        answer_delay: float = ANSWER_DELAY,
        feedback_reset_delay: float = FEEDBACK_RESET_DELAY,
        tips: tuple = DEFAULT_TIPS,
    ):
        self.tracker = tracker
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.feedback = feedback or NullFeedback()
        self.feedback_reset_delay = feedback_reset_delay
        self.tips = tips
        self.engine = GameEngine(
            scheduler, rng=self.rng, duration=duration,
            answer_delay=answer_delay, on_end=self._finish,
        )

        self.selected_answer: Optional[float] = None
        self.show_result = False
        self.last_answer_correct = False
        self.show_end_screen = False
        self.new_best_score = False
        self.new_badges = []
        self._reset_call = None

    def start(self) -> None:
        self._cancel_reset()
        self.show_end_screen = False
        self.new_best_score = False
        self.new_badges = []
        self.selected_answer = None
        self.show_result = False
        self.engine.start_game()

    def select_answer(self, answer: float) -> Optional[bool]:
        question = self.engine.current_question
        if not self.engine.is_active or self.selected_answer is not None or question is None:
            return None
        self.selected_answer = answer
        self.last_answer_correct = is_match(answer, question.correct_answer)
        self.show_result = True
        self.feedback.signal(FeedbackStyle.LIGHT if self.last_answer_correct else FeedbackStyle.MEDIUM)
        self.engine.submit_answer(answer)
        self._reset_call = self.scheduler.call_later(self.feedback_reset_delay, self._clear_selection)
        return self.last_answer_correct

    def end(self) -> None:
        self.engine.end_game()

    def close(self) -> None:
        self._cancel_reset()
        self.engine.end_game()

    @property
    def is_new_best(self) -> bool:
        return self.engine.score > self.tracker.stats.best_game_score

    @property
    def accuracy_percentage(self) -> int:
        return int(self.engine.accuracy * 100)

    @property
    def current_question_number(self) -> int:
        return self.engine.total_questions + 1

    @property
    def timer_level(self) -> str:
        remaining = self.engine.time_remaining
        if remaining <= 10:
            return "critical"
        elif remaining <= 20:
            return "warning"
        return "normal"

    def option_state(self, option: float) -> str:
        """How an option should be highlighted after an answer."""
        if not self.show_result or self.selected_answer is None:
            return "neutral"
        if is_match(option, self.selected_answer):
            return "correct" if self.last_answer_correct else "wrong"
        question = self.engine.current_question
        if question is not None and is_match(option, question.correct_answer):
            return "neutral" if self.last_answer_correct else "reveal"
        return "neutral"

    @property
    def end_message(self) -> str:
        score = self.engine.score
        if self.new_best_score:
            return "New Best!"
        elif score >= 15:
            return "Excellent!"
        elif score >= 10:
            return "Great job!"
        elif score >= 5:
            return "Good effort!"
        return "Keep practicing!"

    def quick_tip(self) -> str:
        return self.rng.choice(self.tips) if self.tips else "Keep practicing!"

    @staticmethod
    def format_time(seconds: int) -> str:
        return f"{seconds // 60}:{seconds % 60:02d}"

    def _finish(self, engine: GameEngine) -> None:
        self._cancel_reset()
        self.selected_answer = None
        self.show_result = False
        if self.is_new_best:
            self.new_best_score = True
            self.new_badges = self.tracker.record_game_score(engine.score)
        self.show_end_screen = True
        self.feedback.signal(FeedbackStyle.SUCCESS if self.new_best_score else FeedbackStyle.WARNING)

    def _clear_selection(self) -> None:
        self._reset_call = None
        self.selected_answer = None
        self.show_result = False

    def _cancel_reset(self) -> None:
        if self._reset_call is not None:
            self._reset_call.cancel()
            self._reset_call = None

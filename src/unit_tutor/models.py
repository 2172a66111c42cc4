"""Data classes for the tutor domain model."""
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional


class Category(str, Enum):
    LENGTH = "Length"
    MASS = "Mass"
    TEMPERATURE = "Temperature"
    VOLUME = "Volume"
    SPEED = "Speed"


class UnitKind(Enum):
    """Every unit variant, tagged with the category it belongs to."""

    METERS = ("meters", Category.LENGTH)
    KILOMETERS = ("kilometers", Category.LENGTH)
    CENTIMETERS = ("centimeters", Category.LENGTH)
    MILLIMETERS = ("millimeters", Category.LENGTH)
    INCHES = ("inches", Category.LENGTH)
    FEET = ("feet", Category.LENGTH)
    MILES = ("miles", Category.LENGTH)

    GRAMS = ("grams", Category.MASS)
    KILOGRAMS = ("kilograms", Category.MASS)
    POUNDS = ("pounds", Category.MASS)
    OUNCES = ("ounces", Category.MASS)

    CELSIUS = ("celsius", Category.TEMPERATURE)
    FAHRENHEIT = ("fahrenheit", Category.TEMPERATURE)
    KELVIN = ("kelvin", Category.TEMPERATURE)

    LITERS = ("liters", Category.VOLUME)
    MILLILITERS = ("milliliters", Category.VOLUME)
    CUPS = ("cups", Category.VOLUME)
    TABLESPOONS = ("tablespoons", Category.VOLUME)
    TEASPOONS = ("teaspoons", Category.VOLUME)
    GALLONS = ("gallons", Category.VOLUME)

    METERS_PER_SECOND = ("meters_per_second", Category.SPEED)
    KILOMETERS_PER_HOUR = ("kilometers_per_hour", Category.SPEED)
    MILES_PER_HOUR = ("miles_per_hour", Category.SPEED)
    KNOTS = ("knots", Category.SPEED)

    @property
    def category(self) -> Category:
        return self.value[1]


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class Unit:
    name: str
    symbol: str
    kind: UnitKind

    @property
    def category(self) -> Category:
        return self.kind.category


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ConversionTask:
    question: str
    from_value: float
    from_unit: Unit
    to_unit: Unit
    correct_answer: float
    explanation: str
    category: Category
    id: str = field(default_factory=_new_id)


@dataclass
class TaskSession:
    """One practice set. Completion of a task id is recorded at most once."""

    tasks: list
    completed: set = field(default_factory=set)
    correct_answers: int = 0
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    @property
    def is_complete(self) -> bool:
        return len(self.completed) == len(self.tasks)

    @property
    def accuracy(self) -> float:
        if not self.completed:
            return 0.0
        return self.correct_answers / len(self.completed)

    @property
    def progress(self) -> float:
        if not self.tasks:
            return 0.0
        return len(self.completed) / len(self.tasks)

    @property
    def progress_text(self) -> str:
        return f"{len(self.completed)}/{len(self.tasks)}"

    def duration(self, now: Optional[datetime] = None) -> float:
        """Elapsed seconds; open sessions measure up to ``now``."""
        end = self.end_time or now or datetime.now()
        return (end - self.start_time).total_seconds()

    def complete_task(self, task_id: str, is_correct: bool, now: Optional[datetime] = None) -> None:
        if task_id not in self.completed:
            self.completed.add(task_id)
            if is_correct:
                self.correct_answers += 1
        if self.is_complete and self.end_time is None:
            self.end_time = now or datetime.now()


def format_game_answer(value: float) -> str:
    if abs(value) >= 1000:
        return f"{value:.1f}"
    elif abs(value) >= 10:
        return f"{value:.2f}"
    return f"{value:.3f}"


@dataclass(frozen=True)
class GameQuestion:
    question: str
    correct_answer: float
    options: tuple
    explanation: str
    category: Category
    id: str = field(default_factory=_new_id)

    @property
    def formatted_options(self) -> list[str]:
        return [format_game_answer(o) for o in self.options]

    @property
    def formatted_correct_answer(self) -> str:
        return format_game_answer(self.correct_answer)


@dataclass
class Badge:
    id: str
    name: str
    description: str
    icon: str
    requirement: str
    is_unlocked: bool = False
    unlocked_date: Optional[datetime] = None

    def unlock(self, now: Optional[datetime] = None) -> None:
        self.is_unlocked = True
        self.unlocked_date = now or datetime.now()

    def lock(self) -> None:
        self.is_unlocked = False
        self.unlocked_date = None


@dataclass
class CategoryStats:
    total_tasks: int = 0
    correct_tasks: int = 0

    @property
    def accuracy(self) -> float:
        if self.total_tasks == 0:
            return 0.0
        return self.correct_tasks / self.total_tasks

    def record_task(self, is_correct: bool) -> None:
        self.total_tasks += 1
        if is_correct:
            self.correct_tasks += 1


def _catalog_badges() -> list:
    from unit_tutor.catalog import BADGES
    return [replace(b) for b in BADGES]


@dataclass
class Stats:
    current_streak: int = 0
    last_practice_date: Optional[datetime] = None
    total_tasks_completed: int = 0
    total_correct_answers: int = 0
    best_game_score: int = 0
    fastest_daily_set_time: float = 0.0  # 0 = no record yet
    badges: list = field(default_factory=_catalog_badges)
    consecutive_correct: int = 0
    category_stats: dict = field(default_factory=dict)

    @property
    def overall_accuracy(self) -> float:
        if self.total_tasks_completed == 0:
            return 0.0
        return self.total_correct_answers / self.total_tasks_completed

    @property
    def unlocked_badges(self) -> list:
        return [b for b in self.badges if b.is_unlocked]

    @property
    def locked_badges(self) -> list:
        return [b for b in self.badges if not b.is_unlocked]

    def badge(self, badge_id: str) -> Optional[Badge]:
        for b in self.badges:
            if b.id == badge_id:
                return b
        return None

    def to_dict(self) -> dict:
        return {
            "current_streak": self.current_streak,
            "last_practice_date": _iso(self.last_practice_date),
            "total_tasks_completed": self.total_tasks_completed,
            "total_correct_answers": self.total_correct_answers,
            "best_game_score": self.best_game_score,
            "fastest_daily_set_time": self.fastest_daily_set_time,
            "badges": [
                {"id": b.id, "is_unlocked": b.is_unlocked, "unlocked_date": _iso(b.unlocked_date)}
                for b in self.badges
            ],
            "consecutive_correct": self.consecutive_correct,
            "category_stats": {
                name: {"total_tasks": cs.total_tasks, "correct_tasks": cs.correct_tasks}
                for name, cs in self.category_stats.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Stats":
        """Rebuild a record. Badge text always comes from the catalog; only unlock state is stored."""
        stats = cls(
            current_streak=int(data.get("current_streak", 0)),
            last_practice_date=_parse(data.get("last_practice_date")),
            total_tasks_completed=int(data.get("total_tasks_completed", 0)),
            total_correct_answers=int(data.get("total_correct_answers", 0)),
            best_game_score=int(data.get("best_game_score", 0)),
            fastest_daily_set_time=float(data.get("fastest_daily_set_time", 0.0)),
            consecutive_correct=int(data.get("consecutive_correct", 0)),
        )
        saved = {b["id"]: b for b in data.get("badges", [])}
        for badge in stats.badges:
            state = saved.get(badge.id)
            if state and state.get("is_unlocked"):
                badge.is_unlocked = True
                badge.unlocked_date = _parse(state.get("unlocked_date"))
        for name, cs in data.get("category_stats", {}).items():
            stats.category_stats[name] = CategoryStats(
                total_tasks=int(cs.get("total_tasks", 0)),
                correct_tasks=int(cs.get("correct_tasks", 0)),
            )
        return stats


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None

"""Daily practice set generation and answer checking."""
import logging
import random
from typing import Optional

from unit_tutor.catalog import units_for
from unit_tutor.converter import convert, format_result, format_value
from unit_tutor.models import Category, ConversionTask, Difficulty, UnitKind

logger = logging.getLogger(__name__)

DAILY_TASK_COUNT = 8
MAX_GENERATION_ATTEMPTS = 500

TASK_VALUES = {
    Category.LENGTH: {
        Difficulty.EASY: (1, 2, 5, 10, 100),
        Difficulty.MEDIUM: (1.5, 2.5, 12, 25, 50),
        Difficulty.HARD: (0.5, 3.7, 15.2, 87.3),
    },
    Category.MASS: {
        Difficulty.EASY: (1, 2, 5, 8, 16),
        Difficulty.MEDIUM: (1.5, 3.2, 12.5, 24),
        Difficulty.HARD: (0.75, 4.6, 18.7, 35.4),
    },
    Category.TEMPERATURE: {
        Difficulty.EASY: (0, 32, 100, 212),
        Difficulty.MEDIUM: (25, 68, 98.6, 150),
        Difficulty.HARD: (-10, 37.5, 85.3, 273.15),
    },
    Category.VOLUME: {
        Difficulty.EASY: (1, 2, 3, 5, 10),
        Difficulty.MEDIUM: (1.5, 2.5, 4.5, 8.5),
        Difficulty.HARD: (0.75, 3.25, 6.8, 12.3),
    },
    Category.SPEED: {
        Difficulty.EASY: (30, 60, 100),
        Difficulty.MEDIUM: (45, 75, 120),
        Difficulty.HARD: (35.5, 88.7, 145.2),
    },
}

# (from-name substring, to-name substring, explanation), matched on lowercased names
CONVERSION_FACTS = {
    Category.LENGTH: (
        ("inch", "cent", "1 inch = 2.54 cm"),
        ("feet", "meter", "1 foot = 0.3048 meters"),
        ("mile", "kilo", "1 mile = 1.609 km"),
    ),
    Category.MASS: (
        ("pound", "kilo", "1 pound = 0.454 kg"),
        ("ounce", "gram", "1 ounce = 28.35 grams"),
    ),
    Category.VOLUME: (
        ("cup", "milli", "1 US cup = 236.6 mL"),
        ("gallon", "liter", "1 US gallon = 3.785 L"),
    ),
    Category.SPEED: (
        ("miles per hour", "kilometers per hour", "1 mph = 1.609 km/h"),
    ),
    Category.TEMPERATURE: (),
}


class GenerationExhausted(RuntimeError):
    """Raised when no acceptable question can be produced within the retry budget."""


def difficulty_for_slot(slot: int) -> Difficulty:
    if slot < 3:
        return Difficulty.EASY
    elif slot < 6:
        return Difficulty.MEDIUM
    return Difficulty.HARD


def generate_task(category: Category, difficulty: Difficulty, rng: random.Random) -> ConversionTask:
    units = units_for(category)
    from_unit = rng.choice(units)
    to_unit = rng.choice([u for u in units if u.name != from_unit.name])
    value = rng.choice(TASK_VALUES[category][difficulty])
    answer = convert(value, from_unit, to_unit)
    if answer is None:
        raise ValueError(f"{from_unit.name} and {to_unit.name} are not convertible")
    return ConversionTask(
        question=f"Convert {format_value(value)} {from_unit.symbol} to {to_unit.symbol}",
        from_value=value,
        from_unit=from_unit,
        to_unit=to_unit,
        correct_answer=answer,
        explanation=explain(value, from_unit, to_unit, answer),
        category=category,
    )


def _is_duplicate(task: ConversionTask, tasks: list) -> bool:
    return any(
        t.from_unit.name == task.from_unit.name
        and t.to_unit.name == task.to_unit.name
        and abs(t.from_value - task.from_value) < 0.1
        for t in tasks
    )


def generate_daily_tasks(count: int = DAILY_TASK_COUNT, rng: Optional[random.Random] = None) -> list:
    """Build a shuffled practice set with every category represented at least once."""
    rng = rng or random.Random()
    tasks = []
    rejected = 0

    for category in Category:
        if len(tasks) >= count:
            break
        task = generate_task(category, Difficulty.EASY, rng)
        if not _is_duplicate(task, tasks):
            tasks.append(task)

    while len(tasks) < count:
        category = rng.choice(list(Category))
        task = generate_task(category, difficulty_for_slot(len(tasks)), rng)
        if _is_duplicate(task, tasks):
            rejected += 1
            if rejected >= MAX_GENERATION_ATTEMPTS:
                raise GenerationExhausted(
                    f"Only {len(tasks)} of {count} distinct tasks after {rejected} attempts"
                )
            continue
        tasks.append(task)

    rng.shuffle(tasks)
    logger.debug("Generated %d practice tasks (%d duplicates rejected)", len(tasks), rejected)
    return tasks


def explain(value: float, from_unit, to_unit, result: float) -> str:
    if from_unit.category is Category.TEMPERATURE:
        return _temperature_explanation(value, from_unit, to_unit, result)
    from_name = from_unit.name.lower()
    to_name = to_unit.name.lower()
    for from_part, to_part, text in CONVERSION_FACTS[from_unit.category]:
        if from_part in from_name and to_part in to_name:
            return text
    return f"Use conversion factor between {from_unit.name} and {to_unit.name}"


def _temperature_explanation(value, from_unit, to_unit, result) -> str:
    v = format_value(value)
    r = format_result(result, to_unit)
    pair = (from_unit.kind, to_unit.kind)
    if pair == (UnitKind.CELSIUS, UnitKind.FAHRENHEIT):
        return f"°F = °C × 9/5 + 32 = {v} × 9/5 + 32 = {r}°F"
    elif pair == (UnitKind.FAHRENHEIT, UnitKind.CELSIUS):
        return f"°C = (°F - 32) × 5/9 = ({v} - 32) × 5/9 = {r}°C"
    elif pair == (UnitKind.CELSIUS, UnitKind.KELVIN):
        return f"K = °C + 273.15 = {v} + 273.15 = {r}K"
    elif pair == (UnitKind.KELVIN, UnitKind.CELSIUS):
        return f"°C = K - 273.15 = {v} - 273.15 = {r}°C"
    return f"Temperature conversion: {v}{from_unit.symbol} = {r}{to_unit.symbol}"


def check_answer(user_answer: float, task: ConversionTask, tolerance: float = 0.01) -> bool:
    """Accept answers within 1% of the correct value, never tighter than ``tolerance``."""
    allowed = max(tolerance, abs(task.correct_answer) * 0.01)
    return abs(user_answer - task.correct_answer) <= allowed

# tests/test_practice.py
import random

import pytest

from unit_tutor import practice
from unit_tutor.catalog import find_unit
from unit_tutor.converter import convert
from unit_tutor.models import Category, ConversionTask, Difficulty
from unit_tutor.practice import (
    TASK_VALUES, GenerationExhausted, check_answer, difficulty_for_slot, explain,
    generate_daily_tasks, generate_task,
)


def _task(answer):
    return ConversionTask(
        question="", from_value=1, from_unit=find_unit("m"), to_unit=find_unit("km"),
        correct_answer=answer, explanation="", category=Category.LENGTH,
    )


@pytest.mark.parametrize("seed", range(25))
def test_daily_tasks_shape(seed):
    tasks = generate_daily_tasks(8, rng=random.Random(seed))
    assert len(tasks) == 8
    assert {t.category for t in tasks} == set(Category)
    for i, a in enumerate(tasks):
        for b in tasks[i + 1:]:
            same_pair = a.from_unit.name == b.from_unit.name and a.to_unit.name == b.to_unit.name
            assert not (same_pair and abs(a.from_value - b.from_value) < 0.1)


def test_daily_tasks_are_internally_consistent(rng):
    for task in generate_daily_tasks(rng=rng):
        assert task.from_unit.category is task.category
        assert task.to_unit.category is task.category
        assert task.from_unit.name != task.to_unit.name
        assert task.correct_answer == convert(task.from_value, task.from_unit, task.to_unit)
        assert task.question.startswith("Convert ")
        assert task.explanation


def test_daily_tasks_use_tier_values(rng):
    allowed = {c: {v for tier in tiers.values() for v in tier} for c, tiers in TASK_VALUES.items()}
    for task in generate_daily_tasks(8, rng=rng):
        assert task.from_value in allowed[task.category]


def test_daily_tasks_are_shuffled():
    orders = set()
    for seed in range(10):
        tasks = generate_daily_tasks(8, rng=random.Random(seed))
        orders.add(tuple(t.category for t in tasks[:5]))
    assert len(orders) > 1


def test_small_count_is_respected(rng):
    assert len(generate_daily_tasks(3, rng=rng)) == 3


def test_generation_is_bounded(rng, monkeypatch):
    monkeypatch.setattr(practice, "MAX_GENERATION_ATTEMPTS", 5)
    with pytest.raises(GenerationExhausted):
        # far more tasks than distinct (pair, value) combinations allow
        generate_daily_tasks(2000, rng=rng)


def test_difficulty_for_slot():
    assert [difficulty_for_slot(i) for i in range(8)] == [
        Difficulty.EASY, Difficulty.EASY, Difficulty.EASY,
        Difficulty.MEDIUM, Difficulty.MEDIUM, Difficulty.MEDIUM,
        Difficulty.HARD, Difficulty.HARD,
    ]


def test_generate_task_uses_requested_tier(rng):
    for _ in range(20):
        task = generate_task(Category.SPEED, Difficulty.HARD, rng)
        assert task.from_value in TASK_VALUES[Category.SPEED][Difficulty.HARD]


def test_explanations_for_known_pairs():
    def f(a, b, value=1):
        src, dst = find_unit(a), find_unit(b)
        return explain(value, src, dst, convert(value, src, dst))

    assert f("in", "cm") == "1 inch = 2.54 cm"
    assert f("ft", "m") == "1 foot = 0.3048 meters"
    assert f("mi", "km") == "1 mile = 1.609 km"
    assert f("lb", "kg") == "1 pound = 0.454 kg"
    assert f("oz", "g") == "1 ounce = 28.35 grams"
    assert f("cup", "mL") == "1 US cup = 236.6 mL"
    assert f("gal", "L") == "1 US gallon = 3.785 L"
    assert f("mph", "km/h") == "1 mph = 1.609 km/h"
    assert f("kg", "oz") == "Use conversion factor between Kilograms and Ounces"


def test_temperature_explanations_show_worked_formula():
    c, f_, k = find_unit("°C"), find_unit("°F"), find_unit("K")
    assert explain(100, c, f_, 212.0) == "°F = °C × 9/5 + 32 = 100 × 9/5 + 32 = 212.00°F"
    assert explain(32, f_, c, 0.0) == "°C = (°F - 32) × 5/9 = (32 - 32) × 5/9 = 0.00°C"
    assert explain(0, c, k, 273.15) == "K = °C + 273.15 = 0 + 273.15 = 273.15K"
    assert explain(300, k, c, 26.85) == "°C = K - 273.15 = 300 - 273.15 = 26.85°C"
    assert explain(212, f_, k, 373.15) == "Temperature conversion: 212°F = 373.15K"


def test_check_answer_relative_tolerance():
    task = _task(1000.0)
    assert check_answer(1000.0, task)
    assert check_answer(1009.9, task)
    assert not check_answer(1010.5, task)


def test_check_answer_absolute_floor():
    task = _task(0.5)
    assert check_answer(0.509, task)
    assert not check_answer(0.52, task)
    assert check_answer(0.52, task, tolerance=0.05)

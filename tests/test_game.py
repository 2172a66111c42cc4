# tests/test_game.py
import random

import pytest

from unit_tutor.catalog import find_unit
from unit_tutor.game import (
    GAME_VALUES, GameEngine, GameState, QuestionGenerator, game_tip, is_match,
)
from unit_tutor.models import Category, GameQuestion
from unit_tutor.practice import GenerationExhausted


def _question(correct=100.0):
    return GameQuestion(
        question="Convert 1 m to cm", correct_answer=correct,
        options=(correct, 50.0, 150.0, 300.0), explanation="", category=Category.LENGTH,
    )


@pytest.fixture
def engine(scheduler, rng):
    return GameEngine(scheduler, rng=rng)


def test_new_engine_is_idle(engine):
    assert engine.state is GameState.IDLE
    assert engine.current_question is None
    assert engine.submit_answer(1.0) is None


def test_start_game(engine, scheduler):
    engine.start_game()
    assert engine.state is GameState.ACTIVE
    assert engine.time_remaining == 60
    q = engine.current_question
    assert q is not None
    assert len(q.options) == 4
    assert any(is_match(o, q.correct_answer) for o in q.options)
    assert scheduler.pending == 1


def test_timer_runs_out(engine, scheduler):
    ended = []
    engine.on_end = ended.append
    engine.start_game()
    scheduler.advance(30)
    assert engine.time_remaining == 30
    assert engine.is_active
    scheduler.advance(30)
    assert engine.state is GameState.ENDED
    assert engine.time_remaining == 0
    assert ended == [engine]
    scheduler.advance(10)
    assert engine.time_remaining == 0
    assert ended == [engine]
    assert scheduler.pending == 0


def test_end_game_stops_timer(engine, scheduler):
    engine.start_game()
    scheduler.advance(5)
    engine.end_game()
    scheduler.advance(20)
    assert engine.time_remaining == 55
    assert engine.is_ended


def test_end_game_when_idle_is_noop(engine):
    engine.end_game()
    assert engine.state is GameState.IDLE


def test_submit_answer_grading(engine, scheduler):
    engine.start_game()
    engine.current_question = _question(100.0)
    assert engine.submit_answer(100.0004) is True
    assert engine.score == 1
    assert engine.correct_answers == 1
    assert engine.total_questions == 1

    scheduler.advance(0.3)
    engine.current_question = _question(100.0)
    assert engine.submit_answer(100.01) is False
    assert engine.score == 1
    assert engine.total_questions == 2


def test_live_question_grades_every_submission(engine, scheduler):
    engine.start_game()
    engine.current_question = _question(100.0)
    assert engine.submit_answer(100.0004) is True
    assert engine.submit_answer(100.01) is False
    assert engine.total_questions == 2
    assert engine.score == 1


def test_repeat_submission_schedules_a_single_advance(engine, scheduler):
    engine.start_game()
    q = engine.current_question = _question(100.0)
    engine.submit_answer(100.0)
    scheduler.advance(0.2)
    engine.submit_answer(100.0)
    assert scheduler.pending == 2  # timer plus one advance
    scheduler.advance(0.2)
    assert engine.current_question is q
    scheduler.advance(0.1)
    second = engine.current_question
    assert second is not q
    scheduler.advance(0.5)
    assert engine.current_question is second


def test_next_question_arrives_after_delay(engine, scheduler):
    engine.start_game()
    first = engine.current_question
    engine.submit_answer(first.correct_answer)
    assert engine.current_question is first
    scheduler.advance(0.29)
    assert engine.current_question is first
    scheduler.advance(0.01)
    assert engine.current_question is not first


def test_ending_cancels_pending_advance(engine, scheduler):
    engine.start_game()
    q = engine.current_question
    engine.submit_answer(q.correct_answer)
    engine.end_game()
    scheduler.advance(1)
    assert engine.current_question is q


def test_accuracy_computed_at_end(engine, scheduler):
    engine.start_game()
    engine.current_question = _question(10.0)
    engine.submit_answer(10.0)
    scheduler.advance(0.3)
    engine.current_question = _question(10.0)
    engine.submit_answer(11.0)
    assert engine.accuracy == 0.0
    engine.end_game()
    assert engine.accuracy == 0.5


def test_replay_resets_state(engine, scheduler):
    engine.start_game()
    engine.current_question = _question(1.0)
    engine.submit_answer(1.0)
    scheduler.advance(60)
    assert engine.is_ended
    engine.start_game()
    assert engine.is_active
    assert engine.score == 0
    assert engine.total_questions == 0
    assert engine.time_remaining == 60
    assert engine.accuracy == 0.0


def test_generation_exhaustion_ends_game(engine, scheduler, monkeypatch):
    def boom():
        raise GenerationExhausted("no questions")

    monkeypatch.setattr(engine.generator, "next_question", boom)
    engine.start_game()
    assert engine.is_ended
    assert scheduler.pending == 0


def test_questions_use_game_values(rng):
    gen = QuestionGenerator(rng)
    for _ in range(50):
        q = gen.next_question()
        assert len(q.options) == 4
        for i, a in enumerate(q.options):
            for b in q.options[i + 1:]:
                assert not is_match(a, b)


def test_recent_questions_do_not_repeat():
    gen = QuestionGenerator(random.Random(7))
    texts = [gen.next_question().question for _ in range(15)]
    assert len(set(texts)) == 15


def test_fingerprint_cache_is_bounded(rng):
    gen = QuestionGenerator(rng)
    for _ in range(300):
        gen.next_question()
        assert gen.used_count <= 30


def test_options_for_zero_answer_are_distinct(rng):
    gen = QuestionGenerator(rng)
    options = gen.options(0.0, Category.TEMPERATURE)
    assert len(options) == 4
    assert 0.0 in options
    for i, a in enumerate(options):
        for b in options[i + 1:]:
            assert not is_match(a, b)


def test_distractors_non_negative_except_temperature(rng):
    gen = QuestionGenerator(rng)
    for _ in range(100):
        assert gen.distractor(-5.0, Category.LENGTH) >= 0
    assert any(gen.distractor(-40.0, Category.TEMPERATURE) < 0 for _ in range(20))


def test_distractor_range(rng):
    gen = QuestionGenerator(rng)
    for _ in range(200):
        d = gen.distractor(100.0, Category.MASS)
        assert 100.0 * 0.3 * 0.9 <= d <= 100.0 * 3.0 * 1.1


def test_game_values_cover_categories():
    assert set(GAME_VALUES) == set(Category)


def test_game_tips():
    assert game_tip(find_unit("in"), find_unit("cm")) == "Remember: 1 inch = 2.54 cm"
    assert game_tip(find_unit("lb"), find_unit("kg")) == "Remember: 1 pound = 0.454 kg"
    assert game_tip(find_unit("°C"), find_unit("°F")) == "Remember: °F = °C × 9/5 + 32"
    assert game_tip(find_unit("K"), find_unit("°F")) == "Temperature conversion formula"
    assert game_tip(find_unit("mph"), find_unit("km/h")) == "Remember: 1 mph = 1.609 km/h"
    assert game_tip(find_unit("tsp"), find_unit("gal")) == "Quick tip: Practice makes perfect!"

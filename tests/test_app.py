import io

import pytest
from rich.console import Console
from unittest.mock import patch

from unit_tutor import app
from unit_tutor.app import (
    SessionExitRequested, cmd_badges, cmd_convert, cmd_reset, cmd_stats,
    run_game_session, run_practice_session, session_int_prompt, session_prompt,
)
from unit_tutor.models import Category
from unit_tutor.session import GameSession, PracticeSession


@pytest.fixture
def output(monkeypatch):
    buf = io.StringIO()
    monkeypatch.setattr(app, "console", Console(file=buf, width=120))
    return buf


def test_session_prompt_raises_on_q():
    with patch("unit_tutor.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("unit_tutor.app.Prompt.ask", return_value="MENU "):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("unit_tutor.app.Prompt.ask", return_value="12.5"):
        assert session_prompt("test prompt") == "12.5"


def test_session_int_prompt():
    with patch("unit_tutor.app.Prompt.ask", return_value="3"):
        assert session_int_prompt("Answer", choices=["1", "2", "3", "4"]) == 3
    with patch("unit_tutor.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_int_prompt("Answer", choices=["1", "2", "3", "4"])


def test_convert_with_preset(output):
    with patch("unit_tutor.app.Prompt.ask", side_effect=["length", "1"]):
        cmd_convert()
    assert "1 km = 1000 m" in output.getvalue()


def test_convert_typed_value(output):
    with patch("unit_tutor.app.Prompt.ask", side_effect=["temperature", "", "°C", "°F", "100"]):
        cmd_convert()
    assert "100 °C = 212.00 °F" in output.getvalue()


def test_convert_same_unit_switches_target(output):
    with patch("unit_tutor.app.Prompt.ask", side_effect=["mass", "", "kg", "kg", "2"]):
        cmd_convert()
    text = output.getvalue()
    assert "Converting to Grams instead" in text
    assert "2 kg = 2000 g" in text


def test_convert_reports_errors(output):
    with patch("unit_tutor.app.Prompt.ask", side_effect=["speed", "", "mph", "km/h", "-5"]):
        cmd_convert()
    assert "Value cannot be negative" in output.getvalue()


def test_run_practice_session(output, tracker, scheduler, rng, clock):
    practice = PracticeSession(tracker, scheduler, rng=rng, clock=clock)

    def answer(prompt, **kwargs):
        return repr(practice.current_task.correct_answer)

    with patch("unit_tutor.app.Prompt.ask", side_effect=answer):
        run_practice_session(practice, scheduler)
    assert tracker.stats.total_tasks_completed == 8
    assert tracker.stats.current_streak == 1
    assert "Set complete: 8/8" in output.getvalue()


def test_practice_session_exit(output, tracker, scheduler, rng):
    practice = PracticeSession(tracker, scheduler, rng=rng)
    with patch("unit_tutor.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            run_practice_session(practice, scheduler)
    assert tracker.stats.total_tasks_completed == 0


def test_run_game_session_until_time_runs_out(output, tracker, scheduler, rng):
    game = GameSession(tracker, scheduler, rng=rng)

    def answer(prompt, **kwargs):
        scheduler.advance(5)
        return "1"

    with patch("unit_tutor.app.Prompt.ask", side_effect=answer):
        run_game_session(game, scheduler, pause=0)
    assert game.engine.is_ended
    text = output.getvalue()
    assert "Time's up!" in text
    assert "Game Over" in text


def test_game_session_exit_ends_game(output, tracker, scheduler, rng):
    game = GameSession(tracker, scheduler, rng=rng)
    with patch("unit_tutor.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            run_game_session(game, scheduler, pause=0)
    assert game.engine.is_ended
    assert scheduler.pending == 0


def test_stats_and_badges_render(output, tracker):
    tracker.record_task_completion(True, Category.VOLUME)
    tracker.record_game_score(16)
    cmd_stats(tracker)
    cmd_badges(tracker)
    text = output.getvalue()
    assert "Category Breakdown" in text
    assert "16 points" in text
    assert "Game Champion" in text
    assert "1/8 badges earned" in text


def test_cmd_reset(output, tracker):
    tracker.record_game_score(16)
    with patch("unit_tutor.app.Confirm.ask", return_value=True):
        cmd_reset(tracker)
    assert tracker.stats.best_game_score == 0
    assert not tracker.badge_state("game_champion")


def test_cmd_reset_declined(output, tracker):
    tracker.record_game_score(16)
    with patch("unit_tutor.app.Confirm.ask", return_value=False):
        cmd_reset(tracker)
    assert tracker.stats.best_game_score == 16


def test_badges_list_unlocked_first(output, tracker):
    tracker.record_game_score(15)
    cmd_badges(tracker)
    text = output.getvalue()
    assert text.index("Game Champion") < text.index("Quick Thinker")

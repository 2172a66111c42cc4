"""Display strings and tables for the progress dashboard."""
from datetime import datetime

from unit_tutor.catalog import BADGES
from unit_tutor.models import Category, Stats


def get_accuracy_label(score: float) -> str:
    if score >= 90:
        return "MASTERED"
    elif score >= 75:
        return "SOLID"
    elif score >= 50:
        return "NEEDS WORK"
    return "KEEP GOING"


def get_accuracy_color(score: float) -> str:
    if score >= 90:
        return "green"
    elif score >= 75:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def streak_text(stats: Stats) -> str:
    if stats.current_streak == 0:
        return "No current streak"
    elif stats.current_streak == 1:
        return "1 day"
    return f"{stats.current_streak} days"


def best_score_text(stats: Stats) -> str:
    if stats.best_game_score == 0:
        return "No games played"
    return f"{stats.best_game_score} points"


def fastest_time_text(stats: Stats) -> str:
    if stats.fastest_daily_set_time == 0:
        return "No practice completed"
    minutes, seconds = divmod(int(stats.fastest_daily_set_time), 60)
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def overall_accuracy_text(stats: Stats) -> str:
    if stats.total_tasks_completed == 0:
        return "No tasks completed"
    return f"{int(stats.overall_accuracy * 100)}%"


def total_tasks_text(stats: Stats) -> str:
    if stats.total_tasks_completed == 0:
        return "No tasks completed"
    elif stats.total_tasks_completed == 1:
        return "1 task completed"
    return f"{stats.total_tasks_completed} tasks completed"


def badge_progress(stats: Stats) -> float:
    total = len(BADGES)
    return len(stats.unlocked_badges) / total if total else 0.0


def badge_progress_text(stats: Stats) -> str:
    return f"{len(stats.unlocked_badges)}/{len(BADGES)} badges earned"


def badge_rows(size: int = 2) -> list[list]:
    """Catalog badges grouped into display rows."""
    return [list(BADGES[i:i + size]) for i in range(0, len(BADGES), size)]


def badge_state(stats: Stats, badge_id: str) -> str:
    badge = stats.badge(badge_id)
    return "unlocked" if badge and badge.is_unlocked else "locked"


def format_date(value: datetime) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def formatted_unlock_date(stats: Stats, badge_id: str) -> str:
    badge = stats.badge(badge_id)
    if badge is None or badge.unlocked_date is None:
        return ""
    return f"Unlocked {format_date(badge.unlocked_date)}"


def get_category_scores(stats: Stats) -> list[dict]:
    results = []
    for category in Category:
        cs = stats.category_stats.get(category.value)
        total = cs.total_tasks if cs else 0
        correct = cs.correct_tasks if cs else 0
        score = (correct / total * 100) if total else 0.0
        results.append({
            "category": category.value,
            "total": total,
            "correct": correct,
            "score": round(score, 1),
            "label": get_accuracy_label(score),
        })
    return results

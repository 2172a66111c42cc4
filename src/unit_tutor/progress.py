"""Streaks, totals and badge unlocks for the saved progress record."""
import json
import logging
import threading
from datetime import datetime
from typing import Callable

from unit_tutor.models import Badge, Category, CategoryStats, Stats

logger = logging.getLogger(__name__)

STATS_KEY = "unit_tutor_stats"


def _thermo_tamer(stats: Stats) -> bool:
    temp = stats.category_stats.get(Category.TEMPERATURE.value)
    return temp is not None and temp.accuracy == 1.0 and temp.total_tasks >= 3


def _volume_virtuoso(stats: Stats) -> bool:
    volume = stats.category_stats.get(Category.VOLUME.value)
    return volume is not None and volume.correct_tasks >= 5


BADGE_RULES = {
    "quick_thinker": lambda s: 0 < s.fastest_daily_set_time < 60,
    "speed_devil": lambda s: 0 < s.fastest_daily_set_time < 90,
    "thermo_tamer": _thermo_tamer,
    "volume_virtuoso": _volume_virtuoso,
    "streak_starter": lambda s: s.current_streak >= 3,
    "streak_master": lambda s: s.current_streak >= 7,
    "game_champion": lambda s: s.best_game_score >= 15,
    "precision_pro": lambda s: s.consecutive_correct >= 10,
}


def should_unlock(badge: Badge, stats: Stats) -> bool:
    rule = BADGE_RULES.get(badge.id)
    return rule(stats) if rule else False


def encode_stats(stats: Stats) -> bytes:
    return json.dumps(stats.to_dict()).encode("utf-8")


def decode_stats(blob: bytes) -> Stats:
    return Stats.from_dict(json.loads(blob.decode("utf-8")))


class ProgressTracker:
    """Owns the Stats record. Every mutation re-checks badges and saves.

    ``store`` is anything with ``load(key)`` and ``save(key, blob)``. Any storage
    error is logged and ignored; the in-memory record stays authoritative.
    """

    def __init__(self, store, key: str = STATS_KEY, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.key = key
        self.clock = clock
        self.stats = Stats()
        self._lock = threading.RLock()

    def load(self) -> Stats:
        try:
            blob = self.store.load(self.key)
        except Exception:
            logger.exception("Could not read saved progress, starting fresh")
            blob = None
        if blob is not None:
            try:
                self.stats = decode_stats(blob)
            except (ValueError, TypeError, KeyError, AttributeError):
                logger.warning("Saved progress is unreadable, starting fresh")
                self.stats = Stats()
        return self.stats

    def save(self) -> None:
        try:
            self.store.save(self.key, encode_stats(self.stats))
        except Exception:
            logger.exception("Could not save progress")

    @property
    def overall_accuracy(self) -> float:
        return self.stats.overall_accuracy

    @property
    def unlocked_badges(self) -> list:
        return self.stats.unlocked_badges

    def badge_state(self, badge_id: str) -> bool:
        badge = self.stats.badge(badge_id)
        return bool(badge and badge.is_unlocked)

    def update_streak(self) -> list:
        """Count today toward the daily streak."""
        with self._lock:
            now = self.clock()
            last = self.stats.last_practice_date
            if last is None:
                self.stats.current_streak = 1
            else:
                days_between = (now.date() - last.date()).days
                if days_between == 1:
                    self.stats.current_streak += 1
                elif days_between > 1:
                    self.stats.current_streak = 1
            self.stats.last_practice_date = now
            return self._commit()

    def record_task_completion(self, is_correct: bool, category: Category) -> list:
        with self._lock:
            self.stats.total_tasks_completed += 1
            if is_correct:
                self.stats.total_correct_answers += 1
                self.stats.consecutive_correct += 1
            else:
                self.stats.consecutive_correct = 0
            key = Category(category).value
            if key not in self.stats.category_stats:
                self.stats.category_stats[key] = CategoryStats()
            self.stats.category_stats[key].record_task(is_correct)
            return self._commit()

    def record_game_score(self, score: int) -> list:
        with self._lock:
            if score > self.stats.best_game_score:
                self.stats.best_game_score = score
            return self._commit()

    def record_daily_set_time(self, seconds: float) -> list:
        with self._lock:
            fastest = self.stats.fastest_daily_set_time
            if seconds > 0 and (fastest == 0 or seconds < fastest):
                self.stats.fastest_daily_set_time = seconds
            return self._commit()

    def reset_all_stats(self) -> None:
        with self._lock:
            self.stats.current_streak = 0
            self.stats.last_practice_date = None
            self.stats.total_tasks_completed = 0
            self.stats.total_correct_answers = 0
            self.stats.best_game_score = 0
            self.stats.fastest_daily_set_time = 0.0
            self.stats.consecutive_correct = 0
            self.stats.category_stats = {}
            for badge in self.stats.badges:
                badge.lock()
            logger.info("All progress reset")
            self.save()

    def check_badge_unlocks(self) -> list:
        """Unlock every locked badge whose rule now holds. Returns the new unlocks."""
        unlocked = []
        for badge in self.stats.badges:
            if not badge.is_unlocked and should_unlock(badge, self.stats):
                badge.unlock(self.clock())
                logger.info("Badge unlocked: %s", badge.name)
                unlocked.append(badge)
        return unlocked

    def _commit(self) -> list:
        unlocked = self.check_badge_unlocks()
        self.save()
        return unlocked

"""Runtime configuration."""
import os
from dataclasses import dataclass

from unit_tutor.db import DEFAULT_DB_PATH
from unit_tutor.progress import STATS_KEY
from unit_tutor.session import DEFAULT_TIPS


@dataclass(frozen=True)
class TutorConfig:
    """Immutable settings shared by the CLI and the session controllers."""

    db_path: str = DEFAULT_DB_PATH
    stats_key: str = STATS_KEY

    daily_task_count: int = 8
    explanation_delay: float = 0.5  # Seconds before the practice explanation shows

    game_duration: int = 60
    answer_delay: float = 0.3  # Seconds between an answer and the next question
    feedback_reset_delay: float = 1.2  # Seconds the answer highlight stays up

    log_level: str = "WARNING"
    quick_tips: tuple = DEFAULT_TIPS

    @classmethod
    def from_env(cls) -> "TutorConfig":
        return cls(
            db_path=os.environ.get("UNIT_TUTOR_DB", DEFAULT_DB_PATH),
            log_level=os.environ.get("UNIT_TUTOR_LOG_LEVEL", "WARNING").upper(),
        )

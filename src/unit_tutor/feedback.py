"""Haptic / notification feedback sinks."""
from enum import Enum

from rich.console import Console


class FeedbackStyle(Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    SUCCESS = "success"
    WARNING = "warning"


class NullFeedback:
    """Feedback that goes nowhere (testing implementation)."""

    def signal(self, style: FeedbackStyle) -> None:
        pass


class RecordingFeedback:
    """Keeps every signal it receives, for assertions."""

    def __init__(self):
        self.signals = []

    def signal(self, style: FeedbackStyle) -> None:
        self.signals.append(style)


class ConsoleFeedback:
    """Terminal stand-in for haptics: a short coloured marker."""

    MARKERS = {
        FeedbackStyle.LIGHT: "[green]•[/green]",
        FeedbackStyle.MEDIUM: "[red]•[/red]",
        FeedbackStyle.SUCCESS: "[bold green]✓[/bold green]",
        FeedbackStyle.WARNING: "[yellow]![/yellow]",
    }

    def __init__(self, console: Console):
        self.console = console

    def signal(self, style: FeedbackStyle) -> None:
        self.console.print(self.MARKERS[style], end=" ")

"""Interactive CLI application."""
import logging
import time

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from unit_tutor.catalog import PRESETS, default_pair, find_unit, other_unit, units_for
from unit_tutor.config import TutorConfig
from unit_tutor.converter import convert_text
from unit_tutor.dashboard import (
    badge_progress_text, badge_state, best_score_text, fastest_time_text,
    formatted_unlock_date, get_accuracy_color, get_category_scores,
    overall_accuracy_text, streak_text, total_tasks_text,
)
from unit_tutor.db import SqliteStore, init_db
from unit_tutor.feedback import ConsoleFeedback
from unit_tutor.models import Category
from unit_tutor.practice import GenerationExhausted
from unit_tutor.progress import ProgressTracker
from unit_tutor.scheduler import EventQueue
from unit_tutor.session import GameSession, PracticeSession

console = Console()
logger = logging.getLogger(__name__)

EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """Raised when the user leaves a session with 'q' or 'menu'."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list) -> int:
    answer = session_prompt(prompt, choices=choices + list(EXIT_WORDS), show_choices=False)
    return int(answer)


def show_welcome():
    console.print(Panel(
        "[bold]Unit Tutor[/bold]\n[dim]Convert, practice and race the clock[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("convert", "Convert a value"),
        ("practice", "Daily practice set"),
        ("dash", "Unit Dash: 60 second quiz"),
        ("stats", "Streak, accuracy and records"),
        ("badges", "Badge collection"),
        ("reset", "Reset all progress"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def pick_category() -> Category:
    names = [c.value.lower() for c in Category]
    choice = session_prompt("Category", choices=names, default="length")
    return Category(choice.capitalize())


def cmd_convert():
    category = pick_category()
    from_unit, to_unit = default_pair(category)
    presets = PRESETS[category]
    console.print("\n[bold]Presets:[/bold]")
    for i, preset in enumerate(presets, 1):
        console.print(f"  [cyan]{i})[/cyan] {preset.description}")
    symbols = [u.symbol for u in units_for(category)]
    console.print(f"[dim]Units: {', '.join(symbols)}[/dim]")

    choice = session_prompt("Preset number, or Enter to type your own", default="")
    if choice.strip() in [str(i) for i in range(1, len(presets) + 1)]:
        preset = presets[int(choice) - 1]
        text = preset.value
        from_unit = find_unit(preset.from_symbol, category)
        to_unit = find_unit(preset.to_symbol, category)
    else:
        from_unit = find_unit(session_prompt("From", choices=symbols, default=from_unit.symbol), category)
        to_unit = find_unit(session_prompt("To", choices=symbols, default=to_unit.symbol), category)
        if to_unit == from_unit:
            to_unit = other_unit(from_unit)
            console.print(f"[dim]Converting to {to_unit.name} instead[/dim]")
        text = session_prompt(f"Value in {from_unit.symbol}")

    result = convert_text(text, from_unit, to_unit)
    if not result.ok:
        console.print(f"[red]{result.error}[/red]")
        return
    console.print(Panel(
        f"[bold]{text.strip()} {from_unit.symbol}[/bold] = [bold green]{result.text}[/bold green]",
        border_style="green",
    ))


def run_practice_session(practice: PracticeSession, scheduler: EventQueue) -> None:
    try:
        practice.start()
    except GenerationExhausted as e:
        console.print(f"[yellow]Could not build a practice set: {e}[/yellow]")
        return
    total = len(practice.session.tasks)
    console.print(f"\n[bold]Daily Practice[/bold] — {total} tasks [dim](q to leave)[/dim]\n")
    try:
        while True:
            task = practice.current_task
            console.print(Panel(
                task.question,
                title=f"Task {practice.index + 1}/{total} · {task.category.value}",
                border_style="cyan",
            ))
            while True:
                result = practice.submit(session_prompt("Your answer"))
                if result.error:
                    console.print(f"[red]{result.error}[/red]")
                    continue
                break
            if result.correct:
                console.print(f"[green]{practice.result_message}[/green]")
            else:
                console.print(f"[red]{practice.result_message}[/red] "
                              f"Answer: [green]{practice.formatted_correct_answer}[/green]")
            scheduler.run_due()
            console.print(f"[dim]{task.explanation}[/dim]\n")
            for badge in result.new_badges:
                console.print(f"[bold yellow]Badge unlocked: {badge.name}[/bold yellow] — {badge.description}")
            if result.session_complete:
                session = practice.session
                console.print(
                    f"[bold]Set complete: {session.correct_answers}/{total} "
                    f"({session.accuracy * 100:.0f}%) in {session.duration():.0f}s[/bold]"
                )
                break
            practice.next_task()
    finally:
        practice.close()


def run_game_session(game: GameSession, scheduler: EventQueue, pause: float) -> None:
    game.start()
    engine = game.engine
    console.print(f"\n[bold]Unit Dash[/bold] — {engine.duration}s on the clock [dim](q to stop)[/dim]\n")
    try:
        while engine.is_active:
            question = engine.current_question
            color = {"critical": "red", "warning": "yellow"}.get(game.timer_level, "white")
            console.print(
                f"[{color}]{game.format_time(engine.time_remaining)}[/{color}]  "
                f"Score [bold]{engine.score}[/bold]  Q{game.current_question_number}"
            )
            console.print(f"[bold]{question.question}[/bold]")
            for i, option in enumerate(question.formatted_options, 1):
                console.print(f"  [cyan]{i})[/cyan] {option}")
            pick = session_int_prompt("Answer", choices=["1", "2", "3", "4"])
            scheduler.run_due()
            if not engine.is_active:
                console.print("[yellow]Time's up![/yellow]")
                break
            correct = game.select_answer(question.options[pick - 1])
            if correct is None:
                continue
            if correct:
                console.print("[green]Correct![/green]")
            else:
                console.print(f"[red]Incorrect.[/red] Answer: [green]{question.formatted_correct_answer}[/green]")
                console.print(f"[dim]{question.explanation}[/dim]")
            time.sleep(pause)
            scheduler.run_due()
    finally:
        game.end()

    console.print(Panel(
        f"[bold]{game.end_message}[/bold]\nScore: {engine.score}  "
        f"Accuracy: {game.accuracy_percentage}%\n[dim]{game.quick_tip()}[/dim]",
        title="Game Over", border_style="magenta",
    ))
    for badge in game.new_badges:
        console.print(f"[bold yellow]Badge unlocked: {badge.name}[/bold yellow] — {badge.description}")


def cmd_stats(tracker: ProgressTracker):
    stats = tracker.stats
    console.print(Panel(
        f"Streak: [bold]{streak_text(stats)}[/bold]\n"
        f"Accuracy: [bold]{overall_accuracy_text(stats)}[/bold]  ({total_tasks_text(stats)})\n"
        f"Best Unit Dash: [bold]{best_score_text(stats)}[/bold]\n"
        f"Fastest daily set: [bold]{fastest_time_text(stats)}[/bold]\n"
        f"{badge_progress_text(stats)}",
        title="Your Progress", border_style="blue",
    ))
    table = Table(title="Category Breakdown")
    table.add_column("Category", style="cyan")
    table.add_column("Tasks", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Status")
    for row in get_category_scores(stats):
        color = get_accuracy_color(row["score"])
        table.add_row(
            row["category"], str(row["total"]), f"{row['score']}%",
            f"[{color}]{row['label']}[/{color}]" if row["total"] else "[dim]-[/dim]",
        )
    console.print(table)


def cmd_badges(tracker: ProgressTracker):
    stats = tracker.stats
    table = Table(title=badge_progress_text(stats))
    table.add_column("Badge")
    table.add_column("Requirement")
    table.add_column("Status")
    for badge in stats.unlocked_badges + stats.locked_badges:
        if badge_state(stats, badge.id) == "unlocked":
            status = f"[green]{formatted_unlock_date(stats, badge.id)}[/green]"
            name = f"[bold yellow]{badge.name}[/bold yellow]"
        else:
            status = "[dim]Locked[/dim]"
            name = f"[dim]{badge.name}[/dim]"
        table.add_row(name, badge.requirement, status)
    console.print(table)


def cmd_reset(tracker: ProgressTracker):
    if Confirm.ask("[red]Reset all progress and badges?[/red]", default=False):
        tracker.reset_all_stats()
        console.print("[yellow]Progress reset.[/yellow]")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main():
    config = TutorConfig.from_env()
    setup_logging(config.log_level)
    init_db(config.db_path)
    tracker = ProgressTracker(SqliteStore(config.db_path), key=config.stats_key)
    tracker.load()
    scheduler = EventQueue(clock=time.monotonic)
    feedback = ConsoleFeedback(console)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="practice").strip().lower()
        try:
            if choice == "convert":
                cmd_convert()
            elif choice == "practice":
                practice = PracticeSession(
                    tracker, scheduler, feedback=feedback,
                    task_count=config.daily_task_count,
                    explanation_delay=config.explanation_delay,
                )
                run_practice_session(practice, scheduler)
            elif choice == "dash":
                game = GameSession(
                    tracker, scheduler, feedback=feedback,
                    duration=config.game_duration, answer_delay=config.answer_delay,
                    feedback_reset_delay=config.feedback_reset_delay, tips=config.quick_tips,
                )
                run_game_session(game, scheduler, config.feedback_reset_delay)
            elif choice == "stats":
                cmd_stats(tracker)
            elif choice == "badges":
                cmd_badges(tracker)
            elif choice == "reset":
                cmd_reset(tracker)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]See you tomorrow, keep the streak alive![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            console.print("[dim]Back to the menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Command %s failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()

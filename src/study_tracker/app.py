"""Interactive CLI application."""
from datetime import datetime, timedelta
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from study_tracker.config import Settings
from study_tracker.engine import StudyEngine
from study_tracker.errors import PersistenceError, StudyEngineError
from study_tracker.importer import import_deck, import_notes
from study_tracker.logging_config import setup_logging
from study_tracker.mastery import get_mastery_color, get_mastery_label
from study_tracker.models import GOAL_METRICS, GOAL_TYPES
from study_tracker.recommend import get_weak_topics
from study_tracker.storage import SqliteStore

console = Console()

EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """User asked to leave the current drill."""


def warn_unsaved(error: PersistenceError) -> None:
    console.print(f"[yellow]Warning: progress not saved ({error}). It will be retried on the next change.[/yellow]")


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_confirm(prompt: str) -> bool:
    answer = session_prompt(f"{prompt} [y/n]", choices=["y", "n", "q", "menu"], show_choices=False)
    return answer.strip().lower() == "y"


def show_welcome():
    console.print(Panel(
        "[bold]Study Tracker[/bold]\n[dim]Exam preparation progress[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu(engine: StudyEngine):
    active = engine.active_session()
    if active:
        console.print(f"\n[green]Active session:[/green] {active.topic} "
                      f"({active.questions_answered} answered, {active.flashcards_reviewed} cards)")
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("start", "Start a study session"),
        ("quiz", "Self-graded quiz on a topic"),
        ("flashcards", "Drill due flashcards"),
        ("note", "Write a note"),
        ("end", "End the current session"),
        ("dashboard", "Mastery, streak + focus areas"),
        ("goal", "Set a study goal"),
        ("import", "Add a deck or study material"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def ask_topic(engine: StudyEngine) -> str:
    """Ask for a topic, defaulting to the active session or the weakest topic."""
    active = engine.active_session()
    recommended = engine.recommended_topics(limit=1)
    default = active.topic if active else (recommended[0] if recommended else None)
    if default:
        return Prompt.ask("Topic", default=default).strip()
    return Prompt.ask("Topic").strip()


def run_flashcard_session(engine: StudyEngine, cards: list) -> tuple[int, int]:
    if not cards:
        console.print("[yellow]No flashcards due right now![/yellow]")
        return 0, 0
    correct = 0
    reviewed = 0
    console.print(f"\n[bold]Flashcard Session[/bold]: {len(cards)} cards [dim](q to stop)[/dim]\n")
    for i, card in enumerate(cards, 1):
        console.print(Panel(card.front, title=f"Card {i}/{len(cards)} · {card.topic}", border_style="cyan"))
        session_prompt("[dim]Press Enter to reveal answer[/dim]", default="", show_default=False)
        console.print(Panel(card.back, border_style="green"))
        if card.explanation:
            console.print(f"[dim]{card.explanation}[/dim]")
        got_it = session_confirm("Did you know it?")
        updated = engine.review_flashcard(card.id, got_it)
        reviewed += 1
        correct += int(got_it)
        console.print(f"[dim]Next review: {updated.next_review:%Y-%m-%d %H:%M}[/dim]\n")
    return correct, reviewed


def run_quiz_session(engine: StudyEngine, topic: str, cards: list) -> tuple[int, int]:
    if not cards:
        console.print(f"[yellow]No questions available for {topic}![/yellow]")
        return 0, 0
    correct = 0
    answered = 0
    console.print(f"\n[bold]Quiz[/bold]: {topic}, {len(cards)} questions [dim](q to stop)[/dim]\n")
    try:
        for i, card in enumerate(cards, 1):
            console.print(f"[bold]Q{i}.[/bold] {card.front}\n")
            session_prompt("Your answer")
            console.print(f"Answer: [green]{card.back}[/green]")
            is_correct = session_confirm("Was your answer correct?")
            answered += 1
            correct += int(is_correct)
            try:
                engine.submit_answer(topic, is_correct)
            except PersistenceError as e:
                warn_unsaved(e)
            console.print()
    finally:
        if answered:
            try:
                engine.record_quiz_score(topic, correct, answered)
            except PersistenceError as e:
                warn_unsaved(e)
            console.print(f"[bold]Score: {correct}/{answered} ({correct/answered*100:.0f}%)[/bold]\n")
    return correct, answered


def cmd_start(engine: StudyEngine):
    topic = ask_topic(engine)
    engine.start_session(topic)
    streak = engine.streak()
    console.print(f"[green]Session started on {topic}.[/green] Streak: [bold]{streak.current}[/bold] day(s)")


def cmd_quiz(engine: StudyEngine):
    topic = ask_topic(engine)
    count = IntPrompt.ask("Number of questions", default=10)
    cards = engine.flashcards(topic)[:count]
    try:
        run_quiz_session(engine, topic, cards)
    except SessionExitRequested:
        console.print("[dim]Quiz stopped.[/dim]")


def cmd_flashcards(engine: StudyEngine):
    console.print("\n[bold]Flashcard Drill[/bold]")
    active = engine.active_session()
    cards = engine.due_flashcards(topic=active.topic if active else None, limit=15)
    if active and not cards:
        cards = engine.due_flashcards(limit=15)
    try:
        run_flashcard_session(engine, cards)
    except SessionExitRequested:
        console.print("[dim]Drill stopped.[/dim]")


def cmd_note(engine: StudyEngine):
    topic = ask_topic(engine)
    title = Prompt.ask("Title")
    content = Prompt.ask("Content")
    tags = [t.strip() for t in Prompt.ask("Tags (comma separated)", default="").split(",") if t.strip()]
    engine.add_note(topic, title, content, tags)
    console.print("[green]Note saved.[/green]")


def cmd_end(engine: StudyEngine):
    session = engine.end_session()
    minutes = session.duration_seconds / 60
    console.print(Panel(
        f"Topic: [bold]{session.topic}[/bold]\n"
        f"Duration: {minutes:.1f} min\n"
        f"Questions: {session.questions_answered} ({session.accuracy}% correct)\n"
        f"Flashcards: {session.flashcards_reviewed}  |  Notes: {session.notes_created}",
        title="Session Complete", border_style="green",
    ))


def cmd_dashboard(engine: StudyEngine):
    snap = engine.snapshot()
    progress = snap.progress
    streak = snap.streak
    console.print(Panel(
        f"[bold]Streak: {streak.current} day(s)[/bold] (longest {streak.longest})  |  "
        f"Study time: {snap.total_study_time / 3600:.1f} h  |  Sessions: {len(snap.session_history)}",
        title="Study Dashboard", border_style="blue",
    ))
    console.print(f"\n  Overall accuracy: [bold]{progress.accuracy}%[/bold] "
                  f"({progress.correct_answers}/{progress.total_questions})  |  "
                  f"Due flashcards: [bold]{snap.due_flashcards}[/bold]  |  Notes: {snap.notes}\n")

    if progress.topics_mastery:
        table = Table(title="Topic Mastery")
        table.add_column("Topic", style="cyan")
        table.add_column("Score", justify="right")
        table.add_column("Answered", justify="right")
        table.add_column("Status")
        for topic, mastery in sorted(progress.topics_mastery.items()):
            percent = mastery.mastery_percent
            color = get_mastery_color(percent)
            table.add_row(topic, f"{percent:.1f}%", str(mastery.total),
                          f"[{color}]{get_mastery_label(percent)}[/{color}]")
        console.print(table)

    weak = get_weak_topics(progress)
    if weak:
        console.print("\n[bold]Weak Topics:[/bold]")
        for w in weak[:5]:
            console.print(f"  [red]{w['score']}%[/red] {w['topic']} ({w['correct']}/{w['total']})")

    focus = engine.recommended_topics(limit=3)
    if focus:
        console.print(f"\n  [yellow]Focus areas: {', '.join(focus)}[/yellow]")

    if snap.goals:
        goals = Table(title="Goals")
        goals.add_column("Goal")
        goals.add_column("Progress", justify="right")
        goals.add_column("Deadline")
        for goal in snap.goals:
            status = "[green]Done[/green]" if goal.completed else f"{goal.progress}%"
            goals.add_row(f"{goal.type}: {goal.metric} {goal.current}/{goal.target}", status,
                          f"{goal.deadline:%Y-%m-%d}")
        console.print(goals)


def cmd_goal(engine: StudyEngine):
    metric = Prompt.ask("Metric", choices=list(GOAL_METRICS), default="questions")
    target = IntPrompt.ask("Target")
    goal_type = Prompt.ask("Type", choices=list(GOAL_TYPES), default="weekly")
    days = IntPrompt.ask("Days until deadline", default=7)
    engine.set_goal(metric, target, datetime.now() + timedelta(days=days), goal_type=goal_type)
    console.print("[green]Goal set.[/green]")


def cmd_import(engine: StudyEngine):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    kind = Prompt.ask("Import as", choices=["deck", "notes"], default="deck")
    if kind == "deck":
        result = import_deck(engine, file_path)
        console.print(f"[green]Imported {result['count']} cards from {result['filename']} "
                      f"({', '.join(result['topics'])})[/green]")
    else:
        result = import_notes(engine, file_path)
        console.print(f"[green]Imported {result['filename']} ({result['length']} chars) → {result['topic']}[/green]")


COMMANDS = {
    "start": cmd_start,
    "quiz": cmd_quiz,
    "flashcards": cmd_flashcards,
    "note": cmd_note,
    "end": cmd_end,
    "dashboard": cmd_dashboard,
    "goal": cmd_goal,
    "import": cmd_import,
}


def run_command(engine: StudyEngine, command) -> None:
    """Run a command, reporting failures without leaving the shell."""
    try:
        command(engine)
    except PersistenceError as e:
        warn_unsaved(e)
    except StudyEngineError as e:
        console.print(f"[red]{e}[/red]")
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")


def dispatch(engine: StudyEngine, choice: str) -> bool:
    """Run one command. Returns False when the user wants to quit."""
    if choice in ("quit", "exit", "q"):
        if engine.active_session():
            run_command(engine, cmd_end)
        console.print("[dim]Good luck on your exam![/dim]")
        return False
    command = COMMANDS.get(choice)
    if command is None:
        console.print("[red]Unknown command. Try again.[/red]")
        return True
    run_command(engine, command)
    return True


def main():
    settings = Settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE, console=console)
    store = SqliteStore(settings.DB_PATH, settings.USER_ID)
    engine = StudyEngine.load(store)

    show_welcome()

    while True:
        show_menu(engine)
        choice = Prompt.ask("\n[bold]>[/bold]", default="dashboard").strip().lower()
        try:
            if not dispatch(engine, choice):
                break
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()

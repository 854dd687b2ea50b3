"""CLI commands for the mock test engine.

Commands:
- init-db: Create the database schema
- seed: Import a question bank file
- add-learner: Register a learner (free or premium)
- chapters: List the chapters of a subject
- exam: Assemble a paper for a learner
- submit: Grade and record an answers file
- stats: Per-question response-time statistics for a subject
- progress: A learner's progress summary
"""

import asyncio
import json
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mocktest.config.app_config import ConfigError, load_app_config
from mocktest.core.bank_importer import BankImportError, import_bank
from mocktest.core.composer import ExamCompositionError
from mocktest.core.entitlement import EntitlementDenied
from mocktest.core.exam_request import build_exam_request
from mocktest.core.exam_service import ExamService, LearnerNotFoundError
from mocktest.core.models import QuestionOutcome, Submission
from mocktest.db import learners_repository, questions_repository, subjects_repository
from mocktest.db.database import init_db
from mocktest.db.store import SqliteStore

app = typer.Typer(
    name="mocktest",
    help="Mock test engine: question banks, exam assembly and results.",
    no_args_is_help=True,
)

console = Console()


def _db_path() -> Path:
    override = os.environ.get("MOCKTEST_DB")
    if override:
        return Path(override)
    try:
        return load_app_config().db_path
    except ConfigError as e:
        console.print(f"[red]✗ Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1)


def _service() -> ExamService:
    config = load_app_config()
    return ExamService.from_store(SqliteStore(_db_path()), config.engine)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


@app.command(name="init-db")
def init_db_command() -> None:
    """Create the database schema (idempotent)."""
    path = init_db(_db_path())
    console.print(f"[green]✓ Database ready[/green] [dim]{path}[/dim]")


@app.command()
def seed(
    bank: str = typer.Argument(..., help="Path to a YAML or JSON question bank"),
) -> None:
    """Import subjects, chapters and questions from a bank file."""
    init_db(_db_path())
    bank_path = Path(bank).expanduser().resolve()

    try:
        result = import_bank(bank_path)
    except BankImportError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ {result.message}[/green]")
    for warning in result.warnings:
        console.print(f"  [yellow]• {warning}[/yellow]")


@app.command(name="add-learner")
def add_learner(
    learner_id: str = typer.Argument(..., help="Learner id"),
    premium: bool = typer.Option(False, "--premium", "-p", help="Premium tier"),
) -> None:
    """Register a learner, or change the tier of an existing one."""
    init_db(_db_path())

    if learners_repository.get_learner(learner_id) is not None:
        learners_repository.set_premium(learner_id, premium)
        console.print(f"[yellow]⚠ Learner {learner_id} exists, tier updated[/yellow]")
    else:
        learners_repository.insert_learner(learner_id, is_premium=premium)
        console.print(f"[green]✓ Learner {learner_id} registered[/green]")

    console.print(f"  [dim]tier:[/dim] {'premium' if premium else 'free'}")


@app.command()
def chapters(
    subject: str = typer.Argument(..., help="Subject slug"),
) -> None:
    """List the chapters of a subject (ids and slugs for --chapter)."""
    init_db(_db_path())
    found = subjects_repository.get_subject_by_slug(subject)
    if found is None:
        console.print(f"[red]✗ Subject not found: {subject}[/red]")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Slug", style="cyan")
    table.add_column("Name")
    table.add_column("Id", style="dim")
    for chapter in subjects_repository.list_chapters(found.id):
        table.add_row(chapter.slug, chapter.name, chapter.id)
    console.print(Panel(f"[bold]{found.name}[/bold]", expand=False))
    console.print(table)


@app.command()
def exam(
    learner_id: str = typer.Argument(..., help="Learner id"),
    subject: str | None = typer.Option(None, "--subject", "-s", help="Subject slug"),
    stream: str | None = typer.Option(None, "--stream", help="Stream name (e.g. PCM, PCB)"),
    chapter: str | None = typer.Option(None, "--chapter", "-c", help="Chapter id or slug"),
    difficulty: str = typer.Option("all", "--difficulty", "-d", help="all, easy, medium, hard"),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Write the paper as JSON to this path"
    ),
) -> None:
    """Assemble an exam paper for a learner."""
    try:
        request = build_exam_request(
            subject=subject, stream=stream, chapter_id=chapter, difficulty=difficulty
        )
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    service = _service()
    try:
        paper = asyncio.run(service.assemble_exam(learner_id, request))
    except EntitlementDenied as e:
        console.print(f"[yellow]⚠ {e} ({e.reason.value})[/yellow]")
        raise typer.Exit(code=1)
    except (LearnerNotFoundError, ExamCompositionError) as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="cyan", width=4)
    table.add_column("Subject", width=14)
    table.add_column("Difficulty", width=10)
    table.add_column("Question")
    for index, question in enumerate(paper, start=1):
        table.add_row(
            str(index),
            question.subject.name if question.subject else "",
            question.difficulty,
            _truncate(question.text),
        )
    console.print(table)
    console.print(f"\n[green]✓ {len(paper)} questions[/green]")

    if output:
        out_path = Path(output).expanduser()
        out_path.write_text(
            json.dumps([q.to_public_dict() for q in paper], indent=2), encoding="utf-8"
        )
        console.print(f"  [dim]paper:[/dim] {out_path}")


@app.command()
def submit(
    learner_id: str = typer.Argument(..., help="Learner id"),
    answers: str = typer.Argument(..., help="Path to answers JSON file"),
) -> None:
    """Grade an answers file and record the submission.

    The answers file should be a JSON with this structure:
    {
      "subject_id": null,
      "answers": [
        {"question_id": "...", "choice": 2, "time_taken": 31.5},
        {"question_id": "...", "choice": null}
      ]
    }
    """
    answers_path = Path(answers).expanduser().resolve()
    if not answers_path.exists():
        console.print(f"[red]✗ Answers file not found: {answers_path}[/red]")
        raise typer.Exit(code=1)

    try:
        data = json.loads(answers_path.read_text(encoding="utf-8"))
        items = data["answers"]
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        console.print(f"[red]✗ Invalid answers file: {e}[/red]")
        raise typer.Exit(code=1)

    if not items:
        console.print("[red]✗ Answers file has no answers[/red]")
        raise typer.Exit(code=1)

    service = _service()
    outcomes = []
    try:
        for item in items:
            question = questions_repository.get_question(item["question_id"])
            choice = item.get("choice")
            outcomes.append(
                QuestionOutcome(
                    question_id=item["question_id"],
                    time_taken=float(item.get("time_taken") or 0.0),
                    user_choice=choice,
                    is_correct=question is not None and choice == question.correct_option,
                )
            )
    except (KeyError, TypeError, ValueError) as e:
        console.print(f"[red]✗ Invalid answer entry: {e}[/red]")
        raise typer.Exit(code=1)

    submission = Submission(
        learner_id=learner_id,
        subject_id=data.get("subject_id"),
        score=sum(1 for o in outcomes if o.is_correct),
        total_questions=len(outcomes),
        questions=outcomes,
    )

    try:
        result = asyncio.run(service.submit_result(submission))
    except LearnerNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    saved = result.submission
    console.print(
        f"[green]✓ Recorded {saved.score}/{saved.total_questions} "
        f"({saved.percentage:.1f}%)[/green]"
    )
    console.print(f"  [dim]submission:[/dim] {saved.id}")
    for warning in result.warnings:
        console.print(f"  [yellow]• {warning}[/yellow]")


@app.command()
def stats(
    subject: str = typer.Argument(..., help="Subject slug"),
) -> None:
    """Show response-time statistics for every question of a subject."""
    init_db(_db_path())
    found = subjects_repository.get_subject_by_slug(subject)
    if found is None:
        console.print(f"[red]✗ Subject not found: {subject}[/red]")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Question")
    table.add_column("Difficulty", width=10)
    table.add_column("Attempts", justify="right", width=9)
    table.add_column("Avg time (s)", justify="right", width=12)
    for question in questions_repository.list_questions(found.id):
        table.add_row(
            _truncate(question.text, 50),
            question.difficulty,
            str(question.attempt_count),
            f"{question.average_time:.1f}" if question.attempt_count else "-",
        )
    console.print(Panel(f"[bold]{found.name}[/bold]", expand=False))
    console.print(table)


@app.command()
def progress(
    learner_id: str = typer.Argument(..., help="Learner id"),
) -> None:
    """Show a learner's progress summary."""
    summary = asyncio.run(_service().progress(learner_id))

    console.print(
        Panel(
            f"Tests: [bold]{summary.total_tests}[/bold] | "
            f"Average: [bold]{summary.avg_percentage}%[/bold] | "
            f"Level: [bold]{summary.level}[/bold]",
            title=f"[bold]{learner_id}[/bold]",
            expand=False,
        )
    )

    table = Table(show_header=True, header_style="bold")
    table.add_column("Subject", style="cyan", width=20)
    table.add_column("Tests", justify="right", width=6)
    table.add_column("Accuracy", justify="right", width=9)
    for row in summary.subject_progress:
        table.add_row(row.name, str(row.tests_count), f"{row.accuracy}%")
    console.print(table)


if __name__ == "__main__":
    app()

"""
quizloop debug CLI.

Admin/debug surface over the question type registry:

Usage:
    quizloop status                          # Registry counts
    quizloop types                           # Every registered type and its flags
    quizloop sample completion               # Print a sample question as JSON
    quizloop render question.json            # Render a question in the terminal
    quizloop grade question.json resp.json   # Evaluate and format a response
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from quizloop.config import configure_logging
from quizloop.evaluation import evaluate_response
from quizloop.presentation import RenderOutcome, render_question
from quizloop.registry import get_registry
from quizloop.results import format_result, format_structured_answer

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="quizloop",
    help="Question type registry debug tools",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Could not read {path}: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def status() -> None:
    """Show registry status counts."""
    table = Table(title="Question Type Registry", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in get_registry().get_status().items():
        table.add_row(key, str(value))
    console.print(table)


@app.command("types")
def list_types() -> None:
    """List every registered question type with its rollout flags."""
    registry = get_registry()
    table = Table(title="Registered Question Types")
    table.add_column("Type", style="cyan")
    table.add_column("Name")
    table.add_column("Enabled", justify="center")
    table.add_column("Production", justify="center")
    table.add_column("Complexity")

    for key, meta in registry.get_all_metadata().items():
        bundle = registry.get_bundle(key)
        table.add_row(
            key,
            meta.display_name,
            "[green]yes[/green]" if bundle.is_enabled else "[red]no[/red]",
            "[green]yes[/green]" if bundle.is_production else "[yellow]dev[/yellow]",
            meta.complexity,
        )
    console.print(table)


@app.command()
def sample(
    question_type: Annotated[str, typer.Argument(help="Question type tag (e.g., completion)")],
) -> None:
    """Print a sample question of the given type as JSON."""
    registry = get_registry()
    if not registry.is_registered(question_type):
        console.print(f"[red]Question type '{question_type}' is not registered[/red]")
        raise typer.Exit(1)

    factory = registry.get_bundle(question_type).sample_factory
    if factory is None:
        console.print(f"[yellow]No sample available for '{question_type}'[/yellow]")
        raise typer.Exit(1)
    console.print_json(json.dumps(factory()))


@app.command()
def render(
    question_file: Annotated[Path, typer.Argument(help="Question JSON file")],
) -> None:
    """Render a question the way a quiz session shows it."""
    outcome = render_question(_load_json(question_file), console)
    if outcome is not RenderOutcome.RENDERED:
        raise typer.Exit(2)


@app.command()
def grade(
    question_file: Annotated[Path, typer.Argument(help="Question JSON file")],
    response_file: Annotated[Path, typer.Argument(help="Response JSON file")],
    structured: Annotated[
        bool, typer.Option("--structured", "-s", help="Also print the persistence record")
    ] = False,
) -> None:
    """Evaluate a response and show the review-screen output."""
    question = _load_json(question_file)
    response = _load_json(response_file)

    evaluation = evaluate_response(question, response)
    display = format_result(question, response, evaluation)

    style = "green" if evaluation.is_correct else ("yellow" if evaluation.score > 0 else "red")
    body = Table.grid(padding=(0, 2))
    body.add_column(style="dim")
    body.add_column()
    body.add_row("Your answer", display.user_answer)
    body.add_row("Correct answer", display.correct_answer)
    body.add_row("Score", f"{evaluation.score:.0%}")
    if evaluation.partial_credit:
        body.add_row("Blanks", f"{evaluation.partial_credit.earned}/{evaluation.partial_credit.possible}")
    body.add_row("Explanation", display.explanation)
    console.print(Panel(body, title=f"[bold {style}]RESULT[/bold {style}]", border_style=style))

    if structured:
        record = format_structured_answer(question, response, evaluation)
        console.print_json(json.dumps(record.to_dict(), default=str))


def run() -> None:
    """CLI entry point."""
    configure_logging()
    app()


if __name__ == "__main__":
    run()

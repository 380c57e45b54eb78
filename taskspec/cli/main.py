"""Main CLI entry point using Typer."""

from pathlib import Path
from typing import NoReturn

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from taskspec import __version__
from taskspec.core import (
    CircularDependencyError,
    TaskSpecError,
    configure_logging,
    get_settings,
)
from taskspec.instructions import (
    ModelAlias,
    SpecDocument,
    SpecParser,
    TaskGraph,
    ValidationReport,
    task_to_prompt,
    to_markdown,
    to_prompt,
    validate,
    write_markdown,
)
from taskspec.instructions.models import (
    DEFAULT_COMPLETION_PROMISE,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_MAX_PARALLEL_WORKERS,
    DEFAULT_MODEL,
)
from taskspec.instructions.resolver import (
    BUDGET_CHAIN,
    COMPLETION_PROMISE_CHAIN,
    MAX_ITERATIONS_CHAIN,
    MODEL_CHAIN,
    PARALLEL_WORKERS_CHAIN,
    effective_max_iterations,
    effective_model,
    effective_task_max_iterations,
    effective_task_model,
    resolve,
)

app = typer.Typer(
    name="taskspec",
    help="taskspec - Markdown task specifications for autonomous coding loops",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]taskspec[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    taskspec - Parse, validate and compile task specifications.

    Spec files are Markdown documents with an objective, requirements,
    limits and an optional graph of sub-tasks.
    """
    configure_logging()


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(code=1)


def _load(path: Path) -> SpecDocument:
    try:
        return SpecParser.parse_file(path)
    except TaskSpecError as e:
        logger.debug(f"Load failed: {e}")
        _fail(str(e))


def _emit(text: str, output: Path | None) -> None:
    """Write raw text to a file, or to stdout without markup processing."""
    if output is None:
        typer.echo(text, nl=False)
        return
    try:
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        _fail(f"Failed to write {output}: {e}")
    console.print(f"[green]Saved to {escape(str(output))}[/green]")


def _report_table(report: ValidationReport) -> Table:
    table = Table(title="Validation Report")
    table.add_column("Severity", style="bold")
    table.add_column("Field", style="cyan")
    table.add_column("Message")

    for issue in report.errors:
        table.add_row("[red]error[/red]", escape(issue.field), escape(issue.message))
    for issue in report.warnings:
        table.add_row("[yellow]warning[/yellow]", escape(issue.field), escape(issue.message))

    return table


# =============================================================================
# COMMANDS
# =============================================================================


@app.command()
def generate(
    description: str = typer.Argument(..., help="Short description of the task"),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output spec file (defaults to TASKSPEC_DEFAULT_OUTPUT)",
    ),
    model: ModelAlias | None = typer.Option(
        None,
        "--model",
        "-m",
        case_sensitive=False,
        help="Model selector",
    ),
    scaffold: bool = typer.Option(
        False,
        "--scaffold",
        help="Add placeholder requirements, constraints and criteria",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing file",
    ),
) -> None:
    """
    Generate a spec file from a short description.

    Example:
        taskspec generate "Build a REST API with user authentication" -o api.md
    """
    path = output or Path(get_settings().taskspec_default_output)
    if path.exists() and not force:
        _fail(f"{path} already exists (use --force to overwrite)")

    doc = SpecParser.generate_spec(description, model=model, scaffold=scaffold)
    try:
        write_markdown(doc, path)
    except OSError as e:
        _fail(f"Failed to write {path}: {e}")

    console.print(f"[green]Spec written to {escape(str(path))}[/green]")


@app.command(name="validate")
def validate_command(
    path: Path = typer.Argument(..., help="Spec file to validate"),
    strict: bool | None = typer.Option(
        None,
        "--strict/--no-strict",
        help="Treat warnings as failures (defaults to TASKSPEC_STRICT)",
    ),
) -> None:
    """
    Validate a spec file.

    Exits with status 1 when errors are found, or when warnings are
    found in strict mode.
    """
    if strict is None:
        strict = get_settings().taskspec_strict

    doc = _load(path)
    report = validate(doc)

    if report.errors or report.warnings:
        console.print(_report_table(report))

    if not report.is_valid:
        console.print(f"[bold red]Spec is invalid: {len(report.errors)} error(s)[/bold red]")
        raise typer.Exit(code=1)

    if strict and report.has_warnings:
        console.print(
            f"[bold yellow]Spec has {len(report.warnings)} warning(s) (strict mode)[/bold yellow]"
        )
        raise typer.Exit(code=1)

    console.print("[bold green]Spec is valid[/bold green]")


@app.command()
def info(
    path: Path = typer.Argument(..., help="Spec file to inspect"),
) -> None:
    """
    Show a spec's fields, effective values and task graph.
    """
    doc = _load(path)

    console.print(
        Panel(
            f"[bold]Objective:[/bold]\n{escape(doc.objective) or '[dim]-[/dim]'}",
            title=f"[bold blue]{escape(doc.title) or 'Untitled'}[/bold blue]",
            border_style="blue",
        )
    )

    values = Table(title="Effective Values")
    values.add_column("Field", style="cyan")
    values.add_column("Value", style="bold")
    values.add_column("Source", style="dim")

    resolved = [
        ("model", resolve(doc, MODEL_CHAIN, DEFAULT_MODEL)),
        ("max iterations", resolve(doc, MAX_ITERATIONS_CHAIN, DEFAULT_MAX_ITERATIONS)),
        ("completion promise", resolve(doc, COMPLETION_PROMISE_CHAIN, DEFAULT_COMPLETION_PROMISE)),
        ("budget", resolve(doc, BUDGET_CHAIN, None)),
        ("parallel workers", resolve(doc, PARALLEL_WORKERS_CHAIN, DEFAULT_MAX_PARALLEL_WORKERS)),
    ]
    for name, item in resolved:
        value = "-" if item.value is None else str(item.value)
        values.add_row(name, escape(value), item.source)

    console.print(values)
    console.print(
        f"Requirements: {len(doc.requirements)}  "
        f"Constraints: {len(doc.constraints)}  "
        f"Tasks: {len(doc.tasks)}"
    )

    if not doc.tasks:
        return

    graph = TaskGraph.from_document(doc)
    wave_of: dict[str, int] = {}
    try:
        for i, wave in enumerate(graph.waves()):
            for task_id in wave:
                wave_of[task_id] = i
    except CircularDependencyError as e:
        console.print(f"[yellow]{escape(str(e))}[/yellow]")

    default_model = effective_model(doc)
    default_iterations = effective_max_iterations(doc)

    tasks = Table(title="Tasks")
    tasks.add_column("Wave", style="cyan")
    tasks.add_column("ID", style="bold")
    tasks.add_column("Model")
    tasks.add_column("Priority")
    tasks.add_column("Max Iterations")
    tasks.add_column("Dependencies")

    for task in doc.tasks:
        deps = ", ".join(task.depends_on) or "-"
        wave = wave_of.get(task.id)
        tasks.add_row(
            "-" if wave is None else str(wave),
            escape(task.id),
            str(effective_task_model(task, default_model)),
            str(task.priority),
            str(effective_task_max_iterations(task, default_iterations)),
            escape(deps[:30] + "..." if len(deps) > 30 else deps),
        )

    console.print(tasks)


@app.command()
def prompt(
    path: Path = typer.Argument(..., help="Spec file to compile"),
    task: str | None = typer.Option(
        None,
        "--task",
        "-t",
        help="Compile a single sub-task instead of the whole spec",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (defaults to stdout)",
    ),
) -> None:
    """
    Compile a spec into an instruction prompt.
    """
    doc = _load(path)

    if task is None:
        text = to_prompt(doc)
    else:
        entry = doc.get_task(task)
        if entry is None:
            _fail(f"Unknown task: {task}")
        text = task_to_prompt(doc, entry)

    _emit(text, output)


@app.command()
def render(
    path: Path = typer.Argument(..., help="Spec file to rewrite"),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (defaults to stdout)",
    ),
) -> None:
    """
    Rewrite a spec file in canonical form.
    """
    doc = _load(path)
    _emit(to_markdown(doc), output)


if __name__ == "__main__":
    app()

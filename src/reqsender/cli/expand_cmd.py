"""``reqsender expand``: preview what a template expands to."""

from __future__ import annotations

import random

import typer
from rich.console import Console
from rich.table import Table

from reqsender.template import GENERATORS, VARIADIC, TemplateEngine

console = Console(stderr=True)


def _print_functions() -> None:
    table = Table(title="Template functions", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold")
    table.add_column("Arguments", justify="right")
    table.add_column("Example")
    for gen in GENERATORS.values():
        arity = f"{gen.min_args}+" if gen.arity == VARIADIC else str(gen.arity)
        table.add_row(gen.name, arity, gen.usage)
    console.print(table)


def expand_cmd(
    template: str | None = typer.Argument(
        None,
        help="Template string, e.g. \"$random-string(5, 8)@$random-mail-domain()\".",
        show_default=False,
    ),
    count: int = typer.Option(1, "--count", "-n", help="Number of expansions to print.", min=1),
    seed: int | None = typer.Option(None, "--seed", help="Seed for reproducible output."),
    functions: bool = typer.Option(
        False,
        "--functions",
        "-f",
        help="List the available template functions and exit.",
    ),
) -> None:
    """Print expansions of a template string."""
    if functions:
        _print_functions()
        return
    if template is None:
        console.print("[red]Missing TEMPLATE argument.[/red]")
        raise typer.Exit(code=2)

    engine = TemplateEngine(random.Random(seed))  # noqa: S311
    for _ in range(count):
        typer.echo(engine.expand(template))

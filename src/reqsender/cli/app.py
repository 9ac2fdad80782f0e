"""Main Typer application: entry point for the ``reqsender`` CLI."""

from __future__ import annotations

import typer

from reqsender import __version__
from reqsender.cli.expand_cmd import expand_cmd
from reqsender.cli.send import repeat_cmd, send_cmd
from reqsender.cli.shell import shell_cmd

app = typer.Typer(
    name="reqsender",
    help="Compose and repeatedly fire HTTP requests with randomized payloads.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("send", help="Send a single request.")(send_cmd)
app.command("repeat", help="Send requests on an interval.")(repeat_cmd)
app.command("expand", help="Preview template expansions.")(expand_cmd)
app.command("shell", help="Start the interactive request shell.")(shell_cmd)


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"reqsender {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """reqsender: compose and repeatedly fire HTTP requests."""

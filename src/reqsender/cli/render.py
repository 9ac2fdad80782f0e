"""Rich rendering of sender events and settings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from reqsender.engine.events import ErrorKind, EventKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from reqsender.engine.connection import ConnectionConfig
    from reqsender.engine.events import ResponseInfo, TransportError
    from reqsender.engine.sender import RequestSender

console = Console()


class EventRenderer:
    """Prints one line (or block) per sender event.

    Args:
        output: Target console. Defaults to the module console (stdout).
    """

    def __init__(self, output: Console | None = None) -> None:
        self.console = output or console

    def attach(self, sender: RequestSender) -> None:
        """Subscribe to every event of ``sender``."""
        sender.on(EventKind.REQUEST_START, self.on_request_start)
        sender.on(EventKind.REQUEST_SUCCESS, self.on_request_success)
        sender.on(EventKind.REQUEST_FAIL, self.on_request_fail)
        sender.on(EventKind.REQUEST_ERROR, self.on_request_error)
        sender.on(EventKind.REPEATER_START, self.on_repeater_start)
        sender.on(EventKind.REPEATER_STOP, self.on_repeater_stop)

    def on_request_start(self, fields: Mapping[str, str], connection: ConnectionConfig) -> None:
        target = escape(connection.full_path)
        if not fields:
            self.console.print(
                f"[bold]Attempting to send {connection.method} request to {target} without data[/bold]"
            )
            return
        self.console.print(
            f"[bold]Attempting to send {connection.method} request to {target} with data:[/bold]"
        )
        for key, value in fields.items():
            self.console.print(f"\t{escape(key)}: {escape(value)}", style="bright_black")

    def on_request_success(
        self,
        fields: Mapping[str, str],
        response: ResponseInfo,
        connection: ConnectionConfig,
    ) -> None:
        if response.status == 200:
            self.console.print("[green]Request successfully sent! (Received 200 status)[/green]\n")
        else:
            self.console.print(
                f"[bright_yellow]Request sent, but received {response.status} status "
                f"({escape(response.reason)})[/bright_yellow]\n"
            )

    def on_request_fail(
        self,
        fields: Mapping[str, str],
        response: ResponseInfo,
        connection: ConnectionConfig,
    ) -> None:
        self.console.print(
            f"[red]Request failed! Received {response.status} status "
            f"({escape(response.reason)})[/red]\n"
        )

    def on_request_error(self, error: TransportError, connection: ConnectionConfig) -> None:
        if error.kind in (ErrorKind.TIMEOUT, ErrorKind.CONNECTION_RESET):
            self.console.print("[red]Request timed out or aborted[/red]\n")
        else:
            self.console.print(f"[red]Request error ({error.kind.value})[/red]")
            self.console.print(f"\t{escape(error.message)}\n", style="bright_black")

    def on_repeater_start(self, interval_ms: int, repeat_count: int) -> None:
        if repeat_count == 0:
            reps = "indefinite repetitions"
        else:
            reps = f"{repeat_count} repetitions"
        self.console.print(
            f"[bold]Starting request repeater with {reps} ({interval_ms}ms interval)[/bold]\n"
        )

    def on_repeater_stop(self, success_count: int, fail_count: int) -> None:
        self.console.print("[bold]Stopped request repeater[/bold]")
        self.console.print(f"\tSuccess count:\t{success_count}", style="bright_black")
        self.console.print(f"\tFail count:\t{fail_count}", style="bright_black")


def print_map(
    title: str,
    data: Mapping[str, Any],
    changed: Iterable[str] = (),
    removed: Iterable[str] = (),
    *,
    target: Console | None = None,
) -> None:
    """Print a settings mapping, highlighting changed and removed keys."""
    out = target or console
    changed = set(changed)
    table = Table(title=title, show_header=False, box=None, title_justify="left")
    table.add_column("Key")
    table.add_column("Value")
    for key, value in data.items():
        if key in changed:
            table.add_row(f"[green]+ {escape(str(key))}[/green]", f"[green]{escape(str(value))}[/green]")
        else:
            table.add_row(escape(str(key)), escape(str(value)), style="bright_black")
    for key in removed:
        table.add_row(f"[bright_red]- {escape(str(key))}[/bright_red]", "")
    out.print(table)


def sender_options(sender: RequestSender) -> dict[str, Any]:
    """Return the sender settings shown by ``printsender``."""
    return {
        "ignore-errors": sender.ignore_errors,
        "ignore-timeout": sender.ignore_timeout,
        "follow-redirects": sender.follow_redirects,
        "max-redirects": sender.max_redirects,
        "timeout": sender.timeout_ms,
        "encoder": sender.encoder,
    }

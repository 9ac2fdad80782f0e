"""``reqsender shell``: interactive prompt for editing and firing requests."""

from __future__ import annotations

import asyncio
import logging
import shlex
from typing import TYPE_CHECKING, Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from reqsender import __version__
from reqsender._internal.config import load_config
from reqsender._internal.errors import ReqSenderError, ValidationError
from reqsender._internal.logging import setup_logging
from reqsender.cli._interrupt import install_interrupt_handler, remove_interrupt_handler
from reqsender.cli.pairs import parse_pairs
from reqsender.cli.render import EventRenderer, print_map, sender_options
from reqsender.engine.profiles import PROFILES, apply_profile
from reqsender.engine.sender import RequestSender

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

PROMPT = "reqsender > "

_OPTION_FLAGS = ("host", "method", "port", "path", "scheme")
_SENDER_BOOL_FLAGS = ("ignore-errors", "ignore-timeout", "follow-redirects")
_SENDER_VALUE_FLAGS = ("max-redirects", "timeout", "encoder")


def parse_flags(tokens: list[str]) -> dict[str, str | bool]:
    """Parse ``--name value``, ``--name=value``, ``--flag`` and ``--no-flag``.

    Raises:
        ValidationError: On a token that is not a flag.
    """
    options: dict[str, str | bool] = {}
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if not token.startswith("--") or len(token) == 2:
            msg = f"Unexpected argument '{token}'"
            raise ValidationError(msg)
        name = token[2:]
        if "=" in name:
            name, value = name.split("=", 1)
            options[name] = value
        elif i + 1 < len(tokens) and not tokens[i + 1].startswith("--"):
            options[name] = tokens[i + 1]
            i += 1
        elif name.startswith("no-"):
            options[name[3:]] = False
        else:
            options[name] = True
        i += 1
    return options


class Shell:
    """Line-oriented command interpreter driving one :class:`RequestSender`.

    Commands mutate the sender's configuration or fire requests; the
    sender's events are rendered as they happen.
    """

    def __init__(self, sender: RequestSender, output: Console | None = None) -> None:
        self.sender = sender
        self.console = output or Console()
        self.running = True
        self._commands: dict[str, tuple[Callable[[list[str]], Awaitable[None] | None], str]] = {
            "editoptions": (
                self.edit_options,
                "Edit the basic request options: --host --method --port --path --scheme",
            ),
            "editheaders": (
                self.edit_headers,
                "Edit or add headers. Example: editheaders 'Content-Type' 'application/json'",
            ),
            "removeheaders": (self.remove_headers, "Remove headers. Example: removeheaders 'User-Agent'"),
            "editsender": (
                self.edit_sender,
                "Edit sender settings: --[no-]ignore-errors --[no-]ignore-timeout "
                "--[no-]follow-redirects --max-redirects N --timeout MS --encoder NAME",
            ),
            "editdata": (
                self.edit_data,
                "Edit or add payload fields. Example: editdata user '$random-string(5, 8)'",
            ),
            "removedata": (self.remove_data, "Remove payload fields. Example: removedata user"),
            "edituseragent": (self.edit_user_agent, "Set the User-Agent header"),
            "autoconfigure": (
                self.autoconfigure,
                "Apply a preset: " + ", ".join(f"{p.name} ({p.description})" for p in PROFILES.values()),
            ),
            "sendrequest": (
                self.send_request,
                "Send one request with the payload template, or with the given fields",
            ),
            "startrepeater": (
                self.start_repeater,
                "startrepeater <interval-ms> [count]; Ctrl+C stops it",
            ),
            "printoptions": (lambda _args: self.print_options(), "Print the request options"),
            "printheaders": (lambda _args: self.print_headers(), "Print the request headers"),
            "printsender": (lambda _args: self.print_sender(), "Print the sender settings"),
            "printdata": (lambda _args: self.print_data(), "Print the payload template"),
            "printall": (lambda _args: self.print_all(), "Print all settings"),
            "help": (lambda _args: self.print_help(), "Show this help"),
            "exit": (self.exit, "Leave the shell"),
        }

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Read and execute commands until ``exit``, EOF, or Ctrl+C."""
        with asyncio.Runner() as runner:
            runner.run(self.sender.__aenter__())
            try:
                self.console.print("Type 'help' for command usage")
                while self.running:
                    try:
                        line = self.console.input(PROMPT)
                    except (EOFError, KeyboardInterrupt):
                        self.console.print()
                        break
                    runner.run(self.execute(line))
            finally:
                runner.run(self.sender.__aexit__(None, None, None))

    async def execute(self, line: str) -> None:
        """Execute one command line, printing errors instead of raising."""
        try:
            tokens = shlex.split(line)
        except ValueError as exc:
            self._error(str(exc))
            return
        if not tokens:
            return

        name, args = tokens[0].lower(), tokens[1:]
        entry = self._commands.get(name)
        if entry is None:
            self._error(f"Unknown command '{name}'. Type 'help' for command usage.")
            return

        try:
            result = entry[0](args)
            if result is not None:
                await result
        except ReqSenderError as exc:
            self._error(str(exc))

    def _error(self, message: str) -> None:
        text = message if message.startswith("Error!") else f"Error! {message}"
        self.console.print(f"[bright_red]{escape(text)}[/bright_red]")

    def _ok(self, message: str) -> None:
        self.console.print(f"[green]{escape(message)}[/green]")

    # ------------------------------------------------------------------
    # Editing commands
    # ------------------------------------------------------------------

    def edit_options(self, args: list[str]) -> None:
        flags = parse_flags(args)
        if not flags:
            return
        unknown = [name for name in flags if name not in _OPTION_FLAGS]
        if unknown:
            msg = f"Unknown option '--{unknown[0]}'"
            raise ValidationError(msg)
        if any(isinstance(value, bool) for value in flags.values()):
            msg = "Every request option needs a value"
            raise ValidationError(msg)
        self.sender.configure_connection(flags)
        self._ok("Updated request options!")
        self.print_options(changed=list(flags))

    def edit_headers(self, args: list[str]) -> None:
        headers = parse_pairs(args, what="header")
        self.sender.configure_connection(headers=headers)
        self._ok("Updated headers!")
        self.print_headers(changed=list(headers))

    def remove_headers(self, args: list[str]) -> None:
        self.sender.connection.remove_headers(args)
        self._ok("Removed headers!")
        self.print_headers(removed=args)

    def edit_sender(self, args: list[str]) -> None:
        flags = parse_flags(args)
        known = (*_SENDER_BOOL_FLAGS, *_SENDER_VALUE_FLAGS)
        unknown = [name for name in flags if name not in known]
        if unknown:
            msg = f"Unknown sender option '--{unknown[0]}'"
            raise ValidationError(msg)
        for name in _SENDER_BOOL_FLAGS:
            if name in flags and not isinstance(flags[name], bool):
                msg = f"--{name} does not take a value"
                raise ValidationError(msg)

        encoder = flags.get("encoder")
        if encoder is not None and encoder not in self.sender.valid_encoders:
            msg = f"Encoder '{encoder}' does not exist!"
            raise ValidationError(msg)

        connection: dict[str, Any] = {}
        if "follow-redirects" in flags:
            connection["follow_redirects"] = flags["follow-redirects"]
        if "max-redirects" in flags:
            connection["max_redirects"] = flags["max-redirects"]
        if "timeout" in flags:
            connection["timeout_ms"] = flags["timeout"]
        self.sender.configure_connection(connection)

        if encoder is not None:
            self.sender.select_encoder(str(encoder))
        if "ignore-errors" in flags:
            self.sender.ignore_errors = bool(flags["ignore-errors"])
        if "ignore-timeout" in flags:
            self.sender.ignore_timeout = bool(flags["ignore-timeout"])

        self._ok("Edited the sender settings!")
        self.print_sender(changed=list(flags))

    def edit_data(self, args: list[str]) -> None:
        fields = parse_pairs(args, what="field")
        self.sender.configure_payload_template({**self.sender.payload_template, **fields})
        self._ok("Updated data!")
        self.print_data(changed=list(fields))

    def remove_data(self, args: list[str]) -> None:
        template = self.sender.payload_template
        missing = [name for name in args if name not in template]
        if missing:
            msg = f"Field '{missing[0]}' does not exist!"
            raise ValidationError(msg)
        for name in args:
            del template[name]
        self.sender.configure_payload_template(template)
        self._ok("Removed data!")
        self.print_data(removed=args)

    def edit_user_agent(self, args: list[str]) -> None:
        if len(args) != 1:
            msg = "edituseragent takes exactly one argument"
            raise ValidationError(msg)
        self.sender.configure_connection(headers={"User-Agent": args[0]})
        self._ok(f"Changed the user agent header to '{args[0]}'!")

    def autoconfigure(self, args: list[str]) -> None:
        if len(args) != 1:
            msg = "autoconfigure takes exactly one type: " + ", ".join(PROFILES)
            raise ValidationError(msg)
        if not apply_profile(self.sender, args[0]):
            msg = f"Configuration '{args[0]}' does not exist!"
            raise ValidationError(msg)
        self._ok(f"Configured request sender for the '{args[0]}' type!")

    # ------------------------------------------------------------------
    # Sending commands
    # ------------------------------------------------------------------

    async def send_request(self, args: list[str]) -> None:
        fields = parse_pairs(args, what="field") if args else None
        await self.sender.send_once(fields)

    async def start_repeater(self, args: list[str]) -> None:
        if not 1 <= len(args) <= 2:
            msg = "startrepeater takes <interval> [count]"
            raise ValidationError(msg)
        try:
            interval = int(args[0])
            count = int(args[1]) if len(args) == 2 else 0
        except ValueError:
            msg = "interval and count must be integers"
            raise ValidationError(msg) from None

        loop = asyncio.get_running_loop()
        install_interrupt_handler(loop, self.sender.stop_repeater)
        try:
            self.console.print("[green]Press Ctrl+C to stop the repeater[/green]")
            if self.sender.start_repeater(interval, count):
                await self.sender.wait_repeater_stopped()
                await self.sender.wait_idle()
        finally:
            remove_interrupt_handler(loop)

    def exit(self, _args: list[str]) -> None:
        self.running = False

    # ------------------------------------------------------------------
    # Printing commands
    # ------------------------------------------------------------------

    def print_options(self, changed: list[str] | None = None, removed: list[str] | None = None) -> None:
        print_map(
            "Current request options",
            self.sender.connection.as_dict(),
            changed or (),
            removed or (),
            target=self.console,
        )

    def print_headers(self, changed: list[str] | None = None, removed: list[str] | None = None) -> None:
        print_map(
            "Current headers",
            self.sender.connection.headers,
            changed or (),
            removed or (),
            target=self.console,
        )

    def print_sender(self, changed: list[str] | None = None) -> None:
        print_map("Request sender options", sender_options(self.sender), changed or (), target=self.console)

    def print_data(self, changed: list[str] | None = None, removed: list[str] | None = None) -> None:
        print_map(
            "Request data",
            self.sender.payload_template,
            changed or (),
            removed or (),
            target=self.console,
        )

    def print_all(self) -> None:
        self.print_sender()
        self.console.print()
        self.print_options()
        self.console.print()
        self.print_headers()
        self.console.print()
        self.print_data()

    def print_help(self) -> None:
        table = Table(title=f"reqsender {__version__}", show_header=False, box=None)
        table.add_column("Command", style="bold")
        table.add_column("Description")
        for name, (_handler, description) in self._commands.items():
            table.add_row(name, escape(description))
        self.console.print(table)


def shell_cmd(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose (DEBUG) logging."),
    log_json: bool = typer.Option(False, "--log-json", help="Emit log lines as JSON objects."),
) -> None:
    """Start the interactive request shell."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING, json_format=log_json)
    try:
        sender = RequestSender(load_config())
    except ReqSenderError as exc:
        Console(stderr=True).print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    shell = Shell(sender)
    EventRenderer(shell.console).attach(sender)
    shell.run()

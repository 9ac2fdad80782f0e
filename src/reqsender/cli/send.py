"""``reqsender send`` and ``reqsender repeat``: fire requests from flags."""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console

from reqsender._internal.config import load_config
from reqsender._internal.errors import ReqSenderError
from reqsender._internal.logging import setup_logging
from reqsender.cli._interrupt import install_interrupt_handler, remove_interrupt_handler
from reqsender.cli.pairs import parse_assignments
from reqsender.cli.render import EventRenderer
from reqsender.engine.profiles import PROFILES, apply_profile
from reqsender.engine.sender import RequestOutcome, RequestSender

console = Console(stderr=True)

# ---------------------------------------------------------------------------
# Shared option declarations
# ---------------------------------------------------------------------------

_HOST = typer.Option("localhost", "--host", help="Target hostname.")
_PORT = typer.Option(80, "--port", "-p", help="Target port.", min=0, max=65535)
_PATH = typer.Option("/", "--path", help="Request path.")
_METHOD = typer.Option(None, "--method", "-X", help="HTTP method (default: GET or the profile's).")
_SCHEME = typer.Option("http", "--scheme", help="http or https.")
_HEADER = typer.Option(None, "--header", "-H", help="Header as 'Name: value'. Repeatable.")
_DATA = typer.Option(
    None,
    "--data",
    "-d",
    help="Payload field as name=value; the value may use $macro(...) syntax. Repeatable.",
)
_ENCODER = typer.Option(None, "--encoder", "-e", help="Payload encoder: querystring, json, or text.")
_PROFILE = typer.Option(
    None,
    "--profile",
    help="Preset configuration: " + ", ".join(PROFILES) + ".",
)
_TIMEOUT = typer.Option(None, "--timeout", "-t", help="Socket idle timeout in ms (0 disables).", min=0)
_FOLLOW = typer.Option(True, "--follow-redirects/--no-follow-redirects", help="Follow 3xx responses.")
_MAX_REDIRECTS = typer.Option(None, "--max-redirects", help="Redirect limit.", min=0)
_VERBOSE = typer.Option(False, "--verbose", "-v", help="Enable verbose (DEBUG) logging.")
_LOG_JSON = typer.Option(False, "--log-json", help="Emit log lines as JSON objects.")


def build_sender(
    *,
    host: str,
    port: int,
    path: str,
    method: str | None,
    scheme: str,
    headers: list[str] | None,
    data: list[str] | None,
    encoder: str | None,
    profile: str | None,
    timeout: int | None,
    follow_redirects: bool,
    max_redirects: int | None,
) -> RequestSender:
    """Create a sender configured from command-line flags.

    The profile is applied first, so explicit flags override it.

    Raises:
        typer.BadParameter: If a flag value is rejected.
        ReqSenderError: If the environment configuration is invalid.
    """
    sender = RequestSender(load_config())

    if profile is not None and not apply_profile(sender, profile):
        msg = f"Configuration '{profile}' does not exist! Choose from: {', '.join(PROFILES)}"
        raise typer.BadParameter(msg, param_hint="--profile")

    if encoder is not None and not sender.select_encoder(encoder):
        msg = f"Encoder '{encoder}' does not exist! Choose from: {', '.join(sender.valid_encoders)}"
        raise typer.BadParameter(msg, param_hint="--encoder")

    options: dict[str, object] = {
        "host": host,
        "port": port,
        "path": path,
        "scheme": scheme,
        "follow_redirects": follow_redirects,
    }
    if method is not None:
        options["method"] = method
    if timeout is not None:
        options["timeout_ms"] = timeout
    if max_redirects is not None:
        options["max_redirects"] = max_redirects

    try:
        if headers:
            options["headers"] = parse_assignments(headers, separator=":", what="header")
        sender.configure_connection(options)
        if data:
            sender.configure_payload_template(parse_assignments(data, what="field"))
    except ReqSenderError as exc:
        raise typer.BadParameter(str(exc)) from exc

    return sender


async def _send(sender: RequestSender) -> RequestOutcome | None:
    async with sender:
        return await sender.send_once()


async def _repeat(sender: RequestSender, interval: int, count: int) -> None:
    async with sender:
        loop = asyncio.get_running_loop()
        install_interrupt_handler(loop, sender.stop_repeater)
        try:
            sender.start_repeater(interval, count)
            await sender.wait_repeater_stopped()
            await sender.wait_idle()
        finally:
            remove_interrupt_handler(loop)


def _prepare(verbose: bool, log_json: bool, **kwargs: object) -> RequestSender:
    setup_logging(logging.DEBUG if verbose else logging.WARNING, json_format=log_json)
    try:
        sender = build_sender(**kwargs)  # type: ignore[arg-type]
    except ReqSenderError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    EventRenderer().attach(sender)
    return sender


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def send_cmd(
    host: str = _HOST,
    port: int = _PORT,
    path: str = _PATH,
    method: str | None = _METHOD,
    scheme: str = _SCHEME,
    header: list[str] | None = _HEADER,
    data: list[str] | None = _DATA,
    encoder: str | None = _ENCODER,
    profile: str | None = _PROFILE,
    timeout: int | None = _TIMEOUT,
    follow_redirects: bool = _FOLLOW,
    max_redirects: int | None = _MAX_REDIRECTS,
    verbose: bool = _VERBOSE,
    log_json: bool = _LOG_JSON,
) -> None:
    """Send a single request. Exits non-zero unless it succeeds."""
    sender = _prepare(
        verbose,
        log_json,
        host=host,
        port=port,
        path=path,
        method=method,
        scheme=scheme,
        headers=header,
        data=data,
        encoder=encoder,
        profile=profile,
        timeout=timeout,
        follow_redirects=follow_redirects,
        max_redirects=max_redirects,
    )
    outcome = asyncio.run(_send(sender))
    if outcome is not RequestOutcome.SUCCESS:
        raise typer.Exit(code=1)


def repeat_cmd(
    interval: int = typer.Option(
        ...,
        "--interval",
        "-i",
        help="Milliseconds between requests.",
        min=1,
    ),
    count: int = typer.Option(
        0,
        "--count",
        "-n",
        help="Number of requests to send (0 repeats until Ctrl+C).",
        min=0,
    ),
    ignore_errors: bool | None = typer.Option(
        None,
        "--ignore-errors/--no-ignore-errors",
        help="Keep repeating after an HTTP error status.",
    ),
    ignore_timeout: bool | None = typer.Option(
        None,
        "--ignore-timeout/--no-ignore-timeout",
        help="Keep repeating after a request timeout.",
    ),
    host: str = _HOST,
    port: int = _PORT,
    path: str = _PATH,
    method: str | None = _METHOD,
    scheme: str = _SCHEME,
    header: list[str] | None = _HEADER,
    data: list[str] | None = _DATA,
    encoder: str | None = _ENCODER,
    profile: str | None = _PROFILE,
    timeout: int | None = _TIMEOUT,
    follow_redirects: bool = _FOLLOW,
    max_redirects: int | None = _MAX_REDIRECTS,
    verbose: bool = _VERBOSE,
    log_json: bool = _LOG_JSON,
) -> None:
    """Send freshly expanded requests on an interval until done or Ctrl+C."""
    sender = _prepare(
        verbose,
        log_json,
        host=host,
        port=port,
        path=path,
        method=method,
        scheme=scheme,
        headers=header,
        data=data,
        encoder=encoder,
        profile=profile,
        timeout=timeout,
        follow_redirects=follow_redirects,
        max_redirects=max_redirects,
    )
    if ignore_errors is not None:
        sender.ignore_errors = ignore_errors
    if ignore_timeout is not None:
        sender.ignore_timeout = ignore_timeout

    console.print("[green]Press Ctrl+C to stop the repeater[/green]")
    asyncio.run(_repeat(sender, interval, count))

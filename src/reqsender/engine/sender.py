"""Single-flight HTTP request sender with an interval-driven repeater."""

from __future__ import annotations

import asyncio
import errno
import socket
import time
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import aiohttp

from reqsender import encoding
from reqsender._internal.config import SenderConfig
from reqsender._internal.errors import ConfigError, ValidationError
from reqsender._internal.logging import get_logger
from reqsender.engine.connection import ConnectionConfig
from reqsender.engine.events import (
    ErrorKind,
    EventBus,
    EventKind,
    ResponseInfo,
    TransportError,
)
from reqsender.template import TemplateEngine

if TYPE_CHECKING:
    import random
    from collections.abc import Mapping

    from reqsender.engine.events import Handler

logger = get_logger("engine.sender")

# Statuses counted as failures. Anything else that comes back, including
# redirects that are not followed and unlisted 4xx/5xx codes, is a success.
HTTP_ERROR_CODES = frozenset({400, 401, 403, 404, 405, 500, 502, 503, 504})


class RequestOutcome(StrEnum):
    """How a dispatched request resolved."""

    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"


def classify_error(exc: BaseException) -> ErrorKind:
    """Map a transport exception raised by aiohttp to an :class:`ErrorKind`."""
    if isinstance(exc, TimeoutError):
        return ErrorKind.TIMEOUT
    if isinstance(exc, aiohttp.TooManyRedirects):
        return ErrorKind.TOO_MANY_REDIRECTS
    if isinstance(exc, aiohttp.ClientConnectorDNSError):
        return ErrorKind.HOST_NOT_FOUND
    if isinstance(exc, aiohttp.ClientConnectorError):
        os_error = exc.os_error
        if isinstance(os_error, socket.gaierror):
            return ErrorKind.HOST_NOT_FOUND
        if isinstance(os_error, ConnectionRefusedError) or os_error.errno == errno.ECONNREFUSED:
            return ErrorKind.CONNECTION_REFUSED
    if isinstance(exc, (aiohttp.ServerDisconnectedError, ConnectionResetError)):
        return ErrorKind.CONNECTION_RESET
    if isinstance(exc, OSError) and exc.errno == errno.ECONNRESET:
        return ErrorKind.CONNECTION_RESET
    return ErrorKind.OTHER


def _log_context(connection: ConnectionConfig, response: ResponseInfo) -> dict[str, Any]:
    return {
        "method": connection.method,
        "url": connection.url,
        "status": response.status,
        "latency_ms": round(response.latency_ms, 1),
    }


def _client_timeout(timeout_ms: int) -> aiohttp.ClientTimeout:
    if timeout_ms <= 0:
        return aiohttp.ClientTimeout(total=None, connect=None, sock_connect=None, sock_read=None)
    seconds = timeout_ms / 1000
    return aiohttp.ClientTimeout(total=None, sock_connect=seconds, sock_read=seconds)


class RequestSender:
    """Sends templated requests one at a time, optionally on a timer.

    At most one request is in flight at any moment: a send attempted while
    another is outstanding is dropped silently. Every outcome is reported
    through :attr:`events` and counted in :attr:`success_count` /
    :attr:`fail_count`; nothing raised by the transport escapes.

    Must be used as an async context manager, which owns the underlying
    ``aiohttp.ClientSession``::

        async with RequestSender() as sender:
            sender.configure_connection(host="localhost", port=8080, path="/signup")
            sender.configure_payload_template({"user": "$random-string(5, 9)"})
            sender.start_repeater(interval_ms=500, repeat_count=10)
            await sender.wait_repeater_stopped()

    Attributes:
        events: Event bus carrying the request and repeater lifecycle.
    """

    def __init__(
        self,
        config: SenderConfig | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the sender.

        Args:
            config: Initial sender settings. Defaults to :class:`SenderConfig`.
            rng: Random source for template expansion.

        Raises:
            ConfigError: If ``config.encoder`` is not a known encoder.
        """
        config = config or SenderConfig()
        if not encoding.exists(config.encoder):
            msg = f"Unknown encoder: {config.encoder!r}"
            raise ConfigError(msg)

        self.events = EventBus()
        self._connection = ConnectionConfig(
            timeout_ms=config.timeout_ms,
            follow_redirects=config.follow_redirects,
            max_redirects=config.max_redirects,
        )
        if config.user_agent:
            self._connection.headers["User-Agent"] = config.user_agent

        self._encoder = config.encoder
        self._ignore_errors = config.ignore_errors
        self._ignore_timeout = config.ignore_timeout
        self._templates = TemplateEngine(rng)
        self._payload_template: dict[str, str] = {}

        self._locked = False
        self._success_count = 0
        self._fail_count = 0
        self._repeating = False
        self._repeater_task: asyncio.Task[None] | None = None
        self._pending: set[asyncio.Task[Any]] = set()
        self._idle = asyncio.Event()
        self._idle.set()
        self._repeater_stopped = asyncio.Event()
        self._repeater_stopped.set()
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> RequestSender:
        """Open the underlying aiohttp session."""
        self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Stop the repeater, abort any in-flight request, close the session."""
        self.stop_repeater()
        if self._pending:
            for task in self._pending:
                task.cancel()
            await asyncio.gather(*self._pending, return_exceptions=True)
        self._release()
        if self._session is not None:
            await self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def on(self, kind: EventKind | str, handler: Handler) -> None:
        """Shortcut for ``sender.events.on(kind, handler)``."""
        self.events.on(kind, handler)

    def configure_connection(
        self,
        partial: Mapping[str, Any] | None = None,
        **fields: Any,
    ) -> None:
        """Merge connection options; ``headers`` is merged key by key.

        Raises:
            ValidationError: If an option is unknown or has a bad value.
        """
        self._connection.merge({**(partial or {}), **fields})

    def configure_payload_template(self, template: Mapping[str, str]) -> None:
        """Replace the payload template wholesale."""
        self._payload_template = {str(key): str(value) for key, value in template.items()}

    def select_encoder(self, name: str) -> bool:
        """Switch to encoder ``name``.

        Returns:
            True if switched; False if ``name`` is unknown (encoder unchanged).
        """
        if not encoding.exists(name):
            return False
        self._encoder = name
        return True

    @property
    def connection(self) -> ConnectionConfig:
        """Return the live connection configuration."""
        return self._connection

    @property
    def full_path(self) -> str:
        """Return ``host:port/path`` of the current target."""
        return self._connection.full_path

    @property
    def payload_template(self) -> dict[str, str]:
        """Return a copy of the payload template."""
        return dict(self._payload_template)

    @property
    def encoder(self) -> str:
        """Return the active encoder name."""
        return self._encoder

    @property
    def valid_encoders(self) -> list[str]:
        """Return the names accepted by :meth:`select_encoder`."""
        return encoding.list_formats()

    @property
    def ignore_errors(self) -> bool:
        """Whether the repeater keeps going after an HTTP error status."""
        return self._ignore_errors

    @ignore_errors.setter
    def ignore_errors(self, value: bool) -> None:
        self._ignore_errors = bool(value)

    @property
    def ignore_timeout(self) -> bool:
        """Whether the repeater keeps going after a timeout."""
        return self._ignore_timeout

    @ignore_timeout.setter
    def ignore_timeout(self, value: bool) -> None:
        self._ignore_timeout = bool(value)

    @property
    def timeout_ms(self) -> int:
        return self._connection.timeout_ms

    @property
    def follow_redirects(self) -> bool:
        return self._connection.follow_redirects

    @property
    def max_redirects(self) -> int:
        return self._connection.max_redirects

    @property
    def success_count(self) -> int:
        return self._success_count

    @property
    def fail_count(self) -> int:
        return self._fail_count

    @property
    def locked(self) -> bool:
        """Whether a request is currently in flight."""
        return self._locked

    @property
    def repeating(self) -> bool:
        return self._repeating

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send_once(self, fields: Mapping[str, str] | None = None) -> RequestOutcome | None:
        """Send a single request.

        Args:
            fields: Literal payload to send. When omitted, the payload
                template is expanded afresh.

        Returns:
            The outcome, or None if another request was already in flight
            and this one was dropped.

        Raises:
            RuntimeError: If the sender is used outside its async context.
        """
        if self._locked:
            return None
        self._acquire()
        return await self._send_locked(fields)

    async def wait_idle(self) -> None:
        """Wait until no request is in flight."""
        await self._idle.wait()

    def _acquire(self) -> None:
        if self._session is None:
            msg = "RequestSender must be used as an async context manager"
            raise RuntimeError(msg)
        self._locked = True
        self._idle.clear()

    def _release(self) -> None:
        self._locked = False
        self._idle.set()

    async def _send_locked(self, fields: Mapping[str, str] | None) -> RequestOutcome:
        try:
            if fields is None:
                data = self._templates.expand_fields(self._payload_template)
            else:
                data = {str(key): str(value) for key, value in fields.items()}
            return await self._dispatch(data)
        finally:
            self._release()

    async def _dispatch(self, data: dict[str, str]) -> RequestOutcome:
        assert self._session is not None
        connection = self._connection.snapshot()
        self.events.emit(EventKind.REQUEST_START, data, connection)

        body = encoding.encode(self._encoder, data).encode("utf-8") if data else b""
        headers = dict(connection.headers)
        if body:
            headers["Content-Length"] = str(len(body))

        logger.debug(
            "Dispatching %s %s (%d byte body, encoder=%s)",
            connection.method,
            connection.url,
            len(body),
            self._encoder,
            extra={"method": connection.method, "url": connection.url},
        )

        start = time.monotonic()
        try:
            async with self._session.request(
                connection.method,
                connection.url,
                headers=headers,
                data=body or None,
                allow_redirects=connection.follow_redirects,
                max_redirects=connection.max_redirects,
                timeout=_client_timeout(connection.timeout_ms),
            ) as resp:
                response = ResponseInfo(
                    status=resp.status,
                    reason=resp.reason or "",
                    url=str(resp.url),
                    headers=dict(resp.headers),
                    latency_ms=(time.monotonic() - start) * 1000,
                )
        except (aiohttp.ClientError, TimeoutError, OSError, ValueError) as exc:
            return self._handle_transport_error(exc, connection)

        return self._handle_response(data, response, connection)

    def _handle_response(
        self,
        data: dict[str, str],
        response: ResponseInfo,
        connection: ConnectionConfig,
    ) -> RequestOutcome:
        if response.status in HTTP_ERROR_CODES:
            self._fail_count += 1
            logger.debug(
                "Request failed with status %d",
                response.status,
                extra=_log_context(connection, response),
            )
            self.events.emit(EventKind.REQUEST_FAIL, data, response, connection)
            if self._repeating and not self._ignore_errors:
                self.stop_repeater()
            return RequestOutcome.FAIL

        self._success_count += 1
        logger.debug(
            "Request succeeded with status %d",
            response.status,
            extra=_log_context(connection, response),
        )
        self.events.emit(EventKind.REQUEST_SUCCESS, data, response, connection)
        return RequestOutcome.SUCCESS

    def _handle_transport_error(
        self,
        exc: BaseException,
        connection: ConnectionConfig,
    ) -> RequestOutcome:
        error = TransportError(
            kind=classify_error(exc),
            message=f"{type(exc).__name__}: {exc}",
        )
        self._fail_count += 1
        logger.debug(
            "Request error (%s): %s",
            error.kind.value,
            error.message,
            extra={
                "method": connection.method,
                "url": connection.url,
                "error_kind": error.kind.value,
            },
        )
        self.events.emit(EventKind.REQUEST_ERROR, error, connection)

        if self._repeating:
            if error.kind is ErrorKind.HOST_NOT_FOUND:
                self.stop_repeater()
            elif error.kind is ErrorKind.TIMEOUT and not self._ignore_timeout:
                # Deferred so the stop lands after this request has unwound.
                asyncio.get_running_loop().call_soon(self.stop_repeater)
        return RequestOutcome.ERROR

    # ------------------------------------------------------------------
    # Repeater
    # ------------------------------------------------------------------

    def start_repeater(self, interval_ms: int = 1000, repeat_count: int = 0) -> bool:
        """Start sending a freshly expanded payload every ``interval_ms``.

        Ticks that find a request still in flight are skipped and do not
        count toward ``repeat_count``. Must be called from a running loop.

        Args:
            interval_ms: Milliseconds between ticks.
            repeat_count: Requests to dispatch before stopping; 0 repeats
                until :meth:`stop_repeater`.

        Returns:
            True if started; False if the repeater was already running.

        Raises:
            ValidationError: If ``interval_ms`` is not positive or
                ``repeat_count`` is negative.
        """
        if interval_ms <= 0:
            msg = f"interval_ms must be positive, got {interval_ms}"
            raise ValidationError(msg)
        if repeat_count < 0:
            msg = f"repeat_count must be >= 0, got {repeat_count}"
            raise ValidationError(msg)
        if self._repeating:
            logger.warning("Repeater already running; start request ignored")
            return False

        loop = asyncio.get_running_loop()
        self._repeating = True
        self._repeater_stopped.clear()
        self._repeater_task = loop.create_task(
            self._run_repeater(interval_ms / 1000, repeat_count),
            name="reqsender-repeater",
        )
        logger.info(
            "Repeater started: interval=%dms, count=%s",
            interval_ms,
            repeat_count or "unbounded",
        )
        self.events.emit(EventKind.REPEATER_START, interval_ms, repeat_count)
        return True

    def stop_repeater(self) -> None:
        """Stop scheduling ticks and report the counters.

        A request already in flight is left to finish. No-op when the
        repeater is not running.
        """
        if not self._repeating:
            return

        self._repeating = False
        if self._repeater_task is not None:
            self._repeater_task.cancel()
            self._repeater_task = None

        success, fail = self._success_count, self._fail_count
        logger.info("Repeater stopped: success=%d, fail=%d", success, fail)
        self.events.emit(EventKind.REPEATER_STOP, success, fail)
        self._success_count = 0
        self._fail_count = 0
        self._repeater_stopped.set()

    async def wait_repeater_stopped(self) -> None:
        """Wait until the repeater is not running."""
        await self._repeater_stopped.wait()

    async def _run_repeater(self, interval: float, repeat_count: int) -> None:
        dispatched = 0
        while True:
            await asyncio.sleep(interval)
            if self._locked:
                continue
            if repeat_count and dispatched >= repeat_count:
                self.stop_repeater()
                return
            self._acquire()
            task = asyncio.get_running_loop().create_task(self._send_locked(None))
            self._pending.add(task)
            task.add_done_callback(self._on_send_done)
            dispatched += 1

    def _on_send_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Repeated request crashed", exc_info=task.exception())

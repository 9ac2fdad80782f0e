"""Lifecycle events emitted by a request sender and their payload types."""

from __future__ import annotations

import functools
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from reqsender._internal.logging import get_logger

logger = get_logger("engine.events")

Handler = Callable[..., Any]


class EventKind(StrEnum):
    """Names of the events a sender emits.

    Payloads, in argument order:

    - ``REQUEST_START``: fields, connection
    - ``REQUEST_SUCCESS``: fields, response, connection
    - ``REQUEST_FAIL``: fields, response, connection
    - ``REQUEST_ERROR``: error, connection
    - ``REPEATER_START``: interval_ms, repeat_count
    - ``REPEATER_STOP``: success_count, fail_count
    """

    REQUEST_START = "request-start"
    REQUEST_SUCCESS = "request-success"
    REQUEST_FAIL = "request-fail"
    REQUEST_ERROR = "request-error"
    REPEATER_START = "repeater-start"
    REPEATER_STOP = "repeater-stop"


class ErrorKind(StrEnum):
    """Classification of transport-level failures."""

    TIMEOUT = "timeout"
    HOST_NOT_FOUND = "host-not-found"
    CONNECTION_REFUSED = "connection-refused"
    CONNECTION_RESET = "connection-reset"
    TOO_MANY_REDIRECTS = "too-many-redirects"
    OTHER = "other"


@dataclass(frozen=True)
class ResponseInfo:
    """What a sender keeps of a received response.

    Attributes:
        status: HTTP status code.
        reason: Status reason phrase.
        url: Final URL after redirects.
        headers: Response headers.
        latency_ms: Time from dispatch to response headers.
    """

    status: int
    reason: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    latency_ms: float = 0.0


@dataclass(frozen=True)
class TransportError:
    """A request that never produced a response.

    Attributes:
        kind: Failure classification.
        message: Human-readable description of the underlying exception.
    """

    kind: ErrorKind
    message: str


class EventBus:
    """Ordered publish/subscribe dispatch keyed by :class:`EventKind`.

    Handlers run synchronously in registration order. A handler that raises
    is logged and skipped; the remaining handlers still run.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventKind, list[Handler]] = defaultdict(list)

    def on(self, kind: EventKind | str, handler: Handler) -> None:
        """Register ``handler`` for every future ``kind`` event."""
        self._handlers[EventKind(kind)].append(handler)

    def once(self, kind: EventKind | str, handler: Handler) -> None:
        """Register ``handler`` for the next ``kind`` event only."""
        event = EventKind(kind)

        @functools.wraps(handler)
        def _wrapper(*args: Any) -> None:
            self.off(event, _wrapper)
            handler(*args)

        self._handlers[event].append(_wrapper)

    def off(self, kind: EventKind | str, handler: Handler) -> None:
        """Unregister ``handler``, whether added with :meth:`on` or :meth:`once`.

        Removes the earliest matching registration; unknown handlers are
        ignored.
        """
        handlers = self._handlers[EventKind(kind)]
        for registered in handlers:
            if registered is handler or getattr(registered, "__wrapped__", None) is handler:
                handlers.remove(registered)
                return

    def emit(self, kind: EventKind | str, *args: Any) -> None:
        """Call every handler registered for ``kind`` with ``args``."""
        event = EventKind(kind)
        for handler in list(self._handlers[event]):
            try:
                handler(*args)
            except Exception:
                logger.exception("Handler %r for %s event failed", handler, event.value)

    def handler_count(self, kind: EventKind | str) -> int:
        """Return the number of handlers registered for ``kind``."""
        return len(self._handlers[EventKind(kind)])

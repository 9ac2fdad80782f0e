"""Request/repeat engine: connection state, events, and the sender."""

from __future__ import annotations

from reqsender.engine.connection import ConnectionConfig
from reqsender.engine.events import (
    ErrorKind,
    EventBus,
    EventKind,
    ResponseInfo,
    TransportError,
)
from reqsender.engine.profiles import PROFILES, Profile, apply_profile
from reqsender.engine.sender import HTTP_ERROR_CODES, RequestOutcome, RequestSender

__all__ = [
    "HTTP_ERROR_CODES",
    "PROFILES",
    "ConnectionConfig",
    "ErrorKind",
    "EventBus",
    "EventKind",
    "Profile",
    "RequestOutcome",
    "RequestSender",
    "ResponseInfo",
    "TransportError",
    "apply_profile",
]

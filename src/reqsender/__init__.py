"""reqsender: compose and repeatedly fire HTTP requests with randomized payloads."""

from __future__ import annotations

from reqsender._internal.config import SenderConfig, load_config
from reqsender._internal.errors import ConfigError, ReqSenderError, ValidationError
from reqsender.encoding import EncoderFormat, encode
from reqsender.engine.events import ErrorKind, EventKind, ResponseInfo, TransportError
from reqsender.engine.profiles import PROFILES, apply_profile
from reqsender.engine.sender import HTTP_ERROR_CODES, RequestOutcome, RequestSender
from reqsender.template import TemplateEngine, expand

__version__ = "0.1.0"

__all__ = [
    "HTTP_ERROR_CODES",
    "PROFILES",
    "ConfigError",
    "EncoderFormat",
    "ErrorKind",
    "EventKind",
    "ReqSenderError",
    "RequestOutcome",
    "RequestSender",
    "ResponseInfo",
    "SenderConfig",
    "TemplateEngine",
    "TransportError",
    "ValidationError",
    "apply_profile",
    "encode",
    "expand",
    "load_config",
]

"""Custom exception hierarchy for reqsender."""

from __future__ import annotations


class ReqSenderError(Exception):
    """Base exception for all reqsender errors.

    Request outcomes (HTTP error statuses, transport failures, unexpandable
    template macros) are never raised. They are reported as engine events or
    left as literal text. Only misuse of the configuration surface raises.
    """


class ConfigError(ReqSenderError):
    """Raised when configuration is invalid or missing.

    Examples:
        - An environment variable has a value of the wrong type.
        - A timeout or redirect limit is negative.
    """


class ValidationError(ReqSenderError):
    """Raised when user-supplied input cannot be applied.

    The target state is never partially modified when this is raised.

    Examples:
        - A header or data argument list has odd length.
        - A header or field to remove does not exist.
        - A connection field name is unknown or its value has the wrong type.
    """

"""Configuration loading for reqsender."""

from __future__ import annotations

import os
from dataclasses import dataclass

from reqsender._internal.errors import ConfigError
from reqsender.encoding import exists

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class SenderConfig:
    """Initial settings for a request sender.

    Attributes:
        timeout_ms: Per-socket idle timeout in milliseconds. 0 disables it.
        ignore_errors: Keep repeating after an HTTP error status.
        ignore_timeout: Keep repeating after a request timeout.
        encoder: Name of the payload encoder.
        follow_redirects: Follow 3xx responses automatically.
        max_redirects: Redirect limit when following redirects.
        user_agent: Optional ``User-Agent`` header seeded into new senders.
    """

    timeout_ms: int = 5000
    ignore_errors: bool = False
    ignore_timeout: bool = True
    encoder: str = "querystring"
    follow_redirects: bool = True
    max_redirects: int = 10
    user_agent: str | None = None


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        msg = f"{name} must be an integer, got: {raw!r}"
        raise ConfigError(msg) from None
    if value < 0:
        msg = f"{name} must be >= 0, got: {value}"
        raise ConfigError(msg)
    return value


def parse_bool(raw: str) -> bool | None:
    """Parse true/false, yes/no, on/off or 1/0; None if unrecognized."""
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = parse_bool(raw)
    if value is not None:
        return value
    msg = f"{name} must be a boolean (true/false), got: {raw!r}"
    raise ConfigError(msg)


def load_config() -> SenderConfig:
    """Load configuration from environment variables with defaults.

    Environment variables:
        REQSENDER_TIMEOUT_MS: Request timeout in milliseconds (default: 5000).
        REQSENDER_MAX_REDIRECTS: Redirect limit (default: 10).
        REQSENDER_ENCODER: Payload encoder name (default: querystring).
        REQSENDER_IGNORE_ERRORS: Keep repeating on HTTP errors (default: false).
        REQSENDER_IGNORE_TIMEOUT: Keep repeating on timeouts (default: true).
        REQSENDER_FOLLOW_REDIRECTS: Follow redirects (default: true).
        REQSENDER_USER_AGENT: Default ``User-Agent`` header (default: unset).

    Returns:
        Populated SenderConfig instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    defaults = SenderConfig()
    encoder = os.environ.get("REQSENDER_ENCODER", defaults.encoder)
    if not exists(encoder):
        msg = f"REQSENDER_ENCODER must name a known encoder, got: {encoder!r}"
        raise ConfigError(msg)

    return SenderConfig(
        timeout_ms=_int_from_env("REQSENDER_TIMEOUT_MS", defaults.timeout_ms),
        ignore_errors=_bool_from_env("REQSENDER_IGNORE_ERRORS", defaults.ignore_errors),
        ignore_timeout=_bool_from_env("REQSENDER_IGNORE_TIMEOUT", defaults.ignore_timeout),
        encoder=encoder,
        follow_redirects=_bool_from_env(
            "REQSENDER_FOLLOW_REDIRECTS", defaults.follow_redirects
        ),
        max_redirects=_int_from_env("REQSENDER_MAX_REDIRECTS", defaults.max_redirects),
        user_agent=os.environ.get("REQSENDER_USER_AGENT") or None,
    )

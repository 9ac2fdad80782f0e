"""Preset configurations for common kinds of requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from reqsender._internal.logging import get_logger

if TYPE_CHECKING:
    from reqsender.engine.sender import RequestSender

logger = get_logger("engine.profiles")


@dataclass(frozen=True)
class Profile:
    """A named bundle of connection options and an encoder.

    Attributes:
        name: Profile name used on the command line.
        description: One-line description for help text.
        connection: Options merged into the connection configuration.
        encoder: Encoder to select, or None to keep the current one.
    """

    name: str
    description: str
    connection: dict[str, Any] = field(default_factory=dict)
    encoder: str | None = None


PROFILES: dict[str, Profile] = {
    profile.name: profile
    for profile in (
        Profile(
            "form",
            "Simulate a form submission",
            {
                "method": "POST",
                "headers": {"Content-Type": "application/x-www-form-urlencoded"},
            },
            "querystring",
        ),
        Profile(
            "json",
            "Send JSON POST requests",
            {"method": "POST", "headers": {"Content-Type": "application/json"}},
            "json",
        ),
        Profile(
            "text",
            "Send plain text",
            {"headers": {"Content-Type": "text/plain"}},
            "text",
        ),
        Profile("get", "Simple GET request", {"method": "GET"}),
    )
}


def apply_profile(sender: RequestSender, name: str) -> bool:
    """Configure ``sender`` with the named profile.

    Returns:
        True if applied; False if no such profile exists (sender unchanged).
    """
    profile = PROFILES.get(name)
    if profile is None:
        return False
    if profile.encoder is not None:
        sender.select_encoder(profile.encoder)
    sender.configure_connection(profile.connection)
    logger.debug("Applied profile %r", name)
    return True

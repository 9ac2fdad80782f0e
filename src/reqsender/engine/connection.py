"""Connection configuration owned by a request sender."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

from reqsender._internal.config import parse_bool
from reqsender._internal.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from reqsender._internal.types import Headers

HTTP_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "DELETE", "CONNECT", "OPTIONS", "TRACE", "PATCH"}
)

_INT_FIELDS = frozenset({"port", "max_redirects", "timeout_ms"})
_BOOL_FIELDS = frozenset({"follow_redirects"})


@dataclass
class ConnectionConfig:
    """Where and how requests are sent.

    Attributes:
        host: Target hostname.
        method: HTTP method, upper case.
        port: Target port.
        path: Request path; a leading ``/`` is added when missing.
        headers: Headers sent with every request.
        max_redirects: Redirect limit when ``follow_redirects`` is set.
        follow_redirects: Follow 3xx responses automatically.
        timeout_ms: Per-socket idle timeout in milliseconds, 0 disables it.
        scheme: ``http`` or ``https``.
    """

    host: str = ""
    method: str = "GET"
    port: int = 80
    path: str = "/"
    headers: Headers = field(default_factory=dict)
    max_redirects: int = 10
    follow_redirects: bool = True
    timeout_ms: int = 5000
    scheme: str = "http"

    @property
    def normalized_path(self) -> str:
        """Return the path with a guaranteed leading slash."""
        return self.path if self.path.startswith("/") else f"/{self.path}"

    @property
    def full_path(self) -> str:
        """Return ``host:port/path`` for display."""
        return f"{self.host}:{self.port}{self.normalized_path}"

    @property
    def url(self) -> str:
        """Return the absolute request URL."""
        return f"{self.scheme}://{self.full_path}"

    def merge(self, partial: Mapping[str, Any]) -> None:
        """Merge ``partial`` into this configuration.

        Top-level fields are replaced; ``headers`` is merged key by key.
        The whole update is validated before anything is applied.

        Args:
            partial: Field name to new value.

        Raises:
            ValidationError: If a field name is unknown or a value cannot be
                converted to the field's type.
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(partial) - known)
        if unknown:
            msg = f"Unknown connection option(s): {', '.join(unknown)}"
            raise ValidationError(msg)

        updates: dict[str, Any] = {}
        for name, value in partial.items():
            updates[name] = _coerce(name, value)

        headers = updates.pop("headers", None)
        for name, value in updates.items():
            setattr(self, name, value)
        if headers:
            self.headers.update(headers)

    def remove_headers(self, names: Iterable[str]) -> None:
        """Remove the named headers.

        Raises:
            ValidationError: If any header is not set; none are removed then.
        """
        names = list(names)
        missing = [name for name in names if name not in self.headers]
        if missing:
            msg = f"Header '{missing[0]}' does not exist!"
            raise ValidationError(msg)
        for name in names:
            del self.headers[name]

    def snapshot(self) -> ConnectionConfig:
        """Return a deep copy safe to hand to event listeners."""
        return copy.deepcopy(self)

    def as_dict(self) -> dict[str, Any]:
        """Return the top-level options (without headers) for display."""
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "headers"}


def _coerce(name: str, value: Any) -> Any:
    if name in _INT_FIELDS:
        try:
            number = int(value)
        except (TypeError, ValueError):
            msg = f"{name} must be an integer, got: {value!r}"
            raise ValidationError(msg) from None
        if number < 0:
            msg = f"{name} must be >= 0, got: {number}"
            raise ValidationError(msg)
        return number

    if name in _BOOL_FIELDS:
        if isinstance(value, bool):
            return value
        flag = parse_bool(str(value)) if isinstance(value, (str, int)) else None
        if flag is None:
            msg = f"{name} must be true or false, got: {value!r}"
            raise ValidationError(msg)
        return flag

    if name == "method":
        method = str(value).upper()
        if method not in HTTP_METHODS:
            msg = f"Unknown HTTP method: {value!r}"
            raise ValidationError(msg)
        return method

    if name == "scheme":
        scheme = str(value).lower()
        if scheme not in ("http", "https"):
            msg = f"scheme must be http or https, got: {value!r}"
            raise ValidationError(msg)
        return scheme

    if name == "headers":
        if not hasattr(value, "items"):
            msg = "headers must be a mapping"
            raise ValidationError(msg)
        return {str(key): str(val) for key, val in value.items()}

    return str(value)

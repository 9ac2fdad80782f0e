"""Named serializers turning a payload mapping into a request body."""

from __future__ import annotations

import json
from enum import StrEnum
from typing import TYPE_CHECKING
from urllib.parse import quote, urlencode

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

# Characters left unescaped by JavaScript's encodeURIComponent, on top of
# the alphanumerics and "_.-~" that quote() never escapes.
_QUERY_SAFE = "!*'()"

TEXT_FIELD = "text"


class EncoderFormat(StrEnum):
    """The payload formats a sender can produce."""

    QUERYSTRING = "querystring"
    JSON = "json"
    TEXT = "text"


def encode_querystring(fields: Mapping[str, str]) -> str:
    """Encode as ``key=value&key=value``, percent-escaping reserved characters.

    Example::

        >>> encode_querystring({"a": "1", "b": "x y"})
        'a=1&b=x%20y'
    """
    return urlencode(list(fields.items()), safe=_QUERY_SAFE, quote_via=quote)


def encode_json(fields: Mapping[str, str]) -> str:
    """Encode as a compact JSON object."""
    return json.dumps(dict(fields), separators=(",", ":"), ensure_ascii=False)


def encode_text(fields: Mapping[str, str]) -> str:
    """Return the ``text`` field verbatim; every other field is ignored."""
    return str(fields.get(TEXT_FIELD, ""))


_ENCODERS: dict[str, Callable[[Mapping[str, str]], str]] = {
    EncoderFormat.QUERYSTRING: encode_querystring,
    EncoderFormat.JSON: encode_json,
    EncoderFormat.TEXT: encode_text,
}


def exists(format_name: str) -> bool:
    """Return True if ``format_name`` names a registered encoder."""
    return format_name in _ENCODERS


def list_formats() -> list[str]:
    """Return the registered encoder names in registration order."""
    return [str(name) for name in _ENCODERS]


def encode(format_name: str, fields: Mapping[str, str]) -> str:
    """Serialize ``fields`` with the named encoder.

    An unknown ``format_name`` yields an empty body rather than an error;
    callers that care check :func:`exists` first.

    Args:
        format_name: One of :func:`list_formats`.
        fields: Materialized payload.

    Returns:
        The request body.
    """
    encoder = _ENCODERS.get(format_name)
    if encoder is None:
        return ""
    return encoder(fields)

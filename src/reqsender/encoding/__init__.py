"""Payload encoders: querystring, JSON and raw text."""

from __future__ import annotations

from reqsender.encoding.encoders import (
    TEXT_FIELD,
    EncoderFormat,
    encode,
    exists,
    list_formats,
)

__all__ = [
    "TEXT_FIELD",
    "EncoderFormat",
    "encode",
    "exists",
    "list_formats",
]

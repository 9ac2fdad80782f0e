"""Shared type aliases for reqsender."""

from __future__ import annotations

# HTTP headers dictionary.
Headers = dict[str, str]

# A parsed macro argument: quoted strings stay strings, digit runs become ints.
MacroArg = str | int

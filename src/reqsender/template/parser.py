"""Scanner for ``$name(args)`` macro invocations embedded in strings.

Grammar::

    invocation := "$" identifier "(" [ arg { "," arg } ] ")"
    identifier := [A-Za-z0-9_-]+
    arg        := "'" any-but-quote* "'" | digit+

Whitespace is allowed around arguments. Parentheses may not appear inside
the argument list, so an outer call wrapping another call never matches;
only the innermost call does.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from reqsender._internal.types import MacroArg

_CALL = re.compile(r"\$(?P<name>[A-Za-z0-9_-]+)\((?P<args>[^()]*)\)")
_ARG = re.compile(r"\s*(?:'(?P<quoted>[^']*)'|(?P<number>\d+))\s*(?P<sep>,|\Z)")


@dataclass(frozen=True)
class MacroInvocation:
    """A single parsed macro call.

    Attributes:
        name: Macro name as written (may be an alias).
        args: Parsed arguments; quoted strings without quotes, digits as int.
        start: Index of the ``$`` in the scanned string.
        end: Index one past the closing parenthesis.
        source: The literal invocation text.
    """

    name: str
    args: tuple[MacroArg, ...]
    start: int
    end: int
    source: str


def parse_args(raw: str) -> tuple[MacroArg, ...] | None:
    """Parse a comma-separated argument list.

    Args:
        raw: Text between the parentheses of an invocation.

    Returns:
        The parsed arguments, or None if the list is malformed (unbalanced
        quote, bare word, empty slot).
    """
    if not raw.strip():
        return ()

    args: list[MacroArg] = []
    pos = 0
    while True:
        match = _ARG.match(raw, pos)
        if match is None:
            return None
        quoted = match.group("quoted")
        args.append(quoted if quoted is not None else int(match.group("number")))
        pos = match.end()
        if match.group("sep") != ",":
            return tuple(args)
        if pos >= len(raw):
            # trailing comma
            return None


def iter_invocations(text: str) -> Iterator[MacroInvocation]:
    """Yield every well-formed invocation in ``text`` from left to right.

    The cursor only moves forward: after a well-formed invocation it resumes
    past the closing parenthesis, after a malformed one it resumes one
    character past the ``$``. Scanning therefore always terminates.
    """
    pos = 0
    while True:
        match = _CALL.search(text, pos)
        if match is None:
            return
        args = parse_args(match.group("args"))
        if args is None:
            pos = match.start() + 1
            continue
        yield MacroInvocation(
            name=match.group("name"),
            args=args,
            start=match.start(),
            end=match.end(),
            source=match.group(0),
        )
        pos = match.end()

"""Fixed registry of the random value generators usable in templates."""

from __future__ import annotations

import math
import random
import string
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from reqsender._internal.types import MacroArg

# Marker arity for generators that accept any number of arguments.
VARIADIC = -1

LETTERS = string.ascii_lowercase
DIGITS = string.digits

MAIL_DOMAINS: tuple[str, ...] = (
    "aol.com",
    "att.net",
    "comcast.net",
    "facebook.com",
    "gmail.com",
    "gmx.com",
    "googlemail.com",
    "google.com",
    "hotmail.com",
    "hotmail.co.uk",
    "mac.com",
    "me.com",
    "mail.com",
    "msn.com",
    "live.com",
    "sbcglobal.net",
    "verizon.net",
    "yahoo.com",
    "yahoo.co.uk",
)


def random_length(rng: random.Random, min_len: int, max_len: int) -> int:
    """Pick a length in ``[min_len, max_len)``.

    ``max_len`` itself is never chosen; ``min_len == max_len`` always yields
    ``min_len``. The draw is floored, so reversed bounds count down from
    ``min_len`` toward ``max_len``.
    """
    return min_len + math.floor(rng.random() * (max_len - min_len))


def _pick(rng: random.Random, items: Sequence[str]) -> str:
    return items[int(rng.random() * len(items))]


def random_string(rng: random.Random, min_len: int, max_len: int) -> str:
    """Return lowercase ASCII letters with a length in ``[min_len, max_len)``."""
    return "".join(_pick(rng, LETTERS) for _ in range(random_length(rng, min_len, max_len)))


def random_digits(rng: random.Random, min_len: int, max_len: int) -> str:
    """Return decimal digits with a length in ``[min_len, max_len)``."""
    return "".join(_pick(rng, DIGITS) for _ in range(random_length(rng, min_len, max_len)))


def random_choice(rng: random.Random, *choices: str) -> str:
    """Return one of ``choices`` uniformly at random."""
    return _pick(rng, [str(choice) for choice in choices])


def random_mail_domain(rng: random.Random) -> str:
    """Return one of the well-known mail provider domains."""
    return _pick(rng, MAIL_DOMAINS)


@dataclass(frozen=True)
class Generator:
    """A named template function.

    Attributes:
        name: Canonical macro name (e.g. ``random-string``).
        arity: Exact argument count, or ``VARIADIC``.
        func: Callable receiving the rng followed by the parsed arguments.
        min_args: Lower bound on the argument count for variadic generators.
        usage: Example invocation shown in help text.
    """

    name: str
    arity: int
    func: Callable[..., str]
    min_args: int = 0
    usage: str = ""

    def accepts(self, arg_count: int) -> bool:
        """Return True if the generator can be called with ``arg_count`` args."""
        if self.arity == VARIADIC:
            return arg_count >= self.min_args
        return arg_count == self.arity

    def __call__(self, rng: random.Random, args: Sequence[MacroArg]) -> str:
        return self.func(rng, *args)


_GENERATORS: tuple[Generator, ...] = (
    Generator("random-string", 2, random_string, usage="$random-string(5, 8)"),
    Generator("random-digits", 2, random_digits, usage="$random-digits(2, 4)"),
    Generator(
        "random-choice",
        VARIADIC,
        random_choice,
        min_args=1,
        usage="$random-choice('red', 'green', 'blue')",
    ),
    Generator("random-mail-domain", 0, random_mail_domain, usage="$random-mail-domain()"),
)

# Short spellings accepted for compatibility with existing templates.
ALIASES: dict[str, str] = {
    "str": "random-string",
    "num": "random-digits",
    "text": "random-choice",
    "mail": "random-mail-domain",
}

GENERATORS: dict[str, Generator] = {gen.name: gen for gen in _GENERATORS}


def lookup(name: str) -> Generator | None:
    """Resolve a macro name or alias to its generator, or None if unknown."""
    return GENERATORS.get(ALIASES.get(name, name))

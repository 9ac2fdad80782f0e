"""Template language for randomized payload values.

Strings may embed ``$name(args)`` invocations of a fixed set of generators
(``random-string``, ``random-digits``, ``random-choice``,
``random-mail-domain``) that are replaced by fresh random values on every
expansion.
"""

from __future__ import annotations

from reqsender.template.expander import TemplateEngine, expand, expand_fields
from reqsender.template.generators import ALIASES, GENERATORS, VARIADIC, Generator
from reqsender.template.parser import MacroInvocation, iter_invocations

__all__ = [
    "ALIASES",
    "GENERATORS",
    "VARIADIC",
    "Generator",
    "MacroInvocation",
    "TemplateEngine",
    "expand",
    "expand_fields",
    "iter_invocations",
]

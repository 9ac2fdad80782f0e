"""Expansion of template strings into randomized literal values."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from reqsender._internal.logging import get_logger
from reqsender.template.generators import VARIADIC, lookup
from reqsender.template.parser import iter_invocations

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reqsender.template.parser import MacroInvocation

logger = get_logger("template.expander")


class TemplateEngine:
    """Expands ``$name(args)`` macros using a single random source.

    Example::

        engine = TemplateEngine(random.Random(42))
        engine.expand("$random-string(5, 8)@$random-mail-domain()")

    Attributes:
        rng: Random source shared by every generator call.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng if rng is not None else random.Random()  # noqa: S311

    def expand(self, template: str) -> str:
        """Replace every resolvable macro in ``template`` with its value.

        Unknown macro names, argument-count mismatches, and arguments of the
        wrong type leave the invocation text unchanged. Generated values are
        never scanned again.

        Args:
            template: Raw template string.

        Returns:
            The expanded string.
        """
        pieces: list[str] = []
        cursor = 0
        for invocation in iter_invocations(template):
            value = self._evaluate(invocation)
            if value is None:
                continue
            pieces.append(template[cursor : invocation.start])
            pieces.append(value)
            cursor = invocation.end
        pieces.append(template[cursor:])
        return "".join(pieces)

    def expand_fields(self, fields: Mapping[str, str]) -> dict[str, str]:
        """Expand every value of a payload template, keeping key order."""
        return {key: self.expand(str(value)) for key, value in fields.items()}

    def _evaluate(self, invocation: MacroInvocation) -> str | None:
        generator = lookup(invocation.name)
        if generator is None:
            logger.debug("Unknown template function %r left unexpanded", invocation.source)
            return None

        if not generator.accepts(len(invocation.args)):
            logger.debug(
                "Template function %r takes %s arguments, got %d",
                generator.name,
                "a variable number of" if generator.arity == VARIADIC else generator.arity,
                len(invocation.args),
            )
            return None

        try:
            return generator(self.rng, invocation.args)
        except (TypeError, ValueError):
            logger.debug("Bad arguments for %r", invocation.source, exc_info=True)
            return None


_default_engine = TemplateEngine()


def expand(template: str, rng: random.Random | None = None) -> str:
    """Expand ``template`` with ``rng`` (or a module-level random source)."""
    engine = _default_engine if rng is None else TemplateEngine(rng)
    return engine.expand(template)


def expand_fields(
    fields: Mapping[str, str],
    rng: random.Random | None = None,
) -> dict[str, str]:
    """Expand every value of ``fields`` with ``rng`` (or a shared source)."""
    engine = _default_engine if rng is None else TemplateEngine(rng)
    return engine.expand_fields(fields)

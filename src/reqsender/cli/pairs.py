"""Parsing of key/value arguments given on the command line."""

from __future__ import annotations

from typing import TYPE_CHECKING

from reqsender._internal.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def parse_pairs(items: Sequence[str], what: str = "field") -> dict[str, str]:
    """Turn ``[k1, v1, k2, v2, ...]`` into ``{k1: v1, k2: v2}``.

    Args:
        items: Alternating keys and values.
        what: Noun used in error messages (``field``, ``header``).

    Returns:
        The mapping, in argument order. Later duplicates win.

    Raises:
        ValidationError: If fewer than two items are given or the last key
            has no value.
    """
    if len(items) < 2:
        msg = f"You must specify at least one {what} along with one value!"
        raise ValidationError(msg)
    if len(items) % 2 != 0:
        msg = f"{what.capitalize()} '{items[-1]}' does not have a value!"
        raise ValidationError(msg)
    return {items[i]: items[i + 1] for i in range(0, len(items), 2)}


def parse_assignments(
    items: Sequence[str],
    separator: str = "=",
    what: str = "field",
) -> dict[str, str]:
    """Turn ``["k1=v1", "k2=v2"]`` into ``{k1: v1, k2: v2}``.

    Only the first ``separator`` splits; values may contain it. Whitespace
    around keys and values is stripped.

    Raises:
        ValidationError: If an item has no separator or an empty key.
    """
    result: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition(separator)
        key = key.strip()
        if not sep or not key:
            msg = f"{what.capitalize()} '{item}' must look like NAME{separator}VALUE"
            raise ValidationError(msg)
        result[key] = value.strip()
    return result

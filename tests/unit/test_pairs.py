"""Tests for command-line key/value parsing."""

from __future__ import annotations

import pytest

from reqsender._internal.errors import ValidationError
from reqsender.cli.pairs import parse_assignments, parse_pairs


class TestParsePairs:
    def test_pairs(self):
        assert parse_pairs(["user", "$str(5,7)", "pass", "x"]) == {
            "user": "$str(5,7)",
            "pass": "x",
        }

    def test_later_duplicate_wins(self):
        assert parse_pairs(["a", "1", "a", "2"]) == {"a": "2"}

    @pytest.mark.parametrize("items", [[], ["only"]])
    def test_too_few(self, items: list[str]):
        with pytest.raises(ValidationError, match="at least one field along with one value"):
            parse_pairs(items)

    def test_missing_value(self):
        with pytest.raises(ValidationError, match="Header 'X-B' does not have a value!"):
            parse_pairs(["X-A", "1", "X-B"], what="header")


class TestParseAssignments:
    def test_assignments(self):
        assert parse_assignments(["a=1", "b = two words "]) == {"a": "1", "b": "two words"}

    def test_value_may_contain_separator(self):
        assert parse_assignments(["q=a=b"]) == {"q": "a=b"}

    def test_header_separator(self):
        result = parse_assignments(["Content-Type: text/plain"], separator=":", what="header")
        assert result == {"Content-Type": "text/plain"}

    def test_empty_value_allowed(self):
        assert parse_assignments(["a="]) == {"a": ""}

    @pytest.mark.parametrize("item", ["novalue", "=x"])
    def test_malformed(self, item: str):
        with pytest.raises(ValidationError, match="NAME=VALUE"):
            parse_assignments([item])

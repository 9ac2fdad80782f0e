"""Tests for the preset configurations."""

from __future__ import annotations

import pytest

from reqsender.engine.profiles import PROFILES, apply_profile
from reqsender.engine.sender import RequestSender


class TestProfiles:
    def test_known_profiles(self):
        assert list(PROFILES) == ["form", "json", "text", "get"]

    @pytest.mark.parametrize(
        ("name", "method", "content_type", "encoder"),
        [
            ("form", "POST", "application/x-www-form-urlencoded", "querystring"),
            ("json", "POST", "application/json", "json"),
            ("text", "GET", "text/plain", "text"),
        ],
    )
    def test_apply(self, name: str, method: str, content_type: str, encoder: str):
        sender = RequestSender()
        assert apply_profile(sender, name) is True
        assert sender.connection.method == method
        assert sender.connection.headers["Content-Type"] == content_type
        assert sender.encoder == encoder

    def test_get_keeps_encoder_and_headers(self):
        sender = RequestSender()
        sender.select_encoder("json")
        sender.configure_connection(method="POST", headers={"X-Keep": "1"})

        assert apply_profile(sender, "get") is True

        assert sender.connection.method == "GET"
        assert sender.connection.headers == {"X-Keep": "1"}
        assert sender.encoder == "json"

    def test_unknown_profile_leaves_sender_unchanged(self):
        sender = RequestSender()
        assert apply_profile(sender, "xml") is False
        assert sender.connection.method == "GET"
        assert sender.connection.headers == {}
        assert sender.encoder == "querystring"

    def test_profiles_do_not_share_header_dicts(self):
        sender = RequestSender()
        apply_profile(sender, "json")
        sender.configure_connection(headers={"Content-Type": "changed"})
        assert PROFILES["json"].connection["headers"]["Content-Type"] == "application/json"

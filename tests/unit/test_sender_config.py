"""Tests for RequestSender configuration and error classification."""

from __future__ import annotations

import errno
import socket
from types import SimpleNamespace

import aiohttp
import pytest

from reqsender._internal.config import SenderConfig
from reqsender._internal.errors import ConfigError, ValidationError
from reqsender.engine.events import ErrorKind, EventKind
from reqsender.engine.sender import RequestSender, classify_error

_CONN_KEY = SimpleNamespace(host="example.invalid", port=80, ssl=True)


class TestClassifyError:
    def test_timeout(self):
        assert classify_error(TimeoutError()) is ErrorKind.TIMEOUT

    def test_socket_timeout(self):
        assert classify_error(aiohttp.SocketTimeoutError()) is ErrorKind.TIMEOUT

    def test_dns(self):
        exc = aiohttp.ClientConnectorDNSError(_CONN_KEY, socket.gaierror(-2, "Name not known"))
        assert classify_error(exc) is ErrorKind.HOST_NOT_FOUND

    def test_refused(self):
        exc = aiohttp.ClientConnectorError(
            _CONN_KEY, ConnectionRefusedError(errno.ECONNREFUSED, "Connection refused")
        )
        assert classify_error(exc) is ErrorKind.CONNECTION_REFUSED

    def test_reset(self):
        assert classify_error(aiohttp.ServerDisconnectedError()) is ErrorKind.CONNECTION_RESET
        assert classify_error(ConnectionResetError()) is ErrorKind.CONNECTION_RESET

    def test_other(self):
        assert classify_error(ValueError("bad url")) is ErrorKind.OTHER


class TestConfiguration:
    def test_defaults_from_config(self):
        sender = RequestSender(SenderConfig(timeout_ms=100, ignore_errors=True, encoder="json"))
        assert sender.timeout_ms == 100
        assert sender.ignore_errors is True
        assert sender.ignore_timeout is True
        assert sender.encoder == "json"
        assert sender.follow_redirects is True
        assert sender.max_redirects == 10
        assert sender.success_count == 0
        assert sender.fail_count == 0
        assert not sender.locked
        assert not sender.repeating

    def test_user_agent_seeded(self):
        sender = RequestSender(SenderConfig(user_agent="probe/1.0"))
        assert sender.connection.headers == {"User-Agent": "probe/1.0"}

    def test_unknown_encoder_in_config(self):
        with pytest.raises(ConfigError):
            RequestSender(SenderConfig(encoder="xml"))

    def test_configure_connection_mapping_and_kwargs(self):
        sender = RequestSender()
        sender.configure_connection({"host": "example.com", "port": 8080}, path="login")
        assert sender.full_path == "example.com:8080/login"

    def test_configure_connection_invalid(self):
        sender = RequestSender()
        with pytest.raises(ValidationError):
            sender.configure_connection(port="x")

    def test_payload_template_replaced_wholesale(self):
        sender = RequestSender()
        sender.configure_payload_template({"a": "1", "b": "2"})
        sender.configure_payload_template({"c": "3"})
        assert sender.payload_template == {"c": "3"}

    def test_payload_template_copy(self):
        sender = RequestSender()
        sender.configure_payload_template({"a": "1"})
        sender.payload_template["b"] = "2"
        assert sender.payload_template == {"a": "1"}

    def test_select_encoder(self):
        sender = RequestSender()
        assert sender.select_encoder("text") is True
        assert sender.encoder == "text"
        assert sender.select_encoder("xml") is False
        assert sender.encoder == "text"
        assert sender.valid_encoders == ["querystring", "json", "text"]

    def test_ignore_flags(self):
        sender = RequestSender()
        sender.ignore_errors = True
        sender.ignore_timeout = False
        assert sender.ignore_errors is True
        assert sender.ignore_timeout is False

    def test_on_registers_handler(self):
        sender = RequestSender()
        sender.on(EventKind.REQUEST_START, print)
        assert sender.events.handler_count(EventKind.REQUEST_START) == 1


class TestLifecycle:
    async def test_send_outside_context(self):
        sender = RequestSender()
        with pytest.raises(RuntimeError, match="async context manager"):
            await sender.send_once()
        assert not sender.locked

    async def test_stop_when_idle_emits_nothing(self):
        sender = RequestSender()
        stops = []
        sender.on(EventKind.REPEATER_STOP, lambda *a: stops.append(a))
        sender.stop_repeater()
        assert stops == []

    @pytest.mark.parametrize(("interval", "count"), [(0, 0), (-5, 0), (100, -1)])
    async def test_start_repeater_rejects_bad_arguments(self, interval: int, count: int):
        sender = RequestSender()
        with pytest.raises(ValidationError):
            sender.start_repeater(interval, count)
        assert not sender.repeating

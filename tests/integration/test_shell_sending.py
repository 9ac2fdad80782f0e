"""Integration tests for the shell's sending commands."""

from __future__ import annotations

import io
import re
from typing import TYPE_CHECKING

import pytest
from rich.console import Console

from reqsender.cli.render import EventRenderer
from reqsender.cli.shell import Shell
from reqsender.engine.sender import RequestSender

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from tests.conftest import ServerInfo


@pytest.fixture
async def shell(http_server: ServerInfo) -> AsyncIterator[Shell]:
    output = Console(file=io.StringIO(), width=200, color_system=None)
    async with RequestSender() as sender:
        shell = Shell(sender, output=output)
        EventRenderer(output).attach(sender)
        await shell.execute(
            f"editoptions --host {http_server.host} --port {http_server.port} --path /echo"
        )
        yield shell


def _output(shell: Shell) -> str:
    return shell.console.file.getvalue()


@pytest.mark.timeout(15)
class TestShellSending:
    async def test_send_request_without_data(self, shell: Shell, http_server: ServerInfo):
        await shell.execute("sendrequest")

        output = _output(shell)
        assert "without data" in output
        assert "Request successfully sent! (Received 200 status)" in output
        assert len(http_server.received) == 1

    async def test_send_request_with_template(self, shell: Shell, http_server: ServerInfo):
        await shell.execute("autoconfigure form")
        await shell.execute("editdata user '$random-string(6, 7)'")
        await shell.execute("sendrequest")

        body = http_server.received[-1]["body"]
        assert body.startswith("user=")
        assert len(body) == len("user=") + 6
        assert "user: " in _output(shell)

    async def test_send_request_with_explicit_fields(
        self, shell: Shell, http_server: ServerInfo
    ):
        await shell.execute("autoconfigure json")
        await shell.execute("sendrequest name bob")

        assert http_server.received[-1]["body"] == '{"name":"bob"}'

    async def test_failed_request_rendered(self, shell: Shell):
        await shell.execute("editoptions --path /status/503")
        await shell.execute("sendrequest")

        assert "Request failed! Received 503 status (Service Unavailable)" in _output(shell)

    async def test_unlisted_status_rendered(self, shell: Shell):
        await shell.execute("editoptions --path /status/418")
        await shell.execute("sendrequest")

        assert "Request sent, but received 418 status" in _output(shell)

    async def test_start_repeater(self, shell: Shell, http_server: ServerInfo):
        await shell.execute("startrepeater 20 3")

        output = _output(shell)
        assert "Starting request repeater with 3 repetitions (20ms interval)" in output
        assert "Stopped request repeater" in output
        assert re.search(r"Success count:\s+3", output)
        assert len(http_server.received) == 3
        assert not shell.sender.repeating

    async def test_timeout_rendered(self, shell: Shell):
        await shell.execute("editoptions --path /delay?delay=0.5")
        await shell.execute("editsender --timeout 100")
        await shell.execute("sendrequest")

        assert "Request timed out or aborted" in _output(shell)

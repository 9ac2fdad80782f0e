"""Shared test fixtures for the reqsender test suite."""

from __future__ import annotations

import asyncio
import logging
import random
import socket
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pytest
from aiohttp import web

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


# =============================================================================
# Network utilities
# =============================================================================


def _get_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


@dataclass
class ServerInfo:
    """Address of a running test server and the requests it received."""

    host: str
    port: int
    received: list[dict[str, Any]] = field(default_factory=list)

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"


# =============================================================================
# Test HTTP server handlers
# =============================================================================

_RECEIVED = web.AppKey("received", list)


async def _echo_handler(request: web.Request) -> web.Response:
    """Record the request and echo it back as JSON."""
    body = await request.read()
    record = {
        "method": request.method,
        "path": str(request.path),
        "headers": dict(request.headers),
        "body": body.decode("utf-8", errors="replace"),
    }
    request.app[_RECEIVED].append(record)
    return web.json_response(record, status=200)


async def _status_handler(request: web.Request) -> web.Response:
    """Return the status given in the path (``/status/404``)."""
    await request.read()
    status = int(request.match_info["code"])
    request.app[_RECEIVED].append({"method": request.method, "path": str(request.path)})
    headers = {"Location": "/echo/redirected"} if 300 <= status < 400 else None
    return web.Response(status=status, headers=headers)


async def _delay_handler(request: web.Request) -> web.Response:
    """Respond after a configurable delay (query param: ?delay=0.5)."""
    delay = float(request.query.get("delay", "0.1"))
    request.app[_RECEIVED].append({"method": request.method, "path": str(request.path)})
    await asyncio.sleep(delay)
    return web.json_response({"delayed_by": delay})


async def _loop_handler(request: web.Request) -> web.Response:
    """Redirect to itself forever."""
    raise web.HTTPFound("/loop")


def _create_test_app() -> web.Application:
    """Build the test server app with all routes."""
    app = web.Application()
    app[_RECEIVED] = []
    app.router.add_route("*", "/echo{path:.*}", _echo_handler)
    app.router.add_route("*", "/status/{code}", _status_handler)
    app.router.add_route("*", "/delay", _delay_handler)
    app.router.add_route("*", "/loop", _loop_handler)
    return app


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _restore_reqsender_logger() -> Iterator[None]:
    """Undo logger changes made by CLI runs and logging tests."""
    logger = logging.getLogger("reqsender")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


@pytest.fixture
async def http_server() -> AsyncIterator[ServerInfo]:
    """Aiohttp test server running on the test's event loop."""
    app = _create_test_app()
    port = _get_free_port()
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    yield ServerInfo(host="127.0.0.1", port=port, received=app[_RECEIVED])
    await runner.cleanup()


@pytest.fixture
def sync_http_server() -> Iterator[ServerInfo]:
    """Test server running in a background thread for sync (CLI) tests."""
    port = _get_free_port()
    started = threading.Event()
    loop_holder: list[asyncio.AbstractEventLoop] = []
    app = _create_test_app()

    def _thread_target() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        runner = web.AppRunner(app)
        loop.run_until_complete(runner.setup())
        site = web.TCPSite(runner, "127.0.0.1", port)
        loop.run_until_complete(site.start())
        loop_holder.append(loop)
        started.set()
        loop.run_forever()
        loop.run_until_complete(runner.cleanup())
        loop.close()

    thread = threading.Thread(target=_thread_target, daemon=True)
    thread.start()
    started.wait(timeout=5.0)

    yield ServerInfo(host="127.0.0.1", port=port, received=app[_RECEIVED])

    if loop_holder:
        loop_holder[0].call_soon_threadsafe(loop_holder[0].stop)
    thread.join(timeout=5.0)


@pytest.fixture
def rng() -> random.Random:
    """Deterministic random source."""
    return random.Random(1234)


@pytest.fixture
def unused_port() -> int:
    """A localhost port with nothing listening on it."""
    return _get_free_port()

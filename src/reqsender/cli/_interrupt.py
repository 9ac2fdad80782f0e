"""Ctrl+C handling shared by the commands that run a repeater."""

from __future__ import annotations

import signal
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable


def install_interrupt_handler(loop: asyncio.AbstractEventLoop, callback: Callable[[], None]) -> None:
    """Run ``callback`` on SIGINT/SIGTERM instead of raising KeyboardInterrupt."""
    if sys.platform != "win32":
        loop.add_signal_handler(signal.SIGINT, callback)
        loop.add_signal_handler(signal.SIGTERM, callback)
    else:
        # Windows doesn't support add_signal_handler
        signal.signal(signal.SIGINT, lambda _s, _f: loop.call_soon_threadsafe(callback))
        signal.signal(signal.SIGTERM, lambda _s, _f: loop.call_soon_threadsafe(callback))


def remove_interrupt_handler(loop: asyncio.AbstractEventLoop) -> None:
    """Restore the default SIGINT/SIGTERM behaviour."""
    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
    else:
        signal.signal(signal.SIGINT, signal.default_int_handler)
        signal.signal(signal.SIGTERM, signal.SIG_DFL)

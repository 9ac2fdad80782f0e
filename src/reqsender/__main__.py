"""Allow ``python -m reqsender``."""

from __future__ import annotations

from reqsender.cli.app import app

app()

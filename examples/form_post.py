"""Single form POST: the simplest possible reqsender script.

Sends one form submission with a randomized user name and prints the
outcome. Run it with:

    python examples/form_post.py
"""

from __future__ import annotations

import asyncio

from reqsender import RequestSender, apply_profile


async def main() -> None:
    """Send one form submission to a local server."""
    async with RequestSender() as sender:
        apply_profile(sender, "form")
        sender.configure_connection(host="localhost", port=8080, path="/login")
        sender.configure_payload_template(
            {"username": "$random-string(6, 10)", "password": "$random-digits(8, 9)"}
        )
        outcome = await sender.send_once()
        print(f"{sender.full_path}: {outcome}")


if __name__ == "__main__":
    asyncio.run(main())

"""Signup flood: repeat JSON signups with fresh fake identities.

Demonstrates the repeater and event hooks: ten signups, one every 250ms,
each with a new email address. Run it with:

    python examples/signup_flood.py
"""

from __future__ import annotations

import asyncio

from reqsender import EventKind, RequestSender, apply_profile


def report(success_count: int, fail_count: int) -> None:
    print(f"done: {success_count} succeeded, {fail_count} failed")


async def main() -> None:
    """Fire ten signups at a local API."""
    async with RequestSender() as sender:
        apply_profile(sender, "json")
        sender.configure_connection(host="localhost", port=8080, path="/api/signup")
        sender.configure_payload_template(
            {
                "email": "$random-string(5, 9)$random-digits(2, 4)@$random-mail-domain()",
                "plan": "$random-choice('free', 'pro', 'team')",
            }
        )
        sender.on(EventKind.REQUEST_START, lambda fields, _conn: print(fields["email"]))
        sender.on(EventKind.REPEATER_STOP, report)

        sender.start_repeater(interval_ms=250, repeat_count=10)
        await sender.wait_repeater_stopped()
        await sender.wait_idle()


if __name__ == "__main__":
    asyncio.run(main())

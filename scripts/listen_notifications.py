"""Utility script to follow the live notifications of one access token."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os

import httpx

from notifier.application.session import NotificationSession
from notifier.application.use_cases.notifications import (
    ERROR_EVENT,
    NOTIFICATION_EVENT,
    STATE_EVENT,
    SubscriptionState,
)
from notifier.config import get_settings
from notifier.domain.entities import Notification
from notifier.infrastructure.api_client import NotificationApiError

logger = logging.getLogger("listen_notifications")


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the listener."""

    parser = argparse.ArgumentParser(
        description="Print the notifications pushed to an authenticated marketplace user.",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("ACCESS_TOKEN"),
        help="Access token of the user (default: ACCESS_TOKEN environment variable)",
    )
    parser.add_argument(
        "--history",
        action="store_true",
        help="Print the historical notifications before listening.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args()


def _print_notification(session: NotificationSession, notification: Notification) -> None:
    marker = " " if notification.is_read else "*"
    print(
        f"{marker} [{notification.id}] {notification.title}: {notification.message}"
        f" -> {session.route(notification)}"
    )


async def listen(token: str, show_history: bool) -> int:
    settings = get_settings()
    async with httpx.AsyncClient() as client:
        session = NotificationSession(client, settings=settings)
        finished = asyncio.Event()

        session.events.on(NOTIFICATION_EVENT, lambda n: _print_notification(session, n))
        session.events.on(ERROR_EVENT, lambda error: finished.set())
        session.events.on(
            STATE_EVENT,
            lambda state: finished.set() if state is SubscriptionState.IDLE else None,
        )

        session.credentials.set(token)
        await session.start()
        if session.identity is None:
            logger.error("The access token does not identify a customer or owner")
            return 1

        if show_history:
            try:
                for notification in await session.load_history():
                    _print_notification(session, notification)
            except NotificationApiError as exc:
                logger.warning("Could not load notification history: %s", exc)

        try:
            await finished.wait()
        finally:
            await session.close()
    return 0


def main() -> None:
    """Follow the notification stream until it ends or is interrupted."""

    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not args.token:
        raise SystemExit("No access token was provided.")

    try:
        exit_code = asyncio.run(listen(args.token, args.history))
    except KeyboardInterrupt:
        exit_code = 0
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()

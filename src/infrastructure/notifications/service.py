# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification service for dispatching a notification to its channels.

The service owns the configured channels and sends a payload through
each of them. A notification counts as dispatched when at least one
channel reports it as sent.
"""

import logging

from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    ConsoleEmailChannel,
    NotificationPayload,
)

logger = logging.getLogger(__name__)


class NotificationDispatchError(Exception):
    """Raised when no channel could deliver a notification.

    Attributes:
        message: Error description.
        results: Per channel results of the failed attempt.
    """

    def __init__(self, message: str, results: list[ChannelResult] | None = None) -> None:
        self.message = message
        self.results = results or []
        super().__init__(message)


class NotificationService:
    """Service for sending notifications to users.

    Attributes:
        channels: Channels every notification is sent through.
    """

    def __init__(self, channels: list[BaseChannel] | None = None) -> None:
        """Initialize the notification service.

        Args:
            channels: Channels to use. Defaults to the console email channel.
        """
        self.channels: list[BaseChannel] = (
            channels if channels is not None else [ConsoleEmailChannel()]
        )
        logger.info("NotificationService initialized with %d channels", len(self.channels))

    async def send(self, payload: NotificationPayload) -> list[ChannelResult]:
        """Send a notification through every channel.

        Args:
            payload: Notification to send.

        Returns:
            List of channel results.

        Raises:
            NotificationDispatchError: If no channel reported the
                notification as sent.
        """
        results: list[ChannelResult] = []

        for channel in self.channels:
            try:
                result = await channel.send(payload)
            except Exception as e:
                logger.error(
                    "Channel %s failed for %s: %s",
                    channel.channel_type.value,
                    payload.recipient_id,
                    str(e),
                    exc_info=True,
                )
                result = channel.create_failure_result(str(e))
            results.append(result)

        if not any(r.is_sent for r in results):
            reasons = ", ".join(
                f"{r.channel.value}={r.status.value}" + (f" ({r.error_message})" if r.error_message else "")
                for r in results
            ) or "no channels configured"
            raise NotificationDispatchError(
                f"Notification to {payload.recipient_id} was not delivered: {reasons}",
                results=results,
            )

        logger.debug(
            "Notification to %s sent through %d channels",
            payload.recipient_id,
            sum(1 for r in results if r.is_sent),
        )
        return results

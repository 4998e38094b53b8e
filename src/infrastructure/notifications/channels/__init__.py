# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification channels for delivering notifications.

- ConsoleEmailChannel: Renders email notifications and writes them to the log

Usage:
    from src.infrastructure.notifications.channels import (
        ConsoleEmailChannel,
        NotificationPayload,
    )

    email = ConsoleEmailChannel()

    payload = NotificationPayload(
        recipient_id="student-1",
        recipient_email="student@example.com",
        recipient_name="Asha Rao",
        title="New Assignment: Algebra",
        message="Dear Asha Rao, ...",
    )

    result = await email.send(payload)
"""

from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    NotificationPayload,
)
from src.infrastructure.notifications.channels.console import ConsoleEmailChannel

__all__ = [
    # Base types
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "NotificationPayload",
    # Channels
    "ConsoleEmailChannel",
]

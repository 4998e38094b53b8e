# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification system.

This package delivers notifications to users through channels.
Emails are rendered and written to the log; no mail server is used.

Key Components:
- NotificationService: Sends a payload through all configured channels
- ConsoleEmailChannel: Email channel writing rendered messages to the log
- NotificationPayload: Data structure for notification content

Usage:
    from src.infrastructure.notifications import (
        NotificationPayload,
        NotificationService,
    )

    service = NotificationService()
    results = await service.send(payload)
"""

from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    ConsoleEmailChannel,
    DeliveryStatus,
    NotificationPayload,
)
from src.infrastructure.notifications.service import (
    NotificationDispatchError,
    NotificationService,
)

__all__ = [
    # Service
    "NotificationService",
    "NotificationDispatchError",
    # Channel types
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "NotificationPayload",
    # Channels
    "ConsoleEmailChannel",
]

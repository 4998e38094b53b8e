# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification domain package.

Reacts to assignment events by notifying enrolled students.
"""

from src.domains.notification.handler import (
    AssignmentNotificationHandler,
    FanOutResult,
)

__all__ = [
    "AssignmentNotificationHandler",
    "FanOutResult",
]

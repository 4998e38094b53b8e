# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Centralized event type definitions.

Using constants instead of string literals provides a single source of
truth for event names. Pattern subscribers (e.g. "assignment.*") pick up
new event types automatically.
"""


class EventTypes:
    """All event types organized by domain."""

    class Assignment:
        """Assignment lifecycle events."""

        CREATED = "assignment.created"


class EventPatterns:
    """Wildcard patterns for subscribing to multiple events."""

    ALL_ASSIGNMENT = "assignment.*"

    # Global wildcard
    ALL = "*"

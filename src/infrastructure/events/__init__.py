# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event infrastructure module.

This module provides an in-memory event bus for decoupled communication
between system components.

Components:
- EventBus: In-memory pub/sub with pattern matching and per-subscriber queues
- EventTypes: Centralized event type constants

Architecture:
    AssignmentService → EventBus.publish() → queue → handler worker

Quick Start:
    from src.infrastructure.events import get_event_bus, EventTypes

    event_bus = get_event_bus()
    event_bus.subscribe(EventTypes.Assignment.CREATED, my_handler)

    await event_bus.publish(EventTypes.Assignment.CREATED, snapshot)
"""

from src.infrastructure.events.bus import (
    EventBus,
    EventData,
    EventHandler,
    get_event_bus,
    reset_event_bus,
)
from src.infrastructure.events.types import EventPatterns, EventTypes

__all__ = [
    # Bus
    "EventBus",
    "EventData",
    "EventHandler",
    "get_event_bus",
    "reset_event_bus",
    # Types
    "EventTypes",
    "EventPatterns",
]

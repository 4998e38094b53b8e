# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-memory event bus.

This module provides an async event bus that decouples publishers from
the latency and failures of their subscribers. Events are published and
subscribed to by event type strings.

The EventBus supports:
- Exact event type matching (e.g., "assignment.created")
- Wildcard pattern matching (e.g., "assignment.*")
- Async handlers running outside the publisher's call

Delivery guarantees:
- publish() only enqueues; it returns before any handler runs.
- Every subscription has its own FIFO queue and worker task, so one
  subscriber sees events in publish order and a slow subscriber does
  not delay the others.
- Best effort, at most once: a failing handler is logged and the event
  is not retried. Events still queued when the bus is closed or the
  process exits are lost.
- Queues are unbounded; there is no backpressure towards publishers.

Example:
    from src.infrastructure.events import get_event_bus, EventTypes

    event_bus = get_event_bus()

    async def on_assignment_created(event):
        print(f"New assignment: {event.payload.title}")

    event_bus.subscribe(EventTypes.Assignment.CREATED, on_assignment_created)

    await event_bus.publish(EventTypes.Assignment.CREATED, snapshot)
"""

import asyncio
import fnmatch
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable
from uuid import uuid4

logger = logging.getLogger(__name__)

# Type alias for event handlers
EventHandler = Callable[["EventData"], Awaitable[Any]]


@dataclass
class EventData:
    """Container for event data with metadata.

    Attributes:
        event_type: The event type string.
        payload: The event payload (an immutable snapshot object).
        event_id: Unique event identifier.
        timestamp: When the event was published.
    """

    event_type: str
    payload: Any
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        payload = self.payload.to_dict() if hasattr(self.payload, "to_dict") else self.payload
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "payload": payload,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(eq=False)
class _Subscription:
    """A handler bound to an event type or pattern, with its own queue."""

    event_type: str
    handler: EventHandler
    queue: asyncio.Queue | None = None
    worker: asyncio.Task | None = None

    @property
    def is_pattern(self) -> bool:
        return "*" in self.event_type or "?" in self.event_type

    def matches(self, event_type: str) -> bool:
        if self.is_pattern:
            return fnmatch.fnmatch(event_type, self.event_type)
        return self.event_type == event_type


class EventBus:
    """In-memory async event bus with pattern matching support.

    Thread-safety: designed for use from a single event loop. For
    multi-process delivery a durable broker is required.

    Example:
        bus = EventBus()

        # Exact subscription
        bus.subscribe("assignment.created", handler)

        # Pattern subscription
        bus.subscribe("assignment.*", audit_handler)

        # Publish (returns immediately)
        await bus.publish("assignment.created", snapshot)

        # Wait until every queued event was handled
        await bus.join()
    """

    def __init__(self) -> None:
        """Initialize the event bus."""
        self._subscriptions: list[_Subscription] = []
        self._event_count = 0
        self._handled_count = 0
        self._failed_count = 0
        logger.debug("EventBus initialized")

    def subscribe(
        self,
        event_type: str,
        handler: EventHandler,
    ) -> None:
        """Subscribe a handler to an event type or pattern.

        Args:
            event_type: Event type string or pattern with wildcards.
            handler: Async function called with the EventData.
        """
        subscription = _Subscription(event_type=event_type, handler=handler)
        self._subscriptions.append(subscription)
        if subscription.is_pattern:
            logger.debug("Subscribed pattern handler to: %s", event_type)
        else:
            logger.debug("Subscribed handler to: %s", event_type)

    def unsubscribe(
        self,
        event_type: str,
        handler: EventHandler,
    ) -> bool:
        """Unsubscribe a handler from an event type or pattern.

        Events already queued for the subscription are dropped.

        Args:
            event_type: Event type string or pattern.
            handler: The handler function to remove.

        Returns:
            True if handler was found and removed, False otherwise.
        """
        for subscription in self._subscriptions:
            if subscription.event_type == event_type and subscription.handler == handler:
                self._subscriptions.remove(subscription)
                if subscription.worker is not None:
                    subscription.worker.cancel()
                return True
        return False

    async def publish(
        self,
        event_type: str,
        payload: Any,
    ) -> EventData:
        """Publish an event to all matching subscribers.

        The event is enqueued for every matching subscription and this
        method returns without waiting for any handler.

        Args:
            event_type: The event type string.
            payload: Event payload.

        Returns:
            EventData object with event metadata.
        """
        event = EventData(event_type=event_type, payload=payload)
        self._event_count += 1

        matching = [s for s in self._subscriptions if s.matches(event_type)]
        if not matching:
            logger.debug("No handlers for event: %s", event_type)
            return event

        for subscription in matching:
            self._ensure_worker(subscription)
            subscription.queue.put_nowait(event)

        logger.debug(
            "Queued event %s (%s) for %d handlers",
            event_type,
            event.event_id,
            len(matching),
        )
        return event

    def _ensure_worker(self, subscription: _Subscription) -> None:
        """Start the subscription's worker on the running loop if needed."""
        if subscription.queue is None:
            subscription.queue = asyncio.Queue()
        if subscription.worker is None or subscription.worker.done():
            subscription.worker = asyncio.get_running_loop().create_task(
                self._run(subscription),
                name=f"event-bus:{subscription.event_type}",
            )

    async def _run(self, subscription: _Subscription) -> None:
        """Deliver queued events to one handler, one at a time."""
        queue = subscription.queue
        while True:
            event = await queue.get()
            try:
                await subscription.handler(event)
                self._handled_count += 1
            except Exception as e:
                self._failed_count += 1
                logger.error(
                    "Handler error for event %s (%s): %s",
                    event.event_type,
                    event.event_id,
                    str(e),
                    exc_info=True,
                )
            finally:
                queue.task_done()

    async def join(self) -> None:
        """Wait until every queued event has been handled."""
        queues = [s.queue for s in self._subscriptions if s.queue is not None]
        for queue in queues:
            await queue.join()

    async def close(self) -> None:
        """Stop all workers.

        Events that are still queued are dropped.
        """
        workers = []
        dropped = 0
        for subscription in self._subscriptions:
            if subscription.queue is not None:
                dropped += subscription.queue.qsize()
            if subscription.worker is not None and not subscription.worker.done():
                subscription.worker.cancel()
                workers.append(subscription.worker)
            subscription.worker = None
            subscription.queue = None

        if workers:
            await asyncio.gather(*workers, return_exceptions=True)

        if dropped:
            logger.warning("EventBus closed with %d undelivered events", dropped)
        else:
            logger.debug("EventBus closed")

    def clear(self) -> None:
        """Remove all subscriptions."""
        for subscription in self._subscriptions:
            if subscription.worker is not None:
                subscription.worker.cancel()
        self._subscriptions.clear()
        logger.debug("EventBus cleared all subscriptions")

    def get_stats(self) -> dict[str, Any]:
        """Get event bus statistics.

        Returns:
            Dictionary with subscription and event counts.
        """
        return {
            "exact_subscriptions": sum(1 for s in self._subscriptions if not s.is_pattern),
            "pattern_subscriptions": sum(1 for s in self._subscriptions if s.is_pattern),
            "events_published": self._event_count,
            "events_handled": self._handled_count,
            "handler_failures": self._failed_count,
            "pending": sum(s.queue.qsize() for s in self._subscriptions if s.queue is not None),
            "event_types": sorted({s.event_type for s in self._subscriptions}),
        }


# Singleton instance
_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the singleton event bus instance.

    Returns:
        EventBus instance.
    """
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the event bus singleton.

    Useful for testing to ensure clean state between tests.
    """
    global _event_bus
    if _event_bus is not None:
        _event_bus.clear()
    _event_bus = None

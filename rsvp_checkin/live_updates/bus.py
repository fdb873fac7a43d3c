"""Process-wide publish/subscribe broadcaster for dashboard updates.

Delivery is best-effort to the subscribers connected at publish time. Nothing
is persisted or replayed; a dashboard that reconnects reloads its state from
the records and stats endpoints.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Any

from rsvp_checkin.config.settings import settings
from rsvp_checkin.live_updates.events import DomainEvent

logger = logging.getLogger(__name__)


class Subscription:
    """One connected dashboard's mailbox."""

    def __init__(self, maxsize: int) -> None:
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def offer(self, message: dict[str, Any]) -> bool:
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            self.dropped += 1
            return False
        return True

    async def get(self) -> dict[str, Any]:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()


class LiveUpdateBus:
    def __init__(self, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._subscribers: set[Subscription] = set()
        self.dropped_events = 0

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        subscription = Subscription(self._queue_size)
        self._subscribers.add(subscription)
        logger.info(f"Dashboard subscribed ({self.subscriber_count} connected)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscribers.discard(subscription)
        logger.info(
            f"Dashboard unsubscribed ({self.subscriber_count} connected, "
            f"{subscription.dropped} event(s) dropped for it)"
        )

    def publish(self, event: DomainEvent) -> int:
        """Fan ``event`` out without waiting on any subscriber.

        Returns the number of subscribers that accepted the message. Failures
        are logged and never propagate to the operation that published.
        """
        try:
            message = event.to_message()
        except Exception:
            logger.exception(f"Could not serialize {event.event_type} event")
            return 0
        delivered = 0
        for subscription in list(self._subscribers):
            if subscription.offer(message):
                delivered += 1
            else:
                self.dropped_events += 1
                logger.warning(f"Dropped {event.event_type} event for a slow dashboard")
        logger.debug(f"Published {event.event_type} to {delivered} dashboard(s)")
        return delivered


@lru_cache
def get_live_update_bus() -> LiveUpdateBus:
    return LiveUpdateBus(queue_size=settings.live_update_queue_size)

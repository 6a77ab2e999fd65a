# core/realtime.py

"""
In-process change feed.

    subscription = change_feed.subscribe("notifications", {"user_id": uid})
    for event in subscription:      # blocks until unsubscribed
        ...
    subscription.unsubscribe()

Writers publish only after the backend confirmed the write. Delivery is
fire-and-forget: each subscriber has a bounded queue and an event that
does not fit is dropped. Clients treat events as "something changed,
re-fetch" signals, so a missed event costs freshness, never correctness.
"""

import queue
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Iterator, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from core.config import settings
from core.logging_config import get_logger

logger = get_logger("realtime")


class ChangeEvent(BaseModel):
    table: str
    event: str                      # INSERT | UPDATE | DELETE
    record: dict = Field(default_factory=dict)
    occurred_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class Subscription:

    def __init__(self, feed: "ChangeFeed", table: str, filters: Optional[dict], maxsize: int):
        self.id = uuid4().hex
        self.table = table
        self.filters = dict(filters or {})
        self.dropped = 0
        self.active = True
        self._feed = feed
        self._queue: "queue.Queue[Optional[ChangeEvent]]" = queue.Queue(maxsize=maxsize)

    def matches(self, event: ChangeEvent) -> bool:
        if event.table != self.table:
            return False
        return all(event.record.get(k) == v for k, v in self.filters.items())

    def offer(self, event: ChangeEvent) -> bool:
        try:
            self._queue.put_nowait(event)
            return True
        except queue.Full:
            self.dropped += 1
            logger.warning(
                f"Realtime subscriber {self.id} on {self.table} is full; dropped {event.event} event"
            )
            return False

    def get(self, timeout: Optional[float] = None) -> Optional[ChangeEvent]:
        """Next event, or None on timeout / after unsubscribe."""
        if not self.active and self._queue.empty():
            return None
        try:
            return self._queue.get(timeout=timeout) if timeout else self._queue.get_nowait()
        except queue.Empty:
            return None

    def drain(self) -> List[ChangeEvent]:
        events = []
        while True:
            event = self.get()
            if event is None:
                return events
            events.append(event)

    def __iter__(self) -> Iterator[ChangeEvent]:
        while self.active:
            event = self.get(timeout=0.5)
            if event is not None:
                yield event

    def unsubscribe(self):
        self._feed.unsubscribe(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.unsubscribe()


class ChangeFeed:

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscriptions: Dict[str, Subscription] = {}
        self._lock = Lock()

    def subscribe(self, table: str, filters: Optional[dict] = None) -> Subscription:
        subscription = Subscription(self, table, filters, self.queue_size)
        with self._lock:
            self._subscriptions[subscription.id] = subscription
        logger.debug(f"Subscribed {subscription.id} to {table} {subscription.filters}")
        return subscription

    def unsubscribe(self, subscription: Subscription):
        with self._lock:
            self._subscriptions.pop(subscription.id, None)
        subscription.active = False
        logger.debug(f"Unsubscribed {subscription.id} from {subscription.table}")

    def publish(self, table: str, event: str, record: dict) -> int:
        """Returns the number of subscribers the event was queued for."""
        change = ChangeEvent(table=table, event=event, record=dict(record or {}))

        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.matches(change)]

        return sum(1 for s in targets if s.offer(change))

    def subscriber_count(self, table: Optional[str] = None) -> int:
        with self._lock:
            if table is None:
                return len(self._subscriptions)
            return sum(1 for s in self._subscriptions.values() if s.table == table)

    def clear(self):
        with self._lock:
            subscriptions = list(self._subscriptions.values())
            self._subscriptions.clear()
        for s in subscriptions:
            s.active = False


change_feed = ChangeFeed(queue_size=settings.REALTIME_QUEUE_SIZE)

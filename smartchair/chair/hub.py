"""In-process fan-out of posture verdicts to bounded per-subscriber queues."""
from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from typing import Iterator, Optional

from .domain import PostureVerdict
from .errors import PostureServiceError, PublishFailure

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100


class Subscription:
    def __init__(self, hub: "BroadcastHub", subscription_id: int, maxsize: int) -> None:
        self.id = subscription_id
        self.dropped = 0
        self._hub = hub
        self._queue: deque[PostureVerdict] = deque(maxlen=maxsize)
        self._ready = threading.Condition()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        with self._ready:
            return len(self._queue)

    def _offer(self, verdict: PostureVerdict) -> None:
        with self._ready:
            if self._closed:
                return
            if len(self._queue) == self._queue.maxlen:
                self.dropped += 1
            self._queue.append(verdict)
            self._ready.notify()

    def _shutdown(self) -> None:
        with self._ready:
            self._closed = True
            self._queue.clear()
            self._ready.notify_all()

    def get(self, timeout: Optional[float] = None) -> Optional[PostureVerdict]:
        """Next verdict, or None if the timeout expires or the subscription closes."""
        with self._ready:
            if not self._ready.wait_for(lambda: self._queue or self._closed, timeout=timeout):
                return None
            if self._queue:
                return self._queue.popleft()
            return None

    def __iter__(self) -> Iterator[PostureVerdict]:
        while True:
            verdict = self.get()
            if verdict is None:
                return
            yield verdict

    def close(self) -> None:
        self._hub.unsubscribe(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class BroadcastHub:
    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self.queue_size = queue_size
        self._lock = threading.Lock()
        self._subscriptions: dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, maxsize: Optional[int] = None) -> Subscription:
        with self._lock:
            if self._closed:
                raise PostureServiceError("Broadcast hub is closed")
            subscription = Subscription(self, next(self._ids), maxsize or self.queue_size)
            self._subscriptions[subscription.id] = subscription
        logger.info(f"Subscriber {subscription.id} attached")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            removed = self._subscriptions.pop(subscription.id, None)
        subscription._shutdown()
        if removed is not None:
            logger.info(f"Subscriber {subscription.id} detached (dropped {subscription.dropped})")

    def publish(self, verdict: PostureVerdict) -> int:
        """Queue a verdict for every current subscriber; returns how many got it."""
        with self._lock:
            if self._closed:
                raise PublishFailure("Broadcast hub is closed")
            targets = list(self._subscriptions.values())

        for subscription in targets:
            subscription._offer(verdict)
        return len(targets)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            targets = list(self._subscriptions.values())
            self._subscriptions.clear()
        for subscription in targets:
            subscription._shutdown()

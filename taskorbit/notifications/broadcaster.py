"""
In-process broadcaster for task events.

Subscribers are plain callables invoked synchronously with (event, payload).
A failing subscriber is logged and skipped so one bad listener cannot block
the others or the request that triggered the event.
"""
import itertools
import logging
import threading
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)

TASK_STATUS_CHANGED = "taskStatusChanged"

Subscriber = Callable[[str, Dict[str, Any]], None]


class StatusBroadcaster:
    """Fan-out of task events to registered subscribers."""

    def __init__(self):
        self._subscribers: Dict[int, Subscriber] = {}
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> int:
        """Register a callback and return a token for unsubscribe()."""
        with self._lock:
            token = next(self._tokens)
            self._subscribers[token] = callback
        logger.debug(f"Subscriber {token} registered")
        return token

    def unsubscribe(self, token: int) -> bool:
        """Remove a subscriber. Returns False if the token was unknown."""
        with self._lock:
            removed = self._subscribers.pop(token, None) is not None
        if removed:
            logger.debug(f"Subscriber {token} removed")
        return removed

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event: str, payload: Dict[str, Any]) -> int:
        """
        Deliver an event to every subscriber.

        Returns:
            Number of subscribers that received the event without error
        """
        with self._lock:
            subscribers = list(self._subscribers.items())

        delivered = 0
        for token, callback in subscribers:
            try:
                callback(event, payload)
                delivered += 1
            except Exception as e:
                logger.warning(f"Subscriber {token} failed handling {event}: {e}", exc_info=True)
        return delivered

"""Cache invalidation signals for the UI layer.

Committed lifecycle changes are announced on an in-process bus so that
dashboards and cached pages for the affected tenant can refresh. A failing
subscriber is logged and skipped; it never affects the other subscribers or
the write that produced the signal.
"""

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InvalidationSignal:
    family: str
    entity_id: str
    client_id: str | None
    reason: str
    emitted_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def paths(self) -> list[str]:
        """Cache keys a UI should drop for this signal."""
        collection = f"/{self.family.lower()}s"
        return [collection, f"{collection}/{self.entity_id}"]


Subscriber = Callable[[InvalidationSignal], None]


class InvalidationBus:
    """Synchronous fan-out to registered subscribers."""

    def __init__(self, history_size: int = 100):
        self._subscribers: list[Subscriber] = []
        self.recent: deque[InvalidationSignal] = deque(maxlen=history_size)

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def publish(self, signal: InvalidationSignal) -> int:
        """Deliver ``signal`` to every subscriber; returns how many succeeded."""
        self.recent.append(signal)
        delivered = 0
        for subscriber in list(self._subscribers):
            try:
                subscriber(signal)
            except Exception:
                logger.exception(
                    "Invalidation subscriber failed",
                    family=signal.family,
                    entity_id=signal.entity_id,
                    reason=signal.reason,
                )
                continue
            delivered += 1
        return delivered

    def clear(self) -> None:
        self._subscribers.clear()
        self.recent.clear()

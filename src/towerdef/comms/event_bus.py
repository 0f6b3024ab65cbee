"""EventBus — thread-safe pub/sub for outbound simulation notifications.

The simulation never reacts to its own events: every state change happens
inside an explicit tick or action call.  The bus only tells collaborators
(renderer, audio, UI toasts) that something happened, so they can play a
sound or flash a message without polling the snapshot for diffs.

Subscribers receive ``{"type": str, "data": dict}`` messages on a bounded
queue.  Publishing never blocks: when a subscriber falls behind, its oldest
message is dropped to make room.
"""

from __future__ import annotations

import queue
import threading


class EventBus:
    """Simple thread-safe pub/sub for pushing events to subscribers."""

    def __init__(self, maxsize: int = 100) -> None:
        self._lock = threading.Lock()
        self._maxsize = maxsize
        self._subscribers: list[tuple[queue.Queue, str | None]] = []

    def subscribe(self, event_type: str | None = None) -> queue.Queue:
        """Subscribe to events. Returns a Queue that receives messages.

        With *event_type* set, only messages of that type are delivered;
        otherwise every published message is.
        """
        q: queue.Queue = queue.Queue(maxsize=self._maxsize)
        with self._lock:
            self._subscribers.append((q, event_type))
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            self._subscribers = [
                (sub, flt) for sub, flt in self._subscribers if sub is not q
            ]

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event_type: str, data: dict | None = None) -> None:
        msg = {"type": event_type}
        if data is not None:
            msg["data"] = data
        with self._lock:
            for q, flt in self._subscribers:
                if flt is not None and flt != event_type:
                    continue
                try:
                    q.put_nowait(msg)
                except queue.Full:
                    # Drop oldest message to make room.
                    try:
                        q.get_nowait()
                    except queue.Empty:
                        pass
                    try:
                        q.put_nowait(msg)
                    except queue.Full:
                        pass


def drain(q: queue.Queue) -> list[dict]:
    """Return every message currently waiting on *q* without blocking."""
    messages = []
    while True:
        try:
            messages.append(q.get_nowait())
        except queue.Empty:
            return messages

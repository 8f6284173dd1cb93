"""Live attendance feed: in-process publish/subscribe of newly recorded check-ins.

Delivery is best-effort. A subscriber that misses events (slow consumer,
reconnect, another worker process) re-reads the ledger, which stays the
source of truth.
"""
import json
import logging
import threading
from queue import Empty, Full, Queue
from typing import Dict, Iterator, List, Optional, Set

logger = logging.getLogger(__name__)

EVENT_ATTENDANCE_CREATED = 'attendance.created'

class Subscription:
    """One subscriber's bounded event queue for a single session."""

    def __init__(self, feed: 'AttendanceFeed', session_id: int, max_queue: int):
        self.feed = feed
        self.session_id = session_id
        self.queue = Queue(maxsize=max_queue)
        self.dropped = 0

    def offer(self, event: Dict) -> None:
        try:
            self.queue.put_nowait(event)
        except Full:
            self.dropped += 1
            logger.warning("Feed subscriber for session %s is lagging, event dropped", self.session_id)

    def get(self, timeout: float) -> Optional[Dict]:
        """Next event, or None when nothing arrives within timeout."""
        try:
            return self.queue.get(timeout=timeout)
        except Empty:
            return None

    def events(self, timeout: float) -> Iterator[Optional[Dict]]:
        """Endless iterator yielding events, or None on every idle timeout."""
        while True:
            yield self.get(timeout)

    def close(self) -> None:
        self.feed.unsubscribe(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

class AttendanceFeed:
    """Fan-out hub keyed by session id."""

    def __init__(self, max_queue: int = 256):
        self.max_queue = max_queue
        self._subscribers: Dict[int, Set[Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, session_id: int) -> Subscription:
        subscription = Subscription(self, session_id, self.max_queue)
        with self._lock:
            self._subscribers.setdefault(session_id, set()).add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.session_id)
            if subscribers is None:
                return
            subscribers.discard(subscription)
            if not subscribers:
                del self._subscribers[subscription.session_id]

    def subscriber_count(self, session_id: int) -> int:
        with self._lock:
            return len(self._subscribers.get(session_id, ()))

    def publish(self, session_id: int, record: Dict) -> int:
        """Push an attendance.created event; returns how many subscribers got it."""
        event = {'event': EVENT_ATTENDANCE_CREATED, 'data': record}
        with self._lock:
            targets = list(self._subscribers.get(session_id, ()))
        for subscription in targets:
            subscription.offer(event)
        return len(targets)

attendance_feed = AttendanceFeed()

def format_sse(data: Dict, event: str = None, event_id=None) -> str:
    """Encode one Server-Sent Events message."""
    lines = []
    if event_id is not None:
        lines.append(f"id: {event_id}")
    if event:
        lines.append(f"event: {event}")
    lines.append(f"data: {json.dumps(data)}")
    return '\n'.join(lines) + '\n\n'

def sse_stream(subscription: Subscription, replay: List[Dict], heartbeat: float,
               after_id: int = 0) -> Iterator[str]:
    """Replay ledger rows, then live events, skipping ids already sent.

    The subscription must be opened before ``replay`` is read so nothing
    inserted in between is lost; duplicates from the overlap are dropped here.
    """
    last_id = after_id or 0
    try:
        for record in replay:
            last_id = max(last_id, record['id'])
            yield format_sse(record, EVENT_ATTENDANCE_CREATED, record['id'])

        for event in subscription.events(heartbeat):
            if event is None:
                yield ': keep-alive\n\n'
                continue
            record = event['data']
            if record['id'] <= last_id:
                continue
            last_id = record['id']
            yield format_sse(record, event['event'], record['id'])
    finally:
        subscription.close()

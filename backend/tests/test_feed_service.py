"""Tests for the live attendance feed."""
import json
from itertools import islice

from attendease.services.feed_service import (EVENT_ATTENDANCE_CREATED, AttendanceFeed,
                                              format_sse, sse_stream)


def _payload(chunk):
    data_line = [line for line in chunk.splitlines() if line.startswith('data: ')][0]
    return json.loads(data_line[len('data: '):])


def test_publish_reaches_session_subscribers_only():
    feed = AttendanceFeed()
    mine = feed.subscribe(1)
    theirs = feed.subscribe(2)

    delivered = feed.publish(1, {'id': 10, 'student_name': 'Jane Doe'})

    assert delivered == 1
    event = mine.get(timeout=0.1)
    assert event['event'] == EVENT_ATTENDANCE_CREATED
    assert event['data']['id'] == 10
    assert theirs.get(timeout=0.05) is None


def test_unsubscribe_stops_delivery():
    feed = AttendanceFeed()
    with feed.subscribe(1):
        assert feed.subscriber_count(1) == 1

    assert feed.subscriber_count(1) == 0
    assert feed.publish(1, {'id': 1}) == 0


def test_slow_subscriber_drops_instead_of_blocking():
    feed = AttendanceFeed(max_queue=2)
    subscription = feed.subscribe(1)

    for record_id in range(5):
        feed.publish(1, {'id': record_id})

    assert subscription.dropped == 3
    assert [subscription.get(0.05)['data']['id'] for _ in range(2)] == [0, 1]


def test_format_sse():
    chunk = format_sse({'id': 7}, event='attendance.created', event_id=7)

    assert chunk == 'id: 7\nevent: attendance.created\ndata: {"id": 7}\n\n'


def test_stream_replays_then_skips_duplicates():
    """Rows read from the ledger are not sent again when the live event arrives."""
    feed = AttendanceFeed()
    subscription = feed.subscribe(1)
    feed.publish(1, {'id': 2})
    feed.publish(1, {'id': 3})

    stream = sse_stream(subscription, replay=[{'id': 1}, {'id': 2}], heartbeat=0.05)
    chunks = list(islice(stream, 3))
    stream.close()

    assert [_payload(chunk)['id'] for chunk in chunks] == [1, 2, 3]
    assert feed.subscriber_count(1) == 0


def test_stream_honours_after_id():
    feed = AttendanceFeed()
    subscription = feed.subscribe(1)
    feed.publish(1, {'id': 4})
    feed.publish(1, {'id': 6})

    stream = sse_stream(subscription, replay=[], heartbeat=0.05, after_id=5)
    first = next(stream)
    stream.close()

    assert _payload(first)['id'] == 6


def test_stream_sends_keep_alive_when_idle():
    feed = AttendanceFeed()
    stream = sse_stream(feed.subscribe(1), replay=[], heartbeat=0.01)

    assert next(stream) == ': keep-alive\n\n'
    stream.close()
    assert feed.subscriber_count(1) == 0

"""
Tests for the in-process status broadcaster.
"""
from taskorbit.notifications.broadcaster import StatusBroadcaster, TASK_STATUS_CHANGED


class TestStatusBroadcaster:

    def test_publish_without_subscribers_is_dropped(self):
        broadcaster = StatusBroadcaster()
        assert broadcaster.publish(TASK_STATUS_CHANGED, {"id": "1"}) == 0

    def test_every_subscriber_called_once(self):
        broadcaster = StatusBroadcaster()
        first, second = [], []
        broadcaster.subscribe(lambda e, p: first.append((e, p)))
        broadcaster.subscribe(lambda e, p: second.append((e, p)))

        delivered = broadcaster.publish(TASK_STATUS_CHANGED, {"id": "1"})

        assert delivered == 2
        assert first == [(TASK_STATUS_CHANGED, {"id": "1"})]
        assert second == [(TASK_STATUS_CHANGED, {"id": "1"})]

    def test_unsubscribe(self):
        broadcaster = StatusBroadcaster()
        received = []
        token = broadcaster.subscribe(lambda e, p: received.append(p))
        assert broadcaster.unsubscribe(token) is True
        assert broadcaster.unsubscribe(token) is False
        broadcaster.publish(TASK_STATUS_CHANGED, {})
        assert received == []
        assert broadcaster.subscriber_count == 0

    def test_failing_subscriber_is_isolated(self):
        broadcaster = StatusBroadcaster()
        received = []

        def broken(event, payload):
            raise RuntimeError("socket closed")

        broadcaster.subscribe(broken)
        broadcaster.subscribe(lambda e, p: received.append(p))

        assert broadcaster.publish(TASK_STATUS_CHANGED, {"id": "x"}) == 1
        assert received == [{"id": "x"}]

    def test_tokens_are_unique(self):
        broadcaster = StatusBroadcaster()
        tokens = {broadcaster.subscribe(lambda e, p: None) for _ in range(5)}
        assert len(tokens) == 5

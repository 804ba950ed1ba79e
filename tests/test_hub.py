from __future__ import annotations

import threading

import pytest

from chair.domain import PostureStatus, PostureVerdict, utcnow
from chair.errors import PublishFailure
from chair.hub import BroadcastHub

pytestmark = pytest.mark.hub


def _verdict(n: int, source_id: str = "CHAIR01") -> PostureVerdict:
    return PostureVerdict(
        source_id=source_id,
        status=PostureStatus.GOOD,
        timestamp=utcnow(),
        sensors=(float(n), 50.0, 50.0, 50.0),
    )


def _drain(subscription) -> list[PostureVerdict]:
    received = []
    while True:
        verdict = subscription.get(timeout=0)
        if verdict is None:
            return received
        received.append(verdict)


def test_publish_without_subscribers_reaches_nobody(hub: BroadcastHub) -> None:
    assert hub.publish(_verdict(1)) == 0


def test_every_subscriber_gets_its_own_copy_in_order(hub: BroadcastHub) -> None:
    first = hub.subscribe()
    second = hub.subscribe()

    for n in range(3):
        assert hub.publish(_verdict(n)) == 2

    assert [v.sensors[0] for v in _drain(first)] == [0.0, 1.0, 2.0]
    assert [v.sensors[0] for v in _drain(second)] == [0.0, 1.0, 2.0]


def test_late_subscriber_sees_no_history(hub: BroadcastHub) -> None:
    for n in range(5):
        hub.publish(_verdict(n))

    late = hub.subscribe()
    assert late.get(timeout=0) is None

    hub.publish(_verdict(99))
    assert [v.sensors[0] for v in _drain(late)] == [99.0]


def test_full_queue_drops_oldest_without_blocking(hub: BroadcastHub) -> None:
    slow = hub.subscribe(maxsize=3)

    for n in range(5):
        hub.publish(_verdict(n))

    assert slow.dropped == 2
    assert slow.pending == 3
    assert [v.sensors[0] for v in _drain(slow)] == [2.0, 3.0, 4.0]


def test_default_queue_size_comes_from_hub() -> None:
    hub = BroadcastHub(queue_size=2)
    subscription = hub.subscribe()
    for n in range(4):
        hub.publish(_verdict(n))
    assert subscription.pending == 2
    assert subscription.dropped == 2
    hub.close()


def test_get_times_out_when_idle(hub: BroadcastHub) -> None:
    subscription = hub.subscribe()
    assert subscription.get(timeout=0.01) is None
    assert not subscription.closed


def test_unsubscribe_releases_the_subscription(hub: BroadcastHub) -> None:
    subscription = hub.subscribe()
    hub.publish(_verdict(1))
    assert hub.subscriber_count == 1

    hub.unsubscribe(subscription)

    assert hub.subscriber_count == 0
    assert subscription.closed
    assert subscription.pending == 0
    assert subscription.get(timeout=0) is None
    assert hub.publish(_verdict(2)) == 0


def test_context_manager_unsubscribes(hub: BroadcastHub) -> None:
    with hub.subscribe() as subscription:
        assert hub.subscriber_count == 1
    assert subscription.closed
    assert hub.subscriber_count == 0


def test_iteration_is_live_and_ends_on_close(hub: BroadcastHub) -> None:
    subscription = hub.subscribe()
    received: list[PostureVerdict] = []
    got_three = threading.Event()

    def consume() -> None:
        for verdict in subscription:
            received.append(verdict)
            if len(received) == 3:
                got_three.set()

    consumer = threading.Thread(target=consume, daemon=True)
    consumer.start()

    for n in range(3):
        hub.publish(_verdict(n))

    assert got_three.wait(timeout=2)
    subscription.close()
    consumer.join(timeout=2)

    assert not consumer.is_alive()
    assert [v.sensors[0] for v in received] == [0.0, 1.0, 2.0]


def test_closed_hub_refuses_publish_and_wakes_consumers() -> None:
    hub = BroadcastHub()
    subscription = hub.subscribe()
    waiter_result = []

    waiter = threading.Thread(target=lambda: waiter_result.append(subscription.get()), daemon=True)
    waiter.start()

    hub.close()
    waiter.join(timeout=2)

    assert not waiter.is_alive()
    assert waiter_result == [None]
    assert hub.subscriber_count == 0
    with pytest.raises(PublishFailure):
        hub.publish(_verdict(1))

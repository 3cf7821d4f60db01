"""Tests for channels, subscriptions and the action router."""
import threading

import pytest

from pkg.projectboard.errors import ValidationError
from pkg.projectboard.events import (
    ActionRouter,
    BehaviorChannel,
    Channel,
    StatusChange,
    SubscriptionBag,
)
from pkg.projectboard.schema import ProjectStatus


class TestChannel:
    """Multicast delivery and unsubscribe."""

    def test_delivers_to_all_in_order(self):
        ch = Channel("test")
        seen = []
        ch.subscribe(lambda v: seen.append(("a", v)))
        ch.subscribe(lambda v: seen.append(("b", v)))
        ch.publish(1)
        ch.publish(2)
        assert seen == [("a", 1), ("b", 1), ("a", 2), ("b", 2)]

    def test_dispose_stops_delivery(self):
        ch = Channel()
        seen = []
        sub = ch.subscribe(seen.append)
        ch.publish(1)
        sub.dispose()
        sub.dispose()
        ch.publish(2)
        assert seen == [1]
        assert sub.disposed
        assert ch.subscriber_count == 0

    def test_subscription_context_manager(self):
        ch = Channel()
        seen = []
        with ch.subscribe(seen.append):
            ch.publish("in")
        ch.publish("out")
        assert seen == ["in"]

    def test_failing_subscriber_is_isolated(self, caplog):
        ch = Channel("fragile")
        seen = []

        def boom(value):
            raise RuntimeError("boom")

        ch.subscribe(boom)
        ch.subscribe(seen.append)
        ch.publish(1)
        assert seen == [1]
        assert "fragile" in caplog.text

    def test_propagate_errors(self):
        ch = Channel(propagate_errors=True)

        def boom(value):
            raise RuntimeError("boom")

        ch.subscribe(boom)
        with pytest.raises(RuntimeError):
            ch.publish(1)

    def test_map_is_lazy_projection(self):
        ch = Channel()
        doubled = ch.map(lambda v: v * 2).map(lambda v: v + 1)
        seen = []
        sub = doubled.subscribe(seen.append)
        ch.publish(5)
        sub.dispose()
        ch.publish(6)
        assert seen == [11]


class TestBehaviorChannel:
    """Replay of the current value on subscribe."""

    def test_replays_last_value(self):
        ch = BehaviorChannel(initial=[])
        ch.publish([1])
        seen = []
        ch.subscribe(seen.append)
        assert seen == [[1]]
        assert ch.value == [1]

    def test_source_is_recomputed_per_subscriber(self):
        calls = []
        ch = BehaviorChannel(source=lambda: calls.append(1) or len(calls))
        first, second = [], []
        ch.subscribe(first.append)
        ch.subscribe(second.append)
        assert first == [1]
        assert second == [2]

    def test_failed_first_delivery_detaches_subscriber(self):
        ch = BehaviorChannel(initial=1, propagate_errors=True)

        def boom(value):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            ch.subscribe(boom)
        assert ch.subscriber_count == 0

        seen = []
        ch.subscribe(seen.append)
        ch.publish(2)
        assert seen == [1, 2]

    def test_map_replays_mapped_value(self):
        ch = BehaviorChannel(initial=[1, 2, 3])
        seen = []
        ch.map(len).subscribe(seen.append)
        ch.publish([])
        assert seen == [3, 0]


class TestSubscriptionBag:

    def test_dispose_all(self):
        ch = Channel()
        bag = SubscriptionBag()
        bag.add(ch.subscribe(lambda v: None))
        bag.add(ch.subscribe(lambda v: None))
        assert len(bag) == 2
        bag.dispose()
        assert len(bag) == 0
        assert ch.subscriber_count == 0


class TestActionRouter:
    """Broadcast and serialized dispatch."""

    def test_every_subscriber_sees_each_action(self):
        router = ActionRouter()
        first, second = [], []
        router.change_status_action.subscribe(first.append)
        router.change_status_action.subscribe(second.append)
        router.change_status("1", ProjectStatus.DONE)
        assert first == second == [StatusChange("1", ProjectStatus.DONE)]

    def test_inputs_for_columns(self):
        router = ActionRouter()
        todo = router.inputs_for(ProjectStatus.TODO)
        done = router.inputs_for(ProjectStatus.DONE)
        assert todo.provided() == ["add", "update", "change_status", "delete"]
        assert done.provided() == ["update", "change_status", "delete"]
        assert done.delete_action is router.delete_action

    def test_reentrant_action_is_queued(self):
        """An action emitted mid-delivery waits for the current one"""
        router = ActionRouter()
        log = []

        def first(project_id):
            log.append(("first", project_id))
            if project_id == "a":
                router.delete("b")

        router.delete_action.subscribe(first)
        router.delete_action.subscribe(lambda pid: log.append(("second", pid)))

        router.delete("a")
        assert log == [
            ("first", "a"),
            ("second", "a"),
            ("first", "b"),
            ("second", "b"),
        ]

    def test_concurrent_emitters_are_serialized(self):
        router = ActionRouter()
        active = []
        overlaps = []

        def slow(project_id):
            if active:
                overlaps.append(project_id)
            active.append(project_id)
            for _ in range(1000):
                pass
            active.pop()

        router.delete_action.subscribe(slow)
        threads = [
            threading.Thread(target=lambda i=i: [router.delete(f"{i}-{n}") for n in range(50)])
            for i in range(4)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert overlaps == []

    def test_invalid_status_rejected(self):
        router = ActionRouter()
        seen = []
        router.change_status_action.subscribe(seen.append)
        with pytest.raises(ValidationError):
            router.change_status("1", "doing")
        assert seen == []

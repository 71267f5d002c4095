import pytest

from logistics.signals import get_bus, reset_bus
from logistics.signals.bus import InvalidationBus, InvalidationSignal

def _signal(reason="status_changed"):
    return InvalidationSignal(family="PICKUP", entity_id="pk-1", client_id="client-acme", reason=reason)

class TestInvalidationBus:
    def test_publish_reaches_every_subscriber(self):
        bus = InvalidationBus()
        seen_a, seen_b = [], []
        bus.subscribe(seen_a.append)
        bus.subscribe(seen_b.append)

        assert bus.publish(_signal()) == 2
        assert len(seen_a) == len(seen_b) == 1

    def test_failing_subscriber_does_not_block_others(self):
        bus = InvalidationBus()
        seen = []

        def broken(signal):
            raise RuntimeError("cache offline")

        bus.subscribe(broken)
        bus.subscribe(seen.append)

        assert bus.publish(_signal()) == 1
        assert [signal.reason for signal in seen] == ["status_changed"]

    def test_unsubscribe(self):
        bus = InvalidationBus()
        seen = []
        unsubscribe = bus.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        bus.publish(_signal())
        assert seen == []

    def test_recent_history_is_bounded(self):
        bus = InvalidationBus(history_size=2)
        for reason in ("created", "status_changed", "activity"):
            bus.publish(_signal(reason))
        assert [signal.reason for signal in bus.recent] == ["status_changed", "activity"]

    def test_paths(self):
        assert _signal().paths == ["/pickups", "/pickups/pk-1"]


class TestBusSingleton:
    def test_get_bus_returns_the_same_instance(self):
        assert get_bus() is get_bus()

    def test_reset_gives_a_fresh_bus(self):
        first = get_bus()
        reset_bus()
        assert get_bus() is not first

    def test_unknown_bus_kind(self, monkeypatch):
        reset_bus()
        monkeypatch.setenv("INVALIDATION_BUS", "carrier-pigeon")
        with pytest.raises(ValueError):
            get_bus()
        reset_bus()

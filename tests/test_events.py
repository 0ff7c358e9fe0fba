"""
Tests for clinic notification sinks and the event bus.
"""

import logging
from unittest.mock import Mock

import pytest

from vetcare.events import (
    ClinicEvent,
    EventBus,
    EventCounter,
    LoggingSink,
    NotificationSink,
    NullSink,
)


class TestSinks:
    def test_sinks_satisfy_protocol(self):
        for sink in (NullSink(), LoggingSink(), EventCounter(), EventBus()):
            assert isinstance(sink, NotificationSink)

    def test_null_sink_discards(self):
        assert NullSink().notify(ClinicEvent.PET_REGISTERED, {"id": 1}) is None

    def test_logging_sink(self, caplog):
        sink = LoggingSink(logging.getLogger("vetcare.test.events"))

        with caplog.at_level(logging.INFO, logger="vetcare.test.events"):
            sink.notify(ClinicEvent.VISIT_CREATED, {"id": 4})

        assert "visit_created" in caplog.text
        assert caplog.records[0].payload == {"id": 4}

    def test_event_counter_stats(self):
        counter = EventCounter()

        counter.notify(ClinicEvent.OWNER_REGISTERED, {})
        counter.notify(ClinicEvent.OWNER_REGISTERED, {})
        counter.notify(ClinicEvent.RECORD_UPDATED, {})

        assert counter.count(ClinicEvent.OWNER_REGISTERED) == 2
        assert counter.stats == {
            "owner_registered": 2,
            "pet_registered": 0,
            "visit_created": 0,
            "appointment_created": 0,
            "record_updated": 1,
        }

        counter.reset()
        assert counter.count(ClinicEvent.OWNER_REGISTERED) == 0


class TestEventBus:
    def test_dispatch_to_subscribers(self):
        bus = EventBus()
        listener = Mock()
        bus.subscribe(ClinicEvent.PET_REGISTERED, listener)

        bus.notify(ClinicEvent.PET_REGISTERED, {"id": 7})
        bus.notify(ClinicEvent.VISIT_CREATED, {"id": 8})

        listener.assert_called_once_with(ClinicEvent.PET_REGISTERED, {"id": 7})

    def test_subscribe_is_idempotent(self):
        bus = EventBus()
        listener = Mock()

        bus.subscribe(ClinicEvent.PET_REGISTERED, listener)
        bus.subscribe(ClinicEvent.PET_REGISTERED, listener)

        assert bus.listener_count(ClinicEvent.PET_REGISTERED) == 1

    def test_unsubscribe(self):
        bus = EventBus()
        listener = Mock()
        bus.subscribe(ClinicEvent.PET_REGISTERED, listener)

        bus.unsubscribe(ClinicEvent.PET_REGISTERED, listener)
        bus.unsubscribe(ClinicEvent.VISIT_CREATED, listener)

        assert bus.listener_count(ClinicEvent.PET_REGISTERED) == 0

    def test_rejects_non_callable(self):
        with pytest.raises(TypeError):
            EventBus().subscribe(ClinicEvent.PET_REGISTERED, "not callable")

    def test_failing_listener_is_isolated(self, caplog):
        bus = EventBus()
        counter = EventCounter()
        bus.subscribe(ClinicEvent.VISIT_CREATED, Mock(side_effect=RuntimeError("boom")))
        bus.subscribe(ClinicEvent.VISIT_CREATED, counter.notify)

        with caplog.at_level(logging.ERROR, logger="vetcare.events"):
            bus.notify(ClinicEvent.VISIT_CREATED, {"id": 1})

        assert counter.count(ClinicEvent.VISIT_CREATED) == 1
        assert "boom" in caplog.text

    def test_subscribe_all(self):
        bus = EventBus()
        counter = EventCounter()
        bus.subscribe_all(counter)

        for event in ClinicEvent:
            bus.notify(event, {})

        assert all(count == 1 for count in counter.stats.values())

from core import metrics
from core.eventbus import EventBus
from core.events import SettingsSaved, emit


def test_eventbus_basic_dispatch():
    bus = EventBus()
    got = []
    bus.subscribe("TestEvent", lambda p: got.append(p["value"]))
    bus.subscribe("TestEvent", lambda p: got.append(p["value"] * 2))
    bus.emit("TestEvent", {"value": 3})
    assert sorted(got) == [3, 6]
    snap = metrics.snapshot()["counters"]
    assert "events_emitted_total{event=TestEvent}" in snap


def test_eventbus_handler_isolation():
    bus = EventBus()
    calls = []

    def bad(_):
        calls.append("bad")
        raise RuntimeError("boom")

    def good(_):
        calls.append("good")

    bus.subscribe("IsoEvent", bad)
    bus.subscribe("IsoEvent", good)
    bus.emit("IsoEvent", {})
    assert calls == ["bad", "good"]
    assert metrics.counter("handler_exceptions_total", {"event": "IsoEvent"}) == 1


def test_buses_are_independent_and_unsubscribe():
    a, b = EventBus(), EventBus()
    got = []
    unsub = a.subscribe("E", got.append)
    b.emit("E", {"x": 1})
    assert got == []
    a.emit("E", {"x": 2})
    unsub()
    a.emit("E", {"x": 3})
    assert [p["x"] for p in got] == [2]
    assert a.subscribers("E") == 0


def test_typed_event_emit_adds_ts_and_counts():
    bus = EventBus()
    got = []
    bus.subscribe("SettingsSaved", got.append)
    emit(bus, SettingsSaved(module_id="m", enabled_count=1, settings_count=0))
    assert got[0]["module_id"] == "m"
    assert got[0]["ts"] > 0
    assert metrics.counter("settings_saved_total", {"module": "m"}) == 1
    # no bus: metrics still recorded
    emit(None, SettingsSaved(module_id="m", enabled_count=0, settings_count=0))
    assert metrics.counter("settings_saved_total", {"module": "m"}) == 2

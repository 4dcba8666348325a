from __future__ import annotations

from authoring_upgrade.editor.events import EditorEvents, EventBus


def test_publish_reaches_subscribers_in_order():
    bus = EventBus()
    calls: list[tuple[str, object]] = []
    bus.subscribe("a", lambda payload: calls.append(("first", payload)))
    bus.subscribe("a", lambda payload: calls.append(("second", payload)))
    bus.subscribe("b", lambda payload: calls.append(("other", payload)))

    delivered = bus.publish("a", 42)

    assert delivered == 2
    assert calls == [("first", 42), ("second", 42)]


def test_unsubscribe_only_removes_that_subscription():
    bus = EventBus()
    calls: list[str] = []
    first = bus.subscribe("a", lambda payload: calls.append("first"))
    bus.subscribe("a", lambda payload: calls.append("second"))

    assert bus.unsubscribe(first) is True
    assert bus.unsubscribe(first) is False
    bus.publish("a")

    assert calls == ["second"]


def test_save_requested_is_scoped():
    assert EditorEvents.save_requested("editorComponentEditSidebar") == EditorEvents.COMPONENT_EDIT_SAVE

"""Sidebar edit views for the course editor."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

from .events import EditorEvents, EventBus, Subscription
from .models import ComponentModel, Model

logger = logging.getLogger(__name__)


class DomEvent(Protocol):
    def prevent_default(self) -> None: ...


class EditorOriginView:
    """Base for editor views.

    A view owns the subscriptions it makes through :meth:`listen_to` and
    drops all of them in :meth:`remove`.
    """

    class_name = ""
    tag_name = "div"
    template = ""

    def __init__(self, model: Model, bus: EventBus) -> None:
        self.model = model
        self.bus = bus
        self.form_values: dict[str, Any] = {}
        self._subscriptions: list[Subscription] = []
        self._prepared = False

    def listen_to(self, event: str, handler: Callable[[Any], None]) -> Subscription:
        subscription = self.bus.subscribe(event, handler)
        self._subscriptions.append(subscription)
        return subscription

    def stop_listening(self) -> None:
        for subscription in self._subscriptions:
            self.bus.unsubscribe(subscription)
        self._subscriptions.clear()

    def pre_render(self) -> None:
        pass

    def render(self) -> dict[str, Any]:
        """Return the template context; ``pre_render`` runs on the first call only."""
        if not self._prepared:
            self.pre_render()
            self._prepared = True
        return {
            "template": self.template,
            "class_name": self.class_name,
            "tag_name": self.tag_name,
            "model": self.model.to_json(),
        }

    def remove(self) -> None:
        self.stop_listening()

    def save(self, payload: Any = None) -> None:
        """Commit form values and persist the model."""
        if self.form_values:
            self.model.set(dict(self.form_values))
        try:
            self.model.save()
        except Exception:
            logger.exception("Failed to save %s", self.model.id)
            self.bus.publish(EditorEvents.RESET_SIDEBAR_BUTTONS, self.model)
            raise
        self.bus.publish(EditorEvents.REMOVE_EDIT_VIEW, self.model)
        self.bus.publish(EditorEvents.REFRESH_VIEW, self.model)


class EditorComponentEditView(EditorOriginView):
    model: ComponentModel

    class_name = "component-edit"
    tag_name = "div"
    template = "editorComponentEdit"

    def pre_render(self) -> None:
        self.listen_to(EditorEvents.COMPONENT_EDIT_SAVE, self.save)
        self.model.set("ancestors", self.model.get_possible_ancestors().to_json())

    def cancel(self, event: Optional[DomEvent] = None) -> None:
        if event is not None:
            event.prevent_default()
        self.bus.publish(EditorEvents.REMOVE_EDIT_VIEW, self.model)


__all__ = ["DomEvent", "EditorComponentEditView", "EditorOriginView"]

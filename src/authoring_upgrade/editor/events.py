"""Typed publish/subscribe channel shared by editor views."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
Handler = Callable[[Any], None]

_ids = itertools.count(1)


class EditorEvents:
    """Event names used between editor views."""

    COMPONENT_EDIT_SAVE = "editorComponentEditSidebar:views:save"
    REMOVE_EDIT_VIEW = "editorSidebarView:removeEditView"
    REFRESH_VIEW = "editorView:refreshView"
    RESET_SIDEBAR_BUTTONS = "sidebar:resetButtons"

    @staticmethod
    def save_requested(scope: str) -> str:
        return f"{scope}:views:save"


@dataclass(frozen=True)
class Subscription(Generic[T]):
    event: str
    handler: Callable[[T], None] = field(compare=False)
    id: int = field(default_factory=lambda: next(_ids))


class EventBus:
    """Handlers run synchronously in subscription order; exceptions propagate."""

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[Subscription]] = {}

    def subscribe(self, event: str, handler: Callable[[T], None]) -> Subscription[T]:
        subscription: Subscription[T] = Subscription(event=event, handler=handler)
        self._subscriptions.setdefault(event, []).append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        handlers = self._subscriptions.get(subscription.event, [])
        if subscription not in handlers:
            return False
        handlers.remove(subscription)
        if not handlers:
            del self._subscriptions[subscription.event]
        return True

    def publish(self, event: str, payload: Any = None) -> int:
        """Deliver ``payload``; returns how many handlers ran."""
        handlers = list(self._subscriptions.get(event, []))
        logger.debug("Publishing %s to %d handler(s)", event, len(handlers))
        for subscription in handlers:
            subscription.handler(payload)
        return len(handlers)

    def subscriber_count(self, event: str) -> int:
        return len(self._subscriptions.get(event, []))


__all__ = ["EditorEvents", "EventBus", "Subscription"]

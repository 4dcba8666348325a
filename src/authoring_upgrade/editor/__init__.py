"""Editor sidebar views and the event bus they communicate over."""

from .events import EditorEvents, EventBus, Subscription
from .models import Collection, ComponentModel, Model, PersistenceError
from .views import EditorComponentEditView, EditorOriginView

__all__ = [
    "Collection",
    "ComponentModel",
    "EditorComponentEditView",
    "EditorEvents",
    "EditorOriginView",
    "EventBus",
    "Model",
    "PersistenceError",
    "Subscription",
]

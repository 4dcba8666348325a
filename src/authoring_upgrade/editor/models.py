"""Minimal attribute models backing the editor views."""

from __future__ import annotations

import copy
from typing import Any, Callable, Iterable, Iterator, Optional


class PersistenceError(RuntimeError):
    """Saving a model failed or is not possible."""


class Model:
    """Attribute bag with an injectable persistence callback."""

    def __init__(
        self,
        attributes: dict[str, Any] | None = None,
        *,
        persist: Optional[Callable[["Model"], None]] = None,
    ) -> None:
        self.attributes: dict[str, Any] = dict(attributes or {})
        self._persist = persist

    @property
    def id(self) -> Any:
        return self.attributes.get("_id")

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def set(self, key: str | dict[str, Any], value: Any = None) -> None:
        if isinstance(key, dict):
            self.attributes.update(key)
        else:
            self.attributes[key] = value

    def to_json(self) -> dict[str, Any]:
        return copy.deepcopy(self.attributes)

    def save(self) -> None:
        if self._persist is None:
            raise PersistenceError(f"{type(self).__name__} has no persistence configured")
        self._persist(self)


class Collection:
    def __init__(self, models: Iterable[Model] = ()) -> None:
        self.models = list(models)

    def __iter__(self) -> Iterator[Model]:
        return iter(self.models)

    def __len__(self) -> int:
        return len(self.models)

    def to_json(self) -> list[dict[str, Any]]:
        return [model.to_json() for model in self.models]


class ComponentModel(Model):
    """A component placed inside a block; it may be moved to other blocks."""

    def __init__(
        self,
        attributes: dict[str, Any] | None = None,
        *,
        persist: Optional[Callable[[Model], None]] = None,
        ancestors: Optional[Callable[["ComponentModel"], Collection]] = None,
    ) -> None:
        super().__init__(attributes, persist=persist)
        self._ancestors = ancestors

    def get_possible_ancestors(self) -> Collection:
        if self._ancestors is None:
            return Collection()
        return self._ancestors(self)


__all__ = ["Collection", "ComponentModel", "Model", "PersistenceError"]

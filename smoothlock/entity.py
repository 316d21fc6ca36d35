"""Module that implements the Entity class."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

_LOGGER = logging.getLogger(__name__)

UPDATE = "update"

TModel = TypeVar("TModel", bound=BaseModel)


class Entity(Generic[TModel]):
    """Hold an immutable Pydantic model and notify listeners when it changes.

    The model is replaced, never mutated, so listeners always receive a
    consistent snapshot. ``UPDATE`` is only emitted when the new model
    differs from the previous one.
    """

    def __init__(self, model: TModel):
        """Initialize an entity with its starting model."""
        self._data_model: TModel = model
        self._listeners: dict[str, list[Callable]] = {}

    @property
    def model(self) -> TModel:
        """Return the current model."""
        return self._data_model

    def update_model(self, **changes: Any) -> bool:
        """Replace fields of the model.

        Returns ``True`` and emits ``UPDATE`` if anything changed, ``False``
        otherwise.
        """
        previous = self._data_model
        updated = previous.model_copy(update=changes)
        if updated == previous:
            return False
        self._data_model = updated
        self.emit(UPDATE, {**updated.model_dump(), "previous": previous})
        return True

    def on(  # pylint: disable=invalid-name
        self, event_name: str, callback: Callable[[dict], Any]
    ) -> Callable[[], None]:
        """Register an event callback."""
        listeners: list = self._listeners.setdefault(event_name, [])
        listeners.append(callback)

        def unsubscribe() -> None:
            """Unsubscribe listeners."""
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def emit(self, event_name: str, data: dict) -> None:
        """Run all callbacks for an event."""
        for listener in list(self._listeners.get(event_name, [])):
            try:
                listener(data)
            except Exception:  # pylint: disable=broad-except
                _LOGGER.exception("Error in %s listener %s", event_name, listener)

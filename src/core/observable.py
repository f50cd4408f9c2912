"""Observer list shared by the stores.

Stores notify listeners after each persisted change. The store never depends
on what listeners do: a failing listener is logged and skipped.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class Observable:
    """Mixin holding a listener list."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, payload: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception as exc:
                logger.error("Listener %r failed: %s", listener, exc)

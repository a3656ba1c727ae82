"""Synchronous publish/subscribe channel owned by seats, tables and games."""
from typing import Any, Callable

Callback = Callable[[str, Any], None]

WILDCARD = "*"


class Notifier:
    """Delivers events to subscribers in the caller's stack.

    Callbacks run in subscription order as ``callback(event_name, payload)``.
    Subscribing to ``"*"`` receives every event.
    """

    def __init__(self, source: str = ""):
        self.source = source
        self._subscribers: dict[str, list[Callback]] = {}

    def subscribe(self, event_name: str, callback: Callback) -> None:
        """Register a callback for an event name."""
        self._subscribers.setdefault(event_name, []).append(callback)

    def unsubscribe(self, event_name: str, callback: Callback) -> bool:
        """Remove a callback.

        Returns:
            True if the callback was registered.
        """
        callbacks = self._subscribers.get(event_name, [])
        if callback in callbacks:
            callbacks.remove(callback)
            return True
        return False

    def emit(self, event_name: str, payload: Any = None) -> None:
        """Emit an event to its subscribers, then to wildcard subscribers."""
        # Copy so callbacks may unsubscribe while being notified
        for callback in list(self._subscribers.get(event_name, [])):
            callback(event_name, payload)
        if event_name != WILDCARD:
            for callback in list(self._subscribers.get(WILDCARD, [])):
                callback(event_name, payload)

    def subscriber_count(self, event_name: str) -> int:
        return len(self._subscribers.get(event_name, []))

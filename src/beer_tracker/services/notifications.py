"""Fan-out of entry change notifications."""

from collections.abc import Callable
from dataclasses import dataclass, field

from beer_tracker.domain.drinks import EntryChange

ChangeCallback = Callable[[EntryChange], None]


@dataclass
class EntryChangeNotifier:
    """Dispatches entry changes to subscribed callbacks in order."""

    _subscribers: list[ChangeCallback] = field(default_factory=list)

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        """Register a callback and return a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, change: EntryChange) -> int:
        """Deliver a change to every subscriber; returns how many were called."""
        subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(change)
        return len(subscribers)

"""Listener registry for emitted log entries and pool transactions."""
import itertools
from typing import Callable, Generic, List, Tuple, TypeVar

T = TypeVar('T')


class EventBus(Generic[T]):
    """Ordered listener list. Each subscription gets its own token, so the
    returned unsubscribe function removes exactly that registration even if
    the same callback was subscribed twice.

    Listener exceptions propagate to the publisher.
    """

    def __init__(self, name: str = "events"):
        self.name = name
        self._listeners: List[Tuple[int, Callable[[T], None]]] = []
        self._tokens = itertools.count()

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        token = next(self._tokens)
        self._listeners.append((token, callback))

        def unsubscribe() -> None:
            self._listeners = [(t, cb) for t, cb in self._listeners if t != token]

        return unsubscribe

    def publish(self, item: T) -> None:
        # Snapshot so listeners can unsubscribe while being notified
        for _, callback in list(self._listeners):
            callback(item)

    def clear(self) -> None:
        self._listeners = []

    def __len__(self) -> int:
        return len(self._listeners)

    def __repr__(self) -> str:
        return f"EventBus({self.name}, listeners={len(self._listeners)})"

"""Owned cart state shared by reference with the views that show it."""

from __future__ import annotations

from typing import Callable

CartListener = Callable[["CartStore"], None]


class CartStore:
    """Cart session id and item count with a subscribe/notify contract."""

    def __init__(self, session_id: str, item_count: int = 0) -> None:
        if item_count < 0:
            raise ValueError("item_count must not be negative")
        self._session_id = session_id
        self._item_count = item_count
        self._listeners: list[CartListener] = []

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def item_count(self) -> int:
        return self._item_count

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        if listener not in self._listeners:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_count(self, item_count: int) -> None:
        if item_count < 0:
            raise ValueError("item_count must not be negative")
        if item_count == self._item_count:
            return
        self._item_count = item_count
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def badge_text(self) -> str:
        if self._item_count <= 0:
            return "Cart"
        return f"Cart ({self._item_count})"

"""Mixin that manages store subscriptions with auto-cleanup."""

from __future__ import annotations

from typing import Callable

from kpiboard.store import Listener, Store


class StoreWatcherMixin:
    """Mixin for widgets that follow the board store.

    Subclasses should:
    - Call ``_init_watcher()`` in ``__init__``
    - Use ``self.store_watch(store, callback)`` instead of ``store.subscribe(...)``
    - Skip writing ``on_unmount`` -- the mixin handles cleanup
    """

    def _init_watcher(self) -> None:
        self._unsubscribers: list[Callable[[], None]] = []

    def store_watch(self, store: Store, callback: Listener) -> None:
        """Subscribe callback until the widget is unmounted."""
        self._unsubscribers.append(store.subscribe(callback))

    def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

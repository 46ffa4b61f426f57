"""State container: the one place the board state is held and replaced."""

from __future__ import annotations

import logging
from typing import Callable

from kpiboard.model.actions import Action
from kpiboard.model.entities import BoardState
from kpiboard.model.reducer import reduce

logger = logging.getLogger(__name__)

Listener = Callable[[BoardState, BoardState, Action], None]


class Store:
    """Holds the current BoardState and applies actions to it.

    ``dispatch`` runs the reducer synchronously and then notifies
    subscribers with ``(old, new, action)``. Listeners are only called
    when the reducer produced a different state object. Actions
    dispatched from inside a listener are queued and applied after the
    current one finishes, so transitions never nest.
    """

    def __init__(self, state: BoardState | None = None) -> None:
        self._state = state if state is not None else BoardState()
        self._listeners: list[Listener] = []
        self._pending: list[Action] = []
        self._dispatching = False
        self._version = 0

    @property
    def version(self) -> int:
        """Number of committed transitions so far."""
        return self._version

    def get_state(self) -> BoardState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> None:
        self._pending.append(action)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                self._apply(self._pending.pop(0))
        except Exception:
            self._pending.clear()
            raise
        finally:
            self._dispatching = False

    def dispatch_all(self, actions) -> None:
        for action in actions:
            self.dispatch(action)

    def _apply(self, action: Action) -> None:
        old = self._state
        new = reduce(old, action)
        if new is old:
            logger.debug("suppressed %s", type(action).__name__)
            return
        self._state = new
        self._version += 1
        logger.debug("applied %s (v%d)", type(action).__name__, self._version)
        for listener in list(self._listeners):
            listener(old, new, action)

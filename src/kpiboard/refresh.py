"""Background refresh of stale columns.

A column is stale while its ``needs_refresh`` flag is set or its id is in
the refresh queue. The coordinator watches the store, starts one fetch
per stale column, and on completion dispatches ``UpdateColumnItems``
followed by ``SetRefreshQueue`` without the column id.

Requests that arrive while a fetch for the same column is running are
coalesced: the running fetch's result is thrown away and the column is
fetched again, so only the newest data is applied. With coalescing off,
every request starts its own fetch and the last one to finish wins.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from kpiboard.config import Settings
from kpiboard.model.actions import (
    Action,
    MoveItem,
    RefreshColumn,
    SetRefreshQueue,
    UpdateColumnItems,
)
from kpiboard.model.entities import BoardState, Card
from kpiboard.model.refresh import merge_fetched, paging_for, with_queued, without_queued
from kpiboard.services import DataFetchService
from kpiboard.store import Store

logger = logging.getLogger(__name__)

Completion = Callable[[str], None]


class RefreshCoordinator:
    """Runs fetches for stale columns and folds the results into the store."""

    def __init__(
        self,
        store: Store,
        fetcher: DataFetchService,
        settings: Settings | None = None,
        on_complete: Completion | None = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.settings = settings or Settings()
        self.on_complete = on_complete
        self._tasks: dict[str, list[asyncio.Task]] = {}
        self._rerun: set[str] = set()
        self._failed: set[str] = set()
        self._callbacks: dict[str, list[Completion]] = {}
        self._unsubscribe: Callable[[], None] | None = None

    # -- lifecycle --

    def start(self) -> None:
        """Start watching the store and fetch anything already stale."""
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_change)
        self._schedule(self.store.get_state())

    def close(self) -> None:
        """Stop watching and cancel outstanding fetches."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for tasks in list(self._tasks.values()):
            for task in tasks:
                task.cancel()

    async def wait_idle(self) -> None:
        """Wait until no fetch is running."""
        while self._tasks:
            tasks = [t for ts in self._tasks.values() for t in ts]
            await asyncio.gather(*tasks, return_exceptions=True)
            # Done callbacks run on the next loop iteration.
            await asyncio.sleep(0)

    # -- queries --

    @property
    def fetching(self) -> frozenset[str]:
        return frozenset(self._tasks)

    @property
    def failed(self) -> frozenset[str]:
        return frozenset(self._failed)

    def status(self, column_id: str) -> str:
        """One of ``idle``, ``stale``, ``fetching`` or ``failed``."""
        if column_id in self._tasks:
            return "fetching"
        if column_id in self._failed:
            return "failed"
        if column_id in self.store.get_state().stale_ids():
            return "stale"
        return "idle"

    # -- requests --

    def request(self, column_id: str, on_complete: Completion | None = None) -> None:
        """Ask for column_id to be refetched.

        Adds the id to the refresh queue. A fetch already running for the
        column is superseded when coalescing is on.
        """
        if on_complete is not None:
            self._callbacks.setdefault(column_id, []).append(on_complete)
        self._failed.discard(column_id)
        if column_id in self._tasks:
            if self.settings.coalesce_refresh:
                self._rerun.add(column_id)
            else:
                self._launch(column_id)
        queue = self.store.get_state().refresh_queue
        self.store.dispatch(SetRefreshQueue(with_queued(queue, column_id)))
        self._schedule(self.store.get_state())

    def mark(self, column_id: str) -> None:
        """Flag a column with ``needs_refresh`` (the column's refresh button)."""
        self._failed.discard(column_id)
        if column_id in self._tasks and self.settings.coalesce_refresh:
            self._rerun.add(column_id)
        self.store.dispatch(RefreshColumn(column_id))
        self._schedule(self.store.get_state())

    # -- internals --

    def _on_change(self, old: BoardState, new: BoardState, action: Action) -> None:
        if self.settings.coalesce_refresh:
            for column_id in self._requested_by(old, new, action):
                if column_id in self._tasks:
                    self._rerun.add(column_id)
        self._schedule(new)

    @staticmethod
    def _requested_by(old: BoardState, new: BoardState, action: Action) -> set[str]:
        """Column ids that action asked to refetch."""
        if isinstance(action, MoveItem) and action.source.column_id != action.destination.column_id:
            return {action.source.column_id, action.destination.column_id}
        return set(new.stale_ids() - old.stale_ids())

    def _schedule(self, state: BoardState) -> None:
        stale = state.stale_ids()
        self._failed &= stale
        for column_id in sorted(stale):
            if column_id in self._tasks or column_id in self._failed:
                continue
            self._launch(column_id)

    def _launch(self, column_id: str) -> None:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(column_id), name=f"refresh-{column_id}")
        self._tasks.setdefault(column_id, []).append(task)
        task.add_done_callback(lambda t: self._done(column_id, t))
        logger.debug("fetching %s", column_id)

    async def _run(self, column_id: str) -> None:
        settings = self.settings
        while True:
            self._rerun.discard(column_id)
            paging = paging_for(column_id, settings.primordial_id, settings.page_size)
            try:
                cards = await self.fetcher.fetch(column_id, paging)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning("fetch %s failed: %s", column_id, exc)
                self._failed.add(column_id)
                return
            if column_id in self._rerun:
                logger.debug("refetching %s, superseded while in flight", column_id)
                continue
            break
        self._apply(column_id, cards)

    def _apply(self, column_id: str, cards: list[Card]) -> None:
        store = self.store
        column = store.get_state().column(column_id)
        if column is not None:
            items = merge_fetched(column, cards, self.settings.primordial_id)
            store.dispatch(UpdateColumnItems(column_id, items))
        store.dispatch(SetRefreshQueue(without_queued(store.get_state().refresh_queue, column_id)))
        logger.debug("refreshed %s (%d cards)", column_id, len(cards))

        callbacks = self._callbacks.pop(column_id, [])
        if self.on_complete is not None:
            callbacks.insert(0, self.on_complete)
        for callback in callbacks:
            callback(column_id)

    def _done(self, column_id: str, task: asyncio.Task) -> None:
        tasks = self._tasks.get(column_id, [])
        if task in tasks:
            tasks.remove(task)
        if not tasks:
            self._tasks.pop(column_id, None)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("refresh of %s crashed", column_id, exc_info=exc)
            self._failed.add(column_id)
        self._schedule(self.store.get_state())

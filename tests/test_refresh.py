"""Tests for the refresh coordinator."""

import asyncio
import logging

import pytest

from kpiboard.config import Settings
from kpiboard.model.actions import Location, MoveItem, RefreshColumn, RemoveColumn
from kpiboard.model.entities import BoardState, Column, initial_columns
from kpiboard.refresh import RefreshCoordinator
from kpiboard.store import Store

from .conftest import MemorySource, kpi


async def _settle(rounds=5):
    for _ in range(rounds):
        await asyncio.sleep(0)


def _ids(store, column_id):
    return [c.id for c in store.get_state().column(column_id).items]


def _store(*columns):
    return Store(BoardState(columns=columns))


@pytest.mark.asyncio
async def test_stale_column_converges():
    store = _store(Column(id="x", needs_refresh=True))
    source = MemorySource(kpis=[["x", kpi("a")], ["x", kpi("b")]])
    coordinator = RefreshCoordinator(store, source)

    coordinator.start()
    assert coordinator.status("x") == "fetching"
    await coordinator.wait_idle()

    col = store.get_state().column("x")
    assert [c.id for c in col.items] == ["a", "b"]
    assert col.needs_refresh is False
    assert store.get_state().refresh_queue == frozenset()
    assert coordinator.status("x") == "idle"


@pytest.mark.asyncio
async def test_fresh_columns_are_not_fetched():
    store = _store(Column(id="x"))
    source = MemorySource()
    RefreshCoordinator(store, source).start()
    await _settle()
    assert source.fetches == []


@pytest.mark.asyncio
async def test_paging_by_column():
    store = _store(*initial_columns(), Column(id="sales", needs_refresh=True))
    store.dispatch(RefreshColumn("kpis"))
    source = MemorySource()
    coordinator = RefreshCoordinator(store, source, Settings(page_size=3))
    coordinator.start()
    await coordinator.wait_idle()

    assert sorted(source.fetches, key=lambda f: f[0]) == [
        ("kpis", {"page_number": 0, "limit": 3}),
        ("sales", {"group": "sales", "page_number": 0, "limit": 3}),
    ]


@pytest.mark.asyncio
async def test_primordial_keeps_pinned_prefix():
    store = _store(*initial_columns())
    source = MemorySource(kpis=[[None, kpi("kpi-1")]])
    coordinator = RefreshCoordinator(store, source)
    coordinator.start()
    coordinator.request("kpis")
    await coordinator.wait_idle()

    assert _ids(store, "kpis") == ["kpi-summary", "kpi-form", "kpi-derived", "kpi-1"]


@pytest.mark.asyncio
async def test_cross_column_move_refetches_both():
    store = _store(Column(id="x", items=(kpi("a"),)), Column(id="y"))
    source = MemorySource(kpis=[["y", kpi("a")]])
    coordinator = RefreshCoordinator(store, source)
    coordinator.start()

    store.dispatch(MoveItem(Location("x", 0), Location("y", 0)))
    assert coordinator.fetching == {"x", "y"}
    await coordinator.wait_idle()

    assert _ids(store, "x") == []
    assert _ids(store, "y") == ["a"]
    assert store.get_state().refresh_queue == frozenset()


@pytest.mark.asyncio
async def test_same_column_move_does_not_fetch():
    store = _store(Column(id="x", items=(kpi("a"), kpi("b"))))
    source = MemorySource()
    RefreshCoordinator(store, source).start()

    store.dispatch(MoveItem(Location("x", 0), Location("x", 1)))
    await _settle()
    assert source.fetches == []
    assert _ids(store, "x") == ["b", "a"]


@pytest.mark.asyncio
async def test_overlapping_requests_apply_newest_data():
    store = _store(Column(id="x"))
    source = MemorySource(kpis=[["x", kpi("old")]])
    gate = source.gates["x"] = asyncio.Event()
    coordinator = RefreshCoordinator(store, source)
    coordinator.start()

    coordinator.request("x")
    await _settle()
    source.kpis = [["x", kpi("new")]]
    coordinator.request("x")
    gate.set()
    await coordinator.wait_idle()

    assert len(source.fetches) == 2
    assert _ids(store, "x") == ["new"]
    assert store.get_state().refresh_queue == frozenset()


@pytest.mark.asyncio
async def test_refresh_button_during_fetch_applies_newest_data():
    store = _store(Column(id="x"))
    source = MemorySource(kpis=[["x", kpi("v1")]])
    gate = source.gates["x"] = asyncio.Event()
    coordinator = RefreshCoordinator(store, source)
    coordinator.start()

    coordinator.request("x")
    await _settle()
    source.kpis = [["x", kpi("v2")]]
    coordinator.mark("x")
    gate.set()
    await coordinator.wait_idle()

    assert len(source.fetches) == 2
    assert _ids(store, "x") == ["v2"]
    assert store.get_state().column("x").needs_refresh is False


@pytest.mark.asyncio
async def test_refresh_button_twice_during_fetch():
    store = _store(Column(id="x"))
    source = MemorySource(kpis=[["x", kpi("v1")]])
    gate = source.gates["x"] = asyncio.Event()
    coordinator = RefreshCoordinator(store, source)
    coordinator.start()

    coordinator.mark("x")
    await _settle()
    source.kpis = [["x", kpi("v2")]]
    # The flag is already set, so the store does not notify again.
    coordinator.mark("x")
    gate.set()
    await coordinator.wait_idle()

    assert _ids(store, "x") == ["v2"]


@pytest.mark.asyncio
async def test_without_coalescing_every_request_fetches():
    store = _store(Column(id="x"))
    source = MemorySource(kpis=[["x", kpi("a")]])
    gate = source.gates["x"] = asyncio.Event()
    coordinator = RefreshCoordinator(store, source, Settings(coalesce_refresh=False))
    coordinator.start()

    coordinator.request("x")
    coordinator.request("x")
    await _settle()
    assert len(source.fetches) == 2

    gate.set()
    await coordinator.wait_idle()
    assert _ids(store, "x") == ["a"]


@pytest.mark.asyncio
async def test_failed_fetch_stays_stale(caplog):
    store = _store(Column(id="x", needs_refresh=True))
    source = MemorySource()
    source.fail.add("x")
    coordinator = RefreshCoordinator(store, source)

    with caplog.at_level(logging.WARNING, logger="kpiboard.refresh"):
        coordinator.start()
        await coordinator.wait_idle()

    assert "fetch x failed" in caplog.text
    assert coordinator.status("x") == "failed"
    assert "x" in store.get_state().stale_ids()

    # No automatic retry.
    await _settle()
    assert len(source.fetches) == 1


@pytest.mark.asyncio
async def test_explicit_request_retries_failed_column():
    store = _store(Column(id="x", needs_refresh=True))
    source = MemorySource(kpis=[["x", kpi("a")]])
    source.fail.add("x")
    coordinator = RefreshCoordinator(store, source)
    coordinator.start()
    await coordinator.wait_idle()

    source.fail.clear()
    coordinator.mark("x")
    await coordinator.wait_idle()

    assert coordinator.status("x") == "idle"
    assert _ids(store, "x") == ["a"]


@pytest.mark.asyncio
async def test_completion_callbacks():
    store = _store(Column(id="x"))
    done = []
    coordinator = RefreshCoordinator(store, MemorySource(), on_complete=lambda c: done.append(("all", c)))
    coordinator.start()

    coordinator.request("x", on_complete=lambda c: done.append(("once", c)))
    await coordinator.wait_idle()

    assert done == [("all", "x"), ("once", "x")]


@pytest.mark.asyncio
async def test_request_for_removed_column_just_dequeues():
    store = _store(Column(id="x"))
    source = MemorySource()
    gate = source.gates["x"] = asyncio.Event()
    coordinator = RefreshCoordinator(store, source)
    coordinator.start()

    coordinator.request("x")
    await _settle()
    store.dispatch(RemoveColumn("x"))
    gate.set()
    await coordinator.wait_idle()

    assert store.get_state().column("x") is None
    assert store.get_state().refresh_queue == frozenset()


@pytest.mark.asyncio
async def test_close_cancels_fetches():
    store = _store(Column(id="x", needs_refresh=True))
    source = MemorySource()
    source.gates["x"] = asyncio.Event()
    coordinator = RefreshCoordinator(store, source)
    coordinator.start()
    await _settle()

    coordinator.close()
    await coordinator.wait_idle()

    assert coordinator.fetching == frozenset()
    assert store.get_state().column("x").needs_refresh is True

"""Shared fixtures: an in-memory stand-in for the board's services."""

import pytest

from kpiboard.model.entities import Card, Column


class MemorySource:
    """Keeps KPIs and columns in lists and records every call.

    ``gates`` maps a column id to an asyncio.Event the fetch waits on,
    ``fail`` holds column ids whose fetch raises.
    """

    def __init__(self, columns=(), kpis=()):
        self.columns = list(columns)
        self.kpis = [list(pair) for pair in kpis]  # [group, card]
        self.fetches = []
        self.deleted = []
        self.assigned = []
        self.updated = []
        self.deleted_kpis = []
        self.gates = {}
        self.fail = set()

    def cards_in(self, group):
        return [card for g, card in self.kpis if g == group]

    async def fetch(self, column_id, paging):
        self.fetches.append((column_id, dict(paging)))
        gate = self.gates.get(column_id)
        if gate is not None:
            await gate.wait()
        if column_id in self.fail:
            raise RuntimeError(f"{column_id} unavailable")
        return self.cards_in(paging.get("group"))

    async def list_columns(self):
        return list(self.columns)

    async def delete_column(self, column_id):
        self.deleted.append(column_id)
        self.columns = [c for c in self.columns if c.id != column_id]

    async def create_kpi(self, group, title, kind="tracking", payload=None):
        card = Card(id=f"kpi-{len(self.kpis) + 1}", kind=kind, payload={"title": title, **(payload or {})})
        self.kpis.append([group, card])
        return card

    async def create_column(self, title, description=""):
        column = Column(id=title.lower(), title=title, description=description)
        self.columns.append(column)
        return column

    async def update_kpi(self, card_id, changes):
        self.updated.append((card_id, dict(changes)))
        for pair in self.kpis:
            card = pair[1]
            if card.id == card_id:
                payload = {k: v for k, v in {**card.payload, **changes}.items() if v is not None}
                pair[1] = Card(id=card_id, kind=card.kind, payload=payload)
                return pair[1]
        raise KeyError(card_id)

    async def delete_kpi(self, card_id):
        self.deleted_kpis.append(card_id)
        self.kpis = [pair for pair in self.kpis if pair[1].id != card_id]

    async def assign(self, card_id, group):
        self.assigned.append((card_id, group))
        for pair in self.kpis:
            if pair[1].id == card_id:
                pair[0] = group


def kpi(card_id, title=None, **payload):
    return Card(id=card_id, payload={"title": title or card_id.upper(), **payload})


@pytest.fixture
def memory_source():
    """Two categories, one ungrouped KPI and two sales KPIs."""
    return MemorySource(
        columns=[
            Column(id="sales", title="Sales"),
            Column(id="ops", title="Operations"),
        ],
        kpis=[
            [None, kpi("kpi-1", "Signups", value="120")],
            ["sales", kpi("kpi-2", "Revenue", value="$1.2M", percent_achieved=64, trend=3)],
            ["sales", kpi("kpi-3", "Churn", percent_achieved=20, trend=-2)],
        ],
    )


@pytest.fixture
def make_source():
    """Factory for a MemorySource with custom contents."""
    return MemorySource


@pytest.fixture
def make_kpi():
    return kpi

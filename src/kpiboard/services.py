"""Interfaces of the collaborators the board talks to."""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from kpiboard.model.entities import Card, Column


class DataFetchService(Protocol):
    async def fetch(self, column_id: str, paging: Mapping[str, Any]) -> list[Card]:
        """Fetch the cards of one column."""


class ColumnProvider(Protocol):
    async def list_columns(self) -> list[Column]:
        """Return the provisioned (non-primordial) columns, without items."""


class DeletionService(Protocol):
    async def delete_column(self, column_id: str) -> None:
        """Delete a column in the backing store."""


class CreationService(Protocol):
    async def create_kpi(
        self,
        group: str | None,
        title: str,
        kind: str = "tracking",
        payload: Mapping[str, Any] | None = None,
    ) -> Card:
        """Create a KPI, ungrouped when group is None."""

    async def create_column(self, title: str, description: str = "") -> Column:
        """Create a column (category)."""


class PlacementService(Protocol):
    async def assign(self, card_id: str, group: str | None) -> None:
        """Persist the column a card belongs to."""


class EditingService(Protocol):
    async def update_kpi(self, card_id: str, changes: Mapping[str, Any]) -> Card:
        """Merge changes into a KPI; a None value removes the field."""

    async def delete_kpi(self, card_id: str) -> None:
        """Delete a KPI."""

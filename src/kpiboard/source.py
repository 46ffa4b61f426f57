"""YAML file backing the board: categories (columns) and KPI records.

The file looks like::

    settings:
      page_size: 10
    categories:
      - id: sales
        name: Sales
        description: Revenue and pipeline
        status: Active
    kpis:
      - id: kpi-1
        title: Monthly revenue
        type: tracking
        group: sales
        value: "$1.2M"
        percent_achieved: 64

KPIs without a ``group`` belong to the primordial "NEW KPIs" column.
All file access happens in worker threads via ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from kpiboard.config import Settings, load_settings
from kpiboard.ids import next_id, unique_slug
from kpiboard.model.entities import CARD_KINDS, Card, Column, card_from_record

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "kpiboard.yaml"


class SourceError(Exception):
    """The board file is unreadable, malformed, or lacks a referenced id."""


class YamlSource:
    """Implements the fetch, provisioning, creation, editing, deletion and placement services."""

    def __init__(self, path: str | Path) -> None:
        path = Path(path)
        if path.is_dir():
            path = path / DEFAULT_FILENAME
        self.path = path
        self._lock = threading.Lock()

    # -- sync file access --

    def read(self) -> dict:
        """Load and validate the board file."""
        try:
            text = self.path.read_text()
        except FileNotFoundError:
            raise SourceError(f"no board file at {self.path}") from None
        except OSError as e:
            raise SourceError(f"cannot read {self.path}: {e}") from e
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise SourceError(f"{self.path} is not valid YAML: {e}") from e
        if not isinstance(data, dict):
            raise SourceError(f"{self.path} must contain a mapping")
        for key in ("categories", "kpis"):
            value = data.setdefault(key, [])
            if value is None:
                data[key] = []
            elif not isinstance(value, list):
                raise SourceError(f"'{key}' in {self.path} must be a list")
        return data

    def write(self, data: Mapping[str, Any]) -> None:
        text = yaml.safe_dump(dict(data), default_flow_style=False, sort_keys=False, allow_unicode=True)
        self.path.write_text(text)

    def settings(self) -> Settings:
        return load_settings(self.read().get("settings"))

    def init(self, categories=("Backlog", "Doing", "Done")) -> None:
        """Create a board file with the given category names."""
        if self.path.exists():
            raise SourceError(f"{self.path} already exists")
        cats = []
        for name in categories:
            cats.append(
                {
                    "id": unique_slug(name, [c["id"] for c in cats] + [Settings().primordial_id]),
                    "name": name,
                    "description": "",
                    "status": "Active",
                }
            )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.write({"settings": {}, "categories": cats, "kpis": []})

    def _mutate(self, change: Callable[[dict], Any]) -> Any:
        with self._lock:
            data = self.read()
            result = change(data)
            self.write(data)
            return result

    # -- DataFetchService --

    async def fetch(self, column_id: str, paging: Mapping[str, Any]) -> list[Card]:
        data = await asyncio.to_thread(self.read)
        group = paging.get("group")
        records = [k for k in data["kpis"] if (k.get("group") or None) == group]
        limit = paging.get("limit")
        if limit:
            start = paging.get("page_number", 0) * limit
            records = records[start : start + limit]
        return [_to_card(record, self.path) for record in records]

    # -- ColumnProvider --

    async def list_columns(self) -> list[Column]:
        data = await asyncio.to_thread(self.read)
        columns = []
        for cat in data["categories"]:
            if "id" not in cat:
                raise SourceError(f"category without id in {self.path}")
            if str(cat["id"]) == _primordial_id(data):
                raise SourceError(f"category id '{cat['id']}' in {self.path} is reserved for new KPIs")
            columns.append(
                Column(
                    id=str(cat["id"]),
                    title=str(cat.get("name") or cat["id"]),
                    description=str(cat.get("description") or ""),
                    status=str(cat.get("status") or "Active"),
                )
            )
        return columns

    # -- DeletionService --

    async def delete_column(self, column_id: str) -> None:
        def change(data: dict) -> None:
            cats = data["categories"]
            if not any(str(c.get("id")) == column_id for c in cats):
                raise SourceError(f"category '{column_id}' not found")
            if any(k.get("group") == column_id for k in data["kpis"]):
                raise SourceError(f"category '{column_id}' still has KPIs")
            data["categories"] = [c for c in cats if str(c.get("id")) != column_id]

        await asyncio.to_thread(self._mutate, change)
        logger.info("deleted category %s", column_id)

    # -- CreationService --

    async def create_kpi(
        self,
        group: str | None,
        title: str,
        kind: str = "tracking",
        payload: Mapping[str, Any] | None = None,
    ) -> Card:
        if kind not in CARD_KINDS:
            raise SourceError(f"unknown KPI type '{kind}'")

        def change(data: dict) -> dict:
            if group is not None and not any(str(c.get("id")) == group for c in data["categories"]):
                raise SourceError(f"category '{group}' not found")
            record = {"id": next_id([k.get("id", "") for k in data["kpis"]], "kpi"), "title": title, "type": kind}
            if group is not None:
                record["group"] = group
            record.update(payload or {})
            data["kpis"].append(record)
            return record

        record = await asyncio.to_thread(self._mutate, change)
        logger.info("created %s in %s", record["id"], group or "new KPIs")
        return _to_card(record, self.path)

    async def create_column(self, title: str, description: str = "") -> Column:
        def change(data: dict) -> dict:
            cat = {
                "id": unique_slug(title, _reserved_ids(data)),
                "name": title,
                "description": description,
                "status": "Active",
            }
            data["categories"].append(cat)
            return cat

        cat = await asyncio.to_thread(self._mutate, change)
        logger.info("created category %s", cat["id"])
        return Column(id=cat["id"], title=title, description=description)

    # -- EditingService --

    async def update_kpi(self, card_id: str, changes: Mapping[str, Any]) -> Card:
        """Merge changes into a KPI record. A None value removes the field."""
        changes = {k: v for k, v in changes.items() if k not in ("id", "group")}
        if changes.get("type") not in (None, *CARD_KINDS):
            raise SourceError(f"unknown KPI type '{changes['type']}'")

        def change(data: dict) -> dict:
            record = _find_record(data, card_id)
            for key, value in changes.items():
                if value is None:
                    record.pop(key, None)
                else:
                    record[key] = value
            return dict(record)

        record = await asyncio.to_thread(self._mutate, change)
        logger.info("updated %s", card_id)
        return _to_card(record, self.path)

    async def delete_kpi(self, card_id: str) -> None:
        def change(data: dict) -> None:
            record = _find_record(data, card_id)
            data["kpis"].remove(record)

        await asyncio.to_thread(self._mutate, change)
        logger.info("deleted %s", card_id)

    # -- PlacementService --

    async def assign(self, card_id: str, group: str | None) -> None:
        def change(data: dict) -> None:
            record = _find_record(data, card_id)
            if group is None:
                record.pop("group", None)
            else:
                record["group"] = group

        await asyncio.to_thread(self._mutate, change)


def _to_card(record: Mapping[str, Any], path: Path) -> Card:
    data = {k: v for k, v in record.items() if k != "group"}
    if "id" not in data:
        raise SourceError(f"KPI without id in {path}")
    try:
        return card_from_record(data)
    except ValueError as e:
        raise SourceError(str(e)) from e


def _find_record(data: dict, card_id: str) -> dict:
    for record in data["kpis"]:
        if str(record.get("id")) == card_id:
            return record
    raise SourceError(f"KPI '{card_id}' not found")


def _primordial_id(data: Mapping[str, Any]) -> str:
    return load_settings(data.get("settings")).primordial_id


def _reserved_ids(data: Mapping[str, Any]) -> list[str]:
    """Ids a new category may not take: existing ones and the new KPIs column."""
    return [str(c.get("id")) for c in data["categories"]] + [_primordial_id(data)]

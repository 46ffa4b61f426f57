"""Shared helpers for CLI command handlers."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from kpiboard.dashboard import Dashboard
from kpiboard.model.entities import BoardState, Card, Column
from kpiboard.source import SourceError, YamlSource


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
        level=logging.INFO if verbose else logging.WARNING,
    )


def open_source_or_die(path: str, json_mode: bool) -> YamlSource:
    """Open the board file at path. Exit 1 with message if unusable."""
    source = YamlSource(Path(path).resolve())
    try:
        source.read()
    except SourceError as e:
        error(str(e), json_mode)
    return source


def load_dashboard_or_die(args) -> Dashboard:
    """Open the board, load every column and wait for the first fetches."""
    source = open_source_or_die(args.board, args.json)

    async def _load() -> Dashboard:
        settings = source.settings()
        if getattr(args, "page_size", None):
            settings = replace(settings, page_size=args.page_size)
        dashboard = Dashboard.from_source(source, settings)
        await dashboard.open()
        await dashboard.wait_idle()
        dashboard.close()
        return dashboard

    try:
        return asyncio.run(_load())
    except SourceError as e:
        error(str(e), args.json)


def run(dashboard: Dashboard, coro_fn, *args):
    """Run coro_fn(*args) with the dashboard's refresh coordinator live."""

    async def _run():
        dashboard.refresh.start()
        try:
            result = await coro_fn(*args)
            await dashboard.wait_idle()
            return result
        finally:
            dashboard.close()

    return asyncio.run(_run())


def find_column(state: BoardState, col_id: str, json_mode: bool) -> Column:
    """Lookup column by ID. Exit 1 listing available columns if not found."""
    col = state.column(col_id)
    if col is not None:
        return col
    available = [f"  {c.id}  {c.title}" for c in state.columns]
    msg = f"Column '{col_id}' not found. Available:\n" + "\n".join(available)
    error(msg, json_mode)


def find_card(state: BoardState, card_id: str, json_mode: bool) -> tuple[Card, Column]:
    """Lookup a KPI and its column. Exit 1 if missing or pinned."""
    column = state.find_card_column(card_id)
    if column is None:
        error(f"Card '{card_id}' not found.", json_mode)
    card = column.find(card_id)
    if card.special:
        error(f"Card '{card_id}' is pinned and cannot be changed.", json_mode)
    return card, column


def data_cards(column: Column) -> list[Card]:
    """A column's cards without the pinned ones."""
    return [card for card in column.items if not card.special]


def card_to_dict(card: Card, column: Column | None = None) -> dict:
    data = {"id": card.id, "type": card.kind, **dict(card.payload)}
    if column is not None:
        data["column"] = column.id
    return data


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2, default=list))


def output_result(data: dict, text: str, json_mode: bool) -> None:
    """Output mutation result as JSON or plain text."""
    if json_mode:
        output_json(data)
    else:
        print(text)


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)


def build_column_summaries(state: BoardState) -> list[dict]:
    """Build column summary dicts from a board snapshot."""
    items = []
    for col in state.columns:
        items.append(
            {
                "id": col.id,
                "name": col.title,
                "cards": len(data_cards(col)),
                "status": col.status,
                "stale": col.id in state.stale_ids(),
            }
        )
    return items


def format_column_line(c: dict, indent: str = "") -> str:
    """Format a column summary dict as a text line."""
    stale = "  (stale)" if c["stale"] else ""
    inactive = "  (inactive)" if c["status"] != "Active" else ""
    cards = "card" if c["cards"] == 1 else "cards"
    return f"{indent}{c['id']:<12} {c['name']:<16} {c['cards']} {cards}{inactive}{stale}"

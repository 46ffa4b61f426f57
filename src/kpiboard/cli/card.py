"""Handlers for 'kpiboard card' commands."""

import yaml

from kpiboard.cli._common import (
    card_to_dict,
    data_cards,
    error,
    find_card,
    find_column,
    load_dashboard_or_die,
    output_json,
    output_result,
    run,
)
from kpiboard.model.actions import Location
from kpiboard.source import SourceError


def card_list(args) -> int:
    """List KPI cards, optionally filtered by column."""
    dashboard = load_dashboard_or_die(args)
    state = dashboard.state

    if args.column:
        columns = [find_column(state, args.column, args.json)]
    else:
        columns = list(state.columns)

    items = [card_to_dict(card, col) for col in columns for card in data_cards(col)]

    if args.json:
        output_json(items)
    else:
        for item in items:
            value = f"  {item['value']}" if item.get("value") else ""
            print(f"{item['id']:<10} {item['column']:<12} {item.get('title', '')}{value}")

    return 0


def card_add(args) -> int:
    """Create a KPI, in the new KPIs column unless --column is given."""
    dashboard = load_dashboard_or_die(args)
    column_id = args.column
    if column_id:
        find_column(dashboard.state, column_id, args.json)

    try:
        card = run(dashboard, dashboard.create_kpi, args.title, column_id, args.type)
    except SourceError as e:
        error(str(e), args.json)

    column = dashboard.state.find_card_column(card.id)
    output_result(
        card_to_dict(card, column),
        f"Created {card.id}: {card.title}",
        args.json,
    )
    return 0


def card_move(args) -> int:
    """Move a KPI to another column (position is 1-indexed)."""
    dashboard = load_dashboard_or_die(args)
    state = dashboard.state

    card, source_col = find_card(state, args.id, args.json)
    target = find_column(state, args.column, args.json)

    index = [c.id for c in source_col.items].index(card.id)
    if args.position is not None:
        position = max(args.position - 1, 0)
    else:
        position = len(target.items)
    # Keep data cards behind the pinned ones.
    position = max(position, len(target.items) - len(data_cards(target)))

    run(dashboard, dashboard.drag_end, Location(source_col.id, index), Location(target.id, position))

    new_col = dashboard.state.find_card_column(card.id)
    output_result(
        card_to_dict(card, new_col),
        f"Moved {card.id} to {new_col.id if new_col else target.id}",
        args.json,
    )
    return 0


def _parse_changes(args) -> dict:
    """Field changes from --title/--value/--target, --set KEY=VALUE and --unset KEY."""
    changes = {}
    for key in ("title", "value", "target"):
        value = getattr(args, key, None)
        if value is not None:
            changes[key] = value
    for item in getattr(args, "set", None) or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            error(f"Expected KEY=VALUE, got '{item}'.", args.json)
        changes[key] = _scalar(value)
    for key in getattr(args, "unset", None) or []:
        changes[key] = None
    return changes


def _scalar(text: str):
    """Read a --set value as YAML so numbers stay numbers."""
    try:
        return yaml.safe_load(text) if text else ""
    except yaml.YAMLError:
        return text


def card_edit(args) -> int:
    """Change fields of a KPI."""
    changes = _parse_changes(args)
    if not changes:
        error("Nothing to change.", args.json)
    dashboard = load_dashboard_or_die(args)
    find_card(dashboard.state, args.id, args.json)

    try:
        card = run(dashboard, dashboard.edit_kpi, args.id, changes)
    except SourceError as e:
        error(str(e), args.json)

    column = dashboard.state.find_card_column(card.id)
    output_result(
        card_to_dict(card, column),
        f"Updated {card.id}: {card.title}",
        args.json,
    )
    return 0


def card_delete(args) -> int:
    """Delete a KPI."""
    dashboard = load_dashboard_or_die(args)
    card, column = find_card(dashboard.state, args.id, args.json)

    try:
        run(dashboard, dashboard.delete_kpi, card.id)
    except SourceError as e:
        error(str(e), args.json)

    output_result(
        {"id": card.id, "column": column.id},
        f"Deleted {card.id}: {card.title}",
        args.json,
    )
    return 0

"""Handlers for 'kpiboard column' commands."""

from kpiboard.cli._common import (
    build_column_summaries,
    error,
    find_column,
    format_column_line,
    load_dashboard_or_die,
    output_json,
    output_result,
    run,
)
from kpiboard.source import SourceError


def column_list(args) -> int:
    """List all columns."""
    dashboard = load_dashboard_or_die(args)
    items = build_column_summaries(dashboard.state)

    if args.json:
        output_json(items)
    else:
        for c in items:
            print(format_column_line(c))

    return 0


def column_add(args) -> int:
    """Create a column (category)."""
    dashboard = load_dashboard_or_die(args)
    try:
        col = run(dashboard, dashboard.create_column, args.name, args.description)
    except SourceError as e:
        error(str(e), args.json)

    output_result(
        {"id": col.id, "name": col.title},
        f"Created column {col.id}: {col.title}",
        args.json,
    )
    return 0


def column_delete(args) -> int:
    """Delete an empty column."""
    dashboard = load_dashboard_or_die(args)
    col = find_column(dashboard.state, args.id, args.json)

    notice = run(dashboard, dashboard.delete_column, col.id)
    if notice is not None:
        error(f"{notice.title}: {notice.body}", args.json)

    output_result(
        {"id": col.id, "name": col.title, "deleted": True},
        f"Deleted column {col.id}: {col.title}",
        args.json,
    )
    return 0

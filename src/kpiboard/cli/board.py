"""Handlers for 'kpiboard board' and 'kpiboard refresh'."""

from kpiboard.cli._common import (
    build_column_summaries,
    find_column,
    format_column_line,
    load_dashboard_or_die,
    output_json,
    run,
)


def board_summary(args) -> int:
    """Show board summary: columns, card counts, stale columns."""
    dashboard = load_dashboard_or_die(args)
    columns = build_column_summaries(dashboard.state)
    total = sum(c["cards"] for c in columns)

    if args.json:
        output_json({"board": args.board, "kpis": total, "columns": columns})
    else:
        print(f"{total} KPIs in {len(columns)} columns")
        for c in columns:
            print(format_column_line(c, indent="  "))

    return 0


def refresh(args) -> int:
    """Refetch columns (all of them by default) and report what changed."""
    dashboard = load_dashboard_or_die(args)
    state = dashboard.state
    column_ids = args.columns or [c.id for c in state.columns]
    for col_id in column_ids:
        find_column(state, col_id, args.json)

    before = {c.id: c.items for c in state.columns}

    async def _refresh():
        for col_id in column_ids:
            dashboard.refresh.request(col_id)

    run(dashboard, _refresh)

    results = []
    for col_id in column_ids:
        col = dashboard.state.column(col_id)
        results.append(
            {
                "id": col_id,
                "status": dashboard.refresh.status(col_id),
                "changed": col is not None and col.items != before.get(col_id),
            }
        )

    if args.json:
        output_json(results)
    else:
        for r in results:
            changed = "  changed" if r["changed"] else ""
            print(f"{r['id']:<12} {r['status']}{changed}")

    return 1 if any(r["status"] == "failed" for r in results) else 0

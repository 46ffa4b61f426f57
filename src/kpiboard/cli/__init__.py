"""CLI argument parser and dispatch for kpiboard."""

import argparse

from kpiboard.cli.board import board_summary, refresh
from kpiboard.cli.card import card_add, card_delete, card_edit, card_list, card_move
from kpiboard.cli.column import column_add, column_delete, column_list
from kpiboard.cli.init import init_board


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--board", default=".", help="Board file or directory holding kpiboard.yaml (default: .)")
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    common.add_argument("--page-size", type=int, help="Cards fetched per column (overrides the board setting)")
    common.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")

    parser = argparse.ArgumentParser(
        prog="kpiboard",
        description="Board of KPI cards in columns",
        parents=[common],
    )

    nouns = parser.add_subparsers(dest="noun")

    # --- init ---
    init_p = nouns.add_parser("init", help="Create a board file", parents=[common])
    init_p.add_argument("categories", nargs="*", help="Starter column names (default: Backlog Doing Done)")
    init_p.set_defaults(func=init_board)

    # --- board ---
    board_p = nouns.add_parser("board", help="Show board summary", parents=[common])
    board_p.set_defaults(func=board_summary)

    # --- refresh ---
    refresh_p = nouns.add_parser("refresh", help="Refetch columns", parents=[common])
    refresh_p.add_argument("columns", nargs="*", help="Column IDs (default: all)")
    refresh_p.set_defaults(func=refresh)

    # --- card ---
    card_p = nouns.add_parser("card", help="Card operations", parents=[common])
    card_verbs = card_p.add_subparsers(dest="verb")

    card_list_p = card_verbs.add_parser("list", help="List cards", parents=[common])
    card_list_p.add_argument("--column", dest="column", help="Filter by column ID")
    card_list_p.set_defaults(func=card_list)

    card_add_p = card_verbs.add_parser("add", help="Create a KPI", parents=[common])
    card_add_p.add_argument("title", help="KPI title")
    card_add_p.add_argument("--column", dest="column", help="Target column ID (default: new KPIs)")
    card_add_p.add_argument("--type", choices=("tracking", "task"), default="tracking", help="KPI type")
    card_add_p.set_defaults(func=card_add)

    card_move_p = card_verbs.add_parser("move", help="Move a KPI", parents=[common])
    card_move_p.add_argument("id", help="Card ID")
    card_move_p.add_argument("--column", dest="column", required=True, help="Target column ID")
    card_move_p.add_argument("--position", type=int, help="Position in column (1-indexed)")
    card_move_p.set_defaults(func=card_move)

    card_edit_p = card_verbs.add_parser("edit", help="Change KPI fields", parents=[common])
    card_edit_p.add_argument("id", help="Card ID")
    card_edit_p.add_argument("--title", help="New title")
    card_edit_p.add_argument("--value", help="Current value")
    card_edit_p.add_argument("--target", help="Target value")
    card_edit_p.add_argument("--set", action="append", metavar="KEY=VALUE", help="Set any field (repeatable)")
    card_edit_p.add_argument("--unset", action="append", metavar="KEY", help="Remove a field (repeatable)")
    card_edit_p.set_defaults(func=card_edit)

    card_delete_p = card_verbs.add_parser("delete", help="Delete a KPI", parents=[common])
    card_delete_p.add_argument("id", help="Card ID")
    card_delete_p.set_defaults(func=card_delete)

    # card with no verb = list
    card_p.set_defaults(func=card_list, column=None)

    # --- column ---
    col_p = nouns.add_parser("column", help="Column operations", parents=[common])
    col_verbs = col_p.add_subparsers(dest="verb")

    col_list_p = col_verbs.add_parser("list", help="List columns", parents=[common])
    col_list_p.set_defaults(func=column_list)

    col_add_p = col_verbs.add_parser("add", help="Create a column", parents=[common])
    col_add_p.add_argument("name", help="Column name")
    col_add_p.add_argument("--description", default="", help="Column description")
    col_add_p.set_defaults(func=column_add)

    col_delete_p = col_verbs.add_parser("delete", help="Delete an empty column", parents=[common])
    col_delete_p.add_argument("id", help="Column ID")
    col_delete_p.set_defaults(func=column_delete)

    # column with no verb = list
    col_p.set_defaults(func=column_list)

    return parser

"""Entry point for kpiboard CLI."""

import sys
from pathlib import Path

NOUNS = {"init", "board", "card", "column", "refresh"}


def main():
    # No subcommand or non-noun argument = TUI mode
    if len(sys.argv) < 2 or (sys.argv[1] not in NOUNS and not sys.argv[1].startswith("-")):
        from kpiboard.ui import KpiBoardApp

        path = sys.argv[1] if len(sys.argv) > 1 else "."
        app = KpiBoardApp(Path(path).resolve())
        app.run()
        return

    from kpiboard.cli import build_parser
    from kpiboard.cli._common import setup_logging

    parser = build_parser()
    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()

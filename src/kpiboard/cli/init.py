"""Handler for 'kpiboard init'."""

from kpiboard.cli._common import error, output_json
from kpiboard.source import SourceError, YamlSource


def init_board(args) -> int:
    """Create a board file with starter categories."""
    source = YamlSource(args.board)

    if source.path.exists():
        try:
            names = [c.get("name") for c in source.read()["categories"]]
        except SourceError as e:
            error(str(e), args.json)
        if args.json:
            output_json({"path": str(source.path), "columns": names, "created": False})
        else:
            print(f"Board already initialized at {source.path}")
        return 0

    names = args.categories or ["Backlog", "Doing", "Done"]
    source.init(names)

    if args.json:
        output_json({"path": str(source.path), "columns": names, "created": True})
    else:
        print(f"Initialized board at {source.path}")
        print(f"Columns: {', '.join(names)}")

    return 0

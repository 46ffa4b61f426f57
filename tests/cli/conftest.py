"""Shared fixtures for CLI tests."""

import pytest

from kpiboard.source import YamlSource


@pytest.fixture
def empty_board(tmp_path):
    """A board file with the default columns and no KPIs."""
    YamlSource(tmp_path).init()
    return tmp_path


@pytest.fixture
def initialized_board(empty_board):
    """A board with three columns and three KPIs (one ungrouped, two in Backlog)."""
    source = YamlSource(empty_board)
    data = source.read()
    data["kpis"] = [
        {"id": "kpi-1", "title": "Signups", "type": "tracking", "value": "120"},
        {"id": "kpi-2", "title": "Revenue", "type": "tracking", "group": "backlog", "value": "$1.2M"},
        {"id": "kpi-3", "title": "Churn", "type": "task", "group": "backlog"},
    ]
    source.write(data)
    return empty_board

"""Fixtures for UI tests."""

import pytest

from kpiboard.config import Settings
from kpiboard.dashboard import Dashboard
from kpiboard.ui.app import KpiBoardApp


@pytest.fixture
def dashboard(memory_source):
    return Dashboard.from_source(memory_source, Settings())


@pytest.fixture
def app(dashboard, tmp_path):
    """The board app over the in-memory source: NEW KPIs, Sales, Operations."""
    return KpiBoardApp(tmp_path, dashboard=dashboard)


@pytest.fixture
def settle():
    """Wait for the UI and any background fetches to go quiet."""

    async def _settle(pilot):
        for _ in range(2):
            await pilot.pause()
            await pilot.app.dashboard.wait_idle()
        await pilot.pause()

    return _settle

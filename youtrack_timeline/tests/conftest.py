"""
Test configuration and fixtures for the youtrack_timeline test suite.
"""
import os
from unittest.mock import Mock, patch

import pytest

from youtrack_timeline.app.models import ProjectGraph
from youtrack_timeline.tests.factories import day, depends, make_task


@pytest.fixture
def abc_graph():
    """A (2d), B (3d, depends on A), C (1d, depends on A)."""
    tasks = [
        make_task("PROJ-A", start_date=day(1), due_date=day(3)),
        make_task("PROJ-B", start_date=day(1), due_date=day(4)),
        make_task("PROJ-C", start_date=day(1), due_date=day(2)),
    ]
    return ProjectGraph(tasks=tasks, edges=[depends("PROJ-B", "PROJ-A"), depends("PROJ-C", "PROJ-A")])


@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    env_vars = {
        "YOUTRACK_URL": "https://test.youtrack.cloud",
        "YOUTRACK_TOKEN": "perm:test-token",
    }

    with patch.dict(os.environ, env_vars):
        yield env_vars


@pytest.fixture
def mock_response():
    """Factory for fake requests.Response objects."""
    def _make(json_data=None, status_code=200):
        resp = Mock()
        resp.status_code = status_code
        resp.ok = 200 <= status_code < 400
        resp.json.return_value = json_data
        resp.text = "" if json_data is None else str(json_data)
        resp.reason = "Error"
        return resp
    return _make

"""
Pytest configuration and shared fixtures

Provides dependency rows, normalized records and backend configuration shared
by the graph, collector and dashboard tests.
"""

from datetime import datetime

import pytest

from teamgraph.domain.dependency import DependencyRecord, RecordKind
from teamgraph.secure_config import DashboardApiConfig, reset_config

# ===== Record Fixtures =====


@pytest.fixture
def sample_timestamp():
    """Provide a consistent timestamp for testing"""
    return datetime(2025, 9, 15, 12, 0, 0)


@pytest.fixture
def outbound_rows():
    """Outbound endpoint rows: Payments relies on Identity and Ledger, Identity relies on Payments"""
    return [
        {"owned_team": "Payments", "relying_on_teams_array": ["Identity", "Ledger"], "number_of_dependent_issues": 6},
        {"owned_team": "Identity", "relying_on_teams_array": ["Payments"], "number_of_dependent_issues": 2},
    ]


@pytest.fixture
def inbound_rows():
    """Inbound endpoint rows: Ledger is relied upon by Payments and Mobile"""
    return [
        {"assignee_team": "Ledger", "relying_teams_array": ["Payments", "Mobile"], "volume_of_work_relied_upon": 8},
        {"assignee_team": "Identity", "relying_teams_array": ["Mobile"], "volume_of_work_relied_upon": 1},
    ]


@pytest.fixture
def bidirectional_records():
    """A relies on B for 5 stories, B relies on A for 3 (outbound only)"""
    return [
        DependencyRecord("A", ("B",), 5, RecordKind.OUTBOUND),
        DependencyRecord("B", ("A",), 3, RecordKind.OUTBOUND),
    ]


# ===== Configuration Fixtures =====


@pytest.fixture
def api_config():
    """Valid backend configuration"""
    return DashboardApiConfig(base_url="https://metrics.example.com", api_version="v1", timeout_seconds=5)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove teamgraph environment variables and the cached config"""
    for name in (
        "DASHBOARD_API_BASE_URL",
        "DASHBOARD_API_VERSION",
        "DASHBOARD_API_TIMEOUT",
        "GRAPH_LAYOUT_MODE",
        "GRAPH_ZERO_MAGNITUDE_POLICY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("teamgraph.secure_config.load_dotenv", lambda *args, **kwargs: False)
    reset_config()
    yield monkeypatch
    reset_config()

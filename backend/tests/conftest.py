"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend and keep the process environment
free of real Supabase secrets, so config-dependent tests stay deterministic.
"""
import sys
from pathlib import Path

import pytest

# Ensure `backend.*` and the test helpers are importable across tests
REPO_ROOT = Path(__file__).resolve().parents[2]
TESTS_DIR = REPO_ROOT / "backend" / "tests"
for p in (str(REPO_ROOT), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)

# A JWT-shaped key accepted by supabase.create_client; never valid anywhere.
FAKE_SERVICE_ROLE_KEY = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
    "eyJyb2xlIjoic2VydmljZV9yb2xlIiwiaXNzIjoidGVzdCJ9."
    "dGVzdC1vbmx5LXNpZ25hdHVyZQ"
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_supabase_env(monkeypatch: pytest.MonkeyPatch):
    """Remove ambient Supabase settings so each test declares what it needs."""
    for var in (
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "SUPABASE_SERVICE_ROLE_KEY",
        "LOGBOOK_ENV",
        "LOGBOOK_NEW_PASSWORD",
    ):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def fake_service_role_key() -> str:
    return FAKE_SERVICE_ROLE_KEY

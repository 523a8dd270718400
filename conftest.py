"""Pytest configuration and shared fixtures."""

import os
import pytest

from db.client import init_db, close_db, _parse_database_url
from db.migrate import ensure_schema

# Load env vars
from dotenv import load_dotenv
load_dotenv()


# =============================================================================
# SAFETY CHECK: Prevent tests from running against production database
# =============================================================================

ALLOWED_DB_HOSTS = {"localhost", "127.0.0.1", "host.docker.internal", "db", "postgres"}


def _db_host() -> str:
    db_config = _parse_database_url()
    if db_config:
        return db_config["host"] or "localhost"
    return os.getenv("POLLEN_DB_HOST", "localhost")


def pytest_configure(config):
    """Register custom markers and check database safety."""
    config.addinivalue_line("markers", "no_db: mark test to skip database setup")
    config.addinivalue_line("markers", "online: mark test as online test (hits external APIs)")

    db_host = _db_host()

    if db_host not in ALLOWED_DB_HOSTS:
        pytest.exit(
            f"\n\n"
            f"{'=' * 60}\n"
            f"SAFETY CHECK FAILED: Cannot run tests against production DB!\n"
            f"{'=' * 60}\n"
            f"\n"
            f"Current database host: {db_host}\n"
            f"Allowed hosts: {', '.join(sorted(ALLOWED_DB_HOSTS))}\n"
            f"\n"
            f"To run tests, point DATABASE_URL or POLLEN_DB_HOST at localhost in your .env\n"
            f"{'=' * 60}\n",
            returncode=1,
        )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="function", autouse=True)
async def setup_db(request):
    """Initialize database connection pool and schema for tests that need it.

    Tests marked with @pytest.mark.no_db will skip database initialization.
    Database tests are skipped when no local Postgres is reachable.
    """
    # Skip DB setup for tests marked with no_db
    if "no_db" in [marker.name for marker in request.node.iter_markers()]:
        yield
        return

    try:
        await init_db()
        await ensure_schema()
    except Exception as e:
        await close_db()
        pytest.skip(f"Postgres not available: {e}")

    yield
    await close_db()

import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from snapsync.config.settings import Settings
from snapsync.database.connection import close_pool, get_connection, init_pool

PHOTOS_DDL = """
CREATE TABLE IF NOT EXISTS photos (
    id BIGSERIAL PRIMARY KEY,
    image_url TEXT NOT NULL,
    filename TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    "uploaderGamertag" TEXT NOT NULL
)
"""


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "snapmatic_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(PHOTOS_DDL)
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def namespace(integration_pool: None) -> Generator[str, None, None]:
    """A storage namespace unique to one test; its rows are deleted afterwards."""
    ns = f"it-{uuid.uuid4().hex[:12]}"
    yield ns
    with get_connection() as conn:
        conn.execute("DELETE FROM photos WHERE filename LIKE %s", (f"{ns}/%",))
        conn.commit()

import os
import uuid
from collections.abc import Callable, Generator
from typing import Any

import psycopg
import pytest

from idp.config.settings import Settings
from idp.database.connection import (
    apply_schema,
    build_conninfo,
    close_pool,
    get_connection,
    init_pool,
)
from idp.database.repositories.document_records_repository import PostgresRecordStore
from idp.records.models import DocumentRecord


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "idp_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    # the pool opens lazily and would only fail on first use; probe first
    try:
        psycopg.connect(build_conninfo(test_settings), connect_timeout=3).close()
    except Exception as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    init_pool(test_settings)
    try:
        apply_schema()
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def pg_store(integration_pool: None) -> PostgresRecordStore:
    return PostgresRecordStore()


@pytest.fixture
def created_documents(integration_pool: None) -> Generator[list[str], None, None]:
    """Document IDs to delete, with their jobs, after the test."""
    cleanup: list[str] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM pipeline_jobs WHERE document_id = ANY(%s)", (cleanup,))
            cur.execute("DELETE FROM document_records WHERE document_id = ANY(%s)", (cleanup,))
        conn.commit()


@pytest.fixture
def seed_record(
    pg_store: PostgresRecordStore,
    created_documents: list[str],
) -> Callable[..., DocumentRecord]:
    """Insert a fresh record with a unique ID and register it for cleanup."""

    def _seed(**overrides: Any) -> DocumentRecord:
        document_id = str(uuid.uuid4())
        fields: dict[str, Any] = {
            "document_id": document_id,
            "file_name": "invoice.pdf",
            "upload_time": "2026-01-01T00:00:00+00:00",
            "source_location": f"documents/{document_id}/invoice.pdf",
        }
        fields.update(overrides)
        record = DocumentRecord(**fields)
        pg_store.create(record)
        created_documents.append(document_id)
        return record

    return _seed

"""HTTP surface for uploads and status polling.

Run with: uvicorn idp.api.main:app --host 0.0.0.0 --port 8000
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from idp.api.routers import documents
from idp.config.settings import Settings
from idp.database.connection import apply_schema, close_pool, init_pool
from idp.database.repositories.document_records_repository import PostgresRecordStore
from idp.database.repositories.job_repository import JobRepository
from idp.logging.logger import Log
from idp.pipeline.file_store import FileStore
from idp.pipeline.ingestion import IngestionService
from idp.records.base import BaseRecordStore


def create_app(
    settings: Settings | None = None,
    *,
    record_store: BaseRecordStore | None = None,
    ingestion: IngestionService | None = None,
) -> FastAPI:
    """Build the API.

    With no record_store the app owns a PostgreSQL pool for its lifetime and
    triggers pipelines by enqueueing jobs. Passing record_store and ingestion
    wires prebuilt services instead.
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if record_store is not None:
            yield
            return
        Log.configure(settings.log_level)
        init_pool(settings)
        try:
            apply_schema()
            store = PostgresRecordStore()
            job_repo = JobRepository(settings.max_job_attempts)
            app.state.record_store = store
            app.state.ingestion = IngestionService(
                store, FileStore(Path(settings.files_root)), job_repo.enqueue
            )
            yield
        finally:
            close_pool()

    app = FastAPI(title="IDP Pipeline", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    if record_store is not None:
        app.state.record_store = record_store
        app.state.ingestion = ingestion

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(documents.router)
    return app


app = create_app()

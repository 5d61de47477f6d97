from fastapi import Request

from idp.pipeline.ingestion import IngestionService
from idp.pipeline.status_reader import StatusReader


def get_status_reader(request: Request) -> StatusReader:
    return StatusReader(request.app.state.record_store)


def get_ingestion(request: Request) -> IngestionService:
    return request.app.state.ingestion

import base64
import binascii
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from idp.api.deps import get_ingestion, get_status_reader
from idp.api.schemas import UploadRequest, UploadResponse
from idp.logging.logger import Log
from idp.pipeline.exceptions import RecordNotFoundError
from idp.pipeline.ingestion import IngestionService
from idp.pipeline.status_reader import StatusReader

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=UploadResponse, response_model_by_alias=True)
def upload_document(
    body: UploadRequest,
    ingestion: IngestionService = Depends(get_ingestion),
) -> UploadResponse:
    """Store an uploaded document and start its pipeline."""
    if not body.file_name or not body.file_content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="fileName and fileContent are required",
        )
    try:
        content = base64.b64decode(body.file_content, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="fileContent must be base64 encoded",
        )

    try:
        record = ingestion.upload(body.file_name, content)
    except Exception as exc:
        Log.exception(f"Upload of {body.file_name} failed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from exc

    return UploadResponse(
        document_id=record.document_id,
        message="Document uploaded successfully and processing started",
    )


@router.get("")
def list_documents(reader: StatusReader = Depends(get_status_reader)) -> dict[str, Any]:
    return {"documents": [record.to_dict() for record in reader.get_all()]}


@router.get("/{document_id}")
def get_document(
    document_id: str,
    reader: StatusReader = Depends(get_status_reader),
) -> dict[str, Any]:
    """Current record state; poll until status is completed or failed."""
    try:
        record = reader.get_one(document_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return record.to_dict()

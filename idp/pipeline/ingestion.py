import uuid
from collections.abc import Callable

from idp.logging.logger import Log
from idp.pipeline.file_store import FileStore, source_location_for
from idp.pipeline.stages import utc_now_iso
from idp.records.base import BaseRecordStore
from idp.records.models import (
    DocumentRecord,
    DocumentStatus,
    PipelineStep,
    RecordUpdate,
)

PipelineTrigger = Callable[[str], object]


class IngestionService:
    """Creates document records and hands them to the pipeline trigger."""

    def __init__(
        self,
        record_store: BaseRecordStore,
        file_store: FileStore,
        trigger: PipelineTrigger,
    ) -> None:
        self._record_store = record_store
        self._file_store = file_store
        self._trigger = trigger

    def upload(self, file_name: str, content: bytes) -> DocumentRecord:
        """Store raw bytes under a fresh document ID, then register them."""
        document_id = str(uuid.uuid4())
        source_location = source_location_for(document_id, file_name)
        self._file_store.save(source_location, content)
        Log.info(f"Stored {len(content)} bytes for document {document_id} at {source_location}")
        return self.register(document_id, source_location, file_name)

    def register(self, document_id: str, source_location: str, file_name: str) -> DocumentRecord:
        """Create the record (uploaded, at extraction) and trigger the pipeline.

        The record exists before the trigger fires. If the trigger fails the
        record is marked failed so pollers do not wait on it forever.
        """
        record = DocumentRecord(
            document_id=document_id,
            file_name=file_name,
            upload_time=utc_now_iso(),
            source_location=source_location,
            status=DocumentStatus.UPLOADED,
            current_step=PipelineStep.EXTRACTION,
        )
        self._record_store.create(record)
        try:
            self._trigger(document_id)
        except Exception as exc:
            Log.error(f"Failed to trigger pipeline for document {document_id}: {exc}")
            self._record_store.update(
                document_id,
                RecordUpdate(
                    status=DocumentStatus.FAILED,
                    append_errors=(f"Ingestion Error: {exc}",),
                ),
            )
            raise
        Log.info(f"Registered document {document_id} ({file_name})")
        return record

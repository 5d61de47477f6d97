import threading

from idp.pipeline.exceptions import (
    RecordAlreadyExistsError,
    RecordNotFoundError,
    StaleStageError,
)
from idp.records.base import BaseRecordStore
from idp.records.models import DocumentRecord, PipelineStep, RecordUpdate


class InMemoryRecordStore(BaseRecordStore):
    """Process-local record store.

    No persistence. Useful for tests and local experiments; every write is
    serialized by a single lock so updates behave like the SQL store.
    """

    def __init__(self) -> None:
        self._records: dict[str, DocumentRecord] = {}
        self._lock = threading.Lock()

    def get(self, document_id: str) -> DocumentRecord:
        with self._lock:
            record = self._records.get(document_id)
        if record is None:
            raise RecordNotFoundError(f"Document {document_id} not found")
        return record

    def create(self, record: DocumentRecord) -> None:
        with self._lock:
            if record.document_id in self._records:
                raise RecordAlreadyExistsError(
                    f"Document {record.document_id} already exists"
                )
            self._records[record.document_id] = record

    def update(
        self,
        document_id: str,
        changes: RecordUpdate,
        *,
        expected_step: PipelineStep | None = None,
    ) -> None:
        with self._lock:
            current = self._records.get(document_id)
            if current is None:
                raise RecordNotFoundError(f"Document {document_id} not found")
            if expected_step is not None and current.current_step != expected_step:
                raise StaleStageError(
                    f"Document {document_id} is at step '{current.current_step.value}', "
                    f"expected '{expected_step.value}'"
                )
            self._records[document_id] = changes.apply_to(current)

    def list_all(self) -> list[DocumentRecord]:
        with self._lock:
            return list(self._records.values())

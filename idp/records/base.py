from abc import ABC, abstractmethod

from idp.records.models import DocumentRecord, PipelineStep, RecordUpdate


class BaseRecordStore(ABC):
    """Contract for durable per-document record storage."""

    @abstractmethod
    def get(self, document_id: str) -> DocumentRecord:
        """Load one record.

        Raises:
            RecordNotFoundError: if no record with this ID exists.
        """

    @abstractmethod
    def create(self, record: DocumentRecord) -> None:
        """Insert a new record.

        Raises:
            RecordAlreadyExistsError: if the document ID is already taken.
        """

    @abstractmethod
    def update(
        self,
        document_id: str,
        changes: RecordUpdate,
        *,
        expected_step: PipelineStep | None = None,
    ) -> None:
        """Apply a field-scoped partial update in a single write.

        Only the fields set on ``changes`` are written; errors are appended.
        When ``expected_step`` is given the write applies only if the stored
        current_step still equals it.

        Raises:
            RecordNotFoundError: if no record with this ID exists.
            StaleStageError: if current_step no longer equals expected_step.
        """

    @abstractmethod
    def list_all(self) -> list[DocumentRecord]:
        """Return every record (full scan)."""

from idp.records.base import BaseRecordStore
from idp.records.models import DocumentRecord


class StatusReader:
    """Read-only view of pipeline progress for polling clients."""

    def __init__(self, record_store: BaseRecordStore) -> None:
        self._record_store = record_store

    def get_one(self, document_id: str) -> DocumentRecord:
        """Raises RecordNotFoundError when the document does not exist."""
        return self._record_store.get(document_id)

    def get_all(self) -> list[DocumentRecord]:
        return self._record_store.list_all()

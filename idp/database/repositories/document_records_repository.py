from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from idp.database.connection import get_connection
from idp.pipeline.exceptions import (
    RecordAlreadyExistsError,
    RecordNotFoundError,
    StaleStageError,
)
from idp.records.base import BaseRecordStore
from idp.records.models import (
    ClassificationResult,
    DocumentRecord,
    DocumentStatus,
    ExtractionResult,
    PipelineStep,
    RecordUpdate,
    SummarizationResult,
)

_SELECT_COLUMNS = """
    document_id, file_name, upload_time, source_location, status,
    current_step, extraction_result, classification_result,
    summarization_result, errors
"""


class PostgresRecordStore(BaseRecordStore):
    """Database operations for the document_records table.

    Result columns are JSONB. Every update touches only the columns named in
    the RecordUpdate, so concurrent writers to different fields never drop
    each other's data.
    """

    def get(self, document_id: str) -> DocumentRecord:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM document_records WHERE document_id = %s",
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise RecordNotFoundError(f"Document {document_id} not found")
        return _row_to_record(row)

    def create(self, record: DocumentRecord) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO document_records
                    (document_id, file_name, upload_time, source_location,
                     status, current_step, errors)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (document_id) DO NOTHING
                    """,
                    (
                        record.document_id,
                        record.file_name,
                        record.upload_time,
                        record.source_location,
                        record.status.value,
                        record.current_step.value,
                        Jsonb(list(record.errors)),
                    ),
                )
                if cur.rowcount == 0:
                    raise RecordAlreadyExistsError(
                        f"Document {record.document_id} already exists"
                    )
            conn.commit()

    def update(
        self,
        document_id: str,
        changes: RecordUpdate,
        *,
        expected_step: PipelineStep | None = None,
    ) -> None:
        assignments, params = _build_assignments(changes)
        if not assignments:
            raise ValueError("RecordUpdate must set at least one field")

        query = f"UPDATE document_records SET {', '.join(assignments)} WHERE document_id = %s"
        params.append(document_id)
        if expected_step is not None:
            query += " AND current_step = %s"
            params.append(expected_step.value)

        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, tuple(params))
                if cur.rowcount == 0:
                    cur.execute(
                        "SELECT current_step FROM document_records WHERE document_id = %s",
                        (document_id,),
                    )
                    row = cur.fetchone()
                    if row is None:
                        raise RecordNotFoundError(f"Document {document_id} not found")
                    raise StaleStageError(
                        f"Document {document_id} is at step '{row[0]}', "
                        f"expected '{expected_step.value if expected_step else None}'"
                    )
            conn.commit()

    def list_all(self) -> list[DocumentRecord]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM document_records ORDER BY upload_time"
                )
                rows = cur.fetchall()
        return [_row_to_record(row) for row in rows]


def _build_assignments(changes: RecordUpdate) -> tuple[list[str], list[Any]]:
    assignments: list[str] = []
    params: list[Any] = []
    if changes.status is not None:
        assignments.append("status = %s")
        params.append(changes.status.value)
    if changes.current_step is not None:
        assignments.append("current_step = %s")
        params.append(changes.current_step.value)
    if changes.extraction_result is not None:
        assignments.append("extraction_result = %s")
        params.append(Jsonb(changes.extraction_result.to_dict()))
    if changes.classification_result is not None:
        assignments.append("classification_result = %s")
        params.append(Jsonb(changes.classification_result.to_dict()))
    if changes.summarization_result is not None:
        assignments.append("summarization_result = %s")
        params.append(Jsonb(changes.summarization_result.to_dict()))
    if changes.append_errors:
        assignments.append("errors = COALESCE(errors, '[]'::jsonb) || %s")
        params.append(Jsonb(list(changes.append_errors)))
    return assignments, params


def _row_to_record(row: dict[str, Any]) -> DocumentRecord:
    extraction = row["extraction_result"]
    classification = row["classification_result"]
    summarization = row["summarization_result"]
    return DocumentRecord(
        document_id=row["document_id"],
        file_name=row["file_name"],
        upload_time=row["upload_time"],
        source_location=row["source_location"],
        status=DocumentStatus(row["status"]),
        current_step=PipelineStep(row["current_step"]),
        extraction_result=ExtractionResult.from_dict(extraction) if extraction else None,
        classification_result=(
            ClassificationResult.from_dict(classification) if classification else None
        ),
        summarization_result=(
            SummarizationResult.from_dict(summarization) if summarization else None
        ),
        errors=tuple(row["errors"] or ()),
    )

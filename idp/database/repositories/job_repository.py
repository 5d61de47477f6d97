from typing import Any

import psycopg
from psycopg.rows import dict_row

from idp.database.connection import get_connection
from idp.database.models import JobRecord


class JobRepository:
    """Database operations for the pipeline_jobs table.

    A job asks the worker to drive one document through the pipeline from
    whatever step its record is currently at.
    """

    def __init__(self, max_attempts: int) -> None:
        self._max_attempts = max_attempts

    def enqueue(self, document_id: str) -> int:
        """Insert a pending job for a document and return its ID."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO pipeline_jobs (document_id, status, attempts)
                    VALUES (%s, 'pending', 0)
                    RETURNING id
                    """,
                    (document_id,),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise RuntimeError(f"Failed to enqueue job for document {document_id}")
        return int(row[0])

    def claim_next_job(self, conn: psycopg.Connection[Any]) -> JobRecord | None:
        """Atomically move the oldest pending job to processing and return it."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                UPDATE pipeline_jobs
                SET status = 'processing', locked_at = NOW(), updated_at = NOW()
                WHERE id = (
                    SELECT id
                    FROM pipeline_jobs
                    WHERE status = 'pending'
                      AND attempts < %s
                    ORDER BY created_at
                    LIMIT 1
                    FOR UPDATE SKIP LOCKED
                )
                RETURNING id, document_id, status, attempts
                """,
                (self._max_attempts,),
            )
            row = cur.fetchone()
        conn.commit()

        if row is None:
            return None
        return JobRecord(
            id=row["id"],
            document_id=row["document_id"],
            status=row["status"],
            attempts=row["attempts"],
        )

    def mark_done(self, job_id: int) -> None:
        self._set_status(job_id, "done")

    def mark_failed(self, job_id: int, error: str) -> None:
        """Mark a job as permanently failed."""
        self._set_status(job_id, "failed", error)

    def increment_attempts(self, job_id: int, error: str) -> None:
        """Record a failed attempt and return the job to pending."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE pipeline_jobs
                SET attempts = attempts + 1, status = 'pending', error_message = %s,
                    locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (error, job_id),
            )
            conn.commit()

    def find_by_id(self, job_id: int) -> JobRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, document_id, status, attempts,
                           error_message, locked_at, created_at, updated_at
                    FROM pipeline_jobs
                    WHERE id = %s
                    """,
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return JobRecord(**row)

    def _set_status(self, job_id: int, status: str, error: str | None = None) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE pipeline_jobs
                SET status = %s, error_message = COALESCE(%s, error_message),
                    updated_at = NOW()
                WHERE id = %s
                """,
                (status, error, job_id),
            )
            conn.commit()

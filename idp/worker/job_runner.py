from idp.config.settings import Settings
from idp.database.models import JobRecord
from idp.database.repositories.job_repository import JobRepository
from idp.logging.logger import Log
from idp.pipeline.coordinator import PipelineCoordinator
from idp.pipeline.exceptions import RecordNotFoundError, StaleStageError


class JobRunner:
    """Run one job through the coordinator and apply retry policy.

    A retry simply re-runs the coordinator; the record's current_step did not
    advance on failure, so the failed stage runs again.
    """

    def __init__(
        self,
        coordinator: PipelineCoordinator,
        job_repo: JobRepository,
        settings: Settings,
    ) -> None:
        self._coordinator = coordinator
        self._job_repo = job_repo
        self._settings = settings

    def run(self, job: JobRecord) -> None:
        Log.info(
            f"Running job {job.id} (attempt {job.attempts + 1})",
            job_id=job.id,
            document_id=job.document_id,
        )
        try:
            self._coordinator.run(job.document_id)
        except RecordNotFoundError as exc:
            self._job_repo.mark_failed(job.id, str(exc))
            Log.error(f"Job {job.id} failed permanently: {exc}")
            return
        except StaleStageError as exc:
            # another run already moved the record forward
            self._job_repo.mark_done(job.id)
            Log.warning(f"Job {job.id} superseded: {exc}")
            return
        except Exception as exc:
            self._handle_failure(job, exc)
            return
        self._job_repo.mark_done(job.id)
        Log.info(f"Job {job.id} completed successfully")

    def _handle_failure(self, job: JobRecord, exc: Exception) -> None:
        """Increment attempts; mark failed if at max, otherwise back to pending."""
        Log.error(f"Job {job.id} failed: {exc}", job_id=job.id, document_id=job.document_id)
        if job.attempts + 1 >= self._settings.max_job_attempts:
            self._job_repo.mark_failed(job.id, str(exc))
            Log.error(f"Job {job.id} permanently failed after {job.attempts + 1} attempts")
        else:
            self._job_repo.increment_attempts(job.id, str(exc))
            Log.warning(f"Job {job.id} will be retried (attempt {job.attempts + 2})")

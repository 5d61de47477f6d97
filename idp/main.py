from idp.config.settings import Settings
from idp.database.connection import apply_schema, close_pool, init_pool
from idp.database.repositories.document_records_repository import PostgresRecordStore
from idp.database.repositories.job_repository import JobRepository
from idp.logging.logger import Log
from idp.pipeline.coordinator import build_coordinator
from idp.worker.job_runner import JobRunner
from idp.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> ensure schema -> build dependencies -> poll."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        apply_schema()
        coordinator = build_coordinator(settings, PostgresRecordStore())
        job_repo = JobRepository(settings.max_job_attempts)
        job_runner = JobRunner(coordinator, job_repo, settings)
        worker = Worker(job_repo, job_runner, settings)
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()

from collections.abc import Iterable
from pathlib import Path

from idp.config.settings import Settings
from idp.extraction.factory import TextExtractorFactory
from idp.inference.factory import InferenceClientFactory
from idp.logging.logger import Log
from idp.pipeline.exceptions import PipelineError
from idp.pipeline.file_store import FileStore
from idp.pipeline.models import StageOutcome
from idp.pipeline.stages import (
    ClassificationStage,
    ExtractionStage,
    StageExecutor,
    SummarizationStage,
)
from idp.records.base import BaseRecordStore
from idp.records.models import PipelineStep


class PipelineCoordinator:
    """Drives a document through extraction -> classification -> summarization.

    Holds no state of its own: the starting stage is read from the record and
    each executor's next_step decides what runs after it. Failures are not
    retried here; the executor has already marked the record failed and the
    error goes back to the caller.
    """

    def __init__(
        self,
        record_store: BaseRecordStore,
        executors: Iterable[StageExecutor],
    ) -> None:
        self._record_store = record_store
        self._executors = {executor.stage: executor for executor in executors}
        missing = [
            step.value
            for step in PipelineStep
            if step is not PipelineStep.COMPLETED and step not in self._executors
        ]
        if missing:
            raise ValueError(f"Missing stage executors for: {missing}")

    def run(self, document_id: str) -> list[StageOutcome]:
        """Run every remaining stage for a document, in order.

        Returns the outcomes of the stages run by this call; empty when the
        record was already completed.
        """
        record = self._record_store.get(document_id)
        step = record.current_step
        if step is PipelineStep.COMPLETED:
            Log.info(f"Document {document_id} already completed, nothing to run")
            return []

        Log.info(f"Pipeline for document {document_id} starting at {step.value}")
        outcomes: list[StageOutcome] = []
        while step is not PipelineStep.COMPLETED:
            try:
                outcome = self._executors[step].run(document_id)
            except PipelineError as exc:
                Log.error(
                    f"Pipeline for document {document_id} halted at {step.value}: {exc}"
                )
                raise
            outcomes.append(outcome)
            step = outcome.next_step

        Log.info(f"Pipeline for document {document_id} completed")
        return outcomes


def build_coordinator(
    settings: Settings,
    record_store: BaseRecordStore,
    files_root: Path | None = None,
) -> PipelineCoordinator:
    """Build a PipelineCoordinator with all configured adapters."""
    file_store = FileStore(files_root or Path(settings.files_root))
    client = InferenceClientFactory.create(settings)
    return PipelineCoordinator(
        record_store,
        [
            ExtractionStage(
                record_store,
                file_store,
                TextExtractorFactory.create(settings),
                timeout_seconds=settings.extraction_timeout_seconds,
            ),
            ClassificationStage(
                record_store,
                client,
                model=settings.inference_model_name,
                max_tokens=settings.classification_max_tokens,
                timeout_seconds=settings.classification_timeout_seconds,
                temperature=settings.inference_temperature,
            ),
            SummarizationStage(
                record_store,
                client,
                model=settings.inference_model_name,
                max_tokens=settings.summarization_max_tokens,
                timeout_seconds=settings.summarization_timeout_seconds,
                temperature=settings.inference_temperature,
            ),
        ],
    )

"""Stage executors: extraction, classification, summarization.

Each executor loads the record, checks that the record is due for its stage,
calls exactly one external service, parses the response and commits the
result together with the step advance in a single guarded update. Any failure
after the stage check is written to the record (status=failed plus a
stage-prefixed error) before it propagates.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import ClassVar, cast

from idp.extraction.base import BaseTextExtractor
from idp.inference.client_base import BaseInferenceClient
from idp.inference.prompt_loader import load_prompt_template
from idp.logging.logger import Log
from idp.pipeline.exceptions import (
    PreconditionFailedError,
    StageError,
    StaleStageError,
    UpstreamServiceError,
)
from idp.pipeline.file_store import FileStore
from idp.pipeline.models import StageOutcome
from idp.pipeline.parsing import parse_classification, parse_extraction, parse_summary
from idp.pipeline.timeouts import call_with_timeout
from idp.records.base import BaseRecordStore
from idp.records.models import (
    ClassificationResult,
    DocumentRecord,
    DocumentStatus,
    ExtractionResult,
    PipelineStep,
    RecordUpdate,
    StageResult,
    SummarizationResult,
)

CLASSIFICATION_TEXT_LIMIT = 2000
UNKNOWN_CATEGORY = "Unknown"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class StageExecutor(ABC):
    """Shared run/commit/failure protocol for one pipeline stage."""

    stage: ClassVar[PipelineStep]
    label: ClassVar[str]

    def __init__(self, record_store: BaseRecordStore) -> None:
        self._record_store = record_store

    def run(self, document_id: str) -> StageOutcome:
        """Run this stage for a document.

        Raises:
            RecordNotFoundError: the record does not exist. Nothing is written.
            StaleStageError: the record is not at this stage. Nothing is written.
            StageError: the stage failed; the failure is already persisted.
        """
        record = self._record_store.get(document_id)
        if record.current_step != self.stage:
            raise StaleStageError(
                f"{self.label} invoked for document {document_id} "
                f"at step '{record.current_step.value}'"
            )

        Log.info(f"{self.label} started", document_id=document_id)
        try:
            result = self._produce(record)
        except StageError as exc:
            self._persist_failure(document_id, exc)
            raise
        except Exception as exc:
            wrapped = UpstreamServiceError(str(exc))
            self._persist_failure(document_id, wrapped)
            raise wrapped from exc

        next_step = self.stage.next_step
        try:
            self._record_store.update(
                document_id,
                self._commit(result, next_step),
                expected_step=self.stage,
            )
        except StaleStageError:
            raise
        except Exception as exc:
            wrapped = UpstreamServiceError(f"Could not save result: {exc}")
            self._persist_failure(document_id, wrapped)
            raise wrapped from exc
        Log.info(f"{self.label} committed for document {document_id}, next step: {next_step.value}")
        return StageOutcome(
            document_id=document_id,
            stage=self.stage,
            result=result,
            next_step=next_step,
        )

    @abstractmethod
    def _produce(self, record: DocumentRecord) -> StageResult:
        """Validate preconditions, call the service, parse its output."""

    @abstractmethod
    def _commit(self, result: StageResult, next_step: PipelineStep) -> RecordUpdate:
        """Build the single update that stores result and advances the step."""

    def _persist_failure(self, document_id: str, exc: Exception) -> None:
        """Mark the record failed, unless another run has already moved it on."""
        message = f"{self.label} Error: {exc}"
        Log.error(f"Document {document_id} failed: {message}")
        try:
            self._record_store.update(
                document_id,
                RecordUpdate(status=DocumentStatus.FAILED, append_errors=(message,)),
                expected_step=self.stage,
            )
        except StaleStageError as stale_exc:
            Log.warning(
                f"Not recording {self.label.lower()} failure for document {document_id}: "
                f"{stale_exc}"
            )
        except Exception as persist_exc:
            Log.error(
                f"Could not persist failure for document {document_id}: {persist_exc}"
            )


class ExtractionStage(StageExecutor):
    stage = PipelineStep.EXTRACTION
    label = "Extraction"

    def __init__(
        self,
        record_store: BaseRecordStore,
        file_store: FileStore,
        extractor: BaseTextExtractor,
        timeout_seconds: float,
    ) -> None:
        super().__init__(record_store)
        self._file_store = file_store
        self._extractor = extractor
        self._timeout_seconds = timeout_seconds

    def _produce(self, record: DocumentRecord) -> ExtractionResult:
        content = self._file_store.load(record.source_location)
        lines = call_with_timeout(
            lambda: self._extractor.detect_lines(content),
            self._timeout_seconds,
            "Text extraction",
        )
        parsed = parse_extraction(lines)
        if not lines:
            Log.warning(f"Extraction found no text lines in document {record.document_id}")
        Log.info(
            f"Extracted {len(lines)} lines ({len(parsed.text)} chars) from document "
            f"{record.document_id}, confidence {parsed.confidence:.1f}"
        )
        return ExtractionResult(
            text=parsed.text,
            confidence=parsed.confidence,
            timestamp=utc_now_iso(),
        )

    def _commit(self, result: StageResult, next_step: PipelineStep) -> RecordUpdate:
        return RecordUpdate(
            extraction_result=cast(ExtractionResult, result),
            current_step=next_step,
            status=DocumentStatus.PROCESSING,
        )


class _GenerativeStage(StageExecutor):
    """Stage backed by a single prompt to a generative model."""

    prompt_name: ClassVar[str]

    def __init__(
        self,
        record_store: BaseRecordStore,
        client: BaseInferenceClient,
        *,
        model: str,
        max_tokens: int,
        timeout_seconds: float,
        temperature: float = 0.0,
        prompt_template_path: Path | None = None,
    ) -> None:
        super().__init__(record_store)
        self._client = client
        self._model = model
        self._max_tokens = max_tokens
        self._timeout_seconds = timeout_seconds
        self._temperature = temperature
        self._prompt_template = load_prompt_template(self.prompt_name, prompt_template_path)

    def _extracted_text(self, record: DocumentRecord) -> str:
        text = record.extraction_result.text if record.extraction_result else ""
        if not text:
            raise PreconditionFailedError(
                f"No extracted text available for {self.label.lower()}"
            )
        return text

    def _ask(self, prompt: str, document_id: str) -> str:
        Log.debug(f"{self.label} prompt for document {document_id}:\n{prompt}")
        response = self._client.complete(
            model=self._model,
            prompt=prompt,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            timeout_seconds=self._timeout_seconds,
        )
        Log.debug(f"{self.label} raw response for document {document_id}:\n{response}")
        return response


class ClassificationStage(_GenerativeStage):
    stage = PipelineStep.CLASSIFICATION
    label = "Classification"
    prompt_name = "classification"

    def _produce(self, record: DocumentRecord) -> ClassificationResult:
        text = self._extracted_text(record)
        prompt = self._prompt_template.format(text=text[:CLASSIFICATION_TEXT_LIMIT])
        parsed = parse_classification(self._ask(prompt, record.document_id))
        if parsed.degraded:
            Log.warning(
                f"Classification parse degraded for document {record.document_id}: "
                f"using category={parsed.category}, confidence={parsed.confidence}"
            )
        Log.info(f"Classified document {record.document_id} as {parsed.category}")
        return ClassificationResult(
            category=parsed.category,
            confidence=parsed.confidence,
            timestamp=utc_now_iso(),
        )

    def _commit(self, result: StageResult, next_step: PipelineStep) -> RecordUpdate:
        return RecordUpdate(
            classification_result=cast(ClassificationResult, result),
            current_step=next_step,
            status=DocumentStatus.PROCESSING,
        )


class SummarizationStage(_GenerativeStage):
    stage = PipelineStep.SUMMARIZATION
    label = "Summarization"
    prompt_name = "summarization"

    def _produce(self, record: DocumentRecord) -> SummarizationResult:
        text = self._extracted_text(record)
        category = (
            record.classification_result.category
            if record.classification_result
            else UNKNOWN_CATEGORY
        )
        prompt = self._prompt_template.format(text=text, category=category)
        parsed = parse_summary(self._ask(prompt, record.document_id))
        if parsed.degraded:
            Log.warning(
                f"Summarization parse degraded for document {record.document_id}: "
                f"{len(parsed.key_points)} key points recovered"
            )
        return SummarizationResult(
            summary=parsed.summary,
            key_points=parsed.key_points,
            timestamp=utc_now_iso(),
        )

    def _commit(self, result: StageResult, next_step: PipelineStep) -> RecordUpdate:
        return RecordUpdate(
            summarization_result=cast(SummarizationResult, result),
            current_step=next_step,
            status=DocumentStatus.COMPLETED,
        )

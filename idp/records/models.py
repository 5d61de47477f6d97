from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class DocumentStatus(str, Enum):
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PipelineStep(str, Enum):
    """Stage a record should run next. Ordered; never regresses."""

    EXTRACTION = "extraction"
    CLASSIFICATION = "classification"
    SUMMARIZATION = "summarization"
    COMPLETED = "completed"

    @property
    def next_step(self) -> "PipelineStep":
        order = list(PipelineStep)
        index = order.index(self)
        if index == len(order) - 1:
            raise ValueError("completed has no next step")
        return order[index + 1]


@dataclass(frozen=True)
class ExtractionResult:
    text: str
    confidence: float
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "confidence": self.confidence,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExtractionResult":
        return cls(
            text=data["text"],
            confidence=float(data["confidence"]),
            timestamp=data["timestamp"],
        )


@dataclass(frozen=True)
class ClassificationResult:
    category: str
    confidence: int
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "confidence": self.confidence,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClassificationResult":
        return cls(
            category=data["category"],
            confidence=int(data["confidence"]),
            timestamp=data["timestamp"],
        )


@dataclass(frozen=True)
class SummarizationResult:
    summary: str
    key_points: tuple[str, ...]
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "keyPoints": list(self.key_points),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SummarizationResult":
        return cls(
            summary=data["summary"],
            key_points=tuple(data.get("keyPoints") or ()),
            timestamp=data["timestamp"],
        )


StageResult = ExtractionResult | ClassificationResult | SummarizationResult


@dataclass(frozen=True)
class DocumentRecord:
    """Persisted per-document pipeline state."""

    document_id: str
    file_name: str
    upload_time: str
    source_location: str
    status: DocumentStatus = DocumentStatus.UPLOADED
    current_step: PipelineStep = PipelineStep.EXTRACTION
    extraction_result: ExtractionResult | None = None
    classification_result: ClassificationResult | None = None
    summarization_result: SummarizationResult | None = None
    errors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """JSON shape served to polling clients. Absent results are omitted."""
        data: dict[str, Any] = {
            "documentId": self.document_id,
            "fileName": self.file_name,
            "uploadTime": self.upload_time,
            "sourceLocation": self.source_location,
            "status": self.status.value,
            "currentStep": self.current_step.value,
            "errors": list(self.errors),
        }
        if self.extraction_result is not None:
            data["extractionResult"] = self.extraction_result.to_dict()
        if self.classification_result is not None:
            data["classificationResult"] = self.classification_result.to_dict()
        if self.summarization_result is not None:
            data["summarizationResult"] = self.summarization_result.to_dict()
        return data


@dataclass(frozen=True)
class RecordUpdate:
    """Field-scoped partial update. None means 'leave untouched'.

    append_errors is appended to the stored errors, never replacing them.
    """

    status: DocumentStatus | None = None
    current_step: PipelineStep | None = None
    extraction_result: ExtractionResult | None = None
    classification_result: ClassificationResult | None = None
    summarization_result: SummarizationResult | None = None
    append_errors: tuple[str, ...] = field(default=())

    def is_empty(self) -> bool:
        return self == RecordUpdate()

    def apply_to(self, record: DocumentRecord) -> DocumentRecord:
        changes: dict[str, Any] = {
            name: value
            for name, value in (
                ("status", self.status),
                ("current_step", self.current_step),
                ("extraction_result", self.extraction_result),
                ("classification_result", self.classification_result),
                ("summarization_result", self.summarization_result),
            )
            if value is not None
        }
        if self.append_errors:
            changes["errors"] = record.errors + self.append_errors
        return replace(record, **changes)

from unittest.mock import MagicMock

import pytest

from idp.extraction.exceptions import TextExtractionError
from idp.extraction.models import TextLine
from idp.pipeline.coordinator import PipelineCoordinator, build_coordinator
from idp.pipeline.exceptions import RecordNotFoundError, UpstreamServiceError
from idp.pipeline.file_store import FileStore
from idp.pipeline.stages import (
    ClassificationStage,
    ExtractionStage,
    SummarizationStage,
)
from idp.pipeline.status_reader import StatusReader
from idp.records.models import DocumentStatus, PipelineStep

SUMMARY_RESPONSE = "Summary: A short note.\nKey Points:\n- point one\n- point two"


def _make_pipeline(record_store) -> tuple[PipelineCoordinator, MagicMock, MagicMock]:
    file_store = MagicMock(spec=FileStore)
    file_store.load.return_value = b"%PDF-fake"
    extractor = MagicMock()
    extractor.detect_lines.return_value = [
        TextLine("Invoice #1", 90.0),
        TextLine("Total $9.00", 80.0),
    ]
    client = MagicMock()
    client.complete.side_effect = ["Category: Invoice, Confidence: 95", SUMMARY_RESPONSE]
    coordinator = PipelineCoordinator(
        record_store,
        [
            ExtractionStage(record_store, file_store, extractor, timeout_seconds=5),
            ClassificationStage(
                record_store, client, model="m", max_tokens=100, timeout_seconds=60
            ),
            SummarizationStage(
                record_store, client, model="m", max_tokens=500, timeout_seconds=60
            ),
        ],
    )
    return coordinator, extractor, client


class TestPipelineCoordinator:
    def test_runs_all_stages_in_order(self, record_store, make_record) -> None:
        record_store.create(make_record())
        coordinator, _extractor, _client = _make_pipeline(record_store)

        outcomes = coordinator.run("doc-1")

        assert [o.stage for o in outcomes] == [
            PipelineStep.EXTRACTION,
            PipelineStep.CLASSIFICATION,
            PipelineStep.SUMMARIZATION,
        ]
        stored = record_store.get("doc-1")
        assert stored.status is DocumentStatus.COMPLETED
        assert stored.current_step is PipelineStep.COMPLETED
        assert stored.extraction_result is not None
        assert stored.extraction_result.text == "Invoice #1\nTotal $9.00"
        assert stored.extraction_result.confidence == 85
        assert stored.classification_result is not None
        assert stored.classification_result.category == "Invoice"
        assert stored.summarization_result is not None
        assert stored.summarization_result.key_points == ("point one", "point two")
        assert stored.errors == ()

    def test_timestamps_follow_stage_order(self, record_store, make_record) -> None:
        record_store.create(make_record())
        coordinator, _extractor, _client = _make_pipeline(record_store)

        coordinator.run("doc-1")

        stored = record_store.get("doc-1")
        assert stored.extraction_result and stored.classification_result
        assert stored.summarization_result
        assert (
            stored.extraction_result.timestamp
            <= stored.classification_result.timestamp
            <= stored.summarization_result.timestamp
        )

    def test_resumes_from_current_step(self, record_store, make_record) -> None:
        record_store.create(make_record())
        coordinator, extractor, client = _make_pipeline(record_store)
        client.complete.side_effect = [
            UpstreamServiceError("model down"),
            "Category: Invoice, Confidence: 95",
            SUMMARY_RESPONSE,
        ]

        with pytest.raises(UpstreamServiceError):
            coordinator.run("doc-1")
        failed = record_store.get("doc-1")
        assert failed.status is DocumentStatus.FAILED
        assert failed.current_step is PipelineStep.CLASSIFICATION
        assert failed.extraction_result is not None

        outcomes = coordinator.run("doc-1")

        assert [o.stage for o in outcomes] == [
            PipelineStep.CLASSIFICATION,
            PipelineStep.SUMMARIZATION,
        ]
        extractor.detect_lines.assert_called_once()
        stored = record_store.get("doc-1")
        assert stored.status is DocumentStatus.COMPLETED
        assert stored.extraction_result == failed.extraction_result
        assert stored.errors == ("Classification Error: model down",)

    def test_failure_halts_and_leaves_record_failed(self, record_store, make_record) -> None:
        record_store.create(make_record())
        coordinator, extractor, client = _make_pipeline(record_store)
        extractor.detect_lines.side_effect = TextExtractionError("boom")

        with pytest.raises(UpstreamServiceError, match="boom"):
            coordinator.run("doc-1")

        client.complete.assert_not_called()
        stored = StatusReader(record_store).get_one("doc-1")
        assert stored.status is DocumentStatus.FAILED
        assert stored.errors == ("Extraction Error: boom",)
        assert stored.current_step is PipelineStep.EXTRACTION

    def test_completed_record_is_a_no_op(self, record_store, make_record) -> None:
        record_store.create(
            make_record(status=DocumentStatus.COMPLETED, current_step=PipelineStep.COMPLETED)
        )
        coordinator, extractor, client = _make_pipeline(record_store)

        assert coordinator.run("doc-1") == []
        extractor.detect_lines.assert_not_called()
        client.complete.assert_not_called()

    def test_missing_record_raises(self, record_store) -> None:
        coordinator, _extractor, _client = _make_pipeline(record_store)

        with pytest.raises(RecordNotFoundError):
            coordinator.run("does-not-exist")
        assert record_store.list_all() == []

    def test_requires_every_stage(self, record_store) -> None:
        with pytest.raises(ValueError, match="Missing stage executors"):
            PipelineCoordinator(record_store, [])


class TestBuildCoordinator:
    def test_builds_with_example_provider(self, record_store, tmp_path) -> None:
        settings = MagicMock(
            files_root=str(tmp_path),
            extraction_engine="pdfplumber",
            extraction_timeout_seconds=300,
            inference_provider="example",
            inference_model_name="example",
            inference_temperature=0.0,
            classification_max_tokens=100,
            summarization_max_tokens=500,
            classification_timeout_seconds=300,
            summarization_timeout_seconds=300,
        )

        coordinator = build_coordinator(settings, record_store)

        assert isinstance(coordinator, PipelineCoordinator)

    def test_runs_end_to_end_on_a_real_pdf(
        self, record_store, make_record, tmp_path, sample_pdf_bytes
    ) -> None:
        source = tmp_path / "documents" / "doc-1" / "invoice.pdf"
        source.parent.mkdir(parents=True)
        source.write_bytes(sample_pdf_bytes)
        record_store.create(make_record())
        settings = MagicMock(
            files_root=str(tmp_path),
            extraction_engine="pdfplumber",
            extraction_timeout_seconds=60,
            inference_provider="example",
            inference_model_name="example",
            inference_temperature=0.0,
            classification_max_tokens=100,
            summarization_max_tokens=500,
            classification_timeout_seconds=60,
            summarization_timeout_seconds=60,
        )

        build_coordinator(settings, record_store).run("doc-1")

        stored = record_store.get("doc-1")
        assert stored.status is DocumentStatus.COMPLETED
        assert stored.extraction_result is not None
        assert stored.extraction_result.text == "Invoice #1\nTotal $9.00"
        assert stored.extraction_result.confidence == 0
        assert stored.classification_result is not None
        assert stored.classification_result.category == "Other"

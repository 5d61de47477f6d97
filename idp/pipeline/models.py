from dataclasses import dataclass

from idp.records.models import PipelineStep, StageResult


@dataclass(frozen=True)
class StageOutcome:
    """Successful stage run: the committed result and the step now due."""

    document_id: str
    stage: PipelineStep
    result: StageResult
    next_step: PipelineStep

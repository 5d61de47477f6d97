class PipelineError(Exception):
    """Base exception for all pipeline-related errors."""


class RecordNotFoundError(PipelineError):
    """Raised when a document record does not exist."""


class RecordAlreadyExistsError(PipelineError):
    """Raised when creating a record whose document ID is already taken."""


class StaleStageError(PipelineError):
    """Raised when a stage runs against a record that has moved past it."""


class StageError(PipelineError):
    """Failure inside a stage. Persisted on the record before propagating."""


class PreconditionFailedError(StageError):
    """Raised when a required upstream result is missing or empty."""


class UpstreamServiceError(StageError):
    """Raised when an external service call fails or times out."""


class FileReadError(UpstreamServiceError):
    """Raised when the source bytes of a document cannot be read."""

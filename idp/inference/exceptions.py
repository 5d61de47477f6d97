class InferenceError(Exception):
    """Raised when a generative model call produces no usable response."""


class InferenceNetworkError(InferenceError):
    """Raised when the provider call fails due to network/infrastructure issues."""

from abc import ABC, abstractmethod


class BaseInferenceClient(ABC):
    """Contract for provider-specific generative text clients."""

    @abstractmethod
    def complete(
        self,
        *,
        model: str,
        prompt: str,
        max_tokens: int,
        temperature: float,
        timeout_seconds: float,
    ) -> str:
        """Send a single user prompt and return the model's text response.

        Raises:
            InferenceNetworkError: on connection failures, timeouts and API errors.
            InferenceError: when the provider returns no content.
        """

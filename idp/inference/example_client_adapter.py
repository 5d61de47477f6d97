"""Example inference client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseInferenceClient and register the provider in InferenceClientFactory.
"""

from idp.inference.client_base import BaseInferenceClient


class ExampleClientAdapter(BaseInferenceClient):
    """Offline adapter returning a fixed response that both stage parsers accept.

    No network calls. Useful for local development and smoke-testing the
    pipeline end to end.
    """

    DEFAULT_RESPONSE = (
        "Category: Other, Confidence: 50\n"
        "Summary: Example summary produced without calling a model.\n"
        "Key Points:\n"
        "- No model was called\n"
        "- Configure INFERENCE_PROVIDER for real output"
    )

    def complete(
        self,
        *,
        model: str,
        prompt: str,
        max_tokens: int,
        temperature: float,
        timeout_seconds: float,
    ) -> str:
        _ = model, prompt, max_tokens, temperature, timeout_seconds
        return self.DEFAULT_RESPONSE

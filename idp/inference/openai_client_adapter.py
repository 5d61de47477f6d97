import httpx
import openai

from idp.inference.client_base import BaseInferenceClient
from idp.inference.exceptions import InferenceError, InferenceNetworkError


class OpenAIClientAdapter(BaseInferenceClient):
    """Inference client built on the OpenAI-compatible chat completions API."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(api_key=api_key, base_url=base_url, max_retries=0)

    def complete(
        self,
        *,
        model: str,
        prompt: str,
        max_tokens: int,
        temperature: float,
        timeout_seconds: float,
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt}],
                timeout=timeout_seconds,
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise InferenceNetworkError(
                f"AI provider timed out after {timeout_seconds}s: {exc}"
            ) from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise InferenceNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise InferenceNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise InferenceError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise InferenceError("AI returned empty response")
        return content

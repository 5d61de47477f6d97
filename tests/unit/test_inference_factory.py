from unittest.mock import MagicMock, patch

import pytest

from idp.inference import InferenceClientFactory
from idp.inference.example_client_adapter import ExampleClientAdapter
from idp.inference.openai_client_adapter import OpenAIClientAdapter


def _make_settings(provider: str, base_url: str = "") -> MagicMock:
    return MagicMock(
        inference_provider=provider,
        inference_api_key="key",
        inference_base_url=base_url,
    )


class TestInferenceClientFactory:
    def test_creates_example_adapter(self) -> None:
        assert isinstance(InferenceClientFactory.create(_make_settings("example")), ExampleClientAdapter)

    def test_openai_uses_default_endpoint(self) -> None:
        with patch("idp.inference.openai_client_adapter.openai.OpenAI") as mock_cls:
            client = InferenceClientFactory.create(_make_settings("openai"))

        assert isinstance(client, OpenAIClientAdapter)
        assert mock_cls.call_args.kwargs["base_url"] is None

    def test_known_provider_uses_its_base_url(self) -> None:
        with patch("idp.inference.openai_client_adapter.openai.OpenAI") as mock_cls:
            InferenceClientFactory.create(_make_settings("Groq"))

        assert mock_cls.call_args.kwargs["base_url"] == "https://api.groq.com/openai/v1"

    def test_base_url_override_wins(self) -> None:
        with patch("idp.inference.openai_client_adapter.openai.OpenAI") as mock_cls:
            InferenceClientFactory.create(_make_settings("ollama", "http://gpu-box:11434/v1"))

        assert mock_cls.call_args.kwargs["base_url"] == "http://gpu-box:11434/v1"

    def test_openai_compatible_requires_base_url(self) -> None:
        with pytest.raises(ValueError, match="inference_base_url is required"):
            InferenceClientFactory.create(_make_settings("openai_compatible"))

    def test_raises_for_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="Unknown inference provider"):
            InferenceClientFactory.create(_make_settings("bogus"))

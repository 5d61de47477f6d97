"""Tests for ExampleClientAdapter (offline reference adapter)."""

from idp.inference.example_client_adapter import ExampleClientAdapter
from idp.pipeline.parsing import parse_classification, parse_summary


def _complete(adapter: ExampleClientAdapter, **overrides) -> str:  # type: ignore[no-untyped-def]
    kwargs = {
        "model": "any",
        "prompt": "p",
        "max_tokens": 10,
        "temperature": 0.0,
        "timeout_seconds": 1,
    }
    kwargs.update(overrides)
    return adapter.complete(**kwargs)


class TestExampleClientAdapter:
    def test_response_parses_as_classification(self) -> None:
        parsed = parse_classification(_complete(ExampleClientAdapter()))
        assert parsed.category == "Other"
        assert parsed.confidence == 50
        assert not parsed.degraded

    def test_response_parses_as_summary(self) -> None:
        parsed = parse_summary(_complete(ExampleClientAdapter()))
        assert parsed.summary == "Example summary produced without calling a model."
        assert len(parsed.key_points) == 2
        assert not parsed.degraded

    def test_ignores_input_parameters(self) -> None:
        adapter = ExampleClientAdapter()
        assert _complete(adapter, model="a", prompt="x") == _complete(
            adapter, model="b", prompt="y", temperature=1.0
        )

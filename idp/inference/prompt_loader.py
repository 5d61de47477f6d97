from pathlib import Path

from idp.inference.exceptions import InferenceError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(name: str, path: Path | None = None) -> str:
    """Load a prompt template bundled under inference/prompts.

    Args:
        name: Template stem, e.g. "classification" -> classification_prompt.txt.
        path: Explicit file to load instead of the bundled one.

    Raises:
        InferenceError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / f"{name}_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InferenceError(f"Failed to load prompt template: {exc}") from exc

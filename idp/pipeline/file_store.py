from pathlib import Path

from idp.pipeline.exceptions import FileReadError


def source_location_for(document_id: str, file_name: str) -> str:
    """Build the storage key for an upload: documents/{document_id}/{file_name}"""
    return f"documents/{document_id}/{Path(file_name).name}"


class FileStore:
    """Maps source locations (keys relative to files_root) to bytes on disk."""

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = (files_root if files_root is not None else self.FILES_ROOT).resolve()

    def load(self, source_location: str) -> bytes:
        """Read document bytes.

        Raises:
            FileReadError: if the key escapes files_root or the file is unreadable.
        """
        path = self._resolve_path(source_location)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"Cannot read {source_location}: {exc}") from exc

    def save(self, source_location: str, content: bytes) -> None:
        path = self._resolve_path(source_location)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    def _resolve_path(self, source_location: str) -> Path:
        path = (self._files_root / source_location).resolve()
        if not path.is_relative_to(self._files_root):
            raise FileReadError(f"Source location escapes storage root: {source_location}")
        return path

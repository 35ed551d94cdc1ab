import base64
import binascii
from pathlib import Path

from compta_preprocessing.preprocessing.exceptions import DocumentLoadError
from compta_preprocessing.registry.models import (
    InlinePayload,
    PathReference,
    RegistryEntry,
    SourceDocument,
)


class PayloadLoader:
    """Resolves a registry payload into the bytes of a SourceDocument."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self._base_dir = base_dir

    def load(self, entry: RegistryEntry) -> SourceDocument:
        """Read the entry's content.

        Raises:
            DocumentLoadError: if the payload cannot be turned into non-empty bytes.
        """
        payload = entry.payload
        if isinstance(payload, PathReference):
            content = self._read_path(payload.path)
        elif isinstance(payload, InlinePayload):
            content = self._decode_inline(entry.filename, payload.data)
        else:
            raise DocumentLoadError(
                f"Unsupported payload type {type(payload).__name__} for {entry.filename}"
            )
        if not content:
            raise DocumentLoadError(f"Document {entry.filename} has no content")
        return SourceDocument(filename=entry.filename, content=content)

    def _read_path(self, path: Path) -> bytes:
        resolved = self._resolve_path(path)
        try:
            return resolved.read_bytes()
        except OSError as exc:
            raise DocumentLoadError(f"Cannot read {resolved}: {exc}") from exc

    def _resolve_path(self, path: Path) -> Path:
        if path.is_absolute() or self._base_dir is None:
            return path
        return self._base_dir / path

    @staticmethod
    def _decode_inline(filename: str, data: bytes | str) -> bytes:
        if isinstance(data, bytes):
            return data
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DocumentLoadError(
                f"Inline content of {filename} is not valid base64: {exc}"
            ) from exc

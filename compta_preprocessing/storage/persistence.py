from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from compta_preprocessing.consolidation.models import ConsolidatedArtifact
from compta_preprocessing.logging.logger import Log
from compta_preprocessing.preprocessing.exceptions import PersistenceError
from compta_preprocessing.storage.tenant import processed_folder


@dataclass(frozen=True)
class StoredArtifact:
    filename: str
    path: Path
    fiscal_year: int
    size_bytes: int


@dataclass(frozen=True)
class ArtifactFailure:
    filename: str
    reason: str


@dataclass
class PersistenceManifest:
    """What one ``save`` call wrote, and what it could not."""

    folder: Path
    stored: list[StoredArtifact] = field(default_factory=list)
    failures: list[ArtifactFailure] = field(default_factory=list)


class ArtifactStore:
    """Per-tenant storage of consolidated artifacts on the local filesystem.

    Layout: ``{root}/{tenant_key}/{folder_name}/COMPTA<year>.pdf``.
    """

    def __init__(self, root: Path, folder_name: str) -> None:
        self._root = root
        self._folder_name = folder_name

    def tenant_dir(self, tenant_key: str) -> Path:
        return self._root / tenant_key

    def folder(self, tenant_key: str) -> Path:
        return processed_folder(self._root, tenant_key, self._folder_name)

    def list_existing(self, tenant_key: str) -> list[Path]:
        """PDF files already in the tenant's canonical folder, sorted by name."""
        folder = self.folder(tenant_key)
        if not folder.is_dir():
            return []
        return sorted(
            (path for path in folder.iterdir() if path.is_file() and path.suffix.lower() == ".pdf"),
            key=lambda path: path.name,
        )

    def save(
        self,
        tenant_key: str,
        artifacts: Sequence[ConsolidatedArtifact],
    ) -> PersistenceManifest:
        """Write every artifact; a failed write is recorded and the others still go.

        Raises:
            PersistenceError: if the canonical folder cannot be created.
        """
        folder = self.folder(tenant_key)
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Cannot create storage folder {folder}: {exc}") from exc

        manifest = PersistenceManifest(folder=folder)
        for artifact in artifacts:
            path = folder / artifact.output_filename
            try:
                path.write_bytes(artifact.content)
            except OSError as exc:
                Log.error(f"Failed to write {path}: {exc}", tenant=tenant_key)
                manifest.failures.append(
                    ArtifactFailure(filename=artifact.output_filename, reason=str(exc))
                )
                continue
            manifest.stored.append(
                StoredArtifact(
                    filename=artifact.output_filename,
                    path=path,
                    fiscal_year=artifact.fiscal_year,
                    size_bytes=len(artifact.content),
                )
            )
            Log.info(f"Stored {path} ({len(artifact.content)} bytes)", tenant=tenant_key)
        return manifest

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from compta_preprocessing.registry.models import InlinePayload, PathReference, RegistryEntry


class RunState(str, Enum):
    START = "start"
    CHECK_EXISTING = "check_existing"
    SKIP = "skip"
    RECONCILE_REGISTRY = "reconcile_registry"
    CLASSIFY_EACH = "classify_each"
    CONSOLIDATE_EACH = "consolidate_each"
    PERSIST = "persist"
    UPDATE_REGISTRY = "update_registry"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ProducedArtifact:
    """One stored canonical artifact, as reported in the run manifest."""

    filename: str
    fiscal_year: int
    year_source: str
    source_filename: str
    page_count: int
    statement_types: list[str]
    path: Path
    size_bytes: int
    dropped_pages: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class Exclusion:
    """A document, page or artifact left out of the run, with the reason."""

    source_filename: str
    stage: str
    reason: str
    page_number: int | None = None


@dataclass
class PreprocessingResult:
    """Outcome of one tenant run.

    ``registry`` is the new registry snapshot for the host to apply; on a
    failed run it is the unchanged input.
    """

    success: bool
    skipped: bool
    reason: str
    state: RunState
    tenant_key: str = ""
    storage_folder: Path | None = None
    existing_files: list[str] = field(default_factory=list)
    original_documents: list[str] = field(default_factory=list)
    produced: list[ProducedArtifact] = field(default_factory=list)
    excluded: list[Exclusion] = field(default_factory=list)
    registry: list[RegistryEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "skipped": self.skipped,
            "reason": self.reason,
            "state": self.state.value,
            "tenant_key": self.tenant_key,
            "storage_folder": str(self.storage_folder) if self.storage_folder else None,
            "existing_files": list(self.existing_files),
            "original_documents": list(self.original_documents),
            "produced": [
                {
                    "filename": item.filename,
                    "fiscal_year": item.fiscal_year,
                    "year_source": item.year_source,
                    "source_filename": item.source_filename,
                    "page_count": item.page_count,
                    "statement_types": list(item.statement_types),
                    "path": str(item.path),
                    "size_bytes": item.size_bytes,
                    "dropped_pages": list(item.dropped_pages),
                }
                for item in self.produced
            ],
            "excluded": [
                {
                    "source_filename": item.source_filename,
                    "stage": item.stage,
                    "reason": item.reason,
                    "page_number": item.page_number,
                }
                for item in self.excluded
            ],
            "registry": [_entry_to_dict(entry) for entry in self.registry],
        }


def _entry_to_dict(entry: RegistryEntry) -> dict[str, Any]:
    payload = entry.payload
    if isinstance(payload, PathReference):
        return {"filename": entry.filename, "path": str(payload.path)}
    if isinstance(payload, InlinePayload):
        return {"filename": entry.filename, "inline": True}
    return {"filename": entry.filename}

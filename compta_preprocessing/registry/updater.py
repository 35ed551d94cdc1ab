from collections.abc import Sequence
from pathlib import Path

from compta_preprocessing.logging.logger import Log
from compta_preprocessing.registry.models import PathReference, RegistryEntry


def is_raw_group(filename: str, marker: str) -> bool:
    """True when the filename carries the raw-group marker (case-insensitive)."""
    return marker.upper() in filename.upper()


def split_raw_group(
    entries: Sequence[RegistryEntry], marker: str
) -> tuple[list[RegistryEntry], list[RegistryEntry]]:
    """Partition registry entries into (raw_group, others), order preserved."""
    raw_group: list[RegistryEntry] = []
    others: list[RegistryEntry] = []
    for entry in entries:
        (raw_group if is_raw_group(entry.filename, marker) else others).append(entry)
    return raw_group, others


class RegistryUpdater:
    """Replaces the raw-group entries of a registry snapshot with artifact references.

    The input snapshot is never mutated; a new list is returned for the host to
    apply. Apply it once per pipeline run against the snapshot the run started
    from: artifacts are named with the same marker, so filtering an already
    updated registry would remove them as well.
    """

    def __init__(self, marker: str) -> None:
        if not marker:
            raise ValueError("Raw-group marker must be a non-empty string")
        self._marker = marker

    @property
    def marker(self) -> str:
        return self._marker

    def update(
        self,
        entries: Sequence[RegistryEntry],
        artifact_paths: Sequence[Path],
    ) -> list[RegistryEntry]:
        """Return others (in place) followed by one PathReference per artifact.

        Artifacts are appended sorted by filename so that the heavy path and the
        skip-reconciliation path yield the same registry.
        """
        raw_group, others = split_raw_group(entries, self._marker)
        appended = [
            RegistryEntry(filename=path.name, payload=PathReference(path=path))
            for path in sorted(artifact_paths, key=lambda p: p.name)
        ]
        Log.info(
            f"Registry updated: removed {len(raw_group)} raw-group entries, "
            f"kept {len(others)}, appended {len(appended)}"
        )
        return [*others, *appended]

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from compta_preprocessing.classification.models import DocumentStructureAnalysis
from compta_preprocessing.consolidation.models import ConsolidatedArtifact
from compta_preprocessing.preprocessing.models import (
    Exclusion,
    ProducedArtifact,
    RunState,
)
from compta_preprocessing.preprocessing.year_resolution import YearResolution
from compta_preprocessing.registry.models import RegistryEntry


@dataclass(frozen=True)
class ClassifiedDocument:
    entry: RegistryEntry
    analysis: DocumentStructureAnalysis


@dataclass(frozen=True)
class PendingArtifact:
    artifact: ConsolidatedArtifact
    year: YearResolution


@dataclass(slots=True)
class PipelineContext:
    tenant_key: str
    registry: list[RegistryEntry]
    state: RunState = RunState.START
    storage_folder: Path | None = None
    existing_files: list[Path] = field(default_factory=list)
    skipped: bool = False
    raw_group: list[RegistryEntry] = field(default_factory=list)
    classified: list[ClassifiedDocument] = field(default_factory=list)
    artifacts: list[PendingArtifact] = field(default_factory=list)
    produced: list[ProducedArtifact] = field(default_factory=list)
    excluded: list[Exclusion] = field(default_factory=list)
    new_registry: list[RegistryEntry] | None = None

    def exclude(
        self,
        source_filename: str,
        stage: str,
        reason: str,
        page_number: int | None = None,
    ) -> None:
        self.excluded.append(
            Exclusion(
                source_filename=source_filename,
                stage=stage,
                reason=reason,
                page_number=page_number,
            )
        )


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError

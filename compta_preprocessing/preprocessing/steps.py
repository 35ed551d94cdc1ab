from collections.abc import Sequence
from pathlib import Path

from compta_preprocessing.classification.base import BaseStructureClassifier
from compta_preprocessing.classification.exceptions import (
    ClassificationError,
    ClassificationNetworkError,
)
from compta_preprocessing.classification.models import DocumentStructureAnalysis
from compta_preprocessing.consolidation.consolidator import Consolidator, artifact_filename
from compta_preprocessing.logging.logger import Log
from compta_preprocessing.preprocessing.exceptions import (
    ConsolidationError,
    DocumentLoadError,
    EmptyResultError,
    PersistenceError,
)
from compta_preprocessing.preprocessing.models import ProducedArtifact, RunState
from compta_preprocessing.preprocessing.pipeline import (
    ClassifiedDocument,
    PendingArtifact,
    PipelineContext,
    PipelineStep,
)
from compta_preprocessing.preprocessing.year_resolution import (
    YearStrategy,
    resolve_fiscal_year,
)
from compta_preprocessing.registry.loader import PayloadLoader
from compta_preprocessing.registry.models import SourceDocument
from compta_preprocessing.registry.updater import RegistryUpdater, split_raw_group
from compta_preprocessing.storage.persistence import ArtifactStore


class CheckExistingStep(PipelineStep):
    def __init__(self, store: ArtifactStore) -> None:
        self._store = store

    def run(self, context: PipelineContext) -> PipelineContext:
        context.state = RunState.CHECK_EXISTING
        context.storage_folder = self._store.folder(context.tenant_key)
        context.existing_files = self._store.list_existing(context.tenant_key)
        context.skipped = bool(context.existing_files)
        if context.skipped:
            Log.info(
                f"Tenant {context.tenant_key} already preprocessed: "
                f"{len(context.existing_files)} files in {context.storage_folder}"
            )
        return context


class ReconcileRegistryStep(PipelineStep):
    """Points the registry at already persisted artifacts without regenerating them."""

    def __init__(self, updater: RegistryUpdater) -> None:
        self._updater = updater

    def run(self, context: PipelineContext) -> PipelineContext:
        context.state = RunState.RECONCILE_REGISTRY
        _apply_registry_update(context, self._updater, context.existing_files)
        return context


class EnsureClassifierConfiguredStep(PipelineStep):
    def __init__(self, classifier: BaseStructureClassifier) -> None:
        self._classifier = classifier

    def run(self, context: PipelineContext) -> PipelineContext:
        self._classifier.ensure_configured()
        return context


class ClassifyDocumentsStep(PipelineStep):
    """Classifies every raw-group document, one at a time.

    A document that cannot be loaded, fails classification, or has no relevant
    page is excluded; the others carry on.
    """

    def __init__(
        self,
        classifier: BaseStructureClassifier,
        loader: PayloadLoader,
        marker: str,
        max_attempts: int = 2,
    ) -> None:
        self._classifier = classifier
        self._loader = loader
        self._marker = marker
        self._max_attempts = max(1, max_attempts)

    def run(self, context: PipelineContext) -> PipelineContext:
        context.state = RunState.CLASSIFY_EACH
        context.raw_group, _ = split_raw_group(context.registry, self._marker)
        if not context.raw_group:
            raise EmptyResultError(
                f"No raw-group documents matching '{self._marker}' in the registry"
            )
        Log.info(f"Classifying {len(context.raw_group)} raw-group documents", tenant=context.tenant_key)

        for entry in context.raw_group:
            try:
                document = self._loader.load(entry)
            except DocumentLoadError as exc:
                Log.error(f"Cannot load document: {exc}", document=entry.filename)
                context.exclude(entry.filename, "load", str(exc))
                continue

            Log.info(f"Processing {document.filename}")
            try:
                analysis = self._classify_with_retry(document)
            except ClassificationError as exc:
                Log.error(f"Classification failed: {exc}", document=document.filename)
                context.exclude(document.filename, "classify", str(exc))
                continue

            if not analysis.relevant_pages:
                Log.warning("No relevant pages found", document=document.filename)
                context.exclude(document.filename, "classify", "No relevant pages found")
                continue
            context.classified.append(ClassifiedDocument(entry=entry, analysis=analysis))
        return context

    def _classify_with_retry(self, document: SourceDocument) -> DocumentStructureAnalysis:
        attempt = 1
        while True:
            try:
                return self._classifier.classify(document)
            except ClassificationNetworkError as exc:
                if attempt >= self._max_attempts:
                    raise
                Log.warning(
                    f"Classification network error, retrying (attempt {attempt + 1}): {exc}",
                    document=document.filename,
                )
                attempt += 1


class ConsolidateDocumentsStep(PipelineStep):
    """Builds one artifact per fiscal year; the first document to claim a year wins."""

    def __init__(
        self,
        consolidator: Consolidator,
        loader: PayloadLoader,
        filename_prefix: str = "COMPTA",
        year_strategies: Sequence[YearStrategy] | None = None,
    ) -> None:
        self._consolidator = consolidator
        self._loader = loader
        self._filename_prefix = filename_prefix
        self._year_strategies = year_strategies

    def run(self, context: PipelineContext) -> PipelineContext:
        context.state = RunState.CONSOLIDATE_EACH
        claimed: dict[int, str] = {}

        for classified in context.classified:
            filename = classified.entry.filename
            resolution = resolve_fiscal_year(filename, classified.analysis, self._year_strategies)
            if resolution.year in claimed:
                reason = (
                    f"Fiscal year {resolution.year} already produced from "
                    f"{claimed[resolution.year]}"
                )
                Log.warning(f"Discarding document: {reason}", document=filename)
                context.exclude(filename, "consolidate", reason)
                continue

            # One source document in memory at a time.
            try:
                document = self._loader.load(classified.entry)
            except DocumentLoadError as exc:
                context.exclude(filename, "load", str(exc))
                continue

            try:
                artifact = self._consolidator.consolidate(
                    document.content,
                    classified.analysis.relevant_pages,
                    resolution.year,
                    artifact_filename(resolution.year, self._filename_prefix),
                    source_filename=filename,
                )
            except ConsolidationError as exc:
                Log.error(f"Consolidation failed: {exc}", document=filename)
                context.exclude(filename, "consolidate", str(exc))
                continue

            for page_number in artifact.dropped_pages:
                context.exclude(filename, "extract", "Page not copied", page_number=page_number)
            claimed[resolution.year] = filename
            context.artifacts.append(PendingArtifact(artifact=artifact, year=resolution))
        return context


class PersistArtifactsStep(PipelineStep):
    def __init__(self, store: ArtifactStore) -> None:
        self._store = store

    def run(self, context: PipelineContext) -> PipelineContext:
        context.state = RunState.PERSIST
        if not context.artifacts:
            raise EmptyResultError("No artifact could be produced from the raw-group documents")

        try:
            manifest = self._store.save(
                context.tenant_key, [pending.artifact for pending in context.artifacts]
            )
        except PersistenceError as exc:
            Log.error(str(exc), tenant=context.tenant_key)
            for pending in context.artifacts:
                context.exclude(pending.artifact.source_filename, "persist", str(exc))
            raise EmptyResultError(f"No artifact could be stored: {exc}") from exc

        context.storage_folder = manifest.folder
        failures = {failure.filename: failure.reason for failure in manifest.failures}
        stored = {item.filename: item for item in manifest.stored}
        for pending in context.artifacts:
            artifact = pending.artifact
            if artifact.output_filename in failures:
                context.exclude(
                    artifact.source_filename, "persist", failures[artifact.output_filename]
                )
                continue
            item = stored[artifact.output_filename]
            context.produced.append(
                ProducedArtifact(
                    filename=item.filename,
                    fiscal_year=item.fiscal_year,
                    year_source=pending.year.source,
                    source_filename=artifact.source_filename,
                    page_count=artifact.page_count,
                    statement_types=[t.value for t in artifact.statement_types],
                    path=item.path,
                    size_bytes=item.size_bytes,
                    dropped_pages=list(artifact.dropped_pages),
                )
            )

        if not context.produced:
            raise EmptyResultError("No artifact could be stored")
        return context


class UpdateRegistryStep(PipelineStep):
    def __init__(self, updater: RegistryUpdater) -> None:
        self._updater = updater

    def run(self, context: PipelineContext) -> PipelineContext:
        context.state = RunState.UPDATE_REGISTRY
        _apply_registry_update(context, self._updater, [item.path for item in context.produced])
        return context


def _apply_registry_update(
    context: PipelineContext,
    updater: RegistryUpdater,
    paths: Sequence[Path],
) -> None:
    if context.new_registry is not None:
        raise RuntimeError("Registry was already updated during this run")
    context.new_registry = updater.update(context.registry, paths)

from collections.abc import Sequence
from pathlib import Path

from compta_preprocessing.classification.base import BaseStructureClassifier
from compta_preprocessing.classification.factory import ClassifierFactory
from compta_preprocessing.config.exceptions import ConfigurationError
from compta_preprocessing.config.settings import Settings
from compta_preprocessing.consolidation.consolidator import Consolidator
from compta_preprocessing.logging.logger import Log
from compta_preprocessing.pdf.page_extractor import PageExtractor
from compta_preprocessing.preprocessing.exceptions import (
    EmptyResultError,
    PersistenceError,
    RunInProgressError,
)
from compta_preprocessing.preprocessing.models import PreprocessingResult, RunState
from compta_preprocessing.preprocessing.pipeline import PipelineContext, PipelineStep
from compta_preprocessing.preprocessing.steps import (
    CheckExistingStep,
    ClassifyDocumentsStep,
    ConsolidateDocumentsStep,
    EnsureClassifierConfiguredStep,
    PersistArtifactsStep,
    ReconcileRegistryStep,
    UpdateRegistryStep,
)
from compta_preprocessing.preprocessing.year_resolution import YearStrategy
from compta_preprocessing.registry.loader import PayloadLoader
from compta_preprocessing.registry.models import RegistryEntry
from compta_preprocessing.registry.updater import RegistryUpdater
from compta_preprocessing.storage.persistence import ArtifactStore
from compta_preprocessing.storage.run_lock import TenantRunLock
from compta_preprocessing.storage.tenant import tenant_key_from_business_id

_RUN_ENDING_ERRORS = (
    ConfigurationError,
    EmptyResultError,
    PersistenceError,
    RunInProgressError,
)


class Orchestrator:
    """Runs the preprocessing pipeline for one tenant.

    Pipeline: check existing -> (skip -> reconcile registry) or
    (classify -> consolidate -> persist -> update registry).

    Per-document failures end up in the result's ``excluded`` list. The run
    only fails on a missing tenant key or credentials, when another run holds
    the tenant, or when no artifact at all could be produced.
    """

    def __init__(
        self,
        *,
        classifier: BaseStructureClassifier,
        store: ArtifactStore,
        updater: RegistryUpdater,
        consolidator: Consolidator | None = None,
        loader: PayloadLoader | None = None,
        tenant_key_length: int = 9,
        filename_prefix: str = "COMPTA",
        max_classification_attempts: int = 2,
        year_strategies: Sequence[YearStrategy] | None = None,
        lock_enabled: bool = True,
    ) -> None:
        self._store = store
        self._tenant_key_length = tenant_key_length
        self._lock_enabled = lock_enabled
        loader = loader or PayloadLoader()

        self._check_step: PipelineStep = CheckExistingStep(store)
        self._skip_steps: list[PipelineStep] = [ReconcileRegistryStep(updater)]
        self._process_steps: list[PipelineStep] = [
            EnsureClassifierConfiguredStep(classifier),
            ClassifyDocumentsStep(
                classifier,
                loader,
                updater.marker,
                max_attempts=max_classification_attempts,
            ),
            ConsolidateDocumentsStep(
                consolidator or Consolidator(),
                loader,
                filename_prefix=filename_prefix,
                year_strategies=year_strategies,
            ),
            PersistArtifactsStep(store),
            UpdateRegistryStep(updater),
        ]

    def run(self, business_id: str, registry: Sequence[RegistryEntry]) -> PreprocessingResult:
        """Preprocess the raw-group documents of one tenant.

        Args:
            business_id: Business identifier the tenant key is derived from
                (a SIRET or a SIREN).
            registry: Snapshot of the tenant's document registry. It is not
                modified; the new snapshot is returned on the result.
        """
        context = PipelineContext(tenant_key="", registry=list(registry))
        Log.info(f"Starting preprocessing run for {business_id}")
        try:
            context.tenant_key = tenant_key_from_business_id(business_id, self._tenant_key_length)
            lock = TenantRunLock(
                self._store.tenant_dir(context.tenant_key),
                enabled=self._lock_enabled,
            )
            with lock:
                context = self._check_step.run(context)
                steps = self._skip_steps if context.skipped else self._process_steps
                if context.skipped:
                    context.state = RunState.SKIP
                for step in steps:
                    context = step.run(context)
        except _RUN_ENDING_ERRORS as exc:
            return self._failed(context, exc)

        context.state = RunState.DONE
        return self._succeeded(context)

    def _succeeded(self, context: PipelineContext) -> PreprocessingResult:
        if context.skipped:
            reason = (
                f"Already preprocessed: {len(context.existing_files)} files in "
                f"{context.storage_folder}"
            )
        else:
            reason = (
                f"Produced {len(context.produced)} artifacts, "
                f"excluded {len(context.excluded)} items"
            )
        Log.info(f"Preprocessing run succeeded: {reason}", tenant=context.tenant_key)
        return PreprocessingResult(
            success=True,
            skipped=context.skipped,
            reason=reason,
            state=context.state,
            tenant_key=context.tenant_key,
            storage_folder=context.storage_folder,
            existing_files=_names(context.existing_files),
            original_documents=[entry.filename for entry in context.raw_group],
            produced=list(context.produced),
            excluded=list(context.excluded),
            registry=list(context.new_registry or []),
        )

    def _failed(self, context: PipelineContext, exc: Exception) -> PreprocessingResult:
        failed_at = context.state
        reason = f"{type(exc).__name__}: {exc}"
        Log.error(
            f"Preprocessing run failed during {failed_at.value}: {reason}",
            tenant=context.tenant_key or "-",
        )
        return PreprocessingResult(
            success=False,
            skipped=False,
            reason=reason,
            state=RunState.FAILED,
            tenant_key=context.tenant_key,
            storage_folder=context.storage_folder,
            existing_files=_names(context.existing_files),
            original_documents=[entry.filename for entry in context.raw_group],
            produced=[],
            excluded=list(context.excluded),
            registry=list(context.registry),
        )


def _names(paths: Sequence[Path]) -> list[str]:
    return [path.name for path in paths]


def build_orchestrator(settings: Settings, base_dir: Path | None = None) -> Orchestrator:
    """Build an Orchestrator with all required adapters."""
    page_extractor = PageExtractor()
    classifier = ClassifierFactory.create(settings, page_extractor=page_extractor)
    return Orchestrator(
        classifier=classifier,
        store=ArtifactStore(settings.documents_root, settings.processed_folder_name),
        updater=RegistryUpdater(settings.raw_group_marker),
        consolidator=Consolidator(page_extractor=page_extractor),
        loader=PayloadLoader(base_dir=base_dir),
        tenant_key_length=settings.tenant_key_length,
        filename_prefix=settings.output_filename_prefix,
        max_classification_attempts=settings.classification_max_attempts,
        lock_enabled=settings.tenant_lock_enabled,
    )

from abc import ABC, abstractmethod

from compta_preprocessing.classification.models import DocumentStructureAnalysis
from compta_preprocessing.registry.models import SourceDocument


class BaseStructureClassifier(ABC):
    """Contract for all document structure classifiers (model-based or rule-based)."""

    @abstractmethod
    def classify(self, document: SourceDocument) -> DocumentStructureAnalysis:
        """Find the relevant pages of a raw accounting document.

        Results are not guaranteed to be stable across calls; callers must only
        use the result of the current run.

        Args:
            document: Raw source document (filename + PDF bytes).

        Returns:
            DocumentStructureAnalysis; an empty page list is a valid result.

        Raises:
            ClassificationError: on any failure, including timeouts.
        """

    def ensure_configured(self) -> None:
        """Raise ConfigurationError if the classifier cannot run (e.g. missing credentials)."""

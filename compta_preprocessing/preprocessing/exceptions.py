class PreprocessingError(Exception):
    """Base exception for all preprocessing pipeline errors."""


class DocumentLoadError(PreprocessingError):
    """Raised when a registry payload cannot be resolved to document bytes."""


class ExtractionError(PreprocessingError):
    """Raised when a single page cannot be copied out of a source document."""


class ConsolidationError(PreprocessingError):
    """Raised when no valid page survives to build a consolidated artifact."""


class PersistenceError(PreprocessingError):
    """Raised when the canonical storage location or an artifact cannot be written."""


class EmptyResultError(PreprocessingError):
    """Raised when a run produces zero artifacts."""


class RunInProgressError(PreprocessingError):
    """Raised when another run already holds the tenant's run marker."""

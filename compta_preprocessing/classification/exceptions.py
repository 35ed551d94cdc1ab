class ClassificationError(Exception):
    """Raised when a document cannot be classified."""


class ClassificationValidationError(ClassificationError):
    """Raised when the classifier response fails domain validation."""


class ClassificationNetworkError(ClassificationError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class ClassificationTimeoutError(ClassificationError):
    """Raised when a classification call exceeds its time bound."""

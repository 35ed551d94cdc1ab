class ConfigurationError(Exception):
    """Raised when a run cannot start: missing tenant key or classifier credentials."""

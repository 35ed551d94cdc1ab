from compta_preprocessing.registry.models import (
    InlinePayload,
    PathReference,
    RegistryEntry,
    SourceDocument,
)
from compta_preprocessing.registry.updater import RegistryUpdater

__all__ = [
    "InlinePayload",
    "PathReference",
    "RegistryEntry",
    "RegistryUpdater",
    "SourceDocument",
]

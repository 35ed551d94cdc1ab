from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class InlinePayload:
    """Document content carried in the registry itself.

    ``data`` is raw bytes, or a base64 string as hosts sometimes store it.
    """

    data: bytes | str


@dataclass(frozen=True)
class PathReference:
    """Document content stored on disk."""

    path: Path


RegistryPayload = InlinePayload | PathReference


@dataclass(frozen=True)
class RegistryEntry:
    """One element of the externally-owned document registry."""

    filename: str
    payload: RegistryPayload


@dataclass(frozen=True)
class SourceDocument:
    """A raw-group document resolved to bytes, read-only for the pipeline."""

    filename: str
    content: bytes

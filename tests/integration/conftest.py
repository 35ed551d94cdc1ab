from collections.abc import Callable
from pathlib import Path

import pytest

from compta_preprocessing.registry.models import PathReference, RegistryEntry


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    root = tmp_path / "documents"
    root.mkdir()
    return root


@pytest.fixture
def sources_dir(tmp_path: Path) -> Path:
    folder = tmp_path / "uploads"
    folder.mkdir()
    return folder


@pytest.fixture
def write_source(sources_dir: Path) -> Callable[[str, bytes], RegistryEntry]:
    """Write a source PDF to disk and return its path-referenced registry entry."""

    def write(name: str, content: bytes) -> RegistryEntry:
        path = sources_dir / name
        path.write_bytes(content)
        return RegistryEntry(filename=name, payload=PathReference(path=path))

    return write

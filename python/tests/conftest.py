"""
Pytest configuration and fixtures for cryptodoc tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cryptodoc import (
    DocumentStore,
    FileSystemDocumentStorage,
    InMemoryDocumentStorage,
)

_ENV_VARS = (
    "CRYPTODOC_SAVE_DIR",
    "CRYPTODOC_SETTINGS_FILE",
    "CRYPTODOC_LOG_LEVEL",
    "CRYPTODOC_BENCH_ITERATIONS",
    "CRYPTODOC_BENCH_DOC_SIZE",
)


@pytest.fixture
def memory_storage() -> InMemoryDocumentStorage:
    """Create an in-memory storage instance for testing."""
    return InMemoryDocumentStorage()


@pytest.fixture
def fs_storage(tmp_path: Path) -> FileSystemDocumentStorage:
    """Create a filesystem storage rooted in a temporary folder."""
    return FileSystemDocumentStorage(tmp_path / "documents")


@pytest.fixture
def fs_store(fs_storage: FileSystemDocumentStorage) -> DocumentStore:
    """DocumentStore backed by the temporary filesystem storage."""
    return DocumentStore(fs_storage)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Strip CRYPTODOC_* variables and run from an empty folder; returns that folder."""
    for name in _ENV_VARS:
        # setenv first so values loaded from .env files are undone on teardown
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path

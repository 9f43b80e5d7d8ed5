"""
Storage for encrypted documents.

This module provides:
- DocumentStorage: Abstract async interface for envelope storage backends
- FileSystemDocumentStorage: ``.cryptodoc`` files in a folder
- InMemoryDocumentStorage: Thread-safe in-memory implementation for testing
- DocumentStore: encrypts on save, decrypts on open
- load_save_folder / store_save_folder: the remembered save folder

Backends only ever see envelope text; passwords and plaintext stay in
DocumentStore.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from .crypto import KeyDerivation, Password
from .document import DecryptResult, decrypt, encrypt
from .errors import DocumentNotFoundError, FormatError, StorageError

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".cryptodoc"


def document_filename(name: str) -> str:
    """Return ``name`` with its suffix replaced by ``.cryptodoc``.

    Trailing dots are dropped (``notes.`` -> ``notes.cryptodoc``).
    """
    path = Path(name)
    stem = path.name.rstrip(".")
    if not stem:
        raise StorageError(f"Invalid document name: {name!r}")
    return path.with_name(stem).with_suffix(DOCUMENT_SUFFIX).as_posix()


class DocumentStorage(ABC):
    """
    Abstract storage interface for envelope text.

    All methods are async to support both in-memory and filesystem backends.
    """

    @abstractmethod
    async def save(self, name: str, envelope: str) -> str:
        """Store an envelope; return where it was written."""
        ...

    @abstractmethod
    async def load(self, name: str) -> str:
        """Load an envelope. Raises DocumentNotFoundError if missing."""
        ...

    @abstractmethod
    async def exists(self, name: str) -> bool:
        """Check whether a document exists."""
        ...

    @abstractmethod
    async def delete(self, name: str) -> None:
        """Delete a document (no-op if missing)."""
        ...

    @abstractmethod
    async def list_documents(self) -> List[str]:
        """List stored document names, sorted."""
        ...


class InMemoryDocumentStorage(DocumentStorage):
    """
    Thread-safe in-memory storage implementation for testing.

    Uses asyncio.Lock for safe concurrent access.
    """

    def __init__(self) -> None:
        self._documents: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def save(self, name: str, envelope: str) -> str:
        filename = document_filename(name)
        async with self._lock:
            self._documents[filename] = envelope
        return filename

    async def load(self, name: str) -> str:
        filename = document_filename(name)
        async with self._lock:
            if filename not in self._documents:
                raise DocumentNotFoundError(filename)
            return self._documents[filename]

    async def exists(self, name: str) -> bool:
        filename = document_filename(name)
        async with self._lock:
            return filename in self._documents

    async def delete(self, name: str) -> None:
        filename = document_filename(name)
        async with self._lock:
            self._documents.pop(filename, None)

    async def list_documents(self) -> List[str]:
        async with self._lock:
            return sorted(self._documents)


class FileSystemDocumentStorage(DocumentStorage):
    """
    Documents stored as ``.cryptodoc`` files under ``root``.

    Blocking file I/O runs in a worker thread. Writes go through a temporary
    file in the same folder followed by an atomic replace.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).expanduser()

    def _path(self, name: str) -> Path:
        path = (self.root / document_filename(name)).resolve()
        root = self.root.resolve()
        if path.parent != root and root not in path.parents:
            raise StorageError(f"Document name escapes storage folder: {name!r}")
        return path

    async def save(self, name: str, envelope: str) -> str:
        path = self._path(name)
        await asyncio.to_thread(self._write, path, envelope)
        logger.info("Saved document %s", path.name)
        return str(path)

    @staticmethod
    def _write(path: Path, envelope: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                    f.write(envelope)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except UnicodeEncodeError as e:
            raise FormatError(f"Envelope for {path.name} is not encodable text") from e
        except OSError as e:
            raise StorageError(f"Failed to save {path.name}: {e}") from e

    async def load(self, name: str) -> str:
        path = self._path(name)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            raise DocumentNotFoundError(str(path))
        except UnicodeDecodeError as e:
            # not an envelope; the file itself was read fine
            raise FormatError(f"{path.name} is not a text envelope") from e
        except OSError as e:
            raise StorageError(f"Failed to read {path.name}: {e}") from e

    async def exists(self, name: str) -> bool:
        path = self._path(name)
        return await asyncio.to_thread(path.is_file)

    async def delete(self, name: str) -> None:
        path = self._path(name)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {path.name}: {e}") from e

    async def list_documents(self) -> List[str]:
        """List documents as paths relative to ``root``, subfolders included."""
        return sorted(await asyncio.to_thread(self._scan))

    def _scan(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return [
            p.relative_to(self.root).as_posix()
            for p in self.root.rglob(f"*{DOCUMENT_SUFFIX}")
            if p.is_file()
        ]


class DocumentStore:
    """
    Password-protected documents on top of a DocumentStorage backend.

    Logs document names and outcomes only, never passwords or content.
    """

    def __init__(self, storage: DocumentStorage, kdf: Optional[KeyDerivation] = None) -> None:
        self._storage = storage
        self._kdf = kdf

    @property
    def storage(self) -> DocumentStorage:
        return self._storage

    async def save_document(self, name: str, plaintext: bytes, password: Password) -> str:
        """Encrypt ``plaintext`` and store it under ``name``; return the location."""
        envelope = encrypt(plaintext, password, kdf=self._kdf)
        return await self._storage.save(name, envelope)

    async def save_text(self, name: str, text: str, password: Password) -> str:
        """Encrypt UTF-8 ``text`` and store it under ``name``."""
        return await self.save_document(name, text.encode("utf-8"), password)

    async def open_document(self, name: str, password: Password) -> DecryptResult:
        """
        Load and decrypt a document.

        Raises:
            DocumentNotFoundError: If the document does not exist
            FormatError: If the stored text is not an envelope
        """
        envelope = await self._storage.load(name)
        result = decrypt(envelope, password, kdf=self._kdf)
        if not result.authentic:
            logger.warning("Document %s failed authentication", name)
        return result

    async def open_text(self, name: str, password: Password) -> str:
        """Load and decrypt a text document; see DecryptResult.text."""
        result = await self.open_document(name, password)
        return result.text()


def load_save_folder(settings_file: Path | str) -> Optional[Path]:
    """Return the remembered save folder, or None if none was stored."""
    path = Path(settings_file)
    try:
        content = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise StorageError(f"Failed to read save folder setting: {e}") from e
    return Path(content) if content else None


def store_save_folder(settings_file: Path | str, folder: Path | str) -> Path:
    """Remember ``folder`` as the save folder; returns the settings file path."""
    path = Path(settings_file)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(str(folder), encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Failed to store save folder setting: {e}") from e
    logger.info("Save folder set to %s", folder)
    return path

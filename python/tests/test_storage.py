"""
Tests for document storage backends and DocumentStore.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from cryptodoc import (
    AuthenticationError,
    DocumentNotFoundError,
    DocumentStore,
    FileSystemDocumentStorage,
    FormatError,
    StorageError,
    decrypt,
    load_save_folder,
    store_save_folder,
)
from cryptodoc.storage import document_filename


# ==============================================================================
# Naming
# ==============================================================================


@pytest.mark.parametrize(
    "name, expected",
    [
        ("notes", "notes.cryptodoc"),
        ("notes.txt", "notes.cryptodoc"),
        ("notes.cryptodoc", "notes.cryptodoc"),
        ("diary.2024", "diary.cryptodoc"),
        ("notes.", "notes.cryptodoc"),
        ("work/plan", "work/plan.cryptodoc"),
    ],
)
def test_document_filename(name, expected):
    assert document_filename(name) == expected


@pytest.mark.parametrize("name", ["", ".", "..", "..."])
def test_document_filename_rejects_empty_names(name):
    with pytest.raises(StorageError):
        document_filename(name)


# ==============================================================================
# In-memory backend
# ==============================================================================


async def test_memory_save_and_load(memory_storage):
    location = await memory_storage.save("notes", "aa/bb/cc")
    assert location == "notes.cryptodoc"
    assert await memory_storage.load("notes.cryptodoc") == "aa/bb/cc"
    assert await memory_storage.exists("notes")


async def test_memory_missing_document(memory_storage):
    with pytest.raises(DocumentNotFoundError):
        await memory_storage.load("missing")


async def test_memory_delete_and_list(memory_storage):
    await memory_storage.save("b", "x")
    await memory_storage.save("a", "y")
    assert await memory_storage.list_documents() == ["a.cryptodoc", "b.cryptodoc"]

    await memory_storage.delete("a")
    await memory_storage.delete("never-existed")
    assert await memory_storage.list_documents() == ["b.cryptodoc"]


# ==============================================================================
# Filesystem backend
# ==============================================================================


async def test_fs_writes_envelope_verbatim(fs_storage):
    location = await fs_storage.save("notes.txt", "aa/bb/cc")
    path = Path(location)

    assert path.name == "notes.cryptodoc"
    assert path.read_bytes() == b"aa/bb/cc"
    assert await fs_storage.load("notes") == "aa/bb/cc"


async def test_fs_overwrite_leaves_no_temp_files(fs_storage):
    await fs_storage.save("notes", "first")
    await fs_storage.save("notes", "second")

    assert await fs_storage.load("notes") == "second"
    assert sorted(p.name for p in fs_storage.root.iterdir()) == ["notes.cryptodoc"]


async def test_fs_missing_document(fs_storage):
    with pytest.raises(DocumentNotFoundError):
        await fs_storage.load("missing")
    assert await fs_storage.exists("missing") is False


async def test_fs_list_and_delete(fs_storage):
    assert await fs_storage.list_documents() == []

    await fs_storage.save("one", "x")
    await fs_storage.save("two", "y")
    (fs_storage.root / "readme.txt").write_text("ignored")
    assert await fs_storage.list_documents() == ["one.cryptodoc", "two.cryptodoc"]

    await fs_storage.delete("one")
    await fs_storage.delete("one")
    assert await fs_storage.list_documents() == ["two.cryptodoc"]


async def test_fs_rejects_names_outside_root(fs_storage):
    with pytest.raises(StorageError, match="escapes"):
        await fs_storage.save("../outside", "x")


async def test_fs_subfolders_are_allowed(fs_storage):
    await fs_storage.save("work/plan", "x")
    assert (fs_storage.root / "work" / "plan.cryptodoc").is_file()
    assert await fs_storage.exists("work/plan")
    assert await fs_storage.list_documents() == ["work/plan.cryptodoc"]


async def test_fs_listing_is_recursive_and_sorted(fs_storage):
    await fs_storage.save("zeta", "x")
    await fs_storage.save("work/plan", "y")
    await fs_storage.save("alpha", "z")

    assert await fs_storage.list_documents() == [
        "alpha.cryptodoc",
        "work/plan.cryptodoc",
        "zeta.cryptodoc",
    ]


async def test_fs_non_utf8_file_is_format_error(fs_storage):
    fs_storage.root.mkdir(parents=True)
    (fs_storage.root / "notes.cryptodoc").write_bytes(b"\xff\xfe not text")

    with pytest.raises(FormatError):
        await fs_storage.load("notes")


async def test_fs_unencodable_envelope_is_format_error(fs_storage):
    with pytest.raises(FormatError):
        await fs_storage.save("notes", "aa\ud800/bb/cc")
    assert await fs_storage.list_documents() == []


async def test_fs_write_failure_is_storage_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a folder")

    storage = FileSystemDocumentStorage(blocker)
    with pytest.raises(StorageError):
        await storage.save("notes", "x")


# ==============================================================================
# DocumentStore
# ==============================================================================


async def test_store_roundtrip(fs_store):
    location = await fs_store.save_document("notes", b"hello world", "secret")

    assert location.endswith("notes.cryptodoc")
    assert await fs_store.open_document("notes", "secret") == (True, b"hello world")


async def test_store_persists_envelope_not_plaintext(fs_store):
    location = await fs_store.save_text("notes", "top secret plans", "secret")
    raw = Path(location).read_text()

    assert "top secret" not in raw
    assert "secret" not in raw
    assert decrypt(raw, "secret").text() == "top secret plans"


async def test_store_wrong_password(fs_store):
    await fs_store.save_text("notes", "hello", "secret")

    result = await fs_store.open_document("notes", "wrong")
    assert result.authentic is False
    with pytest.raises(AuthenticationError):
        await fs_store.open_text("notes", "wrong")


async def test_store_open_text(fs_store):
    await fs_store.save_text("notes", "hello", "secret")
    assert await fs_store.open_text("notes", "secret") == "hello"


async def test_store_not_an_envelope(fs_store):
    await fs_store.storage.save("notes", "just some plain text")
    with pytest.raises(FormatError):
        await fs_store.open_document("notes", "secret")


async def test_store_non_ascii_file_is_format_error(fs_store):
    fs_store.storage.root.mkdir(parents=True)
    (fs_store.storage.root / "notes.cryptodoc").write_text("héllo plain text", encoding="utf-8")

    with pytest.raises(FormatError):
        await fs_store.open_document("notes", "secret")


async def test_store_missing_document(memory_storage):
    store = DocumentStore(memory_storage)
    with pytest.raises(DocumentNotFoundError):
        await store.open_document("missing", "secret")


async def test_store_concurrent_saves(memory_storage):
    store = DocumentStore(memory_storage)
    await asyncio.gather(
        *(store.save_text(f"doc-{i}", f"body {i}", f"pw-{i}") for i in range(20))
    )

    assert len(await memory_storage.list_documents()) == 20
    assert await store.open_text("doc-7", "pw-7") == "body 7"


# ==============================================================================
# Save folder setting
# ==============================================================================


def test_save_folder_missing_file(tmp_path):
    assert load_save_folder(tmp_path / "save_path.dat") is None


def test_save_folder_roundtrip(tmp_path):
    settings_file = tmp_path / "conf" / "save_path.dat"
    store_save_folder(settings_file, tmp_path / "docs")

    assert settings_file.read_text() == str(tmp_path / "docs")
    assert load_save_folder(settings_file) == tmp_path / "docs"


def test_save_folder_blank_file(tmp_path):
    settings_file = tmp_path / "save_path.dat"
    settings_file.write_text("  \n")
    assert load_save_folder(settings_file) is None

"""Tests for LocalBlobStore."""

from __future__ import annotations

import pytest


@pytest.mark.asyncio
async def test_text_round_trip(blob_store):
    uri = await blob_store.upload_text("héllo", "a/b/file.txt")

    assert uri.startswith("file://")
    assert await blob_store.get_text("a/b/file.txt") == "héllo"
    assert await blob_store.exists("a/b/file.txt")


@pytest.mark.asyncio
async def test_bytes_written_as_is(blob_store):
    await blob_store.upload_bytes(b"\x00\x01binary", "raw.bin")
    assert (blob_store.root / "raw.bin").read_bytes() == b"\x00\x01binary"


@pytest.mark.asyncio
async def test_upload_overwrites(blob_store):
    await blob_store.upload_text("v1", "doc.txt")
    await blob_store.upload_text("v2", "doc.txt")
    assert await blob_store.get_text("doc.txt") == "v2"


@pytest.mark.asyncio
async def test_no_temp_files_left_behind(blob_store):
    await blob_store.upload_text("data", "dir/doc.txt")
    assert await blob_store.list_files("dir") == ["dir/doc.txt"]


@pytest.mark.asyncio
async def test_missing_blob(blob_store):
    assert await blob_store.get_text("nope.txt") is None
    assert not await blob_store.exists("nope.txt")


@pytest.mark.asyncio
async def test_list_files_and_folders(blob_store):
    await blob_store.upload_text("1", "db/ns/doc1/a.txt")
    await blob_store.upload_text("2", "db/ns/doc1/b.txt")
    await blob_store.upload_text("3", "db/ns/doc2/c.txt")
    await blob_store.upload_text("4", "db/ns/top.txt")

    assert await blob_store.list_folders("db/ns") == ["db/ns/doc1", "db/ns/doc2"]
    assert await blob_store.list_files("db/ns") == ["db/ns/top.txt"]
    assert await blob_store.list_files("db/ns/doc1") == ["db/ns/doc1/a.txt", "db/ns/doc1/b.txt"]
    assert await blob_store.list_files("db/missing") == []
    assert await blob_store.list_folders("db/missing") == []


@pytest.mark.asyncio
async def test_delete_and_delete_prefix(blob_store):
    await blob_store.upload_text("1", "x/a.txt")
    await blob_store.upload_text("2", "x/b.txt")

    await blob_store.delete("x/a.txt")
    await blob_store.delete("x/never-existed.txt")
    assert await blob_store.list_files("x") == ["x/b.txt"]

    await blob_store.delete_prefix("x")
    assert await blob_store.list_files("x") == []
    await blob_store.delete_prefix("x")  # already gone


@pytest.mark.asyncio
async def test_delete_prefix_refuses_root(blob_store):
    await blob_store.upload_text("1", "a.txt")
    with pytest.raises(ValueError, match="storage root"):
        await blob_store.delete_prefix("")


@pytest.mark.asyncio
async def test_usage(blob_store):
    await blob_store.upload_text("12345", "u/a.txt")
    await blob_store.upload_bytes(b"123", "u/sub/b.bin")

    assert await blob_store.usage("u") == (2, 8)
    assert await blob_store.usage("empty") == (0, 0)


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["../outside.txt", "a/../../outside.txt"])
async def test_paths_cannot_escape_root(blob_store, path):
    with pytest.raises(ValueError, match="escapes storage root"):
        await blob_store.upload_text("x", path)

"""
==============================================================================
Sync Client and Repository Tests
==============================================================================

Tests for full-list push/pull, write coalescing and each backend.

==============================================================================
"""

import asyncio
import json
from typing import List

import httpx
import pytest
from sqlalchemy.orm import sessionmaker

from scanlist.barcodes import BarcodeRecord
from scanlist.services.blob_store import GLOBAL_LIST_KEY, BlobStore, list_key_for
from scanlist.services.repositories import (
    BarcodeRepository,
    BlobBarcodeRepository,
    FileBarcodeRepository,
    HttpBarcodeRepository,
    RepositoryError,
)
from scanlist.services.sync_client import SyncClient, SyncState


URL = "http://remote.test/api/barcodes"


def _records(*codes: str) -> List[BarcodeRecord]:
    return [BarcodeRecord(code=code, timestamp="01/02/2025, 10:00:00 AM") for code in codes]


class GatedRepository(BarcodeRepository):
    """Repository whose saves block until released."""

    def __init__(self):
        self.saves: List[List[str]] = []
        self.gate = asyncio.Event()

    async def load(self):
        return []

    async def save(self, records):
        self.saves.append([r.code for r in records])
        await self.gate.wait()

    async def clear(self):
        pass


class TestSyncClient:
    """Tests for the write queue and pull."""

    @pytest.mark.asyncio
    async def test_push_and_pull(self, memory_repository):
        """Test a pushed list is pulled back."""
        sync = SyncClient(memory_repository)
        assert await sync.push(_records("FM1", "FM2")) is True
        pulled = await sync.pull()
        assert [r.code for r in pulled] == ["FM1", "FM2"]
        assert sync.state == SyncState.IDLE

    @pytest.mark.asyncio
    async def test_failed_push_resolves_false(self, memory_repository):
        """Test a failed write is reported, not raised."""
        memory_repository.fail_saves = True
        sync = SyncClient(memory_repository)
        assert await sync.push(_records("FM1")) is False
        assert not sync.has_pending_writes

    @pytest.mark.asyncio
    async def test_failed_pull_returns_none(self, memory_repository):
        """Test a failed fetch leaves the caller's list alone."""
        memory_repository.fail_loads = True
        assert await SyncClient(memory_repository).pull() is None

    @pytest.mark.asyncio
    async def test_writes_coalesce_to_latest(self):
        """Test pushes issued during a write collapse to the newest list."""
        repository = GatedRepository()
        sync = SyncClient(repository)

        first = sync.push(_records("A01"))
        await asyncio.sleep(0)
        assert sync.state == SyncState.SYNCING

        second = sync.push(_records("B02", "A01"))
        third = sync.push(_records("C03", "B02", "A01"))
        assert sync.has_pending_writes

        repository.gate.set()
        results = await asyncio.gather(first, second, third)

        assert results == [True, True, True]
        assert repository.saves == [["A01"], ["C03", "B02", "A01"]]
        assert sync.state == SyncState.IDLE

    @pytest.mark.asyncio
    async def test_flush_waits_for_queue(self, memory_repository):
        """Test flush returns once every write has landed."""
        sync = SyncClient(memory_repository)
        sync.push(_records("A01"))
        sync.push(_records("B02"))
        await sync.flush()
        assert [r.code for r in memory_repository.stored] == ["B02"]

    @pytest.mark.asyncio
    async def test_clear_remote(self, memory_repository):
        """Test clear_remote deletes the stored list."""
        memory_repository.stored = _records("FM1")
        sync = SyncClient(memory_repository)
        assert await sync.clear_remote() is True
        assert memory_repository.stored == []
        assert sync.state == SyncState.IDLE

    @pytest.mark.asyncio
    async def test_clear_remote_failure_is_logged_only(self, memory_repository):
        """Test a failed delete resolves False."""
        memory_repository.fail_clears = True
        sync = SyncClient(memory_repository)
        assert await sync.clear_remote() is False
        assert sync.state == SyncState.IDLE

    @pytest.mark.asyncio
    async def test_clear_remote_unexpected_error(self):
        """Test errors outside RepositoryError are absorbed too."""
        class BrokenRepository(GatedRepository):
            async def clear(self):
                raise RuntimeError("boom")

        assert await SyncClient(BrokenRepository()).clear_remote() is False

    @pytest.mark.asyncio
    async def test_aclose_flushes_and_closes(self, memory_repository):
        """Test closing finishes writes and releases the repository."""
        sync = SyncClient(memory_repository)
        sync.push(_records("A01"))
        await sync.aclose()
        assert memory_repository.stored
        assert memory_repository.closed


class TestHttpBarcodeRepository:
    """Tests for the HTTP backend against a mock transport."""

    @staticmethod
    def _repository(handler) -> HttpBarcodeRepository:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HttpBarcodeRepository(URL, client=client)

    @pytest.mark.asyncio
    async def test_load(self):
        """Test GET returns parsed records."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            return httpx.Response(200, json=[{"code": "FM1", "timestamp": "t"}])

        repository = self._repository(handler)
        records = await repository.load()
        await repository.aclose()
        assert records == [BarcodeRecord(code="FM1", timestamp="t")]

    @pytest.mark.asyncio
    async def test_save_posts_full_list(self):
        """Test POST carries the whole list as a JSON array."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True})

        repository = self._repository(handler)
        await repository.save(_records("FM1", "36A"))
        await repository.aclose()

        assert seen["method"] == "POST"
        assert [item["code"] for item in seen["body"]] == ["FM1", "36A"]

    @pytest.mark.asyncio
    async def test_server_error_raises_repository_error(self):
        """Test HTTP failures surface as RepositoryError."""
        repository = self._repository(lambda request: httpx.Response(500))
        with pytest.raises(RepositoryError):
            await repository.load()
        await repository.aclose()

    @pytest.mark.asyncio
    async def test_invalid_body_raises_repository_error(self):
        """Test a non-array body is rejected."""
        repository = self._repository(lambda request: httpx.Response(200, json={"x": 1}))
        with pytest.raises(RepositoryError):
            await repository.load()
        await repository.aclose()

    @pytest.mark.asyncio
    async def test_sync_client_pull_failure_is_none(self):
        """Test the sync client absorbs transport errors."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        sync = SyncClient(self._repository(handler))
        assert await sync.pull() is None
        await sync.aclose()


class TestBlobBarcodeRepository:
    """Tests for the in-process blob backend."""

    @pytest.mark.asyncio
    async def test_save_load_clear(self, db):
        """Test the blob row follows save and clear."""
        factory = sessionmaker(bind=db.get_bind())
        repository = BlobBarcodeRepository(factory, GLOBAL_LIST_KEY)

        assert await repository.load() == []
        await repository.save(_records("FM1"))
        assert [r.code for r in await repository.load()] == ["FM1"]
        assert json.loads(BlobStore(db).get(GLOBAL_LIST_KEY))[0]["code"] == "FM1"

        await repository.clear()
        assert await repository.load() == []

    def test_list_keys(self):
        """Test global and per-client key naming."""
        assert list_key_for("global", "10.0.0.1") == GLOBAL_LIST_KEY
        assert list_key_for("client", "10.0.0.1") == "barcodes:10.0.0.1"
        assert list_key_for("client", None) == "barcodes:unknown"


class TestFileBarcodeRepository:
    """Tests for the local file backend."""

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path):
        """Test a saved list loads back from disk."""
        repository = FileBarcodeRepository(tmp_path / "list.json")
        assert await repository.load() == []
        await repository.save(_records("VL1", "SF2"))
        assert [r.code for r in await repository.load()] == ["VL1", "SF2"]
        await repository.clear()
        assert await repository.load() == []

    @pytest.mark.asyncio
    async def test_corrupt_file(self, tmp_path):
        """Test an unreadable file raises RepositoryError."""
        path = tmp_path / "list.json"
        path.write_text("{oops")
        with pytest.raises(RepositoryError):
            await FileBarcodeRepository(path).load()

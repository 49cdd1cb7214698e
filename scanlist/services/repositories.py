"""
==============================================================================
Barcode Repository Module
==============================================================================

Persistence interface for a scan session's barcode list.

Every repository stores the whole list at once: `load` returns it, `save`
replaces it, `clear` removes it. There is no merge and no version check, so
concurrent writers resolve as last-write-wins.

Implementations:
---------------
- HttpBarcodeRepository: the remote storage endpoint over HTTP (httpx)
- BlobBarcodeRepository: the blob table directly, in-process (SQLAlchemy)
- FileBarcodeRepository: a device-local JSON file, not shared

==============================================================================
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scanlist.barcodes.models import BarcodeRecord
from scanlist.config import Settings
from scanlist.schemas.barcode import dump_barcode_list, parse_barcode_list
from scanlist.services.blob_store import BlobStore, list_key_for


# Module logger
logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when a list cannot be loaded or stored."""


class BarcodeRepository(ABC):
    """Whole-list persistence for barcode records."""

    @abstractmethod
    async def load(self) -> List[BarcodeRecord]:
        """Fetch the full stored list ([] if nothing is stored)."""

    @abstractmethod
    async def save(self, records: List[BarcodeRecord]) -> None:
        """Replace the stored list."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove the stored list."""

    async def aclose(self) -> None:
        """Release resources held by the repository."""


# =============================================================================
# HTTP
# =============================================================================

class HttpBarcodeRepository(BarcodeRepository):
    """
    Repository backed by the remote storage endpoint.

    Example:
        >>> repo = HttpBarcodeRepository("https://scan.example.com/api/barcodes")
        >>> records = await repo.load()
        >>> await repo.save(records)
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None
    ) -> None:
        """
        Initialize the HTTP repository.

        Args:
            url: Endpoint URL (GET/POST/DELETE)
            timeout: Request timeout in seconds
            client: Shared AsyncClient (created and owned here if None)
        """
        self._url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def load(self) -> List[BarcodeRecord]:
        try:
            response = await self._client.get(self._url)
            response.raise_for_status()
            return parse_barcode_list(response.json())
        except httpx.HTTPError as e:
            raise RepositoryError(f"GET {self._url} failed: {e}") from e
        except ValueError as e:
            raise RepositoryError(f"GET {self._url} returned an invalid list: {e}") from e

    async def save(self, records: List[BarcodeRecord]) -> None:
        try:
            response = await self._client.post(self._url, json=dump_barcode_list(records))
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise RepositoryError(f"POST {self._url} failed: {e}") from e

    async def clear(self) -> None:
        try:
            response = await self._client.delete(self._url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise RepositoryError(f"DELETE {self._url} failed: {e}") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


# =============================================================================
# BLOB TABLE
# =============================================================================

class BlobBarcodeRepository(BarcodeRepository):
    """
    Repository writing straight to the blob table.

    Stores exactly what the HTTP endpoint would store under the same key,
    so in-process sessions and HTTP clients share one list.
    """

    def __init__(self, session_factory: Callable[[], Session], key: str) -> None:
        """
        Initialize the blob repository.

        Args:
            session_factory: Callable returning a new SQLAlchemy session
            key: Blob key of the list
        """
        self._session_factory = session_factory
        self._key = key

    async def load(self) -> List[BarcodeRecord]:
        session = self._session_factory()
        try:
            raw = BlobStore(session).get(self._key)
            return parse_barcode_list(json.loads(raw)) if raw else []
        except SQLAlchemyError as e:
            raise RepositoryError(f"Reading {self._key} failed: {e}") from e
        except ValueError as e:
            raise RepositoryError(f"Stored list {self._key} is invalid: {e}") from e
        finally:
            session.close()

    async def save(self, records: List[BarcodeRecord]) -> None:
        session = self._session_factory()
        try:
            BlobStore(session).set(self._key, json.dumps(dump_barcode_list(records)))
        except SQLAlchemyError as e:
            session.rollback()
            raise RepositoryError(f"Writing {self._key} failed: {e}") from e
        finally:
            session.close()

    async def clear(self) -> None:
        session = self._session_factory()
        try:
            BlobStore(session).delete(self._key)
        except SQLAlchemyError as e:
            session.rollback()
            raise RepositoryError(f"Deleting {self._key} failed: {e}") from e
        finally:
            session.close()


# =============================================================================
# LOCAL FILE
# =============================================================================

class FileBarcodeRepository(BarcodeRepository):
    """Repository keeping the list in a local JSON file (single device)."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    async def load(self) -> List[BarcodeRecord]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "[]")
            return parse_barcode_list(data)
        except OSError as e:
            raise RepositoryError(f"Reading {self._path} failed: {e}") from e
        except ValueError as e:
            raise RepositoryError(f"{self._path} holds an invalid list: {e}") from e

    async def save(self, records: List[BarcodeRecord]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(dump_barcode_list(records)), encoding="utf-8"
            )
        except OSError as e:
            raise RepositoryError(f"Writing {self._path} failed: {e}") from e

    async def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise RepositoryError(f"Deleting {self._path} failed: {e}") from e


# =============================================================================
# FACTORY
# =============================================================================

def create_repository(
    settings: Settings,
    session_factory: Optional[Callable[[], Session]] = None,
    client_host: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None
) -> BarcodeRepository:
    """
    Build the repository selected by `settings.sync_backend`.

    Args:
        settings: Application settings
        session_factory: Session factory for the blob backend
        client_host: Caller address, used when the blob key is per client
        http_client: Shared AsyncClient for the http backend

    Returns:
        Configured repository
    """
    backend = settings.sync_backend

    if backend == "http":
        return HttpBarcodeRepository(
            settings.remote_url,
            timeout=settings.request_timeout_seconds,
            client=http_client
        )

    if backend == "file":
        return FileBarcodeRepository(settings.local_list_path)

    if session_factory is None:
        from scanlist.db.database import get_database_manager

        session_factory = get_database_manager().get_session

    return BlobBarcodeRepository(
        session_factory,
        list_key_for(settings.blob_key_scope, client_host)
    )

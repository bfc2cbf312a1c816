"""Catalog persistence and retrieval.

- LocalCatalogStore: catalog files in the app data directory
- RemoteCatalogFetch: catalog index files downloaded over HTTP
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import tempfile
from pathlib import Path

import httpx

from .formats import dump_catalog
from .formats import is_json_name
from .formats import parse_catalog
from .models import ModelCatalog

logger = logging.getLogger(__name__)


class LocalCatalogStore:
    """
    Reads and writes catalog files on the local filesystem.

    Contract:
    - Inputs: file path, ModelCatalog for saves
    - Outputs: ModelCatalog, or None when the file does not exist
    - Side Effects: atomic file writes on save
    - Errors: OSError for disk issues, CatalogFormatError for bad content
    """

    async def load(self, path: Path) -> ModelCatalog | None:
        """Load a catalog file without blocking the event loop.

        Args:
            path: Catalog file path

        Returns:
            Parsed catalog, or None if the file does not exist
        """
        return await asyncio.to_thread(self._load_sync, Path(path))

    async def save(self, path: Path, catalog: ModelCatalog) -> None:
        """Save a catalog file atomically without blocking the event loop.

        Args:
            path: Target file path
            catalog: Catalog to write

        Raises:
            OSError: If the file could not be written
        """
        await asyncio.to_thread(self._save_sync, Path(path), catalog)

    def _load_sync(self, path: Path) -> ModelCatalog | None:
        if not path.exists():
            logger.debug(f"Catalog file not found: {path}")
            return None

        text = path.read_text(encoding="utf-8")
        catalog = parse_catalog(text, as_json=is_json_name(path.name), name=path.name)
        logger.debug(f"Loaded {len(catalog.entries or [])} entries from {path}")
        return catalog

    def _save_sync(self, path: Path, catalog: ModelCatalog) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        content = dump_catalog(catalog, as_json=is_json_name(path.name))

        # Write to temp file first (atomic write pattern)
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="utf-8", dir=path.parent, prefix="catalog_", suffix=".tmp", delete=False
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            try:
                tmp_file.write(content)
                tmp_file.flush()
            except Exception as e:
                with contextlib.suppress(Exception):
                    temp_path.unlink()
                raise OSError(f"Failed to save catalog: {e}") from e

        try:
            temp_path.replace(path)
        except OSError as e:
            with contextlib.suppress(Exception):
                temp_path.unlink()
            raise OSError(f"Failed to save catalog: {e}") from e

        logger.debug(f"Saved {len(catalog.entries or [])} entries to {path}")


class RemoteCatalogFetch:
    """Downloads and parses catalog index files."""

    def __init__(self, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize fetcher.

        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used for testing)
        """
        self.timeout = timeout
        self._transport = transport

    async def get(self, url: str) -> ModelCatalog:
        """Fetch a catalog from a URL.

        Raises:
            httpx.HTTPError: Request failed
            CatalogFormatError: Response body is not a valid catalog
        """
        logger.info(f"Fetching catalog from {url}")
        async with httpx.AsyncClient(
            timeout=self.timeout, follow_redirects=True, transport=self._transport
        ) as client:
            response = await client.get(url)
            response.raise_for_status()

        content_type = response.headers.get("content-type", "")
        as_json = "json" in content_type or is_json_name(url)
        return parse_catalog(response.text, as_json=as_json, name=url)

"""Model catalog resolution.

SourceResolver walks the configured sources in priority order (first
non-empty catalog wins), sorts the winning catalog by name and publishes
it to the display. Failing sources are reported and skipped; resolution
itself never raises.
"""

from __future__ import annotations

import asyncio
import logging
import unicodedata
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING
from typing import NamedTuple

from pyuca import Collator

from ..notifications import NotificationSink
from ..notifications import Severity
from .display import DisplayConsumer
from .models import ModelCatalog
from .models import ModelEntry
from .models import catalog_from_fallback
from .models import is_empty
from .results import Err
from .results import ErrorKind
from .results import Ok
from .results import StageResult
from .sources import SourceDescriptor
from .sources import SourceKind
from .sources import build_sources
from .storage_query import BlobContainerQuery
from .storage_query import StorageQuery
from .stores import LocalCatalogStore
from .stores import RemoteCatalogFetch

if TYPE_CHECKING:
    from ..settings import CatalogSettings

logger = logging.getLogger(__name__)


class Resolution(NamedTuple):
    """Outcome of one resolution pass."""

    entries: list[ModelEntry]
    stage: SourceKind | None
    saved_to: Path | None = None


@lru_cache(maxsize=1)
def _collator() -> Collator:
    return Collator()


def _name_key(name: str | None) -> tuple[int, ...]:
    # Case folded before collation, so names differing only in case compare equal
    folded = unicodedata.normalize("NFC", name or "").casefold()
    return _collator().sort_key(folded)


def sort_entries(entries: Sequence[ModelEntry]) -> list[ModelEntry]:
    """Sort entries by name with Unicode collation, ignoring case.

    Accented letters sort with their base letter; equal names keep their order.
    """
    return sorted(entries, key=lambda entry: _name_key(entry.name))


class SourceResolver:
    """Resolves the model menu from an ordered chain of sources.

    Resolution order (first non-empty catalog wins):
    1. Override file (LOCAL_OVERRIDE)
    2. Remote storage container (REMOTE_STORAGE, when enabled)
    3. Remote catalog URL (REMOTE_URL)
    4. Fallback file (LOCAL_FALLBACK)
    5. Static fallback data (FALLBACK_DATA), saved to the fallback file
    """

    def __init__(
        self,
        notifications: NotificationSink,
        store: LocalCatalogStore | None = None,
        fetcher: RemoteCatalogFetch | None = None,
        storage_query: StorageQuery | None = None,
        display: DisplayConsumer | None = None,
    ):
        self.notifications = notifications
        self.store = store or LocalCatalogStore()
        self.fetcher = fetcher or RemoteCatalogFetch()
        self.storage_query = storage_query
        self.display = display

    async def resolve(self, sources: Sequence[SourceDescriptor]) -> list[ModelEntry]:
        """Resolve, sort and publish the model list.

        Returns:
            Sorted entries, empty if no source produced data
        """
        resolution = await self.run(sources)
        return resolution.entries

    async def resolve_with_stage(
        self, sources: Sequence[SourceDescriptor]
    ) -> tuple[list[ModelEntry], SourceKind | None]:
        """Resolve the model list and report which source produced it.

        Returns:
            Tuple of (sorted entries, source kind), kind is None if nothing resolved
        """
        resolution = await self.run(sources)
        return resolution.entries, resolution.stage

    async def run(self, sources: Sequence[SourceDescriptor]) -> Resolution:
        """Run one resolution pass.

        Returns:
            Resolution with the sorted entries, the stage that produced them,
            and the fallback file path if synthesized data was saved there
        """
        ordered = sorted(sources, key=lambda source: source.kind.priority)
        fallback_path = next(
            (s.path for s in ordered if s.kind == SourceKind.LOCAL_FALLBACK and s.path is not None), None
        )

        catalog: ModelCatalog | None = None
        resolved_by: SourceKind | None = None
        for source in ordered:
            if not source.enabled:
                logger.debug(f"[catalog:resolve] {source.kind.value} disabled, skipping")
                continue

            result = await self._run_stage(source)
            if isinstance(result, Err):
                self._report(result)
                continue

            if not is_empty(result.catalog):
                catalog = result.catalog
                resolved_by = source.kind
                logger.debug(f"[catalog:resolve] -> {source.kind.value} ({source.describe()})")
                break

        if catalog is None:
            logger.warning("No catalog data resolved from any source")
            return Resolution([], None)

        saved_to = None
        if resolved_by == SourceKind.FALLBACK_DATA and fallback_path is not None:
            saved = await self._save(fallback_path, catalog)
            if isinstance(saved, Err):
                self._report(saved)
            else:
                saved_to = fallback_path

        entries = await asyncio.to_thread(sort_entries, catalog.entries or [])
        self._publish(entries)
        return Resolution(entries, resolved_by, saved_to)

    async def _run_stage(self, source: SourceDescriptor) -> StageResult:
        kind = source.kind

        if kind == SourceKind.LOCAL_OVERRIDE:
            return await self._load_file(source, f"Failed to load data from override file '{source.path}'.")

        if kind == SourceKind.REMOTE_STORAGE:
            if self.storage_query is None:
                logger.debug("[catalog:resolve] no storage container configured, skipping")
                return Ok()
            return await self._attempt(
                kind,
                ErrorKind.NETWORK_FAILURE,
                "Failed to load models from remote storage container.",
                self._query_storage,
            )

        if kind == SourceKind.REMOTE_URL:
            if not source.url:
                logger.debug("[catalog:resolve] no remote url configured, skipping")
                return Ok()
            return await self._attempt(
                kind,
                ErrorKind.NETWORK_FAILURE,
                f"Failed to load data from remote url '{source.url}'.",
                lambda: self.fetcher.get(source.url),
            )

        if kind == SourceKind.LOCAL_FALLBACK:
            return await self._load_file(source, f"Failed to load data from fallback file '{source.path}'.")

        logger.warning("No file data, using fallback data.")
        return Ok(catalog_from_fallback(list(source.fallback_objects)))

    async def _load_file(self, source: SourceDescriptor, failure: str) -> StageResult:
        path = source.path
        if path is None:
            return Ok()
        store = self.store
        return await self._attempt(source.kind, ErrorKind.READ_FAILURE, failure, lambda: store.load(path))

    async def _query_storage(self) -> ModelCatalog:
        assert self.storage_query is not None
        entries = await self.storage_query.query_models()
        return ModelCatalog(name=repr(self.storage_query), entries=list(entries) if entries is not None else None)

    async def _save(self, path: Path, catalog: ModelCatalog) -> StageResult:
        async def save() -> None:
            await self.store.save(path, catalog)

        return await self._attempt(
            SourceKind.FALLBACK_DATA, ErrorKind.WRITE_FAILURE, f"Failed to save data to file '{path}'.", save
        )

    async def _attempt(
        self,
        stage: SourceKind,
        kind: ErrorKind,
        failure: str,
        operation: Callable[[], Awaitable[ModelCatalog | None]],
    ) -> StageResult:
        try:
            return Ok(await operation())
        except Exception as e:
            return Err(kind, failure, e, stage=stage.value)

    def _report(self, error: Err) -> None:
        message = error.describe()
        logger.error(
            message,
            exc_info=error.error,
            extra={"stage": error.stage, "error_kind": error.kind.value},
        )
        self.notifications.raise_notification(message, Severity.ERROR)

    def _publish(self, entries: list[ModelEntry]) -> None:
        if self.display is None:
            return
        try:
            self.display.set_data(entries)
        except Exception:
            logger.exception("Display consumer failed to accept catalog data")

    def __repr__(self) -> str:
        return "SourceResolver(5-stage)"


def create_storage_query(settings: CatalogSettings) -> BlobContainerQuery | None:
    """Build the container query if a storage container is configured."""
    storage = settings.storage
    if not storage.configured:
        return None
    return BlobContainerQuery(
        account_url=storage.account_url,
        container=storage.container,
        sas_token=storage.sas_token,
        index_file=storage.index_file,
    )


async def resolve_catalog(
    settings: CatalogSettings,
    notifications: NotificationSink,
    display: DisplayConsumer | None = None,
) -> Resolution:
    """Run one resolution pass with collaborators built from settings."""
    resolver = SourceResolver(
        notifications=notifications,
        storage_query=create_storage_query(settings),
        display=display,
    )
    return await resolver.run(build_sources(settings))

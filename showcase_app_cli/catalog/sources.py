"""Catalog source descriptors.

A resolution walks the sources in a fixed priority order:
1. Override file in the data directory
2. Remote storage container query
3. Remote catalog URL
4. Fallback file in the data directory
5. Static fallback data
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from .models import FallbackObject

if TYPE_CHECKING:
    from ..settings import CatalogSettings


class SourceKind(str, Enum):
    """Data origin of a catalog, declared in priority order."""

    LOCAL_OVERRIDE = "override"
    REMOTE_STORAGE = "remote-storage"
    REMOTE_URL = "remote-url"
    LOCAL_FALLBACK = "fallback-file"
    FALLBACK_DATA = "fallback-data"

    @property
    def priority(self) -> int:
        return list(SourceKind).index(self)


@dataclass(frozen=True)
class SourceDescriptor:
    """One data origin plus the parameters needed to fetch it."""

    kind: SourceKind
    path: Path | None = None
    url: str = ""
    fallback_objects: tuple[FallbackObject, ...] = field(default_factory=tuple)
    enabled: bool = True

    def describe(self) -> str:
        """Short human-readable location of this source."""
        if self.path is not None:
            return str(self.path)
        if self.url:
            return self.url
        if self.kind == SourceKind.FALLBACK_DATA:
            return f"{len(self.fallback_objects)} fallback objects"
        return "-"


def build_sources(settings: CatalogSettings) -> list[SourceDescriptor]:
    """Create the ordered source list from catalog settings."""
    storage = settings.storage
    return [
        SourceDescriptor(SourceKind.LOCAL_OVERRIDE, path=settings.override_file_path),
        SourceDescriptor(
            SourceKind.REMOTE_STORAGE,
            url=storage.account_url.rstrip("/") + "/" + storage.container if storage.configured else "",
            enabled=settings.query_remote_storage,
        ),
        SourceDescriptor(SourceKind.REMOTE_URL, url=settings.remote_url),
        SourceDescriptor(SourceKind.LOCAL_FALLBACK, path=settings.fallback_file_path),
        SourceDescriptor(SourceKind.FALLBACK_DATA, fallback_objects=tuple(settings.fallback_data)),
    ]

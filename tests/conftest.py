"""Pytest configuration and shared doubles for showcase CLI tests."""

from pathlib import Path

import pytest
from showcase_app_cli.catalog.models import ModelCatalog
from showcase_app_cli.catalog.models import ModelEntry
from showcase_app_cli.catalog.models import ModelReference


def make_entry(name: str, url: str = "", center: bool = False) -> ModelEntry:
    return ModelEntry(name=name, items=[ModelReference(name=name, url=url or f"builtin://{name}")], center_on_load=center)


def make_catalog(*names: str) -> ModelCatalog:
    return ModelCatalog(name="test", entries=[make_entry(n) for n in names])


class FakeStore:
    """In-memory LocalCatalogStore double.

    ``files`` maps a path to a catalog, None, or an exception to raise.
    """

    def __init__(self, files=None, save_error: Exception | None = None):
        self.files = dict(files or {})
        self.save_error = save_error
        self.loads: list[Path] = []
        self.saves: list[tuple[Path, ModelCatalog]] = []

    async def load(self, path):
        self.loads.append(path)
        value = self.files.get(path)
        if isinstance(value, Exception):
            raise value
        return value

    async def save(self, path, catalog):
        self.saves.append((path, catalog))
        if self.save_error is not None:
            raise self.save_error


class FakeFetcher:
    def __init__(self, result=None):
        self.result = result
        self.urls: list[str] = []

    async def get(self, url):
        self.urls.append(url)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class FakeStorageQuery:
    def __init__(self, result=None):
        self.result = result
        self.calls = 0

    async def query_models(self):
        self.calls += 1
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class RecordingSink:
    def __init__(self):
        self.notifications: list[tuple[str, object]] = []

    def raise_notification(self, message, severity=None):
        self.notifications.append((message, severity))


@pytest.fixture
def sink():
    return RecordingSink()

"""Tests for SourceResolver.

Focus on the stage ordering, fallthrough, failure containment and
publishing behavior of a resolution pass.
"""

import logging
from pathlib import Path
from unittest.mock import Mock

import httpx
import pytest
from conftest import FakeFetcher
from conftest import FakeStorageQuery
from conftest import FakeStore
from conftest import make_catalog
from conftest import make_entry
from showcase_app_cli.catalog.display import ListDisplay
from showcase_app_cli.catalog.formats import CatalogFormatError
from showcase_app_cli.catalog.models import FallbackObject
from showcase_app_cli.catalog.models import ModelCatalog
from showcase_app_cli.catalog.models import ModelReference
from showcase_app_cli.catalog.resolver import SourceResolver
from showcase_app_cli.catalog.resolver import sort_entries
from showcase_app_cli.catalog.sources import SourceDescriptor
from showcase_app_cli.catalog.sources import SourceKind
from showcase_app_cli.notifications import Severity

OVERRIDE = Path("/data/models.xml")
FALLBACK = Path("/data/models.fallback.xml")
URL = "https://example.com/models.xml"


def make_sources(fallback_names=(), query_remote_storage=True, url=URL):
    objects = tuple(FallbackObject(model=ModelReference(name=n, url=f"builtin://{n}")) for n in fallback_names)
    return [
        SourceDescriptor(SourceKind.LOCAL_OVERRIDE, path=OVERRIDE),
        SourceDescriptor(SourceKind.REMOTE_STORAGE, enabled=query_remote_storage),
        SourceDescriptor(SourceKind.REMOTE_URL, url=url),
        SourceDescriptor(SourceKind.LOCAL_FALLBACK, path=FALLBACK),
        SourceDescriptor(SourceKind.FALLBACK_DATA, fallback_objects=objects),
    ]


def names(entries):
    return [e.name for e in entries]


class TestSortEntries:
    def test_case_insensitive_order(self):
        entries = [make_entry("Gamma"), make_entry("beta"), make_entry("Alpha")]

        assert names(sort_entries(entries)) == ["Alpha", "beta", "Gamma"]

    def test_ties_keep_original_order(self):
        first = make_entry("b", url="first")
        second = make_entry("B", url="second")

        result = sort_entries([second, first])

        assert [e.items[0].url for e in result] == ["second", "first"]

    def test_accented_names_sort_with_base_letter(self):
        entries = [make_entry("Fig"), make_entry("Éclair"), make_entry("zeta"), make_entry("apple")]

        assert names(sort_entries(entries)) == ["apple", "Éclair", "Fig", "zeta"]

    def test_does_not_mutate_input(self):
        entries = [make_entry("z"), make_entry("a")]

        sort_entries(entries)

        assert names(entries) == ["z", "a"]


class TestStageOrder:
    @pytest.mark.asyncio
    async def test_override_wins_and_stops_chain(self, sink):
        store = FakeStore({OVERRIDE: make_catalog("zeta", "Alpha")})
        query = FakeStorageQuery([make_entry("remote")])
        fetcher = FakeFetcher(make_catalog("url"))
        resolver = SourceResolver(sink, store=store, fetcher=fetcher, storage_query=query)

        entries, kind = await resolver.resolve_with_stage(make_sources(["fb"]))

        assert names(entries) == ["Alpha", "zeta"]
        assert kind == SourceKind.LOCAL_OVERRIDE
        assert query.calls == 0
        assert fetcher.urls == []
        assert store.loads == [OVERRIDE]
        assert store.saves == []

    @pytest.mark.asyncio
    async def test_container_query_used_after_empty_override(self, sink):
        store = FakeStore({OVERRIDE: ModelCatalog(entries=[])})
        query = FakeStorageQuery([make_entry("Tree"), make_entry("engine")])
        fetcher = FakeFetcher(make_catalog("url"))
        resolver = SourceResolver(sink, store=store, fetcher=fetcher, storage_query=query)

        entries, kind = await resolver.resolve_with_stage(make_sources())

        assert names(entries) == ["engine", "Tree"]
        assert kind == SourceKind.REMOTE_STORAGE
        assert fetcher.urls == []

    @pytest.mark.asyncio
    async def test_override_failure_does_not_abort_chain(self, sink):
        store = FakeStore({OVERRIDE: CatalogFormatError("bad xml")})
        query = FakeStorageQuery([make_entry("Remote")])
        resolver = SourceResolver(sink, store=store, fetcher=FakeFetcher(), storage_query=query)

        entries, kind = await resolver.resolve_with_stage(make_sources())

        assert names(entries) == ["Remote"]
        assert kind == SourceKind.REMOTE_STORAGE
        assert len(sink.notifications) == 1
        assert "override file" in sink.notifications[0][0]
        assert sink.notifications[0][1] == Severity.ERROR

    @pytest.mark.asyncio
    async def test_disabled_container_query_is_not_called(self, sink):
        query = FakeStorageQuery([make_entry("Remote")])
        fetcher = FakeFetcher(make_catalog("FromUrl"))
        resolver = SourceResolver(sink, store=FakeStore(), fetcher=fetcher, storage_query=query)

        entries, kind = await resolver.resolve_with_stage(make_sources(query_remote_storage=False))

        assert names(entries) == ["FromUrl"]
        assert kind == SourceKind.REMOTE_URL
        assert query.calls == 0
        assert fetcher.urls == [URL]

    @pytest.mark.asyncio
    async def test_missing_storage_query_skips_stage(self, sink):
        fetcher = FakeFetcher(make_catalog("FromUrl"))
        resolver = SourceResolver(sink, store=FakeStore(), fetcher=fetcher)

        entries, kind = await resolver.resolve_with_stage(make_sources())

        assert kind == SourceKind.REMOTE_URL
        assert sink.notifications == []

    @pytest.mark.asyncio
    async def test_empty_url_skips_stage(self, sink):
        store = FakeStore({FALLBACK: make_catalog("Local")})
        fetcher = FakeFetcher(make_catalog("FromUrl"))
        resolver = SourceResolver(sink, store=store, fetcher=fetcher)

        entries, kind = await resolver.resolve_with_stage(make_sources(url=""))

        assert kind == SourceKind.LOCAL_FALLBACK
        assert fetcher.urls == []
        assert sink.notifications == []

    @pytest.mark.asyncio
    async def test_fallback_file_used_when_remote_sources_fail(self, sink):
        store = FakeStore({FALLBACK: make_catalog("Local")})
        query = FakeStorageQuery(httpx.ConnectError("unreachable"))
        fetcher = FakeFetcher(httpx.ConnectError("unreachable"))
        resolver = SourceResolver(sink, store=store, fetcher=fetcher, storage_query=query)

        entries, kind = await resolver.resolve_with_stage(make_sources(["fb"]))

        assert names(entries) == ["Local"]
        assert kind == SourceKind.LOCAL_FALLBACK
        assert len(sink.notifications) == 2
        assert store.saves == []

    @pytest.mark.asyncio
    async def test_sources_are_run_in_priority_order_regardless_of_input_order(self, sink):
        store = FakeStore({OVERRIDE: make_catalog("Override"), FALLBACK: make_catalog("Fallback")})
        resolver = SourceResolver(sink, store=store, fetcher=FakeFetcher())

        entries = await resolver.resolve(list(reversed(make_sources(["fb"]))))

        assert names(entries) == ["Override"]
        assert store.loads == [OVERRIDE]


class TestFallbackData:
    @pytest.mark.asyncio
    async def test_synthesized_catalog_is_centered_and_saved(self, sink):
        store = FakeStore()
        resolver = SourceResolver(sink, store=store, fetcher=FakeFetcher())

        entries, kind = await resolver.resolve_with_stage(make_sources(["Engine", "car", "Atom"]))

        assert kind == SourceKind.FALLBACK_DATA
        assert names(entries) == ["Atom", "car", "Engine"]
        assert all(e.center_on_load for e in entries)
        assert all(len(e.items) == 1 and e.items[0].name == e.name for e in entries)

        assert len(store.saves) == 1
        saved_path, saved_catalog = store.saves[0]
        assert saved_path == FALLBACK
        assert len(saved_catalog.entries) == 3

    @pytest.mark.asyncio
    async def test_save_failure_is_reported_but_not_fatal(self, sink):
        store = FakeStore(save_error=PermissionError("read-only"))
        display = ListDisplay()
        resolver = SourceResolver(sink, store=store, fetcher=FakeFetcher(), display=display)

        entries = await resolver.resolve(make_sources(["Engine"]))

        assert names(entries) == ["Engine"]
        assert names(display.data) == ["Engine"]
        assert len(sink.notifications) == 1
        assert "save" in sink.notifications[0][0]

    @pytest.mark.asyncio
    async def test_no_save_without_fallback_file_source(self, sink):
        store = FakeStore()
        resolver = SourceResolver(sink, store=store, fetcher=FakeFetcher())
        sources = [s for s in make_sources(["Engine"]) if s.kind != SourceKind.LOCAL_FALLBACK]

        entries = await resolver.resolve(sources)

        assert names(entries) == ["Engine"]
        assert store.saves == []

    @pytest.mark.asyncio
    async def test_run_reports_saved_fallback_path(self, sink):
        resolver = SourceResolver(sink, store=FakeStore(), fetcher=FakeFetcher())

        resolution = await resolver.run(make_sources(["Engine"]))

        assert resolution.stage == SourceKind.FALLBACK_DATA
        assert resolution.saved_to == FALLBACK

    @pytest.mark.asyncio
    async def test_run_reports_no_save_when_write_fails(self, sink):
        store = FakeStore(save_error=PermissionError("read-only"))
        resolver = SourceResolver(sink, store=store, fetcher=FakeFetcher())

        resolution = await resolver.run(make_sources(["Engine"]))

        assert resolution.stage == SourceKind.FALLBACK_DATA
        assert names(resolution.entries) == ["Engine"]
        assert resolution.saved_to is None

    @pytest.mark.asyncio
    async def test_run_reports_no_save_for_other_stages(self, sink):
        store = FakeStore({FALLBACK: make_catalog("Local")})
        resolver = SourceResolver(sink, store=store, fetcher=FakeFetcher())

        resolution = await resolver.run(make_sources(["Engine"]))

        assert resolution.stage == SourceKind.LOCAL_FALLBACK
        assert resolution.saved_to is None


class TestPublishing:
    @pytest.mark.asyncio
    async def test_display_receives_sorted_entries_once(self, sink):
        store = FakeStore({OVERRIDE: make_catalog("b", "C", "a")})
        display = Mock()
        resolver = SourceResolver(sink, store=store, fetcher=FakeFetcher(), display=display)

        await resolver.resolve(make_sources())

        display.set_data.assert_called_once()
        assert names(display.set_data.call_args.args[0]) == ["a", "b", "C"]

    @pytest.mark.asyncio
    async def test_total_failure_leaves_display_untouched(self, sink):
        display = ListDisplay()
        display.set_data([make_entry("previous")])
        resolver = SourceResolver(sink, store=FakeStore(), fetcher=FakeFetcher(), display=display)

        entries, kind = await resolver.resolve_with_stage(make_sources())

        assert entries == []
        assert kind is None
        assert display.updates == 1
        assert names(display.data) == ["previous"]

    @pytest.mark.asyncio
    async def test_total_failure_never_calls_set_data(self, sink):
        store = FakeStore({OVERRIDE: OSError("disk"), FALLBACK: OSError("disk")})
        display = Mock()
        query = FakeStorageQuery([])
        resolver = SourceResolver(
            sink, store=store, fetcher=FakeFetcher(ModelCatalog()), storage_query=query, display=display
        )

        entries = await resolver.resolve(make_sources())

        assert entries == []
        display.set_data.assert_not_called()
        assert store.saves == []

    @pytest.mark.asyncio
    async def test_failing_display_does_not_break_resolution(self, sink, caplog):
        store = FakeStore({OVERRIDE: make_catalog("a")})
        display = Mock()
        display.set_data.side_effect = RuntimeError("widget gone")
        resolver = SourceResolver(sink, store=store, fetcher=FakeFetcher(), display=display)

        with caplog.at_level(logging.ERROR):
            entries = await resolver.resolve(make_sources())

        assert names(entries) == ["a"]
        assert "Display consumer failed" in caplog.text


class TestFailureReporting:
    @pytest.mark.asyncio
    async def test_each_failing_stage_logs_and_notifies_once(self, sink, caplog):
        store = FakeStore({OVERRIDE: CatalogFormatError("bad"), FALLBACK: OSError("disk")})
        query = FakeStorageQuery(httpx.ConnectError("offline"))
        fetcher = FakeFetcher(httpx.ConnectError("offline"))
        resolver = SourceResolver(sink, store=store, fetcher=fetcher, storage_query=query)

        with caplog.at_level(logging.ERROR, logger="showcase_app_cli.catalog.resolver"):
            entries = await resolver.resolve(make_sources())

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert entries == []
        assert len(errors) == 4
        assert len(sink.notifications) == 4
        assert [r.stage for r in errors] == ["override", "remote-storage", "remote-url", "fallback-file"]
        assert [r.error_kind for r in errors] == ["read_failure", "network_failure", "network_failure", "read_failure"]
        assert [r.getMessage() for r in errors] == [n[0] for n in sink.notifications]

    @pytest.mark.asyncio
    async def test_save_failure_tagged_with_fallback_stage(self, sink, caplog):
        store = FakeStore(save_error=PermissionError("read-only"))
        resolver = SourceResolver(sink, store=store, fetcher=FakeFetcher())

        with caplog.at_level(logging.ERROR, logger="showcase_app_cli.catalog.resolver"):
            await resolver.resolve(make_sources(["Engine"]))

        (record,) = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert record.stage == "fallback-data"
        assert record.error_kind == "write_failure"

    @pytest.mark.asyncio
    async def test_notification_includes_exception_detail(self, sink):
        store = FakeStore({OVERRIDE: CatalogFormatError("unexpected root")})
        resolver = SourceResolver(sink, store=store, fetcher=FakeFetcher())

        await resolver.resolve(make_sources())

        message = sink.notifications[0][0]
        assert str(OVERRIDE) in message
        assert "CatalogFormatError: unexpected root" in message

    @pytest.mark.asyncio
    async def test_empty_exception_message_still_descriptive(self, sink):
        resolver = SourceResolver(sink, store=FakeStore(), fetcher=FakeFetcher(TimeoutError()))

        await resolver.resolve(make_sources())

        assert "TimeoutError: request timed out" in sink.notifications[0][0]

"""
tests/test_sync.py
Unit tests for mysqltranslate.sync.

Introspection is replaced with plain functions returning canned
``IntrospectionResult`` values; file output is real, inside tmp_path.

Tests cover:
- Syncing one database to all of its bound files
- Connection failures and skipped tables in the report
- Isolated write failures
- sync_all ordering
- view from database, disk and both
"""

from __future__ import annotations

import json
import pathlib
from typing import List

import pytest

from mysqltranslate.config import TranslateConfig
from mysqltranslate.introspector import IntrospectionConnectionError
from mysqltranslate.models import AcceptedFormat, IntrospectionResult, Table, TableErrorReport
from mysqltranslate.session import DatabaseEntry, DiskMapping, SessionRegistry
from mysqltranslate.sync import DatabaseSync, SyncReport
from mysqltranslate.translators import DB_LABEL, DISK_LABEL


# ===========================================================================
# Fixtures
# ===========================================================================


@pytest.fixture()
def introspect_ok(sample_tables: List[Table]):
    calls: List[str] = []

    def _introspect(url: str) -> IntrospectionResult:
        calls.append(url)
        return IntrospectionResult(
            tables=list(sample_tables),
            errors=[TableErrorReport(table="legacy", error="permission denied")],
        )

    _introspect.calls = calls
    return _introspect


def _introspect_down(url: str) -> IntrospectionResult:
    raise IntrospectionConnectionError(url, "Connection refused")


# ===========================================================================
# Sync
# ===========================================================================


class TestSyncDatabase:
    def test_writes_every_mapping(
        self, config: TranslateConfig, shop_entry: DatabaseEntry, introspect_ok
    ) -> None:
        report = DatabaseSync(config, introspect=introspect_ok).sync_database(shop_entry)

        assert report.success
        assert report.total_tables == 2
        assert len(report.write_results) == 2
        prisma_path = pathlib.Path(shop_entry.get_mapping(AcceptedFormat.PRISMA).path)
        json_path = pathlib.Path(shop_entry.get_mapping(AcceptedFormat.JSON).path)
        assert "model posts {" in prisma_path.read_text(encoding="utf-8")
        assert set(json.loads(json_path.read_text(encoding="utf-8"))["tables"]) == {"users", "posts"}

    def test_introspects_once(
        self, config: TranslateConfig, shop_entry: DatabaseEntry, introspect_ok
    ) -> None:
        DatabaseSync(config, introspect=introspect_ok).sync_database(shop_entry)
        assert introspect_ok.calls == [shop_entry.db_url]

    def test_skipped_tables_reported(
        self, config: TranslateConfig, shop_entry: DatabaseEntry, introspect_ok
    ) -> None:
        report = DatabaseSync(config, introspect=introspect_ok).sync_database(shop_entry)
        assert report.introspection_errors == ["Table: legacy, Error: permission denied"]
        assert "Skipped Tables (1)" in report.summary()

    def test_config_providers_written(
        self, tmp_path: pathlib.Path, shop_entry: DatabaseEntry, introspect_ok
    ) -> None:
        config = TranslateConfig(storage_dir=str(tmp_path), generator_provider="prisma-client-py")
        DatabaseSync(config, introspect=introspect_ok).sync_database(shop_entry)
        text = pathlib.Path(shop_entry.get_mapping(AcceptedFormat.PRISMA).path).read_text(encoding="utf-8")
        assert 'provider = "prisma-client-py"' in text

    def test_connection_failure(self, config: TranslateConfig, shop_entry: DatabaseEntry) -> None:
        report = DatabaseSync(config, introspect=_introspect_down).sync_database(shop_entry)
        assert report.success is False
        assert "Connection refused" in report.connection_error
        assert report.write_results == []
        assert "Connection Error" in report.summary()

    def test_failed_write_is_isolated(
        self, config: TranslateConfig, tmp_path: pathlib.Path, introspect_ok
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        entry = DatabaseEntry(
            name="shop",
            db_url="mysql://h/shop",
            disk_mappings=[
                DiskMapping(format="json", path=str(blocker / "schema.json")),
                DiskMapping(format="prisma", path=str(tmp_path / "schema.prisma")),
            ],
        )
        report = DatabaseSync(config, introspect=introspect_ok).sync_database(entry)
        assert report.success is False
        assert len(report.failed_writes) == 1
        assert (tmp_path / "schema.prisma").exists()
        assert "Write Errors (1)" in report.summary()

    def test_no_mappings(self, config: TranslateConfig, introspect_ok) -> None:
        entry = DatabaseEntry(name="bare", db_url="mysql://h/bare")
        report = DatabaseSync(config, introspect=introspect_ok).sync_database(entry)
        assert report.success is True
        assert report.write_results == []


class TestSyncAll:
    def test_sorted_by_name(
        self, config: TranslateConfig, registry: SessionRegistry, introspect_ok
    ) -> None:
        registry.add_database(DatabaseEntry(name="zeta", db_url="mysql://h/z"))
        registry.add_database(DatabaseEntry(name="alpha", db_url="mysql://h/a"))
        reports = DatabaseSync(config, introspect=introspect_ok).sync_all(registry)
        assert [r.database for r in reports] == ["alpha", "zeta"]
        assert introspect_ok.calls == ["mysql://h/a", "mysql://h/z"]

    def test_empty_registry(self, config: TranslateConfig, registry: SessionRegistry) -> None:
        assert DatabaseSync(config, introspect=_introspect_down).sync_all(registry) == []


class TestSyncReport:
    def test_summary_header(self) -> None:
        report = SyncReport(success=True, database="shop", total_tables=3)
        text = report.summary()
        assert "shop" in text
        assert "SUCCESS" in text
        assert "Tables:           3" in text


# ===========================================================================
# View
# ===========================================================================


class TestView:
    def test_from_database(
        self, config: TranslateConfig, shop_entry: DatabaseEntry, introspect_ok
    ) -> None:
        text = DatabaseSync(config, introspect=introspect_ok).view(shop_entry, "prisma")
        assert text.startswith(f"{DB_LABEL}\n\n")
        assert DISK_LABEL not in text
        assert "model users {" in text

    def test_from_disk(
        self, config: TranslateConfig, shop_entry: DatabaseEntry, introspect_ok
    ) -> None:
        syncer = DatabaseSync(config, introspect=introspect_ok)
        syncer.sync_database(shop_entry)
        introspect_ok.calls.clear()

        text = syncer.view(shop_entry, AcceptedFormat.JSON, source="disk")
        assert text.startswith(f"{DISK_LABEL}\n\n")
        assert introspect_ok.calls == []

    def test_both(self, config: TranslateConfig, shop_entry: DatabaseEntry, introspect_ok) -> None:
        syncer = DatabaseSync(config, introspect=introspect_ok)
        syncer.sync_database(shop_entry)
        text = syncer.view(shop_entry, "prisma", source="both")
        assert text.index(DISK_LABEL) < text.index(DB_LABEL)

    def test_missing_file(self, config: TranslateConfig, shop_entry: DatabaseEntry, introspect_ok) -> None:
        with pytest.raises(OSError):
            DatabaseSync(config, introspect=introspect_ok).view(shop_entry, "prisma", source="disk")

    def test_unbound_format(self, config: TranslateConfig, introspect_ok) -> None:
        entry = DatabaseEntry(name="bare", db_url="mysql://h/bare")
        with pytest.raises(ValueError, match="no json file bound"):
            DatabaseSync(config, introspect=introspect_ok).view(entry, "json")

    def test_unknown_source(self, config: TranslateConfig, shop_entry: DatabaseEntry, introspect_ok) -> None:
        with pytest.raises(ValueError, match="Unknown source"):
            DatabaseSync(config, introspect=introspect_ok).view(shop_entry, "json", source="cache")

    def test_connection_failure_propagates(
        self, config: TranslateConfig, shop_entry: DatabaseEntry
    ) -> None:
        with pytest.raises(IntrospectionConnectionError):
            DatabaseSync(config, introspect=_introspect_down).view(shop_entry, "json")

# File: mysqltranslate/sync.py
"""
MySQL Translate - Sync Orchestrator
=====================================
Connects the pieces for one registered database::

    DatabaseEntry → Introspector → Table[] → translator per mapping → files

``DatabaseSync`` is created once with a ``TranslateConfig`` and reused for
every database.  Each call introspects afresh; ``Table`` lists are never
cached across calls.

Error handling strategy:
    - A connection failure ends that database's sync and is recorded in
      its ``SyncReport``; other databases still sync.
    - Per-table introspection failures are carried into the report; the
      remaining tables are still written.
    - Each output file write is isolated; one failed write doesn't stop the
      others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

from mysqltranslate.config import TranslateConfig
from mysqltranslate.introspector import (
    IntrospectionConnectionError,
    get_table_descriptions,
)
from mysqltranslate.models import AcceptedFormat, IntrospectionResult
from mysqltranslate.session import DatabaseEntry, DiskMapping, SessionRegistry
from mysqltranslate.translators import (
    TranslatorBehaviour,
    TranslatorResult,
    get_translator,
)
from mysqltranslate.utils import Timer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate.sync")

SOURCE_DATABASE: str = "database"
SOURCE_DISK: str = "disk"
SOURCE_BOTH: str = "both"
VIEW_SOURCES: List[str] = [SOURCE_DATABASE, SOURCE_DISK, SOURCE_BOTH]

Introspect = Callable[[str], IntrospectionResult]


# ---------------------------------------------------------------------------
# Sync report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class SyncStepMetric:
    """Timing and outcome for a single sync step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class SyncReport:
    """Outcome of syncing one database to all of its output files."""

    success: bool = False
    database: str = ""
    total_tables: int = 0
    total_elapsed_seconds: float = 0.0

    step_metrics: List[SyncStepMetric] = field(default_factory=list)
    connection_error: Optional[str] = None
    introspection_errors: List[str] = field(default_factory=list)
    write_results: List[TranslatorResult] = field(default_factory=list)

    @property
    def failed_writes(self) -> List[TranslatorResult]:
        return [r for r in self.write_results if not r.success]

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'='*60}")
        lines.append(f"  Sync Report — {self.database}")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Tables:           {self.total_tables}")
        lines.append(f"  Files written:    {len(self.write_results) - len(self.failed_writes)}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        if self.connection_error:
            lines.append(f"{'─'*60}")
            lines.append(f"  Connection Error:")
            lines.append(f"    ✗ {self.connection_error}")

        if self.introspection_errors:
            lines.append(f"{'─'*60}")
            lines.append(f"  Skipped Tables ({len(self.introspection_errors)}):")
            for err in self.introspection_errors:
                lines.append(f"    ⊘ {err}")

        if self.failed_writes:
            lines.append(f"{'─'*60}")
            lines.append(f"  Write Errors ({len(self.failed_writes)}):")
            for result in self.failed_writes:
                lines.append(f"    ✗ {result}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# DatabaseSync
# ---------------------------------------------------------------------------


class DatabaseSync:
    """
    Sync and view operations over registered databases.

    Args:
        config: Settings carrying the generator / datasource providers.
        introspect: Replaceable introspection function, taking a URL.
    """

    def __init__(
        self,
        config: TranslateConfig,
        *,
        introspect: Introspect = get_table_descriptions,
    ) -> None:
        self._config: TranslateConfig = config
        self._introspect: Introspect = introspect

    def _translator(self, fmt: AcceptedFormat, path: str) -> TranslatorBehaviour:
        return get_translator(
            fmt,
            path,
            generator=self._config.make_generator(),
            datasource=self._config.make_datasource(),
        )

    # -----------------------------------------------------------------
    # Sync
    # -----------------------------------------------------------------

    def sync_database(self, entry: DatabaseEntry) -> SyncReport:
        """Introspect *entry* once and write every bound output file."""
        report: SyncReport = SyncReport(database=entry.name)
        logger.info("Syncing database '%s'.", entry.name)

        with Timer("introspect") as t_intro:
            try:
                result: Optional[IntrospectionResult] = self._introspect(entry.db_url)
            except IntrospectionConnectionError as exc:
                result = None
                report.connection_error = str(exc)

        if result is None:
            report.step_metrics.append(SyncStepMetric(
                step_name="Introspect",
                success=False,
                elapsed_seconds=t_intro.elapsed,
                detail=report.connection_error or "",
            ))
            report.total_elapsed_seconds = t_intro.elapsed
            logger.error("Sync of '%s' aborted: %s", entry.name, report.connection_error)
            return report

        report.total_tables = len(result.tables)
        report.introspection_errors = [str(e) for e in result.errors]
        report.step_metrics.append(SyncStepMetric(
            step_name="Introspect",
            success=True,
            elapsed_seconds=t_intro.elapsed,
            detail=f"{len(result.tables)} table(s), {len(result.errors)} skipped",
        ))

        total: float = t_intro.elapsed
        for mapping in entry.disk_mappings:
            with Timer(f"write {mapping.format.value}") as t_write:
                write: TranslatorResult = self._translator(
                    mapping.format, mapping.path
                ).write_to_disk(result.tables)
            report.write_results.append(write)
            report.step_metrics.append(SyncStepMetric(
                step_name=f"Write {mapping.format.value}",
                success=write.success,
                elapsed_seconds=t_write.elapsed,
                detail=mapping.path if write.success else (write.error or ""),
            ))
            total += t_write.elapsed

        if not entry.disk_mappings:
            logger.warning("Database '%s' has no output files bound.", entry.name)

        report.total_elapsed_seconds = total
        report.success = not report.failed_writes
        logger.info(
            "Sync of '%s' %s: %d file(s).",
            entry.name,
            "succeeded" if report.success else "failed",
            len(report.write_results),
        )
        return report

    def sync_all(self, registry: SessionRegistry) -> List[SyncReport]:
        """Sync every registered database, in name order."""
        return [self.sync_database(entry) for entry in registry.sorted_databases()]

    # -----------------------------------------------------------------
    # View
    # -----------------------------------------------------------------

    def view(
        self,
        entry: DatabaseEntry,
        fmt: Union[AcceptedFormat, str],
        source: str = SOURCE_DATABASE,
    ) -> str:
        """
        Render *entry*'s schema in *fmt* from the database, the bound file,
        or both.

        Raises:
            ValueError: unknown source, or no file bound for *fmt*.
            OSError: the bound file cannot be read.
            IntrospectionConnectionError: the database cannot be reached.
        """
        if not isinstance(fmt, AcceptedFormat):
            fmt = AcceptedFormat.from_string(fmt)
        if source not in VIEW_SOURCES:
            raise ValueError(f"Unknown source '{source}'. Expected one of {VIEW_SOURCES}.")
        mapping: Optional[DiskMapping] = entry.get_mapping(fmt)
        if mapping is None:
            raise ValueError(f"Database '{entry.name}' has no {fmt.value} file bound.")

        translator: TranslatorBehaviour = self._translator(fmt, mapping.path)
        if source in (SOURCE_DISK, SOURCE_BOTH):
            loaded: TranslatorResult = translator.load_from_disk()
            if not loaded.success:
                raise OSError(loaded.error)
        if source in (SOURCE_DATABASE, SOURCE_BOTH):
            result: IntrospectionResult = self._introspect(entry.db_url)
            for error in result.errors:
                logger.warning("%s", error)
            translator.load_from_database(result.tables)
        return translator.render_string()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SOURCE_DATABASE",
    "SOURCE_DISK",
    "SOURCE_BOTH",
    "VIEW_SOURCES",
    "SyncStepMetric",
    "SyncReport",
    "DatabaseSync",
]

logger.debug("mysqltranslate.sync loaded.")

# File: mysqltranslate/introspector.py
"""
MySQL Translate - Catalog Introspector
========================================
Reads table, column and key metadata out of a live MySQL database through
SQLAlchemy (PyMySQL driver).

Algorithm, per database::

    SHOW TABLES                            → table names, catalog order
    for each table (sequentially):
        DESCRIBE `<table>`                 → Column list
        constraint / index statistics      → ConstraintRow list
        group_keys(rows)                   → Key list
        emit Table if it has ≥ 1 column

Failure policy
--------------
* The engine cannot connect → ``IntrospectionConnectionError`` (fatal).
* ``SHOW TABLES`` fails → one ``TableErrorReport`` for ``"All tables"``,
  empty result.
* A per-table query fails → ``TableErrorReport`` for that table, which is
  skipped; the run continues.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from mysqltranslate.models import (
    Column,
    ConstraintRow,
    ForeignKey,
    IntrospectionResult,
    Key,
    Table,
    TableErrorReport,
    UniqueComposite,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate.introspector")

ALL_TABLES_LABEL: str = "All tables"

_REGISTRY_SCHEME: str = "mysql://"
_DRIVER_SCHEME: str = "mysql+pymysql://"

# ---------------------------------------------------------------------------
# Catalog queries
# ---------------------------------------------------------------------------

SHOW_TABLES_SQL: str = "SHOW TABLES"

# Declared constraints (primary and check constraints excluded) unioned with
# index statistics.  Column order matches ``ConstraintRow``.
CONSTRAINTS_SQL: str = """
SELECT
    constraint_name,
    constraint_type,
    column_name,
    ordinal_position,
    referenced_table_name,
    referenced_column_name,
    index_name,
    seq_in_index,
    cardinality,
    index_type
FROM (
    SELECT
        TC.CONSTRAINT_NAME AS constraint_name,
        TC.CONSTRAINT_TYPE AS constraint_type,
        KCU.COLUMN_NAME AS column_name,
        KCU.ORDINAL_POSITION AS ordinal_position,
        KCU.REFERENCED_TABLE_NAME AS referenced_table_name,
        KCU.REFERENCED_COLUMN_NAME AS referenced_column_name,
        NULL AS index_name,
        NULL AS seq_in_index,
        NULL AS cardinality,
        NULL AS index_type
    FROM
        INFORMATION_SCHEMA.TABLE_CONSTRAINTS TC
    JOIN
        INFORMATION_SCHEMA.KEY_COLUMN_USAGE KCU
    ON
        TC.CONSTRAINT_NAME = KCU.CONSTRAINT_NAME
        AND TC.TABLE_SCHEMA = KCU.TABLE_SCHEMA
        AND TC.TABLE_NAME = KCU.TABLE_NAME
    JOIN
        INFORMATION_SCHEMA.COLUMNS C
    ON
        KCU.COLUMN_NAME = C.COLUMN_NAME
        AND KCU.TABLE_NAME = C.TABLE_NAME
        AND KCU.TABLE_SCHEMA = C.TABLE_SCHEMA
    WHERE
        TC.TABLE_NAME = :table_name
        AND TC.TABLE_SCHEMA = DATABASE()
        AND TC.CONSTRAINT_TYPE NOT IN ('PRIMARY KEY', 'CHECK')
    UNION ALL
    SELECT
        NULL AS constraint_name,
        NULL AS constraint_type,
        COLUMN_NAME AS column_name,
        SEQ_IN_INDEX AS ordinal_position,
        NULL AS referenced_table_name,
        NULL AS referenced_column_name,
        INDEX_NAME AS index_name,
        SEQ_IN_INDEX AS seq_in_index,
        CARDINALITY AS cardinality,
        INDEX_TYPE AS index_type
    FROM
        INFORMATION_SCHEMA.STATISTICS
    WHERE
        TABLE_NAME = :table_name
        AND TABLE_SCHEMA = DATABASE()
) AS combined_data
ORDER BY
    constraint_name, ordinal_position
"""


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class IntrospectionConnectionError(RuntimeError):
    """Raised when no connection to the database can be established."""

    def __init__(self, url: str, reason: str) -> None:
        self.url: str = url
        self.reason: str = reason
        super().__init__(f"Could not connect to {url}: {reason}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def normalise_url(url: str) -> str:
    """
    Rewrite registry-style ``mysql://`` URLs for the PyMySQL driver.

    Examples:
        >>> normalise_url("mysql://root:pw@localhost:3306/shop")
        'mysql+pymysql://root:pw@localhost:3306/shop'
        >>> normalise_url("mysql+mysqldb://localhost/shop")
        'mysql+mysqldb://localhost/shop'
    """
    if url.startswith(_REGISTRY_SCHEME):
        return _DRIVER_SCHEME + url[len(_REGISTRY_SCHEME):]
    return url


def quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


def group_keys(rows: Sequence[ConstraintRow]) -> List[Key]:
    """
    Collapse constraint rows into ``Key`` entries.

    Unique constraints become one ``UniqueComposite`` per constraint name
    (first-seen order, columns in row order).  Rows naming a referenced
    table and column become one ``ForeignKey`` each, in row order, so the
    column pairs of a composite foreign key stay adjacent.
    """
    unique_columns: Dict[str, List[str]] = {}
    for row in rows:
        if row.is_unique and row.constraint_name and row.column_name:
            unique_columns.setdefault(row.constraint_name, []).append(row.column_name)

    keys: List[Key] = [
        UniqueComposite(constraint_name=name, columns=columns)
        for name, columns in unique_columns.items()
    ]
    for row in rows:
        if row.is_foreign:
            keys.append(
                ForeignKey(
                    constraint_name=row.constraint_name,
                    column=row.column_name,
                    referenced_table=row.referenced_table_name,
                    referenced_column=row.referenced_column_name,
                )
            )
    return keys


# ---------------------------------------------------------------------------
# Introspector
# ---------------------------------------------------------------------------


class Introspector:
    """
    One introspection run against one database.

    Args:
        url: Connection URL, registry (``mysql://``) or SQLAlchemy form.
        engine: Pre-built engine; when omitted one is created from *url*.
    """

    def __init__(self, url: str, *, engine: Optional[Engine] = None) -> None:
        self.url: str = url
        self._engine: Optional[Engine] = engine

    # -- Per-table queries -----------------------------------------------------

    def list_tables(self, conn: Connection) -> List[str]:
        rows: Sequence[Any] = conn.execute(text(SHOW_TABLES_SQL)).all()
        return [str(row[0]) for row in rows]

    def describe_table(self, conn: Connection, table_name: str) -> List[Column]:
        rows: Sequence[Any] = conn.execute(
            text(f"DESCRIBE {quote_identifier(table_name)}")
        ).all()
        return [Column.from_describe_row(row) for row in rows]

    def fetch_constraints(self, conn: Connection, table_name: str) -> List[ConstraintRow]:
        rows: Sequence[Any] = conn.execute(
            text(CONSTRAINTS_SQL), {"table_name": table_name}
        ).all()
        return [ConstraintRow.from_row(row) for row in rows]

    def _record(
        self, result: IntrospectionResult, conn: Connection, table: str, exc: Exception
    ) -> None:
        report: TableErrorReport = TableErrorReport(table=table, error=str(exc))
        result.errors.append(report)
        logger.warning("Introspection failure recovered: %s", report)
        conn.rollback()

    def _introspect(self, conn: Connection, result: IntrospectionResult) -> None:
        try:
            table_names: List[str] = self.list_tables(conn)
        except SQLAlchemyError as exc:
            self._record(result, conn, ALL_TABLES_LABEL, exc)
            return

        logger.info("Introspecting %d table(s).", len(table_names))
        for table_name in table_names:
            try:
                columns: List[Column] = self.describe_table(conn, table_name)
                rows: List[ConstraintRow] = self.fetch_constraints(conn, table_name)
            except SQLAlchemyError as exc:
                self._record(result, conn, table_name, exc)
                continue

            if not columns:
                logger.debug("Table '%s' has no columns, omitted.", table_name)
                continue
            result.tables.append(
                Table(name=table_name, columns=columns, keys=group_keys(rows))
            )

    # -- Entry point -----------------------------------------------------------

    def run(self) -> IntrospectionResult:
        """
        Introspect every table of the database.

        An engine created here from the URL is disposed before returning;
        an injected engine is left open for its owner.

        Raises:
            IntrospectionConnectionError: if the database cannot be reached.
        """
        result: IntrospectionResult = IntrospectionResult()
        owns_engine: bool = self._engine is None
        try:
            engine: Engine = self._engine or create_engine(normalise_url(self.url))
        except SQLAlchemyError as exc:
            logger.error("Engine for %s could not be created: %s", self.url, exc)
            raise IntrospectionConnectionError(self.url, str(exc)) from exc

        try:
            try:
                conn: Connection = engine.connect()
            except SQLAlchemyError as exc:
                logger.error("Connection to %s failed: %s", self.url, exc)
                raise IntrospectionConnectionError(self.url, str(exc)) from exc
            with conn:
                self._introspect(conn, result)
        finally:
            if owns_engine:
                engine.dispose()

        logger.info(
            "Introspection complete: %d table(s), %d error(s).",
            len(result.tables),
            len(result.errors),
        )
        return result


def get_table_descriptions(
    url: str, *, engine: Optional[Engine] = None
) -> IntrospectionResult:
    """Convenience wrapper: ``Introspector(url, engine=engine).run()``."""
    return Introspector(url, engine=engine).run()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ALL_TABLES_LABEL",
    "SHOW_TABLES_SQL",
    "CONSTRAINTS_SQL",
    "IntrospectionConnectionError",
    "normalise_url",
    "quote_identifier",
    "group_keys",
    "Introspector",
    "get_table_descriptions",
]

logger.debug("mysqltranslate.introspector loaded.")

# File: mysqltranslate/models.py
"""
MySQL Translate - Catalog Data Models
=======================================
Pydantic V2 models describing what the introspector reads out of a MySQL
catalog: tables, their columns and their grouped keys.  These records are
the single input to every translator (JSON and Prisma alike).

A ``Table`` list is built fresh for every sync / view operation and is never
cached across calls.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class KeyFlag(str, Enum):
    """Value of the ``Key`` column of ``DESCRIBE <table>``."""

    NONE = ""
    PRIMARY = "PRI"
    UNIQUE = "UNI"
    MULTIPLE = "MUL"

    @classmethod
    def from_catalog(cls, raw: Optional[str]) -> "KeyFlag":
        value: str = (raw or "").strip().upper()
        try:
            return cls(value)
        except ValueError:
            logger.debug("Unknown catalog key flag %r, treating as none.", raw)
            return cls.NONE


class AcceptedFormat(str, Enum):
    """Output formats a database can be bound to."""

    JSON = "json"
    PRISMA = "prisma"

    @classmethod
    def from_string(cls, value: str) -> "AcceptedFormat":
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise ValueError(
                f"Unsupported format '{value}'. "
                f"Expected one of: {', '.join(f.value for f in cls)}."
            ) from exc

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Shared configuration
# ---------------------------------------------------------------------------

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    use_enum_values=False,
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------


class Column(BaseModel):
    """
    One row of ``DESCRIBE <table>``.

    Immutable once read: translators derive everything else from it.
    """

    model_config = _FROZEN_CONFIG

    field: str = Field(..., min_length=1, description="Column name.")
    sql_type: str = Field(..., min_length=1, description="Raw catalog type, e.g. 'varchar(191)'.")
    nullable: bool = Field(default=True, description="Null == 'YES'.")
    key_flag: KeyFlag = Field(default=KeyFlag.NONE, description="PRI / UNI / MUL.")
    default_literal: Optional[str] = Field(
        default=None, description="Raw default value as reported by the catalog."
    )
    extra: str = Field(default="", description="Extra column, e.g. 'auto_increment'.")

    @classmethod
    def from_describe_row(cls, row: Sequence[Any]) -> "Column":
        """Build from a ``(Field, Type, Null, Key, Default, Extra)`` tuple."""
        field_name, sql_type, null, key, default, extra = tuple(row)[:6]
        return cls(
            field=str(field_name),
            sql_type=_as_text(sql_type),
            nullable=str(null).upper() == "YES",
            key_flag=KeyFlag.from_catalog(_as_text(key)),
            default_literal=None if default is None else _as_text(default),
            extra=_as_text(extra),
        )

    @property
    def is_primary(self) -> bool:
        return self.key_flag == KeyFlag.PRIMARY

    @property
    def is_auto_increment(self) -> bool:
        return "auto_increment" in self.extra.lower()

    def __repr__(self) -> str:
        null_flag: str = "NULL" if self.nullable else "NOT NULL"
        key: str = f" {self.key_flag.value}" if self.key_flag.value else ""
        return f"<Column {self.field} {self.sql_type}{key} {null_flag}>"


def _as_text(value: Any) -> str:
    # Some drivers hand back bytes for catalog columns.
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return str(value)


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class ForeignKey(BaseModel):
    """One column pair of a foreign-key constraint."""

    model_config = _FROZEN_CONFIG

    kind: Literal["foreign"] = "foreign"
    constraint_name: str = Field(..., min_length=1)
    column: str = Field(..., min_length=1)
    referenced_table: str = Field(..., min_length=1)
    referenced_column: str = Field(..., min_length=1)

    def __repr__(self) -> str:
        return (
            f"<ForeignKey {self.constraint_name}: {self.column} → "
            f"{self.referenced_table}.{self.referenced_column}>"
        )


class UniqueComposite(BaseModel):
    """A unique constraint, collapsed across all of its catalog rows."""

    model_config = _FROZEN_CONFIG

    kind: Literal["unique"] = "unique"
    constraint_name: str = Field(..., min_length=1)
    columns: List[str] = Field(..., min_length=1)

    @property
    def is_composite(self) -> bool:
        return len(self.columns) > 1


Key = Union[ForeignKey, UniqueComposite]


class ConstraintRow(BaseModel):
    """
    A single row of the combined constraint / index statistics query.

    Rows from ``INFORMATION_SCHEMA.STATISTICS`` carry no constraint name;
    rows from ``TABLE_CONSTRAINTS`` carry no index columns.
    """

    model_config = _FROZEN_CONFIG

    constraint_name: Optional[str] = None
    constraint_type: Optional[str] = None
    column_name: Optional[str] = None
    ordinal_position: Optional[int] = None
    referenced_table_name: Optional[str] = None
    referenced_column_name: Optional[str] = None
    index_name: Optional[str] = None
    seq_in_index: Optional[int] = None
    cardinality: Optional[int] = None
    index_type: Optional[str] = None

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "ConstraintRow":
        names: List[str] = list(cls.model_fields.keys())
        values: Dict[str, Any] = {}
        for name, value in zip(names, tuple(row)):
            if isinstance(value, (bytes, bytearray)):
                value = value.decode("utf-8")
            values[name] = value
        return cls(**values)

    @property
    def is_foreign(self) -> bool:
        return (
            self.constraint_name is not None
            and self.column_name is not None
            and self.referenced_table_name is not None
            and self.referenced_column_name is not None
        )

    @property
    def is_unique(self) -> bool:
        return (self.constraint_type or "").upper() == "UNIQUE"


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class Table(BaseModel):
    """
    One catalog table with at least one describable column.

    Tables whose ``DESCRIBE`` query returned nothing are never constructed.
    """

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Table name.")
    columns: List[Column] = Field(..., min_length=1, description="Catalog order.")
    keys: List[Key] = Field(default_factory=list, description="Grouped keys.")

    @field_validator("columns")
    @classmethod
    def _unique_column_names(cls, v: List[Column]) -> List[Column]:
        names: List[str] = [c.field for c in v]
        if len(names) != len(set(names)):
            dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Duplicate column names: {dupes}")
        return v

    @property
    def primary_key_columns(self) -> List[str]:
        return [c.field for c in self.columns if c.is_primary]

    @property
    def foreign_keys(self) -> List[ForeignKey]:
        return [k for k in self.keys if isinstance(k, ForeignKey)]

    @property
    def unique_composites(self) -> List[UniqueComposite]:
        return [k for k in self.keys if isinstance(k, UniqueComposite)]

    def get_column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.field == name:
                return column
        return None

    def __repr__(self) -> str:
        return f"<Table {self.name} ({len(self.columns)} cols, {len(self.keys)} keys)>"


# ---------------------------------------------------------------------------
# Introspection results
# ---------------------------------------------------------------------------


class TableErrorReport(BaseModel):
    """A per-table query failure, recovered by skipping the table."""

    model_config = _FROZEN_CONFIG

    table: str
    error: str

    def __str__(self) -> str:
        return f"Table: {self.table}, Error: {self.error}"


class IntrospectionResult(BaseModel):
    """Tables read from one database plus the failures that were skipped."""

    model_config = ConfigDict(frozen=False, extra="forbid")

    tables: List[Table] = Field(default_factory=list)
    errors: List[TableErrorReport] = Field(default_factory=list)

    @property
    def table_names(self) -> List[str]:
        return [t.name for t in self.tables]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "KeyFlag",
    "AcceptedFormat",
    "Column",
    "ForeignKey",
    "UniqueComposite",
    "Key",
    "ConstraintRow",
    "Table",
    "TableErrorReport",
    "IntrospectionResult",
]

logger.debug("mysqltranslate.models loaded — %d public symbols.", len(__all__))

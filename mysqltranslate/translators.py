# File: mysqltranslate/translators.py
"""
MySQL Translate - Translators & Façade
========================================
One translator per output format, all sharing the ``TranslatorBehaviour``
contract::

    write_to_disk(tables)       build fresh, serialise, overwrite the file
    load_from_disk()            parse the bound file into the disk cache
    load_from_database(tables)  rebuild the database cache
    render_string()             labelled text of whichever caches are set

A translator holds at most one value loaded from disk and one built from
the database.  The disk cache is first-load-wins; the database cache is
always replaced.

I/O failures never escape ``write_to_disk`` / ``load_from_disk``: they are
reported in a ``TranslatorResult``.  ``RelationParseError`` from the DSL
parser does escape, since it aborts the whole parse.

The format tag picks the class through ``_TRANSLATOR_CLASSES``; nothing
here inspects translator types at runtime.
"""

from __future__ import annotations

import abc
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Dict, Generic, List, Optional, Sequence, Type, TypeVar, Union

from mysqltranslate.builder import build_schema
from mysqltranslate.models import AcceptedFormat, Column, Table
from mysqltranslate.parser import parse_schema
from mysqltranslate.schema import Datasource, Generator, PrismaSchema
from mysqltranslate.serializer import render_schema
from mysqltranslate.utils import PathLike, read_file, write_file
from mysqltranslate.validators import ValidationResult, validate_schema

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate.translators")

DISK_LABEL: str = "disk schema:"
DB_LABEL: str = "db schema:"

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TranslatorResult:
    """Outcome of one disk operation of a translator."""

    success: bool
    format: AcceptedFormat
    path: str
    error: Optional[str] = None
    bytes_written: int = 0

    def __str__(self) -> str:
        if self.success:
            return f"[{self.format.value}] {self.path}: ok ({self.bytes_written} bytes)"
        return f"[{self.format.value}] {self.path}: FAILED — {self.error}"


# ---------------------------------------------------------------------------
# Shared behaviour
# ---------------------------------------------------------------------------


class TranslatorBehaviour(abc.ABC, Generic[T]):
    """Base class for one output format bound to one file."""

    format: ClassVar[AcceptedFormat]

    def __init__(
        self,
        path: PathLike,
        generator: Optional[Generator] = None,
        datasource: Optional[Datasource] = None,
    ) -> None:
        self.path: Path = Path(path)
        # Header blocks, rendered only by formats that have them.
        self.generator: Generator = generator or Generator()
        self.datasource: Datasource = datasource or Datasource()
        self.disk_value: Optional[T] = None
        self.db_value: Optional[T] = None

    # -- Format hooks ----------------------------------------------------------

    @abc.abstractmethod
    def get_translation(self, tables: Sequence[Table]) -> T:
        """Build the format-specific value for *tables*."""

    @abc.abstractmethod
    def to_text(self, value: T) -> str:
        """Serialise a value to the file's text form."""

    @abc.abstractmethod
    def from_text(self, text: str) -> Optional[T]:
        """Parse file text; ``None`` when the content is unusable."""

    def check(self, value: T) -> None:
        """Inspect a freshly built value before it is written."""

    # -- Operations ------------------------------------------------------------

    def _result(self, success: bool, error: Optional[str] = None, size: int = 0) -> TranslatorResult:
        return TranslatorResult(
            success=success,
            format=self.format,
            path=str(self.path),
            error=error,
            bytes_written=size,
        )

    def write_to_disk(self, tables: Sequence[Table]) -> TranslatorResult:
        """Build from *tables* and overwrite the bound file."""
        logger.info("Writing %s to %s", self.format.value, self.path)
        value: T = self.get_translation(tables)
        self.check(value)
        text: str = self.to_text(value)
        try:
            size: int = write_file(self.path, text)
        except OSError as exc:
            logger.error("Failed to write %s: %s", self.path, exc)
            return self._result(False, error=str(exc))
        return self._result(True, size=size)

    def load_from_disk(self) -> TranslatorResult:
        """Parse the bound file into the disk cache unless already cached."""
        if self.disk_value is not None:
            logger.debug("Disk value for %s already cached.", self.path)
            return self._result(True)
        try:
            text: str = read_file(self.path)
        except OSError as exc:
            logger.error("Failed to read %s: %s", self.path, exc)
            return self._result(False, error=str(exc))
        value: Optional[T] = self.from_text(text)
        if value is not None:
            self.disk_value = value
        return self._result(True)

    def load_from_database(self, tables: Sequence[Table]) -> None:
        self.db_value = self.get_translation(tables)

    def render_string(self) -> str:
        parts: List[str] = []
        if self.disk_value is not None:
            parts.append(f"{DISK_LABEL}\n\n{self.to_text(self.disk_value)}\n\n")
        if self.db_value is not None:
            parts.append(f"{DB_LABEL}\n\n{self.to_text(self.db_value)}\n\n")
        return "".join(parts)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.path}>"


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def describe_column(column: Column) -> str:
    """
    Render one column as ``"<type>[ <KEY>][ NOT NULL][ AUTO_INCREMENT]"``.

    ``int`` / primary / not null / auto_increment renders as
    ``int PRI NOT NULL AUTO_INCREMENT``.
    """
    text: str = column.sql_type
    if column.key_flag.value:
        text += f" {column.key_flag.value}"
    if not column.nullable:
        text += " NOT NULL"
    if column.is_auto_increment:
        text += " AUTO_INCREMENT"
    return text


class JsonTranslator(TranslatorBehaviour[Dict[str, Any]]):
    """``{"tables": {"<table>": {"<column>": "<description>"}}}``."""

    format: ClassVar[AcceptedFormat] = AcceptedFormat.JSON

    def get_translation(self, tables: Sequence[Table]) -> Dict[str, Any]:
        return {
            "tables": {
                table.name: {c.field: describe_column(c) for c in table.columns}
                for table in tables
            }
        }

    def to_text(self, value: Dict[str, Any]) -> str:
        return json.dumps(value, indent=2, ensure_ascii=False)

    def from_text(self, text: str) -> Optional[Dict[str, Any]]:
        try:
            value: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("Could not decode JSON in %s, skipping load: %s", self.path, exc)
            return None
        if value is None:
            return None
        return value


# ---------------------------------------------------------------------------
# Prisma DSL
# ---------------------------------------------------------------------------


class PrismaTranslator(TranslatorBehaviour[PrismaSchema]):
    """Schema-DSL translator, built on the builder / serializer / parser."""

    format: ClassVar[AcceptedFormat] = AcceptedFormat.PRISMA

    def get_translation(self, tables: Sequence[Table]) -> PrismaSchema:
        return build_schema(
            tables,
            generator=self.generator.model_copy(),
            datasource=self.datasource.model_copy(),
        )

    def to_text(self, value: PrismaSchema) -> str:
        return render_schema(value)

    def from_text(self, text: str) -> Optional[PrismaSchema]:
        return parse_schema(text)

    def check(self, value: PrismaSchema) -> None:
        validation: ValidationResult = validate_schema(value)
        for issue in validation.issues:
            logger.warning("Schema check for %s: %s", self.path, issue)


# ---------------------------------------------------------------------------
# Façade
# ---------------------------------------------------------------------------

_TRANSLATOR_CLASSES: Dict[AcceptedFormat, Type[TranslatorBehaviour[Any]]] = {
    AcceptedFormat.JSON: JsonTranslator,
    AcceptedFormat.PRISMA: PrismaTranslator,
}


def get_translator(
    fmt: Union[AcceptedFormat, str],
    path: PathLike,
    generator: Optional[Generator] = None,
    datasource: Optional[Datasource] = None,
) -> TranslatorBehaviour[Any]:
    """
    Return the translator for *fmt* bound to *path*.

    ``generator`` / ``datasource`` only apply to the DSL format.

    Raises:
        ValueError: for an unknown format string.
    """
    if not isinstance(fmt, AcceptedFormat):
        fmt = AcceptedFormat.from_string(fmt)
    translator_cls: Type[TranslatorBehaviour[Any]] = _TRANSLATOR_CLASSES[fmt]
    return translator_cls(path, generator=generator, datasource=datasource)


def sync_one(
    fmt: Union[AcceptedFormat, str],
    path: PathLike,
    tables: Sequence[Table],
    generator: Optional[Generator] = None,
    datasource: Optional[Datasource] = None,
) -> TranslatorResult:
    """Write *tables* to *path* in *fmt*."""
    translator: TranslatorBehaviour[Any] = get_translator(
        fmt, path, generator=generator, datasource=datasource
    )
    return translator.write_to_disk(tables)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DISK_LABEL",
    "DB_LABEL",
    "TranslatorResult",
    "TranslatorBehaviour",
    "describe_column",
    "JsonTranslator",
    "PrismaTranslator",
    "get_translator",
    "sync_one",
]

logger.debug("mysqltranslate.translators loaded — %d public symbols.", len(__all__))

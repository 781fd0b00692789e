# File: mysqltranslate/__init__.py
"""
MySQL Translate — MySQL Schema Introspection & Translation
============================================================

Reads the catalog of a live MySQL database and keeps two external
representations of its structure in sync: a JSON description and a
Prisma-style schema file.  A local session registry binds each database
to its output files.

Architecture overview::

    ┌──────────────┐     ┌───────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ DatabaseSync  │────▶│   Introspector   │
    │   (cli.py)   │     │   (sync.py)   │     │ (introspector.py)│
    └──────────────┘     └───────┬───────┘     └──────────────────┘
                                 │
                    ┌────────────┼────────────┐
                    ▼            ▼            ▼
             ┌──────────┐ ┌────────────┐ ┌──────────┐
             │ session  │ │translators │ │  config  │
             │  (.py)   │ │   (.py)    │ │  (.py)   │
             └──────────┘ └─────┬──────┘ └──────────┘
                                │
             builder ── serializer ── parser ── type_mapper ── schema

Usage::

    # As a library
    from mysqltranslate import get_table_descriptions, build_schema, render_schema
    result = get_table_descriptions("mysql://root:pw@localhost:3306/shop")
    print(render_schema(build_schema(result.tables)))

    # From the command line
    python -m mysqltranslate sync --verbose

Public API:
    - get_table_descriptions — Catalog introspection
    - build_schema / render_schema / parse_schema — DSL round trip
    - get_translator / sync_one — Per-format façade
    - SessionRegistry, DatabaseSync, TranslateConfig
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from mysqltranslate.models import (
    AcceptedFormat,
    Column,
    ForeignKey,
    IntrospectionResult,
    KeyFlag,
    Table,
    TableErrorReport,
    UniqueComposite,
)
from mysqltranslate.schema import (
    Datasource,
    Field,
    Generator,
    Model,
    PrismaSchema,
    Relation,
    UniqueFlag,
)
from mysqltranslate.type_mapper import map_db_annotation, map_default, map_field_type
from mysqltranslate.builder import build_model, build_schema
from mysqltranslate.serializer import render_model, render_schema
from mysqltranslate.parser import RelationParseError, parse_file, parse_schema
from mysqltranslate.validators import ValidationResult, validate_schema
from mysqltranslate.introspector import (
    IntrospectionConnectionError,
    Introspector,
    get_table_descriptions,
)
from mysqltranslate.translators import (
    JsonTranslator,
    PrismaTranslator,
    TranslatorBehaviour,
    TranslatorResult,
    get_translator,
    sync_one,
)
from mysqltranslate.config import TranslateConfig, load_config_file
from mysqltranslate.session import DatabaseEntry, DiskMapping, SessionRegistry
from mysqltranslate.sync import DatabaseSync, SyncReport

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    # Catalog records
    "AcceptedFormat",
    "Column",
    "ForeignKey",
    "IntrospectionResult",
    "KeyFlag",
    "Table",
    "TableErrorReport",
    "UniqueComposite",
    # DSL object model
    "Datasource",
    "Field",
    "Generator",
    "Model",
    "PrismaSchema",
    "Relation",
    "UniqueFlag",
    # Mapping, building, rendering, parsing
    "map_field_type",
    "map_db_annotation",
    "map_default",
    "build_model",
    "build_schema",
    "render_model",
    "render_schema",
    "RelationParseError",
    "parse_file",
    "parse_schema",
    "ValidationResult",
    "validate_schema",
    # Introspection
    "IntrospectionConnectionError",
    "Introspector",
    "get_table_descriptions",
    # Translators
    "JsonTranslator",
    "PrismaTranslator",
    "TranslatorBehaviour",
    "TranslatorResult",
    "get_translator",
    "sync_one",
    # Session, config, sync
    "TranslateConfig",
    "load_config_file",
    "DatabaseEntry",
    "DiskMapping",
    "SessionRegistry",
    "DatabaseSync",
    "SyncReport",
]

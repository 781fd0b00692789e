# File: mysqltranslate/builder.py
"""
MySQL Translate - Schema Builder
==================================
Converts introspected ``Table`` records into a ``PrismaSchema``.

Per table::

    1. One scalar field per column (catalog order), via the type mapper.
    2. One relation field per foreign-key constraint.
    3. ``@@id([...])`` when the primary key spans more than one column.
    4. ``@@unique([...], map: "...")`` for multi-column unique constraints.
    5. Column widths recomputed from the final field set.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from mysqltranslate.models import Column, ForeignKey, Table, UniqueComposite
from mysqltranslate.schema import (
    Datasource,
    Field,
    Generator,
    Model,
    PrismaSchema,
    Relation,
    UniqueFlag,
)
from mysqltranslate.type_mapper import (
    OPTIONAL_MARKER,
    key_flag_semantics,
    map_db_annotation,
    map_default,
    map_field_type,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate.builder")

DIRECTIVE_INDENT: str = "  "


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


def build_field(column: Column) -> Field:
    """Translate one catalog column into a scalar field."""
    field_type: str = map_field_type(column.sql_type, column.nullable)
    is_unique, is_id = key_flag_semantics(column.key_flag)
    return Field(
        name=column.field,
        type=field_type,
        is_array=False,
        is_required=not column.nullable,
        is_id=is_id,
        unique=UniqueFlag() if is_unique else None,
        default_expr=map_default(column.default_literal, field_type),
        db_type_annotation=map_db_annotation(column.sql_type),
    )


def _group_foreign_keys(keys: Sequence[ForeignKey]) -> Dict[str, List[ForeignKey]]:
    grouped: Dict[str, List[ForeignKey]] = {}
    for key in keys:
        grouped.setdefault(key.constraint_name, []).append(key)
    return grouped


def _relation_field_name(
    referenced_table: str, columns: List[str], taken: Sequence[str]
) -> str:
    name: str = referenced_table
    if name in taken:
        name = f"{referenced_table}_{'_'.join(columns)}"
    return name


def build_relation_fields(table: Table, taken: Sequence[str]) -> List[Field]:
    """
    Build one relation field per foreign-key constraint of *table*.

    A composite foreign key yields a single field whose relation lists all
    of its columns in ordinal order.
    """
    fields: List[Field] = []
    used: List[str] = list(taken)
    for constraint_name, keys in _group_foreign_keys(table.foreign_keys).items():
        local_columns: List[str] = [k.column for k in keys]
        referenced: str = keys[0].referenced_table
        nullable: bool = any(
            (table.get_column(c) is None) or table.get_column(c).nullable
            for c in local_columns
        )
        name: str = _relation_field_name(referenced, local_columns, used)
        relation: Relation = Relation.from_foreign_key(
            fields=local_columns,
            references=[k.referenced_column for k in keys],
            map_name=constraint_name,
        )
        fields.append(
            Field(
                name=name,
                type=referenced + (OPTIONAL_MARKER if nullable else ""),
                is_required=not nullable,
                relation=relation,
            )
        )
        used.append(name)
    return fields


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------


def build_id_directive(id_field_names: Sequence[str]) -> str:
    return f"{DIRECTIVE_INDENT}@@id([{', '.join(id_field_names)}])"


def build_unique_directive(key: UniqueComposite) -> str:
    return (
        f"{DIRECTIVE_INDENT}@@unique([{', '.join(key.columns)}], "
        f'map: "{key.constraint_name}")'
    )


# ---------------------------------------------------------------------------
# Models & schema
# ---------------------------------------------------------------------------


def build_model(table: Table) -> Model:
    """Translate one table into a model block."""
    model: Model = Model(name=table.name)
    for column in table.columns:
        model.fields.append(build_field(column))

    taken: List[str] = [f.name for f in model.fields]
    model.fields.extend(build_relation_fields(table, taken))

    id_names: List[str] = table.primary_key_columns
    if len(id_names) > 1:
        # Columns of a composite primary key are not unique on their own.
        for field in model.id_fields:
            field.unique = None
        model.directives.append(build_id_directive(id_names))

    for key in table.unique_composites:
        if key.is_composite:
            model.directives.append(build_unique_directive(key))

    model.recompute_widths()
    logger.debug(
        "Built model '%s': %d fields, %d directives.",
        model.name,
        len(model.fields),
        len(model.directives),
    )
    return model


def build_schema(
    tables: Sequence[Table],
    generator: Optional[Generator] = None,
    datasource: Optional[Datasource] = None,
) -> PrismaSchema:
    """Build a full schema, one model per table, in table order."""
    schema: PrismaSchema = PrismaSchema(
        generator=generator or Generator(),
        datasource=datasource or Datasource(),
    )
    for table in tables:
        schema.add_model(build_model(table))
    logger.info("Built Prisma schema with %d model(s).", len(schema.models))
    return schema


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DIRECTIVE_INDENT",
    "build_field",
    "build_relation_fields",
    "build_id_directive",
    "build_unique_directive",
    "build_model",
    "build_schema",
]

logger.debug("mysqltranslate.builder loaded.")

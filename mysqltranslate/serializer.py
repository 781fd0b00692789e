# File: mysqltranslate/serializer.py
"""
MySQL Translate - DSL Serializer
==================================
Renders a ``PrismaSchema`` to schema-DSL text.

Layout of one model block::

    model User {
      id          Int        @id @unique @db.Int
      email       String     @unique @db.VarChar(191)
      created_at  DateTime?  @default(now()) @db.Timestamp

      @@unique([email, created_at], map: "users_email_created_key")
    }

Field names are padded to ``Model.name_column_width`` and types to
``Model.type_column_width``, so every attribute token of a model starts on
the same column.  Attribute order is fixed: ``@id``, ``@unique``,
``@default``, ``@db.*``, ``@relation``.  ``mysqltranslate.parser`` is the
exact inverse of this module.
"""

from __future__ import annotations

import logging
from typing import List

from mysqltranslate.schema import (
    Datasource,
    Field,
    Generator,
    Model,
    PrismaSchema,
    Relation,
    UniqueFlag,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate.serializer")

FIELD_INDENT: str = "  "
DATASOURCE_URL: str = 'env("DATABASE_URL")'


# ---------------------------------------------------------------------------
# Header blocks
# ---------------------------------------------------------------------------


def render_generator(generator: Generator) -> str:
    return f'generator {generator.name} {{\n  provider = "{generator.provider}"\n}}'


def render_datasource(datasource: Datasource) -> str:
    return (
        f"datasource {datasource.name} {{\n"
        f'  provider = "{datasource.provider}"\n'
        f"  url      = {DATASOURCE_URL}\n"
        f"}}"
    )


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


def _render_list(values: List[str]) -> str:
    return f"[{', '.join(values)}]"


def render_relation(relation: Relation) -> str:
    """
    Render a relation attribute.

    Only the parts that are set are emitted, in the order ``fields``,
    ``references``, ``map``, ``onDelete``, ``onUpdate``.

    Example:
        >>> render_relation(Relation(fields=["userId"], references=["id"], on_delete="Cascade"))
        '@relation(fields: [userId], references: [id], onDelete: Cascade)'
    """
    parts: List[str] = []
    if relation.fields is not None:
        parts.append(f"fields: {_render_list(relation.fields)}")
    if relation.references is not None:
        parts.append(f"references: {_render_list(relation.references)}")
    if relation.map_name is not None:
        parts.append(f'map: "{relation.map_name}"')
    if relation.on_delete is not None:
        parts.append(f"onDelete: {relation.on_delete}")
    if relation.on_update is not None:
        parts.append(f"onUpdate: {relation.on_update}")
    return f"@relation({', '.join(parts)})"


def render_unique(unique: UniqueFlag) -> str:
    if unique.map_name is None:
        return "@unique"
    return f'@unique(map: "{unique.map_name}")'


def render_attributes(field: Field, id_field_count: int) -> List[str]:
    """Return the attribute tokens of *field* in their fixed order."""
    tokens: List[str] = []
    # Composite keys are expressed by an @@id directive instead.
    if field.is_id and id_field_count == 1:
        tokens.append("@id")
    if field.unique is not None:
        tokens.append(render_unique(field.unique))
    if field.default_expr is not None:
        tokens.append(f"@default({field.default_expr})")
    if field.db_type_annotation is not None:
        tokens.append(f"@db.{field.db_type_annotation}")
    if field.relation is not None:
        tokens.append(render_relation(field.relation))
    return tokens


# ---------------------------------------------------------------------------
# Fields & models
# ---------------------------------------------------------------------------


def render_field(
    field: Field, name_width: int, type_width: int, id_field_count: int
) -> str:
    """Render one field line, without indentation or newline."""
    line: str = (
        f"{field.name.ljust(name_width)} {field.type.ljust(type_width)} "
        f"{' '.join(render_attributes(field, id_field_count))}"
    )
    return line.rstrip()


def render_model(model: Model) -> str:
    lines: List[str] = [f"model {model.name} {{"]
    id_count: int = model.id_field_count
    for field in model.fields:
        lines.append(
            FIELD_INDENT
            + render_field(
                field, model.name_column_width, model.type_column_width, id_count
            )
        )
    if model.directives:
        lines.append("")
        lines.extend(model.directives)
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_schema(schema: PrismaSchema) -> str:
    """Render the complete DSL file."""
    chunks: List[str] = [
        render_generator(schema.generator),
        "\n\n",
        render_datasource(schema.datasource),
        "\n\n",
    ]
    for model in schema.models:
        chunks.append(render_model(model))
        chunks.append("\n")
    text: str = "".join(chunks)
    logger.debug(
        "Rendered schema: %d model(s), %d characters.", len(schema.models), len(text)
    )
    return text


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "FIELD_INDENT",
    "DATASOURCE_URL",
    "render_generator",
    "render_datasource",
    "render_relation",
    "render_unique",
    "render_attributes",
    "render_field",
    "render_model",
    "render_schema",
]

logger.debug("mysqltranslate.serializer loaded.")

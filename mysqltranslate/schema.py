# File: mysqltranslate/schema.py
"""
MySQL Translate - Prisma Schema Object Model
==============================================
Pydantic V2 models for the Prisma-style schema DSL::

    PrismaSchema
    ├── Generator      generator client { provider = "prisma-client-js" }
    ├── Datasource     datasource db { provider = "mysql" ... }
    └── Model[]        model User { <fields> <directives> }
        └── Field[]
            ├── UniqueFlag   @unique / @unique(map: "...")
            └── Relation     @relation(fields: [...], references: [...], ...)

A ``PrismaSchema`` is produced either by ``mysqltranslate.builder`` (from
introspected tables) or by ``mysqltranslate.parser`` (from a file on disk)
and rendered by ``mysqltranslate.serializer``.

Invariant: ``Model.name_column_width`` / ``Model.type_column_width`` are a
formatting cache, recomputed by ``Model.recompute_widths()`` whenever the
field list changes.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate.schema")

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_GENERATOR_NAME: str = "client"
DEFAULT_GENERATOR_PROVIDER: str = "prisma-client-js"
DEFAULT_DATASOURCE_NAME: str = "db"
DEFAULT_DATASOURCE_PROVIDER: str = "mysql"

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Header blocks
# ---------------------------------------------------------------------------


class Generator(BaseModel):
    """The ``generator`` block."""

    model_config = _SHARED_CONFIG

    name: str = DEFAULT_GENERATOR_NAME
    provider: str = DEFAULT_GENERATOR_PROVIDER


class Datasource(BaseModel):
    """The ``datasource`` block.  The url is always ``env("DATABASE_URL")``."""

    model_config = _SHARED_CONFIG

    name: str = DEFAULT_DATASOURCE_NAME
    provider: str = DEFAULT_DATASOURCE_PROVIDER


# ---------------------------------------------------------------------------
# Field attributes
# ---------------------------------------------------------------------------


class UniqueFlag(BaseModel):
    """``@unique`` with an optional constraint map name."""

    model_config = _SHARED_CONFIG

    map_name: Optional[str] = None


class Relation(BaseModel):
    """The arguments of a ``@relation(...)`` attribute."""

    model_config = _SHARED_CONFIG

    map_name: Optional[str] = None
    fields: Optional[List[str]] = None
    references: Optional[List[str]] = None
    on_update: Optional[str] = None
    on_delete: Optional[str] = None

    @property
    def is_meaningful(self) -> bool:
        return bool(self.fields or self.references or self.map_name)

    @classmethod
    def from_foreign_key(
        cls,
        fields: List[str],
        references: List[str],
        map_name: Optional[str] = None,
        on_delete: Optional[str] = None,
        on_update: Optional[str] = None,
    ) -> "Relation":
        """
        Build a relation from introspected key data.

        Raises:
            ValueError: if neither columns nor a constraint name are given.
        """
        relation: Relation = cls(
            map_name=map_name or None,
            fields=list(fields) or None,
            references=list(references) or None,
            on_delete=on_delete,
            on_update=on_update,
        )
        if not relation.is_meaningful:
            raise ValueError(
                "A relation needs 'fields'/'references' or a map name; got none."
            )
        return relation


# ---------------------------------------------------------------------------
# Fields & models
# ---------------------------------------------------------------------------


class Field(BaseModel):
    """
    One field line of a model block.

    ``type`` is the declared type exactly as written, including the ``?``
    and ``[]`` markers.  ``db_type_annotation`` is stored without its
    ``@db.`` prefix.
    """

    model_config = _SHARED_CONFIG

    name: str = PydanticField(..., min_length=1)
    type: str = PydanticField(..., min_length=1)
    is_array: bool = False
    is_required: bool = True
    is_id: bool = False
    unique: Optional[UniqueFlag] = None
    default_expr: Optional[str] = None
    db_type_annotation: Optional[str] = None
    relation: Optional[Relation] = None

    def __repr__(self) -> str:
        return f"<Field {self.name} {self.type}{' @id' if self.is_id else ''}>"


class Model(BaseModel):
    """One ``model`` block: a table's DSL representation."""

    model_config = _SHARED_CONFIG

    name: str = PydanticField(..., min_length=1)
    fields: List[Field] = PydanticField(default_factory=list)
    directives: List[str] = PydanticField(default_factory=list)
    name_column_width: int = PydanticField(default=0, ge=0)
    type_column_width: int = PydanticField(default=0, ge=0)

    # -- Field list ----------------------------------------------------------

    def add_field(self, field: Field) -> None:
        self.fields.append(field)
        self.recompute_widths()

    def get_field(self, name: str) -> Optional[Field]:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def recompute_widths(self) -> None:
        """Refresh the column widths from the current field set."""
        if not self.fields:
            self.name_column_width = 0
            self.type_column_width = 0
            return
        self.name_column_width = max(len(f.name) for f in self.fields) + 1
        self.type_column_width = max(len(f.type) for f in self.fields) + 1

    # -- Id fields -----------------------------------------------------------

    @property
    def id_fields(self) -> List[Field]:
        return [f for f in self.fields if f.is_id]

    @property
    def id_field_count(self) -> int:
        return len(self.id_fields)

    def __repr__(self) -> str:
        return (
            f"<Model {self.name} ({len(self.fields)} fields, "
            f"{len(self.directives)} directives)>"
        )


class PrismaSchema(BaseModel):
    """The whole DSL file."""

    model_config = _SHARED_CONFIG

    generator: Generator = PydanticField(default_factory=Generator)
    datasource: Datasource = PydanticField(default_factory=Datasource)
    models: List[Model] = PydanticField(default_factory=list)

    def add_model(self, model: Model) -> None:
        self.models.append(model)

    def get_model(self, name: str) -> Optional[Model]:
        for model in self.models:
            if model.name == name:
                return model
        return None

    @property
    def model_names(self) -> List[str]:
        return [m.name for m in self.models]

    def __repr__(self) -> str:
        return f"<PrismaSchema {len(self.models)} models>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_GENERATOR_NAME",
    "DEFAULT_GENERATOR_PROVIDER",
    "DEFAULT_DATASOURCE_NAME",
    "DEFAULT_DATASOURCE_PROVIDER",
    "Generator",
    "Datasource",
    "UniqueFlag",
    "Relation",
    "Field",
    "Model",
    "PrismaSchema",
]

logger.debug("mysqltranslate.schema loaded — %d public symbols.", len(__all__))

# File: mysqltranslate/validators.py
"""
MySQL Translate - Schema Validators
=====================================
Cross-entity checks over a ``PrismaSchema``.  Pydantic already guarantees
the shape of every model; this module checks what only makes sense across
models and fields:

* duplicate model names and duplicate field names (a model with duplicate
  field names does not survive a parse round trip),
* models without fields,
* relations that name neither columns nor a constraint,
* ``@@id([...])`` directives naming fields that do not exist,
* relation fields whose type is not a model of the schema.

Every check returns a ``ValidationResult``; ``validate_schema`` merges
them.  Nothing here raises.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Set

from mysqltranslate.schema import PrismaSchema
from mysqltranslate.type_mapper import ARRAY_MARKER, OPTIONAL_MARKER

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate.validators")

_ID_DIRECTIVE_RE: re.Pattern[str] = re.compile(r"@@id\(\[([^\]]*)\]\)")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """Lightweight issue descriptor."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __str__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"


class ValidationResult:
    """Accumulates ``ValidationIssue`` instances."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationIssue("error", code, message, context))

    def add_warning(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_warning]

    @property
    def issues(self) -> List[ValidationIssue]:
        """Every issue, in the order the checks reported them."""
        return list(self._items)

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def validate_model_names(schema: PrismaSchema) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    seen: Set[str] = set()
    for model in schema.models:
        if model.name in seen:
            result.add_error(
                "DUPLICATE_MODEL_NAME",
                f"Model '{model.name}' is defined more than once.",
                {"model": model.name},
            )
        seen.add(model.name)
    return result


def validate_field_names(schema: PrismaSchema) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    for model in schema.models:
        seen: Set[str] = set()
        for field in model.fields:
            if field.name in seen:
                result.add_error(
                    "DUPLICATE_FIELD_NAME",
                    f"Field '{field.name}' appears more than once in model "
                    f"'{model.name}'.",
                    {"model": model.name, "field": field.name},
                )
            seen.add(field.name)
    return result


def validate_empty_models(schema: PrismaSchema) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    for model in schema.models:
        if not model.fields:
            result.add_warning(
                "EMPTY_MODEL",
                f"Model '{model.name}' has no fields.",
                {"model": model.name},
            )
    return result


def validate_relations(schema: PrismaSchema) -> ValidationResult:
    """Relations must name columns or a constraint, and target a known model."""
    result: ValidationResult = ValidationResult()
    model_names: Set[str] = set(schema.model_names)
    for model in schema.models:
        for field in model.fields:
            if field.relation is None:
                continue
            ctx: Dict[str, Any] = {"model": model.name, "field": field.name}
            if not field.relation.is_meaningful:
                result.add_warning(
                    "EMPTY_RELATION",
                    f"Relation on '{model.name}.{field.name}' names neither "
                    f"fields/references nor a constraint.",
                    ctx,
                )
            target: str = field.type.replace(ARRAY_MARKER, "").rstrip(OPTIONAL_MARKER)
            if target not in model_names:
                result.add_warning(
                    "UNKNOWN_RELATION_TARGET",
                    f"Relation field '{model.name}.{field.name}' points at "
                    f"unknown model '{target}'.",
                    ctx,
                )
    return result


def validate_id_directives(schema: PrismaSchema) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    for model in schema.models:
        field_names: Set[str] = {f.name for f in model.fields}
        for directive in model.directives:
            match = _ID_DIRECTIVE_RE.search(directive)
            if match is None:
                continue
            for name in (n.strip() for n in match.group(1).split(",")):
                if name and name not in field_names:
                    result.add_error(
                        "UNKNOWN_ID_FIELD",
                        f"@@id in model '{model.name}' names unknown field "
                        f"'{name}'.",
                        {"model": model.name, "field": name},
                    )
    return result


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def validate_schema(schema: PrismaSchema) -> ValidationResult:
    """Run every check and return the merged result."""
    result: ValidationResult = ValidationResult()

    validators: List[Callable[[PrismaSchema], ValidationResult]] = [
        validate_model_names,
        validate_field_names,
        validate_empty_models,
        validate_relations,
        validate_id_directives,
    ]

    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(schema))

    logger.info("Schema validation complete: %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationIssue",
    "ValidationResult",
    "validate_model_names",
    "validate_field_names",
    "validate_empty_models",
    "validate_relations",
    "validate_id_directives",
    "validate_schema",
]

logger.debug("mysqltranslate.validators loaded — %d public symbols.", len(__all__))

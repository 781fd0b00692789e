"""
tests/test_validators.py
Unit tests for mysqltranslate.validators.

Tests cover:
- ValidationResult container behaviour
- Duplicate model / field names
- Empty models
- Relation checks (empty relation, unknown target)
- @@id directives naming unknown fields
- Full pipeline (validate_schema)
"""

from __future__ import annotations

from mysqltranslate.schema import Field, Model, PrismaSchema, Relation
from mysqltranslate.validators import (
    ValidationResult,
    validate_empty_models,
    validate_field_names,
    validate_id_directives,
    validate_model_names,
    validate_relations,
    validate_schema,
)


def _model(name: str, *fields: Field, directives=None) -> Model:
    model = Model(name=name, fields=list(fields), directives=list(directives or []))
    model.recompute_widths()
    return model


def _codes(result: ValidationResult) -> list:
    return [issue.code for issue in result.issues]


# ===========================================================================
# Result container
# ===========================================================================


class TestValidationResult:
    def test_empty_result_is_valid(self) -> None:
        result = ValidationResult()
        assert result.is_valid
        assert result.issues == []

    def test_warnings_do_not_invalidate(self) -> None:
        result = ValidationResult()
        result.add_warning("W", "just a warning")
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_errors_invalidate(self) -> None:
        result = ValidationResult()
        result.add_error("E", "broken", {"model": "m"})
        assert not result.is_valid
        assert result.errors[0].context == {"model": "m"}
        assert "1 error(s)" in result.summary()

    def test_merge(self) -> None:
        first, second = ValidationResult(), ValidationResult()
        first.add_error("A", "a")
        second.add_warning("B", "b")
        first.merge(second)
        assert _codes(first) == ["A", "B"]

    def test_issue_text(self) -> None:
        result = ValidationResult()
        result.add_warning("EMPTY_MODEL", "Model 'a' has no fields.")
        assert str(result.issues[0]) == "[WARNING] EMPTY_MODEL: Model 'a' has no fields."

    def test_issues_is_a_copy(self) -> None:
        result = ValidationResult()
        result.issues.append(None)
        assert result.issues == []


# ===========================================================================
# Individual checks
# ===========================================================================


class TestNameChecks:
    def test_duplicate_model_names(self) -> None:
        schema = PrismaSchema(models=[_model("a"), _model("a")])
        assert _codes(validate_model_names(schema)) == ["DUPLICATE_MODEL_NAME"]

    def test_duplicate_field_names(self) -> None:
        schema = PrismaSchema(
            models=[_model("a", Field(name="x", type="Int"), Field(name="x", type="String"))]
        )
        result = validate_field_names(schema)
        assert _codes(result) == ["DUPLICATE_FIELD_NAME"]
        assert result.errors[0].context["field"] == "x"

    def test_generated_schema_has_unique_names(self, sample_schema: PrismaSchema) -> None:
        assert validate_model_names(sample_schema).is_valid
        assert validate_field_names(sample_schema).is_valid


class TestEmptyModels:
    def test_empty_model_warns(self) -> None:
        result = validate_empty_models(PrismaSchema(models=[_model("empty")]))
        assert result.is_valid
        assert _codes(result) == ["EMPTY_MODEL"]


class TestRelations:
    def test_empty_relation(self) -> None:
        schema = PrismaSchema(
            models=[
                _model("a", Field(name="b", type="b", relation=Relation())),
                _model("b", Field(name="id", type="Int")),
            ]
        )
        assert _codes(validate_relations(schema)) == ["EMPTY_RELATION"]

    def test_unknown_target(self) -> None:
        schema = PrismaSchema(
            models=[
                _model(
                    "a",
                    Field(name="ghost", type="ghost?", relation=Relation(map_name="fk")),
                )
            ]
        )
        result = validate_relations(schema)
        assert _codes(result) == ["UNKNOWN_RELATION_TARGET"]
        assert "'ghost'" in result.warnings[0].message

    def test_array_target_resolved(self) -> None:
        schema = PrismaSchema(
            models=[
                _model("a", Field(name="bs", type="b[]", is_array=True, relation=Relation(map_name="fk"))),
                _model("b", Field(name="id", type="Int")),
            ]
        )
        assert validate_relations(schema).issues == []

    def test_partial_schema_warns_only(self, posts_table) -> None:
        from mysqltranslate.builder import build_schema

        result = validate_schema(build_schema([posts_table]))
        assert result.is_valid
        assert "UNKNOWN_RELATION_TARGET" in _codes(result)


class TestIdDirectives:
    def test_unknown_id_field(self) -> None:
        schema = PrismaSchema(
            models=[_model("a", Field(name="x", type="Int"), directives=["  @@id([x, y])"])]
        )
        result = validate_id_directives(schema)
        assert _codes(result) == ["UNKNOWN_ID_FIELD"]
        assert result.errors[0].context == {"model": "a", "field": "y"}

    def test_other_directives_ignored(self) -> None:
        schema = PrismaSchema(
            models=[_model("a", Field(name="x", type="Int"), directives=['  @@unique([z], map: "k")'])]
        )
        assert validate_id_directives(schema).issues == []


# ===========================================================================
# Full pipeline
# ===========================================================================


class TestValidateSchema:
    def test_generated_schema_is_clean(self, sample_schema: PrismaSchema) -> None:
        result = validate_schema(sample_schema)
        assert result.is_valid
        assert result.issues == []

    def test_collects_every_check(self) -> None:
        schema = PrismaSchema(models=[_model("a"), _model("a")])
        result = validate_schema(schema)
        assert _codes(result) == ["DUPLICATE_MODEL_NAME", "EMPTY_MODEL", "EMPTY_MODEL"]

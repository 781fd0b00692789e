# File: mysqltranslate/parser.py
"""
MySQL Translate - DSL Parser
==============================
Reads schema-DSL text back into a ``PrismaSchema``.  The parser is the
inverse of ``mysqltranslate.serializer``: for any schema without duplicate
field names inside a model, ``parse_schema(render_schema(s)) == s``.

Pipeline::

    text ──► classify_sections()   generator / datasource / models buffers
         ──► parse_generator()     name + provider
         ──► parse_datasource()    name + provider
         ──► split on ``model ``   one fragment per model block
         ──► parse_model()         directives + parse_field() per line

Failure policy
--------------
* A field line whose ``(``/``[``/``{`` never balance is dropped with a
  WARNING; the rest of the model is parsed normally.
* A ``@relation(...)`` piece with an unknown key raises
  ``RelationParseError``, which aborts the whole ``parse_schema`` call.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from mysqltranslate.schema import (
    Datasource,
    Field,
    Generator,
    Model,
    PrismaSchema,
    Relation,
    UniqueFlag,
)
from mysqltranslate.type_mapper import ARRAY_MARKER, OPTIONAL_MARKER

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate.parser")

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class RelationParseError(ValueError):
    """Raised when a ``@relation(...)`` attribute contains an unknown key."""

    def __init__(self, piece: str, attribute: str) -> None:
        self.piece: str = piece
        self.attribute: str = attribute
        super().__init__(
            f"Unknown key in relation attribute: '{piece}' (in '{attribute}')"
        )


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_PROVIDER_RE: re.Pattern[str] = re.compile(r'provider\s*=\s*"([^"]*)"')
_MODEL_SPLIT_RE: re.Pattern[str] = re.compile(r"^model ", re.MULTILINE)
_UNIQUE_RE: re.Pattern[str] = re.compile(
    r'(?<!@)@unique(\(\s*map:\s*"([^"]*)"\s*\))?'
)
_ID_DIRECTIVE_RE: re.Pattern[str] = re.compile(r"@@id\(\[([^\]]*)\]\)")

_OPENERS: Dict[str, str] = {"(": ")", "[": "]", "{": "}"}
_CLOSERS: Dict[str, str] = {v: k for k, v in _OPENERS.items()}

_RELATION_PREFIX: str = "@relation("
_DEFAULT_PREFIX: str = "@default("
_DB_PREFIX: str = "@db."
_LIST_SEPARATOR: str = ", "

# ---------------------------------------------------------------------------
# Section classification
# ---------------------------------------------------------------------------


class SectionState(str, Enum):
    """Which buffer the classifier is currently filling."""

    GENERATOR = "generator"
    DATASOURCE = "datasource"
    MODELS = "model"


def classify_sections(lines: List[str]) -> Dict[SectionState, List[str]]:
    """
    Sort DSL lines into the generator, datasource and models buffers.

    A line starting with ``generator`` / ``datasource`` / ``model`` switches
    the active buffer; every other line (blank lines and block bodies
    included) goes to whichever buffer was last active.
    """
    buffers: Dict[SectionState, List[str]] = {state: [] for state in SectionState}
    state: SectionState = SectionState.GENERATOR
    for line in lines:
        for candidate in SectionState:
            if line.startswith(candidate.value):
                state = candidate
                break
        buffers[state].append(line)
    return buffers


# ---------------------------------------------------------------------------
# Header blocks
# ---------------------------------------------------------------------------


def _parse_header(lines: List[str], keyword: str) -> Tuple[Optional[str], Optional[str]]:
    name: Optional[str] = None
    provider: Optional[str] = None
    for line in lines:
        if name is None and line.startswith(keyword):
            name = line[len(keyword):].split("{", 1)[0].strip() or None
            continue
        match = _PROVIDER_RE.search(line)
        if provider is None and match:
            provider = match.group(1)
    return name, provider


def parse_generator(lines: List[str]) -> Generator:
    name, provider = _parse_header(lines, SectionState.GENERATOR.value)
    generator: Generator = Generator()
    if name is not None:
        generator.name = name
    if provider is not None:
        generator.provider = provider
    return generator


def parse_datasource(lines: List[str]) -> Datasource:
    name, provider = _parse_header(lines, SectionState.DATASOURCE.value)
    datasource: Datasource = Datasource()
    if name is not None:
        datasource.name = name
    if provider is not None:
        datasource.provider = provider
    return datasource


# ---------------------------------------------------------------------------
# Relation attribute
# ---------------------------------------------------------------------------


def _split_top_level(text: str) -> List[str]:
    """Split *text* on ``", "`` outside of any brackets."""
    pieces: List[str] = []
    depth: int = 0
    current: List[str] = []
    i: int = 0
    while i < len(text):
        char: str = text[i]
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
        if depth == 0 and text.startswith(_LIST_SEPARATOR, i):
            pieces.append("".join(current))
            current = []
            i += len(_LIST_SEPARATOR)
            continue
        current.append(char)
        i += 1
    pieces.append("".join(current))
    return [p.strip() for p in pieces if p.strip()]


def _parse_list(value: str) -> List[str]:
    inner: str = value.strip()
    if inner.startswith("[") and inner.endswith("]"):
        inner = inner[1:-1]
    return [item.strip() for item in inner.split(_LIST_SEPARATOR) if item.strip()]


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def parse_relation(text: str) -> Relation:
    """
    Parse ``@relation(fields: [a], references: [b], ...)``.

    Raises:
        RelationParseError: if a piece does not start with a known key.
    """
    body: str = text.strip()
    if body.startswith(_RELATION_PREFIX):
        body = body[len(_RELATION_PREFIX):]
    if body.endswith(")"):
        body = body[:-1]

    relation: Relation = Relation()
    for piece in _split_top_level(body):
        if piece.startswith("fields:"):
            relation.fields = _parse_list(piece[len("fields:"):])
        elif piece.startswith("references:"):
            relation.references = _parse_list(piece[len("references:"):])
        elif piece.startswith("onDelete:"):
            relation.on_delete = piece[len("onDelete:"):].strip()
        elif piece.startswith("onUpdate:"):
            relation.on_update = piece[len("onUpdate:"):].strip()
        elif piece.startswith("map:"):
            relation.map_name = _unquote(piece[len("map:"):])
        else:
            raise RelationParseError(piece, text)
    return relation


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


def _extract_unique(line: str) -> Tuple[str, Optional[UniqueFlag]]:
    match = _UNIQUE_RE.search(line)
    if match is None:
        return line, None
    stripped: str = line[: match.start()] + line[match.end():]
    return stripped, UniqueFlag(map_name=match.group(2))


def _dispatch_attribute(field: Field, attribute: str) -> None:
    if attribute.startswith(_DB_PREFIX):
        field.db_type_annotation = attribute[len(_DB_PREFIX):]
    elif attribute.startswith("@relation"):
        field.relation = parse_relation(attribute)
    elif attribute.startswith(_DEFAULT_PREFIX) and attribute.endswith(")"):
        field.default_expr = attribute[len(_DEFAULT_PREFIX):-1]
    else:
        logger.debug("Ignoring attribute %r on field '%s'.", attribute, field.name)


def parse_field(line: str) -> Optional[Field]:
    """
    Parse one field line.

    Returns ``None`` for lines that are not fields (fewer than two tokens)
    and for lines whose delimiters never balance.

    Raises:
        RelationParseError: propagated from ``parse_relation``.
    """
    remainder, unique = _extract_unique(line)
    tokens: List[str] = remainder.split()
    if len(tokens) < 2:
        logger.debug("Skipping non-field line %r.", line)
        return None

    name, declared_type = tokens[0], tokens[1]
    field: Field = Field(
        name=name,
        type=declared_type,
        is_array=ARRAY_MARKER in declared_type,
        is_required=OPTIONAL_MARKER not in declared_type,
        unique=unique,
    )

    counters: Dict[str, int] = {opener: 0 for opener in _OPENERS}
    buffer: List[str] = []
    for token in tokens[2:]:
        if not buffer and not any(opener in token for opener in _OPENERS):
            if token == "@id":
                field.is_id = True
            elif token.startswith(_DB_PREFIX):
                field.db_type_annotation = token[len(_DB_PREFIX):]
            continue

        buffer.append(token)
        for char in token:
            if char in _OPENERS:
                counters[char] += 1
            elif char in _CLOSERS:
                counters[_CLOSERS[char]] -= 1
        if all(count == 0 for count in counters.values()):
            _dispatch_attribute(field, " ".join(buffer))
            buffer = []

    if buffer:
        logger.warning(
            "Dropping field '%s': unbalanced delimiters in %r.", name, line.strip()
        )
        return None
    return field


# ---------------------------------------------------------------------------
# Models & schema
# ---------------------------------------------------------------------------


def _mark_composite_ids(model: Model) -> None:
    for directive in model.directives:
        match = _ID_DIRECTIVE_RE.search(directive)
        if match is None:
            continue
        for name in _parse_list(match.group(1)):
            field: Optional[Field] = model.get_field(name)
            if field is not None:
                field.is_id = True


def parse_model(fragment: str) -> Optional[Model]:
    """
    Parse one model fragment (the text following ``model ``).

    Returns ``None`` when the fragment has no name before its ``{``.
    """
    if "{" not in fragment:
        return None
    header, body = fragment.split("{", 1)
    name: str = header.strip()
    if not name:
        return None

    model: Model = Model(name=name)
    for line in body.splitlines():
        stripped: str = line.strip()
        if not stripped or stripped.startswith("//") or stripped == "}":
            continue
        if stripped.startswith("@@"):
            model.directives.append(line.rstrip())
            continue
        field: Optional[Field] = parse_field(line)
        if field is not None:
            model.fields.append(field)

    _mark_composite_ids(model)
    model.recompute_widths()
    logger.debug("Parsed model '%s' with %d field(s).", name, len(model.fields))
    return model


def parse_schema(text: str) -> PrismaSchema:
    """
    Parse complete DSL text.

    Raises:
        RelationParseError: on an unknown relation key anywhere in the file.
    """
    buffers: Dict[SectionState, List[str]] = classify_sections(text.splitlines())
    schema: PrismaSchema = PrismaSchema(
        generator=parse_generator(buffers[SectionState.GENERATOR]),
        datasource=parse_datasource(buffers[SectionState.DATASOURCE]),
    )

    models_text: str = "\n".join(buffers[SectionState.MODELS])
    for fragment in _MODEL_SPLIT_RE.split(models_text):
        model: Optional[Model] = parse_model(fragment)
        if model is not None:
            schema.add_model(model)

    logger.info("Parsed schema with %d model(s).", len(schema.models))
    return schema


def parse_file(path: Union[str, Path]) -> PrismaSchema:
    """
    Read and parse a DSL file.

    Raises:
        OSError: if the file cannot be read.
        RelationParseError: see ``parse_schema``.
    """
    file_path: Path = Path(path)
    logger.debug("Parsing DSL file: %s", file_path)
    return parse_schema(file_path.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "RelationParseError",
    "SectionState",
    "classify_sections",
    "parse_generator",
    "parse_datasource",
    "parse_relation",
    "parse_field",
    "parse_model",
    "parse_schema",
    "parse_file",
]

logger.debug("mysqltranslate.parser loaded — %d public symbols.", len(__all__))

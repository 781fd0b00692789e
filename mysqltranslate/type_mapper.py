# File: mysqltranslate/type_mapper.py
"""
MySQL Translate - Catalog Type Mapping
========================================
Pure functions translating raw MySQL catalog type strings into Prisma
field types and ``@db.*`` native-type annotations.

Both tables are ordered, first-match rule lists over the lower-cased type
string.  They are not a grammar: a rule matches on the leading
type keyword, and the size or precision glued to the keyword is carried
through unchanged.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from mysqltranslate.models import KeyFlag

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate.type_mapper")

# ---------------------------------------------------------------------------
# Field-type rules
# ---------------------------------------------------------------------------

OPTIONAL_MARKER: str = "?"
ARRAY_MARKER: str = "[]"

_FIELD_TYPE_RULES: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^tinyint\(1\)"), "Boolean"),
    (re.compile(r"^(tinyint|smallint|mediumint|bigint|int|integer|year)\b"), "Int"),
    (re.compile(r"^(float|double|real)\b"), "Float"),
    (re.compile(r"^(decimal|numeric|dec|fixed)\b"), "Decimal"),
    (re.compile(r"^(datetime|timestamp|date|time)\b"), "DateTime"),
    (re.compile(r"^bool(ean)?\b"), "Boolean"),
    (re.compile(r"^json\b"), "Json"),
)

_DEFAULT_FIELD_TYPE: str = "String"

# ---------------------------------------------------------------------------
# Native-type annotation rules
# ---------------------------------------------------------------------------

# Integer display widths ("int(11) unsigned") are dropped by the unsigned
# rules; the size suffix right after the keyword is otherwise kept.
_DB_ANNOTATION_RULES: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^tinyint(\(\d+\))?\s+unsigned"), "UnsignedTinyInt"),
    (re.compile(r"^tinyint"), "TinyInt"),
    (re.compile(r"^smallint(\(\d+\))?\s+unsigned"), "UnsignedSmallInt"),
    (re.compile(r"^smallint"), "SmallInt"),
    (re.compile(r"^mediumint(\(\d+\))?\s+unsigned"), "UnsignedMediumInt"),
    (re.compile(r"^mediumint"), "MediumInt"),
    (re.compile(r"^bigint(\(\d+\))?\s+unsigned"), "UnsignedBigInt"),
    (re.compile(r"^bigint"), "BigInt"),
    (re.compile(r"^int(\(\d+\))?\s+unsigned"), "UnsignedInt"),
    (re.compile(r"^int(eger)?"), "Int"),
    (re.compile(r"^float"), "Float"),
    (re.compile(r"^double"), "Double"),
    (re.compile(r"^decimal"), "Decimal"),
    (re.compile(r"^datetime"), "DateTime"),
    (re.compile(r"^timestamp"), "Timestamp"),
    (re.compile(r"^date"), "Date"),
    (re.compile(r"^time"), "Time"),
    (re.compile(r"^year"), "Year"),
    (re.compile(r"^bit"), "Bit"),
    (re.compile(r"^varchar"), "VarChar"),
    (re.compile(r"^char"), "Char"),
    (re.compile(r"^tinytext"), "TinyText"),
    (re.compile(r"^mediumtext"), "MediumText"),
    (re.compile(r"^longtext"), "LongText"),
    (re.compile(r"^text"), "Text"),
    (re.compile(r"^varbinary"), "VarBinary"),
    (re.compile(r"^binary"), "Binary"),
    (re.compile(r"^tinyblob"), "TinyBlob"),
    (re.compile(r"^mediumblob"), "MediumBlob"),
    (re.compile(r"^longblob"), "LongBlob"),
    (re.compile(r"^blob"), "Blob"),
    (re.compile(r"^json"), "Json"),
)

_CURRENT_TIMESTAMP_RE: re.Pattern[str] = re.compile(
    r"^current_timestamp(\(\d*\))?$", re.IGNORECASE
)


def _normalise(sql_type: str) -> str:
    return " ".join(sql_type.strip().lower().split())


# ---------------------------------------------------------------------------
# Public mapping functions
# ---------------------------------------------------------------------------


def base_field_type(sql_type: str) -> str:
    """Return the Prisma scalar for *sql_type*, without optionality marker."""
    normalised: str = _normalise(sql_type)
    for pattern, field_type in _FIELD_TYPE_RULES:
        if pattern.search(normalised):
            return field_type
    return _DEFAULT_FIELD_TYPE


def map_field_type(sql_type: str, nullable: bool) -> str:
    """
    Map a catalog type to a Prisma field type.

    Examples:
        >>> map_field_type("tinyint(1)", nullable=False)
        'Boolean'
        >>> map_field_type("timestamp", nullable=True)
        'DateTime?'
    """
    field_type: str = base_field_type(sql_type)
    if nullable:
        field_type += OPTIONAL_MARKER
    return field_type


def map_db_annotation(sql_type: str) -> Optional[str]:
    """
    Map a catalog type to the body of a ``@db.`` annotation.

    Returns ``None`` when the type has no native-type counterpart; callers
    simply omit the annotation in that case.

    Examples:
        >>> map_db_annotation("varchar(191)")
        'VarChar(191)'
        >>> map_db_annotation("int unsigned")
        'UnsignedInt'
    """
    normalised: str = _normalise(sql_type)
    for pattern, replacement in _DB_ANNOTATION_RULES:
        if pattern.search(normalised):
            annotation: str = pattern.sub(replacement, normalised, count=1)
            # One token only: "signed" / "unsigned" / "zerofill" left over
            # after the keyword are not part of the native type.
            return annotation.split(" ", 1)[0]
    logger.debug("No native-type annotation for catalog type %r.", sql_type)
    return None


def map_default(default_literal: Optional[str], field_type: str) -> Optional[str]:
    """
    Map a catalog default literal to a ``@default(...)`` expression.

    ``CURRENT_TIMESTAMP`` becomes ``now()``; ``"1"`` / ``"0"`` become
    ``true`` / ``false`` for Boolean fields only.  Anything else is kept
    verbatim.
    """
    if default_literal is None:
        return None
    if _CURRENT_TIMESTAMP_RE.match(default_literal.strip()):
        return "now()"
    is_boolean: bool = field_type.rstrip(OPTIONAL_MARKER) == "Boolean"
    if is_boolean and default_literal == "1":
        return "true"
    if is_boolean and default_literal == "0":
        return "false"
    return default_literal


def key_flag_semantics(key_flag: KeyFlag) -> Tuple[bool, bool]:
    """Return ``(is_unique, is_id)`` implied by a catalog key flag."""
    is_id: bool = key_flag == KeyFlag.PRIMARY
    is_unique: bool = is_id or key_flag == KeyFlag.UNIQUE
    return is_unique, is_id


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "OPTIONAL_MARKER",
    "ARRAY_MARKER",
    "base_field_type",
    "map_field_type",
    "map_db_annotation",
    "map_default",
    "key_flag_semantics",
]

logger.debug("mysqltranslate.type_mapper loaded.")

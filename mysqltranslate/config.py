# File: mysqltranslate/config.py
"""
MySQL Translate - Configuration
=================================
A single ``TranslateConfig`` value, constructed once at startup and passed
explicitly to the session registry, the sync orchestrator and the schema
builder.  Nothing else in the package reads process environment.

Sources, in order of precedence::

    load_config_file(path)      JSON or YAML file (dispatch on suffix)
    TranslateConfig.from_env()  ``STORAGE`` → storage_dir
    TranslateConfig()           built-in defaults

Example YAML::

    storage_dir: .data
    session_filename: session.json
    default_provider: mysql
    generator_provider: prisma-client-js
    log_level: INFO
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mysqltranslate.schema import (
    DEFAULT_DATASOURCE_PROVIDER,
    DEFAULT_GENERATOR_PROVIDER,
    Datasource,
    Generator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate.config")

STORAGE_ENV_VAR: str = "STORAGE"
DEFAULT_STORAGE_DIR: str = ".data"
DEFAULT_SESSION_FILENAME: str = "session.json"

_LOG_LEVELS: List[str] = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class TranslateConfig(BaseModel):
    """Process-wide settings."""

    model_config = _SHARED_CONFIG

    storage_dir: str = Field(
        default=DEFAULT_STORAGE_DIR,
        min_length=1,
        description="Directory holding the session registry.",
    )
    session_filename: str = Field(
        default=DEFAULT_SESSION_FILENAME,
        min_length=1,
        description="Registry file name inside storage_dir.",
    )
    default_provider: str = Field(
        default=DEFAULT_DATASOURCE_PROVIDER,
        description="Datasource provider written to DSL files.",
    )
    generator_provider: str = Field(
        default=DEFAULT_GENERATOR_PROVIDER,
        description="Generator provider written to DSL files.",
    )
    log_level: str = Field(default="WARNING")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level: str = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}, got '{v}'.")
        return level

    @property
    def session_path(self) -> Path:
        return Path(self.storage_dir) / self.session_filename

    def make_generator(self) -> Generator:
        return Generator(provider=self.generator_provider)

    def make_datasource(self) -> Datasource:
        return Datasource(provider=self.default_provider)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TranslateConfig":
        """Defaults, with ``STORAGE`` overriding ``storage_dir`` when set."""
        env: Mapping[str, str] = os.environ if environ is None else environ
        storage: Optional[str] = env.get(STORAGE_ENV_VAR)
        if storage:
            logger.debug("Using storage dir from $%s: %s", STORAGE_ENV_VAR, storage)
            return cls(storage_dir=storage)
        return cls()


# ---------------------------------------------------------------------------
# File loading
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_config_file(
    path: Union[str, Path], environ: Optional[Mapping[str, str]] = None
) -> TranslateConfig:
    """
    Load a configuration file (JSON or YAML).

    ``STORAGE`` still applies when the file does not set ``storage_dir``.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed or fails validation.
    """
    file_path: Path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    suffix: str = file_path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        raw: Dict[str, Any] = _load_yaml_file(file_path)
    elif suffix == ".json":
        raw = _load_json_file(file_path)
    else:
        logger.info("Unknown extension '%s' — trying JSON then YAML.", suffix)
        try:
            raw = _load_json_file(file_path)
        except ValueError:
            raw = _load_yaml_file(file_path)

    env: Mapping[str, str] = os.environ if environ is None else environ
    if "storage_dir" not in raw and env.get(STORAGE_ENV_VAR):
        raw["storage_dir"] = env[STORAGE_ENV_VAR]

    try:
        config: TranslateConfig = TranslateConfig.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc
    logger.info("Loaded configuration from %s", file_path)
    return config


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "STORAGE_ENV_VAR",
    "DEFAULT_STORAGE_DIR",
    "DEFAULT_SESSION_FILENAME",
    "TranslateConfig",
    "load_config_file",
]

logger.debug("mysqltranslate.config loaded.")

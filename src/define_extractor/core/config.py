"""Configuration for define-extractor.

Pydantic model for the settings the CLI hands to the scanning core:
symbol blacklist, header profiles, file discovery, output location and
worker limits. Loaded from an optional YAML file.

Example define-extractor.yaml::

    blacklist: [_WIN32, NDEBUG]
    output_dir: Output
    max_workers: 8
    headers:
      client: [locale_inc.h]
      server: [service.h, commondefines.h]
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from define_extractor.core.exceptions import ConfigError
from define_extractor.discovery import DEFAULT_EXCLUDE_DIRS
from define_extractor.scanning.types import Dialect

logger = logging.getLogger(__name__)

# Config file looked up in the working directory when none is given
DEFAULT_CONFIG_NAME = "define-extractor.yaml"

# Maximum config file size (1MB)
MAX_CONFIG_SIZE = 1024 * 1024


def _default_headers() -> dict[str, list[str]]:
    return {
        "client": ["locale_inc.h"],
        "server": ["service.h", "commondefines.h"],
    }


class ExtractorConfig(BaseModel):
    """Settings for discovery, scanning and reporting.

    Attributes:
        blacklist: Symbols never offered as scan candidates.
        output_dir: Directory receiving report files.
        max_workers: Cap on scan worker threads (None = CPU count).
        progress_interval: Minimum seconds between progress updates.
        headers: Profile name → header file names declaring the symbols.
        exclude_dirs: Directory names skipped during header and source discovery.
        brace_extensions: Extensions scanned with the brace dialect.
        indent_extensions: Extensions scanned with the indent dialect.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    blacklist: list[str] = Field(default_factory=list)
    output_dir: str = Field(default="Output", min_length=1)
    max_workers: int | None = Field(default=None, ge=1)
    progress_interval: float = Field(default=0.1, ge=0.0, le=10.0)
    headers: dict[str, list[str]] = Field(default_factory=_default_headers)
    exclude_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    brace_extensions: list[str] = Field(
        default_factory=lambda: list(Dialect.BRACE.default_extensions())
    )
    indent_extensions: list[str] = Field(
        default_factory=lambda: list(Dialect.INDENT.default_extensions())
    )

    @field_validator("brace_extensions", "indent_extensions", mode="after")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lower-case extensions and ensure a leading dot."""
        normalized: list[str] = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                raise ValueError("Extensions must be non-empty")
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized

    @field_validator("headers", mode="after")
    @classmethod
    def validate_headers(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        """Require at least one header name per profile."""
        for profile, names in v.items():
            if not names:
                raise ValueError(f"Header profile '{profile}' lists no header files")
        return v

    def extensions_for(self, dialect: str) -> tuple[str, ...]:
        """Return configured extensions for a dialect value."""
        if dialect == "brace":
            return tuple(self.brace_extensions)
        if dialect == "indent":
            return tuple(self.indent_extensions)
        raise ValueError(f"Unknown dialect '{dialect}'")


def load_config(path: Path | None = None) -> ExtractorConfig:
    """Load and validate configuration from YAML.

    Args:
        path: Config file. When None, DEFAULT_CONFIG_NAME in the working
            directory is used if present, otherwise defaults apply.

    Returns:
        Validated ExtractorConfig.

    Raises:
        ConfigError: On file/parse/validation errors.

    """
    if path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_NAME
        if not candidate.is_file():
            logger.debug("No %s found, using defaults", DEFAULT_CONFIG_NAME)
            return ExtractorConfig()
        path = candidate

    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    if not path.is_file():
        raise ConfigError(f"Config path is not a file: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read(MAX_CONFIG_SIZE + 1)
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if len(content) > MAX_CONFIG_SIZE:
        raise ConfigError(f"Config {path} exceeds 1MB limit")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a YAML mapping, got {type(data).__name__}")

    try:
        config = ExtractorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed for {path}: {e}") from e

    logger.debug("Loaded config from %s", path)
    return config

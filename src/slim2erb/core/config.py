#!/usr/bin/env python3
"""
SLIM2ERB CONFIG
---------------
Conversion settings: built-in defaults, overlaid by an optional
`.slim2erb.yaml` file, overlaid by command-line flags.

Example file:

    indent_size: 2
    emit_comments: false
    create_backup: true
    output_directory: build/views

Author: Slim2ERB Team
Date: 2026-10-18
"""

import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML, YAMLError

from slim2erb.conversion.generator import GeneratorOptions
from slim2erb.core.errors import ConfigurationError

logger = logging.getLogger("slim2erb.config")

CONFIG_FILE_NAME = ".slim2erb.yaml"

_yaml = YAML(typ="safe")


@dataclass
class ConversionConfig:
    indent_size: int = 1
    emit_comments: bool = True
    close_statements: bool = True
    void_elements: bool = False
    create_backup: bool = True
    delete_original: bool = False
    output_directory: Optional[str] = None
    extension: str = ".slim"

    def validate(self) -> "ConversionConfig":
        """Raises ConfigurationError on values the converter cannot honor."""
        if isinstance(self.indent_size, bool) or not isinstance(self.indent_size, int) or self.indent_size < 1:
            raise ConfigurationError(f"indent_size must be a positive integer, got {self.indent_size!r}")
        if not isinstance(self.extension, str) or not self.extension.startswith("."):
            raise ConfigurationError(f"extension must start with '.', got {self.extension!r}")
        for name in ("emit_comments", "close_statements", "void_elements", "create_backup", "delete_original"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be true or false, got {getattr(self, name)!r}")
        if self.output_directory is not None and not isinstance(self.output_directory, str):
            raise ConfigurationError(f"output_directory must be a path string, got {self.output_directory!r}")
        if self.delete_original and not self.create_backup:
            logger.warning("delete_original is set without create_backup: sources will not be recoverable")
        return self

    def with_overrides(self, **overrides: Any) -> "ConversionConfig":
        """Returns a copy with every non-None override applied (CLI flags win)."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes).validate()

    def to_generator_options(self) -> GeneratorOptions:
        return GeneratorOptions(
            indent_size=self.indent_size,
            emit_comments=self.emit_comments,
            close_statements=self.close_statements,
            void_elements=self.void_elements,
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _from_mapping(raw: Dict[str, Any], source: str) -> ConversionConfig:
    known = {f.name for f in fields(ConversionConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigurationError(f"Unknown config key(s) in {source}: {', '.join(unknown)}")
    return ConversionConfig(**raw).validate()


def load_config(path: Optional[Path] = None) -> ConversionConfig:
    """
    Loads a YAML config file.

    * No path, or a path that does not exist: defaults.
    * Empty file: defaults.
    * Malformed YAML, a non-mapping document, unknown keys or bad values:
      ConfigurationError.
    """
    if path is None or not Path(path).exists():
        return ConversionConfig()

    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            raw = _yaml.load(f) or {}
    except (OSError, YAMLError) as e:
        raise ConfigurationError(f"Cannot read config {path}: {e}", file_path=str(path))

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config {path} must be a mapping", file_path=str(path))

    logger.debug(f"Loaded config from {path}")
    try:
        return _from_mapping(raw, str(path))
    except ConfigurationError as e:
        e.file_path = str(path)
        raise


def find_config(start: Path) -> Optional[Path]:
    """Looks for .slim2erb.yaml in `start` and then in each parent directory."""
    start = Path(start).resolve()
    directory = start if start.is_dir() else start.parent
    for candidate_dir in [directory, *directory.parents]:
        candidate = candidate_dir / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None

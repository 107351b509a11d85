"""
Project manifest (``spemath.toml``) for the command-line driver.

The core pipeline takes its settings as plain arguments; only the driver
reads this file.
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from spemath.core.errors import SpemathError
from spemath.core.expression_lang.evaluator import DEFAULT_MAX_CALL_DEPTH

MANIFEST_NAME = "spemath.toml"
DEFAULT_SOURCE = "input.spemath"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ManifestError(SpemathError):
    """Raised when ``spemath.toml`` cannot be read or holds invalid values."""


@dataclass
class RunConfig:
    """Evaluation settings."""

    source: str = DEFAULT_SOURCE  # Program file used when none is given
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str | None = None  # Falls back to LOG_LEVEL, then WARNING

    @property
    def numeric_level(self) -> int | None:
        if self.level is None:
            return None
        return getattr(logging, self.level)


@dataclass
class SpemathManifest:
    """Parsed ``spemath.toml``; every section is optional."""

    root: Path
    run: RunConfig = field(default_factory=RunConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def source_path(self) -> Path:
        return self.root / self.run.source


def load_manifest(path: Path) -> SpemathManifest:
    """Load a manifest. A missing file yields the defaults."""
    root = path.parent
    if not path.exists():
        return SpemathManifest(root=root)

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"Invalid TOML in {path}: {e}") from e

    run_data = data.get("run", {})
    logging_data = data.get("logging", {})

    max_call_depth = run_data.get("max_call_depth", DEFAULT_MAX_CALL_DEPTH)
    if not isinstance(max_call_depth, int) or isinstance(max_call_depth, bool) or max_call_depth < 1:
        raise ManifestError(
            f"run.max_call_depth must be a positive integer, got {max_call_depth!r}"
        )

    source = run_data.get("source", DEFAULT_SOURCE)
    if not isinstance(source, str) or not source:
        raise ManifestError(f"run.source must be a file name, got {source!r}")

    level = logging_data.get("level")
    if level is not None:
        if not isinstance(level, str) or level.upper() not in _LOG_LEVELS:
            raise ManifestError(
                f"logging.level must be one of {', '.join(_LOG_LEVELS)}, got {level!r}"
            )
        level = level.upper()

    return SpemathManifest(
        root=root,
        run=RunConfig(source=source, max_call_depth=max_call_depth),
        logging=LoggingConfig(level=level),
    )

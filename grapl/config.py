"""Configuration schema and loading for the grapl engine.

Pydantic models keep limits validated at construction time so a bad
bound fails loudly before any expression is processed. ``load_config``
accepts the same kinds of sources everywhere:

* None -> default GraplConfig
* dict -> validated mapping
* Path / path-like string -> .toml or .json file on disk
* Inline TOML/JSON strings
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

logger = logging.getLogger("grapl.config")

ConfigSource = Union[str, Path, Dict[str, Any], None]


class ParserConfig(BaseModel):
    """Parser guards.

    Attributes:
        max_depth: Maximum group nesting depth accepted by the parser.
        max_length: Maximum input length in characters (or bytes).
    """

    max_depth: int = Field(default=64, ge=1, le=512)
    max_length: int = Field(default=1_000_000, ge=1)

    model_config = {"extra": "forbid", "frozen": True}


class NormalizerConfig(BaseModel):
    """Normalizer guards.

    Attributes:
        max_nodes: Upper bound on the size of a single distributive
            expansion (cliques times clique width).
    """

    max_nodes: int = Field(default=100_000, ge=1)

    model_config = {"extra": "forbid", "frozen": True}


class ResolverConfig(BaseModel):
    """Resolver behaviour.

    Attributes:
        allow_shadowing: Let a later definition replace an earlier one with
            the same name instead of raising DuplicateDefinition.
        max_depth: Maximum chain of nested definition expansions.
        max_workers: Thread count used when resolving every definition.
    """

    allow_shadowing: bool = False
    max_depth: int = Field(default=64, ge=1, le=512)
    max_workers: int = Field(default=4, ge=1, le=64)

    model_config = {"extra": "forbid", "frozen": True}


class GraplConfig(BaseModel):
    """Top-level configuration grouping every stage."""

    parser: ParserConfig = Field(default_factory=ParserConfig)
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)

    model_config = {"extra": "forbid", "frozen": True}

    @classmethod
    def default(cls) -> "GraplConfig":
        """Return the default configuration."""
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraplConfig":
        """Validate a plain mapping into a configuration.

        Raises:
            ValueError: If a top-level section names no pipeline stage.
            pydantic.ValidationError: If a value is out of bounds or a key
                inside a section is unknown.
        """
        stages = list(cls.model_fields)
        unknown = sorted(set(data) - set(stages))
        if unknown:
            raise ValueError(
                f"Unknown configuration section(s): {', '.join(unknown)}; "
                f"valid stages are: {', '.join(stages)}"
            )
        return cls.model_validate(data)


def load_config(source: ConfigSource) -> GraplConfig:
    """Load GraplConfig from various configuration sources.

    Args:
        source: One of:
            * None: returns GraplConfig.default()
            * dict: treated as already-parsed configuration mapping
            * str/Path: either a filesystem path to a .toml/.json file,
              or an inline TOML/JSON string (auto-detected)

    Returns:
        GraplConfig instance.
    """
    if source is None:
        logger.debug("No config source provided; using default GraplConfig")
        return GraplConfig.default()

    if isinstance(source, dict):
        logger.debug("Loading GraplConfig from provided dict")
        return GraplConfig.from_dict(source)

    if isinstance(source, (str, Path)):
        path = Path(source)
        text: Optional[str] = None
        fmt: Optional[str] = None

        if _is_existing_file(path):
            text = path.read_text(encoding="utf-8")
            suffix = path.suffix.lower()
            if suffix in {".toml", ".tml"}:
                fmt = "toml"
            elif suffix == ".json":
                fmt = "json"
            else:
                fmt = _guess_format(text)
            logger.info("Loading configuration from file: %s (fmt=%s)", path, fmt)
        else:
            text = str(source)
            fmt = _guess_format(text)
            logger.info("Loading configuration from inline %s string", fmt)

        if fmt == "json":
            data = json.loads(text)
        else:
            data = tomllib.loads(text)

        if not isinstance(data, dict):
            raise ValueError("Top-level configuration must be a mapping/dict")

        return GraplConfig.from_dict(data)

    raise TypeError(f"Unsupported config source type: {type(source)!r}")


def _guess_format(text: str) -> str:
    return "json" if text.lstrip().startswith("{") else "toml"


def _is_existing_file(path: Path) -> bool:
    # Inline TOML can be long or contain characters the OS rejects in paths.
    try:
        return path.is_file()
    except (OSError, ValueError):
        return False


__all__ = [
    "ConfigSource",
    "GraplConfig",
    "NormalizerConfig",
    "ParserConfig",
    "ResolverConfig",
    "load_config",
]

"""
Configuration for the span locator.

Settings can be supplied directly or loaded from a YAML or JSON file. The
file holds either the settings themselves or a mapping under a top-level
``locator`` key.

Example YAML file:
    ```yaml
    locator:
      whitespace_slack: 80
      phrase_prefix_length: 40
    ```
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .constants import (
    DEFAULT_LINE_BLOCK_FACTOR,
    DEFAULT_MAX_DOCUMENT_LENGTH,
    DEFAULT_MIN_CLAUSE_LENGTH,
    DEFAULT_PHRASE_PREFIX_LENGTH,
    DEFAULT_WHITESPACE_SLACK,
)
from .errors import ValidationError


@dataclass(frozen=True)
class LocatorConfig:
    """Tuning constants for the matching strategies.

    Attributes:
        whitespace_slack: How far (in characters) line accumulation may run
            past the normalized excerpt length before a start line is abandoned
        phrase_prefix_length: Number of characters of the normalized clause
            that a line must contain to start a phrase match
        min_clause_length: A clause must be longer than this to be used as
            the phrase
        line_block_factor: Lines claimed per non-empty excerpt line by a
            phrase match
        max_document_length: Documents longer than this are rejected
    """

    whitespace_slack: int = DEFAULT_WHITESPACE_SLACK
    phrase_prefix_length: int = DEFAULT_PHRASE_PREFIX_LENGTH
    min_clause_length: int = DEFAULT_MIN_CLAUSE_LENGTH
    line_block_factor: int = DEFAULT_LINE_BLOCK_FACTOR
    max_document_length: int = DEFAULT_MAX_DOCUMENT_LENGTH

    def to_dict(self) -> dict[str, int]:
        """Return the settings as a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LocatorConfig:
        """Build a config from a mapping, validating every entry.

        Args:
            data: Mapping of setting names to values. Missing settings keep
                their defaults.

        Returns:
            The validated LocatorConfig

        Raises:
            ValidationError: If a key is unknown or a value is not a
                positive integer (``whitespace_slack`` and
                ``min_clause_length`` may also be zero)
        """
        known = {f.name for f in fields(cls)}
        errors = []

        for key, value in data.items():
            if key not in known:
                errors.append(f"Unknown setting '{key}'")
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                errors.append(f"'{key}' must be an integer, got {type(value).__name__}")
                continue
            minimum = 0 if key in ("whitespace_slack", "min_clause_length") else 1
            if value < minimum:
                errors.append(f"'{key}' must be at least {minimum}, got {value}")

        if errors:
            raise ValidationError("Invalid locator configuration", errors=errors)

        return cls(**data)


def load_config(path: str | Path) -> LocatorConfig:
    """Load locator settings from a YAML or JSON file.

    The format is chosen from the file extension: ``.json`` is parsed as JSON,
    anything else as YAML.

    Args:
        path: Path to the configuration file

    Returns:
        The validated LocatorConfig

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file cannot be parsed or has invalid content
    """
    file_path = Path(path)

    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(file_path, encoding="utf-8") as f:
            if file_path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ValidationError(f"Failed to parse config file: {e}") from e

    if data is None:
        return LocatorConfig()

    if not isinstance(data, dict):
        raise ValidationError("Config file must contain a dictionary/object")

    if "locator" in data:
        data = data["locator"]
        if not isinstance(data, dict):
            raise ValidationError("'locator' must be a dictionary/object")

    return LocatorConfig.from_dict(data)

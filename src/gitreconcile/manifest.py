"""YAML manifest declaring the commit units to reconcile.

Example manifest:

    commits:
      docs:
        url: https://example.com/org/repo.git
        branch: main
        message: "docs: managed README"
        add:
          - path: docs/README.md
            content: "Hello, World!"
        remove:
          - path: old-docs
            recursive: true
        prune: true
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gitreconcile.exceptions import ConfigError
from gitreconcile.spec import CommitSpec

__all__ = [
    "Manifest",
    "load_manifest",
    "parse_manifest",
]

_UNIT_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.\-]*$")


class Manifest(BaseModel):
    """Commit units keyed by a stable name."""

    model_config = ConfigDict(extra="forbid")

    commits: dict[str, CommitSpec] = Field(default_factory=dict)

    @field_validator("commits")
    @classmethod
    def _check_names(cls, v: dict[str, CommitSpec]) -> dict[str, CommitSpec]:
        for name in v:
            if not _UNIT_NAME.match(name):
                raise ValueError(f"Invalid unit name: {name!r}")
        return v


def parse_manifest(data: Any, source: str = "<manifest>") -> Manifest:
    """Validate already-parsed manifest data.

    Raises:
        ConfigError: If the data does not describe a valid manifest.
    """
    if data is None:
        return Manifest()
    if not isinstance(data, dict):
        raise ConfigError(
            f"Manifest {source} must contain a mapping",
            value=type(data).__name__,
        )
    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        value = first_error.get("input")
        raise ConfigError(
            f"Invalid manifest {source}: {first_error['msg']}",
            field=field or None,
            value=value if isinstance(value, str | int | bool) else None,
        ) from e


def load_manifest(path: Path) -> Manifest:
    """Load and validate a manifest file.

    Args:
        path: YAML file to read.

    Returns:
        The validated manifest.

    Raises:
        ConfigError: If the file is missing, not valid YAML, or invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError(
            f"Manifest not found: {path}", field="manifest", value=str(path)
        ) from e
    except OSError as e:
        raise ConfigError(f"Cannot read manifest {path}: {e}", field="manifest") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    return parse_manifest(data, str(path))

"""Tests for manifest loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from gitreconcile.exceptions import ConfigError
from gitreconcile.manifest import Manifest, load_manifest, parse_manifest

MANIFEST = """
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
  ci.config:
    url: git@example.com:org/other.git
    branch: develop
"""


def test_load_manifest(tmp_path: Path) -> None:
    path = tmp_path / "manifest.yaml"
    path.write_text(MANIFEST)

    manifest = load_manifest(path)

    assert list(manifest.commits) == ["docs", "ci.config"]
    docs = manifest.commits["docs"]
    assert docs.message == "docs: managed README"
    assert docs.add[0].content == b"Hello, World!"
    assert docs.remove[0].recursive is True
    assert docs.prune is True
    assert manifest.commits["ci.config"].add == ()


def test_empty_document_is_empty_manifest() -> None:
    assert parse_manifest(None) == Manifest()


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Manifest not found") as exc_info:
        load_manifest(tmp_path / "absent.yaml")
    assert exc_info.value.field == "manifest"


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "manifest.yaml"
    path.write_text("commits: [unclosed\n")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_manifest(path)


def test_non_mapping_document() -> None:
    with pytest.raises(ConfigError, match="must contain a mapping"):
        parse_manifest(["a", "b"])


def test_unknown_top_level_key() -> None:
    with pytest.raises(ConfigError):
        parse_manifest({"commits": {}, "version": 2})


def test_invalid_unit_name() -> None:
    data = {"commits": {"-bad": {"url": "https://example.com/r.git", "branch": "m"}}}
    with pytest.raises(ConfigError, match="Invalid unit name"):
        parse_manifest(data)


def test_error_names_the_offending_field() -> None:
    data = {
        "commits": {
            "docs": {
                "url": "https://example.com/r.git",
                "branch": "main",
                "add": [{"path": "../escape", "content": "x"}],
            }
        }
    }
    with pytest.raises(ConfigError) as exc_info:
        parse_manifest(data, "manifest.yaml")
    assert exc_info.value.field == "commits.docs.add.0.path"
    assert exc_info.value.value == "../escape"
    assert "manifest.yaml" in exc_info.value.message


def test_invalid_branch_name() -> None:
    data = {"commits": {"docs": {"url": "https://example.com/r.git", "branch": "a..b"}}}
    with pytest.raises(ConfigError) as exc_info:
        parse_manifest(data)
    assert exc_info.value.field == "commits.docs.branch"

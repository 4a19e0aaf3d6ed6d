"""Tests for the JSON state store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gitreconcile.exceptions import ConfigError
from gitreconcile.models import ReconciliationResult
from gitreconcile.spec import AddEntry, CommitSpec
from gitreconcile.state import StateStore

SHA = "a" * 40


@pytest.fixture
def spec() -> CommitSpec:
    return CommitSpec(
        url="https://example.com/org/repo.git",
        branch="main",
        add=[AddEntry(path="bin/data", content=b"\x00\x01\xfe\xff")],
        prune=True,
    )


def test_missing_file_starts_empty(tmp_path: Path) -> None:
    store = StateStore.load(tmp_path / "state.json")
    assert len(store) == 0
    assert store.names() == []
    assert store.get("docs") is None


def test_put_save_and_reload(tmp_path: Path, spec: CommitSpec) -> None:
    path = tmp_path / "nested" / "state.json"
    store = StateStore.load(path)
    store.put("docs", spec, ReconciliationResult(sha=SHA, is_new=True))
    store.save()

    assert path.read_text().endswith("\n")
    assert json.loads(path.read_text())["version"] == 1

    reloaded = StateStore.load(path)
    assert "docs" in reloaded
    stored = reloaded.get("docs")
    assert stored is not None
    assert stored.spec == spec
    assert stored.spec.add[0].content == b"\x00\x01\xfe\xff"
    assert stored.sha == SHA
    assert stored.is_new is True


def test_text_content_survives_reload(tmp_path: Path) -> None:
    spec = CommitSpec.model_validate(
        {
            "url": "https://example.com/org/repo.git",
            "branch": "main",
            "add": [{"path": "a.txt", "content": "abcd"}],
        }
    )
    store = StateStore.load(tmp_path / "state.json")
    store.put("docs", spec, ReconciliationResult(sha=SHA, is_new=True))
    store.save()

    stored = StateStore.load(tmp_path / "state.json").get("docs")
    assert stored is not None
    assert stored.spec.add[0].content == b"abcd"


def test_forget(tmp_path: Path, spec: CommitSpec) -> None:
    store = StateStore(tmp_path / "state.json")
    store.put("docs", spec, ReconciliationResult(sha=SHA, is_new=False))
    store.forget("docs")
    store.forget("never-existed")
    assert "docs" not in store


def test_names_keep_insertion_order(tmp_path: Path, spec: CommitSpec) -> None:
    store = StateStore(tmp_path / "state.json")
    for name in ("b", "a", "c"):
        store.put(name, spec, ReconciliationResult(sha=SHA, is_new=False))
    assert store.names() == ["b", "a", "c"]


def test_invalid_json_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError, match="Invalid state file"):
        StateStore.load(path)


def test_invalid_record_names_the_field(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"version": 1, "commits": {"docs": {"sha": SHA}}}))
    with pytest.raises(ConfigError) as exc_info:
        StateStore.load(path)
    assert exc_info.value.field == "commits.docs.spec"


def test_unsupported_version(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"version": 99, "commits": {}}))
    with pytest.raises(ConfigError, match="Unsupported state file version 99"):
        StateStore.load(path)

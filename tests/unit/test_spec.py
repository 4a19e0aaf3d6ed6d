"""Tests for CommitSpec validation and derived values."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from gitreconcile.constants import DEFAULT_COMMIT_MESSAGE
from gitreconcile.models import AddFile, RemoveFile, RepositoryTarget
from gitreconcile.spec import (
    AddEntry,
    CommitSpec,
    RemoveEntry,
    normalize_repo_path,
    validate_branch_name,
)

URL = "https://example.com/org/repo.git"


def _spec(**overrides: object) -> CommitSpec:
    data: dict[str, object] = {"url": URL, "branch": "main"}
    data.update(overrides)
    return CommitSpec.model_validate(data)


class TestNormalizeRepoPath:
    def test_strips_dot_components_and_double_slashes(self) -> None:
        assert normalize_repo_path("./docs//README.md") == "docs/README.md"

    @pytest.mark.parametrize(
        "path",
        [
            "",
            "   ",
            "/etc/passwd",
            "../outside.txt",
            "docs/../../x",
            ".git/config",
            ".",
        ],
    )
    def test_rejects_unsafe_paths(self, path: str) -> None:
        with pytest.raises(ValueError):
            normalize_repo_path(path)

    def test_allows_dotfiles_that_are_not_git_dir(self) -> None:
        assert normalize_repo_path(".github/workflows/ci.yml") == (
            ".github/workflows/ci.yml"
        )


class TestValidateBranchName:
    @pytest.mark.parametrize("name", ["main", "release/1.x", "feature-abc_1"])
    def test_accepts_valid_names(self, name: str) -> None:
        assert validate_branch_name(name) == name

    @pytest.mark.parametrize(
        "name", ["", "-main", "a..b", "topic.lock", "with space", "x~1", "a@{1}", "/a"]
    )
    def test_rejects_invalid_names(self, name: str) -> None:
        with pytest.raises(ValueError):
            validate_branch_name(name)


class TestCommitSpec:
    def test_defaults(self) -> None:
        spec = _spec()
        assert spec.message == DEFAULT_COMMIT_MESSAGE
        assert spec.add == ()
        assert spec.remove == ()
        assert spec.prune is False

    def test_content_given_as_text_is_encoded(self) -> None:
        spec = _spec(add=[{"path": "a.txt", "content": "Hello, World!"}])
        assert spec.add[0].content == b"Hello, World!"

    @pytest.mark.parametrize("text", ["abcd", "SGVsbG8=", "héllo\n"])
    def test_text_content_is_kept_literally(self, text: str) -> None:
        spec = _spec(add=[{"path": "a.txt", "content": text}])
        assert spec.add[0].content == text.encode("utf-8")

    def test_json_content_is_base64(self) -> None:
        raw = (
            '{"url": "%s", "branch": "main", '
            '"add": [{"path": "a.txt", "content": "SGVsbG8="}]}' % URL
        )
        assert CommitSpec.model_validate_json(raw).add[0].content == b"Hello"

    def test_json_content_must_be_base64(self) -> None:
        raw = (
            '{"url": "%s", "branch": "main", '
            '"add": [{"path": "a.txt", "content": "Hello, World!"}]}' % URL
        )
        with pytest.raises(ValidationError, match="base64"):
            CommitSpec.model_validate_json(raw)

    def test_duplicate_add_paths_are_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Duplicate add path"):
            _spec(
                add=[
                    {"path": "a.txt", "content": "one"},
                    {"path": "./a.txt", "content": "two"},
                ]
            )

    def test_unknown_fields_are_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _spec(force=True)

    def test_blank_url_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _spec(url="   ")

    def test_target(self) -> None:
        assert _spec(branch="dev").target == RepositoryTarget(URL, "dev")

    def test_message_fallbacks(self) -> None:
        spec = _spec(message="base")
        assert spec.effective_update_message == "base"
        assert spec.effective_delete_message == "base"

        spec = _spec(message="base", update_message="upd")
        assert spec.effective_delete_message == "upd"

        spec = _spec(message="base", update_message="upd", delete_message="del")
        assert spec.effective_update_message == "upd"
        assert spec.effective_delete_message == "del"

    def test_operations(self) -> None:
        spec = _spec(
            add=[{"path": "a.txt", "content": "A"}],
            remove=[{"path": "old", "recursive": True}],
        )
        assert spec.add_operations() == (AddFile("a.txt", b"A"),)
        assert spec.remove_operations() == (RemoveFile("old", recursive=True),)
        assert spec.add_paths() == ("a.txt",)

    def test_add_set_differs_on_content_and_paths(self) -> None:
        spec = _spec(add=[{"path": "a.txt", "content": "A"}])
        assert not spec.add_set_differs([AddEntry(path="a.txt", content=b"A")])
        assert spec.add_set_differs([AddEntry(path="a.txt", content=b"B")])
        assert spec.add_set_differs([AddEntry(path="b.txt", content=b"A")])
        assert spec.add_set_differs([])

    def test_requires_replacement_only_for_url_or_branch(self) -> None:
        spec = _spec()
        assert not spec.requires_replacement(_spec(message="other", prune=True))
        assert spec.requires_replacement(_spec(branch="dev"))
        assert spec.requires_replacement(_spec(url="https://example.com/o/x.git"))

    def test_json_round_trip_keeps_binary_content(self) -> None:
        payload = bytes(range(256))
        spec = _spec(
            add=[AddEntry(path="bin/blob", content=payload)],
            remove=[RemoveEntry(path="stale.txt")],
        )
        restored = CommitSpec.model_validate_json(spec.model_dump_json())
        assert restored == spec
        assert restored.add[0].content == payload

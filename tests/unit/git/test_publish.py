"""Tests for PublishPipeline."""

from __future__ import annotations

from unittest.mock import MagicMock, call

import pytest

from gitreconcile.exceptions import PushRejectedError
from gitreconcile.git.publish import PublishPipeline

BASE = "b" * 40
NEW = "c" * 40


@pytest.fixture
def repo() -> MagicMock:
    mock = MagicMock()
    mock.commit.return_value = NEW
    return mock


def test_clean_tree_publishes_nothing(repo: MagicMock) -> None:
    repo.is_dirty.return_value = False

    result = PublishPipeline(repo, "main", BASE).publish("msg")

    assert result.sha == BASE
    assert result.is_new is False
    repo.stage_all.assert_not_called()
    repo.push_branch.assert_not_called()


def test_dirty_tree_runs_every_step_in_order(repo: MagicMock) -> None:
    repo.is_dirty.return_value = True

    result = PublishPipeline(repo, "main", BASE).publish("msg")

    assert result.sha == NEW
    assert result.is_new is True
    assert repo.mock_calls[1:] == [
        call.stage_all(),
        call.commit("msg"),
        call.set_branch("main", NEW),
        call.push_branch("main"),
    ]


def test_push_failure_propagates(repo: MagicMock) -> None:
    repo.push_branch.side_effect = PushRejectedError("main")

    with pytest.raises(PushRejectedError):
        PublishPipeline(repo, "main", BASE).commit_and_push("msg")
    repo.set_branch.assert_called_once_with("main", NEW)

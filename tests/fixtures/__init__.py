"""Shared test helpers for the gitreconcile test suite.

Repositories (from tests/fixtures/repositories.py)
--------------------------------------------------

Classes:
    RemoteRepo: Bare repository reached through a ``file://`` URL, with
        helpers to read branch contents and push changes from outside the
        engine.

Functions:
    create_remote: Build a bare remote whose HEAD is ``refs/heads/main``,
        optionally seeded with one commit holding README.md.

The matching pytest fixtures (``remote_repo``, ``empty_remote``) live in
tests/conftest.py.
"""

from __future__ import annotations

from tests.fixtures.repositories import TEST_ACTOR, RemoteRepo, create_remote

__all__ = [
    "TEST_ACTOR",
    "RemoteRepo",
    "create_remote",
]

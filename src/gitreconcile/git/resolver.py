"""Resolution of branch, tag and hash names to commits.

A fresh clone only exposes branches under ``refs/remotes/<remote>/``, while
tags and explicit hashes resolve directly, so names are tried remote-tracking
first and then as given. Remote-tracking wins, which keeps a branch and a tag
of the same name from colliding.
"""

from __future__ import annotations

from git import Repo
from git.exc import BadName, BadObject, ODBError
from git.objects import Commit, TagObject

from gitreconcile.constants import DEFAULT_REMOTE_NAME
from gitreconcile.exceptions import GitError, Phase, RefNotFoundError
from gitreconcile.logging import get_logger

__all__ = [
    "candidate_revisions",
    "resolve_commit",
    "resolve_revision",
]

logger = get_logger(__name__)


def candidate_revisions(
    name: str, remote: str = DEFAULT_REMOTE_NAME
) -> tuple[str, ...]:
    """Return the revision expressions tried for *name*, in order.

    Example:
        >>> candidate_revisions("main")
        ('refs/remotes/origin/main', 'main')
    """
    return (f"refs/remotes/{remote}/{name}", name)


def _peel(obj: object, expression: str) -> Commit:
    while isinstance(obj, TagObject):
        obj = obj.object
    if not isinstance(obj, Commit):
        raise GitError(
            f"'{expression}' names a {getattr(obj, 'type', 'non-commit')} "
            "object, not a commit",
            phase=Phase.RESOLVE,
        )
    return obj


def resolve_commit(
    repo: Repo, name: str, remote: str = DEFAULT_REMOTE_NAME
) -> Commit:
    """Resolve *name* to a commit object.

    Args:
        repo: Repository to resolve in.
        name: Branch, tag, short or full hash.
        remote: Remote whose tracking namespace is tried first.

    Returns:
        The commit, with annotated tags peeled.

    Raises:
        RefNotFoundError: If *name* resolves under neither naming scheme.
        GitError: If resolution fails for any other reason (ambiguous short
            hash, non-commit object, unreadable object store).
    """
    attempted = candidate_revisions(name, remote)
    for expression in attempted:
        try:
            obj = repo.rev_parse(expression)
        except (BadName, BadObject):
            logger.debug("revision_candidate_missing", expression=expression)
            continue
        except (ValueError, ODBError) as e:
            raise GitError(
                f"cannot resolve '{name}'", phase=Phase.RESOLVE, detail=str(e)
            ) from e
        commit = _peel(obj, expression)
        logger.debug("revision_resolved", ref=name, via=expression, sha=commit.hexsha)
        return commit
    raise RefNotFoundError(name, attempted)


def resolve_revision(repo: Repo, name: str, remote: str = DEFAULT_REMOTE_NAME) -> str:
    """Resolve *name* to a full commit SHA. See :func:`resolve_commit`."""
    return resolve_commit(repo, name, remote).hexsha

"""Read-only lookups: repository topology and single-file reads.

Both reuse the credential, clone and resolution steps of a reconciliation
pass but never write. A file that does not exist is a normal result
(``None``), not an error.
"""

from __future__ import annotations

from gitreconcile.config import ReconcileConfig
from gitreconcile.credentials import Credential, build_credential
from gitreconcile.exceptions import ConfigError, EntryNotFoundError
from gitreconcile.git.remote import list_remote_refs, validate_repository_url
from gitreconcile.git.repository import EphemeralRepository
from gitreconcile.logging import get_logger, pass_context
from gitreconcile.models import FileContent, RepositoryInfo
from gitreconcile.spec import normalize_repo_path
from gitreconcile.utils.security import redact_url

__all__ = [
    "describe_repository",
    "read_file",
]

logger = get_logger(__name__)


def describe_repository(
    url: str,
    config: ReconcileConfig | None = None,
    credential: Credential | None = None,
) -> RepositoryInfo:
    """List the HEAD, branches and tags of a remote repository.

    Args:
        url: Repository URL.
        config: Resolved configuration. Defaults to built-in settings.
        credential: Overrides the credential derived from ``config.auth``.

    Returns:
        Snapshot of the remote refs; ``head`` is None for an empty
        repository.

    Raises:
        ConfigError: If the URL is not acceptable.
        TransportError: If the remote cannot be listed.
    """
    config = config or ReconcileConfig()
    validate_repository_url(url, config.network.allowed_schemes)
    credential = credential or build_credential(config.auth, url)
    with pass_context(operation="describe", url=redact_url(url)):
        return list_remote_refs(
            url, credential, timeout=config.network.timeout_seconds
        )


def read_file(
    url: str,
    path: str,
    ref: str | None = None,
    config: ReconcileConfig | None = None,
    credential: Credential | None = None,
) -> FileContent | None:
    """Read one file from a remote repository.

    Args:
        url: Repository URL.
        path: Repository-relative path of the file.
        ref: Branch, tag or hash. Defaults to the remote's default branch.
        config: Resolved configuration. Defaults to built-in settings.
        credential: Overrides the credential derived from ``config.auth``.

    Returns:
        The file, or None if *path* does not exist at that revision.

    Raises:
        ConfigError: If the URL or path is not acceptable.
        RefNotFoundError: If *ref* does not resolve.
        TransportError: If the clone fails.
        WorkingTreeError: If *path* names a directory.
    """
    config = config or ReconcileConfig()
    validate_repository_url(url, config.network.allowed_schemes)
    try:
        normalized = normalize_repo_path(path)
    except ValueError as e:
        raise ConfigError(str(e), field="path", value=path) from e
    credential = credential or build_credential(config.auth, url)

    with (
        pass_context(operation="read_file", url=redact_url(url), path=normalized),
        EphemeralRepository(
            url,
            credential,
            remote=config.network.remote_name,
            timeout=config.network.timeout_seconds,
            committer=config.committer,
        ) as repo,
    ):
        sha = repo.resolve(ref if ref is not None else "HEAD")
        try:
            content = repo.read_blob(sha, normalized)
        except EntryNotFoundError:
            logger.info("file_not_found", ref=ref, sha=sha)
            return None

    return FileContent(url=url, ref=ref, sha=sha, path=normalized, content=content)

"""Operations against a remote that need no clone.

URL validation runs before any network activity; ref listing is a single
``git ls-remote`` call.
"""

from __future__ import annotations

import tempfile
from collections.abc import Iterable
from pathlib import Path
from urllib.parse import urlsplit

from git import Git, GitCommandError
from git.exc import GitCommandNotFound

from gitreconcile.constants import DEFAULT_NETWORK_TIMEOUT, SCRATCH_PREFIX
from gitreconcile.credentials import Credential
from gitreconcile.exceptions import ConfigError, Phase
from gitreconcile.git.repository import convert_git_error, git_environment
from gitreconcile.logging import get_logger
from gitreconcile.models import BranchRef, HeadRef, RepositoryInfo, TagRef
from gitreconcile.utils.security import redact_url, url_scheme

__all__ = [
    "list_remote_refs",
    "parse_ls_remote",
    "url_scheme",
    "validate_repository_url",
]

logger = get_logger(__name__)

_HEADS_PREFIX = "refs/heads/"
_TAGS_PREFIX = "refs/tags/"
_PEELED_SUFFIX = "^{}"


def validate_repository_url(url: str, allowed_schemes: Iterable[str]) -> str:
    """Check *url* before it is handed to git.

    Args:
        url: Repository URL.
        allowed_schemes: Transports the configuration accepts.

    Returns:
        The detected scheme.

    Raises:
        ConfigError: If the URL is empty, malformed or uses a scheme that is
            not allowed.
    """
    if not url or not url.strip():
        raise ConfigError("Repository URL cannot be empty", field="url")
    if url.startswith("-") or any(c.isspace() for c in url):
        raise ConfigError(
            "Repository URL is malformed", field="url", value=redact_url(url)
        )

    scheme = url_scheme(url)
    allowed = {s.lower() for s in allowed_schemes}
    if scheme not in allowed:
        raise ConfigError(
            f"URL scheme '{scheme}' is not allowed "
            f"(allowed: {', '.join(sorted(allowed))})",
            field="url",
            value=redact_url(url),
        )

    if scheme in ("http", "https", "ssh") and "://" in url:
        try:
            host = urlsplit(url).hostname
        except ValueError as e:
            raise ConfigError(
                f"Repository URL is malformed: {e}",
                field="url",
                value=redact_url(url),
            ) from e
        if not host:
            raise ConfigError(
                "Repository URL has no host", field="url", value=redact_url(url)
            )
    return scheme


def parse_ls_remote(url: str, output: str) -> RepositoryInfo:
    """Build a :class:`RepositoryInfo` from ``git ls-remote --symref`` output.

    Peeled tag lines (``^{}``) are skipped; tags report the advertised value.
    """
    head_ref: str | None = None
    head_sha: str | None = None
    branches: list[BranchRef] = []
    tags: list[TagRef] = []

    for line in output.splitlines():
        if not line.strip():
            continue
        left, _, name = line.partition("\t")
        if left.startswith("ref: "):
            if name == "HEAD":
                head_ref = left.removeprefix("ref: ").strip()
            continue
        sha = left.strip()
        if name == "HEAD":
            head_sha = sha
        elif name.endswith(_PEELED_SUFFIX):
            continue
        elif name.startswith(_HEADS_PREFIX):
            branches.append(BranchRef(name=name.removeprefix(_HEADS_PREFIX), sha=sha))
        elif name.startswith(_TAGS_PREFIX):
            tags.append(TagRef(name=name.removeprefix(_TAGS_PREFIX), sha=sha))

    head = HeadRef(sha=head_sha, ref=head_ref) if head_sha else None
    return RepositoryInfo(
        url=url, head=head, branches=tuple(branches), tags=tuple(tags)
    )


def list_remote_refs(
    url: str,
    credential: Credential,
    *,
    timeout: float = DEFAULT_NETWORK_TIMEOUT,
) -> RepositoryInfo:
    """List branches, tags and HEAD of a remote.

    Raises:
        TransportError: If the remote cannot be reached.
        AuthenticationError: If the remote rejects the credentials.
    """
    with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX) as tmp:
        scratch = Path(tmp)
        runner = Git(str(scratch))
        runner.update_environment(
            **git_environment(credential, scratch / "credentials")
        )
        try:
            output = runner.ls_remote("--symref", url, kill_after_timeout=timeout)
        except (GitCommandError, GitCommandNotFound) as e:
            raise convert_git_error(e, Phase.LIST_REFS) from e

    info = parse_ls_remote(url, output)
    logger.info(
        "remote_refs_listed",
        url=redact_url(url),
        branches=len(info.branches),
        tags=len(info.tags),
    )
    return info

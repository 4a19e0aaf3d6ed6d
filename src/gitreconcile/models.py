"""Value objects exchanged between the engine, the lookups and their callers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

__all__ = [
    "AddFile",
    "BranchRef",
    "FileContent",
    "FileOperation",
    "HeadRef",
    "ReconciliationResult",
    "RemoveFile",
    "RepositoryInfo",
    "RepositoryTarget",
    "TagRef",
]


# =============================================================================
# Desired State
# =============================================================================


@dataclass(frozen=True, slots=True)
class RepositoryTarget:
    """Remote and branch a reconciliation unit is bound to.

    Attributes:
        url: Repository URL (http, https or ssh).
        branch: Branch whose head is reconciled.
    """

    url: str
    branch: str


@dataclass(frozen=True, slots=True)
class AddFile:
    """Create or overwrite ``path`` with exactly ``content``.

    Attributes:
        path: Repository-relative POSIX path.
        content: Bytes written verbatim.
    """

    path: str
    content: bytes


@dataclass(frozen=True, slots=True)
class RemoveFile:
    """Remove ``path`` from the tree.

    Attributes:
        path: Repository-relative POSIX path, or a glob when ``recursive``.
        recursive: Also remove directories and their descendants.
    """

    path: str
    recursive: bool = False


FileOperation = AddFile | RemoveFile


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Outcome of a pass that left the branch matching the desired state.

    Attributes:
        sha: Full commit SHA the branch head matches.
        is_new: True only when this pass created and pushed that commit.
    """

    sha: str
    is_new: bool

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class BranchRef:
    """Remote branch snapshot."""

    name: str
    sha: str


@dataclass(frozen=True, slots=True)
class TagRef:
    """Remote tag snapshot; ``sha`` is the advertised (unpeeled) value."""

    name: str
    sha: str


@dataclass(frozen=True, slots=True)
class HeadRef:
    """Remote HEAD.

    Attributes:
        sha: Commit HEAD points at.
        ref: Symbolic target such as ``refs/heads/main``, when advertised.
    """

    sha: str
    ref: str | None = None


@dataclass(frozen=True, slots=True)
class RepositoryInfo:
    """Branch and tag topology of a remote repository.

    Attributes:
        url: Repository URL as requested.
        head: Remote HEAD, or None for an empty repository.
        branches: Branches in the order the remote advertised them.
        tags: Tags in the order the remote advertised them.
    """

    url: str
    head: HeadRef | None
    branches: tuple[BranchRef, ...] = field(default_factory=tuple)
    tags: tuple[TagRef, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class FileContent:
    """A file read from a remote repository.

    Attributes:
        url: Repository URL.
        ref: Ref the caller asked for, or None for the default branch.
        sha: Commit the content was read from.
        path: Repository-relative path.
        content: Raw bytes of the blob.
    """

    url: str
    ref: str | None
    sha: str
    path: str
    content: bytes

    @property
    def id(self) -> str:
        return f"{self.url.rstrip('/')}/{self.path}"

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

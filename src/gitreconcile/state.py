"""JSON state store remembering the last applied spec of each commit unit.

The store is what carries the previous add set and reported SHA from one run
to the next; the engine itself keeps nothing between passes. Every change is
written atomically.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from gitreconcile.constants import STATE_FILE_VERSION
from gitreconcile.exceptions import ConfigError
from gitreconcile.logging import get_logger
from gitreconcile.models import ReconciliationResult
from gitreconcile.spec import CommitSpec
from gitreconcile.utils.atomic import atomic_write_text

__all__ = [
    "CommitState",
    "StateFile",
    "StateStore",
]

logger = get_logger(__name__)


class CommitState(BaseModel):
    """Recorded outcome of the last pass for one unit.

    Attributes:
        spec: Desired state that pass applied.
        sha: Reported commit SHA.
        is_new: Whether that pass created the commit.
        updated_at: When the record was written.
    """

    spec: CommitSpec
    sha: str
    is_new: bool = False
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class StateFile(BaseModel):
    """On-disk layout of the state file."""

    version: int = STATE_FILE_VERSION
    commits: dict[str, CommitState] = Field(default_factory=dict)


class StateStore:
    """Load, query and atomically persist :class:`StateFile` data.

    Example:
        ```python
        store = StateStore.load(Path(".gitreconcile/state.json"))
        store.put("docs", spec, result)
        store.save()
        ```
    """

    def __init__(self, path: Path, state: StateFile | None = None) -> None:
        self.path = path
        self._state = state or StateFile()

    @classmethod
    def load(cls, path: Path) -> StateStore:
        """Read *path*, or start empty if it does not exist.

        Raises:
            ConfigError: If the file is unreadable, not valid JSON, or from
                an unsupported version.
        """
        if not path.exists():
            logger.debug("state_file_missing", path=str(path))
            return cls(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(
                f"Cannot read state file {path}: {e}", field="state"
            ) from e
        try:
            state = StateFile.model_validate_json(raw)
        except ValidationError as e:
            first_error = e.errors()[0]
            location = ".".join(str(loc) for loc in first_error["loc"])
            raise ConfigError(
                f"Invalid state file {path}: {first_error['msg']}",
                field=location or "state",
            ) from e
        if state.version != STATE_FILE_VERSION:
            raise ConfigError(
                f"Unsupported state file version {state.version}",
                field="version",
                value=state.version,
            )
        return cls(path, state)

    def names(self) -> list[str]:
        return list(self._state.commits)

    def get(self, name: str) -> CommitState | None:
        return self._state.commits.get(name)

    def put(self, name: str, spec: CommitSpec, result: ReconciliationResult) -> None:
        self._state.commits[name] = CommitState(
            spec=spec, sha=result.sha, is_new=result.is_new
        )

    def forget(self, name: str) -> None:
        self._state.commits.pop(name, None)

    def __contains__(self, name: object) -> bool:
        return name in self._state.commits

    def __len__(self) -> int:
        return len(self._state.commits)

    def save(self) -> None:
        """Write the state atomically.

        Raises:
            OSError: If the file cannot be written; the previous state file
                is left intact.
        """
        atomic_write_text(self.path, self._state.model_dump_json(indent=2) + "\n")
        logger.debug("state_saved", path=str(self.path), units=len(self))

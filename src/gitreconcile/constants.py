"""gitreconcile constants.

Single source of truth for defaults shared by the engine, the configuration
layer and the CLI.
"""

from __future__ import annotations

# =============================================================================
# Commit Messages
# =============================================================================

#: Commit message used when a unit does not declare one
DEFAULT_COMMIT_MESSAGE: str = "Committed with gitreconcile"

# =============================================================================
# Git
# =============================================================================

#: Name given to the remote of every ephemeral clone
DEFAULT_REMOTE_NAME: str = "origin"

#: URL schemes accepted for repository URLs
DEFAULT_ALLOWED_SCHEMES: tuple[str, ...] = ("http", "https", "ssh")

#: Author/committer identity for commits created by the engine
DEFAULT_COMMITTER_NAME: str = "gitreconcile"
DEFAULT_COMMITTER_EMAIL: str = "gitreconcile@localhost"

#: Bound on a single network git command (clone, ls-remote, push), in seconds
DEFAULT_NETWORK_TIMEOUT: float = 300.0

#: Prefix of the per-pass scratch directory
SCRATCH_PREFIX: str = "gitreconcile-"

# =============================================================================
# Environment
# =============================================================================

#: Token variable honoured ahead of any configured token
TOKEN_ENV_VAR: str = "GITHUB_TOKEN"

#: Prefix of all settings environment variables
ENV_PREFIX: str = "GITRECONCILE_"

# =============================================================================
# Files
# =============================================================================

#: Project configuration file looked up in the working directory
PROJECT_CONFIG_FILE: str = "gitreconcile.yaml"

#: Default location of the state file
DEFAULT_STATE_FILE: str = ".gitreconcile/state.json"

#: Schema version written to the state file
STATE_FILE_VERSION: int = 1

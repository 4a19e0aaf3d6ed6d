"""gitreconcile: keep declared files committed at a branch head.

Example:
    ```python
    from gitreconcile import CommitSpec, Reconciler, load_config
    from gitreconcile.spec import AddEntry

    reconciler = Reconciler(load_config())
    result = reconciler.create(
        CommitSpec(
            url="https://example.com/org/repo.git",
            branch="main",
            add=[AddEntry(path="README.md", content=b"Hello, World!")],
        )
    )
    ```
"""

from __future__ import annotations

__version__ = "0.3.0"

from gitreconcile.config import ReconcileConfig, load_config  # noqa: E402
from gitreconcile.lookups import describe_repository, read_file  # noqa: E402
from gitreconcile.models import ReconciliationResult  # noqa: E402
from gitreconcile.reconcile import AsyncReconciler, Reconciler  # noqa: E402
from gitreconcile.spec import CommitSpec  # noqa: E402

__all__ = [
    "AsyncReconciler",
    "CommitSpec",
    "ReconcileConfig",
    "Reconciler",
    "ReconciliationResult",
    "__version__",
    "describe_repository",
    "load_config",
    "read_file",
]

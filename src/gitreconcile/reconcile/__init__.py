"""Reconciliation engine and the manifest-driven apply loop."""

from __future__ import annotations

from gitreconcile.reconcile.apply import (
    Action,
    ApplyReport,
    UnitOutcome,
    apply_manifest,
    check_state,
    destroy_state,
)
from gitreconcile.reconcile.engine import AsyncReconciler, Reconciler, pass_retrying

__all__ = [
    "Action",
    "ApplyReport",
    "AsyncReconciler",
    "Reconciler",
    "UnitOutcome",
    "apply_manifest",
    "check_state",
    "destroy_state",
    "pass_retrying",
]

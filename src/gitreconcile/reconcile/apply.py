"""Drive the commit lifecycle from a manifest and a state store.

For each unit the driver picks the lifecycle operation the way a
declarative tool would: create what is new, replace what moved to another
repository or branch, re-create what drifted, update what changed and
delete what was dropped from the manifest. State is saved after every unit,
so a failure part-way keeps the work already done.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from enum import Enum

from gitreconcile.logging import get_logger, pass_context
from gitreconcile.manifest import Manifest
from gitreconcile.models import ReconciliationResult
from gitreconcile.reconcile.engine import Reconciler
from gitreconcile.spec import CommitSpec
from gitreconcile.state import StateStore

__all__ = [
    "Action",
    "ApplyReport",
    "OutcomeCallback",
    "UnitOutcome",
    "apply_manifest",
    "check_state",
    "destroy_state",
]

logger = get_logger(__name__)


class Action(str, Enum):
    """What happened to one unit."""

    CREATED = "created"
    UPDATED = "updated"
    REPLACED = "replaced"
    RECREATED = "recreated"
    UNCHANGED = "unchanged"
    DELETED = "deleted"
    IN_SYNC = "in_sync"
    DRIFTED = "drifted"


@dataclass(frozen=True, slots=True)
class UnitOutcome:
    """Outcome for one unit.

    Attributes:
        name: Unit name from the manifest or state.
        action: Operation performed.
        sha: Commit the branch matches afterwards, None after delete or
            drift.
        is_new: True if this run pushed a commit for the unit.
    """

    name: str
    action: Action
    sha: str | None = None
    is_new: bool = False

    def to_dict(self) -> dict[str, object]:
        data = asdict(self)
        data["action"] = self.action.value
        return data


@dataclass(slots=True)
class ApplyReport:
    """Outcomes of one run, in processing order."""

    outcomes: list[UnitOutcome] = field(default_factory=list)

    @property
    def pushed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.is_new)

    @property
    def drifted(self) -> list[str]:
        return [o.name for o in self.outcomes if o.action is Action.DRIFTED]

    def to_dict(self) -> dict[str, object]:
        return {
            "units": [outcome.to_dict() for outcome in self.outcomes],
            "pushed": self.pushed,
        }


OutcomeCallback = Callable[[UnitOutcome], None]


def _record(
    report: ApplyReport, outcome: UnitOutcome, on_outcome: OutcomeCallback | None
) -> None:
    report.outcomes.append(outcome)
    logger.info(
        "unit_reconciled",
        unit=outcome.name,
        action=outcome.action.value,
        sha=outcome.sha,
        is_new=outcome.is_new,
    )
    if on_outcome is not None:
        on_outcome(outcome)


def _converge(
    name: str,
    spec: CommitSpec,
    store: StateStore,
    reconciler: Reconciler,
) -> UnitOutcome:
    stored = store.get(name)

    if stored is None:
        result = reconciler.create(spec)
        store.put(name, spec, result)
        return UnitOutcome(name, Action.CREATED, result.sha, result.is_new)

    previous = stored.spec
    if spec.requires_replacement(previous):
        deleted = reconciler.delete(previous)
        store.forget(name)
        store.save()
        result = reconciler.create(spec)
        store.put(name, spec, result)
        is_new = result.is_new or deleted is not None
        return UnitOutcome(name, Action.REPLACED, result.sha, is_new)

    current = reconciler.read(previous)
    if current is None:
        result = reconciler.create(spec)
        store.put(name, spec, result)
        return UnitOutcome(name, Action.RECREATED, result.sha, result.is_new)

    if spec != previous:
        result = reconciler.update(spec, previous_add=previous.add)
        store.put(name, spec, result)
        return UnitOutcome(name, Action.UPDATED, result.sha, result.is_new)

    if current.sha != stored.sha:
        store.put(name, spec, ReconciliationResult(sha=current.sha, is_new=False))
    return UnitOutcome(name, Action.UNCHANGED, current.sha, False)


def apply_manifest(
    manifest: Manifest,
    store: StateStore,
    reconciler: Reconciler,
    on_outcome: OutcomeCallback | None = None,
) -> ApplyReport:
    """Converge every unit of *manifest* and delete units it no longer has.

    Args:
        manifest: Desired state.
        store: Remembered state; updated and saved after each unit.
        reconciler: Engine running the passes.
        on_outcome: Called after each unit, for progress display.

    Returns:
        Outcomes for every unit touched.

    Raises:
        GitReconcileError: From the first unit that fails; earlier units are
            already saved.
    """
    report = ApplyReport()
    for name, spec in manifest.commits.items():
        with pass_context(unit=name):
            outcome = _converge(name, spec, store, reconciler)
            store.save()
        _record(report, outcome, on_outcome)

    for name in store.names():
        if name in manifest.commits:
            continue
        stored = store.get(name)
        if stored is None:
            continue
        with pass_context(unit=name):
            result = reconciler.delete(stored.spec)
            store.forget(name)
            store.save()
        outcome = UnitOutcome(
            name,
            Action.DELETED,
            result.sha if result else None,
            result is not None,
        )
        _record(report, outcome, on_outcome)
    return report


def check_state(
    store: StateStore,
    reconciler: Reconciler,
    on_outcome: OutcomeCallback | None = None,
) -> ApplyReport:
    """Run a read pass for every stored unit without writing anything."""
    report = ApplyReport()
    for name in store.names():
        stored = store.get(name)
        if stored is None:
            continue
        with pass_context(unit=name):
            current = reconciler.read(stored.spec)
        if current is None:
            outcome = UnitOutcome(name, Action.DRIFTED)
        else:
            outcome = UnitOutcome(name, Action.IN_SYNC, current.sha)
        _record(report, outcome, on_outcome)
    return report


def destroy_state(
    store: StateStore,
    reconciler: Reconciler,
    on_outcome: OutcomeCallback | None = None,
) -> ApplyReport:
    """Delete every stored unit and empty the state."""
    report = ApplyReport()
    for name in store.names():
        stored = store.get(name)
        if stored is None:
            continue
        with pass_context(unit=name):
            result = reconciler.delete(stored.spec)
            store.forget(name)
            store.save()
        outcome = UnitOutcome(
            name,
            Action.DELETED,
            result.sha if result else None,
            result is not None,
        )
        _record(report, outcome, on_outcome)
    return report

"""Per-version processing states and run reports."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class UnitState(str, Enum):
    """Lifecycle of a single version's processing unit."""

    LISTED = "listed"
    FETCHING = "fetching"
    NOT_FOUND = "not_found"
    FETCHED = "fetched"
    REWRITING = "rewriting"
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    SAVING = "saving"
    SKIPPED = "skipped"
    DONE = "done"
    FAILED = "failed"


# Allowed transitions. SKIPPED, DONE and FAILED are terminal.
VALID_TRANSITIONS: dict[UnitState, set[UnitState]] = {
    UnitState.LISTED: {UnitState.FETCHING},
    UnitState.FETCHING: {UnitState.NOT_FOUND, UnitState.FETCHED, UnitState.FAILED},
    UnitState.NOT_FOUND: {UnitState.SKIPPED},
    UnitState.FETCHED: {UnitState.REWRITING},
    UnitState.REWRITING: {UnitState.UNCHANGED, UnitState.CHANGED, UnitState.FAILED},
    UnitState.UNCHANGED: {UnitState.SKIPPED},
    UnitState.CHANGED: {UnitState.SAVING},
    UnitState.SAVING: {UnitState.DONE, UnitState.FAILED},
    UnitState.SKIPPED: set(),
    UnitState.DONE: set(),
    UnitState.FAILED: set(),
}

TERMINAL_STATES = frozenset({UnitState.SKIPPED, UnitState.DONE, UnitState.FAILED})


class UnitOutcome(BaseModel):
    """Terminal result of processing one version."""

    model_config = ConfigDict(frozen=True)

    version: str
    state: UnitState
    path: str | None = None
    error: str | None = None
    # States visited on the way, starting at LISTED
    trail: tuple[UnitState, ...] = ()


class RunReport(BaseModel):
    """Aggregate of every unit in a run."""

    model_config = ConfigDict(frozen=True)

    outcomes: list[UnitOutcome] = Field(default_factory=list)

    def with_state(self, state: UnitState) -> list[UnitOutcome]:
        return [o for o in self.outcomes if o.state == state]

    @property
    def done(self) -> list[UnitOutcome]:
        return self.with_state(UnitState.DONE)

    @property
    def skipped(self) -> list[UnitOutcome]:
        return self.with_state(UnitState.SKIPPED)

    @property
    def failed(self) -> list[UnitOutcome]:
        return self.with_state(UnitState.FAILED)

    @property
    def ok(self) -> bool:
        """Whether every unit finished without failure."""
        return not self.failed

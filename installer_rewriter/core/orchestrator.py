"""Rewrite orchestrator — the central coordinator for a rewrite run.

The ``Rewriter`` lists every version of a source once, then processes each
version as an independent unit on its own worker thread:

    load -> rewrite (every rewrite, in order) -> save (only if changed)

Units are admitted through a ``ConcurrencyGate``. A failing unit is logged
and reported, never propagated, so siblings keep running. Once every unit
has finished the rewrites are closed, exactly once and in order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait

from installer_rewriter.core.gate import ConcurrencyGate
from installer_rewriter.models.outcome import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    RunReport,
    UnitOutcome,
    UnitState,
)
from installer_rewriter.rewrites.base import InstallerRewrite
from installer_rewriter.sources.base import InstallerSource

logger = logging.getLogger(__name__)

THREAD_NAME_PREFIX = "installer-rewriter"


class _UnitTrail:
    """Ordered record of the states one unit moves through."""

    def __init__(self) -> None:
        self.states: list[UnitState] = [UnitState.LISTED]

    @property
    def current(self) -> UnitState:
        return self.states[-1]

    def advance(self, *states: UnitState) -> None:
        for state in states:
            if state not in VALID_TRANSITIONS[self.current]:
                raise RuntimeError(
                    f"Invalid unit transition {self.current.value} -> {state.value}"
                )
            self.states.append(state)


class Rewriter:
    """Applies rewrites to every installer of a source and republishes changes.

    Parameters
    ----------
    rewrites:
        Rewrites applied to each installer, in order. The rewriter takes
        ownership and closes them at the end of the run.
    """

    def __init__(self, rewrites: list[InstallerRewrite]) -> None:
        self.rewrites = list(rewrites)
        self._closed = False

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def run(
        self,
        source: InstallerSource,
        version_filter: str | None = None,
        limit: int | None = None,
    ) -> RunReport:
        """List the source's versions and process all of them.

        Listing errors propagate: without a version list there is nothing
        to schedule.
        """
        versions = source.list_versions(version_filter)
        return self.run_versions(source, versions, limit)

    def run_versions(
        self,
        source: InstallerSource,
        versions: list[str],
        limit: int | None = None,
    ) -> RunReport:
        """Process *versions* concurrently and wait for all of them.

        Parameters
        ----------
        source:
            Where installers are loaded from and saved to.
        versions:
            The full candidate set for this run.
        limit:
            Maximum number of units running at the same time. ``None``
            runs every unit at once.
        """
        if self._closed:
            raise RuntimeError("Rewriter is closed; its rewrites were released")
        logger.info("Found %d versions to rewrite.", len(versions))
        logger.debug("Versions: %s", versions)

        gate = ConcurrencyGate(limit)
        executor = ThreadPoolExecutor(
            max_workers=limit or max(len(versions), 1),
            thread_name_prefix=THREAD_NAME_PREFIX,
        )
        try:
            futures = [
                gate.submit(executor, self.process_version, source, version)
                for version in versions
            ]
            wait(futures)
            outcomes = [future.result() for future in futures]
        finally:
            executor.shutdown(wait=True)
            self.close()

        report = RunReport(outcomes=outcomes)
        logger.info(
            "Finished rewriting! %d saved, %d skipped, %d failed.",
            len(report.done),
            len(report.skipped),
            len(report.failed),
        )
        return report

    def close(self) -> None:
        """Close every rewrite once, in order, even if one of them fails."""
        if self._closed:
            return
        self._closed = True
        for rewrite in self.rewrites:
            try:
                rewrite.close()
            except Exception:
                logger.exception("Failed to close rewrite %s", rewrite.name)

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------

    def process_version(self, source: InstallerSource, version: str) -> UnitOutcome:
        """Run one version through load, rewrite and save.

        Every exception is caught here and turned into a FAILED outcome.
        """
        trail = _UnitTrail()
        installer = None
        try:
            trail.advance(UnitState.FETCHING)
            installer = source.load(version)
            if installer is None:
                trail.advance(UnitState.NOT_FOUND, UnitState.SKIPPED)
                logger.info("Installer %s not found. Skipped.", version)
                return self._outcome(version, trail)

            trail.advance(UnitState.FETCHED, UnitState.REWRITING)
            logger.info("Processing installer %s (%s):", version, installer.path)
            for rewrite in self.rewrites:
                logger.info("Rewriting %s with %s", version, rewrite.name)
                rewrite.rewrite(installer)

            if not installer.changed:
                trail.advance(UnitState.UNCHANGED, UnitState.SKIPPED)
                logger.info("Processed %s. Skipped.", version)
                return self._outcome(version, trail, installer.path)

            trail.advance(UnitState.CHANGED, UnitState.SAVING)
            source.save(installer)
            trail.advance(UnitState.DONE)
            logger.info("Processed %s", version)
            return self._outcome(version, trail, installer.path)
        except Exception as exc:
            logger.exception("Failed to rewrite installer %s", version)
            if trail.current not in TERMINAL_STATES:
                trail.states.append(UnitState.FAILED)
            return self._outcome(
                version,
                trail,
                installer.path if installer is not None else None,
                error=f"{type(exc).__name__}: {exc}",
            )
        finally:
            if installer is not None:
                installer.jar.close()

    @staticmethod
    def _outcome(
        version: str,
        trail: _UnitTrail,
        path: str | None = None,
        error: str | None = None,
    ) -> UnitOutcome:
        return UnitOutcome(
            version=version,
            state=trail.current,
            path=path,
            error=error,
            trail=tuple(trail.states),
        )

"""Unit tests for the Rewriter orchestrator.

Covers scheduling, per-unit failure isolation, the state trail of each unit
and the once-only close of rewrites.
"""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from installer_rewriter.core.jar_contents import JarContents
from installer_rewriter.core.metadata import MetadataError
from installer_rewriter.core.orchestrator import Rewriter
from installer_rewriter.models.artifacts import Installer
from installer_rewriter.models.outcome import UnitState
from installer_rewriter.rewrites.base import InstallerRewrite
from installer_rewriter.sources.base import InstallerSource

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class RecordingSource(InstallerSource):
    """In-memory source recording every save."""

    def __init__(self, jars: dict[str, bytes], fail_on: set[str] | None = None) -> None:
        self._jars = jars
        self._fail_on = fail_on or set()
        self.saved: list[str] = []
        self.loaded: list[str] = []
        self._lock = threading.Lock()

    def list_versions(self, version_filter=None):
        return self._apply_filter(sorted(self._jars), version_filter)

    def load(self, version):
        with self._lock:
            self.loaded.append(version)
        if version in self._fail_on:
            raise OSError(f"disk error for {version}")
        data = self._jars.get(version)
        if data is None:
            return None
        return Installer(version=version, path=f"{version}.jar", jar=JarContents.from_bytes(data))

    def save(self, installer):
        if installer is None:
            return
        with self._lock:
            self.saved.append(installer.version)

    def resolve_location(self, version):
        return f"{version}.jar"


class DeleteRewrite(InstallerRewrite):
    """Deletes one entry; a no-op once it is gone."""

    def __init__(self, entry: str, log: list[str] | None = None) -> None:
        self.entry = entry
        self.log = log if log is not None else []
        self.closed = 0

    @property
    def name(self) -> str:
        return f"delete {self.entry}"

    def rewrite(self, installer: Installer) -> None:
        self.log.append(f"{self.name}:{installer.version}")
        installer.jar.delete(self.entry)

    def close(self) -> None:
        self.closed += 1
        self.log.append(f"close:{self.name}")


class ExplodingRewrite(DeleteRewrite):
    def rewrite(self, installer: Installer) -> None:
        if installer.version == "bad":
            raise RuntimeError("rewrite exploded")
        super().rewrite(installer)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestRewriterRun:
    def test_changed_installers_are_saved(self, make_jar):
        source = RecordingSource({
            "1.0": make_jar(entries={"a.txt": b"a"}),
            "2.0": make_jar(entries={"b.txt": b"b"}),
        })
        report = Rewriter([DeleteRewrite("a.txt")]).run(source)

        assert source.saved == ["1.0"]
        assert [o.version for o in report.done] == ["1.0"]
        assert [o.version for o in report.skipped] == ["2.0"]
        assert report.ok

    def test_filter_limits_scheduled_versions(self, make_jar):
        source = RecordingSource({v: make_jar() for v in ("1.19", "1.20.1", "1.20.4")})
        report = Rewriter([]).run(source, version_filter="1.20")
        assert sorted(source.loaded) == ["1.20.1", "1.20.4"]
        assert len(report.outcomes) == 2

    def test_absent_installer_is_skipped_not_failed(self):
        source = RecordingSource({})
        report = Rewriter([DeleteRewrite("a.txt")]).run_versions(source, ["9.9"])

        (outcome,) = report.outcomes
        assert outcome.state is UnitState.SKIPPED
        assert UnitState.NOT_FOUND in outcome.trail
        assert source.saved == []

    def test_unchanged_installer_not_saved(self, make_jar):
        source = RecordingSource({"1.0": make_jar()})
        report = Rewriter([DeleteRewrite("missing.txt")]).run(source)
        assert source.saved == []
        assert report.outcomes[0].trail == (
            UnitState.LISTED,
            UnitState.FETCHING,
            UnitState.FETCHED,
            UnitState.REWRITING,
            UnitState.UNCHANGED,
            UnitState.SKIPPED,
        )

    def test_done_trail(self, make_jar):
        source = RecordingSource({"1.0": make_jar(entries={"a.txt": b"a"})})
        report = Rewriter([DeleteRewrite("a.txt")]).run(source)
        assert report.outcomes[0].trail[-3:] == (UnitState.CHANGED, UnitState.SAVING, UnitState.DONE)

    def test_rewrites_applied_in_order(self, make_jar):
        log: list[str] = []
        source = RecordingSource({"1.0": make_jar()})
        Rewriter([DeleteRewrite("x", log), DeleteRewrite("y", log)]).run(source)
        assert log == ["delete x:1.0", "delete y:1.0", "close:delete x", "close:delete y"]

    def test_listing_error_propagates(self):
        class BrokenSource(RecordingSource):
            def list_versions(self, version_filter=None):
                raise MetadataError("bad index")

        with pytest.raises(MetadataError):
            Rewriter([]).run(BrokenSource({}))


class TestFailureIsolation:
    def test_failed_load_does_not_affect_siblings(self, make_jar):
        source = RecordingSource(
            {"1.0": make_jar(entries={"a.txt": b"a"}), "2.0": make_jar(entries={"a.txt": b"a"})},
            fail_on={"1.0"},
        )
        report = Rewriter([DeleteRewrite("a.txt")]).run(source)

        assert [o.version for o in report.failed] == ["1.0"]
        assert "disk error" in report.failed[0].error
        assert source.saved == ["2.0"]
        assert not report.ok

    def test_failed_rewrite_reported(self, make_jar):
        source = RecordingSource({"bad": make_jar(), "good": make_jar(entries={"a.txt": b"a"})})
        rewrite = ExplodingRewrite("a.txt")
        report = Rewriter([rewrite]).run(source)

        failed = {o.version: o for o in report.failed}
        assert set(failed) == {"bad"}
        assert failed["bad"].trail[-2:] == (UnitState.REWRITING, UnitState.FAILED)
        assert source.saved == ["good"]

    def test_failed_save_reported(self, make_jar):
        class FailingSave(RecordingSource):
            def save(self, installer):
                raise PermissionError("read-only")

        source = FailingSave({"1.0": make_jar(entries={"a.txt": b"a"})})
        report = Rewriter([DeleteRewrite("a.txt")]).run(source)
        assert report.outcomes[0].state is UnitState.FAILED
        assert report.outcomes[0].trail[-2:] == (UnitState.SAVING, UnitState.FAILED)


class TestRewriteLifecycle:
    def test_rewrites_closed_once_even_on_failure(self, make_jar):
        rewrite = DeleteRewrite("a.txt")
        source = RecordingSource({"1.0": make_jar()}, fail_on={"1.0"})
        rewriter = Rewriter([rewrite])
        rewriter.run(source)
        rewriter.close()
        assert rewrite.closed == 1

    def test_close_continues_after_failing_rewrite(self):
        class BadClose(DeleteRewrite):
            def close(self) -> None:
                super().close()
                raise RuntimeError("close failed")

        first, second = BadClose("a"), DeleteRewrite("b")
        Rewriter([first, second]).close()
        assert first.closed == 1
        assert second.closed == 1

    def test_closed_rewriter_refuses_another_run(self, make_jar):
        rewrite = DeleteRewrite("a.txt")
        source = RecordingSource({"1.0": make_jar(entries={"a.txt": b"a"})})
        rewriter = Rewriter([rewrite])
        rewriter.run(source)

        with pytest.raises(RuntimeError):
            rewriter.run(source)
        assert source.saved == ["1.0"]
        assert rewrite.closed == 1

    def test_content_released_after_unit(self, make_jar):
        seen: list[JarContents] = []

        class Capture(DeleteRewrite):
            def rewrite(self, installer: Installer) -> None:
                seen.append(installer.jar)

        Rewriter([Capture("a")]).run(RecordingSource({"1.0": make_jar()}))
        assert seen[0].names == []


class TestConcurrency:
    def test_units_run_in_parallel(self, make_jar):
        barrier = threading.Barrier(3, timeout=5)

        class Meet(DeleteRewrite):
            def rewrite(self, installer: Installer) -> None:
                barrier.wait()

        source = RecordingSource({v: make_jar() for v in ("1", "2", "3")})
        report = Rewriter([Meet("a")]).run(source)
        assert report.ok

    def test_limit_bounds_running_units(self, make_jar):
        lock = threading.Lock()
        active = {"now": 0, "peak": 0}

        class Slow(DeleteRewrite):
            def rewrite(self, installer: Installer) -> None:
                with lock:
                    active["now"] += 1
                    active["peak"] = max(active["peak"], active["now"])
                time.sleep(0.03)
                with lock:
                    active["now"] -= 1

        source = RecordingSource({str(v): make_jar() for v in range(8)})
        report = Rewriter([Slow("a")]).run(source, limit=2)
        assert len(report.outcomes) == 8
        assert active["peak"] <= 2

    def test_empty_run(self, tmp_path: Path):
        rewrite = DeleteRewrite("a")
        report = Rewriter([rewrite]).run_versions(RecordingSource({}), [])
        assert report.outcomes == []
        assert rewrite.closed == 1

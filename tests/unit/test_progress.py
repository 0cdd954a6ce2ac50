"""Unit tests for run progress tracking."""

import pytest

from proposal_engine.models import STAGE_ORDER, StageName, StageStatus
from proposal_engine.pipeline import ProgressSnapshot, ProgressTracker


class TestProgressSnapshot:
    """Tests for the immutable snapshot."""

    def test_initial_all_pending(self):
        snapshot = ProgressSnapshot.initial()
        assert [e.stage for e in snapshot.entries] == list(STAGE_ORDER)
        assert all(e.status == StageStatus.PENDING for e in snapshot.entries)
        assert snapshot.overall == 0.0
        assert snapshot.current_stage is None
        assert not snapshot.is_finished

    def test_get_unknown_stage(self):
        snapshot = ProgressSnapshot.initial([StageName.DATA_EXTRACTION])
        with pytest.raises(KeyError):
            snapshot.get(StageName.ASSEMBLY)

    def test_to_dict(self):
        data = ProgressSnapshot.initial().to_dict()
        assert data["overall"] == 0.0
        assert data["failed_stage"] is None
        assert data["stages"][0] == {
            "stage": "data_extraction",
            "status": "pending",
            "message": "",
            "digest": {},
        }


class TestProgressTracker:
    """Tests for tracker transitions and listeners."""

    def test_start_and_complete(self):
        tracker = ProgressTracker()
        tracker.start(StageName.DATA_EXTRACTION, "Processing...")
        assert tracker.snapshot.current_stage == StageName.DATA_EXTRACTION

        tracker.complete(StageName.DATA_EXTRACTION, "Done", {"deliverables": 2})
        entry = tracker.snapshot.get(StageName.DATA_EXTRACTION)
        assert entry.status == StageStatus.DONE
        assert entry.message == "Done"
        assert entry.digest["deliverables"] == 2
        assert tracker.snapshot.overall == pytest.approx(1 / len(STAGE_ORDER))

    def test_snapshots_are_replaced_not_mutated(self):
        tracker = ProgressTracker()
        before = tracker.snapshot
        tracker.start(StageName.DATA_EXTRACTION)
        assert before.get(StageName.DATA_EXTRACTION).status == StageStatus.PENDING
        assert tracker.snapshot is not before

    def test_digest_is_read_only(self):
        tracker = ProgressTracker()
        tracker.start(StageName.DATA_EXTRACTION)
        tracker.complete(StageName.DATA_EXTRACTION, "Done", {"a": 1})
        with pytest.raises(TypeError):
            tracker.snapshot.get(StageName.DATA_EXTRACTION).digest["a"] = 2

    def test_fail_is_terminal(self):
        tracker = ProgressTracker()
        tracker.start(StageName.INSIGHT_ANALYSIS)
        tracker.fail(StageName.INSIGHT_ANALYSIS, "Failed: boom")

        snapshot = tracker.snapshot
        assert snapshot.failed_stage == StageName.INSIGHT_ANALYSIS
        assert snapshot.is_finished
        with pytest.raises(ValueError):
            tracker.start(StageName.INSIGHT_ANALYSIS)

    def test_done_is_terminal(self):
        tracker = ProgressTracker()
        tracker.start(StageName.DATA_EXTRACTION)
        tracker.complete(StageName.DATA_EXTRACTION, "Done")
        with pytest.raises(ValueError):
            tracker.fail(StageName.DATA_EXTRACTION, "late failure")

    def test_cannot_complete_pending_stage(self):
        tracker = ProgressTracker()
        with pytest.raises(ValueError):
            tracker.complete(StageName.ASSEMBLY, "skipped ahead")

    def test_listener_receives_every_update(self):
        tracker = ProgressTracker()
        seen = []
        unsubscribe = tracker.subscribe(seen.append)

        tracker.start(StageName.DATA_EXTRACTION)
        tracker.complete(StageName.DATA_EXTRACTION, "Done")
        unsubscribe()
        tracker.start(StageName.INSIGHT_ANALYSIS)

        assert len(seen) == 2
        assert seen[-1].get(StageName.DATA_EXTRACTION).status == StageStatus.DONE

    def test_all_done_is_finished(self):
        tracker = ProgressTracker()
        for stage in STAGE_ORDER:
            tracker.start(stage)
            tracker.complete(stage, "ok")
        assert tracker.snapshot.overall == 1.0
        assert tracker.snapshot.is_finished

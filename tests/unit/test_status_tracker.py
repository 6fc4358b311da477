import threading
from datetime import datetime, timedelta, timezone

from linkshelf.processor.models import ProcessingStep, StepResult
from linkshelf.processor.status_tracker import StatusTracker


class TestStatusTracker:
    def test_create_and_get(self) -> None:
        tracker = StatusTracker()

        status = tracker.create("doc-1")

        assert tracker.get("doc-1") is status
        assert status.current_step == ProcessingStep.URL_VERIFICATION
        assert status.completed is False
        assert status.failed is False

    def test_get_unknown_returns_none(self) -> None:
        assert StatusTracker().get("missing") is None

    def test_remove(self) -> None:
        tracker = StatusTracker()
        tracker.create("doc-1")

        tracker.remove("doc-1")
        tracker.remove("doc-1")

        assert tracker.get("doc-1") is None

    def test_evicts_finished_statuses_after_ttl(self) -> None:
        tracker = StatusTracker(ttl_seconds=60)
        done = tracker.create("done")
        done.mark_completed()
        failed = tracker.create("failed")
        failed.mark_failed("boom")
        running = tracker.create("running")

        evicted = tracker.evict_expired(now=datetime.now(timezone.utc) + timedelta(seconds=120))

        assert evicted == 2
        assert tracker.get("done") is None
        assert tracker.get("failed") is None
        assert tracker.get("running") is running

    def test_keeps_recent_finished_statuses(self) -> None:
        tracker = StatusTracker(ttl_seconds=60)
        tracker.create("done").mark_completed()

        assert tracker.evict_expired() == 0
        assert tracker.get("done") is not None

    def test_zero_ttl_disables_eviction(self) -> None:
        tracker = StatusTracker(ttl_seconds=0)
        tracker.create("done").mark_completed()

        assert tracker.evict_expired(now=datetime.now(timezone.utc) + timedelta(days=365)) == 0
        assert len(tracker) == 1

    def test_concurrent_creates_and_reads(self) -> None:
        tracker = StatusTracker()
        errors: list[BaseException] = []

        def worker(prefix: str) -> None:
            try:
                for i in range(200):
                    document_id = f"{prefix}-{i}"
                    status = tracker.create(document_id)
                    status.record(StepResult(ProcessingStep.URL_VERIFICATION, True, "ok"))
                    assert tracker.get(document_id) is status
            except BaseException as exc:  # noqa: BLE001
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(f"t{n}",)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(tracker) == 1600


class TestProcessingStatus:
    def test_mark_completed_appends_completed_step(self) -> None:
        tracker = StatusTracker()
        status = tracker.create("doc-1")

        status.mark_completed()

        assert status.completed is True
        assert status.failed is False
        assert status.steps[-1].step == ProcessingStep.COMPLETED
        assert status.completed_at is not None

    def test_to_dict(self) -> None:
        status = StatusTracker().create("doc-1")
        status.record(StepResult(ProcessingStep.URL_VERIFICATION, True, "URL is accessible"))

        data = status.to_dict()

        assert data["document_id"] == "doc-1"
        assert data["steps"][0]["step"] == "URL_VERIFICATION"
        assert data["steps"][0]["description"] == "Verifying URL accessibility"
        assert data["completed_at"] is None

import threading
from datetime import datetime, timedelta, timezone

from linkshelf.logging.logger import Log
from linkshelf.processor.models import ProcessingStatus


class StatusTracker:
    """Thread-safe map of document id to its ingestion progress.

    Finished (completed or failed) statuses are kept for ``ttl_seconds`` after
    they finish and then evicted; a ttl of 0 keeps them until removed.
    """

    def __init__(self, ttl_seconds: int = 3600) -> None:
        self._ttl_seconds = ttl_seconds
        self._statuses: dict[str, ProcessingStatus] = {}
        self._lock = threading.Lock()

    def create(self, document_id: str) -> ProcessingStatus:
        status = ProcessingStatus(document_id=document_id)
        with self._lock:
            self._evict_locked(datetime.now(timezone.utc))
            self._statuses[document_id] = status
        return status

    def get(self, document_id: str) -> ProcessingStatus | None:
        with self._lock:
            return self._statuses.get(document_id)

    def remove(self, document_id: str) -> None:
        with self._lock:
            self._statuses.pop(document_id, None)

    def evict_expired(self, now: datetime | None = None) -> int:
        """Drop finished statuses older than the ttl. Returns how many were dropped."""
        with self._lock:
            return self._evict_locked(now or datetime.now(timezone.utc))

    def __len__(self) -> int:
        with self._lock:
            return len(self._statuses)

    def _evict_locked(self, now: datetime) -> int:
        if self._ttl_seconds <= 0:
            return 0
        cutoff = now - timedelta(seconds=self._ttl_seconds)
        expired = [
            document_id
            for document_id, status in self._statuses.items()
            if status.terminal and status.completed_at is not None and status.completed_at < cutoff
        ]
        for document_id in expired:
            del self._statuses[document_id]
        if expired:
            Log.debug(f"Evicted {len(expired)} finished processing statuses")
        return len(expired)

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sitemapcrawl.domain.crawl_options import CrawlOptions
from sitemapcrawl.domain.sitemap import SitemapDocument, SitemapSet
from sitemapcrawl.exceptions import JobNotCompletedError, JobNotFoundError, SitemapNotFoundError

from .cancellation import _InMemoryCrawlCancellationManager
from .models import COMPLETED, JobHandle
from .store import SitemapJobStore


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCrawlRegistry:
    """Thread-safe in-memory store for running and recent sitemap jobs.

    Owned by the orchestration layer; the crawl engine never sees it. It is
    ephemeral and designed for single-process visibility. A DB or Redis-backed
    implementation can provide the same interface.
    """

    def __init__(self, *, max_completed_records: int = 1000):
        self._lock = threading.Lock()
        self._records = SitemapJobStore(max_completed_records=max_completed_records)
        self._cancellation = _InMemoryCrawlCancellationManager()

    def start(self, url: str, options: CrawlOptions) -> JobHandle:
        with self._lock:
            job_id = str(uuid.uuid4())
            self._records.create_running(job_id=job_id, url=url, options=options, now=_now())
            stop_event = self._cancellation.create(job_id)
            return JobHandle(job_id=job_id, stop_event=stop_event)

    def record_progress(self, job_id: str, event: dict) -> bool:
        with self._lock:
            return self._records.append_progress(job_id, event)

    def _after_finish(self, job_id: str) -> None:
        self._cancellation.cleanup(job_id)
        for evicted_id in self._records.evict_completed_overflow():
            self._cancellation.cleanup(evicted_id)

    def complete(self, job_id: str, *, result: SitemapSet, url_count: int) -> bool:
        with self._lock:
            ok = self._records.complete(job_id, result=result, url_count=url_count, now=_now())
            if ok:
                self._after_finish(job_id)
            return ok

    def fail(self, job_id: str, error: str) -> bool:
        with self._lock:
            ok = self._records.fail(job_id, error=error, now=_now())
            if ok:
                self._after_finish(job_id)
            return ok

    def cancel(self, job_id: str) -> bool:
        """Request cancellation for a running job. This sets the stop event
        and marks the job as cancelled (completion time set).
        """
        with self._lock:
            # Set the stop signal first so anyone holding the event observes it.
            if not self._cancellation.request_cancel(job_id):
                return False
            if not self._records.mark_cancelled(job_id, now=_now()):
                return False
            self._after_finish(job_id)
            return True

    def get(self, job_id: str) -> Optional[Dict]:
        with self._lock:
            rec = self._records.get(job_id)
            return rec.summary() if rec else None

    def events_since(self, job_id: str, offset: int = 0) -> Tuple[List[dict], bool]:
        """Return progress events from `offset` onwards and whether the job has finished."""
        with self._lock:
            rec = self._records.get(job_id)
            if rec is None:
                raise JobNotFoundError(job_id)
            return list(rec.progress[offset:]), rec.finished

    def get_result(self, job_id: str) -> SitemapSet:
        with self._lock:
            rec = self._records.get(job_id)
            if rec is None:
                raise JobNotFoundError(job_id)
            if rec.status != COMPLETED or rec.result is None:
                raise JobNotCompletedError(job_id, rec.status)
            return rec.result

    def get_document(self, job_id: str, name: Optional[str] = None) -> SitemapDocument:
        """Return a sitemap document by name; the index (if any) by default."""
        try:
            return self.get_result(job_id).get(name)
        except SitemapNotFoundError as e:
            raise SitemapNotFoundError(e.name, job_id) from e

    def list_active(self) -> List[Dict]:
        with self._lock:
            return [r.summary() for r in self._records.list_active()]

from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Dict, List, Optional

from sitemapcrawl.domain.crawl_options import CrawlOptions
from sitemapcrawl.domain.sitemap import SitemapSet

from .models import CANCELLED, COMPLETED, FAILED, RUNNING, SitemapJob


class SitemapJobStore:
    def __init__(self, *, max_completed_records: int):
        if max_completed_records < 0:
            raise ValueError("max_completed_records must be >= 0")
        self._records: Dict[str, SitemapJob] = {}
        self._max_completed_records = max_completed_records
        self._completed_order = deque()

    def create_running(self, *, job_id: str, url: str, options: CrawlOptions, now: datetime) -> SitemapJob:
        rec = SitemapJob(
            id=job_id,
            url=url,
            options=options,
            status=RUNNING,
            started_at=now,
        )
        self._records[job_id] = rec
        return rec

    def get(self, job_id: str) -> Optional[SitemapJob]:
        return self._records.get(job_id)

    def append_progress(self, job_id: str, event: dict) -> bool:
        rec = self._records.get(job_id)
        if not rec:
            return False
        rec.progress.append(event)
        return True

    def _finish(self, rec: SitemapJob, status: str, now: datetime) -> None:
        rec.status = status
        rec.completed_at = now
        self._completed_order.append(rec.id)

    def complete(self, job_id: str, *, result: SitemapSet, url_count: int, now: datetime) -> bool:
        rec = self._records.get(job_id)
        if not rec or rec.finished:
            return False
        rec.result = result
        rec.url_count = url_count
        self._finish(rec, COMPLETED, now)
        return True

    def fail(self, job_id: str, *, error: str, now: datetime) -> bool:
        rec = self._records.get(job_id)
        if not rec or rec.finished:
            return False
        rec.error = error
        self._finish(rec, FAILED, now)
        return True

    def mark_cancelled(self, job_id: str, *, now: datetime) -> bool:
        rec = self._records.get(job_id)
        if not rec or rec.finished:
            return False
        self._finish(rec, CANCELLED, now)
        return True

    def evict_completed_overflow(self) -> List[str]:
        evicted: List[str] = []
        while len(self._completed_order) > self._max_completed_records:
            oldest = self._completed_order.popleft()
            if oldest in self._records:
                del self._records[oldest]
                evicted.append(oldest)
        return evicted

    def list_active(self) -> List[SitemapJob]:
        return [r for r in self._records.values() if r.status == RUNNING]

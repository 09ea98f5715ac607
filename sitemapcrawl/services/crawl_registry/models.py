from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sitemapcrawl.domain.crawl_options import CrawlOptions
from sitemapcrawl.domain.sitemap import SitemapSet

RUNNING = "running"
COMPLETED = "completed"
FAILED = "failed"
CANCELLED = "cancelled"


@dataclass
class SitemapJob:
    id: str
    url: str
    options: CrawlOptions
    status: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    url_count: Optional[int] = None
    error: Optional[str] = None
    progress: List[dict] = field(default_factory=list)
    result: Optional[SitemapSet] = None

    @property
    def finished(self) -> bool:
        return self.status != RUNNING

    def summary(self) -> dict:
        """Status view of the job, without progress history or document bodies."""
        d = {
            "jobId": self.id,
            "status": self.status,
            "url": self.url,
            "options": self.options.to_dict(),
            "startedAt": self.started_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }
        if self.status == COMPLETED and self.result is not None:
            d["urlCount"] = self.url_count
            d["sitemapCount"] = len(self.result.documents)
            d["hasIndex"] = self.result.index is not None
        if self.status == FAILED:
            d["error"] = self.error
        return d


@dataclass(frozen=True)
class JobHandle:
    job_id: str
    stop_event: threading.Event

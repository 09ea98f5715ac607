import logging
import threading
from collections import deque
from typing import Deque, Iterable, List, Optional, Tuple

from sitemapcrawl.domain.crawl_options import CrawlOptions
from sitemapcrawl.domain.frontier_item import FrontierItem
from sitemapcrawl.domain.url_record import URLRecord
from sitemapcrawl.domain.url_tracker import UrlTracker
from sitemapcrawl.services.crawl_policy import CrawlPolicy

logger = logging.getLogger(__name__)


class FrontierManager:
    """Owns the discovered and visited sets, the FIFO queue and the result accumulator.

    All mutating methods take the same lock, so worker threads of a batch can
    feed results and links back concurrently. Invariants kept here:

    - visited is a subset of discovered
    - a URL is dispatched at most once
    - the number of accepted records never exceeds ``options.max_urls``
    """

    def __init__(self, start_url: str, options: CrawlOptions, crawl_policy: Optional[CrawlPolicy] = None):
        self.start_url = start_url
        self.options = options
        self.crawl_policy = crawl_policy or CrawlPolicy()
        self._lock = threading.Lock()
        self._discovered = UrlTracker()
        self._visited = UrlTracker()
        self._queue: Deque[FrontierItem] = deque()
        self._records: List[URLRecord] = []

        self._discovered.mark(start_url)
        self._queue.append(FrontierItem(start_url, 0))

    def _budget_reached(self) -> bool:
        return len(self._records) >= self.options.max_urls

    def next_batch(self, n: int) -> List[FrontierItem]:
        """Pop up to `n` dispatchable items in FIFO order and mark them visited.

        Items already visited or deeper than ``crawl_depth`` are dropped.
        Returns an empty list once the crawl should terminate.
        """
        batch: List[FrontierItem] = []
        with self._lock:
            if self._budget_reached():
                return batch
            while self._queue and len(batch) < n:
                item = self._queue.popleft()
                if self._visited.is_marked(item.url):
                    logger.debug("Skipping (visited) %s", item.url)
                    continue
                if self.crawl_policy.should_skip_due_to_depth(item.depth, self.options.crawl_depth):
                    continue
                self._visited.mark(item.url)
                batch.append(item)
        return batch

    def record_discovered(self, urls: Iterable[str], from_url: Optional[str] = None, start_url: Optional[str] = None) -> int:
        """Add newly seen URLs to the discovered set and enqueue those within depth.

        Returns the number of URLs that were new.
        """
        start_url = start_url or self.start_url
        added = 0
        with self._lock:
            for url in urls:
                if not self._discovered.mark(url):
                    continue
                added += 1
                depth = self.crawl_policy.url_depth(url, start_url)
                if depth <= self.options.crawl_depth and not self._budget_reached():
                    self._queue.append(FrontierItem(url, depth))
        if added:
            logger.debug("Discovered %d new URLs from %s", added, from_url)
        return added

    def add_record(self, record: URLRecord) -> Optional[int]:
        """Accept a record if the budget allows it.

        Returns the new record total, or None when the budget was already spent.
        """
        with self._lock:
            if self._budget_reached():
                return None
            self._records.append(record)
            return len(self._records)

    def is_done(self) -> bool:
        with self._lock:
            return not self._queue or self._budget_reached()

    def counts(self) -> Tuple[int, int]:
        """Return (discovered, visited) sizes."""
        with self._lock:
            return len(self._discovered), len(self._visited)

    def records(self) -> List[URLRecord]:
        with self._lock:
            return list(self._records)

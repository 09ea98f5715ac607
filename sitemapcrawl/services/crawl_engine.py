import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Optional

from sitemapcrawl.domain.crawl_options import CrawlOptions
from sitemapcrawl.domain.crawl_result import CrawlResult
from sitemapcrawl.domain.frontier_item import FrontierItem
from sitemapcrawl.domain.progress_event import ProgressEvent
from sitemapcrawl.domain.url_record import URLRecord
from sitemapcrawl.exceptions import FetchError, RobotsDenied
from sitemapcrawl.services.crawl_policy import CrawlPolicy
from sitemapcrawl.services.frontier_manager import FrontierManager
from sitemapcrawl.services.link_extractor import LinkExtractor
from sitemapcrawl.services.robots_service import RobotsPolicy, RobotsService
from sitemapcrawl.utils.datetime_utils import to_iso8601
from sitemapcrawl.utils.url_utils import normalize_url, origin_of, validate_start_url

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProgressEvent], None]

BUDGET_REACHED = "URL budget reached"


class CrawlEngine:
    """Breadth-first, batch-at-a-time crawl of a single origin.

    Owns the crawl control-flow: batching, robots checks, fetching, recording
    and feeding links back to the frontier. Dependencies are injected by the
    container. No state is kept between crawls, so one instance can serve
    concurrent jobs.
    """

    def __init__(
        self,
        *,
        fetcher,
        robots_service: RobotsService,
        link_extractor: LinkExtractor,
        crawl_policy: Optional[CrawlPolicy] = None,
        clock: Callable[[], str] = to_iso8601,
    ):
        self.fetcher = fetcher
        self.robots_service = robots_service
        self.link_extractor = link_extractor
        self.crawl_policy = crawl_policy or CrawlPolicy()
        self.clock = clock

    def _is_stopped(self, stop_event) -> bool:
        return stop_event is not None and getattr(stop_event, "is_set", lambda: False)()

    def _emit(self, on_progress: Optional[ProgressSink], event: ProgressEvent) -> None:
        if on_progress is None:
            return
        try:
            on_progress(event)
        except Exception as e:
            logger.warning("Progress sink failed for %s: %s", event.url, e)

    def crawl(
        self,
        start_url: str,
        options: CrawlOptions,
        on_progress: Optional[ProgressSink] = None,
        stop_event=None,
    ) -> CrawlResult:
        """Crawl from `start_url` and return the accumulated URL records.

        Raises InvalidURLError for a malformed start URL before any network
        I/O. Every other failure is per URL and reported through `on_progress`.
        """
        start_url = normalize_url(validate_start_url(start_url))
        origin = origin_of(start_url)

        frontier = FrontierManager(start_url, options, self.crawl_policy)
        policy = self.robots_service.prepare(origin)

        stopped = False
        batch_no = 0
        with ThreadPoolExecutor(max_workers=options.concurrency, thread_name_prefix="crawl") as pool:
            while not frontier.is_done():
                if self._is_stopped(stop_event):
                    logger.info("Crawl of %s cancelled after %d batches", start_url, batch_no)
                    stopped = True
                    break
                batch = frontier.next_batch(options.concurrency)
                if not batch:
                    break
                batch_no += 1
                logger.debug("Batch %d: %d URLs", batch_no, len(batch))
                futures = [
                    pool.submit(self.process_item, item, frontier, policy, origin, on_progress, stop_event)
                    for item in batch
                ]
                # A failing item never aborts the batch; process_item reports its own errors.
                wait(futures)
                for future in futures:
                    exc = future.exception()
                    if exc is not None:
                        logger.error("Unhandled error in crawl worker: %s", exc, exc_info=exc)

        discovered, visited = frontier.counts()
        records = frontier.records()
        logger.info(
            "Crawl of %s finished: %d records, %d discovered, %d visited%s",
            start_url, len(records), discovered, visited, " (stopped)" if stopped else "",
        )
        return CrawlResult(records=records, stopped=stopped, discovered=discovered, visited=visited)

    def process_item(
        self,
        item: FrontierItem,
        frontier: FrontierManager,
        policy: RobotsPolicy,
        origin: str,
        on_progress: Optional[ProgressSink] = None,
        stop_event=None,
    ) -> Optional[URLRecord]:
        """Robots check, fetch, record and link extraction for one frontier item.

        Returns the URLRecord when the item produced one.
        """
        url, depth = item
        if self._is_stopped(stop_event):
            logger.info("Fetch cancelled for %s", url)
            return None

        try:
            policy.check(url)
        except RobotsDenied as e:
            logger.info("Skipping (robots) %s", url)
            discovered, visited = frontier.counts()
            self._emit(on_progress, ProgressEvent.skipped(url, e.reason, discovered, visited))
            return None

        try:
            if self._is_stopped(stop_event):
                logger.info("Fetch cancelled for %s", url)
                return None
            response = self.fetcher.fetch(url)
            if not response.is_html:
                logger.debug("Skipping (not html: %s) %s", response.content_type, url)
                return None
            links = self.link_extractor.extract_links(response.text, url, origin)
        except FetchError as e:
            logger.warning("Fetch failed for %s: %s", url, e)
            discovered, visited = frontier.counts()
            self._emit(on_progress, ProgressEvent.failed(url, str(e.cause), discovered, visited))
            return None
        except Exception as e:
            logger.error("Fetch error for %s: %s", url, e, exc_info=True)
            discovered, visited = frontier.counts()
            self._emit(on_progress, ProgressEvent.failed(url, str(e), discovered, visited))
            return None

        record = URLRecord(
            url=url,
            lastmod=self.clock(),
            changefreq=self.crawl_policy.changefreq_for(depth),
            priority=self.crawl_policy.priority_for(depth, url),
            depth=depth,
        )
        total = frontier.add_record(record)
        if total is None:
            logger.debug("Dropping %s; URL budget of %d reached", url, frontier.options.max_urls)
            discovered, visited = frontier.counts()
            self._emit(on_progress, ProgressEvent.skipped(url, BUDGET_REACHED, discovered, visited))
            return None
        logger.info("Fetched %s -> depth %s, total %s", url, depth, total)

        frontier.record_discovered(links, url)
        discovered, visited = frontier.counts()
        self._emit(on_progress, ProgressEvent.crawled(url, depth, total, discovered, visited))
        return record

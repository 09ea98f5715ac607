import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from sitemapcrawl.domain.crawl_options import CrawlOptions
from sitemapcrawl.domain.progress_event import ProgressEvent
from sitemapcrawl.services.crawl_engine import CrawlEngine
from sitemapcrawl.services.crawl_registry import InMemoryCrawlRegistry
from sitemapcrawl.services.result_cache import ResultCache, cache_key
from sitemapcrawl.services.sitemap_builder import SitemapBuilder
from sitemapcrawl.utils.datetime_utils import to_iso8601
from sitemapcrawl.utils.url_utils import validate_start_url

logger = logging.getLogger(__name__)


class SitemapJobRunner:
    """Starts crawl-and-build jobs in the background and tracks them in the registry.

    Each job runs on the runner's own executor inside `_run_job`, which is the
    job's error boundary: whatever escapes the crawl or the sitemap build is
    logged and recorded as a failed job.
    """

    def __init__(
        self,
        *,
        crawl_engine: CrawlEngine,
        sitemap_builder: SitemapBuilder,
        crawl_registry: InMemoryCrawlRegistry,
        result_cache: Optional[ResultCache] = None,
        default_max_urls: int = 10000,
        default_crawl_depth: int = 3,
        default_concurrency: int = 5,
        max_workers: int = 4,
    ):
        self.crawl_engine = crawl_engine
        self.sitemap_builder = sitemap_builder
        self.crawl_registry = crawl_registry
        self.result_cache = result_cache
        self.default_max_urls = default_max_urls
        self.default_crawl_depth = default_crawl_depth
        self.default_concurrency = default_concurrency
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="sitemap-job")

    def build_options(self, max_urls: Optional[int] = None, crawl_depth: Optional[int] = None, concurrency: Optional[int] = None) -> CrawlOptions:
        """Fill omitted values from the configured defaults."""
        return CrawlOptions(
            max_urls=max_urls if max_urls is not None else self.default_max_urls,
            crawl_depth=crawl_depth if crawl_depth is not None else self.default_crawl_depth,
            concurrency=concurrency if concurrency is not None else self.default_concurrency,
        )

    def submit(self, url: str, options: CrawlOptions) -> dict:
        """Start a job for `url`, or return the cached result of an identical request.

        Raises InvalidURLError synchronously for a malformed URL.
        """
        url = validate_start_url(url)
        key = cache_key(url, options)

        if self.result_cache is not None:
            cached = self.result_cache.get(key)
            if cached is not None:
                logger.info("Cache hit for %s", key)
                return {"cached": True, **cached}

        handle = self.crawl_registry.start(url, options)
        logger.info("Starting sitemap job %s for %s (%s)", handle.job_id, url, key)
        self._executor.submit(self._run_job, handle.job_id, url, options, key, handle.stop_event)
        return {"jobId": handle.job_id, "status": "started"}

    def _run_job(self, job_id: str, url: str, options: CrawlOptions, key: str, stop_event=None) -> None:
        def on_progress(event: ProgressEvent) -> None:
            self.crawl_registry.record_progress(job_id, event.to_dict())

        try:
            result = self.crawl_engine.crawl(url, options, on_progress, stop_event=stop_event)
            if result.stopped:
                logger.info("Sitemap job %s stopped early with %d URLs", job_id, len(result.records))
                return
            sitemaps = self.sitemap_builder.build(result.records)
        except Exception as e:
            logger.exception("Sitemap job %s failed", job_id)
            self.crawl_registry.fail(job_id, str(e))
            return

        url_count = len(result.records)
        if not self.crawl_registry.complete(job_id, result=sitemaps, url_count=url_count):
            logger.info("Sitemap job %s finished after being cancelled; result discarded", job_id)
            return
        logger.info("Sitemap job %s completed: %d URLs, %d sitemaps", job_id, url_count, len(sitemaps.documents))

        if self.result_cache is not None:
            self.result_cache.set(key, {
                "jobId": job_id,
                "result": sitemaps,
                "urlCount": url_count,
                "completedAt": to_iso8601(),
            })

    def run_sync(self, url: str, options: CrawlOptions) -> dict:
        """Run a job in the calling thread; used by tests and scripts."""
        url = validate_start_url(url)
        handle = self.crawl_registry.start(url, options)
        self._run_job(handle.job_id, url, options, cache_key(url, options), handle.stop_event)
        return self.crawl_registry.get(handle.job_id)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

from dataclasses import dataclass


@dataclass(frozen=True)
class CrawlOptions:
    """Limits for a single crawl. Immutable for the lifetime of the crawl."""

    max_urls: int
    crawl_depth: int
    concurrency: int

    def __post_init__(self):
        if int(self.max_urls) < 1:
            raise ValueError("max_urls must be >= 1")
        if int(self.crawl_depth) < 0:
            raise ValueError("crawl_depth must be >= 0")
        if int(self.concurrency) < 1:
            raise ValueError("concurrency must be >= 1")

    def cache_key(self, url: str) -> str:
        """Deterministic key identifying a crawl of `url` with these options."""
        return f"sitemap:{url}:{self.max_urls}:{self.crawl_depth}:{self.concurrency}"

    def to_dict(self) -> dict:
        return {
            "maxUrls": self.max_urls,
            "crawlDepth": self.crawl_depth,
            "concurrency": self.concurrency,
        }

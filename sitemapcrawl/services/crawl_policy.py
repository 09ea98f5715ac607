import logging
from urllib.parse import urlparse

from sitemapcrawl.utils.url_utils import path_segments

logger = logging.getLogger(__name__)


class CrawlPolicy:
    """Encapsulates crawl decision rules: URL depth, depth limits and sitemap hints.

    Depth is the path-segment count of a URL minus that of the start URL,
    clamped at zero. It is not the link distance from the start page.
    """

    def url_depth(self, url: str, start_url: str) -> int:
        return max(0, len(path_segments(url)) - len(path_segments(start_url)))

    def should_skip_due_to_depth(self, depth: int, max_depth: int) -> bool:
        """Check if URL should be skipped due to max depth reached."""
        if depth > max_depth:
            logger.debug("Skipping (max depth reached) at depth %s > %s", depth, max_depth)
            return True
        return False

    def changefreq_for(self, depth: int) -> str:
        if depth == 0:
            return "daily"
        if depth == 1:
            return "weekly"
        return "monthly"

    def priority_for(self, depth: int, url: str) -> str:
        # Homepage gets highest priority
        if urlparse(url).path in ("", "/"):
            return "1.0"
        if depth == 0:
            return "0.9"
        if depth == 1:
            return "0.7"
        if depth == 2:
            return "0.5"
        return "0.3"

"""Crawl result data model."""
from typing import List, NamedTuple

from sitemapcrawl.domain.url_record import URLRecord


class CrawlResult(NamedTuple):
    """Result of a crawl operation.

    `records` is in completion order; the counters are the final sizes of the
    discovered and visited sets, for status reporting.
    """
    records: List[URLRecord]
    """One record per successfully fetched HTML page, at most `max_urls`"""

    stopped: bool = False
    """True if crawl was stopped early via stop_event, False if completed normally"""

    discovered: int = 0
    visited: int = 0

"""Domain objects for the sitemap crawler - explicit re-exports to satisfy linters."""
from .crawl_options import CrawlOptions as CrawlOptions
from .crawl_result import CrawlResult as CrawlResult
from .frontier_item import FrontierItem as FrontierItem
from .http_response import HttpResponse as HttpResponse
from .progress_event import ProgressEvent as ProgressEvent
from .sitemap import SitemapDocument as SitemapDocument
from .sitemap import SitemapSet as SitemapSet
from .url_record import URLRecord as URLRecord
from .url_tracker import UrlTracker as UrlTracker

__all__ = [
    "CrawlOptions",
    "CrawlResult",
    "FrontierItem",
    "HttpResponse",
    "ProgressEvent",
    "SitemapDocument",
    "SitemapSet",
    "URLRecord",
    "UrlTracker",
]

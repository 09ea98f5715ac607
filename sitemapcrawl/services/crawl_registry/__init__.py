from .models import JobHandle, SitemapJob
from .registry import InMemoryCrawlRegistry

__all__ = ["JobHandle", "SitemapJob", "InMemoryCrawlRegistry"]

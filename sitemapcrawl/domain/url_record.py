from typing import NamedTuple


class URLRecord(NamedTuple):
    """One successfully fetched HTML page, as it will appear in a sitemap."""
    url: str
    lastmod: str
    changefreq: str
    priority: str
    depth: int = 0

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "lastmod": self.lastmod,
            "changefreq": self.changefreq,
            "priority": self.priority,
        }

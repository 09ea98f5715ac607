from typing import Iterable, List


class UrlTracker:
    """
    Insertion-ordered, grow-only set of URLs.

    Used for both the discovered and the visited sets of a crawl. Nothing is
    ever evicted: membership must stay stable for the whole crawl or URLs
    would be fetched twice.
    """

    def __init__(self, urls: Iterable[str] = ()):
        self._urls: "dict[str, None]" = {}
        for url in urls:
            self.mark(url)

    def mark(self, url: str) -> bool:
        """Add a URL. Returns True if it was not tracked before."""
        if url in self._urls:
            return False
        self._urls[url] = None
        return True

    def is_marked(self, url: str) -> bool:
        return url in self._urls

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)

    def as_list(self) -> List[str]:
        return list(self._urls)

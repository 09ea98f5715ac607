import logging
from typing import Optional, Set
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, SoupStrainer

from sitemapcrawl.utils.url_utils import normalize_url, origin_of

logger = logging.getLogger(__name__)

# Paths ending in one of these are resources, not pages.
SKIP_EXTENSIONS: frozenset = frozenset((
    ".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp",
    ".pdf", ".doc", ".docx", ".xls", ".xlsx",
    ".zip", ".rar", ".tar", ".gz",
    ".mp4", ".avi", ".mov", ".mp3", ".wav",
    ".css", ".js", ".json", ".xml",
))

# Only <a href> elements are parsed
LINK_STRAINER = SoupStrainer("a", href=True)


def should_skip_path(path: str) -> bool:
    path = (path or "").lower()
    return any(path.endswith(ext) for ext in SKIP_EXTENSIONS)


class LinkExtractor:
    """Pull same-origin page links out of an HTML document.

    Stateless; safe to share between threads.
    """

    def __init__(self, parser: str = "html.parser"):
        self.parser = parser

    def resolve(self, href: str, page_url: str, origin: str) -> Optional[str]:
        """Resolve one href against `page_url`; None if it is not a crawlable same-origin page."""
        href = (href or "").strip()
        if not href or href.startswith("#"):
            return None
        try:
            absolute = urljoin(page_url, href)
            parsed = urlparse(absolute)
        except ValueError:
            logger.debug("Skipping malformed href %r on %s", href, page_url)
            return None
        if parsed.scheme not in ("http", "https"):
            return None
        if origin_of(absolute) != origin:
            return None
        if should_skip_path(parsed.path):
            return None
        return normalize_url(absolute)

    def extract_links(self, html: str, page_url: str, origin: Optional[str] = None) -> Set[str]:
        """Return the deduplicated set of absolute same-origin links in `html`.

        `origin` defaults to the origin of `page_url`. Fragment-only links point
        back at the page itself and are dropped.
        """
        origin = origin or origin_of(page_url)
        soup = BeautifulSoup(html or "", self.parser, parse_only=LINK_STRAINER)
        links: Set[str] = set()
        for a in soup.find_all("a", href=True):
            url = self.resolve(a.get("href"), page_url, origin)
            if url is not None:
                links.add(url)
        return links

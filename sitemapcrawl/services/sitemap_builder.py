import logging
from typing import Callable, List, Sequence
from xml.sax.saxutils import escape

from sitemapcrawl.domain.sitemap import SitemapDocument, SitemapSet
from sitemapcrawl.domain.url_record import URLRecord
from sitemapcrawl.utils.datetime_utils import to_iso8601
from sitemapcrawl.utils.url_utils import origin_of

logger = logging.getLogger(__name__)

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

MAX_URLS_PER_SITEMAP = 50_000
SITEMAP_NAME = "sitemap.xml"
SITEMAP_CHUNK_NAME = "sitemap-{n}.xml"
SITEMAP_INDEX_NAME = "sitemap-index.xml"

_QUOTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def escape_xml(text) -> str:
    """Escape the five XML special characters."""
    return escape(str(text), _QUOTE_ENTITIES)


def chunk(records: Sequence, size: int) -> List[Sequence]:
    return [records[i:i + size] for i in range(0, len(records), size)]


class SitemapBuilder:
    """Render URL records as sitemap protocol XML, chunking large result sets.

    Up to `max_urls_per_sitemap` records produce a single ``sitemap.xml``.
    Beyond that, records are split into ``sitemap-1.xml``, ``sitemap-2.xml``,
    ... and a ``sitemap-index.xml`` listing each chunk under the origin of the
    first record.
    """

    def __init__(self, max_urls_per_sitemap: int = MAX_URLS_PER_SITEMAP, clock: Callable[[], str] = to_iso8601):
        if max_urls_per_sitemap < 1:
            raise ValueError("max_urls_per_sitemap must be >= 1")
        self.max_urls_per_sitemap = max_urls_per_sitemap
        self.clock = clock

    def build(self, records: Sequence[URLRecord]) -> SitemapSet:
        records = list(records)
        if not records:
            return SitemapSet()

        if len(records) <= self.max_urls_per_sitemap:
            return SitemapSet(documents=[SitemapDocument(SITEMAP_NAME, self.render_urlset(records))])

        documents = [
            SitemapDocument(SITEMAP_CHUNK_NAME.format(n=n), self.render_urlset(part))
            for n, part in enumerate(chunk(records, self.max_urls_per_sitemap), start=1)
        ]
        base_url = origin_of(records[0].url) or ""
        index = SitemapDocument(SITEMAP_INDEX_NAME, self.render_index(documents, base_url), is_index=True)
        logger.info("Split %d URLs into %d sitemaps plus index", len(records), len(documents))
        return SitemapSet(documents=documents, index=index)

    def render_urlset(self, records: Sequence[URLRecord]) -> str:
        entries = "\n".join(
            "  <url>\n"
            f"    <loc>{escape_xml(r.url)}</loc>\n"
            f"    <lastmod>{escape_xml(r.lastmod)}</lastmod>\n"
            f"    <changefreq>{escape_xml(r.changefreq)}</changefreq>\n"
            f"    <priority>{escape_xml(r.priority)}</priority>\n"
            "  </url>"
            for r in records
        )
        return f'{XML_DECLARATION}\n<urlset xmlns="{SITEMAP_NS}">\n{entries}\n</urlset>'

    def render_index(self, documents: Sequence[SitemapDocument], base_url: str) -> str:
        generated_at = escape_xml(self.clock())
        entries = "\n".join(
            "  <sitemap>\n"
            f"    <loc>{escape_xml(f'{base_url}/{doc.name}')}</loc>\n"
            f"    <lastmod>{generated_at}</lastmod>\n"
            "  </sitemap>"
            for doc in documents
        )
        return f'{XML_DECLARATION}\n<sitemapindex xmlns="{SITEMAP_NS}">\n{entries}\n</sitemapindex>'

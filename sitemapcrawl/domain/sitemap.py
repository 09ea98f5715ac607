from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

from sitemapcrawl.exceptions import SitemapNotFoundError


class SitemapDocument(NamedTuple):
    name: str
    content: str
    is_index: bool = False

    @property
    def size(self) -> int:
        """Size of the document in bytes once UTF-8 encoded."""
        return len(self.content.encode("utf-8"))


@dataclass
class SitemapSet:
    """Sitemap documents produced for one crawl, plus the index when chunked."""
    documents: List[SitemapDocument] = field(default_factory=list)
    index: Optional[SitemapDocument] = None

    def get(self, name: Optional[str] = None) -> SitemapDocument:
        """Return the named document.

        Without a name the index is returned when present, otherwise the
        first document. Raises SitemapNotFoundError when nothing matches.
        """
        if not name:
            if self.index is not None:
                return self.index
            if self.documents:
                return self.documents[0]
            raise SitemapNotFoundError("")
        if self.index is not None and self.index.name == name:
            return self.index
        for doc in self.documents:
            if doc.name == name:
                return doc
        raise SitemapNotFoundError(name)

    def files(self) -> List[dict]:
        """Describe available documents, index first."""
        out = [{"name": d.name, "size": d.size} for d in self.documents]
        if self.index is not None:
            out.insert(0, {"name": self.index.name, "size": self.index.size, "isIndex": True})
        return out

    def to_dict(self) -> dict:
        return {
            "sitemaps": [{"name": d.name, "content": d.content} for d in self.documents],
            "index": {"name": self.index.name, "content": self.index.content} if self.index else None,
        }

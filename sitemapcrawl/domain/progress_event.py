from dataclasses import dataclass
from typing import Optional

CRAWLED = "crawled"
SKIPPED = "skipped"
ERROR = "error"


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress notification emitted after a frontier item is processed.

    `type` selects which of the variant fields are meaningful:

    - ``crawled``: `depth` and `total` (records accumulated so far)
    - ``skipped``: `reason`
    - ``error``: `error` message
    """
    type: str
    url: str
    discovered: int
    visited: int
    depth: Optional[int] = None
    total: Optional[int] = None
    reason: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def crawled(cls, url: str, depth: int, total: int, discovered: int, visited: int) -> "ProgressEvent":
        return cls(CRAWLED, url, discovered, visited, depth=depth, total=total)

    @classmethod
    def skipped(cls, url: str, reason: str, discovered: int, visited: int) -> "ProgressEvent":
        return cls(SKIPPED, url, discovered, visited, reason=reason)

    @classmethod
    def failed(cls, url: str, error: str, discovered: int, visited: int) -> "ProgressEvent":
        return cls(ERROR, url, discovered, visited, error=error)

    def to_dict(self) -> dict:
        d = {
            "type": self.type,
            "url": self.url,
            "discovered": self.discovered,
            "visited": self.visited,
        }
        if self.type == CRAWLED:
            d["depth"] = self.depth
            d["total"] = self.total
        elif self.type == SKIPPED:
            d["reason"] = self.reason
        elif self.type == ERROR:
            d["error"] = self.error
        return d

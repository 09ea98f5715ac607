from typing import NamedTuple, Optional


class HttpResponse(NamedTuple):
    """Response from HTTP fetch operation."""
    status_code: int
    text: str
    content_type: Optional[str] = None

    @property
    def is_html(self) -> bool:
        return (self.content_type or "").strip().lower().startswith("text/html")

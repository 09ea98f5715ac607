from typing import List, Optional
from urllib.parse import urldefrag, urlparse

from sitemapcrawl.exceptions import InvalidURLError

_DEFAULT_PORTS = {"http": 80, "https": 443}


def validate_start_url(url: str) -> str:
    """Return `url` if it is an absolute http(s) URL, otherwise raise InvalidURLError."""
    if not url or not isinstance(url, str):
        raise InvalidURLError(str(url), "empty URL")
    try:
        parsed = urlparse(url.strip())
        # accessing .port validates it
        parsed.port
    except ValueError as e:
        raise InvalidURLError(url, str(e)) from e
    if parsed.scheme not in _DEFAULT_PORTS:
        raise InvalidURLError(url, "scheme must be http or https")
    if not parsed.hostname:
        raise InvalidURLError(url, "missing host")
    return url.strip()


def origin_of(url: str) -> Optional[str]:
    """Return scheme://host[:port] for `url`, lowercased, default ports dropped.

    Returns None for URLs without a scheme/host or with an invalid port.
    """
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError:
        return None
    scheme = (parsed.scheme or "").lower()
    host = (parsed.hostname or "").lower()
    if not scheme or not host:
        return None
    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def normalize_url(url: str) -> str:
    """Strip the fragment, lowercase scheme and host, drop default ports and
    give origin-only URLs a root path."""
    url, _ = urldefrag(url)
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    default_port = _DEFAULT_PORTS.get(scheme)
    if default_port is not None and netloc.endswith(f":{default_port}"):
        netloc = netloc[: -len(f":{default_port}")]
    path = parsed.path or ("/" if netloc else "")
    return parsed._replace(scheme=scheme, netloc=netloc, path=path).geturl()


def path_segments(url: str) -> List[str]:
    return [s for s in urlparse(url).path.split("/") if s]

import logging
import socket
import threading
import time
from typing import Callable

import requests

from sitemapcrawl.domain.http_response import HttpResponse
from sitemapcrawl.exceptions import FetchError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8 * 1024


def make_http_session(max_redirects: int = 5) -> requests.Session:
    """Build the shared requests session with the redirect limit applied."""
    session = requests.Session()
    session.max_redirects = int(max_redirects)
    return session


def _response_socket(resp):
    """Best-effort lookup of the socket behind a streamed requests response."""
    raw = getattr(resp, "raw", None)
    conn = getattr(raw, "connection", None) or getattr(raw, "_connection", None)
    sock = getattr(conn, "sock", None)
    if isinstance(sock, socket.socket):
        return sock
    # http.client hands the socket to the response when the connection will close
    fp = getattr(getattr(raw, "_fp", None), "fp", None)
    sock = getattr(getattr(fp, "raw", None), "_sock", None)
    if isinstance(sock, socket.socket):
        return sock
    return None


def _abort(resp) -> None:
    """Shut down the response's socket so a blocked read returns."""
    sock = _response_socket(resp)
    if sock is None:
        resp.close()
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as e:
        logger.debug("Socket already closed while aborting: %s", e)


class HttpService:
    """
    HTTP client wrapper for fetching web pages.

    Requires http_client callable for dependency injection (DIP compliance).
    This enables easy testing without patching and allows swapping HTTP libraries.
    In production the callable is the `get` of a session built by
    `make_http_session`, which enforces the redirect limit.

    `timeout` bounds the whole request, body included. requests applies its
    own timeout per socket read only, so the body is streamed against a
    deadline and a watchdog aborts the connection when the deadline passes.
    """

    def __init__(self, user_agent: str, http_client: Callable, timeout: float = 10,
                 clock: Callable[[], float] = time.monotonic):
        self.user_agent = user_agent
        self.timeout = timeout
        self.http_client = http_client
        self.clock = clock

    def _timed_out(self, url: str) -> FetchError:
        return FetchError(url, f"timeout of {int(self.timeout * 1000)}ms exceeded")

    def _read_body(self, url: str, resp, deadline: float, expired: threading.Event) -> str:
        chunks = []
        try:
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    chunks.append(chunk)
                if expired.is_set() or self.clock() > deadline:
                    raise self._timed_out(url)
        except FetchError:
            raise
        except Exception as e:
            if expired.is_set():
                raise self._timed_out(url) from e
            if isinstance(e, requests.exceptions.RequestException):
                raise FetchError(url, e) from e
            raise
        if expired.is_set():
            raise self._timed_out(url)

        body = b"".join(chunks)
        try:
            return body.decode(resp.encoding or "utf-8", errors="replace")
        except LookupError:
            return body.decode("utf-8", errors="replace")

    def _get(self, url: str) -> HttpResponse:
        headers = {"User-Agent": self.user_agent}
        deadline = self.clock() + self.timeout
        try:
            resp = self.http_client(url, headers=headers, timeout=self.timeout, allow_redirects=True, stream=True)
        except requests.exceptions.RequestException as e:
            raise FetchError(url, e) from e

        expired = threading.Event()

        def on_deadline():
            expired.set()
            _abort(resp)

        watchdog = threading.Timer(max(deadline - self.clock(), 0.0), on_deadline)
        watchdog.daemon = True
        watchdog.start()
        try:
            # Extract Content-Type if response has headers; let real exceptions bubble up.
            ct = None
            if hasattr(resp, 'headers'):
                ct = resp.headers.get('Content-Type')
            text = self._read_body(url, resp, deadline, expired)
        finally:
            watchdog.cancel()
            resp.close()

        return HttpResponse(resp.status_code, text, ct)

    def fetch(self, url: str) -> HttpResponse:
        """Fetch URL and return response with status code, body text, and Content-Type.

        Any status >= 400 is a failure and raises FetchError.
        """
        response = self._get(url)
        if response.status_code >= 400:
            raise FetchError(url, f"Request failed with status code {response.status_code}")
        return response

    def fetch_robots(self, robots_url: str) -> HttpResponse:
        """Fetch robots.txt. Status codes are returned as-is for the caller to judge."""
        return self._get(robots_url)

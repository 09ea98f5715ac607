import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import Mock

import pytest
import requests

from sitemapcrawl.exceptions import FetchError
from sitemapcrawl.services.http_service import HttpService, make_http_session


class FakeResponse:
    def __init__(self, status_code=200, body=b'', headers=None, encoding='utf-8', chunk_delay=0.0, chunks=None):
        self.status_code = status_code
        self.headers = headers if headers is not None else {}
        self.encoding = encoding
        self._chunks = chunks if chunks is not None else [body]
        self._chunk_delay = chunk_delay
        self.closed = False

    def iter_content(self, chunk_size=1):
        for chunk in self._chunks:
            if self._chunk_delay:
                time.sleep(self._chunk_delay)
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk

    def close(self):
        self.closed = True


def _client(response):
    return Mock(return_value=response)


def test_fetch_success():
    http = HttpService(user_agent='TestAgent', http_client=_client(FakeResponse(body=b'hello world')))
    response = http.fetch('http://example.com')
    assert response.status_code == 200
    assert response.text == 'hello world'


def test_fetch_sends_user_agent_timeout_and_streams():
    client = _client(FakeResponse())
    http = HttpService(user_agent='TestAgent', http_client=client, timeout=3)
    http.fetch('http://example.com')
    _, kwargs = client.call_args
    assert kwargs['headers'] == {'User-Agent': 'TestAgent'}
    assert kwargs['timeout'] == 3
    assert kwargs['stream'] is True


def test_body_decoded_with_response_encoding():
    resp = FakeResponse(body='café'.encode('latin-1'), encoding='ISO-8859-1')
    http = HttpService(user_agent='TestAgent', http_client=_client(resp))
    assert http.fetch('http://example.com').text == 'café'


def test_unknown_encoding_falls_back_to_utf8():
    resp = FakeResponse(body='ok'.encode('utf-8'), encoding='no-such-codec')
    http = HttpService(user_agent='TestAgent', http_client=_client(resp))
    assert http.fetch('http://example.com').text == 'ok'


@pytest.mark.parametrize("status", [400, 404, 500, 503])
def test_fetch_status_400_and_above_is_failure(status):
    http = HttpService(user_agent='TestAgent', http_client=_client(FakeResponse(status, b'nope')))
    with pytest.raises(FetchError) as e:
        http.fetch('http://example.com/missing')
    assert e.value.url == 'http://example.com/missing'
    assert str(status) in str(e.value)


def test_fetch_robots_returns_non_success_status():
    http = HttpService(user_agent='TestAgent', http_client=_client(FakeResponse(404)))
    response = http.fetch_robots('http://example.com/robots.txt')
    assert response.status_code == 404


def test_fetch_robots_success():
    resp = FakeResponse(body=b'User-agent: *\nDisallow: /private')
    http = HttpService(user_agent='TestAgent', http_client=_client(resp))
    response = http.fetch_robots('http://example.com/robots.txt')
    assert response.status_code == 200
    assert 'Disallow' in response.text


def test_fetch_wraps_requests_exception():
    mock_http_client = Mock()
    mock_http_client.side_effect = requests.exceptions.Timeout("timed out")
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client)

    with pytest.raises(FetchError) as e:
        http.fetch('http://example.com')
    assert "http://example.com" in str(e.value)
    assert isinstance(e.value.cause, requests.exceptions.Timeout)


def test_fetch_wraps_too_many_redirects():
    mock_http_client = Mock()
    mock_http_client.side_effect = requests.exceptions.TooManyRedirects("Exceeded 5 redirects.")
    http = HttpService(user_agent='TestAgent', http_client=mock_http_client)

    with pytest.raises(FetchError):
        http.fetch('http://example.com/loop')


def test_body_read_error_is_fetch_error_and_response_closed():
    resp = FakeResponse(chunks=[b'<html>', requests.exceptions.ChunkedEncodingError("broken")])
    http = HttpService(user_agent='TestAgent', http_client=_client(resp))
    with pytest.raises(FetchError):
        http.fetch('http://example.com')
    assert resp.closed


def test_fetch_content_type_from_headers():
    resp = FakeResponse(body=b'<html>test</html>', headers={'Content-Type': 'text/html; charset=utf-8'})
    http = HttpService(user_agent='TestAgent', http_client=_client(resp))
    response = http.fetch('http://example.com')
    assert response.content_type == 'text/html; charset=utf-8'
    assert response.is_html


def test_fetch_missing_content_type():
    http = HttpService(user_agent='TestAgent', http_client=_client(FakeResponse(body=b'data')))
    response = http.fetch('http://example.com')
    assert response.content_type is None
    assert not response.is_html


def test_fetch_bubbles_unexpected_exceptions():
    """Verify that non-requests exceptions from headers.get() are NOT swallowed."""
    resp = FakeResponse(body=b'test')
    resp.headers = Mock()
    resp.headers.get.side_effect = RuntimeError("Real bug in headers.get()")
    http = HttpService(user_agent='TestAgent', http_client=_client(resp))

    with pytest.raises(RuntimeError, match="Real bug"):
        http.fetch('http://example.com')
    assert resp.closed


def test_deadline_covers_body_download():
    ticks = iter([0.0, 0.0, 0.5, 1.5, 2.5])
    resp = FakeResponse(chunks=[b'a', b'b', b'c', b'd'])
    http = HttpService(user_agent='TestAgent', http_client=_client(resp), timeout=1.0, clock=lambda: next(ticks))
    with pytest.raises(FetchError) as e:
        http.fetch('http://example.com/slow')
    assert "timeout" in str(e.value)
    assert resp.closed


def test_slow_body_stops_at_timeout():
    resp = FakeResponse(chunks=[b'x'] * 8, chunk_delay=0.1)
    http = HttpService(user_agent='TestAgent', http_client=_client(resp), timeout=0.25)
    started = time.monotonic()
    with pytest.raises(FetchError):
        http.fetch('http://example.com/slow')
    assert time.monotonic() - started < 0.6


class TricklingHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        self.send_response(200)
        self.send_header("Content-Type", "text/html")
        self.send_header("Content-Length", "8")
        self.end_headers()
        try:
            for _ in range(8):
                self.wfile.write(b"x")
                self.wfile.flush()
                time.sleep(0.6)
        except OSError:
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def trickling_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), TricklingHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}/"
    server.shutdown()
    server.server_close()


def test_trickling_server_cannot_outlast_timeout(trickling_server):
    http = HttpService(user_agent='TestAgent', http_client=make_http_session().get, timeout=1.0)
    started = time.monotonic()
    with pytest.raises(FetchError) as e:
        http.fetch(trickling_server)
    assert time.monotonic() - started < 2.0
    assert "timeout" in str(e.value)


def test_make_http_session_sets_redirect_limit():
    session = make_http_session(max_redirects=5)
    assert isinstance(session, requests.Session)
    assert session.max_redirects == 5

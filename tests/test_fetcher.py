"""Page/image fetch tests with an in-memory session."""

import pytest
import requests

from snippet_card.errors import Blocked, FetchFailed, ImageFetchFailed, NetworkError
from snippet_card.extractor import extract_metadata
from snippet_card.fetcher import USER_AGENTS, ArticleFetcher

from .helpers import FakeSession, make_response

URL = "https://news.example.com/story"
IMAGE_URL = "https://cdn.example.com/lead.jpg"


def make_fetcher(routes: dict, sleeps: list, **kwargs) -> tuple[ArticleFetcher, FakeSession]:
    session = FakeSession(routes)
    fetcher = ArticleFetcher(session=session, timeout=5, image_timeout=7, sleep=sleeps.append, **kwargs)
    return fetcher, session


class TestFetchPage:
    def test_success_sends_browser_headers(self):
        sleeps = []
        fetcher, session = make_fetcher({URL: make_response(200, "<html>ok</html>")}, sleeps)

        page = fetcher.fetch_page(URL)

        assert page.html == "<html>ok</html>"
        assert page.status_code == 200
        assert sleeps == []
        call = session.calls[0]
        assert call["headers"]["User-Agent"] in USER_AGENTS
        assert call["headers"]["Accept-Language"].startswith("en-US")
        assert "Referer" in call["headers"]
        assert call["timeout"] == 5
        assert call["allow_redirects"] is True

    def test_final_url_after_redirect(self):
        fetcher, _ = make_fetcher(
            {URL: make_response(200, "<html/>", url="https://news.example.com/amp/story")}, []
        )
        assert fetcher.fetch_page(URL).final_url == "https://news.example.com/amp/story"

    def test_retries_server_errors_with_exponential_backoff(self):
        sleeps = []
        fetcher, session = make_fetcher(
            {URL: [make_response(503), make_response(500), make_response(200, "<html>late</html>")]},
            sleeps,
        )

        page = fetcher.fetch_page(URL)

        assert page.html == "<html>late</html>"
        assert len(session.calls) == 3
        assert sleeps == [2, 4]

    def test_retries_connection_failures(self):
        sleeps = []
        fetcher, session = make_fetcher(
            {URL: [requests.ConnectionError("reset"), make_response(200, "ok")]},
            sleeps,
        )
        assert fetcher.fetch_page(URL).html == "ok"
        assert sleeps == [2]

    def test_exhausted_server_errors_become_network_error(self):
        sleeps = []
        fetcher, session = make_fetcher({URL: make_response(503)}, sleeps)

        with pytest.raises(NetworkError) as exc_info:
            fetcher.fetch_page(URL)

        assert len(session.calls) == 3
        assert sleeps == [2, 4]
        assert exc_info.value.status_code == 500
        assert "503" in exc_info.value.message

    def test_exhausted_timeouts_carry_last_cause(self):
        sleeps = []
        fetcher, session = make_fetcher(
            {URL: [requests.ConnectionError("first"), requests.Timeout("read timed out")]},
            sleeps,
        )
        with pytest.raises(NetworkError) as exc_info:
            fetcher.fetch_page(URL)
        assert len(session.calls) == 3
        assert "read timed out" in exc_info.value.message

    def test_max_attempts_is_configurable(self):
        sleeps = []
        fetcher, session = make_fetcher({URL: make_response(502)}, sleeps, max_attempts=1)
        with pytest.raises(NetworkError):
            fetcher.fetch_page(URL)
        assert len(session.calls) == 1
        assert sleeps == []

    def test_forbidden_is_blocked_without_retry(self):
        sleeps = []
        fetcher, session = make_fetcher({URL: make_response(403)}, sleeps)

        with pytest.raises(Blocked) as exc_info:
            fetcher.fetch_page(URL)

        assert len(session.calls) == 1
        assert sleeps == []
        assert exc_info.value.status_code == 403
        assert "automated access" in exc_info.value.message

    def test_client_errors_pass_status_through(self):
        sleeps = []
        fetcher, session = make_fetcher({URL: make_response(404)}, sleeps)

        with pytest.raises(FetchFailed) as exc_info:
            fetcher.fetch_page(URL)

        assert len(session.calls) == 1
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Failed to fetch article: 404 Not Found"


class TestFetchImage:
    def test_returns_bytes(self):
        fetcher, session = make_fetcher({IMAGE_URL: make_response(200, b"\x89PNG...")}, [])
        assert fetcher.fetch_image(IMAGE_URL, referer=URL) == b"\x89PNG..."
        call = session.calls_to(IMAGE_URL)[0]
        assert call["headers"]["Referer"] == URL
        assert call["timeout"] == 7

    @pytest.mark.parametrize(
        "reply",
        [make_response(404), make_response(200, b""), requests.ConnectionError("refused")],
    )
    def test_failures_raise_image_fetch_failed(self, reply):
        fetcher, session = make_fetcher({IMAGE_URL: reply}, [])
        with pytest.raises(ImageFetchFailed) as exc_info:
            fetcher.fetch_image(IMAGE_URL)
        assert exc_info.value.status_code == 500
        assert len(session.calls) == 1


class TestPageEncoding:
    UTF8_HTML = (
        '<html><head><meta property="og:title" content="It’s a café story"/>'
        '<meta property="og:image" content="/lead.jpg"/></head></html>'
    )

    def test_utf8_page_without_charset_header(self):
        reply = make_response(200, self.UTF8_HTML.encode("utf-8"), headers={"Content-Type": "text/html"})
        assert reply.encoding == "ISO-8859-1"
        fetcher, _ = make_fetcher({URL: reply}, [])

        page = fetcher.fetch_page(URL)

        assert extract_metadata(page.html, URL).title == "It’s a café story"

    def test_declared_charset_is_respected(self):
        body = '<html><head><title>Crème brûlée</title></head></html>'.encode("cp1252")
        reply = make_response(200, body, headers={"Content-Type": "text/html; charset=windows-1252"})
        fetcher, _ = make_fetcher({URL: reply}, [])

        assert "Crème brûlée" in fetcher.fetch_page(URL).html

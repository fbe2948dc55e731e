"""Offline HTTP doubles and in-memory images for tests."""

import io
from collections import deque
from typing import Optional, Union

import requests
from PIL import Image
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

REASONS = {200: "OK", 403: "Forbidden", 404: "Not Found", 500: "Internal Server Error", 503: "Service Unavailable"}


def make_response(
    status_code: int = 200,
    body: Union[str, bytes] = b"",
    url: str = "https://news.example.com/story",
    reason: Optional[str] = None,
    headers: Optional[dict] = None,
) -> requests.Response:
    """Build a real ``requests.Response`` without touching the network.

    With ``headers``, the encoding is derived from them the way requests
    does for a live response; otherwise it is UTF-8.
    """
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    if headers is None:
        response.encoding = "utf-8"
    else:
        response.headers = CaseInsensitiveDict(headers)
        response.encoding = get_encoding_from_headers(response.headers)
    response.url = url
    response.reason = reason or REASONS.get(status_code, "")
    return response


def make_image_bytes(width: int, height: int, color=(200, 40, 40), fmt: str = "JPEG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeSession:
    """Stands in for ``requests.Session``; replies are routed by URL.

    Each URL maps to a list of responses or exceptions consumed in order;
    the last one keeps repeating.
    """

    def __init__(self, routes: dict):
        self.routes = {
            url: deque(replies if isinstance(replies, list) else [replies])
            for url, replies in routes.items()
        }
        self.calls: list[dict] = []
        self.closed = False

    def get(self, url, headers=None, timeout=None, allow_redirects=True):
        self.calls.append(
            {"url": url, "headers": headers or {}, "timeout": timeout, "allow_redirects": allow_redirects}
        )
        if url not in self.routes:
            raise requests.ConnectionError(f"no route for {url}")
        queue = self.routes[url]
        reply = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    def calls_to(self, url: str) -> list[dict]:
        return [call for call in self.calls if call["url"] == url]

    def close(self) -> None:
        self.closed = True

"""Outbound HTTP for article pages and images.

The page fetch rotates browser identities and retries transient failures
with exponential backoff; the image fetch is a single attempt.
"""

import random
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from tenacity import stop_after_attempt

from .config import settings
from .errors import Blocked, FetchFailed, ImageFetchFailed, NetworkError
from .utils import TransientStatusError, get_logger, page_fetch_retry

logger = get_logger(__name__)

# Identity pool; one is picked per attempt
USER_AGENTS = [
    (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/123.0.0.0 Safari/537.36"
    ),
    (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36"
    ),
    (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/605.1.15 (KHTML, like Gecko) "
        "Version/17.3 Safari/605.1.15"
    ),
    (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:124.0) "
        "Gecko/20100101 Firefox/124.0"
    ),
    (
        "Mozilla/5.0 (X11; Linux x86_64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/123.0.0.0 Safari/537.36"
    ),
]

IMAGE_USER_AGENT = USER_AGENTS[0]


def browser_headers(user_agent: str, referer: str = "https://www.google.com/") -> dict[str, str]:
    """Build browser-like request headers around a User-Agent."""
    return {
        "User-Agent": user_agent,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate",
        "Cache-Control": "max-age=0",
        "Referer": referer,
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "cross-site",
        "Sec-Fetch-User": "?1",
    }


def decode_markup(response: requests.Response) -> str:
    """
    Decode a page body, guessing the charset when the server omits it.

    Without a charset in Content-Type, requests assumes ISO-8859-1 for
    text/* responses, which garbles UTF-8 pages.
    """
    content_type = response.headers.get("Content-Type", "")
    if "charset" not in content_type.lower():
        try:
            return response.content.decode("utf-8")
        except UnicodeDecodeError:
            response.encoding = response.apparent_encoding or "utf-8"
    return response.text


@dataclass
class FetchedPage:
    """Markup of a successfully fetched article page."""

    url: str
    final_url: str
    status_code: int
    html: str


class ArticleFetcher:
    """Fetches article markup and image bytes over HTTP."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        image_timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the fetcher.

        Args:
            session: Optional requests session (a new one is created if omitted)
            timeout: Per-attempt page timeout in seconds
            image_timeout: Image download timeout in seconds
            max_attempts: Page fetch attempts including the first
            sleep: Backoff sleep function
        """
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.fetch_timeout_seconds
        self.image_timeout = (
            image_timeout if image_timeout is not None else settings.image_timeout_seconds
        )
        attempts = max_attempts if max_attempts is not None else settings.fetch_max_attempts
        self._get_with_retry = page_fetch_retry(self._get_once).retry_with(
            stop=stop_after_attempt(attempts),
            sleep=sleep,
        )

    def _get_once(self, url: str) -> requests.Response:
        """One page fetch attempt with a freshly drawn identity."""
        user_agent = random.choice(USER_AGENTS)
        logger.debug(f"GET {url} as {user_agent[:40]}...")
        response = self.session.get(
            url,
            headers=browser_headers(user_agent),
            timeout=self.timeout,
            allow_redirects=True,
        )
        if response.status_code >= 500:
            raise TransientStatusError(response)
        return response

    def close(self) -> None:
        """Release pooled connections."""
        self.session.close()

    def fetch_page(self, url: str) -> FetchedPage:
        """
        Fetch an article page, retrying transient failures.

        Args:
            url: Article URL

        Returns:
            FetchedPage with the decoded markup

        Raises:
            Blocked: Origin answered 403
            FetchFailed: Origin answered any other non-2xx status
            NetworkError: No successful response after all attempts
        """
        logger.info(f"Fetching article: {url}")
        try:
            response = self._get_with_retry(url)
        except TransientStatusError as e:
            logger.error(f"Article fetch exhausted retries: {e}")
            raise NetworkError(f"server responded {e}") from e
        except requests.RequestException as e:
            logger.error(f"Article fetch exhausted retries: {e}")
            raise NetworkError(str(e) or e.__class__.__name__) from e

        if response.status_code == 403:
            logger.warning(f"Article fetch blocked (403): {url}")
            raise Blocked()
        if not response.ok:
            logger.error(f"Failed to fetch article: {response.status_code} {response.reason}")
            raise FetchFailed(response.status_code, response.reason or "")

        return FetchedPage(
            url=url,
            final_url=response.url or url,
            status_code=response.status_code,
            html=decode_markup(response),
        )

    def fetch_image(self, image_url: str, referer: str = "") -> bytes:
        """
        Download the article image.

        Args:
            image_url: Absolute image URL
            referer: Page URL sent as Referer (some CDNs require it)

        Returns:
            Raw image bytes

        Raises:
            ImageFetchFailed: Download failed, returned non-2xx, or was empty
        """
        logger.info(f"Fetching article image: {image_url}")
        headers = browser_headers(IMAGE_USER_AGENT, referer=referer or image_url)
        headers["Accept"] = "image/avif,image/webp,image/apng,image/*,*/*;q=0.8"
        headers["Sec-Fetch-Dest"] = "image"
        headers["Sec-Fetch-Mode"] = "no-cors"
        try:
            response = self.session.get(
                image_url,
                headers=headers,
                timeout=self.image_timeout,
                allow_redirects=True,
            )
        except requests.RequestException as e:
            logger.error(f"Error fetching image: {e}")
            raise ImageFetchFailed() from e

        if not response.ok:
            logger.error(f"Image fetch returned {response.status_code} for {image_url}")
            raise ImageFetchFailed()
        if not response.content:
            logger.error(f"Image fetch returned an empty body for {image_url}")
            raise ImageFetchFailed()
        return response.content

"""Article metadata extraction from fetched markup.

Each field is resolved through a cascade of sources, most reliable first:
schema.org JSON-LD blocks, then meta tags, then DOM heuristics, then values
derived from the request URL. The first source that yields a non-empty
value wins; later tiers never overwrite it.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .errors import NoImageFound
from .utils import get_logger

logger = get_logger(__name__)

UNTITLED = "Untitled Article"
UNKNOWN_AUTHOR = "Unknown Author"
UNKNOWN_SOURCE = "Unknown Source"

TITLE_SELECTORS = [
    ('meta[property="og:title"]', "content"),
    ('meta[name="twitter:title"]', "content"),
]

IMAGE_SELECTORS = [
    ('meta[property="og:image"]', "content"),
    ('meta[name="twitter:image"]', "content"),
    ('meta[property="og:image:url"]', "content"),
]

# (selector, attribute); attribute None means element text
AUTHOR_SELECTORS = [
    ('meta[name="author"]', "content"),
    (".author", None),
    ('[rel="author"]', None),
]

DATE_SELECTORS = [
    ('meta[property="article:published_time"]', "content"),
    ('meta[name="publish_date"]', "content"),
    ("time[datetime]", "datetime"),
]

SOURCE_SELECTORS = [
    ('meta[property="og:site_name"]', "content"),
    ('meta[name="application-name"]', "content"),
]


@dataclass(frozen=True)
class ArticleMetadata:
    """Resolved display metadata for one article."""

    title: str
    author: str
    publish_date: str
    source: str
    image_url: str


# ----------------------------------------------------------------------
# JSON-LD author values
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class AuthorName:
    """A bare author string."""

    value: str


@dataclass(frozen=True)
class NamedAuthor:
    """A Person/Organization object with a ``name``."""

    name: str


@dataclass(frozen=True)
class AuthorList:
    """A list of author values."""

    items: tuple["AuthorValue", ...]


AuthorValue = Union[AuthorName, NamedAuthor, AuthorList]


def decode_author(raw: object) -> Optional[AuthorValue]:
    """Decode a JSON-LD ``author`` value; None for shapes we don't know."""
    if isinstance(raw, str):
        return AuthorName(raw)
    if isinstance(raw, dict):
        name = raw.get("name")
        return NamedAuthor(name) if isinstance(name, str) else None
    if isinstance(raw, list):
        decoded = (decode_author(item) for item in raw)
        return AuthorList(tuple(item for item in decoded if item is not None))
    return None


def author_display(value: Optional[AuthorValue]) -> str:
    """Flatten an author value into a display string."""
    if value is None:
        return ""
    if isinstance(value, AuthorName):
        return value.value.strip()
    if isinstance(value, NamedAuthor):
        return value.name.strip()
    names = (author_display(item) for item in value.items)
    return ", ".join(name for name in names if name)


def publisher_display(raw: object) -> str:
    """Flatten a JSON-LD ``publisher`` value (string or object with name)."""
    if isinstance(raw, str):
        return raw.strip()
    if isinstance(raw, dict) and isinstance(raw.get("name"), str):
        return raw["name"].strip()
    return ""


# ----------------------------------------------------------------------
# Cascade state
# ----------------------------------------------------------------------


@dataclass
class _MetadataDraft:
    """Mutable fields filled while walking the cascade; first writer wins."""

    title: str = ""
    author: str = ""
    publish_date: str = ""
    source: str = ""
    image_url: str = ""
    origins: dict[str, str] = field(default_factory=dict)

    def offer(self, name: str, value: object, origin: str) -> bool:
        """Set ``name`` to ``value`` unless it already holds a value."""
        if getattr(self, name):
            return False
        if not isinstance(value, str):
            return False
        value = value.strip()
        if not value:
            return False
        setattr(self, name, value)
        self.origins[name] = origin
        return True

    @property
    def structured_complete(self) -> bool:
        return bool(self.author and self.source and self.publish_date)


def _select_value(soup: BeautifulSoup, selector: str, attribute: Optional[str]) -> str:
    element = soup.select_one(selector)
    if element is None:
        return ""
    if attribute is None:
        return " ".join(element.get_text(" ").split())
    value = element.get(attribute)
    return value if isinstance(value, str) else ""


def _cascade(
    draft: _MetadataDraft,
    name: str,
    soup: BeautifulSoup,
    selectors: list[tuple[str, Optional[str]]],
) -> None:
    for selector, attribute in selectors:
        if draft.offer(name, _select_value(soup, selector, attribute), selector):
            return


def _structured_data_objects(soup: BeautifulSoup) -> Iterator[dict]:
    """Yield every JSON-LD object in document order.

    A block may hold one object or a list of objects; objects carrying an
    ``@graph`` list yield their graph members after themselves. Malformed
    blocks are logged and skipped.
    """
    for index, script in enumerate(soup.select('script[type="application/ld+json"]')):
        text = script.string or script.get_text()
        if not text or not text.strip():
            continue
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"Skipping malformed JSON-LD block #{index}: {e}")
            continue

        items = data if isinstance(data, list) else [data]
        for item in items:
            if not isinstance(item, dict):
                continue
            yield item
            graph = item.get("@graph")
            if isinstance(graph, list):
                yield from (node for node in graph if isinstance(node, dict))


def _resolve_structured_data(draft: _MetadataDraft, soup: BeautifulSoup) -> None:
    for item in _structured_data_objects(soup):
        draft.offer("author", author_display(decode_author(item.get("author"))), "json-ld")
        draft.offer("source", publisher_display(item.get("publisher")), "json-ld")
        draft.offer("publish_date", item.get("datePublished"), "json-ld")
        if draft.structured_complete:
            return


_URL_LIKE = re.compile(r"^(https?:)?//|^www\.", re.IGNORECASE)


def authors_from_profile_urls(content: str) -> str:
    """Turn a comma-separated list of author profile URLs into names.

    ``https://site.com/profile/john-smith`` becomes ``John Smith``. Entries
    that are not URLs are kept as written.
    """
    names = []
    for entry in content.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if _URL_LIKE.match(entry):
            path = urlparse(entry if "//" in entry else f"//{entry}").path
            segments = [segment for segment in path.split("/") if segment]
            if not segments:
                continue
            words = segments[-1].replace("-", " ").replace("_", " ").split()
            name = " ".join(word.capitalize() for word in words)
        else:
            name = entry
        if name:
            names.append(name)
    return ", ".join(names)


def source_from_url(url: str) -> str:
    """Publisher name derived from the URL hostname, minus a leading ``www.``."""
    try:
        hostname = urlparse(url).hostname or ""
    except ValueError:
        hostname = ""
    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    return hostname


def resolve_image_url(raw: str, base_url: str) -> str:
    """Absolute http(s) image URL, or empty if ``raw`` can't be made one."""
    raw = raw.strip()
    if not raw or raw.lower().startswith(("data:", "javascript:")):
        return ""
    absolute = urljoin(base_url, raw) if base_url else raw
    if not absolute.startswith(("http://", "https://")):
        return ""
    return absolute


def extract_metadata(html: str, url: str, base_url: Optional[str] = None) -> ArticleMetadata:
    """
    Resolve article metadata from page markup.

    Args:
        html: Page markup
        url: Request URL (used for the source fallback)
        base_url: URL relative image paths resolve against (defaults to url)

    Returns:
        Fully defaulted ArticleMetadata

    Raises:
        NoImageFound: No image URL in any image source
    """
    soup = BeautifulSoup(html, "html.parser")
    draft = _MetadataDraft()

    # Title
    _cascade(draft, "title", soup, TITLE_SELECTORS)
    if soup.title is not None:
        draft.offer("title", soup.title.get_text(" ", strip=True), "title")
    draft.offer("title", UNTITLED, "default")

    # Image
    for selector, attribute in IMAGE_SELECTORS:
        candidate = resolve_image_url(_select_value(soup, selector, attribute), base_url or url)
        if draft.offer("image_url", candidate, selector):
            break
    if not draft.image_url:
        logger.warning(f"No article image found for {url}")
        raise NoImageFound()

    # Author, source and date: structured data, then meta/DOM heuristics
    _resolve_structured_data(draft, soup)
    _cascade(draft, "author", soup, AUTHOR_SELECTORS)
    _cascade(draft, "publish_date", soup, DATE_SELECTORS)
    _cascade(draft, "source", soup, SOURCE_SELECTORS)

    if not draft.author:
        profile_urls = _select_value(soup, 'meta[property="article:author"]', "content")
        draft.offer("author", authors_from_profile_urls(profile_urls), "article:author")

    draft.offer("source", source_from_url(url), "hostname")
    draft.offer("source", UNKNOWN_SOURCE, "default")
    draft.offer("author", UNKNOWN_AUTHOR, "default")

    logger.debug(f"Metadata sources for {url}: {draft.origins}")
    return ArticleMetadata(
        title=draft.title,
        author=draft.author,
        publish_date=draft.publish_date,
        source=draft.source,
        image_url=draft.image_url,
    )

"""Snippet card pipeline: article URL in, PNG card and metadata out.

Steps run strictly in order and stop at the first failure; only the page
fetch retries.
"""

import base64
from dataclasses import dataclass
from datetime import date
from typing import Optional
from urllib.parse import urlparse

from .card_renderer import CardContent, CardRenderer, open_image
from .errors import InvalidInput
from .extractor import ArticleMetadata, extract_metadata
from .fetcher import ArticleFetcher
from .layout import compute_layout, panel_mode_for
from .text import display_fields, font_tier, wrap_author, wrap_words
from .utils import get_logger

logger = get_logger(__name__)


@dataclass
class CardResult:
    """A generated card plus the metadata it was built from."""

    png: bytes
    metadata: ArticleMetadata
    formatted_date: str

    @property
    def data_uri(self) -> str:
        """PNG as an inline ``data:`` URI."""
        return f"data:image/png;base64,{base64.b64encode(self.png).decode('ascii')}"

    def metadata_dict(self) -> dict:
        return {
            "title": self.metadata.title,
            "author": self.metadata.author,
            "date": self.formatted_date,
            "source": self.metadata.source,
            "imageUrl": self.metadata.image_url,
        }

    def to_response(self) -> dict:
        """Convert to the JSON success body."""
        return {"image": self.data_uri, "metadata": self.metadata_dict()}


def validate_url(url: object) -> str:
    """
    Check that ``url`` is an absolute http(s) URL.

    Raises:
        InvalidInput: Missing, blank or malformed URL
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidInput("URL is required")
    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError:
        raise InvalidInput("Invalid URL format") from None
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidInput("Invalid URL format")
    return url


class SnippetCardGenerator:
    """Runs the fetch → extract → layout → render pipeline for one URL at a time."""

    def __init__(
        self,
        fetcher: Optional[ArticleFetcher] = None,
        renderer: Optional[CardRenderer] = None,
    ):
        self.fetcher = fetcher or ArticleFetcher()
        self.renderer = renderer or CardRenderer()

    def generate(
        self,
        url: object,
        include_author: bool = True,
        include_date: bool = True,
        today: Optional[date] = None,
    ) -> CardResult:
        """
        Generate a snippet card for an article.

        Args:
            url: Article URL
            include_author: Render the author lines
            include_date: Render the "source • date" row
            today: Override for the fallback date

        Returns:
            CardResult with PNG bytes and resolved metadata

        Raises:
            SnippetCardError: Any terminal pipeline failure
        """
        url = validate_url(url)

        page = self.fetcher.fetch_page(url)
        metadata = extract_metadata(page.html, url, base_url=page.final_url)
        logger.info(
            f"Resolved '{metadata.title[:60]}' by {metadata.author} "
            f"({metadata.source}, image {metadata.image_url})"
        )

        image = open_image(self.fetcher.fetch_image(metadata.image_url, referer=page.final_url))

        fields = display_fields(metadata, today=today)
        tier = font_tier(fields.title)
        title_lines = wrap_words(fields.title, tier.max_chars)
        author_lines = wrap_author(fields.author)

        geometry = compute_layout(
            title_line_count=len(title_lines),
            tier=tier,
            author_line_count=len(author_lines),
            include_author=include_author,
            include_date=include_date,
            panel_mode=panel_mode_for(image.width, image.height),
        )
        logger.debug(f"Layout: {geometry}")

        content = CardContent(
            fields=fields,
            title_lines=title_lines,
            author_lines=author_lines,
            tier=tier,
            include_author=include_author,
            include_date=include_date,
        )
        rendered = self.renderer.render(content, geometry, image)

        return CardResult(
            png=rendered.png,
            metadata=metadata,
            formatted_date=fields.formatted_date,
        )

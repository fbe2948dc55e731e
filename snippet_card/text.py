"""Display text normalization and greedy line wrapping."""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from dateutil import parser as date_parser

from .extractor import UNKNOWN_AUTHOR, ArticleMetadata
from .utils import get_logger

logger = get_logger(__name__)

MAX_TITLE_CHARS = 150
ELLIPSIS = "..."

AUTHOR_MAX_CHARS = 60
MAX_AUTHOR_LINES = 3

_AUTHOR_PREFIX = re.compile(r"^\s*(by|author:)\s+", re.IGNORECASE)
_AUTHOR_SEPARATORS = re.compile(r"[|•–—]")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class FontTier:
    """Title font size, line height and per-line character budget."""

    font_size: int
    line_height: int
    max_chars: int


LARGE_TIER = FontTier(font_size=48, line_height=58, max_chars=25)
MEDIUM_TIER = FontTier(font_size=42, line_height=50, max_chars=30)
SMALL_TIER = FontTier(font_size=36, line_height=44, max_chars=35)


@dataclass(frozen=True)
class DisplayFields:
    """Display-ready strings for one card."""

    title: str
    author: str
    source: str
    date: str
    formatted_date: str

    @property
    def metadata_line(self) -> str:
        return f"{self.source} • {self.date}"


def format_long_date(value: date) -> str:
    """Format as ``January 5, 2024``."""
    return f"{value:%B} {value.day}, {value.year}"


def format_date(raw: str, today: Optional[date] = None) -> str:
    """
    Format a raw publish date for display.

    The calendar date written in the string is used as-is, without shifting
    timezones. Empty or unparseable input falls back to today's date.

    Args:
        raw: Date string as found in the page (ISO-8601 or textual)
        today: Override for the current date

    Returns:
        Date formatted like ``January 5, 2024``
    """
    today = today or date.today()
    raw = (raw or "").strip()
    if not raw:
        return format_long_date(today)
    try:
        parsed = date_parser.parse(raw)
        return format_long_date(parsed.date())
    except (ValueError, OverflowError, TypeError) as e:
        logger.debug(f"Could not parse date {raw!r}: {e}")
        return format_long_date(today)


def clean_author(raw: str) -> str:
    """Strip byline prefixes and trailing role/outlet segments from an author."""
    author = _AUTHOR_PREFIX.sub("", raw or "")
    author = _WHITESPACE.sub(" ", author)
    author = _AUTHOR_SEPARATORS.split(author, maxsplit=1)[0]
    author = author.strip()
    return author or UNKNOWN_AUTHOR


def truncate_title(title: str) -> str:
    """Cut titles longer than 150 characters and mark the cut."""
    if len(title) > MAX_TITLE_CHARS:
        return title[:MAX_TITLE_CHARS] + ELLIPSIS
    return title


def display_fields(metadata: ArticleMetadata, today: Optional[date] = None) -> DisplayFields:
    """Derive the display strings for a card from resolved metadata."""
    formatted_date = format_date(metadata.publish_date, today=today)
    return DisplayFields(
        title=truncate_title(metadata.title),
        author=clean_author(metadata.author).upper(),
        source=metadata.source.upper(),
        date=formatted_date.upper(),
        formatted_date=formatted_date,
    )


def font_tier(title: str) -> FontTier:
    """Pick the title font tier from the (truncated) title length."""
    if len(title) > 80:
        return SMALL_TIER
    if len(title) > 50:
        return MEDIUM_TIER
    return LARGE_TIER


def wrap_words(text: str, max_chars: int) -> tuple[str, ...]:
    """
    Greedy word wrap by character count.

    A word joins the current line only if the joined line stays strictly
    below ``max_chars``; otherwise it starts a new line. A word longer than
    the budget sits alone on its line, unsplit.

    Args:
        text: Text to wrap
        max_chars: Per-line character budget

    Returns:
        Lines in order (a single empty line for empty text)
    """
    lines = [""]
    for word in text.split():
        current = lines[-1]
        if current and len(f"{current} {word}") < max_chars:
            lines[-1] = f"{current} {word}"
        elif not current:
            lines[-1] = word
        else:
            lines.append(word)
    return tuple(lines)


def wrap_author(author: str) -> tuple[str, ...]:
    """Wrap the byline, keeping at most three lines so the image area survives."""
    lines = wrap_words(author, AUTHOR_MAX_CHARS)
    if len(lines) <= MAX_AUTHOR_LINES:
        return lines
    last = lines[MAX_AUTHOR_LINES - 1].rstrip(",")
    return lines[: MAX_AUTHOR_LINES - 1] + (last + ELLIPSIS,)

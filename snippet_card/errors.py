"""Error taxonomy for the snippet card pipeline.

Every terminal failure of a card request is a ``SnippetCardError`` carrying
the user-facing message and the HTTP status the API answers with.
"""

from typing import Optional


class SnippetCardError(Exception):
    """Base class for failures that end a card request."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        """Convert to the JSON error body."""
        return {"error": self.message}


class InvalidInput(SnippetCardError):
    """Missing or malformed article URL."""

    status_code = 400


class FetchFailed(SnippetCardError):
    """Origin answered the page fetch with a non-2xx, non-403 status."""

    def __init__(self, status_code: int, reason: str = ""):
        message = f"Failed to fetch article: {status_code} {reason}".rstrip()
        super().__init__(message, status_code=status_code)


class Blocked(SnippetCardError):
    """Origin refused automated access (HTTP 403)."""

    status_code = 403

    def __init__(self, message: str = "This site blocked automated access. Please try a different article."):
        super().__init__(message)


class NetworkError(SnippetCardError):
    """Page fetch never completed after all retry attempts."""

    status_code = 500

    def __init__(self, cause: str):
        super().__init__(f"Network error while fetching article: {cause}")
        self.cause = cause


class NoImageFound(SnippetCardError):
    """Article markup exposes no usable image URL."""

    status_code = 400

    def __init__(self, message: str = "No article image found. Please try a different article."):
        super().__init__(message)


class ImageFetchFailed(SnippetCardError):
    """Article image could not be downloaded or decoded."""

    status_code = 500

    def __init__(self, message: str = "Failed to fetch article image"):
        super().__init__(message)


class UnexpectedError(SnippetCardError):
    """Catch-all for anything not covered above."""

    status_code = 500

    def __init__(self, message: str = "An unexpected error occurred while generating the image"):
        super().__init__(message)


class FontsMissingError(RuntimeError):
    """Required font files are missing at startup."""

"""Font loading for card text.

Fonts are loaded once per process and shared read-only afterwards. The
service loads them at startup so a missing font fails fast instead of on
the first request.
"""

import threading
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from PIL import ImageFont

from .config import settings
from .errors import FontsMissingError
from .layout import METADATA_FONT_SIZE
from .text import LARGE_TIER, MEDIUM_TIER, SMALL_TIER
from .utils import get_logger

logger = get_logger(__name__)

BOLD_FONT = "Inter-Bold.ttf"
SEMIBOLD_FONT = "Inter-SemiBold.ttf"
MEDIUM_FONT = "Inter-Medium.ttf"

TITLE_SIZES = tuple(tier.font_size for tier in (SMALL_TIER, MEDIUM_TIER, LARGE_TIER))


@dataclass(frozen=True)
class FontSet:
    """Faces used on a card, keyed by role."""

    title: Mapping[int, ImageFont.FreeTypeFont]
    author: ImageFont.FreeTypeFont
    metadata: ImageFont.FreeTypeFont
    builtin: bool = False

    def title_font(self, size: int) -> ImageFont.FreeTypeFont:
        return self.title[size]

    @classmethod
    def from_directory(cls, fonts_dir: Path) -> "FontSet":
        """
        Load the Inter faces from a directory.

        Raises:
            FontsMissingError: A required font file is missing or unreadable
        """
        missing = [
            name for name in (BOLD_FONT, SEMIBOLD_FONT, MEDIUM_FONT)
            if not (fonts_dir / name).is_file()
        ]
        if missing:
            raise FontsMissingError(f"Missing fonts in {fonts_dir}: {', '.join(missing)}")

        try:
            title = {
                size: ImageFont.truetype(str(fonts_dir / BOLD_FONT), size)
                for size in TITLE_SIZES
            }
            author = ImageFont.truetype(str(fonts_dir / SEMIBOLD_FONT), METADATA_FONT_SIZE)
            metadata = ImageFont.truetype(str(fonts_dir / MEDIUM_FONT), METADATA_FONT_SIZE)
        except OSError as e:
            raise FontsMissingError(f"Could not load fonts from {fonts_dir}: {e}") from e

        return cls(title=MappingProxyType(title), author=author, metadata=metadata)

    @classmethod
    def builtin_fonts(cls) -> "FontSet":
        """Pillow's bundled scalable face at every size a card needs."""
        title = {size: ImageFont.load_default(size=size) for size in TITLE_SIZES}
        small = ImageFont.load_default(size=METADATA_FONT_SIZE)
        return cls(title=MappingProxyType(title), author=small, metadata=small, builtin=True)


_fonts: Optional[FontSet] = None
_fonts_lock = threading.Lock()


def load_fonts(
    fonts_dir: Optional[Path] = None,
    allow_builtin: Optional[bool] = None,
) -> FontSet:
    """
    Load the process-wide font set if it isn't loaded yet.

    Args:
        fonts_dir: Directory holding the Inter faces (defaults to settings)
        allow_builtin: Use Pillow's bundled face when the Inter faces are missing

    Returns:
        The shared FontSet

    Raises:
        FontsMissingError: Fonts are missing and the builtin face isn't allowed
    """
    global _fonts
    with _fonts_lock:
        if _fonts is not None:
            return _fonts

        fonts_dir = fonts_dir or settings.fonts_dir
        if allow_builtin is None:
            allow_builtin = settings.allow_builtin_fonts

        try:
            _fonts = FontSet.from_directory(fonts_dir)
            logger.info(f"Loaded card fonts from {fonts_dir}")
        except FontsMissingError as e:
            if not allow_builtin:
                raise
            logger.warning(f"{e}; using Pillow's builtin font")
            _fonts = FontSet.builtin_fonts()
        return _fonts


def get_fonts() -> FontSet:
    """The shared font set, loading it on first use."""
    return _fonts if _fonts is not None else load_fonts()


def reset_fonts() -> None:
    """Forget the loaded font set (used by tests and reconfiguration)."""
    global _fonts
    with _fonts_lock:
        _fonts = None

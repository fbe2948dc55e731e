"""Snippet card renderer.

Composites the article image, a text panel and a rounded-corner mask into
one 800x1000 PNG. Text is rasterized from the font outlines by Pillow's
FreeType renderer at exact baseline positions from the layout.
"""

import io
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageChops, ImageDraw, ImageOps, UnidentifiedImageError

from .errors import ImageFetchFailed
from .fonts import FontSet, get_fonts
from .layout import (
    CORNER_RADIUS,
    LEFT_MARGIN,
    OVERLAY_OPACITY,
    SEPARATOR_HEIGHT,
    LayoutGeometry,
    PanelMode,
)
from .text import DisplayFields, FontTier
from .utils import get_logger

logger = get_logger(__name__)

# Colors
CANVAS_BG = (255, 255, 255, 255)
PANEL_WHITE = (255, 255, 255)
TITLE_COLOR = "#000000"
AUTHOR_COLOR = "#666666"
METADATA_COLOR = "#999999"
SEPARATOR_COLOR = "#E5E5E5"


@dataclass(frozen=True)
class CardContent:
    """Wrapped text and display options for one card."""

    fields: DisplayFields
    title_lines: tuple[str, ...]
    author_lines: tuple[str, ...]
    tier: FontTier
    include_author: bool = True
    include_date: bool = True


@dataclass
class RenderedCard:
    """A rendered snippet card image."""

    png: bytes
    width: int
    height: int
    panel_mode: PanelMode


def open_image(data: bytes) -> Image.Image:
    """
    Decode fetched image bytes.

    Raises:
        ImageFetchFailed: The bytes are not a decodable image
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logger.error(f"Could not decode article image: {e}")
        raise ImageFetchFailed() from e
    return image


class CardRenderer:
    """Renders snippet cards as PNG bytes."""

    def __init__(self, fonts: Optional[FontSet] = None):
        self._fonts = fonts

    @property
    def fonts(self) -> FontSet:
        return self._fonts or get_fonts()

    def render(
        self,
        content: CardContent,
        geometry: LayoutGeometry,
        image: Image.Image,
    ) -> RenderedCard:
        """
        Composite the card.

        Args:
            content: Wrapped display text
            geometry: Layout computed for the content and image orientation
            image: Decoded article image

        Returns:
            RenderedCard with PNG bytes
        """
        article = self.fit_image(image, geometry)
        panel = self.render_text_panel(content, geometry)

        canvas = Image.new("RGBA", (geometry.width, geometry.total_height), CANVAS_BG)
        canvas.paste(article, (0, 0))
        canvas.alpha_composite(panel, (0, geometry.panel_top))
        canvas = self.round_corners(canvas)

        buffer = io.BytesIO()
        canvas.save(buffer, format="PNG", optimize=True)
        png = buffer.getvalue()
        logger.info(
            f"Rendered {geometry.panel_mode.value} card "
            f"(text box {geometry.text_box_height}px, {len(png):,} bytes)"
        )
        return RenderedCard(
            png=png,
            width=geometry.width,
            height=geometry.total_height,
            panel_mode=geometry.panel_mode,
        )

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def fit_image(self, image: Image.Image, geometry: LayoutGeometry) -> Image.Image:
        """Cover-resize the article image to its area, cropping from the center."""
        return ImageOps.fit(
            image.convert("RGB"),
            geometry.image_size,
            method=Image.Resampling.LANCZOS,
            centering=(0.5, 0.5),
        )

    def render_text_panel(self, content: CardContent, geometry: LayoutGeometry) -> Image.Image:
        """Draw title, separator and metadata rows on a transparent-capable panel."""
        if geometry.panel_mode is PanelMode.OVERLAY:
            fill = PANEL_WHITE + (round(255 * OVERLAY_OPACITY),)
        else:
            fill = PANEL_WHITE + (255,)

        panel = Image.new("RGBA", (geometry.width, geometry.text_box_height), fill)
        draw = ImageDraw.Draw(panel)
        fonts = self.fonts

        title_font = fonts.title_font(content.tier.font_size)
        for line, baseline in zip(content.title_lines, geometry.title_baselines):
            draw.text((LEFT_MARGIN, baseline), line, font=title_font, fill=TITLE_COLOR, anchor="ls")

        draw.line(
            [
                (LEFT_MARGIN, geometry.separator_y),
                (geometry.width - LEFT_MARGIN, geometry.separator_y),
            ],
            fill=SEPARATOR_COLOR,
            width=SEPARATOR_HEIGHT,
        )

        rows = []
        if content.include_author:
            rows.extend((line, fonts.author, AUTHOR_COLOR) for line in content.author_lines)
        if content.include_date:
            rows.append((content.fields.metadata_line, fonts.metadata, METADATA_COLOR))

        for (text, font, color), baseline in zip(rows, geometry.metadata_baselines):
            draw.text((LEFT_MARGIN, baseline), text, font=font, fill=color, anchor="ls")

        return panel

    def round_corners(self, canvas: Image.Image) -> Image.Image:
        """Cut the card's corners with a rounded-rectangle alpha mask."""
        mask = Image.new("L", canvas.size, 0)
        ImageDraw.Draw(mask).rounded_rectangle(
            [(0, 0), (canvas.width - 1, canvas.height - 1)],
            radius=CORNER_RADIUS,
            fill=255,
        )
        canvas.putalpha(ImageChops.multiply(canvas.getchannel("A"), mask))
        return canvas

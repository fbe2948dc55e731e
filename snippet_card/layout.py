"""Card geometry.

All positions are derived bottom-up from fixed spacing constants and the
wrapped line counts; the same inputs always give the same geometry. Text
baselines are relative to the top of the text panel.
"""

from dataclasses import dataclass
from enum import Enum

from .text import FontTier

# Card dimensions
CARD_WIDTH = 800
CARD_HEIGHT = 1000

# Text panel spacing
TOP_PADDING = 20
BOTTOM_PADDING = 20
SEPARATOR_HEIGHT = 2
SEPARATOR_SPACING = 12
METADATA_SPACING = 15
METADATA_LINE_HEIGHT = 18
LEFT_MARGIN = 40
METADATA_FONT_SIZE = 13

# First title baseline sits this fraction of the font size below the padding
ASCENT_RATIO = 0.85

CORNER_RADIUS = 16
OVERLAY_OPACITY = 0.85


class PanelMode(Enum):
    """How the text panel sits on the article image."""

    OPAQUE = "opaque"  # image on top, solid panel below
    OVERLAY = "overlay"  # image fills the card, translucent panel on top


def panel_mode_for(image_width: int, image_height: int) -> PanelMode:
    """Landscape images get the opaque layout; portrait and square get the overlay."""
    if image_width > image_height:
        return PanelMode.OPAQUE
    return PanelMode.OVERLAY


@dataclass(frozen=True)
class LayoutGeometry:
    """Pixel geometry of one card."""

    width: int
    total_height: int
    text_box_height: int
    image_area_height: int
    panel_mode: PanelMode
    title_baselines: tuple[float, ...]
    separator_y: float
    metadata_baselines: tuple[float, ...]

    @property
    def image_size(self) -> tuple[int, int]:
        """Target size of the resized article image."""
        if self.panel_mode is PanelMode.OPAQUE:
            return (self.width, self.image_area_height)
        return (self.width, self.total_height)

    @property
    def panel_top(self) -> int:
        return self.image_area_height


def title_block_height(line_count: int, tier: FontTier) -> float:
    """Distance from the panel padding to the last title baseline."""
    return (line_count - 1) * tier.line_height + ASCENT_RATIO * tier.font_size


def metadata_block_height(author_line_count: int, include_author: bool, include_date: bool) -> int:
    """Height of the metadata block below the separator; 0 when nothing is shown."""
    rows = (author_line_count if include_author else 0) + (1 if include_date else 0)
    if rows == 0:
        return 0
    return METADATA_SPACING + rows * METADATA_LINE_HEIGHT


def compute_layout(
    title_line_count: int,
    tier: FontTier,
    author_line_count: int,
    include_author: bool = True,
    include_date: bool = True,
    panel_mode: PanelMode = PanelMode.OPAQUE,
    width: int = CARD_WIDTH,
    total_height: int = CARD_HEIGHT,
) -> LayoutGeometry:
    """
    Compute card geometry from wrapped line counts.

    Long content grows the text panel and shrinks the image area; nothing
    guards against the panel exceeding the card height.

    Args:
        title_line_count: Number of wrapped title lines (at least 1)
        tier: Title font tier
        author_line_count: Number of wrapped author lines
        include_author: Whether author lines are rendered
        include_date: Whether the "source • date" row is rendered
        panel_mode: Opaque or overlay text panel
        width: Card width
        total_height: Card height

    Returns:
        LayoutGeometry for the card
    """
    title_line_count = max(title_line_count, 1)
    title_block = title_block_height(title_line_count, tier)
    metadata_block = metadata_block_height(author_line_count, include_author, include_date)

    text_box_height = round(
        TOP_PADDING
        + title_block
        + SEPARATOR_SPACING
        + SEPARATOR_HEIGHT
        + metadata_block
        + BOTTOM_PADDING
    )

    first_baseline = TOP_PADDING + ASCENT_RATIO * tier.font_size
    title_baselines = tuple(
        first_baseline + i * tier.line_height for i in range(title_line_count)
    )
    separator_y = title_baselines[-1] + SEPARATOR_SPACING

    metadata_rows = (author_line_count if include_author else 0) + (1 if include_date else 0)
    metadata_start = separator_y + SEPARATOR_HEIGHT + METADATA_SPACING
    metadata_baselines = tuple(
        metadata_start + i * METADATA_LINE_HEIGHT for i in range(metadata_rows)
    )

    return LayoutGeometry(
        width=width,
        total_height=total_height,
        text_box_height=text_box_height,
        image_area_height=total_height - text_box_height,
        panel_mode=panel_mode,
        title_baselines=title_baselines,
        separator_y=separator_y,
        metadata_baselines=metadata_baselines,
    )

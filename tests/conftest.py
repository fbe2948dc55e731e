"""Shared fixtures."""

import pytest

from snippet_card.fonts import load_fonts, reset_fonts


@pytest.fixture(autouse=True)
def builtin_fonts(tmp_path):
    """Load Pillow's bundled font so rendering works without the Inter files."""
    reset_fonts()
    fonts = load_fonts(fonts_dir=tmp_path / "no-fonts", allow_builtin=True)
    yield fonts
    reset_fonts()

"""Font loading lifecycle tests."""

import pytest

from snippet_card.errors import FontsMissingError
from snippet_card.fonts import FontSet, TITLE_SIZES, get_fonts, load_fonts, reset_fonts


def test_missing_fonts_fail_when_builtin_not_allowed(tmp_path):
    reset_fonts()
    with pytest.raises(FontsMissingError) as exc_info:
        load_fonts(fonts_dir=tmp_path, allow_builtin=False)
    assert "Inter-Bold.ttf" in str(exc_info.value)


def test_unreadable_font_file_fails(tmp_path):
    for name in ("Inter-Bold.ttf", "Inter-SemiBold.ttf", "Inter-Medium.ttf"):
        (tmp_path / name).write_bytes(b"not a font")
    with pytest.raises(FontsMissingError):
        FontSet.from_directory(tmp_path)


def test_builtin_fallback_covers_every_size(tmp_path):
    reset_fonts()
    fonts = load_fonts(fonts_dir=tmp_path, allow_builtin=True)
    assert fonts.builtin
    assert set(fonts.title) == set(TITLE_SIZES)
    with pytest.raises(TypeError):
        fonts.title[99] = fonts.author


def test_loaded_once_and_shared(tmp_path):
    first = get_fonts()
    assert load_fonts(fonts_dir=tmp_path / "elsewhere", allow_builtin=False) is first
    assert get_fonts() is first

"""
Tests for layout.preview

Test Coverage:
- Crop bands for fill overflow
- Trim band on every side
- Display scale projection and validation
"""
import pytest

from pdf_resizer.core.models import SizeSpec, SourceGeometry
from pdf_resizer.layout import crop_overlay

A4 = SourceGeometry(210, 297)


def test_crop_overlay_when_fill_square_then_top_and_bottom_bands():
    # Arrange
    spec = SizeSpec.fill(100, 100)

    # Act
    bands = crop_overlay(spec, A4)

    # Assert
    assert bands.top == pytest.approx(43.5)
    assert bands.bottom == pytest.approx(43.5)
    assert bands.left == pytest.approx(0)
    assert bands.right == pytest.approx(0, abs=1e-9)


def test_crop_overlay_when_scaled_without_crop_then_only_trim():
    """Uncropped layouts only shade the trimmed edge."""
    source = SourceGeometry.from_page(210, 297, trim=5)

    bands = crop_overlay(SizeSpec.scaled(1.0), source)

    for band in (bands.top, bands.right, bands.bottom, bands.left):
        assert band == pytest.approx(5)


def test_crop_overlay_when_display_scale_then_bands_scaled():
    source = SourceGeometry.from_page(210, 297, trim=5)

    bands = crop_overlay(SizeSpec.lock_width(100), source, display_scale=2.0)

    assert bands.left == pytest.approx(10)
    assert bands.top == pytest.approx(10)


def test_crop_overlay_when_fill_with_trim_then_trim_added_to_crop():
    source = SourceGeometry.from_page(210, 297, trim=5)

    bands = crop_overlay(SizeSpec.fill(200, 200), source)

    assert bands.left == pytest.approx(5)
    overflow_mm = (287 - 200) / 2
    assert bands.top == pytest.approx(5 + overflow_mm)


@pytest.mark.parametrize("display_scale", [0, -1])
def test_crop_overlay_when_display_scale_not_positive_then_raises(display_scale):
    with pytest.raises(ValueError):
        crop_overlay(SizeSpec.fill(100, 100), A4, display_scale=display_scale)

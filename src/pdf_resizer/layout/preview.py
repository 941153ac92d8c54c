"""
Module: layout.preview

Purpose:
    Crop overlay for an untrimmed, unpadded source preview. The bands show
    which parts of the page will not reach the output: the trim band on
    every side plus whatever the spec's layout pushes outside the usable
    area. Uses the same visible_window() projection the renderers use, so
    preview and export never disagree.

Key Functions:
    - crop_overlay(): CropBands in display units

Dependencies:
    - layout.engine: compute_geometry

Used By:
    - Preview callers (per-spec crop indication)
"""

from __future__ import annotations

import logging
from typing import Optional

from pdf_resizer.core.models.geometry import CropBands, SourceGeometry
from pdf_resizer.core.models.size_spec import SizeSpec

from .config import LayoutLimits
from .engine import compute_geometry

logger = logging.getLogger(__name__)


def crop_overlay(
    spec: SizeSpec,
    source: SourceGeometry,
    display_scale: float = 1.0,
    limits: Optional[LayoutLimits] = None,
) -> CropBands:
    """
    Compute crop bands for a source preview.

    Args:
        spec: Size specification being previewed
        source: Source geometry (post-trim; trim gives the raw page size)
        display_scale: Display units per source mm
        limits: Layout limits (defaults when None)

    Returns:
        CropBands(top, right, bottom, left) in display units

    Raises:
        ValueError: If display_scale is not positive

    Example:
        >>> bands = crop_overlay(SizeSpec.fill(100, 100), SourceGeometry(210, 297))
        >>> bands.left, round(bands.top, 1)
        (0.0, 43.5)
    """
    if display_scale <= 0:
        raise ValueError(f"display_scale must be positive: {display_scale}")

    geometry = compute_geometry(spec, source, limits)
    window = geometry.visible_window()
    trim = source.trim

    if window is None:
        # Nothing visible: shade the whole page
        half_w = source.raw_width / 2 * display_scale
        half_h = source.raw_height / 2 * display_scale
        return CropBands(top=half_h, right=half_w, bottom=half_h, left=half_w)

    visible, _ = window
    bands = CropBands(
        top=max(0.0, trim + visible.y) * display_scale,
        right=max(0.0, trim + source.width - visible.right) * display_scale,
        bottom=max(0.0, trim + source.height - visible.bottom) * display_scale,
        left=max(0.0, trim + visible.x) * display_scale,
    )
    logger.debug(f"Crop overlay for {spec.mode.value}: {bands}")
    return bands

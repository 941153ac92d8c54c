"""
Module: layout.engine

Purpose:
    Pure, deterministic mapping from (SizeSpec, SourceGeometry) to
    OutputGeometry. Resolves the stated target size from the spec's
    authoritative input, applies the padding policy, picks the content
    scale for the sizing mode and centres the content. Also provides the
    edit helpers SizeSpec uses to re-derive parameters when the user
    changes one field.

Key Functions:
    - resolve_target(): Stated target size (+ clamped scale / ppi)
    - compute_geometry(): Canvas, usable area, content placement, masks
    - scale_bounds() / clamp_scale(): Scale factor range for a source
    - clamp_margin(): Largest margin that keeps a usable area
    - edit_width() / edit_height() / edit_scale() / edit_ppi(): Edits
    - switch_mode(): Mode change seeded from the current output

Algorithm:
    1. Target: FILL states both axes; FIT locks one axis and derives the
       other from the source aspect; SCALE multiplies the source; raster
       specs derive pixels from a width/height/ppi lock.
    2. Padding: OUTSIDE grows the canvas by 2 × margin around the target;
       INSIDE keeps the canvas and shrinks the usable area instead.
    3. Scale: FILL covers the usable area (max of axis ratios); FIT and
       SCALE fit inside it (exact locked ratio / factor when unpadded).
    4. Content is centred in the usable area; overflow is clipped.

Dependencies:
    - core.models: SizeSpec, SourceGeometry, OutputGeometry, Rect
    - core.units: mm → inch for raster derivation
    - layout.config: LayoutLimits

Used By:
    - core.models.size_spec: Edit methods
    - layout.preview: Crop overlay
    - export.planner: Per-task geometry
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from pdf_resizer.core.models.geometry import OutputGeometry, Rect, SourceGeometry
from pdf_resizer.core.models.size_spec import (
    Axis,
    FillParams,
    FitParams,
    LockField,
    OutputFormat,
    PaddingPolicy,
    RasterParams,
    ScaleParams,
    SizeMode,
    SizeParams,
    SizeSpec,
)
from pdf_resizer.core.units import mm_to_in, round_half_up

from .config import DEFAULT_LIMITS, LayoutLimits

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetSize:
    """
    Stated target size of a spec for one source.

    Attributes:
        width: Target width (mm for PDF, px for PNG)
        height: Target height
        scale: Clamped factor for SCALE specs, else None
        ppi: Resolution for raster specs, else None
    """

    width: float
    height: float
    scale: Optional[float] = None
    ppi: Optional[float] = None


# ─────────────────────────────────────────────────────────────────────────────
# Clamps
# ─────────────────────────────────────────────────────────────────────────────

def scale_bounds(
    source: SourceGeometry,
    limits: Optional[LayoutLimits] = None,
) -> Tuple[float, float]:
    """
    Permissible scale factor range for a source.

    The lower bound keeps both output sides at or above the minimum PDF
    dimension; the upper bound keeps both at or below the maximum.

    Args:
        source: Source geometry (mm)
        limits: Layout limits (defaults when None)

    Returns:
        (min_scale, max_scale)
    """
    limits = limits or DEFAULT_LIMITS
    low = max(
        limits.pdf_min_dimension / source.width,
        limits.pdf_min_dimension / source.height,
        limits.min_scale,
    )
    high = min(
        limits.pdf_max_dimension / source.width,
        limits.pdf_max_dimension / source.height,
    )
    return low, high


def clamp_scale(
    factor: float,
    source: SourceGeometry,
    limits: Optional[LayoutLimits] = None,
) -> float:
    """
    Clamp a scale factor into scale_bounds().

    The upper bound wins when the range is empty.

    Example:
        >>> clamp_scale(1000, SourceGeometry(210, 297)) < 1000
        True
    """
    low, high = scale_bounds(source, limits)
    clamped = min(max(factor, low), high)
    if clamped != factor:
        logger.debug(f"Scale factor {factor} clamped to {clamped}")
    return clamped


def clamp_margin(
    margin: float,
    target_width: float,
    target_height: float,
    output_format: OutputFormat = OutputFormat.PDF,
    limits: Optional[LayoutLimits] = None,
) -> float:
    """
    Clamp a margin so the inside-padded area never degenerates.

    Args:
        margin: Requested margin per side
        target_width: Stated target width
        target_height: Stated target height
        output_format: Selects the minimum dimension (mm or px)
        limits: Layout limits (defaults when None)

    Returns:
        Margin in [0, (min(target) - min_dimension) / 2]
    """
    limits = limits or DEFAULT_LIMITS
    min_dim = limits.min_dimension(output_format)
    max_margin = max(0.0, (min(target_width, target_height) - min_dim) / 2)
    return min(max(margin, 0.0), max_margin)


# ─────────────────────────────────────────────────────────────────────────────
# Target resolution
# ─────────────────────────────────────────────────────────────────────────────

def resolve_target(
    spec: SizeSpec,
    source: SourceGeometry,
    limits: Optional[LayoutLimits] = None,
) -> TargetSize:
    """
    Resolve the stated target size from the spec's authoritative input.

    Args:
        spec: Size specification
        source: Source geometry (mm, post-trim)
        limits: Layout limits (defaults when None)

    Returns:
        TargetSize in the output's native unit

    Example:
        >>> spec = SizeSpec.lock_width(150)
        >>> round(resolve_target(spec, SourceGeometry(210, 297)).height, 2)
        212.14
    """
    limits = limits or DEFAULT_LIMITS
    params = spec.params
    min_dim = limits.min_dimension(spec.output_format)

    if isinstance(params, RasterParams):
        return _resolve_raster(params, source, limits)

    if isinstance(params, FillParams):
        return TargetSize(max(params.width, min_dim), max(params.height, min_dim))

    if isinstance(params, FitParams):
        if params.axis is Axis.WIDTH:
            width = max(params.value, min_dim)
            height = max(width * (source.height / source.width), min_dim)
        else:
            height = max(params.value, min_dim)
            width = max(height * (source.width / source.height), min_dim)
        return TargetSize(width, height)

    if isinstance(params, ScaleParams):
        factor = clamp_scale(params.factor, source, limits)
        return TargetSize(source.width * factor, source.height * factor, scale=factor)

    raise TypeError(f"Unsupported size params: {type(params).__name__}")


def _resolve_raster(
    params: RasterParams,
    source: SourceGeometry,
    limits: LayoutLimits,
) -> TargetSize:
    """Derive pixel dimensions and ppi from a raster lock."""
    min_px = limits.raster_min_dimension
    width_in = mm_to_in(source.width)
    height_in = mm_to_in(source.height)

    if params.lock_field is LockField.WIDTH:
        width_px = max(min_px, round_half_up(params.value))
        ppi = width_px / width_in
        if ppi < limits.min_ppi:
            ppi = limits.min_ppi
            width_px = max(min_px, round_half_up(width_in * ppi))
        height_px = max(min_px, round_half_up(height_in * ppi))
    elif params.lock_field is LockField.HEIGHT:
        height_px = max(min_px, round_half_up(params.value))
        ppi = height_px / height_in
        if ppi < limits.min_ppi:
            ppi = limits.min_ppi
            height_px = max(min_px, round_half_up(height_in * ppi))
        width_px = max(min_px, round_half_up(width_in * ppi))
    else:
        ppi = max(params.value, limits.min_ppi)
        width_px = max(min_px, round_half_up(width_in * ppi))
        height_px = max(min_px, round_half_up(height_in * ppi))

    return TargetSize(int(width_px), int(height_px), ppi=ppi)


# ─────────────────────────────────────────────────────────────────────────────
# Geometry
# ─────────────────────────────────────────────────────────────────────────────

def compute_geometry(
    spec: SizeSpec,
    source: SourceGeometry,
    limits: Optional[LayoutLimits] = None,
) -> OutputGeometry:
    """
    Compute the output geometry for a spec applied to one source page.

    Total for every valid (spec, source) pair: clamps replace errors.

    Args:
        spec: Size specification
        source: Source geometry (mm, post-trim)
        limits: Layout limits (defaults when None)

    Returns:
        OutputGeometry in mm (PDF) or px (PNG)

    Example:
        >>> geometry = compute_geometry(SizeSpec.fill(100, 100), SourceGeometry(210, 297))
        >>> round(geometry.content_scale, 4)
        0.4762
    """
    limits = limits or DEFAULT_LIMITS
    target = resolve_target(spec, source, limits)
    min_dim = limits.min_dimension(spec.output_format)

    margin = clamp_margin(spec.margin, target.width, target.height, spec.output_format, limits)
    if spec.is_raster:
        # Pixel canvases need whole-pixel bands
        margin = float(math.floor(margin))

    if spec.padding is PaddingPolicy.OUTSIDE:
        page_width = target.width + 2 * margin
        page_height = target.height + 2 * margin
        usable = Rect(margin, margin, target.width, target.height)
        masks: Tuple[Rect, ...] = ()
    else:
        page_width = target.width
        page_height = target.height
        usable = Rect(
            margin,
            margin,
            max(target.width - 2 * margin, min_dim),
            max(target.height - 2 * margin, min_dim),
        )
        masks = padding_bands(page_width, page_height, margin)

    scale = _content_scale(spec, source, target, usable)
    content_width = source.width * scale
    content_height = source.height * scale
    content = Rect(
        usable.x + (usable.width - content_width) / 2,
        usable.y + (usable.height - content_height) / 2,
        content_width,
        content_height,
    )

    logger.debug(
        f"Geometry {spec.mode.value} page {source.page_index}: "
        f"canvas {page_width:.2f}x{page_height:.2f}{spec.output_format.unit}, "
        f"scale {scale:.4f}"
    )

    return OutputGeometry(
        page_width=page_width,
        page_height=page_height,
        target_width=target.width,
        target_height=target.height,
        usable_rect=usable,
        content_rect=content,
        content_scale=scale,
        mask_regions=masks,
        unit=spec.output_format.unit,
        ppi=target.ppi,
    )


def _content_scale(
    spec: SizeSpec,
    source: SourceGeometry,
    target: TargetSize,
    usable: Rect,
) -> float:
    """Uniform source → output scale for the spec's mode."""
    ratio_w = usable.width / source.width
    ratio_h = usable.height / source.height
    if spec.mode is SizeMode.FILL:
        return max(ratio_w, ratio_h)

    unpadded = usable.width == target.width and usable.height == target.height
    params = spec.params
    if unpadded and isinstance(params, ScaleParams) and target.scale is not None:
        return target.scale
    if unpadded and isinstance(params, FitParams):
        if params.axis is Axis.WIDTH:
            return target.width / source.width
        return target.height / source.height
    return min(ratio_w, ratio_h)


def padding_bands(width: float, height: float, margin: float) -> Tuple[Rect, ...]:
    """
    Border bands between the canvas edge and an inside-padded area.

    Args:
        width: Canvas width
        height: Canvas height
        margin: Band thickness (clamped to half the smaller side)

    Returns:
        (top, bottom, left, right) bands, empty bands omitted
    """
    if margin <= 0:
        return ()
    band = min(margin, min(width, height) / 2)
    inner_height = height - 2 * band
    bands = [
        Rect(0, 0, width, band),
        Rect(0, height - band, width, band),
        Rect(0, band, band, inner_height),
        Rect(width - band, band, band, inner_height),
    ]
    return tuple(b for b in bands if not b.is_empty)


# ─────────────────────────────────────────────────────────────────────────────
# Edits
# ─────────────────────────────────────────────────────────────────────────────

def edit_width(
    spec: SizeSpec,
    value: float,
    source: SourceGeometry,
    limits: Optional[LayoutLimits] = None,
) -> SizeParams:
    """
    New params after the user sets the output width.

    FILL keeps the height; FIT keeps its locked axis (a derived-axis edit
    is converted back through the source aspect); SCALE turns the width
    into a clamped factor; raster specs lock on width.
    """
    params = spec.params
    if isinstance(params, RasterParams):
        return RasterParams(LockField.WIDTH, value, params.mode)
    if isinstance(params, FillParams):
        return FillParams(value, params.height)
    if isinstance(params, FitParams):
        if params.axis is Axis.WIDTH:
            return FitParams(Axis.WIDTH, value)
        return FitParams(Axis.HEIGHT, value * (source.height / source.width))
    return ScaleParams(clamp_scale(value / source.width, source, limits))


def edit_height(
    spec: SizeSpec,
    value: float,
    source: SourceGeometry,
    limits: Optional[LayoutLimits] = None,
) -> SizeParams:
    """New params after the user sets the output height (see edit_width)."""
    params = spec.params
    if isinstance(params, RasterParams):
        return RasterParams(LockField.HEIGHT, value, params.mode)
    if isinstance(params, FillParams):
        return FillParams(params.width, value)
    if isinstance(params, FitParams):
        if params.axis is Axis.HEIGHT:
            return FitParams(Axis.HEIGHT, value)
        return FitParams(Axis.WIDTH, value * (source.width / source.height))
    return ScaleParams(clamp_scale(value / source.height, source, limits))


def edit_scale(
    spec: SizeSpec,
    factor: float,
    source: SourceGeometry,
    limits: Optional[LayoutLimits] = None,
) -> SizeParams:
    """
    New params after the user sets a scale factor.

    Raises:
        ValueError: For raster specs, which are sized by width/height/ppi
    """
    if spec.is_raster:
        raise ValueError("Raster outputs are sized by width, height or ppi")
    return ScaleParams(clamp_scale(factor, source, limits))


def edit_ppi(spec: SizeSpec, ppi: float) -> SizeParams:
    """
    New params after the user sets a raster resolution.

    Raises:
        ValueError: For vector specs
    """
    params = spec.params
    if not isinstance(params, RasterParams):
        raise ValueError("Only raster outputs have a resolution")
    return RasterParams(LockField.PPI, ppi, params.mode)


def switch_mode(
    spec: SizeSpec,
    mode: SizeMode,
    source: SourceGeometry,
    limits: Optional[LayoutLimits] = None,
    session_scale: Optional[float] = None,
) -> SizeParams:
    """
    New params for a mode change, seeded from the current output size.

    Args:
        spec: Spec being edited
        mode: Target mode
        source: Current source geometry
        limits: Layout limits (defaults when None)
        session_scale: Scale factor remembered by the caller; seeds SCALE
            (1.0 when None)

    Returns:
        Params for the new mode (unchanged params if the mode is the same)

    Raises:
        ValueError: If a raster spec is switched to a FIT mode
    """
    mode = SizeMode(mode)
    params = spec.params
    if params.mode is mode:
        return params

    if isinstance(params, RasterParams):
        return RasterParams(params.lock_field, params.value, mode)

    target = resolve_target(spec, source, limits)
    if mode is SizeMode.FILL:
        return FillParams(target.width, target.height)
    if mode is SizeMode.FIT_HEIGHT:
        return FitParams(Axis.WIDTH, target.width)
    if mode is SizeMode.FIT_WIDTH:
        return FitParams(Axis.HEIGHT, target.height)
    factor = session_scale if session_scale is not None else 1.0
    return ScaleParams(clamp_scale(factor, source, limits))

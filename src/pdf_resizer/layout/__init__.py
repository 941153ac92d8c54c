"""
Module: layout

Purpose:
    Pure geometry for resizing. Maps a SizeSpec and a source page to a
    concrete output canvas, content placement and padding masks, and
    projects the same geometry onto a crop preview.

Key Functions:
    - compute_geometry(): Main entry point for layout
    - resolve_target(): Stated target size for a spec
    - crop_overlay(): Preview crop bands

Key Classes:
    - LayoutLimits: Output-size bounds
    - TargetSize: Resolved target dimensions

Dependencies:
    - pdf_resizer.core.models: SizeSpec, SourceGeometry, OutputGeometry

Used By:
    - export.planner: Per-task geometry
    - core.models.size_spec: Edit re-derivation
"""

from .config import DEFAULT_LIMITS, LayoutLimits
from .engine import (
    TargetSize,
    clamp_margin,
    clamp_scale,
    compute_geometry,
    edit_height,
    edit_ppi,
    edit_scale,
    edit_width,
    padding_bands,
    resolve_target,
    scale_bounds,
    switch_mode,
)
from .preview import crop_overlay

__all__ = [
    # Config
    "LayoutLimits",
    "DEFAULT_LIMITS",
    # Engine
    "TargetSize",
    "resolve_target",
    "compute_geometry",
    "scale_bounds",
    "clamp_scale",
    "clamp_margin",
    "padding_bands",
    # Edits
    "edit_width",
    "edit_height",
    "edit_scale",
    "edit_ppi",
    "switch_mode",
    # Preview
    "crop_overlay",
]

"""
Module: naming.paper

Purpose:
    ISO A-series paper detection for filename size tokens. Output sizes
    within a small absolute tolerance of an A0-A5 sheet (either
    orientation) are named by paper code plus orientation, e.g. "A4v".

Key Functions:
    - paper_code(): Match a mm size against the paper table
    - size_token_value(): Text substituted for the *size* token

Dependencies:
    - core.models: OutputGeometry
    - core.units: Half-up rounding shared with the layout engine

Used By:
    - export.planner: Output filenames
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from pdf_resizer.core.models.geometry import OutputGeometry
from pdf_resizer.core.units import round_half_up

# Portrait sizes in mm
PAPER_SIZES_MM: Dict[str, Tuple[float, float]] = {
    "A0": (841, 1189),
    "A1": (594, 841),
    "A2": (420, 594),
    "A3": (297, 420),
    "A4": (210, 297),
    "A5": (148, 210),
}

DEFAULT_PAPER_TOLERANCE_MM = 0.8


def paper_code(
    width_mm: float,
    height_mm: float,
    tolerance: float = DEFAULT_PAPER_TOLERANCE_MM,
) -> Optional[str]:
    """
    Find the A-series sheet matching a size.

    A sheet matches when |Δw| + |Δh| <= tolerance in either orientation;
    the closest match wins. The tolerance is absolute (mm) for every
    sheet size.

    Args:
        width_mm: Output width in mm
        height_mm: Output height in mm
        tolerance: Summed absolute deviation allowed (mm)

    Returns:
        Paper code with orientation suffix ("h" landscape, "v" otherwise),
        or None when nothing matches

    Example:
        >>> paper_code(210, 297)
        'A4v'
        >>> paper_code(420.3, 297.2)
        'A3h'
        >>> paper_code(100, 100) is None
        True
    """
    best: Optional[Tuple[str, float]] = None
    for code, (paper_w, paper_h) in PAPER_SIZES_MM.items():
        portrait = abs(width_mm - paper_w) + abs(height_mm - paper_h)
        landscape = abs(width_mm - paper_h) + abs(height_mm - paper_w)
        diff = min(portrait, landscape)
        if diff <= tolerance and (best is None or diff < best[1]):
            best = (code, diff)

    if best is None:
        return None
    orientation = "h" if width_mm > height_mm else "v"
    return f"{best[0]}{orientation}"


def size_token_value(geometry: OutputGeometry) -> str:
    """
    Text for the *size* filename token.

    PDF outputs use a paper code when the canvas matches one; everything
    else falls back to "<w>x<h>" in the output's native unit.

    Args:
        geometry: Output geometry (canvas size is used)

    Returns:
        e.g. "A4v", "100x100" or "1181x591"
    """
    width, height = geometry.page_width, geometry.page_height
    if geometry.unit == "mm":
        code = paper_code(width, height)
        if code:
            return code
    return f"{round_half_up(width)}x{round_half_up(height)}"

"""
Module: core.units

Purpose:
    Length conversions between millimetres, PDF points, inches and
    pixels, plus the number formatting/parsing used for display and
    filenames. Vector values keep full precision everywhere else; these
    helpers are the only place values are rounded for humans.

Key Functions:
    - mm_to_pt() / pt_to_mm(): PDF point conversions (1 pt = 1/72 inch)
    - mm_to_in() / px_to_mm(): Inch and pixel conversions
    - format_mm(), format_px(), format_ppi(), format_scale(): Display
    - format_size(): "210 × 297 mm" style labels
    - parse_length(): Accept "12,5" or "12.5" from user input

Dependencies:
    - math (std)

Used By:
    - layout.engine: Unit conversion for raster lock derivation
    - export.decoder: Point/pixel → mm source sizes
    - export.renderer: mm → pt for PDF pages
    - naming.paper: Native-unit fallback size text
    - cli: Parsing spec shorthand
"""

from __future__ import annotations

import math

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0
MM_PER_POINT = MM_PER_INCH / POINTS_PER_INCH

# Raster sources carry no physical size; assume this resolution
DEFAULT_IMAGE_PPI = 300.0


def mm_to_pt(mm: float) -> float:
    """Convert millimetres to PDF points."""
    return mm / MM_PER_POINT


def pt_to_mm(pt: float) -> float:
    """Convert PDF points to millimetres."""
    return pt * MM_PER_POINT


def mm_to_in(mm: float) -> float:
    """Convert millimetres to inches."""
    return mm / MM_PER_INCH


def px_to_mm(px: float, ppi: float = DEFAULT_IMAGE_PPI) -> float:
    """
    Convert a pixel count to millimetres at a given resolution.

    Args:
        px: Pixel count
        ppi: Pixels per inch (default 300)

    Returns:
        Length in millimetres

    Example:
        >>> round(px_to_mm(300), 2)
        25.4
    """
    if ppi <= 0:
        raise ValueError(f"ppi must be positive: {ppi}")
    return px / ppi * MM_PER_INCH


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves rounded up.

    Example:
        >>> round_half_up(2.5), round(2.5)
        (3, 2)
    """
    return int(math.floor(value + 0.5))


def _trim_decimals(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_mm(value: float, decimal_separator: str = ".") -> str:
    """
    Format a millimetre value with at most two decimals.

    Trailing zeros are stripped so whole values read as integers.

    Args:
        value: Length in millimetres
        decimal_separator: "." (default) or "," for European display

    Returns:
        Display string

    Example:
        >>> format_mm(212.142857)
        '212.14'
        >>> format_mm(210.0)
        '210'
        >>> format_mm(12.5, decimal_separator=",")
        '12,5'
    """
    if not math.isfinite(value):
        return ""
    text = _trim_decimals(f"{value:.2f}")
    if text == "-0":
        text = "0"
    return text.replace(".", decimal_separator)


def format_px(value: float) -> str:
    """Format a pixel value as a rounded integer."""
    if not math.isfinite(value):
        return ""
    return str(round_half_up(value))


def format_ppi(value: float, decimal_separator: str = ".") -> str:
    """Format a resolution with at most two decimals."""
    return format_mm(value, decimal_separator)


def format_scale(factor: float, as_percent: bool = False) -> str:
    """
    Format a scale factor either as a factor or a percentage.

    Example:
        >>> format_scale(0.5)
        '0.5'
        >>> format_scale(0.5, as_percent=True)
        '50%'
    """
    if as_percent:
        return f"{format_mm(factor * 100)}%"
    return _trim_decimals(f"{factor:.4f}")


def format_size(width: float, height: float, unit: str = "mm") -> str:
    """
    Format a width/height pair for display.

    Args:
        width: Width in ``unit``
        height: Height in ``unit``
        unit: "mm" or "px"

    Returns:
        Label like "210 × 297 mm" or "1181 × 591 px"
    """
    if unit == "px":
        return f"{format_px(width)} × {format_px(height)} px"
    return f"{format_mm(width)} × {format_mm(height)} {unit}"


def parse_length(text: str) -> float:
    """
    Parse a user-entered, non-negative number.

    Accepts either "," or "." as decimal separator.

    Args:
        text: Raw input such as "12,5" or " 210 "

    Returns:
        Parsed float

    Raises:
        ValueError: If text is not a finite, non-negative number
    """
    cleaned = text.strip().replace(",", ".")
    if not cleaned:
        raise ValueError("Empty length value")
    value = float(cleaned)
    if not math.isfinite(value):
        raise ValueError(f"Length must be finite: {text!r}")
    if value < 0:
        raise ValueError(f"Length must be non-negative: {text!r}")
    return value

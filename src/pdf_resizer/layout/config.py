"""
Module: layout.config

Purpose:
    Limits for the layout engine. Defines the absolute output-size bounds
    per output format and the smallest permissible scale factor; every
    clamp in the engine is derived from these values.

Key Classes:
    - LayoutLimits: Immutable limits configuration

Dependencies:
    - dataclasses (std)
    - core.units: Point → mm conversion for the PDF page bounds

Used By:
    - layout.engine: Scale and margin clamps, dimension floors
    - layout.preview: Crop overlay projection
    - export.config: Carried into the export run
"""

from __future__ import annotations

from dataclasses import dataclass

from pdf_resizer.core.models.size_spec import OutputFormat
from pdf_resizer.core.units import pt_to_mm

# PDF user space allows pages from 1 to 14400 points per side
PDF_MIN_DIMENSION_PT = 1.0
PDF_MAX_DIMENSION_PT = 14400.0
RASTER_MIN_DIMENSION_PX = 1.0
MIN_SCALE_FACTOR = 0.01
MIN_PPI = 1.0


@dataclass(frozen=True)
class LayoutLimits:
    """
    Output-size bounds for the layout engine (immutable).

    Attributes:
        pdf_min_dimension: Smallest PDF page side in mm (1 pt)
        pdf_max_dimension: Largest PDF page side in mm (14400 pt)
        raster_min_dimension: Smallest raster side in px
        min_scale: Floor for any scale factor
        min_ppi: Floor for raster resolution

    Example:
        >>> limits = LayoutLimits()
        >>> round(limits.pdf_max_dimension)
        5080
    """

    pdf_min_dimension: float = pt_to_mm(PDF_MIN_DIMENSION_PT)
    pdf_max_dimension: float = pt_to_mm(PDF_MAX_DIMENSION_PT)
    raster_min_dimension: float = RASTER_MIN_DIMENSION_PX
    min_scale: float = MIN_SCALE_FACTOR
    min_ppi: float = MIN_PPI

    def __post_init__(self) -> None:
        """Validate limits on construction."""
        if self.pdf_min_dimension <= 0:
            raise ValueError(f"pdf_min_dimension must be positive: {self.pdf_min_dimension}")
        if self.pdf_max_dimension <= self.pdf_min_dimension:
            raise ValueError("pdf_max_dimension must exceed pdf_min_dimension")
        if self.raster_min_dimension <= 0:
            raise ValueError(f"raster_min_dimension must be positive: {self.raster_min_dimension}")
        if self.min_scale <= 0:
            raise ValueError(f"min_scale must be positive: {self.min_scale}")
        if self.min_ppi <= 0:
            raise ValueError(f"min_ppi must be positive: {self.min_ppi}")

    def min_dimension(self, output_format: OutputFormat) -> float:
        """Smallest permissible output side in the format's native unit."""
        if OutputFormat(output_format).is_raster:
            return self.raster_min_dimension
        return self.pdf_min_dimension


DEFAULT_LIMITS = LayoutLimits()

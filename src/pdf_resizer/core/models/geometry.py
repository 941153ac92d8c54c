"""
Module: geometry

Purpose:
    Geometry value types shared by the layout engine, the renderers and
    the crop preview. All rectangles use a top-left origin with y growing
    downward; renderers with a bottom-up coordinate system convert at
    their own boundary.

Key Classes:
    - Rect: Axis-aligned rectangle (x, y, width, height)
    - SourceGeometry: One page/image being processed (mm, post-trim)
    - OutputGeometry: Engine output for a SizeSpec × SourceGeometry pair
    - CropBands: Per-edge crop amounts for preview overlays

Dependencies:
    - dataclasses (std)

Used By:
    - layout.engine: Produces OutputGeometry
    - layout.preview: Projects visible_window() into display units
    - export.renderer: Consumes visible_window() and mask_regions
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class Rect:
    """
    Axis-aligned rectangle.

    Example:
        >>> r = Rect(10, 20, 100, 50)
        >>> r.right, r.bottom
        (110, 70)
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def intersect(self, other: Rect) -> Optional[Rect]:
        """
        Intersection with another rectangle.

        Returns:
            Overlapping Rect, or None when the rectangles do not overlap
        """
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return None
        return Rect(left, top, right - left, bottom - top)

    def offset(self, dx: float, dy: float) -> Rect:
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    def scaled(self, factor: float) -> Rect:
        """Scale position and size uniformly about the origin."""
        return Rect(self.x * factor, self.y * factor,
                    self.width * factor, self.height * factor)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Corner form (x0, y0, x1, y1)."""
        return (self.x, self.y, self.right, self.bottom)


@dataclass(frozen=True, slots=True)
class SourceGeometry:
    """
    One page or image being processed.

    Attributes:
        width: Width in mm after trim, >= 1
        height: Height in mm after trim, >= 1
        page_index: 0-based page index (raster sources: always 0)
        trim: Amount in mm trimmed from every side of the raw page
    """

    width: float
    height: float
    page_index: int = 0
    trim: float = 0.0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Source dimensions must be positive: {self.width}x{self.height}"
            )
        if self.page_index < 0:
            raise ValueError(f"page_index must be >= 0: {self.page_index}")
        if self.trim < 0:
            raise ValueError(f"trim must be >= 0: {self.trim}")

    @classmethod
    def from_page(
        cls,
        width: float,
        height: float,
        page_index: int = 0,
        trim: float = 0.0,
    ) -> SourceGeometry:
        """
        Build a source from a raw page size, applying symmetric trim.

        Dimensions are floored at 1 unit so degenerate pages and
        oversized trims still yield a valid source.

        Example:
            >>> SourceGeometry.from_page(210, 297, trim=3).width
            204.0
        """
        trim = max(0.0, trim)
        return cls(
            width=max(width - 2 * trim, 1),
            height=max(height - 2 * trim, 1),
            page_index=page_index,
            trim=trim,
        )

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def raw_width(self) -> float:
        """Untrimmed width (mm)."""
        return self.width + 2 * self.trim

    @property
    def raw_height(self) -> float:
        """Untrimmed height (mm)."""
        return self.height + 2 * self.trim


@dataclass(frozen=True, slots=True)
class CropBands:
    """Crop amount on each edge, in display units."""

    top: float
    right: float
    bottom: float
    left: float


@dataclass(frozen=True)
class OutputGeometry:
    """
    Concrete layout for one SizeSpec applied to one source page.

    Attributes:
        page_width: Canvas width (mm for PDF, px for PNG)
        page_height: Canvas height
        target_width: Stated target width before outside padding
        target_height: Stated target height before outside padding
        usable_rect: Area content is laid out in; content is clipped to it
        content_rect: Placement of the scaled source content
        content_scale: Output units per source mm
        mask_regions: Background bands realising inside padding
        unit: "mm" or "px"
        ppi: Output resolution for raster geometry, else None

    content_rect.width always equals source.width * content_scale.
    """

    page_width: float
    page_height: float
    target_width: float
    target_height: float
    usable_rect: Rect
    content_rect: Rect
    content_scale: float
    mask_regions: Tuple[Rect, ...] = ()
    unit: str = "mm"
    ppi: Optional[float] = None

    @property
    def page_rect(self) -> Rect:
        return Rect(0, 0, self.page_width, self.page_height)

    @property
    def crops(self) -> bool:
        """True when part of the content falls outside the usable area."""
        visible = self.content_rect.intersect(self.usable_rect)
        return visible is None or visible != self.content_rect

    def visible_window(self) -> Optional[Tuple[Rect, Rect]]:
        """
        Project the usable area back onto the source.

        Returns:
            (source_rect, dest_rect) where source_rect is in trimmed-source
            mm (top-left origin) and dest_rect is in output units, or None
            if nothing of the source is visible.
        """
        dest = self.content_rect.intersect(self.usable_rect)
        if dest is None:
            return None
        scale = self.content_scale
        source_rect = Rect(
            (dest.x - self.content_rect.x) / scale,
            (dest.y - self.content_rect.y) / scale,
            dest.width / scale,
            dest.height / scale,
        )
        return source_rect, dest

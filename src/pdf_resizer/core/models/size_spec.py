"""
Module: size_spec

Purpose:
    Provides SizeSpec - one desired output definition - and its sizing
    parameters. Parameters are a tagged union (one dataclass per mode) so
    that exactly one authoritative input exists at any time; dependent
    values are always re-derived by the layout engine.

Key Classes:
    - OutputFormat: PDF (vector, mm) or PNG (raster, px)
    - SizeMode: FILL, FIT_WIDTH, FIT_HEIGHT, SCALE
    - PaddingPolicy: INSIDE (carve margin from target) or OUTSIDE (add it)
    - FillParams / FitParams / ScaleParams: Vector sizing parameters
    - RasterParams: Raster sizing with a width/height/ppi lock
    - SizeSpec: Mutable output definition edited field by field

Dependencies:
    - dataclasses (std)
    - enum (std)
    - layout.engine (lazy): Re-derivation on edit

Used By:
    - layout.engine: Geometry computation
    - export.planner: Task expansion
    - export.job / cli: Construction from job files and shorthand
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from pdf_resizer.core.models.geometry import SourceGeometry
    from pdf_resizer.layout.config import LayoutLimits


class OutputFormat(str, Enum):
    """Kind of artifact a SizeSpec produces."""

    PDF = "pdf"
    PNG = "png"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def unit(self) -> str:
        """Native length unit of the output."""
        return "px" if self is OutputFormat.PNG else "mm"

    @property
    def is_raster(self) -> bool:
        return self is OutputFormat.PNG


class SizeMode(str, Enum):
    """
    Sizing policy.

    FIT_HEIGHT means the width is set and the height is fitted to the
    source aspect ratio; FIT_WIDTH is the reverse.
    """

    FILL = "fill"
    FIT_WIDTH = "fit_width"
    FIT_HEIGHT = "fit_height"
    SCALE = "scale"


class PaddingPolicy(str, Enum):
    """Whether the margin is carved out of, or added to, the target size."""

    INSIDE = "inside"
    OUTSIDE = "outside"


class Axis(str, Enum):
    WIDTH = "width"
    HEIGHT = "height"


class LockField(str, Enum):
    """Authoritative field of a raster output."""

    WIDTH = "width"
    HEIGHT = "height"
    PPI = "ppi"


def _require_positive(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValueError(f"{name} must be a number: {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be positive: {value}")


@dataclass(frozen=True)
class FillParams:
    """Both target axes stated explicitly (mode FILL)."""

    width: float
    height: float

    def __post_init__(self) -> None:
        _require_positive("width", self.width)
        _require_positive("height", self.height)

    @property
    def mode(self) -> SizeMode:
        return SizeMode.FILL


@dataclass(frozen=True)
class FitParams:
    """
    One target axis locked, the other derived from the source aspect.

    Attributes:
        axis: The authoritative axis
        value: Locked length for that axis
    """

    axis: Axis
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "axis", Axis(self.axis))
        _require_positive("value", self.value)

    @property
    def mode(self) -> SizeMode:
        return SizeMode.FIT_HEIGHT if self.axis is Axis.WIDTH else SizeMode.FIT_WIDTH


@dataclass(frozen=True)
class ScaleParams:
    """Both axes derived from the source by one uniform factor."""

    factor: float

    def __post_init__(self) -> None:
        _require_positive("factor", self.factor)

    @property
    def mode(self) -> SizeMode:
        return SizeMode.SCALE


@dataclass(frozen=True)
class RasterParams:
    """
    Raster sizing: one of width (px), height (px) or ppi is authoritative.

    Attributes:
        lock_field: Which field the user last set
        value: Pixels for WIDTH/HEIGHT locks, pixels-per-inch for PPI
        mode: FILL (cover, crop) or SCALE (fit, letterbox)
    """

    lock_field: LockField
    value: float
    mode: SizeMode = SizeMode.FILL

    def __post_init__(self) -> None:
        object.__setattr__(self, "lock_field", LockField(self.lock_field))
        object.__setattr__(self, "mode", SizeMode(self.mode))
        if self.mode not in (SizeMode.FILL, SizeMode.SCALE):
            raise ValueError(f"Raster outputs support fill or scale mode, not {self.mode.value}")
        _require_positive("value", self.value)


SizeParams = Union[FillParams, FitParams, ScaleParams, RasterParams]

_VECTOR_PARAMS = (FillParams, FitParams, ScaleParams)


@dataclass
class SizeSpec:
    """
    One desired output definition (mutable).

    Created by the caller with defaults and edited one field at a time;
    each edit replaces ``params`` with the parameters implied by the new
    authoritative value and the current source size.

    Attributes:
        params: Mode-specific authoritative parameters
        output_format: PDF or PNG
        margin: Padding per side in output units (mm or px)
        padding: INSIDE or OUTSIDE padding policy
        id: Stable identifier for callers tracking specs

    Invariants:
        - PDF specs hold FillParams, FitParams or ScaleParams
        - PNG specs hold RasterParams
        - margin >= 0

    Example:
        >>> spec = SizeSpec.fill(100, 100)
        >>> spec.mode
        <SizeMode.FILL: 'fill'>
    """

    params: SizeParams
    output_format: OutputFormat = OutputFormat.PDF
    margin: float = 0.0
    padding: PaddingPolicy = PaddingPolicy.INSIDE
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        """Validate the format/params combination on construction."""
        self.output_format = OutputFormat(self.output_format)
        self.padding = PaddingPolicy(self.padding)
        if self.output_format.is_raster:
            if not isinstance(self.params, RasterParams):
                raise ValueError("PNG outputs require RasterParams")
        elif not isinstance(self.params, _VECTOR_PARAMS):
            raise ValueError(
                f"PDF outputs require fill, fit or scale params, got {type(self.params).__name__}"
            )
        if not math.isfinite(self.margin) or self.margin < 0:
            raise ValueError(f"margin must be non-negative: {self.margin}")

    # ─────────────────────────────────────────────────────────────────────────
    # Constructors
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def fill(cls, width: float, height: float, **kwargs) -> SizeSpec:
        """PDF spec covering an explicit width × height (mm)."""
        return cls(FillParams(width, height), **kwargs)

    @classmethod
    def lock_width(cls, width: float, **kwargs) -> SizeSpec:
        """PDF spec with the width set and the height fitted (FIT_HEIGHT)."""
        return cls(FitParams(Axis.WIDTH, width), **kwargs)

    @classmethod
    def lock_height(cls, height: float, **kwargs) -> SizeSpec:
        """PDF spec with the height set and the width fitted (FIT_WIDTH)."""
        return cls(FitParams(Axis.HEIGHT, height), **kwargs)

    @classmethod
    def scaled(cls, factor: float, **kwargs) -> SizeSpec:
        """PDF spec scaling the source uniformly."""
        return cls(ScaleParams(factor), **kwargs)

    @classmethod
    def raster(
        cls,
        lock_field: LockField | str,
        value: float,
        mode: SizeMode | str = SizeMode.FILL,
        **kwargs,
    ) -> SizeSpec:
        """PNG spec locked on width, height or ppi."""
        return cls(RasterParams(LockField(lock_field), value, SizeMode(mode)),
                   output_format=OutputFormat.PNG, **kwargs)

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def mode(self) -> SizeMode:
        return self.params.mode

    @property
    def is_raster(self) -> bool:
        return self.output_format.is_raster

    @property
    def extension(self) -> str:
        return self.output_format.extension

    # ─────────────────────────────────────────────────────────────────────────
    # Edits (each re-derives dependent fields through the layout engine)
    # ─────────────────────────────────────────────────────────────────────────

    def set_width(self, value: float, source: SourceGeometry,
                  limits: Optional[LayoutLimits] = None) -> None:
        """Make ``value`` the output width, keeping the current mode."""
        from pdf_resizer.layout.engine import edit_width
        self.params = edit_width(self, value, source, limits)

    def set_height(self, value: float, source: SourceGeometry,
                   limits: Optional[LayoutLimits] = None) -> None:
        """Make ``value`` the output height, keeping the current mode."""
        from pdf_resizer.layout.engine import edit_height
        self.params = edit_height(self, value, source, limits)

    def set_scale(self, factor: float, source: SourceGeometry,
                  limits: Optional[LayoutLimits] = None) -> None:
        """Set a (clamped) scale factor; switches a vector spec to SCALE."""
        from pdf_resizer.layout.engine import edit_scale
        self.params = edit_scale(self, factor, source, limits)

    def set_ppi(self, ppi: float) -> None:
        """Lock a raster spec on resolution."""
        from pdf_resizer.layout.engine import edit_ppi
        self.params = edit_ppi(self, ppi)

    def set_margin(self, margin: float, source: SourceGeometry,
                   limits: Optional[LayoutLimits] = None) -> None:
        """Set the margin, clamped so the usable area never degenerates."""
        from pdf_resizer.layout.engine import clamp_margin, resolve_target
        target = resolve_target(self, source, limits)
        self.margin = clamp_margin(margin, target.width, target.height,
                                   self.output_format, limits)

    def switch_mode(self, mode: SizeMode | str, source: SourceGeometry,
                    limits: Optional[LayoutLimits] = None,
                    session_scale: Optional[float] = None) -> None:
        """
        Change sizing mode, seeding the new params from the current output.

        Args:
            mode: Target mode
            source: Current source geometry
            limits: Layout limits (defaults apply when None)
            session_scale: Last scale factor the caller used, seeds SCALE
        """
        from pdf_resizer.layout.engine import switch_mode
        self.params = switch_mode(self, SizeMode(mode), source, limits, session_scale)

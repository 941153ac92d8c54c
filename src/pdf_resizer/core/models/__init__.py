"""
Core data models: sizing specifications, geometry and export-run types.
"""

from .size_spec import (
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
from .geometry import CropBands, OutputGeometry, Rect, SourceGeometry
from .tasks import ConflictEntry, ExportResult, ExportTask, TaskError

__all__ = [
    # Sizing
    "Axis",
    "FillParams",
    "FitParams",
    "LockField",
    "OutputFormat",
    "PaddingPolicy",
    "RasterParams",
    "ScaleParams",
    "SizeMode",
    "SizeParams",
    "SizeSpec",
    # Geometry
    "CropBands",
    "OutputGeometry",
    "Rect",
    "SourceGeometry",
    # Export run
    "ConflictEntry",
    "ExportResult",
    "ExportTask",
    "TaskError",
]

"""
Module: export.job

Purpose:
    Load JSON export job files. A job names the source, every output size
    and the naming/conflict settings of a run; it is validated against
    export_job.schema.json before any model is built. Relative paths are
    resolved against the job file's directory.

Key Classes:
    - ExportJob: Parsed job (source, specs, config, conflict policy)

Key Functions:
    - load_job(): Read, validate and parse a job file
    - parse_job(): Parse already-loaded job data
    - size_spec_from_dict(): One "sizes" entry → SizeSpec

Dependencies:
    - core.schemas: validate_job (jsonschema)

Used By:
    - cli: --job
"""

from __future__ import annotations

import datetime as dt
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pdf_resizer.core.models import (
    Axis,
    FillParams,
    FitParams,
    LockField,
    OutputFormat,
    RasterParams,
    ScaleParams,
    SizeMode,
    SizeSpec,
)
from pdf_resizer.core.schemas import ValidationError, validate_job

from .config import ALL_PAGES, ExportConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFLICT_POLICY = "overwrite"


@dataclass(frozen=True)
class ExportJob:
    """
    Parsed export job (immutable).

    Attributes:
        source: Source file path, or None when the caller supplies one
        specs: Output definitions in file order
        config: Export configuration
        on_conflict: "overwrite", "skip" or "cancel"
    """

    source: Optional[Path]
    specs: Tuple[SizeSpec, ...]
    config: ExportConfig
    on_conflict: str = DEFAULT_CONFLICT_POLICY


def load_job(path: Path) -> ExportJob:
    """
    Load and validate a job file.

    Args:
        path: Path to the JSON job

    Returns:
        ExportJob

    Raises:
        ValidationError: If the file is not valid JSON or fails the schema
        OSError: If the file cannot be read
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(
            f"Invalid JSON in {path.name}: {e.msg} (line {e.lineno})",
            path="",
        ) from e

    job = parse_job(data, base_dir=path.parent)
    logger.info(f"Loaded job {path.name} with {len(job.specs)} sizes")
    return job


def parse_job(data: Dict[str, Any], base_dir: Optional[Path] = None) -> ExportJob:
    """
    Build an ExportJob from parsed JSON.

    Args:
        data: Job data
        base_dir: Directory relative paths are resolved against (cwd when None)

    Returns:
        ExportJob

    Raises:
        ValidationError: If data fails the schema or describes invalid sizes
    """
    validate_job(data)
    base_dir = Path(base_dir) if base_dir is not None else Path.cwd()

    specs: List[SizeSpec] = []
    for i, entry in enumerate(data["sizes"]):
        try:
            specs.append(size_spec_from_dict(entry))
        except ValueError as e:
            raise ValidationError(f"Invalid size: {e}", path=f"sizes[{i}]") from e

    source = data.get("source")
    pages = data.get("pages", 1)

    try:
        config = ExportConfig(
            output_dir=_resolve(base_dir, data.get("output_dir", ".")),
            subfolder=data.get("subfolder"),
            base_name=data.get("base_name", "output"),
            pages=ALL_PAGES if pages == ALL_PAGES else pages - 1,
            trim=data.get("trim", 0.0),
            background=parse_hex_color(data.get("background", "#ffffff")),
            date=dt.date.fromisoformat(data["date"]) if "date" in data else None,
            max_workers=data.get("max_workers", 1),
        )
    except ValueError as e:
        raise ValidationError(f"Invalid job settings: {e}", path="") from e

    return ExportJob(
        source=_resolve(base_dir, source) if source else None,
        specs=tuple(specs),
        config=config,
        on_conflict=data.get("on_conflict", DEFAULT_CONFLICT_POLICY),
    )


def size_spec_from_dict(entry: Dict[str, Any]) -> SizeSpec:
    """
    Build a SizeSpec from one "sizes" entry.

    Example:
        >>> size_spec_from_dict({"mode": "fit_height", "width": 150}).mode
        <SizeMode.FIT_HEIGHT: 'fit_height'>
    """
    output_format = OutputFormat(entry.get("format", "pdf"))
    mode = SizeMode(entry["mode"])
    extras = {
        "margin": entry.get("margin", 0.0),
        "padding": entry.get("padding", "inside"),
    }

    if output_format.is_raster:
        for field_name in ("ppi", "width", "height"):
            if field_name in entry:
                params = RasterParams(LockField(field_name), entry[field_name], mode)
                return SizeSpec(params, output_format=output_format, **extras)
        raise ValueError("PNG sizes need one of ppi, width or height")

    if mode is SizeMode.FILL:
        params = FillParams(entry["width"], entry["height"])
    elif mode is SizeMode.FIT_HEIGHT:
        params = FitParams(Axis.WIDTH, entry["width"])
    elif mode is SizeMode.FIT_WIDTH:
        params = FitParams(Axis.HEIGHT, entry["height"])
    else:
        params = ScaleParams(entry["factor"])
    return SizeSpec(params, output_format=output_format, **extras)


def parse_hex_color(text: str) -> Tuple[int, int, int]:
    """
    Parse "#rrggbb" into an RGB triple.

    Raises:
        ValueError: If text is not a 6-digit hex colour
    """
    value = text.strip().lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected #rrggbb colour: {text!r}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def _resolve(base_dir: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base_dir / path

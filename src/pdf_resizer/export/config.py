"""
Module: export.config

Purpose:
    Configuration dataclass for one export run. Immutable configuration
    with validation on construction.

Key Classes:
    - ExportConfig: Destination, naming, page selection and concurrency

Dependencies:
    - dataclasses (std)
    - pathlib (std)
    - layout.config: LayoutLimits carried into geometry computation

Used By:
    - export.planner: Page selection, naming, destination
    - export.session / export.controller: Run orchestration
    - export.job / cli: Built from job files and arguments
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, Union

from pdf_resizer.layout.config import DEFAULT_LIMITS, LayoutLimits

ALL_PAGES = "all"


@dataclass(frozen=True)
class ExportConfig:
    """
    Configuration for one export run (immutable).

    Attributes:
        output_dir: Directory outputs are written to
        subfolder: Optional subfolder of output_dir (blank means none)
        base_name: Filename template, may contain *size*, *YYMMDD*, *DDMMYY*
        pages: "all" or a 0-based page index (raster sources ignore it)
        trim: Amount in mm trimmed from every side of each source page
        background: RGB fill for padding bands and letterbox areas
        date: Date for filename tokens (today when None)
        max_workers: 1 writes sequentially; >1 renders on a thread pool
        limits: Layout limits for geometry computation

    Example:
        >>> config = ExportConfig(
        ...     output_dir=Path("out"),
        ...     base_name="flyer_*size*",
        ...     pages="all",
        ... )
    """

    # Destination
    output_dir: Path
    subfolder: Optional[str] = None
    base_name: str = "output"

    # Source selection
    pages: Union[str, int] = 0
    trim: float = 0.0

    # Rendering
    background: Tuple[int, int, int] = (255, 255, 255)
    date: Optional[dt.date] = None
    max_workers: int = 1
    limits: LayoutLimits = field(default=DEFAULT_LIMITS)

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        if isinstance(self.pages, str):
            if self.pages != ALL_PAGES:
                raise ValueError(f"pages must be 'all' or a page index: {self.pages!r}")
        elif isinstance(self.pages, bool) or not isinstance(self.pages, int) or self.pages < 0:
            raise ValueError(f"pages must be 'all' or a page index >= 0: {self.pages!r}")
        if self.trim < 0:
            raise ValueError(f"trim must be non-negative: {self.trim}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1: {self.max_workers}")
        if len(self.background) != 3 or not all(0 <= c <= 255 for c in self.background):
            raise ValueError(f"background must be an RGB triple: {self.background!r}")
        object.__setattr__(self, "background", tuple(int(c) for c in self.background))

    @property
    def all_pages(self) -> bool:
        return self.pages == ALL_PAGES

    @property
    def destination_dir(self) -> Path:
        """output_dir joined with the trimmed subfolder, when one is set."""
        subfolder = (self.subfolder or "").strip()
        if subfolder:
            return self.output_dir / subfolder
        return self.output_dir

    @property
    def has_subfolder(self) -> bool:
        return bool((self.subfolder or "").strip())

    @property
    def export_date(self) -> dt.date:
        return self.date or dt.date.today()

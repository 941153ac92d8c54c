"""
Module: tasks

Purpose:
    Export-run value types: the concrete unit of work (ExportTask), the
    per-path conflict record surfaced at the overwrite gate
    (ConflictEntry) and the aggregate run report (ExportResult).

Key Classes:
    - ExportTask: One (SizeSpec, pages) render + write unit
    - ConflictEntry: Proposed output path with its overwrite decision
    - TaskError: File name + message for one failed task
    - ExportResult: Written / skipped / failed file names

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - export.planner: Creates ExportTasks
    - export.session: Creates ConflictEntries and ExportResult
    - cli: Reports ExportResult
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from .geometry import OutputGeometry, SourceGeometry
from .size_spec import SizeSpec


@dataclass
class ExportTask:
    """
    One concrete render + write unit.

    PDF tasks may cover several pages (one multi-page document); PNG
    tasks always cover exactly one page. Only ``should_overwrite`` is
    changed after creation.

    Attributes:
        index: Position in the run (stable report ordering)
        spec: SizeSpec this task realises
        page_indices: 0-based source pages rendered by this task
        extension: "pdf" or "png"
        base_name: Filename after template expansion, without extension
        geometry: Output geometry of the first page (used for naming)
        layouts: (source, geometry) per rendered page, in page order
        should_overwrite: Overwrite decision from the conflict gate
    """

    index: int
    spec: SizeSpec
    page_indices: Tuple[int, ...]
    extension: str
    base_name: str
    geometry: OutputGeometry
    layouts: Tuple[Tuple[SourceGeometry, OutputGeometry], ...] = ()
    should_overwrite: bool = True

    @property
    def file_name(self) -> str:
        return f"{self.base_name}.{self.extension}"

    @property
    def page_index(self) -> int:
        """First (for raster tasks: only) page of the task."""
        return self.page_indices[0]

    @property
    def is_raster(self) -> bool:
        return self.spec.is_raster


@dataclass
class ConflictEntry:
    """
    A proposed output path, flagged when it already exists.

    Attributes:
        file_name: Final file name including extension
        path: Full destination path
        is_conflict: True if the path exists at planning time
        should_overwrite: User decision; defaults to True
        task_index: Index of the ExportTask this path belongs to
    """

    file_name: str
    path: Path
    is_conflict: bool
    task_index: int
    should_overwrite: bool = True

    @property
    def will_write(self) -> bool:
        return not self.is_conflict or self.should_overwrite


@dataclass(frozen=True)
class TaskError:
    """Failure of one task."""

    file_name: str
    message: str

    def __str__(self) -> str:
        return f"{self.file_name}: {self.message}"


@dataclass(frozen=True)
class ExportResult:
    """
    Aggregate report of one export run (immutable).

    Attributes:
        written: File names written, in task order
        skipped: File names skipped because overwrite was declined
        errors: Per-task failures, in task order
        cancelled: True when the run was abandoned at the conflict gate

    Example:
        >>> result = ExportResult(written=("a.pdf",))
        >>> result.success
        True
    """

    written: Tuple[str, ...] = ()
    skipped: Tuple[str, ...] = ()
    errors: Tuple[TaskError, ...] = ()
    cancelled: bool = False

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def success(self) -> bool:
        """No task failed and the run was not cancelled."""
        return not self.cancelled and not self.has_errors

    @property
    def error_messages(self) -> list[str]:
        return [str(e) for e in self.errors]

"""
Module: export.planner

Purpose:
    Expand (SizeSpecs × selected pages) into concrete ExportTasks and
    resolve their destination paths. PDF specs produce one multi-page
    document per spec; PNG specs produce one image per (spec, page).

Key Functions:
    - select_pages(): Page indices chosen by the config
    - build_export_tasks(): Task expansion with filename templating
    - resolve_output_paths(): Destination paths and conflict detection

Algorithm:
    1. Select pages (raster sources always [0])
    2. Build a SourceGeometry per page (trim applied)
    3. Compute geometry per (spec, page) and expand the filename template
    4. Reject duplicate file names; mark paths that already exist

Dependencies:
    - layout.engine: compute_geometry
    - naming: size_token_value, expand_template, page_suffix

Used By:
    - export.session: plan()
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from pdf_resizer.core.models import ConflictEntry, ExportTask, SizeSpec, SourceGeometry
from pdf_resizer.layout.engine import compute_geometry
from pdf_resizer.naming import expand_template, page_suffix, size_token_value

from .config import ExportConfig
from .interfaces import DocumentHandle, PlanningError, Sink

logger = logging.getLogger(__name__)


def select_pages(handle: DocumentHandle, config: ExportConfig) -> List[int]:
    """
    Page indices selected for export.

    Args:
        handle: Open source document
        config: Export configuration ("all" or a single page index)

    Returns:
        0-based page indices in document order

    Raises:
        PlanningError: If the selected page does not exist
    """
    if not handle.is_pdf:
        return [0]
    if config.all_pages:
        return list(range(handle.page_count))
    if config.pages >= handle.page_count:
        raise PlanningError(
            f"Page {config.pages + 1} out of range (document has {handle.page_count} pages)"
        )
    return [config.pages]


def build_export_tasks(
    handle: DocumentHandle,
    specs: Sequence[SizeSpec],
    config: ExportConfig,
) -> List[ExportTask]:
    """
    Expand specs and pages into export tasks.

    Args:
        handle: Open source document
        specs: Output definitions in caller order
        config: Export configuration

    Returns:
        Tasks in (spec, page) order with sequential indices

    Raises:
        PlanningError: If there is nothing to export or a page is invalid

    Example:
        >>> tasks = build_export_tasks(handle, [SizeSpec.fill(210, 297)], config)
        >>> tasks[0].file_name
        'flyer_A4v.pdf'
    """
    if not specs:
        raise PlanningError("No output sizes to export")

    pages = select_pages(handle, config)
    sources = {
        index: SourceGeometry.from_page(*handle.page_size(index), page_index=index, trim=config.trim)
        for index in pages
    }
    export_date = config.export_date
    multi_page = len(pages) > 1

    tasks: List[ExportTask] = []
    for spec in specs:
        if spec.is_raster:
            for index in pages:
                source = sources[index]
                geometry = compute_geometry(spec, source, config.limits)
                base_name = expand_template(config.base_name, size_token_value(geometry), export_date)
                if multi_page:
                    base_name += page_suffix(index)
                tasks.append(ExportTask(
                    index=len(tasks),
                    spec=spec,
                    page_indices=(index,),
                    extension=spec.extension,
                    base_name=base_name,
                    geometry=geometry,
                    layouts=((source, geometry),),
                ))
        else:
            layouts = tuple(
                (sources[index], compute_geometry(spec, sources[index], config.limits))
                for index in pages
            )
            geometry = layouts[0][1]
            tasks.append(ExportTask(
                index=len(tasks),
                spec=spec,
                page_indices=tuple(pages),
                extension=spec.extension,
                base_name=expand_template(config.base_name, size_token_value(geometry), export_date),
                geometry=geometry,
                layouts=layouts,
            ))

    logger.info(f"Planned {len(tasks)} export tasks ({len(specs)} sizes, {len(pages)} pages)")
    return tasks


def resolve_output_paths(
    tasks: Sequence[ExportTask],
    config: ExportConfig,
    sink: Sink,
) -> List[ConflictEntry]:
    """
    Resolve destination paths and flag existing files.

    Args:
        tasks: Planned tasks
        config: Export configuration (output_dir, subfolder)
        sink: Storage used for existence checks

    Returns:
        One ConflictEntry per task, in task order; should_overwrite=True

    Raises:
        PlanningError: If two tasks resolve to the same file name
    """
    destination = config.destination_dir
    seen: Dict[str, int] = {}
    entries: List[ConflictEntry] = []

    for task in tasks:
        file_name = task.file_name
        if file_name in seen:
            raise PlanningError(
                f"Output sizes {seen[file_name] + 1} and {task.index + 1} "
                f"both resolve to {file_name!r}"
            )
        seen[file_name] = task.index

        path = destination / file_name
        entries.append(ConflictEntry(
            file_name=file_name,
            path=path,
            is_conflict=sink.exists(path),
            task_index=task.index,
        ))

    conflicts = sum(1 for e in entries if e.is_conflict)
    if conflicts:
        logger.info(f"{conflicts} of {len(entries)} outputs already exist in {destination}")
    return entries

"""
Module: export.writer

Purpose:
    Render and write planned tasks with per-task failure isolation.
    Sequential runs reuse the session's decoded handle; concurrent runs
    render on a thread pool where every worker thread opens its own
    handle from the source bytes. Outcomes are collected after all
    futures finish and reported in task order.

Key Functions:
    - render_task(): Bytes for one task
    - execute_tasks(): Run tasks, returning written names and errors

Dependencies:
    - concurrent.futures: Thread pool execution
    - threading (std): Per-worker document handles

Used By:
    - export.session: confirm()
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from pdf_resizer.core.models import ExportTask, TaskError

from .interfaces import Decoder, DocumentHandle, Renderer, Sink

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


def render_task(
    task: ExportTask,
    handle: DocumentHandle,
    renderer: Renderer,
    background: RGB = (255, 255, 255),
) -> bytes:
    """
    Render one task.

    Args:
        task: Planned task (layouts must be populated)
        handle: Open source document
        renderer: Renderer implementation
        background: RGB fill for letterbox and padding

    Returns:
        PNG bytes for raster tasks, PDF bytes otherwise
    """
    if task.is_raster:
        source, geometry = task.layouts[0]
        return renderer.render_png(handle, task.page_index, geometry, source, background)
    return renderer.render_pdf(handle, list(task.layouts), background)


def _run_task(
    task: ExportTask,
    path: Path,
    get_handle: Callable[[], DocumentHandle],
    renderer: Renderer,
    sink: Sink,
    background: RGB,
) -> Optional[TaskError]:
    """Render + write one task; failures are returned, never raised."""
    try:
        data = render_task(task, get_handle(), renderer, background)
        sink.write(path, data)
    except Exception as e:
        logger.warning(f"Failed to export {task.file_name}: {e}")
        return TaskError(task.file_name, str(e))
    logger.info(f"Wrote {path}")
    return None


class _WorkerHandles:
    """Lazily opened document handle per worker thread."""

    def __init__(self, decoder: Decoder, source: bytes):
        self._decoder = decoder
        self._source = source
        self._local = threading.local()
        self._opened: List[DocumentHandle] = []
        self._lock = threading.Lock()

    def get(self) -> DocumentHandle:
        handle = getattr(self._local, "handle", None)
        if handle is None:
            handle = self._decoder.open(self._source)
            self._local.handle = handle
            with self._lock:
                self._opened.append(handle)
        return handle

    def close_all(self) -> None:
        with self._lock:
            opened, self._opened = self._opened, []
        for handle in opened:
            handle.close()


def execute_tasks(
    jobs: Sequence[Tuple[ExportTask, Path]],
    handle: DocumentHandle,
    renderer: Renderer,
    sink: Sink,
    *,
    background: RGB = (255, 255, 255),
    max_workers: int = 1,
    decoder: Optional[Decoder] = None,
    source: Optional[bytes] = None,
) -> Tuple[List[str], List[TaskError]]:
    """
    Render and write tasks.

    Args:
        jobs: (task, destination path) pairs in task order
        handle: Decoded handle used by sequential runs
        renderer: Renderer implementation
        sink: Output storage
        background: RGB fill for letterbox and padding
        max_workers: >1 renders on a thread pool
        decoder: Opens per-worker handles (required when max_workers > 1)
        source: Source bytes for per-worker handles

    Returns:
        (written file names, task errors), both in task order
    """
    if max_workers > 1 and len(jobs) > 1 and decoder is not None and source is not None:
        outcomes = _execute_concurrent(jobs, renderer, sink, background, max_workers, decoder, source)
    else:
        outcomes = [
            _run_task(task, path, lambda: handle, renderer, sink, background)
            for task, path in jobs
        ]

    written: List[str] = []
    errors: List[TaskError] = []
    for (task, _), error in zip(jobs, outcomes):
        if error is None:
            written.append(task.file_name)
        else:
            errors.append(error)
    return written, errors


def _execute_concurrent(
    jobs: Sequence[Tuple[ExportTask, Path]],
    renderer: Renderer,
    sink: Sink,
    background: RGB,
    max_workers: int,
    decoder: Decoder,
    source: bytes,
) -> List[Optional[TaskError]]:
    """Thread-pool execution with one handle per worker thread."""
    handles = _WorkerHandles(decoder, source)
    workers = min(max_workers, len(jobs))
    logger.debug(f"Exporting {len(jobs)} tasks on {workers} workers")
    try:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="export") as executor:
            futures = [
                executor.submit(_run_task, task, path, handles.get, renderer, sink, background)
                for task, path in jobs
            ]
            return [future.result() for future in futures]
    finally:
        handles.close_all()

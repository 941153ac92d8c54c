"""
Module: export.session

Purpose:
    The export conflict gate. A session plans every task before anything
    is written, surfaces outputs that already exist, waits for overwrite
    decisions and only then writes. Cancelling at the gate returns to IDLE
    with zero writes.

    States:
        IDLE → PLANNING → NO_CONFLICTS | AWAITING_DECISION → WRITING
             → DONE (no errors) | REPORTED (some task failed)
        cancel(): NO_CONFLICTS | AWAITING_DECISION → IDLE

Key Classes:
    - SessionState: Gate states
    - ExportSession: Plan / decide / write state machine

Dependencies:
    - export.planner: Task expansion and path resolution
    - export.writer: Task execution

Used By:
    - export.controller: run_export()
    - cli: Interactive/flag-driven conflict decisions
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import List, Optional, Sequence, Union

from pdf_resizer.core.models import ConflictEntry, ExportResult, ExportTask, SizeSpec, TaskError

from .config import ExportConfig
from .decoder import FitzDecoder
from .interfaces import Decoder, DocumentHandle, ExportError, ExportStateError, Renderer, Sink
from .planner import build_export_tasks, resolve_output_paths
from .renderer import DocumentRenderer
from .sink import FileSystemSink
from .writer import execute_tasks

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    PLANNING = "planning"
    NO_CONFLICTS = "no_conflicts"
    AWAITING_DECISION = "awaiting_decision"
    WRITING = "writing"
    DONE = "done"
    REPORTED = "reported"


_GATE_STATES = (SessionState.NO_CONFLICTS, SessionState.AWAITING_DECISION)


class ExportSession:
    """
    One export run over one source document.

    Usage:
        with ExportSession(data, specs, config) as session:
            entries = session.plan()
            if session.state is SessionState.AWAITING_DECISION:
                session.set_overwrite("flyer_A4v.pdf", False)
            result = session.confirm()

    Attributes:
        specs: Output definitions in caller order
        config: Export configuration
    """

    def __init__(
        self,
        source: bytes,
        specs: Sequence[SizeSpec],
        config: ExportConfig,
        *,
        decoder: Optional[Decoder] = None,
        renderer: Optional[Renderer] = None,
        sink: Optional[Sink] = None,
    ):
        self._source = source
        self.specs = list(specs)
        self.config = config
        self._decoder = decoder or FitzDecoder()
        self._renderer = renderer or DocumentRenderer()
        self._sink = sink or FileSystemSink()

        self._state = SessionState.IDLE
        self._handle: Optional[DocumentHandle] = None
        self._tasks: List[ExportTask] = []
        self._entries: List[ConflictEntry] = []
        self._result: Optional[ExportResult] = None

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def tasks(self) -> List[ExportTask]:
        return list(self._tasks)

    @property
    def entries(self) -> List[ConflictEntry]:
        """All planned outputs (conflicting or not), in task order."""
        return list(self._entries)

    @property
    def conflicts(self) -> List[ConflictEntry]:
        """Planned outputs whose path already exists."""
        return [e for e in self._entries if e.is_conflict]

    @property
    def result(self) -> Optional[ExportResult]:
        return self._result

    # ─────────────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────────────

    def plan(self) -> List[ConflictEntry]:
        """
        Decode the source, expand tasks and check destinations.

        Returns:
            One ConflictEntry per task (should_overwrite=True)

        Raises:
            ExportStateError: If not IDLE
            DecodeError: If the source cannot be decoded
            PlanningError: If tasks cannot be planned
        """
        self._require(SessionState.IDLE, action="plan")
        self._state = SessionState.PLANNING
        try:
            self._handle = self._decoder.open(self._source)
            self._tasks = build_export_tasks(self._handle, self.specs, self.config)
            self._entries = resolve_output_paths(self._tasks, self.config, self._sink)
        except Exception:
            self._reset()
            raise

        if self.conflicts:
            self._state = SessionState.AWAITING_DECISION
            logger.info(f"Awaiting overwrite decision for {len(self.conflicts)} existing files")
        else:
            self._state = SessionState.NO_CONFLICTS
        return self.entries

    def set_overwrite(self, key: Union[int, str], should_overwrite: bool) -> None:
        """
        Record the overwrite decision for one conflicting output.

        Args:
            key: Task index or file name of the entry
            should_overwrite: False skips the file

        Raises:
            ExportStateError: If not awaiting a decision
            KeyError: If no conflicting entry matches key
        """
        self._require(SessionState.AWAITING_DECISION, action="set_overwrite")
        for entry in self.conflicts:
            if entry.task_index == key or entry.file_name == key:
                entry.should_overwrite = should_overwrite
                return
        raise KeyError(f"No conflicting output {key!r}")

    def set_overwrite_all(self, should_overwrite: bool) -> None:
        """Apply one overwrite decision to every conflicting output."""
        self._require(SessionState.AWAITING_DECISION, action="set_overwrite_all")
        for entry in self.conflicts:
            entry.should_overwrite = should_overwrite

    def confirm(self) -> ExportResult:
        """
        Resolve the gate and write every surviving task.

        Declined conflicts are reported as skipped; per-task failures are
        reported as errors and never raised.

        Returns:
            ExportResult in task order

        Raises:
            ExportStateError: If called outside the gate states
        """
        self._require(*_GATE_STATES, action="confirm")
        self._state = SessionState.WRITING
        start_time = time.perf_counter()

        jobs = []
        skipped: List[str] = []
        for task, entry in zip(self._tasks, self._entries):
            task.should_overwrite = entry.should_overwrite
            if entry.will_write:
                jobs.append((task, entry.path))
            else:
                skipped.append(entry.file_name)
                logger.warning(f"Skipped existing file {entry.file_name}")

        written: List[str] = []
        errors: List[TaskError] = []
        if jobs:
            try:
                if self.config.has_subfolder:
                    self._sink.create_directory(self.config.destination_dir)
            except OSError as e:
                logger.warning(f"Could not create {self.config.destination_dir}: {e}")
                errors = [TaskError(task.file_name, str(e)) for task, _ in jobs]
            else:
                written, errors = execute_tasks(
                    jobs,
                    self._handle,
                    self._renderer,
                    self._sink,
                    background=self.config.background,
                    max_workers=self.config.max_workers,
                    decoder=self._decoder,
                    source=self._source,
                )

        self._result = ExportResult(
            written=tuple(written),
            skipped=tuple(skipped),
            errors=tuple(errors),
        )
        self._close_handle()
        self._state = SessionState.REPORTED if errors else SessionState.DONE

        elapsed = time.perf_counter() - start_time
        logger.info(
            f"Export finished in {elapsed:.2f}s: {len(written)} written, "
            f"{len(skipped)} skipped, {len(errors)} failed"
        )
        return self._result

    write = confirm

    def cancel(self) -> None:
        """
        Abandon the run at the gate; nothing is written.

        Raises:
            ExportStateError: If called outside the gate states
        """
        self._require(*_GATE_STATES, action="cancel")
        logger.info("Export cancelled")
        self._reset()

    def close(self) -> None:
        """Release the decoded source (safe in any state)."""
        self._close_handle()

    def __enter__(self) -> ExportSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ─────────────────────────────────────────────────────────────────────────
    # Internal
    # ─────────────────────────────────────────────────────────────────────────

    def _require(self, *states: SessionState, action: str) -> None:
        if self._state not in states:
            expected = ", ".join(s.value for s in states)
            raise ExportStateError(
                f"Cannot {action} in state {self._state.value} (expected {expected})"
            )

    def _reset(self) -> None:
        self._close_handle()
        self._tasks = []
        self._entries = []
        self._state = SessionState.IDLE

    def _close_handle(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

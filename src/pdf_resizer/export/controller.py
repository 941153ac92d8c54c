"""
Module: export.controller

Purpose:
    One-call export entry point. Plans the run, hands conflicts to a
    decision callback, then writes or cancels.
    Decode → Plan → Conflict gate → Render → Write

Key Functions:
    - run_export(): Main entry point for exporting a source

Dependencies:
    - export.session: ExportSession state machine

Used By:
    - cli: Headless exports
    - export.job: Job-file driven exports
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from pdf_resizer.core.models import ConflictEntry, ExportResult, SizeSpec

from .config import ExportConfig
from .interfaces import Decoder, Renderer, Sink
from .session import ExportSession, SessionState

logger = logging.getLogger(__name__)

ConflictHandler = Callable[[List[ConflictEntry]], bool]


def overwrite_all(entries: List[ConflictEntry]) -> bool:
    """Conflict handler keeping the default decision (overwrite)."""
    return True


def skip_existing(entries: List[ConflictEntry]) -> bool:
    """Conflict handler declining every overwrite."""
    for entry in entries:
        entry.should_overwrite = False
    return True


def cancel_on_conflict(entries: List[ConflictEntry]) -> bool:
    """Conflict handler abandoning the run."""
    return False


CONFLICT_POLICIES = {
    "overwrite": overwrite_all,
    "skip": skip_existing,
    "cancel": cancel_on_conflict,
}


def run_export(
    source: bytes,
    specs: Sequence[SizeSpec],
    config: ExportConfig,
    on_conflict: Optional[ConflictHandler] = None,
    *,
    decoder: Optional[Decoder] = None,
    renderer: Optional[Renderer] = None,
    sink: Optional[Sink] = None,
) -> ExportResult:
    """
    Export a source to every spec.

    Args:
        source: Raw PDF or image bytes
        specs: Output definitions
        config: Export configuration
        on_conflict: Called with the conflicting entries when outputs
            already exist; may toggle ``should_overwrite`` and returns
            False to cancel. Defaults to overwriting.
        decoder: Decoder override (FitzDecoder by default)
        renderer: Renderer override (DocumentRenderer by default)
        sink: Storage override (FileSystemSink by default)

    Returns:
        ExportResult; ``cancelled=True`` with nothing written on cancel

    Raises:
        DecodeError: If the source cannot be decoded
        PlanningError: If tasks cannot be planned

    Example:
        >>> result = run_export(pdf_bytes, [SizeSpec.fill(210, 297)], config)
        >>> result.written
        ('flyer_A4v.pdf',)
    """
    handler = on_conflict or overwrite_all
    logger.info(f"Starting export of {len(specs)} sizes to {config.destination_dir}")

    with ExportSession(
        source, specs, config, decoder=decoder, renderer=renderer, sink=sink
    ) as session:
        session.plan()
        if session.state is SessionState.AWAITING_DECISION and not handler(session.conflicts):
            session.cancel()
            return ExportResult(cancelled=True)
        return session.confirm()

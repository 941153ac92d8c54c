"""
Module: export

Purpose:
    Export orchestration: expands SizeSpecs × pages into tasks, names the
    outputs, gates on existing files and renders/writes each task with
    per-task failure isolation.

Key Functions:
    - run_export(): One-call entry point
    - build_export_tasks() / resolve_output_paths(): Planning
    - load_job(): JSON job files

Key Classes:
    - ExportSession: Conflict-gate state machine
    - ExportConfig: Run configuration
    - FitzDecoder / DocumentRenderer / FileSystemSink: Collaborators

Dependencies:
    - fitz (PyMuPDF), PIL, reportlab: Decoding and rendering
    - pdf_resizer.layout: Geometry
    - pdf_resizer.naming: Filenames

Used By:
    - cli: Command line exports
"""

from .config import ALL_PAGES, ExportConfig
from .interfaces import (
    DecodeError,
    Decoder,
    DocumentHandle,
    ExportError,
    ExportStateError,
    PlanningError,
    Renderer,
    Sink,
)
from .decoder import FitzDecoder, ImageHandle, PdfHandle
from .renderer import DocumentRenderer
from .sink import FileSystemSink
from .planner import build_export_tasks, resolve_output_paths, select_pages
from .writer import execute_tasks, render_task
from .session import ExportSession, SessionState
from .controller import CONFLICT_POLICIES, run_export
from .job import ExportJob, load_job, parse_job, size_spec_from_dict

__all__ = [
    # Config
    "ALL_PAGES",
    "ExportConfig",
    # Interfaces
    "DocumentHandle",
    "Decoder",
    "Renderer",
    "Sink",
    # Errors
    "ExportError",
    "DecodeError",
    "PlanningError",
    "ExportStateError",
    # Implementations
    "FitzDecoder",
    "PdfHandle",
    "ImageHandle",
    "DocumentRenderer",
    "FileSystemSink",
    # Planning / writing
    "select_pages",
    "build_export_tasks",
    "resolve_output_paths",
    "render_task",
    "execute_tasks",
    # Orchestration
    "ExportSession",
    "SessionState",
    "run_export",
    "CONFLICT_POLICIES",
    # Jobs
    "ExportJob",
    "load_job",
    "parse_job",
    "size_spec_from_dict",
]

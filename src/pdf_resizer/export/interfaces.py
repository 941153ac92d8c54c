"""
Module: export.interfaces

Purpose:
    Abstract collaborators of the export orchestrator and the export
    exception hierarchy. The orchestrator only talks to these interfaces,
    so decoding, rendering and storage can be swapped (tests use mocks).

Key Classes:
    - DocumentHandle: An opened source document (PDF or raster image)
    - Decoder: Opens source bytes into a DocumentHandle
    - Renderer: Produces PNG/PDF bytes for computed geometry
    - Sink: Output storage (existence checks, writes, directories)
    - ExportError: Base for whole-run failures
    - DecodeError / PlanningError / ExportStateError: Specific failures

Dependencies:
    - abc (std)

Used By:
    - export.decoder / export.renderer / export.sink: Implementations
    - export.planner / export.session / export.controller: Orchestration
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence, Tuple

from pdf_resizer.core.models.geometry import OutputGeometry, SourceGeometry


class ExportError(Exception):
    """Whole-run export failure."""
    pass


class DecodeError(ExportError):
    """Source bytes could not be opened as a PDF or image."""
    pass


class PlanningError(ExportError):
    """Tasks could not be planned (bad page selection, duplicate names)."""
    pass


class ExportStateError(ExportError):
    """Session operation called in the wrong state."""
    pass


class DocumentHandle(ABC):
    """
    An opened source document.

    Handles are not shared between threads; concurrent writers open one
    handle each from the same source bytes.
    """

    @property
    @abstractmethod
    def kind(self) -> str:
        """'pdf' or 'image'."""

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages (always 1 for images)."""

    @abstractmethod
    def page_size(self, index: int) -> Tuple[float, float]:
        """
        Untrimmed size of one page.

        Args:
            index: 0-based page index

        Returns:
            (width_mm, height_mm)

        Raises:
            IndexError: If index is out of range
        """

    @abstractmethod
    def close(self) -> None:
        """Release the underlying document."""

    @property
    def is_pdf(self) -> bool:
        return self.kind == "pdf"

    def __enter__(self) -> DocumentHandle:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Decoder(ABC):
    """Opens source bytes."""

    @abstractmethod
    def open(self, data: bytes) -> DocumentHandle:
        """
        Decode a PDF or raster image.

        Raises:
            DecodeError: If the bytes are neither
        """


class Renderer(ABC):
    """Produces output bytes from a handle and computed geometry."""

    @abstractmethod
    def render_png(
        self,
        handle: DocumentHandle,
        page_index: int,
        geometry: OutputGeometry,
        source: SourceGeometry,
        background: Tuple[int, int, int] = (255, 255, 255),
    ) -> bytes:
        """Render one page into a PNG of geometry.page_width × page_height px."""

    @abstractmethod
    def render_pdf(
        self,
        handle: DocumentHandle,
        pages: Sequence[Tuple[SourceGeometry, OutputGeometry]],
        background: Tuple[int, int, int] = (255, 255, 255),
    ) -> bytes:
        """Render each (source, geometry) pair as one page of a PDF."""


class Sink(ABC):
    """Output storage."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """True if a file already exists at path."""

    @abstractmethod
    def write(self, path: Path, data: bytes) -> None:
        """Write data to path, replacing any existing file."""

    @abstractmethod
    def list_directory(self, path: Path) -> List[str]:
        """File names in a directory (empty if it does not exist)."""

    @abstractmethod
    def create_directory(self, path: Path) -> None:
        """Create a directory and its parents if missing."""

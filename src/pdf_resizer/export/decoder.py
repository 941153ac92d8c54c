"""
Module: export.decoder

Purpose:
    Opens source bytes as a document handle. PDFs are opened with
    PyMuPDF; everything else is handed to Pillow. Raster sources carry no
    physical size, so their millimetre size assumes 300 ppi.

Key Classes:
    - FitzDecoder: Decoder implementation (PDF via fitz, images via PIL)
    - PdfHandle: Handle over a fitz.Document
    - ImageHandle: Handle over a decoded PIL image (single page)

Dependencies:
    - fitz (PyMuPDF): PDF parsing
    - PIL: Raster image decoding

Used By:
    - export.session: Decodes the source once per run
    - export.controller: One handle per worker thread
"""

from __future__ import annotations

import io
import logging
from typing import Tuple

import fitz
from PIL import Image, ImageOps, UnidentifiedImageError

from pdf_resizer.core.units import DEFAULT_IMAGE_PPI, pt_to_mm, px_to_mm

from .interfaces import Decoder, DecodeError, DocumentHandle

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


class PdfHandle(DocumentHandle):
    """Handle over an open PyMuPDF document."""

    def __init__(self, document: fitz.Document):
        self._document = document

    @property
    def kind(self) -> str:
        return "pdf"

    @property
    def document(self) -> fitz.Document:
        return self._document

    @property
    def page_count(self) -> int:
        return self._document.page_count

    def page_size(self, index: int) -> Tuple[float, float]:
        if not 0 <= index < self.page_count:
            raise IndexError(f"Page {index} out of range (0-{self.page_count - 1})")
        rect = self._document[index].rect
        return pt_to_mm(rect.width), pt_to_mm(rect.height)

    def close(self) -> None:
        self._document.close()


class ImageHandle(DocumentHandle):
    """
    Handle over a decoded raster image.

    The image is normalised to RGB (or RGBA when it has transparency) and
    EXIF orientation is applied, so width/height match what viewers show.
    """

    def __init__(self, image: Image.Image, ppi: float = DEFAULT_IMAGE_PPI):
        self._image = image
        self._ppi = ppi

    @property
    def kind(self) -> str:
        return "image"

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def ppi(self) -> float:
        return self._ppi

    @property
    def page_count(self) -> int:
        return 1

    def page_size(self, index: int) -> Tuple[float, float]:
        if index != 0:
            raise IndexError(f"Images have a single page, got index {index}")
        return px_to_mm(self._image.width, self._ppi), px_to_mm(self._image.height, self._ppi)

    def close(self) -> None:
        self._image.close()


class FitzDecoder(Decoder):
    """
    Decoder for PDFs and raster images.

    Example:
        >>> with FitzDecoder().open(pdf_bytes) as handle:
        ...     handle.page_count
        3
    """

    def open(self, data: bytes) -> DocumentHandle:
        """
        Decode source bytes.

        Args:
            data: Raw PDF or image bytes

        Returns:
            PdfHandle or ImageHandle

        Raises:
            DecodeError: If the bytes cannot be decoded
        """
        if not data:
            raise DecodeError("Source is empty")
        if data[:1024].lstrip().startswith(PDF_MAGIC):
            return self._open_pdf(data)
        return self._open_image(data)

    def _open_pdf(self, data: bytes) -> PdfHandle:
        try:
            document = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as e:
            raise DecodeError(f"Could not open PDF: {e}") from e
        if document.needs_pass:
            document.close()
            raise DecodeError("PDF is password protected")
        if document.page_count == 0:
            document.close()
            raise DecodeError("PDF has no pages")
        logger.debug(f"Opened PDF with {document.page_count} pages")
        return PdfHandle(document)

    def _open_image(self, data: bytes) -> ImageHandle:
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise DecodeError(f"Source is neither a PDF nor a supported image: {e}") from e

        image = ImageOps.exif_transpose(image)
        has_alpha = image.mode in ("RGBA", "LA") or "transparency" in image.info
        image = image.convert("RGBA" if has_alpha else "RGB")
        logger.debug(f"Opened image {image.width}x{image.height} px ({image.mode})")
        return ImageHandle(image)

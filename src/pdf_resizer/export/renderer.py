"""
Module: export.renderer

Purpose:
    Render computed OutputGeometry into output bytes. Every path consumes
    the same visible_window() projection: the part of the (trimmed)
    source that lands inside the usable area is drawn into its destination
    rectangle, then the padding bands are painted with the background.

    - PDF source → PDF: vector placement with PyMuPDF show_pdf_page()
    - PDF source → PNG: PyMuPDF pixmap of the clipped source window
    - Image source → PDF: ReportLab canvas with the cropped image
    - Image source → PNG: Pillow crop/resize/paste

Key Classes:
    - DocumentRenderer: Renderer implementation

Dependencies:
    - fitz (PyMuPDF): Vector PDF composition and rasterisation
    - PIL: Raster composition and PNG encoding
    - reportlab: PDF pages for raster sources

Used By:
    - export.controller: Per-task rendering
"""

from __future__ import annotations

import io
import logging
import math
from typing import Optional, Sequence, Tuple

import fitz
from PIL import Image, ImageDraw
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from pdf_resizer.core.models.geometry import OutputGeometry, Rect, SourceGeometry
from pdf_resizer.core.units import mm_to_pt, round_half_up

from .decoder import ImageHandle, PdfHandle
from .interfaces import DocumentHandle, Renderer

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]
WHITE: RGB = (255, 255, 255)


class DocumentRenderer(Renderer):
    """
    Renders PDF and image handles into PNG or PDF bytes.

    Stateless; one instance can be shared by worker threads as long as
    each thread uses its own DocumentHandle.

    Example:
        >>> renderer = DocumentRenderer()
        >>> png = renderer.render_png(handle, 0, geometry, source)
    """

    # ─────────────────────────────────────────────────────────────────────────
    # PNG
    # ─────────────────────────────────────────────────────────────────────────

    def render_png(
        self,
        handle: DocumentHandle,
        page_index: int,
        geometry: OutputGeometry,
        source: SourceGeometry,
        background: RGB = WHITE,
    ) -> bytes:
        """
        Render one source page into a PNG canvas.

        Args:
            handle: Open source document
            page_index: 0-based page to render
            geometry: Raster geometry (px)
            source: Source geometry the geometry was computed for
            background: RGB fill for letterbox and padding

        Returns:
            Encoded PNG bytes of geometry.page_width × page_height px
        """
        width = max(1, round_half_up(geometry.page_width))
        height = max(1, round_half_up(geometry.page_height))
        output = Image.new("RGB", (width, height), background)

        window = geometry.visible_window()
        if window is not None:
            source_rect, dest_rect = window
            box = _pixel_box(dest_rect)
            if box is not None:
                if isinstance(handle, PdfHandle):
                    content = _rasterise_pdf_window(handle, page_index, source, source_rect, box)
                else:
                    content = _crop_image_window(_image_of(handle), source, source_rect, box)
                _paste(output, content, (box[0], box[1]))
        else:
            logger.warning(f"Page {page_index + 1}: content not visible in output")

        _fill_regions(output, geometry.mask_regions, background)

        buffer = io.BytesIO()
        save_kwargs = {"format": "PNG", "optimize": True}
        if geometry.ppi:
            save_kwargs["dpi"] = (geometry.ppi, geometry.ppi)
        output.save(buffer, **save_kwargs)
        logger.debug(f"Rendered PNG {width}x{height} px from page {page_index + 1}")
        return buffer.getvalue()

    # ─────────────────────────────────────────────────────────────────────────
    # PDF
    # ─────────────────────────────────────────────────────────────────────────

    def render_pdf(
        self,
        handle: DocumentHandle,
        pages: Sequence[Tuple[SourceGeometry, OutputGeometry]],
        background: RGB = WHITE,
    ) -> bytes:
        """
        Render a multi-page PDF, one output page per (source, geometry).

        Args:
            handle: Open source document
            pages: Source/geometry pairs in output order
            background: RGB fill for letterbox and padding

        Returns:
            Encoded PDF bytes

        Raises:
            ValueError: If pages is empty
        """
        if not pages:
            raise ValueError("Cannot render a PDF without pages")
        if isinstance(handle, PdfHandle):
            return _render_pdf_from_pdf(handle, pages, background)
        return _render_pdf_from_image(_image_of(handle), pages, background)


# ─────────────────────────────────────────────────────────────────────────────
# PDF source
# ─────────────────────────────────────────────────────────────────────────────

def _source_clip_pt(page: fitz.Page, source: SourceGeometry, source_rect: Rect) -> fitz.Rect:
    """Visible source window (trimmed mm) → source page rectangle in points."""
    origin = page.rect
    return fitz.Rect(
        origin.x0 + mm_to_pt(source.trim + source_rect.x),
        origin.y0 + mm_to_pt(source.trim + source_rect.y),
        origin.x0 + mm_to_pt(source.trim + source_rect.right),
        origin.y0 + mm_to_pt(source.trim + source_rect.bottom),
    )


def _mm_rect_to_pt(rect: Rect) -> fitz.Rect:
    return fitz.Rect(
        mm_to_pt(rect.x), mm_to_pt(rect.y), mm_to_pt(rect.right), mm_to_pt(rect.bottom)
    )


def _render_pdf_from_pdf(
    handle: PdfHandle,
    pages: Sequence[Tuple[SourceGeometry, OutputGeometry]],
    background: RGB,
) -> bytes:
    """Place source pages as vector content on new pages."""
    source_doc = handle.document
    fill = tuple(c / 255 for c in background)
    output = fitz.open()
    try:
        for source, geometry in pages:
            page = output.new_page(
                width=mm_to_pt(geometry.page_width),
                height=mm_to_pt(geometry.page_height),
            )
            if background != WHITE:
                page.draw_rect(page.rect, color=None, fill=fill, overlay=False)

            window = geometry.visible_window()
            if window is None:
                logger.warning(f"Page {source.page_index + 1}: content not visible in output")
            else:
                source_rect, dest_rect = window
                clip = _source_clip_pt(source_doc[source.page_index], source, source_rect)
                page.show_pdf_page(
                    _mm_rect_to_pt(dest_rect),
                    source_doc,
                    source.page_index,
                    clip=clip,
                    keep_proportion=False,
                )

            for region in geometry.mask_regions:
                page.draw_rect(_mm_rect_to_pt(region), color=None, fill=fill)

        data = output.tobytes(garbage=3, deflate=True)
    finally:
        output.close()
    logger.debug(f"Rendered PDF with {len(pages)} pages (vector)")
    return data


def _rasterise_pdf_window(
    handle: PdfHandle,
    page_index: int,
    source: SourceGeometry,
    source_rect: Rect,
    box: Tuple[int, int, int, int],
) -> Image.Image:
    """
    Rasterise the visible source window at the size of its pixel box.

    The matrix is shifted so the window's top-left corner lands on a device
    pixel boundary. MuPDF rounds a clip outward to whole pixels, so the
    window is rendered with a one pixel apron and the exact box is cropped
    out of the pixmap using its device origin. Nothing outside the window
    reaches the returned image.
    """
    page = handle.document[page_index]
    clip = _source_clip_pt(page, source, source_rect)
    target_w, target_h = box[2] - box[0], box[3] - box[1]
    zoom_x = target_w / clip.width
    zoom_y = target_h / clip.height

    origin_x = math.floor(clip.x0 * zoom_x)
    origin_y = math.floor(clip.y0 * zoom_y)
    matrix = fitz.Matrix(
        zoom_x, 0, 0, zoom_y,
        origin_x - clip.x0 * zoom_x,
        origin_y - clip.y0 * zoom_y,
    )
    apron = fitz.Rect(
        clip.x0 - 1 / zoom_x, clip.y0 - 1 / zoom_y,
        clip.x1 + 1 / zoom_x, clip.y1 + 1 / zoom_y,
    ) & page.rect
    pix = page.get_pixmap(matrix=matrix, clip=apron, alpha=False)
    image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)

    left = origin_x - pix.x
    top = origin_y - pix.y
    window = (
        max(0, left),
        max(0, top),
        min(pix.width, left + target_w),
        min(pix.height, top + target_h),
    )
    image = image.crop(window)
    if image.size != (target_w, target_h):
        # Window ran past the page edge by a rounding pixel
        image = image.resize((target_w, target_h), Image.Resampling.LANCZOS)
    return image


# ─────────────────────────────────────────────────────────────────────────────
# Image source
# ─────────────────────────────────────────────────────────────────────────────

def _image_of(handle: DocumentHandle) -> Image.Image:
    if not isinstance(handle, ImageHandle):
        raise TypeError(f"Unsupported document handle: {type(handle).__name__}")
    return handle.image


def _source_crop_box(image: Image.Image, source: SourceGeometry, source_rect: Rect) -> Tuple[int, int, int, int]:
    """Visible source window (trimmed mm) → pixel box in the raw image."""
    px_per_mm = image.width / (source.raw_width or 1)
    left = round_half_up((source.trim + source_rect.x) * px_per_mm)
    top = round_half_up((source.trim + source_rect.y) * px_per_mm)
    right = round_half_up((source.trim + source_rect.right) * px_per_mm)
    bottom = round_half_up((source.trim + source_rect.bottom) * px_per_mm)
    left, top = max(0, left), max(0, top)
    right = min(image.width, max(right, left + 1))
    bottom = min(image.height, max(bottom, top + 1))
    return left, top, right, bottom


def _crop_image_window(
    image: Image.Image,
    source: SourceGeometry,
    source_rect: Rect,
    box: Tuple[int, int, int, int],
) -> Image.Image:
    cropped = image.crop(_source_crop_box(image, source, source_rect))
    size = (box[2] - box[0], box[3] - box[1])
    if cropped.size != size:
        cropped = cropped.resize(size, Image.Resampling.LANCZOS)
    return cropped


def _render_pdf_from_image(
    image: Image.Image,
    pages: Sequence[Tuple[SourceGeometry, OutputGeometry]],
    background: RGB,
) -> bytes:
    """Draw the cropped image onto ReportLab pages."""
    buffer = io.BytesIO()
    first_geometry = pages[0][1]
    c = canvas.Canvas(
        buffer,
        pagesize=(mm_to_pt(first_geometry.page_width), mm_to_pt(first_geometry.page_height)),
    )
    fill = tuple(ch / 255 for ch in background)

    for source, geometry in pages:
        page_width_pt = mm_to_pt(geometry.page_width)
        page_height_pt = mm_to_pt(geometry.page_height)
        c.setPageSize((page_width_pt, page_height_pt))

        c.setFillColorRGB(*fill)
        c.rect(0, 0, page_width_pt, page_height_pt, stroke=0, fill=1)

        window = geometry.visible_window()
        if window is not None:
            source_rect, dest_rect = window
            cropped = image.crop(_source_crop_box(image, source, source_rect))
            c.drawImage(
                _pil_to_reader(cropped),
                mm_to_pt(dest_rect.x),
                _transform_y(page_height_pt, dest_rect.y, dest_rect.height),
                width=mm_to_pt(dest_rect.width),
                height=mm_to_pt(dest_rect.height),
                mask="auto",
            )

        c.setFillColorRGB(*fill)
        for region in geometry.mask_regions:
            c.rect(
                mm_to_pt(region.x),
                _transform_y(page_height_pt, region.y, region.height),
                mm_to_pt(region.width),
                mm_to_pt(region.height),
                stroke=0,
                fill=1,
            )
        c.showPage()

    c.save()
    logger.debug(f"Rendered PDF with {len(pages)} pages (raster source)")
    return buffer.getvalue()


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Args:
        img: PIL Image

    Returns:
        ImageReader for use with ReportLab
    """
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)


def _transform_y(page_height_pt: float, y_mm_top: float, height_mm: float) -> float:
    """
    Convert a top-down mm Y coordinate to bottom-up PDF Y.

    Args:
        page_height_pt: Page height in points
        y_mm_top: Y position from top in mm
        height_mm: Height of element in mm

    Returns:
        Y position from bottom in points
    """
    return page_height_pt - mm_to_pt(y_mm_top) - mm_to_pt(height_mm)


# ─────────────────────────────────────────────────────────────────────────────
# Raster helpers
# ─────────────────────────────────────────────────────────────────────────────

def _pixel_box(rect: Rect) -> Optional[Tuple[int, int, int, int]]:
    """Snap a px rectangle to whole pixels; None when it collapses."""
    left, top = round_half_up(rect.x), round_half_up(rect.y)
    right, bottom = round_half_up(rect.right), round_half_up(rect.bottom)
    if right <= left or bottom <= top:
        return None
    return left, top, right, bottom


def _paste(canvas_image: Image.Image, content: Image.Image, position: Tuple[int, int]) -> None:
    if content.mode == "RGBA":
        canvas_image.paste(content, position, content)
    else:
        canvas_image.paste(content.convert("RGB"), position)


def _fill_regions(image: Image.Image, regions: Sequence[Rect], background: RGB) -> None:
    if not regions:
        return
    draw = ImageDraw.Draw(image)
    for region in regions:
        box = _pixel_box(region)
        if box is not None:
            # ImageDraw boxes are inclusive of the far edge
            draw.rectangle((box[0], box[1], box[2] - 1, box[3] - 1), fill=background)

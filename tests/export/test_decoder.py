"""
Tests for export.decoder

Test Coverage:
- PDF detection and page sizes in mm
- Raster images measured at 300 ppi, normalised to RGB/RGBA
- DecodeError for empty, corrupt, unknown and oversized input
"""
import io

import fitz
import pytest
from PIL import Image

from pdf_resizer.export import DecodeError, FitzDecoder, ImageHandle, PdfHandle


@pytest.fixture
def decoder():
    return FitzDecoder()


class TestPdfSources:
    """PDF bytes open as PdfHandle."""

    def test_open_when_pdf_then_page_sizes_in_mm(self, decoder, pdf_factory):
        # Arrange
        data = pdf_factory([(210, 297), (100, 50)])

        # Act
        with decoder.open(data) as handle:
            # Assert
            assert isinstance(handle, PdfHandle)
            assert handle.is_pdf
            assert handle.page_count == 2
            assert handle.page_size(0) == pytest.approx((210, 297), abs=1e-3)
            assert handle.page_size(1) == pytest.approx((100, 50), abs=1e-3)

    def test_page_size_when_out_of_range_then_index_error(self, decoder, a4_pdf_bytes):
        with decoder.open(a4_pdf_bytes) as handle:
            with pytest.raises(IndexError):
                handle.page_size(1)

    def test_open_when_pdf_truncated_then_decode_error(self, decoder):
        with pytest.raises(DecodeError):
            decoder.open(b"%PDF-1.7\n" + b"\x00" * 64)

    def test_open_when_encrypted_then_decode_error(self, decoder, a4_pdf_bytes):
        doc = fitz.open(stream=a4_pdf_bytes, filetype="pdf")
        encrypted = doc.tobytes(
            encryption=fitz.PDF_ENCRYPT_AES_256,
            owner_pw="owner",
            user_pw="secret",
        )
        doc.close()

        with pytest.raises(DecodeError, match="password"):
            decoder.open(encrypted)


class TestImageSources:
    """Raster bytes open as ImageHandle."""

    def test_open_when_png_then_size_at_300_ppi(self, decoder, sample_png_bytes):
        with decoder.open(sample_png_bytes) as handle:
            assert isinstance(handle, ImageHandle)
            assert not handle.is_pdf
            assert handle.page_count == 1
            assert handle.page_size(0) == pytest.approx((50.8, 25.4))

    def test_open_when_grayscale_image_then_rgb(self, decoder):
        buffer = io.BytesIO()
        Image.new("L", (10, 10), 128).save(buffer, format="PNG")

        with decoder.open(buffer.getvalue()) as handle:
            assert handle.image.mode == "RGB"

    def test_open_when_transparent_png_then_rgba(self, decoder, png_factory):
        data = png_factory(10, 10, (0, 0, 0, 0), mode="RGBA")

        with decoder.open(data) as handle:
            assert handle.image.mode == "RGBA"

    def test_open_when_jpeg_then_rgb(self, decoder):
        buffer = io.BytesIO()
        Image.new("RGB", (30, 20), (1, 2, 3)).save(buffer, format="JPEG")

        with decoder.open(buffer.getvalue()) as handle:
            assert handle.image.size == (30, 20)
            assert handle.image.mode == "RGB"

    def test_page_size_when_not_first_page_then_index_error(self, decoder, sample_png_bytes):
        with decoder.open(sample_png_bytes) as handle:
            with pytest.raises(IndexError):
                handle.page_size(1)


@pytest.mark.parametrize("data", [b"", b"hello world", b"\x89PNG\r\n\x1a\nbroken"])
def test_open_when_undecodable_then_decode_error(decoder, data):
    with pytest.raises(DecodeError):
        decoder.open(data)


def test_open_when_image_exceeds_pixel_limit_then_decode_error(decoder, png_factory, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    with pytest.raises(DecodeError):
        decoder.open(png_factory(40, 40))

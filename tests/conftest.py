import io
import sys
from pathlib import Path

import fitz
import pytest
from PIL import Image

# Add src to sys.path so we can import pdf_resizer
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from pdf_resizer.core.units import mm_to_pt  # noqa: E402

A4_MM = (210.0, 297.0)


def make_pdf_bytes(page_sizes_mm, fill=(0.2, 0.4, 0.8)) -> bytes:
    """Build a PDF with one filled page per (width_mm, height_mm)."""
    doc = fitz.open()
    try:
        for width_mm, height_mm in page_sizes_mm:
            page = doc.new_page(width=mm_to_pt(width_mm), height=mm_to_pt(height_mm))
            page.draw_rect(page.rect, color=None, fill=fill)
        return doc.tobytes()
    finally:
        doc.close()


def make_png_bytes(width_px: int, height_px: int, color=(200, 30, 30), mode="RGB") -> bytes:
    """Build a solid-colour PNG."""
    image = Image.new(mode, (width_px, height_px), color)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


# Common test fixtures
@pytest.fixture
def a4_pdf_bytes():
    """Single-page A4 PDF."""
    return make_pdf_bytes([A4_MM])


@pytest.fixture
def three_page_pdf_bytes():
    """Three A4 pages."""
    return make_pdf_bytes([A4_MM, A4_MM, A4_MM])


@pytest.fixture
def sample_png_bytes():
    """600 × 300 px image (50.8 × 25.4 mm at 300 ppi)."""
    return make_png_bytes(600, 300)


@pytest.fixture
def sample_pdf_file(tmp_path: Path, a4_pdf_bytes):
    """A4 PDF written to disk."""
    path = tmp_path / "flyer.pdf"
    path.write_bytes(a4_pdf_bytes)
    return path


@pytest.fixture
def pdf_factory():
    """Callable building PDF bytes from a list of (width_mm, height_mm)."""
    return make_pdf_bytes


@pytest.fixture
def png_factory():
    """Callable building PNG bytes of a given pixel size."""
    return make_png_bytes


# ─────────────────────────────────────────────────────────────────────────────
# In-memory collaborators for orchestration tests
# ─────────────────────────────────────────────────────────────────────────────

from pdf_resizer.export.interfaces import (  # noqa: E402
    Decoder,
    DocumentHandle,
    Renderer,
    Sink,
)


class FakeHandle(DocumentHandle):
    """PDF-like handle with fixed page sizes (mm)."""

    def __init__(self, page_sizes, kind="pdf"):
        self._page_sizes = list(page_sizes)
        self._kind = kind
        self.closed = False

    @property
    def kind(self):
        return self._kind

    @property
    def page_count(self):
        return len(self._page_sizes)

    def page_size(self, index):
        return self._page_sizes[index]

    def close(self):
        self.closed = True


class FakeDecoder(Decoder):
    """Returns a new FakeHandle per open() and remembers them."""

    def __init__(self, page_sizes=(A4_MM,), kind="pdf"):
        self.page_sizes = page_sizes
        self.kind = kind
        self.handles = []

    def open(self, data):
        handle = FakeHandle(self.page_sizes, self.kind)
        self.handles.append(handle)
        return handle


class FakeRenderer(Renderer):
    """Records render calls; raises for file pages listed in fail_pages."""

    def __init__(self, fail_pages=()):
        self.fail_pages = set(fail_pages)
        self.calls = []

    def render_png(self, handle, page_index, geometry, source, background=(255, 255, 255)):
        self.calls.append(("png", page_index))
        if page_index in self.fail_pages:
            raise RuntimeError(f"render failed on page {page_index}")
        return f"png:{page_index}".encode()

    def render_pdf(self, handle, pages, background=(255, 255, 255)):
        self.calls.append(("pdf", len(pages)))
        return f"pdf:{len(pages)}".encode()


class MemorySink(Sink):
    """Dict-backed sink; ``existing`` paths report as present."""

    def __init__(self, existing=()):
        self.files = {Path(p): b"old" for p in existing}
        self.writes = []
        self.directories = []

    def exists(self, path):
        return Path(path) in self.files

    def write(self, path, data):
        self.writes.append(Path(path))
        self.files[Path(path)] = data

    def list_directory(self, path):
        return sorted(p.name for p in self.files if p.parent == Path(path))

    def create_directory(self, path):
        self.directories.append(Path(path))


@pytest.fixture
def fake_decoder():
    return FakeDecoder()


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def memory_sink():
    return MemorySink()


@pytest.fixture
def sink_factory():
    """Callable building a MemorySink with pre-existing paths."""
    return MemorySink


@pytest.fixture
def decoder_factory():
    """Callable building a FakeDecoder for given page sizes."""
    return FakeDecoder


@pytest.fixture
def renderer_factory():
    """Callable building a FakeRenderer failing on given pages."""
    return FakeRenderer

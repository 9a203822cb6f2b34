"""PDF backend: page rasterizer and document codec.

Both are built on **PyMuPDF (fitz)**, which wraps the MuPDF C library.

* ``PdfRasterizer`` turns the pages of one document buffer into ``QImage``
  bitmaps at a given render scale.
* ``PdfCodec`` loads a working copy of a buffer, places raster images on its
  pages and serializes it back to bytes.

Any MuPDF failure on malformed input surfaces as ``DocumentLoadError``;
a buffer that cannot be written back surfaces as ``DocumentSaveError``.
"""
import logging
from typing import List, Tuple

import fitz  # pymupdf
from PySide6.QtGui import QImage

logger = logging.getLogger(__name__)


class DocumentLoadError(Exception):
    """The PDF bytes could not be parsed or rendered."""


class DocumentSaveError(Exception):
    """The annotated PDF could not be serialized."""


def open_document(data: bytes) -> fitz.Document:
    """Open *data* as a PDF, raising DocumentLoadError on failure."""
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise DocumentLoadError(f"Cannot open PDF: {exc}") from exc
    if doc.page_count == 0:
        doc.close()
        raise DocumentLoadError("PDF has no pages")
    return doc


class PdfRasterizer:
    """Rasterizes the pages of one document buffer.

    Usable as a context manager; the underlying fitz document is closed on
    exit.
    """

    def __init__(self, data: bytes):
        self._doc = open_document(data)

    def __enter__(self) -> "PdfRasterizer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._doc is not None:
            self._doc.close()
            self._doc = None

    def page_count(self) -> int:
        return self._doc.page_count

    def page_size(self, page_idx: int, scale: float) -> Tuple[int, int]:
        """Return the *(width, height)* in pixels of page *page_idx* at *scale*."""
        irect = (self._doc[page_idx].rect * fitz.Matrix(scale, scale)).irect
        return irect.width, irect.height

    def render_page(self, page_idx: int, scale: float) -> QImage:
        """Rasterise a single page and return a detached RGB QImage."""
        page = self._doc[page_idx]
        logger.debug("Rendering page %d/%d at scale %.2f (page size: %.0f×%.0f pt)",
                     page_idx + 1, self._doc.page_count, scale,
                     page.rect.width, page.rect.height)
        try:
            pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
        except (RuntimeError, ValueError) as exc:
            raise DocumentLoadError(f"Cannot render page {page_idx + 1}: {exc}") from exc
        img = QImage(pix.samples, pix.width, pix.height,
                     pix.stride, QImage.Format.Format_RGB888)
        # pix.samples is owned by fitz; copy so the image outlives it
        return img.copy()


class PdfCodec:
    """Load / modify / re-serialize PDF buffers."""

    def load(self, data: bytes) -> fitz.Document:
        return open_document(data)

    def get_pages(self, doc: fitz.Document) -> List[fitz.Page]:
        return [doc[i] for i in range(doc.page_count)]

    def page_size(self, page: fitz.Page) -> Tuple[float, float]:
        """Visual (rotation-aware) page size in PDF points."""
        return page.rect.width, page.rect.height

    def draw_image_on_page(self, page: fitz.Page, png_bytes: bytes,
                           rect: Tuple[float, float, float, float]) -> int:
        """Embed *png_bytes* and draw it into *rect* (visual x, y, width, height).

        The image is stretched to fill *rect* exactly.  Returns the image xref.
        """
        x, y, w, h = rect
        target = fitz.Rect(x, y, x + w, y + h)
        rot = page.rotation
        if rot:
            # insert_image works in native (pre-rotation) page space
            target = (target * page.derotation_matrix).normalize()
        return page.insert_image(target, stream=png_bytes,
                                 keep_proportion=False, rotate=rot)

    def serialize(self, doc: fitz.Document) -> bytes:
        """Return the document as bytes.

        Tries garbage=0 first (plain save, no object restructuring), then
        garbage=4 for a full cleanup pass if level 0 fails.
        """
        last_exc = None
        for garbage_level in (0, 4):
            try:
                data = doc.tobytes(garbage=garbage_level, deflate=True)
                logger.debug("Serialize OK (garbage=%d, %d bytes)", garbage_level, len(data))
                return data
            except (RuntimeError, ValueError) as exc:
                logger.warning("Serialize failed (garbage=%d): %s", garbage_level, exc)
                last_exc = exc
        raise DocumentSaveError(f"PDF could not be saved: {last_exc}") from last_exc

"""Bake page overlays into a new copy of the PDF.

Coordinate notes
----------------
An overlay has the size of its page's viewport at the render scale, i.e.
the page's visual (rotation-aware) size times the scale.  It is placed over
the full visual page rect starting at the origin and stretched to cover it,
so the render scale cancels out and each overlay pixel lands on the page
area it was drawn over.  ``PdfCodec.draw_image_on_page`` handles the
conversion to native (pre-rotation) coordinates for rotated pages.
"""
import logging
import time
from typing import Iterable, Optional

import annotation_overlay
from models import Document, PageSurface
from pdf_backend import PdfCodec

logger = logging.getLogger(__name__)


def bake_overlays(document: Document, surfaces: Iterable[PageSurface],
                  codec: Optional[PdfCodec] = None) -> Document:
    """Return a new Document with every surface's overlay drawn into its page.

    *document* is left untouched; the result keeps its name.  Pages without
    a surface, and surfaces whose overlay is blank, are left as they are.
    Raises DocumentLoadError / DocumentSaveError from the codec.
    """
    codec = codec or PdfCodec()
    t0 = time.perf_counter()
    by_page = {s.page_index: s for s in surfaces}
    logger.info("Baking overlays into %r (%d surface(s))", document.name, len(by_page))

    doc = codec.load(document.data)
    try:
        baked = 0
        for page_idx, page in enumerate(codec.get_pages(doc)):
            surface = by_page.get(page_idx)
            if surface is None:
                logger.debug("Page %d: no surface, skipped", page_idx)
                continue
            if not annotation_overlay.has_marks(surface.overlay):
                logger.debug("Page %d: blank overlay, skipped", page_idx)
                continue
            width, height = codec.page_size(page)
            png = annotation_overlay.to_png_bytes(surface.overlay)
            xref = codec.draw_image_on_page(page, png, (0, 0, width, height))
            ow, oh = surface.size()
            logger.debug("Page %d: overlay %dx%d px → %.1fx%.1f pt (xref %d, %d PNG bytes)",
                         page_idx, ow, oh, width, height, xref, len(png))
            baked += 1
        data = codec.serialize(doc)
    finally:
        doc.close()

    logger.info("Baked %d page(s) in %.3fs (%d → %d bytes)",
                baked, time.perf_counter() - t0, len(document.data), len(data))
    return Document(data=data, name=document.name)

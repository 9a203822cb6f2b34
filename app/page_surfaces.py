"""Render a document into one base/overlay surface pair per page."""
import logging
import time
from typing import Callable, List

import annotation_overlay
from models import Document, PageSurface
from pdf_backend import PdfRasterizer

logger = logging.getLogger(__name__)


class PageSurfaceManager:
    """Owns the current set of PageSurfaces.

    ``render`` rasterizes every page sequentially into a private list and
    only publishes it once all pages are done, so callers never see a
    partially rendered set.  If rasterization fails the previous set is kept
    and the error propagates.
    """

    def __init__(self, rasterizer_factory: Callable[[bytes], PdfRasterizer] = PdfRasterizer):
        self._rasterizer_factory = rasterizer_factory
        self._surfaces: List[PageSurface] = []
        self.page_count: int = 0
        self.scale: float = 0.0

    @property
    def surfaces(self) -> List[PageSurface]:
        return list(self._surfaces)

    def surface_for(self, page_index: int) -> PageSurface:
        return self._surfaces[page_index]

    def render(self, document: Document, scale: float) -> List[PageSurface]:
        t0 = time.perf_counter()
        rendered: List[PageSurface] = []
        with self._rasterizer_factory(document.data) as raster:
            count = raster.page_count()
            if scale <= 0:
                logger.warning("Render scale %.2f is not positive; no pages displayed", scale)
            else:
                for page_idx in range(count):
                    base = raster.render_page(page_idx, scale)
                    overlay = annotation_overlay.blank_overlay(base.width(), base.height())
                    rendered.append(PageSurface(page_index=page_idx, base=base, overlay=overlay))
        self.discard()
        self._surfaces = rendered
        self.page_count = count
        self.scale = scale
        logger.debug("Rendered %d page(s) of %r at scale %.2f in %.3fs",
                     len(rendered), document.name, scale, time.perf_counter() - t0)
        return list(rendered)

    def discard(self) -> None:
        """Drop every surface (their overlays are lost)."""
        self._surfaces = []
        self.page_count = 0

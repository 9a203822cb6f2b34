"""AnnotationSession: the editor state in one place.

The session owns the current Document, the tool controller, the page
surfaces, the pointer router, the undo history and the view.  All document
changes go through it:

    open_document → render
    save          → bake overlays, push old buffer, install new, render
    undo          → pop buffer, install, render

Everything runs on the GUI thread.  ``save`` and ``undo`` refuse to start
while another save/undo is still running (e.g. when called again from a
``surfaces_changed`` slot).
"""
import logging
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

import annotation_overlay
import pdf_exporter
from annotation_tools import PointerInputRouter, build_tool_table
from history import HistoryStack
from models import Document, EditorSettings, PageSurface
from page_surfaces import PageSurfaceManager
from pdf_backend import PdfCodec, PdfRasterizer, open_document
from tool_mode import ToolModeController
from view_controller import ViewController

logger = logging.getLogger(__name__)


class AnnotationSession(QObject):
    surfaces_changed = Signal()   # a render pass published a new surface set
    document_changed = Signal()   # a new Document buffer was installed
    overlays_changed = Signal()   # overlays were modified outside the pointer handlers

    def __init__(self, settings: Optional[EditorSettings] = None,
                 codec: Optional[PdfCodec] = None,
                 rasterizer_factory=PdfRasterizer,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self.settings = settings or EditorSettings()
        self.codec = codec or PdfCodec()
        self.document: Optional[Document] = None
        self.tools = ToolModeController(self.settings)
        self.pages = PageSurfaceManager(rasterizer_factory)
        self.router = PointerInputRouter(
            self.tools, build_tool_table(self.settings.rectangle_size)
        )
        self.history = HistoryStack(self.settings.history_capacity)
        self.view = ViewController(self.settings.default_scale,
                                   self.settings.scale_step,
                                   on_change=self.render)
        self._busy = False

    # ── Read-only helpers ────────────────────────────────────────────────────

    @property
    def surfaces(self) -> List[PageSurface]:
        return self.pages.surfaces

    def has_document(self) -> bool:
        return self.document is not None

    def can_undo(self) -> bool:
        return bool(self.history)

    # ── Document lifecycle ───────────────────────────────────────────────────

    def open_document(self, data: bytes, name: str) -> bool:
        """Replace the current document with *data*.

        Empty *data* is ignored (returns False).  Malformed PDFs raise
        DocumentLoadError and leave the session unchanged.
        """
        if not data:
            logger.info("No document data supplied; ignoring")
            return False
        open_document(data).close()
        logger.info("Opened %r (%d bytes)", name, len(data))
        self.history.clear()
        self.view.reset()
        self._install(Document(data=data, name=name))
        return True

    def render(self) -> List[PageSurface]:
        """Re-render every page of the current document at the view's scale.

        Old surfaces (and anything drawn on their overlays) are discarded;
        the router is re-attached to the new set.
        """
        if self.document is None:
            return []
        surfaces = self.pages.render(self.document, self.view.scale)
        self.view.set_total_pages(self.pages.page_count)
        self.router.attach(surfaces)
        self.surfaces_changed.emit()
        return surfaces

    def save(self) -> Optional[Document]:
        """Bake all overlays into a new document buffer and install it.

        The pre-save buffer is pushed onto the history.  Returns the new
        Document, or None if there is nothing to save or a save/undo is
        already in progress.
        """
        if self.document is None:
            logger.info("Save requested with no document loaded; ignoring")
            return None
        if self._busy:
            logger.warning("Save requested while another save/undo is running; ignoring")
            return None
        self._busy = True
        try:
            previous = self.document
            baked = pdf_exporter.bake_overlays(previous, self.pages.surfaces, self.codec)
            self.history.push(previous)
            logger.info("Saved %r; history now holds %d of %d",
                        baked.name, len(self.history), self.history.capacity)
            self._install(baked)
            return baked
        finally:
            self._busy = False

    def undo(self) -> Optional[Document]:
        """Restore the most recent history entry; None if there is none."""
        if self._busy:
            logger.warning("Undo requested while another save/undo is running; ignoring")
            return None
        self._busy = True
        try:
            previous = self.history.pop()
            if previous is None:
                logger.info("Nothing to undo")
                return None
            logger.info("Undo: restoring %d-byte buffer (%d left in history)",
                        len(previous.data), len(self.history))
            self._install(previous)
            return previous
        finally:
            self._busy = False

    def clear_overlays(self) -> None:
        """Erase every mark on every overlay; the document is untouched."""
        for surface in self.pages.surfaces:
            annotation_overlay.clear(surface.overlay)
        logger.debug("Cleared %d overlay(s)", len(self.pages.surfaces))
        self.overlays_changed.emit()

    def write_document(self, path: str) -> bool:
        """Write the current document buffer to *path*; False if none is loaded."""
        if self.document is None:
            return False
        with open(path, "wb") as f:
            f.write(self.document.data)
        logger.info("Wrote %r to %s", self.document.name, path)
        return True

    # ── Tool input ───────────────────────────────────────────────────────────

    def load_image(self, data: bytes) -> bool:
        return self.tools.load_image(data)

    # ── Internal ─────────────────────────────────────────────────────────────

    def _install(self, document: Document) -> None:
        self.document = document
        self.document_changed.emit()
        self.render()

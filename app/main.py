"""Main entry point for the PDF annotator native app."""
import logging
import os
import sys
from typing import Optional

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QApplication, QFileDialog, QMainWindow, QMessageBox

import data_store
from pdf_backend import DocumentLoadError, DocumentSaveError
from pdf_viewer import PDFViewerPanel
from session import AnnotationSession

logger = logging.getLogger(__name__)

_STATUS_TIMEOUT_MS = 4000


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("PDF Annotator")
        self.resize(1200, 900)

        self._settings = data_store.load_settings()
        data_store.set_debug(self._settings.debug_mode)

        self._session = AnnotationSession(self._settings, parent=self)
        self._viewer = PDFViewerPanel(self._session)
        self.setCentralWidget(self._viewer)

        self._setup_ui()
        self._session.document_changed.connect(self._update_title)

    def _setup_ui(self):
        file_menu = self.menuBar().addMenu("File")
        open_action = file_menu.addAction("Open…")
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self._open_file)
        download_action = file_menu.addAction("Download…")
        download_action.triggered.connect(self._download)
        file_menu.addSeparator()
        quit_action = file_menu.addAction("Quit")
        quit_action.setMenuRole(QAction.MenuRole.QuitRole)
        quit_action.triggered.connect(self.close)

        edit_menu = self.menuBar().addMenu("Edit")
        save_action = edit_menu.addAction("Save Annotations")
        save_action.setShortcut(QKeySequence.StandardKey.Save)
        save_action.triggered.connect(self._save)
        undo_action = edit_menu.addAction("Undo Save")
        undo_action.setShortcut(QKeySequence.StandardKey.Undo)
        undo_action.triggered.connect(self._undo)
        edit_menu.addSeparator()
        edit_menu.addAction("Clear Marks").triggered.connect(self._session.clear_overlays)

        self._viewer.open_requested.connect(self._open_file)
        self._viewer.save_requested.connect(self._save)
        self._viewer.undo_requested.connect(self._undo)
        self._viewer.download_requested.connect(self._download)
        self._viewer.image_requested.connect(self._load_image)

        self.statusBar()

    def _update_title(self):
        doc = self._session.document
        self.setWindowTitle(f"PDF Annotator — {doc.name}" if doc else "PDF Annotator")

    # ── File actions ─────────────────────────────────────────────────────────

    def _open_file(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Open PDF", data_store.last_dir(), "PDF files (*.pdf)"
        )
        if path:
            self.open_path(path)

    def open_path(self, path: str) -> bool:
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as exc:
            QMessageBox.warning(self, "Open PDF", f"Could not read {path}:\n{exc}")
            return False
        try:
            opened = self._session.open_document(data, os.path.basename(path))
        except DocumentLoadError as exc:
            logger.warning("Failed to open %s: %s", path, exc)
            QMessageBox.warning(self, "Open PDF", f"Could not open {os.path.basename(path)}:\n{exc}")
            return False
        if opened:
            try:
                data_store.save_session_config(os.path.dirname(path))
            except OSError as exc:
                logger.warning("Could not remember last folder: %s", exc)
        return opened

    def _download(self):
        doc = self._session.document
        if doc is None:
            QMessageBox.information(self, "Download", "No PDF loaded.")
            return
        default = os.path.join(data_store.last_dir(), doc.name)
        path, _ = QFileDialog.getSaveFileName(self, "Download PDF", default, "PDF files (*.pdf)")
        if not path:
            return
        try:
            self._session.write_document(path)
        except OSError as exc:
            QMessageBox.warning(self, "Download", f"Could not write {path}:\n{exc}")
            return
        self.statusBar().showMessage(f"Wrote {path}", _STATUS_TIMEOUT_MS)

    # ── Edit actions ─────────────────────────────────────────────────────────

    def _save(self):
        try:
            baked = self._session.save()
        except (DocumentLoadError, DocumentSaveError) as exc:
            logger.error("Save failed: %s", exc)
            QMessageBox.warning(self, "Save", f"Could not save annotations:\n{exc}")
            return
        if baked is not None:
            self.statusBar().showMessage("Annotations saved", _STATUS_TIMEOUT_MS)

    def _undo(self):
        try:
            restored = self._session.undo()
        except DocumentLoadError as exc:
            logger.error("Undo failed: %s", exc)
            QMessageBox.warning(self, "Undo", f"Could not restore the previous version:\n{exc}")
            return
        if restored is None:
            self.statusBar().showMessage("Nothing to undo", _STATUS_TIMEOUT_MS)

    def _load_image(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Load Image", data_store.last_dir(),
            "Images (*.png *.jpg *.jpeg *.gif *.bmp *.webp)"
        )
        if not path:
            return
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as exc:
            self.statusBar().showMessage(f"Could not read image: {exc}", _STATUS_TIMEOUT_MS)
            return
        if self._session.load_image(data):
            self._viewer.image_loaded()
        else:
            self.statusBar().showMessage(
                f"Could not decode {os.path.basename(path)}", _STATUS_TIMEOUT_MS
            )


def main(argv: Optional[list] = None):
    argv = sys.argv if argv is None else argv
    data_store.configure_logging()
    app = QApplication(argv)
    app.setApplicationName("PDF Annotator")
    window = MainWindow()
    window.show()
    if len(argv) > 1:
        window.open_path(argv[1])
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

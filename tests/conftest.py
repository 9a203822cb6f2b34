import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import fitz  # noqa: E402
import pytest  # noqa: E402
from PySide6.QtCore import Qt  # noqa: E402
from PySide6.QtGui import QImage  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

import annotation_overlay  # noqa: E402
import data_store  # noqa: E402
from models import EditorSettings, PageSurface  # noqa: E402
from session import AnnotationSession  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture(autouse=True)
def tmp_data_dir(tmp_path, monkeypatch):
    """Redirect settings and session config to a temporary directory."""
    monkeypatch.setattr(data_store, "SETTINGS_PATH", str(tmp_path / "settings.json"))
    monkeypatch.setattr(data_store, "SESSION_CONFIG_PATH",
                        str(tmp_path / "session_config.json"))
    return tmp_path


@pytest.fixture()
def make_pdf():
    """Factory: build a PDF in memory and return its bytes."""
    def _make(pages=1, width=200, height=300):
        doc = fitz.open()
        for i in range(pages):
            page = doc.new_page(width=width, height=height)
            page.insert_text((20, 40), f"Page {i + 1}")
        data = doc.tobytes()
        doc.close()
        return data
    return _make


@pytest.fixture()
def surface():
    base = QImage(200, 300, QImage.Format.Format_RGB888)
    base.fill(Qt.GlobalColor.white)
    return PageSurface(page_index=0, base=base,
                       overlay=annotation_overlay.blank_overlay(200, 300))


@pytest.fixture()
def session():
    return AnnotationSession(EditorSettings(default_scale=1.0))

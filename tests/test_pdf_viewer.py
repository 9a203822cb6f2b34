import pytest
from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import QMouseEvent

import annotation_overlay
from annotation_tools import POINTER_DOWN, POINTER_MOVE, POINTER_UP
from models import ToolMode
from pdf_viewer import PDFViewerPanel


@pytest.fixture()
def viewer(session):
    panel = PDFViewerPanel(session)
    yield panel
    panel.deleteLater()


def test_one_canvas_per_page(viewer, session, make_pdf):
    assert viewer.canvases() == []
    session.open_document(make_pdf(pages=3), "a.pdf")
    canvases = viewer.canvases()
    assert len(canvases) == 3
    assert [c.surface for c in canvases] == session.surfaces

    w, h = session.surfaces[0].size()
    assert (canvases[0].width(), canvases[0].height()) == (w + 10, h + 10)


def test_canvases_follow_rerender(viewer, session, make_pdf):
    session.open_document(make_pdf(pages=2), "a.pdf")
    session.view.zoom_in()
    assert [c.surface for c in viewer.canvases()] == session.surfaces


def test_canvas_pointer_events_reach_the_tool(viewer, session, make_pdf):
    session.open_document(make_pdf(), "a.pdf")
    canvas = viewer.canvases()[0]
    ox, oy = canvas.offset()
    canvas.pointer_event.emit(canvas, POINTER_DOWN, 20 + ox, 20 + oy)
    canvas.pointer_event.emit(canvas, POINTER_MOVE, 60 + ox, 20 + oy)
    canvas.pointer_event.emit(canvas, POINTER_UP, 60 + ox, 20 + oy)

    overlay = canvas.surface.overlay
    assert overlay.pixelColor(40, 20).alpha() == 255
    assert canvas.surface.last_pos == (60, 20)


def test_set_active_tool_updates_session(viewer, session):
    viewer.set_active_tool(ToolMode.RECTANGLE)
    assert session.tools.mode is ToolMode.RECTANGLE
    viewer.set_active_tool(ToolMode.TEXT)
    assert session.tools.mode is ToolMode.TEXT


def test_clear_button_path_erases_marks(viewer, session, make_pdf):
    session.open_document(make_pdf(), "a.pdf")
    surface = session.surfaces[0]
    annotation_overlay.draw_dot(surface.overlay, (30, 30), 8, "#000000")
    session.clear_overlays()
    assert not annotation_overlay.has_marks(surface.overlay)


# ── Mouse events on a canvas ──────────────────────────────────────────────────

def _mouse(kind, x, y, button, buttons):
    pos = QPointF(x, y)
    return QMouseEvent(kind, pos, pos, button, buttons, Qt.KeyboardModifier.NoModifier)


def _press(canvas, x, y):
    canvas.mousePressEvent(_mouse(QEvent.Type.MouseButtonPress, x, y,
                                  Qt.MouseButton.LeftButton, Qt.MouseButton.LeftButton))


def _move(canvas, x, y):
    canvas.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, x, y,
                                 Qt.MouseButton.NoButton, Qt.MouseButton.LeftButton))


def _release(canvas, x, y):
    canvas.mouseReleaseEvent(_mouse(QEvent.Type.MouseButtonRelease, x, y,
                                    Qt.MouseButton.LeftButton, Qt.MouseButton.NoButton))


def test_dragging_off_the_page_ends_a_freehand_stroke(viewer, session, make_pdf):
    session.open_document(make_pdf(), "a.pdf")
    canvas = viewer.canvases()[0]
    surface = canvas.surface

    _press(canvas, 55, 55)
    _move(canvas, 105, 55)
    assert surface.overlay.pixelColor(75, 50).alpha() == 255

    _move(canvas, 405, 55)
    assert surface.pointer_down is False
    _move(canvas, 105, 155)
    _release(canvas, 105, 155)

    # nothing drawn on the way back in from outside
    assert surface.overlay.pixelColor(145, 128).alpha() == 0
    assert surface.overlay.pixelColor(100, 150).alpha() == 0


def test_line_dragged_off_the_page_ends_at_the_edge(viewer, session, make_pdf):
    session.open_document(make_pdf(), "a.pdf")
    viewer.set_active_tool(ToolMode.LINE)
    canvas = viewer.canvases()[0]
    surface = canvas.surface

    _press(canvas, 25, 25)
    _move(canvas, 405, 25)
    _move(canvas, 105, 155)
    _release(canvas, 105, 155)

    assert surface.overlay.pixelColor(150, 20).alpha() == 255
    assert surface.overlay.pixelColor(100, 150).alpha() == 0
    assert surface.pointer_down is False


def test_next_press_after_leaving_starts_a_new_stroke(viewer, session, make_pdf):
    session.open_document(make_pdf(), "a.pdf")
    canvas = viewer.canvases()[0]
    surface = canvas.surface

    _press(canvas, 55, 55)
    _move(canvas, 405, 55)
    _release(canvas, 405, 55)

    _press(canvas, 55, 205)
    _move(canvas, 105, 205)
    _release(canvas, 105, 205)
    assert surface.overlay.pixelColor(75, 200).alpha() == 255


# ── Toolbar ───────────────────────────────────────────────────────────────────

def test_color_button_shows_stroke_color(viewer, session):
    session.tools.set_stroke_color("#ff0000")
    viewer._update_color_button()
    style = viewer._color_btn.styleSheet()
    assert "background-color: #ff0000;" in style
    assert style.count("{") == style.count("}") == 1


def test_placeholder_explains_empty_zoom(viewer, session, make_pdf):
    assert viewer._placeholder.text().startswith("No PDF loaded")
    session.open_document(make_pdf(), "a.pdf")
    session.view.set_scale(0)
    assert viewer.canvases() == []
    text = viewer._placeholder.text()
    assert "No PDF loaded" not in text
    assert "0% zoom" in text

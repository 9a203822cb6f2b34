"""Center panel: rendered pages with their annotation overlays, plus toolbar.

Each page is shown by a ``PageCanvas`` that paints the surface's base raster
and, on top of it, the overlay raster.  Mouse events on a canvas are
forwarded to the session's PointerInputRouter together with the canvas
border offset, so tool handlers always receive surface-local positions.
The panel never draws on overlays itself.
"""
import logging
from typing import Dict, List

from PySide6.QtCore import QEvent, QObject, QPointF, QRectF, QTimer, Qt, Signal
from PySide6.QtGui import QColor, QCursor, QPainter
from PySide6.QtWidgets import (
    QApplication, QButtonGroup, QColorDialog, QComboBox, QDoubleSpinBox,
    QHBoxLayout, QLabel, QLineEdit, QPlainTextEdit, QPushButton, QScrollArea,
    QSizePolicy, QVBoxLayout, QWidget,
)

from annotation_tools import POINTER_DOWN, POINTER_LEAVE, POINTER_MOVE, POINTER_UP
from models import FONTS, PageSurface, ToolMode
from session import AnnotationSession

logger = logging.getLogger(__name__)

_KEY_TOOL_MAP = {
    Qt.Key.Key_D: ToolMode.FREEHAND,
    Qt.Key.Key_L: ToolMode.LINE,
    Qt.Key.Key_T: ToolMode.TEXT,
    Qt.Key.Key_I: ToolMode.IMAGE,
    Qt.Key.Key_R: ToolMode.RECTANGLE,
}

_TOOL_BUTTONS = [
    (ToolMode.FREEHAND,  "Draw",  "Freehand drawing (D)"),
    (ToolMode.TEXT,      "Text",  "Place text (T)"),
    (ToolMode.LINE,      "Line",  "Straight line (L)"),
    (ToolMode.IMAGE,     "Image", "Place image (I)"),
    (ToolMode.RECTANGLE, "Rect",  "Rectangle (R)"),
]

_PAGE_BORDER   = 5            # px frame around each page canvas
_PAGE_SPACING  = 32           # px between page canvases
_BORDER_IDLE   = QColor("#9e9e9e")
_BORDER_ACTIVE = QColor("#ee6352")

_NO_DOCUMENT_TEXT = "No PDF loaded.\nUse Open… to choose a file."


class PageCanvas(QWidget):
    """Displays one PageSurface and emits pointer events in widget coordinates."""

    pointer_event = Signal(object, str, float, float)   # canvas, kind, x, y

    def __init__(self, surface: PageSurface, parent=None):
        super().__init__(parent)
        self.surface = surface
        self._hovered = False
        self._dragging = False
        self._left_during_drag = False
        self.setMouseTracking(True)
        w, h = surface.size()
        self.setFixedSize(w + 2 * _PAGE_BORDER, h + 2 * _PAGE_BORDER)
        self.setCursor(Qt.CursorShape.CrossCursor)

    def offset(self):
        """Top-left of the surface inside this widget."""
        return float(_PAGE_BORDER), float(_PAGE_BORDER)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), _BORDER_ACTIVE if self._hovered else _BORDER_IDLE)
        origin = QPointF(_PAGE_BORDER, _PAGE_BORDER)
        painter.drawImage(origin, self.surface.base)
        painter.drawImage(origin, self.surface.overlay)
        painter.end()

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self._dragging = True
            self._emit(POINTER_DOWN, event.position())
        event.accept()

    def mouseMoveEvent(self, event):
        pos = event.position()
        if self._dragging and not self._page_rect().contains(pos):
            # Qt grabs the mouse during a drag and holds back Leave until
            # release, so leaving the page is detected here
            self._dragging = False
            self._left_during_drag = True
            self._emit(POINTER_LEAVE, self._clamp_to_page(pos))
        elif not self._left_during_drag:
            self._emit(POINTER_MOVE, pos)
        event.accept()

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            if not self._left_during_drag:
                self._emit(POINTER_UP, event.position())
            self._dragging = False
            self._left_during_drag = False
        event.accept()

    def enterEvent(self, event):
        self._hovered = True
        self.update()
        super().enterEvent(event)

    def leaveEvent(self, event):
        self._hovered = False
        if not self._left_during_drag:
            # Leave events carry no position; use where the cursor is now
            pos = QPointF(self.mapFromGlobal(QCursor.pos()))
            self._emit(POINTER_LEAVE, self._clamp_to_page(pos))
        self._dragging = False
        super().leaveEvent(event)

    def _page_rect(self) -> QRectF:
        w, h = self.surface.size()
        return QRectF(_PAGE_BORDER, _PAGE_BORDER, w, h)

    def _clamp_to_page(self, pos: QPointF) -> QPointF:
        rect = self._page_rect()
        return QPointF(min(max(pos.x(), rect.left()), rect.right()),
                       min(max(pos.y(), rect.top()), rect.bottom()))

    def _emit(self, kind: str, pos: QPointF):
        self.pointer_event.emit(self, kind, pos.x(), pos.y())


class _ToolShortcutFilter(QObject):
    """App-level event filter: tool shortcuts and page navigation."""

    def __init__(self, viewer: "PDFViewerPanel", parent=None):
        super().__init__(parent)
        self._viewer = viewer

    def eventFilter(self, obj, event):
        if event.type() != QEvent.Type.KeyPress:
            return False
        # Don't steal keys while any text-input widget has focus
        fw = QApplication.focusWidget()
        if isinstance(fw, (QLineEdit, QPlainTextEdit, QDoubleSpinBox)):
            return False
        if event.modifiers() & (Qt.KeyboardModifier.ControlModifier
                                | Qt.KeyboardModifier.AltModifier
                                | Qt.KeyboardModifier.MetaModifier):
            return False
        key = event.key()
        if key in _KEY_TOOL_MAP:
            self._viewer.set_active_tool(_KEY_TOOL_MAP[key])
            return True
        if key == Qt.Key.Key_PageUp:
            self._viewer.prev_page()
            return True
        if key == Qt.Key.Key_PageDown:
            self._viewer.next_page()
            return True
        return False


class PDFViewerPanel(QWidget):
    open_requested     = Signal()
    save_requested     = Signal()
    undo_requested     = Signal()
    download_requested = Signal()
    image_requested    = Signal()

    def __init__(self, session: AnnotationSession, parent=None):
        super().__init__(parent)
        self._session = session
        self._canvases: List[PageCanvas] = []

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._build_action_bar())
        layout.addWidget(self._build_param_bar())

        # ── Scroll area with one canvas per page ─────────────────────────────
        self._scroll = QScrollArea()
        self._scroll.setAlignment(Qt.AlignmentFlag.AlignHCenter)
        self._scroll.setWidgetResizable(True)
        self._pages_widget = QWidget()
        self._pages_layout = QVBoxLayout(self._pages_widget)
        self._pages_layout.setSpacing(_PAGE_SPACING)
        self._pages_layout.setContentsMargins(20, 20, 20, 20)
        self._pages_layout.setAlignment(Qt.AlignmentFlag.AlignHCenter)
        self._placeholder = QLabel(_NO_DOCUMENT_TEXT)
        self._placeholder.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._pages_layout.addWidget(self._placeholder)
        self._scroll.setWidget(self._pages_widget)
        layout.addWidget(self._scroll, stretch=1)

        session.surfaces_changed.connect(self._rebuild_pages)
        session.overlays_changed.connect(self._repaint_pages)
        session.document_changed.connect(self._update_status)

        self._shortcut_filter = _ToolShortcutFilter(self)
        app = QApplication.instance()
        if app is not None:
            app.installEventFilter(self._shortcut_filter)

        self.set_active_tool(session.tools.mode)
        self._update_status()

    # ── Toolbar construction ──────────────────────────────────────────────────

    def _build_action_bar(self) -> QWidget:
        bar = QWidget()
        row = QHBoxLayout(bar)
        row.setContentsMargins(4, 4, 4, 0)
        row.setSpacing(4)

        for label, tip, signal in [
            ("Open…",     "Open a PDF file",                      self.open_requested),
            ("Save",      "Bake annotations into the PDF",        self.save_requested),
            ("Undo",      "Restore the PDF as it was before the last save",
                                                                  self.undo_requested),
            ("Download…", "Write the current PDF to disk",        self.download_requested),
        ]:
            btn = QPushButton(label)
            btn.setToolTip(tip)
            btn.clicked.connect(signal)
            row.addWidget(btn)
            if label == "Undo":
                self._undo_btn = btn
        clear_btn = QPushButton("Clear")
        clear_btn.setToolTip("Erase all unsaved marks on every page")
        clear_btn.clicked.connect(self._session.clear_overlays)
        row.addWidget(clear_btn)

        row.addSpacing(12)

        # ── Tool buttons ──
        self._tool_group = QButtonGroup(self)
        self._tool_group.setExclusive(True)
        self._tool_buttons: Dict[ToolMode, QPushButton] = {}
        for mode, label, tip in _TOOL_BUTTONS:
            btn = QPushButton(label)
            btn.setToolTip(tip)
            btn.setCheckable(True)
            btn.clicked.connect(lambda checked, m=mode: self.set_active_tool(m))
            self._tool_group.addButton(btn)
            self._tool_buttons[mode] = btn
            row.addWidget(btn)

        row.addSpacing(12)

        # ── Page navigation ──
        self._prev_btn = QPushButton("◀")
        self._prev_btn.setToolTip("Previous page")
        self._prev_btn.setFixedWidth(32)
        self._prev_btn.clicked.connect(self.prev_page)
        row.addWidget(self._prev_btn)
        self._page_counter = QLabel("Page — / —")
        self._page_counter.setFixedWidth(90)
        self._page_counter.setAlignment(Qt.AlignmentFlag.AlignCenter)
        row.addWidget(self._page_counter)
        self._next_btn = QPushButton("▶")
        self._next_btn.setToolTip("Next page")
        self._next_btn.setFixedWidth(32)
        self._next_btn.clicked.connect(self.next_page)
        row.addWidget(self._next_btn)

        row.addSpacing(12)

        # ── Zoom ──
        zoom_out = QPushButton("−")
        zoom_out.setFixedWidth(32)
        zoom_out.setToolTip("Zoom out")
        zoom_out.clicked.connect(self._session.view.zoom_out)
        row.addWidget(zoom_out)
        self._zoom_label = QLabel("")
        self._zoom_label.setFixedWidth(50)
        self._zoom_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        row.addWidget(self._zoom_label)
        zoom_in = QPushButton("+")
        zoom_in.setFixedWidth(32)
        zoom_in.setToolTip("Zoom in")
        zoom_in.clicked.connect(self._session.view.zoom_in)
        row.addWidget(zoom_in)

        row.addStretch(1)
        self._name_label = QLabel("")
        row.addWidget(self._name_label)
        return bar

    def _build_param_bar(self) -> QWidget:
        params = self._session.tools.params
        bar = QWidget()
        row = QHBoxLayout(bar)
        row.setContentsMargins(4, 2, 4, 4)
        row.setSpacing(4)

        self._mode_label = QLabel("")
        self._mode_label.setFixedWidth(60)
        row.addWidget(self._mode_label)

        # Stroke width doubles as the text tool's size field, so keep them apart
        self._width_label = QLabel("Stroke Width")
        self._width_edit = QLineEdit(f"{params.stroke_width:g}")
        self._width_edit.setFixedWidth(60)
        self._width_edit.editingFinished.connect(self._on_width_edited)

        self._font_size_label = QLabel("Font Size (px)")
        self._font_size_edit = QLineEdit(f"{params.font_size:g}")
        self._font_size_edit.setFixedWidth(60)
        self._font_size_edit.editingFinished.connect(self._on_font_size_edited)

        self._font_combo = QComboBox()
        self._font_combo.addItems(FONTS)
        self._font_combo.setCurrentText(params.font_family)
        self._font_combo.currentTextChanged.connect(self._session.tools.set_font)

        self._color_btn = QPushButton()
        self._color_btn.setToolTip("Select colour")
        self._color_btn.setFixedWidth(36)
        self._color_btn.clicked.connect(self._pick_color)
        self._update_color_button()

        self._text_edit = QPlainTextEdit()
        self._text_edit.setPlaceholderText("Your text…")
        self._text_edit.setFixedHeight(54)
        self._text_edit.textChanged.connect(
            lambda: self._session.tools.set_text(self._text_edit.toPlainText())
        )

        self._image_btn = QPushButton("Load Image…")
        self._image_btn.clicked.connect(self.image_requested)
        self._image_w = QDoubleSpinBox()
        self._image_h = QDoubleSpinBox()
        for spin, value in ((self._image_w, params.image_width),
                            (self._image_h, params.image_height)):
            spin.setRange(1.0, 10000.0)
            spin.setDecimals(0)
            spin.setValue(value)
            spin.valueChanged.connect(self._on_image_size_changed)
        self._image_w_label = QLabel("Width")
        self._image_h_label = QLabel("Height")

        self._param_widgets = {
            "width": [self._width_label, self._width_edit],
            "font": [self._font_size_label, self._font_size_edit, self._font_combo],
            "color": [self._color_btn],
            "text": [self._text_edit],
            "image": [self._image_btn, self._image_w_label, self._image_w,
                      self._image_h_label, self._image_h],
        }
        for group in self._param_widgets.values():
            for w in group:
                row.addWidget(w)
        row.addStretch(1)
        bar.setSizePolicy(QSizePolicy.Policy.Preferred, QSizePolicy.Policy.Fixed)
        return bar

    # ── Public API ────────────────────────────────────────────────────────────

    def set_active_tool(self, mode: ToolMode):
        self._session.tools.set_mode(mode)
        self._tool_buttons[mode].setChecked(True)
        self._mode_label.setText(mode.label())
        visible = {
            ToolMode.FREEHAND:  {"width", "color"},
            ToolMode.LINE:      {"width", "color"},
            ToolMode.RECTANGLE: {"width", "color"},
            ToolMode.TEXT:      {"font", "color", "text"},
            ToolMode.IMAGE:     {"image"},
        }[mode]
        for name, group in self._param_widgets.items():
            for w in group:
                w.setVisible(name in visible)

    def prev_page(self):
        self._session.view.prev_page()

    def next_page(self):
        self._session.view.next_page()

    def image_loaded(self):
        """Sync the size fields with the natural size of a freshly loaded image."""
        params = self._session.tools.params
        for spin, value in ((self._image_w, params.image_width),
                            (self._image_h, params.image_height)):
            spin.blockSignals(True)
            spin.setValue(value)
            spin.blockSignals(False)

    def canvases(self) -> List[PageCanvas]:
        return list(self._canvases)

    # ── Session signal handlers ───────────────────────────────────────────────

    def _rebuild_pages(self):
        """Replace every canvas with one per surface of the new render pass."""
        for canvas in self._canvases:
            self._pages_layout.removeWidget(canvas)
            canvas.deleteLater()
        self._canvases = []
        surfaces = self._session.surfaces
        self._placeholder.setVisible(not surfaces)
        if not surfaces:
            self._placeholder.setText(self._placeholder_text())
        for surface in surfaces:
            canvas = PageCanvas(surface)
            canvas.pointer_event.connect(self._on_pointer_event)
            self._pages_layout.addWidget(canvas, alignment=Qt.AlignmentFlag.AlignHCenter)
            self._canvases.append(canvas)
        self._update_status()
        QTimer.singleShot(0, self._scroll_to_current_page)

    def _placeholder_text(self) -> str:
        if self._session.has_document():
            scale = self._session.view.scale
            return f"Nothing to display at {round(scale * 100)}% zoom.\nZoom in to show the pages."
        return _NO_DOCUMENT_TEXT

    def _repaint_pages(self):
        for canvas in self._canvases:
            canvas.update()

    def _update_status(self):
        session = self._session
        view = session.view
        if session.has_document():
            self._page_counter.setText(f"Page {view.current_page} / {view.total_pages}")
            self._name_label.setText(session.document.name)
        else:
            self._page_counter.setText("Page — / —")
            self._name_label.setText("")
        self._prev_btn.setEnabled(view.current_page > 1)
        self._next_btn.setEnabled(view.current_page < view.total_pages)
        self._zoom_label.setText(f"{round(view.scale * 100)}%")
        self._undo_btn.setEnabled(session.can_undo())

    def _scroll_to_current_page(self):
        idx = self._session.view.current_page - 1
        if 0 <= idx < len(self._canvases):
            self._scroll.ensureWidgetVisible(self._canvases[idx], 0, 0)

    # ── Pointer routing ───────────────────────────────────────────────────────

    def _on_pointer_event(self, canvas: PageCanvas, kind: str, x: float, y: float):
        if self._session.router.dispatch(kind, canvas.surface, (x, y), canvas.offset()):
            canvas.update()

    # ── Parameter widgets ─────────────────────────────────────────────────────

    def _on_width_edited(self):
        tools = self._session.tools
        tools.set_stroke_width(self._width_edit.text())
        self._width_edit.setText(f"{tools.params.stroke_width:g}")

    def _on_font_size_edited(self):
        tools = self._session.tools
        tools.set_font_size(self._font_size_edit.text())
        self._font_size_edit.setText(f"{tools.params.font_size:g}")

    def _on_image_size_changed(self, _value=None):
        self._session.tools.set_image_size(self._image_w.value(), self._image_h.value())

    def _pick_color(self):
        current = QColor(self._session.tools.params.stroke_color)
        color = QColorDialog.getColor(current, self, "Select Color")
        if color.isValid():
            self._session.tools.set_stroke_color(color.name())
            self._update_color_button()

    def _update_color_button(self):
        self._color_btn.setStyleSheet(
            f"QPushButton {{ background-color: {self._session.tools.params.stroke_color};"
            " border: 2px solid #94a3b8; border-radius: 6px; }"
        )

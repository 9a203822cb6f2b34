"""Annotation overlay: draw annotation marks on a page's transparent overlay.

All helpers take the overlay ``QImage`` and positions in surface-local
pixels (the same space as the page's base raster at the current render
scale).  They paint **in place**; callers decide whether a mark adds to the
overlay (ink) or replaces it (placement preview, see ``clear``).
"""
from typing import List, Tuple

from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QFont, QImage, QPainter, QPen

from models import Pos

OVERLAY_FORMAT = QImage.Format.Format_ARGB32_Premultiplied


# ── Overlay lifecycle ─────────────────────────────────────────────────────────

def blank_overlay(width: int, height: int) -> QImage:
    """Return a fully transparent overlay of *width* × *height* pixels."""
    image = QImage(width, height, OVERLAY_FORMAT)
    image.fill(Qt.GlobalColor.transparent)
    return image


def clear(image: QImage) -> None:
    """Erase every mark on *image*."""
    image.fill(Qt.GlobalColor.transparent)


def has_marks(image: QImage) -> bool:
    """True if any pixel of *image* is not fully transparent."""
    if image.isNull():
        return False
    # Premultiplied transparent pixels are all-zero bytes.
    return bool(bytes(image.constBits()).strip(b"\x00"))


def to_png_bytes(image: QImage) -> bytes:
    """Encode *image* as PNG (alpha preserved)."""
    data = QByteArray()
    buffer = QBuffer(data)
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    image.save(buffer, "PNG")
    buffer.close()
    return bytes(data.data())


# ── Public drawing helpers ────────────────────────────────────────────────────

def draw_dot(image: QImage, pos: Pos, width: float, color: str) -> None:
    """Filled circle of radius *width* / 2 centred on *pos*."""
    painter = _painter(image)
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QColor(color))
    r = width / 2
    painter.drawEllipse(QPointF(*pos), r, r)
    painter.end()


def draw_segment(image: QImage, start: Pos, end: Pos, width: float, color: str) -> None:
    """Round-joined stroke from *start* to *end*."""
    painter = _painter(image)
    painter.setPen(_stroke_pen(width, color))
    painter.drawLine(QPointF(*start), QPointF(*end))
    painter.end()


def draw_rect_outline(image: QImage, pos: Pos, rect_w: float, rect_h: float,
                      width: float, color: str) -> None:
    """Unfilled rectangle with its top-left corner at *pos*."""
    painter = _painter(image)
    painter.setPen(_stroke_pen(width, color))
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawRect(QRectF(pos[0], pos[1], rect_w, rect_h))
    painter.end()


def text_line_origins(pos: Pos, text: str, font_size: float) -> List[Tuple[str, Pos]]:
    """Return *(line, baseline origin)* for every line of *text* placed at *pos*.

    Line *i* sits at ``y = pos.y + i * font_size + font_size / 2``,
    left-aligned at ``pos.x``.
    """
    x, y = pos
    return [
        (line, (x, y + i * font_size + font_size / 2))
        for i, line in enumerate(text.split("\n"))
    ]


def draw_text_block(image: QImage, pos: Pos, text: str, family: str,
                    font_size: float, color: str) -> None:
    """Draw (possibly multi-line) *text* with its first line anchored at *pos*."""
    painter = _painter(image)
    font = QFont(family)
    font.setPixelSize(max(1, round(font_size)))
    painter.setFont(font)
    painter.setPen(QColor(color))
    for line, (lx, ly) in text_line_origins(pos, text, font_size):
        painter.drawText(QPointF(lx, ly), line)
    painter.end()


def draw_image(image: QImage, pos: Pos, bitmap: QImage,
               width: float, height: float) -> None:
    """Draw *bitmap* scaled to *width* × *height* with its top-left at *pos*."""
    painter = _painter(image)
    painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
    painter.drawImage(QRectF(pos[0], pos[1], width, height), bitmap)
    painter.end()


# ── Internal helpers ──────────────────────────────────────────────────────────

def _painter(image: QImage) -> QPainter:
    painter = QPainter(image)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    return painter


def _stroke_pen(width: float, color: str) -> QPen:
    return QPen(QColor(color), width, Qt.PenStyle.SolidLine,
                Qt.PenCapStyle.RoundCap, Qt.PenJoinStyle.RoundJoin)

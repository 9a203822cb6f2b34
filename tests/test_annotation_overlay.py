from PySide6.QtCore import Qt
from PySide6.QtGui import QImage

import annotation_overlay


def test_blank_overlay_is_transparent():
    overlay = annotation_overlay.blank_overlay(40, 30)
    assert (overlay.width(), overlay.height()) == (40, 30)
    assert not annotation_overlay.has_marks(overlay)


def test_dot_marks_overlay_and_clear_erases_it():
    overlay = annotation_overlay.blank_overlay(40, 40)
    annotation_overlay.draw_dot(overlay, (20, 20), 10, "#000000")
    assert overlay.pixelColor(20, 20).alpha() == 255
    assert annotation_overlay.has_marks(overlay)

    annotation_overlay.clear(overlay)
    assert not annotation_overlay.has_marks(overlay)


def test_segment_uses_color_and_width():
    overlay = annotation_overlay.blank_overlay(100, 40)
    annotation_overlay.draw_segment(overlay, (10, 20), (90, 20), 8, "#ff0000")
    mid = overlay.pixelColor(50, 20)
    assert (mid.red(), mid.green(), mid.blue(), mid.alpha()) == (255, 0, 0, 255)
    assert overlay.pixelColor(50, 22).alpha() == 255
    assert overlay.pixelColor(50, 30).alpha() == 0


def test_text_line_origins_stack_lines_by_font_size():
    origins = annotation_overlay.text_line_origins((10, 50), "a\nbb\nccc", 12)
    assert origins == [
        ("a", (10, 56.0)),
        ("bb", (10, 68.0)),
        ("ccc", (10, 80.0)),
    ]


def test_draw_image_scales_bitmap():
    bitmap = QImage(2, 2, QImage.Format.Format_ARGB32)
    bitmap.fill(Qt.GlobalColor.blue)
    overlay = annotation_overlay.blank_overlay(50, 50)
    annotation_overlay.draw_image(overlay, (10, 10), bitmap, 20, 20)
    assert overlay.pixelColor(20, 20).blue() == 255
    assert overlay.pixelColor(35, 35).alpha() == 0


def test_png_bytes_keep_alpha():
    overlay = annotation_overlay.blank_overlay(20, 20)
    annotation_overlay.draw_dot(overlay, (10, 10), 6, "#00ff00")
    png = annotation_overlay.to_png_bytes(overlay)
    assert png.startswith(b"\x89PNG")

    decoded = QImage.fromData(png)
    assert decoded.hasAlphaChannel()
    assert decoded.pixelColor(0, 0).alpha() == 0
    assert decoded.pixelColor(10, 10).green() == 255

"""Data models for the PDF annotator."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from PySide6.QtGui import QImage

Pos = Tuple[float, float]  # surface-local pixel coordinates

FONTS = (
    "Arial",
    "Verdana",
    "Helvetica",
    "Tahoma",
    "Trebuchet",
    "Times",
    "Georgia",
    "Garamond",
    "Courier",
    "Brush",
)


@dataclass(frozen=True)
class Document:
    data: bytes  # raw PDF bytes, never mutated in place
    name: str    # display / download file name


class ToolMode(Enum):
    FREEHAND = "freehand"
    LINE = "line"
    TEXT = "text"
    IMAGE = "image"
    RECTANGLE = "rectangle"

    def label(self) -> str:
        return self.value.capitalize()


@dataclass
class ToolParameters:
    """Parameters shared by every tool (not tool-scoped)."""
    stroke_width: float = 10.0
    stroke_color: str = "#000000"
    font_family: str = "Helvetica"
    font_size: float = 10.0
    text: str = ""
    image: Optional[QImage] = None
    image_width: float = 50.0
    image_height: float = 50.0


@dataclass(eq=False)
class PageSurface:
    """Base raster + overlay raster for one rendered page.

    *base* is written once by the render pass and only read afterwards.
    *overlay* always has the same size as *base*; tool handlers draw on it.
    Surfaces compare by identity: a re-render produces new objects.
    """
    page_index: int
    base: QImage
    overlay: QImage
    last_pos: Pos = (0.0, 0.0)
    placement_pos: Pos = (0.0, 0.0)
    pointer_down: bool = False

    def size(self) -> Tuple[int, int]:
        return self.overlay.width(), self.overlay.height()


@dataclass
class EditorSettings:
    default_scale: float = 2.1       # initial render scale
    scale_step: float = 0.2          # zoom in/out increment
    history_capacity: int = 6        # number of prior saves kept for undo
    stroke_width: float = 10.0
    stroke_color: str = "#000000"
    font_family: str = "Helvetica"
    font_size: float = 10.0
    rectangle_size: float = 100.0    # side of the Rectangle tool outline (px)
    debug_mode: bool = False         # DEBUG-level logging

"""Active annotation tool and the parameters shared by all tools."""
import logging
import math
from typing import Optional

from PySide6.QtGui import QImage

from models import EditorSettings, ToolMode, ToolParameters

logger = logging.getLogger(__name__)


def parse_width(value) -> float:
    """Parse a width/size input; non-numeric, empty, zero or NaN give 1."""
    try:
        width = float(value)
    except (TypeError, ValueError):
        return 1.0
    if not width or math.isnan(width):
        return 1.0
    return width


class ToolModeController:
    """Holds the active ToolMode and the shared ToolParameters.

    Parameters are not tool-scoped: switching from Freehand to Line keeps
    the last stroke width and colour.  Nothing here touches an overlay.
    """

    def __init__(self, settings: Optional[EditorSettings] = None):
        settings = settings or EditorSettings()
        self.mode: ToolMode = ToolMode.FREEHAND
        self.params = ToolParameters(
            stroke_width=settings.stroke_width,
            stroke_color=settings.stroke_color,
            font_family=settings.font_family,
            font_size=settings.font_size,
        )

    def set_mode(self, mode: ToolMode) -> None:
        if mode != self.mode:
            logger.debug("Tool changed: %s → %s", self.mode.value, mode.value)
        self.mode = mode

    def set_stroke_width(self, value) -> None:
        self.params.stroke_width = parse_width(value)

    def set_stroke_color(self, color: str) -> None:
        self.params.stroke_color = color

    def set_font(self, family: str) -> None:
        self.params.font_family = family

    def set_font_size(self, value) -> None:
        self.params.font_size = parse_width(value)

    def set_text(self, text: str) -> None:
        self.params.text = text

    def set_image(self, image: QImage) -> None:
        """Use *image* for the Image tool, sized to its natural dimensions."""
        self.params.image = image
        self.params.image_width = float(image.width())
        self.params.image_height = float(image.height())

    def set_image_size(self, width, height) -> None:
        self.params.image_width = float(width)
        self.params.image_height = float(height)

    def load_image(self, data: bytes) -> bool:
        """Decode bitmap file *data* and make it the Image tool's bitmap.

        Returns False (and leaves the current image alone) if *data* is
        empty or cannot be decoded.
        """
        if not data:
            logger.info("No image data supplied; ignoring")
            return False
        image = QImage.fromData(data)
        if image.isNull():
            logger.warning("Could not decode image (%d bytes)", len(data))
            return False
        self.set_image(image)
        logger.debug("Image loaded: %dx%d", image.width(), image.height())
        return True

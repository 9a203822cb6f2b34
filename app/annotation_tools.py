"""Pointer input routing and the per-tool drawing logic.

Every tool implements the same four-method contract::

    on_down(pos, surface, params)
    on_move(pos, surface, params)
    on_up(pos, surface, params)
    on_leave(pos, surface, params)   # same as on_up

*pos* is already surface-local, *surface* is the PageSurface the pointer is
over, *params* is the ToolParameters snapshot read at dispatch time.
Handlers hold no per-page state of their own; everything they need is on the
surface or in *params*.

Freehand / Line / Rectangle are ink: each gesture adds to the overlay.
Text / Image are placement previews: each update wipes the overlay and
draws the object at the newest position only.
"""
import logging
from typing import Dict, Iterable, Optional

import annotation_overlay
from models import PageSurface, Pos, ToolMode, ToolParameters
from tool_mode import ToolModeController

logger = logging.getLogger(__name__)

RECTANGLE_SIZE = 100.0

POINTER_DOWN  = "down"
POINTER_MOVE  = "move"
POINTER_UP    = "up"
POINTER_LEAVE = "leave"


class ToolHandler:
    """Base handler: ignores everything except releasing the pointer."""

    is_placement_preview = False

    def on_down(self, pos: Pos, surface: PageSurface, params: ToolParameters) -> None:
        pass

    def on_move(self, pos: Pos, surface: PageSurface, params: ToolParameters) -> None:
        pass

    def on_up(self, pos: Pos, surface: PageSurface, params: ToolParameters) -> None:
        surface.pointer_down = False

    def on_leave(self, pos: Pos, surface: PageSurface, params: ToolParameters) -> None:
        self.on_up(pos, surface, params)


class FreehandTool(ToolHandler):

    def on_down(self, pos, surface, params):
        surface.last_pos = pos
        surface.pointer_down = True
        annotation_overlay.draw_dot(surface.overlay, pos,
                                    params.stroke_width, params.stroke_color)

    def on_move(self, pos, surface, params):
        if not surface.pointer_down:
            return
        annotation_overlay.draw_segment(surface.overlay, surface.last_pos, pos,
                                        params.stroke_width, params.stroke_color)
        surface.last_pos = pos


class LineTool(ToolHandler):
    """Straight line from the press position (anchor) to the release position."""

    def on_down(self, pos, surface, params):
        surface.last_pos = pos
        surface.pointer_down = True
        annotation_overlay.draw_dot(surface.overlay, pos,
                                    params.stroke_width, params.stroke_color)

    def on_up(self, pos, surface, params):
        if surface.pointer_down:
            annotation_overlay.draw_segment(surface.overlay, surface.last_pos, pos,
                                            params.stroke_width, params.stroke_color)
            surface.last_pos = pos
        surface.pointer_down = False


class TextTool(ToolHandler):

    is_placement_preview = True

    def on_down(self, pos, surface, params):
        surface.pointer_down = True
        self._place(pos, surface, params)

    def on_move(self, pos, surface, params):
        if surface.pointer_down:
            self._place(pos, surface, params)

    def _place(self, pos, surface, params):
        annotation_overlay.clear(surface.overlay)
        annotation_overlay.draw_text_block(surface.overlay, pos, params.text,
                                           params.font_family, params.font_size,
                                           params.stroke_color)
        surface.placement_pos = pos


class ImageTool(ToolHandler):

    is_placement_preview = True

    def on_down(self, pos, surface, params):
        surface.pointer_down = True

    def on_move(self, pos, surface, params):
        if not surface.pointer_down or params.image is None:
            return
        annotation_overlay.clear(surface.overlay)
        annotation_overlay.draw_image(surface.overlay, pos, params.image,
                                      params.image_width, params.image_height)
        surface.placement_pos = pos


class RectangleTool(ToolHandler):
    """Fixed-size outline at the press position; drag distance is ignored."""

    def __init__(self, size: float = RECTANGLE_SIZE):
        self.size = size

    def on_down(self, pos, surface, params):
        annotation_overlay.draw_rect_outline(surface.overlay, pos, self.size, self.size,
                                             params.stroke_width, params.stroke_color)


def build_tool_table(rectangle_size: float = RECTANGLE_SIZE) -> Dict[ToolMode, ToolHandler]:
    """Return the ToolMode → handler dispatch table."""
    return {
        ToolMode.FREEHAND:  FreehandTool(),
        ToolMode.LINE:      LineTool(),
        ToolMode.TEXT:      TextTool(),
        ToolMode.IMAGE:     ImageTool(),
        ToolMode.RECTANGLE: RectangleTool(rectangle_size),
    }


class PointerInputRouter:
    """Dispatches pointer events on attached surfaces to the active tool.

    Only surfaces from the latest render pass are attached; events that
    still reference an older surface are dropped.
    """

    def __init__(self, tools: ToolModeController,
                 handlers: Optional[Dict[ToolMode, ToolHandler]] = None):
        self._tools = tools
        self._handlers = handlers if handlers is not None else build_tool_table()
        self._attached: Dict[int, PageSurface] = {}

    def attach(self, surfaces: Iterable[PageSurface]) -> None:
        """Wire the router to a freshly rendered surface set (drops the old one)."""
        self._attached = {s.page_index: s for s in surfaces}
        logger.debug("Pointer router attached to %d surface(s)", len(self._attached))

    def detach(self) -> None:
        self._attached = {}

    def is_attached(self, surface: PageSurface) -> bool:
        return self._attached.get(surface.page_index) is surface

    def handler_for(self, mode: ToolMode) -> ToolHandler:
        return self._handlers[mode]

    @staticmethod
    def to_local(pos: Pos, offset: Pos) -> Pos:
        """Translate an on-screen position into surface-local coordinates."""
        return pos[0] - offset[0], pos[1] - offset[1]

    def dispatch(self, kind: str, surface: PageSurface, pos: Pos,
                 offset: Pos = (0.0, 0.0)) -> bool:
        """Route one pointer event; returns False if it was dropped."""
        if not self.is_attached(surface):
            logger.debug("Dropping %s event for detached page %d", kind, surface.page_index)
            return False
        local = self.to_local(pos, offset)
        handler = self.handler_for(self._tools.mode)
        params = self._tools.params
        if kind == POINTER_DOWN:
            handler.on_down(local, surface, params)
        elif kind == POINTER_MOVE:
            handler.on_move(local, surface, params)
        elif kind == POINTER_UP:
            handler.on_up(local, surface, params)
        elif kind == POINTER_LEAVE:
            handler.on_leave(local, surface, params)
        else:
            raise ValueError(f"Unknown pointer event: {kind!r}")
        return True

    def pointer_down(self, surface: PageSurface, pos: Pos, offset: Pos = (0.0, 0.0)) -> bool:
        return self.dispatch(POINTER_DOWN, surface, pos, offset)

    def pointer_move(self, surface: PageSurface, pos: Pos, offset: Pos = (0.0, 0.0)) -> bool:
        return self.dispatch(POINTER_MOVE, surface, pos, offset)

    def pointer_up(self, surface: PageSurface, pos: Pos, offset: Pos = (0.0, 0.0)) -> bool:
        return self.dispatch(POINTER_UP, surface, pos, offset)

    def pointer_leave(self, surface: PageSurface, pos: Pos, offset: Pos = (0.0, 0.0)) -> bool:
        return self.dispatch(POINTER_LEAVE, surface, pos, offset)

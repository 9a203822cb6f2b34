"""Page navigation and zoom."""
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_SCALE = 2.1
SCALE_STEP = 0.2


class ViewController:
    """Current page (1-based) and render scale.

    *on_change* is called after every page or scale change; the session
    hooks it to a full re-render.  ``total_pages`` is not tracked here
    independently: the session sets it from each render pass.
    """

    def __init__(self, scale: float = DEFAULT_SCALE, step: float = SCALE_STEP,
                 on_change: Optional[Callable[[], None]] = None):
        self.scale = scale
        self.step = step
        self.current_page = 1
        self.total_pages = 0
        self.on_change = on_change

    def set_total_pages(self, total: int) -> None:
        self.total_pages = total
        self.current_page = max(1, min(self.current_page, max(1, total)))

    def reset(self) -> None:
        self.current_page = 1
        self.total_pages = 0

    # ── Navigation ───────────────────────────────────────────────────────────

    def go_to_page(self, page: int) -> bool:
        """Move to *page* clamped to [1, total_pages]; True if it changed."""
        target = max(1, min(page, max(1, self.total_pages)))
        if target == self.current_page:
            return False
        logger.debug("Navigating to page %d/%d", target, self.total_pages)
        self.current_page = target
        self._changed()
        return True

    def next_page(self) -> bool:
        return self.go_to_page(self.current_page + 1)

    def prev_page(self) -> bool:
        return self.go_to_page(self.current_page - 1)

    # ── Zoom (unclamped) ─────────────────────────────────────────────────────

    def set_scale(self, scale: float) -> None:
        logger.debug("Scale %.2f → %.2f", self.scale, scale)
        self.scale = scale
        self._changed()

    def zoom_in(self) -> None:
        self.set_scale(self.scale + self.step)

    def zoom_out(self) -> None:
        self.set_scale(self.scale - self.step)

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

"""Per-view interaction state for a displayed query result.

Each displayed result owns one ``ResultView``.  It holds the current page,
scroll offsets and the (single) expanded cell, and derives the visible
window from them on every render.  Nothing here is shared between views.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from src.components.cell_formatter import CellFormatter, FormattedCell, format_cell, is_long_text
from src.components.query_result import QueryResult
from src.components.render_strategy import (
    DEFAULT_OPTIONS,
    RenderOptions,
    RenderWindow,
    Strategy,
    clamp_page,
    compute_window,
    max_scroll_offset,
    page_buttons,
    range_label,
    select_strategy,
    total_pages,
)

logger = logging.getLogger(__name__)

HORIZONTAL_SCROLL_STEP = 200


@dataclass(frozen=True)
class ExpandedCellRef:
    row_index: int
    cell_index: int


class ResultView:
    """Interaction state and window derivation for one result table."""

    def __init__(
        self,
        result: Optional[QueryResult] = None,
        options: Optional[RenderOptions] = None,
        formatter: Optional[CellFormatter] = None,
    ):
        self.options = options or DEFAULT_OPTIONS
        self.formatter = formatter
        self.load(result or QueryResult.empty())

    def load(self, result: QueryResult):
        """Show a new result and reset all interaction state."""
        self.result = result
        self.strategy = select_strategy(result.total_rows, self.options)
        self.current_page = 1
        self.scroll_top = 0.0
        self.scroll_left = 0.0
        self.can_scroll_left = False
        self.can_scroll_right = False
        self.expanded_cell: Optional[ExpandedCellRef] = None
        logger.debug(
            "Loaded result: rows=%d columns=%d strategy=%s",
            result.total_rows, len(result.columns), self.strategy.value,
        )

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    @property
    def total_pages(self) -> int:
        return total_pages(self.result.total_rows, self.options.items_per_page)

    def go_to_page(self, page: int) -> int:
        """Move to ``page`` (clamped) and reset the vertical scroll offset."""
        self.current_page = clamp_page(page, self.total_pages)
        self.scroll_top = 0.0
        return self.current_page

    def first_page(self) -> int:
        return self.go_to_page(1)

    def previous_page(self) -> int:
        return self.go_to_page(self.current_page - 1)

    def next_page(self) -> int:
        return self.go_to_page(self.current_page + 1)

    def last_page(self) -> int:
        return self.go_to_page(self.total_pages)

    def page_buttons(self) -> List[int]:
        if self.strategy is not Strategy.PAGINATED:
            return []
        return page_buttons(self.current_page, self.total_pages)

    # ------------------------------------------------------------------
    # Scrolling
    # ------------------------------------------------------------------

    def on_scroll(
        self,
        scroll_top: float,
        scroll_left: float = 0.0,
        scroll_width: float = 0.0,
        client_width: float = 0.0,
    ):
        """Record a scroll event from the table container."""
        if self.strategy is Strategy.VIRTUAL:
            limit = max_scroll_offset(self.result.total_rows, self.options)
            self.scroll_top = min(max(0.0, float(scroll_top)), float(limit))
        self.scroll_left = max(0.0, float(scroll_left))
        self.can_scroll_left = self.scroll_left > 0
        self.can_scroll_right = self.scroll_left < scroll_width - client_width

    def scroll_horizontally(
        self,
        direction: int,
        scroll_width: float,
        client_width: float,
        step: int = HORIZONTAL_SCROLL_STEP,
    ) -> float:
        """Shift the horizontal offset one step left (-1) or right (+1).

        Horizontal offset and the ``can_scroll_*`` flags are host-side state
        for hosts that report container geometry.  The Gradio app leaves
        horizontal scrolling to the browser's own overflow scrollbar.
        """
        limit = max(0.0, scroll_width - client_width)
        target = self.scroll_left + (step if direction > 0 else -step)
        self.on_scroll(self.scroll_top, min(max(0.0, target), limit), scroll_width, client_width)
        return self.scroll_left

    # ------------------------------------------------------------------
    # Cell expansion
    # ------------------------------------------------------------------

    def format(self, value) -> FormattedCell:
        return format_cell(value, self.formatter)

    def activate_cell(self, row_index: int, cell_index: int) -> bool:
        """Double-activate a cell; only long-text cells expand."""
        if not (0 <= row_index < self.result.total_rows and 0 <= cell_index < len(self.result.columns)):
            return False
        text = self.format(self.result.rows[row_index][cell_index]).text
        if not is_long_text(text, self.options.long_text_threshold):
            return False
        self.expanded_cell = ExpandedCellRef(row_index, cell_index)
        return True

    def pointer_down(self, row_index: Optional[int] = None, cell_index: Optional[int] = None):
        """Collapse the expanded cell when the pointer lands outside it."""
        if self.expanded_cell is None:
            return
        if (row_index, cell_index) != (self.expanded_cell.row_index, self.expanded_cell.cell_index):
            self.expanded_cell = None

    def collapse(self):
        self.expanded_cell = None

    def is_expanded(self, row_index: int, cell_index: int) -> bool:
        return self.expanded_cell == ExpandedCellRef(row_index, cell_index)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def window(self) -> RenderWindow:
        return compute_window(
            self.result.total_rows,
            self.strategy,
            page=self.current_page,
            scroll_offset=self.scroll_top,
            options=self.options,
        )

    def visible_rows(self) -> list:
        return self.window().slice(self.result.rows)

    def rows_for_render(self) -> Iterator[Tuple[int, List[FormattedCell]]]:
        """Yield ``(absolute_row_index, formatted_cells)`` for the window."""
        window = self.window()
        for offset, row in enumerate(window.slice(self.result.rows)):
            yield window.start_index + offset, [self.format(v) for v in row]

    def strategy_badge(self) -> str:
        if self.strategy is Strategy.VIRTUAL:
            return "Virtual Scroll"
        if self.strategy is Strategy.PAGINATED:
            return "Pagination"
        return ""

    def summary(self) -> str:
        count = self.result.total_rows
        label = f"{count:,} row{'' if count == 1 else 's'}"
        if self.strategy is Strategy.PAGINATED:
            label += f" | Page {self.current_page} of {self.total_pages} ({range_label(self.window())})"
        elif self.strategy is Strategy.VIRTUAL:
            label += f" | Showing {range_label(self.window())}"
        badge = self.strategy_badge()
        return f"{label} | {badge}" if badge else label

"""Rendering strategy and row window selection for large result sets.

Small results are rendered in full.  Above ``pagination_threshold`` rows
the view pages through the result ``items_per_page`` rows at a time, and
above ``virtual_scroll_threshold`` rows only the rows inside the scroll
viewport (plus a small buffer) are materialized, with spacer rows keeping
the scrollbar proportional to the full result.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

PAGINATION_THRESHOLD = 1000
VIRTUAL_SCROLL_THRESHOLD = 5000
ITEMS_PER_PAGE = 100
ITEM_HEIGHT = 40
CONTAINER_HEIGHT = 400
SCROLL_BUFFER = 5
MAX_PAGE_BUTTONS = 5


class Strategy(str, Enum):
    FULL = "full"
    PAGINATED = "paginated"
    VIRTUAL = "virtual"


class RenderOptions(BaseModel):
    """Thresholds and geometry used to pick and size the render window."""

    pagination_threshold: int = Field(default=PAGINATION_THRESHOLD, ge=0)
    virtual_scroll_threshold: int = Field(default=VIRTUAL_SCROLL_THRESHOLD, ge=0)
    items_per_page: int = Field(default=ITEMS_PER_PAGE, gt=0)
    item_height: int = Field(default=ITEM_HEIGHT, gt=0)
    container_height: int = Field(default=CONTAINER_HEIGHT, gt=0)
    scroll_buffer: int = Field(default=SCROLL_BUFFER, ge=0)
    long_text_threshold: int = Field(default=50, ge=0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_threshold_order(self):
        if self.pagination_threshold > self.virtual_scroll_threshold:
            raise ValueError(
                "pagination_threshold must not exceed virtual_scroll_threshold"
            )
        return self

    @property
    def viewport_rows(self) -> int:
        """Rows that fit in the scroll container."""
        return math.ceil(self.container_height / self.item_height)


DEFAULT_OPTIONS = RenderOptions()


@dataclass(frozen=True)
class RenderWindow:
    """Half-open range ``[start_index, end_index)`` of rows to materialize."""

    strategy: Strategy
    start_index: int
    end_index: int
    total_rows: int
    item_height: int = ITEM_HEIGHT

    def __post_init__(self):
        if not 0 <= self.start_index <= self.end_index <= self.total_rows:
            raise ValueError(
                f"invalid window [{self.start_index}, {self.end_index}) "
                f"for {self.total_rows} rows"
            )

    @property
    def size(self) -> int:
        return self.end_index - self.start_index

    @property
    def top_spacer_height(self) -> int:
        if self.strategy is not Strategy.VIRTUAL:
            return 0
        return self.start_index * self.item_height

    @property
    def bottom_spacer_height(self) -> int:
        if self.strategy is not Strategy.VIRTUAL:
            return 0
        return (self.total_rows - self.end_index) * self.item_height

    def slice(self, rows: Sequence) -> list:
        return list(rows[self.start_index:self.end_index])


def select_strategy(row_count: int, options: Optional[RenderOptions] = None) -> Strategy:
    """Pick the render strategy for a result of ``row_count`` rows."""
    options = options or DEFAULT_OPTIONS
    if row_count > options.virtual_scroll_threshold:
        return Strategy.VIRTUAL
    if row_count > options.pagination_threshold:
        return Strategy.PAGINATED
    return Strategy.FULL


# ------------------------------------------------------------------
# Pagination
# ------------------------------------------------------------------

def total_pages(row_count: int, items_per_page: int = ITEMS_PER_PAGE) -> int:
    return math.ceil(row_count / items_per_page)


def clamp_page(page: int, page_count: int) -> int:
    """Clamp a 1-based page number into ``[1, page_count]``; NaN or infinite pages become 1."""
    if isinstance(page, float) and not math.isfinite(page):
        return 1
    return max(1, min(max(1, page_count), int(page)))


def page_window(
    row_count: int, page: int, options: Optional[RenderOptions] = None
) -> RenderWindow:
    options = options or DEFAULT_OPTIONS
    page = clamp_page(page, total_pages(row_count, options.items_per_page))
    start = min((page - 1) * options.items_per_page, row_count)
    end = min(start + options.items_per_page, row_count)
    return RenderWindow(Strategy.PAGINATED, start, end, row_count, options.item_height)


def page_buttons(current_page: int, page_count: int, max_visible: int = MAX_PAGE_BUTTONS) -> List[int]:
    """Page numbers to offer as direct links, centred on the current page."""
    if page_count <= 0:
        return []
    current_page = clamp_page(current_page, page_count)
    first = max(1, current_page - max_visible // 2)
    last = min(page_count, first + max_visible - 1)
    return list(range(first, last + 1))


def range_label(window: RenderWindow) -> str:
    """Human readable position, e.g. ``101-200 of 4,321``."""
    if window.total_rows == 0:
        return "0 of 0"
    return f"{window.start_index + 1}-{window.end_index} of {window.total_rows:,}"


# ------------------------------------------------------------------
# Virtual scrolling
# ------------------------------------------------------------------

def virtual_window(
    row_count: int, scroll_offset: float, options: Optional[RenderOptions] = None
) -> RenderWindow:
    """Rows covering the viewport at ``scroll_offset`` plus the scroll buffer."""
    options = options or DEFAULT_OPTIONS
    offset = float(scroll_offset)
    if math.isnan(offset):
        offset = 0.0
    offset = min(max(0.0, offset), float(row_count * options.item_height))
    start = min(row_count, math.floor(offset / options.item_height))
    end = min(row_count, start + options.viewport_rows + options.scroll_buffer)
    return RenderWindow(Strategy.VIRTUAL, start, end, row_count, options.item_height)


def max_scroll_offset(row_count: int, options: Optional[RenderOptions] = None) -> int:
    """Largest useful vertical offset for a virtual-scroll container."""
    options = options or DEFAULT_OPTIONS
    return max(0, row_count * options.item_height - options.container_height)


# ------------------------------------------------------------------
# Window selection
# ------------------------------------------------------------------

def compute_window(
    row_count: int,
    strategy: Strategy,
    page: int = 1,
    scroll_offset: float = 0,
    options: Optional[RenderOptions] = None,
) -> RenderWindow:
    options = options or DEFAULT_OPTIONS
    if strategy is Strategy.VIRTUAL:
        return virtual_window(row_count, scroll_offset, options)
    if strategy is Strategy.PAGINATED:
        return page_window(row_count, page, options)
    return RenderWindow(Strategy.FULL, 0, row_count, row_count, options.item_height)


def select_window(
    rows: Sequence,
    strategy: Strategy,
    page: int = 1,
    scroll_offset: float = 0,
    options: Optional[RenderOptions] = None,
) -> list:
    """Return the contiguous slice of ``rows`` to render for ``strategy``."""
    window = compute_window(len(rows), strategy, page, scroll_offset, options)
    logger.debug(
        "Selected %s window [%d, %d) of %d rows",
        strategy.value, window.start_index, window.end_index, window.total_rows,
    )
    return window.slice(rows)

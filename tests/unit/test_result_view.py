"""Unit tests for per-view interaction state and table rendering"""
import logging

import pytest

from src.components.query_result import QueryResult
from src.components.render_strategy import RenderOptions, Strategy
from src.components.result_view import ExpandedCellRef, ResultView
from src.components.table_html import EMPTY_RESULT_HTML, render_table

LONG_NOTE = "A note that is comfortably longer than fifty characters in total length"


def make_result(row_count: int) -> QueryResult:
    rows = [[i, LONG_NOTE if i % 2 else "short"] for i in range(row_count)]
    return QueryResult(columns=["id", "note"], rows=rows, row_count=row_count)


class TestQueryResult:
    """Result container normalization"""

    def test_row_count_mismatch_uses_actual_rows(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = QueryResult(columns=["a"], rows=[[1], [2], [3]], row_count=10)
        assert result.total_rows == 3
        assert "does not match" in caplog.text
        view = ResultView(result)
        assert view.window().end_index == 3

    def test_from_dict_with_mapping_rows(self):
        result = QueryResult.from_dict({
            "columns": ["a", "b"],
            "rows": [{"a": 1, "b": "x"}, {"b": "y", "a": 2}],
            "row_count": 2,
        })
        assert result.rows == [[1, "x"], [2, "y"]]

    def test_from_dict_with_positional_rows(self):
        result = QueryResult.from_dict({"columns": ["a"], "rows": [(1,), (2,)]})
        assert result.rows == [[1], [2]]
        assert result.row_count == 2

    def test_empty(self):
        assert QueryResult.empty().is_empty
        assert QueryResult(columns=["a"], rows=[]).is_empty
        assert QueryResult(columns=[], rows=[[1]]).is_empty


class TestPaging:
    """Page navigation state"""

    def test_strategy_follows_row_count(self):
        assert ResultView(make_result(10)).strategy is Strategy.FULL
        assert ResultView(make_result(2500)).strategy is Strategy.PAGINATED
        assert ResultView(make_result(6000)).strategy is Strategy.VIRTUAL

    def test_navigation_is_clamped(self):
        view = ResultView(make_result(2500))
        assert view.previous_page() == 1
        assert view.next_page() == 2
        assert view.last_page() == 25
        assert view.next_page() == 25
        assert view.go_to_page(500) == 25
        assert view.first_page() == 1

    def test_rows_for_render_use_absolute_indices(self):
        view = ResultView(make_result(2500))
        view.go_to_page(2)
        indices = [index for index, _ in view.rows_for_render()]
        assert indices == list(range(100, 200))

    def test_page_buttons_only_when_paginated(self):
        assert ResultView(make_result(10)).page_buttons() == []
        assert ResultView(make_result(2500)).page_buttons() == [1, 2, 3, 4, 5]

    def test_summary(self):
        assert ResultView(make_result(1)).summary() == "1 row"
        view = ResultView(make_result(2500))
        assert view.summary() == "2,500 rows | Page 1 of 25 (1-100 of 2,500) | Pagination"
        assert ResultView(make_result(6000)).summary().endswith("Virtual Scroll")

    def test_load_resets_state(self):
        view = ResultView(make_result(2500))
        view.go_to_page(4)
        view.activate_cell(401, 1)
        view.load(make_result(20))
        assert view.current_page == 1
        assert view.expanded_cell is None
        assert view.strategy is Strategy.FULL


class TestScrolling:
    """Vertical and horizontal scroll state"""

    def test_virtual_scroll_moves_window(self):
        view = ResultView(make_result(6000))
        view.on_scroll(800)
        assert view.window().start_index == 20
        assert [row[0] for row in view.visible_rows()] == list(range(20, 35))

    def test_page_change_resets_scroll_offset(self):
        view = ResultView(make_result(6000))
        view.on_scroll(800)
        view.go_to_page(3)
        assert view.scroll_top == 0

    def test_vertical_offset_ignored_outside_virtual_mode(self):
        view = ResultView(make_result(2500))
        view.on_scroll(800)
        assert view.scroll_top == 0

    def test_vertical_offset_is_clamped(self):
        view = ResultView(make_result(6000))
        view.on_scroll(10**9)
        assert view.scroll_top == 6000 * 40 - 400
        view.on_scroll(-10)
        assert view.scroll_top == 0

    def test_horizontal_scroll_flags(self):
        view = ResultView(make_result(10))
        view.on_scroll(0, 0, 1000, 400)
        assert view.can_scroll_left is False
        assert view.can_scroll_right is True

        assert view.scroll_horizontally(1, 1000, 400) == 200
        assert view.scroll_horizontally(1, 1000, 400) == 400
        assert view.scroll_horizontally(1, 1000, 400) == 600
        assert view.can_scroll_right is False
        assert view.can_scroll_left is True

        assert view.scroll_horizontally(-1, 1000, 400) == 400
        view.scroll_horizontally(-1, 1000, 400)
        assert view.scroll_horizontally(-1, 1000, 400) == 0
        assert view.can_scroll_left is False


class TestCellExpansion:
    """At most one long-text cell is expanded at a time"""

    def test_short_cell_does_not_expand(self):
        view = ResultView(make_result(10))
        assert view.activate_cell(0, 1) is False
        assert view.expanded_cell is None

    def test_long_cell_expands(self):
        view = ResultView(make_result(10))
        assert view.activate_cell(1, 1) is True
        assert view.expanded_cell == ExpandedCellRef(1, 1)
        assert view.is_expanded(1, 1)

    def test_only_one_cell_expanded(self):
        view = ResultView(make_result(10))
        view.activate_cell(1, 1)
        view.activate_cell(3, 1)
        assert view.expanded_cell == ExpandedCellRef(3, 1)
        assert not view.is_expanded(1, 1)

    def test_pointer_outside_collapses(self):
        view = ResultView(make_result(10))
        view.activate_cell(1, 1)
        view.pointer_down(1, 1)
        assert view.expanded_cell is not None
        view.pointer_down(2, 0)
        assert view.expanded_cell is None

    def test_pointer_on_background_collapses(self):
        view = ResultView(make_result(10))
        view.activate_cell(1, 1)
        view.pointer_down()
        assert view.expanded_cell is None

    @pytest.mark.parametrize("row, cell", [(-1, 0), (10, 1), (1, 2)])
    def test_out_of_range_cell(self, row, cell):
        view = ResultView(make_result(10))
        assert view.activate_cell(row, cell) is False

    def test_custom_long_text_threshold(self):
        view = ResultView(make_result(10), options=RenderOptions(long_text_threshold=3))
        assert view.activate_cell(0, 1) is True


class TestRenderTable:
    """HTML output of the visible window"""

    def test_empty_result(self):
        assert render_table(ResultView()) == EMPTY_RESULT_HTML

    def test_full_render_escapes_html(self):
        result = QueryResult(columns=["<b>"], rows=[["<script>"]])
        output = render_table(ResultView(result))
        assert "&lt;b&gt;" in output
        assert "&lt;script&gt;" in output
        assert "<script>" not in output

    def test_virtual_spacers(self):
        view = ResultView(make_result(6000))
        output = render_table(view)
        assert 'style="height: 0px"' in output
        assert f'style="height: {(6000 - 15) * 40}px"' in output
        assert output.count('class="virtual-row"') == 15

    def test_spacers_can_be_omitted(self):
        output = render_table(ResultView(make_result(6000)), with_spacers=False)
        assert "virtual-spacer" not in output

    def test_expanded_cell_classes(self):
        view = ResultView(make_result(10))
        output = render_table(view)
        assert output.count("cell-clamped") == 5
        view.activate_cell(1, 1)
        output = render_table(view)
        assert output.count("cell-clamped") == 4
        assert output.count("cell-expanded") == 1

    def test_paginated_row_numbers(self):
        view = ResultView(make_result(2500))
        view.go_to_page(3)
        output = render_table(view)
        assert '<td class="row-index">201</td>' in output
        assert '<td class="row-index">300</td>' in output
        assert '<td class="row-index">301</td>' not in output


class TestRaggedRows:
    """Rows with the wrong number of cells are normalized to the header width"""

    def test_short_rows_are_padded(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = QueryResult(columns=["a", "b", "c"], rows=[[1], [1, 2, 3]])
        assert result.rows == [[1, None, None], [1, 2, 3]]
        assert "do not have 3 cells" in caplog.text

    def test_long_rows_are_truncated(self):
        result = QueryResult(columns=["a"], rows=[[1, 2, 3]])
        assert result.rows == [[1]]

    def test_activate_cell_on_short_row(self):
        view = ResultView(QueryResult(columns=["id", "note"], rows=[[1]]))
        assert view.activate_cell(0, 1) is False
        assert view.expanded_cell is None

    def test_render_short_row(self):
        output = render_table(ResultView(QueryResult(columns=["id", "note"], rows=[[1]])))
        assert output.count("cell-null") == 1


class TestHorizontalOverflow:
    """The table sits in a container that scrolls sideways on its own"""

    def test_table_wrapped_in_scroll_container(self):
        output = render_table(ResultView(make_result(3)))
        assert output.startswith('<div class="result-scroll"><table class="result-table">')
        assert output.endswith("</table></div>")

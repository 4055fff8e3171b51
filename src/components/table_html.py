"""HTML rendering of the visible result window"""
import html

from src.components.cell_formatter import cell_style
from src.components.result_view import ResultView
from src.components.render_strategy import Strategy

TABLE_CSS = """
<style>
    .result-scroll { overflow-x: auto; max-width: 100%; }
    .result-table { border-collapse: collapse; width: 100%; font-size: 13px; }
    .result-table th { position: sticky; top: 0; background: #f3f4f6; text-align: left; padding: 8px 12px; }
    .result-table td { padding: 8px 12px; border-bottom: 1px solid #e5e7eb; vertical-align: top; }
    .result-table tr.virtual-row td { height: 40px; box-sizing: border-box; }
    .result-table tr.virtual-spacer td { padding: 0; border: none; }
    .result-table .row-index { color: #9ca3af; font-family: monospace; }
    .cell-null { color: #9ca3af; font-style: italic; }
    .cell-number { color: #2563eb; font-family: monospace; }
    .cell-boolean { color: #16a34a; font-weight: 500; }
    .cell-temporal { color: #9333ea; font-family: monospace; }
    .cell-json { color: #ea580c; font-family: monospace; font-size: 12px; white-space: pre-wrap; }
    .cell-text { white-space: pre-wrap; }
    .cell-clamped {
        display: -webkit-box; -webkit-line-clamp: 3; -webkit-box-orient: vertical;
        overflow: hidden; cursor: zoom-in; word-break: break-word;
    }
    .cell-expanded { background: #fffbeb; outline: 1px solid #f59e0b; word-break: break-word; }
    .result-empty { text-align: center; color: #6b7280; padding: 32px; }
</style>
"""

EMPTY_RESULT_HTML = '<div class="result-empty"><p>No results found</p></div>'


def _spacer(height: int, colspan: int) -> str:
    return (
        f'<tr class="virtual-spacer" style="height: {height}px">'
        f'<td colspan="{colspan}"></td></tr>'
    )


def render_table(view: ResultView, with_spacers: bool = True, show_row_index: bool = True) -> str:
    """Render the view's current window as an HTML table.

    In virtual-scroll mode spacer rows above and below the window keep the
    table as tall as the full result.  Hosts that drive scrolling from their
    own control instead of the native scrollbar pass ``with_spacers=False``.
    """
    result = view.result
    if result.is_empty:
        return EMPTY_RESULT_HTML

    window = view.window()
    virtual = view.strategy is Strategy.VIRTUAL
    colspan = len(result.columns) + (1 if show_row_index else 0)

    parts = ['<div class="result-scroll"><table class="result-table">', "<thead><tr>"]
    if show_row_index:
        parts.append("<th>#</th>")
    parts.extend(f"<th>{html.escape(c)}</th>" for c in result.columns)
    parts.append("</tr></thead><tbody>")

    if virtual and with_spacers:
        parts.append(_spacer(window.top_spacer_height, colspan))

    row_class = ' class="virtual-row"' if virtual else ""
    for row_index, cells in view.rows_for_render():
        parts.append(f"<tr{row_class}>")
        if show_row_index:
            parts.append(f'<td class="row-index">{row_index + 1}</td>')
        for cell_index, cell in enumerate(cells):
            style = cell_style(
                cell,
                expanded=view.is_expanded(row_index, cell_index),
                long_text_threshold=view.options.long_text_threshold,
            )
            title = f' title="{html.escape(style.title)}"' if style.title else ""
            parts.append(
                f'<td><div class="{style.class_attr}"{title}>{html.escape(cell.text)}</div></td>'
            )
        parts.append("</tr>")

    if virtual and with_spacers:
        parts.append(_spacer(window.bottom_spacer_height, colspan))

    parts.append("</tbody></table></div>")
    return "".join(parts)

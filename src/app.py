"""Gradio web interface for the query result viewer"""
import logging
import os
from typing import Optional

import gradio as gr

from src.config import settings
from src.components.errors import ExportError, QueryExecutionError
from src.components.executor import ResultSource, SQLiteDatabase
from src.components.exporter import export_csv
from src.components.query_result import QueryResult
from src.components.render_strategy import RenderOptions, Strategy, max_scroll_offset
from src.components.result_view import ResultView
from src.components.table_html import TABLE_CSS, render_table

logger = logging.getLogger(__name__)

EXAMPLE_QUERIES = {
    "Regions (full render)": "SELECT * FROM regions",
    "Orders (paginated)": "SELECT * FROM orders ORDER BY order_id",
    "Events (virtual scroll)": "SELECT * FROM events ORDER BY event_id",
}


class ResultViewerApp:
    """Runs queries and renders their results with the matching strategy"""

    def __init__(
        self,
        source: ResultSource,
        options: Optional[RenderOptions] = None,
        csv_quoting: str = "lenient",
        export_filename: str = "query_results.csv",
    ):
        self.source = source
        self.options = options or RenderOptions()
        self.csv_quoting = csv_quoting
        self.export_filename = export_filename
        logger.info(
            "Startup config: pagination_threshold=%s virtual_scroll_threshold=%s items_per_page=%s csv_quoting=%s",
            self.options.pagination_threshold,
            self.options.virtual_scroll_threshold,
            self.options.items_per_page,
            self.csv_quoting,
        )

    # ------------------------------------------------------------------
    # Session State Management (per-user isolation)
    # ------------------------------------------------------------------

    def create_session_state(self) -> dict:
        """Create a new session state dictionary for a user session."""
        return {"view": ResultView(options=self.options), "last_sql": ""}

    def _ensure_session_initialized(self, session_state: Optional[dict]) -> dict:
        if session_state is None or session_state.get("view") is None:
            session_state = self.create_session_state()
        return session_state

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self, view: ResultView, status: str = ""):
        """Outputs shared by every handler: table, summary, controls, status."""
        paginated = view.strategy is Strategy.PAGINATED
        virtual = view.strategy is Strategy.VIRTUAL
        summary = "" if view.result.is_empty else f"**{view.summary()}**"
        pages = view.page_buttons()
        page_hint = f"Pages: {', '.join(str(p) for p in pages)}" if pages else ""
        return (
            render_table(view, with_spacers=False),
            summary,
            gr.update(visible=paginated),
            gr.update(value=view.current_page, maximum=max(1, view.total_pages)),
            page_hint,
            gr.update(
                visible=virtual,
                value=view.scroll_top,
                maximum=max_scroll_offset(view.result.total_rows, self.options) or 1,
                step=self.options.item_height,
            ),
            status,
        )

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def run_query(self, sql: str, session_state: Optional[dict] = None):
        session_state = self._ensure_session_initialized(session_state)
        view = session_state["view"]
        try:
            result = self.source.run(sql)
        except QueryExecutionError as e:
            view.load(QueryResult.empty())
            return self._render(view, f"⚠️ {e}") + (session_state,)
        session_state["last_sql"] = sql
        view.load(result)
        return self._render(view) + (session_state,)

    def change_page(self, action: str, page_number, session_state: Optional[dict] = None):
        session_state = self._ensure_session_initialized(session_state)
        view = session_state["view"]
        if action == "first":
            view.first_page()
        elif action == "previous":
            view.previous_page()
        elif action == "next":
            view.next_page()
        elif action == "last":
            view.last_page()
        else:
            view.go_to_page(int(page_number or 1))
        return self._render(view) + (session_state,)

    def scroll_to(self, offset, session_state: Optional[dict] = None):
        session_state = self._ensure_session_initialized(session_state)
        view = session_state["view"]
        view.on_scroll(float(offset or 0))
        return self._render(view) + (session_state,)

    def expand_cell(self, row_number, column_number, session_state: Optional[dict] = None):
        """Expand a cell given its 1-based row and column numbers."""
        session_state = self._ensure_session_initialized(session_state)
        view = session_state["view"]
        row_index = int(row_number or 0) - 1
        cell_index = int(column_number or 0) - 1
        # A different cell counts as an interaction outside the expanded one
        view.pointer_down(row_index, cell_index)
        status = ""
        if not view.activate_cell(row_index, cell_index):
            status = "Only cells longer than %d characters can be expanded." % view.options.long_text_threshold
        return self._render(view, status) + (session_state,)

    def collapse_cell(self, session_state: Optional[dict] = None):
        session_state = self._ensure_session_initialized(session_state)
        view = session_state["view"]
        view.collapse()
        return self._render(view) + (session_state,)

    def export_csv(self, session_state: Optional[dict] = None) -> Optional[str]:
        """Export every row of the current result as a CSV file."""
        session_state = self._ensure_session_initialized(session_state)
        return export_csv(
            session_state["view"].result,
            filename=self.export_filename,
            quoting=self.csv_quoting,
        )

    # ------------------------------------------------------------------
    # Interface
    # ------------------------------------------------------------------

    def create_interface(self) -> gr.Blocks:
        """Create Gradio interface"""
        with gr.Blocks(title="Query Result Viewer") as demo:
            gr.HTML(TABLE_CSS)
            session_state = gr.State(value=self.create_session_state())

            gr.Markdown("## Query Result Viewer")
            with gr.Row():
                sql_input = gr.Textbox(
                    label="SQL",
                    lines=3,
                    value=next(iter(EXAMPLE_QUERIES.values())),
                    scale=4,
                )
                run_btn = gr.Button("Run", variant="primary", scale=1)
            with gr.Row():
                example_buttons = {
                    gr.Button(label, size="sm", variant="secondary"): query
                    for label, query in EXAMPLE_QUERIES.items()
                }

            with gr.Row():
                summary = gr.Markdown()
                export_btn = gr.Button("Export All", variant="secondary", size="sm")
            export_file = gr.File(label="Download", visible=False)
            status = gr.Markdown()

            table = gr.HTML()
            scroll_slider = gr.Slider(
                label="Scroll position",
                minimum=0,
                maximum=1,
                value=0,
                visible=False,
            )

            with gr.Row(visible=False) as page_controls:
                first_btn = gr.Button("« First", size="sm")
                prev_btn = gr.Button("‹ Prev", size="sm")
                page_number = gr.Number(label="Page", value=1, precision=0, minimum=1)
                next_btn = gr.Button("Next ›", size="sm")
                last_btn = gr.Button("Last »", size="sm")
            page_hint = gr.Markdown()

            with gr.Accordion("Expand a long cell", open=False):
                with gr.Row():
                    expand_row = gr.Number(label="Row #", value=1, precision=0, minimum=1)
                    expand_col = gr.Number(label="Column #", value=1, precision=0, minimum=1)
                    expand_btn = gr.Button("Expand", size="sm")
                    collapse_btn = gr.Button("Collapse", size="sm")

            outputs = [table, summary, page_controls, page_number, page_hint, scroll_slider, status, session_state]

            run_btn.click(self.run_query, inputs=[sql_input, session_state], outputs=outputs)
            sql_input.submit(self.run_query, inputs=[sql_input, session_state], outputs=outputs)
            for btn, query in example_buttons.items():
                btn.click(lambda q=query: q, outputs=[sql_input]).then(
                    self.run_query, inputs=[sql_input, session_state], outputs=outputs
                )

            for btn, action in (
                (first_btn, "first"), (prev_btn, "previous"),
                (next_btn, "next"), (last_btn, "last"),
            ):
                btn.click(
                    lambda n, s, a=action: self.change_page(a, n, s),
                    inputs=[page_number, session_state],
                    outputs=outputs,
                )
            page_number.submit(
                lambda n, s: self.change_page("goto", n, s),
                inputs=[page_number, session_state],
                outputs=outputs,
            )

            scroll_slider.release(self.scroll_to, inputs=[scroll_slider, session_state], outputs=outputs)
            expand_btn.click(self.expand_cell, inputs=[expand_row, expand_col, session_state], outputs=outputs)
            collapse_btn.click(self.collapse_cell, inputs=[session_state], outputs=outputs)

            def handle_export(session_state):
                try:
                    path = self.export_csv(session_state)
                except ExportError as e:
                    logger.error("CSV export failed: %s", e)
                    gr.Warning(f"Export failed: {e}")
                    return gr.File(visible=False)
                if path:
                    return gr.File(value=path, visible=True)
                gr.Info("No results to export. Run a query first.")
                return gr.File(visible=False)

            export_btn.click(handle_export, inputs=[session_state], outputs=[export_file])

        return demo


def create_sample_db():
    """Create sample database if it doesn't exist or is empty"""
    db_path = settings.database_url.replace("sqlite:///", "")
    if not os.path.exists(db_path) or os.path.getsize(db_path) == 0:
        SQLiteDatabase.create_sample_database(db_path, event_count=settings.sample_row_count)


def main():
    """Main entry point"""
    if settings.database_type == "sqlite":
        create_sample_db()

    source = ResultSource(settings.database_url, max_rows=settings.max_rows_return)
    app = ResultViewerApp(
        source,
        options=settings.render_options(),
        csv_quoting=settings.csv_quoting,
        export_filename=settings.export_filename,
    )
    demo = app.create_interface()

    demo.queue(default_concurrency_limit=1)
    # Prefer passing theme to launch() (Gradio 6+); fall back to Blocks if unsupported
    try:
        demo.launch(
            server_name=settings.server_host,
            server_port=settings.gradio_server_port,
            share=settings.gradio_share,
            theme=gr.themes.Soft(),
        )
    except TypeError:
        # Older Gradio versions don't accept theme in launch()
        demo.launch(
            server_name=settings.server_host,
            server_port=settings.gradio_server_port,
            share=settings.gradio_share,
        )


if __name__ == "__main__":
    main()

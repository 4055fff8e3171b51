"""Tabular query result handed to the viewer by the result source."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Columns plus positional rows, as produced by the backend.

    ``row_count`` is whatever the producer reported.  Window math always
    uses ``total_rows`` (the actual number of rows) so a stale count can
    never push a window past the end of ``rows``.
    """

    columns: List[str] = field(default_factory=list)
    rows: List[List[Any]] = field(default_factory=list)
    row_count: Optional[int] = None

    def __post_init__(self):
        self.columns = [str(c) for c in self.columns]
        self.rows = [list(r) for r in self.rows]
        width = len(self.columns)
        ragged = [i for i, row in enumerate(self.rows) if len(row) != width]
        if ragged and width:
            logger.warning(
                "%d rows do not have %d cells (first at index %d); padding with NULL or truncating",
                len(ragged),
                width,
                ragged[0],
            )
            for i in ragged:
                row = self.rows[i]
                self.rows[i] = row[:width] + [None] * (width - len(row))
        if self.row_count is None:
            self.row_count = len(self.rows)
        elif self.row_count != len(self.rows):
            logger.warning(
                "Reported row_count=%s does not match %d rows; using actual length",
                self.row_count,
                len(self.rows),
            )

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.columns or not self.rows

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "QueryResult":
        """Build from ``{"columns": [...], "rows": [...], "row_count": n}``.

        Rows given as mappings (``{"col": value}``) are converted to
        positional rows in column order.
        """
        columns = list(payload.get("columns") or [])
        raw_rows = payload.get("rows") or []
        if raw_rows and isinstance(raw_rows[0], dict):
            if not columns:
                columns = list(raw_rows[0].keys())
            rows = [[row.get(c) for c in columns] for row in raw_rows]
        else:
            rows = [list(r) for r in raw_rows]
        return cls(columns=columns, rows=rows, row_count=payload.get("row_count"))

    @classmethod
    def empty(cls) -> "QueryResult":
        return cls(columns=[], rows=[], row_count=0)

"""CSV export of complete query results.

Exports always cover every row of the result, regardless of which page or
scroll window is currently on screen.  Each cell goes through the same
formatter used for display.

Two quoting modes are supported:

* ``lenient`` (default) wraps a field in double quotes only when it
  contains a comma and does not escape embedded quotes or newlines.
  Existing consumers of the exported files rely on this output.
* ``rfc4180`` writes through the ``csv`` module, quoting and escaping
  fields as RFC 4180 requires.
"""
import csv
import io
import logging
import os
import tempfile
from typing import Optional

from src.components.cell_formatter import CellFormatter, format_cell
from src.components.errors import ExportError
from src.components.query_result import QueryResult

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "query_results.csv"
QUOTING_MODES = ("lenient", "rfc4180")


def _lenient_field(text: str) -> str:
    return f'"{text}"' if "," in text else text


def encode_csv(
    result: QueryResult,
    quoting: str = "lenient",
    formatter: Optional[CellFormatter] = None,
) -> str:
    """Serialize the header and every row of ``result`` as CSV text."""
    if quoting not in QUOTING_MODES:
        raise ExportError(f"Unknown CSV quoting mode: {quoting!r}")

    try:
        formatted_rows = [
            [format_cell(value, formatter).text for value in row]
            for row in result.rows
        ]
    except Exception as e:
        raise ExportError(f"Failed to format results for export: {e}") from e

    if quoting == "rfc4180":
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(result.columns)
        writer.writerows(formatted_rows)
        return output.getvalue()

    lines = [",".join(result.columns)]
    for row in formatted_rows:
        lines.append(",".join(_lenient_field(text) for text in row))
    return "".join(line + "\n" for line in lines)


def export_csv(
    result: QueryResult,
    directory: Optional[str] = None,
    filename: str = DEFAULT_FILENAME,
    quoting: str = "lenient",
    formatter: Optional[CellFormatter] = None,
) -> Optional[str]:
    """Write the full result to ``filename`` as UTF-8 and return its path.

    Returns None when there is nothing to export.  When ``directory`` is
    not given a fresh temporary directory is used, so repeated downloads
    keep the same file name.
    """
    if result.is_empty:
        return None

    content = encode_csv(result, quoting=quoting, formatter=formatter)
    try:
        target_dir = directory or tempfile.mkdtemp(prefix="query_export_")
        path = os.path.join(target_dir, filename)
        with open(path, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
    except OSError as e:
        raise ExportError(f"Could not write {filename}: {e}") from e

    logger.info("Exported %d rows x %d columns to %s", result.total_rows, len(result.columns), path)
    return path

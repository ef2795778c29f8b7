"""Table display functionality for logs."""

import logging
from html import escape
from typing import Any, List, Optional, Sequence

from tabulate import tabulate

from recipetree.logger.base_logger import AlgorithmLogger


class TableLogger(AlgorithmLogger):
    """AlgorithmLogger that can also render rows with ``tabulate``."""

    def table(
        self,
        data: List[List[Any]],
        headers: Optional[List[str]] = None,
        title: Optional[str] = None,
        tablefmt: str = "grid",
        colalign: Optional[Sequence[Optional[str]]] = None,
    ) -> None:
        """
        Log ``data`` as a table.

        ``tablefmt="html"`` writes a real ``<table>`` into the HTML trace only;
        any other tabulate format is logged as text and embedded as ``<pre>``.
        """
        if self.disabled:
            return
        headers = headers or []

        if title:
            self._emit(logging.INFO, f"\n{title}:", f"<h4>{escape(title)}</h4>")

        if tablefmt == "html":
            self.raw_html(_html_table(data, headers))
            return

        text = tabulate(
            data,
            headers=headers,
            tablefmt=tablefmt,
            colalign=colalign,
            showindex=False,
        )
        self._emit(logging.INFO, text, f"<pre>{escape(text)}</pre>")


def _html_table(data: List[List[Any]], headers: List[str]) -> str:
    rows = ['<div class="table-container">', "<table>"]
    if headers:
        cells = "".join(f"<th>{escape(str(h))}</th>" for h in headers)
        rows.append(f"<thead><tr>{cells}</tr></thead>")
    rows.append("<tbody>")
    for row in data:
        cells = "".join(f"<td>{escape(str(cell))}</td>" for cell in row)
        rows.append(f"<tr>{cells}</tr>")
    rows.append("</tbody></table></div>")
    return "\n".join(rows)

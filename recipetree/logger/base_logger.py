"""HTML trace buffer mirrored to a console logger."""

import logging
from html import escape
from pathlib import Path
from typing import Any, List, Union

from recipetree.logger.html_content import CSS_LOG


class AlgorithmLogger:
    """
    Records a build/reveal trace twice: as plain log lines and as an HTML
    fragment that ``write_html`` turns into a standalone page.

    Every method is a no-op while ``disabled`` is set.
    """

    def __init__(self, name: str):
        self.name = name
        self.disabled = False
        self._html: List[str] = []
        self._open_section = False

        self.logger = logging.getLogger(name)
        # Loggers sharing a name share their handler
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(handler)
            self.logger.propagate = False
        if self.logger.level == logging.NOTSET:
            self.logger.setLevel(logging.INFO)

    def _emit(self, level: int, text: str, html: str) -> None:
        self.logger.log(level, text)
        self._html.append(html)

    def section(self, title: str):
        if self.disabled:
            return
        self.end_section()
        self._emit(
            logging.INFO,
            f"\n{'=' * 20} {title} {'=' * 20}\n",
            f'<section class="section"><h3>{escape(title)}</h3>',
        )
        self._open_section = True

    def end_section(self):
        if self.disabled or not self._open_section:
            return
        self._html.append("</section>")
        self._open_section = False

    def subsection(self, title: str):
        if self.disabled:
            return
        self._emit(
            logging.INFO,
            f"\n{'-' * 15} {title} {'-' * 15}\n",
            f'<div class="subsection"><h4>{escape(title)}</h4></div>',
        )

    def info(self, message: str):
        if self.disabled:
            return
        self._emit(logging.INFO, message, f'<p class="info">{escape(message)}</p>')

    def warning(self, message: str):
        if self.disabled:
            return
        self._emit(logging.WARNING, message, f'<p class="warning">{escape(message)}</p>')

    def result(self, label: str, value: Any):
        """A labelled value, e.g. the visible node keys of a frame."""
        if self.disabled:
            return
        self._emit(
            logging.INFO,
            f"{label}: {value}",
            f'<div class="result"><strong>{escape(label)}:</strong> '
            f"{escape(str(value))}</div>",
        )

    def raw_html(self, html_content: str):
        if self.disabled:
            return
        self._html.append(html_content)

    def clear(self):
        self._html = []
        self._open_section = False

    def get_html_content(self) -> str:
        """Body fragment logged so far; an open section is closed in the copy only."""
        parts = ['<div class="content">', *self._html]
        if self._open_section:
            parts.append("</section>")
        parts.append("</div>")
        return "\n".join(parts)

    def get_css_content(self) -> str:
        return CSS_LOG

    def write_html(self, path: Union[str, Path]) -> Path:
        """Write a standalone HTML page with everything logged so far."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        page = (
            '<!DOCTYPE html>\n<html><head><meta charset="utf-8">'
            f"<title>{escape(self.name)}</title><style>{self.get_css_content()}</style>"
            f"</head><body>{self.get_html_content()}</body></html>"
        )
        path.write_text(page, encoding="utf-8")
        return path

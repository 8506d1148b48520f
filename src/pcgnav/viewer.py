"""
Secondary-window viewer for analysis graphs.

Writes a standalone HTML page that renders the dot source client-side
with viz.js and opens it in the browser.
"""

import html
import json
import logging
import re
import webbrowser
from pathlib import Path
from typing import Optional

from .core.errors import PopupBlocked
from .sources.base import AnalysisApi

logger = logging.getLogger(__name__)

HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Dot Graph - __TITLE__</title>
    <script src="https://cdn.jsdelivr.net/npm/@viz-js/viz@3/lib/viz-standalone.js"></script>
    <style>
        body { margin: 0; }
        svg {
            width: 100vw;
            height: 100vh;
            display: block;
        }
    </style>
</head>
<body>
    <script>
        const dotData = __DOT_DATA__;
        Viz.instance().then((viz) => {
            document.body.appendChild(viz.renderSVGElement(dotData));
        });
    </script>
</body>
</html>
"""


def generate_html(dot_source: str, title: str) -> str:
    # Escape "</" so the embedded string cannot close the script element.
    dot_literal = json.dumps(dot_source).replace("</", "<\\/")
    return (
        HTML_TEMPLATE
        .replace("__TITLE__", html.escape(title))
        .replace("__DOT_DATA__", dot_literal)
    )


def _page_name(filename: str) -> str:
    stem = filename.rsplit("/", 1)[-1].rsplit(".", 1)[0]
    return re.sub(r"[^A-Za-z0-9_.-]", "_", stem) + ".html"


def open_in_browser(page: Path) -> None:
    """
    Raises:
        PopupBlocked: If no browser could be opened.
    """
    if not webbrowser.open(page.resolve().as_uri()):
        logger.error("Failed to open popup window")
        raise PopupBlocked(f"Could not open a browser window for {page}")


async def open_dot_graph(
    api: AnalysisApi,
    filename: str,
    output_dir: Path,
    launch: bool = True,
) -> Path:
    """
    Fetch a dot graph, write its viewer page and open it.

    Raises:
        NotFound: If the graph file does not exist.
        PopupBlocked: If the browser refused to open.
    """
    dot_source = await api.fetch_dot_file(filename)
    output_dir.mkdir(parents=True, exist_ok=True)
    page = output_dir / _page_name(filename)
    page.write_text(generate_html(dot_source, filename), encoding="utf-8")
    logger.info(f"Wrote graph viewer to {page}")
    if launch:
        open_in_browser(page)
    return page


def default_output_dir(state_db: Optional[Path]) -> Path:
    """Viewer pages live next to the state database."""
    base = state_db.parent if state_db else Path(".pcgnav")
    return base / "graphs"

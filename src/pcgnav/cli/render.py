"""
Rich renderings of the session state.

The terminal stands in for the browser panels: the CFG as a table of
blocks and edges, and the navigator as an item list with the current
item marked.
"""

from typing import Dict, Optional

from rich.table import Table
from rich.text import Text

from ..core.addressing import CurrentPoint, EdgePoint, StatementPoint, format_point
from ..core.formatting import describe_action
from ..core.highlight import EdgeStyle
from ..core.layout import CfgView, inline_actions
from ..core.navigation import ActionItem, PhaseItem
from ..core.session import PointView
from ..core.types import BlockVisualizationData, FunctionMetadata


def functions_table(functions: Dict[str, FunctionMetadata]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Function", style="cyan")
    table.add_column("Name")
    table.add_column("Starts at", style="dim")
    for slug in sorted(functions):
        meta = functions[slug]
        table.add_row(slug, meta.name, f"{meta.start.line}:{meta.start.column}")
    return table


def cfg_table(
    view: CfgView,
    current: Optional[CurrentPoint] = None,
    pcg_data: Optional[Dict[int, BlockVisualizationData]] = None,
    show_actions_inline: bool = False,
) -> Table:
    height = f"{view.height:.0f}px" if view.height is not None else "auto"
    table = Table(title=f"CFG ({len(view.nodes)} blocks, height {height})", show_lines=True)
    if view.layout_error:
        table.caption = f"Layout unavailable: {view.layout_error}"
    table.add_column("Block", style="cyan", no_wrap=True)
    table.add_column("Position", style="dim", no_wrap=True)
    table.add_column("Statements")

    selected = current.address if current else None
    for placed in view.nodes:
        node = placed.node
        block_data = (pcg_data or {}).get(node.block)
        lines = Text()
        rows = list(enumerate(node.stmts)) + [(len(node.stmts), node.terminator)]
        for idx, stmt in rows:
            is_current = selected == StatementPoint(node.block, idx)
            marker = "▶ " if is_current else "  "
            lines.append(f"{marker}{idx}: {stmt.stmt}\n", style="bold green" if is_current else "")
            if show_actions_inline:
                for line in inline_actions(block_data, idx):
                    lines.append(f"      {line}\n", style="magenta")
        position = "-" if placed.x is None else f"({placed.x:.0f}, {placed.y:.0f})"
        table.add_row(f"bb{node.block}", position, lines)
    return table


def edges_table(view: CfgView, styles: Dict[str, EdgeStyle]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Edge")
    table.add_column("Label", style="dim")
    table.add_column("Stroke")
    block_of = {p.node.id: p.node.block for p in view.nodes}
    for edge in view.edges:
        style = styles.get(edge.id)
        stroke = f"{style.stroke} / {style.width}" if style else ""
        text_style = "bold" if style and style.width > 2 else ""
        table.add_row(
            Text(f"bb{block_of[edge.source]} -> bb{block_of[edge.target]}", style=text_style),
            edge.label,
            stroke,
        )
    return table


def navigator_table(view: PointView) -> Table:
    table = Table(title=format_point(view.point), show_header=True, header_style="bold")
    table.add_column("", no_wrap=True)
    table.add_column("Item")
    table.add_column("Detail", style="dim")

    current = view.sequencer.index_of(view.point.position)
    for idx, item in enumerate(view.sequencer.items):
        marker = "▶" if idx == current else ""
        if isinstance(item, PhaseItem):
            table.add_row(marker, Text(item.name, style="bold"), item.filename)
        elif isinstance(item, ActionItem):
            table.add_row(marker, f"  {describe_action(item.action)}", item.action.data.debug_context or "")
    if not view.sequencer.items:
        kind = "edge" if isinstance(view.point.address, EdgePoint) else "statement"
        table.add_row("", Text(f"(no steps recorded for this {kind})", style="dim"), "")
    return table

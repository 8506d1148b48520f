"""
pcgnav Core Module.

Addressing & Navigation:
    - StatementPoint, EdgePoint: Program-point addresses
    - IterationPosition, ActionPosition: Positions within a point
    - NavigationSequencer: Phase/action stepping with boundary crossing

CFG:
    - filter_nodes_and_edges: Unwind/path/reachability filtering
    - CfgLayoutEngine: Memoized layered layout

Cross-view:
    - HighlightBridge: Action-graph hover to CFG edge highlight
    - SourceMap, ClickCycle: Source position to statement lookup

State:
    - PersistedViewState: Versioned, TTL'd view state
    - ExplorerSession: Selection, stale-response guard and artifact assembly
"""

from .addressing import (
    DEFAULT_POSITION,
    INITIAL_POSITION,
    ActionPosition,
    CurrentPoint,
    EdgePoint,
    IterationPosition,
    StatementPoint,
    format_point,
    parse_point,
)
from .errors import (
    DataSourceUnavailable,
    InvalidAddress,
    MalformedArchiveEntry,
    NotFound,
    PcgNavError,
    PopupBlocked,
)
from .graph import CfgGraph, FilterOptions, filter_nodes_and_edges
from .highlight import CfgEdgeEmphasis, HighlightBridge, StyledElement
from .layout import CfgLayoutEngine
from .navigation import Direction, NavigationSequencer
from .source_map import ClickCycle, SourceMap
from .storage import PersistedViewState, ViewStateKey

__all__ = [
    "DEFAULT_POSITION",
    "INITIAL_POSITION",
    "ActionPosition",
    "CurrentPoint",
    "EdgePoint",
    "IterationPosition",
    "StatementPoint",
    "format_point",
    "parse_point",
    "DataSourceUnavailable",
    "InvalidAddress",
    "MalformedArchiveEntry",
    "NotFound",
    "PcgNavError",
    "PopupBlocked",
    "CfgGraph",
    "FilterOptions",
    "filter_nodes_and_edges",
    "CfgEdgeEmphasis",
    "HighlightBridge",
    "StyledElement",
    "CfgLayoutEngine",
    "Direction",
    "NavigationSequencer",
    "ClickCycle",
    "SourceMap",
    "PersistedViewState",
    "ViewStateKey",
]

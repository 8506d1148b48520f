"""
pcgnav - Program-point navigator for PCG analysis output.

pcgnav loads the per-function artifacts emitted by the PCG analysis
(CFG payload, per-statement iteration graphs, atomic actions) and lets
you scrub through them one program point, phase and action at a time.

Key Components:
- core.addressing: Program-point and navigator-position addresses
- core.navigation: Phase/action sequencing and statement stepping
- core.graph / core.layout: CFG filtering and layered layout
- core.highlight: Hover correlation between the action graph and the CFG
- sources: Live endpoint and zip-archive data sources, artifact cache

Usage:
    from pcgnav.sources import select_data_source, AnalysisApi

    source = await select_data_source(datasrc, view_state.storage)
    api = AnalysisApi(source)
    functions = await api.get_functions()
"""

__version__ = "0.1.0"

from .core.addressing import (
    ActionPosition,
    CurrentPoint,
    EdgePoint,
    IterationPosition,
    StatementPoint,
)
from .core.navigation import NavigationSequencer
from .core.types import FunctionMetadata, MirGraph, MirNode

__all__ = [
    "__version__",
    "ActionPosition",
    "CurrentPoint",
    "EdgePoint",
    "IterationPosition",
    "StatementPoint",
    "NavigationSequencer",
    "FunctionMetadata",
    "MirGraph",
    "MirNode",
]

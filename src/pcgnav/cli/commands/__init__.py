"""
CLI Commands Package.

Each command is implemented in its own module for maintainability.
"""

from . import cfg
from . import explore
from . import functions
from . import highlight
from . import navigate
from . import open_graph
from . import state

__all__ = [
    "cfg",
    "explore",
    "functions",
    "highlight",
    "navigate",
    "open_graph",
    "state",
]

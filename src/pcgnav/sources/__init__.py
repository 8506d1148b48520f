"""
Data sources for analysis artifacts.

- LiveDataSource: HTTP endpoint or local output directory
- ArchiveDataSource: In-memory zip of the same tree
- select_data_source: Live -> remote archive -> cached archive
- ArtifactCache: Coalescing per-function payload cache
"""

from .archive import ArchiveDataSource
from .base import AnalysisApi, DataSource, graph_path
from .cache import ArtifactCache
from .live import LiveDataSource
from .selection import select_data_source

__all__ = [
    "AnalysisApi",
    "ArchiveDataSource",
    "ArtifactCache",
    "DataSource",
    "LiveDataSource",
    "graph_path",
    "select_data_source",
]

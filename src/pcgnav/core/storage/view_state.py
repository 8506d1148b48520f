"""
Persisted view state: the user's toggles and last selection.

A thin typed port over `VersionedStorage`, injected wherever UI state is
read or written.
"""

import time
from enum import StrEnum
from pathlib import Path
from typing import Optional

from ..addressing import CurrentPoint, format_point, try_parse_point
from .memory import MemoryBackend
from .sqlite import SQLiteBackend
from .versioned import Clock, VersionedStorage


class ViewStateKey(StrEnum):
    SHOW_UNWIND_EDGES = "showUnwindEdges"
    SHOW_ACTIONS_IN_CODE = "showActionsInCode"
    SHOW_PATH_BLOCKS_ONLY = "showPathBlocksOnly"
    SELECTED_FUNCTION = "selectedFunction"
    SELECTED_PATH = "selectedPath"
    CURRENT_POINT = "currentPoint"
    LEFT_PANEL_WIDTH = "leftPanelWidth"
    PCG_NAVIGATOR_WIDTH = "pcgNavigatorWidth"
    PCG_NAVIGATOR_MINIMIZED = "pcgNavigatorMinimized"
    IS_SOURCE_CODE_MINIMIZED = "isSourceCodeMinimized"
    CODE_FONT_SIZE = "codeFontSize"
    SHOW_PCG = "showPCG"
    SHOW_PCG_NAVIGATOR = "showPCGNavigator"


class PersistedViewState:
    def __init__(self, storage: VersionedStorage):
        self.storage = storage

    @classmethod
    def open(cls, db_path: Path, ttl_seconds: float) -> "PersistedViewState":
        return cls(VersionedStorage(SQLiteBackend(db_path), ttl_seconds=ttl_seconds))

    @classmethod
    def in_memory(cls, clock: Optional[Clock] = None) -> "PersistedViewState":
        return cls(VersionedStorage(MemoryBackend(), clock=clock or time.time))

    def get_bool(self, key: str, default: bool = False) -> bool:
        return self.storage.get_bool(key, default)

    def set_bool(self, key: str, value: bool) -> None:
        self.storage.set_bool(key, value)

    def get_number(self, key: str, default: float = 0) -> float:
        return self.storage.get_number(key, default)

    def set_number(self, key: str, value: float) -> None:
        self.storage.set_number(key, value)

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.storage.get_item(key)
        return default if value is None else value

    def set_string(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self.storage.remove_item(key)
        else:
            self.storage.set_item(key, value)

    def get_point(self, key: str = ViewStateKey.CURRENT_POINT) -> Optional[CurrentPoint]:
        """The stored point; unparseable values read as absent."""
        return try_parse_point(self.storage.get_item(key))

    def set_point(self, point: Optional[CurrentPoint], key: str = ViewStateKey.CURRENT_POINT) -> None:
        self.set_string(key, format_point(point) if point else None)

    def get_path(self) -> Optional[list[int]]:
        """The selected path restriction, stored as comma-separated blocks."""
        value = self.storage.get_item(ViewStateKey.SELECTED_PATH)
        if not value:
            return None
        try:
            return [int(b) for b in value.split(",")]
        except ValueError:
            return None

    def set_path(self, path: Optional[list[int]]) -> None:
        self.set_string(ViewStateKey.SELECTED_PATH, ",".join(map(str, path)) if path else None)

    def clear(self) -> int:
        return self.storage.clear()

"""
Unit tests for CLI helpers and key bindings.
"""

import asyncio
import logging

import pytest

from pcgnav.cli.keys import apply_key, is_bound
from pcgnav.cli.utils import (
    CliContext,
    configure_logging,
    echo_error,
    echo_success,
    parse_path_option,
    parse_point_option,
    resolve_source,
)
from pcgnav.config import Settings
from pcgnav.core.addressing import CurrentPoint, EdgePoint, StatementPoint
from pcgnav.core.errors import DataSourceUnavailable
from pcgnav.core.session import ExplorerSession
from pcgnav.core.storage import PersistedViewState
from pcgnav.sources import AnalysisApi, ArchiveDataSource


class TestEcho:
    def test_success(self, capsys):
        echo_success("done")
        assert "done" in capsys.readouterr().out

    def test_error_goes_to_stderr(self, capsys):
        echo_error("broken")
        assert "broken" in capsys.readouterr().err


class TestOptionParsing:
    def test_point(self):
        assert parse_point_option(None) is None
        assert parse_point_option("bb0->bb1@action:successor:0").address == EdgePoint(0, 1)

    def test_bad_point_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_point_option("bb")
        assert exc_info.value.code == 2

    def test_path(self):
        assert parse_path_option("0, 1,3") == [0, 1, 3]
        assert parse_path_option("bb0,bb2") == [0, 2]
        assert parse_path_option("") is None
        assert parse_path_option(None) is None

    def test_bad_path_exits(self):
        with pytest.raises(SystemExit):
            parse_path_option("0,one")


class TestLogging:
    def test_verbose_sets_info(self):
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        root.handlers = []
        try:
            configure_logging(True)
            assert root.level == logging.INFO
        finally:
            root.handlers, level = saved
            root.setLevel(level)


class TestResolveSource:
    def test_zip_wins(self, tmp_path, archive_bytes):
        path = tmp_path / "data.zip"
        path.write_bytes(archive_bytes)
        ctx = CliContext(settings=Settings(datasrc="http://localhost:1"), zip_path=path)
        source = asyncio.run(resolve_source(ctx, PersistedViewState.in_memory()))
        assert isinstance(source, ArchiveDataSource)

    def test_unreadable_zip(self, tmp_path):
        path = tmp_path / "data.zip"
        path.write_bytes(b"nope")
        ctx = CliContext(settings=Settings(), zip_path=path)
        with pytest.raises(DataSourceUnavailable):
            asyncio.run(resolve_source(ctx, PersistedViewState.in_memory()))


class TestKeys:
    @pytest.fixture
    def session(self, archive_bytes):
        session = ExplorerSession(AnalysisApi(ArchiveDataSource(archive_bytes)), PersistedViewState.in_memory())
        asyncio.run(session.load_functions())
        asyncio.run(session.select_function("demo"))
        return session

    @pytest.mark.parametrize("key,bound", [("a", True), ("q", True), ("j", True), ("k", True),
                                           ("7", True), ("z", False), ("o", False)])
    def test_is_bound(self, key, bound):
        assert is_bound(key) is bound

    def test_digit_jumps(self, session):
        view = asyncio.run(apply_key(session, "3"))
        assert view.point.address == StatementPoint(3, 0)

    def test_unbound_key_keeps_view(self, session):
        before = session.view
        assert asyncio.run(apply_key(session, "z")) is before

    def test_statement_key(self, session):
        view = asyncio.run(apply_key(session, "j"))
        assert view.point.address == StatementPoint(0, 1)
        assert isinstance(view.point, CurrentPoint)

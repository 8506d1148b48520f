"""CLI fixtures: global options pointing at a temporary archive and state db."""

import pytest

from pcgnav.config import ENV_DATASRC, ENV_STATE_DB, ENV_TTL_HOURS


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (ENV_DATASRC, ENV_STATE_DB, ENV_TTL_HOURS):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def zip_file(tmp_path, archive_bytes):
    path = tmp_path / "data.zip"
    path.write_bytes(archive_bytes)
    return path


@pytest.fixture
def state_db(tmp_path):
    return tmp_path / "state" / "state.db"


@pytest.fixture
def global_args(tmp_path, zip_file, state_db):
    return [
        "--zip", str(zip_file),
        "--state-db", str(state_db),
        "--config", str(tmp_path / "missing.yaml"),
    ]

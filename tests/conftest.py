"""Pytest configuration for test isolation.

Configuration is read from the environment (``DATABASE_URL``, the
``SI_AUDIT_*`` tunables, ``STATEMENT_INGEST_LOG_LEVEL``) and engines are cached
per database URL. To keep tests hermetic, every test starts with those
variables cleared, and cached engines plus logging handlers are released
afterwards so one test's temporary database never leaks into the next.
"""

from __future__ import annotations

import os
import textwrap
from collections.abc import Iterator
from pathlib import Path

import pytest
from statement_db.client import dispose_engines
from statement_ingest.logging_setup import reset_logging

from tests.helpers.db import bootstrap_sqlite_db, seed_account

_ENV_VARS = (
    "DATABASE_URL",
    "STATEMENT_INGEST_LOG_LEVEL",
    "SI_AUDIT_LOOKBACK_DAYS",
    "SI_AUDIT_DATE_WINDOW_DAYS",
    "SI_AUDIT_SIMILARITY_THRESHOLD",
    "SI_AUDIT_MAX_RESULTS",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # The CLI loads .env from the CWD; run from an empty directory.
    monkeypatch.chdir(tmp_path)
    yield
    # The CLI may have loaded DATABASE_URL from a .env during the test.
    for name in _ENV_VARS:
        os.environ.pop(name, None)
    dispose_engines()
    reset_logging()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "db" / "ledger.sqlite3")


@pytest.fixture
def account_id(db_url: str) -> int:
    return seed_account(db_url)


@pytest.fixture
def write_csv(tmp_path: Path):
    """Write dedented CSV text to ``tmp_path/<name>`` and return the path."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        body = textwrap.dedent(text).lstrip("\n")
        path.write_text(body, encoding="utf-8", newline="")
        return path

    return _write

"""DB helpers for tests: bootstrap a temporary SQLite DB and seed reference data."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any

from sqlalchemy import select
from sqlalchemy import text as sql_text
from statement_db import Base
from statement_db.client import get_engine, session_scope
from statement_db.models.ledger import Account, Category, CategoryRule, LedgerTransaction


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    # Ensure parent exists before engine creation attempts any writes
    db_file.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(database_url=url)
    Base.metadata.create_all(bind=engine)
    _assert_transactions_schema_in_sync(url)

    # Make it the default for any code paths that read from the environment
    if set_default_env:
        os.environ["DATABASE_URL"] = url
    return url


def seed_account(database_url: str, name: str = "Everyday Checking", **kw: Any) -> int:
    with session_scope(database_url=database_url) as session:
        account = Account(name=name, **kw)
        session.add(account)
        session.flush()
        return account.id


def seed_rules(
    database_url: str,
    rules: Iterable[tuple[str, str, str, int]],
) -> dict[str, int]:
    """Insert ``(category_name, pattern, match_type, priority)`` rules.

    Returns ``{category_name: category_id}``.
    """

    ids: dict[str, int] = {}
    with session_scope(database_url=database_url) as session:
        for category_name, pattern, match_type, priority in rules:
            if category_name not in ids:
                category = session.execute(
                    select(Category).where(Category.name == category_name)
                ).scalar_one_or_none()
                if category is None:
                    category = Category(name=category_name)
                    session.add(category)
                    session.flush()
                ids[category_name] = category.id
            session.add(
                CategoryRule(
                    description_pattern=pattern,
                    category_id=ids[category_name],
                    match_type=match_type,
                    priority=priority,
                )
            )
    return ids


def insert_ledger_rows(database_url: str, rows: Iterable[Mapping[str, Any]]) -> list[int]:
    """Insert transactions directly (bypassing identity rules) and return their ids.

    Each mapping needs ``account_id``, ``posted_date``, ``amount``,
    ``description`` and ``identity``; ``source`` defaults to ``TEST``.
    """

    ids: list[int] = []
    with session_scope(database_url=database_url) as session:
        for r in rows:
            tx = LedgerTransaction(
                account_id=r["account_id"],
                posted_date=r["posted_date"],
                description=r["description"],
                amount=Decimal(str(r["amount"])),
                identity=r["identity"],
                source=r.get("source", "TEST"),
            )
            session.add(tx)
            session.flush()
            ids.append(tx.id)
    return ids


def fetch_transactions(database_url: str, account_id: int) -> list[LedgerTransaction]:
    with session_scope(database_url=database_url) as session:
        return list(
            session.execute(
                select(LedgerTransaction)
                .where(LedgerTransaction.account_id == account_id)
                .order_by(LedgerTransaction.posted_date, LedgerTransaction.id)
            ).scalars()
        )


def days_ago(n: int, *, today: date | None = None) -> date:
    return (today or date.today()) - timedelta(days=n)


def _assert_transactions_schema_in_sync(database_url: str) -> None:
    """Quick sanity check: ORM column set matches the SQLite table column set."""

    expected = {c.name for c in LedgerTransaction.__table__.columns}
    with session_scope(database_url=database_url) as session:
        rows = session.execute(sql_text("PRAGMA table_info('transactions')")).fetchall()
        got = {row[1] for row in rows}  # (cid, name, type, notnull, dflt_value, pk)
    missing = expected - got
    extra = got - expected
    assert not missing and not extra, (
        f"transactions schema drift: missing={missing or '∅'}, extra={extra or '∅'}"
    )

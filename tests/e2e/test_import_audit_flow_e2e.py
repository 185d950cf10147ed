"""End-to-end: import overlapping statements from several banks, audit, resolve."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from statement_ingest.api import (
    audit_duplicates,
    create_account,
    import_csv,
    import_folder,
    resolve_duplicate,
)
from statement_ingest.duplicates import DuplicateAuditOptions
from statement_ingest.models import DuplicateType, ImportResult, Resolution

from tests.helpers.db import fetch_transactions, seed_rules


def _us(d: date) -> str:
    return d.strftime("%m/%d/%Y")


def test_import_audit_resolve_flow(db_url, write_csv, tmp_path):
    today = date.today()
    d1, d2, d3 = (today - timedelta(days=n) for n in (6, 5, 4))

    seed_rules(db_url, [("Streaming", "NETFLIX", "contains", 100)])
    card = create_account("Household Card", "CreditCard", database_url=db_url)

    # Pending download of the Chase statement.
    write_csv(
        "inbox/chase_pending.csv",
        f"""
        Transaction Date,Post Date,Description,Category,Type,Amount,Memo
        {_us(d1)},{_us(d2)},NETFLIX.COM,Entertainment,Sale,-15.49,
        {_us(d2)},{_us(d2)},SHELL SERVICE STATION SAN JOSE,Gas,Sale,-40.00,
        """,
    )
    # AmEx export of the same household spend with its own references.
    write_csv(
        "inbox/amex_activity.csv",
        f"""
        Date,Description,Card Member,Account #,Amount,Reference
        {_us(d3)},BLUE BOTTLE COFFEE,ALEX DOE,-41006,4.50,'320250010000000001'
        """,
    )
    outcomes = import_folder(tmp_path / "inbox", card, database_url=db_url)

    assert [(o.path.name, o.source_tag) for o in outcomes] == [
        ("amex_activity.csv", "AMEX"),
        ("chase_pending.csv", "CHASE"),
    ]
    assert sum((o.result for o in outcomes), ImportResult()) == ImportResult(inserted=3)

    # Final download: post date moved (ignored for identity) and the
    # merchant text changed slightly, which slips past identity matching.
    final = write_csv(
        "chase_final.csv",
        f"""
        Transaction Date,Post Date,Description,Category,Type,Amount,Memo
        {_us(d1)},{_us(d3)},NETFLIX.COM,Entertainment,Sale,-15.49,
        {_us(d2)},{_us(d3)},SHELL SERVICE STATION 0042 SAN JOSE,Gas,Sale,-40.00,
        """,
    )
    assert import_csv(final, card, database_url=db_url) == ImportResult(inserted=1, ignored=1)

    rows = fetch_transactions(db_url, card)
    assert len(rows) == 4
    netflix = next(r for r in rows if r.description == "NETFLIX.COM")
    assert netflix.category_id is not None
    assert netflix.matched_rule_pattern == "NETFLIX"
    coffee = next(r for r in rows if r.source == "AMEX")
    assert coffee.amount == Decimal("-4.50")

    candidates = audit_duplicates(DuplicateAuditOptions(account_id=card), database_url=db_url)

    assert len(candidates) == 1
    (shell,) = candidates
    assert shell.type is DuplicateType.NEAR
    assert shell.a.description == "SHELL SERVICE STATION SAN JOSE"
    assert shell.b.description == "SHELL SERVICE STATION 0042 SAN JOSE"

    resolve_duplicate(shell.a.id, shell.b.id, Resolution.KEEP_A, database_url=db_url)

    assert audit_duplicates(DuplicateAuditOptions(account_id=card), database_url=db_url) == []
    live = [r for r in fetch_transactions(db_url, card) if not r.is_deleted]
    assert sorted(r.description for r in live) == [
        "BLUE BOTTLE COFFEE",
        "NETFLIX.COM",
        "SHELL SERVICE STATION SAN JOSE",
    ]

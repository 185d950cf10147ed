"""Console interface: exit codes and printed output of each command."""

from __future__ import annotations

import pytest
from statement_ingest.cli import app, cmd_detect, cmd_formats, cmd_import_file
from typer.testing import CliRunner

from tests.helpers.db import days_ago, fetch_transactions, insert_ledger_rows

runner = CliRunner()

CHASE_CSV = """
Transaction Date,Post Date,Description,Category,Type,Amount,Memo
01/10/2025,01/11/2025,STARBUCKS STORE 0042,Food & Drink,Sale,-5.75,
01/11/2025,01/12/2025,WHOLEFDS MKT 10234,Groceries,Sale,-82.13,
"""


def _invoke(*args: str):
    return runner.invoke(app, list(args))


def test_formats_lists_every_bank():
    result = _invoke("formats")

    assert result.exit_code == 0
    tags = [line.split("\t")[0] for line in result.output.splitlines() if "\t" in line]
    assert tags == ["CITI", "BMO", "AMEX", "CHASE", "BMO-CHK"]
    assert "debit_credit_columns" in result.output


def test_detect_prints_tag(write_csv):
    path = write_csv("export.csv", CHASE_CSV)

    result = _invoke("detect", "--csv-path", str(path))

    assert result.exit_code == 0
    assert result.output.strip().splitlines()[-1] == "CHASE"


def test_detect_unrecognized_exits_1(write_csv):
    path = write_csv("export.csv", "Foo,Bar\n1,2\n")

    result = _invoke("detect", "--csv-path", str(path))

    assert result.exit_code == 1
    assert "Error: No adapter recognized" in result.output


def test_create_account_then_import_twice(db_url, write_csv):
    path = write_csv("chase.csv", CHASE_CSV)

    created = _invoke(
        "create-account", "Sapphire", "--account-type", "CreditCard", "--database-url", db_url
    )
    assert created.exit_code == 0
    account_id = int(created.output.strip().splitlines()[-1])

    args = [
        "import-file",
        "--csv-path",
        str(path),
        "--account-id",
        str(account_id),
        "--database-url",
        db_url,
    ]
    first = _invoke(*args)
    second = _invoke(*args)

    assert first.exit_code == 0
    assert "inserted=2\tignored=0\tfailed=0" in first.output
    assert second.exit_code == 0
    assert "inserted=0\tignored=2\tfailed=0" in second.output
    assert len(fetch_transactions(db_url, account_id)) == 2


def test_import_file_unknown_account(db_url, write_csv):
    path = write_csv("chase.csv", CHASE_CSV)

    result = _invoke(
        "import-file", "--csv-path", str(path), "--account-id", "4242", "--database-url", db_url
    )

    assert result.exit_code == 1
    assert "Error: account 4242 does not exist" in result.output


def test_import_file_missing_file(db_url, account_id, tmp_path):
    result = _invoke(
        "import-file",
        "--csv-path",
        str(tmp_path / "missing.csv"),
        "--account-id",
        str(account_id),
        "--database-url",
        db_url,
    )

    assert result.exit_code == 1
    assert "Error: File not found" in result.output


def test_import_dir_reports_failed_files(db_url, account_id, write_csv, tmp_path):
    write_csv("in/chase.csv", CHASE_CSV)
    write_csv("in/junk.csv", "Foo,Bar\n1,2\n")

    result = _invoke(
        "import-dir",
        "--folder",
        str(tmp_path / "in"),
        "--account-id",
        str(account_id),
        "--database-url",
        db_url,
    )

    assert result.exit_code == 1
    assert "chase.csv\tCHASE\tinserted=2" in result.output
    assert "junk.csv\tERROR" in result.output


def test_audit_ignore_and_resolve(db_url, account_id):
    ids = insert_ledger_rows(
        db_url,
        [
            {
                "account_id": account_id,
                "posted_date": days_ago(3),
                "amount": "-9.99",
                "description": "SPOTIFY USA",
                "identity": f"TEST|H|{n}",
            }
            for n in range(3)
        ],
    )

    audit = _invoke("audit", "--database-url", db_url)
    assert audit.exit_code == 0
    assert "3 candidate(s)" in audit.output
    assert "NEAR\t1.00\tEveryday Checking" in audit.output

    ignored = _invoke("ignore-pair", str(ids[1]), str(ids[0]), "--database-url", db_url)
    assert ignored.exit_code == 0
    assert f"ignored ({ids[0]}, {ids[1]})" in ignored.output

    resolved = _invoke(
        "resolve", str(ids[1]), str(ids[2]), "--keep", "a", "--database-url", db_url
    )
    assert resolved.exit_code == 0
    assert f"deleted {ids[2]}" in resolved.output

    again = _invoke("audit", "--database-url", db_url)
    assert again.exit_code == 0
    assert "0 candidate(s)" in again.output


def test_resolve_same_id_twice_deletes_nothing(db_url, account_id):
    (tx_id,) = insert_ledger_rows(
        db_url,
        [
            {
                "account_id": account_id,
                "posted_date": days_ago(1),
                "amount": "-9.99",
                "description": "SPOTIFY USA",
                "identity": "TEST|H|solo",
            }
        ],
    )

    result = _invoke("resolve", str(tx_id), str(tx_id), "--keep", "a", "--database-url", db_url)

    assert result.exit_code == 1
    assert "Error: could not resolve pair" in result.output
    assert not fetch_transactions(db_url, account_id)[0].is_deleted


def test_audit_rejects_invalid_threshold(db_url):
    result = _invoke("audit", "--threshold", "1.5", "--database-url", db_url)

    assert result.exit_code == 1
    assert "Error: invalid audit options" in result.output


def test_resolve_rejects_bad_side(db_url):
    result = _invoke("resolve", "1", "2", "--keep", "both", "--database-url", db_url)

    assert result.exit_code == 1
    assert "--keep must be 'a' or 'b'" in result.output


def test_database_url_from_dotenv(db_url, write_csv, tmp_path, account_id):
    # conftest chdirs into tmp_path; the callback loads .env from there.
    (tmp_path / ".env").write_text(f"DATABASE_URL={db_url}\n", encoding="utf-8")
    path = write_csv("chase.csv", CHASE_CSV)

    result = _invoke("import-file", "--csv-path", str(path), "--account-id", str(account_id))

    assert result.exit_code == 0
    assert "inserted=2" in result.output


def test_handlers_are_callable_without_typer(write_csv, capsys):
    path = write_csv("chase.csv", CHASE_CSV)

    assert cmd_detect(str(path)) == 0
    assert cmd_formats() == 0
    assert cmd_import_file(str(path), 1, database_url=None) == 1

    out = capsys.readouterr()
    assert out.out.splitlines()[0] == "CHASE"
    assert "Error:" in out.err


@pytest.mark.parametrize("args", [[], ["--help"]])
def test_help(args):
    result = _invoke(*args)

    assert "import-file" in result.output
    assert "audit" in result.output

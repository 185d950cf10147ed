# ruff: noqa: I001
"""CLI for the ``statement_ingest`` package.

This module exposes callable command handlers (``cmd_import_file``,
``cmd_audit``...) that return a process exit code, plus a Typer-based console
interface wrapping them. Environment variables (notably ``DATABASE_URL``) are
loaded from a local ``.env`` using ``python-dotenv`` before any command runs.
Business logic lives in ``statement_ingest.api`` and the modules it wires.

Failures are reported as ``Error: ...`` lines on stderr with exit code 1.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .errors import StatementIngestError
from .logging_setup import configure_logging, level_for_verbosity
from .models import DuplicateCandidate, Resolution


# ---- Command handlers ---------------------------------------------------------


def _print_error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def cmd_import_file(
    csv_path: str,
    account_id: int,
    *,
    database_url: str | None = None,
    categorize: bool = True,
) -> int:
    """Import one CSV and print ``inserted/ignored/failed`` counters."""

    from .api import import_csv

    try:
        result = import_csv(
            csv_path, account_id, database_url=database_url, categorize=categorize
        )
    except FileNotFoundError:
        return _print_error(f"File not found: {csv_path}")
    except PermissionError:
        return _print_error(f"Permission denied: {csv_path}")
    except StatementIngestError as e:
        return _print_error(str(e))
    except Exception as e:
        return _print_error(f"Import of '{csv_path}' failed: {e}")

    print(f"inserted={result.inserted}\tignored={result.ignored}\tfailed={result.failed}")
    return 0


def cmd_import_dir(
    folder: str,
    account_id: int,
    *,
    database_url: str | None = None,
    categorize: bool = True,
) -> int:
    """Import every CSV in ``folder``; exit 1 when any file failed outright."""

    from .api import import_folder

    try:
        outcomes = import_folder(
            folder, account_id, database_url=database_url, categorize=categorize
        )
    except NotADirectoryError:
        return _print_error(f"Not a directory: {folder}")
    except StatementIngestError as e:
        return _print_error(str(e))
    except Exception as e:
        return _print_error(f"Import of '{folder}' failed: {e}")

    code = 0
    for o in outcomes:
        if o.result is None:
            print(f"{o.path.name}\tERROR\t{o.error}", file=sys.stderr)
            code = 1
            continue
        r = o.result
        print(
            f"{o.path.name}\t{o.source_tag}\t"
            f"inserted={r.inserted}\tignored={r.ignored}\tfailed={r.failed}"
        )
    if not outcomes:
        print(f"No CSV files in {folder}")
    return code


def cmd_detect(csv_path: str) -> int:
    from .api import detect_format

    try:
        tag = detect_format(csv_path)
    except FileNotFoundError:
        return _print_error(f"File not found: {csv_path}")
    except StatementIngestError as e:
        return _print_error(str(e))
    print(tag)
    return 0


def cmd_formats() -> int:
    from .api import list_formats

    for info in list_formats():
        hints = ", ".join(info.filename_hints)
        print(f"{info.source_tag}\t{info.amount_policy.value}\t{info.header_hint}\t[{hints}]")
    return 0


def _format_candidate(c: DuplicateCandidate) -> str:
    return (
        f"{c.type.value.upper()}\t{c.score:.2f}\t{c.account_name or c.account_id}\t"
        f"{c.a.id}:{c.a.posted_date.isoformat()}:{c.a.amount}:{c.a.description}\t"
        f"{c.b.id}:{c.b.posted_date.isoformat()}:{c.b.amount}:{c.b.description}\t"
        f"{c.reason}"
    )


def cmd_audit(
    *,
    account_id: int | None = None,
    lookback_days: int | None = None,
    window_days: int | None = None,
    threshold: float | None = None,
    max_results: int | None = None,
    database_url: str | None = None,
) -> int:
    """Run the duplicate audit and print one tab-separated line per candidate."""

    from dataclasses import replace

    from .api import audit_duplicates
    from .duplicates import DuplicateAuditOptions

    try:
        options = DuplicateAuditOptions.from_env(account_id=account_id)
        overrides = {
            "lookback_days": lookback_days,
            "date_window_days": window_days,
            "similarity_threshold": threshold,
            "max_results": max_results,
        }
        options = replace(options, **{k: v for k, v in overrides.items() if v is not None})
    except ValueError as e:
        return _print_error(f"invalid audit options: {e}")

    try:
        candidates = audit_duplicates(options, database_url=database_url)
    except Exception as e:
        return _print_error(f"duplicate audit failed: {e}")

    for c in candidates:
        print(_format_candidate(c))
    print(f"{len(candidates)} candidate(s)", file=sys.stderr)
    return 0


def cmd_ignore_pair(
    a_id: int, b_id: int, *, reason: str | None = None, database_url: str | None = None
) -> int:
    from .api import ignore_pair

    try:
        ignore_pair(a_id, b_id, reason=reason, database_url=database_url)
    except Exception as e:
        return _print_error(f"could not record ignored pair: {e}")
    print(f"ignored ({min(a_id, b_id)}, {max(a_id, b_id)})")
    return 0


def cmd_resolve(
    a_id: int,
    b_id: int,
    keep: str,
    *,
    reason: str | None = None,
    database_url: str | None = None,
) -> int:
    from .api import resolve_duplicate

    resolution = {"a": Resolution.KEEP_A, "b": Resolution.KEEP_B}.get(keep.strip().lower())
    if resolution is None:
        return _print_error(f"--keep must be 'a' or 'b', got {keep!r}")
    try:
        resolve_duplicate(a_id, b_id, resolution, reason=reason, database_url=database_url)
    except Exception as e:
        return _print_error(f"could not resolve pair: {e}")
    deleted = b_id if resolution is Resolution.KEEP_A else a_id
    print(f"deleted {deleted}")
    return 0


def cmd_create_account(
    name: str, account_type: str = "Checking", *, database_url: str | None = None
) -> int:
    from .api import create_account

    try:
        account_id = create_account(name, account_type, database_url=database_url)
    except Exception as e:
        return _print_error(f"could not create account: {e}")
    print(account_id)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import bank CSV statements idempotently and audit the ledger for duplicates. "
        "Loads DATABASE_URL from a local .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect these when used as default values below.
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a bank CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler will report nice errors
)
ACCOUNT_ID_OPTION: OptionInfo = typer.Option(..., "--account-id", help="Target account id")
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    None, "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
CATEGORIZE_OPTION: OptionInfo = typer.Option(
    True, "--categorize/--no-categorize", help="Apply category rules while importing."
)


@app.command("import-file")
def import_file_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    account_id: Annotated[int, ACCOUNT_ID_OPTION],
    *,
    database_url: str | None = DATABASE_URL_OPTION,
    categorize: bool = CATEGORIZE_OPTION,
) -> None:
    """Import one CSV file into an account."""

    raise typer.Exit(
        cmd_import_file(
            str(csv_path), account_id, database_url=database_url, categorize=categorize
        )
    )


@app.command("import-dir")
def import_dir_cmd(
    folder: Path = typer.Option(..., "--folder", help="Folder of CSV exports", file_okay=False),
    account_id: int = ACCOUNT_ID_OPTION,
    *,
    database_url: str | None = DATABASE_URL_OPTION,
    categorize: bool = CATEGORIZE_OPTION,
) -> None:
    """Import every CSV file in a folder (name order) into an account."""

    raise typer.Exit(
        cmd_import_dir(str(folder), account_id, database_url=database_url, categorize=categorize)
    )


@app.command("detect")
def detect_cmd(csv_path: Annotated[Path, CSV_PATH_OPTION]) -> None:
    """Print the source tag of the adapter that recognizes a file."""

    raise typer.Exit(cmd_detect(str(csv_path)))


@app.command("formats")
def formats_cmd() -> None:
    """List supported bank formats."""

    raise typer.Exit(cmd_formats())


@app.command("audit")
def audit_cmd(
    *,
    account_id: int | None = typer.Option(None, help="Audit one account (default: all)."),
    lookback_days: int | None = typer.Option(None, help="Days of history to scan."),
    window_days: int | None = typer.Option(None, help="Max day gap for near duplicates."),
    threshold: float | None = typer.Option(None, help="Min description similarity (0..1)."),
    max_results: int | None = typer.Option(None, help="Stop after this many candidates."),
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Report exact and near duplicate transaction pairs."""

    raise typer.Exit(
        cmd_audit(
            account_id=account_id,
            lookback_days=lookback_days,
            window_days=window_days,
            threshold=threshold,
            max_results=max_results,
            database_url=database_url,
        )
    )


@app.command("ignore-pair")
def ignore_pair_cmd(
    a_id: int = typer.Argument(..., help="Transaction id"),
    b_id: int = typer.Argument(..., help="Transaction id"),
    *,
    reason: str | None = typer.Option(None, help="Why this is not a duplicate."),
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Mark a pair as not a duplicate so audits never report it again."""

    raise typer.Exit(cmd_ignore_pair(a_id, b_id, reason=reason, database_url=database_url))


@app.command("resolve")
def resolve_cmd(
    a_id: int = typer.Argument(..., help="Transaction id (A)"),
    b_id: int = typer.Argument(..., help="Transaction id (B)"),
    *,
    keep: str = typer.Option(..., "--keep", help="Side to keep: a or b."),
    reason: str | None = typer.Option(None, help="Optional note."),
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Keep one side of a duplicate pair and soft-delete the other."""

    raise typer.Exit(cmd_resolve(a_id, b_id, keep, reason=reason, database_url=database_url))


@app.command("create-account")
def create_account_cmd(
    name: str = typer.Argument(..., help="Account display name"),
    *,
    account_type: str = typer.Option("Checking", help="Checking, CreditCard, ..."),
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Create an account and print its id."""

    raise typer.Exit(cmd_create_account(name, account_type, database_url=database_url))


@app.callback()
def _root(
    *,
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Debug logging."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Warnings and errors only."),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    # Load environment from .env in CWD (override=False to keep existing env)
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging(level_for_verbosity(verbose, quiet=quiet))


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    # Running as a module: `python -m statement_ingest.cli`
    app()

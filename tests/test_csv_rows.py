import textwrap

from statement_ingest.ingest.csv_rows import (
    locate_header,
    read_csv_rows,
    read_lines,
    rows_from_text,
    split_header,
)


def _dedent(s: str) -> str:
    # Keep internal newlines, but normalize indentation for readability.
    return textwrap.dedent(s).lstrip("\n")


def test_quoted_fields_commas_newlines_and_doubled_quotes():
    text = _dedent(
        '''
        Date,Description,Amount
        01/02/2025,"ACME, INC ""WIDGETS""",12.50
        01/03/2025,"MULTI
        LINE",3.00
        '''
    )
    rows = list(rows_from_text(text))

    assert [r.get("Description") for r in rows] == ['ACME, INC "WIDGETS"', "MULTI\nLINE"]
    assert rows[0].line_no == 2
    assert rows[1].line_no == 4  # record ends on the second physical line


def test_lookups_are_case_insensitive_and_header_cells_trimmed():
    rows = list(rows_from_text(' POSTED DATE , "Description" ,AMOUNT\n01/02/2025,COFFEE,-4.00\n'))

    row = rows[0]
    assert row.get("posted date") == "01/02/2025"
    assert row.get("DESCRIPTION") == "COFFEE"
    assert row.get("Amount") == "-4.00"
    assert "posted date" in row


def test_short_rows_leave_trailing_cells_absent():
    rows = list(rows_from_text("Date,Description,Amount,Memo\n01/02/2025,COFFEE\n"))

    assert rows[0].get("Description") == "COFFEE"
    assert rows[0].get("Amount") is None
    assert rows[0].get("Memo") is None
    assert rows[0].get_first("Amount", "Memo") is None


def test_get_first_skips_blank_candidates():
    rows = list(rows_from_text("Debit,Credit,Amount\n ,,7.25\n"))

    assert rows[0].get_first("Debit", "Credit", "Amount") == "7.25"
    assert rows[0].get_first("Nope") is None


def test_blank_lines_and_blank_records_are_skipped():
    text = "\n\nDate,Amount\n\n01/02/2025,1.00\n , \n01/03/2025,2.00\n\n"
    rows = list(rows_from_text(text))

    assert [r.get("Amount") for r in rows] == ["1.00", "2.00"]


def test_bom_is_stripped_from_files(tmp_path):
    path = tmp_path / "bom.csv"
    path.write_bytes("\ufeffDate,Amount\r\n01/02/2025,1.00\r\n".encode())

    rows = list(read_csv_rows(path))

    assert rows[0].get("Date") == "01/02/2025"


def test_header_line_offset_skips_preamble(tmp_path):
    path = tmp_path / "preamble.csv"
    path.write_text(
        "Transaction Details\nPrepared for\nX\nDate,Description,Amount\n01/02/2025,A,1.00\n",
        encoding="utf-8",
    )

    rows = list(read_csv_rows(path, header_line=3))

    assert len(rows) == 1
    assert rows[0].get("Description") == "A"
    assert rows[0].line_no == 5


def test_locate_header_finds_signature_below_preamble():
    lines = [
        "Transaction Details",
        "Blue Cash Everyday / Jan 01, 2025 to Jan 31, 2025",
        "",
        "Date,Description,Card Member,Account #,Amount,Extended Details",
    ]

    assert locate_header(lines, ["date", "DESCRIPTION", "Account #", "Amount"]) == 3
    assert locate_header(lines, ["Date", "Check Number"]) is None


def test_split_header_trims_cells_and_quotes():
    cells = split_header(' "Date" , Description ,"Account #"')

    assert cells == ["Date", "Description", "Account #"]


def test_rows_are_produced_lazily(tmp_path):
    path = tmp_path / "lazy.csv"
    path.write_text("Date,Amount\n01/02/2025,1.00\n01/03/2025,2.00\n", encoding="utf-8")

    it = read_csv_rows(path)
    first = next(it)

    assert first.get("Amount") == "1.00"
    assert next(it).get("Amount") == "2.00"


def test_undecodable_bytes_are_replaced_not_raised(tmp_path):
    path = tmp_path / "latin1.csv"
    path.write_bytes(b"Date,Description\r\n01/02/2025,CAF\xe9 ROMA\r\n01/03/2025,DINER\r\n")

    rows = list(read_csv_rows(path))

    assert [r.get("Description") for r in rows] == ["CAF\ufffd ROMA", "DINER"]
    assert read_lines(path)[1] == "01/02/2025,CAF\ufffd ROMA"

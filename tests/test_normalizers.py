from datetime import date
from decimal import Decimal

import pytest
from statement_ingest.errors import AmountFormatError, DateFormatError, RowFormatError
from statement_ingest.normalizers import (
    AmountSignPolicy,
    format_amount,
    normalize_amount,
    normalize_debit_credit,
    parse_amount,
    parse_date,
    parse_optional_amount,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("12.50", "12.50"),
        ("-12.5", "-12.50"),
        ("+7", "7.00"),
        ("$1,234.56", "1234.56"),
        ("-$1,234.56", "-1234.56"),
        ("$-5.00", "-5.00"),
        ("(42.10)", "-42.10"),
        ("$(1,000.00)", "-1000.00"),
        ("12.50-", "-12.50"),
        (" 3.333 ", "3.33"),
        ("1.005", "1.01"),
        (".99", "0.99"),
        ("€ 8", "8.00"),
    ],
)
def test_parse_amount_accepts_common_bank_spellings(raw, expected):
    assert parse_amount(raw) == Decimal(expected)


@pytest.mark.parametrize("raw", [None, "", "   ", "abc", "1.2.3", ".", "12a", "--"])
def test_parse_amount_rejects_garbage(raw):
    with pytest.raises(AmountFormatError):
        parse_amount(raw)


def test_amount_errors_are_row_format_and_value_errors():
    with pytest.raises(RowFormatError):
        parse_amount("nope")
    with pytest.raises(ValueError):
        parse_amount("nope")


def test_parse_optional_amount_blank_is_none():
    assert parse_optional_amount(None) is None
    assert parse_optional_amount("  ") is None
    assert parse_optional_amount("4.20") == Decimal("4.20")


def test_sign_policies():
    v = Decimal("19.99")
    assert normalize_amount(v, AmountSignPolicy.AS_IS) == v
    assert normalize_amount(v, AmountSignPolicy.INVERT) == -v
    with pytest.raises(ValueError):
        normalize_amount(v, AmountSignPolicy.DEBIT_CREDIT_COLUMNS)


def test_debit_credit_merge():
    assert normalize_debit_credit(Decimal("12.50"), None) == Decimal("-12.50")
    assert normalize_debit_credit(None, Decimal("12.50")) == Decimal("12.50")
    # Some exports print the unused side as 0.00.
    assert normalize_debit_credit(Decimal("0.00"), Decimal("3.00")) == Decimal("3.00")
    # Already-negative debit stays an expense.
    assert normalize_debit_credit(Decimal("-8.00"), None) == Decimal("-8.00")


@pytest.mark.parametrize(
    "debit,credit",
    [
        (Decimal("5"), Decimal("5")),
        (None, None),
        (Decimal("0"), Decimal("0")),
    ],
)
def test_debit_credit_needs_exactly_one_side(debit, credit):
    with pytest.raises(AmountFormatError):
        normalize_debit_credit(debit, credit)


def test_format_amount_is_two_decimals_without_negative_zero():
    assert format_amount(Decimal("-12.5")) == "-12.50"
    assert format_amount(Decimal("1234")) == "1234.00"
    assert format_amount(Decimal("-0.00")) == "0.00"
    assert format_amount(Decimal("-0.001")) == "0.00"


@pytest.mark.parametrize(
    "raw",
    [
        "01/02/2025",
        "1/2/25",
        "2025-01-02",
        "20250102",
        "02-Jan-2025",
        "Jan 02, 2025",
        "01/02/2025 00:00:00",
        " 2025-01-02 ",
        "January 2, 2025",
    ],
)
def test_parse_date_formats(raw):
    assert parse_date(raw) == date(2025, 1, 2)


@pytest.mark.parametrize("raw", [None, "", "  ", "not a date", "13/45/2025"])
def test_parse_date_rejects_garbage(raw):
    with pytest.raises(DateFormatError):
        parse_date(raw)

from decimal import Decimal

from txn_extractor.core.amount_extractor import (
    detect_currency,
    extract_amount,
    extract_amount_and_currency,
    is_valid_amount,
    parse_amount,
)


def test_received_for_pattern():
    assert extract_amount("Payment received for GHS 123.00 from JANE SMITH") == Decimal("123.00")


def test_code_before_amount():
    assert extract_amount_and_currency("GHS 500.00 has been debited") == (Decimal("500.00"), "GHS")


def test_code_after_amount():
    assert extract_amount_and_currency("You spent 45.50 USD at the store") == (Decimal("45.50"), "USD")


def test_thousands_separator_is_stripped():
    assert extract_amount("NGN 12,500.00 debited from your account") == Decimal("12500.00")


def test_symbol_amount():
    assert extract_amount_and_currency("Your card was charged $19.99") == (Decimal("19.99"), "USD")


def test_currency_labelled_beats_bare_number():
    text = "Balance 1,234.56. Amt: GHS 50.00 paid to ECG"
    assert extract_amount(text) == Decimal("50.00")


def test_bare_number_last_resort_uses_base_currency():
    assert extract_amount_and_currency("Txn of 75.25 completed", "GHS") == (Decimal("75.25"), "GHS")


def test_amount_above_ceiling_is_rejected():
    assert extract_amount("Debit of 5000000000.00 recorded") is None


def test_no_amount():
    assert extract_amount("Thank you for banking with us") is None
    assert extract_amount("") is None


def test_zero_is_not_valid():
    assert extract_amount("GHS 0.00 debited") is None


def test_rand_symbol_is_case_sensitive():
    assert extract_amount_and_currency("Paid R250.00 at Checkers") == (Decimal("250.00"), "ZAR")
    assert extract_amount_and_currency("SHOPRITE total 25.00") == (Decimal("25.00"), "GHS")


def test_parse_amount():
    assert parse_amount("1,250.75") == Decimal("1250.75")
    assert parse_amount("GHS150.00") == Decimal("150.00")
    assert parse_amount("n/a") is None
    assert parse_amount(None) is None


def test_is_valid_amount_per_currency_limit():
    assert is_valid_amount(Decimal("400000"), "USD")
    assert not is_valid_amount(Decimal("600000"), "USD")
    assert is_valid_amount(Decimal("600000"), "GHS")
    assert not is_valid_amount(Decimal("-5"), "GHS")


def test_detect_currency():
    assert detect_currency("you paid eur 20") == "EUR"
    assert detect_currency("you paid £20") == "GBP"
    assert detect_currency("you paid 20", default="GHS") == "GHS"

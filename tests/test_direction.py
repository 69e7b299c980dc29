from txn_extractor.core.direction import classify_direction, direction_scores
from txn_extractor.models import Direction


def test_strong_expense_phrase():
    assert classify_direction("GHS 500.00 has been debited from your account") == Direction.EXPENSE


def test_strong_income_phrase():
    assert classify_direction("Payment received for GHS 123.00 from JANE SMITH") == Direction.INCOME


def test_has_sent_you_is_income():
    assert classify_direction("KOFI MENSAH has sent you GHS 40.00") == Direction.INCOME


def test_first_declared_strong_indicator_wins():
    # 'credited' is declared before 'debited'
    text = "Your account was debited GHS 20 and credited GHS 20"
    assert classify_direction(text) == Direction.INCOME


def test_general_keywords_two_to_one_income():
    assert classify_direction("credit deposit debit") == Direction.INCOME


def test_general_keywords_two_to_one_expense():
    assert classify_direction("Transfer to savings, payment processed") == Direction.EXPENSE


def test_tie_resolves_to_expense():
    assert classify_direction("credit debit") == Direction.EXPENSE


def test_no_evidence_resolves_to_expense():
    assert classify_direction("hello") == Direction.EXPENSE
    assert classify_direction("") == Direction.EXPENSE


def test_loan_disbursement_is_income():
    assert classify_direction("Your loan of GHS 1,000 was paid into your wallet") == Direction.INCOME


def test_loan_repayment_is_expense():
    assert classify_direction("Loan repayment of GHS 200 received. Thank you") == Direction.EXPENSE


def test_context_phrases_add_weight():
    scores = direction_scores("money into your account")
    assert scores[Direction.INCOME] > scores[Direction.EXPENSE]

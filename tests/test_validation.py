from datetime import date, datetime, timedelta

from tracker.domain import AccountDraft, CategoryDraft, Credentials, Transaction, TransactionDraft, is_editable
from tracker.functional import Left, Right
from tracker.validation import validate_account, validate_category, validate_credentials, validate_transaction


def expense_draft(**overrides):
    fields = dict(
        type="expense", amount=12.5, description="Coffee", date=date(2024, 1, 1),
        account_id="a1", category_id="c1", division="personal",
    )
    fields.update(overrides)
    return TransactionDraft(**fields)


def test_valid_expense_becomes_payload():
    result = validate_transaction(expense_draft())
    assert isinstance(result, Right)
    assert result.value["category"] == "c1"
    assert "toAccount" not in result.value


def test_empty_draft_reports_every_required_field():
    errors = validate_transaction(TransactionDraft()).get_error()
    assert errors == {
        "description": "Title is required",
        "amount": "Amount is required",
        "date": "Date is required",
        "account": "Account is required",
        "category": "Category is required",
        "division": "Division is required",
    }


def test_short_title_and_non_positive_amount():
    errors = validate_transaction(expense_draft(description="a", amount=0)).get_error()
    assert errors["description"] == "Title must be at least 2 characters"
    assert errors["amount"] == "Amount must be greater than 0"


def test_transfer_to_same_account_is_rejected():
    result = validate_transaction(expense_draft(type="transfer", category_id="", to_account_id="a1"))
    assert result == Left({"toAccount": "Cannot transfer to same account"})


def test_transfer_needs_no_category():
    result = validate_transaction(expense_draft(type="transfer", category_id="", to_account_id="a2"))
    assert result.is_right()
    assert result.value["toAccount"] == "a2"


def test_recurring_needs_known_pattern():
    assert validate_transaction(expense_draft(is_recurring=True)).get_error() == {
        "recurringPattern": "Pattern is required for recurring transactions",
    }
    assert validate_transaction(expense_draft(is_recurring=True, recurring_pattern="hourly")).is_left()
    assert validate_transaction(expense_draft(is_recurring=True, recurring_pattern="daily")).is_right()


def test_bad_division_and_date():
    errors = validate_transaction(expense_draft(division="home", date="soon")).get_error()
    assert errors == {"division": "Invalid division", "date": "Invalid date"}


def test_account_and_category_forms():
    assert validate_account(AccountDraft(name="Main", type="checking", balance=10)).is_right()
    assert validate_account(AccountDraft(name="", type="boat", balance="x")).get_error() == {
        "name": "Account name is required",
        "type": "Invalid account type",
        "balance": "Balance must be a number",
    }
    assert validate_category(CategoryDraft(name="Pets", type="expense")) == Right({"name": "Pets", "type": "expense"})
    assert validate_category(CategoryDraft(name="Pets", type="transfer")).is_left()


def test_credentials():
    assert validate_credentials(Credentials("me@example.com", "secret1")) == Right(
        {"email": "me@example.com", "password": "secret1"}
    )
    errors = validate_credentials(Credentials("nope", "123"), signup=True).get_error()
    assert errors == {
        "email": "Invalid email address",
        "password": "Password must be at least 6 characters",
        "name": "Name is required",
    }


def test_editable_window():
    now = datetime(2024, 1, 2, 12, 0)
    recent = Transaction("t", "expense", 1, "x", now - timedelta(hours=3), "a1", "c1")
    old = Transaction("t", "expense", 1, "x", now - timedelta(hours=13), "a1", "c1")
    assert is_editable(recent, now)
    assert not is_editable(old, now)
    # the backend flag wins over the window
    flagged = Transaction("t", "expense", 1, "x", now, "a1", "c1", is_editable=False)
    assert not is_editable(flagged, now)

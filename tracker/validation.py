"""Form validation. Runs before any request is sent.

Each validator returns Right(wire payload) or Left({field: message}) so the
view can show the message next to the offending field.
"""
import re
from datetime import date, datetime

from tracker.domain import (
    ACCOUNT_TYPES,
    CATEGORY_TYPES,
    DIVISIONS,
    RECURRING_PATTERNS,
    TRANSACTION_TYPES,
    AccountDraft,
    CategoryDraft,
    Credentials,
    TransactionDraft,
)
from tracker.functional import Either, Left, Right
from tracker.transforms import account_to_wire, category_to_wire, parse_datetime, transaction_to_wire

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD = 6
MIN_DESCRIPTION = 2


def _amount(value) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def validate_transaction(draft: TransactionDraft) -> Either[dict, dict]:
    errors: dict[str, str] = {}

    if draft.type not in TRANSACTION_TYPES:
        errors["type"] = "Invalid transaction type"

    description = (draft.description or "").strip()
    if not description:
        errors["description"] = "Title is required"
    elif len(description) < MIN_DESCRIPTION:
        errors["description"] = "Title must be at least 2 characters"

    amount = _amount(draft.amount)
    if draft.amount in (None, ""):
        errors["amount"] = "Amount is required"
    elif amount is None or amount < 0.01:
        errors["amount"] = "Amount must be greater than 0"

    when = draft.date
    if when in (None, ""):
        errors["date"] = "Date is required"
    elif not isinstance(when, (date, datetime)) and parse_datetime(when) is None:
        errors["date"] = "Invalid date"

    if not draft.account_id:
        errors["account"] = "Account is required"

    if draft.type == "transfer":
        if not draft.to_account_id:
            errors["toAccount"] = "Destination account is required"
        elif draft.to_account_id == draft.account_id:
            errors["toAccount"] = "Cannot transfer to same account"
    elif not draft.category_id:
        errors["category"] = "Category is required"

    if not draft.division:
        errors["division"] = "Division is required"
    elif draft.division not in DIVISIONS:
        errors["division"] = "Invalid division"

    if draft.is_recurring:
        if not draft.recurring_pattern:
            errors["recurringPattern"] = "Pattern is required for recurring transactions"
        elif draft.recurring_pattern not in RECURRING_PATTERNS:
            errors["recurringPattern"] = "Invalid recurring pattern"

    if errors:
        return Left(errors)
    return Right(transaction_to_wire(draft))


def validate_account(draft: AccountDraft) -> Either[dict, dict]:
    errors: dict[str, str] = {}
    if not (draft.name or "").strip():
        errors["name"] = "Account name is required"
    if draft.type not in ACCOUNT_TYPES:
        errors["type"] = "Invalid account type"
    if draft.balance not in (None, "") and _amount(draft.balance) is None:
        errors["balance"] = "Balance must be a number"
    if errors:
        return Left(errors)
    return Right(account_to_wire(draft))


def validate_category(draft: CategoryDraft) -> Either[dict, dict]:
    errors: dict[str, str] = {}
    if not (draft.name or "").strip():
        errors["name"] = "Category name is required"
    if draft.type not in CATEGORY_TYPES:
        errors["type"] = "Category type must be income or expense"
    if errors:
        return Left(errors)
    return Right(category_to_wire(draft))


def validate_credentials(creds: Credentials, signup: bool = False) -> Either[dict, dict]:
    errors: dict[str, str] = {}
    email = (creds.email or "").strip()
    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_RE.match(email):
        errors["email"] = "Invalid email address"
    if not creds.password:
        errors["password"] = "Password is required"
    elif len(creds.password) < MIN_PASSWORD:
        errors["password"] = "Password must be at least 6 characters"
    if signup and not (creds.name or "").strip():
        errors["name"] = "Name is required"
    if errors:
        return Left(errors)

    payload = {"email": email, "password": creds.password}
    if signup:
        payload["name"] = creds.name.strip()
    return Right(payload)

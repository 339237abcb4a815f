from datetime import date, datetime

from tracker.domain import AccountDraft, TransactionDraft
from tracker.transforms import (
    account_to_wire,
    accounts_from_wire,
    categories_from_wire,
    parse_datetime,
    query_params,
    transaction_from_wire,
    transaction_to_wire,
    transactions_from_wire,
    unwrap_item,
    unwrap_list,
)


def wire_tx(**overrides):
    tx = {
        "_id": "t1",
        "type": "expense",
        "amount": 50,
        "description": "Lunch",
        "date": "2024-01-01T12:00:00.000Z",
        "category": {"_id": "c1", "name": "Food"},
        "account": "a1",
        "division": "personal",
        "tags": ["food", " work "],
    }
    tx.update(overrides)
    return tx


def test_unwrap_list_accepts_wrapped_and_bare():
    assert unwrap_list({"accounts": [1, 2]}, "accounts") == [1, 2]
    assert unwrap_list([1, 2], "accounts") == [1, 2]
    assert unwrap_list({"other": [1]}, "accounts") == []
    assert unwrap_list(None, "accounts") == []


def test_unwrap_item():
    assert unwrap_item({"transaction": {"_id": "x"}, "message": "ok"}, "transaction") == {"_id": "x"}
    assert unwrap_item({"_id": "x"}, "transaction") == {"_id": "x"}


def test_parse_datetime_normalises_to_naive_utc():
    assert parse_datetime("2024-01-01T12:00:00.000Z") == datetime(2024, 1, 1, 12, 0)
    assert parse_datetime("2024-01-01T12:00:00+02:00") == datetime(2024, 1, 1, 10, 0)
    assert parse_datetime("2024-01-01") == datetime(2024, 1, 1)
    assert parse_datetime(date(2024, 3, 4)) == datetime(2024, 3, 4)
    assert parse_datetime("yesterday") is None
    assert parse_datetime(None) is None


def test_transaction_from_wire_resolves_populated_refs():
    tx = transaction_from_wire(wire_tx())
    assert tx.id == "t1"
    assert tx.category_id == "c1"
    assert tx.category_name == "Food"
    assert tx.account_id == "a1"
    assert tx.to_account_id is None
    assert tx.tags == ("food", "work")
    assert tx.date == datetime(2024, 1, 1, 12, 0)
    assert tx.is_editable is None


def test_transfer_drops_category_and_same_account_destination():
    tx = transaction_from_wire(wire_tx(type="transfer", toAccount={"_id": "a2"}))
    assert tx.category_id is None
    assert tx.to_account_id == "a2"

    same = transaction_from_wire(wire_tx(type="transfer", toAccount="a1"))
    assert same.to_account_id is None


def test_non_transfer_drops_destination():
    tx = transaction_from_wire(wire_tx(toAccount="a2"))
    assert tx.to_account_id is None


def test_recurring_pattern_only_kept_when_recurring():
    assert transaction_from_wire(wire_tx(recurringPattern="weekly")).recurring_pattern is None
    assert transaction_from_wire(wire_tx(isRecurring=True, recurringPattern="weekly")).recurring_pattern == "weekly"


def test_transactions_from_wire_skips_undated_rows():
    payload = {"transactions": [wire_tx(), wire_tx(_id="t2", date=None)], "pagination": {"page": 1}}
    assert [t.id for t in transactions_from_wire(payload)] == ["t1"]


def test_grouped_categories_are_flattened():
    payload = {
        "categories": {
            "income": [{"_id": "c1", "name": "Salary", "type": "income", "isDefault": True}],
            "expense": [{"_id": "c2", "name": "Food", "type": "expense"}],
        },
        "total": 2,
    }
    cats = categories_from_wire(payload)
    assert [c.name for c in cats] == ["Salary", "Food"]
    assert cats[0].is_default
    assert [c.id for c in categories_from_wire([{"_id": "c9", "name": "X", "type": "expense"}])] == ["c9"]


def test_accounts_from_wire_defaults():
    (acc,) = accounts_from_wire([{"_id": "a1", "name": "Card", "type": "credit", "balance": "-20.5"}])
    assert acc.balance == -20.5
    assert acc.currency == "USD"
    assert acc.is_active


def test_transaction_to_wire_shapes_payload():
    draft = TransactionDraft(
        type="transfer", amount="25", description=" Move ", date=date(2024, 1, 2),
        account_id="a1", category_id="c1", to_account_id="a2", division="office",
        tags="a, ,b", is_recurring=True, recurring_pattern="monthly",
    )
    assert transaction_to_wire(draft) == {
        "type": "transfer",
        "amount": 25.0,
        "description": "Move",
        "date": "2024-01-02",
        "division": "office",
        "account": "a1",
        "tags": ["a", "b"],
        "isRecurring": True,
        "toAccount": "a2",
        "recurringPattern": "monthly",
    }


def test_account_to_wire():
    assert account_to_wire(AccountDraft(name=" Main ", type="checking", balance="10", currency="eur")) == {
        "name": "Main", "type": "checking", "balance": 10.0, "currency": "EUR",
    }


def test_query_params_drop_empty_values():
    assert query_params({"type": "income", "category": "", "startDate": date(2024, 1, 1), "end": None}) == {
        "type": "income",
        "startDate": "2024-01-01",
    }

"""Boundary adapters between the REST payloads and the domain types.

Every endpoint has one normalization function here. The API is not
consistent about wrapping lists (`{"accounts": [...]}` vs a bare array),
about populating references (`"account": "abc"` vs `"account": {"_id": ...}`)
or about `_id` vs `id`, and none of that is allowed to leak past this module.
"""
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional

from tracker.domain import (
    Account,
    AccountDraft,
    Category,
    CategoryDraft,
    Transaction,
    TransactionDraft,
    User,
)


def unwrap_list(payload: Any, key: str) -> list:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        inner = payload.get(key)
        if isinstance(inner, list):
            return inner
    return []


def unwrap_item(payload: Any, key: str) -> Any:
    if isinstance(payload, dict) and isinstance(payload.get(key), dict):
        return payload[key]
    return payload


def parse_datetime(value: Any) -> Optional[datetime]:
    """ISO string, date or datetime -> naive UTC datetime. None when unparseable."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _id_of(obj: dict) -> str:
    return str(obj.get("_id") or obj.get("id") or "")


def _ref(value: Any) -> tuple[Optional[str], str]:
    """A reference is either an id string or a populated object; returns (id, name)."""
    if isinstance(value, dict):
        ref_id = _id_of(value)
        return (ref_id or None), str(value.get("name") or "")
    if value in (None, ""):
        return None, ""
    return str(value), ""


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def user_from_wire(payload: Any) -> Optional[User]:
    data = unwrap_item(payload, "user")
    if not isinstance(data, dict):
        return None
    return User(id=_id_of(data), name=str(data.get("name") or ""), email=str(data.get("email") or ""))


def account_from_wire(payload: Any) -> Optional[Account]:
    data = unwrap_item(payload, "account")
    if not isinstance(data, dict):
        return None
    return Account(
        id=_id_of(data),
        name=str(data.get("name") or ""),
        type=str(data.get("type") or "other"),
        balance=_as_float(data.get("balance")),
        currency=str(data.get("currency") or "USD"),
        is_active=bool(data.get("isActive", True)),
    )


def accounts_from_wire(payload: Any) -> tuple[Account, ...]:
    return tuple(account_from_wire(a) for a in unwrap_list(payload, "accounts") if isinstance(a, dict))


def category_from_wire(payload: Any) -> Optional[Category]:
    data = unwrap_item(payload, "category")
    if not isinstance(data, dict):
        return None
    return Category(
        id=_id_of(data),
        name=str(data.get("name") or ""),
        type=str(data.get("type") or "expense"),
        icon=str(data.get("icon") or ""),
        is_active=bool(data.get("isActive", True)),
        is_default=bool(data.get("isDefault", False)),
    )


def categories_from_wire(payload: Any) -> tuple[Category, ...]:
    # {categories: [...]}, a bare array, or {categories: {income: [...], expense: [...]}}
    raw: list = []
    if isinstance(payload, dict) and isinstance(payload.get("categories"), dict):
        grouped = payload["categories"]
        raw = list(grouped.get("income") or []) + list(grouped.get("expense") or [])
    else:
        raw = unwrap_list(payload, "categories")
    return tuple(category_from_wire(c) for c in raw if isinstance(c, dict))


def _tags(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(t).strip() for t in value if str(t).strip())


def transaction_from_wire(payload: Any) -> Optional[Transaction]:
    data = unwrap_item(payload, "transaction")
    if not isinstance(data, dict):
        return None
    when = parse_datetime(data.get("date"))
    if when is None:
        return None

    tx_type = str(data.get("type") or "expense")
    account_id, account_name = _ref(data.get("account"))
    category_id, category_name = _ref(data.get("category"))
    to_account_id, _ = _ref(data.get("toAccount"))

    if tx_type == "transfer":
        category_id, category_name = None, ""
        if to_account_id == account_id:
            to_account_id = None
    else:
        to_account_id = None

    pattern = data.get("recurringPattern") or None
    editable = data.get("isEditable")
    return Transaction(
        id=_id_of(data),
        type=tx_type,
        amount=_as_float(data.get("amount")),
        description=str(data.get("description") or ""),
        date=when,
        account_id=account_id or "",
        category_id=category_id,
        to_account_id=to_account_id,
        division=str(data.get("division") or "personal"),
        tags=_tags(data.get("tags")),
        is_recurring=bool(data.get("isRecurring", False)),
        recurring_pattern=pattern if data.get("isRecurring") else None,
        is_editable=editable if isinstance(editable, bool) else None,
        category_name=category_name,
        account_name=account_name,
    )


def transactions_from_wire(payload: Any) -> tuple[Transaction, ...]:
    parsed = (transaction_from_wire(t) for t in unwrap_list(payload, "transactions"))
    return tuple(t for t in parsed if t is not None)


def transaction_to_wire(draft: TransactionDraft) -> dict:
    """Expects a draft that already passed validation."""
    when = draft.date
    payload = {
        "type": draft.type,
        "amount": float(draft.amount),
        "description": draft.description.strip(),
        "date": when.isoformat() if isinstance(when, (date, datetime)) else str(when),
        "division": draft.division,
        "account": draft.account_id,
        "tags": list(_tags(draft.tags)),
        "isRecurring": bool(draft.is_recurring),
    }
    if draft.type == "transfer":
        payload["toAccount"] = draft.to_account_id
    else:
        payload["category"] = draft.category_id
    if draft.is_recurring and draft.recurring_pattern:
        payload["recurringPattern"] = draft.recurring_pattern
    return payload


def account_to_wire(draft: AccountDraft) -> dict:
    return {
        "name": draft.name.strip(),
        "type": draft.type,
        "balance": _as_float(draft.balance),
        "currency": (draft.currency or "USD").upper(),
    }


def category_to_wire(draft: CategoryDraft) -> dict:
    payload = {"name": draft.name.strip(), "type": draft.type}
    if draft.icon:
        payload["icon"] = draft.icon
    return payload


def query_params(filters: dict) -> dict:
    """Drop empty filter values; dates are sent as YYYY-MM-DD."""
    params = {}
    for key, value in filters.items():
        if value in (None, ""):
            continue
        params[key] = value.isoformat() if isinstance(value, date) else str(value)
    return params


def replace_by_id(items: Iterable, item_id: str, new) -> tuple:
    return tuple(new if getattr(i, "id", None) == item_id else i for i in items)


def remove_by_id(items: Iterable, item_id: str) -> tuple:
    return tuple(i for i in items if getattr(i, "id", None) != item_id)

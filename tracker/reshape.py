"""Dashboard payload reshaping.

The backend groups trends per (period bucket, transaction type), or sends
them already flat, and nests summary totals inside income/expense objects
or reports them as monthly figures. Everything here turns those
payloads into flat, chart-ready values.
"""
import dataclasses
from typing import Any, Iterable, Optional

from tracker.domain import Account, AccountsOverview, DashboardSummary, TrendPoint, Trends
from tracker.transforms import accounts_from_wire, unwrap_list

PERIODS = {
    "week": "weekly",
    "month": "monthly",
    "year": "yearly",
}
DEFAULT_PERIOD = "monthly"


def to_backend_period(token: Any) -> str:
    return PERIODS.get(token, DEFAULT_PERIOD) if isinstance(token, str) else DEFAULT_PERIOD


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _nested_total(data: dict, *keys: str) -> float:
    """First present key wins; accepts {"total": x}, {"amount": x} or a bare number."""
    for key in keys:
        if key not in data or data[key] is None:
            continue
        value = data[key]
        if isinstance(value, dict):
            return _number(value.get("total", value.get("amount", 0)))
        return _number(value)
    return 0.0


def savings_rate(net: float, income: float) -> float:
    if income <= 0:
        return 0.0
    return net * 100 / income


def summary_from_wire(payload: Any) -> DashboardSummary:
    data = payload if isinstance(payload, dict) else {}
    totals = data.get("summary") if isinstance(data.get("summary"), dict) else data

    # older payloads report flat monthlyIncome / monthlyExpenses instead
    income = _nested_total(totals, "income", "monthlyIncome")
    expenses = _nested_total(totals, "expense", "expenses", "monthlyExpenses")
    # a backend-supplied net is authoritative; derive only when it is absent
    if totals.get("net") is not None:
        net = _nested_total(totals, "net")
    else:
        net = income - expenses
    rate = totals.get("savingsRate")

    return DashboardSummary(
        income=income,
        expenses=expenses,
        net=net,
        savings_rate=_number(rate) if rate is not None else savings_rate(net, income),
        total_balance=_number(totals.get("totalBalance")),
        category_breakdown=tuple(unwrap_list(data, "categoryBreakdown")),
        recent_transactions=tuple(unwrap_list(data, "recentTransactions")),
    )


def total_balance(accounts: Iterable[Account]) -> float:
    return sum(a.balance for a in accounts if a.is_active)


def overview_from_wire(payload: Any) -> AccountsOverview:
    accounts = accounts_from_wire(payload)
    reported = payload.get("totalBalance") if isinstance(payload, dict) else None
    total = _number(reported) if reported is not None else total_balance(accounts)
    return AccountsOverview(accounts=accounts, total_balance=total)


def merge_total_balance(summary: Optional[DashboardSummary], overview: Optional[AccountsOverview]) -> Optional[DashboardSummary]:
    if summary is None or overview is None:
        return summary
    return dataclasses.replace(summary, total_balance=overview.total_balance)


def bucket_label(row: dict) -> Optional[str]:
    """Human readable key of the period bucket a trend row belongs to."""
    for key in ("period", "bucket"):
        if row.get(key) not in (None, ""):
            return str(row[key])
    parts = row.get("_id")
    if not isinstance(parts, dict):
        return None
    year = parts.get("year")
    if year is None:
        return None
    if parts.get("day") is not None and parts.get("month") is not None:
        return f"{parts['day']}/{parts['month']}/{year}"
    if parts.get("week") is not None:
        return f"W{parts['week']}/{year}"
    if parts.get("month") is not None:
        return f"{parts['month']}/{year}"
    return str(year)


def _row_type(row: dict) -> Optional[str]:
    if row.get("type"):
        return row["type"]
    parts = row.get("_id")
    if isinstance(parts, dict):
        return parts.get("type")
    return None


def group_trend_rows(rows: Iterable[dict]) -> tuple[TrendPoint, ...]:
    buckets: dict[str, dict[str, float]] = {}
    for row in rows:
        if not isinstance(row, dict):
            continue
        label = bucket_label(row)
        if label is None:
            continue
        slot = buckets.setdefault(label, {"income": 0.0, "expense": 0.0})
        row_type = _row_type(row)
        if row_type in slot:
            slot[row_type] += _number(row.get("total", row.get("amount", 0)))
        elif row_type is None:
            # already flat: {period, income, expenses}
            slot["income"] += _number(row.get("income"))
            slot["expense"] += _number(row.get("expenses", row.get("expense")))
    return tuple(TrendPoint(period=label, income=s["income"], expenses=s["expense"]) for label, s in buckets.items())


def trends_from_wire(payload: Any) -> Trends:
    rows: list = []
    for key in ("trends", "data"):
        rows = unwrap_list(payload, key)
        if rows:
            break
    data = payload if isinstance(payload, dict) else {}
    return Trends(
        points=group_trend_rows(rows),
        weekly_comparison=data.get("weeklyComparison") if isinstance(data.get("weeklyComparison"), dict) else None,
        monthly_comparison=data.get("monthlyComparison") if isinstance(data.get("monthlyComparison"), dict) else None,
    )


# chart rows, shaped for plotly / pandas

def trend_chart_rows(trends: Optional[Trends]) -> list[dict]:
    if trends is None:
        return []
    return [
        {"name": p.period, "income": p.income, "expenses": p.expenses, "savings": p.savings}
        for p in trends.points
    ]


def category_chart_rows(summary: Optional[DashboardSummary]) -> list[dict]:
    if summary is None:
        return []
    return [
        {"name": item.get("category", item.get("name", "")), "value": _number(item.get("amount")), "percentage": _number(item.get("percentage"))}
        for item in summary.category_breakdown
        if isinstance(item, dict)
    ]


def account_chart_rows(overview: Optional[AccountsOverview]) -> list[dict]:
    if overview is None:
        return []
    return [{"name": a.name, "balance": a.balance, "type": a.type} for a in overview.accounts]

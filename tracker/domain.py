from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

TRANSACTION_TYPES = ("income", "expense", "transfer")
ACCOUNT_TYPES = ("savings", "checking", "cash", "credit", "investment", "other")
CATEGORY_TYPES = ("income", "expense")
DIVISIONS = ("personal", "office")
RECURRING_PATTERNS = ("daily", "weekly", "monthly", "yearly")

EDIT_WINDOW = timedelta(hours=12)


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    type: str
    balance: float   # negative allowed for credit
    currency: str = "USD"
    is_active: bool = True


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    type: str        # 'income' | 'expense'
    icon: str = ""
    is_active: bool = True
    is_default: bool = False


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str                       # 'income' | 'expense' | 'transfer'
    amount: float
    description: str
    date: datetime                  # naive UTC
    account_id: str
    category_id: Optional[str] = None
    to_account_id: Optional[str] = None
    division: str = "personal"
    tags: tuple[str, ...] = ()
    is_recurring: bool = False
    recurring_pattern: Optional[str] = None
    is_editable: Optional[bool] = None
    category_name: str = ""
    account_name: str = ""


def is_editable(t: Transaction, now: datetime) -> bool:
    """Backend flag wins; otherwise a transaction stays editable for 12 hours."""
    if t.is_editable is not None:
        return t.is_editable
    return now - t.date <= EDIT_WINDOW


@dataclass(frozen=True)
class FilterSpec:
    search: str = ""
    type: str = ""
    category_id: str = ""
    account_id: str = ""
    division: str = ""
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class SortSpec:
    field: str = "date"   # 'date' | 'type' | 'amount'
    direction: str = "desc"


@dataclass(frozen=True)
class Page:
    items: tuple[Transaction, ...]
    count: int
    total_pages: int


@dataclass(frozen=True)
class DashboardSummary:
    income: float = 0.0
    expenses: float = 0.0
    net: float = 0.0
    savings_rate: float = 0.0
    category_breakdown: tuple[dict, ...] = ()
    recent_transactions: tuple[dict, ...] = ()
    total_balance: float = 0.0


@dataclass(frozen=True)
class TrendPoint:
    period: str
    income: float = 0.0
    expenses: float = 0.0

    @property
    def savings(self) -> float:
        return self.income - self.expenses


@dataclass(frozen=True)
class Trends:
    points: tuple[TrendPoint, ...] = ()
    weekly_comparison: Optional[dict] = None
    monthly_comparison: Optional[dict] = None


@dataclass(frozen=True)
class AccountsOverview:
    accounts: tuple[Account, ...] = ()
    total_balance: float = 0.0


# Outgoing form state. Values are kept as typed by the user until validated.

@dataclass(frozen=True)
class TransactionDraft:
    type: str = "expense"
    amount: object = None
    description: str = ""
    date: object = None
    account_id: str = ""
    category_id: str = ""
    to_account_id: str = ""
    division: str = ""
    tags: object = ""       # comma separated string or a sequence
    is_recurring: bool = False
    recurring_pattern: str = ""


@dataclass(frozen=True)
class AccountDraft:
    name: str = ""
    type: str = "savings"
    balance: object = 0
    currency: str = "USD"


@dataclass(frozen=True)
class CategoryDraft:
    name: str = ""
    type: str = "expense"
    icon: str = ""


@dataclass(frozen=True)
class Credentials:
    email: str = ""
    password: str = ""
    name: str = ""

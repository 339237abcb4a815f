import math
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, Optional

from tracker.domain import FilterSpec, Page, SortSpec, Transaction
from tracker.functional import pipe

Predicate = Callable[[Transaction], bool]

SORT_KEYS: dict[str, Callable[[Transaction], object]] = {
    "date": lambda t: t.date,
    "type": lambda t: t.type,
    "amount": lambda t: t.amount,
}

DEFAULT_PAGE_SIZE = 10


def _as_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def by_search(text: str) -> Predicate:
    needle = text.lower()
    return lambda t: needle in t.description.lower()


def by_field(name: str, value: str) -> Predicate:
    return lambda t: getattr(t, name) == value


def from_date(start: date) -> Predicate:
    lower = datetime.combine(start, time.min)
    return lambda t: t.date >= lower


def until_date(end: date) -> Predicate:
    # inclusive through the whole end day
    upper = datetime.combine(end + timedelta(days=1), time.min)
    return lambda t: t.date < upper


def predicates(filters: FilterSpec) -> list[Predicate]:
    """Only criteria that are actually set produce a predicate."""
    preds: list[Predicate] = []
    if isinstance(filters.search, str) and filters.search.strip():
        preds.append(by_search(filters.search.strip()))
    for name in ("type", "category_id", "account_id", "division"):
        value = getattr(filters, name)
        if isinstance(value, str) and value:
            preds.append(by_field(name, value))
    start = _as_date(filters.start)
    if start is not None:
        preds.append(from_date(start))
    end = _as_date(filters.end)
    if end is not None:
        preds.append(until_date(end))
    return preds


def apply_filters(trans: Iterable[Transaction], filters: FilterSpec) -> tuple[Transaction, ...]:
    preds = predicates(filters)
    return tuple(t for t in trans if all(p(t) for p in preds))


def apply_sort(trans: Iterable[Transaction], sort: SortSpec) -> tuple[Transaction, ...]:
    # sorted() is stable in both directions, so ties keep their input order
    key = SORT_KEYS.get(sort.field, SORT_KEYS["date"])
    return tuple(sorted(trans, key=key, reverse=sort.direction != "asc"))


def total_pages(count: int, page_size: int) -> int:
    if page_size <= 0:
        return 0
    return math.ceil(count / page_size)


def paginate(trans: tuple[Transaction, ...], page: int, page_size: int) -> Page:
    pages = total_pages(len(trans), page_size)
    if page < 1 or page > pages:
        items: tuple[Transaction, ...] = ()
    else:
        start = (page - 1) * page_size
        items = trans[start:start + page_size]
    return Page(items=items, count=len(trans), total_pages=pages)


def run(
    trans: Iterable[Transaction],
    filters: FilterSpec = FilterSpec(),
    sort: SortSpec = SortSpec(),
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page:
    """Filter, then stable-sort, then cut out one page. Pure."""
    return pipe(
        trans,
        lambda ts: apply_filters(ts, filters),
        lambda ts: apply_sort(ts, sort),
        lambda ts: paginate(ts, page, page_size),
    )


def totals(trans: Iterable[Transaction]) -> dict[str, float]:
    income = 0.0
    expenses = 0.0
    for t in trans:
        if t.type == "income":
            income += t.amount
        elif t.type == "expense":
            expenses += t.amount
    return {"income": income, "expenses": expenses, "net": income - expenses}

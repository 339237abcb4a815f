from datetime import date, datetime

from tracker.domain import FilterSpec, SortSpec, Transaction
from tracker.pipeline import apply_filters, apply_sort, run, total_pages, totals


def make_tx(id, type, amount, ts, description="", **kw):
    return Transaction(
        id=id,
        type=type,
        amount=amount,
        description=description or id,
        date=datetime.fromisoformat(ts),
        account_id=kw.pop("account_id", "a1"),
        category_id=None if type == "transfer" else kw.pop("category_id", "c1"),
        **kw,
    )


def make_sample():
    return (
        make_tx("t1", "expense", 50, "2024-01-01T09:00:00", "Groceries at Market"),
        make_tx("t2", "income", 200, "2024-01-05T10:00:00", "Salary"),
        make_tx("t3", "expense", 50, "2024-01-05T23:30:00", "Taxi home", division="office"),
        make_tx("t4", "transfer", 300, "2024-01-06T00:00:00", "To savings", to_account_id="a2"),
        make_tx("t5", "expense", 12.5, "2024-01-03T12:00:00", "market snacks", category_id="c2", account_id="a2"),
        make_tx("t6", "income", 75, "2024-01-02T08:00:00", "Refund"),
    )


def test_filter_income_sorted_desc_single_page():
    trans = (
        make_tx("e", "expense", 50, "2024-01-01T00:00:00"),
        make_tx("i", "income", 200, "2024-01-05T00:00:00"),
    )
    page = run(trans, FilterSpec(type="income"), SortSpec("date", "desc"), page=1, page_size=10)
    assert [t.id for t in page.items] == ["i"]
    assert page.count == 1
    assert page.total_pages == 1


def test_every_returned_row_matches_and_no_excluded_row_does():
    trans = make_sample()
    filters = FilterSpec(type="expense", search="MARKET", account_id="a2")
    kept = apply_filters(trans, filters)

    def matches(t):
        return t.type == "expense" and "market" in t.description.lower() and t.account_id == "a2"

    assert [t.id for t in kept] == ["t5"]
    assert all(matches(t) for t in kept)
    assert not any(matches(t) for t in trans if t not in kept)


def test_unset_criteria_impose_nothing():
    trans = make_sample()
    assert apply_filters(trans, FilterSpec()) == trans


def test_invalid_values_are_no_constraint():
    trans = make_sample()
    assert apply_filters(trans, FilterSpec(start="not-a-date", type=None)) == trans


def test_date_bounds_are_inclusive_whole_days():
    trans = make_sample()
    kept = apply_filters(trans, FilterSpec(start=date(2024, 1, 2), end=date(2024, 1, 5)))
    # t3 at 23:30 on the end day stays, t4 at midnight the next day goes
    assert {t.id for t in kept} == {"t2", "t3", "t5", "t6"}


def test_start_bound_includes_midnight():
    trans = (make_tx("m", "expense", 1, "2024-02-01T00:00:00"),)
    assert apply_filters(trans, FilterSpec(start=date(2024, 2, 1))) == trans
    assert apply_filters(trans, FilterSpec(end=date(2024, 1, 31))) == ()


def test_division_and_category_filters():
    trans = make_sample()
    assert [t.id for t in apply_filters(trans, FilterSpec(division="office"))] == ["t3"]
    assert [t.id for t in apply_filters(trans, FilterSpec(category_id="c2"))] == ["t5"]


def test_sort_is_stable_in_both_directions():
    trans = make_sample()
    asc = apply_sort(trans, SortSpec("amount", "asc"))
    desc = apply_sort(trans, SortSpec("amount", "desc"))
    # t1 and t3 share amount 50 and keep their input order either way
    assert [t.id for t in asc] == ["t5", "t1", "t3", "t6", "t2", "t4"]
    assert [t.id for t in desc] == ["t4", "t2", "t6", "t1", "t3", "t5"]


def test_sort_by_date_and_type():
    trans = make_sample()
    assert [t.id for t in apply_sort(trans, SortSpec("date", "asc"))] == ["t1", "t6", "t5", "t2", "t3", "t4"]
    assert [t.type for t in apply_sort(trans, SortSpec("type", "asc"))] == [
        "expense", "expense", "expense", "income", "income", "transfer",
    ]


def test_unknown_sort_field_falls_back_to_date_desc():
    trans = make_sample()
    assert apply_sort(trans, SortSpec("colour", "sideways")) == apply_sort(trans, SortSpec("date", "desc"))


def test_same_inputs_give_same_output():
    trans = make_sample()
    args = (FilterSpec(type="expense"), SortSpec("amount", "desc"), 1, 2)
    assert run(trans, *args) == run(trans, *args)


def test_pages_concatenate_to_the_full_sorted_list():
    trans = make_sample()
    sort = SortSpec("date", "desc")
    first = run(trans, FilterSpec(), sort, page=1, page_size=4)
    assert first.total_pages == 2

    pages = [run(trans, FilterSpec(), sort, page=n, page_size=4).items for n in range(1, first.total_pages + 1)]
    joined = tuple(t for items in pages for t in items)
    assert joined == apply_sort(trans, sort)
    assert len({t.id for t in joined}) == len(trans)


def test_out_of_range_pages_are_empty():
    trans = make_sample()
    assert run(trans, page=5, page_size=4).items == ()
    assert run(trans, page=0, page_size=4).items == ()
    assert run(trans, page=5, page_size=4).count == 6


def test_total_pages():
    assert total_pages(0, 10) == 0
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2


def test_totals_ignore_transfers():
    assert totals(make_sample()) == {"income": 275.0, "expenses": 112.5, "net": 162.5}

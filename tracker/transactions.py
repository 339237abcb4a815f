import dataclasses
from dataclasses import dataclass
from typing import Optional

from tracker import pipeline
from tracker.api import ApiClient
from tracker.domain import FilterSpec, Page, SortSpec, Transaction, TransactionDraft
from tracker.events import EventBus
from tracker.functional import Maybe, find_by_id
from tracker.state import StateContainer
from tracker.transforms import query_params, remove_by_id, replace_by_id, transaction_from_wire, transactions_from_wire
from tracker.validation import validate_transaction

# FilterSpec field -> query parameter the list endpoint understands
QUERY_NAMES = {
    "search": "search",
    "type": "type",
    "category_id": "category",
    "account_id": "account",
    "division": "division",
    "start": "startDate",
    "end": "endDate",
}


@dataclass(frozen=True)
class TransactionState:
    transactions: tuple[Transaction, ...] = ()
    filters: FilterSpec = FilterSpec()
    sort: SortSpec = SortSpec()
    page: int = 1
    page_size: int = pipeline.DEFAULT_PAGE_SIZE
    loading: bool = False
    error: Optional[str] = None
    field_errors: tuple[tuple[str, str], ...] = ()


def filters_to_query(filters: FilterSpec) -> dict:
    return query_params({QUERY_NAMES[f.name]: getattr(filters, f.name) for f in dataclasses.fields(filters)})


class TransactionStore(StateContainer[TransactionState]):
    name = "transactions"

    def __init__(self, api: ApiClient, bus: EventBus, page_size: int = pipeline.DEFAULT_PAGE_SIZE):
        super().__init__(api, bus, TransactionState(page_size=page_size))

    async def load(self, filters: FilterSpec | None = None) -> bool:
        filters = filters or FilterSpec()
        params = filters_to_query(filters)
        outcome = await self._request("load", "Failed to fetch transactions", lambda: self._api.get("/transactions", params=params or None))
        if outcome.ok and outcome.latest:
            self._set(transactions=transactions_from_wire(outcome.payload), filters=filters, page=1)
        return outcome.ok

    async def create(self, draft: TransactionDraft) -> Optional[Transaction]:
        checked = validate_transaction(draft)
        if checked.is_left():
            self._set(field_errors=tuple(checked.get_error().items()))
            return None
        self._set(field_errors=())

        outcome = await self._request("create", "Failed to add transaction", lambda: self._api.post("/transactions", checked.value))
        if not outcome.ok:
            return None
        tx = transaction_from_wire(outcome.payload)
        if tx is not None:
            self._set(transactions=(tx,) + self._state.transactions)
        self._notify("success", "Transaction added successfully")
        return tx

    async def update(self, tx_id: str, draft: TransactionDraft) -> Optional[Transaction]:
        checked = validate_transaction(draft)
        if checked.is_left():
            self._set(field_errors=tuple(checked.get_error().items()))
            return None
        self._set(field_errors=())

        outcome = await self._request(
            f"update:{tx_id}",
            "Failed to update transaction",
            lambda: self._api.put(f"/transactions/{tx_id}", checked.value),
        )
        if not outcome.ok:
            return None
        tx = transaction_from_wire(outcome.payload)
        if tx is not None and outcome.latest:
            self._set(transactions=replace_by_id(self._state.transactions, tx_id, tx))
            self._notify("success", "Transaction updated successfully")
        return tx

    async def delete(self, tx_id: str) -> bool:
        outcome = await self._request(f"delete:{tx_id}", "Failed to delete transaction", lambda: self._api.delete(f"/transactions/{tx_id}"))
        if not outcome.ok:
            return False
        self._set(transactions=remove_by_id(self._state.transactions, tx_id))
        self._notify("success", "Transaction deleted successfully")
        return True

    # local view controls; no requests

    def set_filters(self, **changes) -> None:
        self._set(filters=dataclasses.replace(self._state.filters, **changes), page=1)

    def clear_filters(self) -> None:
        self._set(filters=FilterSpec(), page=1)

    def set_sort(self, field: str, direction: str = "desc") -> None:
        self._set(sort=SortSpec(field=field, direction=direction))

    def set_page(self, page: int) -> None:
        self._set(page=page)

    def view(self) -> Page:
        s = self._state
        return pipeline.run(s.transactions, s.filters, s.sort, s.page, s.page_size)

    def filtered(self) -> tuple[Transaction, ...]:
        return pipeline.apply_filters(self._state.transactions, self._state.filters)

    def totals(self) -> dict[str, float]:
        return pipeline.totals(self.filtered())

    def get_by_id(self, tx_id: str) -> Maybe[Transaction]:
        return find_by_id(self._state.transactions, tx_id)

from dataclasses import dataclass
from typing import Optional

from tracker.api import ApiClient
from tracker.domain import Account, AccountDraft
from tracker.events import EventBus
from tracker.functional import Maybe, find_by_id
from tracker.reshape import total_balance
from tracker.state import StateContainer
from tracker.transforms import account_from_wire, accounts_from_wire, remove_by_id, replace_by_id
from tracker.validation import validate_account


@dataclass(frozen=True)
class AccountState:
    accounts: tuple[Account, ...] = ()
    loading: bool = False
    error: Optional[str] = None
    field_errors: tuple[tuple[str, str], ...] = ()


class AccountStore(StateContainer[AccountState]):
    name = "accounts"

    def __init__(self, api: ApiClient, bus: EventBus):
        super().__init__(api, bus, AccountState())

    async def load(self) -> bool:
        outcome = await self._request("load", "Failed to fetch accounts", lambda: self._api.get("/accounts"))
        if outcome.ok and outcome.latest:
            self._set(accounts=accounts_from_wire(outcome.payload))
        return outcome.ok

    async def create(self, draft: AccountDraft) -> Optional[Account]:
        checked = validate_account(draft)
        if checked.is_left():
            self._set(field_errors=tuple(checked.get_error().items()))
            return None
        self._set(field_errors=())

        outcome = await self._request("create", "Failed to create account", lambda: self._api.post("/accounts", checked.value))
        if not outcome.ok:
            return None
        account = account_from_wire(outcome.payload)
        if account is not None:
            self._set(accounts=self._state.accounts + (account,))
        self._notify("success", "Account created successfully")
        return account

    async def update(self, account_id: str, draft: AccountDraft) -> Optional[Account]:
        checked = validate_account(draft)
        if checked.is_left():
            self._set(field_errors=tuple(checked.get_error().items()))
            return None
        self._set(field_errors=())

        action = f"update:{account_id}"
        outcome = await self._request(action, "Failed to update account", lambda: self._api.put(f"/accounts/{account_id}", checked.value))
        if not outcome.ok:
            return None
        account = account_from_wire(outcome.payload)
        if account is not None and outcome.latest:
            self._set(accounts=replace_by_id(self._state.accounts, account_id, account))
            self._notify("success", "Account updated successfully")
        return account

    async def delete(self, account_id: str) -> bool:
        outcome = await self._request(f"delete:{account_id}", "Failed to delete account", lambda: self._api.delete(f"/accounts/{account_id}"))
        if not outcome.ok:
            return False
        self._set(accounts=remove_by_id(self._state.accounts, account_id))
        self._notify("success", "Account deleted successfully")
        return True

    def get_by_id(self, account_id: str) -> Maybe[Account]:
        return find_by_id(self._state.accounts, account_id)

    def active(self) -> tuple[Account, ...]:
        return tuple(a for a in self._state.accounts if a.is_active)

    def by_type(self, account_type: str) -> tuple[Account, ...]:
        return tuple(a for a in self.active() if a.type == account_type)

    def total_balance(self) -> float:
        return total_balance(self._state.accounts)

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

from tracker.api import ApiClient
from tracker.domain import Category, CategoryDraft
from tracker.events import EventBus
from tracker.functional import Maybe, find_by_id
from tracker.state import StateContainer
from tracker.transforms import categories_from_wire, category_from_wire, remove_by_id, replace_by_id
from tracker.validation import validate_category

logger = logging.getLogger(__name__)


class InitOutcome(enum.Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


@dataclass(frozen=True)
class CategoryState:
    categories: tuple[Category, ...] = ()
    summary: Any = None
    loading: bool = False
    error: Optional[str] = None
    field_errors: tuple[tuple[str, str], ...] = ()


def _already_exists(error) -> bool:
    message = (error.message or "").lower()
    return error.status == 400 or "already exist" in message


class CategoryStore(StateContainer[CategoryState]):
    name = "categories"

    def __init__(self, api: ApiClient, bus: EventBus):
        super().__init__(api, bus, CategoryState())

    async def load(self) -> bool:
        outcome = await self._request("load", "Failed to fetch categories", lambda: self._api.get("/categories"))
        if outcome.ok and outcome.latest:
            self._set(categories=categories_from_wire(outcome.payload))
        return outcome.ok

    async def create(self, draft: CategoryDraft) -> Optional[Category]:
        checked = validate_category(draft)
        if checked.is_left():
            self._set(field_errors=tuple(checked.get_error().items()))
            return None
        self._set(field_errors=())

        outcome = await self._request("create", "Failed to create category", lambda: self._api.post("/categories", checked.value))
        if not outcome.ok:
            return None
        category = category_from_wire(outcome.payload)
        if category is not None:
            self._set(categories=self._state.categories + (category,))
        self._notify("success", "Category created successfully")
        return category

    async def update(self, category_id: str, draft: CategoryDraft) -> Optional[Category]:
        checked = validate_category(draft)
        if checked.is_left():
            self._set(field_errors=tuple(checked.get_error().items()))
            return None
        self._set(field_errors=())

        outcome = await self._request(
            f"update:{category_id}",
            "Failed to update category",
            lambda: self._api.put(f"/categories/{category_id}", checked.value),
        )
        if not outcome.ok:
            return None
        category = category_from_wire(outcome.payload)
        if category is not None and outcome.latest:
            self._set(categories=replace_by_id(self._state.categories, category_id, category))
            self._notify("success", "Category updated successfully")
        return category

    async def delete(self, category_id: str) -> bool:
        existing = self.get_by_id(category_id).get_or_else(None)
        if existing is not None and existing.is_default:
            self._fail(f"delete:{category_id}", "Default categories cannot be deleted")
            return False

        outcome = await self._request(
            f"delete:{category_id}",
            "Failed to delete category",
            lambda: self._api.delete(f"/categories/{category_id}"),
        )
        if not outcome.ok:
            return False
        self._set(categories=remove_by_id(self._state.categories, category_id))
        self._notify("success", "Category deleted successfully")
        return True

    async def load_summary(self) -> Any:
        outcome = await self._request("summary", "Failed to fetch category summary", lambda: self._api.get("/categories/summary"))
        if outcome.ok and outcome.latest:
            self._set(summary=outcome.payload)
        return outcome.payload if outcome.ok else None

    async def initialize_defaults(self) -> InitOutcome:
        """Seed the default categories. A second call is expected to be refused."""
        outcome = await self._request(
            "initialize",
            "Failed to create categories",
            lambda: self._api.post("/categories/initialize"),
            quiet=True,
        )
        if outcome.ok:
            self._notify("success", "Default categories created successfully")
            await self.load()
            return InitOutcome.CREATED
        if _already_exists(outcome.error):
            logger.info("default categories already present")
            self._notify("info", "Categories already exist for this user")
            await self.load()
            return InitOutcome.ALREADY_EXISTS

        self._fail("initialize", outcome.error.message or "Failed to create categories")
        return InitOutcome.FAILED

    def get_by_id(self, category_id: str) -> Maybe[Category]:
        return find_by_id(self._state.categories, category_id)

    def by_type(self, category_type: str) -> tuple[Category, ...]:
        return tuple(c for c in self._state.categories if c.type == category_type and c.is_active)

    def income(self) -> tuple[Category, ...]:
        return self.by_type("income")

    def expense(self) -> tuple[Category, ...]:
        return self.by_type("expense")

    def defaults(self) -> tuple[Category, ...]:
        return tuple(c for c in self._state.categories if c.is_default and c.is_active)

    def custom(self) -> tuple[Category, ...]:
        return tuple(c for c in self._state.categories if not c.is_default and c.is_active)

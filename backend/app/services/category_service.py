"""Event categories. Anyone may read them; only administrators write."""
import logging
from typing import Optional

from app.errors import ConflictError, InvalidInputError, NotFoundError
from app.models.category import Category
from app.services.authorization import ADMIN_ONLY, Actor, passes_role_gate, require
from app.stores.interfaces import CategoryStore, DuplicateError

logger = logging.getLogger(__name__)


class CategoryService:

    def __init__(self, categories: CategoryStore) -> None:
        self._categories = categories

    def _require_admin(self, actor: Actor) -> None:
        require(passes_role_gate(actor, ADMIN_ONLY), "Administrator access required")

    def _clean_name(self, name: str, exclude_id: Optional[int] = None) -> str:
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Category name is required")
        # names are unique regardless of case
        if self._categories.name_exists(name, exclude_id=exclude_id):
            raise ConflictError("A category with this name already exists")
        return name

    def list_all(self) -> list[Category]:
        return self._categories.list_all()

    def search(self, term: Optional[str]) -> list[Category]:
        term = (term or "").strip()
        if not term:
            return self._categories.list_all()
        return self._categories.search(term)

    def list_with_event_counts(self, actor: Actor) -> list[dict]:
        self._require_admin(actor)
        return [
            {"id": category.id, "name": category.name, "event_count": total}
            for category, total in self._categories.list_with_event_counts()
        ]

    def get(self, category_id: int) -> Category:
        category = self._categories.get(category_id)
        if not category:
            raise NotFoundError("Category not found")
        return category

    def create(self, actor: Actor, name: str) -> Category:
        self._require_admin(actor)
        try:
            category = self._categories.create(self._clean_name(name))
        except DuplicateError:
            raise ConflictError("A category with this name already exists")
        logger.info("Category %s '%s' created", category.id, category.name)
        return category

    def update(self, actor: Actor, category_id: int, name: str) -> Category:
        self._require_admin(actor)
        category = self.get(category_id)
        try:
            category = self._categories.update(category, self._clean_name(name, exclude_id=category_id))
        except DuplicateError:
            raise ConflictError("A category with this name already exists")
        logger.info("Category %s renamed to '%s'", category_id, category.name)
        return category

    def delete(self, actor: Actor, category_id: int) -> None:
        self._require_admin(actor)
        category = self.get(category_id)
        self._categories.delete(category)
        logger.info("Category %s deleted", category_id)

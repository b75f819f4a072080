"""
Category repository.

Categories are listed by ascending ``order``; equal orders keep the store's
natural order. Deleting a category never touches the songs that reference
it: ``Song.category_ids`` is a soft reference, and lookups of a missing
category yield "no such category" rather than an error.
"""

from datetime import datetime
from typing import Any, Callable, List, Optional

from loguru import logger

from mezmurhub.domain.auth.sessions import Session

from .documents import DocumentStore
from .exceptions import NotFoundError, ValidationError
from .models import (
    CATEGORIES_COLLECTION,
    Category,
    CategoryUpdate,
    format_timestamp,
    normalize_optional,
    utcnow,
)


def _validate_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required", field="name")
    return name


def _validate_order(order: Any) -> int:
    if isinstance(order, bool) or not isinstance(order, int):
        raise ValidationError("Category order must be an integer", field="order")
    if order < 0:
        raise ValidationError("Category order must not be negative", field="order")
    return order


class CategoryRepository:
    """Create, read, update and delete categories on behalf of a session."""

    def __init__(
        self,
        store: DocumentStore,
        session: Session,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.session = session
        self._clock = clock

    def list(self) -> list[Category]:
        docs = self.store.list(CATEGORIES_COLLECTION, order_by="order")
        return [Category.from_document(doc) for doc in docs]

    def get(self, category_id: str) -> Optional[Category]:
        """Return the category, or None when it does not exist."""
        if not category_id:
            return None
        doc = self.store.get(CATEGORIES_COLLECTION, category_id)
        return Category.from_document(doc) if doc else None

    def create(
        self,
        name: str,
        description: Optional[str] = None,
        order: Optional[int] = None,
        icon_url: Optional[str] = None,
    ) -> str:
        """Persist a new category and return its id.

        Raises:
            ValidationError: If the name is blank or the order negative
        """
        name = _validate_name(name)
        order = _validate_order(0 if order is None else order)

        category_id = self.store.add(
            CATEGORIES_COLLECTION,
            {
                "name": name,
                "description": normalize_optional(description),
                "iconUrl": normalize_optional(icon_url),
                "order": order,
                "createdAt": format_timestamp(self._clock()),
            },
        )
        logger.info(
            f"Category '{name}' created as {category_id} by {self.session.actor}"
        )
        return category_id

    def update(self, category_id: str, changes: CategoryUpdate) -> Category:
        """Apply only the provided fields; ``createdAt`` is never touched.

        Raises:
            ValidationError: If a provided name is blank or order negative
            NotFoundError: If the category does not exist
        """
        fields: dict[str, Any] = {}
        if changes.name is not None:
            fields["name"] = _validate_name(changes.name)
        if changes.order is not None:
            fields["order"] = _validate_order(changes.order)
        if changes.description is not None:
            fields["description"] = normalize_optional(changes.description)
        if changes.icon_url is not None:
            fields["iconUrl"] = normalize_optional(changes.icon_url)

        if fields:
            self.store.update(CATEGORIES_COLLECTION, category_id, fields)
            logger.info(
                f"Category {category_id} updated ({', '.join(sorted(fields))}) "
                f"by {self.session.actor}"
            )

        category = self.get(category_id)
        if category is None:
            raise NotFoundError(CATEGORIES_COLLECTION, category_id)
        return category

    def delete(self, category_id: str) -> None:
        """Remove the category. Songs that reference it are left untouched.

        Raises:
            NotFoundError: If the category does not exist
        """
        if not self.store.delete(CATEGORIES_COLLECTION, category_id):
            raise NotFoundError(CATEGORIES_COLLECTION, category_id)
        logger.info(f"Category {category_id} deleted by {self.session.actor}")

    def resolve_names(self, category_ids: List[str]) -> List[str]:
        """Names for the given ids in input order; unknown ids are omitted."""
        return [c.name for c in self.resolve(category_ids)]

    def resolve(self, category_ids: List[str]) -> List[Category]:
        """Categories for the given ids in input order; unknown ids are omitted."""
        by_id = {c.id: c for c in self.list()}
        return [by_id[cid] for cid in category_ids if cid in by_id]

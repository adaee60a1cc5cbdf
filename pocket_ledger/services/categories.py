"""
Category Service

CRUD for the user's categories plus one-time default seeding.

Edits to a category are NOT copied onto transactions that already
carry its name, icon and color.
"""

from typing import Any, Optional

from pydantic.alias_generators import to_camel

from pocket_ledger.audit import AuditLogger
from pocket_ledger.auth import SessionContext
from pocket_ledger.models.ledger import (
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_INCOME_CATEGORIES,
    Category,
    CategoryType,
)
from pocket_ledger.services.storage import (
    DocumentStoreInterface,
    Family,
    NotFoundError,
    WriteBatch,
    collection_path,
    document_path,
)


class CategoryService:
    """Reads and edits categories under ``users/{uid}/categories``."""

    def __init__(
        self,
        store: DocumentStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger

    async def list_categories(self, session: SessionContext) -> list[Category]:
        """All categories, ordered by ``order`` (ties keep stored order)."""
        user_id = session.require_user_id()
        snapshots = await self._store.query_collection(
            collection_path(user_id, Family.CATEGORIES)
        )
        categories = [Category.from_document(s.id, s.data) for s in snapshots]
        return sorted(categories, key=lambda c: c.order)

    async def list_by_type(
        self,
        session: SessionContext,
        category_type: CategoryType,
    ) -> list[Category]:
        category_type = CategoryType(category_type)
        return [c for c in await self.list_categories(session) if c.type == category_type]

    async def get_category(
        self,
        session: SessionContext,
        category_id: str,
    ) -> Optional[Category]:
        user_id = session.require_user_id()
        data = await self._store.get_document(
            document_path(user_id, Family.CATEGORIES, category_id)
        )
        if data is None:
            return None
        return Category.from_document(category_id, data)

    async def add_category(self, session: SessionContext, category: Category) -> str:
        user_id = session.require_user_id()
        category_id = self._store.new_document_id(
            collection_path(user_id, Family.CATEGORIES)
        )
        await self._store.set_document(
            document_path(user_id, Family.CATEGORIES, category_id),
            category.to_document(),
        )
        return category_id

    async def update_category(
        self,
        session: SessionContext,
        category_id: str,
        changes: dict[str, Any],
    ) -> Category:
        """
        Change some fields of a category.

        Raises:
            NotFoundError: The category does not exist
            ValueError: An unknown field was given
        """
        current = await self.get_category(session, category_id)
        if current is None:
            raise NotFoundError(f"Category not found: {category_id}")

        changes = {k: v for k, v in changes.items() if k != "id"}
        unknown = set(changes) - set(Category.model_fields)
        if unknown:
            raise ValueError(f"Unknown category fields: {sorted(unknown)}")
        if not changes:
            return current

        updated = Category.model_validate({**current.model_dump(), **changes})
        stored = updated.to_document()

        user_id = session.require_user_id()
        await self._store.update_document(
            document_path(user_id, Family.CATEGORIES, category_id),
            {to_camel(name): stored[to_camel(name)] for name in changes},
        )
        return updated

    async def delete_category(self, session: SessionContext, category_id: str) -> None:
        user_id = session.require_user_id()
        await self._store.delete_document(
            document_path(user_id, Family.CATEGORIES, category_id)
        )

    async def initialize_default_categories(self, session: SessionContext) -> list[str]:
        """
        Seed the default expense and income categories in one batch.

        Does nothing if the user already has any category.

        Returns:
            IDs of the seeded categories (empty if nothing was seeded)
        """
        user_id = session.require_user_id()
        categories = collection_path(user_id, Family.CATEGORIES)
        if await self._store.query_collection(categories, limit=1):
            return []

        batch = WriteBatch()
        seeded = []
        for category in DEFAULT_EXPENSE_CATEGORIES + DEFAULT_INCOME_CATEGORIES:
            category_id = self._store.new_document_id(categories)
            batch.set(
                document_path(user_id, Family.CATEGORIES, category_id),
                category.to_document(),
            )
            seeded.append(category_id)
        await self._store.commit(batch)

        if self._audit_logger:
            await self._audit_logger.log_defaults_seeded(
                user_id, Family.CATEGORIES.value, len(seeded)
            )
        return seeded

"""Repository for database entry operations.

Provides CRUD operations for the database_entries table. Every lookup is
scoped to the owning schema.
"""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gridbase.core.logging import get_logger
from gridbase.infrastructure.persistence.models import DatabaseEntryModel

logger = get_logger(__name__)


class EntryRepository:
    """Repository for entry database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, entry: DatabaseEntryModel) -> DatabaseEntryModel:
        """Insert a new entry.

        Args:
            entry: The entry model to create.

        Returns:
            The created entry model.
        """
        self.session.add(entry)
        await self.session.flush()
        logger.debug("Entry inserted", entry_id=entry.id, schema_id=entry.schema_id)
        return entry

    async def get_by_id(self, schema_id: str, entry_id: str) -> DatabaseEntryModel | None:
        """Get an entry by ID within a schema.

        Returns:
            The entry model if found, None otherwise.
        """
        result = await self.session.execute(
            select(DatabaseEntryModel).where(
                DatabaseEntryModel.id == entry_id,
                DatabaseEntryModel.schema_id == schema_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_by_schema(self, schema_id: str) -> list[DatabaseEntryModel]:
        """List a schema's entries by insertion order."""
        result = await self.session.execute(
            select(DatabaseEntryModel)
            .where(DatabaseEntryModel.schema_id == schema_id)
            .order_by(DatabaseEntryModel.order, DatabaseEntryModel.created_at)
        )
        return list(result.scalars().all())

    async def next_order(self, schema_id: str) -> int:
        """One past the highest order value in the schema, or 0 if empty."""
        result = await self.session.execute(
            select(func.max(DatabaseEntryModel.order)).where(
                DatabaseEntryModel.schema_id == schema_id
            )
        )
        max_order = result.scalar_one_or_none()
        return 0 if max_order is None else max_order + 1

    async def update(self, entry: DatabaseEntryModel) -> DatabaseEntryModel:
        """Flush pending changes to an entry."""
        await self.session.flush()
        return entry

    async def delete(self, schema_id: str, entry_id: str) -> bool:
        """Delete an entry.

        Returns:
            True if a row was removed, False if the entry did not exist.
        """
        result = await self.session.execute(
            delete(DatabaseEntryModel).where(
                DatabaseEntryModel.id == entry_id,
                DatabaseEntryModel.schema_id == schema_id,
            )
        )
        return result.rowcount > 0


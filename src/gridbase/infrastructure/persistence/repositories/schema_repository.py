"""Repository for database schema operations.

Provides CRUD operations for the database_schemas table.
"""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gridbase.infrastructure.persistence.models import DatabaseEntryModel, DatabaseSchemaModel


class SchemaRepository:
    """Repository for schema database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, schema: DatabaseSchemaModel) -> DatabaseSchemaModel:
        """Create a new schema.

        Args:
            schema: The schema model to create.

        Returns:
            The created schema model.
        """
        self.session.add(schema)
        await self.session.flush()
        return schema

    async def get_by_id(self, schema_id: str) -> DatabaseSchemaModel | None:
        """Get a schema by ID.

        Args:
            schema_id: The schema ID.

        Returns:
            The schema model if found, None otherwise.
        """
        result = await self.session.execute(
            select(DatabaseSchemaModel).where(DatabaseSchemaModel.id == schema_id)
        )
        return result.scalar_one_or_none()

    async def list_by_workspace(self, workspace_id: str) -> list[DatabaseSchemaModel]:
        """List a workspace's schemas, most recently updated first."""
        result = await self.session.execute(
            select(DatabaseSchemaModel)
            .where(DatabaseSchemaModel.workspace_id == workspace_id)
            .order_by(DatabaseSchemaModel.updated_at.desc(), DatabaseSchemaModel.name)
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[DatabaseSchemaModel]:
        """List every schema, newest first."""
        result = await self.session.execute(
            select(DatabaseSchemaModel).order_by(DatabaseSchemaModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def update(self, schema: DatabaseSchemaModel) -> DatabaseSchemaModel:
        """Flush pending changes to a schema.

        Args:
            schema: The modified schema model.

        Returns:
            The updated schema model.
        """
        await self.session.flush()
        return schema

    async def delete(self, schema: DatabaseSchemaModel) -> None:
        """Delete a schema and all of its entries."""
        await self.session.execute(
            delete(DatabaseEntryModel).where(DatabaseEntryModel.schema_id == schema.id)
        )
        await self.session.delete(schema)
        await self.session.flush()

    async def get_entry_counts(self, schema_ids: list[str]) -> dict[str, int]:
        """Count entries per schema.

        Args:
            schema_ids: Schemas to count entries for.

        Returns:
            Mapping of schema ID to entry count; schemas without entries map to 0.
        """
        if not schema_ids:
            return {}
        result = await self.session.execute(
            select(DatabaseEntryModel.schema_id, func.count(DatabaseEntryModel.id))
            .where(DatabaseEntryModel.schema_id.in_(schema_ids))
            .group_by(DatabaseEntryModel.schema_id)
        )
        counts = {schema_id: 0 for schema_id in schema_ids}
        counts.update({schema_id: count for schema_id, count in result.all()})
        return counts

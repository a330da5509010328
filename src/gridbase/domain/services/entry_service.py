"""Entry service for business logic.

Handles entry create/update/delete, duplication, bulk mutations and
server-side queries. Every write routes field values through
``EntryValidator`` and reports all field errors at once.

Bulk operations treat each item independently: every item is committed on
its own, so a failure never undoes the items that already went through.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gridbase.core.config import Settings, get_settings
from gridbase.core.logging import get_logger
from gridbase.domain.entities import Entry, Schema
from gridbase.domain.exceptions import (
    EntryNotFoundError,
    EntryValidationError,
    GridBaseError,
    SchemaNotFoundError,
    ValidationIssue,
)
from gridbase.domain.services.entry_validator import EntryValidator
from gridbase.domain.services.query_engine import (
    FilterCondition,
    SortDirection,
    apply_filters,
    apply_sort,
)
from gridbase.infrastructure.persistence.models import DatabaseEntryModel
from gridbase.infrastructure.persistence.repositories import (
    EntryRepository,
    SchemaRepository,
)

logger = get_logger(__name__)

COPY_PREFIX = "Copy of "


@dataclass
class BulkFailure:
    """One item of a bulk operation that did not go through."""

    index: int
    entry_id: str | None
    message: str
    errors: list[ValidationIssue] = field(default_factory=list)


@dataclass
class BulkResult:
    """Outcome of a bulk operation.

    Attributes:
        succeeded: Entries created or updated, or IDs deleted.
        failed: Items that failed, with the reason.
    """

    succeeded: list[Any] = field(default_factory=list)
    failed: list[BulkFailure] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


def merge_entry_data(existing: dict[str, Any], processed: dict[str, Any]) -> dict[str, Any]:
    """Apply validated changes to stored data.

    Fields not mentioned are preserved; a value of None removes the field.
    """
    merged = dict(existing)
    for key, value in processed.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


class EntryService:
    """Service for entry business logic."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        """Initialize the service.

        Args:
            session: SQLAlchemy async session.
            settings: Application settings; defaults to the cached settings.
        """
        self.session = session
        self.settings = settings or get_settings()
        self.repository = EntryRepository(session)
        self.schema_repository = SchemaRepository(session)

    async def _load_schema(self, schema_id: str) -> Schema:
        model = await self.schema_repository.get_by_id(schema_id)
        if model is None:
            raise SchemaNotFoundError(schema_id)
        return model.to_entity()

    async def _load_entry(self, schema_id: str, entry_id: str) -> DatabaseEntryModel:
        model = await self.repository.get_by_id(schema_id, entry_id)
        if model is None:
            raise EntryNotFoundError(entry_id)
        return model

    def _validate(
        self, schema: Schema, data: dict[str, Any], partial: bool
    ) -> dict[str, Any]:
        processed, errors = EntryValidator.validate_entry_data(
            data, schema.properties, partial=partial, tz=self.settings.timezone
        )
        if errors:
            logger.info(
                "Entry validation failed",
                schema_id=schema.id,
                error_count=len(errors),
                fields=[e.field for e in errors],
            )
            raise EntryValidationError(errors)
        return processed

    async def _insert(
        self, schema: Schema, data: dict[str, Any], user_id: str, order: int | None
    ) -> Entry:
        processed = self._validate(schema, data, partial=False)
        model = DatabaseEntryModel(
            id=str(uuid.uuid4()),
            schema_id=schema.id,
            data=merge_entry_data({}, processed),
            order=order if order is not None else await self.repository.next_order(schema.id),
            created_by=user_id,
        )
        await self.repository.create(model)
        return model.to_entity()

    async def list_entries(self, schema_id: str) -> list[Entry]:
        """List a schema's entries in stored order.

        Raises:
            SchemaNotFoundError: If the schema does not exist.
        """
        await self._load_schema(schema_id)
        return [m.to_entity() for m in await self.repository.list_by_schema(schema_id)]

    async def create_entry(
        self,
        schema_id: str,
        data: dict[str, Any],
        user_id: str,
        order: int | None = None,
    ) -> Entry:
        """Create an entry.

        Args:
            schema_id: Owning schema.
            data: Raw field values keyed by property key.
            user_id: ID of the creating user.
            order: Explicit order value; defaults to one past the current maximum.

        Returns:
            The created entry.

        Raises:
            SchemaNotFoundError: If the schema does not exist.
            EntryValidationError: If any field is invalid.
        """
        schema = await self._load_schema(schema_id)
        entry = await self._insert(schema, data, user_id, order)
        logger.info("Entry created", schema_id=schema_id, entry_id=entry.id, created_by=user_id)
        return entry

    async def update_entry(
        self,
        schema_id: str,
        entry_id: str,
        data: dict[str, Any],
        order: int | None = None,
    ) -> Entry:
        """Patch an entry.

        Only fields present in ``data`` change; null or empty values clear
        a field. Keys no longer in the schema are left untouched.

        Raises:
            SchemaNotFoundError: If the schema does not exist.
            EntryNotFoundError: If the entry does not exist in the schema.
            EntryValidationError: If any field is invalid.
        """
        schema = await self._load_schema(schema_id)
        model = await self._load_entry(schema_id, entry_id)
        processed = self._validate(schema, data, partial=True)

        model.data = merge_entry_data(model.data or {}, processed)
        if order is not None:
            model.order = order
        await self.repository.update(model)
        logger.info(
            "Entry updated",
            schema_id=schema_id,
            entry_id=entry_id,
            fields=sorted(processed),
        )
        return model.to_entity()

    async def delete_entry(self, schema_id: str, entry_id: str) -> None:
        """Delete an entry.

        Raises:
            EntryNotFoundError: If the entry does not exist in the schema.
        """
        if not await self.repository.delete(schema_id, entry_id):
            raise EntryNotFoundError(entry_id)
        logger.info("Entry deleted", schema_id=schema_id, entry_id=entry_id)

    async def duplicate_entry(self, schema_id: str, entry_id: str, user_id: str) -> Entry:
        """Copy an entry's values into a new entry placed last.

        Title values get a ``Copy of`` prefix unless they already have one.
        """
        schema = await self._load_schema(schema_id)
        source = await self._load_entry(schema_id, entry_id)

        data = dict(source.data or {})
        for key in schema.title_keys():
            title = data.get(key)
            if isinstance(title, str) and not title.startswith(COPY_PREFIX):
                data[key] = f"{COPY_PREFIX}{title}"

        model = DatabaseEntryModel(
            id=str(uuid.uuid4()),
            schema_id=schema_id,
            data=data,
            order=await self.repository.next_order(schema_id),
            created_by=user_id,
        )
        await self.repository.create(model)
        logger.info(
            "Entry duplicated",
            schema_id=schema_id,
            source_entry_id=entry_id,
            entry_id=model.id,
        )
        return model.to_entity()

    async def query_entries(
        self,
        schema_id: str,
        filters: list[FilterCondition] | None = None,
        sort_column: str | None = None,
        sort_direction: SortDirection | str = SortDirection.ASC,
    ) -> tuple[Schema, list[Entry]]:
        """Load entries, then filter and sort them.

        Returns:
            Tuple of (schema, matching entries in result order).
        """
        schema = await self._load_schema(schema_id)
        entries = [m.to_entity() for m in await self.repository.list_by_schema(schema_id)]
        tz = self.settings.timezone
        result = apply_filters(entries, schema, filters or [], tz=tz)
        if sort_column:
            result = apply_sort(result, schema, sort_column, sort_direction, tz=tz)
        logger.debug(
            "Entries queried",
            schema_id=schema_id,
            total=len(entries),
            matched=len(result),
        )
        return schema, result

    async def bulk_create(
        self, schema_id: str, rows: list[dict[str, Any]], user_id: str
    ) -> BulkResult:
        """Create entries independently; invalid rows are reported, not fatal.

        Raises:
            SchemaNotFoundError: If the schema does not exist.
        """
        schema = await self._load_schema(schema_id)
        result = BulkResult()

        for index, row in enumerate(rows):
            try:
                entry = await self._insert(schema, row, user_id, None)
                await self.session.commit()
            except EntryValidationError as e:
                result.failed.append(BulkFailure(index, None, "Validation error", e.errors))
                continue
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.error("Bulk create item failed", schema_id=schema_id, index=index, error=str(e))
                result.failed.append(BulkFailure(index, None, "Storage error"))
                continue
            result.succeeded.append(entry)

        logger.info(
            "Bulk create finished",
            schema_id=schema_id,
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result

    async def bulk_update(
        self, schema_id: str, entry_ids: list[str], data: dict[str, Any]
    ) -> BulkResult:
        """Apply the same partial patch to each listed entry independently.

        Raises:
            SchemaNotFoundError: If the schema does not exist.
            EntryValidationError: If ``data`` itself is invalid; nothing is written.
        """
        schema = await self._load_schema(schema_id)
        processed = self._validate(schema, data, partial=True)
        result = BulkResult()

        for index, entry_id in enumerate(entry_ids):
            try:
                model = await self._load_entry(schema_id, entry_id)
                model.data = merge_entry_data(model.data or {}, processed)
                await self.repository.update(model)
                updated = model.to_entity()
                await self.session.commit()
            except GridBaseError as e:
                result.failed.append(BulkFailure(index, entry_id, str(e)))
                continue
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.error("Bulk update item failed", schema_id=schema_id, entry_id=entry_id, error=str(e))
                result.failed.append(BulkFailure(index, entry_id, "Storage error"))
                continue
            result.succeeded.append(updated)

        logger.info(
            "Bulk update finished",
            schema_id=schema_id,
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result

    async def bulk_delete(self, schema_id: str, entry_ids: list[str]) -> BulkResult:
        """Delete each listed entry independently.

        Missing entries are reported as failures; entries already deleted in
        this call stay deleted.

        Returns:
            Result whose ``succeeded`` holds the deleted IDs.
        """
        result = BulkResult()

        for index, entry_id in enumerate(entry_ids):
            try:
                await self.delete_entry(schema_id, entry_id)
                await self.session.commit()
            except EntryNotFoundError as e:
                result.failed.append(BulkFailure(index, entry_id, str(e)))
                continue
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.error("Bulk delete item failed", schema_id=schema_id, entry_id=entry_id, error=str(e))
                result.failed.append(BulkFailure(index, entry_id, "Storage error"))
                continue
            result.succeeded.append(entry_id)

        logger.info(
            "Bulk delete finished",
            schema_id=schema_id,
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result

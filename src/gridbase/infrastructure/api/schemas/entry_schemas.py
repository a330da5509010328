"""Pydantic schemas for entry endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from gridbase.domain.entities import Entry
from gridbase.domain.services.entry_service import BulkFailure
from gridbase.domain.services.query_engine import FilterOperator, SortDirection
from gridbase.infrastructure.api.schemas.database_schemas import DatabaseResponse
from gridbase.infrastructure.api.schemas.error_schemas import ValidationErrorDetail


class EntryResponse(BaseModel):
    """A single entry."""

    id: str = Field(..., description="Entry ID (UUID)")
    schema_id: str = Field(..., alias="schemaId", description="Owning database ID")
    data: dict[str, Any] = Field(..., description="Property key -> stored value")
    order: int = Field(..., description="Insertion-order tiebreaker")
    created_by: str | None = Field(default=None, alias="createdBy")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_entity(cls, entry: Entry) -> "EntryResponse":
        return cls(
            id=entry.id,
            schema_id=entry.schema_id,
            data=entry.data,
            order=entry.order,
            created_by=entry.created_by,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


class DatabaseWithEntriesResponse(BaseModel):
    """A database together with all of its entries."""

    database: DatabaseResponse = Field(..., alias="schema")
    entries: list[EntryResponse]

    model_config = {"populate_by_name": True}


class CreateEntryRequest(BaseModel):
    """Request body for creating an entry."""

    data: dict[str, Any] = Field(default_factory=dict, description="Property key -> raw value")
    order: int | None = Field(default=None, description="Explicit order; defaults to last")


class UpdateEntryRequest(BaseModel):
    """Request body for patching an entry; null values clear a field."""

    data: dict[str, Any] = Field(default_factory=dict, description="Fields to change")
    order: int | None = Field(default=None, description="New order value")


class BulkCreateRequest(BaseModel):
    """Request body for creating several entries."""

    rows: list[dict[str, Any]] = Field(..., min_length=1, description="One data object per entry")


class BulkUpdateRequest(BaseModel):
    """Request body for applying one patch to several entries."""

    entry_ids: list[str] = Field(..., min_length=1, alias="entryIds")
    data: dict[str, Any] = Field(..., description="Fields to change on every entry")

    model_config = {"populate_by_name": True}


class BulkDeleteRequest(BaseModel):
    """Request body for deleting several entries."""

    entry_ids: list[str] = Field(..., min_length=1, alias="entryIds")

    model_config = {"populate_by_name": True}


class BulkFailureResponse(BaseModel):
    """One failed item of a bulk operation."""

    index: int = Field(..., description="Position of the item in the request")
    entry_id: str | None = Field(default=None, alias="entryId")
    message: str
    details: list[ValidationErrorDetail] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_failure(cls, failure: BulkFailure) -> "BulkFailureResponse":
        return cls(
            index=failure.index,
            entry_id=failure.entry_id,
            message=failure.message,
            details=[
                ValidationErrorDetail(field=e.field, message=e.message, code=e.code)
                for e in failure.errors
            ],
        )


class BulkEntriesResponse(BaseModel):
    """Outcome of a bulk create or update."""

    succeeded: list[EntryResponse]
    failed: list[BulkFailureResponse]
    succeeded_count: int = Field(..., alias="succeededCount")
    failed_count: int = Field(..., alias="failedCount")

    model_config = {"populate_by_name": True}


class BulkDeleteResponse(BaseModel):
    """Outcome of a bulk delete."""

    succeeded: list[str] = Field(..., description="IDs that were deleted")
    failed: list[BulkFailureResponse]
    succeeded_count: int = Field(..., alias="succeededCount")
    failed_count: int = Field(..., alias="failedCount")

    model_config = {"populate_by_name": True}


class FilterSchema(BaseModel):
    """One filter condition; conditions are combined with AND."""

    property: str = Field(..., description="Property key to test")
    operator: FilterOperator
    value: Any = None


class SortSchema(BaseModel):
    """Single-column sort."""

    column: str = Field(..., description="Property key to sort by")
    direction: SortDirection = SortDirection.ASC


class QueryRequest(BaseModel):
    """Request body for filtering and sorting entries."""

    filters: list[FilterSchema] = Field(default_factory=list)
    sort: SortSchema | None = None


class QueryResponse(BaseModel):
    """Entries matching a query, in result order."""

    items: list[EntryResponse]
    total: int

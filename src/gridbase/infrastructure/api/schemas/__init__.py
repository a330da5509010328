"""Pydantic request/response schemas for the GridBase API."""

from gridbase.infrastructure.api.schemas.database_schemas import (
    AddPropertyRequest,
    ColumnHiddenRequest,
    ColumnWidthRequest,
    CreateDatabaseRequest,
    DatabaseListResponse,
    DatabaseResponse,
    DatabaseSummaryResponse,
    MoveColumnRequest,
    ReorderColumnsRequest,
    UpdateDatabaseRequest,
    UpdatePropertyRequest,
)
from gridbase.infrastructure.api.schemas.entry_schemas import (
    BulkCreateRequest,
    BulkDeleteRequest,
    BulkDeleteResponse,
    BulkEntriesResponse,
    BulkFailureResponse,
    BulkUpdateRequest,
    CreateEntryRequest,
    DatabaseWithEntriesResponse,
    EntryResponse,
    FilterSchema,
    QueryRequest,
    QueryResponse,
    SortSchema,
    UpdateEntryRequest,
)
from gridbase.infrastructure.api.schemas.error_schemas import (
    NotFoundResponse,
    ValidationErrorDetail,
    ValidationErrorResponse,
)

__all__ = [
    "AddPropertyRequest",
    "BulkCreateRequest",
    "BulkDeleteRequest",
    "BulkDeleteResponse",
    "BulkEntriesResponse",
    "BulkFailureResponse",
    "BulkUpdateRequest",
    "ColumnHiddenRequest",
    "ColumnWidthRequest",
    "CreateDatabaseRequest",
    "CreateEntryRequest",
    "DatabaseListResponse",
    "DatabaseResponse",
    "DatabaseSummaryResponse",
    "DatabaseWithEntriesResponse",
    "EntryResponse",
    "FilterSchema",
    "MoveColumnRequest",
    "NotFoundResponse",
    "QueryRequest",
    "QueryResponse",
    "ReorderColumnsRequest",
    "SortSchema",
    "UpdateDatabaseRequest",
    "UpdateEntryRequest",
    "UpdatePropertyRequest",
    "ValidationErrorDetail",
    "ValidationErrorResponse",
]

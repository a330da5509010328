"""Pydantic schemas for database (table schema) endpoints.

Wire names are camelCase; every model also accepts its Python field names.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from gridbase.domain.entities import Schema
from gridbase.domain.services.column_order import (
    derive_column_widths,
    derive_display_order,
    derive_hidden_columns,
    derive_visible_columns,
)


class CreateDatabaseRequest(BaseModel):
    """Request body for creating a database."""

    workspace_id: str = Field(..., min_length=1, alias="workspaceId", description="Owning workspace ID")
    name: str = Field(..., description="Database name")
    description: str | None = Field(default=None, description="Optional description")
    document_id: str | None = Field(
        default=None,
        alias="documentId",
        description="Document the database is embedded in",
    )
    properties: dict[str, dict[str, Any]] = Field(
        ...,
        description="Property key -> {name, type, options?, format?}; key order is the column order",
    )
    views: list[dict[str, Any]] = Field(
        default_factory=list,
        description="View definitions; a submitted _columnOrder view is ignored",
    )

    model_config = {"populate_by_name": True}


class UpdateDatabaseRequest(BaseModel):
    """Request body for replacing a database's properties and views."""

    name: str | None = Field(default=None, description="New database name")
    description: str | None = Field(default=None, description="New description")
    properties: dict[str, dict[str, Any]] = Field(
        ...,
        description="Full property map; key order is the new column order",
    )
    views: list[dict[str, Any]] | None = Field(
        default=None,
        description="Full view list; omit to keep the current views",
    )


class AddPropertyRequest(BaseModel):
    """Request body for adding a column."""

    after_key: str | None = Field(
        default=None,
        alias="afterKey",
        description="Insert right after this column; append when omitted",
    )
    name: str | None = Field(default=None, description="Column name; generated when omitted")
    type: str = Field(default="text", description="Property type")
    options: list[str] | None = Field(default=None, description="Options for select types")

    model_config = {"populate_by_name": True}


class UpdatePropertyRequest(BaseModel):
    """Request body for renaming or retyping a column."""

    name: str | None = Field(default=None, description="New column name")
    type: str | None = Field(default=None, description="New property type")
    options: list[str] | None = Field(default=None, description="New options for select types")
    format: str | None = Field(default=None, description="Display format hint")


class ReorderColumnsRequest(BaseModel):
    """Request body for setting the column order."""

    order: list[str] = Field(..., description="Property keys in display order")


class MoveColumnRequest(BaseModel):
    """Request body for moving one column."""

    key: str = Field(..., description="Column to move")
    before_key: str | None = Field(
        default=None,
        alias="beforeKey",
        description="Place the column right before this one; last when omitted",
    )

    model_config = {"populate_by_name": True}


class ColumnHiddenRequest(BaseModel):
    """Request body for hiding or showing a column."""

    hidden: bool


class ColumnWidthRequest(BaseModel):
    """Request body for setting a column width in pixels."""

    width: int


class DatabaseResponse(BaseModel):
    """A database with its presentation metadata resolved.

    ``views`` holds only user views; column order, hidden columns and
    widths are exposed through the dedicated fields.
    """

    id: str
    workspace_id: str = Field(..., alias="workspaceId")
    document_id: str | None = Field(default=None, alias="documentId")
    name: str
    description: str | None = None
    properties: dict[str, dict[str, Any]]
    views: list[dict[str, Any]]
    columns: list[str] = Field(..., description="All property keys in display order")
    visible_columns: list[str] = Field(..., alias="visibleColumns")
    hidden_columns: list[str] = Field(..., alias="hiddenColumns")
    column_widths: dict[str, int] = Field(..., alias="columnWidths")
    created_by: str | None = Field(default=None, alias="createdBy")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_entity(cls, schema: Schema) -> "DatabaseResponse":
        return cls(**_database_fields(schema))


class DatabaseSummaryResponse(DatabaseResponse):
    """A database in a listing, with its entry count."""

    entry_count: int = Field(..., alias="entryCount")

    @classmethod
    def from_entity(cls, schema: Schema, entry_count: int = 0) -> "DatabaseSummaryResponse":
        return cls(**_database_fields(schema), entry_count=entry_count)


class DatabaseListResponse(BaseModel):
    """Response for listing a workspace's databases."""

    items: list[DatabaseSummaryResponse]
    total: int


def _database_fields(schema: Schema) -> dict[str, Any]:
    return {
        "id": schema.id,
        "workspace_id": schema.workspace_id,
        "document_id": schema.document_id,
        "name": schema.name,
        "description": schema.description,
        "properties": schema.properties_to_dict(),
        "views": [view.to_dict() for view in schema.user_views],
        "columns": derive_display_order(schema),
        "visible_columns": derive_visible_columns(schema),
        "hidden_columns": derive_hidden_columns(schema),
        "column_widths": derive_column_widths(schema),
        "created_by": schema.created_by,
        "created_at": schema.created_at,
        "updated_at": schema.updated_at,
    }

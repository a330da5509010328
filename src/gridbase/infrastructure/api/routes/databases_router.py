"""Databases API routes.

Provides endpoints for database schemas: CRUD, column management,
presentation metadata and server-side queries. Validation and not-found
errors are mapped to 400/404 by the app-level exception handlers.
"""

from fastapi import APIRouter, status

from gridbase.core.logging import get_logger
from gridbase.domain.services.query_engine import FilterCondition
from gridbase.infrastructure.api.dependencies import (
    AuthenticatedUser,
    DbSession,
    EntryServiceDep,
    SchemaServiceDep,
)
from gridbase.infrastructure.api.schemas import (
    AddPropertyRequest,
    ColumnHiddenRequest,
    ColumnWidthRequest,
    CreateDatabaseRequest,
    DatabaseListResponse,
    DatabaseResponse,
    DatabaseSummaryResponse,
    DatabaseWithEntriesResponse,
    EntryResponse,
    MoveColumnRequest,
    NotFoundResponse,
    QueryRequest,
    QueryResponse,
    ReorderColumnsRequest,
    UpdateDatabaseRequest,
    UpdatePropertyRequest,
    ValidationErrorResponse,
)

logger = get_logger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ValidationErrorResponse, "description": "Validation error"},
    401: {"description": "Missing caller identity"},
    404: {"model": NotFoundResponse, "description": "Database not found"},
}


@router.get(
    "/workspace/{workspace_id}",
    response_model=DatabaseListResponse,
    responses={401: ERROR_RESPONSES[401]},
)
async def list_databases(
    workspace_id: str,
    current_user: AuthenticatedUser,
    service: SchemaServiceDep,
) -> DatabaseListResponse:
    """List a workspace's databases, most recently updated first."""
    rows = await service.list_schemas(workspace_id)
    return DatabaseListResponse(
        items=[DatabaseSummaryResponse.from_entity(schema, count) for schema, count in rows],
        total=len(rows),
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=DatabaseResponse,
    responses={400: ERROR_RESPONSES[400], 401: ERROR_RESPONSES[401]},
)
async def create_database(
    request: CreateDatabaseRequest,
    current_user: AuthenticatedUser,
    service: SchemaServiceDep,
    session: DbSession,
) -> DatabaseResponse:
    """Create a database.

    The column order is the key order of ``properties``.
    """
    schema = await service.create_schema(
        workspace_id=request.workspace_id,
        name=request.name,
        properties=request.properties,
        views=request.views,
        user_id=current_user.user_id,
        description=request.description,
        document_id=request.document_id,
    )
    await session.commit()
    return DatabaseResponse.from_entity(schema)


@router.get(
    "/{database_id}",
    response_model=DatabaseWithEntriesResponse,
    responses={401: ERROR_RESPONSES[401], 404: ERROR_RESPONSES[404]},
)
async def get_database(
    database_id: str,
    current_user: AuthenticatedUser,
    service: SchemaServiceDep,
) -> DatabaseWithEntriesResponse:
    """Get a database together with its entries."""
    schema, entries = await service.get_schema_with_entries(database_id)
    return DatabaseWithEntriesResponse(
        database=DatabaseResponse.from_entity(schema),
        entries=[EntryResponse.from_entity(entry) for entry in entries],
    )


@router.put(
    "/{database_id}",
    response_model=DatabaseResponse,
    responses=ERROR_RESPONSES,
)
async def update_database(
    database_id: str,
    request: UpdateDatabaseRequest,
    current_user: AuthenticatedUser,
    service: SchemaServiceDep,
    session: DbSession,
) -> DatabaseResponse:
    """Replace a database's properties and views.

    Any ``_columnOrder`` view in the body is ignored; the order is
    recomputed from the key order of ``properties``.
    """
    schema = await service.update_schema(
        database_id,
        properties=request.properties,
        views=request.views,
        name=request.name,
        description=request.description,
    )
    await session.commit()
    return DatabaseResponse.from_entity(schema)


@router.delete(
    "/{database_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: ERROR_RESPONSES[401], 404: ERROR_RESPONSES[404]},
)
async def delete_database(
    database_id: str,
    current_user: AuthenticatedUser,
    service: SchemaServiceDep,
    session: DbSession,
) -> None:
    """Delete a database and all of its entries."""
    await service.delete_schema(database_id)
    await session.commit()
    logger.info("Database deleted via API", schema_id=database_id, user_id=current_user.user_id)


@router.post(
    "/{database_id}/properties",
    status_code=status.HTTP_201_CREATED,
    response_model=DatabaseResponse,
    responses=ERROR_RESPONSES,
)
async def add_property(
    database_id: str,
    request: AddPropertyRequest,
    current_user: AuthenticatedUser,
    service: SchemaServiceDep,
    session: DbSession,
) -> DatabaseResponse:
    """Add a column, right after ``afterKey`` or at the end."""
    schema, _ = await service.add_property(
        database_id,
        after_key=request.after_key,
        property_type=request.type,
        name=request.name,
        options=request.options,
    )
    await session.commit()
    return DatabaseResponse.from_entity(schema)


@router.patch(
    "/{database_id}/properties/{key}",
    response_model=DatabaseResponse,
    responses=ERROR_RESPONSES,
)
async def update_property(
    database_id: str,
    key: str,
    request: UpdatePropertyRequest,
    current_user: AuthenticatedUser,
    service: SchemaServiceDep,
    session: DbSession,
) -> DatabaseResponse:
    """Rename a column or change its type, options or format."""
    schema = await service.update_property(
        database_id,
        key,
        name=request.name,
        property_type=request.type,
        options=request.options,
        format=request.format,
    )
    await session.commit()
    return DatabaseResponse.from_entity(schema)


@router.delete(
    "/{database_id}/properties/{key}",
    response_model=DatabaseResponse,
    responses=ERROR_RESPONSES,
)
async def delete_property(
    database_id: str,
    key: str,
    current_user: AuthenticatedUser,
    service: SchemaServiceDep,
    session: DbSession,
) -> DatabaseResponse:
    """Delete a column. The last column and the last Title column cannot be deleted."""
    schema = await service.delete_property(database_id, key)
    await session.commit()
    return DatabaseResponse.from_entity(schema)


@router.put(
    "/{database_id}/columns/order",
    response_model=DatabaseResponse,
    responses=ERROR_RESPONSES,
)
async def reorder_columns(
    database_id: str,
    request: ReorderColumnsRequest,
    current_user: AuthenticatedUser,
    service: SchemaServiceDep,
    session: DbSession,
) -> DatabaseResponse:
    """Set the column display order."""
    schema = await service.reorder_columns(database_id, request.order)
    await session.commit()
    return DatabaseResponse.from_entity(schema)


@router.post(
    "/{database_id}/columns/move",
    response_model=DatabaseResponse,
    responses=ERROR_RESPONSES,
)
async def move_column(
    database_id: str,
    request: MoveColumnRequest,
    current_user: AuthenticatedUser,
    service: SchemaServiceDep,
    session: DbSession,
) -> DatabaseResponse:
    """Move one column right before another, or to the end."""
    schema = await service.move_column(database_id, request.key, request.before_key)
    await session.commit()
    return DatabaseResponse.from_entity(schema)


@router.put(
    "/{database_id}/columns/{key}/hidden",
    response_model=DatabaseResponse,
    responses=ERROR_RESPONSES,
)
async def set_column_hidden(
    database_id: str,
    key: str,
    request: ColumnHiddenRequest,
    current_user: AuthenticatedUser,
    service: SchemaServiceDep,
    session: DbSession,
) -> DatabaseResponse:
    """Hide or show a column."""
    schema = await service.set_column_hidden(database_id, key, request.hidden)
    await session.commit()
    return DatabaseResponse.from_entity(schema)


@router.put(
    "/{database_id}/columns/{key}/width",
    response_model=DatabaseResponse,
    responses=ERROR_RESPONSES,
)
async def set_column_width(
    database_id: str,
    key: str,
    request: ColumnWidthRequest,
    current_user: AuthenticatedUser,
    service: SchemaServiceDep,
    session: DbSession,
) -> DatabaseResponse:
    """Set a column's width in pixels."""
    schema = await service.set_column_width(database_id, key, request.width)
    await session.commit()
    return DatabaseResponse.from_entity(schema)


@router.post(
    "/{database_id}/query",
    response_model=QueryResponse,
    responses={401: ERROR_RESPONSES[401], 404: ERROR_RESPONSES[404]},
)
async def query_entries(
    database_id: str,
    request: QueryRequest,
    current_user: AuthenticatedUser,
    service: EntryServiceDep,
) -> QueryResponse:
    """Filter (AND-combined) and sort a database's entries."""
    _, entries = await service.query_entries(
        database_id,
        filters=[
            FilterCondition(property=f.property, operator=f.operator, value=f.value)
            for f in request.filters
        ],
        sort_column=request.sort.column if request.sort else None,
        sort_direction=request.sort.direction if request.sort else "asc",
    )
    return QueryResponse(
        items=[EntryResponse.from_entity(entry) for entry in entries],
        total=len(entries),
    )

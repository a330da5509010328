"""Entries API routes.

Provides endpoints for entry CRUD, duplication and bulk operations within a
database. Bulk endpoints answer 200 when every item went through and 207
(Multi-Status) when some failed; successful items are never rolled back.
"""

from fastapi import APIRouter, Response, status

from gridbase.core.config import get_settings
from gridbase.core.logging import get_logger
from gridbase.domain.exceptions import EntryValidationError, ValidationIssue
from gridbase.domain.services.entry_service import BulkResult
from gridbase.infrastructure.api.dependencies import (
    AuthenticatedUser,
    DbSession,
    EntryServiceDep,
)
from gridbase.infrastructure.api.schemas import (
    BulkCreateRequest,
    BulkDeleteRequest,
    BulkDeleteResponse,
    BulkEntriesResponse,
    BulkFailureResponse,
    BulkUpdateRequest,
    CreateEntryRequest,
    EntryResponse,
    NotFoundResponse,
    UpdateEntryRequest,
    ValidationErrorResponse,
)

logger = get_logger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ValidationErrorResponse, "description": "Validation error"},
    401: {"description": "Missing caller identity"},
    404: {"model": NotFoundResponse, "description": "Database or entry not found"},
}

BULK_RESPONSES = {
    **ERROR_RESPONSES,
    207: {"description": "Some items failed; the rest were applied"},
}


def _check_bulk_size(count: int) -> None:
    limit = get_settings().max_bulk_items
    if count > limit:
        raise EntryValidationError(
            [
                ValidationIssue(
                    field="entryIds",
                    message=f"At most {limit} items per bulk request",
                    code="bulk_too_large",
                )
            ]
        )


def _bulk_status(result: BulkResult, response: Response) -> None:
    response.status_code = status.HTTP_207_MULTI_STATUS if result.has_failures else status.HTTP_200_OK


def _failures(result: BulkResult) -> list[BulkFailureResponse]:
    return [BulkFailureResponse.from_failure(f) for f in result.failed]


@router.post(
    "/{database_id}/entries",
    status_code=status.HTTP_201_CREATED,
    response_model=EntryResponse,
    responses=ERROR_RESPONSES,
)
async def create_entry(
    database_id: str,
    request: CreateEntryRequest,
    current_user: AuthenticatedUser,
    service: EntryServiceDep,
    session: DbSession,
) -> EntryResponse:
    """Create an entry; every invalid field is reported at once."""
    entry = await service.create_entry(
        database_id, request.data, current_user.user_id, order=request.order
    )
    await session.commit()
    return EntryResponse.from_entity(entry)


@router.put(
    "/{database_id}/entries/{entry_id}",
    response_model=EntryResponse,
    responses=ERROR_RESPONSES,
)
async def update_entry(
    database_id: str,
    entry_id: str,
    request: UpdateEntryRequest,
    current_user: AuthenticatedUser,
    service: EntryServiceDep,
    session: DbSession,
) -> EntryResponse:
    """Patch an entry. Omitted fields are kept; null clears a field."""
    entry = await service.update_entry(database_id, entry_id, request.data, order=request.order)
    await session.commit()
    return EntryResponse.from_entity(entry)


@router.delete(
    "/{database_id}/entries/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: ERROR_RESPONSES[401], 404: ERROR_RESPONSES[404]},
)
async def delete_entry(
    database_id: str,
    entry_id: str,
    current_user: AuthenticatedUser,
    service: EntryServiceDep,
    session: DbSession,
) -> None:
    """Delete an entry."""
    await service.delete_entry(database_id, entry_id)
    await session.commit()


@router.post(
    "/{database_id}/entries/{entry_id}/duplicate",
    status_code=status.HTTP_201_CREATED,
    response_model=EntryResponse,
    responses={401: ERROR_RESPONSES[401], 404: ERROR_RESPONSES[404]},
)
async def duplicate_entry(
    database_id: str,
    entry_id: str,
    current_user: AuthenticatedUser,
    service: EntryServiceDep,
    session: DbSession,
) -> EntryResponse:
    """Copy an entry; its title gets a ``Copy of`` prefix."""
    entry = await service.duplicate_entry(database_id, entry_id, current_user.user_id)
    await session.commit()
    return EntryResponse.from_entity(entry)


@router.post(
    "/{database_id}/entries/bulk",
    response_model=BulkEntriesResponse,
    responses=BULK_RESPONSES,
)
async def bulk_create_entries(
    database_id: str,
    request: BulkCreateRequest,
    response: Response,
    current_user: AuthenticatedUser,
    service: EntryServiceDep,
) -> BulkEntriesResponse:
    """Create several entries; invalid rows are reported per index."""
    _check_bulk_size(len(request.rows))
    result = await service.bulk_create(database_id, request.rows, current_user.user_id)
    _bulk_status(result, response)
    return BulkEntriesResponse(
        succeeded=[EntryResponse.from_entity(e) for e in result.succeeded],
        failed=_failures(result),
        succeeded_count=len(result.succeeded),
        failed_count=len(result.failed),
    )


@router.patch(
    "/{database_id}/entries/bulk",
    response_model=BulkEntriesResponse,
    responses=BULK_RESPONSES,
)
async def bulk_update_entries(
    database_id: str,
    request: BulkUpdateRequest,
    response: Response,
    current_user: AuthenticatedUser,
    service: EntryServiceDep,
) -> BulkEntriesResponse:
    """Apply one patch to several entries independently."""
    _check_bulk_size(len(request.entry_ids))
    result = await service.bulk_update(database_id, request.entry_ids, request.data)
    _bulk_status(result, response)
    return BulkEntriesResponse(
        succeeded=[EntryResponse.from_entity(e) for e in result.succeeded],
        failed=_failures(result),
        succeeded_count=len(result.succeeded),
        failed_count=len(result.failed),
    )


@router.post(
    "/{database_id}/entries/bulk-delete",
    response_model=BulkDeleteResponse,
    responses=BULK_RESPONSES,
)
async def bulk_delete_entries(
    database_id: str,
    request: BulkDeleteRequest,
    response: Response,
    current_user: AuthenticatedUser,
    service: EntryServiceDep,
) -> BulkDeleteResponse:
    """Delete several entries; missing ones are reported, the rest stay deleted."""
    _check_bulk_size(len(request.entry_ids))
    result = await service.bulk_delete(database_id, request.entry_ids)
    _bulk_status(result, response)
    logger.info(
        "Bulk delete via API",
        schema_id=database_id,
        user_id=current_user.user_id,
        succeeded=len(result.succeeded),
        failed=len(result.failed),
    )
    return BulkDeleteResponse(
        succeeded=result.succeeded,
        failed=_failures(result),
        succeeded_count=len(result.succeeded),
        failed_count=len(result.failed),
    )

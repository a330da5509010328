"""FastAPI dependencies for caller identity and services.

Authentication happens upstream; the authenticated user's ID reaches this
service in the ``X-User-ID`` header.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from gridbase.core.config import Settings, get_settings
from gridbase.core.logging import get_logger
from gridbase.domain.services.entry_service import EntryService
from gridbase.domain.services.schema_service import SchemaService
from gridbase.infrastructure.persistence.database import get_db_session

logger = get_logger(__name__)


@dataclass
class CurrentUser:
    """The caller as identified by the upstream authentication layer."""

    user_id: str


async def get_current_user(
    x_user_id: Annotated[str | None, Header()] = None,
) -> CurrentUser:
    """Extract the caller from the ``X-User-ID`` header.

    Raises:
        HTTPException: 401 if the header is missing or blank.
    """
    if not x_user_id or not x_user_id.strip():
        logger.debug("Request without caller identity")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-ID header",
        )
    return CurrentUser(user_id=x_user_id.strip())


AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_schema_service(
    session: DbSession,
    settings: Annotated[Settings, Depends(get_settings)],
) -> SchemaService:
    return SchemaService(session, settings)


def get_entry_service(
    session: DbSession,
    settings: Annotated[Settings, Depends(get_settings)],
) -> EntryService:
    return EntryService(session, settings)


SchemaServiceDep = Annotated[SchemaService, Depends(get_schema_service)]
EntryServiceDep = Annotated[EntryService, Depends(get_entry_service)]

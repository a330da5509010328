"""SQLAlchemy model for the database_entries table."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from gridbase.domain.entities import Entry
from gridbase.infrastructure.persistence.database import Base
from gridbase.infrastructure.persistence.models.database_schema import JSONDocument, utcnow


class DatabaseEntryModel(Base):
    """SQLAlchemy model for the database_entries table.

    Attributes:
        id: Primary key (UUID string).
        schema_id: Owning schema; entries are removed with it.
        data: JSON object mapping property key to value.
        order: Insertion-order tiebreaker.
        created_by: User ID of the creator.
    """

    __tablename__ = "database_entries"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="Entry ID (UUID)",
    )
    schema_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("database_schemas.id", ondelete="CASCADE"),
        nullable=False,
    )
    data: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False, default=dict)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    __table_args__ = (Index("ix_database_entries_schema_id", "schema_id"),)

    def __repr__(self) -> str:
        return f"<DatabaseEntry(id={self.id}, schema_id={self.schema_id})>"

    def to_entity(self) -> Entry:
        """Convert the row into a domain ``Entry``."""
        return Entry(
            id=self.id,
            schema_id=self.schema_id,
            data=dict(self.data or {}),
            order=self.order,
            created_by=self.created_by,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

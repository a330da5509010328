"""SQLAlchemy model for the database_schemas table.

Each row is one user-defined structured table: its typed property
definitions and its views, both stored as JSON documents.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from gridbase.domain.entities import PropertyDefinition, Schema, ViewDefinition
from gridbase.infrastructure.persistence.database import Base

# JSONB does not preserve object key order; the column order lives in the views list
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DatabaseSchemaModel(Base):
    """SQLAlchemy model for the database_schemas table.

    Attributes:
        id: Primary key (UUID string).
        workspace_id: Owning workspace.
        document_id: Optional document the table is embedded in.
        name: Table name.
        description: Optional description.
        properties: JSON object mapping property key to definition.
        views: JSON array of view definitions, including reserved metadata views.
        created_by: User ID of the creator.
    """

    __tablename__ = "database_schemas"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="Schema ID (UUID)",
    )
    workspace_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        comment="Owning workspace ID",
    )
    document_id: Mapped[str | None] = mapped_column(
        String(36),
        nullable=True,
        comment="Document the table is embedded in, if any",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    properties: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        comment="Property key -> definition",
    )
    views: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
        comment="View definitions including _columnOrder/_hiddenColumns/_columnWidths",
    )
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

    __table_args__ = (
        Index("ix_database_schemas_workspace_id", "workspace_id"),
        Index("ix_database_schemas_document_id", "document_id"),
    )

    def __repr__(self) -> str:
        return f"<DatabaseSchema(id={self.id}, name={self.name})>"

    def to_entity(self) -> Schema:
        """Convert the row into a domain ``Schema``."""
        return Schema(
            id=self.id,
            workspace_id=self.workspace_id,
            name=self.name,
            properties={
                key: PropertyDefinition.from_dict(key, definition)
                for key, definition in (self.properties or {}).items()
            },
            views=[ViewDefinition.from_dict(view) for view in self.views or []],
            description=self.description,
            document_id=self.document_id,
            created_by=self.created_by,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def apply_entity(self, schema: Schema) -> None:
        """Overwrite name, description, properties and views from ``schema``.

        The JSON documents are replaced wholesale, never patched in place.
        """
        self.name = schema.name
        self.description = schema.description
        self.properties = schema.properties_to_dict()
        self.views = schema.views_to_list()

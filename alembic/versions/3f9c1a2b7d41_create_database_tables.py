"""create_database_tables

Revision ID: 3f9c1a2b7d41
Revises:
Create Date: 2026-10-19 09:12:44.318207

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f9c1a2b7d41"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSONDocument = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Create database_schemas and database_entries tables."""
    op.create_table(
        "database_schemas",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Schema ID (UUID)"),
        sa.Column("workspace_id", sa.String(length=36), nullable=False, comment="Owning workspace ID"),
        sa.Column(
            "document_id",
            sa.String(length=36),
            nullable=True,
            comment="Document the table is embedded in, if any",
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("properties", JSONDocument, nullable=False, comment="Property key -> definition"),
        sa.Column(
            "views",
            JSONDocument,
            nullable=False,
            comment="View definitions including _columnOrder/_hiddenColumns/_columnWidths",
        ),
        sa.Column("created_by", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_database_schemas_workspace_id", "database_schemas", ["workspace_id"])
    op.create_index("ix_database_schemas_document_id", "database_schemas", ["document_id"])

    op.create_table(
        "database_entries",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Entry ID (UUID)"),
        sa.Column("schema_id", sa.String(length=36), nullable=False),
        sa.Column("data", JSONDocument, nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["schema_id"], ["database_schemas.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_database_entries_schema_id", "database_entries", ["schema_id"])


def downgrade() -> None:
    """Drop database_entries and database_schemas tables."""
    op.drop_index("ix_database_entries_schema_id", table_name="database_entries")
    op.drop_table("database_entries")
    op.drop_index("ix_database_schemas_document_id", table_name="database_schemas")
    op.drop_index("ix_database_schemas_workspace_id", table_name="database_schemas")
    op.drop_table("database_schemas")

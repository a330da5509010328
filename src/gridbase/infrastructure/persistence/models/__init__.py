"""SQLAlchemy models for GridBase tables.

All models inherit from the Base class defined in database.py and are
automatically created on application startup in development mode.
"""

from gridbase.infrastructure.persistence.models.database_entry import DatabaseEntryModel
from gridbase.infrastructure.persistence.models.database_schema import DatabaseSchemaModel

__all__ = [
    "DatabaseEntryModel",
    "DatabaseSchemaModel",
]

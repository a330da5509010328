"""Repositories for GridBase persistence."""

from gridbase.infrastructure.persistence.repositories.entry_repository import EntryRepository
from gridbase.infrastructure.persistence.repositories.schema_repository import SchemaRepository

__all__ = [
    "EntryRepository",
    "SchemaRepository",
]

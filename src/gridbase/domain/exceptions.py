"""Exceptions raised by the table engine services."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation problem, reported per field where possible."""

    field: str
    message: str
    code: str


class GridBaseError(Exception):
    """Base class for all GridBase errors."""
    pass


class _IssueListError(GridBaseError):
    def __init__(self, errors: list[ValidationIssue]):
        self.errors = list(errors)
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in self.errors))


class SchemaValidationError(_IssueListError):
    """Raised when a schema-level rule blocks the whole write."""
    pass


class EntryValidationError(_IssueListError):
    """Raised when entry data fails validation; carries every field error."""
    pass


class SchemaNotFoundError(GridBaseError):
    """Raised when a schema id does not resolve."""

    def __init__(self, schema_id: str):
        self.schema_id = schema_id
        super().__init__(f"Database '{schema_id}' not found")


class EntryNotFoundError(GridBaseError):
    """Raised when an entry id does not resolve within its schema."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry '{entry_id}' not found")

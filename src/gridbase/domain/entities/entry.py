"""Entry entity: one row of a structured table."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class Entry:
    """A single row whose fields are validated against a schema.

    Entries reference their schema by id only. ``data`` may hold keys that
    are no longer in the schema (after a rename or delete); readers ignore them.

    Attributes:
        id: Unique identifier (UUID string).
        schema_id: ID of the owning schema.
        data: Mapping from property key to stored value.
        order: Insertion-order tiebreaker; display order comes from sorting.
        created_by: User ID of the creator.
    """

    id: str
    schema_id: str
    data: dict[str, Any] = field(default_factory=dict)
    order: int = 0
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Entry ID is required")
        if not self.schema_id:
            raise ValueError("Entry schema ID is required")
        if not isinstance(self.data, dict):
            raise ValueError("Entry data must be a dictionary")

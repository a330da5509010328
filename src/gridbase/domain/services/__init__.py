"""Domain services for GridBase.

Validators, the column ordering channel, the filter/sort engine and CSV
export are pure and framework-free. ``SchemaService`` and ``EntryService``
orchestrate them over the persistence repositories.
"""

from gridbase.domain.services.csv_exporter import export_csv, export_filename, render_cell
from gridbase.domain.services.entry_validator import (
    EntryValidator,
    format_instant,
    parse_instant,
    parse_number,
    validate_value,
)
from gridbase.domain.services.query_engine import (
    FilterCondition,
    FilterOperator,
    SortDirection,
    apply_filters,
    apply_sort,
)
from gridbase.domain.services.schema_validator import (
    PROPERTIES_REQUIRED_MESSAGE,
    TITLE_REQUIRED_MESSAGE,
    SchemaValidator,
)

__all__ = [
    "PROPERTIES_REQUIRED_MESSAGE",
    "TITLE_REQUIRED_MESSAGE",
    "EntryValidator",
    "FilterCondition",
    "FilterOperator",
    "SchemaValidator",
    "SortDirection",
    "apply_filters",
    "apply_sort",
    "export_csv",
    "export_filename",
    "format_instant",
    "parse_instant",
    "parse_number",
    "render_cell",
    "validate_value",
]

"""Domain entities for GridBase.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from gridbase.domain.entities.entry import Entry
from gridbase.domain.entities.schema import (
    COLUMN_ORDER_VIEW,
    COLUMN_WIDTHS_VIEW,
    HIDDEN_COLUMNS_VIEW,
    OPTION_TYPES,
    RESERVED_VIEW_TYPES,
    USER_VIEW_TYPES,
    PropertyDefinition,
    PropertyType,
    Schema,
    ViewDefinition,
)
from gridbase.domain.entities.values import (
    CheckboxValue,
    DateValue,
    EmailValue,
    MultiSelectValue,
    NumberValue,
    SelectValue,
    TextValue,
    TitleValue,
    TypedValue,
    UrlValue,
    is_cleared,
)

__all__ = [
    "COLUMN_ORDER_VIEW",
    "COLUMN_WIDTHS_VIEW",
    "HIDDEN_COLUMNS_VIEW",
    "OPTION_TYPES",
    "RESERVED_VIEW_TYPES",
    "USER_VIEW_TYPES",
    "CheckboxValue",
    "DateValue",
    "EmailValue",
    "Entry",
    "MultiSelectValue",
    "NumberValue",
    "PropertyDefinition",
    "PropertyType",
    "Schema",
    "SelectValue",
    "TextValue",
    "TitleValue",
    "TypedValue",
    "UrlValue",
    "ViewDefinition",
    "is_cleared",
]

"""Schema entity for user-defined structured tables.

A schema holds the typed column definitions (properties) of one table and
its list of views. Properties live in a plain mapping whose key order is not
trusted; display order is carried by the reserved ``_columnOrder`` view.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class PropertyType(str, Enum):
    """Supported property (column) types."""

    TITLE = "title"
    TEXT = "text"
    NUMBER = "number"
    EMAIL = "email"
    URL = "url"
    DATE = "date"
    CHECKBOX = "checkbox"
    SELECT = "select"
    MULTI_SELECT = "multi-select"


# Types whose definitions must carry an ``options`` list
OPTION_TYPES = frozenset({PropertyType.SELECT, PropertyType.MULTI_SELECT})

# View type prefix marking internal metadata views
RESERVED_VIEW_PREFIX = "_"

COLUMN_ORDER_VIEW = "_columnOrder"
HIDDEN_COLUMNS_VIEW = "_hiddenColumns"
COLUMN_WIDTHS_VIEW = "_columnWidths"

RESERVED_VIEW_TYPES = frozenset({COLUMN_ORDER_VIEW, HIDDEN_COLUMNS_VIEW, COLUMN_WIDTHS_VIEW})
USER_VIEW_TYPES = frozenset({"table", "gallery"})


@dataclass
class PropertyDefinition:
    """Definition of a single typed column.

    Attributes:
        name: Display label. Also the mapping key unless the column was renamed.
        type: One of the ``PropertyType`` values.
        options: Allowed values for select and multi-select columns.
        format: Display-only hint (e.g. ``currency``, ``percent``).
    """

    name: str
    type: PropertyType
    options: list[str] = field(default_factory=list)
    format: str | None = None

    @property
    def is_title(self) -> bool:
        return self.type == PropertyType.TITLE

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "type": self.type.value}
        if self.type in OPTION_TYPES:
            data["options"] = list(self.options)
        if self.format is not None:
            data["format"] = self.format
        return data

    @classmethod
    def from_dict(cls, key: str, data: dict[str, Any]) -> "PropertyDefinition":
        """Build a definition from its stored form.

        Args:
            key: The mapping key, used as the name when none is stored.
            data: The stored definition dict.

        Raises:
            ValueError: If the stored type is not a known ``PropertyType``.
        """
        return cls(
            name=data.get("name") or key,
            type=PropertyType(data.get("type", PropertyType.TEXT.value)),
            options=list(data.get("options") or []),
            format=data.get("format"),
        )


@dataclass
class ViewDefinition:
    """A view entry, either user-visible (table, gallery) or reserved metadata.

    Reserved views use the payload field matching their type: ``order`` for
    ``_columnOrder``, ``columns`` for ``_hiddenColumns`` and ``widths`` for
    ``_columnWidths``. Unrecognized stored keys are kept in ``extra`` so they
    survive a round trip.
    """

    type: str
    name: str | None = None
    cover_property: str | None = None
    order: list[str] | None = None
    columns: list[str] | None = None
    widths: dict[str, int] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_reserved(self) -> bool:
        return self.type.startswith(RESERVED_VIEW_PREFIX)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.extra)
        data["type"] = self.type
        if self.name is not None:
            data["name"] = self.name
        if self.cover_property is not None:
            data["coverProperty"] = self.cover_property
        if self.order is not None:
            data["order"] = list(self.order)
        if self.columns is not None:
            data["columns"] = list(self.columns)
        if self.widths is not None:
            data["widths"] = dict(self.widths)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ViewDefinition":
        known = {"type", "name", "coverProperty", "order", "columns", "widths"}
        widths = data.get("widths")
        return cls(
            type=str(data.get("type", "")),
            name=data.get("name"),
            cover_property=data.get("coverProperty"),
            order=list(data["order"]) if data.get("order") is not None else None,
            columns=list(data["columns"]) if data.get("columns") is not None else None,
            widths={str(k): int(v) for k, v in widths.items()} if widths is not None else None,
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass
class Schema:
    """A structured table definition.

    Attributes:
        id: Unique identifier (UUID string).
        workspace_id: Owning workspace.
        name: Table name.
        properties: Mapping from property key to definition. Iteration order is
            not authoritative.
        views: User views followed by reserved metadata views.
        description: Optional free-text description.
        document_id: Optional document the table is embedded in.
        created_by: User ID of the creator.
    """

    id: str
    workspace_id: str
    name: str
    properties: dict[str, PropertyDefinition]
    views: list[ViewDefinition] = field(default_factory=list)
    description: str | None = None
    document_id: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def title_keys(self) -> list[str]:
        """Keys of all title-type properties."""
        return [key for key, prop in self.properties.items() if prop.is_title]

    @property
    def user_views(self) -> list[ViewDefinition]:
        return [view for view in self.views if not view.is_reserved]

    def reserved_view(self, view_type: str) -> ViewDefinition | None:
        """Return the reserved view of the given type, if present.

        When a store somehow holds more than one, the last one wins.
        """
        found = None
        for view in self.views:
            if view.type == view_type:
                found = view
        return found

    def properties_to_dict(self) -> dict[str, dict[str, Any]]:
        return {key: prop.to_dict() for key, prop in self.properties.items()}

    def views_to_list(self) -> list[dict[str, Any]]:
        return [view.to_dict() for view in self.views]

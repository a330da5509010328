"""Column ordering and presentation metadata.

The properties mapping is treated as purely associative: the stores it goes
through do not keep key order. Display order, the hidden-column set and
column widths live in reserved views (``_columnOrder``, ``_hiddenColumns``,
``_columnWidths``), at most one of each per schema. Every change rewrites the
affected reserved view wholesale and leaves all other views untouched.

All functions here are pure: they take a ``Schema`` and return a new one (or
a derived value) without mutating the input.
"""

from collections.abc import Iterable
from dataclasses import replace

from gridbase.domain.entities import (
    COLUMN_ORDER_VIEW,
    COLUMN_WIDTHS_VIEW,
    HIDDEN_COLUMNS_VIEW,
    Schema,
    ViewDefinition,
)
from gridbase.domain.exceptions import SchemaValidationError, ValidationIssue


def _replace_reserved(
    views: list[ViewDefinition], view_type: str, new_view: ViewDefinition | None
) -> list[ViewDefinition]:
    kept = [view for view in views if view.type != view_type]
    if new_view is not None:
        kept.append(new_view)
    return kept


def require_key(schema: Schema, key: str) -> None:
    """Raise ``SchemaValidationError`` unless ``key`` is a property of the schema."""
    if key not in schema.properties:
        raise SchemaValidationError(
            [
                ValidationIssue(
                    field="key",
                    message=f"Column '{key}' does not exist",
                    code="property_not_found",
                )
            ]
        )


def split_views(views: Iterable[ViewDefinition]) -> tuple[list[ViewDefinition], dict[str, ViewDefinition]]:
    """Split views into user-visible views and reserved views keyed by type.

    If a reserved type appears more than once the last occurrence wins.
    """
    user_views: list[ViewDefinition] = []
    reserved: dict[str, ViewDefinition] = {}
    for view in views:
        if view.is_reserved:
            reserved[view.type] = view
        else:
            user_views.append(view)
    return user_views, reserved


def normalize_views(views: Iterable[ViewDefinition]) -> list[ViewDefinition]:
    """User views in submitted order, then at most one of each reserved view."""
    user_views, reserved = split_views(views)
    return user_views + list(reserved.values())


def derive_display_order(schema: Schema) -> list[str]:
    """Return every property key in display order.

    Keys from ``_columnOrder`` come first in stored order; stale keys are
    dropped, and properties missing from the list are appended in the
    mapping's iteration order.
    """
    view = schema.reserved_view(COLUMN_ORDER_VIEW)
    stored = view.order if view is not None and view.order else []

    ordered: list[str] = []
    seen: set[str] = set()
    for key in stored:
        if key in schema.properties and key not in seen:
            ordered.append(key)
            seen.add(key)
    for key in schema.properties:
        if key not in seen:
            ordered.append(key)
            seen.add(key)
    return ordered


def persist_order(schema: Schema, ordered_keys: Iterable[str]) -> Schema:
    """Replace the ``_columnOrder`` view with one holding exactly ``ordered_keys``."""
    order_view = ViewDefinition(type=COLUMN_ORDER_VIEW, order=list(ordered_keys))
    return replace(schema, views=_replace_reserved(schema.views, COLUMN_ORDER_VIEW, order_view))


def derive_hidden_columns(schema: Schema) -> list[str]:
    """Hidden property keys that still exist, in display order."""
    view = schema.reserved_view(HIDDEN_COLUMNS_VIEW)
    hidden = set(view.columns or []) if view is not None else set()
    return [key for key in derive_display_order(schema) if key in hidden]


def derive_visible_columns(schema: Schema) -> list[str]:
    """Display order minus the hidden-column set."""
    view = schema.reserved_view(HIDDEN_COLUMNS_VIEW)
    hidden = set(view.columns or []) if view is not None else set()
    return [key for key in derive_display_order(schema) if key not in hidden]


def derive_column_widths(schema: Schema) -> dict[str, int]:
    """Stored pixel widths for properties that still exist."""
    view = schema.reserved_view(COLUMN_WIDTHS_VIEW)
    widths = (view.widths or {}) if view is not None else {}
    return {key: width for key, width in widths.items() if key in schema.properties}


def set_column_hidden(schema: Schema, key: str, hidden: bool) -> Schema:
    """Hide or show one column by rewriting ``_hiddenColumns``.

    Raises:
        SchemaValidationError: If the key is not a property of the schema.
    """
    require_key(schema, key)
    current = derive_hidden_columns(schema)
    if hidden and key not in current:
        current.append(key)
    elif not hidden:
        current = [k for k in current if k != key]

    hidden_view = ViewDefinition(type=HIDDEN_COLUMNS_VIEW, columns=current)
    return replace(schema, views=_replace_reserved(schema.views, HIDDEN_COLUMNS_VIEW, hidden_view))


def set_column_width(
    schema: Schema,
    key: str,
    width: int,
    min_width: int = 1,
    max_width: int | None = None,
) -> Schema:
    """Record a pixel width for one column by rewriting ``_columnWidths``.

    Raises:
        SchemaValidationError: If the key is unknown or the width is out of range.
    """
    require_key(schema, key)
    if isinstance(width, bool) or not isinstance(width, int) or width < min_width or (
        max_width is not None and width > max_width
    ):
        upper = f" and {max_width}" if max_width is not None else ""
        raise SchemaValidationError(
            [
                ValidationIssue(
                    field="width",
                    message=f"Column width must be an integer between {min_width}{upper}",
                    code="width_out_of_range",
                )
            ]
        )

    widths = derive_column_widths(schema)
    widths[key] = width
    widths_view = ViewDefinition(type=COLUMN_WIDTHS_VIEW, widths=widths)
    return replace(schema, views=_replace_reserved(schema.views, COLUMN_WIDTHS_VIEW, widths_view))


def move_column(order: list[str], key: str, before_key: str | None = None) -> list[str]:
    """Move ``key`` so it sits right before ``before_key``, or last if None."""
    if key not in order:
        raise ValueError(f"Column '{key}' is not in the order")
    if before_key is not None and before_key not in order:
        raise ValueError(f"Column '{before_key}' is not in the order")

    if before_key == key:
        return list(order)

    moved = [k for k in order if k != key]
    if before_key is None:
        moved.append(key)
        return moved
    moved.insert(moved.index(before_key), key)
    return moved


def insert_after(order: list[str], key: str, after_key: str | None = None) -> list[str]:
    """Insert ``key`` right after ``after_key``; append when absent or None."""
    result = [k for k in order if k != key]
    if after_key is not None and after_key in result:
        result.insert(result.index(after_key) + 1, key)
    else:
        result.append(key)
    return result


def rename_column_metadata(schema: Schema, renames: dict[str, str]) -> Schema:
    """Carry hidden flags, widths and gallery covers over to renamed keys.

    The order view is not touched; callers persist a fresh order afterwards.
    """
    if not renames:
        return schema

    views: list[ViewDefinition] = []
    for view in schema.views:
        if view.type == HIDDEN_COLUMNS_VIEW:
            view = replace(view, columns=[renames.get(k, k) for k in view.columns or []])
        elif view.type == COLUMN_WIDTHS_VIEW:
            view = replace(view, widths={renames.get(k, k): w for k, w in (view.widths or {}).items()})
        elif view.cover_property in renames:
            view = replace(view, cover_property=renames[view.cover_property])
        views.append(view)
    return replace(schema, views=views)


def remove_column_metadata(schema: Schema, key: str) -> Schema:
    """Drop every reference to ``key`` from reserved views and gallery covers.

    The order view is not touched; callers persist a fresh order afterwards.
    """
    views: list[ViewDefinition] = []
    for view in schema.views:
        if view.type == HIDDEN_COLUMNS_VIEW:
            view = replace(view, columns=[k for k in view.columns or [] if k != key])
        elif view.type == COLUMN_WIDTHS_VIEW:
            view = replace(view, widths={k: w for k, w in (view.widths or {}).items() if k != key})
        elif view.cover_property == key:
            view = replace(view, cover_property=None)
        views.append(view)
    return replace(schema, views=views)

"""Filter and sort evaluation over entry lists.

Both operations are pure: they never mutate their inputs and always return
a new list, so callers decide when to re-derive a view of the data.

Filters are combined with logical AND. Sorting uses a single column; entries
whose value is missing or null always come after all defined values, in
either direction.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from enum import Enum
from typing import Any

from gridbase.domain.entities import Entry, PropertyType, Schema
from gridbase.domain.services.entry_validator import (
    TRUTHY_STRINGS,
    format_instant,
    parse_instant,
    parse_number,
)


class FilterOperator(str, Enum):
    """Supported filter operators."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class FilterCondition:
    """One ``{property, operator, value}`` predicate."""

    property: str
    operator: FilterOperator
    value: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FilterCondition":
        """Build a condition from its wire form.

        Raises:
            ValueError: If the operator is not supported.
        """
        return cls(
            property=str(data["property"]),
            operator=FilterOperator(data["operator"]),
            value=data.get("value"),
        )


ORDERED_TYPES = frozenset({PropertyType.NUMBER, PropertyType.DATE})


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (list, tuple)) and not value)


def _is_date_only(value: Any) -> bool:
    if isinstance(value, date) and not isinstance(value, datetime):
        return True
    return isinstance(value, str) and len(value.strip()) == 10


def _number_string(value: Any) -> str:
    number = parse_number(value)
    if number is None:
        return "" if value is None else str(value)
    if isinstance(number, float) and number.is_integer():
        number = int(number)
    return str(number)


def _date_string(value: Any, tz: tzinfo | None, date_only: bool) -> str:
    instant = parse_instant(value, tz)
    if instant is None:
        return "" if value is None else str(value)
    if date_only:
        return instant.astimezone(tz).date().isoformat() if tz else instant.date().isoformat()
    return format_instant(instant)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return bool(value)


def _equals(value: Any, target: Any, prop_type: PropertyType, tz: tzinfo | None) -> bool:
    if prop_type == PropertyType.NUMBER:
        return _number_string(value) == _number_string(target)
    if prop_type == PropertyType.DATE:
        date_only = _is_date_only(target)
        return _date_string(value, tz, date_only) == _date_string(target, tz, date_only)
    if prop_type == PropertyType.CHECKBOX:
        return _as_bool(value) == _as_bool(target)
    if prop_type == PropertyType.MULTI_SELECT:
        selected = list(value or [])
        if isinstance(target, (list, tuple)):
            return selected == list(target)
        return target in selected
    return ("" if value is None else str(value)) == ("" if target is None else str(target))


def _contains(value: Any, target: Any, prop_type: PropertyType) -> bool | None:
    """Case-insensitive substring test; None when unsupported for the type."""
    if prop_type in ORDERED_TYPES or prop_type == PropertyType.CHECKBOX:
        return None
    needle = ("" if target is None else str(target)).lower()
    if prop_type == PropertyType.MULTI_SELECT:
        return any(needle in str(option).lower() for option in value or [])
    return needle in ("" if value is None else str(value)).lower()


def _compare(value: Any, target: Any, prop_type: PropertyType, tz: tzinfo | None) -> int | None:
    """Three-way compare for number and date columns; None when not comparable."""
    if prop_type == PropertyType.NUMBER:
        left, right = parse_number(value), parse_number(target)
    elif prop_type == PropertyType.DATE:
        left, right = parse_instant(value, tz), parse_instant(target, tz)
    else:
        return None
    if left is None or right is None:
        return None
    return (left > right) - (left < right)


def matches(entry: Entry, schema: Schema, condition: FilterCondition, tz: tzinfo | None = None) -> bool:
    """Evaluate a single condition against one entry.

    Conditions on properties that are not in the schema always match.
    """
    prop = schema.properties.get(condition.property)
    if prop is None:
        return True

    value = entry.data.get(condition.property)
    op = condition.operator

    if op == FilterOperator.IS_EMPTY:
        return _is_empty(value)
    if op == FilterOperator.IS_NOT_EMPTY:
        return not _is_empty(value)
    if op == FilterOperator.EQUALS:
        return _equals(value, condition.value, prop.type, tz)
    if op == FilterOperator.NOT_EQUALS:
        return not _equals(value, condition.value, prop.type, tz)
    if op in (FilterOperator.CONTAINS, FilterOperator.NOT_CONTAINS):
        found = _contains(value, condition.value, prop.type)
        if found is None:
            return False
        return found if op == FilterOperator.CONTAINS else not found

    result = _compare(value, condition.value, prop.type, tz)
    if result is None:
        return False
    return result > 0 if op == FilterOperator.GREATER_THAN else result < 0


def apply_filters(
    entries: Iterable[Entry],
    schema: Schema,
    filters: Iterable[FilterCondition],
    tz: tzinfo | None = None,
) -> list[Entry]:
    """Keep the entries that satisfy every condition.

    Args:
        entries: Entries to filter; input order is preserved.
        schema: The schema the entries belong to.
        filters: Conditions, combined with AND.
        tz: Timezone used to read date-only filter values.

    Returns:
        A new list of matching entries.
    """
    conditions = list(filters)
    return [
        entry for entry in entries if all(matches(entry, schema, c, tz) for c in conditions)
    ]


def _sort_key(value: Any, prop_type: PropertyType, tz: tzinfo | None) -> Any:
    if value is None:
        return None
    if prop_type == PropertyType.NUMBER:
        return parse_number(value)
    if prop_type == PropertyType.DATE:
        instant = parse_instant(value, tz)
        return instant.timestamp() if instant is not None else None
    if prop_type == PropertyType.CHECKBOX:
        return int(_as_bool(value))
    if prop_type == PropertyType.MULTI_SELECT and isinstance(value, (list, tuple)):
        value = ", ".join(str(v) for v in value)
    text = str(value)
    return (text.casefold(), text)


def apply_sort(
    entries: Iterable[Entry],
    schema: Schema,
    column: str,
    direction: str | SortDirection = SortDirection.ASC,
    tz: tzinfo | None = None,
) -> list[Entry]:
    """Sort entries by one column.

    Numbers compare numerically, dates by timestamp, everything else by a
    case-insensitive string compare. Entries without a value (or with one
    that cannot be read as the column's type) go last regardless of
    direction; ties keep their input order.

    Raises:
        ValueError: If direction is not ``asc`` or ``desc``.
    """
    direction = SortDirection(direction)
    items = list(entries)
    prop = schema.properties.get(column)
    if prop is None:
        return items

    keyed: list[tuple[Any, Entry]] = []
    missing: list[Entry] = []
    for entry in items:
        key = _sort_key(entry.data.get(column), prop.type, tz)
        if key is None:
            missing.append(entry)
        else:
            keyed.append((key, entry))

    keyed.sort(key=lambda pair: pair[0], reverse=direction == SortDirection.DESC)
    return [entry for _, entry in keyed] + missing

"""CSV export of an already filtered, sorted and column-restricted entry list.

Export never re-derives filtering or ordering: it renders exactly the
entries and columns it is given.
"""

import csv
import io
import re
from collections.abc import Iterable
from datetime import date, tzinfo
from typing import Any

from gridbase.domain.entities import Entry, PropertyDefinition, PropertyType, Schema
from gridbase.domain.services.entry_validator import parse_instant, parse_number

DEFAULT_DATE_FORMAT = "%m/%d/%Y"

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def render_cell(
    value: Any,
    prop: PropertyDefinition,
    tz: tzinfo | None = None,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> str:
    """Render one stored value as CSV cell text."""
    if prop.type == PropertyType.CHECKBOX:
        return "Yes" if value is True else "No"
    if value is None:
        return ""
    if prop.type == PropertyType.MULTI_SELECT and isinstance(value, (list, tuple)):
        return "; ".join(str(v) for v in value)
    if prop.type == PropertyType.DATE:
        instant = parse_instant(value, tz)
        if instant is None:
            return str(value)
        return (instant.astimezone(tz) if tz else instant).strftime(date_format)
    if prop.type == PropertyType.NUMBER:
        number = parse_number(value)
        if isinstance(number, float) and number.is_integer():
            return str(int(number))
        return str(number) if number is not None else str(value)
    return str(value)


def export_csv(
    entries: Iterable[Entry],
    schema: Schema,
    visible_column_keys: Iterable[str],
    tz: tzinfo | None = None,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> str:
    """Serialize entries to CSV text.

    The header row holds each property's display name. Every field is quoted
    and embedded quotes are doubled. Keys that are not properties of the
    schema are skipped.

    Args:
        entries: Entries in the order they should appear.
        schema: Schema providing names and types.
        visible_column_keys: Property keys to export, in column order.
        tz: Timezone used to render dates.
        date_format: strftime pattern for date cells.

    Returns:
        The CSV document, one ``\\n``-terminated line per row.
    """
    columns = [(key, schema.properties[key]) for key in visible_column_keys if key in schema.properties]

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([prop.name for _, prop in columns])
    for entry in entries:
        writer.writerow(
            [render_cell(entry.data.get(key), prop, tz, date_format) for key, prop in columns]
        )
    return buffer.getvalue()


def export_filename(schema_name: str, on: date | None = None) -> str:
    """File name for an export: ``<schema-name>_<iso-date>.csv``."""
    day = on or date.today()
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", schema_name).strip() or "database"
    return f"{safe_name}_{day.isoformat()}.csv"

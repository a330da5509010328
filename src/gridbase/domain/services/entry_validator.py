"""Entry validation service for validating cell values against property types.

``validate_value`` is the single point of truth for turning a raw cell value
into a typed value; every write path routes through it. ``EntryValidator``
accumulates per-field problems over a whole row so callers can report every
violation at once.
"""

import math
import re
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Callable

from gridbase.domain.entities import (
    CheckboxValue,
    DateValue,
    EmailValue,
    MultiSelectValue,
    NumberValue,
    PropertyDefinition,
    PropertyType,
    SelectValue,
    TextValue,
    TitleValue,
    TypedValue,
    UrlValue,
    is_cleared,
)
from gridbase.domain.exceptions import ValidationIssue

# Simple local@domain.tld check
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

URL_PREFIXES = ("http://", "https://")

TRUTHY_STRINGS = frozenset({"true", "1", "yes", "y", "on", "checked"})


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_instant(value: Any, tz: tzinfo | None = None) -> datetime | None:
    """Parse a date-ish value into an aware UTC datetime.

    Naive values (including date-only strings) are read as local time in
    ``tz`` and normalized to UTC.

    Returns:
        The UTC datetime, or None if the value cannot be parsed.
    """
    local_tz = tz or timezone.utc

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=local_tz)
    return parsed.astimezone(timezone.utc)


def format_instant(value: datetime) -> str:
    """Render a UTC datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_number(value: Any) -> int | float | None:
    """Parse a numeric value, returning None when it is not a finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


class EntryValidator:
    """Validator for entry data against a schema's property definitions."""

    @classmethod
    def validate_title(cls, value: Any, field_name: str, **_: Any) -> TypedValue | ValidationIssue:
        if _is_blank(value):
            return ValidationIssue(
                field=field_name,
                message=f"'{field_name}' is required",
                code="required_missing",
            )
        if not isinstance(value, str):
            return ValidationIssue(
                field=field_name,
                message=f"Expected text value, got {type(value).__name__}",
                code="invalid_type",
            )
        return TitleValue(value)

    @classmethod
    def validate_text(cls, value: Any, field_name: str, **_: Any) -> TypedValue | ValidationIssue:
        if value is None or value == "":
            return TextValue(None)
        if not isinstance(value, str):
            return ValidationIssue(
                field=field_name,
                message=f"Expected text value, got {type(value).__name__}",
                code="invalid_type",
            )
        return TextValue(value)

    @classmethod
    def validate_number(cls, value: Any, field_name: str, **_: Any) -> TypedValue | ValidationIssue:
        if _is_blank(value):
            return NumberValue(None)
        number = parse_number(value)
        if number is None:
            return ValidationIssue(
                field=field_name,
                message=f"'{field_name}' must be a number",
                code="invalid_number",
            )
        return NumberValue(number)

    @classmethod
    def validate_email(cls, value: Any, field_name: str, **_: Any) -> TypedValue | ValidationIssue:
        if _is_blank(value):
            return EmailValue(None)
        if not isinstance(value, str) or not EMAIL_PATTERN.match(value.strip()):
            return ValidationIssue(
                field=field_name,
                message=f"'{field_name}' must be a valid email address",
                code="invalid_email_format",
            )
        return EmailValue(value.strip())

    @classmethod
    def validate_url(cls, value: Any, field_name: str, **_: Any) -> TypedValue | ValidationIssue:
        if _is_blank(value):
            return UrlValue(None)
        if not isinstance(value, str) or not value.strip().lower().startswith(URL_PREFIXES):
            return ValidationIssue(
                field=field_name,
                message=f"'{field_name}' must start with http:// or https://",
                code="invalid_url_format",
            )
        return UrlValue(value.strip())

    @classmethod
    def validate_date(
        cls, value: Any, field_name: str, tz: tzinfo | None = None, **_: Any
    ) -> TypedValue | ValidationIssue:
        if _is_blank(value):
            return DateValue(None)
        instant = parse_instant(value, tz)
        if instant is None:
            return ValidationIssue(
                field=field_name,
                message="Invalid date format. Use ISO 8601 format (e.g., 2024-01-01 or 2024-01-01T12:00:00Z)",
                code="invalid_date_format",
            )
        return DateValue(format_instant(instant))

    @classmethod
    def validate_checkbox(cls, value: Any, field_name: str, **_: Any) -> TypedValue | ValidationIssue:
        if isinstance(value, str):
            return CheckboxValue(value.strip().lower() in TRUTHY_STRINGS)
        return CheckboxValue(bool(value))

    @classmethod
    def validate_select(cls, value: Any, field_name: str, **_: Any) -> TypedValue | ValidationIssue:
        # Membership in ``options`` is a UI constraint; any string is stored
        if _is_blank(value):
            return SelectValue(None)
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            return SelectValue(str(value))
        return ValidationIssue(
            field=field_name,
            message=f"Expected a single option, got {type(value).__name__}",
            code="invalid_type",
        )

    @classmethod
    def validate_multi_select(
        cls, value: Any, field_name: str, **_: Any
    ) -> TypedValue | ValidationIssue:
        if value is None:
            return MultiSelectValue(())
        if isinstance(value, str):
            value = [value] if value.strip() else []
        if not isinstance(value, (list, tuple)):
            return ValidationIssue(
                field=field_name,
                message=f"Expected a list of options, got {type(value).__name__}",
                code="invalid_type",
            )

        selected: list[str] = []
        for item in value:
            if not isinstance(item, str):
                return ValidationIssue(
                    field=field_name,
                    message="Every selected option must be a string",
                    code="invalid_type",
                )
            if item and item not in selected:
                selected.append(item)
        return MultiSelectValue(tuple(selected))

    @classmethod
    def validators(cls) -> dict[PropertyType, Callable[..., TypedValue | ValidationIssue]]:
        """Lookup table from property type to its validator."""
        return {
            PropertyType.TITLE: cls.validate_title,
            PropertyType.TEXT: cls.validate_text,
            PropertyType.NUMBER: cls.validate_number,
            PropertyType.EMAIL: cls.validate_email,
            PropertyType.URL: cls.validate_url,
            PropertyType.DATE: cls.validate_date,
            PropertyType.CHECKBOX: cls.validate_checkbox,
            PropertyType.SELECT: cls.validate_select,
            PropertyType.MULTI_SELECT: cls.validate_multi_select,
        }

    @classmethod
    def validate_entry_data(
        cls,
        data: dict[str, Any],
        properties: dict[str, PropertyDefinition],
        partial: bool = False,
        tz: tzinfo | None = None,
    ) -> tuple[dict[str, Any], list[ValidationIssue]]:
        """Validate entry data against property definitions.

        Args:
            data: Raw field values keyed by property key.
            properties: The schema's property definitions.
            partial: If True, only fields present in data are checked (PATCH
                semantics); otherwise missing title fields are errors and
                checkboxes default to False.
            tz: Timezone used to interpret local dates.

        Returns:
            Tuple of (processed_data, errors). In processed_data a value of
            None marks a field the caller asked to clear.
        """
        errors: list[ValidationIssue] = []
        processed: dict[str, Any] = {}

        for field_name in data:
            if field_name not in properties:
                errors.append(
                    ValidationIssue(
                        field=field_name,
                        message=f"Unknown field '{field_name}' not defined in database schema",
                        code="unknown_field",
                    )
                )

        for key, prop in properties.items():
            if key in data:
                result = validate_value(prop, data[key], field_name=key, tz=tz)
                if isinstance(result, ValidationIssue):
                    errors.append(result)
                else:
                    processed[key] = None if is_cleared(result) else result.to_storage()
            elif not partial:
                if prop.is_title:
                    errors.append(
                        ValidationIssue(
                            field=key,
                            message=f"'{key}' is required",
                            code="required_missing",
                        )
                    )
                elif prop.type == PropertyType.CHECKBOX:
                    processed[key] = False

        return processed, errors


def validate_value(
    prop: PropertyDefinition,
    raw: Any,
    field_name: str | None = None,
    tz: tzinfo | None = None,
) -> TypedValue | ValidationIssue:
    """Validate one raw value against its property definition.

    Args:
        prop: The property definition.
        raw: The raw incoming value.
        field_name: Name used in error reports; defaults to the property name.
        tz: Timezone used to interpret local dates.

    Returns:
        The typed value, or a ValidationIssue describing the problem.
    """
    name = field_name or prop.name
    validator = EntryValidator.validators().get(prop.type)
    if validator is None:
        return ValidationIssue(
            field=name,
            message=f"Unknown property type: {prop.type}",
            code="unknown_type",
        )
    return validator(raw, name, tz=tz)

"""Schema validation service for table names, property definitions and views.

Schema-level violations block the whole write; every problem found is
collected so the caller can report them together.
"""

from typing import Any

from gridbase.domain.entities import (
    OPTION_TYPES,
    RESERVED_VIEW_TYPES,
    USER_VIEW_TYPES,
    PropertyDefinition,
    PropertyType,
    ViewDefinition,
)
from gridbase.domain.exceptions import ValidationIssue

TITLE_REQUIRED_MESSAGE = "Database must have a Title column"
PROPERTIES_REQUIRED_MESSAGE = "Database must have at least one column"


class SchemaValidator:
    """Validator for schema create and update requests."""

    MAX_NAME_LENGTH = 255
    MAX_PROPERTY_NAME_LENGTH = 255

    @classmethod
    def validate_name(cls, name: str | None) -> list[ValidationIssue]:
        """Validate a table name.

        Args:
            name: The table name to validate.

        Returns:
            List of validation errors (empty if valid).
        """
        if name is None or not name.strip():
            return [
                ValidationIssue(
                    field="name",
                    message="Database name is required",
                    code="name_required",
                )
            ]
        if len(name) > cls.MAX_NAME_LENGTH:
            return [
                ValidationIssue(
                    field="name",
                    message=f"Database name must be at most {cls.MAX_NAME_LENGTH} characters",
                    code="name_too_long",
                )
            ]
        return []

    @classmethod
    def parse_properties(
        cls, raw: dict[str, Any]
    ) -> tuple[dict[str, PropertyDefinition], list[ValidationIssue]]:
        """Parse raw property definitions keyed by property key.

        Names are stripped; a missing name defaults to the key. Select and
        multi-select definitions must carry an ``options`` list.

        Args:
            raw: Mapping from key to a dict with ``name``, ``type`` and
                optionally ``options`` and ``format``.

        Returns:
            Tuple of (parsed definitions in submitted order, errors).
        """
        properties: dict[str, PropertyDefinition] = {}
        errors: list[ValidationIssue] = []
        valid_types = [t.value for t in PropertyType]

        for key, definition in raw.items():
            path = f"properties.{key}"
            if not isinstance(definition, dict):
                errors.append(
                    ValidationIssue(
                        field=path,
                        message="Property definition must be an object",
                        code="property_invalid",
                    )
                )
                continue

            type_value = str(definition.get("type") or "").lower()
            if type_value not in valid_types:
                errors.append(
                    ValidationIssue(
                        field=f"{path}.type",
                        message=f"Invalid property type '{definition.get('type')}'. Valid types: {', '.join(valid_types)}",
                        code="property_type_invalid",
                    )
                )
                continue

            options = definition.get("options")
            if options is not None and (
                not isinstance(options, list) or not all(isinstance(o, str) for o in options)
            ):
                errors.append(
                    ValidationIssue(
                        field=f"{path}.options",
                        message="Options must be a list of strings",
                        code="property_options_invalid",
                    )
                )
                continue
            if options is None and PropertyType(type_value) in OPTION_TYPES:
                errors.append(
                    ValidationIssue(
                        field=f"{path}.options",
                        message=f"Options are required for {type_value} columns",
                        code="property_options_required",
                    )
                )
                continue

            name = definition.get("name")
            format = definition.get("format")
            if not isinstance(name, (str, type(None))) or not isinstance(format, (str, type(None))):
                errors.append(
                    ValidationIssue(
                        field=f"{path}.name",
                        message="Column name and format must be strings",
                        code="property_name_invalid",
                    )
                )
                continue

            properties[key] = PropertyDefinition(
                name=key if name is None else name.strip(),
                type=PropertyType(type_value),
                options=list(options or []),
                format=format,
            )

        return properties, errors

    @classmethod
    def validate_property(cls, key: str, prop: PropertyDefinition) -> list[ValidationIssue]:
        """Validate a single parsed property definition."""
        errors = []
        path = f"properties.{key}"

        if not key or not prop.name or not prop.name.strip():
            errors.append(
                ValidationIssue(
                    field=f"{path}.name",
                    message="Column name is required",
                    code="property_name_required",
                )
            )
        elif len(prop.name) > cls.MAX_PROPERTY_NAME_LENGTH:
            errors.append(
                ValidationIssue(
                    field=f"{path}.name",
                    message=f"Column name must be at most {cls.MAX_PROPERTY_NAME_LENGTH} characters",
                    code="property_name_too_long",
                )
            )

        if prop.type in OPTION_TYPES:
            if len(set(prop.options)) != len(prop.options):
                errors.append(
                    ValidationIssue(
                        field=f"{path}.options",
                        message="Options must be unique",
                        code="property_options_duplicate",
                    )
                )

        return errors

    @classmethod
    def validate_properties(cls, properties: dict[str, PropertyDefinition]) -> list[ValidationIssue]:
        """Validate the full property set of a schema.

        Checks: at least one property, at least one title-type property, and
        names unique case-insensitively (keys too, since keys follow names).
        """
        if not properties:
            return [
                ValidationIssue(
                    field="properties",
                    message=PROPERTIES_REQUIRED_MESSAGE,
                    code="properties_empty",
                )
            ]

        errors: list[ValidationIssue] = []
        seen_names: set[str] = set()
        seen_keys: set[str] = set()

        for key, prop in properties.items():
            errors.extend(cls.validate_property(key, prop))

            name = prop.name.strip().lower() if prop.name else ""
            if name and name in seen_names:
                errors.append(
                    ValidationIssue(
                        field=f"properties.{key}.name",
                        message=f"Duplicate column name '{prop.name}'",
                        code="property_name_duplicate",
                    )
                )
            seen_names.add(name)

            lowered_key = key.lower()
            if lowered_key in seen_keys:
                errors.append(
                    ValidationIssue(
                        field=f"properties.{key}",
                        message=f"Duplicate column key '{key}'",
                        code="property_key_duplicate",
                    )
                )
            seen_keys.add(lowered_key)

        if not any(prop.is_title for prop in properties.values()):
            errors.append(
                ValidationIssue(
                    field="properties",
                    message=TITLE_REQUIRED_MESSAGE,
                    code="title_required",
                )
            )

        return errors

    @classmethod
    def validate_views(
        cls, views: list[ViewDefinition], properties: dict[str, PropertyDefinition]
    ) -> list[ValidationIssue]:
        """Validate view definitions.

        User views must be ``table`` or ``gallery``; a gallery cover must name
        an existing property. Reserved views must be one of the known types.
        """
        errors: list[ValidationIssue] = []

        for i, view in enumerate(views):
            path = f"views[{i}]"
            if view.is_reserved:
                if view.type not in RESERVED_VIEW_TYPES:
                    errors.append(
                        ValidationIssue(
                            field=f"{path}.type",
                            message=f"Unknown reserved view type '{view.type}'",
                            code="view_type_invalid",
                        )
                    )
                continue

            if view.type not in USER_VIEW_TYPES:
                errors.append(
                    ValidationIssue(
                        field=f"{path}.type",
                        message=f"Invalid view type '{view.type}'. Valid types: {', '.join(sorted(USER_VIEW_TYPES))}",
                        code="view_type_invalid",
                    )
                )
            elif view.cover_property is not None and view.cover_property not in properties:
                errors.append(
                    ValidationIssue(
                        field=f"{path}.coverProperty",
                        message=f"Cover property '{view.cover_property}' does not exist",
                        code="view_cover_invalid",
                    )
                )

        return errors

    @classmethod
    def validate(
        cls,
        name: str | None,
        properties: dict[str, PropertyDefinition],
        views: list[ViewDefinition],
    ) -> list[ValidationIssue]:
        """Validate a complete schema definition."""
        errors = []
        errors.extend(cls.validate_name(name))
        errors.extend(cls.validate_properties(properties))
        errors.extend(cls.validate_views(views, properties))
        return errors

"""Schema service for business logic.

Handles table creation, property add/rename/delete, view updates, column
presentation metadata and deletion. Every mutation ends by rewriting the
``_columnOrder`` view so the key set stays fully ordered.
"""

import uuid
from dataclasses import replace
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from gridbase.core.config import Settings, get_settings
from gridbase.core.logging import get_logger
from gridbase.domain.entities import (
    COLUMN_ORDER_VIEW,
    OPTION_TYPES,
    Entry,
    PropertyDefinition,
    PropertyType,
    Schema,
    ViewDefinition,
)
from gridbase.domain.exceptions import (
    SchemaNotFoundError,
    SchemaValidationError,
    ValidationIssue,
)
from gridbase.domain.services import column_order
from gridbase.domain.services.schema_validator import (
    PROPERTIES_REQUIRED_MESSAGE,
    TITLE_REQUIRED_MESSAGE,
    SchemaValidator,
)
from gridbase.infrastructure.persistence.models import DatabaseSchemaModel
from gridbase.infrastructure.persistence.repositories import (
    EntryRepository,
    SchemaRepository,
)

logger = get_logger(__name__)


def _raise_if(errors: list[ValidationIssue]) -> None:
    if errors:
        raise SchemaValidationError(errors)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _view_shape_error(data: dict[str, Any], min_width: int, max_width: int) -> str | None:
    """Describe what is wrong with a raw view's payload, or None when it is well formed."""
    for field in ("name", "coverProperty"):
        if not isinstance(data.get(field), (str, type(None))):
            return f"'{field}' must be a string"
    for field in ("order", "columns"):
        if data.get(field) is not None and not _is_str_list(data[field]):
            return f"'{field}' must be a list of column keys"
    widths = data.get("widths")
    if widths is not None:
        if not isinstance(widths, dict):
            return "'widths' must map column keys to pixel widths"
        for key, width in widths.items():
            if isinstance(width, bool) or not isinstance(width, int):
                return f"Width of '{key}' must be an integer"
            if not min_width <= width <= max_width:
                return f"Width of '{key}' must be between {min_width} and {max_width}"
    return None


def _parse_views(
    raw: list[dict[str, Any]] | None, settings: Settings
) -> tuple[list[ViewDefinition], list[ValidationIssue]]:
    views: list[ViewDefinition] = []
    errors: list[ValidationIssue] = []
    for i, data in enumerate(raw or []):
        if not isinstance(data, dict) or not isinstance(data.get("type"), str) or not data["type"]:
            problem = "View definition must be an object with a type"
        else:
            problem = _view_shape_error(data, settings.min_column_width, settings.max_column_width)
        if problem is not None:
            errors.append(ValidationIssue(field=f"views[{i}]", message=problem, code="view_invalid"))
            continue
        views.append(ViewDefinition.from_dict(data))
    return views, errors


def resolve_property_key(current: dict[str, PropertyDefinition], key: str, name: str) -> str:
    """Storage key for a submitted property.

    A property keeps its key unless it was renamed to something other than a
    case variant of that key, in which case the new name becomes the key.
    Entry data under the old key is left behind.
    """
    existing = current.get(key)
    if existing is None or existing.name == name:
        return key
    if name.strip().lower() == key.lower():
        return key
    return name.strip()


def migrate_property_keys(
    current: dict[str, PropertyDefinition],
    submitted: dict[str, PropertyDefinition],
) -> tuple[dict[str, PropertyDefinition], dict[str, str], list[ValidationIssue]]:
    """Apply the key migration rule to a submitted property map.

    Returns:
        Tuple of (properties keyed by their resolved keys in submitted order,
        old-key to new-key renames, errors).
    """
    migrated: dict[str, PropertyDefinition] = {}
    renames: dict[str, str] = {}
    errors: list[ValidationIssue] = []

    for key, prop in submitted.items():
        new_key = resolve_property_key(current, key, prop.name or key)
        if new_key in migrated:
            errors.append(
                ValidationIssue(
                    field=f"properties.{key}.name",
                    message=f"Duplicate column name '{prop.name}'",
                    code="property_name_duplicate",
                )
            )
            continue
        migrated[new_key] = prop
        if new_key != key:
            renames[key] = new_key

    return migrated, renames, errors


class SchemaService:
    """Service for schema business logic."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        """Initialize the service.

        Args:
            session: SQLAlchemy async session.
            settings: Application settings; defaults to the cached settings.
        """
        self.session = session
        self.settings = settings or get_settings()
        self.repository = SchemaRepository(session)
        self.entry_repository = EntryRepository(session)

    async def _load(self, schema_id: str) -> DatabaseSchemaModel:
        model = await self.repository.get_by_id(schema_id)
        if model is None:
            raise SchemaNotFoundError(schema_id)
        return model

    async def _save(self, model: DatabaseSchemaModel, schema: Schema) -> Schema:
        model.apply_entity(schema)
        await self.repository.update(model)
        return model.to_entity()

    async def get_schema(self, schema_id: str) -> Schema:
        """Get a schema by ID.

        Raises:
            SchemaNotFoundError: If the schema does not exist.
        """
        return (await self._load(schema_id)).to_entity()

    async def get_schema_with_entries(self, schema_id: str) -> tuple[Schema, list[Entry]]:
        """Load a schema together with its entries in stored order."""
        schema = await self.get_schema(schema_id)
        entries = await self.entry_repository.list_by_schema(schema_id)
        return schema, [entry.to_entity() for entry in entries]

    async def list_schemas(self, workspace_id: str) -> list[tuple[Schema, int]]:
        """List a workspace's schemas with their entry counts.

        Returns:
            (schema, entry_count) pairs, most recently updated first.
        """
        models = await self.repository.list_by_workspace(workspace_id)
        counts = await self.repository.get_entry_counts([m.id for m in models])
        return [(m.to_entity(), counts.get(m.id, 0)) for m in models]

    async def create_schema(
        self,
        workspace_id: str,
        name: str,
        properties: dict[str, Any],
        views: list[dict[str, Any]] | None,
        user_id: str,
        description: str | None = None,
        document_id: str | None = None,
    ) -> Schema:
        """Create a new schema.

        The display order is taken from the submitted properties' key order;
        any submitted ``_columnOrder`` view is discarded.

        Args:
            workspace_id: Owning workspace.
            name: Table name.
            properties: Raw property definitions keyed by property key.
            views: Raw view definitions.
            user_id: ID of the user creating the schema.
            description: Optional description.
            document_id: Optional document the table is embedded in.

        Returns:
            The created schema.

        Raises:
            SchemaValidationError: If validation fails.
        """
        parsed, errors = SchemaValidator.parse_properties(properties or {})
        parsed_views, view_errors = _parse_views(views, self.settings)
        errors.extend(view_errors)
        if not errors:
            errors.extend(SchemaValidator.validate(name, parsed, parsed_views))
        if errors:
            logger.info(
                "Schema creation rejected",
                workspace_id=workspace_id,
                error_count=len(errors),
            )
        _raise_if(errors)

        schema = Schema(
            id=str(uuid.uuid4()),
            workspace_id=workspace_id,
            name=name.strip(),
            properties=parsed,
            views=[
                v for v in column_order.normalize_views(parsed_views) if v.type != COLUMN_ORDER_VIEW
            ],
            description=description,
            document_id=document_id,
            created_by=user_id,
        )
        schema = column_order.persist_order(schema, list(parsed))

        model = DatabaseSchemaModel(
            id=schema.id,
            workspace_id=workspace_id,
            document_id=document_id,
            created_by=user_id,
        )
        model.apply_entity(schema)
        await self.repository.create(model)

        logger.info(
            "Schema created",
            schema_id=schema.id,
            workspace_id=workspace_id,
            property_count=len(parsed),
            created_by=user_id,
        )
        return model.to_entity()

    async def update_schema(
        self,
        schema_id: str,
        properties: dict[str, Any],
        views: list[dict[str, Any]] | None,
        name: str | None = None,
        description: str | None = None,
    ) -> Schema:
        """Replace a schema's properties and views.

        Renamed properties follow the key migration rule (see
        ``resolve_property_key``); hidden flags, widths and gallery covers
        follow renamed keys. The ``_columnOrder`` view is recomputed from the
        submitted properties' key order. Reserved views not submitted are
        kept as they were.

        Raises:
            SchemaNotFoundError: If the schema does not exist.
            SchemaValidationError: If validation fails.
        """
        model = await self._load(schema_id)
        current = model.to_entity()

        parsed, errors = SchemaValidator.parse_properties(properties or {})
        parsed_views, view_errors = _parse_views(views, self.settings)
        errors.extend(view_errors)
        _raise_if(errors)

        schema = self._apply_properties(
            current,
            parsed,
            parsed_views if views is not None else current.user_views,
            name=name,
            description=description,
        )
        saved = await self._save(model, schema)
        logger.info(
            "Schema updated",
            schema_id=schema_id,
            property_count=len(saved.properties),
            view_count=len(saved.user_views),
        )
        return saved

    def _apply_properties(
        self,
        current: Schema,
        submitted: dict[str, PropertyDefinition],
        views: list[ViewDefinition],
        name: str | None = None,
        description: str | None = None,
    ) -> Schema:
        """Validate a replacement property map and build the resulting schema."""
        migrated, renames, errors = migrate_property_keys(current.properties, submitted)
        _raise_if(errors)

        new_name = current.name if name is None else name
        # Rename targets are validated against the migrated keys
        errors = SchemaValidator.validate(
            new_name,
            migrated,
            [replace(v, cover_property=renames.get(v.cover_property, v.cover_property)) for v in views],
        )
        if errors:
            logger.info(
                "Schema update rejected",
                schema_id=current.id,
                codes=[e.code for e in errors],
            )
        _raise_if(errors)

        # Keep reserved views that the caller did not resubmit
        submitted_types = {v.type for v in views if v.is_reserved}
        kept_reserved = [
            v
            for v in current.views
            if v.is_reserved and v.type != COLUMN_ORDER_VIEW and v.type not in submitted_types
        ]
        merged_views = [
            v
            for v in column_order.normalize_views(list(views) + kept_reserved)
            if v.type != COLUMN_ORDER_VIEW
        ]

        schema = replace(
            current,
            name=new_name.strip(),
            description=current.description if description is None else description,
            properties=migrated,
            views=merged_views,
        )
        # Dropped keys lose their metadata before renames can move onto them
        for key in set(current.properties) - set(submitted):
            schema = column_order.remove_column_metadata(schema, key)
        schema = column_order.rename_column_metadata(schema, renames)
        return column_order.persist_order(schema, list(migrated))

    async def delete_schema(self, schema_id: str) -> None:
        """Delete a schema and all of its entries.

        Raises:
            SchemaNotFoundError: If the schema does not exist.
        """
        model = await self._load(schema_id)
        await self.repository.delete(model)
        logger.info("Schema deleted", schema_id=schema_id)

    async def add_property(
        self,
        schema_id: str,
        after_key: str | None = None,
        property_type: PropertyType | str = PropertyType.TEXT,
        name: str | None = None,
        options: list[str] | None = None,
    ) -> tuple[Schema, str]:
        """Add a property, positioned right after ``after_key`` or last.

        When no name is given one is generated: ``New Column``, then
        ``New Column 1``, ``New Column 2`` and so on.

        Returns:
            Tuple of (updated schema, key of the new property).

        Raises:
            SchemaNotFoundError: If the schema does not exist.
            SchemaValidationError: If the name or type is invalid.
        """
        model = await self._load(schema_id)
        schema = model.to_entity()

        try:
            prop_type = PropertyType(property_type)
        except ValueError:
            raise SchemaValidationError(
                [
                    ValidationIssue(
                        field="type",
                        message=f"Invalid property type '{property_type}'",
                        code="property_type_invalid",
                    )
                ]
            ) from None
        if prop_type in OPTION_TYPES and options is None:
            raise SchemaValidationError(
                [
                    ValidationIssue(
                        field="options",
                        message=f"Options are required for {prop_type.value} columns",
                        code="property_options_required",
                    )
                ]
            )

        key = (name or "").strip() or self._unique_column_name(schema)
        prop = PropertyDefinition(name=key, type=prop_type, options=list(options or []))
        if key in schema.properties:
            raise SchemaValidationError(
                [
                    ValidationIssue(
                        field="name",
                        message=f"Duplicate column name '{key}'",
                        code="property_name_duplicate",
                    )
                ]
            )

        properties = {**schema.properties, key: prop}
        _raise_if(SchemaValidator.validate_properties(properties))

        order = column_order.insert_after(column_order.derive_display_order(schema), key, after_key)
        schema = column_order.persist_order(replace(schema, properties=properties), order)
        saved = await self._save(model, schema)
        logger.info(
            "Property added",
            schema_id=schema_id,
            property_key=key,
            property_type=prop_type.value,
            after_key=after_key,
        )
        return saved, key

    def _unique_column_name(self, schema: Schema) -> str:
        base = self.settings.new_column_name
        taken = {prop.name.lower() for prop in schema.properties.values()} | {
            key.lower() for key in schema.properties
        }
        if base.lower() not in taken:
            return base
        counter = 1
        while f"{base} {counter}".lower() in taken:
            counter += 1
        return f"{base} {counter}"

    async def delete_property(self, schema_id: str, key: str) -> Schema:
        """Remove a property and every reference to it in the views.

        Entry data under the key is left in place.

        Raises:
            SchemaNotFoundError: If the schema does not exist.
            SchemaValidationError: If the key is unknown, or it is the last
                property or the last title-type property.
        """
        model = await self._load(schema_id)
        schema = model.to_entity()
        column_order.require_key(schema, key)

        remaining = {k: p for k, p in schema.properties.items() if k != key}
        if not remaining:
            logger.info("Property deletion rejected", schema_id=schema_id, property_key=key)
            raise SchemaValidationError(
                [ValidationIssue(field=key, message=PROPERTIES_REQUIRED_MESSAGE, code="properties_empty")]
            )
        if not any(prop.is_title for prop in remaining.values()):
            logger.info("Property deletion rejected", schema_id=schema_id, property_key=key)
            raise SchemaValidationError(
                [ValidationIssue(field=key, message=TITLE_REQUIRED_MESSAGE, code="title_required")]
            )

        order = [k for k in column_order.derive_display_order(schema) if k != key]
        schema = column_order.remove_column_metadata(replace(schema, properties=remaining), key)
        schema = column_order.persist_order(schema, order)
        saved = await self._save(model, schema)
        logger.info("Property deleted", schema_id=schema_id, property_key=key)
        return saved

    async def rename_property(self, schema_id: str, key: str, new_name: str) -> Schema:
        """Rename a property, applying the key migration rule."""
        return await self.update_property(schema_id, key, name=new_name)

    async def update_property(
        self,
        schema_id: str,
        key: str,
        name: str | None = None,
        property_type: PropertyType | str | None = None,
        options: list[str] | None = None,
        format: str | None = None,
    ) -> Schema:
        """Change one property's name, type, options or format.

        Goes through the same validation, key migration and order rewrite as
        ``update_schema``. The property keeps its display position even when
        its key changes.

        Raises:
            SchemaNotFoundError: If the schema does not exist.
            SchemaValidationError: If the key is unknown or the result is invalid.
        """
        model = await self._load(schema_id)
        current = model.to_entity()
        column_order.require_key(current, key)

        if name is not None and not name.strip():
            raise SchemaValidationError(
                [
                    ValidationIssue(
                        field=f"properties.{key}.name",
                        message="Column name is required",
                        code="property_name_required",
                    )
                ]
            )

        existing = current.properties[key]
        raw = existing.to_dict()
        if name is not None:
            raw["name"] = name.strip()
        if property_type is not None:
            raw["type"] = property_type.value if isinstance(property_type, PropertyType) else property_type
        if options is not None:
            raw["options"] = options
        if format is not None:
            raw["format"] = format or None

        submitted_raw = {
            k: (raw if k == key else current.properties[k].to_dict())
            for k in column_order.derive_display_order(current)
        }
        parsed, errors = SchemaValidator.parse_properties(submitted_raw)
        _raise_if(errors)

        schema = self._apply_properties(current, parsed, current.user_views)
        saved = await self._save(model, schema)
        logger.info(
            "Property updated",
            schema_id=schema_id,
            property_key=key,
            new_key=next(iter(set(saved.properties) - set(current.properties)), key),
        )
        return saved

    async def reorder_columns(self, schema_id: str, ordered_keys: list[str]) -> Schema:
        """Persist a new display order.

        Keys left out of ``ordered_keys`` keep their relative order after the
        listed ones.

        Raises:
            SchemaNotFoundError: If the schema does not exist.
            SchemaValidationError: If a key is unknown or listed twice.
        """
        model = await self._load(schema_id)
        schema = model.to_entity()

        errors = [
            ValidationIssue(
                field="order",
                message=f"Column '{key}' does not exist",
                code="property_not_found",
            )
            for key in ordered_keys
            if key not in schema.properties
        ]
        if len(set(ordered_keys)) != len(ordered_keys):
            errors.append(
                ValidationIssue(
                    field="order",
                    message="Column order must not repeat keys",
                    code="order_duplicate",
                )
            )
        _raise_if(errors)

        rest = [k for k in column_order.derive_display_order(schema) if k not in ordered_keys]
        saved = await self._save(model, column_order.persist_order(schema, list(ordered_keys) + rest))
        logger.info("Columns reordered", schema_id=schema_id, column_count=len(ordered_keys))
        return saved

    async def move_column(self, schema_id: str, key: str, before_key: str | None = None) -> Schema:
        """Move one column right before another, or to the end."""
        model = await self._load(schema_id)
        schema = model.to_entity()
        column_order.require_key(schema, key)
        if before_key is not None:
            column_order.require_key(schema, before_key)

        order = column_order.move_column(column_order.derive_display_order(schema), key, before_key)
        saved = await self._save(model, column_order.persist_order(schema, order))
        logger.info("Column moved", schema_id=schema_id, property_key=key, before_key=before_key)
        return saved

    async def set_column_hidden(self, schema_id: str, key: str, hidden: bool) -> Schema:
        """Hide or show one column."""
        model = await self._load(schema_id)
        schema = column_order.set_column_hidden(model.to_entity(), key, hidden)
        schema = column_order.persist_order(schema, column_order.derive_display_order(schema))
        saved = await self._save(model, schema)
        logger.info("Column visibility changed", schema_id=schema_id, property_key=key, hidden=hidden)
        return saved

    async def set_column_width(self, schema_id: str, key: str, width: int) -> Schema:
        """Record the pixel width of one column."""
        model = await self._load(schema_id)
        schema = column_order.set_column_width(
            model.to_entity(),
            key,
            width,
            min_width=self.settings.min_column_width,
            max_width=self.settings.max_column_width,
        )
        schema = column_order.persist_order(schema, column_order.derive_display_order(schema))
        saved = await self._save(model, schema)
        logger.info("Column width changed", schema_id=schema_id, property_key=key, width=width)
        return saved

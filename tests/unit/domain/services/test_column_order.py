"""Unit tests for the column ordering and presentation metadata channel."""

import pytest

from gridbase.domain.entities import (
    COLUMN_ORDER_VIEW,
    COLUMN_WIDTHS_VIEW,
    HIDDEN_COLUMNS_VIEW,
    PropertyDefinition,
    PropertyType,
    Schema,
    ViewDefinition,
)
from gridbase.domain.exceptions import SchemaValidationError
from gridbase.domain.services import column_order


def _schema(keys, views=None) -> Schema:
    props = {}
    for i, key in enumerate(keys):
        props[key] = PropertyDefinition(
            name=key, type=PropertyType.TITLE if i == 0 else PropertyType.TEXT
        )
    return Schema(id="s1", workspace_id="w1", name="T", properties=props, views=views or [])


class TestDisplayOrder:

    def test_without_order_view_uses_mapping_order(self):
        assert column_order.derive_display_order(_schema(["Name", "Email"])) == ["Name", "Email"]

    def test_persist_then_derive_round_trip(self):
        schema = column_order.persist_order(_schema(["Name", "Email", "Status"]), ["Status", "Name", "Email"])
        assert column_order.derive_display_order(schema) == ["Status", "Name", "Email"]

    def test_new_keys_appended_without_reordering(self):
        schema = column_order.persist_order(_schema(["Name", "Email"]), ["Email", "Name"])
        schema.properties["Phone"] = PropertyDefinition(name="Phone", type=PropertyType.TEXT)
        assert column_order.derive_display_order(schema) == ["Email", "Name", "Phone"]

    def test_stale_keys_dropped(self):
        view = ViewDefinition(type=COLUMN_ORDER_VIEW, order=["Gone", "Email", "Name"])
        schema = _schema(["Name", "Email"], [view])
        assert column_order.derive_display_order(schema) == ["Email", "Name"]

    def test_persist_keeps_single_order_view_and_other_views(self):
        views = [
            ViewDefinition(type="table", name="All"),
            ViewDefinition(type=COLUMN_ORDER_VIEW, order=["Name"]),
            ViewDefinition(type=COLUMN_ORDER_VIEW, order=["Email"]),
        ]
        schema = column_order.persist_order(_schema(["Name", "Email"], views), ["Email", "Name"])
        order_views = [v for v in schema.views if v.type == COLUMN_ORDER_VIEW]
        assert len(order_views) == 1
        assert order_views[0].order == ["Email", "Name"]
        assert schema.views[0].name == "All"

    def test_input_schema_untouched(self):
        original = _schema(["Name", "Email"])
        column_order.persist_order(original, ["Email", "Name"])
        assert original.views == []


class TestHiddenColumns:

    def test_hide_notes(self):
        schema = _schema(["Name", "Notes", "Email"])
        schema = column_order.set_column_hidden(schema, "Notes", True)
        assert column_order.derive_visible_columns(schema) == ["Name", "Email"]
        assert column_order.derive_display_order(schema) == ["Name", "Notes", "Email"]
        assert column_order.derive_hidden_columns(schema) == ["Notes"]

    def test_show_again(self):
        schema = column_order.set_column_hidden(_schema(["Name", "Notes"]), "Notes", True)
        schema = column_order.set_column_hidden(schema, "Notes", False)
        assert column_order.derive_visible_columns(schema) == ["Name", "Notes"]
        assert [v.type for v in schema.views] == [HIDDEN_COLUMNS_VIEW]

    def test_unknown_key(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            column_order.set_column_hidden(_schema(["Name"]), "Ghost", True)
        assert exc_info.value.errors[0].code == "property_not_found"


class TestColumnWidths:

    def test_set_width(self):
        schema = column_order.set_column_width(_schema(["Name", "Email"]), "Email", 240)
        assert column_order.derive_column_widths(schema) == {"Email": 240}
        schema = column_order.set_column_width(schema, "Name", 120)
        assert column_order.derive_column_widths(schema) == {"Email": 240, "Name": 120}
        assert len([v for v in schema.views if v.type == COLUMN_WIDTHS_VIEW]) == 1

    def test_width_bounds(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            column_order.set_column_width(_schema(["Name"]), "Name", 10, min_width=50, max_width=500)
        assert exc_info.value.errors[0].code == "width_out_of_range"
        with pytest.raises(SchemaValidationError):
            column_order.set_column_width(_schema(["Name"]), "Name", 501, min_width=50, max_width=500)


class TestMoveAndInsert:

    def test_move_before(self):
        assert column_order.move_column(["Name", "Email", "Status"], "Status", "Email") == [
            "Name",
            "Status",
            "Email",
        ]

    def test_move_to_end(self):
        assert column_order.move_column(["Name", "Email", "Status"], "Name") == [
            "Email",
            "Status",
            "Name",
        ]

    def test_move_unknown(self):
        with pytest.raises(ValueError):
            column_order.move_column(["Name"], "Ghost")

    def test_insert_after(self):
        assert column_order.insert_after(["A", "B", "C"], "X", "A") == ["A", "X", "B", "C"]
        assert column_order.insert_after(["A", "B"], "X") == ["A", "B", "X"]
        assert column_order.insert_after(["A", "B"], "X", "missing") == ["A", "B", "X"]


class TestMetadataFollowsKeys:

    def test_rename_carries_hidden_width_and_cover(self):
        schema = _schema(["Name", "Photo"], [ViewDefinition(type="gallery", name="G", cover_property="Photo")])
        schema = column_order.set_column_hidden(schema, "Photo", True)
        schema = column_order.set_column_width(schema, "Photo", 300)
        schema.properties["Image"] = schema.properties.pop("Photo")

        renamed = column_order.rename_column_metadata(schema, {"Photo": "Image"})
        assert column_order.derive_hidden_columns(renamed) == ["Image"]
        assert column_order.derive_column_widths(renamed) == {"Image": 300}
        assert renamed.user_views[0].cover_property == "Image"

    def test_remove_clears_references(self):
        schema = _schema(["Name", "Photo"], [ViewDefinition(type="gallery", name="G", cover_property="Photo")])
        schema = column_order.set_column_hidden(schema, "Photo", True)
        removed = column_order.remove_column_metadata(schema, "Photo")
        assert removed.reserved_view(HIDDEN_COLUMNS_VIEW).columns == []
        assert removed.user_views[0].cover_property is None

"""Unit tests for SchemaValidator."""

from gridbase.domain.entities import PropertyDefinition, PropertyType, ViewDefinition
from gridbase.domain.services.schema_validator import (
    TITLE_REQUIRED_MESSAGE,
    SchemaValidator,
)


def _props(**types: str) -> dict[str, PropertyDefinition]:
    return {
        name: PropertyDefinition(name=name, type=PropertyType(t)) for name, t in types.items()
    }


class TestValidateName:

    def test_valid(self):
        assert SchemaValidator.validate_name("Contacts") == []

    def test_blank(self):
        assert SchemaValidator.validate_name("  ")[0].code == "name_required"
        assert SchemaValidator.validate_name(None)[0].code == "name_required"

    def test_too_long(self):
        assert SchemaValidator.validate_name("x" * 256)[0].code == "name_too_long"


class TestParseProperties:

    def test_parses_in_submitted_order(self):
        parsed, errors = SchemaValidator.parse_properties(
            {
                "Name": {"name": "Name", "type": "title"},
                "Status": {"name": "Status", "type": "SELECT", "options": ["Open", "Closed"]},
            }
        )
        assert errors == []
        assert list(parsed) == ["Name", "Status"]
        assert parsed["Status"].type == PropertyType.SELECT
        assert parsed["Status"].options == ["Open", "Closed"]

    def test_unknown_type(self):
        _, errors = SchemaValidator.parse_properties({"X": {"name": "X", "type": "money"}})
        assert errors[0].code == "property_type_invalid"
        assert errors[0].field == "properties.X.type"

    def test_non_object_definition(self):
        _, errors = SchemaValidator.parse_properties({"X": "title"})
        assert errors[0].code == "property_invalid"

    def test_bad_options(self):
        _, errors = SchemaValidator.parse_properties(
            {"X": {"name": "X", "type": "select", "options": "a,b"}}
        )
        assert errors[0].code == "property_options_invalid"

    def test_option_types_require_options(self):
        parsed, errors = SchemaValidator.parse_properties(
            {"Status": {"type": "select"}, "Tags": {"type": "multi-select", "options": []}}
        )
        assert [(e.field, e.code) for e in errors] == [
            ("properties.Status.options", "property_options_required")
        ]
        assert list(parsed) == ["Tags"]

    def test_non_string_name_or_format(self):
        _, errors = SchemaValidator.parse_properties(
            {
                "Name": {"name": 123, "type": "title"},
                "Price": {"name": "Price", "type": "number", "format": ["currency"]},
            }
        )
        assert [e.code for e in errors] == ["property_name_invalid", "property_name_invalid"]

    def test_names_stripped_and_defaulted(self):
        parsed, errors = SchemaValidator.parse_properties(
            {"Name": {"name": "  Name ", "type": "title"}, "Notes": {"type": "text"}}
        )
        assert errors == []
        assert parsed["Name"].name == "Name"
        assert parsed["Notes"].name == "Notes"

    def test_blank_name_still_reported(self):
        parsed, _ = SchemaValidator.parse_properties({"Name": {"name": "  ", "type": "title"}})
        errors = SchemaValidator.validate_properties(parsed)
        assert errors[0].code == "property_name_required"


class TestValidateProperties:

    def test_title_required(self):
        errors = SchemaValidator.validate_properties(_props(Notes="text", Price="number"))
        assert [e.code for e in errors] == ["title_required"]
        assert errors[0].message == TITLE_REQUIRED_MESSAGE

    def test_empty(self):
        assert SchemaValidator.validate_properties({})[0].code == "properties_empty"

    def test_duplicate_names_case_insensitive(self):
        props = {
            "Name": PropertyDefinition(name="Name", type=PropertyType.TITLE),
            "name2": PropertyDefinition(name="NAME", type=PropertyType.TEXT),
        }
        errors = SchemaValidator.validate_properties(props)
        assert [e.code for e in errors] == ["property_name_duplicate"]

    def test_duplicate_options(self):
        props = _props(Name="title")
        props["Tags"] = PropertyDefinition(
            name="Tags", type=PropertyType.MULTI_SELECT, options=["a", "a"]
        )
        errors = SchemaValidator.validate_properties(props)
        assert [e.code for e in errors] == ["property_options_duplicate"]

    def test_valid(self):
        assert SchemaValidator.validate_properties(_props(Name="title", Email="email")) == []


class TestValidateViews:

    def test_user_view_types(self):
        props = _props(Name="title")
        views = [ViewDefinition(type="table", name="All"), ViewDefinition(type="kanban", name="K")]
        errors = SchemaValidator.validate_views(views, props)
        assert [e.field for e in errors] == ["views[1].type"]

    def test_gallery_cover_must_exist(self):
        props = _props(Name="title")
        views = [ViewDefinition(type="gallery", name="G", cover_property="Photo")]
        assert SchemaValidator.validate_views(views, props)[0].code == "view_cover_invalid"

    def test_unknown_reserved_view(self):
        views = [ViewDefinition(type="_sortState")]
        assert SchemaValidator.validate_views(views, {})[0].code == "view_type_invalid"

    def test_validate_collects_everything(self):
        errors = SchemaValidator.validate(
            "", _props(Notes="text"), [ViewDefinition(type="calendar")]
        )
        assert {e.code for e in errors} == {"name_required", "title_required", "view_type_invalid"}

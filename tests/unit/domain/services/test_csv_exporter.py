"""Unit tests for CSV export."""

from datetime import date
from zoneinfo import ZoneInfo

import pytest

from gridbase.domain.entities import Entry, PropertyDefinition, PropertyType, Schema
from gridbase.domain.services.csv_exporter import export_csv, export_filename, render_cell


@pytest.fixture
def schema():
    return Schema(
        id="s1",
        workspace_id="w1",
        name="Leads",
        properties={
            "Name": PropertyDefinition(name="Name", type=PropertyType.TITLE),
            "Score": PropertyDefinition(name="Score", type=PropertyType.NUMBER),
            "Due": PropertyDefinition(name="Due", type=PropertyType.DATE),
            "Done": PropertyDefinition(name="Done", type=PropertyType.CHECKBOX),
            "Tags": PropertyDefinition(
                name="Tags", type=PropertyType.MULTI_SELECT, options=["a", "b"]
            ),
        },
    )


class TestExportCsv:

    def test_header_and_quoting(self, schema):
        entries = [Entry(id="1", schema_id="s1", data={"Name": 'Say "hi"', "Score": 3})]
        output = export_csv(entries, schema, ["Name", "Score"])
        assert output == '"Name","Score"\n"Say ""hi""","3"\n'

    def test_type_rendering(self, schema):
        entries = [
            Entry(
                id="1",
                schema_id="s1",
                data={
                    "Name": "Acme",
                    "Due": "2024-03-05T12:00:00.000Z",
                    "Done": True,
                    "Tags": ["a", "b"],
                },
            ),
            Entry(id="2", schema_id="s1", data={"Name": "Beta"}),
        ]
        output = export_csv(entries, schema, ["Name", "Due", "Done", "Tags"])
        lines = output.splitlines()
        assert lines[1] == '"Acme","03/05/2024","Yes","a; b"'
        assert lines[2] == '"Beta","","No",""'

    def test_uses_display_names_and_skips_unknown_keys(self, schema):
        schema.properties["Score"] = PropertyDefinition(name="Rating", type=PropertyType.NUMBER)
        output = export_csv([], schema, ["Score", "Ghost", "Name"])
        assert output == '"Rating","Name"\n'

    def test_respects_given_order(self, schema):
        entries = [
            Entry(id="2", schema_id="s1", data={"Name": "B"}),
            Entry(id="1", schema_id="s1", data={"Name": "A"}),
        ]
        assert export_csv(entries, schema, ["Name"]).splitlines()[1:] == ['"B"', '"A"']

    def test_dates_rendered_in_timezone(self, schema):
        entries = [Entry(id="1", schema_id="s1", data={"Due": "2024-03-05T02:00:00.000Z"})]
        output = export_csv(entries, schema, ["Due"], tz=ZoneInfo("America/New_York"))
        assert output.splitlines()[1] == '"03/04/2024"'

    def test_custom_date_format(self, schema):
        entries = [Entry(id="1", schema_id="s1", data={"Due": "2024-03-05T12:00:00.000Z"})]
        output = export_csv(entries, schema, ["Due"], date_format="%Y-%m-%d")
        assert output.splitlines()[1] == '"2024-03-05"'


class TestRenderCell:

    def test_integral_float_number(self):
        prop = PropertyDefinition(name="N", type=PropertyType.NUMBER)
        assert render_cell(10.0, prop) == "10"
        assert render_cell(2.5, prop) == "2.5"

    def test_checkbox_false_for_missing(self):
        prop = PropertyDefinition(name="C", type=PropertyType.CHECKBOX)
        assert render_cell(None, prop) == "No"


class TestExportFilename:

    def test_name_and_date(self):
        assert export_filename("Leads", date(2024, 3, 5)) == "Leads_2024-03-05.csv"

    def test_unsafe_characters_replaced(self):
        assert export_filename("Q1/Q2: plan", date(2024, 1, 1)) == "Q1_Q2_ plan_2024-01-01.csv"

    def test_blank_name(self):
        assert export_filename("  ", date(2024, 1, 1)) == "database_2024-01-01.csv"

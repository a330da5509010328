"""Unit tests for the filter/sort engine."""

import pytest

from gridbase.domain.entities import Entry, PropertyDefinition, PropertyType, Schema
from gridbase.domain.services.query_engine import (
    FilterCondition,
    FilterOperator,
    apply_filters,
    apply_sort,
)


@pytest.fixture
def schema():
    return Schema(
        id="s1",
        workspace_id="w1",
        name="Companies",
        properties={
            "Name": PropertyDefinition(name="Name", type=PropertyType.TITLE),
            "Price": PropertyDefinition(name="Price", type=PropertyType.NUMBER),
            "Founded": PropertyDefinition(name="Founded", type=PropertyType.DATE),
            "Active": PropertyDefinition(name="Active", type=PropertyType.CHECKBOX),
            "Tags": PropertyDefinition(
                name="Tags", type=PropertyType.MULTI_SELECT, options=["b2b", "saas"]
            ),
            "Notes": PropertyDefinition(name="Notes", type=PropertyType.TEXT),
        },
    )


def _entry(entry_id: str, **data) -> Entry:
    return Entry(id=entry_id, schema_id="s1", data=data)


@pytest.fixture
def entries():
    return [
        _entry(
            "1",
            Name="Acme Corporation",
            Price=10,
            Founded="2020-01-15T00:00:00.000Z",
            Active=True,
            Tags=["b2b"],
        ),
        _entry("2", Name="beta labs", Price=2.5, Founded="2018-06-01T00:00:00.000Z", Active=False),
        _entry("3", Name="Cobalt", Notes="", Tags=["saas", "b2b"]),
    ]


def _ids(items):
    return [e.id for e in items]


def _where(prop, op, value=None):
    return FilterCondition(property=prop, operator=FilterOperator(op), value=value)


class TestApplyFilters:

    def test_contains_is_case_insensitive(self, schema, entries):
        assert _ids(apply_filters(entries, schema, [_where("Name", "contains", "cme")])) == ["1"]
        assert _ids(apply_filters(entries, schema, [_where("Name", "contains", "BETA")])) == ["2"]

    def test_not_contains(self, schema, entries):
        assert _ids(apply_filters(entries, schema, [_where("Name", "not_contains", "LABS")])) == ["1", "3"]

    def test_equals_text_is_exact(self, schema, entries):
        assert _ids(apply_filters(entries, schema, [_where("Name", "equals", "Cobalt")])) == ["3"]
        assert apply_filters(entries, schema, [_where("Name", "equals", "cobalt")]) == []

    def test_equals_number_after_coercion(self, schema, entries):
        assert _ids(apply_filters(entries, schema, [_where("Price", "equals", "10")])) == ["1"]
        assert _ids(apply_filters(entries, schema, [_where("Price", "equals", 10.0)])) == ["1"]
        assert _ids(apply_filters(entries, schema, [_where("Price", "not_equals", 10)])) == ["2", "3"]

    def test_equals_date_only(self, schema, entries):
        assert _ids(apply_filters(entries, schema, [_where("Founded", "equals", "2020-01-15")])) == ["1"]

    def test_greater_and_less_than(self, schema, entries):
        assert _ids(apply_filters(entries, schema, [_where("Price", "greater_than", 5)])) == ["1"]
        assert _ids(apply_filters(entries, schema, [_where("Price", "less_than", "5")])) == ["2"]
        assert _ids(apply_filters(entries, schema, [_where("Founded", "less_than", "2019-01-01")])) == ["2"]

    def test_ordering_operators_unsupported_on_text(self, schema, entries):
        assert apply_filters(entries, schema, [_where("Name", "greater_than", "A")]) == []

    def test_contains_unsupported_on_number(self, schema, entries):
        assert apply_filters(entries, schema, [_where("Price", "contains", "1")]) == []

    def test_is_empty(self, schema, entries):
        assert _ids(apply_filters(entries, schema, [_where("Notes", "is_empty")])) == ["1", "2", "3"]
        assert _ids(apply_filters(entries, schema, [_where("Price", "is_empty")])) == ["3"]
        assert _ids(apply_filters(entries, schema, [_where("Tags", "is_not_empty")])) == ["1", "3"]

    def test_checkbox_equals(self, schema, entries):
        assert _ids(apply_filters(entries, schema, [_where("Active", "equals", "true")])) == ["1"]

    def test_multi_select_membership(self, schema, entries):
        assert _ids(apply_filters(entries, schema, [_where("Tags", "equals", "saas")])) == ["3"]
        assert _ids(apply_filters(entries, schema, [_where("Tags", "contains", "B2")])) == ["1", "3"]

    def test_filters_combine_with_and(self, schema, entries):
        filters = [_where("Tags", "contains", "b2b"), _where("Price", "is_not_empty")]
        assert _ids(apply_filters(entries, schema, filters)) == ["1"]

    def test_unknown_property_matches_everything(self, schema, entries):
        assert len(apply_filters(entries, schema, [_where("Ghost", "equals", "x")])) == 3

    def test_inputs_not_mutated(self, schema, entries):
        before = list(entries)
        apply_filters(entries, schema, [_where("Name", "contains", "zzz")])
        assert entries == before

    def test_condition_from_dict(self):
        cond = FilterCondition.from_dict({"property": "Name", "operator": "contains", "value": "a"})
        assert cond.operator == FilterOperator.CONTAINS
        with pytest.raises(ValueError):
            FilterCondition.from_dict({"property": "Name", "operator": "matches"})


class TestApplySort:

    def test_nulls_last_both_directions(self, schema, entries):
        assert _ids(apply_sort(entries, schema, "Price", "asc")) == ["2", "1", "3"]
        assert _ids(apply_sort(entries, schema, "Price", "desc")) == ["1", "2", "3"]

    def test_missing_price_sorts_after_defined(self, schema):
        items = [_entry("B", Name="B"), _entry("A", Name="A", Price=10)]
        assert _ids(apply_sort(items, schema, "Price", "asc")) == ["A", "B"]

    def test_text_case_insensitive(self, schema, entries):
        assert _ids(apply_sort(entries, schema, "Name", "asc")) == ["1", "2", "3"]
        assert _ids(apply_sort(entries, schema, "Name", "desc")) == ["3", "2", "1"]

    def test_dates_by_instant(self, schema, entries):
        assert _ids(apply_sort(entries, schema, "Founded", "asc")) == ["2", "1", "3"]

    def test_case_variants_order_deterministically(self, schema):
        items = [_entry("x", Name="Same"), _entry("y", Name="same"), _entry("z", Name="SAME")]
        assert _ids(apply_sort(items, schema, "Name", "asc")) == ["z", "x", "y"]

    def test_unknown_column_keeps_order(self, schema, entries):
        assert _ids(apply_sort(entries, schema, "Ghost")) == ["1", "2", "3"]

    def test_bad_direction(self, schema, entries):
        with pytest.raises(ValueError):
            apply_sort(entries, schema, "Name", "sideways")

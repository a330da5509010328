"""Unit tests for the Entry entity and typed values."""

import pytest

from gridbase.domain.entities import CheckboxValue, Entry, MultiSelectValue, TextValue, is_cleared


class TestEntry:

    def test_defaults(self):
        entry = Entry(id="e1", schema_id="s1")
        assert entry.data == {}
        assert entry.order == 0

    def test_requires_ids(self):
        with pytest.raises(ValueError, match="Entry ID is required"):
            Entry(id="", schema_id="s1")
        with pytest.raises(ValueError, match="schema ID is required"):
            Entry(id="e1", schema_id="")

    def test_data_must_be_dict(self):
        with pytest.raises(ValueError):
            Entry(id="e1", schema_id="s1", data=["x"])


class TestTypedValues:

    def test_storage_forms(self):
        assert TextValue("hi").to_storage() == "hi"
        assert CheckboxValue().to_storage() is False
        assert MultiSelectValue(("a", "b")).to_storage() == ["a", "b"]

    def test_cleared(self):
        assert is_cleared(TextValue(None))
        assert not is_cleared(CheckboxValue(False))

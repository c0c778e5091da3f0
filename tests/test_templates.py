"""Tests for quick-create templates and their suggestions."""

import pytest

from court_facilities.errors import NotFoundError
from court_facilities.spaces.templates import (
    QuickSpaceCreator,
    get_template,
    smart_defaults,
    suggest_name,
    suggest_room_number,
)


class TestSuggestions:
    """Names and room numbers avoid what the floor already has."""

    def test_name_is_default_when_free(self):
        assert suggest_name(get_template("office"), ["Courtroom 1000"]) == "Office"

    def test_name_gets_next_free_suffix(self):
        assert suggest_name(get_template("office"), ["Office", "office 2", "Office 4"]) == "Office 3"

    def test_room_number_fills_first_gap(self):
        assert suggest_room_number(3, ["301", "302", "304", "3010"]) == "303"

    def test_room_number_defaults_to_first_floor(self):
        assert suggest_room_number(None, []) == "101"

    def test_room_number_ignores_other_floors(self):
        assert suggest_room_number(2, ["101", "102", None]) == "201"

    def test_smart_defaults(self):
        spaces = [{"name": "Conference Room", "room_number": "101"}]
        defaults = smart_defaults(get_template("conference"), {"floor_number": 1}, spaces)
        assert defaults == {"name": "Conference Room 2", "room_number": "102"}

    def test_unknown_template(self):
        with pytest.raises(NotFoundError):
            get_template("ballroom")

    def test_storage_templates(self):
        assert get_template("storage").is_storage
        assert get_template("filing").is_storage
        assert not get_template("records").is_storage


class TestQuickSpaceCreator:
    """Quick create fills gaps from the floor and writes through the space service."""

    def test_defaults_for_floor(self, spaces):
        assert QuickSpaceCreator(spaces).defaults("courtroom", "f100-1") == {
            "name": "Courtroom",
            "room_number": "101",
        }

    def test_quick_create_storage_room(self, spaces, gateway):
        row = QuickSpaceCreator(spaces).quick_create("storage", "b100", "f100-1")
        assert row["name"] == "Storage Room"
        assert row["room_number"] == "101"
        assert row["room_type"] == "utility_room"
        assert row["is_storage"] is True
        assert row["storage_type"] == "general"
        assert row["storage_capacity"] == 100
        assert row["current_function"] == "storage"

    def test_explicit_name_and_number_skip_lookup(self, spaces, gateway):
        row = QuickSpaceCreator(spaces).quick_create("office", "b100", "f100-2", name="Clerk Office", room_number="210")
        assert (row["name"], row["room_number"], row["is_storage"]) == ("Clerk Office", "210", False)
        assert row["storage_type"] is None
        assert ("select", "floor_spaces") not in gateway.calls

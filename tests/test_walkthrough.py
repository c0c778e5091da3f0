"""Tests for the walkthrough hierarchy, navigator and fixture actions."""

import pytest

from court_facilities.db.models import LightingFixture
from court_facilities.errors import BackendError, NavigationError, ValidationError
from court_facilities.lighting.walkthrough import (
    SpaceKey,
    WalkthroughNavigator,
    apply_fixture_action,
    available_actions,
    build_hierarchy,
    space_key,
)
from tests.conftest import fixture_row

B100 = "100 Centre Street Supreme Court"


def fixtures() -> list[LightingFixture]:
    rows = [
        fixture_row("L1", sequence_number=3),
        fixture_row("L2", sequence_number=1, status="non_functional"),
        fixture_row("L3"),
        fixture_row("L4", space_id="h-1", space_name="Main Hallway", space_type="hallway"),
        fixture_row("L5", floor_name="2nd Floor", space_id="r-2000", space_name="Jury Room"),
        fixture_row("L6", building_name=None, floor_name=None, space_id=None, space_name=None, room_number=None),
    ]
    return [LightingFixture.from_row(row) for row in rows]


class TestHierarchy:
    """Grouping and fallbacks."""

    def test_groups_by_building_floor_space(self):
        tree = build_hierarchy(fixtures())
        assert list(tree) == [B100, "Unknown Building"]
        assert list(tree[B100]) == ["1st Floor", "2nd Floor"]
        spaces = tree[B100]["1st Floor"]
        assert [key.name for key in spaces] == ["Courtroom 1000", "Main Hallway"]

    def test_space_key_fallbacks(self):
        bare = LightingFixture(id="x", name="x", room_number="501")
        assert space_key(bare) == SpaceKey(id="unknown-501", name="Room 501", type=None)
        orphan = LightingFixture(id="y", name="y")
        assert space_key(orphan).name == "Unknown Space"
        assert space_key(orphan).id == "unknown-no-room"

    def test_token_round_trip(self):
        key = SpaceKey(id="r-1", name="Courtroom", type="room")
        assert SpaceKey.from_token(key.token) == key

    def test_bad_token(self):
        with pytest.raises(NavigationError):
            SpaceKey.from_token("{not json")


class TestNavigator:
    """Forward moves go one level down; back goes exactly one level up."""

    def walk_to_fixtures(self) -> WalkthroughNavigator:
        nav = WalkthroughNavigator(fixtures())
        nav.select_building(B100)
        nav.select_floor("1st Floor")
        nav.select_space(nav.spaces()[0]["key"])
        return nav

    def test_full_walk(self):
        nav = self.walk_to_fixtures()
        assert nav.state == "fixtures"
        assert [f.id for f in nav.fixtures()] == ["L2", "L1", "L3"]

    def test_back_from_fixtures_keeps_building_and_floor(self):
        nav = self.walk_to_fixtures()
        assert nav.back() == "spaces"
        assert nav.building == B100
        assert nav.floor == "1st Floor"
        assert nav.space is None

    def test_back_to_top(self):
        nav = self.walk_to_fixtures()
        nav.back()
        nav.back()
        assert nav.state == "floors"
        assert nav.building == B100
        assert nav.floor is None
        nav.back()
        assert nav.state == "buildings"
        with pytest.raises(NavigationError):
            nav.back()

    def test_wrong_state_transition(self):
        nav = WalkthroughNavigator(fixtures())
        with pytest.raises(NavigationError):
            nav.select_floor("1st Floor")

    def test_unknown_names(self):
        nav = WalkthroughNavigator(fixtures())
        with pytest.raises(NavigationError):
            nav.select_building("Nowhere")
        nav.select_building(B100)
        with pytest.raises(NavigationError):
            nav.select_floor("Basement")

    def test_issue_counts(self):
        nav = WalkthroughNavigator(fixtures())
        buildings = {b["name"]: b for b in nav.buildings()}
        assert buildings[B100]["issues"] == 1
        assert buildings[B100]["fixture_count"] == 5
        nav.select_building(B100)
        nav.select_floor("1st Floor")
        counts = {s["name"]: s["issues"] for s in nav.spaces()}
        assert counts == {"Courtroom 1000": 1, "Main Hallway": 0}

    def test_load_rebuilds_only_on_change(self):
        data = fixtures()
        nav = WalkthroughNavigator(data)
        assert nav.load(fixtures()) is False
        assert nav.load(data[:2]) is True
        assert list(nav.hierarchy) == [B100]

    def test_view_lists_actions(self):
        view = self.walk_to_fixtures().view()
        assert view["state"] == "fixtures"
        first = view["items"][0]
        assert first["id"] == "L2"
        assert first["issue"] == "bulb"
        assert first["available_actions"] == ["ballast", "fix"]


class RecordingLighting:
    """Captures the service calls an action makes."""

    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    def _record(self, *call):
        if self.fail:
            raise BackendError("Failed to update fixture", detail="db down")
        self.calls.append(call)
        return 1

    def mark_lights_fixed(self, ids):
        return self._record("fixed", ids)

    def mark_lights_out(self, ids, requires_electrician=False):
        return self._record("out", ids, requires_electrician)

    def toggle_electrician_required(self, ids, value):
        return self._record("electrician", ids, value)


def make_fixture(status="functional", requires_electrician=False) -> LightingFixture:
    return LightingFixture(id="L1", name="L1", status=status, requires_electrician=requires_electrician)


class TestFixtureActions:
    """Available actions depend on status and the electrician flag."""

    def test_available_actions(self):
        assert available_actions(make_fixture()) == {"bulb", "ballast"}
        assert available_actions(make_fixture("non_functional", True)) == {"fix", "bulb"}
        assert available_actions(make_fixture("non_functional")) == {"fix", "ballast"}

    def test_fix(self):
        service = RecordingLighting()
        apply_fixture_action(service, make_fixture("non_functional"), "fix")
        assert service.calls == [("fixed", ["L1"])]

    def test_bulb(self):
        service = RecordingLighting()
        apply_fixture_action(service, make_fixture(), "bulb")
        assert service.calls == [("out", ["L1"], False)]

    def test_ballast_on_working_fixture(self):
        service = RecordingLighting()
        apply_fixture_action(service, make_fixture(), "ballast")
        assert service.calls == [("out", ["L1"], True)]

    def test_ballast_on_out_fixture_sets_flag(self):
        service = RecordingLighting()
        apply_fixture_action(service, make_fixture("non_functional"), "ballast")
        assert service.calls == [("electrician", ["L1"], True)]

    def test_unavailable_action_writes_nothing(self):
        service = RecordingLighting()
        with pytest.raises(ValidationError):
            apply_fixture_action(service, make_fixture(), "fix")
        assert service.calls == []

    def test_backend_failure(self):
        with pytest.raises(BackendError, match="Failed to update fixture"):
            apply_fixture_action(RecordingLighting(fail=True), make_fixture(), "bulb")

"""Tests for lighting fixture status mutations."""

import pytest

from court_facilities.errors import BackendError, NotFoundError, ValidationError
from court_facilities.lighting.service import map_fixture_type
from tests.conftest import fixture_row


@pytest.fixture
def seeded(gateway):
    gateway.tables["lighting_fixtures"] = [
        fixture_row("L1", sequence_number=2),
        fixture_row("L2", status="non_functional", requires_electrician=True, sequence_number=1),
        fixture_row("L3", building_id="b111", building_name="111 Centre Street Supreme Court"),
    ]
    return gateway


def test_unknown_fixture_type_maps_to_standard():
    assert map_fixture_type("emergency") == "emergency"
    assert map_fixture_type("chandelier") == "standard"
    assert map_fixture_type(None) == "standard"


class TestReads:
    """Listing is cached; single reads always hit the database."""

    def test_list_filters_by_building_and_status(self, lighting, seeded):
        assert {f.id for f in lighting.list_fixtures(building_id="b100")} == {"L1", "L2"}
        assert [f.id for f in lighting.list_fixtures(status="non_functional")] == ["L2"]

    def test_list_rejects_unknown_status(self, lighting):
        with pytest.raises(ValidationError):
            lighting.list_fixtures(status="broken")

    def test_get_fixture_bypasses_cache(self, lighting, seeded):
        lighting.list_fixtures()
        seeded.rows("lighting_fixtures")[0]["status"] = "non_functional"
        assert lighting.get_fixture("L1").status == "non_functional"

    def test_get_missing_fixture(self, lighting, seeded):
        with pytest.raises(NotFoundError):
            lighting.get_fixture("nope")


class TestMutations:
    """Each write sets the documented columns and invalidates the listing."""

    def test_mark_lights_out(self, lighting, seeded):
        lighting.list_fixtures()
        assert lighting.mark_lights_out(["L1"], requires_electrician=True) == 1
        row = seeded.rows("lighting_fixtures")[0]
        assert row["status"] == "non_functional"
        assert row["requires_electrician"] is True
        assert row["reported_out_date"] is not None
        assert row["replaced_date"] is None
        assert lighting.cache.keys() == []

    def test_mark_lights_fixed(self, lighting, seeded):
        lighting.mark_lights_fixed(["L2"])
        row = seeded.rows("lighting_fixtures")[1]
        assert row["status"] == "functional"
        assert row["requires_electrician"] is False
        assert row["replaced_date"] is not None

    def test_toggle_electrician_only_touches_flag(self, lighting, seeded):
        lighting.toggle_electrician_required(["L1"], True)
        row = seeded.rows("lighting_fixtures")[0]
        assert row["requires_electrician"] is True
        assert row["status"] == "functional"

    def test_update_status_validates(self, lighting, seeded):
        with pytest.raises(ValidationError):
            lighting.update_status(["L1"], "flickering")
        assert lighting.update_status(["L1", "L3"], "maintenance_needed") == 2

    def test_empty_selection(self, lighting):
        with pytest.raises(ValidationError, match="No fixtures selected"):
            lighting.mark_lights_fixed([])

    def test_create_coerces_enums(self, lighting, gateway):
        row = lighting.create_fixture({"name": "Hall light", "type": "chandelier", "position": "attic", "status": "?"})
        assert row["type"] == "standard"
        assert row["position"] == "ceiling"
        assert row["status"] == "functional"

    def test_create_requires_name(self, lighting):
        with pytest.raises(ValidationError):
            lighting.create_fixture({"name": "  "})

    def test_delete(self, lighting, seeded):
        assert lighting.delete_fixtures(["L1", "L2"]) == 2
        assert [r["id"] for r in seeded.rows("lighting_fixtures")] == ["L3"]

    def test_backend_failure(self, lighting, seeded):
        seeded.fail_on.add(("update", "lighting_fixtures"))
        with pytest.raises(BackendError, match="Failed to update fixture"):
            lighting.mark_lights_fixed(["L1"])

"""Tests for court session CRUD, bulk import, copying and report seeding."""

from datetime import date

import pytest

from court_facilities.errors import BackendError, NotFoundError, ValidationError

DAY = date(2025, 10, 22)


def seed_session(gateway, **overrides):
    row = {
        "session_date": DAY.isoformat(),
        "period": "AM",
        "building_code": "100",
        "court_room_id": "cr-1000",
        "part_number": "PART 22",
        "judge_name": "J. Smith",
        "status": "CALENDAR",
    }
    row.update(overrides)
    return gateway.insert("court_sessions", row)[0]


class TestListAndCrud:
    """Reads are cached per scope; writes invalidate."""

    def test_list_attaches_court_room(self, sessions, gateway):
        seed_session(gateway)
        rows = sessions.list_sessions(DAY, "AM", "100")
        assert rows[0]["court_rooms"]["room_number"] == "1000"

    def test_list_is_cached_until_write(self, sessions, gateway):
        sessions.list_sessions(DAY, "AM", "100")
        sessions.list_sessions(DAY, "AM", "100")
        assert gateway.calls.count(("select", "court_sessions")) == 1
        sessions.create_session(
            {"session_date": DAY, "period": "AM", "building_code": "100", "court_room_id": "cr-1100"}
        )
        assert len(sessions.list_sessions(DAY, "AM", "100")) == 1
        assert gateway.calls.count(("select", "court_sessions")) == 2

    def test_invalid_scope(self, sessions):
        with pytest.raises(ValidationError):
            sessions.list_sessions(DAY, "EVENING", "100")
        with pytest.raises(ValidationError):
            sessions.list_sessions(DAY, "AM", "60")

    def test_create_requires_room(self, sessions):
        with pytest.raises(ValidationError, match="court_room_id is required"):
            sessions.create_session({"session_date": DAY, "period": "AM", "building_code": "100"})

    def test_create_records_user(self, sessions):
        row = sessions.create_session(
            {"session_date": DAY, "period": "PM", "building_code": "100", "court_room_id": "cr-1000", "id": "forced"},
            user_id="u7",
        )
        assert row["created_by"] == "u7"
        assert row["id"] != "forced"
        assert row["session_date"] == "2025-10-22"

    def test_update_and_delete(self, sessions, gateway):
        created = seed_session(gateway)
        updated = sessions.update_session(created["id"], {"status": "TRIAL"}, user_id="u2")
        assert updated["status"] == "TRIAL"
        assert updated["updated_by"] == "u2"
        sessions.delete_session(created["id"])
        with pytest.raises(NotFoundError):
            sessions.get_session(created["id"])

    def test_update_missing_session(self, sessions):
        with pytest.raises(NotFoundError):
            sessions.update_session("missing", {"status": "TRIAL"})

    def test_backend_failure_is_templated(self, sessions, gateway):
        gateway.fail_on.add(("insert", "court_sessions"))
        with pytest.raises(BackendError) as excinfo:
            sessions.create_session(
                {"session_date": DAY, "period": "AM", "building_code": "100", "court_room_id": "cr-1000"}
            )
        assert excinfo.value.user_message == "Failed to create session"
        assert "simulated" in excinfo.value.detail


class TestBulkCreate:
    """Bulk import skips parts already on file for the scope."""

    def test_skips_existing_and_repeated_parts(self, sessions, gateway):
        seed_session(gateway)
        result = sessions.bulk_create(
            [
                {"part_number": "PART 22", "room_number": "1000"},
                {"part_number": "TAP A", "room_number": "11", "clerk_name": "A. Clerk"},
                {"part_number": "TAP A", "room_number": "11"},
            ],
            DAY,
            "AM",
            "100",
            user_id="u1",
        )
        assert result == {"inserted": 1, "skipped": 2, "total": 3}
        new = [s for s in gateway.rows("court_sessions") if s["part_number"] == "TAP A"][0]
        assert new["court_room_id"] == "cr-1100"
        assert new["clerk_names"] == ["A. Clerk"]
        assert new["status"] == "scheduled"

    def test_all_duplicates(self, sessions, gateway):
        seed_session(gateway)
        with pytest.raises(ValidationError, match="All sessions already exist"):
            sessions.bulk_create([{"part_number": "PART 22"}], DAY, "AM", "100")

    def test_other_period_is_not_a_duplicate(self, sessions, gateway):
        seed_session(gateway)
        result = sessions.bulk_create([{"part_number": "PART 22", "court_room_id": "cr-1000"}], DAY, "PM", "100")
        assert result["inserted"] == 1

    def test_empty_batch(self, sessions):
        with pytest.raises(ValidationError):
            sessions.bulk_create([], DAY, "AM", "100")


class TestCopyYesterday:
    """Copying carries room, judge and status onto the new date."""

    def test_copies_sessions(self, sessions, gateway):
        seed_session(gateway, session_date="2025-10-21", defendants="DOE")
        copied = sessions.copy_yesterday(date(2025, 10, 21), DAY, "AM", "100", user_id="u3")
        assert copied == 1
        new = [s for s in gateway.rows("court_sessions") if s["session_date"] == "2025-10-22"][0]
        assert new["part_number"] == "PART 22"
        assert new["created_by"] == "u3"
        assert "defendants" not in new

    def test_copy_invalidates_session_and_conflict_lists(self, sessions, gateway, cache):
        seed_session(gateway, session_date="2025-10-21")
        cache.set(("court-sessions", DAY.isoformat(), "AM", "100"), [])
        cache.set(("conflict-detection", DAY.isoformat()), [])
        sessions.copy_yesterday(date(2025, 10, 21), DAY, "AM", "100")
        assert cache.keys() == []

    def test_nothing_to_copy(self, sessions):
        with pytest.raises(ValidationError, match="No sessions found"):
            sessions.copy_yesterday(date(2025, 10, 21), DAY, "AM", "100")


class TestStartReport:
    """Seeding uses the standing assignments of each court room."""

    def test_seeds_unsessioned_assigned_rooms(self, sessions, gateway):
        seed_session(gateway)
        result = sessions.start_report(DAY, "AM", "100")
        assert result == {"inserted": 1, "skipped": 1}
        seeded = [s for s in gateway.rows("court_sessions") if s["court_room_id"] == "cr-1100"][0]
        assert seeded["judge_name"] == "M. Jones"
        assert seeded["status"] == "CALENDAR"

    def test_building_without_assignments(self, sessions):
        with pytest.raises(ValidationError, match="No court assignments"):
            sessions.start_report(DAY, "AM", "111")

"""
Court session reads and writes for a (date, period, building) scope.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Mapping

from court_facilities.cache import QueryCache
from court_facilities.court.rooms import BUILDING_NAMES, CourtRoomDirectory
from court_facilities.db.gateway import TableGateway, translate_errors
from court_facilities.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

SESSION_PERIODS = ("AM", "PM", "ALL_DAY")
SESSION_STATUSES = (
    "CALENDAR",
    "JURY_SELECTION",
    "TRIAL",
    "HEARING",
    "SENTENCING",
    "DARK",
    "JUDGE_OUT",
    "CUSTOM",
)
SESSION_COLUMNS = (
    "id",
    "session_date",
    "period",
    "building_code",
    "court_room_id",
    "assignment_id",
    "status",
    "status_detail",
    "estimated_finish_date",
    "judge_name",
    "part_number",
    "clerk_names",
    "sergeant_name",
    "calendar_day",
    "parts_entered_by",
    "defendants",
    "purpose",
    "date_transferred_or_started",
    "top_charge",
    "attorney",
    "notes",
    "created_by",
    "updated_by",
    "created_at",
    "updated_at",
)
# Columns a caller may write; the rest are owned by the database.
WRITABLE_COLUMNS = frozenset(SESSION_COLUMNS) - {"id", "created_at", "updated_at"}
COPIED_COLUMNS = (
    "period",
    "building_code",
    "court_room_id",
    "assignment_id",
    "status",
    "status_detail",
    "estimated_finish_date",
    "judge_name",
    "part_number",
    "clerk_names",
    "sergeant_name",
    "notes",
)
INVALIDATES = ("court-sessions", "conflict-detection")


def check_scope(period: str, building_code: str) -> None:
    if period not in SESSION_PERIODS:
        raise ValidationError(f"Invalid period: {period}")
    if building_code not in BUILDING_NAMES:
        raise ValidationError(f"Unknown building code: {building_code}")


def _iso(value: date | str | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return value.isoformat()


class CourtSessionService:
    """CRUD plus bulk seeding of court sessions."""

    def __init__(self, gateway: TableGateway, cache: QueryCache, rooms: CourtRoomDirectory) -> None:
        self.gateway = gateway
        self.cache = cache
        self.rooms = rooms

    def list_sessions(self, session_date: date, period: str, building_code: str) -> list[dict]:
        check_scope(period, building_code)
        key = ("court-sessions", session_date.isoformat(), period, building_code)
        return self.cache.get_or_load(key, lambda: self._load_sessions(session_date, period, building_code))

    def get_session(self, session_id: str) -> dict:
        with translate_errors("Failed to load session"):
            row = self.gateway.select_one("court_sessions", filters={"id": session_id})
        if row is None:
            raise NotFoundError("Session not found.")
        return self._attach_rooms([row])[0]

    def create_session(self, values: Mapping[str, Any], *, user_id: str | None = None) -> dict:
        record = self._clean(values)
        for required in ("session_date", "period", "building_code", "court_room_id"):
            if not record.get(required):
                raise ValidationError(f"{required} is required")
        check_scope(record["period"], record["building_code"])
        record["created_by"] = user_id
        with translate_errors("Failed to create session"):
            row = self.gateway.insert("court_sessions", record)[0]
        self.cache.invalidate(*INVALIDATES)
        logger.info("Created session %s (part %s)", row.get("id"), row.get("part_number"))
        return self._attach_rooms([row])[0]

    def update_session(self, session_id: str, changes: Mapping[str, Any], *, user_id: str | None = None) -> dict:
        updates = self._clean(changes)
        updates.pop("created_by", None)
        if "period" in updates or "building_code" in updates:
            current = self.get_session(session_id)
            check_scope(updates.get("period", current["period"]), updates.get("building_code", current["building_code"]))
        if not updates:
            raise ValidationError("No changes supplied")
        updates["updated_by"] = user_id
        with translate_errors("Failed to update session"):
            rows = self.gateway.update("court_sessions", updates, filters={"id": session_id})
        if not rows:
            raise NotFoundError("Session not found.")
        self.cache.invalidate(*INVALIDATES)
        return self._attach_rooms(rows)[0]

    def delete_session(self, session_id: str) -> None:
        with translate_errors("Failed to delete session"):
            deleted = self.gateway.delete("court_sessions", filters={"id": session_id})
        if not deleted:
            raise NotFoundError("Session not found.")
        self.cache.invalidate(*INVALIDATES)
        logger.info("Deleted session %s", session_id)

    def bulk_create(
        self,
        sessions: Iterable[Mapping[str, Any]],
        session_date: date,
        period: str,
        building_code: str,
        *,
        user_id: str | None = None,
    ) -> dict:
        """Insert many sessions at once, skipping parts already on file for the scope."""
        check_scope(period, building_code)
        sessions = list(sessions)
        if not sessions:
            raise ValidationError("No sessions to create")
        date_str = session_date.isoformat()

        room_numbers = [s["room_number"] for s in sessions if s.get("room_number")]
        room_map = self.rooms.rooms_by_number(room_numbers)

        records = [
            {
                "session_date": date_str,
                "period": period,
                "building_code": building_code,
                "court_room_id": s.get("court_room_id") or room_map.get(s.get("room_number") or ""),
                "judge_name": s.get("judge_name"),
                "part_number": s.get("part_number"),
                "clerk_names": [s["clerk_name"]] if s.get("clerk_name") else None,
                "calendar_day": s.get("calendar_day"),
                "defendants": s.get("defendants"),
                "purpose": s.get("purpose"),
                "date_transferred_or_started": s.get("transfer_date"),
                "top_charge": s.get("top_charge"),
                "status": s.get("status") or "scheduled",
                "attorney": s.get("attorney"),
                "estimated_finish_date": s.get("estimated_final_date"),
                "parts_entered_by": s.get("part_sent_by"),
                "created_by": user_id,
            }
            for s in sessions
        ]

        with translate_errors("Failed to create sessions"):
            existing = self.gateway.select(
                "court_sessions",
                columns=["part_number"],
                filters={"session_date": date_str, "period": period, "building_code": building_code},
            )
        seen_parts = {row["part_number"] for row in existing}
        new_records = []
        for record in records:
            if record["part_number"] in seen_parts:
                continue
            seen_parts.add(record["part_number"])
            new_records.append(record)

        if not new_records:
            raise ValidationError("All sessions already exist for this date/period")

        with translate_errors("Failed to create sessions"):
            inserted = self.gateway.insert("court_sessions", new_records)
        self.cache.invalidate(*INVALIDATES)

        skipped = len(records) - len(new_records)
        if skipped:
            logger.warning("Skipped %d duplicate sessions for %s %s", skipped, date_str, period)
        logger.info("Bulk created %d sessions for %s %s building %s", len(inserted), date_str, period, building_code)
        return {"inserted": len(inserted), "skipped": skipped, "total": len(records)}

    def copy_yesterday(
        self,
        from_date: date,
        to_date: date,
        period: str,
        building_code: str,
        *,
        user_id: str | None = None,
    ) -> int:
        check_scope(period, building_code)
        with translate_errors("Failed to copy sessions"):
            source = self.gateway.select(
                "court_sessions",
                filters={"session_date": from_date.isoformat(), "period": period, "building_code": building_code},
            )
        if not source:
            raise ValidationError("No sessions found for the selected date")

        copies = []
        for session in source:
            copy = {column: session.get(column) for column in COPIED_COLUMNS}
            copy["session_date"] = to_date.isoformat()
            copy["created_by"] = user_id
            copies.append(copy)

        with translate_errors("Failed to copy sessions"):
            self.gateway.insert("court_sessions", copies)
        self.cache.invalidate(*INVALIDATES)
        logger.info("Copied %d sessions from %s to %s", len(source), from_date, to_date)
        return len(source)

    def start_report(
        self,
        session_date: date,
        period: str,
        building_code: str,
        *,
        user_id: str | None = None,
    ) -> dict:
        """Seed one CALENDAR session per assigned court room that has none yet."""
        check_scope(period, building_code)
        assigned = [r for r in self.rooms.rooms_with_assignments(building_code) if r.has_assignment]
        if not assigned:
            raise ValidationError("No court assignments found for this building")

        date_str = session_date.isoformat()
        with translate_errors("Failed to start report"):
            existing = self.gateway.select(
                "court_sessions",
                columns=["court_room_id"],
                filters={"session_date": date_str, "period": period, "building_code": building_code},
            )
        taken = {row["court_room_id"] for row in existing}

        records = [
            {
                "session_date": date_str,
                "period": period,
                "building_code": building_code,
                "court_room_id": entry.room.id,
                "judge_name": entry.assignment.justice,
                "part_number": entry.assignment.part,
                "clerk_names": entry.assignment.clerks or None,
                "sergeant_name": entry.assignment.sergeant,
                "status": "CALENDAR",
                "created_by": user_id,
            }
            for entry in assigned
            if entry.room.id not in taken
        ]
        if records:
            with translate_errors("Failed to start report"):
                self.gateway.insert("court_sessions", records)
            self.cache.invalidate(*INVALIDATES)
        logger.info("Started report for %s %s: %d seeded", date_str, period, len(records))
        return {"inserted": len(records), "skipped": len(assigned) - len(records)}

    # --- helpers ---------------------------------------------------------

    def _load_sessions(self, session_date: date, period: str, building_code: str) -> list[dict]:
        with translate_errors("Failed to load sessions"):
            rows = self.gateway.select(
                "court_sessions",
                filters={
                    "session_date": session_date.isoformat(),
                    "period": period,
                    "building_code": building_code,
                },
                order_by=["part_number"],
            )
        return self._attach_rooms(rows)

    def _attach_rooms(self, rows: list[dict]) -> list[dict]:
        room_ids = sorted({row["court_room_id"] for row in rows if row.get("court_room_id")})
        rooms_map: dict[str, dict] = {}
        if room_ids:
            with translate_errors("Failed to load court rooms"):
                rooms = self.gateway.select(
                    "court_rooms",
                    columns=["id", "room_number", "courtroom_number", "room_id"],
                    in_filters={"id": room_ids},
                )
            rooms_map = {room["id"]: room for room in rooms}
        return [{**row, "court_rooms": rooms_map.get(row.get("court_room_id"))} for row in rows]

    def _clean(self, values: Mapping[str, Any]) -> dict:
        record = {k: v for k, v in values.items() if k in WRITABLE_COLUMNS}
        for column in ("session_date", "estimated_finish_date", "date_transferred_or_started"):
            if column in record:
                record[column] = _iso(record[column])
        return record

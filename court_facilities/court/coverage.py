"""
Coverage assignments: who covers for an absent judge, clerk or sergeant.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping

from court_facilities.cache import QueryCache
from court_facilities.court.rooms import CourtRoomDirectory
from court_facilities.court.sessions import check_scope
from court_facilities.db.gateway import TableGateway, translate_errors
from court_facilities.db.models import CourtAssignment, Personnel
from court_facilities.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

STAFF_ROLES = ("judge", "clerk", "sergeant")
COVERAGE_FIELDS = (
    "coverage_date",
    "period",
    "building_code",
    "court_room_id",
    "absent_staff_name",
    "absent_staff_role",
    "covering_staff_name",
    "start_time",
    "end_time",
    "absence_reason",
    "notes",
)
NULLABLE_FIELDS = ("start_time", "end_time", "absence_reason", "notes")


def suggest_absent_staff(assignment: CourtAssignment | None, role: str) -> str:
    """Name of the staff member an assignment lists for ``role``."""
    if assignment is None:
        return ""
    if role == "judge":
        return assignment.justice or ""
    if role == "clerk":
        return assignment.clerks[0] if assignment.clerks else ""
    if role == "sergeant":
        return assignment.sergeant or ""
    return ""


def filter_personnel(personnel: list[Personnel], term: str) -> list[Personnel]:
    if not term:
        return []
    needle = term.lower()
    return [person for person in personnel if needle in person.name.lower()]


class CoverageService:
    def __init__(self, gateway: TableGateway, cache: QueryCache, rooms: CourtRoomDirectory) -> None:
        self.gateway = gateway
        self.cache = cache
        self.rooms = rooms

    def list_coverages(self, coverage_date: date, period: str, building_code: str) -> list[dict]:
        check_scope(period, building_code)
        key = ("coverage-assignments", coverage_date.isoformat(), period, building_code)
        return self.cache.get_or_load(key, lambda: self._load(coverage_date, period, building_code))

    def create_coverage(self, values: Mapping[str, Any]) -> dict:
        payload = self._payload(values, creating=True)
        with translate_errors("Failed to create coverage assignment"):
            row = self.gateway.insert("coverage_assignments", payload)[0]
        self.cache.invalidate("coverage-assignments")
        logger.info(
            "Coverage created: %s covers %s (%s)",
            row.get("covering_staff_name"),
            row.get("absent_staff_name"),
            row.get("absent_staff_role"),
        )
        return row

    def update_coverage(self, coverage_id: str, values: Mapping[str, Any]) -> dict:
        payload = self._payload(values, creating=False)
        if not payload:
            raise ValidationError("No changes supplied")
        with translate_errors("Failed to update coverage assignment"):
            rows = self.gateway.update("coverage_assignments", payload, filters={"id": coverage_id})
        if not rows:
            raise NotFoundError("Coverage assignment not found.")
        self.cache.invalidate("coverage-assignments")
        return rows[0]

    def delete_coverage(self, coverage_id: str) -> None:
        with translate_errors("Failed to delete coverage assignment"):
            deleted = self.gateway.delete("coverage_assignments", filters={"id": coverage_id})
        if not deleted:
            raise NotFoundError("Coverage assignment not found.")
        self.cache.invalidate("coverage-assignments")

    def personnel(self) -> list[Personnel]:
        return self.cache.get_or_load(("personnel-profiles",), self._load_personnel)

    def search_personnel(self, term: str) -> list[Personnel]:
        return filter_personnel(self.personnel(), term)

    def suggest_for_room(self, building_code: str, court_room_id: str, role: str) -> str:
        for entry in self.rooms.rooms_with_assignments(building_code):
            if entry.room.id == court_room_id:
                return suggest_absent_staff(entry.assignment, role)
        return ""

    # --- helpers ---------------------------------------------------------

    def _payload(self, values: Mapping[str, Any], *, creating: bool) -> dict:
        payload = {k: v for k, v in values.items() if k in COVERAGE_FIELDS}
        if isinstance(payload.get("coverage_date"), date):
            payload["coverage_date"] = payload["coverage_date"].isoformat()
        for field_name in NULLABLE_FIELDS:
            if field_name in payload and not payload[field_name]:
                payload[field_name] = None
        role = payload.get("absent_staff_role")
        if role is not None and role not in STAFF_ROLES:
            raise ValidationError(f"Invalid staff role: {role}")
        if creating:
            if "period" in payload or "building_code" in payload:
                check_scope(payload.get("period", ""), payload.get("building_code", ""))
            missing = [
                name
                for name in ("coverage_date", "period", "building_code", "court_room_id", "covering_staff_name")
                if not payload.get(name)
            ]
            if missing:
                raise ValidationError(
                    "Missing required fields",
                    errors=[{"field": name, "message": "required"} for name in missing],
                )
            if not payload.get("absent_staff_name"):
                suggested = self.suggest_for_room(
                    payload["building_code"],
                    payload["court_room_id"],
                    payload.get("absent_staff_role", "judge"),
                )
                if not suggested:
                    raise ValidationError(
                        "This courtroom has no assignment. Please enter the staff name manually.",
                        errors=[{"field": "absent_staff_name", "message": "required"}],
                    )
                payload["absent_staff_name"] = suggested
            payload.setdefault("absent_staff_role", "judge")
        return payload

    def _load(self, coverage_date: date, period: str, building_code: str) -> list[dict]:
        with translate_errors("Failed to load coverage assignments"):
            return self.gateway.select(
                "coverage_assignments",
                filters={
                    "coverage_date": coverage_date.isoformat(),
                    "period": period,
                    "building_code": building_code,
                },
                order_by=["court_room_id"],
            )

    def _load_personnel(self) -> list[Personnel]:
        with translate_errors("Failed to load personnel"):
            rows = self.gateway.select("personnel_profiles", order_by=["display_name"])
        return [
            Personnel(
                id=row["id"],
                name=row.get("display_name") or row.get("full_name") or "",
                role=row.get("title") or row.get("primary_role") or "Staff",
            )
            for row in rows
        ]

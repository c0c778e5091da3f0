"""
Court room lookups scoped to a courthouse building.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from court_facilities.cache import QueryCache
from court_facilities.db.gateway import TableGateway, translate_errors
from court_facilities.db.models import CourtAssignment, CourtRoom
from court_facilities.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

BUILDING_NAMES = {
    "100": "100 Centre Street Supreme Court",
    "111": "111 Centre Street Supreme Court",
}


def building_name(building_code: str) -> str:
    try:
        return BUILDING_NAMES[building_code]
    except KeyError:
        raise ValidationError(f"Unknown building code: {building_code}") from None


@dataclass(slots=True)
class RoomWithAssignment:
    room: CourtRoom
    assignment: CourtAssignment | None

    @property
    def has_assignment(self) -> bool:
        return self.assignment is not None

    def to_dict(self) -> dict:
        assignment = self.assignment
        return {
            "id": self.room.id,
            "room_number": self.room.room_number,
            "courtroom_number": self.room.courtroom_number,
            "room_id": self.room.room_id,
            "has_assignment": self.has_assignment,
            "assignment": None
            if assignment is None
            else {
                "part": assignment.part,
                "justice": assignment.justice,
                "clerks": assignment.clerks,
                "sergeant": assignment.sergeant,
            },
        }


class CourtRoomDirectory:
    """Resolves active court rooms and their standing assignments per building."""

    def __init__(self, gateway: TableGateway, cache: QueryCache) -> None:
        self.gateway = gateway
        self.cache = cache

    def rooms_for_building(self, building_code: str) -> list[CourtRoom]:
        return self.cache.get_or_load(
            ("court-rooms", building_code),
            lambda: self._load_rooms(building_code),
        )

    def assignments(self) -> list[CourtAssignment]:
        return self.cache.get_or_load(("court-assignments",), self._load_assignments)

    def rooms_with_assignments(self, building_code: str) -> list[RoomWithAssignment]:
        by_room_id = {a.room_id: a for a in self.assignments() if a.room_id}
        return [
            RoomWithAssignment(room=room, assignment=by_room_id.get(room.room_id))
            for room in self.rooms_for_building(building_code)
        ]

    def get_room(self, court_room_id: str) -> CourtRoom:
        with translate_errors("Failed to load court room"):
            row = self.gateway.select_one("court_rooms", filters={"id": court_room_id})
        if row is None:
            raise NotFoundError("Court room not found.")
        return CourtRoom.from_row(row)

    def rooms_by_number(self, numbers: list[str]) -> dict[str, str]:
        """Map room or courtroom numbers to court room ids."""
        if not numbers:
            return {}
        room_map: dict[str, str] = {}
        with translate_errors("Failed to resolve court rooms"):
            by_room = self.gateway.select(
                "court_rooms",
                columns=["id", "room_number", "courtroom_number"],
                in_filters={"room_number": numbers},
            )
            by_courtroom = self.gateway.select(
                "court_rooms",
                columns=["id", "room_number", "courtroom_number"],
                in_filters={"courtroom_number": numbers},
            )
        for row in [*by_room, *by_courtroom]:
            if row.get("room_number"):
                room_map[row["room_number"]] = row["id"]
            if row.get("courtroom_number"):
                room_map[row["courtroom_number"]] = row["id"]
        return room_map

    def _load_rooms(self, building_code: str) -> list[CourtRoom]:
        name = building_name(building_code)
        with translate_errors("Failed to load court rooms"):
            building = self.gateway.select_one("buildings", columns=["id"], filters={"name": name})
            if building is None:
                logger.warning("Building %r not found", name)
                return []
            floors = self.gateway.select("floors", columns=["id"], filters={"building_id": building["id"]})
            if not floors:
                return []
            rooms = self.gateway.select(
                "rooms",
                columns=["id"],
                in_filters={"floor_id": [f["id"] for f in floors]},
            )
            if not rooms:
                return []
            court_rooms = self.gateway.select(
                "court_rooms",
                filters={"is_active": True},
                in_filters={"room_id": [r["id"] for r in rooms]},
                order_by=["room_number"],
            )
        return [CourtRoom.from_row(row) for row in court_rooms]

    def _load_assignments(self) -> list[CourtAssignment]:
        with translate_errors("Failed to load court assignments"):
            rows = self.gateway.select(
                "court_assignments",
                columns=["room_id", "justice", "part", "clerks", "sergeant"],
            )
        return [CourtAssignment.from_row(row) for row in rows if row.get("justice")]

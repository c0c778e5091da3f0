"""
Courtroom mapping for extracted parts.

A part is matched against the building's court rooms first by an explicit room
number, then by the standing court assignment for that part. Matching on the
bare part number (``"PART 22"`` vs ``"22"``) still proposes a room but flags
the match as ``low_confidence``.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from court_facilities.court.extracted import ExtractedPart
from court_facilities.court.rooms import CourtRoomDirectory, RoomWithAssignment

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_DIGITS_RE = re.compile(r"\d+[A-Z]?")


def normalize_part(value: str | None) -> str:
    return _WHITESPACE_RE.sub(" ", (value or "").strip()).upper()


def part_number_token(value: str | None) -> str | None:
    """Numeric identifier of a part label, e.g. ``"Part 22"`` -> ``"22"``."""
    match = _DIGITS_RE.search(normalize_part(value))
    return match.group(0) if match else None


class CourtroomMapper:
    """Matches extracted parts to the court rooms of one building."""

    def __init__(self, rooms: Iterable[RoomWithAssignment]) -> None:
        self.rooms = list(rooms)

    @classmethod
    def for_building(cls, directory: CourtRoomDirectory, building_code: str) -> "CourtroomMapper":
        return cls(directory.rooms_with_assignments(building_code))

    def map_part(self, part: ExtractedPart) -> ExtractedPart:
        """Return a copy of ``part`` with its mapping fields filled in."""
        if part.room_number:
            entry = self._by_room_number(part.room_number)
            if entry is not None:
                return self._mapped(part, entry, "found", None)

        wanted = normalize_part(part.part)
        if wanted:
            for entry in self.rooms:
                if entry.assignment and normalize_part(entry.assignment.part) == wanted:
                    return self._mapped(part, entry, "found", None)

            token = part_number_token(part.part)
            if token:
                for entry in self.rooms:
                    if entry.assignment and part_number_token(entry.assignment.part) == token:
                        message = (
                            f"Part {part.part!r} matched assignment {entry.assignment.part!r} "
                            "by number only; please confirm the room."
                        )
                        return self._mapped(part, entry, "low_confidence", message)

        logger.info("No courtroom match for part %r", part.part)
        return part.model_copy(
            update={
                "courtroom_id": None,
                "mapping_status": "not_found",
                "mapping_message": f"No courtroom found for part {part.part or '(blank)'}; select a room manually.",
            }
        )

    def map_parts(self, parts: Iterable[ExtractedPart]) -> list[ExtractedPart]:
        return [self.map_part(part) for part in parts]

    def _by_room_number(self, number: str) -> RoomWithAssignment | None:
        wanted = number.strip()
        for entry in self.rooms:
            if wanted in (entry.room.room_number, entry.room.courtroom_number):
                return entry
        return None

    def _mapped(self, part: ExtractedPart, entry: RoomWithAssignment, status: str, message: str | None) -> ExtractedPart:
        return part.model_copy(
            update={
                "courtroom_id": entry.room.id,
                "room_number": entry.room.room_number or part.room_number,
                "mapping_status": status,
                "mapping_message": message,
            }
        )

"""
Quick-create room templates with name and room-number suggestions.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Iterable

from court_facilities.errors import NotFoundError
from court_facilities.spaces.schemas import RoomType
from court_facilities.spaces.service import UnifiedSpaceService

logger = logging.getLogger(__name__)

STORAGE_CAPACITY = 100


@dataclass(frozen=True, slots=True)
class SpaceTemplate:
    id: str
    name: str
    room_type: RoomType
    default_name: str
    description: str

    @property
    def is_storage(self) -> bool:
        return self.room_type in (RoomType.UTILITY_ROOM, RoomType.FILING_ROOM)

    def to_dict(self) -> dict:
        return {**asdict(self), "room_type": self.room_type.value, "is_storage": self.is_storage}


SPACE_TEMPLATES: tuple[SpaceTemplate, ...] = (
    SpaceTemplate("office", "Office", RoomType.OFFICE, "Office", "Standard office space"),
    SpaceTemplate("courtroom", "Courtroom", RoomType.COURTROOM, "Courtroom", "Court hearing room"),
    SpaceTemplate("storage", "Storage", RoomType.UTILITY_ROOM, "Storage Room", "Storage and supplies"),
    SpaceTemplate("filing", "Filing Room", RoomType.FILING_ROOM, "Filing Room", "Document filing"),
    SpaceTemplate("break_room", "Break Room", RoomType.BREAK_ROOM, "Break Room", "Staff break area"),
    SpaceTemplate("conference", "Conference", RoomType.CONFERENCE_ROOM, "Conference Room", "Meeting room"),
    SpaceTemplate("records", "Records", RoomType.RECORDS_ROOM, "Records Room", "Document storage"),
    SpaceTemplate("security", "Security", RoomType.ADMINISTRATIVE_OFFICE, "Security Office", "Security station"),
)


def get_template(template_id: str) -> SpaceTemplate:
    for template in SPACE_TEMPLATES:
        if template.id == template_id:
            return template
    raise NotFoundError(f"Unknown space template: {template_id}")


def suggest_name(template: SpaceTemplate, existing_names: Iterable[str]) -> str:
    taken = {name.strip().lower() for name in existing_names if name}
    if template.default_name.lower() not in taken:
        return template.default_name
    n = 2
    while f"{template.default_name} {n}".lower() in taken:
        n += 1
    return f"{template.default_name} {n}"


def suggest_room_number(floor_number: Any, existing_numbers: Iterable[str]) -> str:
    prefix = str(floor_number if floor_number not in (None, "") else 1)
    pattern = re.compile(rf"^{re.escape(prefix)}(\d{{2}})$")
    used = set()
    for number in existing_numbers:
        match = pattern.match(str(number or "").strip())
        if match:
            used.add(int(match.group(1)))
    suffix = 1
    while suffix in used:
        suffix += 1
    return f"{prefix}{suffix:02d}"


def smart_defaults(template: SpaceTemplate, floor: dict, spaces: list[dict]) -> dict:
    """Suggested name and room number for ``template`` on ``floor``."""
    return {
        "name": suggest_name(template, (s.get("name") for s in spaces)),
        "room_number": suggest_room_number(
            floor.get("floor_number"),
            (s.get("room_number") for s in spaces),
        ),
    }


def template_payload(
    template: SpaceTemplate,
    *,
    building_id: str,
    floor_id: str,
    name: str,
    room_number: str,
) -> dict:
    storage = template.is_storage
    return {
        "type": "room",
        "name": name,
        "building_id": building_id,
        "floor_id": floor_id,
        "room_type": template.room_type.value,
        "room_number": room_number,
        "current_function": template.name.lower(),
        "description": template.description,
        "is_storage": storage,
        "storage_type": "general" if storage else None,
        "storage_capacity": STORAGE_CAPACITY if storage else None,
        "storage_notes": "",
        "parent_room_id": None,
        "connections": [],
    }


class QuickSpaceCreator:
    def __init__(self, spaces: UnifiedSpaceService) -> None:
        self.spaces = spaces

    def defaults(self, template_id: str, floor_id: str) -> dict:
        template = get_template(template_id)
        floor = self.spaces.floor(floor_id)
        return smart_defaults(template, floor, self.spaces.list_spaces(floor_id))

    def quick_create(
        self,
        template_id: str,
        building_id: str,
        floor_id: str,
        name: str | None = None,
        room_number: str | None = None,
    ) -> dict:
        template = get_template(template_id)
        if not name or not room_number:
            suggested = self.defaults(template_id, floor_id)
            name = name or suggested["name"]
            room_number = room_number or suggested["room_number"]
        payload = template_payload(
            template,
            building_id=building_id,
            floor_id=floor_id,
            name=name,
            room_number=room_number,
        )
        logger.info("Quick-creating %s '%s' (%s) on floor %s", template.id, name, room_number, floor_id)
        return self.spaces.create_space(payload)

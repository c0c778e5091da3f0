"""
Unified create/update/delete for rooms, hallways and doors.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from court_facilities.cache import QueryCache
from court_facilities.db.gateway import TableGateway, translate_errors
from court_facilities.errors import NotFoundError, ValidationError
from court_facilities.spaces.schemas import (
    Accessibility,
    DoorType,
    EmergencyRoute,
    HallwaySection,
    HallwayType,
    RoomType,
    SecurityLevel,
    SpaceBase,
    StorageType,
    TrafficFlow,
    parse_space,
)

logger = logging.getLogger(__name__)

SPACE_TABLES = {"room": "rooms", "hallway": "hallways", "door": "doors"}
FLOOR_SPACES_VIEW = "floor_spaces"
CONNECTIONS_TABLE = "space_connections"

# column -> (accepted values, replacement for anything else)
ENUM_DEFAULTS: dict[str, dict[str, tuple[type[Enum], Enum]]] = {
    "room": {
        "room_type": (RoomType, RoomType.OFFICE),
        "storage_type": (StorageType, StorageType.GENERAL),
    },
    "hallway": {
        "type": (HallwayType, HallwayType.PUBLIC_MAIN),
        "section": (HallwaySection, HallwaySection.CONNECTOR),
        "traffic_flow": (TrafficFlow, TrafficFlow.TWO_WAY),
        "accessibility": (Accessibility, Accessibility.FULLY_ACCESSIBLE),
        "emergency_route": (EmergencyRoute, EmergencyRoute.NOT_DESIGNATED),
    },
    "door": {
        "type": (DoorType, DoorType.STANDARD),
        "security_level": (SecurityLevel, SecurityLevel.STANDARD),
    },
}

# schema field -> table column where they differ
COLUMN_NAMES = {
    "hallway": {"hallway_type": "type"},
    "door": {"door_type": "type"},
}


def coerce_enums(space_type: str, record: dict[str, Any]) -> dict[str, Any]:
    """Replace enum values the database would reject with their defaults."""
    coerced = dict(record)
    for column, (enum_cls, default) in ENUM_DEFAULTS[space_type].items():
        value = coerced.get(column)
        if value is None:
            continue
        if value not in {member.value for member in enum_cls}:
            logger.warning("Unknown %s %s value %r; using %r", space_type, column, value, default.value)
            coerced[column] = default.value
        else:
            coerced[column] = enum_cls(value).value
    return coerced


def to_record(space: SpaceBase, *, only_set: bool = False) -> dict[str, Any]:
    raw = space.model_dump(
        exclude={"type", "building_id", "connections"},
        exclude_unset=only_set,
        mode="json",
    )
    renames = COLUMN_NAMES.get(space.type, {})
    record = {renames.get(key, key): value for key, value in raw.items()}
    if space.type == "room" and not record.get("is_storage", True):
        record["storage_type"] = None
        record["storage_capacity"] = None
    return coerce_enums(space.type, record)


def _table(space_type: str) -> str:
    try:
        return SPACE_TABLES[space_type]
    except KeyError:
        raise ValidationError(f"Unknown space type: {space_type}") from None


class UnifiedSpaceService:
    def __init__(self, gateway: TableGateway, cache: QueryCache) -> None:
        self.gateway = gateway
        self.cache = cache

    def create_space(self, data: Any) -> dict:
        space = parse_space(data)
        self._check_floor(space.floor_id, space.building_id)
        record = to_record(space)
        with translate_errors(f"Failed to create {space.type}"):
            row = self.gateway.insert(SPACE_TABLES[space.type], record)[0]
        self._replace_connections(row["id"], space)
        self._invalidate(space.type)
        logger.info("Created %s %s (%s)", space.type, row["id"], space.name)
        return {**row, "type": space.type}

    def update_space(self, space_id: str, data: Any) -> dict:
        space = parse_space(data, editing=True)
        if space.building_id:
            self._check_floor(space.floor_id, space.building_id)
        record = to_record(space, only_set=True)
        with translate_errors(f"Failed to update {space.type}"):
            rows = self.gateway.update(SPACE_TABLES[space.type], record, filters={"id": space_id})
        if not rows:
            raise NotFoundError(f"{space.type.capitalize()} not found.")
        if "connections" in space.model_fields_set:
            self._replace_connections(space_id, space)
        self._invalidate(space.type)
        logger.info("Updated %s %s", space.type, space_id)
        return {**rows[0], "type": space.type}

    def delete_space(self, space_type: str, space_id: str) -> None:
        table = _table(space_type)
        with translate_errors(f"Failed to delete {space_type}"):
            self.gateway.delete(CONNECTIONS_TABLE, filters={"from_space_id": space_id})
            self.gateway.delete(CONNECTIONS_TABLE, filters={"to_space_id": space_id})
            deleted = self.gateway.delete(table, filters={"id": space_id})
        if not deleted:
            raise NotFoundError(f"{space_type.capitalize()} not found.")
        self._invalidate(space_type)
        logger.info("Deleted %s %s", space_type, space_id)

    def get_space(self, space_type: str, space_id: str) -> dict:
        table = _table(space_type)
        with translate_errors(f"Failed to load {space_type}"):
            row = self.gateway.select_one(table, filters={"id": space_id})
            connections = self.gateway.select(CONNECTIONS_TABLE, filters={"from_space_id": space_id}) if row else []
        if row is None:
            raise NotFoundError(f"{space_type.capitalize()} not found.")
        return {**row, "type": space_type, "connections": connections}

    def list_spaces(self, floor_id: str) -> list[dict]:
        if not floor_id:
            raise ValidationError("Floor is required")
        return self.cache.get_or_load(("floor-spaces", floor_id), lambda: self._load_floor(floor_id))

    def floor(self, floor_id: str) -> dict:
        with translate_errors("Failed to load floor"):
            row = self.gateway.select_one("floors", filters={"id": floor_id})
        if row is None:
            raise NotFoundError("Floor not found.")
        return row

    # --- helpers ---------------------------------------------------------

    def _check_floor(self, floor_id: str, building_id: str) -> None:
        if not building_id:
            raise ValidationError(
                "Building selection is required",
                errors=[{"field": "building_id", "message": "Building selection is required"}],
            )
        floor = self.floor(floor_id)
        if floor.get("building_id") is not None and str(floor["building_id"]) != str(building_id):
            raise ValidationError(
                "Floor does not belong to the selected building",
                errors=[{"field": "floor_id", "message": "Floor does not belong to the selected building"}],
            )

    def _replace_connections(self, space_id: str, space: SpaceBase) -> None:
        rows = [
            {
                "from_space_id": space_id,
                "to_space_id": conn.to_space_id,
                "space_type": space.type,
                "connection_type": conn.connection_type,
                "direction": conn.direction,
            }
            for conn in space.connections
        ]
        with translate_errors("Failed to save space connections"):
            self.gateway.delete(CONNECTIONS_TABLE, filters={"from_space_id": space_id})
            if rows:
                self.gateway.insert(CONNECTIONS_TABLE, rows)

    def _invalidate(self, space_type: str) -> None:
        self.cache.invalidate(SPACE_TABLES[space_type], "floor-spaces", "spaces")

    def _load_floor(self, floor_id: str) -> list[dict]:
        with translate_errors("Failed to load floor spaces"):
            return self.gateway.select(FLOOR_SPACES_VIEW, filters={"floor_id": floor_id}, order_by=["type", "name"])

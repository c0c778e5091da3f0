"""
Lighting fixture reads and status mutations.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from court_facilities.cache import QueryCache
from court_facilities.db.gateway import TableGateway, translate_errors
from court_facilities.db.models import LightingFixture
from court_facilities.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

FIXTURE_VIEW = "lighting_fixture_details"
FIXTURE_TABLE = "lighting_fixtures"
FIXTURE_TYPES = ("standard", "emergency", "motion_sensor")
LIGHT_STATUSES = (
    "functional",
    "maintenance_needed",
    "non_functional",
    "pending_maintenance",
    "scheduled_replacement",
)
POSITIONS = ("ceiling", "wall", "floor", "desk", "recessed")
TECHNOLOGIES = ("LED", "Fluorescent", "Bulb")
CREATE_FIELDS = (
    "name",
    "type",
    "technology",
    "bulb_count",
    "status",
    "ballast_issue",
    "requires_electrician",
    "space_id",
    "space_type",
    "position",
    "room_number",
    "sequence_number",
    "notes",
)


def map_fixture_type(value: str | None) -> str:
    return value if value in FIXTURE_TYPES else "standard"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class LightingService:
    def __init__(self, gateway: TableGateway, cache: QueryCache) -> None:
        self.gateway = gateway
        self.cache = cache

    def list_fixtures(self, *, building_id: str | None = None, status: str | None = None) -> list[LightingFixture]:
        if status is not None and status not in LIGHT_STATUSES:
            raise ValidationError(f"Invalid fixture status: {status}")
        key = ("lighting-fixtures", building_id, status)
        return self.cache.get_or_load(key, lambda: self._load(building_id, status))

    def get_fixture(self, fixture_id: str) -> LightingFixture:
        """Read one fixture straight from the database, bypassing the cache."""
        with translate_errors("Failed to load fixture"):
            row = self.gateway.select_one(FIXTURE_VIEW, filters={"id": fixture_id})
        if row is None:
            raise NotFoundError("Fixture not found.")
        return LightingFixture.from_row(row)

    def create_fixture(self, data: Mapping[str, Any]) -> dict:
        record = {k: v for k, v in data.items() if k in CREATE_FIELDS}
        if not (record.get("name") or "").strip():
            raise ValidationError("Fixture name is required")
        record["type"] = map_fixture_type(record.get("type"))
        if record.get("status") not in LIGHT_STATUSES:
            record["status"] = "functional"
        if record.get("position") not in POSITIONS:
            record["position"] = "ceiling"
        if record.get("technology") not in TECHNOLOGIES:
            record["technology"] = None
        with translate_errors("Failed to create fixture"):
            row = self.gateway.insert(FIXTURE_TABLE, record)[0]
        self.cache.invalidate("lighting-fixtures")
        logger.info("Created fixture %s (%s)", row.get("id"), row.get("name"))
        return row

    def delete_fixtures(self, fixture_ids: Iterable[str]) -> int:
        ids = self._ids(fixture_ids)
        with translate_errors("Failed to delete fixtures"):
            count = self.gateway.delete(FIXTURE_TABLE, in_filters={"id": ids})
        self.cache.invalidate("lighting-fixtures")
        return count

    def update_status(self, fixture_ids: Iterable[str], status: str) -> int:
        if status not in LIGHT_STATUSES:
            raise ValidationError(f"Invalid fixture status: {status}")
        return self._update(fixture_ids, {"status": status})

    def mark_lights_out(self, fixture_ids: Iterable[str], requires_electrician: bool = False) -> int:
        return self._update(
            fixture_ids,
            {
                "status": "non_functional",
                "reported_out_date": _now(),
                "requires_electrician": requires_electrician,
                "replaced_date": None,
            },
        )

    def mark_lights_fixed(self, fixture_ids: Iterable[str]) -> int:
        return self._update(
            fixture_ids,
            {"status": "functional", "replaced_date": _now(), "requires_electrician": False},
        )

    def toggle_electrician_required(self, fixture_ids: Iterable[str], requires_electrician: bool) -> int:
        return self._update(fixture_ids, {"requires_electrician": requires_electrician})

    def _update(self, fixture_ids: Iterable[str], values: dict[str, Any]) -> int:
        ids = self._ids(fixture_ids)
        with translate_errors("Failed to update fixture"):
            rows = self.gateway.update(FIXTURE_TABLE, values, in_filters={"id": ids})
        self.cache.invalidate("lighting-fixtures")
        logger.info("Updated %d fixtures: %s", len(rows), sorted(values))
        return len(rows)

    def _ids(self, fixture_ids: Iterable[str]) -> list[str]:
        ids = [fid for fid in fixture_ids if fid]
        if not ids:
            raise ValidationError("No fixtures selected")
        return ids

    def _load(self, building_id: str | None, status: str | None) -> list[LightingFixture]:
        filters: dict[str, Any] = {}
        if building_id:
            filters["building_id"] = building_id
        if status:
            filters["status"] = status
        with translate_errors("Failed to load lighting fixtures"):
            rows = self.gateway.select(FIXTURE_VIEW, filters=filters, order_by=["building_name", "floor_name", "sequence_number"])
        return [LightingFixture.from_row(row) for row in rows]

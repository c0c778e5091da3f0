"""
Dataclasses mirroring database tables and views.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(slots=True)
class CourtRoom:
    id: str
    room_number: Optional[str]
    courtroom_number: Optional[str]
    room_id: Optional[str]
    is_active: bool = True

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "CourtRoom":
        return cls(
            id=row["id"],
            room_number=row.get("room_number"),
            courtroom_number=row.get("courtroom_number"),
            room_id=row.get("room_id"),
            is_active=row.get("is_active", True) is not False,
        )


@dataclass(slots=True)
class CourtAssignment:
    room_id: Optional[str]
    part: Optional[str]
    justice: Optional[str]
    clerks: list[str] = field(default_factory=list)
    sergeant: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "CourtAssignment":
        return cls(
            room_id=row.get("room_id"),
            part=row.get("part"),
            justice=row.get("justice"),
            clerks=list(row.get("clerks") or []),
            sergeant=row.get("sergeant"),
        )


@dataclass(slots=True)
class LightingFixture:
    id: str
    name: str
    status: str = "functional"
    type: str = "standard"
    space_id: Optional[str] = None
    space_name: Optional[str] = None
    space_type: Optional[str] = None
    room_number: Optional[str] = None
    building_name: Optional[str] = None
    floor_name: Optional[str] = None
    position: Optional[str] = None
    technology: Optional[str] = None
    bulb_count: int = 1
    ballast_issue: bool = False
    requires_electrician: bool = False
    sequence_number: Optional[int] = None
    reported_out_date: Optional[datetime] = None
    replaced_date: Optional[datetime] = None
    notes: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "LightingFixture":
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            status=row.get("status") or "functional",
            type=row.get("type") or "standard",
            space_id=row.get("space_id"),
            space_name=row.get("space_name"),
            space_type=row.get("space_type") or "room",
            room_number=row.get("room_number"),
            building_name=row.get("building_name"),
            floor_name=row.get("floor_name"),
            position=row.get("position") or "ceiling",
            technology=row.get("technology"),
            bulb_count=row.get("bulb_count") or 1,
            ballast_issue=bool(row.get("ballast_issue")),
            requires_electrician=bool(row.get("requires_electrician")),
            sequence_number=row.get("sequence_number"),
            reported_out_date=row.get("reported_out_date"),
            replaced_date=row.get("replaced_date"),
            notes=row.get("notes"),
        )

    @property
    def is_functional(self) -> bool:
        return self.status == "functional"


@dataclass(slots=True)
class Personnel:
    id: str
    name: str
    role: str = "Staff"

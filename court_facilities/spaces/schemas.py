"""
Request schemas for rooms, hallways and doors.

A space is a tagged union on ``type``. Create and edit variants share field
sets; only ``building_id`` relaxes to optional when editing.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from court_facilities.errors import ValidationError, pydantic_errors


class RoomType(str, Enum):
    COURTROOM = "courtroom"
    JUDGES_CHAMBERS = "judges_chambers"
    JURY_ROOM = "jury_room"
    CONFERENCE_ROOM = "conference_room"
    OFFICE = "office"
    FILING_ROOM = "filing_room"
    MALE_LOCKER_ROOM = "male_locker_room"
    FEMALE_LOCKER_ROOM = "female_locker_room"
    ROBING_ROOM = "robing_room"
    STAKE_HOLDER = "stake_holder"
    RECORDS_ROOM = "records_room"
    ADMINISTRATIVE_OFFICE = "administrative_office"
    BREAK_ROOM = "break_room"
    IT_ROOM = "it_room"
    UTILITY_ROOM = "utility_room"
    LABORATORY = "laboratory"
    CONFERENCE = "conference"
    CHAMBER = "chamber"


class StorageType(str, Enum):
    FILES = "files"
    SUPPLIES = "supplies"
    FURNITURE = "furniture"
    EQUIPMENT = "equipment"
    GENERAL = "general"


class HallwayType(str, Enum):
    PUBLIC_MAIN = "public_main"
    PRIVATE = "private"
    PRIVATE_MAIN = "private_main"


class HallwaySection(str, Enum):
    LEFT_WING = "left_wing"
    RIGHT_WING = "right_wing"
    CONNECTOR = "connector"


class TrafficFlow(str, Enum):
    ONE_WAY = "one_way"
    TWO_WAY = "two_way"
    RESTRICTED = "restricted"


class Accessibility(str, Enum):
    FULLY_ACCESSIBLE = "fully_accessible"
    LIMITED_ACCESS = "limited_access"
    STAIRS_ONLY = "stairs_only"
    RESTRICTED = "restricted"


class EmergencyRoute(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    NOT_DESIGNATED = "not_designated"


class DoorType(str, Enum):
    STANDARD = "standard"
    EMERGENCY = "emergency"
    SECURE = "secure"
    MAINTENANCE = "maintenance"


class SecurityLevel(str, Enum):
    STANDARD = "standard"
    RESTRICTED = "restricted"
    HIGH_SECURITY = "high_security"


class SpaceConnection(BaseModel):
    to_space_id: str
    connection_type: str = "door"
    direction: Optional[str] = None


class SpaceBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    building_id: str
    floor_id: str
    description: Optional[str] = None
    connections: list[SpaceConnection] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("floor_id")
    @classmethod
    def _floor_required(cls, value: str) -> str:
        if not value:
            raise ValueError("Floor is required")
        return value


# Room type, storage type and the hallway/door attributes other than
# hallway_type/section stay plain strings; unknown values are replaced with
# defaults before the write rather than rejected.
class RoomCreate(SpaceBase):
    type: Literal["room"]
    room_type: str = RoomType.OFFICE.value
    room_number: Optional[str] = None
    current_function: Optional[str] = None
    phone_number: Optional[str] = None
    is_storage: bool = False
    storage_type: Optional[str] = None
    storage_capacity: Optional[int] = Field(default=None, ge=0)
    storage_notes: Optional[str] = None
    parent_room_id: Optional[str] = None

    @model_validator(mode="after")
    def _storage_needs_type(self) -> "RoomCreate":
        if self.is_storage and not self.storage_type:
            raise ValueError("Storage type is required when the room is used for storage")
        return self


class HallwayCreate(SpaceBase):
    type: Literal["hallway"]
    hallway_type: HallwayType = HallwayType.PUBLIC_MAIN
    section: HallwaySection = HallwaySection.CONNECTOR
    traffic_flow: str = TrafficFlow.TWO_WAY.value
    accessibility: str = Accessibility.FULLY_ACCESSIBLE.value
    emergency_route: str = EmergencyRoute.NOT_DESIGNATED.value


class DoorCreate(SpaceBase):
    type: Literal["door"]
    door_type: str = DoorType.STANDARD.value
    security_level: str = SecurityLevel.STANDARD.value


class RoomEdit(RoomCreate):
    building_id: Optional[str] = None


class HallwayEdit(HallwayCreate):
    building_id: Optional[str] = None


class DoorEdit(DoorCreate):
    building_id: Optional[str] = None


AnySpaceCreate = Union[RoomCreate, HallwayCreate, DoorCreate]
AnySpaceEdit = Union[RoomEdit, HallwayEdit, DoorEdit]
SpaceCreate = Annotated[AnySpaceCreate, Field(discriminator="type")]
SpaceEdit = Annotated[AnySpaceEdit, Field(discriminator="type")]

_create_adapter: TypeAdapter = TypeAdapter(SpaceCreate)
_edit_adapter: TypeAdapter = TypeAdapter(SpaceEdit)


def parse_space(data: Any, *, editing: bool = False):
    """Validate a raw payload into the matching create or edit variant."""
    if isinstance(data, SpaceBase):
        return data
    adapter = _edit_adapter if editing else _create_adapter
    try:
        return adapter.validate_python(data)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid space data", errors=pydantic_errors(exc)) from exc

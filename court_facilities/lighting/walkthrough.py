"""
Walkthrough mode: building -> floor -> space -> fixture navigation.

The hierarchy is a nested grouping built once per fixture list. Navigation is
a four-state machine where forward moves go one level down and ``back()``
always goes exactly one level up.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Literal

from court_facilities.db.models import LightingFixture
from court_facilities.errors import BackendError, NavigationError, ValidationError
from court_facilities.lighting.service import LightingService

logger = logging.getLogger(__name__)

ViewState = Literal["buildings", "floors", "spaces", "fixtures"]
FixtureAction = Literal["bulb", "ballast", "fix"]
UNKNOWN_BUILDING = "Unknown Building"
UNKNOWN_FLOOR = "Unknown Floor"
MISSING_SEQUENCE = 999


@dataclass(frozen=True, slots=True)
class SpaceKey:
    id: str
    name: str
    type: str | None

    @property
    def token(self) -> str:
        return json.dumps({"id": self.id, "name": self.name, "type": self.type})

    @classmethod
    def from_token(cls, token: str) -> "SpaceKey":
        try:
            raw = json.loads(token)
            return cls(id=raw["id"], name=raw["name"], type=raw.get("type"))
        except (ValueError, KeyError, TypeError) as exc:
            raise NavigationError(f"Invalid space key: {token!r}") from exc


Hierarchy = dict[str, dict[str, dict[SpaceKey, list[LightingFixture]]]]


def space_key(fixture: LightingFixture) -> SpaceKey:
    space_id = fixture.space_id or f"unknown-{fixture.room_number or 'no-room'}"
    if fixture.space_name:
        name = fixture.space_name
    elif fixture.room_number:
        name = f"Room {fixture.room_number}"
    else:
        name = "Unknown Space"
    return SpaceKey(id=space_id, name=name, type=fixture.space_type)


def build_hierarchy(fixtures: list[LightingFixture]) -> Hierarchy:
    buildings: Hierarchy = {}
    for fixture in fixtures:
        floors = buildings.setdefault(fixture.building_name or UNKNOWN_BUILDING, {})
        spaces = floors.setdefault(fixture.floor_name or UNKNOWN_FLOOR, {})
        spaces.setdefault(space_key(fixture), []).append(fixture)
    return buildings


def _issues(fixtures: list[LightingFixture]) -> int:
    return sum(1 for f in fixtures if not f.is_functional)


class WalkthroughNavigator:
    def __init__(self, fixtures: list[LightingFixture] | None = None) -> None:
        self._fixtures: list[LightingFixture] = []
        self.hierarchy: Hierarchy = {}
        self.state: ViewState = "buildings"
        self.building: str | None = None
        self.floor: str | None = None
        self.space: SpaceKey | None = None
        self.load(fixtures or [])

    def load(self, fixtures: list[LightingFixture]) -> bool:
        """Swap in a refetched fixture list; returns True when the hierarchy was rebuilt."""
        fixtures = list(fixtures)
        if fixtures == self._fixtures and self.hierarchy:
            return False
        self._fixtures = fixtures
        self.hierarchy = build_hierarchy(fixtures)
        return True

    # --- transitions -----------------------------------------------------

    def select_building(self, name: str) -> None:
        self._expect("buildings")
        if name not in self.hierarchy:
            raise NavigationError(f"Unknown building: {name}")
        self.building = name
        self.state = "floors"

    def select_floor(self, name: str) -> None:
        self._expect("floors")
        if name not in self._current_floors():
            raise NavigationError(f"Unknown floor: {name}")
        self.floor = name
        self.state = "spaces"

    def select_space(self, key: SpaceKey | str) -> None:
        self._expect("spaces")
        if isinstance(key, str):
            key = SpaceKey.from_token(key)
        if key not in self._current_spaces():
            raise NavigationError(f"Unknown space: {key.name}")
        self.space = key
        self.state = "fixtures"

    def back(self) -> ViewState:
        if self.state == "fixtures":
            self.space = None
            self.state = "spaces"
        elif self.state == "spaces":
            self.floor = None
            self.state = "floors"
        elif self.state == "floors":
            self.building = None
            self.state = "buildings"
        else:
            raise NavigationError("Already at the top of the walkthrough")
        return self.state

    # --- views -----------------------------------------------------------

    def buildings(self) -> list[dict]:
        return [
            {
                "name": name,
                "floor_count": len(floors),
                "fixture_count": sum(len(f) for spaces in floors.values() for f in spaces.values()),
                "issues": sum(_issues(f) for spaces in floors.values() for f in spaces.values()),
            }
            for name, floors in self.hierarchy.items()
        ]

    def floors(self) -> list[dict]:
        return [
            {
                "name": name,
                "space_count": len(spaces),
                "issues": sum(_issues(f) for f in spaces.values()),
            }
            for name, spaces in self._current_floors().items()
        ]

    def spaces(self) -> list[dict]:
        return [
            {
                "key": key.token,
                "id": key.id,
                "name": key.name,
                "type": key.type,
                "fixture_count": len(fixtures),
                "issues": _issues(fixtures),
            }
            for key, fixtures in self._current_spaces().items()
        ]

    def fixtures(self) -> list[LightingFixture]:
        if self.space is None:
            return []
        found = self._current_spaces().get(self.space, [])
        return sorted(found, key=lambda f: f.sequence_number or MISSING_SEQUENCE)

    def view(self) -> dict:
        items: list = {
            "buildings": self.buildings,
            "floors": self.floors,
            "spaces": self.spaces,
        }.get(self.state, lambda: [])()
        if self.state == "fixtures":
            items = [
                {**_fixture_dict(f), "available_actions": sorted(available_actions(f))}
                for f in self.fixtures()
            ]
        return {
            "state": self.state,
            "building": self.building,
            "floor": self.floor,
            "space": None if self.space is None else {"key": self.space.token, "name": self.space.name},
            "items": items,
        }

    def _current_floors(self) -> dict[str, dict[SpaceKey, list[LightingFixture]]]:
        if self.building is None:
            return {}
        return self.hierarchy.get(self.building, {})

    def _current_spaces(self) -> dict[SpaceKey, list[LightingFixture]]:
        if self.floor is None:
            return {}
        return self._current_floors().get(self.floor, {})

    def _expect(self, state: ViewState) -> None:
        if self.state != state:
            raise NavigationError(f"Cannot do that from the {self.state} view")


def _fixture_dict(fixture: LightingFixture) -> dict:
    return {
        "id": fixture.id,
        "name": fixture.name,
        "status": fixture.status,
        "position": fixture.position,
        "sequence_number": fixture.sequence_number,
        "requires_electrician": fixture.requires_electrician,
        "issue": None if fixture.is_functional else ("ballast" if fixture.requires_electrician else "bulb"),
    }


def available_actions(fixture: LightingFixture) -> set[str]:
    if fixture.is_functional:
        return {"bulb", "ballast"}
    if fixture.requires_electrician:
        return {"fix", "bulb"}
    return {"fix", "ballast"}


def apply_fixture_action(service: LightingService, fixture: LightingFixture, action: str) -> str:
    """Write the status change for ``action``; returns a confirmation message."""
    if action not in available_actions(fixture):
        raise ValidationError(f"Action {action!r} is not available for this fixture")
    try:
        if action == "fix":
            service.mark_lights_fixed([fixture.id])
            return "Marked as fixed"
        if action == "bulb":
            service.mark_lights_out([fixture.id], requires_electrician=False)
            return "Reported bulb issue"
        if fixture.is_functional:
            service.mark_lights_out([fixture.id], requires_electrician=True)
        elif not fixture.requires_electrician:
            service.toggle_electrician_required([fixture.id], True)
        return "Reported ballast/electrician issue"
    except BackendError as exc:
        logger.error("Failed to update fixture %s (%s): %s", fixture.id, action, exc.detail)
        raise BackendError("Failed to update fixture", detail=exc.detail) from exc

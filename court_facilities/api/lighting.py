"""
FastAPI routes for lighting fixtures and walkthrough mode.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from court_facilities.api.deps import get_app_state
from court_facilities.errors import ValidationError
from court_facilities.lighting.walkthrough import WalkthroughNavigator, apply_fixture_action

router = APIRouter(prefix="/lighting", tags=["lighting"])


class FixtureCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    type: str = "standard"
    technology: Optional[str] = None
    bulb_count: int = Field(1, ge=0)
    status: str = "functional"
    ballast_issue: bool = False
    requires_electrician: bool = False
    space_id: Optional[str] = None
    space_type: Optional[str] = None
    position: str = "ceiling"
    room_number: Optional[str] = None
    sequence_number: Optional[int] = None
    notes: Optional[str] = None


class FixtureIdsRequest(BaseModel):
    fixture_ids: list[str] = Field(..., min_length=1)


class FixtureStatusRequest(FixtureIdsRequest):
    operation: Literal["set_status", "mark_out", "mark_fixed", "electrician"]
    status: Optional[str] = None
    requires_electrician: bool = False


@router.get("/fixtures")
async def list_fixtures(
    building_id: Optional[str] = None,
    status: Optional[str] = None,
    state=Depends(get_app_state),
):
    fixtures = await run_in_threadpool(state.lighting.list_fixtures, building_id=building_id, status=status)
    return {"fixtures": [asdict(f) for f in fixtures]}


@router.post("/fixtures", status_code=201)
async def create_fixture(payload: FixtureCreateRequest, state=Depends(get_app_state)):
    return await run_in_threadpool(state.lighting.create_fixture, payload.model_dump())


@router.delete("/fixtures")
async def delete_fixtures(payload: FixtureIdsRequest, state=Depends(get_app_state)):
    deleted = await run_in_threadpool(state.lighting.delete_fixtures, payload.fixture_ids)
    return {"deleted": deleted}


@router.post("/fixtures/status")
async def update_fixture_status(payload: FixtureStatusRequest, state=Depends(get_app_state)):
    """Bulk status change for the selected fixtures."""
    lighting = state.lighting
    ids = payload.fixture_ids
    if payload.operation == "set_status":
        if not payload.status:
            raise ValidationError("status is required for set_status")
        updated = await run_in_threadpool(lighting.update_status, ids, payload.status)
    elif payload.operation == "mark_out":
        updated = await run_in_threadpool(lighting.mark_lights_out, ids, payload.requires_electrician)
    elif payload.operation == "mark_fixed":
        updated = await run_in_threadpool(lighting.mark_lights_fixed, ids)
    else:
        updated = await run_in_threadpool(lighting.toggle_electrician_required, ids, payload.requires_electrician)
    return {"updated": updated}


@router.get("/walkthrough")
async def walkthrough(
    building: Optional[str] = None,
    floor: Optional[str] = None,
    space: Optional[str] = None,
    building_id: Optional[str] = None,
    state=Depends(get_app_state),
):
    """Walkthrough view for the path building -> floor -> space given in the query."""
    fixtures = await run_in_threadpool(state.lighting.list_fixtures, building_id=building_id)
    navigator = WalkthroughNavigator(fixtures)
    if building is not None:
        navigator.select_building(building)
    if floor is not None:
        navigator.select_floor(floor)
    if space is not None:
        navigator.select_space(space)
    return navigator.view()


@router.post("/fixtures/{fixture_id}/actions/{action}")
async def fixture_action(
    fixture_id: str,
    action: Literal["bulb", "ballast", "fix"],
    state=Depends(get_app_state),
):
    lighting = state.lighting
    # Guard against the current row, not a possibly stale listing.
    fixture = await run_in_threadpool(lighting.get_fixture, fixture_id)
    message = await run_in_threadpool(apply_fixture_action, lighting, fixture, action)
    refreshed = await run_in_threadpool(lighting.get_fixture, fixture_id)
    return {"message": message, "fixture": asdict(refreshed)}

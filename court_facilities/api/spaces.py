"""
FastAPI routes for rooms, hallways and doors.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from court_facilities.api.deps import get_app_state
from court_facilities.errors import ValidationError
from court_facilities.spaces.schemas import AnySpaceCreate, AnySpaceEdit
from court_facilities.spaces.templates import SPACE_TEMPLATES

router = APIRouter(prefix="/spaces", tags=["spaces"])

SpaceType = Literal["room", "hallway", "door"]


class QuickCreateRequest(BaseModel):
    template_id: str
    building_id: str
    floor_id: str
    name: Optional[str] = None
    room_number: Optional[str] = None


@router.get("")
async def list_spaces(floor_id: str, state=Depends(get_app_state)):
    rows = await run_in_threadpool(state.spaces.list_spaces, floor_id)
    return {"spaces": rows}


@router.post("", status_code=201)
async def create_space(
    payload: Annotated[AnySpaceCreate, Body(discriminator="type")],
    state=Depends(get_app_state),
):
    return await run_in_threadpool(state.spaces.create_space, payload)


@router.get("/templates")
async def list_templates():
    return {"templates": [template.to_dict() for template in SPACE_TEMPLATES]}


@router.get("/templates/{template_id}/defaults")
async def template_defaults(template_id: str, floor_id: str, state=Depends(get_app_state)):
    """Suggested name and room number for a template on a floor."""
    return await run_in_threadpool(state.quick_spaces.defaults, template_id, floor_id)


@router.post("/quick-create", status_code=201)
async def quick_create(payload: QuickCreateRequest, state=Depends(get_app_state)):
    return await run_in_threadpool(
        state.quick_spaces.quick_create,
        payload.template_id,
        payload.building_id,
        payload.floor_id,
        payload.name,
        payload.room_number,
    )


@router.get("/{space_type}/{space_id}")
async def get_space(space_type: SpaceType, space_id: str, state=Depends(get_app_state)):
    return await run_in_threadpool(state.spaces.get_space, space_type, space_id)


@router.patch("/{space_type}/{space_id}")
async def update_space(
    space_type: SpaceType,
    space_id: str,
    payload: Annotated[AnySpaceEdit, Body(discriminator="type")],
    state=Depends(get_app_state),
):
    if payload.type != space_type:
        raise ValidationError(f"Payload type {payload.type!r} does not match {space_type!r}")
    return await run_in_threadpool(state.spaces.update_space, space_id, payload)


@router.delete("/{space_type}/{space_id}")
async def delete_space(space_type: SpaceType, space_id: str, state=Depends(get_app_state)):
    await run_in_threadpool(state.spaces.delete_space, space_type, space_id)
    return {"deleted": space_id}

"""
FastAPI routes for court sessions and coverage assignments.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from court_facilities.api.deps import get_app_state, get_user_id

sessions_router = APIRouter(prefix="/sessions", tags=["sessions"])
coverage_router = APIRouter(prefix="/coverage", tags=["coverage"])

Period = Literal["AM", "PM", "ALL_DAY"]
BuildingCode = Literal["100", "111"]


class SessionScope(BaseModel):
    session_date: date
    period: Period
    building_code: BuildingCode


class SessionFields(BaseModel):
    status: Optional[str] = None
    status_detail: Optional[str] = None
    estimated_finish_date: Optional[date] = None
    judge_name: Optional[str] = None
    part_number: Optional[str] = None
    clerk_names: Optional[list[str]] = None
    sergeant_name: Optional[str] = None
    calendar_day: Optional[str] = None
    parts_entered_by: Optional[str] = None
    defendants: Optional[str] = None
    purpose: Optional[str] = None
    date_transferred_or_started: Optional[date] = None
    top_charge: Optional[str] = None
    attorney: Optional[str] = None
    notes: Optional[str] = None
    assignment_id: Optional[str] = None


class SessionCreateRequest(SessionScope, SessionFields):
    court_room_id: str


class SessionUpdateRequest(SessionFields):
    period: Optional[Period] = None
    building_code: Optional[BuildingCode] = None
    court_room_id: Optional[str] = None


class BulkSession(BaseModel):
    part_number: str
    judge_name: Optional[str] = None
    room_number: Optional[str] = None
    court_room_id: Optional[str] = None
    clerk_name: Optional[str] = None
    calendar_day: Optional[str] = None
    defendants: Optional[str] = None
    purpose: Optional[str] = None
    transfer_date: Optional[str] = None
    top_charge: Optional[str] = None
    status: Optional[str] = None
    attorney: Optional[str] = None
    estimated_final_date: Optional[str] = None
    part_sent_by: Optional[str] = None


class BulkCreateRequest(SessionScope):
    sessions: list[BulkSession] = Field(..., min_length=1)


class CopyYesterdayRequest(BaseModel):
    from_date: date
    to_date: date
    period: Period
    building_code: BuildingCode


@sessions_router.get("")
async def list_sessions(
    session_date: date,
    period: Period,
    building_code: BuildingCode,
    state=Depends(get_app_state),
):
    rows = await run_in_threadpool(state.sessions.list_sessions, session_date, period, building_code)
    return {"sessions": rows}


@sessions_router.post("", status_code=201)
async def create_session(
    payload: SessionCreateRequest,
    state=Depends(get_app_state),
    user_id=Depends(get_user_id),
):
    return await run_in_threadpool(state.sessions.create_session, payload.model_dump(exclude_none=True), user_id=user_id)


@sessions_router.patch("/{session_id}")
async def update_session(
    session_id: str,
    payload: SessionUpdateRequest,
    state=Depends(get_app_state),
    user_id=Depends(get_user_id),
):
    changes = payload.model_dump(exclude_unset=True)
    return await run_in_threadpool(state.sessions.update_session, session_id, changes, user_id=user_id)


@sessions_router.delete("/{session_id}")
async def delete_session(session_id: str, state=Depends(get_app_state)):
    await run_in_threadpool(state.sessions.delete_session, session_id)
    return {"deleted": session_id}


@sessions_router.post("/bulk")
async def bulk_create_sessions(
    payload: BulkCreateRequest,
    state=Depends(get_app_state),
    user_id=Depends(get_user_id),
):
    return await run_in_threadpool(
        state.sessions.bulk_create,
        [s.model_dump() for s in payload.sessions],
        payload.session_date,
        payload.period,
        payload.building_code,
        user_id=user_id,
    )


@sessions_router.post("/copy-yesterday")
async def copy_yesterday(
    payload: CopyYesterdayRequest,
    state=Depends(get_app_state),
    user_id=Depends(get_user_id),
):
    """Copy one day's sessions for the scope onto another day."""
    copied = await run_in_threadpool(
        state.sessions.copy_yesterday,
        payload.from_date,
        payload.to_date,
        payload.period,
        payload.building_code,
        user_id=user_id,
    )
    return {"copied": copied}


@sessions_router.post("/start-report")
async def start_report(
    payload: SessionScope,
    state=Depends(get_app_state),
    user_id=Depends(get_user_id),
):
    """Seed CALENDAR sessions for every assigned court room."""
    return await run_in_threadpool(
        state.sessions.start_report,
        payload.session_date,
        payload.period,
        payload.building_code,
        user_id=user_id,
    )


# --- Coverage Endpoints ---

StaffRole = Literal["judge", "clerk", "sergeant"]


class CoverageFields(BaseModel):
    absent_staff_name: Optional[str] = None
    covering_staff_name: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    absence_reason: Optional[str] = None
    notes: Optional[str] = None


class CoverageCreateRequest(CoverageFields):
    coverage_date: date
    period: Period
    building_code: BuildingCode
    court_room_id: str
    absent_staff_role: StaffRole = "judge"
    covering_staff_name: str


class CoverageUpdateRequest(CoverageFields):
    court_room_id: Optional[str] = None
    absent_staff_role: Optional[StaffRole] = None


@coverage_router.get("")
async def list_coverages(
    coverage_date: date,
    period: Period,
    building_code: BuildingCode,
    state=Depends(get_app_state),
):
    rows = await run_in_threadpool(state.coverage.list_coverages, coverage_date, period, building_code)
    return {"coverages": rows}


@coverage_router.post("", status_code=201)
async def create_coverage(payload: CoverageCreateRequest, state=Depends(get_app_state)):
    return await run_in_threadpool(state.coverage.create_coverage, payload.model_dump())


@coverage_router.patch("/{coverage_id}")
async def update_coverage(coverage_id: str, payload: CoverageUpdateRequest, state=Depends(get_app_state)):
    changes = payload.model_dump(exclude_unset=True)
    return await run_in_threadpool(state.coverage.update_coverage, coverage_id, changes)


@coverage_router.delete("/{coverage_id}")
async def delete_coverage(coverage_id: str, state=Depends(get_app_state)):
    await run_in_threadpool(state.coverage.delete_coverage, coverage_id)
    return {"deleted": coverage_id}


@coverage_router.get("/rooms")
async def coverage_rooms(building_code: BuildingCode, state=Depends(get_app_state)):
    """Active court rooms with their standing assignment, for the room picker."""
    entries = await run_in_threadpool(state.rooms.rooms_with_assignments, building_code)
    return {"rooms": [entry.to_dict() for entry in entries]}


@coverage_router.get("/personnel")
async def search_personnel(q: str = Query("", description="Name fragment."), state=Depends(get_app_state)):
    people = await run_in_threadpool(state.coverage.search_personnel, q)
    return {"personnel": [asdict(person) for person in people]}

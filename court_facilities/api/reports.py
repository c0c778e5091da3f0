"""
FastAPI routes for daily report upload and extraction review.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from court_facilities.api.court import BuildingCode, Period
from court_facilities.api.deps import get_app_state, get_user_id
from court_facilities.court.extracted import ExtractedCase
from court_facilities.errors import ValidationError

router = APIRouter(prefix="/reports", tags=["reports"])


class SelectRequest(BaseModel):
    mode: Literal["all", "high_confidence", "none", "toggle"]
    index: Optional[int] = None


class PartEditRequest(BaseModel):
    part: Optional[str] = None
    judge: Optional[str] = None
    calendar_day: Optional[str] = None
    room_number: Optional[str] = None
    out_dates: Optional[list[str]] = None
    cases: Optional[list[ExtractedCase]] = None


class AssignRoomRequest(BaseModel):
    courtroom_id: str
    room_number: Optional[str] = None


class AcceptRequest(BaseModel):
    only_high_confidence: bool = False


@router.post("/upload", status_code=201)
async def upload_report(
    file: UploadFile = File(...),
    session_date: date = Form(...),
    period: Period = Form(...),
    building_code: BuildingCode = Form(...),
    state=Depends(get_app_state),
):
    """Upload a daily report PDF, extract its parts and stage them for review."""
    data = await file.read()
    review = await run_in_threadpool(
        state.pipeline.ingest_report,
        file.filename or "report.pdf",
        file.content_type,
        data,
        session_date=session_date,
        period=period,
        building_code=building_code,
    )
    return review.to_dict()


@router.get("/reviews/{review_id}")
async def get_review(review_id: str, state=Depends(get_app_state)):
    return state.reviews.get(review_id).to_dict()


@router.post("/reviews/{review_id}/select")
async def select_parts(review_id: str, payload: SelectRequest, state=Depends(get_app_state)):
    review = state.reviews.get(review_id)
    if payload.mode == "all":
        review.select_all()
    elif payload.mode == "high_confidence":
        review.select_high_confidence()
    elif payload.mode == "none":
        review.deselect_all()
    else:
        if payload.index is None:
            raise ValidationError("index is required to toggle a part")
        review.toggle(payload.index)
    return review.to_dict()


@router.patch("/reviews/{review_id}/parts/{index}")
async def edit_part(review_id: str, index: int, payload: PartEditRequest, state=Depends(get_app_state)):
    review = state.reviews.get(review_id)
    fields = {name: getattr(payload, name) for name in payload.model_fields_set}
    review.edit_part(index, **fields)
    return review.to_dict()


@router.delete("/reviews/{review_id}/parts/{index}")
async def remove_part(review_id: str, index: int, state=Depends(get_app_state)):
    review = state.reviews.get(review_id)
    review.remove_part(index)
    return review.to_dict()


@router.post("/reviews/{review_id}/parts/{index}/room")
async def assign_room(review_id: str, index: int, payload: AssignRoomRequest, state=Depends(get_app_state)):
    """Manually map a part to a court room."""
    review = state.reviews.get(review_id)
    review.assign_room(index, payload.courtroom_id, payload.room_number)
    return review.to_dict()


@router.post("/reviews/{review_id}/accept")
async def accept_review(
    review_id: str,
    payload: AcceptRequest,
    state=Depends(get_app_state),
    user_id=Depends(get_user_id),
):
    return await run_in_threadpool(
        state.pipeline.accept_review,
        review_id,
        only_high_confidence=payload.only_high_confidence,
        user_id=user_id,
    )


@router.delete("/reviews/{review_id}")
async def discard_review(review_id: str, state=Depends(get_app_state)):
    state.reviews.get(review_id)
    state.reviews.discard(review_id)
    return {"discarded": review_id}

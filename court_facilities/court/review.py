"""
Operator review of extracted parts before they become court sessions.

Selection rules:

* a part is pre-selected iff its confidence is at or above the high-confidence
  threshold (0.85 by default);
* only parts with ``mapping_status == "found"`` can be imported. An unmapped
  part stays out of every import, whatever its confidence, until a room is
  assigned with :meth:`ExtractionReview.assign_room`.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from datetime import date
from typing import Any, Iterable
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from court_facilities.court.extracted import ExtractedPart, ReportHeader
from court_facilities.court.validation import HIGH_CONFIDENCE_THRESHOLD, validate_part
from court_facilities.errors import ExtractionError, NotFoundError, ValidationError, pydantic_errors

logger = logging.getLogger(__name__)

LOW_CONFIDENCE_THRESHOLD = 0.8
EDITABLE_FIELDS = frozenset({"part", "judge", "calendar_day", "room_number", "out_dates", "cases"})
JOIN = "; "


def confidence_label(confidence: float) -> str:
    if confidence >= 0.9:
        return "High"
    if confidence >= 0.7:
        return "Medium"
    return "Low"


def _joined(values: Iterable[str], *, unique: bool) -> str | None:
    picked: list[str] = []
    for value in values:
        value = (value or "").strip()
        if not value or (unique and value in picked):
            continue
        picked.append(value)
    return JOIN.join(picked) or None


def _first(values: Iterable[str]) -> str | None:
    for value in values:
        if value and value.strip():
            return value.strip()
    return None


def aggregate_part(part: ExtractedPart) -> dict[str, Any]:
    """Collapse a part's case rows into one session payload."""
    cases = part.cases
    return {
        "part_number": part.part,
        "judge_name": part.judge,
        "room_number": part.room_number,
        "court_room_id": part.courtroom_id,
        "calendar_day": part.calendar_day or None,
        "defendants": _joined((c.defendant for c in cases), unique=False),
        "top_charge": _joined((c.top_charge for c in cases), unique=False),
        "attorney": _joined((c.attorney for c in cases), unique=True),
        "part_sent_by": _joined((c.sending_part for c in cases), unique=True),
        "purpose": _joined((c.purpose for c in cases), unique=True),
        "status": _joined((c.status for c in cases), unique=True),
        "transfer_date": _first(c.transfer_date for c in cases),
        "estimated_final_date": _first(c.estimated_final_date for c in cases),
    }


class ExtractionReview:
    """Staged parts from one uploaded report, plus the operator's selection."""

    def __init__(
        self,
        parts: Iterable[ExtractedPart],
        *,
        session_date: date,
        period: str,
        building_code: str,
        header: ReportHeader | None = None,
        file_path: str | None = None,
        available_rooms: dict[str, str | None] | None = None,
        threshold: float = HIGH_CONFIDENCE_THRESHOLD,
        review_id: str | None = None,
    ) -> None:
        self.id = review_id or uuid4().hex
        self.parts = list(parts)
        self.session_date = session_date
        self.period = period
        self.building_code = building_code
        self.header = header or ReportHeader()
        self.file_path = file_path
        self.available_rooms = dict(available_rooms or {})
        self.threshold = threshold
        self.selected: set[int] = set()
        self.select_high_confidence()

    # --- selection -------------------------------------------------------

    def select_all(self) -> None:
        self.selected = set(range(len(self.parts)))

    def select_high_confidence(self) -> None:
        self.selected = {i for i, part in enumerate(self.parts) if part.confidence >= self.threshold}

    def deselect_all(self) -> None:
        self.selected = set()

    def toggle(self, index: int) -> bool:
        self._check_index(index)
        if index in self.selected:
            self.selected.discard(index)
            return False
        self.selected.add(index)
        return True

    # --- edits -----------------------------------------------------------

    def edit_part(self, index: int, **fields: Any) -> ExtractedPart:
        self._check_index(index)
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        try:
            updated = ExtractedPart.model_validate({**self.parts[index].model_dump(), **fields})
        except PydanticValidationError as exc:
            raise ValidationError("Invalid part edit", errors=pydantic_errors(exc)) from exc
        self.parts[index] = validate_part(updated, threshold=self.threshold)
        return self.parts[index]

    def assign_room(self, index: int, courtroom_id: str, room_number: str | None = None) -> ExtractedPart:
        """Record a manual room choice; this is what unblocks an unmapped part."""
        self._check_index(index)
        if self.available_rooms:
            if courtroom_id not in self.available_rooms:
                raise ValidationError("Selected room is not a court room in this building")
            room_number = room_number or self.available_rooms[courtroom_id]
        updated = self.parts[index].model_copy(
            update={
                "courtroom_id": courtroom_id,
                "room_number": room_number,
                "mapping_status": "found",
                "mapping_message": None,
            },
            deep=True,
        )
        self.parts[index] = validate_part(updated, threshold=self.threshold)
        logger.info("Review %s: part %r assigned to room %s", self.id, updated.part, room_number)
        return self.parts[index]

    def remove_part(self, index: int) -> None:
        self._check_index(index)
        del self.parts[index]
        self.selected = {i if i < index else i - 1 for i in self.selected if i != index}

    # --- derived ---------------------------------------------------------

    def importable_indices(self) -> list[int]:
        return sorted(i for i in self.selected if self.parts[i].is_mapped)

    def high_confidence_importable(self) -> list[int]:
        return [i for i in self.importable_indices() if self.parts[i].confidence >= self.threshold]

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.parts),
            "selected": len(self.selected),
            "mapped": sum(1 for p in self.parts if p.mapping_status == "found"),
            "unmapped": sum(1 for p in self.parts if p.mapping_status == "not_found"),
            "low_confidence_mapping": sum(1 for p in self.parts if p.mapping_status == "low_confidence"),
            "needs_review": sum(1 for p in self.parts if p.confidence < LOW_CONFIDENCE_THRESHOLD),
            "importable": len(self.importable_indices()),
            "high_confidence_importable": len(self.high_confidence_importable()),
        }

    def accept(self, *, only_high_confidence: bool = False) -> list[dict[str, Any]]:
        """Session payloads for the parts that may be imported."""
        if not self.parts:
            raise ExtractionError("No sessions extracted from the document.")
        indices = self.high_confidence_importable() if only_high_confidence else self.importable_indices()
        if not indices:
            raise ValidationError("Select at least one part with a mapped courtroom to import.")
        blocked = sorted(i for i in self.selected if not self.parts[i].is_mapped)
        if blocked:
            logger.info("Review %s: %d selected parts still need a room", self.id, len(blocked))
        return [aggregate_part(self.parts[i]) for i in indices]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "session_date": self.session_date.isoformat(),
            "period": self.period,
            "building_code": self.building_code,
            "header": self.header.model_dump(),
            "file_path": self.file_path,
            "threshold": self.threshold,
            "summary": self.summary(),
            "available_rooms": [
                {"id": room_id, "room_number": number} for room_id, number in self.available_rooms.items()
            ],
            "parts": [
                {
                    **part.model_dump(),
                    "index": index,
                    "selected": index in self.selected,
                    "confidence_label": confidence_label(part.confidence),
                }
                for index, part in enumerate(self.parts)
            ],
        }

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.parts):
            raise NotFoundError(f"No extracted part at index {index}")


class ReviewStore:
    """In-process holding area for reviews awaiting an operator decision."""

    def __init__(self, max_reviews: int = 100) -> None:
        self.max_reviews = max_reviews
        self._reviews: OrderedDict[str, ExtractionReview] = OrderedDict()
        self._lock = threading.Lock()

    def put(self, review: ExtractionReview) -> ExtractionReview:
        with self._lock:
            self._reviews[review.id] = review
            self._reviews.move_to_end(review.id)
            while len(self._reviews) > self.max_reviews:
                dropped, _ = self._reviews.popitem(last=False)
                logger.warning("Dropped stale review %s", dropped)
        return review

    def get(self, review_id: str) -> ExtractionReview:
        with self._lock:
            review = self._reviews.get(review_id)
        if review is None:
            raise NotFoundError("Review not found or already completed.")
        return review

    def discard(self, review_id: str) -> None:
        with self._lock:
            self._reviews.pop(review_id, None)

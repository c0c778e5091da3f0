"""
Sanity checks applied to extracted parts before they reach review.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from court_facilities.court.extracted import ExtractedPart

HIGH_CONFIDENCE_THRESHOLD = 0.85
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y", "%m-%d-%y", "%m-%d-%Y", "%m/%d")


def parse_report_date(value: str) -> datetime | None:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt)
        except ValueError:
            continue
    return None


def validate_part(part: ExtractedPart, *, threshold: float = HIGH_CONFIDENCE_THRESHOLD) -> ExtractedPart:
    """Return a copy of ``part`` with warnings, clamped confidence and needs_review set."""
    warnings: list[str] = []
    confidence = part.confidence
    if not 0.0 <= confidence <= 1.0:
        warnings.append(f"Confidence {confidence} outside [0, 1]")
        confidence = min(max(confidence, 0.0), 1.0)

    if not part.part.strip():
        warnings.append("Missing part number")
    if not part.judge.strip():
        warnings.append("Missing judge name")
    if not part.cases:
        warnings.append("No cases listed for this part")

    for out_date in part.out_dates:
        if out_date and parse_report_date(out_date) is None:
            warnings.append(f"Unreadable OUT date {out_date!r}")
    for index, case in enumerate(part.cases, start=1):
        for label, value in (
            ("transfer date", case.transfer_date),
            ("estimated final date", case.estimated_final_date),
        ):
            if value and parse_report_date(value) is None:
                warnings.append(f"Case {index}: unreadable {label} {value!r}")

    needs_review = bool(warnings) or confidence < threshold or part.mapping_status != "found"
    return part.model_copy(
        update={"confidence": confidence, "warnings": warnings, "needs_review": needs_review}
    )


def validate_parts(
    parts: Iterable[ExtractedPart], *, threshold: float = HIGH_CONFIDENCE_THRESHOLD
) -> list[ExtractedPart]:
    return [validate_part(part, threshold=threshold) for part in parts]

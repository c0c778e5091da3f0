"""
Staging shapes for sessions extracted from a daily report PDF.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

MappingStatus = Literal["found", "not_found", "low_confidence"]


class ExtractedCase(BaseModel):
    sending_part: str = ""
    defendant: str = ""
    purpose: str = ""
    transfer_date: str = ""
    top_charge: str = ""
    status: str = ""
    calendar_date: str = ""
    case_count: int = 0
    attorney: str = ""
    estimated_final_date: str = ""
    indictment_number: str = ""
    is_juvenile: bool = False


class ExtractedPart(BaseModel):
    part: str = ""
    judge: str = ""
    calendar_day: str = ""
    out_dates: list[str] = Field(default_factory=list)
    room_number: Optional[str] = None
    cases: list[ExtractedCase] = Field(default_factory=list)
    confidence: float = 0.85
    courtroom_id: Optional[str] = None
    mapping_status: MappingStatus = "not_found"
    mapping_message: Optional[str] = None
    needs_review: bool = False
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_mapped(self) -> bool:
        return self.mapping_status == "found"


class ReportHeader(BaseModel):
    report_date: Optional[str] = None
    building: Optional[str] = None
    report_type: Optional[str] = None

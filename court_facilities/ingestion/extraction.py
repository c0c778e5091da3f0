"""
Client for the external PDF extraction function.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from court_facilities.config import Settings
from court_facilities.court.extracted import ExtractedCase, ExtractedPart, ReportHeader
from court_facilities.errors import ExtractionError

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "AI extraction not configured. Please contact an administrator."
RATE_LIMITED = "Rate limit exceeded. Please try again in a moment."
CREDITS_EXHAUSTED = "AI credits exhausted. Please contact an administrator."
NOTHING_EXTRACTED = "No court sessions could be extracted from the document."
GENERIC_FAILURE = "Failed to extract data from document."
DEFAULT_CONFIDENCE = 0.85


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def normalize_case(raw: dict[str, Any]) -> ExtractedCase:
    case_count = raw.get("case_count")
    return ExtractedCase(
        sending_part=_text(raw.get("sending_part")),
        defendant=_text(raw.get("defendant")),
        purpose=_text(raw.get("purpose")),
        transfer_date=_text(raw.get("transfer_date")),
        top_charge=_text(raw.get("top_charge")),
        status=_text(raw.get("status")),
        calendar_date=_text(raw.get("calendar_date")),
        case_count=case_count if isinstance(case_count, int) and not isinstance(case_count, bool) else 0,
        attorney=_text(raw.get("attorney")),
        estimated_final_date=_text(raw.get("estimated_final_date")),
        indictment_number=_text(raw.get("indictment_number")),
        is_juvenile=bool(raw.get("is_juvenile")),
    )


def normalize_entry(raw: dict[str, Any]) -> ExtractedPart:
    confidence = raw.get("confidence")
    if not isinstance(confidence, (int, float)) or isinstance(confidence, bool):
        confidence = DEFAULT_CONFIDENCE
    out_dates = raw.get("out_dates")
    cases = raw.get("cases")
    return ExtractedPart(
        part=_text(raw.get("part")),
        judge=_text(raw.get("judge")),
        calendar_day=_text(raw.get("calendar_day")),
        out_dates=[_text(d) for d in out_dates] if isinstance(out_dates, list) else [],
        room_number=_text(raw.get("room_number")) or None,
        cases=[normalize_case(c) for c in cases if isinstance(c, dict)] if isinstance(cases, list) else [],
        confidence=float(confidence),
    )


class ExtractionClient:
    """Invokes the parse-pdf function for a stored report and normalises its output."""

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None) -> None:
        self.settings = settings
        self.transport = transport

    def extract(self, file_path: str) -> tuple[ReportHeader, list[ExtractedPart]]:
        if not self.settings.extraction_function_url or not self.settings.extraction_api_key:
            logger.error("Extraction function URL or key not configured")
            raise ExtractionError(NOT_CONFIGURED)

        data = self._invoke(file_path)
        if not data.get("success"):
            logger.warning("Extraction reported failure for %s: %s", file_path, data.get("error"))
            raise ExtractionError(NOTHING_EXTRACTED, detail=_text(data.get("error")))

        extracted = data.get("extracted_data") or {}
        entries = extracted.get("entries")
        if not isinstance(entries, list) or not entries:
            raise ExtractionError(NOTHING_EXTRACTED)

        header = ReportHeader(
            report_date=extracted.get("report_date"),
            building=extracted.get("building"),
            report_type=extracted.get("report_type"),
        )
        parts = [normalize_entry(entry) for entry in entries if isinstance(entry, dict)]
        if not parts:
            raise ExtractionError(NOTHING_EXTRACTED)
        logger.info(
            "Extracted %d parts (%d cases) from %s",
            len(parts),
            sum(len(p.cases) for p in parts),
            file_path,
        )
        return header, parts

    def _invoke(self, file_path: str) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.settings.extraction_api_key}",
            "Content-Type": "application/json",
        }
        logger.debug("Invoking extraction function at %s", self.settings.extraction_function_url)
        try:
            with httpx.Client(timeout=self.settings.extraction_timeout, transport=self.transport) as client:
                response = client.post(
                    self.settings.extraction_function_url,
                    headers=headers,
                    json={"filePath": file_path},
                )
        except httpx.HTTPError as exc:
            logger.error("Extraction request failed: %s", exc)
            raise ExtractionError(GENERIC_FAILURE, detail=str(exc)) from exc

        if response.status_code == 429:
            raise ExtractionError(RATE_LIMITED)
        if response.status_code == 402:
            raise ExtractionError(CREDITS_EXHAUSTED)

        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            logger.error("Extraction returned non-JSON body (status %s)", response.status_code)
            raise ExtractionError(GENERIC_FAILURE, detail=response.text[:200]) from exc

        if not isinstance(data, dict):
            raise ExtractionError(GENERIC_FAILURE)
        if response.status_code == 422:
            raise ExtractionError(NOTHING_EXTRACTED, detail=_text(data.get("error")))
        if response.status_code >= 400:
            logger.error("Extraction failed with status %s: %s", response.status_code, data.get("error"))
            raise ExtractionError(GENERIC_FAILURE, detail=_text(data.get("error")))
        return data

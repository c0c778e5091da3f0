"""
End-to-end ingestion of a daily report: PDF upload to staged review to sessions.
"""

from __future__ import annotations

import logging
from datetime import date

from court_facilities.config import Settings
from court_facilities.court.mapping import CourtroomMapper
from court_facilities.court.review import ExtractionReview, ReviewStore
from court_facilities.court.rooms import CourtRoomDirectory
from court_facilities.court.sessions import CourtSessionService, check_scope
from court_facilities.court.validation import validate_parts
from court_facilities.db.gateway import TableGateway, translate_errors
from court_facilities.errors import BackendError
from court_facilities.ingestion.extraction import ExtractionClient
from court_facilities.ingestion.upload import StorageClient, storage_path, validate_upload

logger = logging.getLogger(__name__)


class ReportIngestionPipeline:
    def __init__(
        self,
        settings: Settings,
        gateway: TableGateway,
        storage: StorageClient,
        extractor: ExtractionClient,
        rooms: CourtRoomDirectory,
        sessions: CourtSessionService,
        reviews: ReviewStore,
    ) -> None:
        self.settings = settings
        self.gateway = gateway
        self.storage = storage
        self.extractor = extractor
        self.rooms = rooms
        self.sessions = sessions
        self.reviews = reviews

    def ingest_report(
        self,
        filename: str,
        content_type: str | None,
        data: bytes,
        *,
        session_date: date,
        period: str,
        building_code: str,
    ) -> ExtractionReview:
        """Run upload -> extract -> map -> validate and stage the result for review.

        Each stage raises on failure, which aborts the rest of the chain.
        """
        check_scope(period, building_code)
        upload = validate_upload(filename, content_type, data, max_bytes=self.settings.max_upload_bytes)
        logger.info("Accepted %s (%d bytes, %d pages)", upload.filename, upload.size, upload.page_count)

        file_path = self.storage.upload(storage_path(upload.filename, session_date), upload.data, upload.content_type)
        header, parts = self.extractor.extract(file_path)

        mapper = CourtroomMapper.for_building(self.rooms, building_code)
        parts = mapper.map_parts(parts)
        parts = validate_parts(parts, threshold=self.settings.high_confidence_threshold)

        review = ExtractionReview(
            parts,
            session_date=session_date,
            period=period,
            building_code=building_code,
            header=header,
            file_path=file_path,
            available_rooms={entry.room.id: entry.room.room_number for entry in mapper.rooms},
            threshold=self.settings.high_confidence_threshold,
        )
        self.reviews.put(review)
        summary = review.summary()
        logger.info(
            "Staged review %s: %d parts, %d mapped, %d unmapped",
            review.id,
            summary["total"],
            summary["mapped"],
            summary["unmapped"],
        )
        return review

    def accept_review(
        self,
        review_id: str,
        *,
        only_high_confidence: bool = False,
        user_id: str | None = None,
    ) -> dict:
        review = self.reviews.get(review_id)
        payloads = review.accept(only_high_confidence=only_high_confidence)
        result = self.sessions.bulk_create(
            payloads,
            review.session_date,
            review.period,
            review.building_code,
            user_id=user_id,
        )
        self._record_report(review, imported=result["inserted"])
        self.reviews.discard(review_id)
        return result

    def _record_report(self, review: ExtractionReview, *, imported: int) -> None:
        record = {
            "report_date": review.header.report_date or review.session_date.isoformat(),
            "report_type": review.header.report_type or review.period,
            "building": review.header.building or review.building_code,
            "pdf_file_path": review.file_path,
            "parts_extracted": len(review.parts),
            "total_cases": sum(len(part.cases) for part in review.parts),
        }
        try:
            with translate_errors("Failed to record report"):
                self.gateway.insert("court_reports", record)
            logger.info("Recorded report %s: %d sessions imported", review.file_path, imported)
        except BackendError:
            # Sessions are already committed at this point.
            logger.warning("Report audit row not written for review %s", review.id)

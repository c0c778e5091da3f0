"""
Court operations: sessions, coverage, courtroom mapping and extraction review.
"""

from .coverage import CoverageService
from .mapping import CourtroomMapper
from .review import ExtractionReview, ReviewStore, aggregate_part
from .rooms import CourtRoomDirectory
from .sessions import CourtSessionService

__all__ = [
    "CourtRoomDirectory",
    "CourtSessionService",
    "CourtroomMapper",
    "CoverageService",
    "ExtractionReview",
    "ReviewStore",
    "aggregate_part",
]

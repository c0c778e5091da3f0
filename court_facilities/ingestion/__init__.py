"""
Daily report ingestion: upload checks, storage, extraction and staging.
"""

from .extraction import ExtractionClient
from .pipeline import ReportIngestionPipeline
from .upload import StorageClient, UploadedReport, validate_upload

__all__ = [
    "ExtractionClient",
    "ReportIngestionPipeline",
    "StorageClient",
    "UploadedReport",
    "validate_upload",
]

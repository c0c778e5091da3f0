"""
Upload checks and storage for daily report PDFs.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from uuid import uuid4

import httpx
from PyPDF2 import PdfReader

from court_facilities.config import Settings
from court_facilities.errors import BackendError, ValidationError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(slots=True)
class UploadedReport:
    filename: str
    content_type: str
    data: bytes
    page_count: int

    @property
    def size(self) -> int:
        return len(self.data)


def validate_upload(
    filename: str,
    content_type: str | None,
    data: bytes,
    *,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> UploadedReport:
    """Reject anything that is not a readable PDF of at most ``max_bytes``."""
    if content_type != PDF_MIME_TYPE:
        raise ValidationError("Invalid file type. Please upload a PDF file.")
    if len(data) > max_bytes:
        raise ValidationError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.")
    if not data:
        raise ValidationError("File is empty.")

    # PyPDF2 raises arbitrary exception types on malformed structure.
    try:
        reader = PdfReader(io.BytesIO(data))
        encrypted = reader.is_encrypted
        page_count = 0 if encrypted else len(reader.pages)
    except Exception as exc:
        logger.warning("Unreadable PDF %s: %s", filename, exc)
        raise ValidationError("Could not read PDF file.", detail=str(exc)) from exc
    if encrypted:
        raise ValidationError("Could not read PDF file.", detail="encrypted")
    if page_count == 0:
        raise ValidationError("Could not read PDF file.", detail="no pages")

    return UploadedReport(filename=filename or "report.pdf", content_type=content_type, data=data, page_count=page_count)


def storage_path(filename: str, report_date: date) -> str:
    safe_name = _UNSAFE_CHARS_RE.sub("_", Path(filename).name) or "report.pdf"
    return f"{report_date.isoformat()}/{uuid4().hex}-{safe_name}"


class StorageClient:
    """Uploads report files to the storage bucket, or to a local folder when none is configured."""

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None) -> None:
        self.settings = settings
        self.transport = transport

    def upload(self, path: str, data: bytes, content_type: str = PDF_MIME_TYPE) -> str:
        if self.settings.storage_url:
            return self._upload_remote(path, data, content_type)
        return self._write_local(path, data)

    def _upload_remote(self, path: str, data: bytes, content_type: str) -> str:
        url = f"{self.settings.storage_url.rstrip('/')}/object/{self.settings.storage_bucket}/{path}"
        headers = {"Content-Type": content_type}
        if self.settings.storage_api_key:
            headers["Authorization"] = f"Bearer {self.settings.storage_api_key}"
        logger.debug("Uploading %d bytes to %s", len(data), url)
        try:
            with httpx.Client(timeout=60, transport=self.transport) as client:
                response = client.put(url, content=data, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Storage upload failed for %s: %s", path, exc)
            raise BackendError("Failed to upload report", detail=str(exc)) from exc
        return path

    def _write_local(self, path: str, data: bytes) -> str:
        target = Path(self.settings.local_storage_dir) / self.settings.storage_bucket / path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            logger.error("Could not write %s: %s", target, exc)
            raise BackendError("Failed to upload report", detail=str(exc)) from exc
        logger.info("Stored report at %s", target)
        return path

"""Upload record data model for the simulated transcription lifecycle."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(value: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class UploadStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadStatus.COMPLETED, UploadStatus.FAILED)


class UploadRecord(BaseModel):
    """Tracks the lifecycle of one submitted audio file."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    filename: str
    mime_type: str
    size: int
    metadata: Dict[str, Any] = Field(default_factory=dict)
    status: UploadStatus = UploadStatus.QUEUED
    progress: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    completes_at: datetime
    will_fail: bool = False
    completed_at: Optional[datetime] = None
    transcript: Optional[str] = None
    error: Optional[str] = None

    def to_status_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "uploadId": self.id,
            "status": self.status.value,
            "progress": self.progress,
            "filename": self.filename,
            "metadata": self.metadata,
            "createdAt": isoformat(self.created_at),
        }
        if self.status == UploadStatus.COMPLETED:
            body["transcript"] = self.transcript
            body["completedAt"] = isoformat(self.completed_at)
        if self.status == UploadStatus.FAILED:
            body["error"] = self.error
        return body

    def summary(self) -> "UploadSummary":
        return UploadSummary(
            id=self.id,
            filename=self.filename,
            status=self.status,
            progress=self.progress,
            created_at=self.created_at,
        )


class UploadSummary(BaseModel):
    """Listing view of an upload."""
    id: str
    filename: str
    status: UploadStatus
    progress: int
    created_at: datetime

    def to_body(self) -> Dict[str, Any]:
        return {
            "uploadId": self.id,
            "filename": self.filename,
            "status": self.status.value,
            "progress": self.progress,
            "createdAt": isoformat(self.created_at),
        }

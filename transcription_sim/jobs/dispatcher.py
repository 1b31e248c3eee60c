"""Upload engine interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from transcription_sim.jobs.models import UploadRecord, UploadSummary


class UploadEngine(ABC):
    """Abstract interface for the upload lifecycle (in-process or otherwise)."""

    @abstractmethod
    async def create(
        self, filename: str, mime_type: str, size: int, metadata: Optional[Dict[str, Any]] = None
    ) -> UploadRecord:
        """Register an accepted upload and schedule its processing. Returns a snapshot."""
        ...

    @abstractmethod
    async def get(self, upload_id: str) -> Optional[UploadRecord]:
        """Snapshot of an upload, or None if unknown."""
        ...

    @abstractmethod
    async def list(self) -> List[UploadSummary]:
        ...

    @abstractmethod
    async def remove(self, upload_id: str) -> bool:
        """Drop an upload and stop its processing. Returns False if unknown."""
        ...

    @abstractmethod
    async def start(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop all in-flight processing."""
        ...

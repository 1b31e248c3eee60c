"""In-process upload lifecycle engine using asyncio.

Each accepted upload gets its own background task that re-evaluates elapsed
time on a fixed tick, advances progress, and applies the outcome drawn at
creation time once progress reaches 100.
"""

import asyncio
import logging
import math
import threading
import time
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from transcription_sim.config import Settings
from transcription_sim.jobs.dispatcher import UploadEngine
from transcription_sim.jobs.models import UploadRecord, UploadStatus, UploadSummary, utcnow
from transcription_sim.jobs.randomizer import OutcomeRandomizer
from transcription_sim.jobs.transcript import generate_transcript

logger = logging.getLogger(__name__)

PROCESSING_ERROR = "Transcription failed: Unable to process audio"

# Uploads stay "queued" until progress passes this percentage.
QUEUED_THRESHOLD = 5


def compute_progress(elapsed: float, total: float) -> int:
    """Percentage of total elapsed, rounded half up and clamped to [0, 100]."""
    if total <= 0:
        return 100
    return max(0, min(100, math.floor(100 * elapsed / total + 0.5)))


class InProcessLifecycleEngine(UploadEngine):
    """Local upload engine. One asyncio task per upload advances its progress."""

    def __init__(
        self,
        randomizer: OutcomeRandomizer,
        min_processing_time_ms: int = 5000,
        max_processing_time_ms: int = 20000,
        processing_failure_rate: float = 0.1,
        tick_seconds: float = 1.0,
        transcript_sentences: Tuple[int, int] = (3, 7),
        clock: Callable[[], float] = time.monotonic,
    ):
        self._records: Dict[str, UploadRecord] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._lock = threading.Lock()
        self._randomizer = randomizer
        self._min_ms = min_processing_time_ms
        self._max_ms = max_processing_time_ms
        self._failure_rate = processing_failure_rate
        self._tick_seconds = tick_seconds
        self._transcript_sentences = transcript_sentences
        self._clock = clock

    @classmethod
    def from_settings(cls, config: Settings, randomizer: OutcomeRandomizer) -> "InProcessLifecycleEngine":
        return cls(
            randomizer,
            min_processing_time_ms=config.min_processing_time_ms,
            max_processing_time_ms=config.max_processing_time_ms,
            processing_failure_rate=config.processing_failure_rate,
            tick_seconds=config.tick_seconds,
            transcript_sentences=(config.transcript_min_sentences, config.transcript_max_sentences),
        )

    async def create(
        self, filename: str, mime_type: str, size: int, metadata: Optional[Dict[str, Any]] = None
    ) -> UploadRecord:
        total_ms = self._randomizer.rng.uniform(self._min_ms, self._max_ms)
        will_fail = self._randomizer.should_fail(self._failure_rate)

        started = self._clock()
        created_at = utcnow()
        record = UploadRecord(
            filename=filename,
            mime_type=mime_type,
            size=size,
            metadata=dict(metadata or {}),
            created_at=created_at,
            completes_at=created_at + timedelta(milliseconds=total_ms),
            will_fail=will_fail,
        )

        with self._lock:
            self._records[record.id] = record
            snapshot = record.model_copy(deep=True)

        task = asyncio.create_task(self._advance(record.id, total_ms / 1000.0, started))
        self._tasks[record.id] = task
        task.add_done_callback(lambda _t, upload_id=record.id: self._tasks.pop(upload_id, None))

        logger.info(
            "Upload %s queued: %s (%s, %d bytes), completes in %.1fs",
            record.id, filename, mime_type, size, total_ms / 1000.0,
        )
        return snapshot

    async def get(self, upload_id: str) -> Optional[UploadRecord]:
        with self._lock:
            record = self._records.get(upload_id)
            return record.model_copy(deep=True) if record is not None else None

    async def list(self) -> List[UploadSummary]:
        with self._lock:
            return [record.summary() for record in self._records.values()]

    async def remove(self, upload_id: str) -> bool:
        with self._lock:
            record = self._records.pop(upload_id, None)
        task = self._tasks.pop(upload_id, None)
        if task is not None:
            task.cancel()
        return record is not None

    async def start(self) -> None:
        logger.info(
            "Lifecycle engine started (processing %d-%dms, failure rate %.2f, tick %.2fs)",
            self._min_ms, self._max_ms, self._failure_rate, self._tick_seconds,
        )

    async def stop(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Lifecycle engine stopped (%d upload(s) still in flight)", len(tasks))

    async def _advance(self, upload_id: str, total_seconds: float, started: float) -> None:
        """Tick until the upload reaches a terminal state or disappears from the store."""
        max_ticks = max(1, math.ceil(total_seconds / self._tick_seconds))
        for tick in range(1, max_ticks + 1):
            await asyncio.sleep(self._tick_seconds)
            if tick == max_ticks:
                # The final tick always lands on or past the target time.
                progress = 100
            else:
                progress = compute_progress(self._clock() - started, total_seconds)
            if not self._apply_tick(upload_id, progress):
                return

    def _apply_tick(self, upload_id: str, progress: int) -> bool:
        """Write one tick's progress. Returns False once the task should stop."""
        with self._lock:
            record = self._records.get(upload_id)
            if record is None:
                logger.debug("Upload %s no longer stored, stopping", upload_id)
                return False
            if record.status.is_terminal:
                return False

            progress = max(record.progress, progress)
            if progress < 100:
                if record.status == UploadStatus.QUEUED and progress > QUEUED_THRESHOLD:
                    record.status = UploadStatus.PROCESSING
                record.progress = progress
                return True

            record.progress = 100
            if record.will_fail:
                record.status = UploadStatus.FAILED
                record.error = PROCESSING_ERROR
            else:
                record.status = UploadStatus.COMPLETED
                record.completed_at = utcnow()
                record.transcript = generate_transcript(self._randomizer.rng, *self._transcript_sentences)
            status = record.status

        logger.info("Upload %s %s", upload_id, status.value)
        return False

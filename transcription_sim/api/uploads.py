"""Upload submission, status polling and listing.

  POST /uploads                 - receive an audio file, start its lifecycle
  GET  /uploads/{upload_id}/status - poll progress, transcript or error
  GET  /uploads                 - list every upload (debugging aid)

A thin layer over the lifecycle engine; fault injection happens here, before
the engine is consulted.
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request
from starlette.datastructures import UploadFile

from transcription_sim.config import Settings, settings
from transcription_sim.api.faults import simulate_slow_response, simulate_timeout, simulate_upload_failure

logger = logging.getLogger(__name__)

router = APIRouter()

# Wired in during lifespan
_engine = None
_randomizer = None
_settings: Settings = settings


def set_engine(engine):
    global _engine
    _engine = engine


def set_randomizer(randomizer):
    global _randomizer
    _randomizer = randomizer


def set_settings(config: Settings):
    global _settings
    _settings = config


SUPPORTED_AUDIO_TYPES = (
    "audio/mp4",
    "audio/x-m4a",
    "audio/m4a",
    "audio/wav",
    "audio/x-wav",
)

_CHUNK_BYTES = 1024 * 1024


def _require_ready():
    if _engine is None or _randomizer is None:
        raise HTTPException(status_code=503, detail="Service not ready")


# ---------------------------------------------------------------------------
# POST /uploads
# ---------------------------------------------------------------------------

@router.post("/uploads", status_code=202)
async def create_upload(request: Request):
    """Accept a multipart audio upload and queue it for transcription.

    Parts: ``audio`` (file, required), ``config`` (JSON file, optional) and any
    text fields, which all end up in the upload's metadata.

    Returns:
        {uploadId, status, message}
    """
    _require_ready()

    await simulate_timeout(_randomizer, _settings, "POST /uploads")
    simulate_upload_failure(_randomizer, _settings)
    await simulate_slow_response(_randomizer)

    async with request.form() as form:
        audio = form.get("audio")
        if not isinstance(audio, UploadFile):
            raise HTTPException(status_code=400, detail="No audio file uploaded")

        if audio.content_type not in SUPPORTED_AUDIO_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"Unsupported audio format: {audio.content_type}. Supported formats: M4A, WAV",
            )

        # Starlette has already spooled the whole part by now, so this is
        # post-receipt accounting: an oversized file is fully received before the 413.
        size = 0
        while True:
            chunk = await audio.read(_CHUNK_BYTES)
            if not chunk:
                break
            size += len(chunk)
            if size > _settings.max_upload_bytes:
                raise HTTPException(status_code=413, detail="File too large (max 1 GB)")

        fields = {key: value for key, value in form.multi_items() if isinstance(value, str)}
        metadata: Dict[str, Any] = {
            "language": fields.get("language") or "en",
            "speakerCount": fields.get("speakerCount") or 1,
            **fields,
        }

        config_part = form.get("config")
        if isinstance(config_part, UploadFile):
            metadata.update(_parse_config(await config_part.read()))

        record = await _engine.create(
            filename=audio.filename or "upload",
            mime_type=audio.content_type,
            size=size,
            metadata=metadata,
        )

    return {
        "uploadId": record.id,
        "status": record.status.value,
        "message": "Upload accepted and queued for transcription",
    }


# ---------------------------------------------------------------------------
# GET /uploads/{upload_id}/status
# ---------------------------------------------------------------------------

@router.get("/uploads/{upload_id}/status")
async def get_upload_status(upload_id: str):
    """Return the upload's status; transcript or error only once terminal."""
    _require_ready()

    await simulate_timeout(_randomizer, _settings, "GET /uploads/{id}/status")
    await simulate_slow_response(_randomizer)

    record = await _engine.get(upload_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Upload not found")
    return record.to_status_body()


# ---------------------------------------------------------------------------
# GET /uploads
# ---------------------------------------------------------------------------

@router.get("/uploads")
async def list_uploads():
    _require_ready()
    return [summary.to_body() for summary in await _engine.list()]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_config(raw: bytes) -> Dict[str, Any]:
    """Decode the optional config part. Invalid or non-object JSON is ignored."""
    try:
        config = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.debug("Ignoring invalid config JSON")
        return {}
    if not isinstance(config, dict):
        return {}
    return config

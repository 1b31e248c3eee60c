"""API information endpoint."""

from fastapi import APIRouter, Request

from transcription_sim.config import Settings, settings

router = APIRouter()

VERSION = "1.0.0"

_settings: Settings = settings


def set_settings(config: Settings):
    global _settings
    _settings = config


def _percent(rate: float) -> str:
    return f"{rate * 100:g}%"


@router.get("/")
async def api_info(request: Request):
    """Describe the endpoints and the active failure simulation."""
    base_url = str(request.base_url).rstrip("/")
    timeout = _percent(_settings.timeout_rate)
    return {
        "name": "Transcription API",
        "description": "Simulated audio transcription service for testing",
        "baseUrl": base_url,
        "version": VERSION,
        "endpoints": [
            {
                "method": "GET",
                "path": "/",
                "description": "API information (this document)",
            },
            {
                "method": "POST",
                "path": "/uploads",
                "description": "Upload audio file for transcription",
                "body": {
                    "audio": "multipart/form-data (required, max 1GB). Supported formats: M4A, WAV",
                    "config": "multipart/form-data JSON (optional, max 1 file)",
                    "language": "string (optional, default: en)",
                    "speakerCount": "number (optional, default: 1)",
                },
                "supportedAudioFormats": ["M4A", "WAV"],
            },
            {
                "method": "GET",
                "path": "/uploads/:id/status",
                "description": "Check transcription status and get transcript when completed",
            },
            {
                "method": "GET",
                "path": "/uploads",
                "description": "List all uploads (for debugging)",
            },
        ],
        "failureSimulation": {
            "description": "Random failures for testing client resilience",
            "uploadFailureRate": _percent(_settings.upload_failure_rate),
            "uploadTimeoutRate": f"{timeout} (POST /uploads, 504 Gateway timeout)",
            "statusTimeoutRate": f"{timeout} (GET /uploads/:id/status, 504 Gateway timeout)",
            "processingFailureRate": _percent(_settings.processing_failure_rate),
            "slowResponseRate": (
                f"{_percent(_settings.slow_response_rate)} (POST /uploads and GET /uploads/:id/status, "
                f"{_settings.slow_response_min_seconds:g}-{_settings.slow_response_max_seconds:g}s extra delay)"
            ),
        },
    }

import time

from fastapi.testclient import TestClient

from transcription_sim.api import uploads as uploads_api
from transcription_sim.main import create_app

WAV = ("meeting.wav", b"RIFF\x00\x00\x00\x00WAVEfmt ", "audio/wav")


def _client(config):
    return TestClient(create_app(config))


def _poll_until_terminal(client, upload_id, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        body = client.get(f"/uploads/{upload_id}/status").json()
        if body["status"] in ("completed", "failed"):
            return body
        time.sleep(0.01)
    raise AssertionError(f"upload {upload_id} never finished")


def test_upload_is_accepted_and_completes(quiet_settings):
    with _client(quiet_settings) as client:
        response = client.post("/uploads", files={"audio": WAV})

        assert response.status_code == 202
        accepted = response.json()
        assert accepted["status"] == "queued"
        assert accepted["message"] == "Upload accepted and queued for transcription"

        body = _poll_until_terminal(client, accepted["uploadId"])

    assert body["status"] == "completed"
    assert body["progress"] == 100
    assert body["filename"] == "meeting.wav"
    assert body["transcript"].startswith("Hello and welcome to this recording.")
    assert body["completedAt"].endswith("Z")
    assert "error" not in body


def test_processing_failure_is_reported_through_status(quiet_settings):
    config = quiet_settings.model_copy(update={"processing_failure_rate": 1.0})
    with _client(config) as client:
        upload_id = client.post("/uploads", files={"audio": WAV}).json()["uploadId"]
        body = _poll_until_terminal(client, upload_id)

    assert body["status"] == "failed"
    assert body["error"] == "Transcription failed: Unable to process audio"
    assert "transcript" not in body


def test_metadata_defaults(quiet_settings):
    with _client(quiet_settings) as client:
        upload_id = client.post("/uploads", files={"audio": WAV}).json()["uploadId"]
        body = client.get(f"/uploads/{upload_id}/status").json()

    assert body["metadata"] == {"language": "en", "speakerCount": 1}


def test_metadata_merges_form_fields_and_config_json(quiet_settings):
    config_part = ("config.json", b'{"speakerCount": 3, "topic": "standup"}', "application/json")
    with _client(quiet_settings) as client:
        response = client.post(
            "/uploads",
            files={"audio": WAV, "config": config_part},
            data={"language": "de", "customer": "acme"},
        )
        body = client.get(f"/uploads/{response.json()['uploadId']}/status").json()

    assert body["metadata"] == {
        "language": "de",
        "speakerCount": 3,
        "customer": "acme",
        "topic": "standup",
    }


def test_invalid_config_json_is_ignored(quiet_settings):
    config_part = ("config.json", b"{not json", "application/json")
    with _client(quiet_settings) as client:
        response = client.post("/uploads", files={"audio": WAV, "config": config_part})
        body = client.get(f"/uploads/{response.json()['uploadId']}/status").json()

    assert response.status_code == 202
    assert body["metadata"] == {"language": "en", "speakerCount": 1}


def test_missing_audio_is_rejected(quiet_settings):
    with _client(quiet_settings) as client:
        response = client.post("/uploads", data={"language": "en"})

    assert response.status_code == 400
    assert response.json() == {"error": "No audio file uploaded"}


def test_unsupported_format_is_rejected(quiet_settings):
    with _client(quiet_settings) as client:
        response = client.post("/uploads", files={"audio": ("song.mp3", b"ID3", "audio/mpeg")})
        listing = client.get("/uploads").json()

    assert response.status_code == 400
    assert response.json() == {
        "error": "Unsupported audio format: audio/mpeg. Supported formats: M4A, WAV"
    }
    assert listing == []


def test_m4a_variants_are_accepted(quiet_settings):
    with _client(quiet_settings) as client:
        codes = [
            client.post("/uploads", files={"audio": ("memo.m4a", b"\x00", mime)}).status_code
            for mime in ("audio/mp4", "audio/x-m4a", "audio/m4a", "audio/x-wav")
        ]

    assert codes == [202, 202, 202, 202]


def test_oversized_upload_is_rejected(quiet_settings):
    config = quiet_settings.model_copy(update={"max_upload_bytes": 4})
    with _client(config) as client:
        response = client.post("/uploads", files={"audio": ("big.wav", b"0123456789", "audio/wav")})

    assert response.status_code == 413
    assert "error" in response.json()


def test_size_is_recorded(quiet_settings):
    with _client(quiet_settings) as client:
        client.post("/uploads", files={"audio": ("big.wav", b"0123456789", "audio/wav")})
        engine = client.app.state.engine
        summary = client.get("/uploads").json()[0]
        record = client.portal.call(engine.get, summary["uploadId"])

    assert record.size == 10
    assert record.mime_type == "audio/wav"


def test_simulated_upload_failure(quiet_settings):
    config = quiet_settings.model_copy(update={"upload_failure_rate": 1.0})
    with _client(config) as client:
        response = client.post("/uploads", files={"audio": WAV})
        listing = client.get("/uploads").json()

    assert (response.status_code, response.json()["error"]) in {
        (500, "Internal server error"),
        (503, "Service temporarily unavailable"),
    }
    assert listing == []


def test_simulated_upload_timeout(quiet_settings):
    config = quiet_settings.model_copy(update={"timeout_rate": 1.0})
    with _client(config) as client:
        response = client.post("/uploads", files={"audio": WAV})
        listing = client.get("/uploads").json()

    assert response.status_code == 504
    assert response.json() == {"error": "Gateway timeout"}
    assert listing == []


def test_simulated_status_timeout(quiet_settings):
    with _client(quiet_settings) as client:
        upload_id = client.post("/uploads", files={"audio": WAV}).json()["uploadId"]
        # Only the fault knobs change; the engine and its uploads stay in place
        uploads_api.set_settings(quiet_settings.model_copy(update={"timeout_rate": 1.0}))
        response = client.get(f"/uploads/{upload_id}/status")

    assert response.status_code == 504
    assert response.json() == {"error": "Gateway timeout"}


def test_unknown_upload_is_not_found(quiet_settings):
    with _client(quiet_settings) as client:
        response = client.get("/uploads/00000000-0000-0000-0000-000000000000/status")

    assert response.status_code == 404
    assert response.json() == {"error": "Upload not found"}


def test_listing_returns_summaries(quiet_settings):
    with _client(quiet_settings) as client:
        ids = {client.post("/uploads", files={"audio": WAV}).json()["uploadId"] for _ in range(3)}
        listing = client.get("/uploads").json()

    assert len(listing) == 3
    assert {item["uploadId"] for item in listing} == ids
    for item in listing:
        assert set(item) == {"uploadId", "filename", "status", "progress", "createdAt"}
        assert 0 <= item["progress"] <= 100

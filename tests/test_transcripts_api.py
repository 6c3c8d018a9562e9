from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from tests._helpers import FakeAnalysisClient, csv_bytes, gladia
from transcriptlab.api.app import create_app
from transcriptlab.api.config import ApiConfig
from transcriptlab.api.services.transcripts_service import TranscriptsService
from transcriptlab.core.records import TranscriptStore

ANALYSIS_OK = {
    "success": True,
    "data": {
        "analysis": '```json\n{"summary": "friendly chat"}\n```',
        "tests": [{"question": "Who spoke first?"}],
    },
}


def _client(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    *,
    result: Optional[Dict[str, Any]] = None,
    health: Optional[Dict[str, Any]] = None,
    max_upload_mb: int = 30,
):
    cfg = ApiConfig(data_root=str(tmp_path / "data"), max_upload_mb=max_upload_mb)
    tmp_dir = tmp_path / "artifacts"
    tmp_dir.mkdir()
    fake = FakeAnalysisClient(result=result if result is not None else ANALYSIS_OK, health=health)
    svc = TranscriptsService(
        cfg=cfg,
        store=TranscriptStore(cfg.records_dir, cfg.uploads_dir),
        client=fake,  # type: ignore[arg-type]
        tmp_dir=tmp_dir,
    )

    import transcriptlab.api.routes.transcripts as routes

    monkeypatch.setattr(routes, "_svc", lambda: svc)
    return TestClient(create_app(cfg)), svc, fake, tmp_dir


def _upload(client: TestClient, name: str, data: bytes, content_type: str = "text/plain"):
    return client.post("/api/transcript/upload", files={"transcript_file": (name, data, content_type)})


def test_upload_csv_is_flattened_before_analysis(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client, svc, fake, tmp_dir = _client(tmp_path, monkeypatch)
    data = csv_bytes(
        ["id", "gladia_response", "zoom_transcription"],
        [["1", gladia({"time_begin": 4, "speaker": 1, "transcription": "fine thanks"}), "how are you"]],
    )

    with client:
        r = _upload(client, "call.csv", data, "text/csv")

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["transcript_id"] == 1

    sent = fake.sent[0]
    assert sent["filename"] == "call.txt"
    assert sent["content_type"] == "text/plain"
    assert sent["text"] == "Speaker: how are you\n\nSpeaker 1: fine thanks\n\n"
    # generated artifact is released after the analysis call
    assert list(tmp_dir.iterdir()) == []

    rec = svc.store.get(1)
    assert rec.filename == "call.csv"
    assert rec.file_type == "csv"
    assert rec.analysis_result == {"summary": "friendly chat"}
    assert rec.tests == [{"question": "Who spoke first?"}]
    # stored original is the raw CSV, not the flattened text
    assert svc.store.upload_path(rec.file_path).read_bytes() == data


def test_upload_txt_is_sent_unchanged(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client, _, fake, _ = _client(tmp_path, monkeypatch)

    r = _upload(client, "notes.txt", b"Teacher: hello\n\n")

    assert r.status_code == 200, r.text
    assert fake.sent[0]["filename"] == "notes.txt"
    assert fake.sent[0]["text"] == "Teacher: hello\n\n"


def test_upload_rejects_unsupported_extension(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client, svc, fake, _ = _client(tmp_path, monkeypatch)

    r = _upload(client, "song.mp3", b"\x00\x01", "audio/mpeg")

    assert r.status_code == 422
    err = r.json()["error"]
    assert err["code"] == "invalid_file"
    assert err["message"].startswith("Invalid file: ")
    assert fake.sent == []
    assert svc.store.list() == []


def test_upload_without_file_field(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client, _, _, _ = _client(tmp_path, monkeypatch)

    r = client.post("/api/transcript/upload", files={"other": ("a.txt", b"x", "text/plain")})

    assert r.status_code == 400
    assert r.json()["error"]["code"] == "no_file"
    assert r.json()["error"]["message"] == "No file was uploaded"


def test_upload_analysis_failure_is_reported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    failure = {"success": False, "error": "Analysis service returned an error: 500 - boom"}
    client, _, _, _ = _client(tmp_path, monkeypatch, result=failure)

    r = _upload(client, "notes.txt", b"Speaker: hi\n\n")

    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "analysis_failed"
    assert err["message"] == failure["error"]


def test_upload_too_large_is_rejected_before_processing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client, _, fake, _ = _client(tmp_path, monkeypatch, max_upload_mb=1)

    r = _upload(client, "big.txt", b"a" * (2 * 1024 * 1024))

    assert r.status_code == 413
    err = r.json()["error"]
    assert err["code"] == "payload_too_large"
    assert err["message"] == "File size exceeds the maximum limit of 1MB"
    assert fake.sent == []


def test_record_lifecycle(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client, svc, _, _ = _client(tmp_path, monkeypatch)
    assert _upload(client, "a.txt", b"A: 1\n\n").status_code == 200
    assert _upload(client, "b.txt", b"B: 2\n\n").status_code == 200

    r = client.get("/api/transcripts")
    assert r.status_code == 200
    assert [d["id"] for d in r.json()["data"]] == [2, 1]

    r = client.get("/api/transcript/1")
    assert r.status_code == 200
    assert r.json()["data"]["filename"] == "a.txt"

    stored = svc.store.upload_path(svc.store.get(1).file_path)
    r = client.delete("/api/transcript/1")
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Transcript deleted successfully"}
    assert not stored.exists()

    r = client.get("/api/transcript/1")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "not_found"

    assert client.delete("/api/transcript/99").status_code == 404


def test_test_completion(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client, _, _, _ = _client(tmp_path, monkeypatch)
    assert _upload(client, "a.txt", b"A: 1\n\n").status_code == 200

    r = client.post("/api/transcript/1/test-completion", json={"score": 80, "answers": {"1": "b"}})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["test_completed"] is True
    assert data["test_score"] == 80
    assert data["test_answers"] == {"1": "b"}
    assert data["completed_at"]

    r = client.post("/api/transcript/1/test-completion", json={"score": 150})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "validation_error"

    r = client.post("/api/transcript/7/test-completion", json={"score": 10})
    assert r.status_code == 404


def test_analysis_health_is_proxied(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    down = {"status": "error", "message": "Health check failed with status 503"}
    client, _, _, _ = _client(tmp_path, monkeypatch, health=down)

    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == down


def test_probes_metrics_and_request_id(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client, _, _, _ = _client(tmp_path, monkeypatch)

    r = client.get("/healthz", headers={"X-Request-Id": "rid-123"})
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert r.headers["X-Request-Id"] == "rid-123"

    r = client.get("/readyz")
    assert r.json()["ok"] is True
    assert "csv" in r.json()["allowed_extensions"]

    r = client.get("/api/transcript/5", headers={"X-Request-Id": "rid-404"})
    assert r.json()["error"]["request_id"] == "rid-404"

    assert _upload(client, "a.txt", b"A: 1\n\n").status_code == 200
    body = client.get("/metrics").text
    assert "transcriptlab_http_requests_total" in body
    assert 'transcriptlab_uploads_total{file_type="txt"}' in body
    assert 'transcriptlab_extractions_total{outcome="passthrough"}' in body


def test_csv_artifact_released_when_analysis_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    failure = {"success": False, "error": "Failed to communicate with analysis service: refused"}
    client, _, fake, tmp_dir = _client(tmp_path, monkeypatch, result=failure)
    data = csv_bytes(["zoom_transcription"], [["hello"]])

    r = _upload(client, "call.csv", data, "text/csv")

    assert r.status_code == 400
    assert fake.sent[0]["filename"] == "call.txt"
    assert list(tmp_dir.iterdir()) == []


def test_request_counter_uses_route_template(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from transcriptlab.api.metrics import HTTP_REQUESTS

    client, _, _, _ = _client(tmp_path, monkeypatch)
    for rid in (1000, 1001, 1002):
        assert client.get(f"/api/transcript/{rid}").status_code == 404
    assert client.get("/no/such/route").status_code == 404

    paths = {path for (_, path, _) in HTTP_REQUESTS.series()}
    assert "/api/transcript/{transcript_id}" in paths
    assert "unmatched" in paths
    assert not any("1000" in p or "1001" in p for p in paths)

    series = HTTP_REQUESTS.series()
    assert series[("GET", "/api/transcript/{transcript_id}", "404")] >= 3

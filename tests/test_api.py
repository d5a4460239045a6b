"""Tests for the FastAPI caption service.

WHY: Validates the caption endpoints and the job endpoints — happy
paths, error cases, and edge cases — through the same HTTP surface the
editing UI uses.

HOW: Each test builds its app with create_app() around a fresh JobStore
and an AsyncMock transcriber, so the hosted recognition API is never
called. Background tasks run inside the TestClient request, so a job
submitted with a successful transcriber is already completed when the
POST returns. Tests that need a job in a particular state set it
directly through the store.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- Each test gets its own JobStore; no shared state between tests
- Tests cover: happy paths, 404 not found, 409 conflict, 400/422 bad input
"""

from __future__ import annotations

import io
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from video_captioner import __version__
from video_captioner.server.app import NO_CAPTIONS_ERROR, create_app
from video_captioner.server.jobs import JobStatus, JobStore


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store():
    job_store = JobStore()
    yield job_store
    job_store.clear()


@pytest.fixture
def transcriber(whisper_response):
    return AsyncMock(return_value=whisper_response)


@pytest.fixture
def client(store, transcriber):
    return TestClient(create_app(store=store, transcriber=transcriber))


def _make_media_file(name: str = "clip.mp4", content: bytes = b"fake video data"):
    return ("file", (name, io.BytesIO(content), "video/mp4"))


def _caption_bodies(captions):
    return [c.to_dict() for c in captions]


# ---------------------------------------------------------------------------
# POST /captions/process
# ---------------------------------------------------------------------------


class TestProcessCaptions:

    def test_processes_segments(self, client):
        resp = client.post("/captions/process", json={"segments": [
            {"start": 4.0, "end": 6.0, "text": "second   line!!"},
            {"start": 0.0, "end": 2.0, "text": "first line"},
            {"start": 2.0, "end": 3.0, "text": "   "},
        ]})

        assert resp.status_code == 200
        body = resp.json()
        assert body["count"] == 2
        assert [c["text"] for c in body["captions"]] == ["first line", "second line!"]
        assert body["captions"][0] == {
            "startTime": 0.0,
            "endTime": 2.0,
            "text": "first line",
            "language": "en-US",
            "wordCount": 2,
            "confidence": None,
        }

    def test_options_are_applied(self, client):
        resp = client.post("/captions/process", json={
            "segments": [{"start": 0, "end": 4, "text": "one two three four"}],
            "options": {"maxWordsPerLine": 2},
        })
        assert [c["text"] for c in resp.json()["captions"]] == ["one two", "three four"]

    def test_invalid_options_return_422(self, client):
        resp = client.post("/captions/process", json={
            "segments": [],
            "options": {"maxWordsPerLine": 0},
        })
        assert resp.status_code == 422

    def test_malformed_body_returns_422(self, client):
        resp = client.post("/captions/process", json={"segments": [{"text": "no times"}]})
        assert resp.status_code == 422

    @pytest.mark.parametrize("value", ["Infinity", "-Infinity", "NaN"])
    def test_non_finite_times_return_422(self, client, value):
        resp = client.post(
            "/captions/process",
            content='{"segments": [{"start": 0, "end": ' + value + ', "text": "hi"}]}',
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# POST /captions/export and /captions/validate
# ---------------------------------------------------------------------------


class TestExportCaptions:

    def test_srt_export(self, client, sample_captions):
        resp = client.post(
            "/captions/export",
            params={"format": "srt"},
            json={"captions": _caption_bodies(sample_captions)},
        )

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/x-subrip")
        assert 'filename="captions.srt"' in resp.headers["content-disposition"]
        assert resp.text.startswith("1\n00:00:00,000 --> 00:00:02,500\nHello everyone.\n")

    def test_vtt_export(self, client, sample_captions):
        resp = client.post(
            "/captions/export",
            params={"format": "vtt"},
            json={"captions": _caption_bodies(sample_captions)},
        )
        assert resp.status_code == 200
        assert resp.text.startswith("WEBVTT\n\n00:00:00.000 --> 00:00:02.500\n")

    def test_json_export_round_trips(self, client, sample_captions):
        bodies = _caption_bodies(sample_captions)
        resp = client.post("/captions/export", params={"format": "json"}, json={"captions": bodies})
        assert resp.json() == bodies

    def test_unknown_format_returns_422(self, client, sample_captions):
        resp = client.post(
            "/captions/export",
            params={"format": "pdf"},
            json={"captions": _caption_bodies(sample_captions)},
        )
        assert resp.status_code == 422


class TestValidateText:

    def test_valid_text(self, client):
        resp = client.post("/captions/validate", json={"text": "  Hello ,नमस्ते "})
        assert resp.json() == {
            "valid": True,
            "cleaned": "Hello, नमस्ते",
            "language": "mixed",
            "wordCount": 3,
        }

    def test_blank_text_is_invalid(self, client):
        resp = client.post("/captions/validate", json={"text": "    "})
        body = resp.json()
        assert body["valid"] is False
        assert body["cleaned"] == ""
        assert body["wordCount"] == 0


# ---------------------------------------------------------------------------
# POST /captions/render-props
# ---------------------------------------------------------------------------


class TestRenderProps:

    def test_builds_props(self, client, sample_captions):
        resp = client.post("/captions/render-props", json={
            "videoPath": "/videos/clip.mp4",
            "captions": list(reversed(_caption_bodies(sample_captions))),
            "style": "karaoke",
        })

        assert resp.status_code == 200
        props = resp.json()
        assert props["style"] == "karaoke"
        assert (props["width"], props["height"], props["fps"]) == (1920, 1080, 30)
        assert [c["startTime"] for c in props["captions"]] == [0.0, 2.5, 65.0]
        assert props["captions"][0]["lines"] == ["Hello everyone."]
        assert props["captions"][2]["script"] == "mixed"
        assert props["durationInFrames"] == 111754

    def test_default_style(self, client, sample_captions):
        resp = client.post("/captions/render-props", json={
            "videoPath": "clip.mp4",
            "captions": _caption_bodies(sample_captions),
            "fps": 25,
        })
        assert resp.json()["style"] == "default"
        assert resp.json()["fps"] == 25

    def test_unknown_style_returns_422(self, client, sample_captions):
        resp = client.post("/captions/render-props", json={
            "videoPath": "clip.mp4",
            "captions": _caption_bodies(sample_captions),
            "style": "neon",
        })
        assert resp.status_code == 422
        assert "default, newsbar, karaoke" in resp.json()["detail"]

    def test_invalid_fps_returns_422(self, client):
        resp = client.post("/captions/render-props", json={
            "videoPath": "clip.mp4",
            "captions": [],
            "fps": 0,
        })
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# POST /transcriptions
# ---------------------------------------------------------------------------


class TestCreateTranscription:

    def test_submit_job_returns_201(self, client):
        resp = client.post("/transcriptions", files=[_make_media_file()])
        assert resp.status_code == 201
        body = resp.json()
        assert "id" in body
        assert body["status"] == "pending"
        assert body["filename"] == "clip.mp4"

    def test_background_pipeline_completes_job(self, client, store, transcriber):
        resp = client.post("/transcriptions", files=[_make_media_file()])
        job = store.get_job(resp.json()["id"])

        assert job.status == JobStatus.COMPLETED
        assert len(job.captions) == 2
        transcriber.assert_awaited_once_with(job.input_path)

    def test_saves_uploaded_file(self, client, store):
        content = b"test video content 12345"
        resp = client.post("/transcriptions", files=[_make_media_file(content=content)])
        job = store.get_job(resp.json()["id"])
        assert job.input_path.read_bytes() == content

    def test_stores_processing_options(self, client, store):
        resp = client.post(
            "/transcriptions",
            files=[_make_media_file()],
            data={"max_words_per_line": "6", "split_long_segments": "false"},
        )
        job = store.get_job(resp.json()["id"])
        assert job.options["maxWordsPerLine"] == 6
        assert job.options["splitLongSegments"] is False
        assert job.options["minLineDuration"] == 1.5

    def test_sanitizes_filename(self, client, store):
        resp = client.post("/transcriptions", files=[_make_media_file(name="../../etc/clip.mp4")])
        assert resp.json()["filename"] == "clip.mp4"

    def test_reject_unsupported_file_type(self, client):
        resp = client.post(
            "/transcriptions",
            files=[("file", ("notes.txt", io.BytesIO(b"data"), "text/plain"))],
        )
        assert resp.status_code == 400
        assert "Unsupported file type" in resp.json()["detail"]

    def test_reject_invalid_options(self, client):
        resp = client.post(
            "/transcriptions",
            files=[_make_media_file()],
            data={"max_line_duration": "0"},
        )
        assert resp.status_code == 422

    def test_too_many_jobs_returns_429(self, transcriber):
        store = JobStore(max_jobs=1)
        client = TestClient(create_app(store=store, transcriber=transcriber))
        client.post("/transcriptions", files=[_make_media_file()])

        resp = client.post("/transcriptions", files=[_make_media_file()])
        assert resp.status_code == 429
        store.clear()

    def test_zero_captions_fails_job(self, store):
        silent = AsyncMock(return_value={"text": "", "duration": 5.0})
        client = TestClient(create_app(store=store, transcriber=silent))

        job_id = client.post("/transcriptions", files=[_make_media_file()]).json()["id"]
        body = client.get("/transcriptions/{}".format(job_id)).json()

        assert body["status"] == "failed"
        assert body["error"] == NO_CAPTIONS_ERROR
        assert body["caption_count"] is None


# ---------------------------------------------------------------------------
# GET /transcriptions/{id}, captions, export, DELETE
# ---------------------------------------------------------------------------


class TestTranscriptionJobs:

    def test_get_completed_job(self, client):
        job_id = client.post("/transcriptions", files=[_make_media_file()]).json()["id"]
        resp = client.get("/transcriptions/{}".format(job_id))

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "completed"
        assert body["caption_count"] == 2
        assert body["error"] is None
        assert body["options"]["maxWordsPerLine"] == 10

    def test_get_nonexistent_job(self, client):
        resp = client.get("/transcriptions/nonexistent")
        assert resp.status_code == 404
        assert "Job not found" in resp.json()["detail"]

    def test_get_captions(self, client):
        job_id = client.post("/transcriptions", files=[_make_media_file()]).json()["id"]
        resp = client.get("/transcriptions/{}/captions".format(job_id))

        assert resp.status_code == 200
        assert [c["text"] for c in resp.json()["captions"]] == [
            "Hello everyone.", "Welcome to the show.",
        ]

    def test_captions_not_completed_returns_409(self, client, store):
        job = store.create_job("clip.mp4")
        store.update_job(job.id, status=JobStatus.TRANSCRIBING)

        resp = client.get("/transcriptions/{}/captions".format(job.id))
        assert resp.status_code == 409
        assert "transcribing" in resp.json()["detail"]

    def test_export_uses_upload_stem(self, client):
        job_id = client.post(
            "/transcriptions", files=[_make_media_file(name="interview.mov")]
        ).json()["id"]
        resp = client.get("/transcriptions/{}/export/vtt".format(job_id))

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/vtt")
        assert 'filename="interview.vtt"' in resp.headers["content-disposition"]
        assert resp.text.startswith("WEBVTT\n\n")

    def test_export_not_completed_returns_409(self, client, store):
        job = store.create_job("clip.mp4")
        resp = client.get("/transcriptions/{}/export/srt".format(job.id))
        assert resp.status_code == 409

    def test_export_nonexistent_job(self, client):
        assert client.get("/transcriptions/nonexistent/export/srt").status_code == 404

    def test_delete_job(self, client, store):
        job_id = client.post("/transcriptions", files=[_make_media_file()]).json()["id"]
        output_dir = store.get_job(job_id).output_dir

        resp = client.delete("/transcriptions/{}".format(job_id))
        assert resp.status_code == 204
        assert store.get_job(job_id) is None
        assert not output_dir.exists()

    def test_delete_nonexistent_job(self, client):
        assert client.delete("/transcriptions/nonexistent").status_code == 404


# ---------------------------------------------------------------------------
# Reference data, health, OpenAPI
# ---------------------------------------------------------------------------


class TestReferenceEndpoints:

    def test_styles(self, client):
        resp = client.get("/styles")
        assert [s["value"] for s in resp.json()] == ["default", "newsbar", "karaoke"]
        assert all(s["label"] and s["description"] for s in resp.json())

    def test_formats(self, client):
        formats = {f["key"]: f for f in client.get("/formats").json()}
        assert set(formats) == {"srt", "vtt", "json"}
        assert formats["srt"]["suffix"] == ".srt"
        assert formats["vtt"]["media_type"] == "text/vtt"
        assert formats["json"]["name"] == "Caption JSON"

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.json() == {"status": "ok", "version": __version__}

    def test_openapi_lists_all_paths(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        for path in (
            "/captions/process",
            "/captions/export",
            "/captions/validate",
            "/captions/render-props",
            "/transcriptions",
            "/transcriptions/{job_id}",
            "/transcriptions/{job_id}/captions",
            "/transcriptions/{job_id}/export/{fmt}",
            "/styles",
            "/formats",
            "/health",
        ):
            assert path in paths

"""
Tests for clip generation API endpoints.
"""
from clipstudio.main import app
from clipstudio.models.clip import Clip
from clipstudio.models.clip_job import ClipJob
from clipstudio.routes.clips import get_segment_proposer


class CrashingProposer:
    def propose(self, transcript, duration, options):
        raise RuntimeError("model output could not be parsed")


def _generate(client, headers, media_id, **options):
    body = {"sourceMediaId": media_id}
    if options:
        body["options"] = options
    return client.post("/api/clips/generate", json=body, headers=headers)


class TestGenerateClips:
    """POST /api/clips/generate"""

    def test_generate_two_formats(self, client, auth_headers, source_media, db):
        response = _generate(client, auth_headers, source_media.id, exportFormats=["9:16", "1:1"])
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["status"] == "completed"
        assert data["totalClips"] == 6
        assert data["message"] == "Successfully generated 6 clips"

        job = db.get(ClipJob, data["jobId"])
        assert job.status == "completed"
        assert len(job.clips) == 6

    def test_generate_default_formats(self, client, auth_headers, source_media):
        response = _generate(client, auth_headers, source_media.id)
        assert response.status_code == 200
        assert response.json()["totalClips"] == 9

    def test_generate_snake_case_options(self, client, auth_headers, source_media):
        response = client.post(
            "/api/clips/generate",
            json={"source_media_id": source_media.id, "options": {"export_formats": ["16:9"]}},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["totalClips"] == 3

    def test_generate_requires_auth(self, client, source_media):
        response = _generate(client, {}, source_media.id)
        assert response.status_code == 401

    def test_generate_missing_media_id(self, client, auth_headers, db):
        response = client.post("/api/clips/generate", json={}, headers=auth_headers)
        assert response.status_code == 422
        data = response.json()
        assert data["ok"] is False
        assert data["error"] == "sourceMediaId is required"
        assert data["error_code"] == "VALIDATION_ERROR"
        assert db.query(ClipJob).count() == 0

    def test_generate_unknown_media(self, client, auth_headers):
        response = _generate(client, auth_headers, "missing-id")
        assert response.status_code == 404
        assert response.json()["error"] == "Source media not found: missing-id"

    def test_generate_other_users_media(self, client, auth_headers, other_user, make_media):
        media = make_media(user_id=other_user.id)
        response = _generate(client, auth_headers, media.id)
        assert response.status_code == 404

    def test_generate_media_not_ready(self, client, auth_headers, make_media, db):
        media = make_media(status="uploading")
        response = _generate(client, auth_headers, media.id)
        assert response.status_code == 409
        assert response.json()["error"] == "Source media is not ready (status: uploading)"
        assert db.query(ClipJob).count() == 0

    def test_generate_failure_reports_job(self, client, auth_headers, source_media, db):
        app.dependency_overrides[get_segment_proposer] = lambda: CrashingProposer()

        response = _generate(client, auth_headers, source_media.id)
        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "model output could not be parsed"

        job = db.get(ClipJob, data["jobId"])
        assert job.status == "failed"
        assert job.error_message == "model output could not be parsed"
        assert db.query(Clip).count() == 0

    def test_generate_rejects_oversized_format(self, client, auth_headers, source_media, db):
        response = _generate(client, auth_headers, source_media.id, exportFormats=["9:16", "x" * 11])
        assert response.status_code == 422
        assert db.query(ClipJob).count() == 0


class TestJobEndpoints:

    def test_list_and_get_jobs(self, client, auth_headers, source_media):
        job_id = _generate(client, auth_headers, source_media.id, exportFormats=["9:16"]).json()["jobId"]

        response = client.get("/api/clips/jobs", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["jobs"][0]["id"] == job_id

        response = client.get(f"/api/clips/jobs/{job_id}", headers=auth_headers)
        assert response.status_code == 200
        job = response.json()
        assert job["status"] == "completed"
        assert job["progress_percent"] == 100
        assert job["total_clips"] == 3

    def test_job_clips_in_creation_order(self, client, auth_headers, source_media):
        job_id = _generate(
            client, auth_headers, source_media.id, exportFormats=["1:1", "9:16"]
        ).json()["jobId"]

        response = client.get(f"/api/clips/jobs/{job_id}/clips", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["job_id"] == job_id
        assert data["total"] == 6
        assert [c["aspect_ratio"] for c in data["clips"]] == ["1:1", "9:16"] * 3
        assert data["clips"][0]["playback_url"] == f"{source_media.file_url}#t=0,30"

    def test_filter_jobs_by_status(self, client, auth_headers, source_media):
        _generate(client, auth_headers, source_media.id, exportFormats=["9:16"])

        response = client.get("/api/clips/jobs?status=failed", headers=auth_headers)
        assert response.json()["total"] == 0

    def test_list_jobs_limit_bounds(self, client, auth_headers, source_media):
        _generate(client, auth_headers, source_media.id, exportFormats=["9:16"])

        assert client.get("/api/clips/jobs?limit=-1", headers=auth_headers).status_code == 422
        assert client.get("/api/clips/jobs?limit=0", headers=auth_headers).status_code == 422
        assert client.get("/api/clips/jobs?limit=201", headers=auth_headers).status_code == 422
        assert client.get("/api/clips/jobs?limit=1", headers=auth_headers).json()["total"] == 1

    def test_job_of_other_user_hidden(self, client, auth_headers, db, other_user, make_media):
        media = make_media(user_id=other_user.id)
        job = ClipJob(user_id=other_user.id, source_media_id=media.id, status="completed")
        db.add(job)
        db.commit()

        response = client.get(f"/api/clips/jobs/{job.id}", headers=auth_headers)
        assert response.status_code == 404
        assert client.get("/api/clips/jobs", headers=auth_headers).json()["total"] == 0


class TestClipEndpoints:

    def test_list_clips_by_virality(self, client, auth_headers, source_media):
        _generate(client, auth_headers, source_media.id, exportFormats=["9:16"])

        response = client.get("/api/clips", headers=auth_headers)
        assert response.status_code == 200
        scores = [c["virality_score"] for c in response.json()]
        assert scores == [80, 75, 70]

    def test_get_clip(self, client, auth_headers, source_media):
        job_id = _generate(client, auth_headers, source_media.id, exportFormats=["9:16"]).json()["jobId"]
        clip_id = client.get(f"/api/clips/jobs/{job_id}/clips", headers=auth_headers).json()["clips"][0]["id"]

        response = client.get(f"/api/clips/{clip_id}", headers=auth_headers)
        assert response.status_code == 200
        clip = response.json()
        assert clip["status"] == "ready"
        assert clip["title"] == "Highlight 1"
        assert (clip["width"], clip["height"]) == (1080, 1920)

    def test_get_missing_clip(self, client, auth_headers):
        response = client.get("/api/clips/nope", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_delete_clip(self, client, auth_headers, source_media, db):
        _generate(client, auth_headers, source_media.id, exportFormats=["9:16"])
        clip_id = client.get("/api/clips", headers=auth_headers).json()[0]["id"]

        response = client.delete(f"/api/clips/{clip_id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

        assert client.get(f"/api/clips/{clip_id}", headers=auth_headers).status_code == 404
        assert len(client.get("/api/clips", headers=auth_headers).json()) == 2
        assert db.get(Clip, clip_id).deleted_at is not None


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "ai_gateway_configured" in data
        assert "stream_render_configured" in data

    def test_security_headers(self, client):
        response = client.get("/api/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "default-src 'none'" in response.headers["Content-Security-Policy"]

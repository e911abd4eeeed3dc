from __future__ import annotations

import hackjudge.jobs.summary_jobs as summary_jobs
from hackjudge.schemas.llm import DocumentSummary
from hackjudge.services.ocr_service import OCRError
from hackjudge.services.upload_service import load_upload

PDF = ("deck.pdf", b"%PDF-1.4 fake deck", "application/pdf")


def _submit(client, meeting_id, team="Team Rocket"):
    return client.post("/submissions", data={"teamName": team, "meetingId": meeting_id}, files={"pdf": PDF})


def test_submission_requires_all_fields(client, meeting_id, fake_queue):
    assert client.post("/submissions", data={"teamName": "T", "meetingId": meeting_id}).status_code == 400
    assert client.post("/submissions", data={"meetingId": meeting_id}, files={"pdf": PDF}).status_code == 400
    resp = client.post("/submissions", data={"teamName": "T"}, files={"pdf": PDF})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Missing required fields"}
    assert fake_queue.jobs == []


def test_submission_to_unknown_meeting_is_404(client, fake_queue):
    assert _submit(client, "missing").status_code == 404


def test_submission_appends_one_placeholder_and_queues_summary(client, meeting_id, fake_queue):
    resp = _submit(client, meeting_id)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["submissionInfo"] == {"ideaName": "Processing...", "docSummary": {}}
    assert body["summaryStatus"] == "pending"

    submissions = client.get(f"/meetings/{meeting_id}").json()["meeting"]["submissions"]
    assert len(submissions) == 1
    assert submissions[0]["id"] == body["submissionId"]
    assert submissions[0]["teamName"] == "Team Rocket"
    assert submissions[0]["pdfUrl"].startswith("/uploads/") and submissions[0]["pdfUrl"].endswith("-deck.pdf")

    func, args, _ = fake_queue.jobs[0]
    assert func == "hackjudge.jobs.summary_jobs.process_submission_summary"
    assert args == (meeting_id, body["submissionId"])
    assert load_upload(body["submissionId"]) == ("deck.pdf", b"%PDF-1.4 fake deck")


def test_enqueue_failure_marks_submission_failed(client, meeting_id, monkeypatch):
    import hackjudge.api.routes_submissions as routes

    def broken_queue():
        raise ConnectionError("redis down")

    monkeypatch.setattr(routes, "get_queue", broken_queue)

    body = _submit(client, meeting_id).json()
    assert body["success"] is True
    assert body["summaryStatus"] == "failed"
    sub = client.get(f"/meetings/{meeting_id}").json()["meeting"]["submissions"][0]
    assert sub["summaryStatus"] == "failed"
    assert sub["summaryError"].startswith("enqueue_failed")


def test_summary_job_replaces_placeholder_for_that_submission_only(client, meeting_id, fake_queue, monkeypatch):
    first = _submit(client, meeting_id, team="Alpha").json()["submissionId"]
    second = _submit(client, meeting_id, team="Beta").json()["submissionId"]

    def fake_parse(*, filename, content):
        return DocumentSummary(projectTitle="FireWatch", projectSummary="Drones for wildfire mapping")

    monkeypatch.setattr(summary_jobs, "parse_document", fake_parse)
    summary_jobs.process_submission_summary(meeting_id, first)

    subs = {s["id"]: s for s in client.get(f"/meetings/{meeting_id}").json()["meeting"]["submissions"]}
    assert subs[first]["submissionInfo"]["ideaName"] == "FireWatch"
    assert subs[first]["submissionInfo"]["docSummary"]["projectSummary"] == "Drones for wildfire mapping"
    assert subs[first]["summaryStatus"] == "done"
    assert subs[second]["submissionInfo"] == {"ideaName": "Processing...", "docSummary": {}}
    assert subs[second]["summaryStatus"] == "pending"
    assert load_upload(first) is None


def test_summary_job_failure_keeps_placeholder(client, meeting_id, fake_queue, monkeypatch):
    sub_id = _submit(client, meeting_id).json()["submissionId"]

    def failing_parse(*, filename, content):
        raise OCRError("Mistral HTTP 500")

    monkeypatch.setattr(summary_jobs, "parse_document", failing_parse)
    summary_jobs.process_submission_summary(meeting_id, sub_id)

    sub = client.get(f"/meetings/{meeting_id}").json()["meeting"]["submissions"][0]
    assert sub["submissionInfo"]["ideaName"] == "Processing..."
    assert sub["summaryStatus"] == "failed"
    assert sub["summaryError"] == "Mistral HTTP 500"


def test_summary_job_tolerates_deleted_meeting(client, meeting_id, fake_queue, monkeypatch):
    sub_id = _submit(client, meeting_id).json()["submissionId"]
    monkeypatch.setattr(
        summary_jobs,
        "parse_document",
        lambda *, filename, content: DocumentSummary(projectTitle="X"),
    )
    load = summary_jobs.load_upload
    monkeypatch.setattr(summary_jobs, "load_upload", lambda sid: ("deck.pdf", b"x"))
    client.delete(f"/meetings/{meeting_id}")

    summary_jobs.process_submission_summary(meeting_id, sub_id)
    assert load(sub_id) is None


def test_parse_endpoint(client, monkeypatch):
    import hackjudge.api.routes_parse as routes

    monkeypatch.setattr(
        routes,
        "parse_document",
        lambda *, filename, content: DocumentSummary(projectTitle="FireWatch", projectSummary="Drones"),
    )
    resp = client.post("/parse", files={"file": PDF})
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "title": "FireWatch",
        "summary": {"projectTitle": "FireWatch", "projectSummary": "Drones"},
    }

    assert client.post("/parse").status_code == 400


def test_oversized_submission_is_rejected_before_storing(client, meeting_id, fake_queue, fake_redis, monkeypatch):
    from hackjudge.settings import get_settings

    monkeypatch.setattr(get_settings(), "MAX_UPLOAD_BYTES", 4)

    resp = _submit(client, meeting_id)
    assert resp.status_code == 413
    assert resp.json()["success"] is False
    assert client.get(f"/meetings/{meeting_id}").json()["meeting"]["submissions"] == []
    assert fake_queue.jobs == []
    assert fake_redis.keys("upload:*") == []


def test_oversized_parse_upload_is_rejected(client, monkeypatch):
    import hackjudge.api.routes_parse as routes
    from hackjudge.settings import get_settings

    def unexpected_parse(*, filename, content):
        raise AssertionError("parse_document should not run for oversized files")

    monkeypatch.setattr(routes, "parse_document", unexpected_parse)
    monkeypatch.setattr(get_settings(), "MAX_UPLOAD_BYTES", 4)

    resp = client.post("/parse", files={"file": PDF})
    assert resp.status_code == 413
    assert resp.json()["success"] is False


def test_storage_failure_removes_saved_upload(client, meeting_id, fake_queue, fake_redis, monkeypatch):
    import hackjudge.api.routes_submissions as routes

    def broken_update(meeting_id, mutate):
        raise RuntimeError("disk full")

    monkeypatch.setattr(routes, "update_meeting", broken_update)

    resp = _submit(client, meeting_id)
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "disk full"}
    assert fake_redis.keys("upload:*") == []
    assert fake_redis.keys("upload_name:*") == []
    assert fake_queue.jobs == []


def test_enqueue_failure_survives_redis_error_while_recording_it(client, meeting_id, monkeypatch):
    import hackjudge.api.routes_submissions as routes
    from redis.exceptions import ConnectionError as RedisConnectionError

    def broken_queue():
        raise ConnectionError("redis down")

    def broken_update(meeting_id, mutate):
        raise RedisConnectionError("connection reset")

    monkeypatch.setattr(routes, "get_queue", broken_queue)
    monkeypatch.setattr(summary_jobs, "update_meeting", broken_update)

    resp = _submit(client, meeting_id)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["summaryStatus"] == "failed"
    subs = client.get(f"/meetings/{meeting_id}").json()["meeting"]["submissions"]
    assert [s["id"] for s in subs] == [body["submissionId"]]

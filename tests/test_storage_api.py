from datetime import datetime, timedelta, timezone

from upload_gateway.models import UploadMetadata, UploadStatus

PROBLEM_KEYS = {"status", "title", "detail", "instance", "traceId", "timestamp"}


def _assert_problem(r, status, title):
    assert r.status_code == status
    assert r.headers["content-type"].startswith("application/problem+json")
    body = r.json()
    assert PROBLEM_KEYS <= body.keys()
    assert body["status"] == status
    assert body["title"] == title
    return body


# -------------------------
# 1) Happy paths
# -------------------------
def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_presigned_upload_url(client, signer):
    r = client.post(
        "/upload/presigned-url",
        json={"fileName": "a.png", "contentType": "image/png", "expirationMinutes": 5},
    )
    assert r.status_code == 200
    assert r.json()["url"].startswith("https://store.test/test-bucket/a.png")
    assert signer.calls[0]["expires_in"] == 300


def test_presigned_upload_does_not_track(client, tracker):
    client.post("/upload/presigned-url", json={"fileName": "a.png", "contentType": "image/png"})
    assert client.get("/uploads").json() == []
    assert len(tracker) == 0


def test_download_and_view_urls(client, signer):
    r1 = client.get("/download/presigned-url", params={"fileName": "docs/r.pdf"})
    r2 = client.get("/view/presigned-url", params={"fileName": "docs/r.pdf", "expirationMinutes": 10})

    assert r1.status_code == 200 and "url" in r1.json()
    assert r2.status_code == 200 and "url" in r2.json()
    assert signer.calls[0]["expires_in"] == 3600
    assert signer.calls[1]["content_disposition"] == "inline"


def test_multipart_end_to_end(client, signer):
    r = client.post("/upload/multipart/initiate", json={"fileName": "a.png", "contentType": "image/png"})
    assert r.status_code == 200
    assert r.json() == {"uploadId": "abc", "fileName": "a.png"}

    tracked = client.get("/uploads/abc").json()
    assert tracked["status"] == "Initiated"
    assert tracked["location"] is None
    assert tracked["contentType"] == "image/png"

    r = client.post(
        "/upload/multipart/part-url",
        json={"fileName": "a.png", "uploadId": "abc", "partNumber": 1, "expirationMinutes": 60},
    )
    assert r.status_code == 200
    assert isinstance(r.json()["url"], str)
    assert client.get("/uploads/abc").json()["status"] == "InProgress"

    r = client.post(
        "/upload/multipart/complete",
        json={"fileName": "a.png", "uploadId": "abc", "parts": [{"partNumber": 1, "eTag": "etag1"}]},
    )
    assert r.status_code == 200
    location = r.json()["location"]
    assert location == "https://store.test/test-bucket/a.png"

    tracked = client.get("/uploads/abc").json()
    assert tracked["status"] == "Completed"
    assert tracked["location"] == location
    assert tracked["createdAt"]


def test_list_uploads_newest_first(client, tracker):
    t1 = datetime(2025, 1, 1, tzinfo=timezone.utc)
    for upload_id, created in (("u1", t1), ("u2", t1 + timedelta(hours=1))):
        tracker.track(UploadMetadata(upload_id, f"{upload_id}.bin", "application/octet-stream", created, UploadStatus.INITIATED))

    r = client.get("/uploads")
    assert r.status_code == 200
    assert [u["uploadId"] for u in r.json()] == ["u2", "u1"]


def test_delete_upload_is_idempotent(client, tracker):
    client.post("/upload/multipart/initiate", json={"fileName": "a.png", "contentType": "image/png"})

    assert client.delete("/uploads/abc").status_code == 204
    assert client.delete("/uploads/abc").status_code == 204
    assert client.delete("/uploads/missing").status_code == 204
    assert len(tracker) == 0


def test_metrics_exposed(client):
    client.post("/upload/presigned-url", json={"fileName": "a.png", "contentType": "image/png"})
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "upload_gateway_presign_total" in r.text


# -------------------------
# 2) Validatie -> 400
# -------------------------
def test_missing_body_field_is_400(client, signer):
    r = client.post("/upload/multipart/initiate", json={"fileName": "a.png"})
    body = _assert_problem(r, 400, "Invalid Request")
    assert body["field"] == "contentType"
    assert signer.calls == []


def test_blank_file_name_is_400(client, signer):
    r = client.post("/upload/multipart/initiate", json={"fileName": "   ", "contentType": "image/png"})
    body = _assert_problem(r, 400, "Invalid Request")
    assert body["field"] == "fileName"
    assert signer.calls == []


def test_expiry_out_of_range_is_400(client, signer):
    r = client.get("/download/presigned-url", params={"fileName": "a.png", "expirationMinutes": 10081})
    body = _assert_problem(r, 400, "Invalid Request")
    assert body["field"] == "expirationMinutes"
    assert "10080" in body["detail"]
    assert signer.calls == []


def test_part_number_out_of_range_is_400(client, signer):
    r = client.post(
        "/upload/multipart/part-url",
        json={"fileName": "a.png", "uploadId": "abc", "partNumber": 10001},
    )
    _assert_problem(r, 400, "Invalid Request")
    assert signer.calls == []


def test_complete_with_empty_parts_is_400(client, signer):
    r = client.post("/upload/multipart/complete", json={"fileName": "a.png", "uploadId": "abc", "parts": []})
    body = _assert_problem(r, 400, "Invalid Request")
    assert body["field"] == "parts"
    assert signer.calls == []


# -------------------------
# 3) Not found -> 404
# -------------------------
def test_get_unknown_upload_is_404(client):
    r = client.get("/uploads/nope")
    body = _assert_problem(r, 404, "Upload Not Found")
    assert body["uploadId"] == "nope"
    assert body["detail"] == "Upload with ID 'nope' was not found"
    assert body["instance"] == "/uploads/nope"


def test_complete_untracked_upload_is_404_after_finalize(client, signer):
    r = client.post(
        "/upload/multipart/complete",
        json={"fileName": "a.png", "uploadId": "ghost", "parts": [{"partNumber": 1, "eTag": "e"}]},
    )
    _assert_problem(r, 404, "Upload Not Found")
    assert signer.calls[0]["op"] == "complete"


# -------------------------
# 4) Storage failures -> 500, geen interne oorzaak naar buiten
# -------------------------
def test_presign_failure_is_generic_500(client, signer):
    signer.fail_on.add("sign")
    r = client.post("/upload/presigned-url", json={"fileName": "a.png", "contentType": "image/png"})

    body = _assert_problem(r, 500, "URL Generation Failed")
    assert body["detail"] == "Failed to generate presigned URL. Please try again."
    assert body["fileName"] == "a.png"
    assert "secret-internal-cause" not in r.text


def test_initiate_failure_is_500_and_not_tracked(client, signer, tracker):
    signer.fail_on.add("initiate")
    r = client.post("/upload/multipart/initiate", json={"fileName": "a.png", "contentType": "image/png"})

    body = _assert_problem(r, 500, "Upload Failed")
    assert body["fileName"] == "a.png"
    assert "uploadId" not in body
    assert "secret-internal-cause" not in r.text
    assert len(tracker) == 0


def test_complete_failure_marks_upload_failed(client, signer):
    client.post("/upload/multipart/initiate", json={"fileName": "a.png", "contentType": "image/png"})
    signer.fail_on.add("complete")

    r = client.post(
        "/upload/multipart/complete",
        json={"fileName": "a.png", "uploadId": "abc", "parts": [{"partNumber": 1, "eTag": "e"}]},
    )
    body = _assert_problem(r, 500, "Upload Failed")
    assert body["uploadId"] == "abc"
    assert body["detail"] == "Failed to complete multipart upload"
    assert "secret-internal-cause" not in r.text

    tracked = client.get("/uploads/abc").json()
    assert tracked["status"] == "Failed"
    assert tracked["location"] is None


def test_unexpected_error_is_generic_500(client, tracker, monkeypatch):
    def boom():
        raise RuntimeError("kapot: secret-internal-cause")

    monkeypatch.setattr(tracker, "list_all", boom)
    r = client.get("/uploads", headers={"X-Request-ID": "trace-500"})

    body = _assert_problem(r, 500, "Internal Server Error")
    assert body["detail"] == "An unexpected error occurred. Please try again later."
    assert body["traceId"] == "trace-500"
    assert "secret-internal-cause" not in r.text


# -------------------------
# 5) Correlatie
# -------------------------
def test_trace_id_is_echoed(client):
    r = client.get("/uploads/nope", headers={"X-Request-ID": "trace-123"})
    assert r.json()["traceId"] == "trace-123"
    assert r.headers["X-Request-ID"] == "trace-123"


def test_request_id_is_generated_when_missing(client):
    r = client.get("/health")
    assert r.headers["X-Request-ID"]

"""Tests for upload submission, task polling and batch upload endpoints."""

import re
import time
from pathlib import Path

from fastapi.testclient import TestClient

from photo_albums.api.app import create_app
from photo_albums.domain.models import DEFAULT_ALBUM_NAME


def _wait_for(client: TestClient, task_id: str, timeout: float = 5.0) -> dict:
    deadline = time.monotonic() + timeout
    while True:
        body = client.get(f"/tasks/status/{task_id}").json()
        if body["status"] in ("COMPLETED", "FAILED") or time.monotonic() > deadline:
            return body
        time.sleep(0.02)


def test_submit_upload_returns_task_ids_and_completes(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post(
            "/tasks/submit-upload",
            files=[
                ("files", ("a.jpg", b"jpeg", "image/jpeg")),
                ("files", ("b.png", b"png", "image/png")),
            ],
        )
        task_ids = response.json()["taskIds"]
        statuses = [_wait_for(client, task_id) for task_id in task_ids]
        albums = client.get("/albums").json()

    assert response.status_code == 200
    assert len(task_ids) == 2
    assert [status["status"] for status in statuses] == ["COMPLETED", "COMPLETED"]
    assert statuses[0]["originalFileName"] == "a.jpg"
    assert re.fullmatch(
        r"https://cdn\.example\.com/images/\d+-a\.jpg", statuses[0]["resultUrl"]
    )
    assert "errorCode" not in statuses[0]
    assert albums[0]["name"] == DEFAULT_ALBUM_NAME
    assert albums[0]["photoCount"] == 2
    assert list(Path(container.settings.upload_tmp_dir).iterdir()) == []


def test_submit_upload_into_album(container) -> None:
    album = container.album_service.create_album("Trips")
    with TestClient(create_app(container)) as client:
        response = client.post(
            "/tasks/submit-upload",
            files=[("files", ("a.jpg", b"jpeg", "image/jpeg"))],
            data={"targetAlbumId": str(album.id)},
        )
        status = _wait_for(client, response.json()["taskIds"][0])
        photos = client.get(f"/albums/{album.id}/photos").json()

    assert status["targetAlbumId"] == str(album.id)
    assert [photo["originalFileName"] for photo in photos] == ["a.jpg"]


def test_submit_upload_reports_unsupported_type(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post(
            "/tasks/submit-upload",
            files=[("files", ("notes.txt", b"text", "text/plain"))],
        )
        status = _wait_for(client, response.json()["taskIds"][0])

    assert status["status"] == "FAILED"
    assert status["errorCode"] == "UnsupportedMediaType"
    assert "resultUrl" not in status


def test_submit_upload_requires_files(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post("/tasks/submit-upload", data={"targetAlbumId": ""})

    assert response.status_code == 400


def test_submit_upload_rejects_bad_album_id(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post(
            "/tasks/submit-upload",
            files=[("files", ("a.jpg", b"jpeg", "image/jpeg"))],
            data={"targetAlbumId": "not-an-id"},
        )

    assert response.status_code == 400
    assert list(Path(container.settings.upload_tmp_dir).iterdir()) == []


def test_unknown_task_returns_404(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.get("/tasks/status/does-not-exist")

    assert response.status_code == 404


def test_batch_upload_reports_per_file_results(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post(
            "/upload",
            files=[
                ("photos", ("a.jpg", b"jpeg", "image/jpeg")),
                ("photos", ("notes.txt", b"text", "text/plain")),
            ],
        )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Batch upload finished, 2 files in total."
    success, failure = data["results"]
    assert success["status"] == "success"
    assert success["fileName"] == "a.jpg"
    assert success["url"].startswith("https://cdn.example.com/images/")
    assert failure["status"] == "error"
    assert failure["fileName"] == "notes.txt"
    assert failure["error"]


def test_batch_upload_requires_files(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post("/upload", data={"targetAlbumId": ""})

    assert response.status_code == 400
    assert response.json() == {"error": "No photo files received"}


def test_health(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.get("/health")

    assert response.json() == {"status": "ok"}
